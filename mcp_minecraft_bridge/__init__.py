"""Minecraft Bedrock bridge: MCP tools driving a live world over WebSocket."""

__version__ = "0.1.0"
