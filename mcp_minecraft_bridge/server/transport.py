"""Servidor WebSocket al que se conecta Minecraft Bedrock (`/connect host:port`).

Accepts one game client at a time. Inbound command responses are handed to
the correlator; losing the client resets the correlator's shared state.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

import websockets
from websockets.exceptions import ConnectionClosed

from .correlator import CommandCorrelator
from .errors import TransportUnavailable
from .logging import get_logger
from .protocol import PURPOSE_COMMAND_RESPONSE, PURPOSE_ERROR, PURPOSE_EVENT, decode_message


class BedrockTransport:
    def __init__(self, correlator: CommandCorrelator, host: str = "127.0.0.1", port: int = 8001) -> None:
        self._log = get_logger(__name__)
        self.host = host
        self.port = port
        self._correlator = correlator
        self._server: Optional[Any] = None
        self._ws: Optional[Any] = None
        correlator.attach(self)

    @property
    def connected(self) -> bool:
        return self._ws is not None

    @property
    def peer(self) -> Optional[str]:
        if self._ws is None:
            return None
        addr = getattr(self._ws, "remote_address", None)
        return f"{addr[0]}:{addr[1]}" if addr else "?"

    async def start(self) -> None:
        """Start listening (idempotent)."""
        if self._server is not None:
            return
        self._server = await websockets.serve(
            self._handler,
            self.host,
            self.port,
            ping_interval=20,
            ping_timeout=20,
            max_size=8 * 1024 * 1024,
        )
        self._log.info("Listening on ws://%s:%d (in game: /connect %s:%d)", self.host, self.port, self.host, self.port)

    async def stop(self) -> None:
        if self._server is None:
            return
        self._server.close()
        await self._server.wait_closed()
        self._server = None
        self._log.info("WS server stopped")

    async def send(self, message: Dict[str, Any]) -> None:
        ws = self._ws
        if ws is None:
            raise TransportUnavailable("no Minecraft client connected")
        try:
            await ws.send(json.dumps(message))
        except ConnectionClosed as e:
            raise TransportUnavailable(f"connection closed while sending: {e}") from e

    def handle_frame(self, raw: Any) -> None:
        """Route one inbound frame. Malformed frames are logged and dropped."""
        try:
            purpose, request_id, body = decode_message(raw)
        except ValueError as e:
            self._log.warning("dropping malformed frame: %s", e)
            return
        if purpose == PURPOSE_COMMAND_RESPONSE:
            self._correlator.handle_response(request_id, body)
        elif purpose == PURPOSE_ERROR:
            if "statusCode" not in body:
                body = {**body, "statusCode": -1}
            self._correlator.handle_response(request_id, body)
        elif purpose == PURPOSE_EVENT:
            self._log.debug("event %s", body.get("eventName") or body)
        else:
            self._log.debug("ignoring frame with purpose %r", purpose)

    async def _handler(self, ws) -> None:
        old = self._ws
        if old is not None:
            self._log.warning("replacing connected client %s", self.peer)
            # the old handler finds a foreign _ws on exit and leaves state alone
            self._ws = ws
            self._correlator.reset()
            await old.close()
        self._ws = ws
        self._log.info("Minecraft connected: %s", self.peer)
        try:
            async for raw in ws:
                self.handle_frame(raw)
        except ConnectionClosed as e:
            self._log.info("WS connection closed: %s", e)
        finally:
            if self._ws is ws:
                self._ws = None
                self._correlator.reset()
                self._log.info("Minecraft disconnected")
