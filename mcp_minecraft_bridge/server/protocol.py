"""Bedrock WebSocket message codec and command-line builders.

Requests are ``commandRequest`` envelopes carrying a ``requestId`` that the
game echoes in its ``commandResponse``. A negative ``statusCode`` (or an
``error`` purpose) means the command failed in game.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, Tuple, Union

from ..models import Point3D, normalize_block_id
from .errors import RemoteOperationFailed


PROTOCOL_VERSION = 1

PURPOSE_COMMAND_REQUEST = "commandRequest"
PURPOSE_COMMAND_RESPONSE = "commandResponse"
PURPOSE_ERROR = "error"
PURPOSE_EVENT = "event"


def encode_command(command_line: str, request_id: str) -> Dict[str, Any]:
    command_line = command_line.strip()
    if command_line.startswith("/"):
        command_line = command_line[1:]
    return {
        "header": {
            "version": PROTOCOL_VERSION,
            "requestId": request_id,
            "messagePurpose": PURPOSE_COMMAND_REQUEST,
            "messageType": PURPOSE_COMMAND_REQUEST,
        },
        "body": {
            "version": PROTOCOL_VERSION,
            "commandLine": command_line,
            "origin": {"type": "player"},
        },
    }


def decode_message(raw: Union[str, bytes, Dict[str, Any]]) -> Tuple[str, Optional[str], Dict[str, Any]]:
    """Split an inbound frame into (purpose, request id, body).

    Raises:
        ValueError: frame is not a JSON object with a header.
    """
    if isinstance(raw, (str, bytes)):
        data = json.loads(raw)
    else:
        data = raw
    if not isinstance(data, dict) or not isinstance(data.get("header"), dict):
        raise ValueError("frame without header")
    header = data["header"]
    body = data.get("body")
    if not isinstance(body, dict):
        body = {"value": body}
    return str(header.get("messagePurpose", "")), header.get("requestId"), body


def response_succeeded(body: Dict[str, Any]) -> bool:
    status = body.get("statusCode", 0)
    try:
        return int(status) >= 0
    except (TypeError, ValueError):
        return False


def check_response(body: Dict[str, Any], command_line: str = "") -> Dict[str, Any]:
    """Return ``body`` unchanged, or raise when the game reported failure."""
    if not response_succeeded(body):
        message = body.get("statusMessage") or "command failed"
        raise RemoteOperationFailed(
            str(message),
            status_code=body.get("statusCode"),
            command=command_line,
        )
    return body


def setblock_command(p: Point3D, block: str) -> str:
    return f"setblock {p.x} {p.y} {p.z} {normalize_block_id(block)}"


def fill_command(lo: Point3D, hi: Point3D, block: str) -> str:
    return f"fill {lo.x} {lo.y} {lo.z} {hi.x} {hi.y} {hi.z} {normalize_block_id(block)}"


def say_command(message: str) -> str:
    return f"say {message}"


def clone_command(lo: Point3D, hi: Point3D, dest: Point3D) -> str:
    return f"clone {lo.x} {lo.y} {lo.z} {hi.x} {hi.y} {hi.z} {dest.x} {dest.y} {dest.z}"
