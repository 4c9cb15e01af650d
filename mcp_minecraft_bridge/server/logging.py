"""Infraestructura de logging del puente Minecraft.

Configura salida a stderr (stdout queda libre para el protocolo MCP) y
archivo rotativo (1MB x3). Usa un logger raíz `mcp_minecraft_bridge` y
expone `get_logger` para submódulos.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional


ROOT_LOGGER = "mcp_minecraft_bridge"
_configured = False
_file_handler: Optional[RotatingFileHandler] = None
_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _log_dir() -> str:
    base = os.path.join(os.path.expanduser("~"), ".mcp_minecraft_bridge", "logs")
    try:
        os.makedirs(base, exist_ok=True)
        return base
    except OSError:
        base = os.path.join(os.getcwd(), "logs")
        os.makedirs(base, exist_ok=True)
        return base


def _attach_file(root: logging.Logger, path: str) -> None:
    global _file_handler
    try:
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        fh = RotatingFileHandler(path, maxBytes=1_000_000, backupCount=3)
    except OSError as e:
        root.warning("file logging disabled: %s", e)
        return
    fh.setFormatter(logging.Formatter(_FORMAT))
    if _file_handler is not None:
        root.removeHandler(_file_handler)
        _file_handler.close()
    root.addHandler(fh)
    _file_handler = fh


def _configure_once() -> None:
    global _configured
    if _configured:
        return
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(logging.INFO)

    sh = logging.StreamHandler(stream=sys.stderr)
    sh.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(sh)

    # Rotating file handler (1MB, 3 backups)
    _attach_file(root, os.path.join(_log_dir(), "bridge.log"))
    _configured = True


def configure(level: str = "INFO", file: Optional[str] = None) -> None:
    """Apply settings: level, and optionally a different log file."""
    _configure_once()
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if file and (_file_handler is None or _file_handler.baseFilename != os.path.abspath(file)):
        _attach_file(root, file)


def get_logger(name: str) -> logging.Logger:
    _configure_once()
    if name.startswith(ROOT_LOGGER):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
