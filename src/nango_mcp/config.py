"""Connection defaults and server settings."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_BAUDRATE = 115200
DEFAULT_READ_TIMEOUT = 2.0  # seconds
DEFAULT_SETTLE_DELAY = 0.0  # seconds, boards that reset on open need ~2.0
DEFAULT_LOG_LEVEL = "INFO"


@dataclass
class SerialConfig:
    """Line settings handed to pyserial unchanged.

    ``port`` may be a device path (``/dev/ttyUSB0``, ``COM3``) or any URL
    understood by ``serial.serial_for_url``.
    """

    port: str
    baudrate: int = DEFAULT_BAUDRATE
    bytesize: int = 8
    parity: str = "N"
    stopbits: float = 1


@dataclass
class ServerSettings:
    """Settings for the MCP server, read from ``NANGO_*`` environment variables."""

    port: str | None = None
    baudrate: int = DEFAULT_BAUDRATE
    settle_delay: float = DEFAULT_SETTLE_DELAY
    read_timeout: float = DEFAULT_READ_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ServerSettings:
        env = os.environ if environ is None else environ
        try:
            return cls(
                port=env.get("NANGO_PORT") or None,
                baudrate=int(env.get("NANGO_BAUDRATE", DEFAULT_BAUDRATE)),
                settle_delay=float(env.get("NANGO_SETTLE_DELAY", DEFAULT_SETTLE_DELAY)),
                read_timeout=float(env.get("NANGO_READ_TIMEOUT", DEFAULT_READ_TIMEOUT)),
                log_level=env.get("NANGO_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
            )
        except ValueError as e:
            raise ValueError(f"Invalid NANGO_* environment setting: {e}") from e

    def serial_config(self, port: str | None = None) -> SerialConfig:
        port = port or self.port
        if not port:
            raise ValueError("No serial port given and NANGO_PORT is not set")
        return SerialConfig(port=port, baudrate=self.baudrate)
