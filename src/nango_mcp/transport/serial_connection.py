"""Serial connection to the nango firmware.

The connection buffers outgoing bytes until :meth:`FirmwareConnection.flush`
and reads replies one newline-terminated line at a time. The read deadline is
enforced by pyserial's own port timeout, so a timed-out read leaves nothing
running in the background that could later consume the next reply.
"""

from __future__ import annotations

import logging
import time

import serial

from ..config import DEFAULT_READ_TIMEOUT, DEFAULT_SETTLE_DELAY, SerialConfig
from ..errors import PortClosedError, SerialTimeoutError, TransportError

logger = logging.getLogger(__name__)

LINE_TERMINATOR = b"\n"


class FirmwareConnection:
    """Manages the serial link to a board running the nango firmware.

    Usage::

        conn = FirmwareConnection(SerialConfig("/dev/ttyACM0"), settle_delay=2.0)
        conn.open()
        conn.write(b"A\\x00")
        conn.flush()
        line = conn.read_line()
        conn.close()
    """

    def __init__(
        self,
        config: SerialConfig,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
    ) -> None:
        self.config = config
        self.settle_delay = settle_delay
        self._read_timeout = read_timeout
        self._device: serial.SerialBase | None = None
        self._write_buffer = bytearray()
        self.suspect = False

    def __enter__(self) -> FirmwareConnection:
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def port(self) -> str:
        return self.config.port

    @property
    def is_open(self) -> bool:
        return self._device is not None

    @property
    def read_timeout(self) -> float:
        return self._read_timeout

    @read_timeout.setter
    def read_timeout(self, value: float) -> None:
        self._read_timeout = value
        if self._device is not None:
            self._device.timeout = value

    def open(self) -> None:
        """Open the port, wait for the board to settle and drop stale bytes.

        Raises:
            serial.SerialException: If the device cannot be opened.
        """
        logger.debug(
            "Opening %s at %d baud", self.config.port, self.config.baudrate
        )
        device = serial.serial_for_url(
            self.config.port,
            baudrate=self.config.baudrate,
            bytesize=self.config.bytesize,
            parity=self.config.parity,
            stopbits=self.config.stopbits,
            timeout=self._read_timeout,
        )
        self._device = device
        self._write_buffer.clear()
        self.suspect = False

        # Many boards reset when the port opens
        if self.settle_delay > 0:
            time.sleep(self.settle_delay)
        device.reset_input_buffer()
        device.reset_output_buffer()
        logger.info("Connected to %s", self.config.port)

    def close(self) -> None:
        """Close the port. Calling it on a closed connection does nothing."""
        if self._device is None:
            return

        try:
            self._device.close()
        except serial.SerialException as e:
            logger.warning("Error closing %s: %s", self.config.port, e)
        finally:
            self._device = None
            self._write_buffer.clear()
            logger.info("Disconnected from %s", self.config.port)

    def _require_device(self) -> serial.SerialBase:
        if self._device is None:
            raise PortClosedError()
        return self._device

    def write(self, data: bytes) -> None:
        """Append bytes to the write buffer. Nothing is sent until :meth:`flush`."""
        self._require_device()
        self._write_buffer += data

    def flush(self) -> None:
        """Send the buffered bytes to the device."""
        device = self._require_device()
        if self._write_buffer:
            data = bytes(self._write_buffer)
            self._write_buffer.clear()
            device.write(data)
            logger.debug("Wrote %d bytes to %s", len(data), self.config.port)
        device.flush()

    def discard(self) -> None:
        """Drop any bytes pending on the device in either direction."""
        device = self._require_device()
        device.reset_input_buffer()
        device.reset_output_buffer()

    def read_line(self) -> bytes:
        """Read one reply line, without its line terminator.

        Raises:
            PortClosedError: If the connection is not open.
            SerialTimeoutError: If no full line arrived within ``read_timeout``.
            TransportError: If the device failed during the read.
        """
        device = self._require_device()
        try:
            line = device.read_until(LINE_TERMINATOR)
        except serial.SerialException as e:
            self._discard_after_error()
            raise TransportError(
                f"error reading line from {self.config.port}: {e}"
            ) from e

        if not line.endswith(LINE_TERMINATOR):
            if line:
                logger.debug(
                    "Dropping partial line from %s: %r", self.config.port, line
                )
            self._discard_after_error()
            raise SerialTimeoutError(self.config.port)

        line = line[:-1]
        if line.endswith(b"\r"):
            line = line[:-1]
        logger.debug("Read line from %s: %r", self.config.port, line)
        return line

    def _discard_after_error(self) -> None:
        try:
            self.discard()
        except serial.SerialException as e:
            logger.warning("Error flushing %s: %s", self.config.port, e)
