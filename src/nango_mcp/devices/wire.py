"""The Arduino ``Wire`` (I2C) library on the board.

See http://arduino.cc/en/reference/wire. Every method is one remote call,
so ``write`` and ``read`` cost one round trip per byte.
"""

from __future__ import annotations

from ..protocol.dispatcher import Dispatcher
from ..protocol.firmware_class import FirmwareClass

NAMESPACE = "Wire"


class Wire:
    def __init__(self, dispatcher: Dispatcher) -> None:
        self.remote = FirmwareClass(dispatcher, NAMESPACE, 0)

    def begin(self, address: int | None = None) -> None:
        """Join the bus as master (``address=None``) or as slave at ``address``.

        This should normally only be called once.
        """
        self.remote.call_none("begin", address)

    def request_from(self, address: int, quantity: int, stop: bool = True) -> int:
        """Request ``quantity`` bytes from a slave; returns the number received."""
        return self.remote.call_int("requestFrom", address, quantity, stop)

    def begin_transmission(self, address: int) -> None:
        self.remote.call("beginTransmission", address)

    def end_transmission(self, stop: bool = True) -> int:
        """Finish a transmission; returns the Wire status code (0 on success)."""
        return self.remote.call_int("endTransmission", stop)

    def write(self, data: bytes) -> int:
        """Queue ``data`` for transmission; returns the number of bytes written."""
        written = 0
        for value in data:
            self.remote.call_none("write", value)
            written += 1
        return written

    def available(self) -> int:
        return self.remote.call_int("available")

    def read(self, count: int) -> bytes:
        """Read ``count`` received bytes."""
        return bytes(self.remote.call_byte("read") for _ in range(count))
