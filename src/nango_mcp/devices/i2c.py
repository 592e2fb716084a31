"""I2C master and slave roles built on the board's ``Wire`` library."""

from __future__ import annotations

import logging

from ..errors import I2CCommunicationError
from .wire import Wire

logger = logging.getLogger(__name__)

FIRST_ADDRESS = 1
LAST_ADDRESS = 127


class _I2CRole:
    def __init__(self, wire: Wire, address: int | None) -> None:
        self.wire = wire
        self.address = address
        self.bus_initialized = False

    def begin(self) -> None:
        """Join the bus on first use."""
        if self.bus_initialized:
            return
        self.wire.begin(self.address)
        self.bus_initialized = True


class I2CMaster(_I2CRole):
    def __init__(self, wire: Wire) -> None:
        super().__init__(wire, None)

    def request(self, address: int, quantity: int) -> bytes:
        """Read up to ``quantity`` bytes from the slave at ``address``."""
        self.begin()
        received = self.wire.request_from(address, quantity, True)
        if received < quantity:
            logger.warning(
                "Slave %#04x sent %d bytes, %d requested", address, received, quantity
            )
        return self.wire.read(received)

    def send(self, address: int, data: bytes) -> None:
        """Transmit ``data`` to the slave at ``address``.

        Raises:
            I2CCommunicationError: If the firmware reports a non-zero status.
        """
        self.begin()
        self.wire.begin_transmission(address)
        self.wire.write(data)
        status = self.wire.end_transmission(True)
        if status != 0:
            raise I2CCommunicationError(status)

    def scan(self) -> list[int]:
        """Return the addresses that acknowledge an empty transmission."""
        self.begin()
        found: list[int] = []
        for address in range(FIRST_ADDRESS, LAST_ADDRESS + 1):
            try:
                self.send(address, b"")
            except I2CCommunicationError:
                continue
            found.append(address)
        logger.info("I2C scan found %d device(s)", len(found))
        return found


class I2CSlave(_I2CRole):
    def __init__(self, wire: Wire, address: int) -> None:
        super().__init__(wire, address)

    def receive(self) -> bytes:
        """Read every byte the master has sent so far."""
        self.begin()
        return self.wire.read(self.wire.available())

    def write(self, data: bytes) -> int:
        self.begin()
        return self.wire.write(data)
