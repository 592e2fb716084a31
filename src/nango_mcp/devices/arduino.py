"""Arduino core API (``digitalWrite``, ``analogRead``, ...) on the board."""

from __future__ import annotations

from enum import IntEnum

from ..protocol.dispatcher import Dispatcher
from ..protocol.firmware_class import FirmwareClass

NAMESPACE = "A"


class PinLevel(IntEnum):
    LOW = 0
    HIGH = 1


class PinMode(IntEnum):
    INPUT = 0
    OUTPUT = 1
    INPUT_PULLUP = 2


class BitOrder(IntEnum):
    LSB_FIRST = 0
    MSB_FIRST = 1


class ArduinoApi:
    """Pin access and timing functions of the Arduino core.

    Pins are passed as strings so analog aliases such as ``"A0"`` work.
    """

    def __init__(self, dispatcher: Dispatcher) -> None:
        self.remote = FirmwareClass(dispatcher, NAMESPACE, 0)

    def digital_write(self, pin: str, value: int) -> None:
        self.remote.call_none("dw", pin, int(value))

    def digital_read(self, pin: str) -> int:
        return self.remote.call_int("r", pin)

    def analog_write(self, pin: str, value: int) -> None:
        """Write a PWM duty cycle (0-255)."""
        self.remote.call_none("aw", pin, int(value))

    def analog_read(self, pin: str) -> int:
        return self.remote.call_int("a", pin)

    def pin_mode(self, pin: str, mode: int) -> None:
        self.remote.call_none("pm", pin, int(mode))

    def millis(self) -> int:
        """Milliseconds since the board started."""
        return self.remote.call_int("m")

    def pulse_in(self, pin: str, value: int) -> int:
        """Length in microseconds of a pulse at ``value`` on ``pin``."""
        return self.remote.call_int("pi", pin, int(value))

    def shift_out(self, data_pin: str, clock_pin: str, bit_order: int, value: int) -> int:
        """Shift out one byte, bit by bit, on ``data_pin``."""
        if not 0 <= value <= 255:
            raise ValueError(f"shift_out value must be 0-255, got {value}")
        return self.remote.call_int("s", data_pin, clock_pin, int(bit_order), value)
