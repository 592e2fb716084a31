"""Exception types shared by the transport, protocol and device layers."""

from __future__ import annotations


class NangoError(Exception):
    """Base exception for firmware communication errors."""


class PortClosedError(NangoError, ConnectionError):
    """An operation was attempted before ``open()`` or after ``close()``."""

    def __init__(self, message: str = "port is not opened: must call open() first") -> None:
        super().__init__(message)


class TransportError(NangoError, IOError):
    """The serial device failed while a reply line was being read."""


class SerialTimeoutError(NangoError, TimeoutError):
    """No reply line arrived within the read timeout."""

    def __init__(self, port: str) -> None:
        self.port = port
        super().__init__(f"{port} read_line timeout")


class UnsupportedTypeError(NangoError, TypeError):
    """An argument has no wire encoding."""

    def __init__(self, value: object) -> None:
        self.value_type = type(value)
        super().__init__(f"unsupported argument type {self.value_type.__name__}")


class ParseError(NangoError, ValueError):
    """A reply could not be converted to the requested result type."""

    def __init__(self, text: str, expected: str) -> None:
        self.text = text
        self.expected = expected
        super().__init__(f"cannot parse {text!r} as {expected}")


I2C_ERROR_MESSAGES = {
    1: "data too long to fit in transmit buffer",
    2: "received NACK on transmit of address",
    3: "received NACK on transmit of data",
    4: "other error",
}


class I2CCommunicationError(NangoError):
    """Non-zero status returned by the firmware's ``endTransmission``.

    The call itself succeeded; the status code is the reply content.
    """

    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(I2C_ERROR_MESSAGES.get(code, f"unknown status {code}"))
