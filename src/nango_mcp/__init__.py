"""Host-side client for the nango serial RPC firmware."""

from .config import SerialConfig
from .errors import (
    NangoError,
    PortClosedError,
    TransportError,
    SerialTimeoutError,
    UnsupportedTypeError,
    ParseError,
    I2CCommunicationError,
)
from .transport.serial_connection import FirmwareConnection
from .protocol.dispatcher import Dispatcher, call

__version__ = "0.1.0"
