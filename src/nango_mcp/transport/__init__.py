"""Transport layer: serial connection to the firmware."""

from .serial_connection import FirmwareConnection
