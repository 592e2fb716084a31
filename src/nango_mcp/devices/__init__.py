"""Facades for the firmware objects exposed by the nango sketch."""

from .arduino import ArduinoApi, BitOrder, PinLevel, PinMode
from .wire import Wire
from .i2c import I2CMaster, I2CSlave
