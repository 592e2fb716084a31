"""MCP server entry point for boards running the nango firmware.

Exposes pin access, I2C and raw remote calls as tools via the Model Context
Protocol using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import serial
from mcp.server.fastmcp import FastMCP

from .config import ServerSettings
from .devices.arduino import ArduinoApi, BitOrder, PinLevel, PinMode
from .devices.i2c import I2CMaster
from .devices.wire import Wire
from .errors import NangoError
from .protocol.dispatcher import Dispatcher
from .transport.serial_connection import FirmwareConnection

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "nango",
    instructions="MCP server for microcontrollers running the nango serial RPC firmware",
)

# Global connection state
_settings = ServerSettings.from_env()
_connection: FirmwareConnection | None = None
_dispatcher: Dispatcher | None = None


def _get_dispatcher() -> Dispatcher:
    """Get the dispatcher for the open connection, raising if not connected."""
    if _dispatcher is None or not _dispatcher.conn.is_open:
        raise RuntimeError(
            "Not connected to a board. Use the 'connect' tool first."
        )
    return _dispatcher


def _error(e: Exception) -> dict[str, Any]:
    logger.warning("Tool call failed: %s", e)
    return {"error": str(e), "type": type(e).__name__}


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(
    port: str | None = None,
    baudrate: int | None = None,
    settle_delay: float | None = None,
    read_timeout: float | None = None,
) -> dict[str, Any]:
    """Open the serial connection to the board.

    Args:
        port: Serial device or pyserial URL (defaults to NANGO_PORT).
        baudrate: Line speed (defaults to NANGO_BAUDRATE, 115200).
        settle_delay: Seconds to wait after opening while the board resets.
        read_timeout: Seconds to wait for each reply line.
    """
    global _connection, _dispatcher
    if _connection is not None and _connection.is_open:
        return {
            "connected": True,
            "message": "Already connected",
            "port": _connection.port,
        }

    try:
        config = _settings.serial_config(port)
    except ValueError as e:
        return _error(e)
    if baudrate is not None:
        config.baudrate = baudrate

    conn = FirmwareConnection(
        config,
        settle_delay=_settings.settle_delay if settle_delay is None else settle_delay,
        read_timeout=_settings.read_timeout if read_timeout is None else read_timeout,
    )
    try:
        conn.open()
    except serial.SerialException as e:
        return _error(e)
    _connection = conn
    _dispatcher = Dispatcher.exclusive(conn)
    return {
        "connected": True,
        "port": conn.port,
        "baudrate": config.baudrate,
        "read_timeout": conn.read_timeout,
    }


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the serial connection to the board."""
    global _connection, _dispatcher
    if _connection is not None:
        _connection.close()
    _connection = None
    _dispatcher = None
    return {"disconnected": True}


@mcp.tool()
def call_method(
    namespace: str, method: str, args: list[str | int | bool] | None = None, instance_id: int = 0
) -> dict[str, Any]:
    """Invoke any firmware method and return its raw reply.

    Args:
        namespace: Firmware object group, e.g. "A" or "Wire".
        method: Method name understood by that object.
        args: Positional arguments (text, integers or booleans).
        instance_id: Object instance within the namespace.
    """
    dispatcher = _get_dispatcher()
    try:
        reply = dispatcher.call(namespace, instance_id, [method, *(args or [])])
    except NangoError as e:
        return _error(e)
    return {"namespace": namespace, "method": method, "reply": reply}


# ─── PIN TOOLS ────────────────────────────────────────────────────────

@mcp.tool()
def digital_write(pin: str, value: int) -> dict[str, Any]:
    """Drive a digital pin LOW (0) or HIGH (1)."""
    if value not in (PinLevel.LOW, PinLevel.HIGH):
        return {"error": "Value must be 0 (LOW) or 1 (HIGH)"}
    try:
        ArduinoApi(_get_dispatcher()).digital_write(pin, value)
    except NangoError as e:
        return _error(e)
    return {"pin": pin, "value": value}


@mcp.tool()
def digital_read(pin: str) -> dict[str, Any]:
    """Read the level of a digital pin."""
    try:
        value = ArduinoApi(_get_dispatcher()).digital_read(pin)
    except NangoError as e:
        return _error(e)
    return {"pin": pin, "value": value}


@mcp.tool()
def analog_write(pin: str, value: int) -> dict[str, Any]:
    """Write a PWM duty cycle (0-255) to a pin."""
    if not 0 <= value <= 255:
        return {"error": "Value must be 0-255"}
    try:
        ArduinoApi(_get_dispatcher()).analog_write(pin, value)
    except NangoError as e:
        return _error(e)
    return {"pin": pin, "value": value}


@mcp.tool()
def analog_read(pin: str) -> dict[str, Any]:
    """Read an analog input (0-1023 on 10-bit boards)."""
    try:
        value = ArduinoApi(_get_dispatcher()).analog_read(pin)
    except NangoError as e:
        return _error(e)
    return {"pin": pin, "value": value}


@mcp.tool()
def pin_mode(pin: str, mode: str) -> dict[str, Any]:
    """Configure a pin as INPUT, OUTPUT or INPUT_PULLUP."""
    try:
        mode_value = PinMode[mode.upper()]
    except KeyError:
        return {"error": f"Unknown mode '{mode}'. Valid: {[m.name for m in PinMode]}"}
    try:
        ArduinoApi(_get_dispatcher()).pin_mode(pin, mode_value)
    except NangoError as e:
        return _error(e)
    return {"pin": pin, "mode": mode_value.name}


@mcp.tool()
def millis() -> dict[str, Any]:
    """Milliseconds since the board started."""
    try:
        return {"millis": ArduinoApi(_get_dispatcher()).millis()}
    except NangoError as e:
        return _error(e)


@mcp.tool()
def pulse_in(pin: str, value: int) -> dict[str, Any]:
    """Measure the length in microseconds of a pulse at ``value`` on ``pin``."""
    try:
        return {"pin": pin, "micros": ArduinoApi(_get_dispatcher()).pulse_in(pin, value)}
    except NangoError as e:
        return _error(e)


@mcp.tool()
def shift_out(data_pin: str, clock_pin: str, value: int, msb_first: bool = True) -> dict[str, Any]:
    """Shift one byte out on ``data_pin``, clocked by ``clock_pin``."""
    order = BitOrder.MSB_FIRST if msb_first else BitOrder.LSB_FIRST
    try:
        result = ArduinoApi(_get_dispatcher()).shift_out(data_pin, clock_pin, order, value)
    except (NangoError, ValueError) as e:
        return _error(e)
    return {"data_pin": data_pin, "value": value, "result": result}


# ─── I2C TOOLS ────────────────────────────────────────────────────────

def _i2c_master() -> I2CMaster:
    return I2CMaster(Wire(_get_dispatcher()))


@mcp.tool()
def i2c_scan() -> dict[str, Any]:
    """List the I2C addresses that acknowledge on the board's bus."""
    try:
        found = _i2c_master().scan()
    except NangoError as e:
        return _error(e)
    return {"addresses": [f"{a:#04x}" for a in found], "count": len(found)}


@mcp.tool()
def i2c_send(address: int, data: list[int]) -> dict[str, Any]:
    """Transmit bytes to an I2C slave.

    Args:
        address: 7-bit slave address.
        data: Byte values 0-255.
    """
    try:
        _i2c_master().send(address, bytes(data))
    except (NangoError, ValueError) as e:
        return _error(e)
    return {"address": address, "sent": len(data)}


@mcp.tool()
def i2c_request(address: int, quantity: int) -> dict[str, Any]:
    """Read ``quantity`` bytes from an I2C slave."""
    try:
        data = _i2c_master().request(address, quantity)
    except NangoError as e:
        return _error(e)
    return {"address": address, "data": list(data), "hex": data.hex(" ")}


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("nango://connection/status")
def resource_connection_status() -> str:
    """Current serial connection state."""
    if _connection is None:
        return json.dumps({"connected": False})
    return json.dumps({
        "connected": _connection.is_open,
        "port": _connection.port,
        "suspect": _connection.suspect,
        "read_timeout": _connection.read_timeout,
    })


@mcp.resource("nango://arduino/constants")
def resource_arduino_constants() -> str:
    """Pin levels, pin modes and bit orders understood by the firmware."""
    return json.dumps({
        "levels": {m.name: m.value for m in PinLevel},
        "modes": {m.name: m.value for m in PinMode},
        "bit_orders": {m.name: m.value for m in BitOrder},
    })


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=_settings.log_level)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
