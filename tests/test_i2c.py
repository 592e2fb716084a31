"""Tests for the Wire facade and the I2C master/slave roles."""

import pytest

from nango_mcp.devices.i2c import I2CMaster, I2CSlave
from nango_mcp.devices.wire import Wire
from nango_mcp.errors import I2CCommunicationError, SerialTimeoutError
from nango_mcp.protocol.dispatcher import Dispatcher

from conftest import FakeConnection


def _wire(*replies):
    conn = FakeConnection(replies=replies)
    return Wire(Dispatcher.exclusive(conn)), conn


def _methods(conn):
    return [request[3] for request in conn.requests]


def test_begin_as_master_drops_address():
    wire, conn = _wire(b"")
    wire.begin()
    assert conn.requests == [["Wire", "0", "0", "begin"]]


def test_begin_as_slave():
    wire, conn = _wire(b"")
    wire.begin(0x42)
    assert conn.requests == [["Wire", "0", "1", "begin", "66"]]


def test_request_from_encodes_stop_flag():
    wire, conn = _wire(b"2")
    assert wire.request_from(8, 2, True) == 2
    assert conn.requests == [["Wire", "0", "3", "requestFrom", "8", "2", "True"]]


def test_end_transmission_false_stop():
    wire, conn = _wire(b"0")
    assert wire.end_transmission(False) == 0
    assert conn.requests == [["Wire", "0", "1", "endTransmission", "False"]]


def test_write_is_one_call_per_byte():
    wire, conn = _wire(b"1", b"1", b"1")
    assert wire.write(b"\x01\x02\xff") == 3
    assert [r[4] for r in conn.requests] == ["1", "2", "255"]


def test_read_collects_bytes():
    wire, conn = _wire(b"h", b"i")
    assert wire.read(2) == b"hi"
    assert _methods(conn) == ["read", "read"]


def test_master_send():
    wire, conn = _wire(b"", b"", b"1", b"0")
    I2CMaster(wire).send(0x20, b"\x07")
    assert _methods(conn) == ["begin", "beginTransmission", "write", "endTransmission"]


def test_master_begins_bus_once():
    wire, conn = _wire()
    conn.default_reply = b"0"
    master = I2CMaster(wire)
    master.send(0x20, b"")
    master.send(0x21, b"")
    assert _methods(conn).count("begin") == 1


def test_master_send_nack_raises():
    wire, conn = _wire(b"", b"", b"2")
    with pytest.raises(I2CCommunicationError) as exc:
        I2CMaster(wire).send(0x20, b"")
    assert exc.value.code == 2
    assert str(exc.value) == "received NACK on transmit of address"


def test_master_request():
    wire, conn = _wire(b"", b"2", b"a", b"b")
    assert I2CMaster(wire).request(0x20, 2) == b"ab"
    assert conn.requests[1] == ["Wire", "0", "3", "requestFrom", "32", "2", "True"]


def test_master_request_short_read_warns(caplog):
    wire, conn = _wire(b"", b"1", b"a")
    assert I2CMaster(wire).request(0x20, 4) == b"a"
    assert "4 requested" in caplog.text


def test_scan_reports_acknowledging_addresses():
    wire, conn = _wire()
    present = {0x3C, 0x68}

    def reply():
        # Answer endTransmission with 0 only for the present addresses
        while True:
            request = conn.requests[-1]
            if request[3] == "endTransmission":
                address = int(conn.requests[-2][4])
                yield b"0" if address in present else b"2"
            else:
                yield b""

    replies = reply()
    conn.read_line = lambda: next(replies)

    assert I2CMaster(wire).scan() == sorted(present)
    begin_transmissions = [r for r in conn.requests if r[3] == "beginTransmission"]
    assert int(begin_transmissions[0][4]) == 1
    assert int(begin_transmissions[-1][4]) == 127


def test_scan_propagates_transport_errors():
    wire, conn = _wire(b"", b"", None)
    with pytest.raises(SerialTimeoutError):
        I2CMaster(wire).scan()


def test_slave_receive():
    wire, conn = _wire(b"", b"3", b"x", b"y", b"z")
    assert I2CSlave(wire, 0x42).receive() == b"xyz"
    assert conn.requests[0] == ["Wire", "0", "1", "begin", "66"]


def test_slave_write():
    wire, conn = _wire(b"", b"1", b"1")
    assert I2CSlave(wire, 0x42).write(b"ok") == 2
    assert _methods(conn) == ["begin", "write", "write"]


def test_read_returns_high_bytes_unchanged():
    wire, conn = _wire(b"\xff", b"\x80", b"\x7f")
    assert wire.read(3) == b"\xff\x80\x7f"


def test_master_request_binary_data():
    wire, conn = _wire(b"", b"2", b"\xc8", b"\x01")
    assert I2CMaster(wire).request(0x20, 2) == b"\xc8\x01"
