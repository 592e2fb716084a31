"""Wire encoding for call arguments and reply decoding.

Request layout (no length prefix, no call identifier)::

    namespace \\0 id \\0 count \\0 arg1 \\0 ... argN \\0

Each field is the literal text form of a scalar followed by a NUL byte.
``count`` is the number of arguments minus one, matching the firmware's
index-based reader. The reply is one newline-terminated text line.
"""

from __future__ import annotations

from typing import Any, Iterable, Union

from ..errors import UnsupportedTypeError

TERMINATOR = b"\x00"

# Spelled the way the firmware parses them, not Python's repr
TRUE_TOKEN = b"True"
FALSE_TOKEN = b"False"

Arg = Union[str, int, bool]


def encode_value(value: Arg) -> bytes:
    """Return the literal text form of a scalar argument.

    Raises:
        UnsupportedTypeError: If ``value`` is not a str, int or bool.
    """
    # bool first: it is a subclass of int
    if isinstance(value, bool):
        return TRUE_TOKEN if value else FALSE_TOKEN
    if isinstance(value, int):
        # int() first: IntEnum members format by name on Python 3.10
        return str(int(value)).encode("ascii")
    if isinstance(value, str):
        return value.encode("utf-8")
    raise UnsupportedTypeError(value)


def encode_field(value: Arg) -> bytes:
    """Encode a scalar and append the field terminator."""
    return encode_value(value) + TERMINATOR


def write_value(conn, value: Arg) -> None:
    """Encode one field and hand it to the connection's write buffer."""
    conn.write(encode_field(value))


def flatten_args(args: Iterable[Any]) -> list[Any]:
    """Splice list arguments in place and drop ``None`` entries.

    Nested lists are expanded at any depth, so flattening an already flat
    list returns it unchanged.
    """
    flat: list[Any] = []
    for arg in args:
        if isinstance(arg, (list, tuple)):
            flat.extend(flatten_args(arg))
        elif arg is not None:
            flat.append(arg)
    return flat


def decode_reply(line: bytes) -> str:
    """Return a reply line as text.

    Decoded as latin-1 so every byte maps to one character and back.
    """
    return line.decode("latin-1")
