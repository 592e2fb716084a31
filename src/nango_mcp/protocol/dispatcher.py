"""Call dispatcher: runs one remote call to completion under a lock.

The protocol carries no call identifiers, so a reply can only be attributed
to the request that produced it if no other caller's bytes are written or
read in between. The lock is held from the first field written until the
reply line has been read.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Sequence

from .codec import decode_reply, flatten_args, write_value

logger = logging.getLogger(__name__)

# One lock for every connection in the process. Pass a lock per connection
# to ``call``/``Dispatcher`` to stop unrelated ports serializing each other.
SHARED_CALL_LOCK = threading.Lock()


def call(
    conn,
    namespace: str,
    method_id: int,
    args: Sequence[Any] = (),
    lock: threading.Lock | None = None,
) -> str:
    """Invoke ``namespace``/``method_id`` with ``args`` and return the reply line.

    Args:
        conn: An open :class:`~nango_mcp.transport.FirmwareConnection`.
        namespace: Firmware object group, e.g. ``"A"`` or ``"Wire"``.
        method_id: Instance id within the namespace.
        args: Call arguments. Lists are spliced in place, ``None`` dropped.
        lock: Lock serializing calls; defaults to :data:`SHARED_CALL_LOCK`.

    Raises:
        UnsupportedTypeError: If an argument has no wire encoding.
        PortClosedError: If the connection is not open.
        SerialTimeoutError: If no reply arrived in time.

    On any failure the connection is marked ``suspect``; bytes already
    flushed are not retracted and nothing is retried.
    """
    if lock is None:
        lock = SHARED_CALL_LOCK

    with lock:
        if conn.suspect:
            logger.warning(
                "Calling %s:%d on a connection that failed mid-call; "
                "reopen it to resynchronize",
                namespace,
                method_id,
            )
        try:
            write_value(conn, namespace)
            write_value(conn, method_id)
            flat = flatten_args(args)
            write_value(conn, len(flat) - 1)
            for arg in flat:
                write_value(conn, arg)
            conn.flush()
            reply = decode_reply(conn.read_line())
        except Exception:
            conn.suspect = True
            raise

    logger.debug("%s:%d %r -> %r", namespace, method_id, flat, reply)
    return reply


class Dispatcher:
    """Binds a connection and a lock so callers only supply the call itself."""

    def __init__(self, conn, lock: threading.Lock | None = None) -> None:
        self.conn = conn
        self.lock = lock if lock is not None else SHARED_CALL_LOCK

    @classmethod
    def exclusive(cls, conn) -> Dispatcher:
        """Create a dispatcher with its own lock, independent of other ports."""
        return cls(conn, threading.Lock())

    def call(self, namespace: str, method_id: int, args: Sequence[Any] = ()) -> str:
        return call(self.conn, namespace, method_id, args, lock=self.lock)
