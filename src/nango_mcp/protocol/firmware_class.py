"""Typed call helpers for a firmware object.

A firmware object is addressed by namespace and id; its methods are selected
by a leading method-name argument.
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import ParseError
from .dispatcher import Dispatcher

logger = logging.getLogger(__name__)


class FirmwareClass:
    """A remote object on the board, e.g. the Arduino core API or ``Wire``."""

    def __init__(self, dispatcher: Dispatcher, namespace: str, instance_id: int = 0) -> None:
        self.dispatcher = dispatcher
        self.namespace = namespace
        self.instance_id = instance_id

    def __repr__(self) -> str:
        return f"{type(self).__name__}(namespace={self.namespace!r}, id={self.instance_id})"

    def call(self, method_name: str, *args: Any) -> str:
        """Call ``method_name`` and return the raw reply."""
        return self.dispatcher.call(self.namespace, self.instance_id, [method_name, *args])

    call_str = call

    def call_int(self, method_name: str, *args: Any) -> int:
        text = self.call(method_name, *args)
        try:
            return int(text)
        except ValueError:
            raise ParseError(text, "int") from None

    def call_float(self, method_name: str, *args: Any) -> float:
        text = self.call(method_name, *args)
        try:
            return float(text)
        except ValueError:
            raise ParseError(text, "float") from None

    def call_byte(self, method_name: str, *args: Any) -> int:
        """Return the first byte of the reply."""
        text = self.call(method_name, *args)
        if not text:
            raise ParseError(text, "byte")
        if len(text) > 1:
            logger.warning(
                "%s.%s returned %d bytes, expected 1", self.namespace, method_name, len(text)
            )
        return text.encode("latin-1")[0]

    def call_none(self, method_name: str, *args: Any) -> None:
        self.call(method_name, *args)
