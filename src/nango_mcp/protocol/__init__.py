"""Protocol layer: argument codec, call dispatcher and typed call helpers."""

from .codec import encode_value, encode_field, flatten_args, decode_reply
from .dispatcher import Dispatcher, SHARED_CALL_LOCK, call
from .firmware_class import FirmwareClass
