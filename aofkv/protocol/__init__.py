"""Protocol module for AOF-KV."""

from .commands import CommandType, DispatchResult, Response, ResponseKind
from .decoder import DecodeResult, ProtocolDecoder
from .encoder import encode_command, encode_frame, encode_value
from .values import Array, BulkString, Integer, SimpleError, SimpleString, Value, ValueType

__all__ = [
    "Array",
    "BulkString",
    "CommandType",
    "DecodeResult",
    "DispatchResult",
    "Integer",
    "ProtocolDecoder",
    "Response",
    "ResponseKind",
    "SimpleError",
    "SimpleString",
    "Value",
    "ValueType",
    "encode_command",
    "encode_frame",
    "encode_value",
]
