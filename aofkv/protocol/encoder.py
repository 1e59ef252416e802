"""
Protocol Encoder Module

Builds request frames in the single-digit grammar understood by
``ProtocolDecoder``. Encoding a decoded frame reproduces its bytes exactly.
"""

from typing import Iterable, Union

from .decoder import CRLF
from .values import BulkString, Value, ValueType

MAX_ELEMENTS = 9
MAX_PAYLOAD_BYTES = 9


def encode_value(value: Value) -> bytes:
    """
    Encode a single element as ``<tag><len>\\r\\n<payload>\\r\\n``.

    Raises:
        ValueError: if the payload is longer than nine bytes or holds a line break
    """
    payload = value.text.encode("utf-8")
    if b"\r" in payload or b"\n" in payload:
        raise ValueError("payload may not contain CR or LF")
    if len(payload) > MAX_PAYLOAD_BYTES:
        raise ValueError(
            f"payload of {len(payload)} bytes exceeds the {MAX_PAYLOAD_BYTES}-byte limit"
        )
    return b"".join([value.type.value.encode(), str(len(payload)).encode(), CRLF, payload, CRLF])


def encode_frame(values: Iterable[Value]) -> bytes:
    """
    Encode an array frame holding ``values``.

    Raises:
        ValueError: if there are more than nine values or a payload is too long
    """
    values = list(values)
    if len(values) > MAX_ELEMENTS:
        raise ValueError(f"{len(values)} elements exceeds the {MAX_ELEMENTS}-element limit")

    parts = [ValueType.ARRAY.value.encode(), str(len(values)).encode(), CRLF]
    parts.extend(encode_value(value) for value in values)
    return b"".join(parts)


def encode_command(*args: Union[str, int]) -> bytes:
    """
    Encode a command and its arguments as a frame of bulk strings.

    Examples:
        >>> encode_command("SET", "k", "v")
        b'*3\\r\\n$3\\r\\nSET\\r\\n$1\\r\\nk\\r\\n$1\\r\\nv\\r\\n'
    """
    return encode_frame(BulkString(str(arg)) for arg in args)
