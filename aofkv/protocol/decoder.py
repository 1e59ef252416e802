"""
Protocol Decoder Module

Turns one raw request buffer into an ordered list of typed values.

Frame grammar (single-digit counts and lengths):

    *<N>\\r\\n
    <tag><len>\\r\\n<payload>\\r\\n      repeated N times

where <N> and <len> are one decimal digit each and <tag> is one of
``+ - : $ *``. Arrays of ten or more elements and payloads of ten or
more bytes are outside the grammar.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .values import Value, ValueType, build_value, is_valid_type

logger = logging.getLogger(__name__)

CRLF = b"\r\n"

# Tag byte, count digit and CRLF of the outer array header
ARRAY_HEADER_LENGTH = 4
# Tag byte, length digit and CRLF in front of every element payload
ELEMENT_HEADER_LENGTH = 4


def read_digit(byte: int) -> Optional[int]:
    """Return the value of an ASCII decimal digit byte, or None."""
    if 0x30 <= byte <= 0x39:
        return byte - 0x30
    return None


def element_count(header: bytes) -> Optional[int]:
    """
    Read the element count from an array header line such as ``b"*3"``.

    Returns:
        The declared number of elements, or None if the line is not an
        array header.
    """
    if len(header) < 2 or header[0] != ord(ValueType.ARRAY.value):
        return None
    return read_digit(header[1])


def frame_line_count(count: int) -> int:
    """
    Number of protocol lines in a frame of ``count`` elements.

    One header line, then a tag/length line and a payload line per element.
    """
    return 2 * count + 1


@dataclass
class DecodeResult:
    """
    Outcome of decoding one request buffer.

    Attributes:
        items: Values decoded in order (may be fewer than declared)
        consumed: Cursor position after the last decoded element
        declared: Element count announced by the array header
        valid_type: Whether the buffer's leading byte is a known type tag
        raw: The exact bytes that were consumed
    """
    items: List[Value] = field(default_factory=list)
    consumed: int = 0
    declared: int = 0
    valid_type: bool = False
    raw: bytes = b""

    @property
    def complete(self) -> bool:
        """True when every declared element was decoded."""
        return len(self.items) == self.declared

    @property
    def well_formed(self) -> bool:
        """True when ``raw`` is a complete frame with a ``*<N>\\r\\n`` header."""
        return (
            self.complete
            and element_count(self.raw[:2]) is not None
            and self.raw[2:ARRAY_HEADER_LENGTH] == CRLF
        )


class ProtocolDecoder:
    """
    Decoder for array-framed requests.

    Decoding never raises on malformed input. It stops at the first
    element it cannot read and returns what it collected so far, with
    ``consumed`` left at the end of the last good element.
    """

    def decode(self, buffer: Union[bytes, bytearray], length: Optional[int] = None) -> DecodeResult:
        """
        Decode a request buffer.

        Args:
            buffer: Raw bytes received from a connection
            length: Number of valid bytes in ``buffer`` (default: all of it)

        Returns:
            DecodeResult with the decoded items and consumed byte count

        Examples:
            >>> result = ProtocolDecoder().decode(b"*1\\r\\n$4\\r\\nPING\\r\\n")
            >>> result.items
            [BulkString(value='PING')]
            >>> result.consumed
            14
        """
        data = bytes(buffer if length is None else buffer[:length])

        valid_type = bool(data) and is_valid_type(data[0])
        declared = read_digit(data[1]) if len(data) > 1 else None
        if declared is None:
            declared = 0

        items: List[Value] = []
        cursor = ARRAY_HEADER_LENGTH
        while len(items) < declared:
            element = self._decode_element(data, cursor)
            if element is None:
                logger.debug(f"Stopped decoding at offset {cursor} after {len(items)} item(s)")
                break
            value, cursor = element
            items.append(value)

        consumed = min(cursor, len(data))
        return DecodeResult(
            items=items,
            consumed=consumed,
            declared=declared,
            valid_type=valid_type,
            raw=data[:consumed],
        )

    def _decode_element(self, data: bytes, cursor: int) -> Optional[Tuple[Value, int]]:
        """
        Decode the element starting at ``cursor``.

        Returns:
            (value, next_cursor), or None if the element is not readable
        """
        if cursor + ELEMENT_HEADER_LENGTH > len(data):
            return None

        value_type = ValueType.from_byte(data[cursor])
        if value_type is None:
            return None

        size = read_digit(data[cursor + 1])
        if size is None or data[cursor + 2:cursor + 4] != CRLF:
            return None

        start = cursor + ELEMENT_HEADER_LENGTH
        end = start + size
        if data[end:end + 2] != CRLF:
            return None

        # Log replay splits on line breaks, so payloads may not contain any
        payload = data[start:end]
        if b"\r" in payload or b"\n" in payload:
            return None

        try:
            value = build_value(value_type, payload.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            return None

        return value, end + 2
