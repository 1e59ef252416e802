"""
Protocol Value Definitions

This module defines the five value kinds that can appear inside a frame.
Each kind is an immutable dataclass; exactly one kind is carried per value.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, ClassVar, Dict, Optional, Union


class ValueType(Enum):
    """Type tag byte that prefixes every protocol element."""
    SIMPLE_STRING = "+"
    SIMPLE_ERROR = "-"
    INTEGER = ":"
    BULK_STRING = "$"
    ARRAY = "*"

    @classmethod
    def from_byte(cls, byte: int) -> Optional["ValueType"]:
        """Return the type for a raw tag byte, or None if it is not a known tag."""
        try:
            return cls(chr(byte))
        except ValueError:
            return None


def is_valid_type(byte: int) -> bool:
    """Check whether a raw byte is one of ``+ - : $ *``."""
    return ValueType.from_byte(byte) is not None


@dataclass(frozen=True)
class SimpleString:
    value: str
    type: ClassVar[ValueType] = ValueType.SIMPLE_STRING

    @property
    def text(self) -> str:
        return self.value


@dataclass(frozen=True)
class SimpleError:
    value: str
    type: ClassVar[ValueType] = ValueType.SIMPLE_ERROR

    @property
    def text(self) -> str:
        return self.value


@dataclass(frozen=True)
class Integer:
    value: int
    type: ClassVar[ValueType] = ValueType.INTEGER

    @property
    def text(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class BulkString:
    value: str
    type: ClassVar[ValueType] = ValueType.BULK_STRING

    @property
    def text(self) -> str:
        return self.value


@dataclass(frozen=True)
class Array:
    """
    Array element carried as its raw, undecoded payload text.

    Nested elements are not parsed; the payload is kept verbatim so that
    it can be flattened into a command argument like any other value.
    """
    value: str
    type: ClassVar[ValueType] = ValueType.ARRAY

    @property
    def text(self) -> str:
        return self.value


Value = Union[SimpleString, SimpleError, Integer, BulkString, Array]

_CONSTRUCTORS: Dict[ValueType, Callable[[str], Value]] = {
    ValueType.SIMPLE_STRING: SimpleString,
    ValueType.SIMPLE_ERROR: SimpleError,
    ValueType.INTEGER: lambda payload: Integer(int(payload, 10)),
    ValueType.BULK_STRING: BulkString,
    ValueType.ARRAY: Array,
}


def build_value(value_type: ValueType, payload: str) -> Value:
    """
    Construct the typed value for a decoded payload.

    Raises:
        ValueError: if an Integer payload is not a base-10 number
    """
    return _CONSTRUCTORS[value_type](payload)
