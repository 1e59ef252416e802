"""
Command and Response Definitions

This module defines the supported command table and the response values
written back to clients.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Sequence


class CommandType(Enum):
    """Enumeration of supported command names (matched case-sensitively)."""
    PING = "PING"
    SET = "SET"
    GET = "GET"
    HSET = "HSET"
    HGET = "HGET"
    UNKNOWN = None

    @classmethod
    def from_name(cls, name: str) -> "CommandType":
        """Look up a command by its exact name; unknown names map to UNKNOWN."""
        try:
            return cls(name)
        except ValueError:
            return cls.UNKNOWN


# Required positional arguments, excluding the command name
ARITY: Dict[CommandType, int] = {
    CommandType.PING: 0,
    CommandType.SET: 2,
    CommandType.GET: 1,
    CommandType.HSET: 3,
    CommandType.HGET: 2,
}

# Commands whose frames are appended to the log
PERSISTENT_COMMANDS: FrozenSet[CommandType] = frozenset({CommandType.SET, CommandType.HSET})


class ResponseKind(Enum):
    """Leading byte of a response line."""
    SIMPLE = "+"
    ERROR = "-"
    NULL = "_"


@dataclass(frozen=True)
class Response:
    """
    Represents a protocol response.

    Attributes:
        kind: SIMPLE, ERROR or NULL
        message: Text following the leading byte (empty for NULL)
    """
    kind: ResponseKind
    message: str = ""

    def to_bytes(self) -> bytes:
        """Format as ``<kind><message>\\r\\n``."""
        return f"{self.kind.value}{self.message}\r\n".encode("utf-8")

    @classmethod
    def ok(cls) -> "Response":
        return cls(ResponseKind.SIMPLE, "OK")

    @classmethod
    def pong(cls, args: Sequence[str] = ()) -> "Response":
        """PONG, echoing any arguments joined by a space inside quotes."""
        if not args:
            return cls(ResponseKind.SIMPLE, "PONG")
        return cls(ResponseKind.SIMPLE, f'PONG "{" ".join(args)}"')

    @classmethod
    def value_response(cls, value: str) -> "Response":
        return cls(ResponseKind.SIMPLE, value)

    @classmethod
    def null(cls) -> "Response":
        return cls(ResponseKind.NULL)

    @classmethod
    def error(cls, message: str) -> "Response":
        return cls(ResponseKind.ERROR, message)

    @classmethod
    def invalid_type(cls) -> "Response":
        return cls.error("INVALID TYPE")


@dataclass(frozen=True)
class DispatchResult:
    """
    Result of dispatching one frame.

    Attributes:
        response: Response to send back
        persist: Whether the frame must be appended to the log
    """
    response: Response
    persist: bool = False
