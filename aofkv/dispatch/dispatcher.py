"""
Command Dispatcher Module

Interprets decoded frames as store operations, formats the response and
appends accepted writes to the log.

Supported commands (names are case-sensitive):
    PING [arg ...]          -> +PONG | +PONG "<args>"
    SET <key> <value>       -> +OK                      (logged)
    GET <key>               -> +<value> | _
    HSET <map> <field> <v>  -> +OK                      (logged)
    HGET <map> <field>      -> +<value> | _

Any other name answers +OK, or -INVALID TYPE when the request's first
byte was not a protocol type tag.
"""

import logging
from typing import Callable, Dict, List, Optional, Union

from ..cache.store import KVStore
from ..persistence.aof import AppendLog
from ..protocol.commands import (
    ARITY,
    PERSISTENT_COMMANDS,
    CommandType,
    DispatchResult,
    Response,
)
from ..protocol.decoder import DecodeResult, ProtocolDecoder
from ..protocol.encoder import encode_frame
from ..protocol.values import BulkString

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """A command could not be executed; ``message`` is sent to the client."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ArityError(CommandError):
    """Fewer positional arguments than the command requires."""

    def __init__(self, command: CommandType):
        super().__init__(f"ERR wrong number of arguments for '{command.value}' command")
        self.command = command


class CommandDispatcher:
    """
    Executes frames against a KVStore.

    The dispatcher owns the parse -> execute -> persist -> respond
    pipeline used both for live traffic (``handle``) and for log replay
    (``handle(..., persist=False)``).

    Attributes:
        store: The KVStore all commands operate on
        aof: AppendLog receiving accepted writes (None disables logging)
        decoder: ProtocolDecoder used for raw buffers
    """

    def __init__(self, store: KVStore = None, aof: Optional[AppendLog] = None):
        self.store = store if store is not None else KVStore()
        self.aof = aof
        self.decoder = ProtocolDecoder()

        self._handlers: Dict[CommandType, Callable[[List[str]], Response]] = {
            CommandType.PING: self._ping,
            CommandType.SET: self._set,
            CommandType.GET: self._get,
            CommandType.HSET: self._hset,
            CommandType.HGET: self._hget,
        }

    def handle(self, buffer: Union[bytes, bytearray], persist: bool = True) -> bytes:
        """
        Decode, execute and (optionally) log one request buffer.

        Args:
            buffer: Raw bytes holding one frame
            persist: Append accepted writes to the log; False during replay

        Returns:
            Response bytes to send back
        """
        frame = self.decoder.decode(buffer)
        result = self.dispatch(frame)

        if result.persist and persist and self.aof is not None:
            self.aof.append(self._log_record(frame))

        return result.response.to_bytes()

    def dispatch(self, frame: DecodeResult) -> DispatchResult:
        """
        Execute a decoded frame against the store.

        Returns:
            DispatchResult with the response and whether to persist the frame
        """
        if not frame.items:
            return self._fallback(frame)

        name = frame.items[0]
        if not isinstance(name, BulkString):
            return DispatchResult(Response.error("ERR command name must be a bulk string"))

        command = CommandType.from_name(name.value)
        if command is CommandType.UNKNOWN:
            logger.debug(f"Unknown command: {name.value!r}")
            return self._fallback(frame)

        args = [item.text for item in frame.items[1:]]
        try:
            self._require_arity(command, args)
            response = self._handlers[command](args)
        except CommandError as exc:
            logger.debug(f"{command.value} rejected: {exc.message}")
            return DispatchResult(Response.error(exc.message))

        return DispatchResult(response, persist=command in PERSISTENT_COMMANDS)

    def _fallback(self, frame: DecodeResult) -> DispatchResult:
        # Unrecognized commands are acknowledged rather than rejected
        if frame.valid_type:
            return DispatchResult(Response.ok())
        return DispatchResult(Response.invalid_type())

    @staticmethod
    def _require_arity(command: CommandType, args: List[str]) -> None:
        if len(args) < ARITY[command]:
            raise ArityError(command)

    @staticmethod
    def _log_record(frame: DecodeResult) -> bytes:
        """Bytes to append for a frame: its raw slice when that replays cleanly."""
        if frame.well_formed:
            return frame.raw
        return encode_frame(frame.items)

    def _ping(self, args: List[str]) -> Response:
        return Response.pong(args)

    def _set(self, args: List[str]) -> Response:
        key, value = args[0], args[1]
        self.store.set_string(key, value)
        return Response.ok()

    def _get(self, args: List[str]) -> Response:
        value = self.store.get_string(args[0])
        return Response.value_response(value) if value is not None else Response.null()

    def _hset(self, args: List[str]) -> Response:
        name, field, value = args[0], args[1], args[2]
        self.store.hset(name, field, value)
        return Response.ok()

    def _hget(self, args: List[str]) -> Response:
        value = self.store.hget(args[0], args[1])
        return Response.value_response(value) if value is not None else Response.null()
