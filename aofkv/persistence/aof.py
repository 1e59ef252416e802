"""
Append-Only Log Module

Accepted write commands are appended to a file exactly as they arrived.
At startup the file is read back, split into protocol lines, regrouped
into frames and re-dispatched to rebuild the store.

A crash between a store mutation and its append loses that mutation on
restart; the store write and the log write are not one transaction.
"""

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Iterable, Iterator, List, Optional, Union

from ..protocol.decoder import CRLF, element_count, frame_line_count

if TYPE_CHECKING:
    from ..dispatch.dispatcher import CommandDispatcher

logger = logging.getLogger(__name__)


def reconstruct_frames(lines: Iterable[bytes]) -> Iterator[bytes]:
    """
    Regroup log lines into complete frames.

    A line starting with ``*`` opens a frame whose length in lines follows
    from its element count. Lines are collected, each re-terminated with
    CRLF, until the frame is complete. Lines seen between frames that are
    not array headers are skipped. A frame still open when the input ends
    is dropped.

    Args:
        lines: Log lines with their terminators stripped

    Yields:
        The bytes of each complete frame, in log order
    """
    buffer = bytearray()
    remaining = 0

    for line in lines:
        if remaining == 0:
            count = element_count(line)
            if count is None:
                if line:
                    logger.debug(f"Skipping stray log line: {line!r}")
                continue
            remaining = frame_line_count(count)

        buffer += line + CRLF
        remaining -= 1

        if remaining == 0:
            yield bytes(buffer)
            buffer.clear()

    if remaining:
        logger.warning(f"Discarding truncated trailing frame ({remaining} line(s) missing)")


class AppendLog:
    """
    Durable, append-only record of accepted write commands.

    Usage:
        with AppendLog("aof") as aof:
            aof.replay(dispatcher)
            ...
            aof.append(frame_bytes)

    Attributes:
        path: Location of the log file
        fsync: Whether to fsync after every append
        appended: Number of frames written successfully
        failed: Number of appends that raised an I/O error
    """

    def __init__(self, path: Union[str, os.PathLike], fsync: bool = False):
        self.path = Path(path)
        self.fsync = fsync
        self.appended = 0
        self.failed = 0
        self._file: Optional[BinaryIO] = None

    def __enter__(self) -> "AppendLog":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def open(self) -> None:
        """Open the log for appending, creating the file if it is missing."""
        if self._file is not None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.path, "ab")

    def close(self) -> None:
        if self._file is None:
            return
        try:
            self._file.close()
        finally:
            self._file = None

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def append(self, frame: bytes) -> bool:
        """
        Append one frame to the end of the log.

        The frame is written with a single write and flushed before
        returning. I/O errors are logged and reported, never raised.

        Returns:
            True if the frame was written, False otherwise
        """
        try:
            self.open()
            self._file.write(frame)
            self._file.flush()
            if self.fsync:
                os.fsync(self._file.fileno())
        except OSError as exc:
            self.failed += 1
            logger.warning(f"Failed to append {len(frame)} bytes to {self.path}: {exc}")
            return False

        self.appended += 1
        return True

    def read_lines(self) -> List[bytes]:
        """
        Read the whole log as lines with terminators stripped.

        A missing log reads as empty.
        """
        if not self.path.exists():
            return []
        return self.path.read_bytes().splitlines()

    def frames(self) -> Iterator[bytes]:
        """Iterate over the complete frames currently in the log."""
        return reconstruct_frames(self.read_lines())

    def replay(self, dispatcher: "CommandDispatcher") -> int:
        """
        Re-dispatch every complete frame in the log, without re-appending.

        Must run before the server accepts connections.

        Args:
            dispatcher: Dispatcher whose store is to be rebuilt

        Returns:
            Number of frames replayed
        """
        replayed = 0
        for frame in self.frames():
            dispatcher.handle(frame, persist=False)
            replayed += 1

        logger.info(f"Replayed {replayed} command(s) from {self.path}")
        return replayed
