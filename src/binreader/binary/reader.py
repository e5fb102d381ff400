from __future__ import annotations

import logging
import struct
from collections import deque
from pathlib import Path
from typing import Union

from binreader.models.common import ByteOrder
from binreader.models.config import HISTORY_LIMIT, ReaderConfig

log = logging.getLogger(__name__)

BytesLike = Union[str, Path, bytes, bytearray, memoryview]


class ReadingError(ValueError):
    """Read ran past the end of the buffer, or the bytes could not be decoded."""


class UndoUnderflowError(RuntimeError):
    """Undo requested with no history left to reverse."""


# -----------------------------
# Helpers
# -----------------------------

def load_bytes(inp: BytesLike) -> bytes:
    if isinstance(inp, (bytes, bytearray, memoryview)):
        return bytes(inp)
    return Path(str(inp)).read_bytes()


def _flag_bytes(flag: str | bytes) -> bytes:
    if isinstance(flag, (bytes, bytearray, memoryview)):
        return bytes(flag)
    try:
        return flag.encode("latin-1")
    except UnicodeEncodeError as e:
        raise ValueError(f"marker {flag!r} has characters outside one byte") from e


# struct codes: (unsigned, signed)
_INT_CODES = {2: ("H", "h"), 4: ("I", "i"), 8: ("Q", "q")}


# -----------------------------
# Reader
# -----------------------------

class BinaryReader:
    """
    Sequential reader over an in-memory byte buffer.

    Every primitive read first commits the byte count of the previous read
    to the undo history, then consumes its own bytes one at a time. The
    history keeps the most recent ``history_limit`` counts.
    """

    __slots__ = ("_buf", "_pos", "_order", "_history", "_pending")

    def __init__(
        self,
        data: bytes | bytearray | memoryview,
        byte_order: ByteOrder | str = ByteOrder.LITTLE_ENDIAN,
        *,
        history_limit: int = HISTORY_LIMIT,
    ):
        if history_limit < 1:
            raise ValueError("history_limit must be >= 1")
        self._buf = bytes(data)
        self._pos = 0
        self._order = ByteOrder.parse(byte_order)
        self._history: deque[int] = deque(maxlen=history_limit)
        self._pending = 0

    @classmethod
    def from_file(cls, path: str | Path, byte_order: ByteOrder | str = ByteOrder.LITTLE_ENDIAN) -> "BinaryReader":
        return cls(load_bytes(Path(path)), byte_order)

    @classmethod
    def from_config(cls, data: BytesLike, config: ReaderConfig) -> "BinaryReader":
        return cls(load_bytes(data), config.byte_order, history_limit=config.history_limit)

    # -- introspection

    @property
    def byte_order(self) -> ByteOrder:
        return self._order

    def tell(self) -> int: return self._pos
    def size(self) -> int: return len(self._buf)
    def remaining(self) -> int: return len(self._buf) - self._pos
    def history_depth(self) -> int:
        return min(len(self._history) + (1 if self._pending else 0), self._history.maxlen)

    def array(self) -> bytes:
        """The whole underlying buffer (immutable)."""
        return self._buf

    def __len__(self) -> int:
        return len(self._buf)

    def __repr__(self) -> str:
        return f"<BinaryReader pos={self._pos} size={len(self._buf)} order={self._order.name}>"

    # -- positioning

    def seek(self, pos: int) -> None:
        """Jump to an absolute offset. Undo history is left as is."""
        if not (0 <= pos <= len(self._buf)):
            raise ValueError(f"seek out of bounds: {pos} (size {len(self._buf)})")
        self._pos = pos

    def peek(self, n: int) -> bytes:
        if n < 0:
            raise ValueError("peek count must be >= 0")
        end = self._pos + n
        if end > len(self._buf):
            raise ReadingError(f"peek underrun: need {n} at {self._pos}, {self.remaining()} left")
        return self._buf[self._pos:end]

    # -- undo

    def _commit(self) -> None:
        if self._pending:
            if len(self._history) == self._history.maxlen and log.isEnabledFor(logging.DEBUG):
                log.debug("undo history full, dropping oldest entry (%d bytes)", self._history[0])
            self._history.append(self._pending)
        self._pending = 0

    def undo(self, count: int = 1) -> None:
        """Step back over the last ``count`` reads, most recent first."""
        if count < 0:
            raise ValueError("undo count must be >= 0")
        for _ in range(count):
            self._undo_one()

    def _undo_one(self) -> None:
        self._commit()
        if not self._history:
            raise UndoUnderflowError("attempted to undo a non-existent operation")
        target = self._pos - self._history[-1]
        if target < 0:
            raise UndoUnderflowError(f"undo would move before start of buffer (to {target})")
        self._history.pop()
        self._pos = target

    # -- primitive reads

    def _take_byte(self) -> int:
        if self._pos >= len(self._buf):
            raise ReadingError(f"underrun: no byte left at {self._pos}")
        b = self._buf[self._pos]
        self._pos += 1
        self._pending += 1
        return b

    def _take(self, n: int) -> bytes:
        if n < 0:
            raise ValueError("read count must be >= 0")
        self._commit()
        out = bytearray()
        try:
            for _ in range(n):
                out.append(self._take_byte())
        except ReadingError:
            self._rollback()
            raise ReadingError(f"underrun: need {n} at {self._pos}, {self.remaining()} left") from None
        return bytes(out)

    def _rollback(self) -> None:
        self._pos -= self._pending
        self._pending = 0

    def _unpack(self, code: str, n: int):
        raw = self._take(n)
        try:
            return struct.unpack(self._order.value + code, raw)[0]
        except struct.error as e:
            raise ReadingError(f"cannot decode {raw!r} as {code!r}") from e

    def read_byte(self) -> int:
        """One byte, signed."""
        return self._unpack("b", 1)

    def read_bytes(self, count: int) -> bytes:
        return self._take(count)

    def read_string(self, length: int | None = None) -> str:
        """
        ``length`` bytes as a string, one character per byte. Without a
        length, read up to and including a NUL terminator; the terminator
        is consumed but not returned.
        """
        if length is not None:
            return self._take(length).decode("latin-1")

        self._commit()
        out = bytearray()
        try:
            while True:
                b = self._take_byte()
                if b == 0:
                    break
                out.append(b)
        except ReadingError:
            start = self._pos - self._pending
            self._rollback()
            raise ReadingError(f"unterminated string starting at {start}") from None
        return out.decode("latin-1")

    def read_short(self, *, signed: bool = False) -> int:
        return self._unpack(_INT_CODES[2][signed], 2)

    def read_int(self, *, signed: bool = False) -> int:
        return self._unpack(_INT_CODES[4][signed], 4)

    def read_long(self, *, signed: bool = False) -> int:
        return self._unpack(_INT_CODES[8][signed], 8)

    def read_real(self) -> float:
        return self._unpack("f", 4)

    # -- marker search

    def go_to(self, flag: str | bytes) -> None:
        """
        Move the cursor just past the first occurrence of ``flag`` at or
        after the current position. Raises ReadingError when the buffer ends
        first (the cursor is then at the end of the buffer).
        """
        marker = _flag_bytes(flag)
        start = self._pos
        match_start = start
        matched = 0
        while matched < len(marker):
            b = self._unpack("B", 1)
            if b == marker[matched]:
                if not matched:
                    match_start = self._pos - 1
                matched += 1
            elif matched:
                # restart one byte past where the partial match began
                if matched <= self._history.maxlen:
                    self.undo(matched)
                else:
                    # partial match longer than the history can rewind
                    self._commit()
                    self.seek(match_start + 1)
                matched = 0
        log.debug("marker %r found at %d (scan began at %d)", marker, self._pos - len(marker), start)
