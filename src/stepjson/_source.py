"""
Character source adapter with single-character lookahead.

Wraps a string, a text stream or a binary stream and hands out one
character at a time while tracking the byte offset, line and column of the
next character. Only a bounded tail of the current line is remembered, which
is enough to quote the source in diagnostics.
"""

from __future__ import annotations

import codecs
import io
import logging
from collections import deque
from typing import IO
from typing import Any
from typing import Final

from ._config import DEFAULT_CHUNK_SIZE
from ._errors import TokenizationError

logger = logging.getLogger(__name__)

ASCII_LIMIT: Final = 127
LINE_TAIL_LENGTH: Final = 64


class _Utf8Reader:
    """
    Decodes a binary stream as UTF-8 without taking ownership of it.

    Text decoded before an invalid byte sequence is still handed out; the
    UnicodeDecodeError is raised by the read that would return that
    sequence.
    """

    def __init__(self, raw: IO[bytes]) -> None:
        self._raw = raw
        self._decoder = codecs.getincrementaldecoder("utf-8")()
        self._error: UnicodeDecodeError | None = None

    def read(self, size: int) -> str:
        if self._error is not None:
            raise self._error
        while True:
            data = self._raw.read(size)
            try:
                text = self._decoder.decode(data or b"", final=not data)
            except UnicodeDecodeError as e:
                # e.object holds the buffered bytes followed by this chunk
                valid = e.object[: e.start].decode("utf-8")
                if not valid:
                    raise
                self._error = e
                return valid
            # a chunk may end in the middle of a multi-byte sequence
            if text or not data:
                return text


def _open_stream(source: Any) -> Any:
    """Returns an object with a text `read(n)` for any supported source."""
    if isinstance(source, str):
        logger.debug("Reading JSON from a string of %d chars", len(source))
        return io.StringIO(source)
    if isinstance(source, bytes | bytearray | memoryview):
        raise TypeError("the JSON source must be str or a stream, not bytes")
    if not hasattr(source, "read"):
        raise TypeError(
            "the JSON source must be str or a readable stream, "
            f"not {type(source).__name__}"
        )
    if isinstance(source, io.RawIOBase | io.BufferedIOBase) or "b" in getattr(
        source, "mode", ""
    ):
        logger.debug("Decoding binary JSON stream as UTF-8")
        return _Utf8Reader(source)
    return source


def _utf8_width(char: str) -> int:
    if ord(char) <= ASCII_LIMIT:
        return 1
    return len(char.encode("utf-8", "surrogatepass"))


class CharSource:
    """
    Pull-based character reader with one character of lookahead.

    `peek()` never consumes and `get()` never re-reads what `peek()` already
    fetched. Both return None at end of input. `pos` is the UTF-8 byte offset
    of the next character, `lineno` and `colno` its 1-based line and column.
    """

    def __init__(self, source: Any, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self._stream = _open_stream(source)
        self._chunk_size = chunk_size
        self._chunk = ""
        self._index = 0
        self._exhausted = False
        self._lookahead: str | None = None
        self._line_tail: deque[str] = deque(maxlen=LINE_TAIL_LENGTH)
        self.pos = 0
        self.lineno = 1
        self.colno = 1

    def _read_char(self) -> str | None:
        if self._index >= len(self._chunk):
            if self._exhausted:
                return None
            try:
                self._chunk = self._stream.read(self._chunk_size) or ""
            except UnicodeDecodeError as e:
                # everything before the bad bytes has been consumed
                raise TokenizationError(
                    f"Invalid UTF-8 in input: {e.reason}",
                    self.pos,
                    self.lineno,
                    self.colno,
                ) from e
            self._index = 0
            if not self._chunk:
                self._exhausted = True
                return None
        char = self._chunk[self._index]
        self._index += 1
        return char

    def peek(self) -> str | None:
        """Returns the next character without consuming it."""
        if self._lookahead is None:
            self._lookahead = self._read_char()
        return self._lookahead

    def get(self) -> str | None:
        """Consumes and returns the next character."""
        char = self.peek()
        self._lookahead = None
        if char is None:
            return None

        self.pos += _utf8_width(char)
        if char == "\n":
            self.lineno += 1
            self.colno = 1
            self._line_tail.clear()
        else:
            self.colno += 1
            self._line_tail.append(char)
        return char

    def recent_line(self) -> str:
        """Returns the consumed part of the current line, bounded in length."""
        return "".join(self._line_tail)

    def read_line_ahead(self, limit: int) -> str:
        """
        Consumes up to `limit` characters of the rest of the current line.

        Only meant for building diagnostics after a fatal error.
        """
        chars: list[str] = []
        while len(chars) < limit:
            char = self.peek()
            if char is None or char == "\n":
                break
            self.get()
            chars.append(char)
        return "".join(chars)
