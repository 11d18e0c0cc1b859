"""
Exception hierarchy for lexical and structural parse failures.

Every failure carries the byte offset of the offending input together with
its line and column so that callers can point at the exact spot in a
document they never held in memory.
"""

from collections.abc import Iterable
from typing import Any

from ._config import Position

PREVIEW_WIDTH = 35


def format_preview(line: str, column: int) -> str:
    """
    Renders a window of `line` centered on `column` with a caret below it.

    `column` is a zero-based index into `line`. Tabs and carriage returns are
    shown as spaces so the caret stays aligned.
    """
    start = max(0, column - PREVIEW_WIDTH // 2)
    snippet = line[start : start + PREVIEW_WIDTH]
    snippet = snippet.replace("\t", " ").replace("\r", " ")
    return f"{snippet}\n{' ' * (column - start)}^"


class JSONDecodeError(ValueError):
    """
    Base class for every error raised while parsing a JSON stream.

    Holds the bare message plus the byte offset, line and column at which
    parsing stopped.
    """

    def __init__(
        self, msg: str, pos: Position = 0, lineno: int = 1, colno: int = 1
    ) -> None:
        if not isinstance(msg, str):
            raise TypeError("msg must be a string")
        if not isinstance(pos, int) or pos < 0:
            raise ValueError("pos must be a non-negative integer")

        self.msg = msg
        self.pos = pos
        self.lineno = lineno
        self.colno = colno
        super().__init__(self._describe())

    def _describe(self) -> str:
        return (
            f"{self.msg} at line {self.lineno}, column {self.colno} "
            f"(byte offset {self.pos})"
        )


class TokenizationError(JSONDecodeError):
    """
    Raised for unterminated strings and literals matching no JSON grammar.

    `preview` is a caret-annotated excerpt of the source line.
    """

    def __init__(
        self,
        msg: str,
        pos: Position = 0,
        lineno: int = 1,
        colno: int = 1,
        preview: str = "",
    ) -> None:
        self.preview = preview
        super().__init__(msg, pos, lineno, colno)

    def _describe(self) -> str:
        description = super()._describe()
        if self.preview:
            description += "\n" + self.preview
        return description


class ParseError(JSONDecodeError):
    """Raised when the token stream does not form a valid document."""


class GrammarError(ParseError):
    """
    Raised when a token class is not among the legal continuations.

    `unexpected` names the offending token class and `expecting` holds the
    classes that would have been accepted.
    """

    def __init__(
        self,
        msg: str,
        pos: Position = 0,
        lineno: int = 1,
        colno: int = 1,
        unexpected: Any = None,
        expecting: Iterable[Any] = (),
    ) -> None:
        self.unexpected = unexpected
        self.expecting = frozenset(expecting)
        super().__init__(msg, pos, lineno, colno)
