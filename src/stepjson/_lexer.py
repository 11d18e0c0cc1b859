"""
Tokenizer turning a character source into a lazy sequence of tokens.

Structural symbols are single characters, strings keep their quotes and
every other run of characters up to whitespace or a symbol is classified as
a number, boolean or null literal.
"""

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Final

from ._config import ParseConfig
from ._config import Position
from ._errors import PREVIEW_WIDTH
from ._errors import TokenizationError
from ._errors import format_preview
from ._profile import ProfileContext
from ._source import CharSource

logger = logging.getLogger(__name__)

STRUCTURAL_SYMBOLS: Final = frozenset("{}[]:,")
WHITESPACE: Final = frozenset(" \t\n\r")
CONTROL_LIMIT: Final = 0x20
NUMBER_PATTERN: Final = re.compile(
    r"-?(?:0|[1-9][0-9]*)(?P<frac>\.[0-9]+)?(?P<exp>[eE][+-]?[0-9]+)?"
)


class TokenKind(Enum):
    """Lexical classes produced by the tokenizer."""

    SYMBOL = "symbol"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOL = "bool"
    NULL = "null"


@dataclass(frozen=True)
class Token:
    """
    A lexical unit with the exact source text it was read from.

    `pos` is the byte offset of the first character, `lineno` and `colno`
    its 1-based line and column.
    """

    kind: TokenKind
    raw: str
    pos: Position = 0
    lineno: int = 1
    colno: int = 1


def classify_literal(text: str) -> TokenKind | None:
    """Returns the token kind of a bare literal, or None if it is invalid."""
    match = NUMBER_PATTERN.fullmatch(text)
    if match:
        if match.group("frac") or match.group("exp"):
            return TokenKind.FLOAT
        return TokenKind.INTEGER
    if text in ("true", "false"):
        return TokenKind.BOOL
    if text == "null":
        return TokenKind.NULL
    return None


class Tokenizer:
    """
    Pulls tokens from a CharSource one at a time.

    Iterating a Tokenizer yields tokens until the source is exhausted.
    """

    def __init__(
        self, source: CharSource, config: ParseConfig | None = None
    ) -> None:
        self.source = source
        self.config = config or ParseConfig()

    def __iter__(self) -> Iterator[Token]:
        while (token := self.next_token()) is not None:
            yield token

    def skip_whitespace(self) -> None:
        source = self.source
        while source.peek() in WHITESPACE:
            source.get()

    def next_token(self) -> Token | None:
        """Returns the next token or None at end of input."""
        with ProfileContext("next_token"):
            self.skip_whitespace()

            char = self.source.peek()
            if char is None:
                return None

            if char in STRUCTURAL_SYMBOLS:
                token = Token(
                    TokenKind.SYMBOL,
                    char,
                    self.source.pos,
                    self.source.lineno,
                    self.source.colno,
                )
                self.source.get()
                return token
            elif char == '"':
                return self.scan_string()
            else:
                return self.scan_literal()

    def scan_string(self) -> Token:
        """Scans a string literal, quotes included."""
        source = self.source
        pos, lineno, colno = source.pos, source.lineno, source.colno
        line_prefix = source.recent_line()
        escapes = self.config.escapes
        strict = self.config.strict

        chars = [source.get() or '"']
        while (char := source.peek()) is not None:
            if strict and ord(char) < CONTROL_LIMIT:
                line = line_prefix + "".join(chars[-PREVIEW_WIDTH:])
                raise TokenizationError(
                    "Invalid control character in string",
                    source.pos,
                    source.lineno,
                    source.colno,
                    format_preview(line, len(line)),
                )
            source.get()
            chars.append(char)
            if char == '"':
                return Token(TokenKind.STRING, "".join(chars), pos, lineno, colno)
            if char == "\\" and escapes:
                escaped = source.get()
                if escaped is None:
                    break
                chars.append(escaped)

        # the string may span lines; only its first line belongs to the preview
        opening_line = "".join(chars[:PREVIEW_WIDTH]).split("\n", 1)[0]
        logger.debug("Unterminated string at byte offset %d", pos)
        raise TokenizationError(
            "Unterminated string",
            pos,
            lineno,
            colno,
            format_preview(line_prefix + opening_line, len(line_prefix)),
        )

    def scan_literal(self) -> Token:
        """Scans a number, boolean or null literal."""
        source = self.source
        pos, lineno, colno = source.pos, source.lineno, source.colno
        line_prefix = source.recent_line()

        chars = []
        while (char := source.peek()) is not None and not (
            char in WHITESPACE or char in STRUCTURAL_SYMBOLS
        ):
            chars.append(char)
            source.get()

        literal = "".join(chars)
        kind = classify_literal(literal)
        if kind is None:
            line = line_prefix + literal + source.read_line_ahead(PREVIEW_WIDTH)
            logger.debug("Invalid literal %r at byte offset %d", literal, pos)
            raise TokenizationError(
                f"Invalid literal {literal!r}",
                pos,
                lineno,
                colno,
                format_preview(line, len(line_prefix)),
            )
        return Token(kind, literal, pos, lineno, colno)
