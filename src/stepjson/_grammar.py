"""
Grammar state stack: the record of which token classes may come next.

Each open array or object is a Frame on the stack, below them sits the
top-level frame which is never popped. The parser drives the transitions;
the stack only answers whether a token class is currently legal.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Final

from ._config import Position
from ._errors import GrammarError
from ._errors import ParseError
from ._lexer import Token

logger = logging.getLogger(__name__)


class ContextKind(Enum):
    TOP = "top"
    ARRAY = "array"
    OBJECT = "object"


class Expect(Enum):
    """
    Token classes as seen by the grammar.

    COLON only exists to name a stray ':' in error messages, no frame ever
    expects it.
    """

    VALUE = "value"
    KEY = "key"
    COLON = "colon"
    COMMA = "comma"
    ARRAY_END = "array_end"
    OBJECT_END = "object_end"
    EOF = "eof"


_ORDER: Final = {expect: index for index, expect in enumerate(Expect)}

EXPECT_AT_START: Final = frozenset({Expect.VALUE})
EXPECT_IN_NEW: Final = {
    ContextKind.ARRAY: frozenset({Expect.VALUE, Expect.ARRAY_END}),
    ContextKind.OBJECT: frozenset({Expect.KEY, Expect.OBJECT_END}),
}
EXPECT_AFTER_VALUE: Final = {
    ContextKind.TOP: frozenset({Expect.EOF}),
    ContextKind.ARRAY: frozenset({Expect.COMMA, Expect.ARRAY_END}),
    ContextKind.OBJECT: frozenset({Expect.COMMA, Expect.OBJECT_END}),
}
EXPECT_AFTER_COMMA: Final = {
    ContextKind.ARRAY: frozenset({Expect.VALUE}),
    ContextKind.OBJECT: frozenset({Expect.KEY}),
}
EXPECT_AFTER_KEY: Final = frozenset({Expect.VALUE})


def describe_expecting(expecting: frozenset[Expect]) -> str:
    """Lists token classes in a fixed order, e.g. 'comma, array_end'."""
    return ", ".join(
        expect.value for expect in sorted(expecting, key=_ORDER.__getitem__)
    )


@dataclass
class Frame:
    """One open context and the token classes legal inside it right now."""

    context: ContextKind
    expecting: frozenset[Expect]


class GrammarStack:
    """
    Stack of Frames owned by a single parser.

    Starts with a top-level frame expecting one value; once that value is
    complete the top frame expects only end of input.
    """

    def __init__(self, max_depth: int | None = None) -> None:
        self.max_depth = max_depth
        self._frames = [Frame(ContextKind.TOP, EXPECT_AT_START)]

    def __len__(self) -> int:
        return len(self._frames)

    @property
    def depth(self) -> int:
        """Number of open arrays and objects."""
        return len(self._frames) - 1

    def top(self) -> Frame:
        return self._frames[-1]

    def push(self, context: ContextKind, expecting: frozenset[Expect]) -> Frame:
        frame = Frame(context, expecting)
        self._frames.append(frame)
        return frame

    def pop(self) -> Frame:
        if len(self._frames) == 1:
            raise ParseError("Cannot close the top-level context")
        return self._frames.pop()

    def must_expect(self, candidate: Expect, token: Token) -> None:
        """Raises GrammarError unless `candidate` is legal at this point."""
        if candidate not in self.top().expecting:
            raise self.unexpected(candidate, token)

    def unexpected(self, candidate: Expect, token: Token) -> GrammarError:
        """Builds the error for `token` of class `candidate` arriving now."""
        expecting = self.top().expecting
        return GrammarError(
            f"Unexpected {candidate.value} {token.raw!r}, "
            f"expecting any of: {describe_expecting(expecting)}",
            token.pos,
            token.lineno,
            token.colno,
            unexpected=candidate,
            expecting=expecting,
        )

    def must_be_closed(self, pos: Position, lineno: int, colno: int) -> None:
        """Raises GrammarError if input ended inside an array or object."""
        frame = self.top()
        if frame.context is ContextKind.TOP:
            return
        raise GrammarError(
            f"Unclosed {frame.context.value}, "
            f"expecting any of: {describe_expecting(frame.expecting)}",
            pos,
            lineno,
            colno,
            unexpected=Expect.EOF,
            expecting=frame.expecting,
        )

    def enter(self, context: ContextKind, token: Token) -> None:
        """Opens an array or object."""
        if self.max_depth is not None and self.depth >= self.max_depth:
            raise ParseError(
                f"Maximum nesting depth of {self.max_depth} exceeded",
                token.pos,
                token.lineno,
                token.colno,
            )
        self.push(context, EXPECT_IN_NEW[context])
        logger.debug("Entered %s at depth %d", context.value, self.depth)

    def complete_value(self) -> None:
        frame = self.top()
        frame.expecting = EXPECT_AFTER_VALUE[frame.context]

    def after_comma(self) -> None:
        frame = self.top()
        frame.expecting = EXPECT_AFTER_COMMA[frame.context]

    def after_key(self) -> None:
        self.top().expecting = EXPECT_AFTER_KEY

    def leave(self) -> Frame:
        """Closes the innermost array or object, completing a parent value."""
        frame = self.pop()
        logger.debug("Left %s at depth %d", frame.context.value, self.depth + 1)
        self.complete_value()
        return frame
