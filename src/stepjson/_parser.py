"""
Re-entrant event parser.

EventParser pulls one token per step from the tokenizer, checks it against
the grammar stack and emits exactly one event to its sink. Between two calls
to `parse_next` the parser holds nothing but its position, so a caller can
stop at any point and resume later.
"""

import logging
from collections.abc import Iterable
from collections.abc import Iterator
from typing import Any
from typing import Final

from ._config import ParseConfig
from ._errors import JSONDecodeError
from ._errors import ParseError
from ._errors import TokenizationError
from ._errors import format_preview
from ._events import Event
from ._events import EventCollector
from ._events import EventKind
from ._events import EventSink
from ._events import Observer
from ._grammar import ContextKind
from ._grammar import Expect
from ._grammar import GrammarStack
from ._lexer import Token
from ._lexer import TokenKind
from ._lexer import Tokenizer
from ._profile import ProfileContext
from ._source import CharSource

logger = logging.getLogger(__name__)

ESCAPE_MAP: Final = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}
HEX_DIGITS: Final = frozenset("0123456789abcdefABCDEF")


def _escape_error(msg: str, token: Token, index: int) -> TokenizationError:
    """Points at character `index` of the raw token text."""
    prefix = token.raw[:index]
    return TokenizationError(
        msg,
        token.pos + len(prefix.encode("utf-8", "surrogatepass")),
        token.lineno,
        token.colno + index,
        format_preview(token.raw, index),
    )


def _read_hex_escape(inner: str, i: int, token: Token) -> int:
    """Reads the four hex digits of the \\uXXXX escape starting at `i`."""
    digits = inner[i + 2 : i + 6]
    if len(digits) != 4 or not HEX_DIGITS.issuperset(digits):
        raise _escape_error(
            f"Invalid unicode escape sequence: \\u{digits}", token, i + 1
        )
    return int(digits, 16)


def _process_escape_sequence(
    inner: str, i: int, token: Token
) -> tuple[str, int]:
    """Decodes the escape starting at `i`, returns it and the next index."""
    next_char = inner[i + 1] if i + 1 < len(inner) else ""

    if next_char in ESCAPE_MAP:
        return ESCAPE_MAP[next_char], i + 2
    elif next_char == "u":
        code_point = _read_hex_escape(inner, i, token)
        if 0xD800 <= code_point <= 0xDBFF and inner[i + 6 : i + 8] == "\\u":
            low = _read_hex_escape(inner, i + 6, token)
            if 0xDC00 <= low <= 0xDFFF:
                combined = 0x10000 + ((code_point - 0xD800) << 10)
                return chr(combined + low - 0xDC00), i + 12
        return chr(code_point), i + 6
    else:
        raise _escape_error(
            f"Invalid escape sequence: \\{next_char}", token, i + 1
        )


def unquote(token: Token, escapes: bool = True) -> str:
    """
    Strips the delimiting quotes of a string token.

    With `escapes` on, backslash escapes are decoded as well; otherwise the
    text between the quotes is returned verbatim.
    """
    inner = token.raw[1:-1]
    if not escapes or "\\" not in inner:
        return inner

    result = []
    i = 0
    while i < len(inner):
        backslash = inner.find("\\", i)
        if backslash == -1:
            result.append(inner[i:])
            break
        result.append(inner[i:backslash])
        char, i = _process_escape_sequence(inner, backslash, token)
        result.append(char)
    return "".join(result)


def decode_integer(token: Token, config: ParseConfig) -> Any:
    """Decodes an integer literal with arbitrary precision."""
    try:
        return (config.parse_int or int)(token.raw)
    except ValueError as e:
        # int() refuses literals beyond sys.get_int_max_str_digits()
        if "Exceeds the limit" in str(e):
            raise TokenizationError(
                "Number too large", token.pos, token.lineno, token.colno
            ) from e
        raise


def decode_float(token: Token, config: ParseConfig) -> Any:
    return (config.parse_float or float)(token.raw)


class EventParser:
    """
    Streaming JSON parser emitting one event per `parse_next()` call.

    `source` may be a str, a text or binary stream, or a CharSource. Events
    go to the observers registered on `sink`, in registration order.
    """

    def __init__(
        self,
        source: Any,
        observers: Iterable[Observer] = (),
        config: ParseConfig | None = None,
    ) -> None:
        self.config = config or ParseConfig()
        if not isinstance(source, CharSource):
            source = CharSource(source, self.config.chunk_size)
        self.tokenizer = Tokenizer(source, self.config)
        self.stack = GrammarStack(self.config.max_depth)
        self.sink = EventSink(list(observers))
        self._exhausted = False
        self._failed = False

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def depth(self) -> int:
        return self.stack.depth

    def register(self, observer: Observer) -> None:
        self.sink.register(observer)

    def parse_next(self) -> bool | None:
        """
        Advances by one event.

        Returns True once an event has been emitted and None when the input
        is exhausted, on this and every later call. After a parse error, or
        an exception raised by an observer, the parser refuses to continue.
        """
        if self._failed:
            raise ParseError("Parser is in a failed state")
        if self._exhausted:
            return None

        try:
            with ProfileContext("parse_next"):
                return self._step()
        except JSONDecodeError as e:
            self._failed = True
            logger.debug("Parsing stopped: %s", e.msg)
            raise
        except Exception as e:
            # an observer failed after the stack had already moved on
            self._failed = True
            logger.debug("Parsing stopped by %s", type(e).__name__)
            raise

    def parse_all(self) -> None:
        """Runs `parse_next()` until the input is exhausted."""
        while self.parse_next():
            pass

    def __iter__(self) -> Iterator[Event]:
        collector = EventCollector()
        self.sink.register(collector)
        try:
            while self.parse_next():
                yield from collector.drain()
        finally:
            self.sink.unregister(collector)

    def _step(self) -> bool | None:
        while True:
            token = self.tokenizer.next_token()
            if token is None:
                source = self.tokenizer.source
                self.stack.must_be_closed(source.pos, source.lineno, source.colno)
                self._exhausted = True
                return None

            if token.kind is TokenKind.SYMBOL:
                if token.raw == ",":
                    # commas carry no event of their own
                    self.stack.must_expect(Expect.COMMA, token)
                    self.stack.after_comma()
                    continue
                event = self._handle_symbol(token)
            elif token.kind is TokenKind.STRING:
                event = self._handle_string(token)
            else:
                event = self._handle_scalar(token)

            self.sink.emit(event)
            return True

    def _handle_symbol(self, token: Token) -> Event:
        stack = self.stack
        if token.raw == "[":
            stack.must_expect(Expect.VALUE, token)
            stack.enter(ContextKind.ARRAY, token)
            return Event(EventKind.ARRAY_START, "[")
        elif token.raw == "{":
            stack.must_expect(Expect.VALUE, token)
            stack.enter(ContextKind.OBJECT, token)
            return Event(EventKind.OBJECT_START, "{")
        elif token.raw == "]":
            stack.must_expect(Expect.ARRAY_END, token)
            stack.leave()
            return Event(EventKind.ARRAY_END, "]")
        elif token.raw == "}":
            stack.must_expect(Expect.OBJECT_END, token)
            stack.leave()
            return Event(EventKind.OBJECT_END, "}")
        else:
            # a colon is only legal right after a key, which consumes it
            raise stack.unexpected(Expect.COLON, token)

    def _handle_string(self, token: Token) -> Event:
        stack = self.stack
        if Expect.KEY in stack.top().expecting:
            key = unquote(token, self.config.escapes)
            self._expect_colon(token)
            stack.after_key()
            return Event(EventKind.OBJECT_KEY, key)

        stack.must_expect(Expect.VALUE, token)
        value = unquote(token, self.config.escapes)
        stack.complete_value()
        return Event(EventKind.STRING_VALUE, value)

    def _expect_colon(self, key: Token) -> None:
        colon = self.tokenizer.next_token()
        if colon is not None and colon.kind is TokenKind.SYMBOL and colon.raw == ":":
            return

        if colon is None:
            source = self.tokenizer.source
            pos, lineno, colno = source.pos, source.lineno, source.colno
        else:
            pos, lineno, colno = colon.pos, colon.lineno, colon.colno
        raise ParseError(
            f"Expecting ':' delimiter after key {key.raw}", pos, lineno, colno
        )

    def _handle_scalar(self, token: Token) -> Event:
        self.stack.must_expect(Expect.VALUE, token)

        if token.kind is TokenKind.INTEGER:
            event = Event(EventKind.INTEGER_VALUE, decode_integer(token, self.config))
        elif token.kind is TokenKind.FLOAT:
            event = Event(EventKind.FLOAT_VALUE, decode_float(token, self.config))
        elif token.kind is TokenKind.BOOL:
            event = Event(EventKind.BOOL_VALUE, token.raw == "true")
        else:
            event = Event(EventKind.NULL_VALUE, None)

        self.stack.complete_value()
        return event
