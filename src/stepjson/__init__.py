"""
Streaming, step-at-a-time JSON parsing.

An EventParser reads a character source lazily and emits one event per
`parse_next()` call (array/object starts and ends, keys and scalar values)
to the observers registered with it, so a document of any size can be
consumed, paused or abandoned without holding it in memory. TreeBuilder and
PathExtractor are ready-made observers; `loads`, `load`, `iter_events` and
`extract` wrap the common ways of driving them.
"""

import logging
from collections.abc import Iterator
from collections.abc import Sequence
from typing import IO
from typing import Any

from ._config import JsonValue
from ._config import ParseConfig
from ._errors import GrammarError
from ._errors import JSONDecodeError
from ._errors import ParseError
from ._errors import TokenizationError
from ._events import Event
from ._events import EventCollector
from ._events import EventKind
from ._events import EventSink
from ._events import Observer
from ._grammar import ContextKind
from ._grammar import Expect
from ._grammar import Frame
from ._grammar import GrammarStack
from ._handlers import PathExtractor
from ._handlers import PathSegment
from ._handlers import TreeBuilder
from ._handlers import parse_path
from ._lexer import Token
from ._lexer import Tokenizer
from ._lexer import TokenKind
from ._parser import EventParser
from ._profile import HotPathStats
from ._profile import clear_hot_path_stats
from ._profile import get_hot_path_stats
from ._source import CharSource

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

_MISSING: Any = object()


def _parse_document(source: Any, config: ParseConfig) -> Any:
    """Drives a parser to the end of `source` and returns the rebuilt value."""
    builder = TreeBuilder(config)
    parser = EventParser(source, [builder], config)
    parser.parse_all()

    if not builder.complete:
        position = parser.tokenizer.source
        raise ParseError(
            "Expecting value", position.pos, position.lineno, position.colno
        )
    return builder.result


def loads(s: str, **kwargs: Any) -> Any:
    """
    Parses a JSON document held in a string.

    Keyword arguments are ParseConfig fields.
    """
    if not isinstance(s, str):
        raise TypeError(
            f"the JSON object must be str, not {type(s).__name__}"
        )

    config = ParseConfig(**kwargs)
    return _parse_document(s, config)


def load(fp: IO[str] | IO[bytes], **kwargs: Any) -> Any:
    """
    Parses a JSON document from a text or binary file-like object.

    The stream is read in chunks rather than all at once.
    """
    if not hasattr(fp, "read"):
        raise TypeError("fp must have a read() method")

    config = ParseConfig(**kwargs)
    return _parse_document(fp, config)


def tokenize(source: Any, **kwargs: Any) -> Iterator[Token]:
    """Yields the tokens of `source` without checking the grammar."""
    config = ParseConfig(**kwargs)
    yield from Tokenizer(CharSource(source, config.chunk_size), config)


def iter_events(source: Any, **kwargs: Any) -> Iterator[Event]:
    """Yields the events of `source` as the parser produces them."""
    config = ParseConfig(**kwargs)
    yield from EventParser(source, config=config)


def extract(
    source: Any,
    path: str | Sequence[PathSegment],
    default: Any = _MISSING,
    **kwargs: Any,
) -> Any:
    """
    Returns the value found at `path` in the JSON document `source`.

    Parsing stops as soon as the value is complete, so whatever follows it
    is neither read nor validated, and of duplicate keys the first one
    matches. Raises KeyError when the path does not
    exist and no `default` is given.
    """
    config = ParseConfig(**kwargs)
    extractor = PathExtractor(path, config)
    parser = EventParser(source, [extractor], config)

    while not extractor.done and parser.parse_next():
        pass

    if extractor.found:
        return extractor.value
    if default is not _MISSING:
        return default
    logger.debug("Path %r not found", path)
    return extractor.value


__all__ = [
    "CharSource",
    "ContextKind",
    "Event",
    "EventCollector",
    "EventKind",
    "EventParser",
    "EventSink",
    "Expect",
    "Frame",
    "GrammarError",
    "GrammarStack",
    "HotPathStats",
    "JSONDecodeError",
    "JsonValue",
    "Observer",
    "ParseConfig",
    "ParseError",
    "PathExtractor",
    "PathSegment",
    "Token",
    "TokenKind",
    "TokenizationError",
    "Tokenizer",
    "TreeBuilder",
    "clear_hot_path_stats",
    "extract",
    "get_hot_path_stats",
    "iter_events",
    "load",
    "loads",
    "parse_path",
    "tokenize",
]
