"""
Observers that turn the event stream back into values.

TreeBuilder reconstructs the whole document. PathExtractor keeps track of
where in the document each event sits and only materializes the value found
at one path, going inert as soon as that value is complete.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Final
from typing import TypeAlias

from ._config import ParseConfig
from ._errors import ParseError
from ._events import END_EVENTS
from ._events import START_EVENTS
from ._events import Event
from ._events import EventKind

PathSegment: TypeAlias = str | int

PATH_SEGMENT: Final = re.compile(
    r'\.?(?P<name>[^.\[\]"]+)|\[(?P<index>\d+)\]|\["(?P<quoted>(?:[^"\\]|\\.)*)"\]'
)


def parse_path(path: str) -> tuple[PathSegment, ...]:
    """
    Splits a path such as `details.favorites[3].name` into its segments.

    A leading `$` stands for the document root and `["a.b"]` addresses keys
    containing dots or brackets.
    """
    if not isinstance(path, str):
        raise TypeError(f"path must be a string, not {type(path).__name__}")

    pos = 1 if path.startswith("$") else 0
    segments: list[PathSegment] = []
    while pos < len(path):
        match = PATH_SEGMENT.match(path, pos)
        if not match:
            raise ValueError(f"Invalid path {path!r} at position {pos}")
        if match.group("name") is not None:
            segments.append(match.group("name"))
        elif match.group("index") is not None:
            segments.append(int(match.group("index")))
        else:
            segments.append(re.sub(r"\\(.)", r"\1", match.group("quoted")))
        pos = match.end()
    return tuple(segments)


def format_path(segments: Sequence[PathSegment]) -> str:
    parts = ["$"]
    for segment in segments:
        if isinstance(segment, int):
            parts.append(f"[{segment}]")
        else:
            parts.append(f".{segment}")
    return "".join(parts)


def _apply_object_hooks(
    pairs: list[tuple[str, Any]], config: ParseConfig
) -> Any:
    """Builds an object from its pairs, honoring the configured hooks."""
    if config.object_pairs_hook:
        return config.object_pairs_hook(pairs)
    obj = dict(pairs)
    if config.object_hook:
        return config.object_hook(obj)
    return obj


@dataclass
class _OpenContainer:
    is_object: bool
    items: list[Any] = field(default_factory=list)
    pending_key: str | None = None
    has_key: bool = False

    def add(self, value: Any) -> None:
        if not self.is_object:
            self.items.append(value)
            return
        if not self.has_key:
            raise ParseError("Object value without a preceding key")
        self.items.append((self.pending_key, value))
        self.pending_key = None
        self.has_key = False


class TreeBuilder:
    """
    Rebuilds the document from its events.

    Arrays become lists and objects become dicts (or whatever the object
    hooks return). `result` is available once `complete` is set.
    """

    def __init__(self, config: ParseConfig | None = None) -> None:
        self.config = config or ParseConfig()
        self._open: list[_OpenContainer] = []
        self._result: Any = None
        self.complete = False

    @property
    def result(self) -> Any:
        if not self.complete:
            raise ParseError("Document is not complete")
        return self._result

    def handle(self, event: Event) -> None:
        kind = event.kind
        if kind is EventKind.ARRAY_START:
            self._open.append(_OpenContainer(is_object=False))
        elif kind is EventKind.OBJECT_START:
            self._open.append(_OpenContainer(is_object=True))
        elif kind is EventKind.OBJECT_KEY:
            if not self._open or not self._open[-1].is_object:
                raise ParseError("Object key outside of an object")
            self._open[-1].pending_key = event.payload
            self._open[-1].has_key = True
        elif kind in END_EVENTS:
            if not self._open:
                raise ParseError(f"Unbalanced {kind.value} event")
            container = self._open.pop()
            if container.is_object:
                self._add(_apply_object_hooks(container.items, self.config))
            else:
                self._add(container.items)
        else:
            self._add(event.payload)

    def _add(self, value: Any) -> None:
        if self._open:
            self._open[-1].add(value)
        else:
            self._result = value
            self.complete = True


class PathExtractor:
    """
    Finds the value at `path` while the document streams past.

    Nothing outside the target is kept in memory. Once the value has been
    read, or the container that would hold it has closed without it,
    `done` is set and further events are ignored. With duplicate keys the
    first occurrence wins, whereas TreeBuilder keeps the last one.
    """

    def __init__(
        self,
        path: str | Sequence[PathSegment],
        config: ParseConfig | None = None,
    ) -> None:
        self.path = parse_path(path) if isinstance(path, str) else tuple(path)
        self.config = config or ParseConfig()
        # for each open container: the key or index of the current child
        self._segments: list[PathSegment | None] = []
        self._in_array: list[bool] = []
        self._builder: TreeBuilder | None = None
        self._value: Any = None
        self.found = False
        self.done = False

    @property
    def value(self) -> Any:
        if not self.found:
            raise KeyError(f"Path {format_path(self.path)} not found")
        return self._value

    def handle(self, event: Event) -> None:
        if self.done:
            return

        if self._builder is not None:
            self._builder.handle(event)
            if self._builder.complete:
                self._finish(self._builder.result)
            return

        kind = event.kind
        if kind is EventKind.OBJECT_KEY:
            self._segments[-1] = event.payload
        elif kind in END_EVENTS:
            self._segments.pop()
            self._in_array.pop()
            closed = tuple(self._segments)
            if self.path[: len(closed)] == closed:
                # the target would have been inside the container just closed
                self.done = True
        else:
            self._begin_value(event)

    def _begin_value(self, event: Event) -> None:
        if self._in_array and self._in_array[-1]:
            index = self._segments[-1]
            self._segments[-1] = (index if isinstance(index, int) else -1) + 1

        if tuple(self._segments) == self.path:
            if event.kind in START_EVENTS:
                self._builder = TreeBuilder(self.config)
                self._builder.handle(event)
            else:
                self._finish(event.payload)
        elif event.kind in START_EVENTS:
            in_array = event.kind is EventKind.ARRAY_START
            self._segments.append(None)
            self._in_array.append(in_array)

    def _finish(self, value: Any) -> None:
        self._value = value
        self.found = True
        self.done = True
        self._builder = None
