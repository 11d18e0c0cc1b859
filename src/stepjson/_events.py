"""Parse events and the sink that fans them out to observers."""

from dataclasses import dataclass
from enum import Enum
from typing import Any
from typing import Final
from typing import Protocol
from typing import runtime_checkable

from ._profile import ProfileContext


class EventKind(Enum):
    ARRAY_START = "array_start"
    ARRAY_END = "array_end"
    OBJECT_START = "object_start"
    OBJECT_END = "object_end"
    OBJECT_KEY = "object_key"
    STRING_VALUE = "string_value"
    INTEGER_VALUE = "integer_value"
    FLOAT_VALUE = "float_value"
    BOOL_VALUE = "bool_value"
    NULL_VALUE = "null_value"


SCALAR_EVENTS: Final = frozenset(
    {
        EventKind.STRING_VALUE,
        EventKind.INTEGER_VALUE,
        EventKind.FLOAT_VALUE,
        EventKind.BOOL_VALUE,
        EventKind.NULL_VALUE,
    }
)
START_EVENTS: Final = frozenset({EventKind.ARRAY_START, EventKind.OBJECT_START})
END_EVENTS: Final = frozenset({EventKind.ARRAY_END, EventKind.OBJECT_END})


@dataclass(frozen=True)
class Event:
    """
    One unit of parse output.

    `payload` is the decoded value for keys and scalars, and the structural
    character for start and end events.
    """

    kind: EventKind
    payload: Any = None

    def as_tuple(self) -> tuple[str, Any]:
        return (self.kind.value, self.payload)


@runtime_checkable
class Observer(Protocol):
    """Anything that reacts to parse events."""

    def handle(self, event: Event) -> None: ...


class EventSink:
    """
    Forwards each event to every registered observer, in registration order.

    Dispatch is synchronous; an exception raised by an observer propagates
    out of `emit` and stops the remaining observers from seeing the event.
    """

    def __init__(self, observers: list[Observer] | None = None) -> None:
        self._observers: list[Observer] = []
        for observer in observers or ():
            self.register(observer)

    def __len__(self) -> int:
        return len(self._observers)

    def register(self, observer: Observer) -> None:
        if not isinstance(observer, Observer):
            raise TypeError(
                f"observer must have a handle() method, "
                f"not {type(observer).__name__}"
            )
        self._observers.append(observer)

    def unregister(self, observer: Observer) -> None:
        self._observers.remove(observer)

    def emit(self, event: Event) -> None:
        with ProfileContext("emit"):
            for observer in self._observers:
                observer.handle(event)


class EventCollector:
    """Observer that records every event it sees."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    def handle(self, event: Event) -> None:
        self.events.append(event)

    def drain(self) -> list[Event]:
        """Returns the recorded events and forgets them."""
        events, self.events = self.events, []
        return events
