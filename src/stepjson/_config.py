"""Parser configuration and shared type aliases."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from typing import TypeAlias

# Recursive definition of decoded JSON values
JsonValue = (
    str | int | float | bool | None | dict[str, "JsonValue"] | list["JsonValue"]
)
Position: TypeAlias = int

# Hooks can return custom types
ObjectHook = Callable[[dict[str, Any]], Any] | None
ObjectPairsHook = Callable[[list[tuple[str, Any]]], Any] | None
ParseFloatHook = Callable[[str], Any] | None
ParseIntHook = Callable[[str], Any] | None

DEFAULT_CHUNK_SIZE = 4096


@dataclass(frozen=True)
class ParseConfig:
    """
    Immutable settings shared by the source, tokenizer, parser and handlers.

    `strict` rejects raw control characters inside strings. `escapes`
    turns backslash escape handling on in string literals; when off, a
    string ends at the first closing quote and its text is taken verbatim.
    `max_depth` bounds the number of open arrays and objects. `chunk_size`
    is the number of characters requested from the underlying stream per
    read.
    """

    strict: bool = True
    escapes: bool = True
    parse_int: ParseIntHook = None
    parse_float: ParseFloatHook = None
    object_hook: ObjectHook = None
    object_pairs_hook: ObjectPairsHook = None
    max_depth: int | None = None
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self) -> None:
        if not isinstance(self.strict, bool):
            raise TypeError("strict must be a boolean")
        if not isinstance(self.escapes, bool):
            raise TypeError("escapes must be a boolean")
        if self.max_depth is not None and (
            not isinstance(self.max_depth, int) or self.max_depth < 1
        ):
            raise ValueError("max_depth must be a positive integer or None")
        if not isinstance(self.chunk_size, int) or self.chunk_size < 1:
            raise ValueError("chunk_size must be a positive integer")
