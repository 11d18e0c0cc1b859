"""
Test data generators for JSON parsing benchmarks.

Documents are produced from a seeded random generator so that every run
parses the same input:
- Small objects and record arrays of configurable length
- Deeply nested structures
- String-heavy content with escape sequences
"""

import json
import random
import string
from collections.abc import Iterator
from typing import Any

SEED = 20240115
_ESCAPES = ['\\"', "\\\\", "\\/", "\\b", "\\f", "\\n", "\\r", "\\t"]
_ESCAPE_PROBABILITY = 0.3


def generate_test_data(data_type: str, size: int = 200) -> str:
    """Generates a JSON document of the given kind."""
    rng = random.Random(SEED)
    generators = {
        "small_object": lambda: _small_object(rng),
        "records": lambda: json.dumps(list(_records(rng, size))),
        "nested_structure": lambda: json.dumps(_nested(rng, 7)),
        "string_heavy": lambda: _string_heavy(rng, size),
    }

    if data_type not in generators:
        raise ValueError(f"Unknown data type: {data_type}")

    return generators[data_type]()


def records_document(count: int) -> Iterator[str]:
    """
    Yields a JSON array of `count` records piece by piece.

    Used to build documents much larger than the data parsed out of them.
    """
    rng = random.Random(SEED)
    yield "["
    for i, record in enumerate(_records(rng, count)):
        if i:
            yield ","
        yield json.dumps(record)
    yield "]"


def _small_object(rng: random.Random) -> str:
    data = {
        "id": rng.randint(10000, 99999),
        "name": _random_string(rng, 12),
        "email": f"{_random_string(rng, 8)}@example.com",
        "active": True,
        "balance": 1234.56,
        "metadata": {"created": "2024-01-15T10:30:00Z", "source": "api"},
    }
    return json.dumps(data)


def _records(rng: random.Random, count: int) -> Iterator[dict[str, Any]]:
    for i in range(count):
        yield {
            "id": f"txn_{i:06d}",
            "amount": round(rng.uniform(1.0, 1000.0), 2),
            "currency": rng.choice(["USD", "EUR", "GBP", "JPY"]),
            "settled": rng.choice([True, False]),
            "refund": None,
            "tags": [_random_string(rng, 6) for _ in range(3)],
        }


def _nested(rng: random.Random, depth: int) -> dict[str, Any]:
    if depth <= 0:
        return {"value": _random_string(rng, 10)}

    return {
        "level": depth,
        "data": _random_string(rng, 15),
        "items": [_nested(rng, depth - 1) for _ in range(2)],
        "scores": [rng.randint(-1000, 1000) for _ in range(4)],
    }


def _string_heavy(rng: random.Random, count: int) -> str:
    """Builds the JSON text by hand so escape sequences appear verbatim."""

    def escaped_string() -> str:
        chars = []
        for _ in range(50):
            if rng.random() < _ESCAPE_PROBABILITY:
                chars.append(rng.choice(_ESCAPES))
            else:
                chars.append(rng.choice(string.ascii_letters + " "))
        return '"' + "".join(chars) + '"'

    items = [escaped_string() for _ in range(count)]
    unicode = [f'"\\u{rng.randint(0x00A0, 0x07FF):04x}"' for _ in range(50)]
    return (
        '{"strings": [' + ", ".join(items) + '], '
        '"unicode": [' + ", ".join(unicode) + "]}"
    )


def _random_string(rng: random.Random, length: int) -> str:
    return "".join(rng.choices(string.ascii_letters, k=length))
