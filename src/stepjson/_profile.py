"""
Hot path profiling for the tokenizer, parse steps and event emission.

Enabled by setting STEPJSON_PROFILE in the environment; otherwise every
ProfileContext is a no-op.
"""

import os
import time
from dataclasses import dataclass
from typing import Any

PROFILE_HOT_PATHS = __debug__ and "STEPJSON_PROFILE" in os.environ


@dataclass
class HotPathStats:
    """Accumulated timings for one profiled section."""

    section: str
    call_count: int = 0
    total_time_ns: int = 0

    def record_call(self, duration_ns: int) -> None:
        self.call_count += 1
        self.total_time_ns += duration_ns

    @property
    def mean_time_ns(self) -> float:
        if not self.call_count:
            return 0.0
        return self.total_time_ns / self.call_count


if PROFILE_HOT_PATHS:
    _hot_path_stats: dict[str, HotPathStats] = {}

    class ProfileContext:
        """Times the enclosed block and files it under `section`."""

        def __init__(self, section: str) -> None:
            self.section = section
            self.start_time = 0

        def __enter__(self) -> "ProfileContext":
            self.start_time = time.perf_counter_ns()
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            duration = time.perf_counter_ns() - self.start_time
            stats = _hot_path_stats.get(self.section)
            if stats is None:
                stats = _hot_path_stats[self.section] = HotPathStats(
                    self.section
                )
            stats.record_call(duration)

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        """Returns a snapshot of the collected statistics."""
        return _hot_path_stats.copy()

    def clear_hot_path_stats() -> None:
        _hot_path_stats.clear()

else:

    class ProfileContext:  # type: ignore[no-redef]
        """Stands in for the timer when profiling is off."""

        def __init__(self, section: str) -> None:
            pass

        def __enter__(self) -> "ProfileContext":
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            pass

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        """Returns an empty snapshot, nothing is collected."""
        return {}

    def clear_hot_path_stats() -> None:
        pass
