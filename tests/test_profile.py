"""
Hot path profiling tests.

Profiling is switched on by STEPJSON_PROFILE at import time, so these tests
work whichever way the suite was started.
"""

import stepjson
from stepjson import HotPathStats
from stepjson._profile import PROFILE_HOT_PATHS
from stepjson._profile import ProfileContext


def test_hot_path_stats_accumulate() -> None:
    stats = HotPathStats("next_token")
    assert stats.mean_time_ns == 0.0

    stats.record_call(100)
    stats.record_call(300)
    assert stats.call_count == 2
    assert stats.total_time_ns == 400
    assert stats.mean_time_ns == 200.0


def test_profile_context_is_transparent() -> None:
    """
    Validates that profiled sections behave like plain blocks.
    """
    with ProfileContext("section") as context:
        value = 1 + 1
    assert value == 2
    assert context is not None


def test_parsing_records_sections() -> None:
    stepjson.clear_hot_path_stats()
    stepjson.loads('{"a": [1, 2, 3]}')
    stats = stepjson.get_hot_path_stats()

    if not PROFILE_HOT_PATHS:
        assert stats == {}
        return

    assert {"next_token", "parse_next", "emit"} <= set(stats)
    assert stats["emit"].call_count == 8
    stepjson.clear_hot_path_stats()
    assert stepjson.get_hot_path_stats() == {}
