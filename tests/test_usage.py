"""Tests for usage extraction from JSONL session logs."""

from __future__ import annotations

import json
from unittest.mock import patch

from buffer_dashboard.core.usage import (
    extract_latest_usage,
    find_usage,
    latest_usage_from_log,
)


def _nest(depth: int, leaf: dict) -> dict:
    record = leaf
    for _ in range(depth):
        record = {"child": record}
    return record


class TestFindUsage:
    def test_top_level(self):
        usage = find_usage({"usage": {"input": 10, "output": 2}})
        assert usage == {"input": 10, "output": 2}

    def test_nested_in_message(self):
        record = {"type": "message", "message": {"role": "assistant", "usage": {"cacheRead": 7}}}
        assert find_usage(record) == {"cacheRead": 7}

    def test_nested_inside_list(self):
        record = {"events": [{"kind": "text"}, {"meta": {"usage": {"input": 3}}}]}
        assert find_usage(record) == {"input": 3}

    def test_usage_without_input_or_cache_read_is_ignored(self):
        assert find_usage({"usage": {"output": 50, "totalTokens": 80}}) is None

    def test_non_mapping_usage_is_ignored(self):
        assert find_usage({"usage": 123, "other": {"usage": "x"}}) is None

    def test_descends_past_unqualified_usage(self):
        record = {"usage": {"output": 1, "inner": {"usage": {"input": 9}}}}
        assert find_usage(record) == {"input": 9}

    def test_first_in_traversal_order_wins(self):
        record = {"a": {"usage": {"input": 1}}, "b": {"usage": {"input": 2}}}
        assert find_usage(record) == {"input": 1}

    def test_scalars_and_none(self):
        assert find_usage(None) is None
        assert find_usage(42) is None
        assert find_usage("usage") is None

    def test_depth_guard(self):
        deep = _nest(50, {"usage": {"input": 1}})
        assert find_usage(deep, max_depth=10) is None
        assert find_usage(_nest(20, {"usage": {"input": 1}})) == {"input": 1}


class TestExtractLatestUsage:
    def test_empty_sequence(self):
        assert extract_latest_usage([]) is None

    def test_only_unparsable_lines(self):
        assert extract_latest_usage(["not json", "{broken", ""]) is None

    def test_third_from_end_line_is_used(self):
        lines = [
            json.dumps({"usage": {"input": 1, "cacheRead": 1}}),
            json.dumps({"usage": {"input": 100, "cacheRead": 50}}),
            json.dumps({"type": "tool_call", "name": "read"}),
            '{"type": "message", "usa',  # torn final write
        ]
        sample = extract_latest_usage(lines)
        assert sample is not None
        assert sample.context == 150
        assert sample.input == 100
        assert sample.cache_read == 50

    def test_newest_wins(self):
        lines = [
            json.dumps({"usage": {"input": 10}}),
            json.dumps({"usage": {"input": 20}}),
        ]
        assert extract_latest_usage(lines).context == 20

    def test_context_sums_input_and_cache(self):
        line = json.dumps({"message": {"usage": {
            "input": 12, "cacheRead": 3000, "cacheWrite": 400, "output": 77,
        }}})
        sample = extract_latest_usage([line])
        assert sample.context == 3412
        assert sample.output == 77
        assert sample.to_dict() == {
            "context": 3412, "input": 12, "cacheRead": 3000, "cacheWrite": 400, "output": 77,
        }

    def test_missing_and_non_numeric_parts_count_as_zero(self):
        line = json.dumps({"usage": {"cacheRead": 40, "input": "lots", "cacheWrite": True}})
        sample = extract_latest_usage([line])
        assert sample.context == 40
        assert sample.input is None
        assert sample.cache_write is None

    def test_only_window_is_examined(self):
        lines = [json.dumps({"usage": {"input": 5}})] + ["{}"] * 20
        assert extract_latest_usage(lines, max_lines=20) is None
        assert extract_latest_usage(lines, max_lines=21).context == 5

    def test_array_records(self):
        line = json.dumps([{"noise": 1}, {"usage": {"input": 4}}])
        assert extract_latest_usage([line]).context == 4


class TestLatestUsageFromLog:
    def test_missing_file(self, tmp_path):
        assert latest_usage_from_log(tmp_path / "nope.jsonl") is None

    def test_reads_tail_of_file(self, tmp_path):
        path = tmp_path / "s.jsonl"
        records = [{"usage": {"input": i}} for i in range(100)]
        path.write_text("\n".join(json.dumps(r) for r in records) + "\n{\"torn")
        sample = latest_usage_from_log(path, max_lines=20)
        assert sample.context == 99

    def test_timeout_means_unavailable(self, tmp_path):
        path = tmp_path / "s.jsonl"
        path.write_text(json.dumps({"usage": {"input": 1}}) + "\n")
        with patch(
            "buffer_dashboard.core.usage.read_tail_lines",
            side_effect=TimeoutError("slow"),
        ):
            assert latest_usage_from_log(path) is None

    def test_read_error_means_unavailable(self, tmp_path):
        path = tmp_path / "s.jsonl"
        path.write_text("{}\n")
        with patch(
            "buffer_dashboard.core.usage.read_tail_lines",
            side_effect=PermissionError("denied"),
        ):
            assert latest_usage_from_log(path) is None
