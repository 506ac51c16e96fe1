"""Tests for merging local and remote recall results."""

from lucidmem.memory.base import MemoryCategory, MemoryEntry
from lucidmem.memory.merge import merge_results


def entry(key: str, content: str, id: str | None = None, score: float | None = None) -> MemoryEntry:
    return MemoryEntry(
        id=id or f"id-{key}",
        key=key,
        content=content,
        category=MemoryCategory.core(),
        timestamp="2026-01-01T00:00:00+00:00",
        score=score,
    )


LOCAL = [entry("lang", "User prefers Rust"), entry("editor", "Uses Helix")]
REMOTE = [entry("lucid_0", "Use token refresh middleware"), entry("lucid_1", "Working in src/auth.rs")]


class TestMergeResults:
    def test_zero_limit(self):
        assert merge_results(LOCAL, REMOTE, 0) == []

    def test_local_first(self):
        merged = merge_results(LOCAL, REMOTE, 10)
        assert [e.key for e in merged] == ["lang", "editor", "lucid_0", "lucid_1"]

    def test_limit_caps_output(self):
        merged = merge_results(LOCAL, REMOTE, 3)
        assert [e.key for e in merged] == ["lang", "editor", "lucid_0"]

    def test_limit_smaller_than_primary(self):
        assert merge_results(LOCAL, REMOTE, 1) == [LOCAL[0]]

    def test_idempotent_on_identical_inputs(self):
        assert merge_results(LOCAL, LOCAL, 5) == LOCAL
        assert merge_results(LOCAL, LOCAL, 1) == LOCAL[:1]

    def test_dedup_is_case_insensitive(self):
        dup = entry("LANG", "user prefers rust", id="other", score=0.9)
        merged = merge_results(LOCAL, [dup], 5)
        assert merged == LOCAL

    def test_first_occurrence_wins(self):
        first = entry("k", "same", id="first", score=0.1)
        second = entry("K", "SAME", id="second", score=1.0)
        merged = merge_results([first], [second], 5)
        assert len(merged) == 1
        assert merged[0].id == "first"

    def test_same_key_different_content_kept(self):
        merged = merge_results([entry("k", "one")], [entry("k", "two")], 5)
        assert len(merged) == 2

    def test_duplicates_within_one_list(self):
        merged = merge_results([entry("a", "x"), entry("a", "x")], [], 5)
        assert len(merged) == 1

    def test_empty_inputs(self):
        assert merge_results([], [], 5) == []
        assert merge_results([], REMOTE, 5) == REMOTE
