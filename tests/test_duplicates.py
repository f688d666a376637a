"""Unit tests for DuplicateTracker."""

from registry_loader.loading import DuplicateTracker


class TestDuplicateTracker:
    def test_seeded_keys_are_known(self) -> None:
        tracker = DuplicateTracker()
        tracker.seed(["a", "b"])
        assert tracker.has("a")
        assert not tracker.has("c")
        assert len(tracker) == 2

    def test_add_and_discard(self) -> None:
        tracker = DuplicateTracker()
        tracker.add("x")
        assert "x" in tracker
        tracker.discard("x")
        assert "x" not in tracker
        tracker.discard("never-added")

    def test_none_is_never_a_duplicate(self) -> None:
        tracker = DuplicateTracker()
        tracker.seed([None, "a"])
        tracker.add(None)
        assert not tracker.has(None)
        assert len(tracker) == 1

    def test_keys_are_case_sensitive(self) -> None:
        tracker = DuplicateTracker()
        tracker.add("Context7")
        assert not tracker.has("context7")
