"""Tests for persistence module."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from perfguard.exceptions import CorruptDataWarning, StorageError
from perfguard.models import PerformanceDataPoint
from perfguard.persistence import (
    BASELINE_FILE,
    FileBaselineStore,
    FileHistoryStore,
    InMemoryBaselineStore,
    InMemoryHistoryStore,
    sanitize_test_name,
)
from perfguard.persistence.storage import atomic_write


def make_point(
    test_name: str = "Home Page",
    performance_score: float = 0.8,
    timestamp: str = "2026-01-01T00:00:00",
) -> PerformanceDataPoint:
    """Create a data point with the given score."""
    return PerformanceDataPoint(
        test_name=test_name,
        url="https://example.com",
        timestamp=timestamp,
        performance_score=performance_score,
        largest_contentful_paint=2000,
    )


@pytest.fixture
def history_dir(tmp_path: Path) -> Path:
    """Create a temporary history directory path."""
    return tmp_path / "performance-history"


@pytest.fixture
def history(history_dir: Path) -> FileHistoryStore:
    """Create a file history store."""
    return FileHistoryStore(history_dir)


@pytest.fixture
def baselines(history_dir: Path) -> FileBaselineStore:
    """Create a file baseline store."""
    return FileBaselineStore(history_dir)


class TestSanitizeTestName:
    """Tests for file-safe test names."""

    def test_replaces_non_alphanumeric(self) -> None:
        """Every non-alphanumeric character becomes an underscore."""
        assert sanitize_test_name("Home Page / v2") == "Home_Page___v2"

    def test_keeps_alphanumeric(self) -> None:
        """Letters and digits are unchanged."""
        assert sanitize_test_name("Checkout2") == "Checkout2"


class TestFileHistoryStore:
    """Tests for FileHistoryStore."""

    def test_append_creates_file(self, history: FileHistoryStore, history_dir: Path) -> None:
        """First append creates the directory and history file."""
        history.append("Home Page", make_point())

        path = history_dir / "Home_Page_history.json"
        assert path.exists()
        assert history.path_for("Home Page") == path

    def test_round_trip(self, history: FileHistoryStore) -> None:
        """Points load back in chronological order."""
        for score in (0.9, 0.8, 0.7):
            history.append("Home Page", make_point(performance_score=score))

        loaded = history.all("Home Page")
        assert [p.performance_score for p in loaded] == [0.9, 0.8, 0.7]

    def test_file_uses_camel_case_keys(
        self, history: FileHistoryStore, history_dir: Path
    ) -> None:
        """Persisted JSON is an array of camelCase objects."""
        history.append("Home Page", make_point())

        data = json.loads((history_dir / "Home_Page_history.json").read_text())
        assert isinstance(data, list)
        assert data[0]["testName"] == "Home Page"
        assert data[0]["performanceScore"] == 0.8

    def test_missing_history_is_empty(self, history: FileHistoryStore) -> None:
        """Unknown test names have no history."""
        assert history.all("Unknown") == []

    def test_caps_at_max_entries(self, history_dir: Path) -> None:
        """Only the most recent entries are retained."""
        store = FileHistoryStore(history_dir, max_entries=100)
        for i in range(105):
            store.append("Home", make_point(timestamp=f"run-{i}"))

        loaded = store.all("Home")
        assert len(loaded) == 100
        assert loaded[0].timestamp == "run-5"
        assert loaded[-1].timestamp == "run-104"

    def test_recent_returns_tail(self, history: FileHistoryStore) -> None:
        """recent() returns the last points in order."""
        for i in range(6):
            history.append("Home", make_point(timestamp=f"run-{i}"))

        assert [p.timestamp for p in history.recent("Home", 3)] == [
            "run-3",
            "run-4",
            "run-5",
        ]
        assert history.recent("Home", 0) == []

    def test_invalid_max_entries_rejected(self, history_dir: Path) -> None:
        """max_entries must be positive."""
        with pytest.raises(ValueError):
            FileHistoryStore(history_dir, max_entries=0)

    def test_corrupt_file_warns_and_starts_fresh(
        self, history: FileHistoryStore, history_dir: Path
    ) -> None:
        """Corrupt history is ignored with a warning, then overwritten."""
        history_dir.mkdir(parents=True)
        (history_dir / "Home_history.json").write_text("{not json")

        with pytest.warns(CorruptDataWarning):
            assert history.all("Home") == []

        with pytest.warns(CorruptDataWarning):
            history.append("Home", make_point(test_name="Home"))
        assert len(history.all("Home")) == 1

    def test_test_names_from_stored_points(self, history: FileHistoryStore) -> None:
        """Original test names are recovered from stored data."""
        history.append("Home Page", make_point(test_name="Home Page"))
        history.append("Checkout", make_point(test_name="Checkout"))

        assert history.test_names() == ["Checkout", "Home Page"]

    def test_test_names_without_directory(self, history: FileHistoryStore) -> None:
        """No directory means no test names."""
        assert history.test_names() == []

    def test_no_temp_files_left_behind(
        self, history: FileHistoryStore, history_dir: Path
    ) -> None:
        """Atomic writes leave only the final file."""
        history.append("Home", make_point())
        history.append("Home", make_point())

        assert [p.name for p in history_dir.iterdir()] == ["Home_history.json"]


class TestAtomicWrite:
    """Tests for atomic_write."""

    def test_replaces_existing_content(self, tmp_path: Path) -> None:
        """The target ends up with exactly the new content."""
        target = tmp_path / "data.json"
        target.write_text("old")

        atomic_write(target, b"new")
        assert target.read_text() == "new"

    def test_failure_raises_storage_error(self, tmp_path: Path) -> None:
        """OS errors become StorageError and the original file survives."""
        target = tmp_path / "data.json"
        target.write_text("old")

        with (
            patch("perfguard.persistence.storage.os.replace", side_effect=OSError("disk full")),
            pytest.raises(StorageError) as exc_info,
        ):
            atomic_write(target, b"new")

        assert "disk full" in str(exc_info.value)
        assert target.read_text() == "old"
        assert [p.name for p in tmp_path.iterdir()] == ["data.json"]

    def test_unwritable_directory_raises_storage_error(self, tmp_path: Path) -> None:
        """A file in place of the directory cannot be written through."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")

        with pytest.raises(StorageError):
            atomic_write(blocker / "data.json", b"new")


class TestFileBaselineStore:
    """Tests for FileBaselineStore."""

    def test_get_missing_returns_none(self, baselines: FileBaselineStore) -> None:
        """No baseline file means no baseline."""
        assert baselines.get("Home") is None
        assert baselines.all() == {}

    def test_set_if_absent_writes_once(self, baselines: FileBaselineStore) -> None:
        """Only the first point becomes the baseline."""
        assert baselines.set_if_absent("Home", make_point(performance_score=0.9)) is True
        assert baselines.set_if_absent("Home", make_point(performance_score=0.5)) is False

        stored = baselines.get("Home")
        assert stored is not None
        assert stored.performance_score == 0.9

    def test_single_file_keyed_by_test_name(
        self, baselines: FileBaselineStore, history_dir: Path
    ) -> None:
        """All baselines share one JSON object."""
        baselines.set_if_absent("Home", make_point(test_name="Home"))
        baselines.set_if_absent("Checkout", make_point(test_name="Checkout"))

        data = json.loads((history_dir / BASELINE_FILE).read_text())
        assert set(data) == {"Home", "Checkout"}
        assert data["Home"]["testName"] == "Home"

    def test_force_set_overwrites_and_restamps(self, baselines: FileBaselineStore) -> None:
        """force_set replaces the baseline with a fresh timestamp."""
        baselines.set_if_absent("Home", make_point(performance_score=0.9))

        stored = baselines.force_set("Home", make_point(performance_score=0.6))

        assert stored.performance_score == 0.6
        assert stored.timestamp != "2026-01-01T00:00:00"
        assert baselines.get("Home") == stored

    def test_corrupt_baseline_file_warns(
        self, baselines: FileBaselineStore, history_dir: Path
    ) -> None:
        """A corrupt baseline file is treated as empty."""
        history_dir.mkdir(parents=True)
        (history_dir / BASELINE_FILE).write_text("[1, 2, 3]")

        with pytest.warns(CorruptDataWarning):
            assert baselines.get("Home") is None

    @pytest.mark.skipif(
        os.name != "posix" or os.geteuid() == 0,
        reason="requires POSIX permissions as a non-root user",
    )
    def test_unreadable_file_raises_storage_error(
        self, baselines: FileBaselineStore, history_dir: Path
    ) -> None:
        """Read failures other than a missing file propagate."""
        history_dir.mkdir(parents=True)
        path = history_dir / BASELINE_FILE
        path.write_text("{}")
        path.chmod(0)
        try:
            with pytest.raises(StorageError):
                baselines.get("Home")
        finally:
            path.chmod(0o644)


class TestInMemoryStores:
    """Tests for the in-memory stores."""

    def test_history_caps_and_orders(self) -> None:
        """In-memory history honours the retention limit."""
        store = InMemoryHistoryStore(max_entries=3)
        for i in range(5):
            store.append("Home", make_point(timestamp=f"run-{i}"))

        assert [p.timestamp for p in store.all("Home")] == ["run-2", "run-3", "run-4"]
        assert store.test_names() == ["Home"]

    def test_history_returns_copies(self) -> None:
        """Mutating a returned list does not affect the store."""
        store = InMemoryHistoryStore()
        store.append("Home", make_point())

        store.all("Home").clear()
        assert len(store.all("Home")) == 1

    def test_baseline_semantics(self) -> None:
        """set_if_absent and force_set behave like the file store."""
        store = InMemoryBaselineStore()
        assert store.set_if_absent("Home", make_point(performance_score=0.9)) is True
        assert store.set_if_absent("Home", make_point(performance_score=0.1)) is False

        stored = store.force_set("Home", make_point(performance_score=0.5))
        assert store.get("Home") == stored
        assert store.all() == {"Home": stored}
