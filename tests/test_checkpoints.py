"""
Tests for checkpoint persistence and replay selection.
"""
from datetime import timedelta

import pytest

from conftest import make_event, utc
from core.errors import FilesystemError
from shared.storage.checkpoints import CheckpointStore, parse_rfc3339
from shared.storage.paths import get_checkpoint_path

WINDOW_END = utc(2022, 12, 10, 6)


class TestRead:
    def test_default_horizon_without_record(self, tmp_path):
        store = CheckpointStore(tmp_path, "4242")
        assert store.read(2022, WINDOW_END) == WINDOW_END - timedelta(days=28)

    def test_unparseable_record_falls_back_to_default(self, tmp_path):
        store = CheckpointStore(tmp_path, "4242")
        store.path(2022).write_text("yesterday-ish", encoding="utf-8")
        assert store.read(2022, WINDOW_END) == WINDOW_END - timedelta(days=28)

    def test_reads_back_advanced_value(self, tmp_path):
        store = CheckpointStore(tmp_path, "4242")
        store.advance(2022, utc(2022, 12, 3, 5, 10, 7))
        assert store.read(2022, WINDOW_END) == utc(2022, 12, 3, 5, 10, 7)

    def test_records_are_per_year_and_leaderboard(self, tmp_path):
        CheckpointStore(tmp_path, "4242").advance(2021, utc(2021, 12, 1, 6))
        assert CheckpointStore(tmp_path, "4242").read(2022, WINDOW_END) == WINDOW_END - timedelta(days=28)
        assert CheckpointStore(tmp_path, "9999").read(2021, WINDOW_END) == WINDOW_END - timedelta(days=28)

    def test_accepts_zulu_suffix(self, tmp_path):
        store = CheckpointStore(tmp_path, "4242")
        store.path(2022).write_text("2022-12-02T05:00:00Z\n", encoding="utf-8")
        assert store.read(2022, WINDOW_END) == utc(2022, 12, 2, 5)


class TestAdvance:
    def test_file_is_named_from_year_and_leaderboard(self, tmp_path):
        store = CheckpointStore(tmp_path, "4242")
        store.advance(2022, utc(2022, 12, 1, 5))
        path = get_checkpoint_path(tmp_path, 2022, "4242")
        assert path.name == "timestamp_2022_4242"
        assert parse_rfc3339(path.read_text(encoding="utf-8")) == utc(2022, 12, 1, 5)

    def test_overwrites_previous_record(self, tmp_path):
        store = CheckpointStore(tmp_path, "4242")
        store.advance(2022, utc(2022, 12, 1, 5))
        store.advance(2022, utc(2022, 12, 2, 5))
        assert store.read(2022, WINDOW_END) == utc(2022, 12, 2, 5)
        assert [p.name for p in tmp_path.iterdir()] == ["timestamp_2022_4242"]

    def test_write_failure_is_filesystem_error(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")
        store = CheckpointStore(blocker, "4242")
        with pytest.raises(FilesystemError):
            store.advance(2022, utc(2022, 12, 1, 5))


class TestPending:
    def test_bounds_are_exclusive(self):
        checkpoint = utc(2022, 12, 1, 5)
        events = [
            make_event("a", 1, after=timedelta(0)),
            make_event("b", 2, after=timedelta(minutes=1)),
            make_event("c", 3, day=10, after=timedelta(hours=1)),
            make_event("d", 4, day=10, after=timedelta(hours=2)),
        ]
        pending = CheckpointStore.pending(events, checkpoint, WINDOW_END)
        assert [e.participant.name for e in pending] == ["b"]

    def test_default_horizon_excludes_older_events(self, tmp_path):
        store = CheckpointStore(tmp_path, "4242")
        horizon = store.read(2022, WINDOW_END)
        old = make_event("old", 1, day=1, after=horizon - utc(2022, 12, 1, 5))
        older = make_event("older", 2, day=1, after=horizon - utc(2022, 12, 1, 5) - timedelta(days=1))
        fresh = make_event("fresh", 3, day=9)
        pending = store.pending([older, old, fresh], horizon, WINDOW_END)
        assert [e.participant.name for e in pending] == ["fresh"]

    def test_replay_after_checkpoint_is_empty(self, tmp_path):
        store = CheckpointStore(tmp_path, "4242")
        events = [make_event("a", 1, day=d) for d in range(1, 6)]

        delivered = store.pending(events, store.read(2022, WINDOW_END), WINDOW_END)
        for e in delivered:
            store.advance(2022, e.timestamp)

        assert len(delivered) == 5
        assert store.pending(events, store.read(2022, WINDOW_END), WINDOW_END) == []
