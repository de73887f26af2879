"""Tests for the freshness subsystem: staleness decisions and watching."""

from __future__ import annotations

import os
import time
from pathlib import Path
from types import SimpleNamespace

import pytest

from texweave.freshness import SourceWatcher, is_stale, modification_time
from texweave.freshness.watcher import _SourceEventHandler
from texweave.ledger import PathLedger


def _touch(path: Path, mtime: int) -> Path:
    path.touch()
    os.utime(path, (mtime, mtime))
    return path


# ── is_stale ─────────────────────────────────────────────────────────


class TestIsStale:
    def test_no_entry_is_stale(self, tmp_path: Path):
        f = _touch(tmp_path / "doc.tex", 1_000)
        assert is_stale(f, PathLedger()) is True

    def test_entry_in_future_is_fresh(self, tmp_path: Path):
        f = _touch(tmp_path / "doc.tex", 1_000)
        ledger = PathLedger()
        ledger.record(f, 5_000)

        assert is_stale(f, ledger) is False

    def test_touched_after_record_is_stale(self, tmp_path: Path):
        f = _touch(tmp_path / "doc.tex", 1_000)
        ledger = PathLedger()
        ledger.record(f, 2_000)
        os.utime(f, (3_000, 3_000))

        assert is_stale(f, ledger) is True

    def test_equal_second_is_fresh(self, tmp_path: Path):
        f = _touch(tmp_path / "doc.tex", 2_000)
        ledger = PathLedger()
        ledger.record(f, 2_000)

        assert is_stale(f, ledger) is False

    def test_sub_second_difference_is_fresh(self, tmp_path: Path):
        f = tmp_path / "doc.tex"
        f.touch()
        os.utime(f, (2_000.7, 2_000.7))
        ledger = PathLedger()
        ledger.record(f, 2_000)

        assert is_stale(f, ledger) is False

    def test_lookup_uses_canonical_path(self, tmp_path: Path):
        real = tmp_path / "real"
        real.mkdir()
        f = _touch(real / "doc.tex", 1_000)
        link = tmp_path / "link"
        link.symlink_to(real, target_is_directory=True)
        ledger = PathLedger()
        ledger.record(f, 5_000)

        assert is_stale(link / "doc.tex", ledger) is False

    def test_unreadable_mtime_raises(self, tmp_path: Path):
        f = tmp_path / "gone.tex"
        ledger = PathLedger()
        ledger.record(f, 5_000)

        with pytest.raises(OSError):
            is_stale(f, ledger)

    def test_modification_time_is_whole_seconds(self, tmp_path: Path):
        f = tmp_path / "doc.tex"
        f.touch()
        os.utime(f, (1_234.9, 1_234.9))

        assert modification_time(f) == 1_234


# ── Watcher ──────────────────────────────────────────────────────────


def _event(src: str, event_type: str = "modified", dest: str = "", is_directory: bool = False):
    return SimpleNamespace(
        src_path=src, dest_path=dest, event_type=event_type, is_directory=is_directory
    )


class TestSourceEventHandler:
    def _handler(self, ignore=(), callback=None):
        marked: list[str] = []
        handler = _SourceEventHandler(
            extension=".tex",
            ignore_dirs=tuple(ignore),
            mark=marked.append,
            callback=callback,
        )
        return handler, marked

    def test_marks_source_files(self):
        handler, marked = self._handler()
        handler.on_any_event(_event("/r/a.tex"))
        assert marked == ["/r/a.tex"]

    def test_ignores_other_extensions(self):
        handler, marked = self._handler()
        handler.on_any_event(_event("/r/a.html"))
        handler.on_any_event(_event("/r/.texweave_ledger"))
        assert marked == []

    def test_ignores_directories(self):
        handler, marked = self._handler()
        handler.on_any_event(_event("/r/chapter.tex", is_directory=True))
        assert marked == []

    def test_ignores_output_directory(self):
        handler, marked = self._handler(ignore=["/r/html"])
        handler.on_any_event(_event("/r/html/a.tex"))
        handler.on_any_event(_event("/r/htmlish/a.tex"))
        assert marked == ["/r/htmlish/a.tex"]

    def test_read_only_access_ignored(self):
        handler, marked = self._handler()
        handler.on_any_event(_event("/r/a.tex", event_type="opened"))
        handler.on_any_event(_event("/r/a.tex", event_type="closed_no_write"))
        assert marked == []

    def test_write_events_marked(self):
        handler, marked = self._handler()
        for event_type in ("created", "modified", "deleted", "closed"):
            handler.on_any_event(_event("/r/a.tex", event_type=event_type))
        assert marked == ["/r/a.tex"] * 4

    def test_move_marks_destination(self):
        handler, marked = self._handler()
        handler.on_any_event(_event("/r/.a.tex.swp", event_type="moved", dest="/r/a.tex"))
        assert marked == ["/r/a.tex"]

    def test_callback_errors_are_contained(self):
        def boom(event_type, path):
            raise RuntimeError("nope")

        handler, marked = self._handler(callback=boom)
        handler.on_any_event(_event("/r/a.tex"))
        assert marked == ["/r/a.tex"]


class TestSourceWatcherDebounce:
    def test_take_ready_waits_for_quiet_period(self, tmp_path: Path):
        now = [100.0]
        watcher = SourceWatcher(tmp_path, debounce_seconds=1.0, clock=lambda: now[0])
        watcher._mark(str(tmp_path / "a.tex"))

        assert watcher.take_ready() == set()
        assert watcher.dirty_paths == {str(tmp_path / "a.tex")}

        now[0] = 101.5
        assert watcher.take_ready() == {str(tmp_path / "a.tex")}
        assert watcher.take_ready() == set()
        assert watcher.dirty_paths == set()

    def test_new_event_restarts_window(self, tmp_path: Path):
        now = [100.0]
        watcher = SourceWatcher(tmp_path, debounce_seconds=1.0, clock=lambda: now[0])
        watcher._mark("a.tex")
        now[0] = 100.8
        watcher._mark("b.tex")
        now[0] = 101.2

        assert watcher.take_ready() == set()

        now[0] = 102.0
        assert watcher.take_ready() == {"a.tex", "b.tex"}

    def test_detects_real_file_changes(self, tmp_path: Path):
        watcher = SourceWatcher(tmp_path, debounce_seconds=0.0)
        with watcher:
            time.sleep(0.3)
            (tmp_path / "new.tex").write_text("x")

            deadline = time.monotonic() + 3.0
            found: set[str] = set()
            while time.monotonic() < deadline and not found:
                found = watcher.take_ready()
                time.sleep(0.05)

        assert any(p.endswith("new.tex") for p in found)

    def test_reading_a_file_does_not_trigger(self, tmp_path: Path):
        doc = tmp_path / "doc.tex"
        doc.write_text("x")
        watcher = SourceWatcher(tmp_path, debounce_seconds=0.0)
        with watcher:
            time.sleep(0.3)
            doc.read_text()
            time.sleep(0.5)
            found = watcher.take_ready()

        assert found == set()

    def test_stop_is_idempotent(self, tmp_path: Path):
        watcher = SourceWatcher(tmp_path)
        watcher.stop()
        watcher.start()
        watcher.start()
        watcher.stop()
        watcher.stop()
