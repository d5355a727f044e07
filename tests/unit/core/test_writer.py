from __future__ import annotations

"""
Unit tests for the Append-Only Log Writer.

Verifies:
1. Exact line format and append semantics.
2. Initialization against missing and pre-existing files.
3. Rename (delete old, create new) and in-place clear.
4. Whole-line atomicity under concurrent writers.
5. Silent drop when no handle is open.
"""

import os
import threading
from pathlib import Path

import pytest

from devicelogger.core.writer import LogWriter, current_queue_name
from devicelogger.domain.levels import LogDomain, LogLevel

STAMP = "10/19/26 14:03:59"


@pytest.fixture
def writer(tmp_path: Path, frozen_clock, fixed_formatter):
    w = LogWriter(str(tmp_path), clock=frozen_clock, formatter=fixed_formatter)
    assert w.initialize("DeviceLogs") is True
    yield w
    w.close()


def test_render_line_format(writer):
    """TC-01: '[timestamp] L >> source: message [QUEUE: queue]' plus newline."""
    line = writer.render_line("Net.Client", LogLevel.WARNING, "worker-1", "retrying")

    assert line == f"[{STAMP}] W >> Net.Client: retrying [QUEUE: worker-1]\n"


def test_render_line_accepts_literal_marker(writer):
    """TC-02: Crash lines use a literal marker instead of a level."""
    line = writer.render_line("Crash", "CRASH", "MainThread", "boom")

    assert line.startswith(f"[{STAMP}] CRASH >> Crash: ")


def test_initialize_creates_empty_file(tmp_path: Path, writer):
    """TC-03: The file exists and is empty right after initialization."""
    path = tmp_path / "DeviceLogs.log"

    assert writer.path == str(path)
    assert path.exists()
    assert path.stat().st_size == 0
    assert writer.size_bytes == 0
    assert writer.is_open is True


def test_initialize_reuses_existing_content(tmp_path: Path, frozen_clock, fixed_formatter):
    """TC-04: Pre-existing content is kept and new lines are appended after it."""
    path = tmp_path / "Existing.log"
    path.write_bytes(b"previous run\n")

    w = LogWriter(str(tmp_path), clock=frozen_clock, formatter=fixed_formatter)
    try:
        assert w.initialize("Existing") is True
        assert w.size_bytes == len(b"previous run\n")

        w.write("src", LogLevel.INFO, LogDomain.APP, "q", "next run")
    finally:
        w.close()

    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "previous run"
    assert lines[1] == f"[{STAMP}] I >> src: next run [QUEUE: q]"


def test_initialize_creates_missing_root(tmp_path: Path, frozen_clock, fixed_formatter):
    """TC-05: A missing storage root is created on demand."""
    root = tmp_path / "nested" / "root"
    w = LogWriter(str(root), clock=frozen_clock, formatter=fixed_formatter)
    try:
        assert w.initialize("DeviceLogs") is True
    finally:
        w.close()

    assert (root / "DeviceLogs.log").exists()


def test_write_appends_in_order_and_tracks_size(tmp_path: Path, writer):
    """TC-06: Lines appear in call order and the cached size follows the file."""
    assert writer.write("a", LogLevel.INFO, LogDomain.APP, "q", "first") is True
    assert writer.write("b", LogLevel.ERROR, LogDomain.DB, "q", "second") is True

    path = tmp_path / "DeviceLogs.log"
    lines = path.read_text(encoding="utf-8").splitlines()

    assert [line.split(" >> ")[1] for line in lines] == [
        "a: first [QUEUE: q]",
        "b: second [QUEUE: q]",
    ]
    assert writer.size_bytes == path.stat().st_size


def test_write_is_dropped_without_handle(tmp_path: Path, writer):
    """TC-07: A closed writer drops lines silently."""
    writer.close()

    assert writer.write("a", LogLevel.ERROR, LogDomain.APP, "q", "lost") is False
    assert (tmp_path / "DeviceLogs.log").read_bytes() == b""


def test_write_drops_unencodable_message(tmp_path: Path, writer):
    """TC-08: A message that cannot be encoded is skipped, not raised."""
    assert writer.write("a", LogLevel.ERROR, LogDomain.APP, "q", "bad \udcff") is False
    assert writer.write("a", LogLevel.ERROR, LogDomain.APP, "q", "good") is True

    assert (tmp_path / "DeviceLogs.log").read_text(encoding="utf-8").count("\n") == 1


def test_write_gives_up_when_lock_is_held(writer):
    """TC-09: A bounded wait returns False if another thread holds the lock."""
    acquired = threading.Event()
    release = threading.Event()

    def hold():
        with writer.lock:
            acquired.set()
            release.wait(5)

    t = threading.Thread(target=hold)
    t.start()
    try:
        acquired.wait(5)
        assert writer.write("a", LogLevel.ERROR, LogDomain.APP, "q", "late", timeout=0.05) is False
    finally:
        release.set()
        t.join()


def test_rename_deletes_old_and_creates_new(tmp_path: Path, writer):
    """TC-10: Renaming removes the old file and starts an empty new one."""
    writer.write("a", LogLevel.INFO, LogDomain.APP, "q", "old data")

    assert writer.rename("Test") is True

    assert not (tmp_path / "DeviceLogs.log").exists()
    assert (tmp_path / "Test.log").read_bytes() == b""
    assert writer.file_name == "Test"
    assert writer.size_bytes == 0

    writer.write("a", LogLevel.INFO, LogDomain.APP, "q", "new data")
    assert "new data" in (tmp_path / "Test.log").read_text(encoding="utf-8")


def test_rename_to_same_name_is_noop(tmp_path: Path, writer):
    """TC-11: Renaming to the current name keeps the content."""
    writer.write("a", LogLevel.INFO, LogDomain.APP, "q", "kept")

    assert writer.rename("DeviceLogs") is False
    assert "kept" in (tmp_path / "DeviceLogs.log").read_text(encoding="utf-8")


def test_clear_truncates_in_place(tmp_path: Path, writer):
    """TC-12: Clearing empties the file and later writes land at offset zero."""
    writer.write("a", LogLevel.INFO, LogDomain.APP, "q", "before")

    assert writer.clear() is True
    assert (tmp_path / "DeviceLogs.log").read_bytes() == b""
    assert writer.size_bytes == 0

    writer.write("a", LogLevel.INFO, LogDomain.APP, "q", "after")
    content = (tmp_path / "DeviceLogs.log").read_text(encoding="utf-8")
    assert content.startswith(f"[{STAMP}] I >> a: after")
    assert "before" not in content


def test_clear_recreates_deleted_file(tmp_path: Path, writer):
    """TC-13: Clearing after the file vanished re-creates it empty."""
    writer.close()
    os.remove(tmp_path / "DeviceLogs.log")

    assert writer.clear() is True
    assert (tmp_path / "DeviceLogs.log").read_bytes() == b""
    assert writer.is_open is True


def test_read_all_returns_none_for_missing_file(tmp_path: Path, writer):
    """TC-14: Reading a missing file yields None."""
    writer.close()
    os.remove(tmp_path / "DeviceLogs.log")

    assert writer.read_all() is None


def test_concurrent_writes_never_interleave(tmp_path: Path, writer):
    """TC-15: K threads x N lines give K*N intact lines with per-thread order."""
    threads_count, per_thread = 8, 50

    def worker(idx: int):
        for seq in range(per_thread):
            writer.write(f"t{idx}", LogLevel.INFO, LogDomain.APP, current_queue_name(), f"{idx}-{seq}")

    threads = [threading.Thread(target=worker, args=(i,), name=f"worker-{i}") for i in range(threads_count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    lines = (tmp_path / "DeviceLogs.log").read_text(encoding="utf-8").splitlines()
    assert len(lines) == threads_count * per_thread

    seen = {i: [] for i in range(threads_count)}
    for line in lines:
        assert line.startswith(f"[{STAMP}] I >> t")
        body = line.split(": ", 1)[1]
        message, queue = body.split(" [QUEUE: ")
        idx, seq = (int(part) for part in message.split("-"))
        assert queue == f"worker-{idx}]"
        seen[idx].append(seq)

    for idx in range(threads_count):
        assert seen[idx] == list(range(per_thread))


def test_current_queue_name_is_thread_name():
    """TC-16: The queue label is the emitting thread's name."""
    result = {}

    def capture():
        result["name"] = current_queue_name()

    t = threading.Thread(target=capture, name="io-queue")
    t.start()
    t.join()

    assert result["name"] == "io-queue"
    assert current_queue_name() == threading.current_thread().name
