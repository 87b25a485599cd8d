import logging
import shutil
from pathlib import Path

import pytest

from scrapers.download_watcher import DownloadWatcher
from scrapers.exceptions import DownloadDirectoryLost, DownloadTimeout


class FakeClock:
    """Virtual time: sleep() advances the clock and runs an optional hook."""

    def __init__(self, on_sleep=None):
        self.now = 0.0
        self.sleeps = []
        self.on_sleep = on_sleep

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        if self.on_sleep:
            self.on_sleep(len(self.sleeps))


def _watcher(directory, clock, **kwargs):
    kwargs.setdefault("timeout", 5.0)
    kwargs.setdefault("poll_interval", 1.0)
    kwargs.setdefault("settle_delay", 0.5)
    return DownloadWatcher(directory, sleep=clock.sleep, clock=clock, **kwargs)


def _snapshot(directory):
    return sorted((p.name, p.stat().st_size, p.stat().st_mtime_ns) for p in directory.iterdir())


def test_resolves_stable_file(tmp_path):
    export = tmp_path / "transactions.csv"
    export.write_text("id,amount\n1,10.00\n")
    clock = FakeClock()

    assert _watcher(tmp_path, clock).wait() == export
    assert clock.sleeps == [0.5]


def test_waits_for_file_to_appear(tmp_path):
    def appear(n):
        if n == 2:
            (tmp_path / "transactions.csv").write_text("id\n1\n")

    clock = FakeClock(on_sleep=appear)
    found = _watcher(tmp_path, clock).wait()

    assert found.name == "transactions.csv"
    assert clock.sleeps == [1.0, 1.0, 0.5]


def test_ignores_partial_and_non_matching_files(tmp_path):
    (tmp_path / "transactions.csv.crdownload").write_text("partial")
    (tmp_path / "readme.txt").write_text("nope")
    (tmp_path / "empty.csv").touch()
    clock = FakeClock()

    with pytest.raises(DownloadTimeout):
        _watcher(tmp_path, clock, timeout=3.0).wait()


def test_growing_file_times_out_and_removes_directory(tmp_path):
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    export = scratch / "transactions.csv"
    export.write_text("id\n")

    def grow(_):
        if scratch.exists():
            with export.open("a") as fh:
                fh.write("1\n")

    clock = FakeClock(on_sleep=grow)
    with pytest.raises(DownloadTimeout, match="after 5 seconds"):
        _watcher(scratch, clock).wait()

    assert not scratch.exists()


def test_directory_deleted_mid_poll(tmp_path):
    scratch = tmp_path / "scratch"
    scratch.mkdir()

    def delete(n):
        if n == 1:
            shutil.rmtree(scratch)

    clock = FakeClock(on_sleep=delete)
    with pytest.raises(DownloadDirectoryLost):
        _watcher(scratch, clock).wait()
    assert len(clock.sleeps) == 1


def test_missing_directory_rejected_up_front(tmp_path):
    with pytest.raises(DownloadDirectoryLost):
        DownloadWatcher(tmp_path / "missing")


def test_polling_does_not_touch_directory(tmp_path):
    (tmp_path / "transactions.csv").write_text("id\n1\n")
    (tmp_path / "other.txt").write_text("x")
    before = _snapshot(tmp_path)

    _watcher(tmp_path, FakeClock()).wait()

    assert _snapshot(tmp_path) == before


def test_stable_checks_require_consecutive_reads(tmp_path):
    export = tmp_path / "transactions.csv"
    export.write_text("id\n")

    def grow_once(n):
        # grows during the second settle read of the first attempt only
        if n == 2:
            with export.open("a") as fh:
                fh.write("1\n")

    clock = FakeClock(on_sleep=grow_once)
    found = _watcher(tmp_path, clock, stable_checks=2).wait()

    assert found == export
    assert clock.sleeps == [0.5, 0.5, 1.0, 0.5, 0.5]


def test_real_clock_smoke(tmp_path):
    (tmp_path / "export.csv").write_text("id\n1\n")
    watcher = DownloadWatcher(tmp_path, timeout=1.0, poll_interval=0.01, settle_delay=0.01)
    assert watcher.wait().name == "export.csv"


def test_reports_size_from_stability_reads(tmp_path, monkeypatch, caplog):
    export = tmp_path / "transactions.csv"
    export.write_text("id\n1\n")
    stats = []
    real_stat = Path.stat

    def counting_stat(self, *args, **kwargs):
        if self.name == export.name:
            stats.append(self.name)
        return real_stat(self, *args, **kwargs)

    monkeypatch.setattr(Path, "stat", counting_stat)

    with caplog.at_level(logging.INFO, logger="scrapers.download_watcher"):
        assert _watcher(tmp_path, FakeClock()).wait() == export

    # one read before the settle delay, one after; nothing once the file is declared complete
    assert len(stats) == 2
    assert "(5 bytes)" in caplog.text
