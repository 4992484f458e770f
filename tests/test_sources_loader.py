import errno
from pathlib import Path

from baselinegate.resilience.error_log import ErrorLog
from baselinegate.sources.loader import load_sources, read_source


def test_reads_existing_files_and_skips_missing_ones(tmp_path):
    css = tmp_path / "a.css"
    css.write_text(".a { display: grid; }", encoding="utf-8")
    log = ErrorLog()

    sources = load_sources([css, tmp_path / "missing.js"], error_log=log)

    assert sources == [(str(css), ".a { display: grid; }")]
    assert len(log) == 1
    entry = log.entries()[0]
    assert entry.type == "FileNotFoundError"
    assert entry.metadata == {"file": str(tmp_path / "missing.js"), "stage": "read"}


def test_busy_files_are_retried(tmp_path, monkeypatch):
    path = tmp_path / "a.css"
    path.write_text("body {}", encoding="utf-8")
    original = Path.read_text
    calls = []

    def flaky_read_text(self, *args, **kwargs):
        calls.append(self)
        if len(calls) < 3:
            raise OSError(errno.EBUSY, "resource busy")
        return original(self, *args, **kwargs)

    monkeypatch.setattr(Path, "read_text", flaky_read_text)
    sleeps = []

    assert read_source(path, sleep=sleeps.append) == "body {}"
    assert sleeps == [0.1, 0.2]


def test_exhausted_retries_are_recorded_not_raised(tmp_path, monkeypatch):
    path = tmp_path / "a.css"
    path.write_text("body {}", encoding="utf-8")

    def always_busy(self, *args, **kwargs):
        raise OSError(errno.EBUSY, "resource busy")

    monkeypatch.setattr(Path, "read_text", always_busy)
    log = ErrorLog()

    sources = load_sources([path], error_log=log, max_retries=1, sleep=lambda _: None)

    assert sources == []
    assert log.entries()[0].type == "TransientIOError"
