# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from task_browser.logging_setup import _ConsoleNoiseFilter, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    "name, level, shown",
    [
        ("task_browser.query.compiler", logging.DEBUG, True),
        ("aiosqlite", logging.DEBUG, False),
        ("aiosqlite", logging.WARNING, True),
        ("py.warnings", logging.WARNING, False),
        ("urllib3", logging.WARNING, False),
        ("urllib3", logging.ERROR, True),
    ],
)
def test_console_filter(name, level, shown) -> None:
    assert _ConsoleNoiseFilter().filter(_record(name, level)) is shown


def test_setup_logging_writes_file_and_keeps_stdout_clean(tmp_path: Path, capsys) -> None:
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    try:
        log_file = setup_logging(log_dir=tmp_path / "logs", console_level=logging.INFO)
        logging.getLogger("task_browser.test").info("hello file")
        for h in root.handlers:
            h.flush()
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            if h not in saved_handlers:
                h.close()
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
        logging.captureWarnings(False)

    assert log_file == tmp_path / "logs" / "task_browser.log"
    assert "hello file" in log_file.read_text(encoding="utf-8")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "hello file" in captured.err
