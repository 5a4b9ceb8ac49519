import logging

import pytest

from config.settings import settings
from util import logger as log_setup


@pytest.fixture
def fresh_root(monkeypatch):
    root = logging.getLogger()
    saved_level = root.level
    monkeypatch.delattr(root, log_setup._INIT_FLAG, raising=False)
    yield root
    for h in list(root.handlers):
        if isinstance(h, logging.StreamHandler) and h.formatter is not None and h.formatter._fmt == log_setup.LOG_FORMAT:
            root.removeHandler(h)
            h.close()
    root.setLevel(saved_level)
    if hasattr(root, log_setup._INIT_FLAG):
        delattr(root, log_setup._INIT_FLAG)


def test_init_is_idempotent(fresh_root, monkeypatch):
    monkeypatch.setattr(settings, "LOG_TO_FILE", False)
    monkeypatch.setattr(settings, "LOG_LEVEL", "debug")

    first = log_setup.init_logger()
    handlers = list(fresh_root.handlers)
    second = log_setup.init_logger()

    assert first is second
    assert first.name == settings.LOGGER_NAME
    assert fresh_root.level == logging.DEBUG
    assert fresh_root.handlers == handlers
    assert len(handlers) == 1


def test_unknown_level_falls_back_to_info(fresh_root, monkeypatch):
    monkeypatch.setattr(settings, "LOG_TO_FILE", False)
    monkeypatch.setattr(settings, "LOG_LEVEL", "chatty")

    log_setup.init_logger()

    assert fresh_root.level == logging.INFO


def test_file_output_stays_plain(fresh_root, monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "LOG_TO_FILE", True)
    monkeypatch.setattr(settings, "LOG_LEVEL", "INFO")
    monkeypatch.setattr(settings, "LOG_DIR", str(tmp_path))
    monkeypatch.setattr(settings, "LOG_FILE_NAME", "engine.log")

    log_setup.init_logger()
    logging.getLogger("tests.logger").warning("batch.failed batch=%s", "b1")
    for h in fresh_root.handlers:
        h.flush()

    line = (tmp_path / "engine.log").read_text(encoding="utf-8").strip()
    assert line.endswith("WARNING tests.logger - batch.failed batch=b1")
    assert "\033[" not in line


def test_colored_formatter_leaves_record_untouched():
    record = logging.LogRecord("x", logging.ERROR, __file__, 1, "boom", None, None)
    out = log_setup.ColoredFormatter("%(levelname)s %(message)s").format(record)

    assert out == "\033[31mERROR\033[0m boom"
    assert record.levelname == "ERROR"
