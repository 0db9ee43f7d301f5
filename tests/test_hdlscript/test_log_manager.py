# tests/test_hdlscript/test_log_manager.py
"""
Tests for hdlscript.log_manager.

These tests validate:
- get_logger returns the same logger per name with a single stream handler.
- Console logs go to stderr (stdout carries the generated script).
- Color decision: explicit override, then HDLSCRIPT_FORCE_COLOR, then TTY.
- File handlers are attached once per path.
"""

from __future__ import annotations

import logging

import colorlog

from hdlscript import log_manager


def test_get_logger_returns_same_instance():
    logger1 = log_manager.get_logger("hdlscript.test.same")
    logger2 = log_manager.get_logger("hdlscript.test.same")
    assert logger1 is logger2


def test_default_name_is_package_logger():
    assert log_manager.get_logger().name == log_manager.LOGGER_NAME == "hdlscript"


def test_stream_handler_writes_stderr(capsys):
    logger = log_manager.get_logger("hdlscript.test.stderr", level=logging.INFO, force_color=False)
    logger.info("to-stderr")
    out, err = capsys.readouterr()
    assert "to-stderr" in err
    assert "to-stderr" not in out


def test_forced_color_uses_colorlog():
    logger = log_manager.get_logger("hdlscript.test.color", force_color=True)
    assert isinstance(logger.handlers[0].formatter, colorlog.ColoredFormatter)


def test_plain_formatter_when_color_disabled():
    logger = log_manager.get_logger("hdlscript.test.plain", force_color=False)
    assert not isinstance(logger.handlers[0].formatter, colorlog.ColoredFormatter)


def test_env_var_drives_color(monkeypatch):
    monkeypatch.setenv("HDLSCRIPT_FORCE_COLOR", "true")
    assert log_manager._should_use_color() is True
    monkeypatch.setenv("HDLSCRIPT_FORCE_COLOR", "0")
    assert log_manager._should_use_color() is False
    # explicit argument wins over the environment
    assert log_manager._should_use_color(True) is True


def test_file_handler(tmp_path):
    log_file = tmp_path / "hdlscript.log"
    logger = log_manager.get_logger("hdlscript.test.file", log_to_file=str(log_file), force_color=False)
    logger.warning("hello file")
    for h in logger.handlers:
        h.flush()
    assert "hello file" in log_file.read_text(encoding="utf-8")


def test_same_file_not_attached_twice(tmp_path):
    log_file = tmp_path / "once.log"
    name = "hdlscript.test.once"
    log_manager.get_logger(name, log_to_file=str(log_file), force_color=False)
    logger = log_manager.get_logger(name, log_to_file=str(log_file), force_color=False)
    file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 1


def test_different_files_both_attached(tmp_path):
    name = "hdlscript.test.twofiles"
    log_manager.get_logger(name, log_to_file=str(tmp_path / "a.log"), force_color=False)
    logger = log_manager.get_logger(name, log_to_file=str(tmp_path / "b.log"), force_color=False)
    file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 2


def test_no_duplicate_stream_handlers():
    name = "hdlscript.test.nodup"
    for _ in range(3):
        logger = log_manager.get_logger(name, force_color=False)
    assert len(logger.handlers) == 1


def test_logger_propagate_false_and_level():
    logger = log_manager.get_logger("hdlscript.test.level", level=logging.ERROR)
    assert logger.propagate is False
    assert logger.level == logging.ERROR
