"""Tests for scanlens.io.logging_setup."""

import logging
from logging.handlers import RotatingFileHandler

import scanlens.io.logging_setup as logging_setup


def test_configure_uses_env_level_and_file(tmp_path, monkeypatch):
    log_file = tmp_path / "out" / "scanlens.log"
    monkeypatch.setenv("SCANLENS_LOG_LEVEL", "debug")
    monkeypatch.setenv("SCANLENS_LOG_FILE", str(log_file))

    runtime = logging_setup.configure()

    assert runtime.level_name == "DEBUG"
    assert runtime.file_path == str(log_file)
    logger = logging.getLogger("scanlens")
    assert logger.level == logging.DEBUG
    assert not logger.propagate
    kinds = {type(h) for h in logger.handlers}
    assert RotatingFileHandler in kinds
    assert logging.StreamHandler in kinds


def test_configure_is_idempotent():
    first = logging_setup.configure(stream=False)
    second = logging_setup.configure()

    assert first is second
    assert logging_setup.get_runtime() is first
    assert len(logging.getLogger("scanlens").handlers) == 1


def test_unknown_level_falls_back_to_info(monkeypatch):
    monkeypatch.setenv("SCANLENS_LOG_LEVEL", "chatty")
    assert logging_setup.configure(stream=False).level == logging.INFO


def test_default_path_lives_under_log_dir(tmp_path):
    runtime = logging_setup.configure(stream=False)
    assert runtime.file_path.startswith(str(tmp_path / "logs"))


def test_module_loggers_reach_the_file(tmp_path, monkeypatch):
    log_file = tmp_path / "scanlens.log"
    monkeypatch.setenv("SCANLENS_LOG_FILE", str(log_file))
    logging_setup.configure(stream=False)

    logging.getLogger("scanlens.core.session").warning("hello from session")
    for handler in logging.getLogger("scanlens").handlers:
        handler.flush()

    assert "hello from session" in log_file.read_text()


def test_reset_detaches_handlers():
    logging_setup.configure(stream=False)
    logging_setup.reset()

    assert logging_setup.get_runtime() is None
    assert logging.getLogger("scanlens").handlers == []
