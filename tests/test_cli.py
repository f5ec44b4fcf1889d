"""Tests for the scanlens command line."""

import scanlens.io.logging_setup
from scanlens import cli
from scanlens.geometry.persistence import SETTINGS_KEY
from scanlens.io.storage import JsonFileStorage


def test_reset_layout_clears_stored_geometry(tmp_path, monkeypatch, capsys):
    path = tmp_path / "panel.json"
    JsonFileStorage(path).set(SETTINGS_KEY, {"corner": "top-left"})
    monkeypatch.setenv("SCANLENS_STORAGE_PATH", str(path))

    assert cli.main(["reset-layout"]) == 0

    assert JsonFileStorage(path).get(SETTINGS_KEY) is None
    assert "Cleared panel layout" in capsys.readouterr().out


def test_reset_layout_reports_unusable_storage(tmp_path, monkeypatch, capsys):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    monkeypatch.setenv("SCANLENS_STORAGE_PATH", str(blocker / "panel.json"))

    assert cli.main(["reset-layout"]) == 1
    assert "Could not clear" in capsys.readouterr().out


def test_demo_runs_the_demo_app(monkeypatch):
    launched = []
    monkeypatch.setattr(cli.DemoApp, "run", lambda self: launched.append(self))

    assert cli.main(["demo", "--seed", "3"]) == 0

    assert len(launched) == 1
    assert launched[0].config.metrics_name == "cells"
    assert launched[0].demo_tree.host is launched[0].host


def test_log_level_flag_sets_runtime_level(monkeypatch):
    monkeypatch.setenv("SCANLENS_LOG_LEVEL", "INFO")
    monkeypatch.setattr(cli.DemoApp, "run", lambda self: None)

    cli.main(["--log-level", "debug", "demo"])

    assert scanlens.io.logging_setup.get_runtime().level_name == "DEBUG"
