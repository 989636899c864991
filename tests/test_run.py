"""Tests for the run.py command line entrypoint."""

from __future__ import annotations

import asyncio

from typer.testing import CliRunner

import run
from bible_reader.bootstrap import build_state_controller
from bible_reader.config import AppConfig
from bible_reader.services.location import ReadingLocation
from bible_reader.services.settings import ThemeMode


def _patch_environment(monkeypatch, config: AppConfig) -> None:
    monkeypatch.setattr(run, "initialize_app", lambda: config)
    monkeypatch.setattr(run, "_prepare_logging", lambda storage_root: None)


def _reload(config: AppConfig):
    controller = build_state_controller(config)
    asyncio.run(controller.load())
    return controller


def test_theme_command_persists_choice(monkeypatch, temp_config: AppConfig) -> None:
    _patch_environment(monkeypatch, temp_config)

    result = CliRunner().invoke(run.cli, ["theme", "dark"])

    assert result.exit_code == 0, result.output
    assert "Reader State" in result.output
    assert _reload(temp_config).theme_mode is ThemeMode.DARK


def test_goto_then_clear(monkeypatch, temp_config: AppConfig) -> None:
    _patch_environment(monkeypatch, temp_config)
    runner = CliRunner()

    result = runner.invoke(run.cli, ["goto", "--book", "Romans", "--chapter", "8", "--verse", "28"])
    assert result.exit_code == 0, result.output
    assert _reload(temp_config).location == ReadingLocation("Romans", 8, 28)

    result = runner.invoke(run.cli, ["clear"])
    assert result.exit_code == 0, result.output
    assert _reload(temp_config).location == ReadingLocation()


def test_text_size_reset_is_persisted(monkeypatch, temp_config: AppConfig) -> None:
    _patch_environment(monkeypatch, temp_config)
    runner = CliRunner()

    runner.invoke(run.cli, ["text-size", "increase", "--amount", "6"])
    assert _reload(temp_config).text_size == 30.0

    result = runner.invoke(run.cli, ["text-size", "reset"])
    assert result.exit_code == 0, result.output
    assert _reload(temp_config).text_size == 24.0


def test_serve_builds_uvicorn_server(monkeypatch, temp_config: AppConfig) -> None:
    _patch_environment(monkeypatch, temp_config)
    captured = {}

    class DummyConfig:
        def __init__(self, app, **kwargs):
            captured["app"] = app
            captured["config_kwargs"] = kwargs

    class DummyServer:
        def __init__(self, config):
            captured["server_config"] = config

        def run(self):
            captured["server_run"] = True

    monkeypatch.setattr(run.uvicorn, "Config", DummyConfig)
    monkeypatch.setattr(run.uvicorn, "Server", DummyServer)

    run.serve(host="0.0.0.0", port=9000)

    assert captured["config_kwargs"]["port"] == 9000
    assert captured["config_kwargs"]["log_config"] is None
    assert captured["server_run"] is True
    assert captured["app"].state.controller is not None
