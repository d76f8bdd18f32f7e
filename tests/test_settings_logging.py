import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from form_runtime.core.logging_utils import configure_logging, rotate_log_if_needed
from form_runtime.core.settings import EngineSettingsLoader


def test_settings_defaults_when_file_missing(tmp_path, monkeypatch):
    monkeypatch.delenv("FORM_RUNTIME_LOG_LEVEL", raising=False)
    loader = EngineSettingsLoader(tmp_path / "missing.yaml")
    settings = loader.get()
    assert settings["log_level"] == "INFO"
    assert loader.default_passing_score() is None


def test_settings_file_and_env_override(tmp_path, monkeypatch):
    config = tmp_path / "engine.yaml"
    config.write_text("engine:\n  default_passing_score: 65\n  log_level: DEBUG\n  unknown: 1\n", encoding="utf-8")
    loader = EngineSettingsLoader(config)
    assert loader.default_passing_score() == 65
    assert "unknown" not in loader.get()

    monkeypatch.setenv("FORM_RUNTIME_LOG_LEVEL", "WARNING")
    assert loader.get()["log_level"] == "WARNING"


def test_config_path_from_env(tmp_path, monkeypatch):
    config = tmp_path / "alt.yaml"
    config.write_text("engine:\n  default_passing_score: 40\n", encoding="utf-8")
    monkeypatch.setenv("FORM_RUNTIME_CONFIG", str(config))
    assert EngineSettingsLoader().default_passing_score() == 40


def test_rotate_log_when_oversized(tmp_path, monkeypatch):
    monkeypatch.setenv("FORM_RUNTIME_LOG_MAX_BYTES", "10")
    log = tmp_path / "engine.log"
    log.write_text("x" * 20, encoding="utf-8")

    rotated = rotate_log_if_needed(log)

    assert rotated is not None and rotated.exists()
    assert not log.exists()


def test_small_log_is_left_alone(tmp_path, monkeypatch):
    monkeypatch.setenv("FORM_RUNTIME_LOG_MAX_BYTES", "1000")
    log = tmp_path / "engine.log"
    log.write_text("short", encoding="utf-8")
    assert rotate_log_if_needed(log) is None
    assert log.exists()


def test_configure_logging_writes_file(tmp_path, monkeypatch):
    log = tmp_path / "logs" / "engine.log"
    monkeypatch.setenv("FORM_RUNTIME_LOG_FILE", str(log))
    monkeypatch.setenv("FORM_RUNTIME_LOG_LEVEL", "DEBUG")

    configure_logging(EngineSettingsLoader(tmp_path / "missing.yaml"))
    logging.getLogger("form_runtime.test").debug("hello from test")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert "hello from test" in log.read_text(encoding="utf-8")
    logging.basicConfig(force=True)
