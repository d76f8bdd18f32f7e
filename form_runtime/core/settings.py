"""Engine settings loaded from config/engine.yaml with environment overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_SETTINGS: dict[str, Any] = {
    "default_passing_score": None,
    "log_level": "INFO",
    "log_file": "",
}

ENV_OVERRIDES: dict[str, str] = {
    "log_level": "FORM_RUNTIME_LOG_LEVEL",
    "log_file": "FORM_RUNTIME_LOG_FILE",
}


class EngineSettingsLoader:
    """Loads engine settings from config/engine.yaml."""

    def __init__(self, config_path: Optional[Path] = None) -> None:
        if config_path is None:
            env_path = os.environ.get("FORM_RUNTIME_CONFIG", "").strip()
            if env_path:
                config_path = Path(env_path)
            else:
                project_root = Path(__file__).parent.parent.parent
                config_path = project_root / "config" / "engine.yaml"
        self.config_path = config_path
        self._config: dict[str, Any] | None = None

    def _load_config(self) -> None:
        if self._config is not None:
            return
        if not self.config_path.exists():
            self._config = {}
            return
        with self.config_path.open("r", encoding="utf-8") as handle:
            self._config = yaml.safe_load(handle) or {}

    def get(self) -> Dict[str, Any]:
        """Return settings with file values over defaults and env over both."""
        self._load_config()
        merged = dict(DEFAULT_SETTINGS)
        section = (self._config or {}).get("engine", {})
        if isinstance(section, dict):
            merged.update({k: v for k, v in section.items() if k in DEFAULT_SETTINGS})
        for key, env_name in ENV_OVERRIDES.items():
            raw = os.environ.get(env_name, "").strip()
            if raw:
                merged[key] = raw
        return merged

    def default_passing_score(self) -> Optional[float]:
        value = self.get().get("default_passing_score")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return value


engine_settings = EngineSettingsLoader()
