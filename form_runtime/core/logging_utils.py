from __future__ import annotations

import logging
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .settings import EngineSettingsLoader, engine_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def rotate_log_if_needed(path: Path) -> Optional[Path]:
    """Move an oversized log aside and prune old copies; returns the rotated path."""
    max_bytes = _env_int("FORM_RUNTIME_LOG_MAX_BYTES", 5 * 1024 * 1024)
    max_files = _env_int("FORM_RUNTIME_LOG_MAX_FILES", 5)
    if max_bytes <= 0 or not path.is_file():
        return None
    if path.stat().st_size < max_bytes:
        return None

    stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    rotated = path.with_name(f"{path.stem}.{stamp}{path.suffix}")
    shutil.move(str(path), str(rotated))

    if max_files > 0:
        older = sorted(
            path.parent.glob(f"{path.stem}.*{path.suffix}"),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )
        for old in older[max_files:]:
            try:
                old.unlink()
            except FileNotFoundError:
                continue
    return rotated


def configure_logging(settings: Optional[EngineSettingsLoader] = None) -> None:
    values = (settings or engine_settings).get()
    level = getattr(logging, str(values["log_level"]).upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_file = str(values.get("log_file") or "").strip()
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        rotate_log_if_needed(path)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=level, handlers=handlers, force=True)
