from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

FB_APP_ID_ENV = "FB_APP_ID"
FB_APP_SECRET_ENV = "FB_APP_SECRET"
CORS_ORIGIN_ENV = "CORS_ORIGIN"
DATA_DIR_ENV = "DATA_DIR"
ACCOUNTS_FILE_ENV = "ACCOUNTS_FILE"
SCHEDULE_FILE_ENV = "SCHEDULE_FILE"
GRAPH_API_VERSION_ENV = "GRAPH_API_VERSION"
GRAPH_TIMEOUT_ENV = "GRAPH_TIMEOUT"
PORT_ENV = "PORT"
LOG_LEVEL_ENV = "LOG_LEVEL"

REQUIRED_ENV = (FB_APP_ID_ENV, FB_APP_SECRET_ENV)


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class Settings:
    """Process configuration, read once at startup and passed to the app factory."""

    fb_app_id: str
    fb_app_secret: str
    cors_origin: str = "http://localhost:3000"
    data_dir: Path = Path("/tmp")
    accounts_file: Path | None = None
    schedule_file: Path | None = None
    graph_api_version: str = "v17.0"
    graph_timeout: float = 20.0
    port: int = 5000
    log_level: str = "INFO"

    @property
    def accounts_path(self) -> Path:
        return self.accounts_file or self.data_dir / "accounts.json"

    @property
    def schedule_path(self) -> Path:
        return self.schedule_file or self.data_dir / "scheduleData.json"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]


def _optional_path(value: str | None) -> Path | None:
    value = (value or "").strip()
    return Path(value) if value else None


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    missing = [name for name in REQUIRED_ENV if not (env.get(name) or "").strip()]
    if missing:
        raise ConfigError(f"Missing {', '.join(missing)}. Set it as an environment variable.")

    try:
        graph_timeout = float(env.get(GRAPH_TIMEOUT_ENV) or 20.0)
        port = int(env.get(PORT_ENV) or 5000)
    except ValueError as exc:
        raise ConfigError(f"Invalid numeric setting: {exc}") from exc

    log_level = (env.get(LOG_LEVEL_ENV) or "").strip().upper() or "INFO"
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"Invalid {LOG_LEVEL_ENV}: {log_level}")

    return Settings(
        fb_app_id=env[FB_APP_ID_ENV].strip(),
        fb_app_secret=env[FB_APP_SECRET_ENV].strip(),
        cors_origin=(env.get(CORS_ORIGIN_ENV) or "").strip() or "http://localhost:3000",
        data_dir=Path((env.get(DATA_DIR_ENV) or "").strip() or "/tmp"),
        accounts_file=_optional_path(env.get(ACCOUNTS_FILE_ENV)),
        schedule_file=_optional_path(env.get(SCHEDULE_FILE_ENV)),
        graph_api_version=(env.get(GRAPH_API_VERSION_ENV) or "").strip() or "v17.0",
        graph_timeout=graph_timeout,
        port=port,
        log_level=log_level,
    )
