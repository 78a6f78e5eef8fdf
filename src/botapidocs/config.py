"""Runtime configuration — environment variables, ``.env``, optional YAML.

Environment variables (all strings):

  TOKEN             bot token (required to start the bot)
  OWNER_ID          chat id that receives error diagnostics (0 = none)
  WEBHOOK_URL       base webhook URL; unset selects long polling
  PORT              webhook listener port
  Vercel            "1" marks an ephemeral host -> on-demand refresh
  REFRESH_INTERVAL  seconds between background refreshes (default 3600)
  LOG_DIR           directory for a rotating log file
  LOG_LEVEL         stderr log level (default INFO)

A ``.env`` file in the working directory is loaded first without
overriding the real environment.  An optional YAML file (path from
``BOTAPIDOCS_CONFIG``, default ``botapidocs.yaml``) may set
``refresh_interval_seconds``, ``log_dir`` and ``log_level``; the
environment wins over it.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import yaml
from dotenv import find_dotenv, load_dotenv

from botapidocs.errors import ConfigError
from botapidocs.refresh import DEFAULT_INTERVAL

DEFAULT_CONFIG_FILE = "botapidocs.yaml"
DEFAULT_PORT = 8080
EPHEMERAL_HOST_VAR = "Vercel"


@dataclass
class Settings:
    """Parsed runtime configuration."""

    token: str = ""
    owner_id: int = 0
    webhook_url: str = ""
    port: int = DEFAULT_PORT
    ephemeral: bool = False
    refresh_interval: float = DEFAULT_INTERVAL
    log_dir: str = ""
    log_level: str = "INFO"

    @property
    def use_webhook(self) -> bool:
        return bool(self.webhook_url)

    def require_token(self) -> str:
        if not self.token:
            raise ConfigError("no token provided", hint="Add `TOKEN` to the .env file.")
        return self.token


def _to_int(value: str) -> int:
    """Lenient integer parse: anything unparsable is 0."""
    try:
        return int(value.strip())
    except (AttributeError, ValueError):
        return 0


def _load_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def _interval(value, source: str) -> float:
    try:
        interval = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(
            f"refresh interval from {source} must be a number of seconds, got {value!r}"
        ) from e
    if interval <= 0:
        raise ConfigError(f"refresh interval from {source} must be positive, got {interval:g}")
    return interval


def settings_from(env: Mapping[str, str], file_data: Mapping | None = None) -> Settings:
    """Build :class:`Settings` from an environment mapping and parsed YAML."""
    file_data = file_data or {}

    interval = DEFAULT_INTERVAL
    if "refresh_interval_seconds" in file_data:
        interval = _interval(file_data["refresh_interval_seconds"], "config file")
    if env.get("REFRESH_INTERVAL"):
        interval = _interval(env["REFRESH_INTERVAL"], "REFRESH_INTERVAL")

    port = DEFAULT_PORT
    raw_port = env.get("PORT", "").strip()
    if raw_port:
        if not raw_port.isdigit():
            raise ConfigError(f"PORT must be a port number, got {raw_port!r}")
        port = int(raw_port)

    return Settings(
        token=env.get("TOKEN", "").strip(),
        owner_id=_to_int(env.get("OWNER_ID", "")),
        webhook_url=env.get("WEBHOOK_URL", "").strip(),
        port=port,
        ephemeral=env.get(EPHEMERAL_HOST_VAR, "") == "1",
        refresh_interval=interval,
        log_dir=env.get("LOG_DIR") or str(file_data.get("log_dir", "") or ""),
        log_level=(env.get("LOG_LEVEL") or str(file_data.get("log_level", "INFO"))).upper(),
    )


def load_settings(env_file: str | Path | None = None) -> Settings:
    """Load ``.env``, the optional YAML file, and the process environment."""
    if env_file is not None:
        load_dotenv(env_file, override=False)
    else:
        load_dotenv(find_dotenv(usecwd=True), override=False)
    config_file = Path(os.environ.get("BOTAPIDOCS_CONFIG", DEFAULT_CONFIG_FILE))
    return settings_from(os.environ, _load_yaml(config_file))
