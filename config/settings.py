"""Configuration helpers for the PHIXO Studio project."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    proxy_url: str = "http://localhost:3001"
    request_timeout: float = 300.0
    retries: int = 3
    retry_delay: float = 2.0
    health_cache_seconds: float = 30.0
    default_credits: int = 100
    data_dir: Path = Path("data")
    log_dir: Path = Path("logs")
    history_path: Path = Path("data/history.json")
    account_path: Path = Path("data/account.json")
    history_limit: int = 50
    assets_dir: Path = Path("assets")
    default_category: str = "advertentie"
    default_output_format: str = "jpg"
    metadata: dict[str, Any] = field(default_factory=dict)


def _load_env_file(path: Path) -> None:
    """Populate environment variables from a simple KEY=VALUE .env file."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ[key.strip()] = value.strip()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings."""
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    data_dir = Path(os.getenv("PHIXO_DATA_DIR", "data")).expanduser().resolve()
    log_dir = Path(os.getenv("PHIXO_LOG_DIR", "logs")).expanduser().resolve()
    history_path = Path(os.getenv("PHIXO_HISTORY_PATH") or data_dir / "history.json")
    account_path = Path(os.getenv("PHIXO_ACCOUNT_PATH") or data_dir / "account.json")

    proxy_url = os.getenv("PHIXO_PROXY_URL", "http://localhost:3001").rstrip("/")

    metadata: dict[str, Any] = {}
    user_id = os.getenv("PHIXO_USER_ID")
    if user_id:
        metadata["user_id"] = user_id

    return AppConfig(
        proxy_url=proxy_url,
        request_timeout=_env_float("PHIXO_REQUEST_TIMEOUT", 300.0),
        retries=max(1, _env_int("PHIXO_RETRIES", 3)),
        retry_delay=_env_float("PHIXO_RETRY_DELAY", 2.0),
        health_cache_seconds=_env_float("PHIXO_HEALTH_CACHE_SECONDS", 30.0),
        default_credits=_env_int("PHIXO_DEFAULT_CREDITS", 100),
        data_dir=data_dir,
        log_dir=log_dir,
        history_path=history_path,
        account_path=account_path,
        history_limit=_env_int("PHIXO_HISTORY_LIMIT", 50),
        default_category=os.getenv("PHIXO_DEFAULT_CATEGORY", "advertentie"),
        metadata=metadata,
    )
