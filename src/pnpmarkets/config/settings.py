"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import sys
import tomllib
from pathlib import Path
from typing import Any

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir(config_dir: Path | None = None) -> Path:
    if config_dir is not None:
        return config_dir
    if _CWD_CONFIG.exists():
        return _CWD_CONFIG
    return _CONFIG_DIR


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """Load merged config from default.toml and optional profile overlay."""
    config_dir = _find_config_dir(config_dir)
    default_path = config_dir / "default.toml"
    if not default_path.exists():
        return {}
    base = _load_toml(default_path)
    if profile:
        profile_path = config_dir / f"{profile}.toml"
        if profile_path.exists():
            overlay = _load_toml(profile_path)
            base = _deep_merge(base, overlay)
    return base


def get_settings(profile: str | None = None, config_dir: Path | None = None) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir)
    return Settings.from_dict(raw)


class Settings:
    """Application settings from TOML config."""

    def __init__(
        self,
        *,
        registry: dict[str, Any] | None = None,
        chain: dict[str, Any] | None = None,
        markets: dict[str, Any] | None = None,
        lifecycle: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.registry = registry or {}
        self.chain = chain or {}
        self.markets = markets or {}
        self.lifecycle = lifecycle or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            registry=raw.get("registry"),
            chain=raw.get("chain"),
            markets=raw.get("markets"),
            lifecycle=raw.get("lifecycle"),
            logging=raw.get("logging"),
        )

    # Convenience accessors with defaults
    @property
    def registry_dir(self) -> Path:
        return Path(self.registry.get("dir", "markets"))

    @property
    def lock_timeout_sec(self) -> float:
        return float(self.registry.get("lock_timeout_sec", 30.0))

    @property
    def rpc_url(self) -> str:
        return self.chain.get("rpc_url", "https://mainnet.base.org")

    @property
    def explorer_url(self) -> str:
        return self.chain.get("explorer_url", "https://basescan.org").rstrip("/")

    @property
    def client_factory(self) -> str:
        return self.chain.get("client_factory", "")

    @property
    def default_collateral(self) -> str:
        return self.markets.get("default_collateral", "USDC")

    @property
    def default_duration_hours(self) -> float:
        return float(self.markets.get("default_duration_hours", 168))

    @property
    def require_settled_before_create(self) -> bool:
        return bool(self.lifecycle.get("require_settled_before_create", True))

    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_level_num(self) -> int:
        return getattr(logging, self.logging_level, logging.INFO)


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry.

    Logs go to stderr so that commands printing JSON keep stdout clean.
    """
    import structlog

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
