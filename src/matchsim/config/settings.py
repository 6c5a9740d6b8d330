"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from matchsim.models.event import EventKind

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
        match: dict[str, Any] | None = None,
        odds: dict[str, Any] | None = None,
        wallet: dict[str, Any] | None = None,
        pause: dict[str, Any] | None = None,
        storage: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.match = match or {}
        self.odds = odds or {}
        self.wallet = wallet or {}
        self.pause = pause or {}
        self.storage = storage or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            match=raw.get("match"),
            odds=raw.get("odds"),
            wallet=raw.get("wallet"),
            pause=raw.get("pause"),
            storage=raw.get("storage"),
            logging=raw.get("logging"),
        )

    # Convenience accessors with defaults
    @property
    def match_duration(self) -> float:
        return float(self.match.get("duration_minutes", 90))

    @property
    def spacing_min(self) -> float:
        return float(self.match.get("spacing_min", 8))

    @property
    def spacing_max(self) -> float:
        return float(self.match.get("spacing_max", 18))

    @property
    def resolution_offset(self) -> float:
        return float(self.match.get("resolution_offset", 4))

    @property
    def feed_size(self) -> int:
        return int(self.match.get("feed_size", 50))

    @property
    def home_team(self) -> str:
        return self.match.get("home_team", "Quantum Strikers")

    @property
    def away_team(self) -> str:
        return self.match.get("away_team", "Celestial FC")

    @property
    def distribution(self) -> dict[EventKind, float]:
        raw = self.match.get("distribution") or {
            "goal": 0.20,
            "betting_opportunity": 0.45,
            "commentary": 0.35,
        }
        return {EventKind(k): float(v) for k, v in raw.items()}

    @property
    def opening_odds(self) -> dict[str, float]:
        return {
            "home": float(self.odds.get("home", 1.85)),
            "draw": float(self.odds.get("draw", 3.50)),
            "away": float(self.odds.get("away", 4.20)),
        }

    @property
    def odds_floor(self) -> float:
        return float(self.odds.get("floor", 1.05))

    @property
    def odds_ceiling(self) -> float:
        return float(self.odds.get("ceiling", 50.0))

    @property
    def odds_lead_factor(self) -> float:
        return float(self.odds.get("lead_factor", 0.8))

    @property
    def odds_trail_factor(self) -> float:
        return float(self.odds.get("trail_factor", 1.5))

    @property
    def odds_draw_factor(self) -> float:
        return float(self.odds.get("draw_factor", 1.25))

    @property
    def starting_balance(self) -> float:
        return float(self.wallet.get("starting_balance", 1000.0))

    @property
    def min_stake(self) -> float:
        return float(self.wallet.get("min_stake", 1.0))

    @property
    def multiplier_award_chance(self) -> float:
        return float(self.wallet.get("multiplier_award_chance", 0.8))

    @property
    def classic_mode(self) -> bool:
        return bool(self.wallet.get("classic_mode", False))

    @property
    def betting_timeout_ms(self) -> int:
        return int(self.pause.get("betting_timeout_ms", 10_000))

    @property
    def db_path(self) -> str:
        return self.storage.get("db_path", "data/matchsim.duckdb")

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
    """Configure structlog with settings. Call once at application entry."""
    import structlog

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
