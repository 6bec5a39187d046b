"""
Configuration loader for prdsmith.

Settings come from prdsmith.env in the working directory. Every key is
optional; a missing file yields the defaults.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from . import envparse

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "prdsmith.env"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class Settings:
    """Tool settings from prdsmith.env"""
    output_dir: Path  # Where PRDs and chat sessions are stored
    oracle_timeout: int  # Seconds per chat turn
    assess_timeout: int  # Seconds for a quality assessment
    assess_quality: bool  # Ask the oracle to grade normalized PRDs
    log_level: str
    config_dir: Path  # Directory holding prdsmith.env / agents.yaml


def _int_setting(env: dict, key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Invalid {key} '{raw}', using {default}")
        return default
    if value <= 0:
        logger.warning(f"{key} must be positive, got {value}; using {default}")
        return default
    return value


def _bool_setting(env: dict, key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_settings(config_dir: Path) -> Settings:
    """Load prdsmith.env from config_dir and return Settings."""
    settings_path = config_dir / SETTINGS_FILENAME
    env = {}
    if settings_path.exists():
        env = envparse.load_env(settings_path)

    log_level = env.get("LOG_LEVEL", "WARNING").upper()
    if log_level not in VALID_LOG_LEVELS:
        logger.warning(f"Unknown LOG_LEVEL '{log_level}', defaulting to 'WARNING'")
        log_level = "WARNING"

    output_dir = Path(env.get("PRD_OUTPUT_DIR", ".prdsmith"))
    if not output_dir.is_absolute():
        output_dir = config_dir / output_dir

    return Settings(
        output_dir=output_dir,
        oracle_timeout=_int_setting(env, "ORACLE_TIMEOUT", 300),
        assess_timeout=_int_setting(env, "ASSESS_TIMEOUT", 120),
        assess_quality=_bool_setting(env, "ASSESS_QUALITY", True),
        log_level=log_level,
        config_dir=config_dir,
    )
