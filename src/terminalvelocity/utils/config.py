import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_SEED = 1337


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from the environment."""

    catalog_path: Optional[Path]
    log_level: str
    default_seed: int


def get_catalog_path() -> Optional[Path]:
    """Get the catalog override path (TV_CATALOG_PATH), if any.

    Returns None when unset so callers fall back to the built-in catalog.
    """
    env_path = os.getenv("TV_CATALOG_PATH")
    if env_path:
        return Path(env_path)
    return None


def get_log_level() -> str:
    return (os.getenv("TV_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()


def get_default_seed() -> int:
    raw = os.getenv("TV_DEFAULT_SEED")
    if not raw:
        return DEFAULT_SEED
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"TV_DEFAULT_SEED must be an integer, got {raw!r}") from exc


def get_settings() -> Settings:
    return Settings(
        catalog_path=get_catalog_path(),
        log_level=get_log_level(),
        default_seed=get_default_seed(),
    )
