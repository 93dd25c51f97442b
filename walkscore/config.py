"""
Runtime settings read from environment variables.

Call load_env() first if a .env file should be honoured.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .catalog import DEFAULT_BATCH_SIZE, DEFAULT_CATALOG, Catalog
from .errors import ConfigError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str] = None
    batch_size: int = DEFAULT_BATCH_SIZE
    request_timeout: float = 15.0
    search_radius_m: int = 2000
    log_level: str = "INFO"
    log_dir: Path = Path("logs")
    log_to_file: bool = True
    test_address: Optional[str] = None

    def catalog(self) -> Catalog:
        return DEFAULT_CATALOG.with_batch_size(self.batch_size)

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigError(
                "WALKSCORE_API_KEY not set. Set env var, add it to .env, or pass --api-key."
            )
        return self.api_key


def _int(env: Mapping[str, str], key: str, default: int, minimum: int = 1) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer (got {raw!r})") from None
    if value < minimum:
        raise ConfigError(f"{key} must be >= {minimum} (got {value})")
    return value


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number (got {raw!r})") from None
    if value <= 0:
        raise ConfigError(f"{key} must be positive (got {value})")
    return value


def _bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigError(f"{key} must be a boolean (got {raw!r})")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the environment (or an explicit mapping)."""
    env = os.environ if environ is None else environ

    log_level = (env.get("WALKSCORE_LOG_LEVEL") or "INFO").strip().upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"WALKSCORE_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)} (got {log_level!r})")

    return Settings(
        api_key=env.get("WALKSCORE_API_KEY") or env.get("GOOGLE_MAPS_API_KEY") or None,
        batch_size=_int(env, "WALKSCORE_BATCH_SIZE", DEFAULT_BATCH_SIZE),
        request_timeout=_float(env, "WALKSCORE_TIMEOUT", 15.0),
        search_radius_m=_int(env, "WALKSCORE_SEARCH_RADIUS_M", 2000),
        log_level=log_level,
        log_dir=Path(env.get("WALKSCORE_LOG_DIR") or "logs"),
        log_to_file=_bool(env, "WALKSCORE_LOG_TO_FILE", True),
        test_address=env.get("WALKSCORE_TEST_ADDRESS") or None,
    )
