"""
Configuration for the DNS proxy toggle system.

Configuration is read once at startup from an env file (parsed with
python-dotenv) overlaid by the process environment, and frozen into an
AppConfig that is passed explicitly to every component.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values

from .exceptions import ConfigMissingError


DEFAULT_ENV_FILE = Path(".env")
DEFAULT_STATE_FILE = ".state.json"
DEFAULT_LOG_FILE = "cloudflare-dns-toggle.log"
DEFAULT_API_BASE_URL = "https://api.cloudflare.com/client/v4"
DEFAULT_CHECK_INTERVAL = 60.0

TRUE_VALUES = frozenset({"1", "true", "yes", "y", "on"})
FALSE_VALUES = frozenset({"0", "false", "no", "n", "off"})


@dataclass(frozen=True)
class BackoffConfig:
    """Extra delay between monitor rounds while the API keeps failing."""

    base_delay_seconds: float = 60.0
    max_delay_seconds: float = 900.0


@dataclass(frozen=True)
class LoggingConfig:
    """Logging destination and format."""

    log_file: Optional[Path] = None
    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass(frozen=True)
class AppConfig:
    """Main configuration combining all settings."""

    api_token: str
    state_file: Path
    zone_id: Optional[str] = None
    check_interval_seconds: float = DEFAULT_CHECK_INTERVAL
    auto_toggle: bool = True
    probe_timeout_seconds: float = 10.0
    domain_delay_seconds: float = 0.3
    api_base_url: str = DEFAULT_API_BASE_URL
    simulation_mode: bool = False
    backoff: BackoffConfig = field(default_factory=BackoffConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _clean(values: Mapping[str, Optional[str]], name: str) -> Optional[str]:
    raw = values.get(name)
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


def _float_env(values: Mapping[str, Optional[str]], name: str, default: float) -> float:
    raw = _clean(values, name)
    if raw is None:
        return default
    try:
        parsed = float(raw)
    except ValueError:
        raise ConfigMissingError(
            code="invalid_value",
            message=f"{name} must be a number, got {raw!r}",
            details={"variable": name},
        )
    if parsed < 0:
        raise ConfigMissingError(
            code="invalid_value",
            message=f"{name} must not be negative, got {raw!r}",
            details={"variable": name},
        )
    return parsed


def _bool_env(values: Mapping[str, Optional[str]], name: str, default: bool) -> bool:
    raw = _clean(values, name)
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ConfigMissingError(
        code="invalid_value",
        message=f"{name} must be true or false, got {raw!r}",
        details={"variable": name},
    )


def _path_env(
    values: Mapping[str, Optional[str]], name: str, default: str, base_dir: Path
) -> Path:
    path = Path(_clean(values, name) or default).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path


def read_env_values(
    env_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> dict[str, Optional[str]]:
    """
    Merge the env file with the process environment.

    Variables already set in the environment take precedence over the file,
    the same way load_dotenv() behaves without override.
    """
    values: dict[str, Optional[str]] = {}
    if env_file is not None and env_file.is_file():
        values.update(dotenv_values(env_file))
    values.update(os.environ if environ is None else environ)
    return values


def load_config(
    env_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    simulation_mode: bool = False,
) -> AppConfig:
    """
    Build the application configuration.

    Args:
        env_file: Path to the env file; relative state and log paths are
                  resolved against its directory
        environ: Environment mapping (defaults to os.environ)
        simulation_mode: Skip all DNS writes

    Returns:
        Frozen AppConfig

    Raises:
        ConfigMissingError: If CF_API_TOKEN is unset or a value is malformed
    """
    values = read_env_values(env_file, environ)
    base_dir = env_file.resolve().parent if env_file is not None else Path.cwd()

    api_token = _clean(values, "CF_API_TOKEN")
    if not api_token:
        raise ConfigMissingError(
            code="missing_token",
            message="CF_API_TOKEN not set",
            details={"env_file": str(env_file) if env_file else None},
        )

    output_format = (_clean(values, "LOG_FORMAT") or "text").lower()
    if output_format not in ("json", "text", "both"):
        raise ConfigMissingError(
            code="invalid_value",
            message=f"LOG_FORMAT must be json, text or both, got {output_format!r}",
            details={"variable": "LOG_FORMAT"},
        )

    return AppConfig(
        api_token=api_token,
        zone_id=_clean(values, "CF_ZONE_ID"),
        state_file=_path_env(values, "STATE_FILE", DEFAULT_STATE_FILE, base_dir),
        check_interval_seconds=_float_env(values, "CHECK_INTERVAL", DEFAULT_CHECK_INTERVAL),
        auto_toggle=_bool_env(values, "AUTO_TOGGLE", True),
        probe_timeout_seconds=_float_env(values, "PROBE_TIMEOUT", 10.0),
        domain_delay_seconds=_float_env(values, "DOMAIN_DELAY", 0.3),
        api_base_url=_clean(values, "CF_API_BASE_URL") or DEFAULT_API_BASE_URL,
        simulation_mode=simulation_mode,
        backoff=BackoffConfig(
            base_delay_seconds=_float_env(values, "BACKOFF_BASE", 60.0),
            max_delay_seconds=_float_env(values, "BACKOFF_MAX", 900.0),
        ),
        logging=LoggingConfig(
            log_file=_path_env(values, "LOG_FILE", DEFAULT_LOG_FILE, base_dir),
            level=(_clean(values, "LOG_LEVEL") or "info").lower(),
            output_format=output_format,
        ),
    )
