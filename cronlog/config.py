"""
Cronlog configuration.

Two layers:
- AppConfig: presentation settings read from application.json
  (colour per application, default colour)
- Settings: runtime settings for the store and server, built from
  defaults, CRONLOG_* environment variables, and explicit overrides

Settings is passed explicitly to the store, the server and the CLI.
There is no process-wide configuration singleton.
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "application.json"

CONFIG_SEARCH_PATHS = [
    Path("/etc/cronlog"),
    Path("/var/cronlog"),
    Path.home() / ".cronlog",
]

# Environment variable -> (Settings field, parser)
ENV_OVERRIDES = {
    "CRONLOG_DB": ("db_path", str),
    "CRONLOG_HOST": ("host", str),
    "CRONLOG_PORT": ("port", int),
    "CRONLOG_LOGLEVEL": ("log_level", str),
    "CRONLOG_PAGE_SIZE": ("page_size", int),
}

ENV_VARS = {name: var for var, (name, _) in ENV_OVERRIDES.items()}


class Application(BaseModel):
    """Display settings for one application."""

    model_config = ConfigDict(extra="forbid")

    name: str
    color: str = ""

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Application name cannot be empty")
        return v.strip()


class AppConfig(BaseModel):
    """
    Presentation configuration loaded from application.json.

    Example:
        {
            "applications": [{"name": "backup", "color": "#2e7d32"}],
            "defaultColor": "#607d8b"
        }
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    applications: List[Application] = Field(default_factory=list)
    default_color: str = Field(default="", alias="defaultColor")

    def color_for(self, application: str) -> str:
        """Colour configured for an application, or the default colour."""
        for app in self.applications:
            if app.name == application and app.color:
                return app.color
        return self.default_color


@dataclass(frozen=True)
class Settings:
    """Runtime settings threaded through store, server and CLI."""

    db_path: str = "./cronlog-store.db"
    host: str = "localhost"
    port: int = 9000
    log_level: str = "INFO"
    page_size: int = 20
    max_output_length: int = 64 * 1024
    busy_timeout: float = 5.0
    app_config: AppConfig = field(default_factory=AppConfig)


def _candidate_paths(config_path: Optional[Union[str, Path]]) -> List[Path]:
    candidates = []
    if config_path:
        path = Path(config_path).expanduser().resolve()
        if path.is_dir():
            candidates.append(path / CONFIG_FILE_NAME)
        else:
            candidates.append(path)
    candidates.extend(p / CONFIG_FILE_NAME for p in CONFIG_SEARCH_PATHS)
    return candidates


def load_app_config(config_path: Optional[Union[str, Path]] = None) -> AppConfig:
    """
    Load application.json from the first location where it exists.

    Search order: config_path (file, or directory containing
    application.json), then /etc/cronlog, /var/cronlog, ~/.cronlog.

    Args:
        config_path: Optional explicit file or directory

    Returns:
        Parsed AppConfig, or an empty AppConfig if no file exists

    Raises:
        ConfigError: If a file exists but cannot be read or parsed
    """
    for candidate in _candidate_paths(config_path):
        if not candidate.is_file():
            continue

        try:
            with open(candidate, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(str(candidate), str(e)) from e

        try:
            app_config = AppConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(str(candidate), str(e)) from e

        logger.info(f"Loaded configuration from {candidate}")
        return app_config

    logger.debug("No application.json found, using empty configuration")
    return AppConfig()


def _out_of_range(settings: Settings) -> Optional[Tuple[str, str]]:
    """First (setting, reason) whose value is out of range, or None."""
    if not 1 <= settings.port <= 65535:
        return "port", "must be between 1 and 65535"
    if settings.page_size < 1:
        return "page_size", "must be >= 1"
    if settings.max_output_length < 1:
        return "max_output_length", "must be >= 1"
    if settings.busy_timeout < 0:
        return "busy_timeout", "must be >= 0"
    return None


def _env_overrides(environ: Dict[str, str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for var, (name, parse) in ENV_OVERRIDES.items():
        raw = environ.get(var)
        if raw is None or raw == "":
            continue
        try:
            overrides[name] = parse(raw)
        except ValueError as e:
            raise ConfigError(var, f"invalid value '{raw}': {e}") from e
    return overrides


def load_settings(
    environ: Optional[Dict[str, str]] = None,
    base: Optional[Settings] = None,
    **overrides: Any,
) -> Settings:
    """
    Build Settings from defaults, environment, and explicit overrides.

    Later sources win. Overrides that are None are ignored, so CLI
    options left unset do not mask environment values.

    Args:
        environ: Environment to read CRONLOG_* from (default: os.environ)
        base: Defaults to start from (default: Settings())
        **overrides: Explicit values, typically from CLI options

    Raises:
        ConfigError: If an environment variable cannot be parsed, or a
            resulting value is out of range
        TypeError: If an override names an unknown setting
    """
    known = {f.name for f in fields(Settings)}
    unknown = set(overrides) - known
    if unknown:
        raise TypeError(f"Unknown settings: {', '.join(sorted(unknown))}")

    env_values = _env_overrides(os.environ if environ is None else environ)
    explicit = {k: v for k, v in overrides.items() if v is not None}
    settings = replace(base or Settings(), **{**env_values, **explicit})

    problem = _out_of_range(settings)
    if problem:
        name, reason = problem
        source = name
        if name in env_values and name not in explicit:
            source = ENV_VARS[name]
        raise ConfigError(source, f"invalid value {getattr(settings, name)!r}: {reason}")
    return settings
