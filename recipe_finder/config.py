"""Runtime settings for the recipe finder backend.

Settings are resolved in three layers, later layers winning:

1. Built-in defaults
2. An optional YAML file (``config/settings.yaml`` or the path in
   ``RECIPE_FINDER_CONFIG``)
3. Environment variables (entry points call ``load_dotenv()`` first, so a
   local ``.env`` file is honoured)

The persistent-store freshness window is fixed at seven days and is not
configurable; the memory-cache TTL is.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from recipe_finder.data_layer.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/settings.yaml"
DEFAULT_ALLOWED_ORIGINS = ["http://localhost:3000", "http://localhost:3001"]
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Environment variable -> (settings field, type)
ENV_VARS = {
    "SPOONACULAR_API_KEY": ("api_key", str),
    "CACHE_DURATION_HOURS": ("cache_duration_hours", int),
    "API_TIMEOUT_SECONDS": ("api_timeout_seconds", int),
    "DATA_DIR": ("data_dir", str),
    "ALLOWED_ORIGINS": ("allowed_origins", list),
    "PORT": ("port", int),
    "LOG_LEVEL": ("log_level", str),
}


@dataclass
class Settings:
    """Resolved configuration values."""

    api_key: Optional[str] = None
    cache_duration_hours: int = 24
    api_timeout_seconds: int = 30
    data_dir: str = "data"
    allowed_origins: List[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS))
    port: int = 8080
    log_level: str = "INFO"

    @property
    def cache_ttl_seconds(self) -> int:
        return self.cache_duration_hours * 3600

    def require_api_key(self) -> str:
        """Return the provider API key.

        Raises:
            ConfigurationError: If no API key is configured
        """
        if not self.api_key or not self.api_key.strip():
            raise ConfigurationError(
                "SPOONACULAR_API_KEY",
                "SPOONACULAR_API_KEY is not set. Export it or add it to .env."
            )
        return self.api_key.strip()


def _coerce(name: str, value: Any, kind: type, default: Any) -> Any:
    """Convert a raw setting to *kind*, keeping *default* on bad input."""
    if value is None:
        return default
    if kind is list:
        if isinstance(value, str):
            items = [item.strip() for item in value.split(",")]
        else:
            items = [str(item).strip() for item in value]
        items = [item for item in items if item]
        return items or default
    if kind is int:
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring non-integer value for %s: %r", name, value)
            return default
    return str(value)


def _read_yaml(path: Path) -> Dict[str, Any]:
    """Load the YAML settings file.

    Raises:
        ConfigurationError: If the file is not valid YAML or not a mapping
    """
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(str(path), f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(str(path), f"Settings file {path} must contain a mapping")
    return data


def load_settings(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None
) -> Settings:
    """Resolve settings from defaults, YAML file and environment.

    Args:
        path: Optional YAML settings file. When omitted, ``RECIPE_FINDER_CONFIG``
            or ``config/settings.yaml`` is used if it exists.
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        Settings instance

    Raises:
        ConfigurationError: If an explicitly given file is missing or invalid
    """
    env = os.environ if environ is None else environ
    settings = Settings()

    explicit = path or env.get("RECIPE_FINDER_CONFIG")
    config_path = Path(explicit or DEFAULT_CONFIG_PATH)
    file_values: Dict[str, Any] = {}
    if config_path.exists():
        file_values = _read_yaml(config_path)
    elif explicit:
        raise ConfigurationError(str(config_path), f"Settings file not found: {config_path}")

    for env_name, (attr, kind) in ENV_VARS.items():
        default = getattr(settings, attr)
        if attr in file_values:
            setattr(settings, attr, _coerce(attr, file_values[attr], kind, default))
        if env_name in env and env[env_name] != "":
            setattr(settings, attr, _coerce(env_name, env[env_name], kind, getattr(settings, attr)))

    if settings.cache_duration_hours < 0:
        raise ConfigurationError("CACHE_DURATION_HOURS", "CACHE_DURATION_HOURS must be non-negative")
    if settings.api_timeout_seconds <= 0:
        raise ConfigurationError("API_TIMEOUT_SECONDS", "API_TIMEOUT_SECONDS must be positive")
    return settings


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for CLI and server entry points."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
    )
