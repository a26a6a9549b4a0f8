"""
Centralized configuration loader for the blog CMS backend.

Loads settings from an optional YAML file and environment variables,
providing sensible defaults when neither is present.  Environment variables
always win over YAML values.

Provides:
    - Settings: Global application settings loaded from YAML + env vars
    - get_settings(): Thread-safe singleton accessor for Settings
    - reset_settings(): Drop the cached Settings (tests, reloads)
    - validate_env(): Startup report of storage/auth environment variables
"""

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from blog_cms.exceptions import ConfigurationError

# ---------------------------------------------------------------------------
# Load .env file (no-op if file does not exist)
# ---------------------------------------------------------------------------
load_dotenv()

# ---------------------------------------------------------------------------
# Project root directory (parent of blog_cms/)
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent

logger = logging.getLogger(__name__)

DEFAULT_JWT_SECRET = "your-secret-key-change-in-production"

STORAGE_BACKENDS = ("auto", "file", "memory")


def _env_bool(value: str, env_key: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"Invalid boolean for env var {env_key}='{value}'")


# ===========================================================================
# SETTINGS
# ===========================================================================


@dataclass
class Settings:
    """
    Global application settings.

    Loaded from ``config/settings.yaml`` when available, falling back to
    defaults.  Environment variables override YAML values for secrets and
    deployment-specific configuration.

    The remote database tier is active iff both ``supabase_url`` and
    ``supabase_key`` are set; see :attr:`database_configured`.
    """

    # Remote database tier
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None

    # Local tiers
    storage_backend: str = "auto"
    data_dir: str = str(PROJECT_ROOT / "data")

    # Auth
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_expire_days: int = 7
    default_admin_email: str = "admin@galactis.ai"

    # Scheduling
    sweep_on_feed: bool = False

    # Uploads
    max_upload_bytes: int = 5 * 1024 * 1024
    upload_bucket: str = "blog-images"

    # Runtime
    environment: str = "development"
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ConfigurationError(
                f"Unknown storage backend '{self.storage_backend}'. "
                f"Valid backends: {list(STORAGE_BACKENDS)}"
            )
        if self.jwt_expire_days <= 0:
            raise ConfigurationError(
                f"jwt_expire_days must be positive, got {self.jwt_expire_days}"
            )
        if self.max_upload_bytes <= 0:
            raise ConfigurationError(
                f"max_upload_bytes must be positive, got {self.max_upload_bytes}"
            )

    @property
    def database_configured(self) -> bool:
        """True when the Supabase tier should be used for this process."""
        return bool(self.supabase_url and self.supabase_key)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_yaml(cls, path: Optional[Path] = None) -> "Settings":
        """
        Load settings from a YAML file, then apply environment overrides.

        If the file does not exist, YAML contributes nothing and only the
        environment and defaults are used.

        Args:
            path: Path to the YAML file. Defaults to
                ``<PROJECT_ROOT>/config/settings.yaml``.

        Returns:
            Populated Settings instance.

        Raises:
            ConfigurationError: If the YAML file exists but cannot be parsed,
                or an environment override has an invalid value.
        """
        path = path or PROJECT_ROOT / "config" / "settings.yaml"

        data: Dict[str, Any] = {}
        if path.exists():
            try:
                with open(path, "r", encoding="utf-8") as fh:
                    data = yaml.safe_load(fh) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(
                    f"Failed to parse settings YAML at {path}: {exc}"
                ) from exc

        kwargs: Dict[str, Any] = {
            key: value for key, value in data.items()
            if key in cls.__dataclass_fields__
        }

        # -----------------------------------------------------------------
        # Environment variable overrides
        # -----------------------------------------------------------------
        env_overrides = {
            "SUPABASE_URL": ("supabase_url", str),
            "SUPABASE_KEY": ("supabase_key", str),
            "STORAGE_BACKEND": ("storage_backend", str),
            "DATA_DIR": ("data_dir", str),
            "JWT_SECRET": ("jwt_secret", str),
            "JWT_EXPIRE_DAYS": ("jwt_expire_days", int),
            "DEFAULT_ADMIN_EMAIL": ("default_admin_email", str),
            "SWEEP_ON_FEED": ("sweep_on_feed", None),
            "MAX_UPLOAD_BYTES": ("max_upload_bytes", int),
            "UPLOAD_BUCKET": ("upload_bucket", str),
            "ENVIRONMENT": ("environment", str),
            "LOG_LEVEL": ("log_level", str),
        }
        for env_key, (attr_name, cast_fn) in env_overrides.items():
            env_val = os.environ.get(env_key)
            if not env_val:
                continue
            if cast_fn is None:
                kwargs[attr_name] = _env_bool(env_val, env_key)
                continue
            try:
                kwargs[attr_name] = cast_fn(env_val)
            except (ValueError, TypeError) as exc:
                raise ConfigurationError(
                    f"Invalid value for env var {env_key}='{env_val}': {exc}"
                ) from exc

        settings = cls(**kwargs)
        if settings.jwt_secret == DEFAULT_JWT_SECRET:
            logger.warning(
                "[CONFIG] JWT_SECRET not set, using the built-in development secret"
            )
        return settings


# ===========================================================================
# SINGLETON SETTINGS ACCESSOR
# ===========================================================================

_settings_instance: Optional[Settings] = None
_settings_lock = threading.Lock()


def get_settings() -> Settings:
    """
    Get the global Settings singleton.

    On first call, loads from ``config/settings.yaml`` and the environment.
    Subsequent calls return the cached instance.

    Returns:
        The global Settings instance.
    """
    global _settings_instance
    if _settings_instance is None:
        with _settings_lock:
            if _settings_instance is None:
                _settings_instance = Settings.from_yaml()
    return _settings_instance


def reset_settings() -> None:
    """
    Reset the cached Settings singleton.

    Useful for testing or when the environment has changed at runtime.
    """
    global _settings_instance
    with _settings_lock:
        _settings_instance = None


# ===========================================================================
# ENVIRONMENT VARIABLE VALIDATION
# ===========================================================================

# Both must be set together to activate the database tier
DATABASE_ENV_VARS: List[str] = [
    "SUPABASE_URL",
    "SUPABASE_KEY",
]

# Optional but recommended environment variables
OPTIONAL_ENV_VARS: List[str] = [
    "JWT_SECRET",
    "DATA_DIR",
]


def validate_env(strict: bool = False) -> Dict[str, bool]:
    """
    Report which storage/auth environment variables are set.

    Setting only one of the two Supabase variables is always a mistake:
    the process would silently run on the file tier.

    Args:
        strict: If ``True``, raise ``ConfigurationError`` when the Supabase
            variables are only partially set. If ``False``, log a warning.

    Returns:
        Dict mapping variable name to presence status (``True`` if set).

    Raises:
        ConfigurationError: If ``strict=True`` and the database variables
            are only partially configured.
    """
    status: Dict[str, bool] = {}

    for var in DATABASE_ENV_VARS + OPTIONAL_ENV_VARS:
        status[var] = bool(os.environ.get(var))

    database_flags = [status[var] for var in DATABASE_ENV_VARS]
    if any(database_flags) and not all(database_flags):
        missing = [var for var in DATABASE_ENV_VARS if not status[var]]
        message = (
            f"Incomplete database configuration, missing: {missing}. "
            "Falling back to the local file tier."
        )
        if strict:
            raise ConfigurationError(message)
        logger.warning("[CONFIG] %s", message)

    return status


# ===========================================================================
# PUBLIC API
# ===========================================================================

__all__ = [
    "PROJECT_ROOT",
    "DEFAULT_JWT_SECRET",
    "Settings",
    "get_settings",
    "reset_settings",
    "validate_env",
]
