"""
Build configuration: environment-aware settings.

All environment variables are documented here. Values can also be placed in a
``.env`` file at the project root.
"""

from __future__ import annotations

import os
import warnings
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).parent

load_dotenv(BASE_DIR / ".env")


def _env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class BaseConfig:
    # Manifest output
    MANIFEST_FILE_NAME = os.environ.get("MANIFEST_FILE_NAME", "manifest.json")
    MANIFEST_BASE_PATH = os.environ.get("MANIFEST_BASE_PATH", "")
    # Empty means "use the build's own public path"
    MANIFEST_PUBLIC_PATH = os.environ.get("MANIFEST_PUBLIC_PATH", "")
    MANIFEST_WRITE_TO_DISK = _env_flag("MANIFEST_WRITE_TO_DISK")

    # Where built assets live and how they are served
    ASSET_DIST_DIR = os.environ.get("ASSET_DIST_DIR", str(BASE_DIR / "static" / "dist"))
    ASSET_DIST_URL = os.environ.get("ASSET_DIST_URL", "/static/dist")
    ASSET_FALLBACK_URL = os.environ.get("ASSET_FALLBACK_URL", "/static/js")

    # Logging
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "text")  # "json" or "text"
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "text")
    # Dev servers keep assets in memory; write the manifest anyway
    MANIFEST_WRITE_TO_DISK = _env_flag("MANIFEST_WRITE_TO_DISK", "1")


class ProductionConfig(BaseConfig):
    DEBUG = False
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json")

    @classmethod
    def validate(cls):
        """Fail fast on missing or inconsistent configuration in production."""
        errors: list[str] = []

        if not cls.MANIFEST_FILE_NAME.strip():
            errors.append("MANIFEST_FILE_NAME must not be empty.")

        if cls.LOG_FORMAT not in ("json", "text"):
            errors.append(f"LOG_FORMAT must be 'json' or 'text', got {cls.LOG_FORMAT!r}.")

        if not cls.MANIFEST_PUBLIC_PATH:
            warnings.warn("MANIFEST_PUBLIC_PATH is not set; manifest values will use the build's public path.")

        if errors:
            raise RuntimeError(
                "Production configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
            )


class TestingConfig(BaseConfig):
    TESTING = True
    MANIFEST_WRITE_TO_DISK = False
    LOG_LEVEL = "DEBUG"


config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(env: str | None = None) -> type[BaseConfig]:
    """Resolve the config class for ``env`` (default: ``$BUILD_ENV``, then development)."""
    env = env or os.environ.get("BUILD_ENV", "development")
    cfg = config_by_name.get(env, config_by_name["development"])
    if hasattr(cfg, "validate"):
        cfg.validate()
    return cfg
