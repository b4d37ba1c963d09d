"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so that
the service starts on a developer machine without any setup.  In a
production deployment override at least ``APP_PASSWORD`` and
``SECRET_KEY``.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Registry POS API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Key used to sign device tokens.  Rotating it logs out every device.
    secret_key: str = os.getenv("SECRET_KEY", "change_me")

    # Shared password that unlocks a device.  When empty the password gate
    # is disabled and every request is accepted.
    app_password: str = os.getenv("APP_PASSWORD", "")

    # A device stays unlocked for this many days after logging in.
    device_token_expire_days: int = int(os.getenv("DEVICE_TOKEN_EXPIRE_DAYS", "3"))
    device_cookie_name: str = os.getenv("DEVICE_COOKIE_NAME", "device_token")

    # ``sqlite`` stores data in ``database_url``; ``json`` keeps flat
    # ``products.json`` and ``registry.json`` files in ``data_dir``.
    # Relative paths are resolved against the project root by the ``db``
    # module.
    storage_backend: str = os.getenv("STORAGE_BACKEND", "sqlite")
    database_url: str = os.getenv("DATABASE_URL", "registry.db")
    data_dir: str = os.getenv("DATA_DIR", "data")

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must be
# set before importing this module.
settings = Settings()
