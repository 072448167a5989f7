import os

_ENVIRONMENTS = {
    "production": "config.production",
    "prod": "config.production",
    "testing": "config.testing",
    "test": "config.testing",
}


def get_settings_module(env: str | None = None) -> str:
    """Settings module for APP_ENV; anything unknown falls back to development."""

    env = (env or os.getenv("APP_ENV") or "development").strip().lower()
    return _ENVIRONMENTS.get(env, "config.development")
