import os

_ENV_MODULES = {
    "dev": "config.development",
    "development": "config.development",
    "test": "config.testing",
    "testing": "config.testing",
    "prod": "config.production",
    "production": "config.production",
}


def get_settings_module() -> str:
    """Dotted path of the settings module.

    SETTINGS_MODULE wins when set; otherwise APP_ENV picks one, and unknown
    values fall back to development.
    """
    explicit = os.getenv("SETTINGS_MODULE")
    if explicit:
        return explicit
    env = os.getenv("APP_ENV", "development").strip().lower()
    return _ENV_MODULES.get(env, "config.development")
