"""Конфигурация приложения."""
import os
from functools import lru_cache


def _flag(name: str) -> bool:
    return os.environ.get(name, "0").lower() in ("1", "true", "yes")


@lru_cache
def get_config():
    return type("Config", (), {
        "host": os.environ.get("HOST", "0.0.0.0"),
        "port": int(os.environ.get("PORT", "4000")),
        "debug": _flag("DEBUG"),
        "log_level": os.environ.get("LOG_LEVEL", "INFO").upper(),
        "allowed_origins": os.environ.get("ALLOWED_ORIGINS", "*").split(","),
    })()
