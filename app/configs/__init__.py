from app.configs.settings import (
    GENERATION_CONFIG,
    Settings,
    settings,
)

__all__ = [
    "GENERATION_CONFIG",
    "Settings",
    "settings",
]
