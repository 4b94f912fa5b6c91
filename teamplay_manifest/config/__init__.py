from __future__ import annotations

from .settings import ConfigError, ManifestSettings, load_settings

__all__ = [
    "ConfigError",
    "ManifestSettings",
    "load_settings",
]
