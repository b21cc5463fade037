"""Configuration module for Artist Graph."""

from .settings import GraphSettings, Settings, SpotifySettings, get_settings

__all__ = [
    "GraphSettings",
    "Settings",
    "SpotifySettings",
    "get_settings",
]
