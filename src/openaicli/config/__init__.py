"""Configuration loading for openaicli."""

from .properties import load_properties, parse_properties_text
from .settings import Settings, default_contract, load_settings, resolve_settings

__all__ = [
    "Settings",
    "default_contract",
    "load_properties",
    "load_settings",
    "parse_properties_text",
    "resolve_settings",
]
