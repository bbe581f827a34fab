"""
Configuration module for centralized settings management.

Provides type-safe configuration using Pydantic with
environment variable support and validation.
"""

from .settings import (
    settings,
    Settings,
    ObservabilitySettings
)

__all__ = [
    'settings',
    'Settings',
    'ObservabilitySettings'
]
