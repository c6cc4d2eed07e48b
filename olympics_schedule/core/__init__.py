"""
Core Module
Zentrale Konfiguration und Settings
"""

from .config import Settings, settings

__all__ = ["settings", "Settings"]
