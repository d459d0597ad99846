"""
Configuration package for spotify-trends

Two components live here:

1. Settings Management (settings.py):
   - Application configuration from YAML files and environment variables
   - Validation of language, interval, debounce and fan-out limits
   - Configuration persistence and hot-reloading

2. Credential Management (auth.py):
   - Spotify client-credentials token exchange
   - Process-wide bearer token shared by all catalog calls

Usage:

    from spotify_trends.config import get_settings, get_broker

    settings = get_settings()
    broker = get_broker()
"""

from .settings import get_settings, reload_settings, Settings
from .auth import get_broker, reset_broker, CredentialBroker, Credential

__all__ = [
    # Settings management
    'get_settings',
    'reload_settings',
    'Settings',

    # Client-credentials token management
    'get_broker',
    'reset_broker',
    'CredentialBroker',
    'Credential',
]
