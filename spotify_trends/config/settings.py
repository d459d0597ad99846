"""
Configuration management for spotify-trends

This module handles loading, validation, and management of application settings
from multiple sources including YAML files and environment variables. It provides
a centralized configuration system that supports hot-reloading and validation.

The configuration is organized into logical sections using dataclasses:
- Spotify API settings (client credentials, endpoints)
- Trending refresh preferences (language, interval, roster, fan-out limits)
- Interactive search options (debounce window, result limit)
- Reddit feed settings (subreddit, identifying user agent)
- Logging and network configuration

All sensitive data (client id and secret) can be loaded from environment
variables for security, while non-sensitive settings can be stored in YAML files.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load environment variables from .env file if present
load_dotenv()


DEFAULT_ROSTER = [
    "Taylor Swift",
    "Drake",
    "Ed Sheeran",
    "Ariana Grande",
    "The Weeknd",
    "Billie Eilish",
    "Post Malone",
    "Dua Lipa",
]


@dataclass
class SpotifyConfig:
    """
    Spotify API configuration and authentication settings

    Contains the client-credentials pair and the endpoints used for token
    exchange and catalog search. Sensitive values (client_id, client_secret)
    should be provided via environment variables.
    """
    client_id: str = ""
    client_secret: str = ""
    token_url: str = "https://accounts.spotify.com/api/token"
    api_base_url: str = "https://api.spotify.com/v1"


@dataclass
class TrendingConfig:
    """
    Trending refresh configuration

    Controls which language is aggregated, how often the baseline is refreshed
    and how many results each keyword contributes to the trending set.
    """
    language: str = "english"
    refresh_interval: int = 300  # seconds
    language_debounce_ms: int = 300
    per_query_limit: int = 10
    per_query_take: int = 5
    max_tracks: int = 20
    use_market: bool = True
    recent_years_only: bool = False
    strict_language: bool = False
    roster: List[str] = field(default_factory=lambda: list(DEFAULT_ROSTER))


@dataclass
class SearchConfig:
    """
    Interactive search configuration

    The debounce window must stay between 300 and 500 milliseconds so typing
    does not produce a request per keystroke.
    """
    debounce_ms: int = 400
    limit: int = 20


@dataclass
class FeedConfig:
    """
    Reddit feed configuration

    The feed is read anonymously; Reddit requires a descriptive user agent.
    """
    base_url: str = "https://www.reddit.com"
    subreddit: str = "music"
    limit: int = 20
    user_agent: str = "spotify-trends/1.0 (read-only feed client)"


@dataclass
class LoggingConfig:
    """
    Logging configuration and output settings

    Controls application logging behavior including log levels, file output,
    rotation, and console formatting.
    """
    level: str = "INFO"
    file: str = ""
    max_size: str = "10MB"
    backup_count: int = 3
    console_output: bool = True
    colored_output: bool = True


@dataclass
class NetworkConfig:
    """
    Network and HTTP configuration settings

    Timeouts are applied to every aiohttp session created by the application.
    The request rate is enforced client-side before each catalog call.
    """
    user_agent: str = "spotify-trends/1.0"
    request_timeout: int = 30
    requests_per_second: int = 10


class Settings:
    """
    Main settings class that manages all configuration

    This class serves as the central configuration manager, loading settings
    from multiple sources (YAML files, environment variables) and providing
    a unified interface for accessing configuration throughout the application.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize settings from config file or environment variables

        Args:
            config_path: Path to custom config file, if None uses default locations
        """
        self.config_path = config_path
        self.config_dir = Path.home() / ".spotify-trends"

        # Initialize all configuration objects with default values
        self.spotify = SpotifyConfig()
        self.trending = TrendingConfig()
        self.search = SearchConfig()
        self.feed = FeedConfig()
        self.logging = LoggingConfig()
        self.network = NetworkConfig()

        # Load configuration from various sources in order of precedence
        self._load_config()
        self._load_environment_variables()

    def _load_config(self) -> None:
        """
        Load configuration from YAML file

        Searches for configuration files in multiple locations in order of
        precedence. The first file found will be used.
        """
        config_paths = [
            self.config_path,
            self.config_dir / "config.yaml",
            Path("config/config.yaml"),
            Path("config.yaml")
        ]

        config_data = {}
        for path in config_paths:
            if path and Path(path).exists():
                try:
                    with open(path, 'r', encoding='utf-8') as f:
                        config_data = yaml.safe_load(f) or {}
                    break
                except (OSError, yaml.YAMLError) as e:
                    print(f"Warning: Failed to load config from {path}: {e}")

        self._apply_config(config_data)

    def _apply_config(self, config_data: Dict[str, Any]) -> None:
        """
        Apply configuration data to dataclass instances

        Only attributes that exist on both the YAML section and the dataclass
        are updated; unknown keys are ignored.

        Args:
            config_data: Dictionary containing configuration sections
        """
        config_mapping = self._sections()

        for section_name, section_data in config_data.items():
            if section_name in config_mapping and isinstance(section_data, dict):
                config_obj = config_mapping[section_name]
                for key, value in section_data.items():
                    if hasattr(config_obj, key):
                        setattr(config_obj, key, value)

    def _sections(self) -> Dict[str, Any]:
        return {
            'spotify': self.spotify,
            'trending': self.trending,
            'search': self.search,
            'feed': self.feed,
            'logging': self.logging,
            'network': self.network,
        }

    def _load_environment_variables(self) -> None:
        """
        Load sensitive configuration from environment variables

        Environment variables take precedence over file-based configuration.
        """
        env_mappings = {
            'SPOTIFY_CLIENT_ID': lambda v: setattr(self.spotify, 'client_id', v),
            'SPOTIFY_CLIENT_SECRET': lambda v: setattr(self.spotify, 'client_secret', v),
            'SPOTIFY_TRENDS_LANGUAGE': lambda v: setattr(self.trending, 'language', v),
            'SPOTIFY_TRENDS_INTERVAL': lambda v: setattr(self.trending, 'refresh_interval', int(v)),
            'SPOTIFY_TRENDS_LOG_LEVEL': lambda v: setattr(self.logging, 'level', v),
        }

        for env_var, setter in env_mappings.items():
            value = os.getenv(env_var)
            if value:
                try:
                    setter(value)
                except ValueError:
                    print(f"Warning: Ignoring invalid value for {env_var}: {value!r}")

    def get_config_directory(self) -> Path:
        """
        Get the expanded config directory path

        Returns:
            Path object for the configuration directory
        """
        return self.config_dir.expanduser()

    def save_config(self, path: Optional[str] = None) -> Path:
        """
        Save current configuration to file

        Serializes the current configuration to a YAML file, excluding
        the client credentials.

        Args:
            path: Custom path to save config, defaults to user config directory

        Returns:
            Path the configuration was written to

        Raises:
            OSError: If the configuration cannot be written
        """
        if not path:
            target = self.get_config_directory() / "config.yaml"
        else:
            target = Path(path)

        config_data = {
            name: self._dataclass_to_dict(section)
            for name, section in self._sections().items()
        }

        # Remove sensitive data from saved config
        config_data['spotify']['client_id'] = ""
        config_data['spotify']['client_secret'] = ""

        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, 'w', encoding='utf-8') as f:
            yaml.dump(config_data, f, default_flow_style=False, indent=2, allow_unicode=True)
        return target

    def _dataclass_to_dict(self, obj) -> Dict[str, Any]:
        """Convert a section dataclass to a plain dictionary for YAML output"""
        result = {}
        for key, value in obj.__dict__.items():
            result[key] = list(value) if isinstance(value, list) else value
        return result

    def validate(self) -> List[str]:
        """
        Validate current configuration

        Performs validation of all configuration values so that errors are
        caught before the first network call.

        Returns:
            List of human-readable problems; empty when the configuration is valid
        """
        from ..spotify.languages import Language

        errors = []

        if not self.spotify.client_id or not self.spotify.client_secret:
            errors.append("Spotify client_id and client_secret are required")

        try:
            Language.from_name(self.trending.language)
        except ValueError as e:
            errors.append(str(e))

        if self.trending.refresh_interval <= 0:
            errors.append(f"Refresh interval must be positive: {self.trending.refresh_interval}")

        if not 300 <= self.search.debounce_ms <= 500:
            errors.append(f"Search debounce must be between 300 and 500 ms: {self.search.debounce_ms}")

        if self.trending.per_query_take <= 0 or self.trending.per_query_take > self.trending.per_query_limit:
            errors.append("per_query_take must be between 1 and per_query_limit")

        if self.trending.max_tracks <= 0:
            errors.append(f"max_tracks must be positive: {self.trending.max_tracks}")

        if not self.trending.roster:
            errors.append("Popular artist roster cannot be empty")

        return errors

    def is_valid(self) -> bool:
        return not self.validate()

    def __str__(self) -> str:
        """Concise summary of key configuration values for logging"""
        sections = [
            f"Language: {self.trending.language}",
            f"Interval: {self.trending.refresh_interval}s",
            f"Roster: {len(self.trending.roster)} artists",
            f"Search debounce: {self.search.debounce_ms}ms",
        ]
        return f"Settings({', '.join(sections)})"


# Global settings instance for singleton pattern
settings = Settings()


def get_settings() -> Settings:
    """
    Get the global settings instance

    Provides access to the singleton settings instance that is shared
    throughout the application.

    Returns:
        The global Settings instance
    """
    return settings


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """
    Reload settings from configuration files

    Creates a new settings instance with updated configuration from files
    and environment variables.

    Args:
        config_path: Optional path to specific config file

    Returns:
        New Settings instance with reloaded configuration
    """
    global settings
    settings = Settings(config_path)
    return settings
