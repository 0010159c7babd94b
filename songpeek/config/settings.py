"""
Configuration management for songpeek

This module loads application settings from YAML files and environment
variables and exposes them through a single global Settings instance.

The configuration is organized into sections using dataclasses:
- Catalog backend selection and credentials (Spotify, YouTube)
- Lyrics resolution (Genius key, delivery mode, deadline, ranking heuristic)
- Lyrics companion server address
- Playback backend (mpv binary and arguments)
- Favorites storage location
- Logging and network behavior

Credentials (client secrets, API keys) should come from environment
variables or a .env file; everything else may live in config.yaml.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field, asdict
from dotenv import load_dotenv

# Load environment variables from .env file if present
load_dotenv()


LYRICS_DELIVERY_MODES = ('link', 'text')
CATALOG_BACKENDS = ('spotify', 'youtube')


@dataclass
class CatalogConfig:
    """
    Catalog search backend and credentials

    The Spotify backend exchanges client credentials for a bearer token on
    every search. The YouTube backend only needs an API key.
    """
    backend: str = "spotify"
    spotify_client_id: str = ""
    spotify_client_secret: str = ""
    spotify_token_url: str = "https://accounts.spotify.com/api/token"
    spotify_api_url: str = "https://api.spotify.com/v1"
    market: str = ""
    youtube_api_key: str = ""
    youtube_api_url: str = "https://www.googleapis.com/youtube/v3"
    search_limit: int = 10


@dataclass
class LyricsConfig:
    """
    Lyrics resolution settings

    Controls how a (title, artist) pair is turned into a lyrics link or text:
    the Genius endpoints, the delivery mode, the overall deadline and the
    candidate scan used to skip romanized transcriptions.
    """
    genius_api_key: str = ""
    genius_api_url: str = "https://api.genius.com"
    genius_public_url: str = "https://genius.com/api"
    delivery_mode: str = "link"  # link, text
    timeout: float = 5.0
    max_candidates: int = 5
    romanized_marker: str = "romanized"
    not_found_text: str = "Lyrics not found"
    service_url: str = "http://localhost:3000"


@dataclass
class ServerConfig:
    """Address the lyrics companion service binds to"""
    host: str = "0.0.0.0"
    port: int = 3000


@dataclass
class PlaybackConfig:
    """
    Audio backend settings

    Each preview is played by its own mpv process; extra_args are appended
    to the default audio-only arguments.
    """
    mpv_path: str = "mpv"
    extra_args: List[str] = field(default_factory=list)


@dataclass
class FavoritesConfig:
    """Where the favorites blob lives and under which key"""
    storage_path: str = "~/.songpeek/favorites.json"
    key: str = "favorites"


@dataclass
class LoggingConfig:
    """
    Logging configuration and output settings

    Console output shows only user-facing messages and warnings; the file,
    when configured, receives every technical detail.
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

    Rate limits are expressed as requests per second for each upstream.
    """
    user_agent: str = "songpeek/1.0"
    request_timeout: float = 15.0
    genius_rate_limit: int = 2
    catalog_rate_limit: int = 5


@dataclass
class SecurityConfig:
    """Location of the per-user configuration directory"""
    config_directory: str = "~/.songpeek/"


class Settings:
    """
    Main settings class that manages all configuration

    Loads settings from the first YAML file found, overrides them with
    environment variables and makes sure the configuration directory exists.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize settings from config file or environment variables

        Args:
            config_path: Path to custom config file, if None uses default locations
        """
        self.config_path = config_path
        self.config_dir = Path.home() / ".songpeek"

        self.catalog = CatalogConfig()
        self.lyrics = LyricsConfig()
        self.server = ServerConfig()
        self.playback = PlaybackConfig()
        self.favorites = FavoritesConfig()
        self.logging = LoggingConfig()
        self.network = NetworkConfig()
        self.security = SecurityConfig()

        self._load_config()
        self._load_environment_variables()
        self._create_directories()

    def _sections(self) -> Dict[str, Any]:
        return {
            'catalog': self.catalog,
            'lyrics': self.lyrics,
            'server': self.server,
            'playback': self.playback,
            'favorites': self.favorites,
            'logging': self.logging,
            'network': self.network,
            'security': self.security,
        }

    def _load_config(self) -> None:
        """
        Load configuration from YAML file

        Searches the candidate locations in order of precedence; the first
        existing file wins.
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

        Only keys that exist on the matching dataclass are applied; unknown
        sections and keys are ignored.

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

    def _load_environment_variables(self) -> None:
        """
        Load sensitive configuration from environment variables

        Environment variables take precedence over file-based configuration.
        """
        env_mappings = {
            'SPOTIFY_CLIENT_ID': lambda v: setattr(self.catalog, 'spotify_client_id', v),
            'SPOTIFY_CLIENT_SECRET': lambda v: setattr(self.catalog, 'spotify_client_secret', v),
            'YOUTUBE_API_KEY': lambda v: setattr(self.catalog, 'youtube_api_key', v),
            'SONGPEEK_CATALOG': lambda v: setattr(self.catalog, 'backend', v),
            'GENIUS_API_KEY': lambda v: setattr(self.lyrics, 'genius_api_key', v),
            'SONGPEEK_LYRICS_MODE': lambda v: setattr(self.lyrics, 'delivery_mode', v),
            'SONGPEEK_LYRICS_SERVICE_URL': lambda v: setattr(self.lyrics, 'service_url', v),
        }

        for env_var, setter in env_mappings.items():
            value = os.getenv(env_var)
            if value:
                setter(value)

    def _create_directories(self) -> None:
        """Create the configuration directory, warning if that is not possible"""
        directory = self.get_config_directory()
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            print(f"Warning: Failed to create directory {directory}: {e}")

    def get_config_directory(self) -> Path:
        """
        Get the expanded config directory path

        Returns:
            Path object for the configuration directory
        """
        return Path(self.security.config_directory).expanduser()

    def get_favorites_path(self) -> Path:
        """
        Get the expanded favorites storage path

        Returns:
            Path object for the favorites JSON file
        """
        return Path(self.favorites.storage_path).expanduser()

    def save_config(self, path: Optional[str] = None) -> None:
        """
        Save current configuration to file

        Secrets are blanked before writing.

        Args:
            path: Custom path to save config, defaults to user config directory

        Raises:
            ConfigError: If the configuration cannot be saved
        """
        from ..core.exceptions import ConfigError

        target = Path(path) if path else self.get_config_directory() / "config.yaml"

        config_data = self.to_dict()
        config_data['catalog']['spotify_client_id'] = ""
        config_data['catalog']['spotify_client_secret'] = ""
        config_data['catalog']['youtube_api_key'] = ""
        config_data['lyrics']['genius_api_key'] = ""

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, 'w', encoding='utf-8') as f:
                yaml.dump(config_data, f, default_flow_style=False, indent=2)
        except OSError as e:
            raise ConfigError(f"Failed to save config to {target}: {e}", details={'path': str(target)})

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Serialize every section to plain dictionaries"""
        return {name: asdict(section) for name, section in self._sections().items()}

    def validate(self) -> List[str]:
        """
        Validate current configuration

        Returns:
            List of human-readable problems, empty when the configuration is usable
        """
        errors = []

        if self.catalog.backend not in CATALOG_BACKENDS:
            errors.append(f"Invalid catalog backend: {self.catalog.backend}")
        elif self.catalog.backend == 'spotify':
            if not self.catalog.spotify_client_id or not self.catalog.spotify_client_secret:
                errors.append("Spotify client_id and client_secret are required")
        elif not self.catalog.youtube_api_key:
            errors.append("YouTube API key is required")

        if self.lyrics.delivery_mode not in LYRICS_DELIVERY_MODES:
            errors.append(f"Invalid lyrics delivery mode: {self.lyrics.delivery_mode}")
        elif self.lyrics.delivery_mode == 'text' and not self.lyrics.genius_api_key:
            errors.append("Genius API key is required for text mode")

        if float(self.lyrics.timeout) <= 0:
            errors.append("Lyrics timeout must be positive")

        if int(self.lyrics.max_candidates) < 1:
            errors.append("Lyrics max_candidates must be at least 1")

        if not 0 < int(self.server.port) < 65536:
            errors.append(f"Invalid server port: {self.server.port}")

        return errors

    def __str__(self) -> str:
        sections = [
            f"Catalog: {self.catalog.backend}",
            f"Lyrics: {self.lyrics.delivery_mode} ({self.lyrics.timeout}s)",
            f"Favorites: {self.favorites.storage_path}",
        ]
        return f"Settings({', '.join(sections)})"


# Global settings instance for singleton pattern
settings = Settings()


def get_settings() -> Settings:
    """
    Get the global settings instance

    Returns:
        The global Settings instance
    """
    return settings


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """
    Reload settings from configuration files

    Args:
        config_path: Optional path to specific config file

    Returns:
        New Settings instance with reloaded configuration
    """
    global settings
    settings = Settings(config_path)
    return settings
