"""Configuration management for the thread and blog feed generator."""
import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv


# Project root directory (parent of src/)
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Config:
    """
    Configuration class for the feed generator.
    Loads settings from environment variables and provides singleton access.
    """
    _instance: Optional['Config'] = None

    def __new__(cls):
        """Singleton pattern - only one instance of Config exists."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize configuration from environment variables."""
        if self._initialized:
            return

        # Load .env file if it exists
        load_dotenv()

        # Feed identity
        self.publisher_did = os.getenv('PUBLISHER_DID')
        self.feed_name = os.getenv('FEED_NAME', 'TechThreadsAndMore')
        self.feed_hostname = os.getenv('FEED_HOSTNAME', 'localhost')

        # Database configuration
        database_path = self._resolve_path(os.getenv('DATABASE_PATH', 'data/feed.db'))
        self.database_url = os.getenv('DATABASE_URL') or f'sqlite:///{database_path}'
        self.database_schema = os.getenv('DB_SCHEMA') or None
        if self.database_url.startswith('sqlite:///'):
            database_path.parent.mkdir(parents=True, exist_ok=True)

        # Retention and paging
        self.max_posts = self._get_int('FEED_MAX_POSTS', 10_000)
        self.eviction_interval_seconds = self._get_int('EVICTION_INTERVAL_SECONDS', 10)
        self.default_page_size = self._get_int('FEED_DEFAULT_PAGE_SIZE', 50)
        self.max_page_size = self._get_int('FEED_MAX_PAGE_SIZE', 100)

        # Public AppView used to look up posts liked by the publisher
        self.bsky_api_url = os.getenv('BSKY_API_URL', 'https://public.api.bsky.app').rstrip('/')

        # HTTP server
        self.server_host = os.getenv('SERVER_HOST', '0.0.0.0')
        self.server_port = self._get_int('SERVER_PORT', 3030)

        # Logging configuration
        log_dir_env = os.getenv('LOG_DIR', 'logs')
        self.log_dir = self._resolve_path(log_dir_env)
        self.log_level = os.getenv('LOG_LEVEL', 'INFO')
        self.log_dir.mkdir(parents=True, exist_ok=True)

        # Validate required configuration
        self._validate()

        self._initialized = True

    @property
    def feed_uri(self) -> str:
        """AT-URI of the feed generator record."""
        return f'at://{self.publisher_did}/app.bsky.feed.generator/{self.feed_name}'

    @property
    def service_did(self) -> str:
        """did:web identifier of this feed generator service."""
        return f'did:web:{self.feed_hostname}'

    def _resolve_path(self, path_str: str) -> Path:
        """
        Resolve a path string to an absolute Path.

        If the path is already absolute, returns it as-is.
        If relative, resolves it relative to PROJECT_ROOT.

        Args:
            path_str: Path string from environment variable

        Returns:
            Absolute Path object
        """
        path = Path(path_str)
        if path.is_absolute():
            return path
        return (PROJECT_ROOT / path).resolve()

    @staticmethod
    def _get_int(name: str, default: int) -> int:
        """Read an integer environment variable."""
        raw = os.getenv(name)
        if raw is None or raw.strip() == '':
            return default
        try:
            return int(raw)
        except ValueError:
            raise ValueError(f"{name} must be an integer, got {raw!r}")

    def _validate(self):
        """Validate that required configuration is present."""
        if not self.publisher_did:
            raise ValueError("PUBLISHER_DID environment variable is required")
        if self.max_posts < 1:
            raise ValueError("FEED_MAX_POSTS must be positive")
        if self.eviction_interval_seconds < 1:
            raise ValueError("EVICTION_INTERVAL_SECONDS must be positive")
        if not 1 <= self.default_page_size <= self.max_page_size:
            raise ValueError(
                "FEED_DEFAULT_PAGE_SIZE must be between 1 and FEED_MAX_PAGE_SIZE"
            )

    @classmethod
    def get_instance(cls) -> 'Config':
        """
        Get the singleton instance of Config.

        Returns:
            Config instance
        """
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the cached instance so the next access re-reads the environment."""
        cls._instance = None


# Convenience function to get config instance
def get_config() -> Config:
    """
    Get the configuration instance.

    Returns:
        Config instance
    """
    return Config.get_instance()
