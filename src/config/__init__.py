"""Application configuration."""
from .settings import PROJECT_ROOT, Config, get_config

__all__ = ["PROJECT_ROOT", "Config", "get_config"]
