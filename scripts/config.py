"""
Centralized configuration management for the YouTube comment exporter.

Configuration is loaded from multiple sources with the following priority:
1. Config file (exporter.yaml settings section) - highest priority for non-secrets
2. Environment variables - required for secrets, fallback for other settings
3. Default values - lowest priority

The API key ALWAYS comes from the environment (or the command line), never the config file.

Usage:
    from config import get_config

    config = get_config()
    max_comments = config.max_comments_per_video
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml


# Default configuration values
DEFAULTS = {
    # Logging settings
    "log_dir": "logs",
    "log_level": "DEBUG",
    "console_log_level": "INFO",

    # API constants
    "api_max_results_per_page": 50,
    "comment_page_size": 100,

    # Fetch limits
    "max_comments_per_video": 5000,
    "max_catalog_items": 500,
    "default_ranking_metric": "views",
    "video_discovery_mode": "search",
    "comment_order": "time",

    # Pacing (seconds)
    "page_delay_seconds": 0.2,
    "item_delay_seconds": 1.0,

    # Export settings
    "export_dir": "exports",
    "export_format": "csv",
}


@dataclass
class Config:
    """
    Configuration container with typed access to all settings.

    Settings are loaded from config file with environment variable fallbacks.
    The API key always comes from environment variables.
    """

    youtube_api_key: str = ""  # Always from env var

    # Logging settings
    log_dir: str = DEFAULTS["log_dir"]
    log_level: str = DEFAULTS["log_level"]
    console_log_level: str = DEFAULTS["console_log_level"]

    # API constants
    api_max_results_per_page: int = DEFAULTS["api_max_results_per_page"]
    comment_page_size: int = DEFAULTS["comment_page_size"]

    # Fetch limits
    max_comments_per_video: int = DEFAULTS["max_comments_per_video"]
    max_catalog_items: int = DEFAULTS["max_catalog_items"]
    default_ranking_metric: str = DEFAULTS["default_ranking_metric"]
    video_discovery_mode: str = DEFAULTS["video_discovery_mode"]
    comment_order: str = DEFAULTS["comment_order"]

    # Pacing
    page_delay_seconds: float = DEFAULTS["page_delay_seconds"]
    item_delay_seconds: float = DEFAULTS["item_delay_seconds"]

    # Export settings
    export_dir: str = DEFAULTS["export_dir"]
    export_format: str = DEFAULTS["export_format"]

    # Source tracking (for debugging)
    _config_file: Optional[str] = None


# Global config instance (singleton pattern)
_config: Optional[Config] = None


def _load_yaml_settings(config_path: str) -> dict:
    """Load settings section from YAML config file."""
    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
        return config.get("settings", {}) or {}
    except FileNotFoundError:
        return {}
    except Exception as e:
        print(f"Warning: Could not load config file {config_path}: {e}")
        return {}


def _get_env_or_default(key: str, default, cast_type=None):
    """Get value from environment variable or return default."""
    env_value = os.environ.get(key)
    if env_value is None:
        return default
    if cast_type is not None:
        try:
            return cast_type(env_value)
        except (ValueError, TypeError):
            return default
    return env_value


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from file and environment variables.

    Args:
        config_path: Path to YAML config file (optional).
                    If not provided, tries default locations.

    Returns:
        Config object with all settings loaded.
    """
    if config_path is None:
        candidates = [
            "config/exporter.yaml",
            "../config/exporter.yaml",
            "exporter.yaml",
        ]
        for candidate in candidates:
            if Path(candidate).exists():
                config_path = candidate
                break

    yaml_settings = {}
    if config_path and Path(config_path).exists():
        yaml_settings = _load_yaml_settings(config_path)

    # Helper to get setting with priority: yaml > env > default
    def get_setting(key: str, cast_type=None):
        default = DEFAULTS[key]
        if key in yaml_settings:
            value = yaml_settings[key]
            if cast_type is not None:
                try:
                    return cast_type(value)
                except (ValueError, TypeError):
                    pass
            return value
        return _get_env_or_default(key.upper(), default, cast_type)

    return Config(
        youtube_api_key=os.environ.get("YOUTUBE_API_KEY", ""),

        log_dir=get_setting("log_dir"),
        log_level=get_setting("log_level"),
        console_log_level=get_setting("console_log_level"),

        api_max_results_per_page=get_setting("api_max_results_per_page", int),
        comment_page_size=get_setting("comment_page_size", int),

        max_comments_per_video=get_setting("max_comments_per_video", int),
        max_catalog_items=get_setting("max_catalog_items", int),
        default_ranking_metric=get_setting("default_ranking_metric"),
        video_discovery_mode=get_setting("video_discovery_mode"),
        comment_order=get_setting("comment_order"),

        page_delay_seconds=get_setting("page_delay_seconds", float),
        item_delay_seconds=get_setting("item_delay_seconds", float),

        export_dir=get_setting("export_dir"),
        export_format=get_setting("export_format"),

        _config_file=config_path,
    )


def get_config(config_path: Optional[str] = None, reload: bool = False) -> Config:
    """
    Get the global configuration instance.

    Uses singleton pattern - loads config once and reuses it.

    Args:
        config_path: Path to config file (only used on first load or reload)
        reload: If True, force reload of configuration

    Returns:
        Config object with all settings
    """
    global _config

    if _config is None or reload:
        _config = load_config(config_path)

    return _config


def set_config(config: Optional[Config]) -> None:
    """
    Set the global configuration instance.

    Useful for testing or when config needs to be set programmatically.
    Passing None forces the next get_config() call to reload.
    """
    global _config
    _config = config
