# mangalyze/config.py
# Description: Configuration management for the mangalyze application.
#
# Imports
import copy
import os
import tomllib
from pathlib import Path
from typing import Dict, Any, Optional
#
# Third-Party Imports
import toml
from loguru import logger
#
# Local Imports
from .Constants import (
    DEFAULT_API_BASE_URL, DEFAULT_UPLOADS_BASE_URL, DEFAULT_API_TIMEOUT,
    DEFAULT_PAGE_SIZE, DEFAULT_LANGUAGE, DEFAULT_LOAD_MORE_THRESHOLD,
)
#
#######################################################################################################################
#
# Functions:

# --- Path to the application's configuration file ---
DEFAULT_CONFIG_PATH = Path(os.getenv("MANGALYZE_CONFIG", Path.home() / ".config" / "mangalyze" / "config.toml"))

CONFIG_TOML_CONTENT = f"""
# Configuration for mangalyze
# Delete this file to restore the defaults on next start.

[api]
# Catalog service root and the host serving cover thumbnails.
base_url = "{DEFAULT_API_BASE_URL}"
uploads_url = "{DEFAULT_UPLOADS_BASE_URL}"
# Seconds before a request is abandoned and reported as a network failure.
timeout = {DEFAULT_API_TIMEOUT}

[listing]
# Chapters requested per page. A shorter page marks the end of the listing.
page_size = {DEFAULT_PAGE_SIZE}
# Translation language selected when a title is opened. Updated when you pick another one.
default_language = "{DEFAULT_LANGUAGE}"
# Load the next page when scrolled within this fraction of a screen from the end.
load_more_threshold = {DEFAULT_LOAD_MORE_THRESHOLD}

[logging]
log_level = "INFO"
file_log_level = "DEBUG"
log_filename = "mangalyze.log"
"""

DEFAULT_CONFIG_FROM_TOML: Dict[str, Any] = tomllib.loads(CONFIG_TOML_CONTENT)

_CONFIG_CACHE: Optional[Dict[str, Any]] = None


def deep_merge_dicts(base: Dict, update: Dict) -> Dict:
    """Recursively merges update_dict into base_dict."""
    merged = copy.deepcopy(base)
    for key, value in update.items():
        if isinstance(value, dict) and key in merged and isinstance(merged[key], dict):
            merged[key] = deep_merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def _get_typed_value(data_dict: Dict, key: str, default: Any, target_type: type = str) -> Any:
    """Helper to get value from dict and cast to type, with logging for type errors."""
    value = data_dict.get(key, default)
    if value is None:
        return default
    try:
        if target_type == bool:
            if isinstance(value, bool):
                return value
            return str(value).lower() in ['true', '1', 't', 'y', 'yes']
        return target_type(value)
    except (ValueError, TypeError) as e:
        logger.warning(f"Config key '{key}' has value '{value}' which could not be converted to {target_type}. Using default: '{default}'. Error: {e}")
        return default


def load_cli_config_and_ensure_existence(force_reload: bool = False) -> Dict[str, Any]:
    """
    Loads settings from the config TOML, creating it with the defaults if it is missing.
    User values are merged over the programmatic defaults, so a partial file is fine.
    """
    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None and not force_reload:
        return _CONFIG_CACHE

    loaded_config = copy.deepcopy(DEFAULT_CONFIG_FROM_TOML)
    config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        logger.info(f"Config file not found at {config_path}. Creating it with default values.")
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as f:
                f.write(CONFIG_TOML_CONTENT)
            logger.info(f"Created default config file at {config_path}")
        except OSError as e:
            logger.error(f"Could not create default config file {config_path}: {e}. Using internal defaults.")
    else:
        logger.info(f"Attempting to load config from: {config_path}")
        try:
            with open(config_path, "rb") as f:
                user_config_from_file = tomllib.load(f)
            loaded_config = deep_merge_dicts(loaded_config, user_config_from_file)
            logger.info(f"Successfully loaded and merged config from {config_path}")
        except tomllib.TOMLDecodeError as e:
            logger.error(f"Error decoding TOML config file {config_path}: {e}. Using internal defaults.")
        except OSError as e:
            logger.error(f"Could not read config file {config_path}: {e}. Using internal defaults.")

    _CONFIG_CACHE = loaded_config
    logger.debug(f"Config loaded with sections: {list(loaded_config.keys())}")
    return _CONFIG_CACHE


def get_cli_setting(section: str, key: str, default: Any = None) -> Any:
    """Helper to get a specific setting from the loaded configuration."""
    config = load_cli_config_and_ensure_existence()
    section_data = config.get(section)
    if isinstance(section_data, dict):
        return section_data.get(key, default)
    return default


def save_setting_to_cli_config(section: str, key: str, value: Any) -> bool:
    """
    Writes a single setting into the user's config file and refreshes the cache.
    The file is rewritten from its parsed values, so comments in it are not kept.
    Returns False if the file could not be read, written, or holds a non-table value under ``section``.
    """
    global _CONFIG_CACHE
    config_path = DEFAULT_CONFIG_PATH
    user_config: Dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path, "rb") as f:
                user_config = tomllib.load(f)
        except (tomllib.TOMLDecodeError, OSError) as e:
            logger.error(f"Refusing to overwrite unreadable config file {config_path}: {e}")
            return False

    section_data = user_config.setdefault(section, {})
    if not isinstance(section_data, dict):
        logger.error(f"Refusing to save {key}: '{section}' in {config_path} is not a table")
        return False
    section_data[key] = value
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            toml.dump(user_config, f)
    except OSError as e:
        logger.error(f"Could not save [{section}] {key} to {config_path}: {e}")
        return False

    logger.info(f"Saved [{section}] {key} = {value!r} to {config_path}")
    _CONFIG_CACHE = None
    return True


def get_cli_log_file_path() -> Path:
    default_log_filename = DEFAULT_CONFIG_FROM_TOML["logging"]["log_filename"]
    log_filename = get_cli_setting("logging", "log_filename", default_log_filename)
    log_file_path = DEFAULT_CONFIG_PATH.parent / log_filename
    try:
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Could not create log directory {log_file_path.parent}: {e}")
    return log_file_path


# --- Typed accessors used by the app ---

def get_api_settings() -> Dict[str, Any]:
    api_section = load_cli_config_and_ensure_existence().get("api", {})
    return {
        "base_url": _get_typed_value(api_section, "base_url", DEFAULT_API_BASE_URL, str),
        "uploads_url": _get_typed_value(api_section, "uploads_url", DEFAULT_UPLOADS_BASE_URL, str),
        "timeout": _get_typed_value(api_section, "timeout", DEFAULT_API_TIMEOUT, float),
    }


def get_listing_settings() -> Dict[str, Any]:
    listing_section = load_cli_config_and_ensure_existence().get("listing", {})
    page_size = _get_typed_value(listing_section, "page_size", DEFAULT_PAGE_SIZE, int)
    if page_size < 1:
        logger.warning(f"Config [listing] page_size must be positive, got {page_size}. Using {DEFAULT_PAGE_SIZE}.")
        page_size = DEFAULT_PAGE_SIZE
    return {
        "page_size": page_size,
        "default_language": _get_typed_value(listing_section, "default_language", DEFAULT_LANGUAGE, str),
        "load_more_threshold": _get_typed_value(listing_section, "load_more_threshold",
                                                DEFAULT_LOAD_MORE_THRESHOLD, float),
    }

#
# End of config.py
#######################################################################################################################
