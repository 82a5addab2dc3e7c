from __future__ import annotations

"""
Configuration Domain Management.

Handles persistent storage of user preferences as JSON inside the user
data directory. Stored values are merged over defaults so new keys
always exist, and corrupted files fall back to defaults.
"""

import json
import logging
import os
from typing import Any, Dict

from dirsize.domain.constants import CURRENT_CONFIG_VERSION, DEFAULT_PAGE_SIZE
from dirsize.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE = os.path.join(get_user_data_dir(), "config.json")


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Target
        "target_path": os.getcwd(),

        # Scan policy
        "fatal_on_access_denied": False,

        # Presentation
        "sort_key": "name",
        "page_size": DEFAULT_PAGE_SIZE,
        "search_kind": "unknown",

        # Diagnostics
        "log_level": "INFO",
        "log_to_file": False,
    }


def get_default_app_state() -> Dict[str, Any]:
    """
    Generate the complete default application state structure.

    Returns:
        Dict[str, Any]: The full JSON structure for config.json.
    """
    return {
        "version": CURRENT_CONFIG_VERSION,
        "settings": get_default_config(),
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_app_state() -> Dict[str, Any]:
    """
    Load application state from disk.

    Returns:
        Dict[str, Any]: The loaded state or a default structure on failure.
    """
    state = get_default_app_state()

    if not os.path.exists(CONFIG_FILE):
        logger.debug("Config file not found. Returning defaults.")
        return state

    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load config: {e}. Using defaults.")
        return state

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return state

    settings = data.get("settings")
    if isinstance(settings, dict):
        state["settings"].update(settings)

    state["version"] = CURRENT_CONFIG_VERSION
    return state


def save_app_state(state: Dict[str, Any]) -> None:
    """
    Persist application state to disk.

    Args:
        state: The state dictionary to save.
    """
    try:
        os.makedirs(os.path.dirname(CONFIG_FILE), exist_ok=True)
        state["version"] = CURRENT_CONFIG_VERSION
        with open(CONFIG_FILE, "w", encoding="utf-8") as f:
            json.dump(state, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {CONFIG_FILE}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")


# -----------------------------------------------------------------------------
# Facade API
# -----------------------------------------------------------------------------
def load_config() -> Dict[str, Any]:
    """Retrieve the active settings merged over defaults."""
    state = load_app_state()
    defaults = get_default_config()
    defaults.update(state.get("settings", {}))
    return defaults


def save_config(config: Dict[str, Any]) -> None:
    """Save the provided settings."""
    state = load_app_state()
    state["settings"] = config
    save_app_state(state)
