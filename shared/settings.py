"""
Application settings resolved from local.settings.json and the environment.

The lookup order mirrors how a Function App sees its configuration locally
and in Azure: the Core Tools settings file first, then process environment
variables (including the prefixed names App Service uses for connection
strings).
"""

import json
import logging
import os
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)

CONNECTION_STRING_SETTING = "AZURE_SQL_CONNECTION_STRING"
LOCAL_SETTINGS_FILE = "local.settings.json"
DEFAULT_CONNECT_TIMEOUT = 15

_ENV_CONNECTION_STRING_PREFIXES = ("POSTGRESQLCONNSTR_", "CUSTOMCONNSTR_")


def load_local_settings(base_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Read local.settings.json from base_path (default: current directory).

    Returns an empty dict when the file is absent or cannot be parsed.
    """
    path = os.path.join(base_path or os.getcwd(), LOCAL_SETTINGS_FILE)
    if not os.path.isfile(path):
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable {LOCAL_SETTINGS_FILE}: {str(e)}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Ignoring {LOCAL_SETTINGS_FILE}: top-level value is not an object")
        return {}
    return data


def _section_value(settings: Dict[str, Any], section: str, name: str) -> Optional[str]:
    values = settings.get(section)
    if isinstance(values, dict):
        value = values.get(name)
        if isinstance(value, str) and value:
            return value
    return None


def get_setting(name: str, base_path: Optional[str] = None) -> Optional[str]:
    """Get a plain app setting: local settings `Values` first, then the environment."""
    value = _section_value(load_local_settings(base_path), "Values", name)
    if value:
        return value
    return os.environ.get(name) or None


def resolve_connection_string(
    name: str = CONNECTION_STRING_SETTING,
    base_path: Optional[str] = None
) -> Optional[str]:
    """
    Resolve a named database connection string.

    Sources, first non-empty value wins:
        1. local.settings.json: ConnectionStrings[name], then Values[name]
        2. environment: name, POSTGRESQLCONNSTR_<name>, CUSTOMCONNSTR_<name>,
           ConnectionStrings__<name>

    Args:
        name: Setting name of the connection string
        base_path: Directory holding local.settings.json

    Returns:
        The connection string, or None if no source supplies one
    """
    local_settings = load_local_settings(base_path)
    for section in ("ConnectionStrings", "Values"):
        value = _section_value(local_settings, section, name)
        if value:
            return value

    env_names = [name]
    env_names += [f"{prefix}{name}" for prefix in _ENV_CONNECTION_STRING_PREFIXES]
    env_names.append(f"ConnectionStrings__{name}")
    for env_name in env_names:
        value = os.environ.get(env_name)
        if value:
            return value

    return None


def get_log_level(base_path: Optional[str] = None) -> str:
    """Get the root log level name (default: INFO)."""
    level = (get_setting("LOG_LEVEL", base_path) or "INFO").upper()
    # getLevelName returns "Level <name>" for unknown names
    if not isinstance(logging.getLevelName(level), int):
        return "INFO"
    return level


def get_connect_timeout(base_path: Optional[str] = None) -> int:
    """Get the database connect timeout in seconds."""
    raw = get_setting("SQL_CONNECT_TIMEOUT", base_path)
    if not raw:
        return DEFAULT_CONNECT_TIMEOUT
    try:
        timeout = int(raw)
    except ValueError:
        logger.warning(f"Invalid SQL_CONNECT_TIMEOUT {raw!r}, using {DEFAULT_CONNECT_TIMEOUT}")
        return DEFAULT_CONNECT_TIMEOUT
    return timeout if timeout > 0 else DEFAULT_CONNECT_TIMEOUT
