"""Global configuration management for diffnote.

Handles user-level configuration stored in ~/.diffnote/ (or $DIFFNOTE_HOME):
- config.yaml: Preference settings
- reviews/: Saved review sessions (see diffnote.session)

Recognised config.yaml keys:

    data_dir: /path/to/sessions      # Where review sessions are stored
    default_comment_type: note       # note | suggestion | issue | praise
    recent_commits: 20               # Page size of the commit list
    export:
      reviewed_only: false           # Export only files marked reviewed
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from diffnote.review.models import CommentType


class GlobalConfigError(Exception):
    """Raised when there's an error with global configuration."""
    pass


HOME_ENV_VAR = "DIFFNOTE_HOME"
DEFAULT_RECENT_COMMITS = 20


def get_global_config_dir() -> Path:
    """Get the global diffnote configuration directory.

    Returns:
        Path to $DIFFNOTE_HOME if set, otherwise ~/.diffnote/
    """
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".diffnote"


def ensure_global_config_dir() -> Path:
    """Ensure the global config directory exists.

    Returns:
        Path to the config directory.
    """
    config_dir = get_global_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_file_path() -> Path:
    """Get path to config.yaml file."""
    return get_global_config_dir() / "config.yaml"


def load_global_config() -> Dict[str, Any]:
    """Load global configuration from config.yaml.

    Returns:
        Dictionary with configuration values. Empty dict if file doesn't exist.

    Raises:
        GlobalConfigError: If the file cannot be read or is not a YAML mapping.
    """
    config_file = get_config_file_path()

    if not config_file.exists():
        return {}

    try:
        with open(config_file, "r") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise GlobalConfigError(f"Failed to load config from {config_file}: {e}")

    if not isinstance(config, dict):
        raise GlobalConfigError(f"Config file {config_file} must contain a mapping")
    return config


def save_global_config(config: Dict[str, Any]) -> None:
    """Save global configuration to config.yaml.

    Args:
        config: Configuration dictionary to save.
    """
    ensure_global_config_dir()
    config_file = get_config_file_path()

    try:
        with open(config_file, "w") as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False)
    except OSError as e:
        raise GlobalConfigError(f"Failed to save config to {config_file}: {e}")


def get_data_dir(config: Optional[Dict[str, Any]] = None) -> Path:
    """Get the directory holding saved review sessions.

    Args:
        config: Loaded configuration (loaded from disk if None).

    Returns:
        The configured data_dir, or reviews/ under the config directory.
    """
    if config is None:
        config = load_global_config()
    data_dir = config.get("data_dir")
    if data_dir:
        return Path(str(data_dir)).expanduser()
    return get_global_config_dir() / "reviews"


def get_default_comment_type(config: Optional[Dict[str, Any]] = None) -> CommentType:
    """Get the default comment type for new comments.

    Raises:
        GlobalConfigError: If the configured value is not a comment type.
    """
    if config is None:
        config = load_global_config()
    value = config.get("default_comment_type", CommentType.NOTE.value)
    try:
        return CommentType(str(value).lower())
    except ValueError:
        valid = ", ".join(t.value for t in CommentType)
        raise GlobalConfigError(f"Invalid default_comment_type '{value}'. Valid types: {valid}")


def get_recent_commits(config: Optional[Dict[str, Any]] = None) -> int:
    """Get how many recent commits to list at once."""
    if config is None:
        config = load_global_config()
    value = config.get("recent_commits", DEFAULT_RECENT_COMMITS)
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise GlobalConfigError(f"recent_commits must be a positive integer, got {value!r}")
    return value


def get_export_reviewed_only(config: Optional[Dict[str, Any]] = None) -> bool:
    """Get whether exports include only reviewed files by default."""
    if config is None:
        config = load_global_config()
    export = config.get("export") or {}
    if not isinstance(export, dict):
        raise GlobalConfigError("export must be a mapping")
    return bool(export.get("reviewed_only", False))


def set_config_value(key: str, value: Any) -> None:
    """Set one top-level (or dotted, e.g. "export.reviewed_only") key."""
    config = load_global_config()
    target = config
    parts = key.split(".")
    for i, part in enumerate(parts[:-1]):
        target = target.setdefault(part, {})
        if not isinstance(target, dict):
            prefix = ".".join(parts[: i + 1])
            raise GlobalConfigError(f"Cannot set '{key}': '{prefix}' is not a mapping")
    target[parts[-1]] = value
    save_global_config(config)
