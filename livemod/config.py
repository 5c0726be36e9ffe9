#!/usr/bin/env python3
"""
Configuration management for livemod.
Handles the module search path and host preferences with local storage.
"""

import os
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Dict, Any, List, Mapping, Sequence, Tuple


HOME_ENV = 'LIVEMOD_HOME'
SEARCH_PATH_ENV = 'LIVEMOD_PATH'

DEFAULT_EXTENSION = '.py'
SIGNATURE_MODES = ('mtime', 'hash')
AUTORELOAD_LEVELS = (0, 1, 2)


def get_config_dir() -> Path:
    """Get the livemod config directory (~/.livemod unless LIVEMOD_HOME is set)"""
    override = os.environ.get(HOME_ENV)
    config_dir = Path(override) if override else Path.home() / '.livemod'
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_path() -> Path:
    """Get the config file path"""
    return get_config_dir() / 'config.json'


def load_config() -> Dict[str, Any]:
    """Load configuration from file"""
    config_path = get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError):
            return {}
    return {}


def save_config(config: Dict[str, Any]) -> None:
    """Save configuration to file"""
    config_path = get_config_path()
    with open(config_path, 'w') as f:
        json.dump(config, f, indent=2)
    config_path.chmod(0o600)


def get_config_value(key: str, default: Any = None) -> Any:
    """Get a specific config value"""
    config = load_config()
    return config.get(key, default)


def set_config_value(key: str, value: Any) -> None:
    """Set a specific config value"""
    config = load_config()
    config[key] = value
    save_config(config)


def parse_path_list(value: Optional[str]) -> List[str]:
    """Split a PATH-style string on os.pathsep, dropping empty entries"""
    if not value:
        return []
    return [entry for entry in value.split(os.pathsep) if entry.strip()]


def get_search_path(
    extra: Sequence[str] = (),
    environ: Optional[Mapping[str, str]] = None,
) -> List[str]:
    """
    Build the ordered module search path.

    Priority:
    1. Directories passed explicitly (CLI --path), in the order given
    2. LIVEMOD_PATH environment variable
    3. 'search_path' list stored in config.json

    The first occurrence of a directory wins; later duplicates are dropped.
    """
    if environ is None:
        environ = os.environ

    candidates: List[str] = list(extra)
    candidates.extend(parse_path_list(environ.get(SEARCH_PATH_ENV)))
    candidates.extend(get_config_value('search_path', []) or [])

    search_path: List[str] = []
    seen = set()
    for entry in candidates:
        normalized = os.path.abspath(os.path.expanduser(entry))
        if normalized in seen:
            continue
        seen.add(normalized)
        search_path.append(normalized)
    return search_path


def add_search_path(directory: str) -> bool:
    """
    Persist a directory at the end of the stored search path.

    Returns:
        True if added, False if it was already present
    """
    normalized = os.path.abspath(os.path.expanduser(directory))
    config = load_config()
    stored = config.get('search_path', [])
    if normalized in stored:
        return False
    stored.append(normalized)
    config['search_path'] = stored
    save_config(config)
    return True


def remove_search_path(directory: str) -> bool:
    """
    Remove a directory from the stored search path.

    Returns:
        True if removed, False if it was not stored
    """
    normalized = os.path.abspath(os.path.expanduser(directory))
    config = load_config()
    stored = config.get('search_path', [])
    if normalized not in stored:
        return False
    stored.remove(normalized)
    config['search_path'] = stored
    save_config(config)
    return True


@dataclass(frozen=True)
class Settings:
    """Host settings, fixed once at startup"""
    search_path: Tuple[str, ...] = ()
    extension: str = DEFAULT_EXTENSION
    signature: str = 'mtime'
    autoreload: int = 2
    history_path: Optional[Path] = None

    def __post_init__(self):
        if self.signature not in SIGNATURE_MODES:
            raise ValueError(
                f"Unknown signature mode '{self.signature}' "
                f"(expected one of: {', '.join(SIGNATURE_MODES)})"
            )
        if self.autoreload not in AUTORELOAD_LEVELS:
            raise ValueError(f"Autoreload level must be 0, 1 or 2, got {self.autoreload!r}")
        if not self.extension.startswith('.'):
            raise ValueError(f"Source extension must start with '.', got {self.extension!r}")


def load_settings(
    extra_path: Sequence[str] = (),
    signature: Optional[str] = None,
    autoreload: Optional[int] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Build Settings from config.json, the environment and explicit overrides.

    Explicit arguments win over stored values.
    """
    config = load_config()
    return Settings(
        search_path=tuple(get_search_path(extra_path, environ=environ)),
        extension=config.get('extension', DEFAULT_EXTENSION),
        signature=signature or config.get('signature', 'mtime'),
        autoreload=autoreload if autoreload is not None else int(config.get('autoreload', 2)),
        history_path=get_config_dir() / 'repl_history',
    )
