"""
Configuration models and loading for the envsync utility.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
"""

import logging
import os
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, field_validator, model_validator

from .quoting import is_identifier


logger = logging.getLogger(__name__)


CONFIG_PATH = os.environ.get(
    'ENVSYNC_CONFIG', os.path.expanduser('~/.config/envsync/config.yaml'))


LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


DEFAULT_RC_FILES = {
    'zsh': '~/.zshrc',
    'bash': '~/.bashrc',
}


_config: Optional['EnvSyncConfig'] = None


class EnvSyncConfig(BaseModel):
    """
    Settings for the shared environment store and its tmux propagation
    """

    store_path: str = '~/.shared_env'
    tmux_command: str = 'tmux'
    shell: Literal['zsh', 'bash'] = 'zsh'
    rc_file: Optional[str] = None
    store_backup: bool = True
    store_lock: bool = False
    alias: Optional[str] = 'exportall'
    log_level: str = 'WARNING'


    @field_validator('log_level')
    def upper_level(cls, v: str) -> str:
        v = v.upper()
        if v not in LOG_LEVELS:
            raise ValueError(f'log_level must be one of {", ".join(LOG_LEVELS)}')
        return v


    @field_validator('alias')
    def alias_name(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_identifier(v):
            raise ValueError(f"alias '{v}' is not a valid shell name")
        return v


    @model_validator(mode='after')
    def expand_paths(self) -> 'EnvSyncConfig':
        """
        Expand ~ in the paths, picking the rc file matching the configured
        shell when none is given.
        """

        self.store_path = os.path.expanduser(self.store_path)
        self.rc_file = os.path.expanduser(self.rc_file or DEFAULT_RC_FILES[self.shell])
        return self


def _config_from_env() -> Dict[str, Any]:
    """
    Build configuration dictionary from ENVSYNC_* environment variables.
    """

    config = {}
    pairs = (
        ('ENVSYNC_STORE', 'store_path'),
        ('ENVSYNC_TMUX', 'tmux_command'),
        ('ENVSYNC_SHELL', 'shell'),
        ('ENVSYNC_RC_FILE', 'rc_file'),
        ('ENVSYNC_LOCK', 'store_lock'),
        ('ENVSYNC_LOG_LEVEL', 'log_level'))

    for env_var, config_key in pairs:
        value = os.environ.get(env_var)
        if value is not None:
            config[config_key] = value

    return config


def load_config(path: Optional[str] = None) -> EnvSyncConfig:
    """
    Read the YAML config file at path (if it exists) and overlay the
    ENVSYNC_* environment variables on top of it.
    """

    path = path or CONFIG_PATH
    config_data: Dict[str, Any] = {}

    if os.path.exists(path):
        with open(path, 'r') as f:
            config_data = yaml.safe_load(f) or {}
        if not isinstance(config_data, dict):
            raise ValueError(f'Config file {path} must contain a mapping')
        logger.debug(f'Loaded configuration from {path}')

    config_data.update(_config_from_env())
    return EnvSyncConfig.model_validate(config_data)


def get_config(path: Optional[str] = None) -> EnvSyncConfig:
    """
    Get the global config object. An explicit path always reloads.
    """

    global _config

    if _config is None or path is not None:
        _config = load_config(path)
        logger.debug(f'Using store {_config.store_path}')

    return _config


def reset_config() -> None:
    """
    Forget the cached config object.
    """

    global _config
    _config = None


# The end.
