"""
Persistent, tmux-synchronized shared environment variables.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
"""

__version__ = '0.1.0'


from preoccupied.envsync.config import EnvSyncConfig, get_config
from preoccupied.envsync.propagator import Propagator, Result
from preoccupied.envsync.store import EnvEntry, EnvStore
from preoccupied.envsync.tmux import Multiplexer


__all__ = [
    'EnvEntry', 'EnvStore', 'EnvSyncConfig', 'Multiplexer', 'Propagator',
    'Result', 'get_config',
]


# The end.
