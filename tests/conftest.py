"""
Shared pytest fixtures for envsync tests.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
"""

import os
import tempfile
from unittest.mock import MagicMock, patch

import pytest

from preoccupied.envsync.config import reset_config
from preoccupied.envsync.propagator import Propagator
from preoccupied.envsync.store import EnvStore
from preoccupied.envsync.tmux import Multiplexer


@pytest.fixture
def temp_dir():
    """
    Create a temporary directory for tests.
    """

    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture(autouse=True)
def isolated_config(temp_dir, monkeypatch):
    """
    Point the config loader at a missing file, clear any ENVSYNC_* variables,
    and forget the cached config between tests.
    """

    for var in list(os.environ):
        if var.startswith('ENVSYNC_'):
            monkeypatch.delenv(var)

    config_path = os.path.join(temp_dir, 'missing-config.yaml')
    with patch('preoccupied.envsync.config.CONFIG_PATH', config_path):
        reset_config()
        yield
        reset_config()


@pytest.fixture
def store_path(temp_dir):
    return os.path.join(temp_dir, 'shared_env')


@pytest.fixture
def store(store_path):
    """
    An EnvStore in the temporary directory.
    """

    return EnvStore(store_path)


@pytest.fixture
def mock_mux():
    """
    A Multiplexer stand-in with an active session, invoked from pane %1,
    with panes %0, %1, and %2 alive.
    """

    mux = MagicMock(spec=Multiplexer)
    mux.active.return_value = True
    mux.current_pane.return_value = '%1'
    mux.list_panes.return_value = ['%0', '%1', '%2']
    return mux


@pytest.fixture
def inactive_mux():
    """
    A Multiplexer stand-in with no reachable tmux server.
    """

    mux = MagicMock(spec=Multiplexer)
    mux.active.return_value = False
    return mux


@pytest.fixture
def environ():
    return {'HOME': '/home/tester'}


@pytest.fixture
def propagator(store, mock_mux, environ):
    return Propagator(store, mock_mux, environ=environ)


# The end.
