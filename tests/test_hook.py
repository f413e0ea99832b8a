"""
Unit tests for hook module.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
"""

import os
import shutil
import subprocess

import pytest

from preoccupied.envsync.config import EnvSyncConfig
from preoccupied.envsync.hook import (
    END_MARKER, START_MARKER, install_hook, remove_hook, render_hook,
)


@pytest.fixture
def rc_config(temp_dir, store_path):
    return EnvSyncConfig(
        store_path=store_path,
        rc_file=os.path.join(temp_dir, '.zshrc'))


class TestRenderHook:
    """
    Tests for render_hook()
    """

    def test_zsh_hook(self, rc_config, store_path):
        hook = render_hook(rc_config)
        lines = hook.splitlines()

        assert lines[0] == START_MARKER
        assert lines[-1] == END_MARKER
        assert f'export SHARED_ENV={store_path}' in lines
        assert 'source "$SHARED_ENV"' in lines
        assert "alias exportall='envset'" in lines
        assert hook.count('emulate -L zsh') == 3
        for func in ('envset', 'envunset', 'envload'):
            assert f'{func}() {{' in lines

    def test_bash_hook(self, store_path):
        config = EnvSyncConfig(shell='bash', store_path=store_path)
        hook = render_hook(config, program='/opt/bin/envsync')

        assert 'emulate' not in hook
        assert 'eval "$(command /opt/bin/envsync --store "$SHARED_ENV" set -- "$@")"' in hook

    def test_no_alias(self, store_path):
        config = EnvSyncConfig(store_path=store_path, alias=None)
        assert 'alias' not in render_hook(config)

    def test_quoted_store_path(self, temp_dir):
        config = EnvSyncConfig(store_path=os.path.join(temp_dir, 'my env'))
        assert f"export SHARED_ENV='{temp_dir}/my env'" in render_hook(config)

    @pytest.mark.skipif(shutil.which('bash') is None, reason='requires bash')
    def test_bash_hook_autoloads(self, temp_dir):
        """
        Test that sourcing the bash hook creates and loads the store.
        """

        store_path = os.path.join(temp_dir, 'shared_env')
        config = EnvSyncConfig(shell='bash', store_path=store_path)
        script = render_hook(config) + '\nprintf %s "$SHARED_ENV"; type envset >/dev/null'

        out = subprocess.run(['bash', '-c', script], stdout=subprocess.PIPE, check=True)
        assert out.stdout.decode('utf-8') == store_path
        assert os.path.exists(store_path)


class TestInstallHook:
    """
    Tests for install_hook() and remove_hook()
    """

    def test_install_new_file(self, rc_config):
        assert install_hook(rc_config) is True

        content = open(rc_config.rc_file).read()
        assert START_MARKER in content
        assert END_MARKER in content
        assert not os.path.exists(rc_config.rc_file + '.envsync-backup')

    def test_install_idempotent(self, rc_config):
        """
        Test that a second install leaves the rc file alone.
        """

        with open(rc_config.rc_file, 'w') as f:
            f.write('HISTSIZE=100000')

        assert install_hook(rc_config) is True
        first = open(rc_config.rc_file).read()
        assert install_hook(rc_config) is False
        assert open(rc_config.rc_file).read() == first

        assert first.startswith('HISTSIZE=100000\n\n' + START_MARKER)
        assert first.count(START_MARKER) == 1

    def test_install_backs_up_once(self, rc_config):
        with open(rc_config.rc_file, 'w') as f:
            f.write('original\n')

        install_hook(rc_config)
        remove_hook(rc_config)
        install_hook(rc_config)

        backup = rc_config.rc_file + '.envsync-backup'
        assert open(backup).read() == 'original\n'

    def test_remove(self, rc_config):
        with open(rc_config.rc_file, 'w') as f:
            f.write('before\n')

        install_hook(rc_config)
        with open(rc_config.rc_file, 'a') as f:
            f.write('after\n')

        assert remove_hook(rc_config) is True
        content = open(rc_config.rc_file).read()
        assert START_MARKER not in content
        assert 'envset' not in content
        assert 'before\n' in content
        assert 'after\n' in content

    def test_remove_absent(self, rc_config):
        assert remove_hook(rc_config) is False
        assert not os.path.exists(rc_config.rc_file)


# The end.
