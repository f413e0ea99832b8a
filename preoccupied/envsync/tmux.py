"""
tmux control surface for the envsync utility.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
"""

import logging
import os
import shutil
import subprocess
from typing import List, Mapping, Optional


logger = logging.getLogger(__name__)


def run(*args: str) -> str:
    logger.debug(f'Running {args}')
    result = subprocess.run(
        args,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True)
    if result.returncode != 0:
        raise subprocess.CalledProcessError(
            result.returncode, args, output=result.stdout, stderr=result.stderr)
    return result.stdout


class Multiplexer:
    """
    Thin wrapper over the tmux command line. Nothing here is cached; every
    query reflects the server at the moment it is made.
    """

    def __init__(
            self,
            command: str = 'tmux',
            environ: Optional[Mapping[str, str]] = None):

        self.command = command
        self.environ = os.environ if environ is None else environ


    def tmux(self, *args: str) -> str:
        return run(self.command, *args)


    def installed(self) -> bool:
        return shutil.which(self.command) is not None


    def active(self) -> bool:
        """
        True if tmux is installed and a server with a session is reachable.
        """

        if not self.installed():
            logger.debug(f'{self.command} is not installed')
            return False

        try:
            self.tmux('display-message', '-p', '#{session_id}')
        except (subprocess.CalledProcessError, OSError) as e:
            logger.debug(f'No tmux session reachable: {e}')
            return False

        return True


    def current_pane(self) -> Optional[str]:
        """
        The pane id of the invoking shell, or None outside of tmux.
        """

        pane = self.environ.get('TMUX_PANE')
        if pane:
            return pane

        if not self.environ.get('TMUX'):
            return None

        try:
            pane = self.tmux('display-message', '-p', '#{pane_id}').strip()
        except (subprocess.CalledProcessError, OSError):
            return None

        return pane or None


    def list_panes(self) -> List[str]:
        """
        Ids of every live pane across all sessions.
        """

        try:
            out = self.tmux('list-panes', '-a', '-F', '#{pane_id}')
        except (subprocess.CalledProcessError, OSError) as e:
            logger.debug(f'Unable to list panes: {e}')
            return []

        return [line.strip() for line in out.splitlines() if line.strip()]


    def set_global_env(self, name: str, value: str) -> None:
        self.tmux('set-environment', '-g', name, value)


    def unset_global_env(self, name: str) -> None:
        self.tmux('set-environment', '-gu', name)


    def send_command(self, pane: str, text: str) -> None:
        """
        Type text into pane literally, then press Enter.
        """

        self.tmux('send-keys', '-t', pane, '-l', text)
        self.tmux('send-keys', '-t', pane, 'Enter')


# The end.
