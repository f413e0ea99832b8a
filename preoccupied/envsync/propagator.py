"""
Shared environment propagation for the envsync utility.

Every change is applied to the invoking environment, written to the store,
and then fanned out to whatever tmux panes exist at that moment. The fan-out
is best-effort. A pane that vanishes mid-broadcast is skipped, and panes
created afterwards only see the change by sourcing the store at startup.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
"""

import logging
import os
import subprocess
from dataclasses import dataclass, field
from typing import List, MutableMapping, Optional

from .config import EnvSyncConfig
from .quoting import (
    export_command, is_identifier, quote_for_injection, source_command,
    split_pair, unset_command,
)
from .store import EnvStore
from .tmux import Multiplexer


logger = logging.getLogger(__name__)


@dataclass
class Result:
    """
    Outcome of a propagator operation. The commands are for the invoking
    shell to evaluate.
    """

    commands: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    panes: List[str] = field(default_factory=list)


class Propagator:
    """
    Keeps exported variables consistent between the invoking session, the
    persistent store, and all other live tmux panes.
    """

    def __init__(
            self,
            store: EnvStore,
            mux: Multiplexer,
            environ: Optional[MutableMapping[str, str]] = None):

        self.store = store
        self.mux = mux
        self.environ = os.environ if environ is None else environ


    @classmethod
    def from_config(
            cls,
            config: EnvSyncConfig,
            environ: Optional[MutableMapping[str, str]] = None) -> 'Propagator':

        store = EnvStore(
            config.store_path,
            backup=config.store_backup,
            lock=config.store_lock)
        mux = Multiplexer(config.tmux_command, environ=environ)
        return cls(store, mux, environ=environ)


    def _targets(self) -> Optional[List[str]]:
        """
        Snapshot of panes to broadcast to, excluding the invoking pane. None
        when tmux is not available at all.
        """

        if not self.mux.active():
            return None

        me = self.mux.current_pane()
        return [p for p in self.mux.list_panes() if p != me]


    def _broadcast(self, targets: List[str], command: str, result: Result) -> None:
        for pane in targets:
            try:
                self.mux.send_command(pane, command)
            except (subprocess.CalledProcessError, OSError) as e:
                logger.debug(f'Failed to send to pane {pane}: {e}')
                continue
            if pane not in result.panes:
                result.panes.append(pane)


    def _error(self, result: Result, op: str, message: str) -> None:
        message = f'{op}: {message}'
        logger.error(message)
        result.errors.append(message)


    def set(self, *pairs: str) -> Result:
        """
        Export each NAME=VALUE pair locally, persist it, make it the tmux
        global default, and send the export to every other pane.
        """

        result = Result()
        targets = self._targets() if pairs else None

        for pair in pairs:
            try:
                name, value = split_pair(pair)
            except ValueError as e:
                self._error(result, 'envset', str(e))
                continue

            self.environ[name] = value
            result.commands.append(export_command(name, value))

            try:
                self.store.replace_entry(name, value)
            except (OSError, UnicodeError) as e:
                self._error(result, 'envset', f'unable to store {name}: {e}')

            if targets is None:
                continue

            try:
                self.mux.set_global_env(name, value)
            except (subprocess.CalledProcessError, OSError) as e:
                logger.debug(f'Failed to set tmux global {name}: {e}')

            self._broadcast(
                targets, export_command(name, value, quote_for_injection), result)

        return result


    def unset(self, *names: str) -> Result:
        """
        Remove each name locally, from the store, from the tmux global
        environment, and from every other pane. Unknown names are fine.
        """

        result = Result()
        targets = self._targets() if names else None

        for name in names:
            if not is_identifier(name):
                self._error(result, 'envunset', f"invalid variable name '{name}'")
                continue

            self.environ.pop(name, None)
            result.commands.append(unset_command(name))

            try:
                self.store.remove_entry(name)
            except (OSError, UnicodeError) as e:
                self._error(result, 'envunset', f'unable to update store for {name}: {e}')

            if targets is None:
                continue

            try:
                self.mux.unset_global_env(name)
            except (subprocess.CalledProcessError, OSError) as e:
                logger.debug(f'Failed to unset tmux global {name}: {e}')

            self._broadcast(targets, unset_command(name), result)

        return result


    def load(self) -> Result:
        """
        Re-export everything in the store locally, and have every other
        pane re-source the store file.
        """

        result = Result()

        try:
            self.store.ensure()
            entries = self.store.read_all()
        except (OSError, UnicodeError) as e:
            self._error(result, 'envload', f'unable to read {self.store.path}: {e}')
            entries = []

        for entry in entries:
            self.environ[entry.name] = entry.value
            result.commands.append(export_command(entry.name, entry.value))

        targets = self._targets()
        if targets:
            self._broadcast(
                targets, source_command(str(self.store.path), quote_for_injection), result)

        return result


# The end.
