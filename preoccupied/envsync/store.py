"""
Persistent store of shared exports for the envsync utility.

The store is a plain shell file with one ``export NAME=value`` line per
variable, so that any new shell can simply source it. Edits only ever touch
lines that are an exact export of the name being changed.

Values are arbitrary shell strings, not necessarily valid UTF-8, so the file
is read and written with surrogateescape to carry stray bytes through.

Without locking, two sessions editing the store at the same moment may lose
one of the updates. Enable the lock to serialize envsync writers.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
"""

import fcntl
import logging
import re
import shlex
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, NamedTuple, Optional, Union

from .quoting import ansi_c_unquote, export_command, is_identifier


logger = logging.getLogger(__name__)


EXPORT_LINE = re.compile(r'^export\s+([A-Za-z_][A-Za-z0-9_]*)=(.*)$')


class EnvEntry(NamedTuple):
    name: str
    value: str


def parse_line(line: str) -> Optional[EnvEntry]:
    """
    Parse a single store line into an EnvEntry, or None if the line is not
    a single-word export assignment. Accepts the POSIX quoting written by
    shlex and the $'...' form used for values with control characters.
    """

    found = EXPORT_LINE.match(line.strip())
    if not found:
        return None

    name, rest = found.groups()
    if rest.startswith("$'"):
        try:
            return EnvEntry(name, ansi_c_unquote(rest.rstrip()))
        except ValueError:
            return None

    try:
        words = shlex.split(rest)
    except ValueError:
        return None

    if len(words) > 1:
        return None

    return EnvEntry(name, words[0] if words else '')


class EnvStore:
    """
    File-backed store of exported variables
    """

    def __init__(
            self,
            path: Union[str, Path],
            backup: bool = True,
            lock: bool = False):

        self.path = Path(path)
        self.backup = backup
        self.lock = lock


    @property
    def backup_path(self) -> Path:
        return self.path.with_name(self.path.name + '.bak')


    @property
    def lock_path(self) -> Path:
        return self.path.with_name(self.path.name + '.lock')


    def ensure(self) -> None:
        """
        Create an empty store file if there isn't one yet.
        """

        if not self.path.exists():
            logger.info(f'Creating empty store {self.path}')
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch()


    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Hold an exclusive lock on the store for the duration, when locking
        is enabled.
        """

        if not self.lock:
            yield
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.lock_path, 'a') as lockf:
            fcntl.flock(lockf, fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lockf, fcntl.LOCK_UN)


    def _read_lines(self) -> List[str]:
        if not self.path.exists():
            return []
        text = self.path.read_text(encoding='utf-8', errors='surrogateescape')
        return re.findall(r'[^\n]*\n|[^\n]+', text)


    def _write_lines(self, lines: List[str]) -> None:
        if self.backup and self.path.exists():
            shutil.copy2(self.path, self.backup_path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(''.join(lines), encoding='utf-8', errors='surrogateescape')


    def read_all(self) -> List[EnvEntry]:
        """
        All parseable entries, in file order.
        """

        entries = []
        for line in self._read_lines():
            if not line.strip():
                continue
            entry = parse_line(line)
            if entry is None:
                logger.debug(f'Skipping store line {line.rstrip()!r}')
                continue
            entries.append(entry)
        return entries


    def get(self, name: str) -> Optional[str]:
        found = None
        for entry in self.read_all():
            if entry.name == name:
                found = entry.value
        return found


    def _without(self, lines: List[str], name: str) -> List[str]:
        matcher = re.compile(rf'^export\s+{re.escape(name)}=')
        return [line for line in lines if not matcher.match(line)]


    def replace_entry(self, name: str, value: str) -> None:
        """
        Drop any existing export of name and append the new one.
        """

        if not is_identifier(name):
            raise ValueError(f"invalid variable name '{name}'")

        with self.transaction():
            lines = self._without(self._read_lines(), name)
            if lines and not lines[-1].endswith('\n'):
                lines[-1] += '\n'
            lines.append(export_command(name, value) + '\n')
            self._write_lines(lines)

        logger.debug(f'Stored {name} in {self.path}')


    def remove_entry(self, name: str) -> bool:
        """
        Drop any existing export of name. Returns True if a line was
        removed.
        """

        if not is_identifier(name):
            raise ValueError(f"invalid variable name '{name}'")

        with self.transaction():
            lines = self._read_lines()
            kept = self._without(lines, name)
            if len(kept) == len(lines):
                return False
            self._write_lines(kept)

        logger.debug(f'Removed {name} from {self.path}')
        return True


# The end.
