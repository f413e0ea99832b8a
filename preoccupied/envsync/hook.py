"""
Shell rc integration for the envsync utility.

The hook is what makes a new shell load the store at startup, and it defines
the envset, envunset, and envload functions that evaluate the output of the
envsync command in the calling shell.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
"""

import logging
import shutil
from pathlib import Path
from typing import Optional

from .config import EnvSyncConfig
from .quoting import quote_for_store


logger = logging.getLogger(__name__)


START_MARKER = '# >>> envsync >>>'
END_MARKER = '# <<< envsync <<<'


_FUNCTIONS = '''\
envset() {{
{prologue}  eval "$(command {program} --store "$SHARED_ENV" set -- "$@")"
}}

envunset() {{
{prologue}  eval "$(command {program} --store "$SHARED_ENV" unset -- "$@")"
}}

envload() {{
{prologue}  eval "$(command {program} --store "$SHARED_ENV" load)"
}}
'''


def render_hook(config: EnvSyncConfig, program: str = 'envsync') -> str:
    """
    Build the rc block for the configured shell.
    """

    prologue = '  emulate -L zsh\n' if config.shell == 'zsh' else ''

    lines = [
        START_MARKER,
        '# Persistent, tmux-synchronized environment helpers',
        f'export SHARED_ENV={quote_for_store(config.store_path)}',
        '[ -f "$SHARED_ENV" ] || : > "$SHARED_ENV"',
        'source "$SHARED_ENV"',
        '',
        _FUNCTIONS.format(prologue=prologue, program=program).rstrip('\n'),
    ]

    if config.alias:
        lines.append('')
        lines.append(f"alias {config.alias}='envset'")

    lines.append(END_MARKER)
    return '\n'.join(lines)


def _read_rc(rc_path: Path) -> str:
    if not rc_path.exists():
        return ''
    return rc_path.read_text()


def _has_block(content: str) -> bool:
    return START_MARKER in content and END_MARKER in content


def _remove_block(content: str) -> str:
    lines = content.splitlines(keepends=True)
    result = []
    inside = False
    for line in lines:
        if line.rstrip() == START_MARKER:
            inside = True
            continue
        if line.rstrip() == END_MARKER:
            inside = False
            continue
        if not inside:
            result.append(line)
    return ''.join(result)


def _backup(rc_path: Path) -> Optional[Path]:
    """
    One-time backup of the rc file, made before the first edit.
    """

    backup_path = rc_path.with_name(f'{rc_path.name}.envsync-backup')
    if not backup_path.exists() and rc_path.exists():
        shutil.copy2(rc_path, backup_path)
        logger.info(f'Backed up {rc_path} to {backup_path}')
        return backup_path
    return None


def install_hook(config: EnvSyncConfig, program: str = 'envsync') -> bool:
    """
    Append the envsync block to the rc file. Returns True if the file was
    modified, False if the block was already present.
    """

    rc_path = Path(config.rc_file)
    content = _read_rc(rc_path)
    if _has_block(content):
        return False

    _backup(rc_path)

    if content and not content.endswith('\n'):
        content += '\n'
    content += f'\n{render_hook(config, program)}\n'

    rc_path.parent.mkdir(parents=True, exist_ok=True)
    rc_path.write_text(content)
    logger.info(f'Installed envsync hook into {rc_path}')
    return True


def remove_hook(config: EnvSyncConfig) -> bool:
    """
    Strip the envsync block from the rc file. Returns True if modified.
    """

    rc_path = Path(config.rc_file)
    content = _read_rc(rc_path)
    if not _has_block(content):
        return False

    rc_path.write_text(_remove_block(content))
    logger.info(f'Removed envsync hook from {rc_path}')
    return True


# The end.
