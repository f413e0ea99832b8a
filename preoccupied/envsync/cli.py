"""
Command line interface for the envsync utility.

The set, unset, and load commands print shell commands on stdout. The
envset, envunset, and envload functions installed by the hook eval that
output, which is how the calling shell picks up the change. Diagnostics go
to stderr.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
"""

import logging
import os
import sys

import click
from pydantic import ValidationError

from . import __version__
from .config import EnvSyncConfig, get_config
from .hook import install_hook, remove_hook, render_hook
from .propagator import Propagator, Result


logger = logging.getLogger(__name__)


def _echo(text: str) -> None:
    # stray bytes from the shell come back out as the same bytes
    click.echo(text.encode('utf-8', 'surrogateescape'))


def _emit(result: Result) -> None:
    for command in result.commands:
        _echo(command)
    logger.debug(f'Reached {len(result.panes)} other pane(s)')


@click.group()
@click.option('--config', 'config_path', type=click.Path(dir_okay=False),
              default=None, help='Path to config.yaml')
@click.option('--store', 'store_path', default=None,
              help='Path to the shared env store')
@click.option('-v', '--verbose', is_flag=True, help='Log debug output')
@click.version_option(version=__version__, prog_name='envsync')
@click.pass_context
def cli(ctx: click.Context, config_path, store_path, verbose):
    """
    Share exported variables between shells and tmux panes.
    """

    try:
        config = get_config(config_path)
    except (ValidationError, ValueError, OSError) as e:
        raise click.ClickException(f'Invalid configuration: {e}')

    if store_path:
        config = config.model_copy(
            update={'store_path': os.path.expanduser(store_path)})

    logging.basicConfig(
        level=logging.DEBUG if verbose else config.log_level,
        format='%(message)s',
        stream=sys.stderr)

    ctx.obj = config


@cli.command('set')
@click.argument('pairs', nargs=-1)
@click.pass_obj
def set_cmd(config: EnvSyncConfig, pairs):
    """
    Export NAME=VALUE pairs everywhere.
    """

    _emit(Propagator.from_config(config).set(*pairs))


@cli.command('unset')
@click.argument('names', nargs=-1)
@click.pass_obj
def unset_cmd(config: EnvSyncConfig, names):
    """
    Unset NAMEs everywhere.
    """

    _emit(Propagator.from_config(config).unset(*names))


@cli.command('load')
@click.pass_obj
def load_cmd(config: EnvSyncConfig):
    """
    Reload the store here and in every other pane.
    """

    _emit(Propagator.from_config(config).load())


@cli.command('list')
@click.pass_obj
def list_cmd(config: EnvSyncConfig):
    """
    Show the stored variables.
    """

    for entry in Propagator.from_config(config).store.read_all():
        _echo(f'{entry.name}={entry.value}')


@cli.command('init')
@click.pass_obj
def init_cmd(config: EnvSyncConfig):
    """
    Print the shell hook, for use with eval.
    """

    click.echo(render_hook(config))


@cli.command('install')
@click.pass_obj
def install_cmd(config: EnvSyncConfig):
    """
    Add the shell hook to the rc file.
    """

    if install_hook(config):
        click.echo(f'Updated {config.rc_file}. Open a new shell to use envset.', err=True)
    else:
        click.echo(f'{config.rc_file} already has the envsync hook.', err=True)


@cli.command('uninstall')
@click.pass_obj
def uninstall_cmd(config: EnvSyncConfig):
    """
    Remove the shell hook from the rc file.
    """

    if remove_hook(config):
        click.echo(f'Removed the envsync hook from {config.rc_file}.', err=True)
    else:
        click.echo(f'{config.rc_file} has no envsync hook.', err=True)


def main() -> None:
    cli(prog_name='envsync')


# The end.
