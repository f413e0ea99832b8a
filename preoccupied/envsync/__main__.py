"""
Allow running as ``python -m preoccupied.envsync``.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
"""

from preoccupied.envsync.cli import main


main()


# The end.
