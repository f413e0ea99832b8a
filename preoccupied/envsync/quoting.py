"""
Shell quoting for the envsync utility.

Values travel two different ways and each has its own contract. A stored
value is written as an assignment on a single line of the store file, which
bash and zsh re-read to the identical string. An injected value is typed into
another pane's interactive prompt, so it must stay on one line and survive
history expansion.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
"""

import re
import shlex
from typing import Callable, Tuple


IDENTIFIER = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')

_SAFE_WORD = re.compile(r'^[A-Za-z0-9_@%+=:,./-]+$')

_CONTROL = re.compile(r'[\x00-\x1f\x7f]')

_ANSI_C_WORD = re.compile(r"^\$'((?:[^'\\]|\\.)*)'$", re.DOTALL)

_ANSI_C_ESCAPE = re.compile(
    r'\\(x[0-9a-fA-F]{1,2}|[0-7]{1,3}|u[0-9a-fA-F]{1,4}|U[0-9a-fA-F]{1,8}|c.|.)',
    re.DOTALL)

_ANSI_ESCAPES = {
    '\\': '\\\\',
    "'": "\\'",
    '\n': '\\n',
    '\t': '\\t',
    '\r': '\\r',
}

_ANSI_UNESCAPES = {
    'a': '\a',
    'b': '\b',
    'e': '\x1b',
    'E': '\x1b',
    'f': '\f',
    'n': '\n',
    'r': '\r',
    't': '\t',
    'v': '\v',
    '\\': '\\',
    "'": "'",
    '"': '"',
    '?': '?',
}


def is_identifier(name: str) -> bool:
    return bool(IDENTIFIER.match(name))


def split_pair(pair: str) -> Tuple[str, str]:
    """
    Split a NAME=VALUE argument at its first '='. Raises ValueError when the
    delimiter is missing or NAME is not a shell identifier.
    """

    if '=' not in pair:
        raise ValueError(f"expected VAR=value, got '{pair}'")

    name, value = pair.split('=', 1)
    if not is_identifier(name):
        raise ValueError(f"invalid variable name '{name}'")

    return name, value


def _ansi_c_quote(value: str, extra: str = '') -> str:
    out = []
    for ch in value:
        esc = _ANSI_ESCAPES.get(ch)
        if esc is None and (ch in extra or _CONTROL.match(ch)):
            esc = f'\\x{ord(ch):02x}'
        out.append(esc or ch)

    return "$'" + ''.join(out) + "'"


def _unescape(esc: str) -> bytes:
    head = esc[0]
    if head == 'x' and len(esc) > 1:
        return bytes([int(esc[1:], 16)])
    if head in '01234567':
        return bytes([int(esc, 8) & 0xff])
    if head in 'uU' and len(esc) > 1:
        return chr(int(esc[1:], 16)).encode('utf-8', 'surrogateescape')
    if head == 'c' and len(esc) == 2:
        return bytes([ord(esc[1]) & 0x1f])
    if esc in _ANSI_UNESCAPES:
        return _ANSI_UNESCAPES[esc].encode('utf-8')
    return ('\\' + esc).encode('utf-8', 'surrogateescape')


def ansi_c_unquote(word: str) -> str:
    """
    Decode a $'...' word the way bash does, including the octal and hex
    byte escapes that printf %q writes. Raises ValueError if word is not in
    that form or holds an impossible code point.
    """

    found = _ANSI_C_WORD.match(word)
    if not found:
        raise ValueError(f'not an ANSI-C quoted word: {word!r}')

    body = found.group(1)
    out = bytearray()
    pos = 0
    for m in _ANSI_C_ESCAPE.finditer(body):
        out += body[pos:m.start()].encode('utf-8', 'surrogateescape')
        out += _unescape(m.group(1))
        pos = m.end()
    out += body[pos:].encode('utf-8', 'surrogateescape')

    return out.decode('utf-8', 'surrogateescape')


def quote_for_store(value: str) -> str:
    """
    Quote value for a re-sourceable assignment in the store file. Plain
    POSIX single quoting is used unless the value holds control characters,
    which are written as $'...' escapes to keep the entry on one line.
    """

    if _CONTROL.search(value):
        return _ansi_c_quote(value)
    return shlex.quote(value)


def quote_for_injection(value: str) -> str:
    """
    Quote value for literal insertion into an interactive bash or zsh
    prompt. Uses ANSI-C $'...' quoting so that the result is a single
    line and carries no raw '!', quote, backslash, or control character.
    """

    if not value:
        return "''"
    if _SAFE_WORD.match(value):
        return value

    return _ansi_c_quote(value, extra='!')


def export_command(
        name: str,
        value: str,
        quote: Callable[[str], str] = quote_for_store) -> str:

    return f'export {name}={quote(value)}'


def unset_command(name: str) -> str:
    return f'unset {name}'


def source_command(
        path: str,
        quote: Callable[[str], str] = quote_for_store) -> str:

    return f'source {quote(path)}'


# The end.
