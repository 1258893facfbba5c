"""
Low-level helpers used to tokenize the text sections of a Bufkit file.
"""

from __future__ import annotations

import re
import typing as t
from datetime import datetime

import numpy as np

from .config import settings
from .exceptions import ParseError

_KV_SEP_RE = re.compile(r"\s*=\s*")
_VALID_TIME_RE = re.compile(r"^(\d{2})(\d{2})(\d{2})/(\d{2})(\d{2})$")


def parse_key_values(text: str) -> dict[str, str]:
    """
    Parse all ``KEY = VALUE`` pairs found in a block of text.

    Spaces around the ``=`` sign are optional. A key immediately followed by
    another key (*e.g.* ``STID = STNM = 727730``, where the station has no
    identifier) is given an empty value. The order of the keys is irrelevant.

    Parameters
    ----------
    text : str
        Text to parse.

    Returns
    -------
    dict
        Mapping of keys to (unconverted) values.

    Examples
    --------
    >>> parse_key_values("STID = STNM = 727730 TIME = 170401/0000")
    {'STID': '', 'STNM': '727730', 'TIME': '170401/0000'}
    """
    tokens = _KV_SEP_RE.sub(" = ", text).split()
    result = {}

    for i, token in enumerate(tokens):
        if token == "=" or i + 1 >= len(tokens) or tokens[i + 1] != "=":
            continue

        value_index = i + 2
        if value_index >= len(tokens) or tokens[value_index] == "=":
            result[token] = ""
        elif value_index + 1 < len(tokens) and tokens[value_index + 1] == "=":
            # The next token is itself a key: this one has no value
            result[token] = ""
        else:
            result[token] = tokens[value_index]

    return result


def parse_float(value: str) -> float | None:
    """
    Convert a token to a float, mapping the missing value sentinel to ``None``.

    Raises
    ------
    :class:`.ParseError`
        If the token is not a number.
    """
    try:
        result = float(value)
    except ValueError as e:
        raise ParseError(f"cannot interpret {value!r} as a number") from e
    return check_missing(result)


def parse_int(value: str) -> int | None:
    """
    Convert a token to an integer, mapping the missing value sentinel to
    ``None``. Tokens written as floats with no fractional part are accepted.

    Raises
    ------
    :class:`.ParseError`
        If the token is not an integer.
    """
    result = parse_float(value)
    if result is None:
        return None
    if not result.is_integer():
        raise ParseError(f"cannot interpret {value!r} as an integer")
    return int(result)


def parse_valid_time(value: str) -> datetime:
    """
    Parse a valid time written as ``YYMMDD/HHMM``.

    Two-digit years are offset by the ``CENTURY`` setting. The returned
    datetime is naive and must be interpreted as UTC.

    Raises
    ------
    :class:`.ParseError`
        If the string does not follow the expected format or does not describe
        a valid date.

    Examples
    --------
    >>> parse_valid_time(" 170401/0000 ")
    datetime.datetime(2017, 4, 1, 0, 0)
    """
    match = _VALID_TIME_RE.match(value.strip())
    if match is None:
        raise ParseError(f"cannot interpret {value!r} as a YYMMDD/HHMM valid time")

    yy, month, day, hour, minute = (int(x) for x in match.groups())
    try:
        return datetime(settings.CENTURY + yy, month, day, hour, minute)
    except ValueError as e:
        raise ParseError(f"invalid valid time {value!r}: {e}") from e


def is_number(token: str) -> bool:
    """
    Return ``True`` if a token can be converted to a float.
    """
    try:
        float(token)
    except ValueError:
        return False
    return True


def split_blank_line(text: str) -> tuple[str, str] | None:
    """
    Split text at the first blank line, *i.e.* the first line that contains no
    ASCII letter or digit.

    Returns
    -------
    tuple of str or None
        The text before the blank line and the text after it, or ``None`` if no
        blank line separates two non-blank blocks.
    """
    lines = text.splitlines(keepends=True)
    seen_content = False

    for i, line in enumerate(lines):
        if re.search(r"[A-Za-z0-9]", line):
            seen_content = True
            continue

        if seen_content:
            head = "".join(lines[:i])
            tail = "".join(lines[i + 1 :])
            if tail.strip():
                return head, tail
            return None

    return None


def check_missing(value):
    """
    Map the missing value sentinel to ``None`` (scalars) or NaN (arrays).
    """
    missing = settings.MISSING_VALUE

    if np.isscalar(value):
        return None if value == missing else value

    value = np.array(value, dtype=float)
    value[value == missing] = np.nan
    return value


def chunks(tokens: t.Sequence[str], n: int) -> t.Iterator[list[str]]:
    """
    Yield successive lists of ``n`` tokens. The last list may be shorter.
    """
    for i in range(0, len(tokens), n):
        yield list(tokens[i : i + n])
