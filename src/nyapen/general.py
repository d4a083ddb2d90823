"""
General purpose parsers built out of the primitives.

Also meant as examples of combining `regex()` with `map()`.
"""

from __future__ import annotations
from typing import Final

import re

import nyapen.const as const
from nyapen.main import Map, Re
from nyapen.primitive import regex

# skippers

ws: Final[Re] = regex(const.WHITESPACE_PATTERN)
"""Skips whitespace. Meant to be passed to `Parser.skip()`."""

def ws_and_comments(prefix: str = "#") -> Re:
    """Skips whitespace and line comments starting with `prefix`."""
    if not prefix:
        raise ValueError("The comment prefix can't be empty.")
    return regex(rf"(?:\s+|{re.escape(prefix)}[^\n]*)+")

# numbers

def _to_int(_mapped: object, parsed: list[str]) -> int:
    """
    `0b`: Binary
    `0o`: Octal
    `0x`: Hexadecimal
    """
    text = parsed[0]
    body = text.lstrip("+-")
    sign = -1 if text.startswith("-") else 1
    prefix = body[:2].lower()
    if prefix == "0b":
        return sign * int(body[2:], base=2)
    if prefix == "0o":
        return sign * int(body[2:], base=8)
    if prefix == "0x":
        return sign * int(body[2:], base=16)
    return sign * int(body, base=10)

integer: Final[Map[int]] = regex(const.INTEGER_PATTERN, rule="integer").map(_to_int)
"""An optionally signed integer. Decimal, or prefixed with `0b`, `0o` or `0x`."""

float_number: Final[Map[float]] = regex(const.FLOAT_PATTERN, rule="float").map(lambda _, parsed: float(parsed[0]))
"""A float with a decimal point, an exponent, or both."""

identifier: Final[Map[str]] = regex(const.IDENTIFIER_PATTERN, rule="identifier").map(lambda _, parsed: parsed[0])

# quoted string

GENERAL_ESCAPES: Final[dict[str, str]] = {
    'b': '\b',
    'f': '\f',
    'n': '\n',
    'r': '\r',
    't': '\t',
}

_ESCAPE_RE: Final[re.Pattern[str]] = re.compile(r"\\(u[0-9a-fA-F]{4}|.)", re.DOTALL)

def _unescape(m: re.Match[str]) -> str:
    sequence = m.group(1)
    if len(sequence) == 5:
        return chr(int(sequence[1:], base=16))
    # unknown escapes stand for the escaped character itself
    return GENERAL_ESCAPES.get(sequence, sequence)

def _decode_quoted(_mapped: object, parsed: list[str]) -> str:
    return _ESCAPE_RE.sub(_unescape, parsed[0][1:-1])

quoted_string: Final[Map[str]] = regex(const.QUOTED_STRING_PATTERN, rule="quoted_string").map(_decode_quoted)
"""
A single or double quoted string. The mapped value has the quotes removed and the escapes decoded.

Escapes: `\\b` `\\f` `\\n` `\\r` `\\t` `\\uXXXX`. Any other escaped character stands for itself.
"""
