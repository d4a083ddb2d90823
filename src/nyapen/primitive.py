"""
Constructors for the atomic matchers.
"""

from __future__ import annotations

import re

import nyapen.const as const
from nyapen.main import Lit, Re, PatternError


def lit(text: str, *, rule: str = const.RULE_LIT) -> Lit:
    """
    Matches `text` exactly. Case sensitive.

    `rule`: The label reported by a `ParseFailure` when it doesn't match.
    """
    if not isinstance(text, str):
        raise TypeError(f"Expected a string, got {type(text).__name__}.")
    return Lit(text, rule)

def regex(pattern: str | re.Pattern[str], flags: int | re.RegexFlag = 0, *, rule: str = const.RULE_RE) -> Re:
    """
    Matches `pattern`, starting exactly at the current position.

    The pattern is compiled right away. Raises `PatternError` if it's invalid.

    `rule`: The label reported by a `ParseFailure` when it doesn't match.
    """
    try:
        compiled = re.compile(pattern, flags)
    except re.error as e:
        source = pattern if isinstance(pattern, str) else pattern.pattern
        raise PatternError(source, str(e)) from e
    return Re(compiled, rule)
