"""
General use constants.
"""

from __future__ import annotations
from typing import Final

LOGGER_NAME: Final[str] = "nyapen"

# default rule labels carried by `ParseFailure`
RULE_LIT: Final[str] = "lit"
RULE_RE: Final[str] = "re"
RULE_EOI: Final[str] = "eoi"
RULE_NOSKIP: Final[str] = "noskip"

WHITESPACE_PATTERN: Final[str] = r"\s+"
INTEGER_PATTERN: Final[str] = r"[-+]?(?:0[bB][01]+|0[oO][0-7]+|0[xX][0-9a-fA-F]+|[0-9]+)"
FLOAT_PATTERN: Final[str] = r"[-+]?(?:(?:[0-9]+\.[0-9]+|\.[0-9]+)(?:[eE][-+]?[0-9]+)?|[0-9]+\.?[eE][-+]?[0-9]+)"
IDENTIFIER_PATTERN: Final[str] = r"[A-Za-z_][A-Za-z0-9_]*"
QUOTED_STRING_PATTERN: Final[str] = (
    r'"(?:[^"\\]|\\(?:u[0-9a-fA-F]{4}|[^u]))*"'
    r"|'(?:[^'\\]|\\(?:u[0-9a-fA-F]{4}|[^u]))*'"
)
