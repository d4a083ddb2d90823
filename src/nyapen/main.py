"""
The implementations of the parsing contract and the combinators.
"""

from __future__ import annotations
from typing import Any, Callable, Final, Generic, Literal, Never, Protocol, Self, TypeVar

import logging
import re

import nyapen.const as const


log = logging.getLogger(const.LOGGER_NAME)

_T = TypeVar("_T")
_R = TypeVar("_R")
_MappedCovT = TypeVar("_MappedCovT", covariant=True)

MapFunc = Callable[[Any, list[str]], _R]
"""`func(mapped, parsed)`: receives the mapped value (`None` if absent) and the unspent raw fragments."""



class Output(Generic[_MappedCovT]):
    """
    When returned from a parser, indicates that it has succeeded.

    ```
    r = parser.parse(src)
    if r:
        r.mapped    # the transformed value, if `r.has_mapped`
        r.parsed    # the raw fragments that weren't consumed by a `map()`
        r.pos       # the position after the match
    else:
        ...         # `r` is a `ParseFailure` object
    ```
    """
    def __init__(self, pos: int, parsed: list[str] | None = None, mapped: _MappedCovT | None = None, *, has_mapped: bool = False) -> None:
        self.pos: Final[int] = pos
        """The position right after the consumed input, including any skipped input."""
        self.parsed: Final[list[str]] = [] if parsed is None else parsed
        """Raw fragments matched by literals and patterns, in order."""
        self.mapped: Final[_MappedCovT | None] = mapped
        """The mapped value. `None` if absent, except for the `(None, None)` pair of a `then()` whose sides are both unmapped."""
        self.has_mapped: Final[bool] = has_mapped
        """Whether a `map()` was applied along this branch. Decides how `then()` and `repeated()` merge this output."""

    @classmethod
    def with_mapped(cls, mapped: _T, pos: int, parsed: list[str] | None = None) -> Output[_T]:
        """Creates an output that carries a mapped value."""
        return Output(pos, parsed, mapped, has_mapped=True)

    def moved_to(self, pos: int) -> Output[_MappedCovT]:
        """Creates a copy of this output ending at a different position."""
        return Output(pos, self.parsed, self.mapped, has_mapped=self.has_mapped)

    def __bool__(self) -> Literal[True]:
        return True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Output):
            return NotImplemented
        return (
            self.pos == other.pos
            and self.parsed == other.parsed
            and self.has_mapped == other.has_mapped
            and self.mapped == other.mapped
        )

    def __repr__(self) -> str:
        return (
            f"<Output {self.pos} {self.parsed!r}"
            + (f" {{{self.mapped!r}}}" if self.mapped is not None or self.has_mapped else "")
            + ">"
        )


class ParseFailure:
    """
    When returned from a parser, indicates that it has failed. Can be converted into a `ParseError`.

    ```
    r = parser.parse(src)
    if not r:
        raise r.error()
    ```
    """

    def __init__(self, src: str, pos: int, rule: str) -> None:
        """
        `src`: The string that was being parsed.
        `pos`: The position of the failure.
        `rule`: The label of the rule that failed. (`"lit"`, `"re"`, `"eoi"`, `"noskip"` or a custom label)
        """
        self.src: Final[str] = src
        self.pos: Final[int] = pos
        self.rule: Final[str] = rule

    def error(self, msg: str | None = None) -> ParseError:
        """Converts this to a ParseError."""
        return ParseError(self.src, self.pos, self.rule, msg)

    def __bool__(self) -> Literal[False]:
        return False

    def __repr__(self) -> str:
        return f"<ParseFailure {self.rule} {self.pos}>"


class ParseError(Exception):
    """
    The exception that's raised when a failed parse needs to be reported.

    Notes show the position, line and column of the failure.
    """

    def __init__(self, src: str, pos: int, rule: str, msg: str | None = None) -> None:
        super().__init__(f"Failed to match `{rule}`." if msg is None else msg)
        self.src: str = src
        self.pos: int = pos
        self.rule: str = rule
        self.append_pos_note(pos)

    def append_pos_note(self, pos: int, msg: str | None = None) -> Self:
        note: list[str] = [] if msg is None else [msg]

        pos = min(pos, len(self.src))
        line = self.src.count("\n", 0, pos) + 1
        column = pos - self.src.rfind("\n", 0, pos) # rfind returns -1 on the first line
        note.append(f"At position {pos} (line {line}, column {column})")

        lines = self.src.splitlines()
        if len(lines) > line-1:
            line_str = lines[line-1]
            if len(line_str) >= column-1:
                if column <= 20:
                    note.append(f"{line_str[:40]}\n{' '*(column-1)}^")
                else:
                    note.append(f"{line_str[(column-20):(column+20)]}\n{' '*19}^")
        self.add_note("\n".join(note))
        return self


class PatternError(ValueError):
    """Raised when a pattern given to `regex()` doesn't compile. Never returned while parsing."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")
        self.pattern: str = pattern
        self.reason: str = reason



def skipper(src: str, pos: int, skip: Parser[Any] | None) -> int:
    """
    Consumes skippable input at `pos` and returns the new position.

    The skip parser runs with `NO_SKIP` as its own skip, so skipping never nests.
    If there's no skip parser, or it fails, `pos` is returned as-is.
    """
    if skip is None:
        return pos
    result = skip.parse_with_position(src, pos, NO_SKIP)
    if result:
        return result.pos
    return pos


def _check_parser(value: object) -> None:
    if not callable(getattr(value, "parse_with_position", None)):
        raise TypeError(f"Expected a parser, got {type(value).__name__}.")


class Parser(Protocol[_MappedCovT]):
    """
    The capability every matcher and combinator implements.

    Only `parse_with_position()` has to be implemented, and any object that has it can be passed to `then()` and `skip()`.
    Subclass `Parser` to also get the other methods, which build new parsers out of this one without modifying it.

    ```
    greeting = lit("Hello").then(lit(",").opt()).then(lit("World")).skip(regex(r"\\s+"))

    r = greeting.parse("Hello World")
    if r:
        r.parsed    # ["Hello", "World"]
    ```
    """

    def parse_with_position(self, src: str, pos: int, skip: Parser[Any] | None) -> Output[_MappedCovT] | ParseFailure:
        """
        Attempts to match at `pos`.

        `skip` is consumed after every literal or pattern match. (`None` to skip nothing)
        """
        ...

    def parse(self, src: str) -> Output[_MappedCovT] | ParseFailure:
        """
        Parses `src` from the start.

        No skip parser is used unless one was bound with `skip()`.
        """
        log.debug("parsing %d characters with %r", len(src), self)
        result = self.parse_with_position(src, skipper(src, 0, None), None)
        if result:
            log.debug("parsed up to position %d", result.pos)
        else:
            log.debug("failed to match `%s` at position %d", result.rule, result.pos)
        return result

    def parse_with_map(self, src: str, func: MapFunc[_R]) -> _R | ParseFailure:
        """
        Same as `parse()`, but passes the outcome through `func(mapped, parsed)`.

        Returns what `func` returns, or the `ParseFailure`.
        """
        result = self.parse(src)
        if not result:
            return result
        return func(result.mapped, result.parsed)

    def map(self, func: MapFunc[_R]) -> Map[_R]:
        """
        Transforms the output with `func(mapped, parsed)`.

        The returned value becomes the mapped value, and the raw fragments are spent.
        """
        if not callable(func):
            raise TypeError(f"Expected a callable, got {type(func).__name__}.")
        return Map(self, func)

    def then(self, other: Parser[_T]) -> Then:
        """Matches this, then `other`."""
        _check_parser(other)
        return Then(self, other)

    def repeated(self) -> Repeated:
        """Matches this zero or more times."""
        return Repeated(self)

    def opt(self) -> Opt[_MappedCovT]:
        """Matches this, or nothing."""
        return Opt(self)

    def eoi(self) -> Eoi[_MappedCovT]:
        """Matches this, then requires the end of the input."""
        return Eoi(self)

    def skip(self, skip: Parser[Any]) -> Skip[_MappedCovT]:
        """Binds `skip` as the skip parser, replacing the one it's called with."""
        _check_parser(skip)
        return Skip(self, skip)



class NoSkip(Parser[Never]):
    """
    Always fails.

    Passed as the skip parser of skip parsers, so that skipping doesn't trigger more skipping.
    """

    def parse_with_position(self, src: str, pos: int, skip: Parser[Any] | None) -> ParseFailure:
        return ParseFailure(src, pos, const.RULE_NOSKIP)

    def __repr__(self) -> str:
        return "NoSkip()"

NO_SKIP: Final[NoSkip] = NoSkip()


class Lit(Parser[Never]):
    """Matches an exact string. Create using `nyapen.primitive.lit()`."""

    def __init__(self, text: str, rule: str = const.RULE_LIT) -> None:
        self.text: Final[str] = text
        self.rule: Final[str] = rule

    def parse_with_position(self, src: str, pos: int, skip: Parser[Any] | None) -> Output[Never] | ParseFailure:
        if not 0 <= pos <= len(src) or not src.startswith(self.text, pos):
            return ParseFailure(src, pos, self.rule)
        return Output(skipper(src, pos + len(self.text), skip), [self.text])

    def __repr__(self) -> str:
        return f"Lit({self.text!r})"


class Re(Parser[Never]):
    """
    Matches a compiled pattern. Create using `nyapen.primitive.regex()`.

    The pattern only sees the remaining input, so `^` and lookbehinds treat the current position as the start.
    The match has to start exactly there. A match further ahead is a failure.
    """

    def __init__(self, pattern: re.Pattern[str], rule: str = const.RULE_RE) -> None:
        self.pattern: Final[re.Pattern[str]] = pattern
        self.rule: Final[str] = rule

    def parse_with_position(self, src: str, pos: int, skip: Parser[Any] | None) -> Output[Never] | ParseFailure:
        if not 0 <= pos <= len(src):
            return ParseFailure(src, pos, self.rule)
        m = self.pattern.match(src[pos:])
        if m is None:
            return ParseFailure(src, pos, self.rule)
        return Output(skipper(src, pos + m.end(), skip), [m.group()])

    def __repr__(self) -> str:
        return f"Re({self.pattern.pattern!r})"


class Map(Parser[_R]):
    def __init__(self, parser: Parser[Any], func: MapFunc[_R]) -> None:
        self.parser: Final[Parser[Any]] = parser
        self.func: Final[MapFunc[_R]] = func

    def parse_with_position(self, src: str, pos: int, skip: Parser[Any] | None) -> Output[_R] | ParseFailure:
        result = self.parser.parse_with_position(src, pos, skip)
        if not result:
            return result
        return Output.with_mapped(self.func(result.mapped, result.parsed), result.pos)

    def __repr__(self) -> str:
        return f"Map({self.parser!r}, {getattr(self.func, '__name__', self.func)!r})"


class Then(Parser[tuple[Any, Any]]):
    """
    Matches `parser_a`, then `parser_b`.

    The mapped value is a `(a, b)` pair, with `None` for a side that has no mapped value.
    The raw fragments of a mapped side are spent, unless both sides are mapped.
    If both sides are mapped, there's no mapped value and the raw fragments of both sides remain.
    If neither side is mapped, the pair is `(None, None)` and still counts as unmapped.
    """

    def __init__(self, parser_a: Parser[Any], parser_b: Parser[Any]) -> None:
        self.parser_a: Final[Parser[Any]] = parser_a
        self.parser_b: Final[Parser[Any]] = parser_b

    def parse_with_position(self, src: str, pos: int, skip: Parser[Any] | None) -> Output[tuple[Any, Any]] | ParseFailure:
        a = self.parser_a.parse_with_position(src, pos, skip)
        if not a:
            return a
        b = self.parser_b.parse_with_position(src, a.pos, skip)
        if not b:
            return b
        if a.has_mapped:
            if b.has_mapped:
                return Output(b.pos, a.parsed + b.parsed)
            return Output.with_mapped((a.mapped, None), b.pos, list(b.parsed))
        if b.has_mapped:
            return Output.with_mapped((None, b.mapped), b.pos, list(a.parsed))
        # the all-absent pair is visible to `map()`, but doesn't count as mapped when merging
        return Output(b.pos, a.parsed + b.parsed, (None, None))

    def __repr__(self) -> str:
        return f"Then({self.parser_a!r}, {self.parser_b!r})"


class Repeated(Parser[list[Any]]):
    """
    Matches the parser zero or more times. Never fails.

    Stops at the first failure, or at the first match that doesn't advance the position. (That match is discarded.)
    The mapped value is the list of the mapped values of the matches, if any of them had one.
    """

    def __init__(self, parser: Parser[Any]) -> None:
        self.parser: Final[Parser[Any]] = parser

    def parse_with_position(self, src: str, pos: int, skip: Parser[Any] | None) -> Output[list[Any]]:
        parsed: list[str] = []
        mapped: list[Any] = []
        while True:
            result = self.parser.parse_with_position(src, pos, skip)
            if not result:
                break
            if result.pos <= pos:
                log.debug("%r made no progress at position %d", self.parser, pos)
                break
            if result.has_mapped:
                mapped.append(result.mapped)
            parsed.extend(result.parsed)
            pos = result.pos
        if mapped:
            return Output.with_mapped(mapped, pos, parsed)
        return Output(pos, parsed)

    def __repr__(self) -> str:
        return f"Repeated({self.parser!r})"


class Opt(Parser[_T]):
    """Matches the parser, or succeeds at the same position with nothing. Never fails."""

    def __init__(self, parser: Parser[_T]) -> None:
        self.parser: Final[Parser[_T]] = parser

    def parse_with_position(self, src: str, pos: int, skip: Parser[Any] | None) -> Output[_T]:
        result = self.parser.parse_with_position(src, pos, skip)
        if result:
            return result
        return Output(pos)

    def __repr__(self) -> str:
        return f"Opt({self.parser!r})"


class Eoi(Parser[_T]):
    """Matches the parser, then fails with `"eoi"` unless only skippable input remains."""

    def __init__(self, parser: Parser[_T]) -> None:
        self.parser: Final[Parser[_T]] = parser

    def parse_with_position(self, src: str, pos: int, skip: Parser[Any] | None) -> Output[_T] | ParseFailure:
        result = self.parser.parse_with_position(src, pos, skip)
        if not result:
            return result
        end = skipper(src, result.pos, skip)
        if end != len(src):
            return ParseFailure(src, end, const.RULE_EOI)
        return result.moved_to(end)

    def __repr__(self) -> str:
        return f"Eoi({self.parser!r})"


class Skip(Parser[_T]):
    """
    Runs the parser with `skipper` as its skip parser.

    Skippable input at the starting position is consumed first.
    """

    def __init__(self, parser: Parser[_T], skipper: Parser[Any]) -> None:
        self.parser: Final[Parser[_T]] = parser
        self.skipper: Final[Parser[Any]] = skipper

    def parse_with_position(self, src: str, pos: int, skip: Parser[Any] | None) -> Output[_T] | ParseFailure:
        return self.parser.parse_with_position(src, skipper(src, pos, self.skipper), self.skipper)

    def __repr__(self) -> str:
        return f"Skip({self.parser!r}, {self.skipper!r})"
