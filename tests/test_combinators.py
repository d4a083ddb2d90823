import enum

import pytest

from nyapen import ParseFailure
from nyapen.primitive import lit, regex


ws = regex(r"\s+")


def test_hello_world_without_comma() -> None:
    r = lit("Hello").then(lit(",").opt()).then(lit("World")).skip(ws).parse(" Hello  World")
    assert r
    assert r.parsed == ["Hello", "World"]
    assert r.pos == 13
    assert r.mapped == (None, None)
    assert not r.has_mapped


def test_leading_whitespace_is_skipped() -> None:
    r = lit("Hello").skip(ws).parse(" Hello")
    assert r
    assert r.pos == 6
    assert r.parsed == ["Hello"]


def test_parse_does_not_skip_without_binding() -> None:
    r = lit("Hello").parse(" Hello")
    assert not r
    assert (r.rule, r.pos) == ("lit", 0)


def test_map_spends_fragments() -> None:
    r = lit("1").map(lambda _, parsed: int(parsed[0])).parse("1")
    assert r.mapped == 1
    assert r.has_mapped
    assert r.parsed == []


def test_map_receives_previous_mapped_value() -> None:
    r = lit("a").map(lambda *_: "A").map(lambda mapped, parsed: (mapped, parsed)).parse("a")
    assert r.mapped == ("A", [])


def test_map_to_none_still_counts_as_mapped() -> None:
    r = lit("a").map(lambda *_: None).then(lit("b")).parse("ab")
    assert r.has_mapped
    assert r.mapped == (None, None)
    assert r.parsed == ["b"]


def test_map_rejects_non_callable() -> None:
    with pytest.raises(TypeError):
        lit("a").map("A")  # type: ignore[arg-type]


def test_then_only_first_mapped() -> None:
    r = lit("a").map(lambda *_: "A").then(lit("b")).parse("ab")
    assert r.has_mapped
    assert r.mapped == ("A", None)
    assert r.parsed == ["b"]


def test_then_only_second_mapped() -> None:
    r = lit("a").then(lit("b").map(lambda *_: "B")).parse("ab")
    assert r.has_mapped
    assert r.mapped == (None, "B")
    assert r.parsed == ["a"]


def test_then_both_mapped_drops_the_pair() -> None:
    r = lit("a").map(lambda *_: "A").then(lit("b").map(lambda *_: "B")).parse("ab")
    assert r
    assert not r.has_mapped
    assert r.mapped is None
    assert r.parsed == []


def test_then_both_mapped_keeps_unspent_fragments() -> None:
    r = (
        lit("a").map(lambda *_: "A")
        .then(lit("x"))
        .then(lit("b").map(lambda *_: "B"))
        .parse("axb")
    )
    assert not r.has_mapped
    assert r.parsed == ["x"]
    assert r.pos == 3


def test_then_failure_comes_from_the_failing_side() -> None:
    r = lit("a").then(lit("b", rule="b")).parse("ac")
    assert not r
    assert (r.rule, r.pos) == ("b", 1)


def test_then_rejects_non_parser() -> None:
    with pytest.raises(TypeError):
        lit("a").then("b")  # type: ignore[arg-type]


def test_repeated_collects_fragments() -> None:
    r = lit("a").repeated().parse("aaab")
    assert r.pos == 3
    assert r.parsed == ["a", "a", "a"]
    assert not r.has_mapped


def test_repeated_zero_matches_succeeds() -> None:
    r = lit("a").repeated().parse("b")
    assert r
    assert r.pos == 0
    assert r.parsed == []
    assert r.mapped is None


def test_repeated_collects_mapped_values() -> None:
    r = regex(r"\d").map(lambda _, parsed: int(parsed[0])).repeated().parse("123x")
    assert r.mapped == [1, 2, 3]
    assert r.parsed == []
    assert r.pos == 3


def test_repeated_stops_on_zero_width_match() -> None:
    r = regex("a*").repeated().parse("b")
    assert r.pos == 0
    assert r.parsed == []

    r = regex("a*").repeated().parse("aab")
    assert r.pos == 2
    assert r.parsed == ["aa"]

    assert lit("").repeated().parse("").pos == 0


def test_opt_failure_consumes_nothing() -> None:
    r = lit("a").opt().parse_with_position("xb", 1, ws)
    assert r
    assert r.pos == 1
    assert r.parsed == []
    assert not r.has_mapped


def test_opt_success_is_forwarded() -> None:
    r = lit("a").map(lambda *_: "A").opt().parse("a")
    assert r.mapped == "A"
    assert r.pos == 1


def test_eoi() -> None:
    assert lit("a").eoi().parse("a").pos == 1

    r = lit("a").eoi().parse("ab")
    assert not r
    assert (r.rule, r.pos) == ("eoi", 1)

    r = lit("a").eoi().parse("b")
    assert (r.rule, r.pos) == ("lit", 0)


def test_eoi_after_skip() -> None:
    r = lit("a").eoi().skip(ws).parse(" a  ")
    assert r
    assert r.pos == 4

    r = lit("a").opt().eoi().skip(ws).parse("  ")
    assert r
    assert r.pos == 2


def test_skip_replaces_outer_skip() -> None:
    inner = lit("a").then(lit("b")).skip(regex("-+"))
    assert inner.parse_with_position("a-b", 0, ws).pos == 3

    r = inner.parse_with_position("a b", 0, ws)
    assert not r
    assert (r.rule, r.pos) == ("lit", 1)


def test_parse_with_map() -> None:
    assert lit("Hello").parse_with_map("Hello", lambda _, parsed: "".join(parsed).upper()) == "HELLO"

    r = lit("Hello").parse_with_map("Bye", lambda _, parsed: parsed)
    assert isinstance(r, ParseFailure)
    assert r.rule == "lit"


def test_combinators_leave_the_original_untouched() -> None:
    a = lit("a")
    a.opt()
    a.repeated()
    assert not a.parse("b")


class Hw(enum.Enum):
    HELLO = enum.auto()
    WORLD = enum.auto()
    COMMA = enum.auto()


def test_repeated_clauses_with_mapped_sides() -> None:
    hello = lit("Hello").map(lambda *_: Hw.HELLO)
    comma = lit(",").map(lambda *_: Hw.COMMA).opt()
    world = lit("World").map(lambda *_: Hw.WORLD).opt()
    clause = hello.then(comma).then(world).map(lambda mapped, _: mapped)

    r = clause.repeated().eoi().skip(ws).parse(" Hello , World Hello Hello")
    assert r
    assert r.pos == 26
    # "Hello ," has both sides mapped, so its pair is dropped
    assert r.mapped == [
        (None, Hw.WORLD),
        ((Hw.HELLO, None), None),
        ((Hw.HELLO, None), None),
    ]
