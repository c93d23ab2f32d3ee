from __future__ import annotations
import pytest

from ..lex import DIGITS, IDENT, TEXT, match_prefix
from . import (
    PegProgram, PegRunner, Span,
    literal, pattern, take_until, take_balanced, map_, map_span, filter_map,
    seq, choice, or_, optional, right, one_or_more, sep, reparse_as, ref,
)


def _run(node, text, pos=0, end=-1, max_nesting=64, **extra):
    rules = {"r": node}
    rules.update(extra)
    prog = PegProgram.from_rules(rules, "r")
    return PegRunner(prog, max_nesting).run("r", text, pos, end)


# ---- matcher primitives ----

def test_match_prefix_digits_anchored():
    assert match_prefix(DIGITS, "123x", 0) == 3
    assert match_prefix(DIGITS, "x123", 0) == -1
    assert match_prefix(DIGITS, "x123", 1) == 4

def test_match_prefix_respects_end():
    assert match_prefix(DIGITS, "12345", 0, 2) == 2
    assert match_prefix(DIGITS, "12345", 2, 2) == -1

def test_identifier_matcher():
    assert match_prefix(IDENT, "_a1 b", 0) == 3
    assert match_prefix(IDENT, "TM_FILENAME/", 0) == 11
    assert match_prefix(IDENT, "1abc", 0) == -1

def test_text_matcher_stops_at_dollar():
    assert match_prefix(TEXT, "ab$c", 0) == 2
    assert match_prefix(TEXT, "$c", 0) == -1
    assert match_prefix(TEXT, "", 0) == -1

def test_text_matcher_counts_code_points():
    src = "héllo 世界$1"
    assert match_prefix(TEXT, src, 0) == src.index("$")


# ---- combinators ----

def test_literal():
    assert _run(literal("ab"), "abc") == (True, 2, "ab")
    assert _run(literal("ab"), "xab") == (False, 0, None)
    assert _run(literal("ab"), "xab", pos=1) == (True, 3, "ab")

def test_literal_does_not_read_past_end():
    assert _run(literal("ab"), "ab", end=1) == (False, 0, None)

def test_empty_literal_rejected():
    with pytest.raises(ValueError):
        literal("")

def test_pattern():
    assert _run(pattern(DIGITS), "42)") == (True, 2, "42")
    assert _run(pattern(DIGITS), ")42") == (False, 0, None)

def test_map():
    assert _run(map_(pattern(DIGITS), int), "42") == (True, 2, 42)

def test_map_span_receives_absolute_offsets():
    node = map_span(pattern(DIGITS), lambda v, sp: sp)
    assert _run(node, "ab12cd", pos=2) == (True, 4, Span(2, 4))
    assert Span(2, 4).text("ab12cd") == "12"

def test_filter_map_rejects_without_consuming():
    node = filter_map(pattern(DIGITS), lambda s: None if s == "0" else int(s))
    assert _run(node, "7") == (True, 1, 7)
    assert _run(node, "0") == (False, 0, None)

def test_seq_returns_tuple():
    assert _run(seq("${", pattern(DIGITS), "}"), "${12}x") == (True, 5, ("${", "12", "}"))

def test_seq_restores_position_on_failure():
    assert _run(seq("${", pattern(DIGITS), "}"), "${12:x}") == (False, 0, None)

def test_choice_first_match_wins():
    assert _run(choice("a", "ab"), "ab") == (True, 1, "a")
    assert _run(choice("ab", "a"), "ab") == (True, 2, "ab")
    assert _run(or_("x", "a"), "ab") == (True, 1, "a")
    assert _run(choice("x", "y"), "ab") == (False, 0, None)

def test_optional():
    assert _run(optional("-"), "-x") == (True, 1, "-")
    assert _run(optional("-"), "x") == (True, 0, None)

def test_right_keeps_right_value():
    assert _run(right("$", pattern(DIGITS)), "$12") == (True, 3, "12")
    assert _run(right("$", pattern(DIGITS)), "$x") == (False, 0, None)

def test_one_or_more():
    assert _run(one_or_more("a"), "aaab") == (True, 3, ["a", "a", "a"])
    assert _run(one_or_more("a"), "baa") == (False, 0, None)

def test_sep():
    assert _run(sep(pattern(DIGITS), ","), "1,22,3|") == (True, 6, ["1", "22", "3"])

def test_sep_leaves_trailing_separator():
    assert _run(sep(pattern(DIGITS), ","), "1,2,") == (True, 3, ["1", "2"])

def test_sep_allows_empty_items_from_take_until():
    assert _run(sep(take_until(",|"), ","), "a,,b|}") == (True, 4, ["a", "", "b"])

def test_take_until():
    assert _run(take_until("}"), "abc}d") == (True, 3, "abc")
    assert _run(take_until("}"), "}d") == (True, 0, "")
    assert _run(take_until("}"), "") == (True, 0, "")
    assert _run(take_until(",|"), "ab|c,d") == (True, 2, "ab")

def test_take_balanced_skips_nested_groups():
    assert _run(take_balanced("}"), "a${b}c}d") == (True, 6, "a${b}c")
    assert _run(take_balanced("/"), "${1:/upcase}/x") == (True, 12, "${1:/upcase}")

def test_take_balanced_counts_only_dollar_braces():
    assert _run(take_balanced("}"), "{x}y") == (True, 2, "{x")

def test_take_balanced_unclosed_group_runs_to_end():
    assert _run(take_balanced("}"), "${a") == (True, 3, "${a")

def test_reparse_requires_full_inner_consumption():
    node = reparse_as(take_until("/"), one_or_more(pattern(DIGITS)))
    assert _run(node, "12/x") == (True, 2, ["12"])
    assert _run(node, "1a/x") == (False, 0, None)

def test_reparse_non_exhaustive():
    node = reparse_as(take_until("/"), pattern(DIGITS), exhaustive=False)
    assert _run(node, "1a/") == (True, 2, "1")

def test_reparse_inner_cannot_see_past_window():
    node = reparse_as(take_until("/"), literal("a/"), exhaustive=False)
    assert _run(node, "a/") == (False, 0, None)

def test_reparse_nesting_limit():
    node = reparse_as(take_until("/"), reparse_as(take_until("/"), "a"))
    assert _run(node, "a/", max_nesting=2) == (True, 1, "a")
    assert _run(node, "a/", max_nesting=1) == (False, 0, None)
    assert _run(node, "a/", max_nesting=0) == (False, 0, None)

def test_ref_recursion():
    node = choice(seq("(", ref("r"), ")"), "x")
    ok, pos, _ = _run(node, "((x))")
    assert (ok, pos) == (True, 5)

def test_left_recursion_fails_cleanly():
    node = choice(seq(ref("r"), "x"), "y")
    assert _run(node, "yx") == (True, 1, "y")

def test_undefined_rule():
    with pytest.raises(SyntaxError):
        _run(ref("missing"), "x")

def test_start_rule_must_exist():
    with pytest.raises(SyntaxError):
        PegProgram.from_rules({"a": literal("a")}, "b")

def test_runner_is_reusable():
    runner = PegRunner(PegProgram.from_rules({"r": one_or_more("a")}, "r"))
    assert runner.run("r", "aa") == runner.run("r", "aa") == (True, 2, ["a", "a"])
    assert runner.run_start("ab") == (True, 1, ["a"])


# ---- no consumption on failure ----

_FAILING = [
    (literal("${"), "x${"),
    (pattern(DIGITS), "xa1"),
    (map_(pattern(DIGITS), int), "xa"),
    (filter_map(pattern(DIGITS), lambda s: None), "x12"),
    (seq("$", pattern(DIGITS), "}"), "x$1"),
    (seq("$", pattern(DIGITS), "}"), "x$1)"),
    (choice(seq("$", "1", "!"), seq("$", "2")), "x$1"),
    (right("${", pattern(IDENT)), "x${1"),
    (one_or_more(pattern(DIGITS)), "xa"),
    (sep(pattern(DIGITS), ","), "x,1"),
    (reparse_as(take_until("/"), pattern(DIGITS)), "x1a/"),
]

@pytest.mark.parametrize("node,text", _FAILING)
def test_failure_returns_starting_position(node, text):
    assert _run(node, text, pos=1) == (False, 1, None)
