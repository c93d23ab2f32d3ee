from __future__ import annotations
import pytest

from ..peg import PegRunner
from .ast import (
    CaseChange, Choice, FormatCapture, FormatCase, FormatConditional, FormatText,
    Placeholder, Regex, Tabstop, Text, Variable, consumed_prefix, source_of,
)
from .loader import load_snippet_text
from .parser import SNIPPET_PROGRAM, ParseError, parse, parse_prefix


def _rule(name, text):
    return PegRunner(SNIPPET_PROGRAM).run(name, text)


# ---- entry point ----

def test_empty_string_is_error():
    with pytest.raises(ParseError) as info:
        parse("")
    assert info.value.fragment == ""
    assert info.value.offset_in_source == 0

def test_parse_placeholders_in_function_call():
    assert parse("match(${1:Arg1})") == [
        Text("match("),
        Placeholder(1, Text("Arg1")),
        Text(")"),
    ]

def test_parse_placeholders_in_statement():
    assert parse("local ${1:var} = ${1:value}") == [
        Text("local "),
        Placeholder(1, Text("var")),
        Text(" = "),
        Placeholder(1, Text("value")),
    ]

def test_parse_all():
    assert parse("hello $1${2} ${1|one,two,three|} ${name:foo} $var $TM") == [
        Text("hello "),
        Tabstop(1),
        Tabstop(2),
        Text(" "),
        Choice(1, ("one", "two", "three")),
        Text(" "),
        Variable("name", default="foo"),
        Text(" "),
        Variable("var"),
        Text(" "),
        Variable("TM"),
    ]

def test_regex_capture_replace():
    assert parse("${TM_FILENAME/(.*).+$/$1/}") == [
        Variable(
            "TM_FILENAME",
            regex=Regex("(.*).+$", (FormatCapture(1),), None),
        ),
    ]

@pytest.mark.parametrize("text", [
    "plain text",
    "x",
    "multi\nline {braces} and |pipes| , commas",
    "유니코드 텍스트",
])
def test_text_without_dollar_is_single_text(text):
    assert parse(text) == [Text(text)]

@pytest.mark.parametrize("text", [
    "match(${1:Arg1})",
    "local ${1:var} = ${1:value}",
    "hello $1${2} ${1|one,two,three|} ${name:foo} $var $TM",
    "${TM_FILENAME/(.*).+$/$1/}",
    "fn ${1:name}(${2:${3:arg}}) {\n\t$0\n}",
    "done ${1",
    "trailing $",
])
def test_spans_reproduce_consumed_prefix(text):
    elements, consumed = parse_prefix(text)
    assert consumed_prefix(text, elements) == text[:consumed]
    assert [source_of(text, el) for el in elements] == [
        text[el.span.start:el.span.end] for el in elements
    ]

def test_nested_value_span_points_into_source():
    src = "match(${1:Arg1})"
    (_, placeholder, _) = parse(src)
    assert source_of(src, placeholder) == "${1:Arg1}"
    assert source_of(src, placeholder.value) == "Arg1"


# ---- malformed / trailing input ----

def test_unterminated_tabstop_fails():
    with pytest.raises(ParseError) as info:
        parse("${1")
    assert info.value.fragment == "${1"

def test_unterminated_after_text_is_dropped():
    assert parse("ab${1") == [Text("ab")]
    assert parse_prefix("ab${1") == ([Text("ab")], 2)

def test_exhaustive_reports_trailing_fragment():
    with pytest.raises(ParseError) as info:
        parse("ab${1", exhaustive=True)
    assert info.value.fragment == "${1"
    assert info.value.offset_in_source == 2
    assert "^" in str(info.value)

def test_exhaustive_accepts_full_input():
    assert parse("a$1", exhaustive=True) == [Text("a"), Tabstop(1)]

def test_lone_dollar():
    with pytest.raises(ParseError):
        parse("$")
    assert parse("cost: $") == [Text("cost: ")]

def test_error_message_has_caret_on_failing_line():
    with pytest.raises(ParseError) as info:
        parse("first\nsecond ${", exhaustive=True)
    lines = str(info.value).splitlines()
    assert lines[-2] == "second ${"
    assert lines[-1] == "       ^"

@pytest.mark.parametrize("rule", ["tabstop", "placeholder", "choice", "variable", "text", "anything"])
@pytest.mark.parametrize("text", [
    "${1", "${1:", "${1:x", "${1|a", "${1|a,b|", "${a", "${a:b", "${a/b",
    "${a/b/c", "${a/b/c/", "$", "${", "${}", "$$",
])
def test_malformed_fragments_fail_without_consuming(rule, text):
    assert _rule(rule, text) == (False, 0, None)


# ---- tabstops / placeholders ----

def test_tabstop_forms():
    assert parse("$0") == [Tabstop(0)]
    assert parse("${10}") == [Tabstop(10)]
    assert parse("$1abc") == [Tabstop(1), Text("abc")]

def test_tabstop_index_has_no_upper_bound():
    assert parse("$123456789012345678901234567890") == [Tabstop(123456789012345678901234567890)]

def test_nested_placeholder():
    assert parse("${1:${2:x}}") == [Placeholder(1, Placeholder(2, Text("x")))]

def test_placeholder_keeps_first_nested_element():
    assert parse("${1:foo $2}") == [Placeholder(1, Text("foo "))]
    assert parse("${1:$2 bar}") == [Placeholder(1, Tabstop(2))]

def test_placeholder_with_variable_and_choice_values():
    assert parse("${1:$TM_SELECTED_TEXT}") == [Placeholder(1, Variable("TM_SELECTED_TEXT"))]
    assert parse("${1:${2|a,b|}}") == [Placeholder(1, Choice(2, ("a", "b")))]

def test_placeholder_literal_brace_ends_value():
    assert parse("${1:a{b}c}") == [Placeholder(1, Text("a{b")), Text("c}")]

def test_empty_placeholder_value_is_not_a_placeholder():
    with pytest.raises(ParseError):
        parse("${1:}")

def test_nesting_limit():
    src = "${1:${2:${3:x}}}"
    assert parse(src) == [Placeholder(1, Placeholder(2, Placeholder(3, Text("x"))))]
    assert parse(src, max_nesting=3) == parse(src)
    with pytest.raises(ParseError):
        parse(src, max_nesting=2)


# ---- choices ----

def test_choice_single_alternative():
    assert parse("${1|only|}") == [Choice(1, ("only",))]

def test_choice_empty_alternatives():
    assert parse("${2|a,,b|}") == [Choice(2, ("a", "", "b"))]

def test_choice_requires_closing():
    assert parse_prefix("x${1|a,b}")[0] == [Text("x")]


# ---- variables ----

def test_variable_forms():
    assert parse("$TM_FILENAME") == [Variable("TM_FILENAME")]
    assert parse("${TM_FILENAME}") == [Variable("TM_FILENAME")]
    assert parse("${_x:}") == [Variable("_x", default="")]
    assert parse("${TM:a b c}") == [Variable("TM", default="a b c")]

def test_variable_default_is_raw_text():
    assert parse("${TM:$1}") == [Variable("TM", default="$1")]

def test_variable_name_stops_at_non_identifier():
    assert parse("$foo-bar") == [Variable("foo"), Text("-bar")]

def test_regex_options():
    assert parse("${TM/a/b/gi}") == [
        Variable("TM", regex=Regex("a", (FormatText("b"),), "gi")),
    ]

def test_regex_requires_replacement():
    with pytest.raises(ParseError):
        parse("${TM/a//}")

def test_regex_replacement_must_parse_completely():
    with pytest.raises(ParseError):
        parse("${TM/a/b$/}")

def test_regex_with_all_format_items():
    src = "${TM_FILENAME/(\\w+)(\\.)?(.*)/-$2${3}${1:+yes}${2:?a:b}${3:-none}${1:fallback}/g}"
    (var,) = parse(src)
    assert var.name == "TM_FILENAME"
    assert var.default is None
    assert var.regex == Regex(
        "(\\w+)(\\.)?(.*)",
        (
            FormatText("-"),
            FormatCapture(2),
            FormatCapture(3),
            FormatConditional(1, "yes", None),
            FormatConditional(2, "a", "b"),
            FormatConditional(3, None, "none"),
            FormatConditional(1, None, "fallback"),
        ),
        "g",
    )

@pytest.mark.parametrize("keyword,case", [
    ("upcase", CaseChange.UPCASE),
    ("downcase", CaseChange.DOWNCASE),
    ("capitalize", CaseChange.CAPITALIZE),
])
def test_case_change_keywords(keyword, case):
    text = f"${{1:/{keyword}}}"
    assert _rule("format", text) == (True, len(text), FormatCase(1, case))

def test_unknown_case_keyword_is_else_text():
    assert _rule("format", "${1:/shout}") == (True, 11, FormatConditional(1, None, "/shout"))

def test_replacement_ends_at_first_slash():
    # the case-change `/` closes the replacement window early
    with pytest.raises(ParseError):
        parse("${v/x/${1:/upcase}/}")

def test_conditional_text_is_not_reparsed():
    (var,) = parse("${v/x/${1:+$2}/}")
    assert var.regex.replacement == (FormatConditional(1, "$2", None),)

def test_dollar_brace_inside_conditional_text():
    assert parse("${TM/a/${1:+${}/g}") == [
        Variable("TM", regex=Regex("a", (FormatConditional(1, "${", None),), "g")),
    ]

def test_format_rule_order():
    assert _rule("format", "$1") == (True, 2, FormatCapture(1))
    assert _rule("format", "${1:-x}") == (True, 7, FormatConditional(1, None, "x"))
    assert _rule("format", "${1:+x}") == (True, 7, FormatConditional(1, "x", None))
    assert _rule("format", "abc$1") == (True, 3, FormatText("abc"))


# ---- loader / concurrency ----

def test_load_snippet_text_normalizes_newlines(tmp_path):
    path = tmp_path / "func.snippet"
    path.write_bytes("fn ${1:name}()\r\n\t$0\r".encode("utf-8"))
    text = load_snippet_text(str(path))
    assert text == "fn ${1:name}()\n\t$0\n"
    assert parse(text)[1] == Placeholder(1, Text("name"))

def test_load_snippet_text_strips_bom(tmp_path):
    path = tmp_path / "bom.snippet"
    path.write_bytes("\ufeffmatch(${1:Arg1})".encode("utf-8"))
    text = load_snippet_text(str(path))
    assert text == "match(${1:Arg1})"
    assert parse(text)[0] == Text("match(")

def test_parallel_parses_are_independent():
    from concurrent.futures import ThreadPoolExecutor
    inputs = ["match(${1:Arg1})", "${TM/(.*)/$1/}", "a $1 b"] * 20
    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(parse, inputs))
    assert results == [parse(s) for s in inputs]
