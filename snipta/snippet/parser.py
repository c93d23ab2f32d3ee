# snipta/snippet/parser.py
"""LSP 스니펫 파서
https://microsoft.github.io/language-server-protocol/specifications/lsp/3.17/specification/#snippet_syntax

    any         ::= tabstop | placeholder | choice | variable | text
    tabstop     ::= '$' int | '${' int '}'
    placeholder ::= '${' int ':' any '}'
    choice      ::= '${' int '|' text (',' text)* '|}'
    variable    ::= '$' var | '${' var '}'
                    | '${' var ':' text '}'
                    | '${' var '/' regex '/' (format | text)+ '/' options '}'
    format      ::= '$' int | '${' int '}'
                    | '${' int ':' '/upcase' | '/downcase' | '/capitalize' '}'
                    | '${' int ':+' if '}'
                    | '${' int ':?' if ':' else '}'
                    | '${' int ':-' else '}' | '${' int ':' else '}'
    var         ::= [_a-zA-Z] [_a-zA-Z0-9]*
    int         ::= [0-9]+
    text        ::= [^$]+

- 선택지(choice)의 순서가 곧 의미다: 먼저 성공한 대안이 이긴다.
- placeholder 기본값은 `}` 까지(중첩 `${ ... }` 는 건너뜀) 잘라낸 뒤
  전체 문법(`anything`)으로 다시 파싱하고, 첫 요소만 취한다.
- 조건부 format의 if/else 텍스트는 다시 파싱하지 않는다.
"""

from __future__ import annotations
from typing import Dict, Tuple

from ..lex import DIGITS, IDENT, TEXT
from ..peg import (
    PegProgram, PegRunner,
    choice, map_, map_span, one_or_more, optional, or_, pattern,
    ref, reparse_as, right, sep, seq, take_balanced, take_until,
)
from ..peg.ast import Node
from ..peg.engine import DEFAULT_MAX_NESTING
from .ast import (
    CaseChange, Choice, FormatCapture, FormatCase, FormatConditional, FormatText,
    Placeholder, Regex, Snippet, Tabstop, Text, Variable,
)


# ---------- error handling utils ----------
def _line_bounds(src: str, pos: int) -> Tuple[int, int]:
    """pos가 속한 라인의 [start, end) 범위를 반환."""
    start = src.rfind("\n", 0, pos)
    start = 0 if start < 0 else start + 1
    end = src.find("\n", pos)
    end = len(src) if end < 0 else end
    return start, end

def _caret_snippet(src: str, pos: int) -> str:
    """해당 절대 오프셋 pos에 캐럿(^)을 찍은 스니펫을 생성."""
    start, end = _line_bounds(src, pos)
    line = src[start:end]
    col = (pos - start) + 1
    caret = " " * (col - 1) + "^"
    return f"{line}\n{caret}"


class ParseError(SyntaxError):
    """어떤 문법 규칙도 매치되지 않음.

    - source           : 파싱을 요청한 원문 전체
    - fragment         : 매치에 실패한 지점부터의 남은 입력
    - offset_in_source : fragment가 시작하는 원문 오프셋
    """
    def __init__(self, source: str, fragment: str):
        self.source = source
        self.fragment = fragment
        self.offset_in_source = len(source) - len(fragment)
        if fragment:
            what = f"no snippet element matches {fragment[:24]!r}"
        else:
            what = "empty input"
        pos = self.offset_in_source
        super().__init__(f"{what} at offset {pos}\n{_caret_snippet(source, pos)}")


# ---------- grammar rules ----------

def _to_regex(values) -> Regex:
    _, value, _, replacement, _, options = values
    return Regex(value, tuple(replacement), options or None)


def _rules() -> Dict[str, Node]:
    r: Dict[str, Node] = {}

    r["int"] = map_(pattern(DIGITS), int)
    r["var"] = pattern(IDENT)

    r["case_change"] = choice(
        map_("upcase", lambda _: CaseChange.UPCASE),
        map_("downcase", lambda _: CaseChange.DOWNCASE),
        map_("capitalize", lambda _: CaseChange.CAPITALIZE),
    )

    r["format"] = choice(
        # '$' int
        map_(right("$", ref("int")), FormatCapture),
        # '${' int '}'
        map_(seq("${", ref("int"), "}"), lambda v: FormatCapture(v[1])),
        # '${' int ':/' case '}'
        map_(seq("${", ref("int"), ":/", ref("case_change"), "}"),
             lambda v: FormatCase(v[1], v[3])),
        # '${' int ':+' if '}'
        map_(seq("${", ref("int"), ":+", take_until("}"), "}"),
             lambda v: FormatConditional(v[1], v[3], None)),
        # '${' int ':?' if ':' else '}'
        map_(seq("${", ref("int"), ":?", take_until(":"), ":", take_until("}"), "}"),
             lambda v: FormatConditional(v[1], v[3], v[5])),
        # '${' int ':-' else '}' | '${' int ':' else '}'
        map_(seq("${", ref("int"), ":", optional("-"), take_until("}"), "}"),
             lambda v: FormatConditional(v[1], None, v[4])),
        # 나머지 텍스트(반드시 마지막)
        map_(pattern(TEXT), FormatText),
    )

    replacement = reparse_as(take_until("/"), one_or_more(ref("format")))
    r["regex"] = map_(
        seq("/", take_until("/"), "/", replacement, "/", optional(take_until("}"))),
        _to_regex,
    )

    r["tabstop"] = map_span(
        or_(right("$", ref("int")), map_(seq("${", ref("int"), "}"), lambda v: v[1])),
        lambda n, sp: Tabstop(n, span=sp),
    )

    value = reparse_as(take_balanced("}"), ref("anything"), exhaustive=False)
    r["placeholder"] = map_span(
        seq("${", ref("int"), ":", value, "}"),
        lambda v, sp: Placeholder(v[1], v[3], span=sp),
    )

    r["choice"] = map_span(
        seq("${", ref("int"), "|", sep(take_until(",|"), ","), "|}"),
        lambda v, sp: Choice(v[1], tuple(v[3]), span=sp),
    )

    r["variable"] = choice(
        # $var
        map_span(right("$", ref("var")), lambda name, sp: Variable(name, span=sp)),
        # ${var}
        map_span(seq("${", ref("var"), "}"), lambda v, sp: Variable(v[1], span=sp)),
        # ${var:default}
        map_span(seq("${", ref("var"), ":", take_until("}"), "}"),
                 lambda v, sp: Variable(v[1], default=v[3], span=sp)),
        # ${var/value/format/options}
        map_span(seq("${", ref("var"), ref("regex"), "}"),
                 lambda v, sp: Variable(v[1], regex=v[2], span=sp)),
    )

    r["text"] = map_span(pattern(TEXT), lambda s, sp: Text(s, span=sp))

    r["anything"] = choice(
        ref("tabstop"), ref("placeholder"), ref("choice"), ref("variable"), ref("text"),
    )
    r["snippet"] = one_or_more(ref("anything"))
    return r


SNIPPET_PROGRAM = PegProgram.from_rules(_rules(), start="snippet")


# ---------- entry points ----------

def parse_prefix(text: str, *, max_nesting: int = DEFAULT_MAX_NESTING) -> Tuple[Snippet, int]:
    """최상위 `snippet` 규칙을 실행하고 (요소들, 소비한 문자 수)를 돌려준다.

    첫 요소부터 매치되지 않으면 `ParseError`(fragment = 원문 전체).
    """
    ok, end, elements = PegRunner(SNIPPET_PROGRAM, max_nesting).run_start(text)
    if not ok:
        raise ParseError(text, text)
    return list(elements), end


def parse(text: str, *, exhaustive: bool = False, max_nesting: int = DEFAULT_MAX_NESTING) -> Snippet:
    """스니펫 원문을 AST(요소 리스트)로 파싱한다.

    Parameters
    ----------
    text : str
        스니펫 원문.
    exhaustive : bool
        True면 입력 전체를 소비해야 한다. 남은 입력이 있으면 그 조각으로
        `ParseError`. 기본값(False)은 뒤에 남은 입력을 조용히 버린다.
    max_nesting : int
        placeholder 기본값 등 재파싱 중첩 한도. 넘으면 해당 규칙이 실패한다.

    Returns
    -------
    Snippet
        1개 이상의 요소.
    """
    elements, consumed = parse_prefix(text, max_nesting=max_nesting)
    if exhaustive and consumed != len(text):
        raise ParseError(text, text[consumed:])
    return elements
