# snipta/snippet/ast.py
"""Snippet AST
- SnippetElement: Tabstop / Placeholder / Choice / Variable / Text
- Regex + FormatItem: `${var/regex/format/options}` 변수 변환부
- 모든 SnippetElement는 원문 오프셋(`span`)을 가진다. span은 동등성 비교와
  repr에서 제외된다.
"""

from __future__     import annotations
from dataclasses    import dataclass, field
from enum           import Enum
from typing         import List, Optional, Tuple, Union

from ..peg.ast      import Span


class CaseChange(Enum):
    UPCASE = "upcase"
    DOWNCASE = "downcase"
    CAPITALIZE = "capitalize"


# ---- FormatItem (regex replacement 토큰) ----

@dataclass(frozen=True)
class FormatText:
    text: str

@dataclass(frozen=True)
class FormatCapture:
    group: int

@dataclass(frozen=True)
class FormatCase:
    group: int
    case: CaseChange

@dataclass(frozen=True)
class FormatConditional:
    """
    `${N:+if}` / `${N:?if:else}` / `${N:-else}` / `${N:else}`
    - if_text/else_text는 재파싱하지 않는 원문 텍스트
    """
    group: int
    if_text: Optional[str] = None
    else_text: Optional[str] = None

FormatItem = Union[FormatText, FormatCapture, FormatCase, FormatConditional]


@dataclass(frozen=True)
class Regex:
    value: str                              # 패턴 원문(컴파일하지 않음)
    replacement: Tuple[FormatItem, ...]     # 1개 이상
    options: Optional[str] = None           # 플래그 원문


# ---- SnippetElement ----

@dataclass(frozen=True)
class Tabstop:
    tabstop: int
    span: Optional[Span] = field(default=None, compare=False, repr=False)

@dataclass(frozen=True)
class Placeholder:
    tabstop: int
    value: "SnippetElement"
    span: Optional[Span] = field(default=None, compare=False, repr=False)

@dataclass(frozen=True)
class Choice:
    tabstop: int
    choices: Tuple[str, ...]
    span: Optional[Span] = field(default=None, compare=False, repr=False)

@dataclass(frozen=True)
class Variable:
    name: str
    default: Optional[str] = None
    regex: Optional[Regex] = None
    span: Optional[Span] = field(default=None, compare=False, repr=False)

@dataclass(frozen=True)
class Text:
    text: str
    span: Optional[Span] = field(default=None, compare=False, repr=False)

SnippetElement = Union[Tabstop, Placeholder, Choice, Variable, Text]
Snippet = List[SnippetElement]


def source_of(src: str, el: SnippetElement) -> str:
    """요소가 소비한 원문 조각."""
    if el.span is None:
        raise ValueError(f"element has no span: {el!r}")
    return el.span.text(src)


def consumed_prefix(src: str, elements: Snippet) -> str:
    """최상위 요소들의 원문 조각을 이어붙인 것. 파싱이 소비한 입력 접두부와 같다."""
    return "".join(source_of(src, el) for el in elements)
