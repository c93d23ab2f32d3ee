# snipta/snippet/__init__.py
"""LSP 스니펫 문법과 AST.

snipta.peg 콤비네이터로 작성한 문법(`parser`)과 그 결과 AST(`ast`).
"""

from .ast import (
    CaseChange, FormatText, FormatCapture, FormatCase, FormatConditional, FormatItem,
    Regex, Tabstop, Placeholder, Choice, Variable, Text, SnippetElement, Snippet,
    source_of, consumed_prefix,
)
from .parser import ParseError, parse, parse_prefix, SNIPPET_PROGRAM
from .loader import load_snippet_text
