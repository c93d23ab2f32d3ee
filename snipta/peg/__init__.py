# snipta/peg/__init__.py
"""PEG combinator submodule for snipta.

This package provides:
- Immutable combinator nodes (literal, pattern, seq, choice, optional, ...)
- Constructor functions used to write grammars as nested calls
- A Packrat (memoizing) engine/runtime evaluating them over (src, pos, end)

It is intentionally independent from snipta.snippet.
"""

from .ast import (
    Literal, Pattern, TakeUntil, TakeBalanced, Map, MapSpan, FilterMap,
    Seq, Choice, Optional_, Right, OneOrMore, Sep, Reparse, Ref,
    Span, RuleDef, PegGrammar,
)
from .combinators import (
    literal, pattern, take_until, take_balanced, map_, map_span, filter_map,
    seq, choice, or_, optional, right, one_or_more, sep, reparse_as, ref,
)
from .runtime import PegProgram, PegRunner
