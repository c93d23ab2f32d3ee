# snipta/peg/ast.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Tuple, Union

# ---- Combinator node definitions ----
# Every node is an immutable description of a parser; the engine evaluates it
# against (src, pos, end) and returns (ok, new_pos, value).

@dataclass(frozen=True)
class Literal:
    text: str

@dataclass(frozen=True)
class Pattern:
    rx: Any  # compiled `regex` pattern from snipta.lex

@dataclass(frozen=True)
class TakeUntil:
    stops: FrozenSet[str]  # single characters that end the scan

@dataclass(frozen=True)
class TakeBalanced:
    # like TakeUntil, but stop chars inside a `${ ... }` group are skipped
    stops: FrozenSet[str]

@dataclass(frozen=True)
class Map:
    node: "Node"
    fn: Callable[[Any], Any]

@dataclass(frozen=True)
class MapSpan:
    node: "Node"
    fn: Callable[[Any, "Span"], Any]

@dataclass(frozen=True)
class FilterMap:
    node: "Node"
    fn: Callable[[Any], Any]  # None rejects

@dataclass(frozen=True)
class Seq:
    items: Tuple["Node", ...]

@dataclass(frozen=True)
class Choice:
    alts: Tuple["Node", ...]

@dataclass(frozen=True)
class Optional_:
    node: "Node"

@dataclass(frozen=True)
class Right:
    left: "Node"
    right: "Node"

@dataclass(frozen=True)
class OneOrMore:
    node: "Node"

@dataclass(frozen=True)
class Sep:
    node: "Node"
    sep: str

@dataclass(frozen=True)
class Reparse:
    outer: "Node"
    inner: "Node"
    exhaustive: bool = True

@dataclass(frozen=True)
class Ref:
    name: str

Node = Union[Literal, Pattern, TakeUntil, TakeBalanced, Map, MapSpan, FilterMap,
             Seq, Choice, Optional_, Right, OneOrMore, Sep, Reparse, Ref]

@dataclass(frozen=True)
class Span:
    """Absolute [start, end) offsets into the source text."""
    start: int
    end: int

    def text(self, src: str) -> str:
        return src[self.start:self.end]

@dataclass(frozen=True)
class RuleDef:
    name: str
    expr: Node

@dataclass(frozen=True)
class PegGrammar:
    rules: Dict[str, RuleDef]
    start: str

    def require_rule(self, name: str) -> RuleDef:
        try:
            return self.rules[name]
        except KeyError:
            raise SyntaxError(f"PEG: undefined rule '{name}'")
