# snipta/peg/combinators.py
"""Constructors for combinator nodes.

Plain `str` arguments are coerced to `Literal`, so grammars read close to the
EBNF they implement:

    seq("${", ref("int"), "}")
"""

from __future__ import annotations
from typing import Any, Callable, Iterable, Union
from .ast import (
    Literal, Pattern, TakeUntil, TakeBalanced, Map, MapSpan, FilterMap,
    Seq, Choice, Optional_, Right, OneOrMore, Sep, Reparse, Ref, Span, Node
)

NodeLike = Union[Node, str]


def _node(p: NodeLike) -> Node:
    if isinstance(p, str):
        return Literal(p)
    return p


def literal(text: str) -> Literal:
    if not text:
        raise ValueError("literal text must not be empty")
    return Literal(text)

def pattern(rx: Any) -> Pattern:
    return Pattern(rx)

def take_until(stops: Iterable[str]) -> TakeUntil:
    return TakeUntil(frozenset(stops))

def take_balanced(stops: Iterable[str]) -> TakeBalanced:
    return TakeBalanced(frozenset(stops))

def map_(p: NodeLike, fn: Callable[[Any], Any]) -> Map:
    return Map(_node(p), fn)

def map_span(p: NodeLike, fn: Callable[[Any, Span], Any]) -> MapSpan:
    return MapSpan(_node(p), fn)

def filter_map(p: NodeLike, fn: Callable[[Any], Any]) -> FilterMap:
    return FilterMap(_node(p), fn)

def seq(*items: NodeLike) -> Seq:
    return Seq(tuple(_node(it) for it in items))

def choice(*alts: NodeLike) -> Choice:
    return Choice(tuple(_node(it) for it in alts))

def or_(a: NodeLike, b: NodeLike) -> Choice:
    return choice(a, b)

def optional(p: NodeLike) -> Optional_:
    return Optional_(_node(p))

def right(left: NodeLike, right_: NodeLike) -> Right:
    return Right(_node(left), _node(right_))

def one_or_more(p: NodeLike) -> OneOrMore:
    return OneOrMore(_node(p))

def sep(p: NodeLike, separator: str) -> Sep:
    return Sep(_node(p), separator)

def reparse_as(outer: NodeLike, inner: NodeLike, exhaustive: bool = True) -> Reparse:
    return Reparse(_node(outer), _node(inner), exhaustive)

def ref(name: str) -> Ref:
    return Ref(name)
