# snipta/peg/engine.py
from __future__ import annotations
from typing import Any, Dict, List, Tuple
from ..lex import match_prefix
from .ast import (
    Literal, Pattern, TakeUntil, TakeBalanced, Map, MapSpan, FilterMap,
    Seq, Choice, Optional_, Right, OneOrMore, Sep, Reparse, Ref,
    Span, PegGrammar, Node
)

# Packrat engine:
# - Memoize only rule applications (rule_name, pos, end) -> (ok, new_pos, value)
# - `end` is part of the key: a reparse evaluates rules inside a narrower window.
# - Left recursion is not supported (typical PEG restriction).
# - On failure every evaluation returns the position it started at.

Result = Tuple[bool, int, Any]

DEFAULT_MAX_NESTING = 64


def _scan_balanced(stops, src: str, pos: int, end: int) -> int:
    depth = 0
    i = pos
    while i < end:
        ch = src[i]
        if ch == "$" and i + 1 < end and src[i + 1] == "{":
            depth += 1
            i += 2
            continue
        if ch == "}" and depth > 0:
            depth -= 1
            i += 1
            continue
        if depth == 0 and ch in stops:
            break
        i += 1
    return i


class Packrat:
    def __init__(self, g: PegGrammar, max_nesting: int = DEFAULT_MAX_NESTING):
        self.g = g
        self.max_nesting = max_nesting
        self.nesting = 0
        # memo: (rule_name, pos, end) -> (visited_flag:int, ok, new_pos, value)
        # visited_flag: 1=in progress, 2=done
        self.memo: Dict[Tuple[str, int, int], Tuple[int, bool, int, Any]] = {}

    # ---- Public entrypoint for one rule ----
    def parse(self, rule_name: str, text: str, pos: int = 0, end: int = -1) -> Result:
        if end < 0:
            end = len(text)
        self.memo.clear()
        self.nesting = 0
        return self._apply_rule(rule_name, text, pos, end)

    # ---- Rule application with memoization ----
    def _apply_rule(self, name: str, text: str, pos: int, end: int) -> Result:
        key = (name, pos, end)
        m = self.memo.get(key)
        if m is not None:
            flag, ok, new_pos, value = m
            if flag == 1:
                # left recursion or re-entry → fail
                return False, pos, None
            return ok, new_pos, value

        self.memo[key] = (1, False, pos, None)
        rule = self.g.require_rule(name)
        ok, new_pos, value = self._eval(rule.expr, text, pos, end)
        self.memo[key] = (2, ok, new_pos, value)
        return ok, new_pos, value

    # ---- Evaluator for expressions ----
    def _eval(self, node: Node, text: str, pos: int, end: int) -> Result:
        if isinstance(node, Literal):
            n = len(node.text)
            if pos + n <= end and text.startswith(node.text, pos):
                return True, pos + n, node.text
            return False, pos, None

        if isinstance(node, Pattern):
            stop = match_prefix(node.rx, text, pos, end)
            if stop < 0:
                return False, pos, None
            return True, stop, text[pos:stop]

        if isinstance(node, TakeUntil):
            i = pos
            while i < end and text[i] not in node.stops:
                i += 1
            return True, i, text[pos:i]

        if isinstance(node, TakeBalanced):
            i = _scan_balanced(node.stops, text, pos, end)
            return True, i, text[pos:i]

        if isinstance(node, Ref):
            return self._apply_rule(node.name, text, pos, end)

        if isinstance(node, Map):
            ok, new_pos, value = self._eval(node.node, text, pos, end)
            if not ok:
                return False, pos, None
            return True, new_pos, node.fn(value)

        if isinstance(node, MapSpan):
            ok, new_pos, value = self._eval(node.node, text, pos, end)
            if not ok:
                return False, pos, None
            return True, new_pos, node.fn(value, Span(pos, new_pos))

        if isinstance(node, FilterMap):
            ok, new_pos, value = self._eval(node.node, text, pos, end)
            if not ok:
                return False, pos, None
            value = node.fn(value)
            if value is None:
                return False, pos, None
            return True, new_pos, value

        if isinstance(node, Seq):
            cur = pos
            values: List[Any] = []
            for it in node.items:
                ok, cur, value = self._eval(it, text, cur, end)
                if not ok:
                    return False, pos, None
                values.append(value)
            return True, cur, tuple(values)

        if isinstance(node, Choice):
            for it in node.alts:
                ok, new_pos, value = self._eval(it, text, pos, end)
                if ok:
                    return True, new_pos, value
            return False, pos, None

        if isinstance(node, Optional_):
            ok, new_pos, value = self._eval(node.node, text, pos, end)
            if ok:
                return True, new_pos, value
            return True, pos, None

        if isinstance(node, Right):
            ok, mid, _ = self._eval(node.left, text, pos, end)
            if not ok:
                return False, pos, None
            ok, new_pos, value = self._eval(node.right, text, mid, end)
            if not ok:
                return False, pos, None
            return True, new_pos, value

        if isinstance(node, OneOrMore):
            ok, cur, value = self._eval(node.node, text, pos, end)
            if not ok:
                return False, pos, None
            values = [value]
            while cur < end:
                ok, nxt, value = self._eval(node.node, text, cur, end)
                if not ok or nxt == cur:
                    break
                values.append(value)
                cur = nxt
            return True, cur, values

        if isinstance(node, Sep):
            ok, cur, value = self._eval(node.node, text, pos, end)
            if not ok:
                return False, pos, None
            values = [value]
            n = len(node.sep)
            while cur + n <= end and text.startswith(node.sep, cur):
                ok, nxt, value = self._eval(node.node, text, cur + n, end)
                if not ok:
                    break
                values.append(value)
                cur = nxt
            return True, cur, values

        if isinstance(node, Reparse):
            ok, mid, _ = self._eval(node.outer, text, pos, end)
            if not ok:
                return False, pos, None
            if self.nesting >= self.max_nesting:
                return False, pos, None
            self.nesting += 1
            try:
                ok, inner_end, value = self._eval(node.inner, text, pos, mid)
            finally:
                self.nesting -= 1
            if not ok or (node.exhaustive and inner_end != mid):
                return False, pos, None
            return True, mid, value

        raise AssertionError(f"unknown node: {node!r}")
