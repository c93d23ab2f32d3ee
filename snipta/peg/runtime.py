# snipta/peg/runtime.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict
from .ast import PegGrammar, RuleDef, Node
from .engine import Packrat, Result, DEFAULT_MAX_NESTING

@dataclass(frozen=True)
class PegProgram:
    """Compiled (immutable) combinator program."""
    grammar: PegGrammar

    @classmethod
    def from_rules(cls, rules: Dict[str, Node], start: str) -> "PegProgram":
        defs = {name: RuleDef(name, expr) for name, expr in rules.items()}
        g = PegGrammar(defs, start)
        g.require_rule(start)
        return cls(g)

class PegRunner:
    """Execute a PEG program on input text at a given position."""
    def __init__(self, program: PegProgram, max_nesting: int = DEFAULT_MAX_NESTING):
        self.program = program
        self.max_nesting = max_nesting

    def run(self, rule_name: str, text: str, pos: int = 0, end: int = -1) -> Result:
        # fresh memo per run; programs are shared, engines are not
        engine = Packrat(self.program.grammar, self.max_nesting)
        return engine.parse(rule_name, text, pos, end)

    def run_start(self, text: str, pos: int = 0) -> Result:
        return self.run(self.program.grammar.start, text, pos)
