import logging
from copy import deepcopy
from dataclasses import dataclass, field
from typing_extensions import *

from cyk_errors import (
    DuplicateProduction,
    DuplicateSymbol,
    InvalidProduction,
    InvalidSymbol,
    UnknownSymbol,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Binary:
    """A -> BC"""

    left: str
    right: str

    def __str__(self):
        return self.left + self.right


@dataclass(frozen=True)
class Unary:
    """A -> a"""

    terminal: str

    def __str__(self):
        return self.terminal


Production = Union[Binary, Unary]


def is_non_terminal_symbol(symbol: Any) -> bool:
    return isinstance(symbol, str) and len(symbol) == 1 and symbol.isalpha() and symbol.isupper()


def is_terminal_symbol(symbol: Any) -> bool:
    return isinstance(symbol, str) and len(symbol) == 1 and symbol.isalpha() and symbol.islower()


@dataclass
class CNFGrammar:
    """
    Context-free grammar restricted to Chomsky Normal Form.

    Every mutator validates before touching state, so a rejected call
    leaves the grammar exactly as it was.
    """

    N: List[str] = field(default_factory=list)  # Non-terminals, registration order
    Sigma: Set[str] = field(default_factory=set)  # Terminals
    S: Optional[str] = None  # Start symbol
    P: Dict[str, Set[Production]] = field(default_factory=dict)  # Productions

    # ------------------------------------------------------------------ #
    # Basic symbol / production management
    # ------------------------------------------------------------------ #

    def add_non_terminal(self, symbol: str):
        if not is_non_terminal_symbol(symbol):
            raise InvalidSymbol(f"Non-terminal must be a single uppercase letter: {symbol!r}")
        if symbol in self.N:
            raise DuplicateSymbol(f"Non-terminal already registered: {symbol}")
        self.N.append(symbol)
        logger.debug("Added non-terminal %s", symbol)

    def add_terminal(self, symbol: str):
        if not is_terminal_symbol(symbol):
            raise InvalidSymbol(f"Terminal must be a single lowercase letter: {symbol!r}")
        if symbol in self.Sigma:
            raise DuplicateSymbol(f"Terminal already registered: {symbol}")
        self.Sigma.add(symbol)
        logger.debug("Added terminal %s", symbol)

    def set_start_symbol(self, symbol: str):
        if symbol not in self.N:
            raise UnknownSymbol(f"Start symbol is not a registered non-terminal: {symbol!r}")
        self.S = symbol
        logger.debug("Start symbol set to %s", symbol)

    def _to_production(self, rhs: Union[str, Production]) -> Production:
        if isinstance(rhs, Binary):
            if rhs.left in self.N and rhs.right in self.N:
                return rhs
        elif isinstance(rhs, Unary):
            if rhs.terminal in self.Sigma:
                return rhs
        elif isinstance(rhs, str):
            if len(rhs) == 2 and rhs[0] in self.N and rhs[1] in self.N:
                return Binary(rhs[0], rhs[1])
            if len(rhs) == 1 and rhs in self.Sigma:
                return Unary(rhs)
        raise InvalidProduction(f"Right-hand side is not in CNF over this grammar: {rhs!r}")

    def add_production(self, lhs: str, rhs: Union[str, Production]):
        if lhs not in self.N:
            raise UnknownSymbol(f"Unknown non-terminal: {lhs!r}")

        production = self._to_production(rhs)
        alternatives = self.P.get(lhs, set())
        if production in alternatives:
            raise DuplicateProduction(f"Production already exists: {lhs} -> {production}")

        self.P.setdefault(lhs, set()).add(production)
        logger.debug("Added production %s -> %s", lhs, production)

    def remove_grammar(self):
        self.N.clear()
        self.Sigma.clear()
        self.P.clear()
        self.S = None
        logger.debug("Grammar cleared")

    # ------------------------------------------------------------------ #
    # Introspection / pretty-printing
    # ------------------------------------------------------------------ #

    def get_productions(self, lhs: str) -> str:
        alternatives = self.P.get(lhs)
        if not alternatives:
            return ""
        return f"{lhs}::=" + "|".join(sorted(str(rhs) for rhs in alternatives))

    def get_grammar(self) -> str:
        lines = [
            f"{nt} -> {self.get_productions(nt)}\n"
            for nt in self.N
            if self.P.get(nt)
        ]
        return "".join(lines)

    def binary_index(self) -> Dict[Tuple[str, str], Set[str]]:
        """(B, C) -> {A | A -> BC}"""
        index: Dict[Tuple[str, str], Set[str]] = {}
        for lhs, alternatives in self.P.items():
            for rhs in alternatives:
                if isinstance(rhs, Binary):
                    index.setdefault((rhs.left, rhs.right), set()).add(lhs)
        return index

    def unary_index(self) -> Dict[str, Set[str]]:
        """a -> {A | A -> a}"""
        index: Dict[str, Set[str]] = {}
        for lhs, alternatives in self.P.items():
            for rhs in alternatives:
                if isinstance(rhs, Unary):
                    index.setdefault(rhs.terminal, set()).add(lhs)
        return index

    def __str__(self):
        result = "Grammar: CNF\n"
        result += f"  Non-terminals: {{{', '.join(self.N)}}}\n"
        result += f"  Terminals: {{{', '.join(sorted(self.Sigma))}}}\n"
        result += f"  Start symbol: {self.S if self.S is not None else '-'}\n"
        result += "  Productions:\n"
        for nt in self.N:
            if self.P.get(nt):
                result += f"    {nt} -> {' | '.join(sorted(str(rhs) for rhs in self.P[nt]))}\n"
        return result

    def copy(self) -> "CNFGrammar":
        return CNFGrammar(
            N=list(self.N),
            Sigma=set(self.Sigma),
            S=self.S,
            P=deepcopy(self.P),
        )
