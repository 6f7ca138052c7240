import threading
from typing_extensions import *

from cnf_grammar import CNFGrammar, Production
from cyk_chart import algorithm_state_to_string, is_derived


class CYKAlgorithm:
    """
    One grammar behind one lock.

    Every mutator and query takes the same re-entrant lock, so the
    read-modify-write of the production map is atomic per call even
    when the session is shared between threads.
    """

    def __init__(self, grammar: Optional[CNFGrammar] = None):
        self.grammar = grammar if grammar is not None else CNFGrammar()
        self._lock = threading.RLock()

    # Mutators

    def add_non_terminal(self, symbol: str):
        with self._lock:
            self.grammar.add_non_terminal(symbol)

    def add_terminal(self, symbol: str):
        with self._lock:
            self.grammar.add_terminal(symbol)

    def set_start_symbol(self, symbol: str):
        with self._lock:
            self.grammar.set_start_symbol(symbol)

    def add_production(self, lhs: str, rhs: Union[str, Production]):
        with self._lock:
            self.grammar.add_production(lhs, rhs)

    def remove_grammar(self):
        with self._lock:
            self.grammar.remove_grammar()

    # Queries

    def is_derived(self, word: str) -> bool:
        with self._lock:
            return is_derived(self.grammar, word)

    def algorithm_state_to_string(self, symbols: str) -> str:
        with self._lock:
            return algorithm_state_to_string(self.grammar, symbols)

    def get_productions(self, lhs: str) -> str:
        with self._lock:
            return self.grammar.get_productions(lhs)

    def get_grammar(self) -> str:
        with self._lock:
            return self.grammar.get_grammar()

    def snapshot(self) -> CNFGrammar:
        """Independent copy of the current grammar."""
        with self._lock:
            return self.grammar.copy()
