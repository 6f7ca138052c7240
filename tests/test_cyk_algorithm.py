import threading

import pytest

from cnf_grammar import CNFGrammar
from cyk_algorithm import CYKAlgorithm
from cyk_errors import (
    DuplicateSymbol,
    EmptyInput,
    InvalidProduction,
    InvalidSymbol,
    UnknownTerminal,
)


def make_session() -> CYKAlgorithm:
    cyk = CYKAlgorithm()
    for nt in "SAB":
        cyk.add_non_terminal(nt)
    cyk.add_terminal("a")
    cyk.add_terminal("b")
    cyk.set_start_symbol("S")
    cyk.add_production("S", "AB")
    cyk.add_production("A", "a")
    cyk.add_production("B", "b")
    return cyk


def test_call_surface_scenarios():
    cyk = make_session()
    assert cyk.is_derived("ab")
    assert not cyk.is_derived("ba")
    with pytest.raises(EmptyInput):
        cyk.is_derived("")
    with pytest.raises(UnknownTerminal):
        cyk.is_derived("c")
    with pytest.raises(InvalidSymbol):
        cyk.add_terminal("A")
    with pytest.raises(InvalidProduction):
        cyk.add_production("S", "aA")
    assert cyk.get_grammar() == "S -> S::=AB\nA -> A::=a\nB -> B::=b\n"
    assert cyk.get_productions("S") == "S::=AB"
    assert cyk.algorithm_state_to_string("AB") == "(0,0): A (0,1): S \n(1,1): B \n"


def test_sessions_are_independent():
    first = make_session()
    second = CYKAlgorithm()
    second.add_terminal("a")
    first.remove_grammar()
    assert second.grammar.Sigma == {"a"}
    assert first.grammar == CNFGrammar()


def test_wraps_existing_grammar():
    g = CNFGrammar()
    g.add_non_terminal("S")
    cyk = CYKAlgorithm(g)
    cyk.add_terminal("s")
    assert g.Sigma == {"s"}


def test_snapshot_is_a_copy():
    cyk = make_session()
    snap = cyk.snapshot()
    cyk.add_production("S", "BA")
    assert snap.get_productions("S") == "S::=AB"


def test_concurrent_terminal_registration_is_serialised():
    cyk = CYKAlgorithm()
    failures = []

    def register():
        try:
            cyk.add_terminal("a")
        except DuplicateSymbol:
            failures.append(1)

    threads = [threading.Thread(target=register) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert cyk.grammar.Sigma == {"a"}
    assert len(failures) == 7
