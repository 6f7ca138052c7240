import logging
import os
import re
from typing_extensions import *

from cnf_grammar import CNFGrammar, is_non_terminal_symbol, is_terminal_symbol
from cyk_errors import CYKError, InvalidProduction

logger = logging.getLogger(__name__)

DIRECTIVE_NAMES = ("PRODUCTIONS", "TERMINALS", "NON_TERMINALS", "NONTERMINALS", "START")

EPSILON = "ε"
EPSILON_VARIANTS = {"ε", "epsilon", "EPSILON", "λ", ""}

# A line holding only "NAME:" opens a named section (directives excluded)
SECTION_PATTERN = re.compile(
    r"^(?!(?:%s)\s*:)([A-Za-z]\w*):\s*$" % "|".join(DIRECTIVE_NAMES),
    re.MULTILINE,
)


def _clean_symbols(text: str) -> str:
    """Drop whitespace and unwrap <X> brackets."""
    cleaned = ""
    i = 0
    while i < len(text):
        if text[i] == "<":
            end = text.find(">", i)
            if end < 0:
                raise InvalidProduction(f"Unclosed '<' in {text.strip()!r}")
            cleaned += text[i + 1 : end]
            i = end + 1
        elif text[i].isspace():
            i += 1
        else:
            cleaned += text[i]
            i += 1
    return cleaned


def _append_unique(target: List[str], symbols: Iterable[str]):
    for symbol in symbols:
        if symbol not in target:
            target.append(symbol)


def _apply(strict: bool, action: Callable[..., None], *args: str):
    try:
        action(*args)
    except CYKError as e:
        if strict:
            raise
        logger.warning("Skipping %s%s: %s", action.__name__, args, e)


def grammar_from_string(content: str, strict: bool = False) -> CNFGrammar:
    """
    Parse a CNF grammar from text.

    Accepted lines:
        NON_TERMINALS: S A B
        TERMINALS: a b
        START: S
        S -> AB | BA        (also "::=" or "→")
        A ::= a

    Undeclared symbols are registered in order of first appearance,
    heads first. Invalid or duplicate productions are skipped with a
    warning unless ``strict`` is set, in which case the error is raised.
    """
    declared_nt: List[str] = []
    declared_t: List[str] = []
    specified_start = None
    productions: List[Tuple[str, List[str]]] = []

    # First pass: collect configuration and productions
    for line in content.strip().split("\n"):
        if "#" in line:
            line = line[: line.index("#")]
        line = line.strip()

        if not line or line == "PRODUCTIONS:":
            continue

        if line.startswith("START:"):
            specified_start = line.split(":", 1)[1].strip()
            continue

        if line.startswith("TERMINALS:"):
            _append_unique(declared_t, line.split(":", 1)[1].split())
            continue

        if line.startswith("NON_TERMINALS:") or line.startswith("NONTERMINALS:"):
            _append_unique(declared_nt, line.split(":", 1)[1].split())
            continue

        if "->" in line or "→" in line or "::=" in line:
            line = line.replace("→", "->").replace("::=", "->")
            lhs, rhs_alternatives = line.split("->", 1)
            try:
                lhs = _clean_symbols(lhs)
                alternatives = [_clean_symbols(rhs) for rhs in rhs_alternatives.split("|")]
            except InvalidProduction as e:
                if strict:
                    raise
                logger.warning("Skipping production line %r: %s", line, e)
                continue
            # Epsilon is the empty word; add_production rejects it as non-CNF
            alternatives = [EPSILON if rhs in EPSILON_VARIANTS else rhs for rhs in alternatives]
            productions.append((lhs, alternatives))
            continue

        logger.warning("Ignoring unrecognised grammar line: %r", line)

    if not productions:
        raise ValueError("No productions found or unable to determine start symbol")

    # Second pass: auto-detect symbols
    heads = [lhs for lhs, _ in productions]
    non_terminals = list(declared_nt)
    _append_unique(non_terminals, heads)
    terminals = [t for t in declared_t if t not in EPSILON_VARIANTS]
    for _, alternatives in productions:
        for rhs in alternatives:
            if rhs == EPSILON:
                continue
            _append_unique(non_terminals, [s for s in rhs if is_non_terminal_symbol(s)])
            _append_unique(
                terminals,
                [s for s in rhs if is_terminal_symbol(s) and s not in EPSILON_VARIANTS],
            )

    g = CNFGrammar()
    for nt in non_terminals:
        _apply(strict, g.add_non_terminal, nt)
    for t in terminals:
        _apply(strict, g.add_terminal, t)

    # Determine start symbol
    if specified_start:
        start_symbol = specified_start
    elif "S" in g.N:
        start_symbol = "S"
    else:
        start_symbol = heads[0]
    g.set_start_symbol(start_symbol)

    # Third pass: add productions
    for lhs, alternatives in productions:
        for rhs in alternatives:
            _apply(strict, g.add_production, lhs, rhs)

    return g


def grammar_from_file(filename: str, strict: bool = False) -> CNFGrammar:
    with open(filename, "r", encoding="utf-8") as f:
        content = f.read()
    return grammar_from_string(content, strict)


def load_from_file(filename: str, strict: bool = False) -> Dict[str, CNFGrammar]:
    """
    Load one or more grammars.

    A file with "NAME:" section lines yields one grammar per section;
    otherwise the whole file is one grammar named after the file.
    """
    grammars: Dict[str, CNFGrammar] = {}

    with open(filename, "r", encoding="utf-8") as f:
        content = f.read()

    if SECTION_PATTERN.search(content):
        # Named sections: NAME:\n...definition...
        sections = SECTION_PATTERN.split(content)

        for i in range(1, len(sections), 2):
            if i + 1 >= len(sections):
                continue

            name = sections[i].strip()
            definition = sections[i + 1].strip()

            if not definition:
                logger.warning("Grammar section '%s' is empty", name)
                continue

            grammars[name] = grammar_from_string(definition, strict)
    else:
        base_name = os.path.basename(filename).rsplit(".", 1)[0]
        grammars[base_name] = grammar_from_string(content, strict)

    logger.debug("Loaded %d grammar(s) from %s", len(grammars), filename)
    return grammars
