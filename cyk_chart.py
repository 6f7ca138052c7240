import logging
from collections import defaultdict
from typing_extensions import *

from graphviz import Digraph

from cnf_grammar import CNFGrammar
from cyk_errors import EmptyInput, IncompleteGrammar, InvalidWord, UnknownTerminal

logger = logging.getLogger(__name__)


class Chart:
    """
    Upper-triangular CYK table over a word of length n.

    Cells live in one flat list, row by row: row i holds the spans
    (i, i) .. (i, n-1). Indexing with anything outside 0 <= i <= j < n
    raises IndexError.
    """

    def __init__(self, n: int):
        if n < 0:
            raise ValueError(f"Chart size must be non-negative: {n}")
        self.n = n
        self._cells: List[Set[str]] = [set() for _ in range(n * (n + 1) // 2)]

    def _offset(self, i: int, j: int) -> int:
        if not (0 <= i <= j < self.n):
            raise IndexError(f"Span ({i},{j}) outside chart of size {self.n}")
        # rows 0..i-1 hold n, n-1, ..., n-i+1 cells
        return i * self.n - i * (i - 1) // 2 + (j - i)

    def __getitem__(self, span: Tuple[int, int]) -> Set[str]:
        i, j = span
        return self._cells[self._offset(i, j)]

    def __setitem__(self, span: Tuple[int, int], value: Set[str]):
        i, j = span
        self._cells[self._offset(i, j)] = set(value)

    def __len__(self):
        return len(self._cells)

    def spans(self) -> Iterator[Tuple[int, int]]:
        for i in range(self.n):
            for j in range(i, self.n):
                yield i, j


# ---------------------------------------------------------------------- #
# Recurrence
# ---------------------------------------------------------------------- #


def _fill(chart: Chart, binary_prods: Dict[Tuple[str, str], Set[str]]) -> Chart:
    """Fill spans of length >= 2 from an already seeded diagonal."""
    n = chart.n
    for length in range(2, n + 1):  # length of span
        for i in range(n - length + 1):
            j = i + length - 1
            cell_vars: Set[str] = set()
            for k in range(i, j):
                left = chart[i, k]
                right = chart[k + 1, j]
                if not left or not right:
                    continue
                for B in left:
                    for C in right:
                        cell_vars.update(binary_prods.get((B, C), ()))
            chart[i, j] = cell_vars
    return chart


def _check_grammar(grammar: CNFGrammar):
    if not grammar.N or grammar.S is None:
        raise IncompleteGrammar("Grammar has no non-terminals or no start symbol")


def parse_chart(grammar: CNFGrammar, word: str) -> Chart:
    """Build the membership chart: cell (i,j) = {A | A =>* word[i..j]}."""
    if len(word) == 0:
        raise EmptyInput("Word must not be empty")
    _check_grammar(grammar)
    for a in word:
        if a not in grammar.Sigma:
            raise UnknownTerminal(f"Symbol {a!r} is not a registered terminal")

    n = len(word)
    unary_prods = grammar.unary_index()
    chart = Chart(n)

    # Length 1 substrings
    for i, a in enumerate(word):
        chart[i, i] = unary_prods.get(a, set())

    _fill(chart, grammar.binary_index())
    logger.debug(
        "CYK chart for %r: %d cells, top cell %s",
        word,
        len(chart),
        sorted(chart[0, n - 1]),
    )
    return chart


def is_derived(grammar: CNFGrammar, word: str) -> bool:
    """Return True iff word is in L(grammar)."""
    chart = parse_chart(grammar, word)
    return grammar.S in chart[0, len(word) - 1]


def _ordered(symbols: Set[str], order: List[str]) -> str:
    return "".join(nt for nt in order if nt in symbols)


def algorithm_state_to_string(grammar: CNFGrammar, symbols: str) -> str:
    """
    Trace the recurrence over a sequence of non-terminals.

    The diagonal shows the input symbol itself: cell (i,i) is {X} for
    X = symbols[i], a zero-step derivation, not the heads of A -> X
    (CNF has no such unit productions). Longer spans hold every A with
    A -> BC, B in the left part and C in the right part. Each cell is
    rendered as "(i,j): <symbols> " and every row ends with a newline.
    """
    for X in symbols:
        if X not in grammar.N:
            raise InvalidWord(f"Symbol {X!r} is not a registered non-terminal")

    n = len(symbols)
    chart = Chart(n)
    for i, X in enumerate(symbols):
        chart[i, i] = {X}
    _fill(chart, grammar.binary_index())

    rows = []
    for i in range(n):
        row = "".join(
            f"({i},{j}): {_ordered(chart[i, j], grammar.N)} " for j in range(i, n)
        )
        rows.append(row + "\n")
    return "".join(rows)


# ---------------------------------------------------------------------- #
# Presentation
# ---------------------------------------------------------------------- #


def format_table(chart: Chart, word: str, start: Optional[str] = None) -> str:
    """Boxed upper-triangular table; cell [i,j] is span word[i..j] (1-based)."""
    n = chart.n
    cell_str: List[List[str]] = [["" for _ in range(n)] for _ in range(n)]
    for i, j in chart.spans():
        syms = sorted(chart[i, j])
        cell_str[i][j] = "{" + ",".join(syms) + "}" if syms else "{}"

    # Column widths (consider header indices as well, using 1-based)
    col_widths: List[int] = []
    for j in range(n):
        max_cell_len = max(len(cell_str[i][j]) for i in range(n))
        col_widths.append(max(max_cell_len, len(str(j + 1)), 3))

    row_w = max(3, len(str(n)))

    def build_separator() -> str:
        pieces = ["-" * (row_w + 2)]
        for w in col_widths:
            pieces.append("-" * (w + 2))
        return "+" + "+".join(pieces) + "+"

    lines = [
        "CYK table (upper-triangular; cell [i,j] is span word[i..j]):",
        "Word indices: " + " ".join(f"{i + 1}:{ch}" for i, ch in enumerate(word)),
        "",
    ]

    header_cells = ["i\\j".center(row_w)]
    header_cells += [str(j + 1).center(col_widths[j]) for j in range(n)]
    lines.append(build_separator())
    lines.append("| " + " | ".join(header_cells) + " |")
    lines.append(build_separator())

    for i in range(n):
        row_cells = [str(i + 1).center(row_w)]
        for j in range(n):
            row_cells.append(cell_str[i][j].center(col_widths[j]))
        lines.append("| " + " | ".join(row_cells) + " |")
        lines.append(build_separator())

    if start is not None and n > 0:
        accepted = start in chart[0, n - 1]
        lines.append("")
        lines.append(
            f"Result: word '{word}' is {'ACCEPTED' if accepted else 'REJECTED'} by CYK."
        )
    return "\n".join(lines) + "\n"


def chart_to_graphviz(
    chart: Chart,
    word: str,
    grammar: CNFGrammar,
    filename: str = "cyk_chart",
    view: bool = False,
    render: bool = True,
) -> Digraph:
    """
    Graphviz view of a membership chart.

    One node per cell, an edge from each non-empty cell to the pair of
    sub-spans that produced something in it. The full-span cell is
    highlighted when it contains the start symbol.
    """
    n = chart.n
    binary_prods = grammar.binary_index()

    dot = Digraph(
        name="CYK",
        format="png",
        graph_attr={
            "rankdir": "TB",
            "splines": "true",
            "nodesep": "0.4",
            "ranksep": "0.8",
            "label": f"CYK chart for '{word}'",
            "labelloc": "t",
            "fontsize": "14",
            "fontname": "Arial",
            "bgcolor": "white",
            "pad": "0.5",
        },
        node_attr={
            "shape": "box",
            "fontsize": "12",
            "fontname": "Arial",
            "style": "filled",
            "fillcolor": "lightblue",
            "color": "black",
        },
        edge_attr={
            "fontsize": "10",
            "fontname": "Arial",
            "arrowsize": "0.6",
            "color": "gray40",
        },
    )

    def node_id(i: int, j: int) -> str:
        return f"c{i}_{j}"

    # Cells of equal span length share a rank, longest span on top
    by_length: Dict[int, List[Tuple[int, int]]] = defaultdict(list)
    for i, j in chart.spans():
        by_length[j - i + 1].append((i, j))

    for length in sorted(by_length, reverse=True):
        with dot.subgraph() as rank:
            rank.attr(rank="same")
            for i, j in by_length[length]:
                syms = sorted(chart[i, j])
                label = f"({i},{j}) {word[i:j + 1]}\n" + ("{" + ",".join(syms) + "}" if syms else "∅")
                if length == n and grammar.S in chart[i, j]:
                    rank.node(node_id(i, j), label=label, fillcolor="lightgreen", peripheries="2")
                elif not syms:
                    rank.node(node_id(i, j), label=label, fillcolor="white")
                else:
                    rank.node(node_id(i, j), label=label)

    # Splits that contributed at least one symbol
    for i, j in chart.spans():
        for k in range(i, j):
            heads: Set[str] = set()
            for B in chart[i, k]:
                for C in chart[k + 1, j]:
                    heads.update(binary_prods.get((B, C), ()))
            if heads:
                label = ",".join(sorted(heads))
                dot.edge(node_id(i, j), node_id(i, k), label=label)
                dot.edge(node_id(i, j), node_id(k + 1, j), label=label)

    if render:
        dot.render(filename, view=view, cleanup=True)
    return dot
