import argparse
import logging
from typing_extensions import *

from graphviz import ExecutableNotFound

from cyk_algorithm import CYKAlgorithm
from cyk_chart import chart_to_graphviz, format_table, parse_chart
from grammar_io import load_from_file

HELP_TEXT = """
Commands:
  LOADING:
    load <file>                      - Load grammars from file
    list                             - List all loaded grammars

  BUILDING:
    new <name>                       - Create an empty grammar
    add_nt <name> <X>                - Add non-terminal (uppercase letter)
    add_t <name> <x>                 - Add terminal (lowercase letter)
    start <name> <X>                 - Set start symbol
    add_prod <name> <A> <rhs>        - Add production A -> BC or A -> a
    reset <name>                     - Remove every symbol and production

  INSPECTION:
    show_grammar <name>              - Show grammar info
    productions <name> <A>           - Show A::=...
    cyk <name> <word>                - CYK membership test with table
    trace <name> <symbols>           - Chart over a sequence of non-terminals
    graph <name> <word>              - Render the CYK chart with Graphviz

  GENERAL:
    delete <name>                    - Delete grammar
    clear                            - Clear all
    exit                             - Exit
"""

# command -> (argument count, usage)
USAGE: Dict[str, Tuple[int, str]] = {
    "load": (1, "load <filename>"),
    "new": (1, "new <name>"),
    "add_nt": (2, "add_nt <name> <X>"),
    "add_t": (2, "add_t <name> <x>"),
    "start": (2, "start <name> <X>"),
    "add_prod": (3, "add_prod <name> <A> <rhs>"),
    "reset": (1, "reset <name>"),
    "show_grammar": (1, "show_grammar <name>"),
    "productions": (2, "productions <name> <A>"),
    "cyk": (2, "cyk <grammar_name> <word>"),
    "trace": (2, "trace <grammar_name> <symbols>"),
    "graph": (2, "graph <grammar_name> <word>"),
    "delete": (1, "delete <name>"),
}

# Commands that operate on an existing grammar named by parts[1]
NEEDS_GRAMMAR = {
    "add_nt",
    "add_t",
    "start",
    "add_prod",
    "reset",
    "show_grammar",
    "productions",
    "cyk",
    "trace",
    "graph",
}


def load_into(grammars: Dict[str, CYKAlgorithm], filename: str):
    loaded = load_from_file(filename)
    for name, grammar in loaded.items():
        grammars[name] = CYKAlgorithm(grammar)
    if loaded:
        print(f"Loaded {len(loaded)} grammars: {', '.join(loaded.keys())}")
    else:
        print("No items loaded")


def run_command(grammars: Dict[str, CYKAlgorithm], parts: List[str]) -> bool:
    """Execute one command; return False when the session should end."""
    cmd = parts[0].lower()

    if cmd in ["exit", "quit"]:
        return False

    if cmd == "help":
        print(HELP_TEXT)
        return True

    if cmd in USAGE and len(parts) - 1 < USAGE[cmd][0]:
        print(f"Usage: {USAGE[cmd][1]}")
        return True

    if cmd in NEEDS_GRAMMAR and parts[1] not in grammars:
        print(f"Grammar not found: {parts[1]}")
        return True

    try:
        if cmd == "load":
            load_into(grammars, parts[1])

        elif cmd == "list":
            if grammars:
                print("Grammars:")
                for name, session in sorted(grammars.items()):
                    g = session.snapshot()
                    count = sum(len(alts) for alts in g.P.values())
                    print(
                        f"  {name}: {len(g.N)} non-terminals, {len(g.Sigma)} terminals, {count} productions"
                    )
            else:
                print("Nothing loaded")

        elif cmd == "new":
            grammars[parts[1]] = CYKAlgorithm()
            print(f"Created: {parts[1]}")

        elif cmd == "add_nt":
            grammars[parts[1]].add_non_terminal(parts[2])
            print(f"Added non-terminal: {parts[2]}")

        elif cmd == "add_t":
            grammars[parts[1]].add_terminal(parts[2])
            print(f"Added terminal: {parts[2]}")

        elif cmd == "start":
            grammars[parts[1]].set_start_symbol(parts[2])
            print(f"Start symbol: {parts[2]}")

        elif cmd == "add_prod":
            grammars[parts[1]].add_production(parts[2], parts[3])
            print(grammars[parts[1]].get_productions(parts[2]))

        elif cmd == "reset":
            grammars[parts[1]].remove_grammar()
            print(f"Reset: {parts[1]}")

        elif cmd == "show_grammar":
            print(grammars[parts[1]].snapshot())
            print(grammars[parts[1]].get_grammar())

        elif cmd == "productions":
            rendered = grammars[parts[1]].get_productions(parts[2])
            print(rendered if rendered else f"No productions for {parts[2]}")

        elif cmd == "cyk":
            g = grammars[parts[1]].snapshot()
            chart = parse_chart(g, parts[2])
            print()
            print(format_table(chart, parts[2], g.S))

        elif cmd == "trace":
            print(grammars[parts[1]].algorithm_state_to_string(parts[2]), end="")

        elif cmd == "graph":
            g = grammars[parts[1]].snapshot()
            chart = parse_chart(g, parts[2])
            filename = f"{parts[1]}_{parts[2]}"
            chart_to_graphviz(chart, parts[2], g, filename=filename, view=True)
            print(f"Created: {filename}.png")

        elif cmd == "delete":
            if parts[1] in grammars:
                del grammars[parts[1]]
                print(f"Deleted: {parts[1]}")
            else:
                print(f"Not found: {parts[1]}")

        elif cmd == "clear":
            grammars.clear()
            print("Cleared all")

        else:
            print(f"Unknown command: {cmd}")

    except (ValueError, OSError, ExecutableNotFound) as e:
        print(f"Error: {e}")

    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="CYK membership test for grammars in Chomsky Normal Form"
    )
    parser.add_argument(
        "--grammar",
        action="append",
        default=[],
        metavar="FILE",
        help="Load grammars from FILE before starting (repeatable)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    return parser


def main(argv: Optional[List[str]] = None):
    """Simple interactive terminal for CNF grammars and the CYK algorithm."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    grammars: Dict[str, CYKAlgorithm] = {}
    for filename in args.grammar:
        run_command(grammars, ["load", filename])

    print("CYK Terminal - Type 'help' for commands\n")

    while True:
        try:
            command = input("> ").strip()
            if not command:
                continue
            if not run_command(grammars, command.split()):
                break
        except KeyboardInterrupt:
            print("\nUse 'exit' to quit")
        except EOFError:
            break

    print("Goodbye!")


if __name__ == "__main__":
    main()
