import builtins

from cyk_algorithm import CYKAlgorithm
from cyk_cli import build_parser, main, run_command


def feed(monkeypatch, lines):
    commands = iter(lines)

    def fake_input(prompt=""):
        try:
            return next(commands)
        except StopIteration:
            raise EOFError

    monkeypatch.setattr(builtins, "input", fake_input)


def test_build_and_query_interactively(monkeypatch, capsys):
    feed(
        monkeypatch,
        [
            "new g",
            "add_nt g S",
            "add_nt g A",
            "add_nt g B",
            "add_t g a",
            "add_t g b",
            "start g S",
            "add_prod g S AB",
            "add_prod g A a",
            "add_prod g B b",
            "cyk g ab",
            "cyk g ba",
            "trace g AB",
            "productions g S",
            "exit",
        ],
    )
    main([])
    out = capsys.readouterr().out
    assert "S::=AB" in out
    assert "ACCEPTED" in out
    assert "REJECTED" in out
    assert "(0,0): A (0,1): S \n(1,1): B \n" in out
    assert out.rstrip().endswith("Goodbye!")


def test_errors_are_reported_and_loop_continues(monkeypatch, capsys):
    feed(
        monkeypatch,
        [
            "new g",
            "add_t g A",
            "add_t g a",
            "add_t g a",
            "cyk g a",
            "cyk missing a",
            "add_prod g",
            "bogus",
        ],
    )
    main([])
    out = capsys.readouterr().out
    assert "Error: Terminal must be a single lowercase letter" in out
    assert "Error: Terminal already registered: a" in out
    assert "Error: Grammar has no non-terminals or no start symbol" in out
    assert "Grammar not found: missing" in out
    assert "Usage: add_prod <name> <A> <rhs>" in out
    assert "Unknown command: bogus" in out
    assert "Goodbye!" in out


def test_preload_grammar_file(tmp_path, monkeypatch, capsys):
    path = tmp_path / "anbn.txt"
    path.write_text("S -> AB | AT\nT -> SB\nA -> a\nB -> b\n", encoding="utf-8")
    feed(monkeypatch, ["list", "show_grammar anbn", "cyk anbn aabb"])
    main(["--grammar", str(path)])
    out = capsys.readouterr().out
    assert "Loaded 1 grammars: anbn" in out
    assert "anbn: 4 non-terminals, 2 terminals, 5 productions" in out
    assert "S -> S::=AB|AT" in out
    assert "ACCEPTED" in out


def test_run_command_delete_and_clear(capsys):
    grammars = {"g": CYKAlgorithm(), "h": CYKAlgorithm()}
    assert run_command(grammars, ["delete", "g"])
    assert list(grammars) == ["h"]
    assert run_command(grammars, ["clear"])
    assert grammars == {}
    assert run_command(grammars, ["list"])
    assert not run_command(grammars, ["quit"])
    out = capsys.readouterr().out
    assert "Deleted: g" in out
    assert "Nothing loaded" in out


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.grammar == []
    assert args.log_level == "WARNING"
