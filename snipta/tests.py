from __future__ import annotations

from . import Placeholder, Text, parse
from .snippetc import main


def test_package_exports_parse():
    assert parse("match(${1:Arg1})")[1] == Placeholder(1, Text("Arg1"))

def test_cli_parse_prints_elements(capsys):
    assert main(["parse", "--text", "match(${1:Arg1})"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == [
        "000: Text         'match('",
        "001: Placeholder  $1 = Text 'Arg1'",
        "002: Text         ')'",
    ]

def test_cli_parse_choice_and_variable(capsys):
    assert main(["parse", "--text", "${1|a,b|}${TM/x/$1/g}"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == [
        "000: Choice       $1 of ['a', 'b']",
        "001: Variable     TM regex='x' options='g'",
    ]

def test_cli_parse_error_exit_code(capsys):
    assert main(["parse", "--text", "${1"]) == 2
    err = capsys.readouterr().err
    assert "[PARSE ERROR]" in err

def test_cli_trailing_input_warns_unless_strict(capsys):
    assert main(["check", "--text", "ab${1"]) == 0
    captured = capsys.readouterr()
    assert captured.out.strip() == "[CHECK OK] elements=1 consumed=2/5"
    assert "[WARN]" in captured.err

    assert main(["check", "--text", "ab${1", "--strict"]) == 2
    assert "[PARSE ERROR]" in capsys.readouterr().err

def test_cli_check_input_file(tmp_path, capsys):
    path = tmp_path / "a.snippet"
    path.write_text("local ${1:var} = ${1:value}", encoding="utf-8")
    assert main(["check", "--input", str(path), "-D"]) == 0
    captured = capsys.readouterr()
    assert captured.out.strip() == "[CHECK OK] elements=4 consumed=27/27"
    assert "[DEBUG]" in captured.err
    assert "[AST]" in captured.err

def test_cli_missing_file(tmp_path, capsys):
    assert main(["check", "--input", str(tmp_path / "nope.snippet")]) == 2
    assert "[ERROR] FileNotFoundError" in capsys.readouterr().err
