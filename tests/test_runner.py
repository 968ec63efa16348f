from __future__ import annotations

import io

import pytest

from condexpr import ConditionSyntaxError, literal_value
from condexpr.runner import USAGE, UsageError, _load_source, main, run
from tests.support.harness import verify_result

EXIT_CASES = [
    pytest.param(["1 < 2"], 0, "true", id="truthy"),
    pytest.param(["1 > 2"], 1, "false", id="falsy"),
    pytest.param(["2 * 21"], 0, "42", id="integer-result"),
    pytest.param(["0"], 1, "0", id="zero-is-falsy"),
    pytest.param(['"" + ""'], 1, '""', id="empty-string-falsy"),
    pytest.param(["--set", "x=5", "x * 2"], 0, "10", id="set-separate"),
    pytest.param(["--set=x=5", "x == 5"], 0, "true", id="set-inline"),
    pytest.param(["--const", "names=[\"a\",\"b\"]", '"b" in names'], 0, "true", id="const-array"),
    pytest.param(["--lark", "1 in [1,2]"], 0, "true", id="lark-front-end"),
]


@pytest.mark.parametrize("argv, code, output", EXIT_CASES)
def test_main_exit_codes(argv, code, output, capsys) -> None:
    assert main(argv) == code
    out, err = capsys.readouterr()
    assert out.strip() == output
    assert err == ""


ERROR_CASES = [
    pytest.param(["a == 1;"], "Error: unexpected token SEMI ';' after expression", id="syntax"),
    pytest.param(["len(1)"], "no overload of 'len' accepts argument types (INTEGER)", id="type"),
    pytest.param(["10 / 0"], "error: division by zero", id="runtime-error-value"),
    pytest.param(["missing > 1"], "error: identifier not found: missing", id="unbound"),
    pytest.param(["--set"], "--set flag requires NAME=LITERAL", id="set-missing-value"),
    pytest.param(["--set", "x"], "--set expects NAME=LITERAL", id="set-missing-equals"),
    pytest.param(["--set", "x=y", "x"], "expected a literal value, got 'y'", id="set-non-literal"),
    pytest.param(["--const", "x=1", "--set", "x=2", "x"], "Attempting to modify 'x' denied", id="const-conflict"),
    pytest.param(["--const", "k=1", "--const", "k=2", "k"], "Attempting to modify 'k' denied", id="const-redeclared"),
    pytest.param(["1", "2"], "Unexpected argument: 2", id="extra-argument"),
]


@pytest.mark.parametrize("argv, message", ERROR_CASES)
def test_main_errors(argv, message, capsys) -> None:
    assert main(argv) == 2
    out, err = capsys.readouterr()
    assert out == ""
    assert message in err


def test_main_help(capsys) -> None:
    assert main(["--help"]) == 0
    assert capsys.readouterr().out.strip() == USAGE


def test_main_tree(capsys) -> None:
    assert main(["--tree", "a > 1 && ok"]) == 0
    out = capsys.readouterr().out

    lines = out.splitlines()
    assert lines[0] == "program"
    assert lines[1].strip() == "infix"
    assert "&&" in out


def test_main_reads_file(tmp_path, capsys) -> None:
    path = tmp_path / "rule.cond"
    path.write_text('limit > 10 && tier == "gold"\n', encoding="utf-8")

    assert main(["--set", "limit=11", "--set", 'tier="gold"', str(path)]) == 0
    assert capsys.readouterr().out.strip() == "true"


def test_main_reads_stdin(monkeypatch, capsys) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("3 >= 3"))
    assert main(["-"]) == 0
    assert capsys.readouterr().out.strip() == "true"


def test_empty_stdin_is_usage_error(monkeypatch) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(""))
    with pytest.raises(UsageError, match="No input provided on stdin"):
        _load_source(None)


def test_load_source_literal_text() -> None:
    assert _load_source("a == 1") == "a == 1"


def test_run_with_bindings() -> None:
    result = run("a + b == 5", bindings=[("a", "2")], constants=[("b", "3")])
    verify_result(result, "bool", True)


def test_run_constant_replaces_binding() -> None:
    verify_result(run("a", bindings=[("a", "1")], constants=[("a", "2")]), "int", 2)


def test_run_rejects_bad_source() -> None:
    with pytest.raises(ConditionSyntaxError):
        run("a ==")


def test_run_lark() -> None:
    verify_result(run('len("abc")', use_lark=True), "int", 3)


LITERAL_CASES = [
    pytest.param("42", ("int", 42), id="int"),
    pytest.param("0x10", ("int", 16), id="hex"),
    pytest.param('"hi"', ("string", "hi"), id="string"),
    pytest.param("true", ("bool", True), id="bool"),
    pytest.param("[1,2]", ("int_array", [1, 2]), id="int-array"),
    pytest.param('["a"]', ("str_array", ["a"]), id="str-array"),
]


@pytest.mark.parametrize("text, expectation", LITERAL_CASES)
def test_literal_value(text: str, expectation) -> None:
    verify_result(literal_value(text), expectation[0], expectation[1])


@pytest.mark.parametrize(
    "text",
    [
        pytest.param("x", id="identifier"),
        pytest.param("1 + 1", id="expression"),
        pytest.param("!true", id="prefix"),
    ],
)
def test_literal_value_rejects_expressions(text: str) -> None:
    with pytest.raises(ConditionSyntaxError, match="expected a literal value"):
        literal_value(text)
