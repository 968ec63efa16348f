from __future__ import annotations

import pytest
from prompt_toolkit.document import Document

from condexpr.repl import ReplState, _SlashCompleter, _toggle, handle_slash, process_line
from condexpr.repl_highlight import GROUP_STYLE, ConditionLexer, _highlight_line
from condexpr.utils import DEBUG_PY_TRACE_ENV, debug_py_trace_enabled


@pytest.fixture
def state() -> ReplState:
    return ReplState()


def test_expression_result(state) -> None:
    assert process_line("1 + 1", state) == "2"
    assert process_line('"a" + "b"', state) == '"ab"'
    assert process_line("1 in [1, 2]", state) == "true"


def test_blank_line(state) -> None:
    assert process_line("   ", state) is None


def test_invisible_characters_stripped(state) -> None:
    assert process_line("1\u200b + \ufeff1", state) == "2"


def test_set_then_use(state, capsys) -> None:
    assert process_line("/set x 5", state) is None
    assert capsys.readouterr().out.strip() == "x = 5"

    assert process_line("x * 2", state) == "10"


def test_set_array_literal(state, capsys) -> None:
    process_line('/set tags ["a", "b"]', state)
    assert capsys.readouterr().out.strip() == 'tags = ["a", "b"]'
    assert process_line('"b" in tags', state) == "true"


def test_const_refuses_overwrite(state, capsys) -> None:
    process_line("/const limit 3", state)
    capsys.readouterr()

    process_line("/set limit 4", state)
    err = capsys.readouterr().err
    assert "Error: Attempting to modify 'limit' denied; it was defined as a constant" in err
    assert process_line("limit", state) == "3"


def test_const_refuses_redeclaration(state, capsys) -> None:
    process_line("/const k 1", state)
    capsys.readouterr()

    process_line("/const k 2", state)
    err = capsys.readouterr().err
    assert "Error: Attempting to modify 'k' denied; it was defined as a constant" in err
    assert process_line("k", state) == "1"


def test_set_requires_literal(state, capsys) -> None:
    process_line("/set x y", state)
    assert "expected a literal value" in capsys.readouterr().err

    process_line("/set x", state)
    assert "Usage: /set NAME LITERAL" in capsys.readouterr().err


def test_env_listing(state, capsys) -> None:
    handle_slash("/env", state)
    assert capsys.readouterr().out.strip() == "(no bindings)"

    handle_slash("/set b 1", state)
    handle_slash('/const a "s"', state)
    capsys.readouterr()

    handle_slash("/env", state)
    assert capsys.readouterr().out.splitlines() == ['a = "s" (const)', "b = 1"]


def test_reset(state, capsys) -> None:
    handle_slash("/const x 1", state)
    handle_slash("/reset", state)

    out = capsys.readouterr().out
    assert "Environment reset." in out
    assert list(state.env.names()) == []

    # Former constant is writable again
    handle_slash("/set x 2", state)
    assert process_line("x", state) == "2"


def test_tree_toggle(state, capsys) -> None:
    handle_slash("/tree on", state)
    assert capsys.readouterr().out.strip() == "AST dump: on"

    assert process_line("a > 1", state) is not None
    out = capsys.readouterr().out
    assert out.startswith("program")
    assert "infix" in out

    handle_slash("/tree", state)
    assert capsys.readouterr().out.strip() == "AST dump: off"
    assert state.show_tree is False


def test_tree_bad_argument(state, capsys) -> None:
    handle_slash("/tree maybe", state)
    assert "Usage: /tree [on|off]" in capsys.readouterr().err


def test_py_traceback_toggle(state, capsys, monkeypatch) -> None:
    monkeypatch.setenv(DEBUG_PY_TRACE_ENV, "0")
    assert not debug_py_trace_enabled()

    handle_slash("/py-traceback on", state)
    assert capsys.readouterr().out.strip() == "Python traceback: on"
    assert debug_py_trace_enabled()

    handle_slash("/py-traceback off", state)
    assert capsys.readouterr().out.strip() == "Python traceback: off"
    assert not debug_py_trace_enabled()


def test_unknown_command(state, capsys) -> None:
    assert handle_slash("/bogus", state) is True
    assert "Unknown command: /bogus" in capsys.readouterr().err


def test_not_a_command(state) -> None:
    assert handle_slash("1 / 2", state) is False


def test_help_lists_commands(state, capsys) -> None:
    handle_slash("/help", state)
    out = capsys.readouterr().out
    assert "/set NAME LITERAL" in out
    assert "/py-traceback [on|off]" in out


def test_syntax_error_reported(state, capsys) -> None:
    assert process_line("a == 1;", state) is None
    assert "Error: unexpected token SEMI ';' after expression" in capsys.readouterr().err


def test_runtime_error_value_printed(state) -> None:
    assert process_line("1 / 0", state) == "error: division by zero"


@pytest.mark.parametrize(
    "arg, current, expected",
    [
        pytest.param("on", False, True, id="on"),
        pytest.param("OFF", True, False, id="off-upper"),
        pytest.param("", True, False, id="flip"),
        pytest.param("perhaps", False, None, id="invalid"),
    ],
)
def test_toggle(arg: str, current: bool, expected) -> None:
    assert _toggle(arg, current) is expected


def test_slash_completer() -> None:
    completions = list(_SlashCompleter().get_completions(Document("/t"), None))
    assert [c.text for c in completions] == ["/tree"]

    assert list(_SlashCompleter().get_completions(Document("x"), None)) == []


def test_highlight_call_and_keywords() -> None:
    text = 'len("ab") in sizes'
    fragments = _highlight_line(text)

    assert "".join(frag for _, frag in fragments) == text
    assert (GROUP_STYLE["function"], "len") in fragments
    assert (GROUP_STYLE["string"], '"ab"') in fragments
    assert (GROUP_STYLE["keyword"], "in") in fragments


def test_highlight_literals() -> None:
    fragments = _highlight_line("true && 42")

    assert (GROUP_STYLE["boolean"], "true") in fragments
    assert (GROUP_STYLE["keyword"], "&&") in fragments
    assert (GROUP_STYLE["number"], "42") in fragments


def test_highlight_illegal() -> None:
    fragments = _highlight_line("a = 1")
    assert (GROUP_STYLE["error"], "=") in fragments


def test_highlight_unknown_function_is_plain_identifier() -> None:
    fragments = _highlight_line("nope(1)")
    assert (GROUP_STYLE["identifier"], "nope") in fragments


def test_highlight_unterminated_string() -> None:
    assert _highlight_line('"abc') == [(GROUP_STYLE["string"], '"abc')]


def test_highlight_empty_line() -> None:
    assert _highlight_line("") == [("", "")]


def test_condition_lexer_lines() -> None:
    get_line = ConditionLexer().lex_document(Document("1\nx"))

    assert get_line(0) == [(GROUP_STYLE["number"], "1")]
    assert get_line(1) == [(GROUP_STYLE["identifier"], "x")]
    assert get_line(7) == [("", "")]
