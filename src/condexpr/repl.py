"""Interactive REPL for condition expressions, powered by prompt_toolkit."""

from __future__ import annotations

import re
import sys
import traceback
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.shortcuts import clear

from .repl_highlight import ConditionLexer
from .runner import compile_condition, literal_value
from .runtime import (
    ConditionSyntaxError,
    CondexprError,
    CxValue,
    Environment,
    init_stdlib,
)
from .tree import pretty
from .utils import configure_logging, debug_py_trace_enabled, set_debug_py_trace

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/set": ("Bind a name to a literal", "NAME LITERAL"),
    "/const": ("Bind a read-only name to a literal", "NAME LITERAL"),
    "/env": ("Show current bindings", ""),
    "/tree": ("Toggle AST dump before each result", "[on|off]"),
    "/reset": ("Reset the REPL environment", ""),
    "/clear": ("Clear the terminal screen", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/help": ("List commands", ""),
}

_ON = ("on", "1", "true", "yes")
_OFF = ("off", "0", "false", "no")


class ReplState:
    """Bindings and toggles that persist across REPL lines."""

    def __init__(self) -> None:
        self.env = Environment()
        self.show_tree = False

    def reset(self) -> None:
        self.env = Environment()


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=desc,
                )


def _toggle(arg: str, current: bool) -> Optional[bool]:
    """New flag value for an [on|off] argument; None when arg is invalid."""
    lowered = arg.lower()
    if lowered in _ON:
        return True
    if lowered in _OFF:
        return False
    if arg == "":
        return not current
    return None


def handle_slash(line: str, state: ReplState) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd in ("/set", "/const"):
        name, _, literal = arg.partition(" ")
        if not name or not literal.strip():
            print(f"Usage: {cmd} NAME LITERAL", file=sys.stderr)
            return True

        try:
            value = literal_value(literal.strip())
            if cmd == "/const":
                state.env.set_readonly(name, value)
            else:
                state.env.set(name, value)
        except CondexprError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return True

        print(f"{name} = {value!r}")
        return True

    if cmd == "/env":
        names = list(state.env.names())
        if not names:
            print("(no bindings)")
        for name in names:
            value, _ = state.env.get(name)
            marker = " (const)" if state.env.is_readonly(name) else ""
            print(f"{name} = {value!r}{marker}")
        return True

    if cmd == "/tree":
        flag = _toggle(arg, state.show_tree)
        if flag is None:
            print("Usage: /tree [on|off]", file=sys.stderr)
            return True
        state.show_tree = flag
        print(f"AST dump: {'on' if flag else 'off'}")
        return True

    if cmd == "/reset":
        state.reset()
        print("Environment reset.")
        return True

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/py-traceback":
        flag = _toggle(arg, debug_py_trace_enabled())
        if flag is None:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        set_debug_py_trace(flag)
        state_text = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {state_text}")
        return True

    if cmd == "/help":
        for name, (desc, hint) in _SLASH_CMDS.items():
            print(f"{(name + ' ' + hint).strip():<28} {desc}")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def repl_eval(text: str, state: ReplState) -> CxValue:
    """Compile and evaluate one line against the REPL environment."""
    condition = compile_condition(text)
    if state.show_tree:
        print(pretty(condition.program), end="")
    return condition.evaluate(state.env)


def process_line(text: str, state: ReplState) -> Optional[str]:
    """One REPL step. Returns the text to print on stdout, or None."""
    text = _normalize(text)
    if not text.strip():
        return None

    if handle_slash(text, state):
        return None

    try:
        result = repl_eval(text, state)
    except ConditionSyntaxError as exc:
        for message in exc.errors:
            print(f"Error: {message}", file=sys.stderr)
        return None
    except CondexprError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        if debug_py_trace_enabled():
            print("\nPython traceback:", file=sys.stderr)
            print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")
        return None

    return repr(result)


def repl() -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    configure_logging()
    init_stdlib()
    state = ReplState()

    session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        lexer=ConditionLexer(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
    )

    print("condexpr repl (Ctrl-D to exit, /help for commands)")

    while True:
        try:
            text = session.prompt(">>> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        output = process_line(text, state)
        if output is not None:
            print(output)


if __name__ == "__main__":
    repl()
