from __future__ import annotations

import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple, Union

from .checker import check_program
from .eval.helpers import is_truthy
from .evaluator import eval_expr, eval_node
from .parse_lark import parse_with_lark
from .parser_rd import parse_source
from .runtime import (
    BuiltinRegistry,
    ConditionRuntimeError,
    ConditionSyntaxError,
    CondexprError,
    CxValue,
    Environment,
    ObjectType,
    init_stdlib,
    is_error,
)
from .tree import Program, is_literal, pretty
from .utils import configure_logging, debug_py_trace_enabled

EnvLike = Union[Environment, Mapping[str, object], None]

# ---------------- Public API ----------------

def parse(text: str, builtins: Optional[BuiltinRegistry] = None) -> Tuple[Program, List[str]]:
    """Lex, parse and type check. A non-empty error list means: do not evaluate."""
    return parse_source(text, builtins)

def check(program: Program, builtins: Optional[BuiltinRegistry] = None) -> Tuple[ObjectType, List[str]]:
    return check_program(program, builtins)

def evaluate(program: Program, env: EnvLike = None, builtins: Optional[BuiltinRegistry] = None) -> CxValue:
    return eval_expr(program, _as_environment(env), builtins)

def _as_environment(env: EnvLike) -> Environment:
    if env is None:
        return Environment()
    if isinstance(env, Environment):
        return env
    return Environment.from_mapping(env)

@dataclass(frozen=True)
class Condition:
    """A parsed and type checked condition, reusable across environments."""

    source: str
    program: Program
    builtins: Optional[BuiltinRegistry] = None

    def evaluate(self, env: EnvLike = None) -> CxValue:
        return evaluate(self.program, env, self.builtins)

    def test(self, env: EnvLike = None) -> bool:
        """Truthiness of the result; an error value raises ConditionRuntimeError."""
        result = self.evaluate(env)
        if is_error(result):
            raise ConditionRuntimeError(result.message)
        return is_truthy(result)

    def __str__(self) -> str:
        return self.program.render()

def compile_condition(text: str, builtins: Optional[BuiltinRegistry] = None, *, use_lark: bool = False) -> Condition:
    program, errors = parse_with_lark(text, builtins) if use_lark else parse_source(text, builtins)
    if errors:
        raise ConditionSyntaxError(errors, source=text)
    return Condition(text, program, builtins)

def literal_value(text: str) -> CxValue:
    """Runtime value of a single literal written in condition syntax, e.g. `[1,2]`."""
    program, errors = parse_source(text)
    if errors:
        raise ConditionSyntaxError(errors, source=text)

    if not is_literal(program.expression):
        raise ConditionSyntaxError([f"expected a literal value, got {text!r}"], source=text)

    return eval_node(program.expression, Environment())

# ---------------- Command line ----------------

USAGE = "usage: condexpr [--set NAME=LITERAL] [--const NAME=LITERAL] [--tree] [--lark] EXPR|FILE|-"

class UsageError(CondexprError):
    """Bad command-line arguments or input."""

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise UsageError("No input provided on stdin")
        return data

    candidate = Path(arg)
    if candidate.is_file():
        return candidate.read_text(encoding="utf-8")

    return arg

def _parse_binding(binding: str, flag: str) -> Tuple[str, CxValue]:
    name, sep, literal = binding.partition("=")
    name = name.strip()
    if not sep or not name:
        raise UsageError(f"{flag} expects NAME=LITERAL, got {binding!r}")

    return name, literal_value(literal)

def run(
    src: str,
    bindings: Sequence[Tuple[str, str]] = (),
    constants: Sequence[Tuple[str, str]] = (),
    use_lark: bool = False,
) -> CxValue:
    """Compile and evaluate src with NAME=LITERAL style bindings."""
    init_stdlib()

    env = Environment()
    for name, literal in bindings:
        env.set(name, literal_value(literal))
    for name, literal in constants:
        env.set_readonly(name, literal_value(literal))

    return compile_condition(src, use_lark=use_lark).evaluate(env)

def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point. Exit status: 0 truthy, 1 falsy, 2 on errors."""
    configure_logging()

    args = list(sys.argv[1:] if argv is None else argv)
    env = Environment()
    show_tree = False
    use_lark = False
    arg = None
    it = iter(args)

    try:
        for token in it:
            if token in ("-h", "--help"):
                print(USAGE)
                return 0

            if token == "--tree":
                show_tree = True
                continue

            if token == "--lark":
                use_lark = True
                continue

            flag, eq, inline = token.partition("=")
            if flag in ("--set", "--const"):
                if eq:
                    binding = inline
                else:
                    try:
                        binding = next(it)
                    except StopIteration:
                        raise UsageError(f"{flag} flag requires NAME=LITERAL") from None

                name, value = _parse_binding(binding, flag)
                if flag == "--const":
                    env.set_readonly(name, value)
                else:
                    env.set(name, value)
                continue

            if arg is None:
                arg = token
            else:
                raise UsageError(f"Unexpected argument: {token}")

        source = _load_source(arg)
        condition = compile_condition(source, use_lark=use_lark)

        if show_tree:
            print(pretty(condition.program), end="")
            return 0

        result = condition.evaluate(env)
    except ConditionSyntaxError as exc:
        for message in exc.errors:
            print(f"Error: {message}", file=sys.stderr)
        return 2
    except CondexprError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        if debug_py_trace_enabled():
            traceback.print_exc()
        return 2

    if is_error(result):
        print(repr(result), file=sys.stderr)
        return 2

    print(repr(result))
    return 0 if is_truthy(result) else 1

if __name__ == "__main__":
    sys.exit(main())
