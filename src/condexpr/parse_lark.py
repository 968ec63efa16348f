"""
Lark front end for condition expressions.

Parses with the reference grammar (grammar.lark, LALR, basic lexer) and
transforms the parse tree into the same AST the hand-written parser builds.
Used for differential testing and selectable from the CLI with --lark.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from lark import Lark, Token, Transformer, UnexpectedInput
from lark.exceptions import VisitError
from lark.visitors import v_args

from .checker import TypeChecker
from .parser_rd import NESTING_ERROR, int_literal
from .runtime import BuiltinRegistry, ConditionSyntaxError
from .token_types import KEYWORDS, RESERVED
from .tree import (
    ArrayInteger, ArrayString, Boolean, CallExpression, Identifier, InfixExpression,
    Integer, PrefixExpression, Program, String,
)

logger = logging.getLogger(__name__)

GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")

_PARSER: Optional[Lark] = None

def _remap_ident(t: Token) -> Token:
    # Only remap exact word matches, never prefixes
    kw = KEYWORDS.get(t.value)
    if kw is not None:
        t.type = kw.name
    return t

def build_parser(grammar_text: Optional[str] = None) -> Lark:
    if grammar_text is None:
        grammar_text = GRAMMAR_PATH.read_text(encoding="utf-8")

    return Lark(
        grammar_text,
        parser="lalr",
        lexer="basic",
        start="start",
        maybe_placeholders=False,
        propagate_positions=True,
        lexer_callbacks={"IDENT": _remap_ident},
    )

def get_parser() -> Lark:
    global _PARSER

    if _PARSER is None:
        _PARSER = build_parser()
    return _PARSER

@v_args(inline=True)
class ToAst(Transformer):
    """Parse tree -> condition AST. Semantic errors raise ConditionSyntaxError."""

    def start(self, expr):
        return Program(expr)

    def identifier(self, tok):
        if tok.value in RESERVED:
            raise ConditionSyntaxError([f"reserved word {tok.value!r} cannot be used as an identifier"])
        return Identifier(tok.value)

    def integer(self, tok):
        return Integer(_int_value(tok))

    def string(self, tok):
        return String(_string_value(tok))

    def true(self, _tok):
        return Boolean(True)

    def false(self, _tok):
        return Boolean(False)

    def empty_array(self):
        raise ConditionSyntaxError(["empty array is not allowed"])

    def array(self, *items):
        kinds = {tok.type for tok in items}
        if len(kinds) > 1:
            rendered = ", ".join(_describe_item(tok) for tok in items)
            raise ConditionSyntaxError([f"mixed-type array literal [{rendered}]"])

        if "STRING" in kinds:
            return ArrayString(tuple(_string_value(tok) for tok in items))
        return ArrayInteger(tuple(_int_value(tok) for tok in items))

    def prefix(self, op, operand):
        return PrefixExpression(op.value, operand)

    def infix(self, left, op, right):
        return InfixExpression(left, op.value, right)

    def call(self, function, args=()):
        return CallExpression(function, tuple(args))

    def args(self, *items):
        return tuple(items)

def _int_value(tok: Token) -> int:
    try:
        return int_literal(tok.value)
    except ValueError as err:
        raise ConditionSyntaxError([str(err)]) from None

def _string_value(tok: Token) -> str:
    text = tok.value[1:]
    return text[:-1] if text.endswith('"') else text

def _describe_item(tok: Token) -> str:
    # Same wording as the hand-written parser: string content without quotes
    value = _string_value(tok) if tok.type == "STRING" else tok.value
    return f"{tok.type} {value!r}"

def _describe_unexpected(err: UnexpectedInput) -> str:
    token = getattr(err, "token", None)
    if getattr(err, "char", None) is not None:
        saw = f"character {err.char!r}"
    elif token is None or token.type == "$END":
        saw = "EOF"
    else:
        saw = f"{token.type} {str(token)!r}"
    return f"line {err.line}, col {err.column}: unexpected {saw}"

def parse_with_lark(source: str, builtins: Optional[BuiltinRegistry] = None) -> Tuple[Program, List[str]]:
    """Parse and type check with the reference grammar; same contract as parse_source."""
    errors: List[str] = []

    if not source.strip():
        errors.append("empty condition expression")
        return Program(None), errors

    try:
        tree = get_parser().parse(source)
        program = ToAst().transform(tree)
    except UnexpectedInput as err:
        errors.append(_describe_unexpected(err))
        return Program(None), errors
    except RecursionError:
        errors.append(NESTING_ERROR)
        return Program(None), errors
    except VisitError as err:
        if isinstance(err.orig_exc, RecursionError):
            errors.append(NESTING_ERROR)
            return Program(None), errors
        if not isinstance(err.orig_exc, ConditionSyntaxError):
            raise
        errors.extend(err.orig_exc.errors)
        return Program(None), errors

    try:
        TypeChecker(errors, builtins).check_type(program)
    except RecursionError:
        errors.append(NESTING_ERROR)
        return Program(None), errors

    logger.debug("lark parse finished with %d error(s)", len(errors))
    return program, errors
