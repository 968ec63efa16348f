"""
Recursive Descent Parser for condition expressions

Structure:
- Lexer: Token stream from source
- Parser: Pratt (precedence climbing) parsing with prefix/infix handler tables
- Checker: run over the finished tree, sharing the parser's error list

The parser never raises on malformed input. Problems are appended to
``errors`` and parsing continues best-effort; a non-empty error list means
the condition must not be evaluated.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Tuple

from .checker import TypeChecker
from .runtime import INT64_MAX, INT64_MIN, BuiltinRegistry
from .token_types import OPERATOR_TEXT, PRECEDENCES, TT, Precedence, Tok
from .tree import (
    ArrayInteger, ArrayString, Boolean, CallExpression, Expression, Identifier,
    InfixExpression, Integer, PrefixExpression, Program, String,
)

logger = logging.getLogger(__name__)

NESTING_ERROR = "expression nested too deeply"

PrefixFn = Callable[[], Optional[Expression]]
InfixFn = Callable[[Expression], Optional[Expression]]

# ============================================================================
# Parser
# ============================================================================

class Parser:
    """
    Pratt parser for a single condition expression.

    Expression precedence (lowest to highest):
    1. && ||
    2. == !=
    3. < <= > >=
    4. + -
    5. * / in
    6. prefix !
    7. call f(...)
    """

    def __init__(self, tokens: List[Tok], builtins: Optional[BuiltinRegistry] = None):
        self.tokens = tokens
        self.pos = 0
        self.current = tokens[0] if tokens else Tok(TT.EOF, '', 0, 0)
        self.errors: List[str] = []
        self.builtins = builtins

        self.prefix_fns: Dict[TT, PrefixFn] = {
            TT.IDENT: self.parse_identifier,
            TT.INT: self.parse_integer,
            TT.STRING: self.parse_string,
            TT.TRUE: self.parse_boolean,
            TT.FALSE: self.parse_boolean,
            TT.LSQB: self.parse_array,
            TT.NEG: self.parse_prefix_expression,
            TT.LPAR: self.parse_grouped_expression,
        }

        self.infix_fns: Dict[TT, InfixFn] = {
            op: self.parse_infix_expression
            for op in (TT.EQ, TT.NEQ, TT.LT, TT.LTE, TT.GT, TT.GTE, TT.IN, TT.AND, TT.OR,
                       TT.PLUS, TT.MINUS, TT.STAR, TT.SLASH)
        }
        self.infix_fns[TT.LPAR] = self.parse_call_expression

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def peek(self, offset: int = 0) -> Tok:
        """Look ahead at token"""
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return Tok(TT.EOF, '', 0, 0)

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        prev = self.current
        self.pos += 1
        self.current = self.peek()
        return prev

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT) -> bool:
        """Consume token of expected type or record an error"""
        if self.check(token_type):
            self.advance()
            return True

        self.error(f"expected next token to be {token_type.name}, got {describe(self.current)} instead")
        return False

    def error(self, message: str) -> None:
        logger.debug("parse error: %s", message)
        self.errors.append(message)

    def current_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.current.type, Precedence.LOWEST)

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse_program(self) -> Program:
        """Parse exactly one expression followed by end of input, then type check."""
        if self.check(TT.EOF):
            self.error("empty condition expression")
            return Program(None)

        try:
            expr = self.parse_expression(Precedence.LOWEST)

            if not self.check(TT.EOF):
                self.error(f"unexpected token {describe(self.current)} after expression")

            program = Program(expr)
            TypeChecker(self.errors, self.builtins).check_type(program)
        except RecursionError:
            self.error(NESTING_ERROR)
            return Program(None)

        return program

    def parse_expression(self, precedence: Precedence) -> Optional[Expression]:
        prefix = self.prefix_fns.get(self.current.type)
        if prefix is None:
            self.no_prefix_fn_error(self.advance())
            return None

        left = prefix()

        while not self.check(TT.EOF) and precedence < self.current_precedence():
            infix = self.infix_fns.get(self.current.type)
            if infix is None:
                return left
            if left is None:
                # Keep consuming so the error list reflects the whole input
                self.advance()
                self.parse_expression(self.current_precedence())
                continue
            left = infix(left)

        return left

    def no_prefix_fn_error(self, tok: Tok) -> None:
        if tok.type == TT.ILLEGAL:
            self.error(f"illegal token {tok.value!r} at line {tok.line}, col {tok.column}")
            return
        self.error(f"no prefix parse function for {tok.type.name} found")

    # ========================================================================
    # Prefix Handlers
    # ========================================================================

    def parse_identifier(self) -> Expression:
        return Identifier(self.advance().value)

    def parse_integer(self) -> Optional[Expression]:
        tok = self.advance()
        value = self.integer_value(tok)
        return Integer(value) if value is not None else None

    def integer_value(self, tok: Tok) -> Optional[int]:
        try:
            return int_literal(tok.value)
        except ValueError as err:
            self.error(str(err))
            return None

    def parse_string(self) -> Expression:
        return String(self.advance().value)

    def parse_boolean(self) -> Expression:
        return Boolean(self.advance().type == TT.TRUE)

    def parse_array(self) -> Optional[Expression]:
        """Homogeneous literal array: [1, 2, 3] or ["a", "b"]"""
        self.advance()  # [

        if self.match(TT.RSQB):
            self.error("empty array is not allowed")
            return None

        items: List[Tok] = []
        while True:
            if not self.check(TT.INT, TT.STRING):
                self.error(f"unknown array element type {describe(self.current)}")
                self.skip_past(TT.RSQB)
                return None

            items.append(self.advance())

            if self.match(TT.COMMA):
                continue
            if not self.expect(TT.RSQB):
                self.skip_past(TT.RSQB)
                return None
            break

        kinds = {tok.type for tok in items}
        if len(kinds) > 1:
            rendered = ", ".join(describe(tok) for tok in items)
            self.error(f"mixed-type array literal [{rendered}]")
            return None

        if TT.STRING in kinds:
            return ArrayString(tuple(tok.value for tok in items))

        values = [self.integer_value(tok) for tok in items]
        if any(v is None for v in values):
            return None
        return ArrayInteger(tuple(values))

    def parse_prefix_expression(self) -> Optional[Expression]:
        op = self.advance()
        operand = self.parse_expression(Precedence.PREFIX)
        if operand is None:
            return None
        return PrefixExpression(OPERATOR_TEXT[op.type], operand)

    def parse_grouped_expression(self) -> Optional[Expression]:
        self.advance()  # (
        expr = self.parse_expression(Precedence.LOWEST)
        if not self.expect(TT.RPAR):
            return None
        return expr

    # ========================================================================
    # Infix Handlers
    # ========================================================================

    def parse_infix_expression(self, left: Expression) -> Optional[Expression]:
        op = self.advance()
        precedence = PRECEDENCES[op.type]
        # Same precedence on the right: left-associative
        right = self.parse_expression(precedence)
        if right is None:
            return None
        return InfixExpression(left, OPERATOR_TEXT[op.type], right)

    def parse_call_expression(self, function: Expression) -> Optional[Expression]:
        self.advance()  # (
        arguments = self.parse_call_arguments()
        if arguments is None:
            return None
        return CallExpression(function, arguments)

    def parse_call_arguments(self) -> Optional[Tuple[Expression, ...]]:
        """Comma separated argument list; the opening paren is already consumed"""
        if self.match(TT.RPAR):
            return ()

        args: List[Optional[Expression]] = [self.parse_expression(Precedence.LOWEST)]
        while self.match(TT.COMMA):
            args.append(self.parse_expression(Precedence.LOWEST))

        if not self.expect(TT.RPAR):
            return None

        if any(arg is None for arg in args):
            return None
        return tuple(args)

    # ========================================================================
    # Recovery
    # ========================================================================

    def skip_past(self, token_type: TT) -> None:
        while not self.check(TT.EOF):
            if self.advance().type == token_type:
                return


def int_literal(text: str) -> int:
    """Convert INT token text to a signed 64-bit value; ValueError on failure."""
    try:
        value = int(text, 10) if text.isdigit() else int(text, 0)
    except ValueError:
        raise ValueError(f"could not parse {text!r} as integer") from None

    if not INT64_MIN <= value <= INT64_MAX:
        raise ValueError(f"integer literal {text} out of 64-bit range")

    return value


def describe(tok: Tok) -> str:
    if tok.type == TT.EOF:
        return "EOF"
    return f"{tok.type.name} {tok.value!r}"


# ============================================================================
# Entry Points
# ============================================================================

def parse_source(source: str, builtins: Optional[BuiltinRegistry] = None) -> Tuple[Program, List[str]]:
    """
    Parse and type check condition source.

    Returns the program together with the accumulated error list.
    """
    from .lexer_rd import tokenize

    parser = Parser(tokenize(source), builtins=builtins)
    program = parser.parse_program()
    return program, parser.errors
