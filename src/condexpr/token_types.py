"""
Token Types for condition expressions

Shared between lexer and parser to avoid circular dependencies.
"""

import keyword
from typing import Any, Dict
from dataclasses import dataclass
from enum import Enum, IntEnum, auto


class TT(Enum):
    """Token Types - mirrors grammar terminals"""

    # Literals
    INT = auto()
    STRING = auto()
    IDENT = auto()

    # Keywords
    TRUE = auto()
    FALSE = auto()
    IN = auto()

    # Arithmetic
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()

    # Comparison
    EQ = auto()
    NEQ = auto()
    LT = auto()
    LTE = auto()
    GT = auto()
    GTE = auto()
    REGEXMATCH = auto()  # ~=

    # Logical
    AND = auto()
    OR = auto()
    NEG = auto()  # !

    # Punctuation
    LPAR = auto()
    RPAR = auto()
    LSQB = auto()
    RSQB = auto()
    COMMA = auto()
    SEMI = auto()

    # Special
    ILLEGAL = auto()
    EOF = auto()


@dataclass(frozen=True)
class Tok:
    """Token with position info"""

    type: TT
    value: Any
    line: int = 0
    column: int = 0

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"


KEYWORDS: Dict[str, TT] = {
    'true': TT.TRUE,
    'false': TT.FALSE,
    'in': TT.IN,
}

# Host-language keywords are never valid identifiers.
RESERVED = frozenset(kw for kw in keyword.kwlist if kw not in KEYWORDS)


class Precedence(IntEnum):
    """Binding power, lowest to highest."""

    LOWEST = 1
    COND = 2         # && ||
    EQUALS = 3       # == !=
    LESSGREATER = 4  # < <= > >=
    SUM = 5          # + -
    PRODUCT = 6      # * / in
    PREFIX = 7       # !x
    CALL = 8         # f(x)


PRECEDENCES: Dict[TT, Precedence] = {
    TT.AND: Precedence.COND,
    TT.OR: Precedence.COND,
    TT.EQ: Precedence.EQUALS,
    TT.NEQ: Precedence.EQUALS,
    TT.LT: Precedence.LESSGREATER,
    TT.LTE: Precedence.LESSGREATER,
    TT.GT: Precedence.LESSGREATER,
    TT.GTE: Precedence.LESSGREATER,
    TT.PLUS: Precedence.SUM,
    TT.MINUS: Precedence.SUM,
    TT.STAR: Precedence.PRODUCT,
    TT.SLASH: Precedence.PRODUCT,
    TT.IN: Precedence.PRODUCT,
    TT.LPAR: Precedence.CALL,
}

# Token type -> operator spelling used in AST nodes and prototype tables.
OPERATOR_TEXT: Dict[TT, str] = {
    TT.AND: '&&',
    TT.OR: '||',
    TT.EQ: '==',
    TT.NEQ: '!=',
    TT.LT: '<',
    TT.LTE: '<=',
    TT.GT: '>',
    TT.GTE: '>=',
    TT.PLUS: '+',
    TT.MINUS: '-',
    TT.STAR: '*',
    TT.SLASH: '/',
    TT.IN: 'in',
    TT.NEG: '!',
}
