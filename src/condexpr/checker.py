"""
Static type checking for condition ASTs.

Types are inferred bottom-up from per-operator and per-function prototype
tables. Identifiers have no type until evaluation, so they check as the
IDENT wildcard, which satisfies every operand requirement.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, List, Optional, Tuple

from .runtime import BuiltinRegistry, ObjectType, resolve_registry
from .tree import (
    ArrayInteger, ArrayString, Boolean, CallExpression, Identifier, InfixExpression,
    Integer, Node, PrefixExpression, Program, String,
)

logger = logging.getLogger(__name__)

INT = ObjectType.INTEGER
STR = ObjectType.STRING
BOOL = ObjectType.BOOLEAN
ARR_INT = ObjectType.ARRAY_INTEGER
ARR_STR = ObjectType.ARRAY_STRING
IDENT = ObjectType.IDENT
ERROR = ObjectType.ERROR

# operator -> allowed operand types
PREFIX_PROTOS: Dict[str, FrozenSet[ObjectType]] = {
    '!': frozenset({BOOL}),
}

# operator -> left type -> (required right type, result type)
InfixProto = Dict[ObjectType, Tuple[ObjectType, ObjectType]]

_ORDERING: InfixProto = {INT: (INT, BOOL), STR: (STR, BOOL)}
_EQUALITY: InfixProto = {INT: (INT, BOOL), STR: (STR, BOOL), BOOL: (BOOL, BOOL)}
_LOGICAL: InfixProto = {BOOL: (BOOL, BOOL)}
_ARITHMETIC: InfixProto = {INT: (INT, INT)}

INFIX_PROTOS: Dict[str, InfixProto] = {
    '>': _ORDERING,
    '>=': _ORDERING,
    '<': _ORDERING,
    '<=': _ORDERING,
    '==': _EQUALITY,
    '!=': _EQUALITY,
    '&&': _LOGICAL,
    '||': _LOGICAL,
    'in': {INT: (ARR_INT, BOOL), STR: (ARR_STR, BOOL)},
    '+': {INT: (INT, INT), STR: (STR, STR)},
    '-': _ARITHMETIC,
    '*': _ARITHMETIC,
    '/': _ARITHMETIC,
}


class TypeChecker:
    """
    Recursive, memo-free type inference over an AST.

    Errors are appended to the shared ``errors`` list. When the list is
    already non-empty on entry, checking returns ERROR without reporting
    anything, so a tree that failed to parse gets no type errors.
    """

    def __init__(self, errors: Optional[List[str]] = None, builtins: Optional[BuiltinRegistry] = None):
        self.errors: List[str] = errors if errors is not None else []
        self.builtins = resolve_registry(builtins)

    def error(self, message: str) -> ObjectType:
        logger.debug("type error: %s", message)
        self.errors.append(message)
        return ERROR

    def check_type(self, node: Optional[Node]) -> ObjectType:
        if self.errors:
            return ERROR

        match node:
            case Program(expression=expr):
                return self.check_type(expr)
            case Integer():
                return INT
            case String():
                return STR
            case Boolean():
                return BOOL
            case ArrayInteger():
                return ARR_INT
            case ArrayString():
                return ARR_STR
            case Identifier():
                return IDENT
            case PrefixExpression():
                return self.check_prefix(node)
            case InfixExpression():
                return self.check_infix(node)
            case CallExpression():
                return self.check_call(node)
            case None:
                return self.error("empty condition expression")
            case _:
                return self.error(f"unsupported node kind {type(node).__name__}")

    def check_prefix(self, node: PrefixExpression) -> ObjectType:
        allowed = PREFIX_PROTOS.get(node.operator)
        if allowed is None:
            return self.error(f"unknown prefix operator '{node.operator}'")

        operand = self.check_type(node.operand)
        if operand == IDENT or operand in allowed:
            return BOOL

        if operand == ERROR:
            return ERROR

        expected = ", ".join(sorted(t.value for t in allowed))
        return self.error(f"prefix operator '{node.operator}' expects {expected}, got {operand}")

    def check_infix(self, node: InfixExpression) -> ObjectType:
        proto = INFIX_PROTOS.get(node.operator)
        if proto is None:
            return self.error(f"unknown infix operator '{node.operator}'")

        left = self.check_type(node.left)
        right = self.check_type(node.right)

        if ERROR in (left, right):
            return ERROR

        if left == IDENT or right == IDENT:
            return _wildcard_result(proto, left, right)

        expected = proto.get(left)
        if expected is None:
            return self.error(f"infix expression {node.render()}: unsupported left operand type {left}")

        want_right, result = expected
        if want_right != right:
            return self.error(
                f"infix operator '{node.operator}' expects right operand of type {want_right}, got {right}"
            )

        return result

    def check_call(self, node: CallExpression) -> ObjectType:
        name = node.function.render()
        overloads = self.builtins.prototypes(name)
        if not overloads:
            return self.error(f"unknown function '{name}'")

        arity = len(node.arguments)
        candidates = [sig for sig in overloads if len(sig[0]) == arity]
        if not candidates:
            arities = " or ".join(sorted({str(len(sig[0])) for sig in overloads}))
            return self.error(f"function '{name}' expects {arities} argument(s), got {arity}")

        actual = [self.check_type(arg) for arg in node.arguments]
        if ERROR in actual:
            return ERROR

        for args, returns in candidates:
            if all(got == IDENT or got == want for want, got in zip(args, actual)):
                return returns[0] if returns else ObjectType.NULL

        shown = ", ".join(t.value for t in actual)
        return self.error(f"no overload of '{name}' accepts argument types ({shown})")


def _wildcard_result(proto: InfixProto, left: ObjectType, right: ObjectType) -> ObjectType:
    """Result type of an operator when one side is only known at runtime."""
    results = {result for _, result in proto.values()}
    if len(results) == 1:
        return results.pop()

    if left != IDENT and left in proto:
        return proto[left][1]

    if right != IDENT:
        narrowed = {result for want, result in proto.values() if want == right}
        if len(narrowed) == 1:
            return narrowed.pop()

    return IDENT


def check_type(node: Node, errors: List[str], builtins: Optional[BuiltinRegistry] = None) -> ObjectType:
    return TypeChecker(errors, builtins).check_type(node)


def check_program(program: Program, builtins: Optional[BuiltinRegistry] = None) -> Tuple[ObjectType, List[str]]:
    """Check a tree on a fresh error list."""
    errors: List[str] = []
    result = TypeChecker(errors, builtins).check_type(program)
    return result, errors
