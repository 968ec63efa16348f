from __future__ import annotations

from typing import Callable, Dict

from ..runtime import (
    FALSE,
    CxBool,
    CxInteger,
    CxIntArray,
    CxString,
    CxStrArray,
    CxValue,
    native_bool,
    new_error,
)
from .helpers import is_truthy, trunc_div, wrap_int64

def eval_prefix(op: str, operand: CxValue) -> CxValue:
    match op:
        case '!':
            return eval_bang(operand)
        case _:
            return new_error("unknown operator: %s%s", op, operand.kind)

def eval_bang(operand: CxValue) -> CxValue:
    # Compare by value; a non-boolean operand negates to false
    if isinstance(operand, CxBool):
        return native_bool(not operand.value)
    return FALSE

def eval_infix(op: str, left: CxValue, right: CxValue) -> CxValue:
    # Same-kind int and string pairs own every operator, && and || included
    match left, right:
        case CxInteger(value=a), CxInteger(value=b):
            return eval_integer_infix(op, a, b)
        case CxString(value=a), CxString(value=b):
            return eval_string_infix(op, a, b)

    match op:
        case '&&':
            return native_bool(is_truthy(left) and is_truthy(right))
        case '||':
            return native_bool(is_truthy(left) or is_truthy(right))
        case 'in':
            return eval_membership(left, right)

    match left, right:
        case CxBool(value=a), CxBool(value=b) if op in ('==', '!='):
            return native_bool((a == b) == (op == '=='))
        case _:
            return unknown_operator(op, left, right)

def eval_membership(left: CxValue, right: CxValue) -> CxValue:
    match left, right:
        case CxInteger(value=needle), CxIntArray(items=items):
            return CxBool(needle in items)
        case CxString(value=needle), CxStrArray(items=items):
            return CxBool(needle in items)
        case _:
            return unknown_operator('in', left, right)

_INT_ARITHMETIC: Dict[str, Callable[[int, int], int]] = {
    '+': lambda a, b: a + b,
    '-': lambda a, b: a - b,
    '*': lambda a, b: a * b,
}

_INT_COMPARE: Dict[str, Callable[[int, int], bool]] = {
    '<': lambda a, b: a < b,
    '<=': lambda a, b: a <= b,
    '>': lambda a, b: a > b,
    '>=': lambda a, b: a >= b,
    '==': lambda a, b: a == b,
    '!=': lambda a, b: a != b,
}

def eval_integer_infix(op: str, a: int, b: int) -> CxValue:
    if op in _INT_ARITHMETIC:
        return CxInteger(wrap_int64(_INT_ARITHMETIC[op](a, b)))

    if op == '/':
        if b == 0:
            return new_error("division by zero")
        return CxInteger(wrap_int64(trunc_div(a, b)))

    compare = _INT_COMPARE.get(op)
    if compare is None:
        return new_error("unknown operator: INTEGER %s INTEGER", op)

    return native_bool(compare(a, b))

def eval_string_infix(op: str, a: str, b: str) -> CxValue:
    match op:
        case '+':
            return CxString(a + b)
        # Ordering compares lengths, not lexicographic order
        case '<':
            return native_bool(len(a) < len(b))
        case '<=':
            return native_bool(len(a) <= len(b))
        case '>':
            return native_bool(len(a) > len(b))
        case '>=':
            return native_bool(len(a) >= len(b))
        case '==':
            return native_bool(a == b)
        case '!=':
            return native_bool(a != b)
        case _:
            return new_error("unknown operator: STRING %s STRING", op)

def unknown_operator(op: str, left: CxValue, right: CxValue) -> CxValue:
    return new_error("unknown operator: %s %s %s", left.kind, op, right.kind)
