from __future__ import annotations

import logging
from typing import List, Optional

from .runtime import (
    FALSE,
    TRUE,
    BuiltinRegistry,
    CxBuiltin,
    CxIntArray,
    CxInteger,
    CxString,
    CxStrArray,
    CxValue,
    Environment,
    _ensure_cx_value,
    is_error,
    new_error,
    resolve_registry,
)
from .tree import (
    ArrayInteger, ArrayString, Boolean, CallExpression, Expression, Identifier,
    InfixExpression, Integer, Node, PrefixExpression, Program, String,
)
from .eval.expr import eval_infix, eval_prefix

logger = logging.getLogger(__name__)

# ---------------- Public API ----------------

def eval_expr(ast: Node, env: Optional[Environment] = None, builtins: Optional[BuiltinRegistry] = None) -> CxValue:
    """Evaluate a tree against env; a missing environment means no bindings."""
    registry = resolve_registry(builtins)

    if env is None:
        env = Environment()

    try:
        result = eval_node(ast, env, registry)
    except RecursionError:
        # Hand-built trees never went through the parser's depth check
        result = new_error("expression nested too deeply")

    if is_error(result):
        logger.debug("evaluation produced %r", result)

    return result

# ---------------- Core evaluator ----------------

def eval_node(n: Optional[Node], env: Environment, builtins: Optional[BuiltinRegistry] = None) -> CxValue:
    registry = resolve_registry(builtins)

    match n:
        case Program(expression=expr):
            return eval_node(expr, env, registry)
        case Integer(value=v):
            return CxInteger(v)
        case String(value=s):
            return CxString(s)
        case Boolean(value=b):
            return TRUE if b else FALSE
        case ArrayInteger(values=vals):
            return CxIntArray(vals)
        case ArrayString(values=vals):
            return CxStrArray(vals)
        case Identifier(name=name):
            return eval_identifier(name, env, registry)
        case PrefixExpression(operator=op, operand=operand):
            right = eval_node(operand, env, registry)
            if is_error(right):
                return right
            return eval_prefix(op, right)
        case InfixExpression(left=lhs, operator=op, right=rhs):
            left = eval_node(lhs, env, registry)
            if is_error(left):
                return left

            right = eval_node(rhs, env, registry)
            if is_error(right):
                return right

            return eval_infix(op, left, right)
        case CallExpression(function=fn_node, arguments=arg_nodes):
            return eval_call(fn_node, arg_nodes, env, registry)
        case None:
            return new_error("empty condition expression")
        case _:
            return new_error("unsupported node kind %s", type(n).__name__)

def eval_identifier(name: str, env: Environment, builtins: BuiltinRegistry) -> CxValue:
    val, found = env.get(name)
    if found and val is not None:
        return val

    fn = builtins.get(name)
    if fn is not None:
        return fn

    return new_error("identifier not found: %s", name)

def eval_call(fn_node: Expression, arg_nodes: tuple, env: Environment, builtins: BuiltinRegistry) -> CxValue:
    fn = eval_node(fn_node, env, builtins)
    if is_error(fn):
        return fn

    args = eval_arguments(arg_nodes, env, builtins)
    if len(args) == 1 and is_error(args[0]):
        return args[0]

    if not isinstance(fn, CxBuiltin):
        return new_error("not a function: %s", fn.kind)

    return _ensure_cx_value(fn(args))

def eval_arguments(arg_nodes: tuple, env: Environment, builtins: BuiltinRegistry) -> List[CxValue]:
    """Evaluate left to right; the first error replaces the whole list."""
    out: List[CxValue] = []

    for node in arg_nodes:
        val = eval_node(node, env, builtins)
        if is_error(val):
            return [val]
        out.append(val)

    return out

