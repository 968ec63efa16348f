"""Condition expressions: lex, parse, type check and evaluate boolean predicates."""

from .runtime import (
    DEFAULT_BUILTINS,
    BuiltinRegistry,
    BuiltinRegistryError,
    ConditionRuntimeError,
    ConditionSyntaxError,
    CondexprError,
    CxBool,
    CxBuiltin,
    CxError,
    CxInteger,
    CxIntArray,
    CxNull,
    CxString,
    CxStrArray,
    CxValue,
    Environment,
    ObjectType,
    ReadOnlyBindingError,
    builtin,
    from_python,
    init_stdlib,
    new_registry,
    register_builtin,
    to_python,
)
from .parse_lark import parse_with_lark
from .runner import Condition, check, compile_condition, evaluate, literal_value, parse

__all__ = [
    "DEFAULT_BUILTINS",
    "BuiltinRegistry",
    "BuiltinRegistryError",
    "Condition",
    "ConditionRuntimeError",
    "ConditionSyntaxError",
    "CondexprError",
    "CxBool",
    "CxBuiltin",
    "CxError",
    "CxInteger",
    "CxIntArray",
    "CxNull",
    "CxString",
    "CxStrArray",
    "CxValue",
    "Environment",
    "ObjectType",
    "ReadOnlyBindingError",
    "builtin",
    "check",
    "compile_condition",
    "evaluate",
    "from_python",
    "init_stdlib",
    "literal_value",
    "new_registry",
    "parse",
    "parse_with_lark",
    "register_builtin",
    "to_python",
]
