"""Built-in functions registered into the default builtin registry."""

from __future__ import annotations

from typing import List

from .runtime import (
    BuiltinRegistry, DEFAULT_BUILTINS, CxInteger, CxIntArray, CxString, CxStrArray,
    CxValue, ObjectType, Signature, new_error,
)

LEN_PROTOTYPES: List[Signature] = [
    ((ObjectType.STRING,), (ObjectType.INTEGER,)),
    ((ObjectType.ARRAY_STRING,), (ObjectType.INTEGER,)),
    ((ObjectType.ARRAY_INTEGER,), (ObjectType.INTEGER,)),
]

def std_len(args: List[CxValue]) -> CxValue:
    if len(args) != 1:
        return new_error("wrong number of arguments to `len`. got=%d, want=1", len(args))

    match args[0]:
        case CxString(value=s):
            return CxInteger(len(s))
        case CxStrArray(items=items) | CxIntArray(items=items):
            return CxInteger(len(items))
        case other:
            return new_error("argument to `len` not supported, got %s", other.kind)

def install(registry: BuiltinRegistry) -> None:
    registry.register("len", std_len, LEN_PROTOTYPES)

install(DEFAULT_BUILTINS)
