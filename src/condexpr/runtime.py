from __future__ import annotations

import importlib
import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .types import (
    CxNull, CxInteger, CxString, CxBool, CxIntArray, CxStrArray, CxError, CxBuiltin,
    CxValue, ObjectType, Environment, BuiltinFn,
    NULL, TRUE, FALSE, INT64_MIN, INT64_MAX,
    native_bool, is_cx_value, is_error, _ensure_cx_value,
    from_python, to_python,
    CondexprError, CondexprTypeError, ConditionSyntaxError, ConditionRuntimeError,
    ReadOnlyBindingError, BuiltinRegistryError,
)

logger = logging.getLogger(__name__)

# (argument types, return types)
Signature = Tuple[Tuple[ObjectType, ...], Tuple[ObjectType, ...]]

class BuiltinRegistry:
    """
    Named host functions plus the overload signatures the checker uses.

    Each name is written once. After freeze() the registry is read-only, so
    concurrent evaluations may share it without locking.
    """

    def __init__(self) -> None:
        self._functions: Dict[str, CxBuiltin] = {}
        self._prototypes: Dict[str, Tuple[Signature, ...]] = {}
        self._frozen = False

    def register(self, name: str, fn: BuiltinFn, prototypes: Optional[Sequence[Signature]] = None) -> CxBuiltin:
        """
        Add a host function.

        Without prototypes the function is still resolvable as a value at
        runtime, but the checker reports any call to it as an unknown
        function, so parsed conditions cannot call it.
        """
        if self._frozen:
            raise BuiltinRegistryError(f"Cannot register '{name}': builtin registry is frozen")

        if name in self._functions:
            raise BuiltinRegistryError(f"Builtin '{name}' is already registered")

        builtin = CxBuiltin(name=name, fn=fn)
        self._functions[name] = builtin

        if prototypes:
            self._prototypes[name] = tuple(
                (tuple(args), tuple(returns)) for args, returns in prototypes
            )
        else:
            logger.warning("builtin %s registered without prototypes; type checked calls to it will fail", name)

        logger.debug("registered builtin %s with %d prototype(s)", name, len(prototypes or ()))
        return builtin

    def get(self, name: str) -> Optional[CxBuiltin]:
        return self._functions.get(name)

    def prototypes(self, name: str) -> Optional[Tuple[Signature, ...]]:
        return self._prototypes.get(name)

    def names(self) -> List[str]:
        return sorted(self._functions)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, name: object) -> bool:
        return name in self._functions

# Process-wide registry; populated by init_stdlib() and host registrations.
DEFAULT_BUILTINS = BuiltinRegistry()

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load stdlib modules (idempotent) so their registrations run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("condexpr.stdlib")
    _STDLIB_INITIALIZED = True

def new_registry(with_stdlib: bool = True) -> BuiltinRegistry:
    """Fresh registry, e.g. for a host that wants its own function set."""
    registry = BuiltinRegistry()

    if with_stdlib:
        from .stdlib import install
        install(registry)

    return registry

def resolve_registry(builtins: Optional[BuiltinRegistry]) -> BuiltinRegistry:
    if builtins is not None:
        return builtins

    init_stdlib()
    return DEFAULT_BUILTINS

def register_builtin(name: str, fn: BuiltinFn, prototypes: Optional[Sequence[Signature]] = None,
                     registry: Optional[BuiltinRegistry] = None) -> CxBuiltin:
    """Register on registry, or the default one. See BuiltinRegistry.register for prototypes."""
    target = registry if registry is not None else DEFAULT_BUILTINS
    return target.register(name, fn, prototypes)

def builtin(name: str, *, prototypes: Optional[Sequence[Signature]] = None,
            registry: Optional[BuiltinRegistry] = None):
    def dec(fn: BuiltinFn):
        register_builtin(name, fn, prototypes, registry)
        return fn

    return dec

def new_error(fmt: str, *args: object) -> CxError:
    return CxError(fmt % args if args else fmt)
