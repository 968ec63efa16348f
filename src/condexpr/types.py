from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple
from typing_extensions import TypeAlias, TypeGuard


class ObjectType(str, Enum):
    INTEGER = "INTEGER"
    STRING = "STRING"
    BOOLEAN = "BOOLEAN"
    ARRAY_INTEGER = "ARRAY_INTEGER"
    ARRAY_STRING = "ARRAY_STRING"
    FUNCTION = "FUNCTION"
    NULL = "NULL"
    ERROR = "ERROR"
    # Checker-only wildcard for identifiers; never carried by a runtime value
    IDENT = "IDENT"

    def __str__(self) -> str:
        return self.value

# ---------- Value Model ----------

@dataclass(frozen=True)
class CxNull:
    @property
    def kind(self) -> ObjectType:
        return ObjectType.NULL

    def __repr__(self) -> str:
        return "null"

@dataclass(frozen=True)
class CxInteger:
    value: int

    @property
    def kind(self) -> ObjectType:
        return ObjectType.INTEGER

    def __repr__(self) -> str:
        return str(self.value)

@dataclass(frozen=True)
class CxString:
    value: str

    @property
    def kind(self) -> ObjectType:
        return ObjectType.STRING

    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass(frozen=True)
class CxBool:
    value: bool

    @property
    def kind(self) -> ObjectType:
        return ObjectType.BOOLEAN

    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass(frozen=True)
class CxIntArray:
    items: Tuple[int, ...]

    @property
    def kind(self) -> ObjectType:
        return ObjectType.ARRAY_INTEGER

    def __repr__(self) -> str:
        return "[" + ", ".join(str(x) for x in self.items) + "]"

@dataclass(frozen=True)
class CxStrArray:
    items: Tuple[str, ...]

    @property
    def kind(self) -> ObjectType:
        return ObjectType.ARRAY_STRING

    def __repr__(self) -> str:
        return "[" + ", ".join(f'"{x}"' for x in self.items) + "]"

@dataclass(frozen=True)
class CxError:
    message: str

    @property
    def kind(self) -> ObjectType:
        return ObjectType.ERROR

    def __repr__(self) -> str:
        return f"error: {self.message}"

BuiltinFn = Callable[[List['CxValue']], 'CxValue']

@dataclass(frozen=True)
class CxBuiltin:
    name: str
    fn: BuiltinFn = field(compare=False)

    @property
    def kind(self) -> ObjectType:
        return ObjectType.FUNCTION

    def __call__(self, args: List['CxValue']) -> 'CxValue':
        return self.fn(args)

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"

CxValue: TypeAlias = (
    CxNull
    | CxInteger
    | CxString
    | CxBool
    | CxIntArray
    | CxStrArray
    | CxError
    | CxBuiltin
)

_CX_VALUE_TYPES: Tuple[type, ...] = (
    CxNull,
    CxInteger,
    CxString,
    CxBool,
    CxIntArray,
    CxStrArray,
    CxError,
    CxBuiltin,
)

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

NULL = CxNull()
TRUE = CxBool(True)
FALSE = CxBool(False)

def native_bool(value: bool) -> CxBool:
    return TRUE if value else FALSE

def is_cx_value(value: object) -> TypeGuard[CxValue]:
    return isinstance(value, _CX_VALUE_TYPES)

def is_error(value: Optional[CxValue]) -> TypeGuard[CxError]:
    return isinstance(value, CxError)

def _ensure_cx_value(value: object) -> CxValue:
    if value is None:
        return NULL
    if is_cx_value(value):
        return value
    raise CondexprTypeError(f"Unexpected value type {type(value).__name__}")

# ---------- Conversion to/from plain Python ----------

def from_python(value: object) -> CxValue:
    """Convert a plain Python value into a runtime value."""
    if is_cx_value(value):
        return value

    if value is None:
        return NULL

    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return native_bool(value)

    if isinstance(value, int):
        return CxInteger(_check_int64(value))

    if isinstance(value, str):
        return CxString(value)

    if isinstance(value, (list, tuple)):
        items = list(value)
        if items and all(isinstance(x, str) for x in items):
            return CxStrArray(tuple(items))
        if items and all(isinstance(x, int) and not isinstance(x, bool) for x in items):
            return CxIntArray(tuple(_check_int64(x) for x in items))
        raise CondexprTypeError("Arrays must be non-empty and hold only ints or only strings")

    raise CondexprTypeError(f"Cannot convert {type(value).__name__} to a condition value")

def _check_int64(value: int) -> int:
    if not INT64_MIN <= value <= INT64_MAX:
        raise CondexprTypeError(f"Integer {value} is out of 64-bit range")
    return value

def to_python(value: CxValue) -> object:
    """Convert a runtime value back into plain Python."""
    match value:
        case CxNull():
            return None
        case CxInteger(value=v) | CxString(value=v) | CxBool(value=v):
            return v
        case CxIntArray(items=items) | CxStrArray(items=items):
            return list(items)
        case CxError(message=msg):
            raise ConditionRuntimeError(msg)
        case CxBuiltin(fn=fn):
            return fn
        case _:
            raise CondexprTypeError(f"Unexpected value type {type(value).__name__}")

# ---------- Environment ----------

class Environment:
    """Name -> value bindings supplied by the host. Read-only names refuse writes."""

    def __init__(self) -> None:
        self.store: Dict[str, CxValue] = {}
        self.readonly: Set[str] = set()

    @classmethod
    def from_mapping(cls, values: Mapping[str, object], constants: Optional[Mapping[str, object]] = None) -> 'Environment':
        env = cls()

        for name, val in values.items():
            env.set(name, from_python(val))

        for name, val in (constants or {}).items():
            env.set_readonly(name, from_python(val))

        return env

    def get(self, name: str) -> Tuple[Optional[CxValue], bool]:
        if name in self.store:
            return self.store[name], True

        return None, False

    def set(self, name: str, val: CxValue) -> CxValue:
        if name in self.readonly:
            raise ReadOnlyBindingError(name)

        self.store[name] = val
        return val

    def set_readonly(self, name: str, val: CxValue) -> CxValue:
        """Bind name and mark it read-only. A writable binding is replaced; a constant is not."""
        if name in self.readonly:
            raise ReadOnlyBindingError(name)

        self.store[name] = val
        self.readonly.add(name)
        return val

    def is_readonly(self, name: str) -> bool:
        return name in self.readonly

    def names(self) -> Iterable[str]:
        return sorted(self.store)

    def __contains__(self, name: object) -> bool:
        return name in self.store

    def __repr__(self) -> str:
        pairs = []

        for name in self.names():
            marker = " (const)" if name in self.readonly else ""
            pairs.append(f"{name}: {self.store[name]!r}{marker}")

        return "Environment{" + ", ".join(pairs) + "}"

# ---------- Exceptions ----------

class CondexprError(Exception):
    """Base class for every error raised by condexpr."""

class CondexprTypeError(CondexprError, TypeError):
    pass

class ConditionSyntaxError(CondexprError):
    def __init__(self, errors: Sequence[str], source: Optional[str] = None):
        self.errors = list(errors)
        self.source = source
        super().__init__("; ".join(self.errors) if self.errors else "invalid condition")

class ConditionRuntimeError(CondexprError):
    pass

class ReadOnlyBindingError(CondexprError):
    def __init__(self, name: str):
        super().__init__(f"Attempting to modify '{name}' denied; it was defined as a constant")
        self.name = name

class BuiltinRegistryError(CondexprError):
    pass
