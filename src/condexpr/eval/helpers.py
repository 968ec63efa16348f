from __future__ import annotations

from ..runtime import CxBool, CxInteger, CxString, CxValue

def is_truthy(val: CxValue) -> bool:
    match val:
        case CxBool(value=b):
            return b
        case CxString(value=s):
            return bool(s)
        case CxInteger(value=num):
            return num != 0
        case _:
            # Arrays, functions, null and error values all count as true
            return True

INT64_MASK = (1 << 64) - 1
INT64_SIGN = 1 << 63

def wrap_int64(value: int) -> int:
    """Reduce an int to signed 64-bit two's complement."""
    value &= INT64_MASK
    return value - (1 << 64) if value & INT64_SIGN else value

def trunc_div(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q
