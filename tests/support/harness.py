from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Mapping, Optional, Tuple

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

from condexpr.lexer_rd import Lexer, tokenize
from condexpr.parse_lark import parse_with_lark
from condexpr.parser_rd import parse_source as parse_rd
from condexpr.runner import compile_condition
from condexpr.runtime import (
    ConditionSyntaxError,
    CxBool,
    CxError,
    CxInteger,
    CxIntArray,
    CxNull,
    CxString,
    CxStrArray,
    Environment,
)
from condexpr.token_types import TT
from condexpr.tree import Program

RuntimeExpectation = Optional[Tuple[str, object]]

KEYWORDS = Lexer.KEYWORDS


def token_types(source: str) -> List[TT]:
    """Token kinds of source, without the trailing EOF."""
    return [tok.type for tok in tokenize(source) if tok.type != TT.EOF]


def parse_ok(source: str) -> Program:
    """Parse with the RD parser and assert there were no errors."""
    program, errors = parse_rd(source)
    assert errors == [], f"unexpected errors for {source!r}: {errors}"
    return program


def parse_errors(source: str) -> List[str]:
    """Parse with the RD parser and assert at least one error was reported."""
    _, errors = parse_rd(source)
    assert errors, f"expected errors for {source!r}"
    return errors


def parse_both(source: str) -> Tuple[Program, Program]:
    """Parse with both front ends, asserting each succeeds."""
    rd = parse_ok(source)
    lark_program, errors = parse_with_lark(source)
    assert errors == [], f"lark errors for {source!r}: {errors}"
    return rd, lark_program


def make_env(values: Optional[Mapping[str, object]] = None) -> Environment:
    return Environment.from_mapping(values or {})


def verify_result(value: object, kind: str, expected: object) -> None:
    """Assert runtime result shape/value."""
    match kind:
        case "int":
            assert isinstance(
                value, CxInteger
            ), f"expected CxInteger, got {type(value).__name__}"
            assert value.value == expected, f"expected {expected}, got {value.value}"
            return
        case "string":
            assert isinstance(
                value, CxString
            ), f"expected CxString, got {type(value).__name__}"
            assert (
                value.value == expected
            ), f"expected {expected!r}, got {value.value!r}"
            return
        case "bool":
            assert isinstance(
                value, CxBool
            ), f"expected CxBool, got {type(value).__name__}"
            assert value.value is expected, f"expected {expected}, got {value.value}"
            return
        case "int_array":
            assert isinstance(
                value, CxIntArray
            ), f"expected CxIntArray, got {type(value).__name__}"
            assert list(value.items) == list(expected)
            return
        case "str_array":
            assert isinstance(
                value, CxStrArray
            ), f"expected CxStrArray, got {type(value).__name__}"
            assert list(value.items) == list(expected)
            return
        case "null":
            assert isinstance(
                value, CxNull
            ), f"expected CxNull, got {type(value).__name__}"
            return
        case "error":
            assert isinstance(
                value, CxError
            ), f"expected CxError, got {type(value).__name__}: {value!r}"
            assert (
                str(expected) in value.message
            ), f"expected {expected!r} in {value.message!r}"
            return
        case _:
            raise AssertionError(f"unknown expectation kind {kind}")


def run_runtime_case(
    source: str,
    expectation: RuntimeExpectation,
    expected_exc: Optional[type],
    env: Optional[Mapping[str, object]] = None,
) -> None:
    """Compile and evaluate one scenario with optional expected exception."""
    if expected_exc is not None:
        with pytest.raises(expected_exc):
            compile_condition(source).evaluate(make_env(env))
        return

    result = compile_condition(source).evaluate(make_env(env))
    if expectation is not None:
        verify_result(result, expectation[0], expectation[1])


__all__ = [
    "ConditionSyntaxError",
    "KEYWORDS",
    "RuntimeExpectation",
    "make_env",
    "parse_both",
    "parse_errors",
    "parse_ok",
    "run_runtime_case",
    "token_types",
    "verify_result",
]
