"""AST node classes shared by the parser, checker and evaluator.

Nodes are frozen dataclasses. ``render()`` produces source text that parses
back to an equivalent node; ``to_lark_tree()`` converts a node into a
``lark.Tree`` for ``pretty()`` dumps.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from lark import Token, Tree
from typing_extensions import TypeAlias


@dataclass(frozen=True)
class Identifier:
    name: str

    def render(self) -> str:
        return self.name


@dataclass(frozen=True)
class Integer:
    value: int

    def render(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Boolean:
    value: bool

    def render(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class String:
    value: str

    def render(self) -> str:
        return f'"{self.value}"'


@dataclass(frozen=True)
class ArrayInteger:
    values: Tuple[int, ...]

    def render(self) -> str:
        return "[" + ",".join(str(v) for v in self.values) + "]"


@dataclass(frozen=True)
class ArrayString:
    values: Tuple[str, ...]

    def render(self) -> str:
        return "[" + ",".join(f'"{v}"' for v in self.values) + "]"


@dataclass(frozen=True)
class PrefixExpression:
    operator: str
    operand: 'Expression'

    def render(self) -> str:
        return f"({self.operator}{self.operand.render()})"


@dataclass(frozen=True)
class InfixExpression:
    left: 'Expression'
    operator: str
    right: 'Expression'

    def render(self) -> str:
        return f"({self.left.render()} {self.operator} {self.right.render()})"


@dataclass(frozen=True)
class CallExpression:
    function: 'Expression'
    arguments: Tuple['Expression', ...]

    def render(self) -> str:
        args = ", ".join(arg.render() for arg in self.arguments)
        return f"{self.function.render()}({args})"


Expression: TypeAlias = Union[
    Identifier,
    Integer,
    Boolean,
    String,
    ArrayInteger,
    ArrayString,
    PrefixExpression,
    InfixExpression,
    CallExpression,
]


@dataclass(frozen=True)
class Program:
    """Root node. ``expression`` is None when parsing produced nothing usable."""
    expression: Optional[Expression]

    def render(self) -> str:
        return self.expression.render() if self.expression is not None else ""


Node: TypeAlias = Union[Program, Expression]

LITERAL_TYPES = (Integer, Boolean, String, ArrayInteger, ArrayString)


def is_literal(node: Optional[Node]) -> bool:
    return isinstance(node, LITERAL_TYPES)


def to_lark_tree(node: Node) -> Union[Tree, Token]:
    """Mirror an AST as lark Tree/Token nodes (used for pretty dumps)."""
    match node:
        case Program(expression=expr):
            return Tree('program', [to_lark_tree(expr)] if expr is not None else [])
        case Identifier(name=name):
            return Token('IDENT', name)
        case Integer(value=value):
            return Token('INT', str(value))
        case Boolean():
            return Token('TRUE' if node.value else 'FALSE', node.render())
        case String(value=value):
            return Token('STRING', value)
        case ArrayInteger(values=values):
            return Tree('array_integer', [Token('INT', str(v)) for v in values])
        case ArrayString(values=values):
            return Tree('array_string', [Token('STRING', v) for v in values])
        case PrefixExpression(operator=op, operand=operand):
            return Tree('prefix', [Token('OP', op), to_lark_tree(operand)])
        case InfixExpression(left=left, operator=op, right=right):
            return Tree('infix', [to_lark_tree(left), Token('OP', op), to_lark_tree(right)])
        case CallExpression(function=fn, arguments=args):
            return Tree('call', [to_lark_tree(fn), Tree('args', [to_lark_tree(a) for a in args])])
        case _:
            raise TypeError(f"not an AST node: {type(node).__name__}")


def pretty(node: Node) -> str:
    result = to_lark_tree(node)
    if isinstance(result, Tree):
        return result.pretty()
    return f"{result.type}\t{result.value!r}\n"
