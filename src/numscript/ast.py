"""Syntax-tree nodes consumed by the numscript evaluator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Operator(str, Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULO = "%"
    POWER = "^"
    EQUALS = "=="
    GREATER_THAN = ">"
    LESS_THAN = "<"
    GREATER_THAN_OR_EQUALS = ">="
    LESS_THAN_OR_EQUALS = "<="


@dataclass(frozen=True)
class NumberLiteral:
    value: float
    imaginary: bool = False


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class Operation:
    left: "Node"
    operator: Operator
    right: "Node"


@dataclass(frozen=True)
class FunctionCall:
    name: str
    arguments: tuple["Node", ...] = ()


@dataclass(frozen=True)
class FunctionDeclaration:
    name: str
    parameters: tuple[str, ...]
    body: "Node"


@dataclass(frozen=True)
class VariableDeclaration:
    name: str
    expression: "Node"


@dataclass(frozen=True)
class Conditional:
    predicate: "Node"
    if_true: "Node"
    if_false: "Node"


@dataclass(frozen=True)
class Range:
    first: "Node"
    second: "Node"
    step: "Node"


@dataclass(frozen=True)
class Loop:
    variable: str
    range: Range
    body: "Node"


@dataclass(frozen=True)
class Assignment:
    targets: tuple[str, ...]
    expression: "Node"


@dataclass(frozen=True)
class Factorial:
    expression: "Node"


@dataclass(frozen=True)
class Tree:
    nodes: tuple["Node", ...] = ()


@dataclass(frozen=True)
class ArrayLiteral:
    items: tuple["Node", ...] = ()


@dataclass(frozen=True)
class Index:
    array: "Node"
    index: "Node"


Declaration = Union[FunctionDeclaration, VariableDeclaration]
Node = Union[
    NumberLiteral,
    Identifier,
    Operation,
    FunctionCall,
    FunctionDeclaration,
    VariableDeclaration,
    Conditional,
    Loop,
    Assignment,
    Factorial,
    Tree,
    ArrayLiteral,
    Index,
    Range,
]
