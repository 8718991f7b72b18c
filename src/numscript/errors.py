"""Structured error types raised while evaluating a syntax tree.

Every error renders (through ``str``) to the exact message text callers see;
the fields keep the context available to programmatic consumers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final


class NumscriptError(Exception):
    """Base class for structured numscript errors."""


class NumscriptRuntimeError(NumscriptError):
    """Any failure raised while evaluating a tree; always terminal for the run."""


_ARTICLES: Final[dict[str, str]] = {
    "number": "a number",
    "vector": "a vector",
    "array": "an array",
}

_COMPARISON_NAMES: Final[dict[str, str]] = {
    ">": "greater-than",
    "<": "less-than",
    ">=": "greater-than-or-equals",
    "<=": "less-than-or-equals",
}


def _with_article(kind: str) -> str:
    return _ARTICLES.get(kind, kind)


def _format_index(index: float) -> str:
    from .values import format_real

    return format_real(index)


@dataclass(eq=False)
class OperatorTypeError(NumscriptRuntimeError):
    """An operator is undefined for the given pair of value kinds."""

    operator: str
    left: str
    right: str
    complex_operand: bool = False

    def __str__(self) -> str:
        left = _with_article(self.left)
        right = _with_article(self.right)
        op = self.operator
        if op == "+":
            return f"cannot add {left} to {right}"
        if op == "-":
            return f"cannot subtract {right} from {left}"
        if op == "*":
            if self.complex_operand:
                return "cannot multiply a vector with a complex number"
            return f"cannot multiply {left} with {right}"
        if op == "/":
            if self.complex_operand:
                return "cannot divide a vector by a complex number"
            return f"cannot divide {left} by {right}"
        if op == "%":
            return f"cannot find remainder between {left} and {right}"
        if op == "^":
            if self.complex_operand:
                return "cannot raise vector to a complex power"
            return f"cannot raise {left} to {right} power"
        if op in _COMPARISON_NAMES:
            return f"cannot compare {_COMPARISON_NAMES[op]} between {left} and {right}"
        return f"operator {op} is undefined between {left} and {right}"


@dataclass(eq=False)
class ValueKindError(NumscriptRuntimeError):
    """A value of the wrong kind reached a predicate, bound, builtin or factorial."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(eq=False)
class UnknownVariableError(NumscriptRuntimeError):
    name: str

    def __str__(self) -> str:
        return f"unknown variable: {self.name}"


@dataclass(eq=False)
class UndefinedAssignmentError(UnknownVariableError):
    """Assignment to a name that was never declared."""

    def __str__(self) -> str:
        return f"use of undefined variable: {self.name}"


@dataclass(eq=False)
class UnknownFunctionError(NumscriptRuntimeError):
    name: str

    def __str__(self) -> str:
        return f"unknown function: {self.name}"


@dataclass(eq=False)
class ArityError(NumscriptRuntimeError):
    name: str
    expected: int
    supplied: int

    def __str__(self) -> str:
        return f"{self.name} expects {self.expected} parameters, but only {self.supplied} were supplied"


class RedeclarationError(NumscriptRuntimeError):
    """A variable or function name was declared twice."""


@dataclass(eq=False)
class VariableRedeclarationError(RedeclarationError):
    name: str

    def __str__(self) -> str:
        return f"you cannot redeclare a variable: {self.name}"


@dataclass(eq=False)
class FunctionRedeclarationError(RedeclarationError):
    name: str

    def __str__(self) -> str:
        return f"redeclared a function that already is defined: {self.name}"


@dataclass(eq=False)
class ExternalMutationError(NumscriptRuntimeError):
    """A function body tried to assign a global that no local shadows."""

    name: str

    def __str__(self) -> str:
        return f"attempted to affect external variable {self.name} from within a function"


@dataclass(eq=False)
class MalformedLoopError(NumscriptRuntimeError):
    def __str__(self) -> str:
        return "a step cannot be 0"


@dataclass(eq=False)
class BlockShapeError(NumscriptRuntimeError):
    def __str__(self) -> str:
        return "a block must end with an expression"


@dataclass(eq=False)
class NonIntegerIndexError(NumscriptRuntimeError):
    index: float

    def __str__(self) -> str:
        return "cannot index arrays with non-integers"


@dataclass(eq=False)
class IndexRangeError(NumscriptRuntimeError):
    length: int
    index: float

    def __str__(self) -> str:
        return f"attempted to index array of length {self.length} with index {_format_index(self.index)}"


@dataclass(eq=False)
class BuiltinIndexError(NumscriptRuntimeError):
    """``rm``/``ins`` received an index that is not a valid position."""

    signature: str
    index: float

    def __str__(self) -> str:
        return f"cannot index array in {self.signature} where y is {_format_index(self.index)}"


@dataclass(eq=False)
class RecursionLimitError(NumscriptRuntimeError):
    def __str__(self) -> str:
        return "maximum recursion depth exceeded while evaluating"
