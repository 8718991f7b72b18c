"""numscript public API."""

import logging

from .ast import (
    ArrayLiteral,
    Assignment,
    Conditional,
    Factorial,
    FunctionCall,
    FunctionDeclaration,
    Identifier,
    Index,
    Loop,
    Node,
    NumberLiteral,
    Operation,
    Operator,
    Range,
    Tree,
    VariableDeclaration,
)
from .errors import (
    ArityError,
    BlockShapeError,
    BuiltinIndexError,
    ExternalMutationError,
    FunctionRedeclarationError,
    IndexRangeError,
    MalformedLoopError,
    NonIntegerIndexError,
    NumscriptError,
    NumscriptRuntimeError,
    OperatorTypeError,
    RecursionLimitError,
    RedeclarationError,
    UndefinedAssignmentError,
    UnknownFunctionError,
    UnknownVariableError,
    ValueKindError,
    VariableRedeclarationError,
)
from .evaluator import ExecutionResult, evaluate, execute, execute_with_errors
from .state import EvaluationState, Scope
from .values import Array, Number, Value, ValueKind, Vector, format_value

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "execute",
    "execute_with_errors",
    "evaluate",
    "ExecutionResult",
    "EvaluationState",
    "Scope",
    "Number",
    "Vector",
    "Array",
    "Value",
    "ValueKind",
    "format_value",
    "Operator",
    "Node",
    "NumberLiteral",
    "Identifier",
    "Operation",
    "FunctionCall",
    "FunctionDeclaration",
    "VariableDeclaration",
    "Conditional",
    "Range",
    "Loop",
    "Assignment",
    "Factorial",
    "Tree",
    "ArrayLiteral",
    "Index",
    "NumscriptError",
    "NumscriptRuntimeError",
    "OperatorTypeError",
    "ValueKindError",
    "UnknownVariableError",
    "UndefinedAssignmentError",
    "UnknownFunctionError",
    "ArityError",
    "RedeclarationError",
    "VariableRedeclarationError",
    "FunctionRedeclarationError",
    "ExternalMutationError",
    "MalformedLoopError",
    "BlockShapeError",
    "NonIntegerIndexError",
    "IndexRangeError",
    "BuiltinIndexError",
    "RecursionLimitError",
]
