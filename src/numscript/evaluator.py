"""Tree-walking evaluator for numscript syntax trees."""

from __future__ import annotations

import logging
from dataclasses import dataclass

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
    Range,
    Tree,
    VariableDeclaration,
)
from .errors import (
    ArityError,
    BlockShapeError,
    IndexRangeError,
    MalformedLoopError,
    NonIntegerIndexError,
    NumscriptRuntimeError,
    RecursionLimitError,
    UnknownFunctionError,
)
from .state import EvaluationState
from .values import (
    Array,
    Number,
    Value,
    add,
    apply_operator,
    expect_array,
    expect_real,
    factorial,
)

logger = logging.getLogger(__name__)

_ZERO = Number.real(0.0)


def _call_function(node: FunctionCall, state: EvaluationState) -> Value:
    name = node.name
    if not state.has_function(name):
        raise UnknownFunctionError(name)

    builtin = state.builtins.get(name)
    if builtin is not None:
        if len(node.arguments) != builtin.arity:
            raise ArityError(name, builtin.arity, len(node.arguments))
        arguments = tuple(_eval_node(argument, state) for argument in node.arguments)
        return builtin(arguments, state)

    declaration = state.functions[name]
    if len(node.arguments) != len(declaration.parameters):
        raise ArityError(name, len(declaration.parameters), len(node.arguments))

    arguments = tuple(_eval_node(argument, state) for argument in node.arguments)
    logger.debug("calling %s at depth %d", name, state.call_depth + 1)
    with state.call_frame(dict(zip(declaration.parameters, arguments))):
        return _eval_node(declaration.body, state)


def _loop_bounds(bounds: Range, state: EvaluationState) -> tuple[float, float, float]:
    first = expect_real(_eval_node(bounds.first, state), "the first bound must be a real number")
    second = expect_real(_eval_node(bounds.second, state), "the second bound must be a real number")
    step = expect_real(_eval_node(bounds.step, state), "the step must be a number")
    if step == 0.0:
        raise MalformedLoopError()
    return first, second, abs(step)


def _loop_pass(node: Loop, position: float, total: Value, state: EvaluationState) -> Value:
    with state.frame({node.variable: Number.real(position)}):
        return add(total, _eval_node(node.body, state))


def _run_loop(node: Loop, state: EvaluationState) -> Value:
    first, second, step = _loop_bounds(node.range, state)
    total: Value = _ZERO
    position = first

    # The last pass is snapped onto the second bound so it is always visited.
    if first < second:
        while position < second:
            total = _loop_pass(node, position, total, state)
            if position + step < second:
                position += step
            else:
                total = _loop_pass(node, second, total, state)
                break
    else:
        while position > second:
            total = _loop_pass(node, position, total, state)
            if position - step > second:
                position -= step
            else:
                total = _loop_pass(node, second, total, state)
                break
    return total


def _eval_block(node: Tree, state: EvaluationState) -> Value:
    if not node.nodes:
        return _ZERO
    if isinstance(node.nodes[-1], (VariableDeclaration, FunctionDeclaration)):
        raise BlockShapeError()

    result: Value = _ZERO
    with state.frame():
        for child in node.nodes:
            result = _eval_node(child, state)
    return result


def _eval_index(node: Index, state: EvaluationState) -> Value:
    items = expect_array(_eval_node(node.array, state), "cannot index a non-array")
    index = expect_real(_eval_node(node.index, state), "tried to index using non-number")
    if not index.is_integer():
        raise NonIntegerIndexError(index)
    if index < 0 or index >= len(items):
        raise IndexRangeError(len(items), index)
    return items[int(index)]


def _eval_node(node: Node, state: EvaluationState) -> Value:
    if isinstance(node, NumberLiteral):
        if node.imaginary:
            return Number.imaginary(node.value)
        return Number.real(node.value)

    if isinstance(node, Identifier):
        return state.lookup(node.name)

    if isinstance(node, Operation):
        left = _eval_node(node.left, state)
        right = _eval_node(node.right, state)
        return apply_operator(node.operator, left, right)

    if isinstance(node, FunctionCall):
        return _call_function(node, state)

    if isinstance(node, Conditional):
        predicate = expect_real(
            _eval_node(node.predicate, state),
            "a predicate to a conditional expression must be a number",
        )
        if predicate != 0.0:
            return _eval_node(node.if_true, state)
        return _eval_node(node.if_false, state)

    if isinstance(node, FunctionDeclaration):
        state.declare_function(node)
        return _ZERO

    if isinstance(node, VariableDeclaration):
        state.check_variable_free(node.name)
        value = _eval_node(node.expression, state)
        state.declare_variable(node.name, value)
        return _ZERO

    if isinstance(node, Loop):
        return _run_loop(node, state)

    if isinstance(node, Assignment):
        value = _eval_node(node.expression, state)
        for target in node.targets:
            state.assign(target, value)
        return value

    if isinstance(node, Factorial):
        return factorial(_eval_node(node.expression, state))

    if isinstance(node, Tree):
        return _eval_block(node, state)

    if isinstance(node, ArrayLiteral):
        return Array(tuple(_eval_node(item, state) for item in node.items))

    if isinstance(node, Index):
        return _eval_index(node, state)

    if isinstance(node, Range):
        raise TypeError("a range is only valid as the bounds of a loop")

    raise TypeError(f"Unsupported syntax node: {type(node)!r}")


def evaluate(node: Node, state: EvaluationState) -> Value:
    """Evaluate ``node`` against an existing state, mutating it in place."""
    try:
        return _eval_node(node, state)
    except RecursionError as err:
        raise RecursionLimitError() from err


def execute(root: Node, *, state: EvaluationState | None = None) -> Value:
    """Evaluate a whole program in a fresh (or supplied) evaluation state."""
    if state is None:
        state = EvaluationState.with_defaults()
    state.reset_clock()
    logger.debug("executing %s", type(root).__name__)
    result = evaluate(root, state)
    logger.debug("execution finished with a %s", result.kind.value)
    return result


@dataclass(frozen=True)
class ExecutionResult:
    """Either the final value of a run or the error that aborted it."""

    value: Value | None = None
    error: NumscriptRuntimeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str | None:
        if self.error is None:
            return None
        return str(self.error)


def execute_with_errors(root: Node, *, state: EvaluationState | None = None) -> ExecutionResult:
    """Like ``execute`` but reports the first runtime error as data."""
    try:
        return ExecutionResult(value=execute(root, state=state))
    except NumscriptRuntimeError as err:
        logger.debug("execution failed: %s", err)
        return ExecutionResult(error=err)
