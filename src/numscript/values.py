"""Runtime value model and the value algebra, computed on top of JAX.

Three value kinds exist: complex ``Number``, real 2D ``Vector`` and
heterogeneous ``Array``. Kinds never convert implicitly; every operator is
either defined for an ordered pair of kinds or fails with an
``OperatorTypeError`` naming both kinds.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from enum import Enum
from typing import Callable, ClassVar, Final, Union

import jax
from jax import lax
import jax.numpy as jnp
import numpy as np

from .ast import Operator
from .errors import OperatorTypeError, ValueKindError

_ENABLE_X64: Final[bool] = os.environ.get("NUMSCRIPT_DISABLE_X64", "0") != "1"
_USE_JITTED_KERNELS: Final[bool] = os.environ.get("NUMSCRIPT_DISABLE_JITTED_KERNELS", "0") != "1"

if _ENABLE_X64:
    jax.config.update("jax_enable_x64", True)

_COMPLEX_DTYPE: Final = jnp.complex128 if _ENABLE_X64 else jnp.complex64
_REAL_DTYPE: Final = jnp.float64 if _ENABLE_X64 else jnp.float32

# Size of one value slot; `mem` reports sizes in multiples of it.
VALUE_SLOT_SIZE: Final[int] = 32

# Largest n whose factorial is finite as a double.
_MAX_FINITE_FACTORIAL: Final[int] = 170


class ValueKind(str, Enum):
    NUMBER = "number"
    VECTOR = "vector"
    ARRAY = "array"


@dataclass(frozen=True)
class Number:
    """Complex scalar; real numbers carry a zero imaginary part."""

    value: complex
    kind: ClassVar[ValueKind] = ValueKind.NUMBER

    @classmethod
    def real(cls, re: float) -> "Number":
        return cls(complex(re, 0.0))

    @classmethod
    def imaginary(cls, im: float) -> "Number":
        return cls(complex(0.0, im))

    @property
    def is_real(self) -> bool:
        return self.value.imag == 0.0

    def __str__(self) -> str:
        return format_value(self)


@dataclass(frozen=True)
class Vector:
    x: float
    y: float
    kind: ClassVar[ValueKind] = ValueKind.VECTOR

    def __str__(self) -> str:
        return format_value(self)


@dataclass(frozen=True)
class Array:
    items: tuple["Value", ...] = ()
    kind: ClassVar[ValueKind] = ValueKind.ARRAY

    def __len__(self) -> int:
        return len(self.items)

    def append(self, value: "Value") -> "Array":
        return Array(self.items + (value,))

    def __str__(self) -> str:
        return format_value(self)


Value = Union[Number, Vector, Array]

TRUE: Final[Number] = Number.real(1.0)
FALSE: Final[Number] = Number.real(0.0)


def kind_of(value: Value) -> ValueKind:
    return value.kind


def _truth(flag: bool) -> Number:
    return TRUE if flag else FALSE


# ---------------------------------------------------------------------------
# jax kernels


def _as_complex_array(value: complex) -> jnp.ndarray:
    return jnp.asarray(value, dtype=_COMPLEX_DTYPE)


def _as_real_array(value) -> jnp.ndarray:
    return jnp.asarray(value, dtype=_REAL_DTYPE)


def _to_complex(arr: jnp.ndarray) -> complex:
    return complex(arr.item())


def _vector_array(vector: Vector) -> jnp.ndarray:
    return _as_real_array((vector.x, vector.y))


def _from_vector_array(arr: jnp.ndarray) -> Vector:
    x, y = arr.tolist()
    return Vector(float(x), float(y))


def _complex_remainder(a: jnp.ndarray, b: jnp.ndarray) -> jnp.ndarray:
    # Gaussian integer nearest the ratio, rounded toward zero per component.
    q = a / b
    whole = lax.complex(jnp.trunc(jnp.real(q)), jnp.trunc(jnp.imag(q)))
    return a - b * whole


_COMPLEX_BINARY_OPS: Final[dict[Operator, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]]] = {
    Operator.ADD: lambda a, b: a + b,
    Operator.SUBTRACT: lambda a, b: a - b,
    Operator.MULTIPLY: lambda a, b: a * b,
    Operator.DIVIDE: lambda a, b: a / b,
    Operator.MODULO: _complex_remainder,
    Operator.POWER: lambda a, b: jnp.power(a, b),
}

_VECTOR_BINARY_OPS: Final[dict[Operator, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]]] = {
    Operator.ADD: lambda v, w: v + w,
    Operator.SUBTRACT: lambda v, w: v - w,
    Operator.MULTIPLY: lambda v, s: v * s,
    Operator.DIVIDE: lambda v, s: v / s,
    Operator.POWER: lambda v, s: jnp.power(v, s),
}

_JITTED_COMPLEX_OPS: dict[Operator, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]] = {}
_JITTED_VECTOR_OPS: dict[Operator, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]] = {}


def _complex_kernel(op: Operator) -> Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]:
    if not _USE_JITTED_KERNELS:
        return _COMPLEX_BINARY_OPS[op]
    fn = _JITTED_COMPLEX_OPS.get(op)
    if fn is None:
        fn = jax.jit(_COMPLEX_BINARY_OPS[op])
        _JITTED_COMPLEX_OPS[op] = fn
    return fn


def _vector_kernel(op: Operator) -> Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]:
    if not _USE_JITTED_KERNELS:
        return _VECTOR_BINARY_OPS[op]
    fn = _JITTED_VECTOR_OPS.get(op)
    if fn is None:
        fn = jax.jit(_VECTOR_BINARY_OPS[op])
        _JITTED_VECTOR_OPS[op] = fn
    return fn


def _complex_binary(op: Operator, a: complex, b: complex) -> complex:
    return _to_complex(_complex_kernel(op)(_as_complex_array(a), _as_complex_array(b)))


def _vector_binary(op: Operator, vector: Vector, other) -> Vector:
    if isinstance(other, Vector):
        rhs = _vector_array(other)
    else:
        rhs = _as_real_array(other)
    return _from_vector_array(_vector_kernel(op)(_vector_array(vector), rhs))


def modulus(value: complex) -> float:
    return float(jnp.abs(_as_complex_array(value)))


def complex_sin(z: complex) -> complex:
    return _to_complex(jnp.sin(_as_complex_array(z)))


def complex_cos(z: complex) -> complex:
    return _to_complex(jnp.cos(_as_complex_array(z)))


def complex_tan(z: complex) -> complex:
    return _to_complex(jnp.tan(_as_complex_array(z)))


def complex_ln(z: complex) -> complex:
    return _to_complex(jnp.log(_as_complex_array(z)))


def complex_log(z: complex, base: float) -> complex:
    return _to_complex(jnp.log(_as_complex_array(z)) / jnp.log(_as_real_array(base)))


# ---------------------------------------------------------------------------
# payload accessors


def expect_real(value: Value, message: str) -> float:
    if isinstance(value, Number) and value.is_real:
        return value.value.real
    raise ValueKindError(message)


def expect_complex(value: Value, message: str) -> complex:
    if isinstance(value, Number):
        return value.value
    raise ValueKindError(message)


def expect_vector(value: Value, message: str) -> tuple[float, float]:
    if isinstance(value, Vector):
        return value.x, value.y
    raise ValueKindError(message)


def expect_array(value: Value, message: str) -> tuple[Value, ...]:
    if isinstance(value, Array):
        return value.items
    raise ValueKindError(message)


# ---------------------------------------------------------------------------
# operators


def _mismatch(op: Operator, left: Value, right: Value, *, complex_operand: bool = False) -> OperatorTypeError:
    return OperatorTypeError(op.value, kind_of(left).value, kind_of(right).value, complex_operand=complex_operand)


def _scale_vector(op: Operator, vector: Vector, scalar: Number, left: Value, right: Value) -> Vector:
    if not scalar.is_real:
        raise _mismatch(op, left, right, complex_operand=True)
    return _vector_binary(op, vector, scalar.value.real)


def add(left: Value, right: Value) -> Value:
    if isinstance(left, Array):
        return left.append(right)
    if isinstance(right, Array):
        return right.append(left)
    if isinstance(left, Number) and isinstance(right, Number):
        return Number(_complex_binary(Operator.ADD, left.value, right.value))
    if isinstance(left, Vector) and isinstance(right, Vector):
        return _vector_binary(Operator.ADD, left, right)
    raise _mismatch(Operator.ADD, left, right)


def subtract(left: Value, right: Value) -> Value:
    if isinstance(left, Number) and isinstance(right, Number):
        return Number(_complex_binary(Operator.SUBTRACT, left.value, right.value))
    if isinstance(left, Vector) and isinstance(right, Vector):
        return _vector_binary(Operator.SUBTRACT, left, right)
    raise _mismatch(Operator.SUBTRACT, left, right)


def multiply(left: Value, right: Value) -> Value:
    if isinstance(left, Number) and isinstance(right, Number):
        return Number(_complex_binary(Operator.MULTIPLY, left.value, right.value))
    if isinstance(left, Number) and isinstance(right, Vector):
        return _scale_vector(Operator.MULTIPLY, right, left, left, right)
    if isinstance(left, Vector) and isinstance(right, Number):
        return _scale_vector(Operator.MULTIPLY, left, right, left, right)
    raise _mismatch(Operator.MULTIPLY, left, right)


def divide(left: Value, right: Value) -> Value:
    if isinstance(left, Number) and isinstance(right, Number):
        return Number(_complex_binary(Operator.DIVIDE, left.value, right.value))
    # A number over a vector divides the vector's components by the number.
    if isinstance(left, Number) and isinstance(right, Vector):
        return _scale_vector(Operator.DIVIDE, right, left, left, right)
    if isinstance(left, Vector) and isinstance(right, Number):
        return _scale_vector(Operator.DIVIDE, left, right, left, right)
    raise _mismatch(Operator.DIVIDE, left, right)


def remainder(left: Value, right: Value) -> Value:
    if isinstance(left, Number) and isinstance(right, Number):
        return Number(_complex_binary(Operator.MODULO, left.value, right.value))
    raise _mismatch(Operator.MODULO, left, right)


def power(left: Value, right: Value) -> Value:
    if isinstance(left, Number) and isinstance(right, Number):
        if left.value == 0:
            return Number.real(0.0)
        if right.value == 0:
            return Number.real(1.0)
        return Number(_complex_binary(Operator.POWER, left.value, right.value))
    if isinstance(left, Vector) and isinstance(right, Number):
        return _scale_vector(Operator.POWER, left, right, left, right)
    raise _mismatch(Operator.POWER, left, right)


def values_equal(left: Value, right: Value) -> bool:
    """Language equality: total, false across kinds, and never true for arrays."""
    if isinstance(left, Number) and isinstance(right, Number):
        return left.value == right.value
    if isinstance(left, Vector) and isinstance(right, Vector):
        return left.x == right.x and left.y == right.y
    return False


def equals(left: Value, right: Value) -> Number:
    return _truth(values_equal(left, right))


def _compare(op: Operator, test: Callable[[float, float], bool]) -> Callable[[Value, Value], Number]:
    def compare(left: Value, right: Value) -> Number:
        if isinstance(left, Number) and isinstance(right, Number):
            return _truth(test(modulus(left.value), modulus(right.value)))
        raise _mismatch(op, left, right)

    compare.__name__ = op.name.lower()
    return compare


greater_than = _compare(Operator.GREATER_THAN, lambda a, b: a > b)
less_than = _compare(Operator.LESS_THAN, lambda a, b: a < b)
greater_than_or_equals = _compare(Operator.GREATER_THAN_OR_EQUALS, lambda a, b: a >= b)
less_than_or_equals = _compare(Operator.LESS_THAN_OR_EQUALS, lambda a, b: a <= b)


BINARY_OPERATORS: Final[dict[Operator, Callable[[Value, Value], Value]]] = {
    Operator.ADD: add,
    Operator.SUBTRACT: subtract,
    Operator.MULTIPLY: multiply,
    Operator.DIVIDE: divide,
    Operator.MODULO: remainder,
    Operator.POWER: power,
    Operator.EQUALS: equals,
    Operator.GREATER_THAN: greater_than,
    Operator.LESS_THAN: less_than,
    Operator.GREATER_THAN_OR_EQUALS: greater_than_or_equals,
    Operator.LESS_THAN_OR_EQUALS: less_than_or_equals,
}


def apply_operator(op: Operator, left: Value, right: Value) -> Value:
    return BINARY_OPERATORS[op](left, right)


# ---------------------------------------------------------------------------
# gamma and factorial

_LANCZOS_BASE: Final[float] = 0.99999999999980993
_LANCZOS_COEFFICIENTS: Final[tuple[float, ...]] = (
    676.5203681218851,
    -1259.1392167224028,
    771.32342877765313,
    -176.61502916214059,
    12.507343278686905,
    -0.13857109526572012,
    9.9843695780195716e-6,
    1.5056327351493116e-7,
)

_JITTED_LANCZOS: list[Callable[[jnp.ndarray], jnp.ndarray]] = []


def _lanczos_gamma(z: jnp.ndarray) -> jnp.ndarray:
    w = z - 1
    x = _LANCZOS_BASE
    for i, coefficient in enumerate(_LANCZOS_COEFFICIENTS):
        x = x + coefficient / (w + i + 1)
    t = w + len(_LANCZOS_COEFFICIENTS) - 0.5
    return jnp.sqrt(2 * jnp.pi) * jnp.power(t, w + 0.5) * jnp.exp(-t) * x


def _lanczos_kernel() -> Callable[[jnp.ndarray], jnp.ndarray]:
    if not _USE_JITTED_KERNELS:
        return _lanczos_gamma
    if not _JITTED_LANCZOS:
        _JITTED_LANCZOS.append(jax.jit(_lanczos_gamma))
    return _JITTED_LANCZOS[0]


def gamma_complex(z: complex) -> complex:
    if z.real < 0.5:
        # Reflection: Γ(z) = π / (sin(πz) · Γ(1 − z))
        zz = _as_complex_array(z)
        reflected = _as_complex_array(gamma_complex(1 - z))
        return _to_complex(jnp.pi / (jnp.sin(jnp.pi * zz) * reflected))
    return _to_complex(_lanczos_kernel()(_as_complex_array(z)))


def gamma(value: Value) -> Number:
    z = expect_complex(value, "cannot calculate gamma for non-number")
    return Number(gamma_complex(z))


def factorial_complex(z: complex) -> complex:
    if z.imag == 0.0 and z.real > 0.0 and z.real.is_integer():
        n = int(z.real)
        if n > _MAX_FINITE_FACTORIAL:
            return complex(math.inf, 0.0)
        return complex(float(math.prod(range(2, n + 1))), 0.0)
    if z == 0:
        return complex(1.0, 0.0)
    return gamma_complex(z + 1)


def factorial(value: Value) -> Number:
    z = expect_complex(value, "attempted to find factorial of non-number")
    return Number(factorial_complex(z))


# ---------------------------------------------------------------------------
# size estimate and rendering


def mem_size(value: Value) -> int:
    if isinstance(value, Array):
        return VALUE_SLOT_SIZE + sum(mem_size(item) for item in value.items)
    return VALUE_SLOT_SIZE


def format_real(real: float) -> str:
    real = float(real)
    if math.isnan(real):
        return "NaN"
    if math.isinf(real):
        return "inf" if real > 0 else "-inf"
    return np.format_float_positional(real, trim="-")


def format_value(value: Value) -> str:
    if isinstance(value, Number):
        re, im = value.value.real, value.value.imag
        if im == 0.0:
            return format_real(re)
        if re == 0.0:
            if im == 1.0:
                return "i"
            return f"{format_real(im)}i"
        if im > 0.0:
            return f"{format_real(re)} + {format_real(im)}i"
        return f"{format_real(re)} - {format_real(-im)}i"

    if isinstance(value, Vector):
        return f"({format_real(value.x)}, {format_real(value.y)})"

    if isinstance(value, Array):
        return "[" + ", ".join(format_value(item) for item in value.items) + "]"

    raise TypeError(f"unsupported runtime value {type(value).__name__}")
