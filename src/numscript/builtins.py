"""Builtin function registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from .errors import BuiltinIndexError
from .values import (
    Array,
    Number,
    Value,
    Vector,
    complex_cos,
    complex_ln,
    complex_log,
    complex_sin,
    complex_tan,
    expect_array,
    expect_complex,
    expect_real,
    expect_vector,
    format_value,
    mem_size,
)

if TYPE_CHECKING:
    from .state import EvaluationState

BuiltinBody = Callable[[tuple[Value, ...], "EvaluationState"], Value]


@dataclass(frozen=True)
class Builtin:
    """A natively implemented function with a fixed parameter count."""

    arity: int
    body: BuiltinBody

    def __call__(self, arguments: tuple[Value, ...], state: "EvaluationState") -> Value:
        return self.body(arguments, state)


def _vec(args, _state):
    x = expect_real(args[0], "the x component of the vector is not a number")
    y = expect_real(args[1], "the y component of the vector is not a number")
    return Vector(x, y)


def _x(args, _state):
    x, _ = expect_vector(args[0], "expected vector to take x component out of")
    return Number.real(x)


def _y(args, _state):
    _, y = expect_vector(args[0], "expected vector to take y component out of")
    return Number.real(y)


def _complex_function(fn: Callable[[complex], complex], what: str) -> BuiltinBody:
    def body(args, _state):
        return Number(fn(expect_complex(args[0], f"expected number to find {what} of")))

    return body


def _log(args, _state):
    num = expect_complex(args[0], "expected number to find logarithm of")
    return Number(complex_log(num, 10.0))


def _logn(args, _state):
    base = expect_real(args[0], "expected real base to logarithm")
    num = expect_complex(args[1], "expected number to find logarithm of")
    return Number(complex_log(num, base))


def _print(args, state):
    state.output(format_value(args[0]))
    return args[0]


def _conjugate(args, _state):
    num = expect_complex(args[0], "expected a complex number to find conjugate of")
    return Number(num.conjugate())


def _re(args, _state):
    num = expect_complex(args[0], "expected a complex number to find real part of")
    return Number.real(num.real)


def _im(args, _state):
    num = expect_complex(args[0], "expected a complex number to find imaginary part of")
    return Number.real(num.imag)


def _len(args, _state):
    items = expect_array(args[0], "expected an array to find length of")
    return Number.real(float(len(items)))


def _position(items: tuple[Value, ...], index: float, *, signature: str) -> int:
    if not index.is_integer() or index < 0 or index >= len(items):
        raise BuiltinIndexError(signature, index)
    return int(index)


def _rm(args, _state):
    items = expect_array(args[0], "expected an array to remove value from")
    index = expect_real(args[1], "expected a real number to index array with in rm(x, y)")
    position = _position(items, index, signature="rm(x, y)")
    return Array(items[:position] + items[position + 1 :])


def _ins(args, _state):
    items = expect_array(args[0], "expected an array to insert value into")
    index = expect_real(args[1], "expected a real number to index array with in ins(x, y, z)")
    position = _position(items, index, signature="ins(x, y, z)")
    return Array(items[:position] + (args[2],) + items[position:])


def _mem(args, _state):
    return Number.real(float(mem_size(args[0])))


def _clock(args, state):
    offset = expect_real(args[0], "expected real number in clock(x)")
    return Number.real(state.elapsed() - offset)


def default_builtins() -> dict[str, Builtin]:
    return {
        "vec": Builtin(2, _vec),
        "x": Builtin(1, _x),
        "y": Builtin(1, _y),
        "sin": Builtin(1, _complex_function(complex_sin, "sine")),
        "cos": Builtin(1, _complex_function(complex_cos, "cosine")),
        "tan": Builtin(1, _complex_function(complex_tan, "tangent")),
        "log": Builtin(1, _log),
        "logn": Builtin(2, _logn),
        "ln": Builtin(1, _complex_function(complex_ln, "natural logarithm")),
        "print": Builtin(1, _print),
        "conjugate": Builtin(1, _conjugate),
        "Re": Builtin(1, _re),
        "Im": Builtin(1, _im),
        "len": Builtin(1, _len),
        "rm": Builtin(2, _rm),
        "ins": Builtin(3, _ins),
        "mem": Builtin(1, _mem),
        "clock": Builtin(1, _clock),
    }
