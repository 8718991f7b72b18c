from __future__ import annotations

import math
import unittest

from numscript.errors import ValueKindError
from numscript.values import (
    VALUE_SLOT_SIZE,
    Array,
    Number,
    Vector,
    factorial,
    format_real,
    format_value,
    gamma,
    mem_size,
)


def n(re: float, im: float = 0.0) -> Number:
    return Number(complex(re, im))


class GammaFactorialTests(unittest.TestCase):
    def test_exact_factorials(self) -> None:
        self.assertEqual(factorial(n(0)), n(1))
        self.assertEqual(factorial(n(1)), n(1))
        self.assertEqual(factorial(n(5)), n(120))
        self.assertEqual(factorial(n(20)), n(float(math.factorial(20))))

    def test_factorial_past_double_range_is_infinite(self) -> None:
        self.assertEqual(factorial(n(171)).value.real, math.inf)

    def test_half_integer_factorial_goes_through_gamma(self) -> None:
        self.assertAlmostEqual(factorial(n(0.5)).value.real, 0.8862269254527580, places=9)
        self.assertAlmostEqual(gamma(n(1.5)).value.real, 0.8862269254527580, places=9)
        self.assertAlmostEqual(factorial(n(-0.5)).value.real, math.sqrt(math.pi), places=9)

    def test_gamma_matches_integer_factorials(self) -> None:
        for k in range(1, 8):
            with self.subTest(k=k):
                self.assertAlmostEqual(
                    gamma(n(k + 1)).value.real / math.factorial(k), 1.0, places=9
                )

    def test_reflection_branch_for_small_real_parts(self) -> None:
        # Γ(-0.5) = -2√π
        out = gamma(n(-0.5))
        self.assertAlmostEqual(out.value.real, -2 * math.sqrt(math.pi), places=8)
        self.assertAlmostEqual(out.value.imag, 0.0, places=9)
        self.assertAlmostEqual(factorial(n(-1.5)).value.real, -2 * math.sqrt(math.pi), places=8)

    def test_complex_argument(self) -> None:
        # |Γ(i)|² = π / (sinh(π))
        out = gamma(n(0, 1))
        modulus_sq = out.value.real**2 + out.value.imag**2
        self.assertAlmostEqual(modulus_sq, math.pi / math.sinh(math.pi), places=9)

    def test_negative_integer_factorial_uses_gamma(self) -> None:
        self.assertFalse(math.isfinite(abs(factorial(n(-1)).value)))

    def test_non_numbers_are_rejected(self) -> None:
        with self.assertRaises(ValueKindError) as ctx:
            factorial(Vector(1, 2))
        self.assertEqual(str(ctx.exception), "attempted to find factorial of non-number")
        with self.assertRaises(ValueKindError):
            gamma(Array())


class RenderingTests(unittest.TestCase):
    def test_real_numbers(self) -> None:
        self.assertEqual(format_value(n(5)), "5")
        self.assertEqual(format_value(n(-2.5)), "-2.5")
        self.assertEqual(format_value(n(0.1 + 0.2)), "0.30000000000000004")
        self.assertEqual(format_value(n(1e-7)), "0.0000001")
        self.assertEqual(format_value(n(1e21)), "1000000000000000000000")

    def test_special_reals(self) -> None:
        self.assertEqual(format_real(math.nan), "NaN")
        self.assertEqual(format_real(math.inf), "inf")
        self.assertEqual(format_real(-math.inf), "-inf")
        self.assertEqual(format_real(-0.0), "-0")

    def test_imaginary_numbers(self) -> None:
        self.assertEqual(format_value(n(0, 1)), "i")
        self.assertEqual(format_value(n(0, 2)), "2i")
        self.assertEqual(format_value(n(0, -1)), "-1i")
        self.assertEqual(format_value(n(0, 0.5)), "0.5i")

    def test_full_complex_numbers(self) -> None:
        self.assertEqual(format_value(n(1, 2)), "1 + 2i")
        self.assertEqual(format_value(n(1.5, -2)), "1.5 - 2i")
        self.assertEqual(format_value(n(-3, 1)), "-3 + 1i")

    def test_vectors_and_arrays(self) -> None:
        self.assertEqual(format_value(Vector(4, 6)), "(4, 6)")
        self.assertEqual(format_value(Vector(0.5, -1)), "(0.5, -1)")
        nested = Array((n(1), Vector(1, 2), Array((n(0, 1), Array()))))
        self.assertEqual(format_value(nested), "[1, (1, 2), [i, []]]")
        self.assertEqual(str(nested), format_value(nested))


class MemSizeTests(unittest.TestCase):
    def test_scalars_cost_one_slot(self) -> None:
        self.assertEqual(mem_size(n(1)), VALUE_SLOT_SIZE)
        self.assertEqual(mem_size(Vector(1, 2)), VALUE_SLOT_SIZE)

    def test_arrays_sum_recursively(self) -> None:
        value = Array((n(1), Array((n(2), n(3)))))
        self.assertEqual(mem_size(value), 5 * VALUE_SLOT_SIZE)
        self.assertEqual(mem_size(Array()), VALUE_SLOT_SIZE)


if __name__ == "__main__":
    unittest.main()
