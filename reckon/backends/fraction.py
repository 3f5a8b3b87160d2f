from __future__ import annotations

import math
from fractions import Fraction
from typing import Optional

from .base import Backend, mp_digits


def integer_root(value: int, n: int) -> int:
    """Floor of the n-th root of a non-negative integer."""
    if value < 2:
        return value
    x = 1 << ((value.bit_length() + n - 1) // n)
    while True:
        y = ((n - 1) * x + value // x ** (n - 1)) // n
        if y >= x:
            return x
        x = y


def exact_root(value: int, n: int) -> Optional[int]:
    if value < 0:
        if n % 2 == 0:
            return None
        root = exact_root(-value, n)
        return None if root is None else -root
    root = integer_root(value, n)
    return root if root ** n == value else None


class FractionBackend(Backend):
    """Exact rational arithmetic on `fractions.Fraction`.

    There is no infinity: division by zero fails, and so does any power or
    root whose result is not rational.
    """
    name = 'fraction'

    def parse(self, text: str) -> Fraction:
        return Fraction(text)

    def format(self, value: Fraction) -> str:
        return str(value)

    def is_zero(self, value: Fraction) -> bool:
        return value == 0

    def to_count(self, value: Fraction) -> int:
        return math.floor(value)

    def add(self, a, b):
        return a + b

    def subtract(self, a, b):
        return a - b

    def multiply(self, a, b):
        return a * b

    def divide(self, a, b):
        if b == 0:
            raise ZeroDivisionError("Division by zero")
        return a / b

    def remainder(self, a, b):
        if b == 0:
            raise ZeroDivisionError("Division by zero")
        return a - b * math.trunc(a / b)

    def power(self, a, b):
        if b.denominator == 1:
            if a == 0 and b < 0:
                raise ZeroDivisionError("Division by zero")
            return a ** int(b)
        if b < 0:
            return self.divide(Fraction(1), self.power(a, -b))
        n = b.denominator
        numerator = exact_root(a.numerator ** b.numerator, n)
        denominator = exact_root(a.denominator ** b.numerator, n)
        if numerator is None or denominator is None:
            raise ValueError("The result is not a rational number")
        return Fraction(numerator, denominator)

    def compare(self, a, b):
        return (a > b) - (a < b)

    def absolute(self, x):
        return abs(x)

    def integer_value(self, x, mode):
        if mode == 'floor':
            return Fraction(math.floor(x))
        if mode == 'ceil':
            return Fraction(math.ceil(x))
        half = math.floor(abs(x) + Fraction(1, 2))
        return Fraction(-half if x < 0 else half)

    def is_integer(self, x):
        return x.denominator == 1

    def sqrt(self, x):
        return self.power(x, Fraction(1, 2))

    def cbrt(self, x):
        return self.power(x, Fraction(1, 3))

    def random_value(self):
        scale = 10 ** self.precision
        return Fraction(self.rng.randrange(scale), scale)

    def gcd(self, a, b):
        return Fraction(math.gcd(a.numerator, b.numerator), math.lcm(a.denominator, b.denominator))

    def lcm(self, a, b):
        if a == 0 or b == 0:
            return Fraction(0)
        return Fraction(math.lcm(a.numerator, b.numerator), math.gcd(a.denominator, b.denominator))

    def load_constants(self):
        self.constants['π'] = Fraction(mp_digits('pi', self.precision))
        self.constants['e'] = Fraction(mp_digits('e', self.precision))

    def load_functions(self):
        super().load_functions()
        self.register('gcd', 2, lambda args: self.gcd(args[0], args[1]))
        self.register('lcm', 2, lambda args: self.lcm(args[0], args[1]))
        self.register('inverse', 1, lambda args: self.divide(Fraction(1), args[0]))
