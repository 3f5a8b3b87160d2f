from __future__ import annotations

from decimal import (
    Context, Decimal, MAX_EMAX, MAX_PREC, MIN_EMIN, ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP,
)
from typing import Optional

from .base import Backend, decimal_text, mp_digits

ROUNDING = {
    'round': ROUND_HALF_UP,
    'ceil': ROUND_CEILING,
    'floor': ROUND_FLOOR,
}


class BigNumberBackend(Backend):
    """Arbitrary-precision numbers on `decimal.Decimal`.

    Sums, differences, products and integer powers are exact. Quotients,
    roots and fractional powers are computed with guard digits and then
    rounded half-up to `decimal_places` digits after the point. Division by
    zero gives a signed infinity (or NaN for 0/0) instead of failing.
    """
    name = 'bignumber'

    def __init__(self, precision: int = 20, decimal_places: int = 20, seed: Optional[int] = None):
        self.exact = Context(prec=MAX_PREC, Emax=MAX_EMAX, Emin=MIN_EMIN, traps=[])
        self.quantum = Decimal(1).scaleb(-decimal_places)
        super().__init__(precision, decimal_places, seed)

    def working(self, digits: int) -> Context:
        return Context(prec=max(digits, 1), Emax=MAX_EMAX, Emin=MIN_EMIN, traps=[])

    def rounded(self, value: Decimal) -> Decimal:
        if not value.is_finite() or value.as_tuple().exponent >= -self.decimal_places:
            return value
        return value.quantize(self.quantum, rounding=ROUND_HALF_UP, context=self.exact)

    def parse(self, text: str) -> Decimal:
        return Decimal(text)

    def format(self, value: Decimal) -> str:
        return decimal_text(value)

    def is_zero(self, value: Decimal) -> bool:
        return value.is_zero()

    def to_count(self, value: Decimal) -> int:
        if not value.is_finite():
            raise ValueError("Expected a finite repeat amount.")
        return int(value.to_integral_value(rounding=ROUND_FLOOR, context=self.exact))

    def add(self, a, b):
        return self.exact.add(a, b)

    def subtract(self, a, b):
        return self.exact.subtract(a, b)

    def multiply(self, a, b):
        return self.exact.multiply(a, b)

    def divide(self, a, b):
        if b.is_zero() or not a.is_finite() or not b.is_finite():
            return self.exact.divide(a, b)
        digits = max(a.adjusted() - b.adjusted() + 2, 1) + self.decimal_places + 2
        return self.rounded(self.working(digits).divide(a, b))

    def remainder(self, a, b):
        return self.exact.remainder(a, b)

    def power(self, a, b):
        if a.is_nan() or b.is_nan():
            return Decimal('NaN')
        if b.is_finite() and b == b.to_integral_value(context=self.exact):
            n = int(b)
            if n == 0:
                return Decimal(1)
            if n > 0:
                return self.exact.power(a, n)
            return self.divide(Decimal(1), self.exact.power(a, -n))
        digits = self.decimal_places + 30
        result = self.working(digits).power(a, b)
        if result.is_finite() and result.adjusted() + self.decimal_places + 4 > digits:
            result = self.working(result.adjusted() + self.decimal_places + 4).power(a, b)
        return self.rounded(result)

    def compare(self, a, b):
        result = self.exact.compare(a, b)
        if result.is_nan():
            return None
        return int(result)

    def absolute(self, x):
        return self.exact.abs(x)

    def integer_value(self, x, mode):
        if not x.is_finite():
            return x
        return x.to_integral_value(rounding=ROUNDING[mode], context=self.exact)

    def is_integer(self, x):
        return x.is_finite() and x == x.to_integral_value(context=self.exact)

    def sqrt(self, x):
        if not x.is_finite():
            return self.exact.sqrt(x)
        digits = max(x.adjusted() // 2 + 2, 1) + self.decimal_places + 2
        return self.rounded(self.working(digits).sqrt(x))

    def cbrt(self, x):
        if not x.is_finite() or x.is_zero():
            return x
        context = self.working(max(x.adjusted() // 3 + 2, 1) + self.decimal_places + 30)
        root = context.power(self.exact.abs(x), context.divide(Decimal(1), Decimal(3)))
        if x.is_signed():
            root = context.minus(root)
        return self.rounded(root)

    def random_value(self):
        places = self.decimal_places
        return Decimal(self.rng.randrange(10 ** places)).scaleb(-places, context=self.exact)

    def load_constants(self):
        places = self.decimal_places
        digits = places + 1
        self.constants['π'] = self.rounded(Decimal(mp_digits('pi', digits)))
        self.constants['e'] = self.rounded(Decimal(mp_digits('e', digits)))
        self.constants['∞'] = Decimal('Infinity')

    def load_functions(self):
        super().load_functions()
        self.register('isFinite', 1, lambda args: self.boolean(args[0].is_finite()))
        self.register('isNaN', 1, lambda args: self.boolean(args[0].is_nan()))
