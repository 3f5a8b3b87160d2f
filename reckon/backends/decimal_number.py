from __future__ import annotations

from decimal import Context, Decimal, MAX_EMAX, MIN_EMIN, ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP
from typing import Optional

from mpmath.ctx_mp import MPContext

from .base import Backend, decimal_text

ROUNDING = {
    'round': ROUND_HALF_UP,
    'ceil': ROUND_CEILING,
    'floor': ROUND_FLOOR,
}

TRANSCENDENTAL = (
    'sin', 'cos', 'tan', 'asin', 'acos', 'atan',
    'sinh', 'cosh', 'tanh', 'asinh', 'acosh', 'atanh',
)


class DecimalBackend(Backend):
    """Arbitrary-precision decimal floating point.

    Every result is rounded to `precision` significant digits. Basic
    arithmetic, `exp`, `ln`, `log` and `sqrt` come from `decimal`; the
    trigonometric and hyperbolic family is evaluated with mpmath at a few
    extra digits and rounded back. A result outside the reals is NaN.
    """
    name = 'decimal'

    def __init__(self, precision: int = 20, decimal_places: int = 20, seed: Optional[int] = None):
        self.context = Context(prec=precision, Emax=MAX_EMAX, Emin=MIN_EMIN, traps=[])
        self.mp = MPContext()
        self.mp.dps = precision + 10
        super().__init__(precision, decimal_places, seed)

    def parse(self, text: str) -> Decimal:
        return Decimal(text)

    def format(self, value: Decimal) -> str:
        return decimal_text(value)

    def is_zero(self, value: Decimal) -> bool:
        return value.is_zero()

    def to_count(self, value: Decimal) -> int:
        if not value.is_finite():
            raise ValueError("Expected a finite repeat amount.")
        return int(value.to_integral_value(rounding=ROUND_FLOOR, context=self.context))

    def add(self, a, b):
        return self.context.add(a, b)

    def subtract(self, a, b):
        return self.context.subtract(a, b)

    def multiply(self, a, b):
        return self.context.multiply(a, b)

    def divide(self, a, b):
        return self.context.divide(a, b)

    def remainder(self, a, b):
        return self.context.remainder(a, b)

    def power(self, a, b):
        if b.is_zero() and not a.is_nan():
            return Decimal(1)
        return self.context.power(a, b)

    def compare(self, a, b):
        result = self.context.compare(a, b)
        if result.is_nan():
            return None
        return int(result)

    def absolute(self, x):
        return self.context.abs(x)

    def integer_value(self, x, mode):
        if not x.is_finite():
            return x
        return x.to_integral_value(rounding=ROUNDING[mode], context=self.context)

    def is_integer(self, x):
        return x.is_finite() and x == x.to_integral_value(context=self.context)

    def sqrt(self, x):
        return self.context.sqrt(x)

    def cbrt(self, x):
        if x.is_signed() and not x.is_nan():
            return self.context.minus(self.via_mp('cbrt', [self.context.minus(x)]))
        return self.via_mp('cbrt', [x])

    def random_value(self):
        digits = self.precision
        return Decimal(self.rng.randrange(10 ** digits)).scaleb(-digits, context=self.context)

    def to_mp(self, value: Decimal):
        if value.is_nan():
            return self.mp.nan
        if value.is_infinite():
            return -self.mp.inf if value.is_signed() else self.mp.inf
        return self.mp.mpf(str(value))

    def from_mp(self, value) -> Decimal:
        if isinstance(value, self.mp.mpc):
            if value.imag != 0:
                return Decimal('NaN')
            value = value.real
        if self.mp.isnan(value):
            return Decimal('NaN')
        if self.mp.isinf(value):
            return Decimal('-Infinity' if value < 0 else 'Infinity')
        return self.context.plus(Decimal(self.mp.nstr(value, self.mp.dps)))

    def via_mp(self, name: str, args):
        return self.from_mp(getattr(self.mp, name)(*[self.to_mp(a) for a in args]))

    def hypot(self, args):
        total = Decimal(0)
        for value in args:
            total = self.context.add(total, self.context.multiply(value, value))
        return self.context.sqrt(total)

    def load_constants(self):
        self.constants['π'] = self.from_mp(self.mp.pi)
        self.constants['e'] = self.from_mp(self.mp.e)
        self.constants['∞'] = Decimal('Infinity')

    def load_functions(self):
        super().load_functions()
        self.register('exp', 1, lambda args: self.context.exp(args[0]))
        self.register('ln', 1, lambda args: self.context.ln(args[0]))
        self.register('log', 1, lambda args: self.context.log10(args[0]))
        for name in TRANSCENDENTAL:
            self.register(name, 1, lambda args, name=name: self.via_mp(name, args))
        self.register('hypot', None, self.hypot)
