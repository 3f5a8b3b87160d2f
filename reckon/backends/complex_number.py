from __future__ import annotations

from typing import Optional

from mpmath.ctx_mp import MPContext

from .base import Backend

TRANSCENDENTAL = (
    'exp', 'sin', 'cos', 'tan', 'asin', 'acos', 'atan',
    'sinh', 'cosh', 'tanh', 'asinh', 'acosh', 'atanh',
)


class ComplexBackend(Backend):
    """Complex numbers on mpmath's `mpc`, in a private context of
    `precision` decimal digits.

    Ordering operators (`<`, `>`, `min`, `max`, ...) are only defined for
    values with a zero imaginary part.
    """
    name = 'complex'

    def __init__(self, precision: int = 20, decimal_places: int = 20, seed: Optional[int] = None):
        self.mp = MPContext()
        self.mp.dps = precision
        super().__init__(precision, decimal_places, seed)

    def wrap(self, value):
        if isinstance(value, self.mp.mpc):
            return value
        return self.mp.mpc(value)

    def parse(self, text: str):
        text = text.strip()
        try:
            return self.mp.mpc(self.mp.mpf(text))
        except ValueError:
            number = complex(text.replace(' ', '').replace('i', 'j'))
            return self.mp.mpc(number.real, number.imag)

    def part(self, x) -> str:
        if self.mp.isnan(x):
            return 'NaN'
        if self.mp.isinf(x):
            return '-Infinity' if x < 0 else 'Infinity'
        text = self.mp.nstr(x, self.precision)
        if text.endswith('.0'):
            text = text[:-2]
        return text

    def format(self, value) -> str:
        re, im = value.real, value.imag
        if im == 0:
            return self.part(re)
        imaginary = '' if abs(im) == 1 else self.part(abs(im))
        if re == 0:
            return f"{'-' if im < 0 else ''}{imaginary}i"
        return f"{self.part(re)} {'-' if im < 0 else '+'} {imaginary}i"

    def is_zero(self, value) -> bool:
        return value == 0

    def real(self, value, what: str):
        if value.imag != 0:
            raise ValueError(f"{what} is only defined for real numbers")
        return value.real

    def to_count(self, value) -> int:
        x = self.real(value, 'A repeat amount')
        if not self.mp.isfinite(x):
            raise ValueError("Expected a finite repeat amount.")
        return int(self.mp.floor(x))

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
        x = self.real(a, 'The remainder')
        y = self.real(b, 'The remainder')
        if y == 0:
            raise ZeroDivisionError("Division by zero")
        q = x / y
        whole = self.mp.floor(q) if q >= 0 else self.mp.ceil(q)
        return self.mp.mpc(x - y * whole)

    def power(self, a, b):
        if a == 0 and b.real < 0:
            raise ZeroDivisionError("Division by zero")
        return self.wrap(self.mp.power(a, b))

    def compare(self, a, b):
        x = self.real(a, 'Ordering')
        y = self.real(b, 'Ordering')
        if self.mp.isnan(x) or self.mp.isnan(y):
            return None
        return (x > y) - (x < y)

    def equals(self, a, b) -> bool:
        return a == b

    def absolute(self, x):
        return self.mp.mpc(abs(x))

    def rounded_part(self, x, mode: str):
        if not self.mp.isfinite(x):
            return x
        if mode == 'floor':
            return self.mp.floor(x)
        if mode == 'ceil':
            return self.mp.ceil(x)
        half = self.mp.floor(abs(x) + self.mp.mpf(0.5))
        return -half if x < 0 else half

    def integer_value(self, x, mode):
        return self.mp.mpc(self.rounded_part(x.real, mode), self.rounded_part(x.imag, mode))

    def is_integer(self, x):
        return x.imag == 0 and self.mp.isint(x.real)

    def sign(self, x):
        if x == 0:
            return self.zero
        return x / abs(x)

    def sqrt(self, x):
        return self.wrap(self.mp.sqrt(x))

    def cbrt(self, x):
        if x.imag == 0 and x.real < 0:
            return -self.wrap(self.mp.cbrt(-x.real))
        return self.wrap(self.mp.cbrt(x))

    def random_value(self):
        return self.mp.mpc(self.mp.mpf(self.rng.random()))

    def hypot(self, args):
        total = self.mp.fsum(abs(z) ** 2 for z in args)
        return self.mp.mpc(self.mp.sqrt(total))

    def load_constants(self):
        self.constants['π'] = self.mp.mpc(self.mp.pi)
        self.constants['e'] = self.mp.mpc(self.mp.e)
        self.constants['∞'] = self.mp.mpc(self.mp.inf)
        self.constants['i'] = self.mp.mpc(0, 1)

    def load_functions(self):
        super().load_functions()
        for name in TRANSCENDENTAL:
            self.register(name, 1, lambda args, name=name: self.wrap(getattr(self.mp, name)(args[0])))
        self.register('ln', 1, lambda args: self.wrap(self.mp.ln(args[0])))
        self.register('log', 1, lambda args: self.wrap(self.mp.log10(args[0])))
        self.register('hypot', None, self.hypot)
        self.register('conjugate', 1, lambda args: self.mp.conj(args[0]))
        self.register('Re', 1, lambda args: self.mp.mpc(args[0].real))
        self.register('Im', 1, lambda args: self.mp.mpc(args[0].imag))
        self.register('arg', 1, lambda args: self.mp.mpc(self.mp.arg(args[0])))
        self.register('isReal', 1, lambda args: self.boolean(args[0].imag == 0))
