"""Numeric backend contract.

A backend is the capability set the runner computes with: literal parsing,
the binary operators (`basic`), truthiness, a table of constants and a
table of built-in functions. The runner never looks at the concrete
number type; everything goes through this interface.

Subclasses provide the arithmetic hooks (`add`, `subtract`, ...,
`compare`) and the primitive helpers used by the shared built-ins. Errors
are reported with `ArithmeticError` or `ValueError`; the runner converts
them into script errors anchored at the offending operator or call.
"""

from __future__ import annotations

import operator
import random
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from mpmath.ctx_mp import MPContext

from ..builtin_function import BuiltinFunction
from ..errors import InputRequired

ARITHMETIC = {
    '+': 'add',
    '-': 'subtract',
    '*': 'multiply',
    '/': 'divide',
    '%': 'remainder',
    '^': 'power',
}

RELATIONS = {
    '>': lambda c: c > 0,
    '<': lambda c: c < 0,
    '>=': lambda c: c >= 0,
    '<=': lambda c: c <= 0,
}


def mp_digits(name: str, digits: int) -> str:
    """Decimal expansion of an mpmath constant (`pi`, `e`) to `digits` digits."""
    mp = MPContext()
    mp.dps = digits + 5
    return mp.nstr(getattr(mp, name), digits)


def decimal_text(value: Decimal) -> str:
    """Render a Decimal without trailing fractional zeros.

    Values between 1e-7 and 1e21 are written out in full; others use
    exponent notation.
    """
    if value.is_nan():
        return 'NaN'
    if value.is_infinite():
        return '-Infinity' if value.is_signed() else 'Infinity'
    if value.is_zero():
        return '-0' if value.is_signed() else '0'
    if -7 <= value.adjusted() < 21:
        text = format(value, 'f')
        if '.' in text:
            text = text.rstrip('0').rstrip('.')
        return text
    digits = value.as_tuple().digits
    while len(digits) > 1 and digits[-1] == 0:
        digits = digits[:-1]
    mantissa = str(digits[0]) + ('.' + ''.join(map(str, digits[1:])) if len(digits) > 1 else '')
    exponent = value.adjusted()
    sign = '-' if value.is_signed() else ''
    return f"{sign}{mantissa}e{'+' if exponent > 0 else ''}{exponent}"


class Backend(ABC):
    """Capability set of one numeric representation.

    One instance is created per run, so the factorial cache, the random
    generator and the input provider are never shared between runs.
    """
    name = ''

    def __init__(self, precision: int = 20, decimal_places: int = 20, seed: Optional[int] = None):
        self.precision = precision
        self.decimal_places = decimal_places
        self.seed = seed
        self.rng = random.Random(seed)
        self.input_provider: Optional[Callable[[], str]] = None
        self.zero = self.parse('0')
        self.one = self.parse('1')
        self.factorials: Dict[int, Any] = {0: self.one}
        self.constants: Dict[str, Any] = {}
        self.functions: Dict[str, BuiltinFunction] = {}
        self.load_constants()
        self.load_functions()

    # -- representation -------------------------------------------------

    @abstractmethod
    def parse(self, text: str) -> Any:
        """Convert literal or input text into a value."""

    @abstractmethod
    def format(self, value: Any) -> str:
        """Render a value for display."""

    @abstractmethod
    def is_zero(self, value: Any) -> bool:
        pass

    @abstractmethod
    def to_count(self, value: Any) -> int:
        """Floor a value to a plain int (used for repeat counts)."""

    def is_true(self, value: Any) -> bool:
        return not self.is_zero(value)

    def boolean(self, flag: bool) -> Any:
        return self.one if flag else self.zero

    def from_int(self, n: int) -> Any:
        return self.parse(str(n))

    # -- arithmetic hooks -----------------------------------------------

    @abstractmethod
    def add(self, a, b): pass

    @abstractmethod
    def subtract(self, a, b): pass

    @abstractmethod
    def multiply(self, a, b): pass

    @abstractmethod
    def divide(self, a, b): pass

    @abstractmethod
    def remainder(self, a, b): pass

    @abstractmethod
    def power(self, a, b): pass

    @abstractmethod
    def compare(self, a, b) -> Optional[int]:
        """Return -1, 0 or 1, or None when the values are unordered."""

    def equals(self, a, b) -> bool:
        return self.compare(a, b) == 0

    def basic(self, a, op: str, b):
        """Apply a binary operator.

        Relational and equality operators yield the backend's own one or
        zero value.
        """
        if op in ARITHMETIC:
            return getattr(self, ARITHMETIC[op])(a, b)
        if op == '==':
            return self.boolean(self.equals(a, b))
        if op == '!=':
            return self.boolean(not self.equals(a, b))
        if op in RELATIONS:
            c = self.compare(a, b)
            return self.boolean(c is not None and RELATIONS[op](c))
        raise ValueError(f"Unknown operator: {op}")

    # -- primitives for the shared built-ins ----------------------------

    @abstractmethod
    def absolute(self, x): pass

    @abstractmethod
    def integer_value(self, x, mode: str):
        """Round to an integer; `mode` is 'round', 'ceil' or 'floor'."""

    @abstractmethod
    def is_integer(self, x) -> bool:
        pass

    @abstractmethod
    def sqrt(self, x): pass

    @abstractmethod
    def cbrt(self, x): pass

    @abstractmethod
    def random_value(self): pass

    # -- tables ---------------------------------------------------------

    def load_constants(self):
        pass

    def register(self, name: str, arity: Optional[int], fn: Callable[[List[Any]], Any]):
        self.functions[name] = BuiltinFunction(name, arity, fn)

    def load_functions(self):
        self.register('abs', 1, lambda args: self.absolute(args[0]))
        self.register('round', 1, lambda args: self.integer_value(args[0], 'round'))
        self.register('ceil', 1, lambda args: self.integer_value(args[0], 'ceil'))
        self.register('floor', 1, lambda args: self.integer_value(args[0], 'floor'))
        self.register('sign', 1, lambda args: self.sign(args[0]))
        self.register('sqrt', 1, lambda args: self.sqrt(args[0]))
        self.register('cbrt', 1, lambda args: self.cbrt(args[0]))
        self.register('min', None, lambda args: self.extreme('min', args, operator.lt))
        self.register('max', None, lambda args: self.extreme('max', args, operator.gt))
        self.register('sum', None, self.total)
        self.register('random', 0, lambda args: self.random_value())
        self.register('fac', 1, lambda args: self.factorial(args[0]))
        self.register('mod', 2, lambda args: self.modulo(args[0], args[1]))
        self.register('input', 0, lambda args: self.read_input())

    def sign(self, x):
        c = self.compare(x, self.zero)
        if c is None:
            raise ValueError("sign expects an ordered number")
        return self.from_int(c)

    def extreme(self, name: str, args: List[Any], better: Callable[[int, int], bool]):
        if not args:
            raise ValueError(f"{name} expects at least one argument")
        best = args[0]
        for value in args[1:]:
            c = self.compare(value, best)
            if c is None:
                raise ValueError(f"{name} expects ordered numbers")
            if better(c, 0):
                best = value
        return best

    def total(self, args: List[Any]):
        result = self.zero
        for value in args:
            result = self.add(result, value)
        return result

    def factorial(self, x):
        if not self.is_integer(x) or self.compare(x, self.zero) == -1:
            raise ValueError("fac expects a non-negative integer")
        n = self.to_count(x)
        if n in self.factorials:
            return self.factorials[n]
        k = max(k for k in self.factorials if k < n)
        result = self.factorials[k]
        while k < n:
            k += 1
            result = self.multiply(result, self.from_int(k))
            self.factorials[k] = result
        return result

    def modulo(self, a, b):
        """Floored modulo: the result takes the sign of the divisor."""
        r = self.remainder(a, b)
        if not self.is_zero(r) and self.compare(r, self.zero) != self.compare(b, self.zero):
            r = self.add(r, b)
        return r

    def read_input(self):
        if self.input_provider is None:
            raise InputRequired()
        text = self.input_provider()
        try:
            return self.parse(text.strip())
        except (ArithmeticError, ValueError):
            raise ValueError(f"Invalid input value: {text.strip()!r}")
