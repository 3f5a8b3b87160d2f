from decimal import Decimal
from fractions import Fraction

import pytest

from reckon.backends import BACKENDS, create_backend
from reckon.errors import InputRequired
from reckon.interpreter import RunOptions, run_program


def value(source, backend, **options):
    result = run_program(source, RunOptions(backend=backend, **options))
    assert result.status == 'ok', result.error
    return result.render(result.records[-1])


def failure(source, backend):
    result = run_program(source, RunOptions(backend=backend))
    assert result.status == 'error'
    return result.error.message


def test_registry():
    assert set(BACKENDS) == {'bignumber', 'fraction', 'decimal', 'complex'}
    with pytest.raises(ValueError):
        create_backend('roman')


@pytest.mark.parametrize('name', sorted(BACKENDS))
def test_common_function_table(name):
    backend = create_backend(name)
    for function in ('abs', 'round', 'ceil', 'floor', 'sign', 'sqrt', 'cbrt', 'min', 'max',
                     'sum', 'random', 'fac', 'mod', 'input'):
        assert function in backend.functions
    assert {'π', 'e'} <= set(backend.constants)
    assert backend.is_true(backend.one)
    assert not backend.is_true(backend.zero)


def test_one_third_across_backends():
    assert value('1 / 3', 'fraction') == '1/3'
    assert value('1 / 3 * 3 == 1', 'fraction') == '1'
    assert value('1 / 3', 'decimal') == '0.33333333333333333333'
    assert value('1 / 3 * 3 == 1', 'decimal') == '0'
    assert value('1 / 3', 'decimal', precision=5) == '0.33333'
    assert value('1 / 3', 'bignumber') == '0.33333333333333333333'
    assert value('2 / 3', 'bignumber', decimal_places=3) == '0.667'


def test_bignumber():
    assert value('2 ^ 64', 'bignumber') == '18446744073709551616'
    assert value('1 / 0', 'bignumber') == 'Infinity'
    assert value('round(2.5) + round(-2.5)', 'bignumber') == '0'
    assert value('round(2.5)', 'bignumber') == '3'
    assert value('sqrt(16)', 'bignumber') == '4'
    assert value('cbrt(-27)', 'bignumber') == '-3'
    assert value('0.1 + 0.2', 'bignumber') == '0.3'
    assert value('isFinite(∞)', 'bignumber') == '0'
    assert value('isNaN(0 / 0)', 'bignumber') == '1'
    assert value('sign(-3)', 'bignumber') == '-1'


def test_fraction():
    assert value('4 ^ 0.5', 'fraction') == '2'
    assert value('(8 / 27) ^ (2 / 3)', 'fraction') == '4/9'
    assert value('gcd(12, 18)', 'fraction') == '6'
    assert value('lcm(4, 6)', 'fraction') == '12'
    assert value('inverse(4)', 'fraction') == '1/4'
    assert value('floor(-7 / 2)', 'fraction') == '-4'
    assert failure('2 ^ 0.5', 'fraction') == 'The result is not a rational number'
    assert failure('1 / 0', 'fraction') == 'Division by zero'
    assert '∞' not in create_backend('fraction').constants


def test_decimal():
    assert value('exp(0)', 'decimal') == '1'
    assert value('ln(1)', 'decimal') == '0'
    assert value('log(1000)', 'decimal') == '3'
    assert value('sin(0)', 'decimal') == '0'
    assert value('hypot(3, 4)', 'decimal') == '5'
    assert value('asin(2)', 'decimal') == 'NaN'
    assert value('cbrt(-8)', 'decimal') == '-2'
    assert value('π', 'decimal', precision=10) == '3.141592654'


def test_complex():
    assert value('i * i', 'complex') == '-1'
    assert value('sqrt(-4)', 'complex') == '2i'
    assert value('(1 + 2i) * (1 - 2i)', 'complex') == '5'
    assert value('abs(3 + 4i)', 'complex') == '5'
    assert value('Re(3 + 4i)', 'complex') == '3'
    assert value('Im(3 + 4i)', 'complex') == '4'
    assert value('conjugate(1 + i)', 'complex') == '1 - i'
    assert value('isReal(i)', 'complex') == '0'
    assert value('2 > 1', 'complex') == '1'
    assert failure('i > 1', 'complex') == 'Ordering is only defined for real numbers'


def test_factorial_cache_is_per_instance():
    first = create_backend('bignumber')
    second = create_backend('bignumber')
    assert first.functions['fac']([Decimal(6)]) == Decimal(720)
    assert 6 in first.factorials
    assert 6 not in second.factorials
    with pytest.raises(ValueError):
        first.functions['fac']([Decimal('2.5')])


def test_random_is_seeded_per_instance():
    one = create_backend('fraction', seed=7)
    two = create_backend('fraction', seed=7)
    draws = [one.functions['random']([]) for _ in range(3)]
    assert draws == [two.functions['random']([]) for _ in range(3)]
    assert all(Fraction(0) <= d < Fraction(1) for d in draws)


def test_input_without_provider_requests_value():
    backend = create_backend('decimal')
    with pytest.raises(InputRequired):
        backend.functions['input']([])
    backend.input_provider = lambda: ' 2.5 '
    assert backend.functions['input']([]) == Decimal('2.5')
