import pytest

from reckon.interpreter import RunOptions, run_program


def run(source, **options):
    result = run_program(source, RunOptions(**options))
    assert result.status == 'ok', result.error
    return result


def last(source, **options):
    result = run(source, **options)
    return result.render(result.records[-1])


def error(source, **options):
    result = run_program(source, RunOptions(**options))
    assert result.status == 'error'
    return result.error


@pytest.mark.parametrize('source, expected', [
    ('2 + 3 * 4', '14'),
    ('2 ^ 3 ^ 2', '512'),
    ('(2 + 3) * 4', '20'),
    ('(-2 ^ 2)', '-4'),
    ('10 - 4 - 3', '3'),
    ('3 > 2', '1'),
    ('2 == 3', '0'),
    ('1 + 1 >= 2', '1'),
    ('5!', '120'),
    ('3! + 1', '7'),
    ('2(3 + 4)', '14'),
    ('mod(-7, 3)', '2'),
    ('(-7 % 3)', '-1'),
    ('max(1, 5, 3)', '5'),
    ('sum()', '0'),
])
def test_expressions(source, expected):
    assert last(source) == expected


def test_records_carry_kind_source_and_output():
    result = run('let x = 1\nx + 1')
    declaration, inline = result.records
    assert declaration.kind == 'set_variable'
    assert declaration.output[:2] == ['x', 'is set to']
    assert inline.kind == 'inline_execution'
    assert inline.source == 'x + 1'
    assert result.render(inline) == '2'
    assert inline.elapsed >= 0


def test_plain_assignment_declares_unknown_names():
    assert last('y = 4\ny') == '4'


def test_reassignment_writes_through_to_owning_scope():
    assert last('let x = 1\nif 1 { x = 2 }\nx') == '2'


def test_shadowing_inside_block():
    assert last('let x = 5\nif 1 { let x = 10 }\nx') == '5'


def test_constant_reassignment_is_fatal():
    err = error('const x = 5\nx = 6')
    assert err.message == 'Cannot redeclare constants.'
    assert err.offset == 12


def test_constant_redeclaration_in_same_scope():
    assert error('let x = 1\nconst x = 2').message == 'Cannot redeclare a variable as a constant.'


def test_builtins_and_constants_are_constant():
    assert error('let sum = 1').message == 'Cannot redeclare constants.'
    assert error('π = 3').message == 'π ≠ 3'


def test_name_errors():
    assert error('a + 1').message == 'Undefined variable.'
    assert error('sum + 1').message == 'Cannot use a function as a variable.'
    assert error('nope(1)').message == 'Undefined function.'
    assert error('let a = 1\na(2)').message == 'Cannot use a numeric variable as a function.'


def test_call_errors():
    assert error('sqrt(1, 2)').message == 'Expected 1 arguments, got 2'
    assert error('f(x) = x\nf()').message == 'Expected 1 arguments, got 0'
    assert error('max(1, , 2)').message == 'Unexpected comma.'
    assert error('max(1,)').message == 'Unexpected end of the call argument.'
    assert error('exit()').message == 'Exited the program.'


def test_expression_errors():
    err = error('()')
    assert (err.message, err.offset, err.length) == ('Empty expression.', 0, 2)
    assert error('1 +').message == 'Expected an expression after the operator.'
    assert error('1 * * 2').message == 'Unexpected operator.'
    assert error('1 , 2').message == 'Unexpected symbol.'


def test_backend_errors_are_anchored_at_operator():
    err = error('1 + 1 / 0', backend='fraction')
    assert err.message == 'Division by zero'
    assert err.offset == 6


def test_recursion():
    assert last('f(n) = if n <= 1 { 1 } else { n * f(n - 1) }\nf(5)') == '120'


def test_deep_recursion():
    source = 'f(n) = if n <= 1 { 1 } else { n + f(n - 1) }\n'
    assert last(source + 'f(500)') == '125250'
    assert last(source + 'f(100)') == '5050'


def test_unbounded_recursion_is_fatal():
    assert error('g(n) = g(n + 1)\ng(1)').message == 'Maximum call depth exceeded.'


def test_leading_sign_needs_an_expression_context():
    assert last('x = -3 + 5\nx') == '2'
    assert error('-3 + 5').message == 'Unexpected symbol.'


def test_return_leaves_function_body():
    source = 'f(x) = { if x > 0 { return 1 }; 0 }\n'
    assert last(source + 'f(5)') == '1'
    assert last(source + 'f(-1)') == '0'


def test_block_value_is_last_inline_value():
    assert last('{ let a = 2; a * 3 }') == '6'
    assert last('let v = if 0 { 1 } else { 2 }\nv') == '2'


def test_functions_use_defining_scope():
    assert last('let a = 1\ng() = a\nh(a) = g()\nh(5)') == '1'


def test_function_arguments_by_reference():
    assert last('twice(g, x) = g(g(x))\nsq(x) = x * x\ntwice(sq, 3)') == '81'
    err = error('sq(x) = x\nabs(sq)')
    assert err.message == 'Expected the number arguments for the built-in function: abs'


def test_repeat_times_counts():
    assert last('let s = 0\nrepeat 5 times with i { s = s + i }\ns') == '15'
    assert last('let c = 0\nrepeat 2.7 times { c++ }\nc') == '2'
    assert last('let c = 0\nrepeat -1 times { c++ }\nc') == '0'


def test_repeat_counter_is_constant():
    assert error('repeat 2 times with i { i = 5 }').message == 'Cannot redeclare constants.'


def test_infinite_repeat_amount():
    assert error('repeat ∞ times { }').message == 'Expected a finite repeat amount.'


def test_repeat_until_and_loop():
    assert last('let n = 0\nrepeat until n >= 4 { n++ }\nn') == '4'
    assert last('let n = 0\nloop { n += 2; if n > 5 { break } }\nn') == '6'


def test_else_if_chain_runs_one_branch():
    result = run('let x = 2\nif x == 1 { print one } else if x == 2 { print two } else { print other }')
    assert result.lines()[1:] == ['else if x == 2 { print two } => the code will be executed if x == 2', 'two']


def test_top_level_break_ends_run():
    result = run('print a\nbreak\nprint b')
    assert result.lines() == ['a']


def test_throw():
    err = error('throw out of range')
    assert err.message == 'out of range'
    assert err.length == len('throw out of range')


def test_strict_mode():
    result = run('let x = 3\nlet y = 4\n2xy\nf(t) = t ^ 2\nf(x) + 1', strict=True)
    assert result.lines()[2:] == ['2xy => 24', 'f(t) = t ^ 2 => f(t) is set to t ^ 2', 'f(x) + 1 => 10']
    err = error('let ab = 1', strict=True)
    assert err.message == 'Expected a one-character variable name in strict mode.'


def test_debug_output(tmp_path):
    debug_file = tmp_path / 'debug.txt'
    run('let x = 1\nif x { x }', debug_level=3, debug_file=str(debug_file))
    text = debug_file.read_text(encoding='utf-8')
    assert 'set_variable: let x = 1' in text
    assert 'declare x = 1' in text
    assert 'if condition x -> True' in text
