import pytest

from reckon.ast import (
    SetVariable, SetFunction, InlineExecution, IfStmt, ElseIfStmt, ElseStmt, LoopStmt,
    RepeatUntil, RepeatTimes, RepeatTimesWith, ReturnStmt, BreakStmt, PrintStmt, ThrowStmt,
)
from reckon.errors import ReckonError
from reckon.interpreter import parse_program


def parse(source, strict=False):
    return parse_program(source, strict).body


def parse_error(source, strict=False):
    with pytest.raises(ReckonError) as exc:
        parse_program(source, strict)
    return exc.value.err


def test_declarations():
    let, const, plain = parse('let x = 1\nconst y = 2\nz = x + y')
    assert isinstance(let, SetVariable) and let.new and not let.constant
    assert const.new and const.constant
    assert not plain.new and plain.value_source == 'x + y'
    assert let.source == 'let x = 1'


def test_declaration_name_and_value():
    let, plain = parse('let s = 0\nx = 5 * s')
    assert let.name.value == 's'
    assert [t.value for t in let.value] == ['0']
    assert plain.name.value == 'x'
    assert [t.value for t in plain.value] == ['5', '*', 's']
    assert plain.source == 'x = 5 * s'


def test_compound_assignment():
    (stmt,) = parse('x += 2 * 3')
    assert isinstance(stmt, SetVariable)
    assert stmt.name.value == 'x'
    assert stmt.value_source == 'x + (2 * 3)'
    assert [t.value for t in stmt.value[2].children] == ['2', '*', '3']


def test_increment_and_decrement():
    inc, dec = parse('a++\nb--')
    assert inc.value_source == 'a + 1'
    assert dec.value_source == 'b - 1'


def test_function_declaration():
    (stmt,) = parse('f(a, b) = a + b')
    assert isinstance(stmt, SetFunction)
    assert stmt.name.value == 'f'
    assert stmt.parameters == ('a', 'b')
    assert stmt.value_source == 'a + b'


def test_function_without_parameters():
    (stmt,) = parse('g() = 4')
    assert stmt.parameters == ()


def test_function_parameters_must_alternate():
    assert parse_error('f(a,) = 1').message == 'Expected a variable name for the function parameter.'
    assert parse_error('f(1) = 1').message == 'Expected a variable name for the function parameter.'
    assert parse_error('f(a b) = 1').message == 'Expected a comma between the parameters of the function.'


def test_strict_function_declaration():
    (stmt,) = parse('f(x) = x ^ 2', strict=True)
    assert isinstance(stmt, SetFunction)
    assert stmt.parameters == ('x',)
    err = parse_error('f(ab) = 1', strict=True)
    assert err.message == 'Expected a one-character variable name in strict mode.'
    assert err.offset == 2


def test_if_else_chain():
    first, second, third = parse('if x { 1 } else if y { 2 } else { 3 }')
    assert isinstance(first, IfStmt) and first.condition_source == 'x'
    assert isinstance(second, ElseIfStmt) and second.condition_source == 'y'
    assert isinstance(third, ElseStmt)
    assert isinstance(third.body[0], InlineExecution)


def test_else_requires_if():
    assert parse_error('x = 1\nelse { 2 }').message == 'Expected an if statement before else.'


def test_if_requires_block_and_condition():
    assert parse_error('if x > 1').message == "Expected a '{' block after the if statement."
    assert parse_error('if { 1 }').message == 'Expected a condition for the if statement.'


def test_loops():
    loop, until, times, counted = parse(
        'loop { break }\n'
        'repeat until n > 3 { n++ }\n'
        'repeat 2 + 1 times { }\n'
        'repeat 4 times with i { print i }'
    )
    assert isinstance(loop, LoopStmt) and isinstance(loop.body[0], BreakStmt)
    assert isinstance(until, RepeatUntil) and until.condition_source == 'n > 3'
    assert isinstance(times, RepeatTimes) and times.amount_source == '2 + 1' and times.body == ()
    assert isinstance(counted, RepeatTimesWith) and counted.variable.value == 'i'
    assert isinstance(counted.body[0], PrintStmt)


def test_repeat_errors():
    assert parse_error('repeat 3 { }').message == "Expected 'times' after the repeat amount."
    assert parse_error('repeat times { }').message == 'Expected a repeat amount.'
    assert parse_error('repeat 3 times with { }').message == "Expected a variable name after 'with'."
    assert parse_error('loop 1').message == "Expected a '{' block after loop."


def test_print_and_throw_capture_raw_text():
    shown, thrown = parse('print  a  +  b\nthrow bad (thing)')
    assert isinstance(shown, PrintStmt) and shown.text == 'a  +  b'
    assert isinstance(thrown, ThrowStmt) and thrown.text == 'bad (thing)'


def test_return_statement():
    (stmt,) = parse('return 1 + 2')
    assert isinstance(stmt, ReturnStmt)
    assert [t.value for t in stmt.value] == ['1', '+', '2']


def test_semicolons_and_continuation():
    statements = parse('1; 2\n3 + \\\n 4')
    assert [s.source for s in statements] == ['1', '2', '3 + \\\n 4']
    assert [t.value for t in statements[2].value] == ['3', '+', '4']


def test_unexpected_symbol_at_statement_start():
    err = parse_error('x = 1\n) 2')
    assert err.message == 'Unexpected symbol.'
    assert err.offset == 6
    err = parse_error('-3 + 5')
    assert (err.message, err.offset) == ('Unexpected symbol.', 0)


def test_parsing_is_idempotent():
    source = 'let a = 1\nif a { repeat 2 times { a += 1 } }\nf(x) = x * a'
    assert parse_program(source) == parse_program(source)
