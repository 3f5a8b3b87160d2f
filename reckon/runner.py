"""Tree-walking evaluator for reckon programs.

The runner executes statements produced by `reckon.parser` and evaluates
expression token runs with a shunting-yard pass. All arithmetic goes
through the numeric backend handed to it; the runner itself never looks
at the concrete number type.

Blocks return either their last value, `None`, or a `ReturnSignal` /
`BreakSignal` that the enclosing construct consumes.
"""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .ast import (
    Program, Statement, SetVariable, SetFunction, InlineExecution, IfStmt, ElseIfStmt,
    ElseStmt, LoopStmt, RepeatUntil, RepeatTimes, RepeatTimesWith, ReturnStmt,
    BreakStmt, PrintStmt, ThrowStmt,
)
from .backends import Backend
from .builtin_function import BuiltinFunction
from .environment import Environment
from .errors import BreakSignal, InputRequired, ReturnSignal, fail
from .grouper import fuse_call
from .parser import VALUE_TYPES, interpret
from .tokenizer import KEYWORDS, CallToken, GroupToken, Token
from .types import NumberVariable, UserFunction, is_function

# operator -> (precedence, right associative)
PRECEDENCE = {
    '^': (4, True),
    '*': (3, False),
    '/': (3, False),
    '%': (3, False),
    '+': (2, False),
    '-': (2, False),
    '~': (2, False),
    '>': (1, False),
    '<': (1, False),
    '>=': (1, False),
    '<=': (1, False),
    '==': (1, False),
    '!=': (1, False),
}

# each script-level call costs about a dozen Python frames
RECURSION_LIMIT = 15000

BLOCK_KEYWORDS = ('if', 'repeat', 'loop')

SIGNALS = (ReturnSignal, BreakSignal)


@dataclass
class ExecutionRecord:
    """One entry of the result stream.

    `output` mixes backend values with label strings, e.g.
    `['x', 'is set to', value]`.
    """
    kind: str
    source: str
    output: List[Any] = field(default_factory=list)
    elapsed: float = 0.0


def describe(ex: Exception) -> str:
    message = str(ex) or type(ex).__name__
    return message[0].upper() + message[1:]


def is_newline(token: Token) -> bool:
    return token.type == 'symbol' and token.value == '\n'


class Runner:
    """Executes one program against one backend instance."""
    def __init__(self, source: str, backend: Backend, strict: bool = False,
                 debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.source = source
        self.backend = backend
        self.strict = strict
        self.records: List[ExecutionRecord] = []
        self.blocks: Dict[Tuple[int, int], Tuple[Statement, ...]] = {}
        self.statement = ''
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None
        self.root = Environment()
        for name, value in backend.constants.items():
            self.root.declare(name, NumberVariable(value, constant=True))
        for name, function in backend.functions.items():
            self.root.declare(name, function)
        self.globals = self.root.child()

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    # Public API
    def run(self, program: Program) -> List[ExecutionRecord]:
        limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(limit, RECURSION_LIMIT))
        try:
            self.execute_block(program.body, self.globals, top=True)
        finally:
            sys.setrecursionlimit(limit)
            if self.debug_fp:
                self.debug_fp.close()
                self.debug_fp = None
        return self.records

    def record(self, stmt: Statement, output: List[Any], start: float) -> ExecutionRecord:
        entry = ExecutionRecord(stmt.kind, stmt.source, output, time.perf_counter() - start)
        self.records.append(entry)
        return entry

    # Statements
    def execute_block(self, statements: Sequence[Statement], scope: Environment,
                      top: bool = False, report: bool = True) -> Any:
        """Run statements in `scope`.

        Returns a signal if one ended the block, otherwise the value of the
        last inline execution or executed branch (None if there was none).
        """
        last = None
        matched = False
        for stmt in statements:
            if top:
                self.statement = stmt.source
            if isinstance(stmt, (ElseIfStmt, ElseStmt)) and matched:
                continue
            if isinstance(stmt, (IfStmt, ElseIfStmt, ElseStmt)):
                matched, result = self.execute_branch(stmt, scope, top, report)
            else:
                result = self.execute(stmt, scope, top, report)
            if isinstance(result, SIGNALS):
                return result
            if result is not None:
                last = result
        return last

    def execute(self, stmt: Statement, scope: Environment, top: bool, report: bool) -> Any:
        if self.debug_level >= 1:
            self.debug(f"{stmt.kind}: {stmt.source}")
        start = time.perf_counter()
        if isinstance(stmt, SetVariable):
            return self.set_variable(stmt, scope, top, start)
        if isinstance(stmt, SetFunction):
            return self.set_function(stmt, scope, top, start)
        if isinstance(stmt, InlineExecution):
            value = self.execute_expression(stmt.value, scope, stmt.index)
            if report:
                self.record(stmt, [value], start)
            return value
        if isinstance(stmt, LoopStmt):
            entry = self.record(stmt, ['loop'], start) if top else None
            result = self.execute_loop(stmt, scope, report)
            return self.finish(entry, start, result)
        if isinstance(stmt, RepeatUntil):
            entry = self.record(stmt, ['a repeat loop will continue until', stmt.condition_source],
                                start) if top else None
            result = self.execute_repeat_until(stmt, scope, report)
            return self.finish(entry, start, result)
        if isinstance(stmt, (RepeatTimes, RepeatTimesWith)):
            amount = self.execute_expression(stmt.amount, scope, stmt.keyword.end)
            entry = self.record(stmt, ['a repeat loop will continue', amount, 'times'],
                                start) if top else None
            result = self.execute_repeat_times(stmt, amount, scope, report)
            return self.finish(entry, start, result)
        if isinstance(stmt, ReturnStmt):
            if not stmt.value:
                return ReturnSignal(self.backend.zero)
            return ReturnSignal(self.execute_expression(stmt.value, scope, stmt.keyword.end))
        if isinstance(stmt, BreakStmt):
            return BreakSignal()
        if isinstance(stmt, PrintStmt):
            self.record(stmt, [stmt.text], start)
            return None
        if isinstance(stmt, ThrowStmt):
            fail(stmt.index, stmt.text or 'Error', len(stmt.source))
        raise NotImplementedError(f"execute: unexpected statement type {type(stmt)}")

    def finish(self, entry: Optional[ExecutionRecord], start: float, result: Any) -> Any:
        if entry is not None:
            entry.elapsed = time.perf_counter() - start
        return result

    def check_name(self, name: Token):
        if self.strict and len(name.value) != 1:
            fail(name.index, "Expected a one-character variable name in strict mode.", len(name.value))

    def set_variable(self, stmt: SetVariable, scope: Environment, top: bool, start: float):
        name = stmt.name.value
        self.check_name(stmt.name)
        found = scope.find(name)
        if found is not None:
            owner, variable = found
            if variable.constant:
                if name == 'π':
                    fail(stmt.name.index, f"π ≠ {stmt.value_source}", len(name))
                fail(stmt.name.index, "Cannot redeclare constants.", len(name))
            if stmt.constant and owner is scope:
                fail(stmt.name.index, "Cannot redeclare a variable as a constant.", len(name))
        value = self.execute_expression(stmt.value, scope, stmt.name.end)
        if found is not None and not stmt.new:
            found[0].declare(name, NumberVariable(value))
        else:
            scope.declare(name, NumberVariable(value, constant=stmt.constant))
        if self.debug_level >= 2:
            self.debug(f"declare {name} = {self.backend.format(value)}")
        if top:
            self.record(stmt, [name, 'is set to', value], start)
        return None

    def set_function(self, stmt: SetFunction, scope: Environment, top: bool, start: float):
        name = stmt.name.value
        self.check_name(stmt.name)
        found = scope.find(name)
        if found is not None and found[1].constant:
            fail(stmt.name.index, "Cannot redeclare constants.", len(name))
        function = UserFunction(name, stmt.parameters, stmt.value, scope)
        (found[0] if found is not None else scope).declare(name, function)
        signature = f"{name}({', '.join(stmt.parameters)})"
        if self.debug_level >= 2:
            self.debug(f"define function {signature}")
        if top:
            self.record(stmt, [signature, 'is set to', stmt.value_source], start)
        return None

    def condition(self, stmt, scope: Environment) -> bool:
        value = self.execute_expression(stmt.condition, scope, stmt.keyword.end)
        truthy = self.backend.is_true(value)
        if self.debug_level >= 3:
            self.debug(f"{stmt.kind} condition {stmt.condition_source} -> {truthy}")
        return truthy

    def execute_branch(self, stmt, scope: Environment, top: bool, report: bool) -> Tuple[bool, Any]:
        start = time.perf_counter()
        if self.debug_level >= 1:
            self.debug(f"{stmt.kind}: {stmt.source}")
        if isinstance(stmt, ElseStmt):
            entry = self.record(stmt, ['the code will be executed otherwise'], start) if top else None
        else:
            if not self.condition(stmt, scope):
                return False, None
            entry = self.record(stmt, ['the code will be executed if', stmt.condition_source],
                                start) if top else None
        result = self.execute_block(stmt.body, scope.child(), report=report)
        return True, self.finish(entry, start, result)

    def execute_loop(self, stmt: LoopStmt, scope: Environment, report: bool):
        while True:
            result = self.execute_block(stmt.body, scope.child(), report=report)
            if isinstance(result, BreakSignal):
                return None
            if isinstance(result, ReturnSignal):
                return result

    def execute_repeat_until(self, stmt: RepeatUntil, scope: Environment, report: bool):
        while not self.condition(stmt, scope):
            result = self.execute_block(stmt.body, scope.child(), report=report)
            if isinstance(result, BreakSignal):
                return None
            if isinstance(result, ReturnSignal):
                return result
        return None

    def execute_repeat_times(self, stmt, amount: Any, scope: Environment, report: bool):
        try:
            count = self.backend.to_count(amount)
        except (ArithmeticError, ValueError) as ex:
            fail(stmt.keyword.index, describe(ex), len(stmt.keyword.value))
        variable = stmt.variable if isinstance(stmt, RepeatTimesWith) else None
        if variable is not None:
            self.check_name(variable)
            found = scope.find(variable.value)
            if found is not None and found[1].constant:
                fail(variable.index, "Cannot redeclare constants.", len(variable.value))
        for i in range(count):
            if self.debug_level >= 3:
                self.debug(f"repeat iteration {i + 1} of {count}")
            body_scope = scope.child()
            if variable is not None:
                body_scope.declare(variable.value, NumberVariable(self.backend.from_int(i + 1), constant=True))
                body_scope = body_scope.child()
            result = self.execute_block(stmt.body, body_scope, report=report)
            if isinstance(result, BreakSignal):
                return None
            if isinstance(result, ReturnSignal):
                return result
        return None

    # Expressions
    def execute_expression(self, tokens: Sequence[Token], scope: Environment, offset: int) -> Any:
        tokens = [t for t in tokens if not is_newline(t)]
        if not tokens:
            fail(offset, "Empty expression.", 2)
        first = tokens[0]
        if first.type == 'word' and first.value in BLOCK_KEYWORDS:
            return self.execute_inline_block(tokens, scope)
        if self.strict:
            tokens = self.split_words(tokens, scope)
        if first.type == 'operator' and first.value in ('+', '-'):
            tokens.insert(0, Token('integer', '0', first.index, first.index))
        if len(tokens) == 1:
            return self.evaluate_token(tokens[0], scope)

        values: List[Any] = []
        operators: List[Token] = []
        expect_value = True
        for token in tokens:
            if token.type in VALUE_TYPES:
                if not expect_value:
                    operators.append(Token('operator', '*', token.index, token.index))
                values.append(self.evaluate_token(token, scope))
                expect_value = False
            elif token.type == 'operator':
                if expect_value:
                    fail(token.index, "Unexpected operator.", len(token.value))
                if token.value == '!':
                    values[-1] = self.factorial(values[-1], token)
                    continue
                operators.append(token)
                expect_value = True
            else:
                fail(token.index, "Unexpected symbol.", len(token.value))
        if expect_value:
            last = operators[-1]
            fail(last.index, "Expected an expression after the operator.", len(last.value))
        return self.evaluate_postfix(self.to_postfix(values, operators))

    def to_postfix(self, values: List[Any], operators: List[Token]) -> List[Any]:
        output: List[Any] = [values[0]]
        stack: List[Token] = []
        for op, value in zip(operators, values[1:]):
            precedence, right = PRECEDENCE[op.value]
            while stack:
                top = PRECEDENCE[stack[-1].value][0]
                if top > precedence or (top == precedence and not right):
                    output.append(stack.pop())
                else:
                    break
            stack.append(op)
            output.append(value)
        while stack:
            output.append(stack.pop())
        return output

    def evaluate_postfix(self, postfix: List[Any]) -> Any:
        stack: List[Any] = []
        for item in postfix:
            if isinstance(item, Token):
                b = stack.pop()
                a = stack.pop()
                stack.append(self.apply(a, item, b))
            else:
                stack.append(item)
        return stack[0]

    def apply(self, a: Any, op: Token, b: Any) -> Any:
        try:
            return self.backend.basic(a, op.value, b)
        except (ArithmeticError, ValueError) as ex:
            fail(op.index, describe(ex), max(len(op.value), 1))

    def factorial(self, value: Any, token: Token) -> Any:
        try:
            return self.backend.functions['fac']([value])
        except (ArithmeticError, ValueError) as ex:
            fail(token.index, describe(ex), len(token.value))

    def names_function(self, name: str, scope: Environment) -> bool:
        variable = scope.get(name)
        return variable is not None and is_function(variable)

    def split_words(self, tokens: List[Token], scope: Environment) -> List[Token]:
        """Split multi-letter words into one-letter words (strict mode).

        A word (whole or a single letter) directly followed by a `(` group
        is fused into a call when it names a function.
        """
        split: List[Token] = []
        for i, token in enumerate(tokens):
            following = tokens[i + 1] if i + 1 < len(tokens) else None
            if token.type != 'word' or len(token.value) == 1 or token.value in KEYWORDS:
                split.append(token)
            elif (isinstance(following, GroupToken) and following.opener.value == '('
                  and token.end == following.index and self.names_function(token.value, scope)):
                split.append(token)
            else:
                split.extend(Token('word', ch, token.index + k, token.index + k + 1)
                             for k, ch in enumerate(token.value))
        fused: List[Token] = []
        for token in split:
            back = fused[-1] if fused else None
            if (isinstance(token, GroupToken) and token.opener.value == '(' and back is not None
                    and back.type == 'word' and back.end == token.index
                    and self.names_function(back.value, scope)):
                fused[-1] = fuse_call(back, token)
            else:
                fused.append(token)
        if self.debug_level >= 3:
            self.debug(f"strict rewrite: {' '.join(t.value for t in fused)}")
        return fused

    def evaluate_token(self, token: Token, scope: Environment) -> Any:
        if token.type in ('integer', 'float'):
            return self.backend.parse(token.value)
        if token.type == 'word':
            return self.lookup(token, scope)
        if isinstance(token, CallToken):
            return self.call(token, scope)
        if isinstance(token, GroupToken):
            return self.evaluate_group(token, scope)
        if token.type == 'operator':
            fail(token.index, "Unexpected operator.", len(token.value))
        fail(token.index, "Unexpected symbol.", len(token.value))

    def lookup(self, token: Token, scope: Environment) -> Any:
        variable = scope.get(token.value)
        if variable is None:
            fail(token.index, "Undefined variable.", len(token.value))
        if is_function(variable):
            fail(token.index, "Cannot use a function as a variable.", len(token.value))
        return variable.value

    def block_value(self, result: Any) -> Any:
        if isinstance(result, ReturnSignal):
            return result.value
        if result is None or isinstance(result, BreakSignal):
            return self.backend.zero
        return result

    def evaluate_group(self, group: GroupToken, scope: Environment) -> Any:
        if group.opener.value == '(':
            return self.execute_expression(group.children, scope, group.index)
        key = (group.index, group.end)
        if key not in self.blocks:
            self.blocks[key] = interpret(self.source, group.children, self.strict)
        return self.block_value(self.execute_block(self.blocks[key], scope.child(), report=False))

    def execute_inline_block(self, tokens: List[Token], scope: Environment) -> Any:
        """Evaluate an expression that starts with `if`, `repeat` or `loop`."""
        key = (tokens[0].index, tokens[-1].end)
        if key not in self.blocks:
            self.blocks[key] = interpret(self.source, tokens, self.strict)
        return self.block_value(self.execute_block(self.blocks[key], scope.child(), report=False))

    def split_arguments(self, group: GroupToken) -> List[List[Token]]:
        children = [t for t in group.children if not is_newline(t)]
        if not children:
            return []
        arguments: List[List[Token]] = []
        current: List[Token] = []
        for token in children:
            if token.type == 'symbol' and token.value == ',':
                if not current:
                    fail(token.index, "Unexpected comma.")
                arguments.append(current)
                current = []
            else:
                current.append(token)
        if not current:
            fail(group.closer.index, "Unexpected end of the call argument.")
        arguments.append(current)
        return arguments

    def call(self, token: CallToken, scope: Environment) -> Any:
        name = token.name.value
        if name == 'exit':
            fail(token.index, "Exited the program.", len(token.value))
        target = scope.get(name)
        if target is None:
            fail(token.name.index, "Undefined function.", len(name))
        if not is_function(target):
            fail(token.name.index, "Cannot use a numeric variable as a function.", len(name))
        args: List[Any] = []
        for argument in self.split_arguments(token.arguments):
            if len(argument) == 1 and argument[0].type == 'word' and self.names_function(argument[0].value, scope):
                args.append(scope.get(argument[0].value))
            else:
                args.append(self.execute_expression(argument, scope, argument[0].index))
        if isinstance(target, BuiltinFunction):
            return self.call_builtin(target, args, token)
        return self.call_user(target, args, token)

    def call_builtin(self, function: BuiltinFunction, args: List[Any], token: CallToken) -> Any:
        if function.arity is not None and len(args) != function.arity:
            fail(token.index, f"Expected {function.arity} arguments, got {len(args)}", len(token.value))
        if any(is_function(arg) for arg in args):
            fail(token.index, f"Expected the number arguments for the built-in function: {function.name}",
                 len(token.value))
        try:
            return function(args)
        except InputRequired:
            raise InputRequired(self.statement)
        except (ArithmeticError, ValueError) as ex:
            fail(token.index, describe(ex), len(token.value))

    def call_user(self, function: UserFunction, args: List[Any], token: CallToken) -> Any:
        if len(args) != len(function.parameters):
            fail(token.index, f"Expected {len(function.parameters)} arguments, got {len(args)}",
                 len(token.value))
        call_scope = function.scope.child()
        for parameter, arg in zip(function.parameters, args):
            call_scope.declare(parameter, arg if is_function(arg) else NumberVariable(arg))
        if self.debug_level >= 2:
            self.debug(f"call {function.name}")
        try:
            return self.execute_expression(function.body, call_scope, token.end)
        except RecursionError:
            fail(token.index, "Maximum call depth exceeded.", len(token.value))
