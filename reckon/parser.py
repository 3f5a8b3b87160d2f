"""Statement parser for reckon scripts.

Consumes the grouped token stream produced by `group_tokens` and builds
a tuple of statements. Expressions are kept as token runs; only the
statement structure is parsed here. Statement bodies (`{...}` groups
after `if`, `repeat`, `loop` and `else`) are parsed by recursing into the
group's children.

Simple statements end at a newline or `;`. A backslash suppresses the
next terminator, once per backslash.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .ast import (
    Statement, SetVariable, SetFunction, InlineExecution, IfStmt, ElseIfStmt,
    ElseStmt, LoopStmt, RepeatUntil, RepeatTimes, RepeatTimesWith, ReturnStmt,
    BreakStmt, PrintStmt, ThrowStmt,
)
from .errors import fail
from .grouper import fuse_call
from .tokenizer import KEYWORDS, Token, GroupToken, CallToken, source_text

COMPOUND_OPERATORS = ('+', '-', '*', '/', '%', '^')

VALUE_TYPES = ('call_function', 'integer', 'float', 'word', 'group')


def is_terminator(token: Optional[Token]) -> bool:
    return token is not None and token.type == 'symbol' and token.value in ('\n', ';')


def is_block(token: Optional[Token]) -> bool:
    return isinstance(token, GroupToken) and token.opener.value == '{'


def is_name(token: Optional[Token]) -> bool:
    return token is not None and token.type == 'word' and token.value not in KEYWORDS


class Parser:
    def __init__(self, source: str, tokens, strict: bool = False):
        self.source = source
        self.tokens = list(tokens)
        self.strict = strict
        self.pos = 0

    def peek(self, offset: int = 0) -> Optional[Token]:
        index = self.pos + offset
        if index < len(self.tokens):
            return self.tokens[index]
        return None

    def match(self, value: str, offset: int = 0, type: Optional[str] = None) -> bool:
        token = self.peek(offset)
        if token is None or token.value != value:
            return False
        return type is None or token.type == type

    def find_eol(self, index: int) -> Tuple[int, List[Token]]:
        """Collect tokens from `index` up to the end of the line.

        Returns the index of the terminating token (or the length of the
        stream) and the collected tokens, without backslashes and without
        the terminators they suppressed.
        """
        pending = 0
        collected: List[Token] = []
        while index < len(self.tokens):
            token = self.tokens[index]
            if is_terminator(token):
                if pending:
                    pending -= 1
                    index += 1
                    continue
                return index, collected
            if token.type == 'symbol' and token.value == '\\':
                pending += 1
                index += 1
                continue
            pending = 0
            collected.append(token)
            index += 1
        return index, collected

    def scan_to_block(self, index: int, keyword: Token, what: str) -> Tuple[int, List[Token]]:
        """Collect tokens from `index` up to the first `{...}` group on the line."""
        pending = 0
        collected: List[Token] = []
        while index < len(self.tokens):
            token = self.tokens[index]
            if is_block(token):
                return index, collected
            if is_terminator(token):
                if pending:
                    pending -= 1
                    index += 1
                    continue
                break
            if token.type == 'symbol' and token.value == '\\':
                pending += 1
            else:
                pending = 0
                collected.append(token)
            index += 1
        fail(keyword.index, f"Expected a '{{' block after the {what}.", len(keyword.value))

    def span(self, first: Token, last_end: int) -> Tuple[str, int, int]:
        return self.source[first.index:last_end], first.index, last_end

    def parse(self) -> Tuple[Statement, ...]:
        statements: List[Statement] = []
        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            if is_terminator(token):
                self.pos += 1
                continue
            statements.append(self.parse_statement(statements[-1] if statements else None))
        return tuple(statements)

    def parse_statement(self, previous: Optional[Statement]) -> Statement:
        token = self.peek()
        following = self.peek(1)
        if is_name(token):
            compound = self.parse_compound(token)
            if compound is not None:
                return compound
            if self.match('=', 1, 'symbol'):
                return self.parse_set_variable(token, 1, new=False, constant=False)
        if token.type == 'word' and token.value in ('let', 'const'):
            if not is_name(following):
                target = following or token
                fail(target.index, "Expected a variable name.", len(target.value))
            if not self.match('=', 2, 'symbol'):
                fail(following.index, "Expected '=' after the variable name.", len(following.value))
            return self.parse_set_variable(token, 2, new=True, constant=token.value == 'const')
        if isinstance(token, CallToken) and self.match('=', 1, 'symbol'):
            return self.parse_set_function(token)
        if (self.strict and is_name(token) and isinstance(following, GroupToken)
                and following.opener.value == '(' and self.match('=', 2, 'symbol')):
            call = fuse_call(token, following)
            self.pos += 1
            self.tokens[self.pos] = call
            return self.parse_set_function(call)
        if token.type == 'word':
            if token.value == 'if':
                return self.parse_if(token)
            if token.value == 'else':
                return self.parse_else(token, previous)
            if token.value == 'repeat':
                return self.parse_repeat(token)
            if token.value == 'loop':
                return self.parse_loop(token)
            if token.value == 'return':
                end, value = self.find_eol(self.pos + 1)
                self.pos = end
                last = value[-1].end if value else token.end
                return ReturnStmt(*self.span(token, last), keyword=token, value=tuple(value))
            if token.value == 'break':
                self.pos += 1
                return BreakStmt(*self.span(token, token.end), keyword=token)
            if token.value in ('print', 'throw'):
                end, rest = self.find_eol(self.pos + 1)
                self.pos = end
                text = source_text(rest, self.source)
                last = rest[-1].end if rest else token.end
                node = PrintStmt if token.value == 'print' else ThrowStmt
                return node(*self.span(token, last), keyword=token, text=text)
        if token.type in VALUE_TYPES:
            end, value = self.find_eol(self.pos)
            self.pos = end
            return InlineExecution(*self.span(token, value[-1].end), value=tuple(value))
        fail(token.index, "Unexpected symbol.", len(token.value))

    def parse_compound(self, name: Token) -> Optional[SetVariable]:
        op = self.peek(1)
        if op is None or op.type != 'operator' or op.value not in COMPOUND_OPERATORS:
            return None
        second = self.peek(2)
        if op.value in ('+', '-') and second is not None and second.type == 'operator' and second.value == op.value:
            after = self.peek(3)
            if after is not None and not is_terminator(after):
                return None
            one = Token('integer', '1', second.index, second.end)
            self.pos += 3
            source, index, end = self.span(name, second.end)
            return SetVariable(source, index, end, name=name, value=(name, op, one),
                               value_source=f"{name.value} {op.value} 1")
        if second is None or second.type != 'symbol' or second.value != '=':
            return None
        end, collected = self.find_eol(self.pos + 3)
        self.pos = end
        last = collected[-1].end if collected else second.end
        inner = source_text(collected, self.source)
        first_index = collected[0].index if collected else second.end
        group = GroupToken('group', f"({inner})", first_index, last, children=tuple(collected),
                           opener=Token('symbol', '(', first_index, first_index),
                           closer=Token('symbol', ')', last, last))
        return SetVariable(*self.span(name, last), name=name, value=(name, op, group),
                           value_source=f"{name.value} {op.value} ({inner})")

    def parse_set_variable(self, first: Token, equals_offset: int, new: bool, constant: bool) -> SetVariable:
        name = self.peek(equals_offset - 1)
        equals = self.peek(equals_offset)
        end, value = self.find_eol(self.pos + equals_offset + 1)
        self.pos = end
        last = value[-1].end if value else equals.end
        return SetVariable(*self.span(first, last), name=name, value=tuple(value), new=new,
                           constant=constant, value_source=source_text(value, self.source))

    def parse_set_function(self, call: CallToken) -> SetFunction:
        equals = self.peek(1)
        parameters: List[str] = []
        children = [t for t in call.arguments.children if not is_terminator(t)]
        for j, arg in enumerate(children):
            if j % 2 == 0:
                if not is_name(arg):
                    fail(arg.index, "Expected a variable name for the function parameter.", len(arg.value))
                if self.strict and len(arg.value) != 1:
                    fail(arg.index, "Expected a one-character variable name in strict mode.", len(arg.value))
                parameters.append(arg.value)
            elif arg.value != ',':
                fail(arg.index, "Expected a comma between the parameters of the function.", len(arg.value))
        if children and len(children) % 2 == 0:
            comma = children[-1]
            fail(comma.index, "Expected a variable name for the function parameter.", len(comma.value))
        end, value = self.find_eol(self.pos + 2)
        self.pos = end
        last = value[-1].end if value else equals.end
        return SetFunction(*self.span(call, last), name=call.name, parameters=tuple(parameters),
                           value=tuple(value), value_source=source_text(value, self.source))

    def parse_body(self, group: GroupToken) -> Tuple[Statement, ...]:
        return Parser(self.source, group.children, self.strict).parse()

    def parse_condition(self, keyword: Token, start: int, what: str):
        index, condition = self.scan_to_block(start, keyword, what)
        if not condition:
            fail(keyword.index, f"Expected a condition for the {what}.", len(keyword.value))
        block = self.tokens[index]
        self.pos = index + 1
        return condition, block

    def parse_if(self, keyword: Token) -> IfStmt:
        condition, block = self.parse_condition(keyword, self.pos + 1, 'if statement')
        return IfStmt(*self.span(keyword, block.end), keyword=keyword, condition=tuple(condition),
                      body=self.parse_body(block), condition_source=source_text(condition, self.source))

    def parse_else(self, keyword: Token, previous: Optional[Statement]) -> Statement:
        if not isinstance(previous, (IfStmt, ElseIfStmt)):
            fail(keyword.index, "Expected an if statement before else.", len(keyword.value))
        if self.match('if', 1, 'word'):
            condition, block = self.parse_condition(keyword, self.pos + 2, 'else if statement')
            return ElseIfStmt(*self.span(keyword, block.end), keyword=keyword, condition=tuple(condition),
                              body=self.parse_body(block), condition_source=source_text(condition, self.source))
        block = self.peek(1)
        if not is_block(block):
            fail(keyword.index, "Expected a '{' block after else.", len(keyword.value))
        self.pos += 2
        return ElseStmt(*self.span(keyword, block.end), keyword=keyword, body=self.parse_body(block))

    def parse_loop(self, keyword: Token) -> LoopStmt:
        block = self.peek(1)
        if not is_block(block):
            fail(keyword.index, "Expected a '{' block after loop.", len(keyword.value))
        self.pos += 2
        return LoopStmt(*self.span(keyword, block.end), keyword=keyword, body=self.parse_body(block))

    def parse_repeat(self, keyword: Token) -> Statement:
        if self.match('until', 1, 'word'):
            condition, block = self.parse_condition(keyword, self.pos + 2, 'repeat until loop')
            return RepeatUntil(*self.span(keyword, block.end), keyword=keyword, condition=tuple(condition),
                               body=self.parse_body(block), condition_source=source_text(condition, self.source))
        index = self.pos + 1
        amount: List[Token] = []
        while True:
            token = self.tokens[index] if index < len(self.tokens) else None
            if token is None or is_terminator(token) or is_block(token):
                fail(keyword.index, "Expected 'times' after the repeat amount.", len(keyword.value))
            if token.type == 'word' and token.value == 'times':
                break
            amount.append(token)
            index += 1
        if not amount:
            fail(keyword.index, "Expected a repeat amount.", len(keyword.value))
        amount_source = source_text(amount, self.source)
        self.pos = index + 1
        if self.match('with', 0, 'word'):
            variable = self.peek(1)
            if not is_name(variable):
                target = variable or self.peek()
                fail(target.index, "Expected a variable name after 'with'.", len(target.value))
            block = self.peek(2)
            if not is_block(block):
                fail(keyword.index, "Expected a '{' block after the repeat loop.", len(keyword.value))
            self.pos += 3
            return RepeatTimesWith(*self.span(keyword, block.end), keyword=keyword, amount=tuple(amount),
                                   variable=variable, body=self.parse_body(block), amount_source=amount_source)
        block = self.peek()
        if not is_block(block):
            fail(keyword.index, "Expected a '{' block after the repeat loop.", len(keyword.value))
        self.pos += 1
        return RepeatTimes(*self.span(keyword, block.end), keyword=keyword, amount=tuple(amount),
                           body=self.parse_body(block), amount_source=amount_source)


def interpret(source: str, tokens, strict: bool = False) -> Tuple[Statement, ...]:
    """Parse a grouped token sequence into statements."""
    return Parser(source, tokens, strict).parse()
