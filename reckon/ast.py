"""Statement tree definitions for reckon scripts.

Statements are produced once by the parser and never mutated afterwards.
Expressions are not parsed into a tree: they stay as runs of grouped
tokens and are evaluated by the runner with a shunting-yard pass. Every
statement keeps the exact source text it was parsed from (`source`) and
its span (`index`, `end`) for diagnostics and result records.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .tokenizer import Token


@dataclass(frozen=True)
class Statement:
    """Base class for all statements."""
    source: str
    index: int
    end: int

    kind = 'statement'


@dataclass(frozen=True)
class SetVariable(Statement):
    name: Token
    value: Tuple[Token, ...]
    new: bool = False
    constant: bool = False
    value_source: str = ''

    kind = 'set_variable'


@dataclass(frozen=True)
class SetFunction(Statement):
    name: Token
    parameters: Tuple[str, ...]
    value: Tuple[Token, ...]
    value_source: str = ''

    kind = 'set_function'


@dataclass(frozen=True)
class InlineExecution(Statement):
    value: Tuple[Token, ...]

    kind = 'inline_execution'


@dataclass(frozen=True)
class IfStmt(Statement):
    keyword: Token
    condition: Tuple[Token, ...]
    body: Tuple[Statement, ...]
    condition_source: str = ''

    kind = 'if'


@dataclass(frozen=True)
class ElseIfStmt(Statement):
    keyword: Token
    condition: Tuple[Token, ...]
    body: Tuple[Statement, ...]
    condition_source: str = ''

    kind = 'elseif'


@dataclass(frozen=True)
class ElseStmt(Statement):
    keyword: Token
    body: Tuple[Statement, ...]

    kind = 'else'


@dataclass(frozen=True)
class LoopStmt(Statement):
    keyword: Token
    body: Tuple[Statement, ...]

    kind = 'loop'


@dataclass(frozen=True)
class RepeatUntil(Statement):
    keyword: Token
    condition: Tuple[Token, ...]
    body: Tuple[Statement, ...]
    condition_source: str = ''

    kind = 'repeat_until'


@dataclass(frozen=True)
class RepeatTimes(Statement):
    keyword: Token
    amount: Tuple[Token, ...]
    body: Tuple[Statement, ...]
    amount_source: str = ''

    kind = 'repeat_times'


@dataclass(frozen=True)
class RepeatTimesWith(Statement):
    keyword: Token
    amount: Tuple[Token, ...]
    variable: Token
    body: Tuple[Statement, ...]
    amount_source: str = ''

    kind = 'repeat_times_with'


@dataclass(frozen=True)
class ReturnStmt(Statement):
    keyword: Token
    value: Tuple[Token, ...]

    kind = 'return'


@dataclass(frozen=True)
class BreakStmt(Statement):
    keyword: Token

    kind = 'break'


@dataclass(frozen=True)
class PrintStmt(Statement):
    keyword: Token
    text: str

    kind = 'print'


@dataclass(frozen=True)
class ThrowStmt(Statement):
    keyword: Token
    text: str

    kind = 'throw'


@dataclass(frozen=True)
class Program:
    """A parsed script together with the source text it came from."""
    source: str
    body: Tuple[Statement, ...]
