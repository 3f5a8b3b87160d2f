"""Tokenizer for reckon scripts.

Scanning is delegated to a Lark lexer configured with one terminal per
lexeme class. The lexer output is then post-processed into `Token`
objects, which is where numbers are assembled: a digit run that follows a
`.` which itself follows an integer is merged backward into a single
float token, and a `.` with no integer before it becomes an implicit
leading zero (`.5` -> `0.5`).

The tokenizer never rejects input. Every character that is not
whitespace, part of a comment or a reserved character ends up in some
token, so syntax validation is left entirely to the later stages.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from lark import Lark


@dataclass(frozen=True)
class Token:
    type: str
    value: str
    index: int
    end: int


@dataclass(frozen=True)
class GroupToken(Token):
    children: Tuple[Token, ...] = ()
    opener: Token = None
    closer: Token = None


@dataclass(frozen=True)
class CallToken(Token):
    name: Token = None
    arguments: GroupToken = None


OPERATORS = ('+', '-', '*', '/', '%', '^', '>', '<', '!')
COMPARISONS = ('>=', '<=', '==', '!=')
SYMBOLS = ('=', '(', ')', '[', ']', '{', '}', '.', ',', '\n', ';', '\\')

KEYWORDS = frozenset({
    'let', 'const', 'return', 'if', 'else', 'print', 'throw', 'break',
    'repeat', 'until', 'times', 'with', 'loop',
})


TOKEN_GRAMMAR = r"""
    start: _lexeme*
    _lexeme: COMPARISON | OPERATOR | SYMBOL | INTEGER | WORD

    COMPARISON: /[<>=!]=/
    OPERATOR: /[+\-*\/%^<>!]/
    SYMBOL: /[=()\[\]{}.,\n;\\]/
    INTEGER: /[0-9]+/
    WORD: /[^\s0-9+\-*\/%^<>!=()\[\]{}.,;\\#][^\s+\-*\/%^<>!=()\[\]{}.,;\\#]*/

    COMMENT: /#[^\n]*/
    WHITESPACE: /[^\S\n]+/
    %ignore COMMENT
    %ignore WHITESPACE
"""


TOKEN_LEXER = Lark(TOKEN_GRAMMAR, parser='lalr', lexer='basic')

_KINDS = {
    'COMPARISON': 'operator',
    'OPERATOR': 'operator',
    'SYMBOL': 'symbol',
    'INTEGER': 'integer',
    'WORD': 'word',
}


def tokenize(source: str) -> List[Token]:
    """Convert source text into a flat list of tokens."""
    tokens: List[Token] = []
    for lexeme in TOKEN_LEXER.lex(source):
        start = lexeme.start_pos
        end = start + len(lexeme.value)
        kind = _KINDS[lexeme.type]
        if kind == 'integer' and tokens and tokens[-1].value == '.':
            dot = tokens[-1]
            before = tokens[-2] if len(tokens) > 1 else None
            if before is not None and before.type == 'integer':
                tokens[-2:] = [Token('float', f"{before.value}.{lexeme.value}", before.index, end)]
            else:
                tokens[-1] = Token('float', f"0.{lexeme.value}", dot.index, end)
            continue
        tokens.append(Token(kind, str(lexeme.value), start, end))
    return tokens


def source_text(tokens, source: str) -> str:
    """Return the exact source substring covered by `tokens`."""
    if not tokens:
        return ''
    return source[tokens[0].index:tokens[-1].end]
