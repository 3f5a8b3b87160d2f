"""Bracket grouping.

Collapses every `(...)` and `{...}` region of a flat token list into a
single `GroupToken`. Square brackets are reserved but inert. While a group
is open its children are collected in a frame on an explicit stack; the
finished `GroupToken` only points downward to its children.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .errors import fail
from .tokenizer import KEYWORDS, Token, GroupToken, CallToken

BRACKETS = {
    '(': ')',
    '{': '}',
}


@dataclass
class _Frame:
    opener: Token
    children: List[Token]


def fuse_call(name: Token, group: GroupToken) -> CallToken:
    """Fuse a word and the parenthesized group after it into a call."""
    return CallToken('call_function', name.value + group.value, name.index, group.end,
                     name=name, arguments=group)


def group_tokens(source: str, tokens: List[Token], strict: bool = False) -> List[Token]:
    """Group bracketed regions of `tokens`.

    Outside strict mode a word immediately followed by a `(` group is
    fused into a `CallToken`. In strict mode words are split into single
    letters later on, so fusion is deferred to expression evaluation.
    """
    top: List[Token] = []
    stack: List[_Frame] = []
    for token in tokens:
        children = stack[-1].children if stack else top
        if token.type == 'symbol':
            if token.value in BRACKETS:
                stack.append(_Frame(token, []))
                continue
            if stack and token.value == BRACKETS[stack[-1].opener.value]:
                frame = stack.pop()
                group = GroupToken('group', source[frame.opener.index:token.end], frame.opener.index, token.end,
                                   children=tuple(frame.children), opener=frame.opener, closer=token)
                parent = stack[-1].children if stack else top
                back = parent[-1] if parent else None
                if (not strict and back is not None and back.type == 'word'
                        and back.value not in KEYWORDS and frame.opener.value == '('):
                    parent[-1] = fuse_call(back, group)
                    continue
                parent.append(group)
                continue
        children.append(token)
    if stack:
        fail(stack[-1].opener.index, "Unfinished bracket.")
    return top
