"""Variable bindings for reckon scopes.

Numbers and functions share one namespace. A binding is one of:

* `NumberVariable` - a value in the active backend's representation;
* `BuiltinFunction` (see `reckon.builtin_function`) - a native function;
* `UserFunction` - a function declared by the script, remembering the
  scope it was declared in so calls resolve names lexically.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple, Union, TYPE_CHECKING

from .builtin_function import BuiltinFunction
from .tokenizer import Token

if TYPE_CHECKING:
    from .environment import Environment


@dataclass
class NumberVariable:
    value: Any
    constant: bool = False

    def __repr__(self) -> str:
        return f"<number {self.value}>"


@dataclass
class UserFunction:
    name: str
    parameters: Tuple[str, ...]
    body: Tuple[Token, ...]
    scope: 'Environment'
    constant: bool = False

    def __repr__(self) -> str:
        return f"<function {self.name}({', '.join(self.parameters)})>"


Variable = Union[NumberVariable, BuiltinFunction, UserFunction]


def is_function(variable: Variable) -> bool:
    return isinstance(variable, (BuiltinFunction, UserFunction))
