from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class BuiltinFunction:
    """A native function exposed by a numeric backend.

    `arity` is the exact number of arguments, or None for functions that
    accept any number of them. Built-ins are always constant bindings.
    """
    name: str
    arity: Optional[int]
    fn: Any
    constant: bool = True

    def __call__(self, args):
        return self.fn(args)

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"
