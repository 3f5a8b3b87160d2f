from typing import Dict, Optional, Tuple

from .types import Variable


class Environment:
    """A scope mapping names to bindings, with an optional parent.

    A scope never mutates its parent's mapping directly. Lookups return the
    owning scope together with the binding, and reassignment writes
    through that owner.
    """
    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.values: Dict[str, Variable] = {}

    def find(self, name: str) -> Optional[Tuple['Environment', Variable]]:
        scope = self
        while scope is not None:
            if name in scope.values:
                return scope, scope.values[name]
            scope = scope.parent
        return None

    def get(self, name: str) -> Optional[Variable]:
        found = self.find(name)
        return found[1] if found else None

    def declare(self, name: str, variable: Variable):
        self.values[name] = variable

    def child(self) -> 'Environment':
        return Environment(parent=self)
