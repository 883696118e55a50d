from typing import Any, Dict, Optional

from luxbin.errors import LuxbinError


class Environment:
    """One frame of the scope chain mapping names to values and constness."""
    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.values: Dict[str, Any] = {}
        self.consts: Dict[str, bool] = {}

    def define(self, name: str, value: Any, is_const: bool = False):
        # Redefinition in the same frame replaces the binding
        self.values[name] = value
        self.consts[name] = is_const

    def get(self, name: str) -> Any:
        if name in self.values:
            return self.values[name]
        if self.parent:
            return self.parent.get(name)
        raise LuxbinError('UndefinedVariable', f"Undefined variable: '{name}'")

    def set(self, name: str, value: Any):
        if name in self.values:
            if self.consts.get(name):
                raise LuxbinError('ConstantReassignment', f"Cannot reassign constant: '{name}'")
            self.values[name] = value
            return
        if self.parent:
            self.parent.set(name, value)
            return
        raise LuxbinError('UndefinedVariable', f"Undefined variable: '{name}'")

    def has(self, name: str) -> bool:
        if name in self.values:
            return True
        if self.parent:
            return self.parent.has(name)
        return False
