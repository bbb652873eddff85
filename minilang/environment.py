from typing import Dict, Optional
from minilang.errors import ErrorVal, MiniError, DUPLICATE_DECLARATION, TYPE_MISMATCH, UNDECLARED_VARIABLE
from minilang.types import TypeSpec, Value, coerce, type_of


class Environment:
    """A scope mapping variable names to values, linked to its parent scope."""
    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.values: Dict[str, Value] = {}

    def is_visible(self, name: str) -> bool:
        if name in self.values:
            return True
        if self.parent:
            return self.parent.is_visible(name)
        return False

    def get(self, name: str) -> Value:
        if name in self.values:
            return self.values[name]
        if self.parent:
            return self.parent.get(name)
        raise MiniError(ErrorVal(UNDECLARED_VARIABLE, f"variable '{name}' does not exist in the current scope"))

    def type_of(self, name: str) -> TypeSpec:
        return type_of(self.get(name))

    def declare(self, name: str, value: Value):
        # Shadowing an outer variable counts as a redeclaration.
        if self.is_visible(name):
            raise MiniError(ErrorVal(DUPLICATE_DECLARATION, f"variable '{name}' already exists in the current scope"))
        self.values[name] = value

    def set(self, name: str, value: Value) -> Value:
        if name in self.values:
            current = self.values[name]
            if value is not None and isinstance(current, str) != isinstance(value, str):
                raise MiniError(ErrorVal(TYPE_MISMATCH, f"cannot update variable '{name}' with a value of incompatible type"))
            self.values[name] = coerce(type_of(current), value)
            return self.values[name]
        if self.parent:
            return self.parent.set(name, value)
        raise MiniError(ErrorVal(UNDECLARED_VARIABLE, f"variable '{name}' does not exist in the current scope"))
