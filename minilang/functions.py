from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

from minilang.ast import Block, FuncParam
from minilang.errors import (
    ErrorVal, MiniError, ARITY_MISMATCH, DUPLICATE_DECLARATION, UNDECLARED_FUNCTION,
)
from minilang.types import TypeSpec, Value, type_name


@dataclass
class FunctionEntry:
    name: str
    return_type: TypeSpec
    params: List[FuncParam]
    body: Block

    @property
    def signature(self) -> Tuple[str, ...]:
        return tuple(p.type_spec.kind for p in self.params)

    @property
    def arity(self) -> int:
        return len(self.params)

    def __repr__(self) -> str:
        return f"<function {self.return_type} {self.name}({', '.join(self.signature)})>"


class FunctionTable:
    """All user functions of a program, filled once during the load phase."""
    def __init__(self):
        self.entries: Dict[str, List[FunctionEntry]] = {}

    def __contains__(self, name: str) -> bool:
        return name in self.entries

    def __iter__(self) -> Iterator[FunctionEntry]:
        for overloads in self.entries.values():
            yield from overloads

    def __len__(self) -> int:
        return sum(len(overloads) for overloads in self.entries.values())

    def get(self, name: str) -> List[FunctionEntry]:
        return self.entries.get(name, [])

    def declare(self, name: str, return_type: TypeSpec, params: List[FuncParam], body: Block) -> FunctionEntry:
        entry = FunctionEntry(name, return_type, list(params), body)
        for existing in self.get(name):
            if existing.arity != entry.arity:
                raise MiniError(ErrorVal(DUPLICATE_DECLARATION, f"function '{name}' already exists"))
            if existing.signature == entry.signature:
                raise MiniError(ErrorVal(DUPLICATE_DECLARATION, f"duplicate function definition for '{name}' with identical parameter types"))
        seen = set()
        for param in entry.params:
            if param.name in seen:
                raise MiniError(ErrorVal(DUPLICATE_DECLARATION, f"two parameters have the same name '{param.name}' in function '{name}'"))
            seen.add(param.name)
        self.entries.setdefault(name, []).append(entry)
        return entry

    def resolve(self, name: str, args: List[Value]) -> FunctionEntry:
        """Pick the overload of `name` to call with `args`.

        Same-arity overloads coexist and the one whose parameter types equal
        the argument runtime types wins. Without an exact match the most
        recently declared overload is used and the arguments are coerced to
        its parameter types, so earlier overloads are reachable only through
        an exact match.
        """
        overloads = self.get(name)
        if not overloads:
            raise MiniError(ErrorVal(UNDECLARED_FUNCTION, f"function '{name}' was not declared"))
        if len(args) != overloads[0].arity:
            raise MiniError(ErrorVal(ARITY_MISMATCH, f"function '{name}' expects {overloads[0].arity} arguments, got {len(args)}"))
        arg_types = tuple(type_name(a) for a in args)
        for entry in overloads:
            if entry.signature == arg_types:
                return entry
        return overloads[-1]
