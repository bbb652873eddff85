"""Static reports over a loaded MiniLang program.

Two reports are produced from the interpreter's state:

* the global variables, one line each with name, runtime type and value;
* per-function details: whether the function is `main`, recursive (its body
  calls itself by name) or iterative, its return type, parameters, local
  declarations and the control structures it contains with their lines.

Neither report evaluates anything; they only read the global environment,
the function table and the function bodies.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Iterator, List, Tuple

from .ast import Call, ForStmt, IfStmt, Node, VarDecl, WhileStmt
from .environment import Environment
from .functions import FunctionEntry, FunctionTable
from .types import format_literal, type_name


@dataclass
class FunctionDetails:
    name: str
    kind: str  # 'main', 'recursive' or 'iterative'
    return_type: str
    params: List[Tuple[str, str]]
    local_variables: List[Tuple[str, str]] = field(default_factory=list)
    control_structures: List[Tuple[str, int]] = field(default_factory=list)


def iter_children(node) -> Iterator[Node]:
    """Yield the direct child nodes of an AST node in field order."""
    for f in fields(node):
        value = getattr(node, f.name)
        if isinstance(value, Node):
            yield value
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, Node):
                    yield item


def walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal of an AST subtree."""
    yield node
    for child in iter_children(node):
        yield from walk(child)


def is_recursive(name: str, body: Node) -> bool:
    return any(isinstance(n, Call) and n.name == name for n in walk(body))


def local_variables(body: Node) -> List[Tuple[str, str]]:
    return [(n.type_spec.kind, n.name) for n in walk(body) if isinstance(n, VarDecl)]


def control_structures(node: Node) -> List[Tuple[str, int]]:
    structures: List[Tuple[str, int]] = []
    for child in iter_children(node):
        if isinstance(child, IfStmt):
            structures.append(('if', child.line))
            structures.extend(control_structures(child.condition))
            structures.extend(control_structures(child.then_block))
            if child.else_block is not None:
                structures.append(('else', child.else_line))
                structures.extend(control_structures(child.else_block))
            continue
        if isinstance(child, ForStmt):
            structures.append(('for', child.line))
        elif isinstance(child, WhileStmt):
            structures.append(('while', child.line))
        structures.extend(control_structures(child))
    return structures


def describe_function(entry: FunctionEntry) -> FunctionDetails:
    if entry.name == 'main':
        kind = 'main'
    elif is_recursive(entry.name, entry.body):
        kind = 'recursive'
    else:
        kind = 'iterative'
    return FunctionDetails(
        name=entry.name,
        kind=kind,
        return_type=entry.return_type.kind,
        params=[(p.type_spec.kind, p.name) for p in entry.params],
        local_variables=local_variables(entry.body),
        control_structures=control_structures(entry.body),
    )


def global_variable_lines(env: Environment) -> List[str]:
    return [
        f"Name: {name}, Type: {type_name(value)}, Value: {format_literal(value)}"
        for name, value in env.values.items()
    ]


def function_detail_lines(table: FunctionTable) -> List[str]:
    lines: List[str] = []
    for entry in table:
        details = describe_function(entry)
        lines.append(f"Function: {details.name}")
        lines.append(f"  Type: {details.kind}")
        lines.append(f"  Return Type: {details.return_type}")
        lines.append(f"  Parameters: {', '.join(f'{t} {n}' for t, n in details.params)}")
        lines.append("  Local variables:")
        for type_, name in details.local_variables:
            lines.append(f"    {type_} {name}")
        lines.append("  Control Structures:")
        for kind, line in details.control_structures:
            lines.append(f"    <{kind}, {line}>")
        lines.append("")
    return lines


def write_global_variables(env: Environment, path: str):
    with open(path, 'w', encoding='utf-8') as f:
        for line in global_variable_lines(env):
            f.write(line + '\n')


def write_function_details(table: FunctionTable, path: str):
    with open(path, 'w', encoding='utf-8') as f:
        for line in function_detail_lines(table):
            f.write(line + '\n')
