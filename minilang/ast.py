"""Abstract Syntax Tree (AST) definitions for MiniLang.

The evaluator consumes these nodes directly. They are produced either by
the text front end in `parser.py` or decoded from JSON by `ast_json.py`.
Control structures carry the source line they start on so that the
function report can list them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Any

from .types import TypeSpec


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Program(Node):
    body: List[Node]


@dataclass
class VarDecl(Node):
    type_spec: TypeSpec
    name: str
    expr: Optional[Node]  # initial value


@dataclass
class FuncParam:
    type_spec: TypeSpec
    name: str


@dataclass
class FuncDecl(Node):
    name: str
    params: List[FuncParam]
    return_type: TypeSpec
    body: 'Block'


@dataclass
class Block(Node):
    statements: List[Node]


@dataclass
class IfStmt(Node):
    condition: Node
    then_block: Block
    else_block: Optional[Block]
    line: int = 0
    else_line: int = 0


@dataclass
class WhileStmt(Node):
    condition: Node
    body: Block
    line: int = 0


@dataclass
class ForStmt(Node):
    init: Optional[Node]  # VarDecl or Assign or None
    condition: Optional[Node]
    post: Optional[Node]  # Assign or ExprStmt or None
    body: Block
    line: int = 0


@dataclass
class ReturnStmt(Node):
    value: Optional[Node]


@dataclass
class ExprStmt(Node):
    expr: Node


@dataclass
class Assign(Node):
    name: str
    op: str  # '=', '+=', '-=', '*=', '/=', '%='
    value: Node


@dataclass
class BinaryOp(Node):
    op: str
    left: Node
    right: Node


@dataclass
class UnaryOp(Node):
    op: str  # '-' or '!'
    operand: Node


@dataclass
class IncDec(Node):
    op: str  # '++' or '--'
    name: str
    prefix: bool


@dataclass
class Literal(Node):
    value: Any
    literal_type: str  # 'int', 'float', 'double', 'string'


@dataclass
class Ident(Node):
    name: str


@dataclass
class Call(Node):
    name: str
    args: List[Node]


@dataclass
class Print(Node):
    expr: Node
