"""JSON serialization/deserialization for the MiniLang AST.

Nodes are encoded as dicts holding a ``"type"`` key with the node class name
plus one key per dataclass field, so a tree built by another tool can be fed
to the interpreter directly. `TypeSpec` values are tagged with ``"__type__"``.
Source line numbers of control structures are part of the encoding.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Dict

from .ast import (
    Program, VarDecl, FuncParam, FuncDecl, Block, IfStmt, WhileStmt, ForStmt,
    ReturnStmt, ExprStmt, Assign, BinaryOp, UnaryOp, IncDec, Literal, Ident,
    Call, Print,
)
from .types import TypeSpec

NODE_TYPES = {
    cls.__name__: cls
    for cls in (
        Program, VarDecl, FuncParam, FuncDecl, Block, IfStmt, WhileStmt, ForStmt,
        ReturnStmt, ExprStmt, Assign, BinaryOp, UnaryOp, IncDec, Literal, Ident,
        Call, Print,
    )
}


def typespec_to_obj(t: TypeSpec) -> Dict[str, Any]:
    return {"kind": t.kind}


def typespec_from_obj(o: Dict[str, Any]) -> TypeSpec:
    return TypeSpec(o["kind"])


def ast_to_obj(node: Any) -> Any:
    if node is None or isinstance(node, (int, float, str, bool)):
        return node
    if isinstance(node, TypeSpec):
        return {"__type__": "TypeSpec", "value": typespec_to_obj(node)}
    if isinstance(node, list):
        return [ast_to_obj(item) for item in node]
    name = type(node).__name__
    if NODE_TYPES.get(name) is not type(node):
        raise TypeError(f"Unsupported node for serialization: {name}")
    obj = {"type": name}
    for f in fields(node):
        obj[f.name] = ast_to_obj(getattr(node, f.name))
    return obj


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (int, float, str, bool)):
        return obj
    if isinstance(obj, list):
        return [ast_from_obj(item) for item in obj]
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    if obj.get("__type__") == "TypeSpec":
        return typespec_from_obj(obj["value"])
    cls = NODE_TYPES.get(obj.get("type"))
    if cls is None:
        raise ValueError(f"Unknown AST node type: {obj.get('type')}")
    # absent keys fall back to the field defaults (line numbers)
    kwargs = {f.name: ast_from_obj(obj[f.name]) for f in fields(cls) if f.name in obj}
    return cls(**kwargs)
