"""Interpreter for the MiniLang language.

This module implements the evaluator: a load phase that fills the function
table and the global environment from a `Program`, and a tree walker that
executes `main` and everything it calls. Statements return either None or a
`ReturnSignal`; callers check the result after every nested statement so
that a `return` unwinds through blocks and loops without exceptions.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional

from .ast import (
    Program, VarDecl, FuncDecl, Block, IfStmt, WhileStmt, ForStmt, ReturnStmt,
    ExprStmt, Assign, BinaryOp, UnaryOp, IncDec, Literal, Ident, Call, Print, Node,
)
from .environment import Environment
from .errors import (
    ErrorVal, MiniError, EMPTY_RETURN, INVALID_OPERATION, MISSING_RETURN, OVERFLOW,
    STACK_OVERFLOW, TYPE_MISMATCH, UNDECLARED_FUNCTION,
)
from .functions import FunctionTable
from .operators import ARITHMETIC_OPS, LOGICAL_OPS, RELATIONAL_OPS, binary_op, compare, negate
from .parser import parse_program
from .types import (
    Float32, INT_MAX, TypeSpec, Value, coerce, format_value, to_bool, type_name,
)


@dataclass
class ReturnSignal:
    """Result of executing a `return`; `value` is None for a bare `return;`."""
    value: Value


class Interpreter:
    """Core interpreter that executes a MiniLang AST."""
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.global_env = Environment()
        self.functions = FunctionTable()
        self.scope_depth = 0
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w') if debug_level > 0 else None

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def load(self, program: Program):
        """Register functions and evaluate global declarations."""
        for node in program.body:
            if isinstance(node, FuncDecl):
                self.functions.declare(node.name, node.return_type, node.params, node.body)
                if self.debug_level >= 2:
                    self.debug(f"define function {node.name}({', '.join(str(p.type_spec) for p in node.params)})")
            elif isinstance(node, VarDecl):
                # global initializers may call functions too
                try:
                    self.execute(node, self.global_env)
                except RecursionError:
                    raise MiniError(ErrorVal(STACK_OVERFLOW, 'maximum call depth exceeded')) from None
            else:
                raise NotImplementedError(f"load: unexpected top-level node {type(node).__name__}")

    def run_main(self):
        if 'main' not in self.functions:
            raise MiniError(ErrorVal(UNDECLARED_FUNCTION, 'function main does not exist'))
        try:
            self.call_function('main', [])
        except RecursionError:
            raise MiniError(ErrorVal(STACK_OVERFLOW, 'maximum call depth exceeded')) from None

    def run(self, program: Program):
        try:
            self.load(program)
            self.run_main()
        finally:
            self.close()

    @contextmanager
    def scope(self, parent: Environment, label: str = 'block') -> Iterator[Environment]:
        """Push a child environment of `parent` for the duration of the block."""
        env = Environment(parent=parent)
        self.scope_depth += 1
        if self.debug_level >= 3:
            self.debug(f"push {label} scope (depth {self.scope_depth})")
        try:
            yield env
        finally:
            self.scope_depth -= 1
            if self.debug_level >= 3:
                self.debug(f"pop {label} scope (depth {self.scope_depth})")

    def call_function(self, name: str, args: List[Value]) -> Value:
        entry = self.functions.resolve(name, args)
        if self.debug_level >= 1:
            self.debug(f"call {name}({', '.join(format_value(a) for a in args)})")
        # Function bodies see the globals, never the caller's locals.
        with self.scope(self.global_env, name) as call_env:
            for param, arg in zip(entry.params, args):
                call_env.declare(param.name, coerce(param.type_spec, arg))
            signal = self.execute_block(entry.body.statements, call_env)
        if signal is None:
            if entry.return_type.is_void:
                return None
            raise MiniError(ErrorVal(MISSING_RETURN, f'no return was found for function {name}'))
        if signal.value is None:
            raise MiniError(ErrorVal(EMPTY_RETURN, f'no return value was provided for function {name}'))
        result = coerce(entry.return_type, signal.value)
        if self.debug_level >= 1:
            self.debug(f"return {name} -> {format_value(result)}")
        return result

    def execute_block(self, statements: List[Node], env: Environment) -> Optional[ReturnSignal]:
        for stmt in statements:
            result = self.execute(stmt, env)
            # propagate return signals
            if result is not None:
                return result
        return None

    def execute(self, node: Node, env: Environment) -> Optional[ReturnSignal]:
        if isinstance(node, VarDecl):
            value = self.evaluate(node.expr, env) if node.expr is not None else None
            env.declare(node.name, coerce(node.type_spec, value))
            if self.debug_level >= 2:
                self.debug(f"declare {node.type_spec} {node.name} = {format_value(env.values[node.name])}")
            return None
        if isinstance(node, Assign):
            self.assign(node, env)
            return None
        if isinstance(node, ExprStmt):
            self.evaluate(node.expr, env)
            return None
        if isinstance(node, ReturnStmt):
            value = self.evaluate(node.value, env) if node.value is not None else None
            return ReturnSignal(value)
        if isinstance(node, Block):
            with self.scope(env) as block_env:
                return self.execute_block(node.statements, block_env)
        if isinstance(node, IfStmt):
            truthy = self.test(node.condition, env)
            if self.debug_level >= 3:
                self.debug(f"if (line {node.line}) -> {truthy}")
            if truthy:
                return self.execute(node.then_block, env)
            if node.else_block is not None:
                return self.execute(node.else_block, env)
            return None
        if isinstance(node, WhileStmt):
            while self.test(node.condition, env):
                res = self.execute(node.body, env)
                if res is not None:
                    return res
            return None
        if isinstance(node, ForStmt):
            # the initializer binds in the enclosing scope and outlives the loop
            if node.init is not None:
                self.execute(node.init, env)
            while node.condition is None or self.test(node.condition, env):
                res = self.execute(node.body, env)
                if res is not None:
                    return res
                if node.post is not None:
                    self.execute(node.post, env)
            return None
        # catch any other nodes
        raise NotImplementedError(f"execute: unexpected node type {type(node).__name__}")

    def test(self, node: Node, env: Environment) -> bool:
        """Evaluate a node in condition position."""
        if isinstance(node, BinaryOp) and node.op in RELATIONAL_OPS:
            return compare(node.op, self.evaluate(node.left, env), self.evaluate(node.right, env))
        if isinstance(node, BinaryOp) and node.op in LOGICAL_OPS:
            # both sides are always evaluated
            left = self.test(node.left, env)
            right = self.test(node.right, env)
            return (left and right) if node.op == '&&' else (left or right)
        if isinstance(node, UnaryOp) and node.op == '!':
            return not self.test(node.operand, env)
        return to_bool(self.evaluate(node, env))

    def evaluate(self, node: Node, env: Environment) -> Value:
        # Evaluate expression nodes
        if isinstance(node, Literal):
            return self.literal_value(node)
        if isinstance(node, Ident):
            return env.get(node.name)
        if isinstance(node, BinaryOp):
            if node.op in ARITHMETIC_OPS:
                left = self.evaluate(node.left, env)
                right = self.evaluate(node.right, env)
                return binary_op(node.op, left, right)
            raise MiniError(ErrorVal(INVALID_OPERATION, f'condition operator {node.op} cannot be used as a value'))
        if isinstance(node, UnaryOp):
            if node.op == '-':
                return negate(self.evaluate(node.operand, env))
            raise MiniError(ErrorVal(INVALID_OPERATION, f'condition operator {node.op} cannot be used as a value'))
        if isinstance(node, IncDec):
            return self.step(node, env)
        if isinstance(node, Call):
            args = [self.evaluate(arg, env) for arg in node.args]
            return self.call_function(node.name, args)
        if isinstance(node, Print):
            value = self.evaluate(node.expr, env)
            print(format_value(value))
            return value
        raise NotImplementedError(f"evaluate: unexpected node type {type(node).__name__}")

    def literal_value(self, node: Literal) -> Value:
        kind = node.literal_type
        if kind == 'int':
            if node.value > INT_MAX:
                raise MiniError(ErrorVal(OVERFLOW, f'integer literal {node.value} is out of range for int'))
            return int(node.value)
        if kind == 'float':
            return Float32(node.value)
        if kind == 'double':
            return float(node.value)
        if kind == 'string':
            return str(node.value)
        raise MiniError(ErrorVal(TYPE_MISMATCH, f'unknown literal type {kind}'))

    def assign(self, node: Assign, env: Environment) -> Value:
        current = env.get(node.name)
        value = self.evaluate(node.value, env)
        if node.op == '=':
            result = env.set(node.name, value)
        elif isinstance(current, str):
            if node.op != '+=':
                raise MiniError(ErrorVal(TYPE_MISMATCH, f"cannot use operator {node.op} on a string '{node.name}'"))
            if value is not None and not isinstance(value, str):
                raise MiniError(ErrorVal(TYPE_MISMATCH, f"cannot append {type_name(value)} to string '{node.name}'"))
            result = env.set(node.name, current + coerce(TypeSpec.string(), value))
        else:
            kind = env.type_of(node.name)
            if node.op == '%=' and kind.kind != 'int':
                raise MiniError(ErrorVal(TYPE_MISMATCH, f"cannot use operator %= on a {kind} '{node.name}'"))
            if isinstance(value, str):
                raise MiniError(ErrorVal(TYPE_MISMATCH, f"cannot use operator {node.op} with a string on {kind} '{node.name}'"))
            result = env.set(node.name, binary_op(node.op[0], current, coerce(kind, value)))
        if self.debug_level >= 2:
            self.debug(f"assign {node.name} {node.op} -> {format_value(result)}")
        return result

    def step(self, node: IncDec, env: Environment) -> Value:
        current = env.get(node.name)
        if isinstance(current, str):
            verb = 'increment' if node.op == '++' else 'decrement'
            raise MiniError(ErrorVal(INVALID_OPERATION, f"cannot {verb} string '{node.name}'"))
        updated = env.set(node.name, binary_op(node.op[0], current, 1))
        return updated if node.prefix else current


def run_program(source: str, debug_level: int = 0) -> Interpreter:
    """Convenience function to parse and run a MiniLang program from a string."""
    ast_program = parse_program(source)
    interpreter = Interpreter(debug_level=debug_level)
    interpreter.run(ast_program)
    return interpreter


def compile_module(file_path: str, debug_level: int = 0) -> Interpreter:
    """Parse and load a MiniLang file without running it, returning the interpreter."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    ast_program = parse_program(source)
    interpreter = Interpreter(debug_level=debug_level)
    interpreter.load(ast_program)
    return interpreter
