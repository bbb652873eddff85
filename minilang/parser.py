"""Parser for the MiniLang language.

The source text is fed into a Lark LALR parser configured with the grammar
below, and the resulting parse tree is transformed into the AST defined in
`ast.py` by `ASTTransformer`.

A program is a sequence of global declarations and function declarations.
Conditions (relational operators, `&&`, `||`, `!`) share the expression
grammar so that parentheses can group either; the interpreter decides at
runtime whether a node is used as a condition or as a value.

The `parse_program` function is the public entry point and returns a
`Program` AST node representing the entire source file.
"""

from __future__ import annotations

from typing import List

from lark import Lark, Token, Transformer
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken

from .ast import (
    Program, VarDecl, FuncParam, FuncDecl, Block, IfStmt, WhileStmt, ForStmt,
    ReturnStmt, ExprStmt, Assign, BinaryOp, UnaryOp, IncDec, Literal, Ident,
    Call, Print,
)
from .errors import ParseError
from .types import TypeSpec


MINILANG_GRAMMAR = r"""
    ?start: program
    program: _global_line*

    _global_line: declaration ";"
                | function_decl

    declaration: type_name NAME ["=" expression]

    function_decl: type_name NAME "(" [param_list] ")" block
                 | VOID NAME "(" [param_list] ")" block
    param_list: param ("," param)*
    param: type_name NAME

    !type_name: "int" | "float" | "double" | "string"

    block: "{" statement* "}"

    ?statement: declaration ";"
              | assignment ";"
              | expr_stmt ";"
              | return_stmt ";"
              | if_stmt
              | while_stmt
              | for_stmt
              | block

    assignment: NAME assign_op expression
    !assign_op: "=" | "+=" | "-=" | "*=" | "/=" | "%="

    expr_stmt: effect
    return_stmt: "return" [expression]

    if_stmt: IF "(" expression ")" block
           | IF "(" expression ")" block ELSE block
           | IF "(" expression ")" block ELSE if_stmt
    while_stmt: WHILE "(" expression ")" block
    for_stmt: FOR "(" [for_init] ";" [expression] ";" [for_update] ")" block
    ?for_init: declaration | assignment
    ?for_update: assignment | expr_stmt

    // Conditions
    ?expression: or_test
    ?or_test: and_test
            | or_test "||" and_test      -> logical_or
    ?and_test: not_test
             | and_test "&&" not_test    -> logical_and
    ?not_test: "!" not_test              -> logical_not
             | comparison
    ?comparison: sum
               | sum "<" sum             -> lt
               | sum ">" sum             -> gt
               | sum "<=" sum            -> le
               | sum ">=" sum            -> ge
               | sum "==" sum            -> eq
               | sum "!=" sum            -> ne

    // Arithmetic
    ?sum: product
        | sum "+" product                -> add
        | sum "-" product                -> sub
    ?product: power
            | product "*" power          -> mul
            | product "/" power          -> div
            | product "%" power          -> mod
    ?power: unary
          | unary "^" power              -> pow
          | unary "**" power             -> pow
    ?unary: atom
          | "-" unary                    -> neg
    ?atom: INT_LIT                       -> int_lit
         | FLOAT_LIT                     -> float_lit
         | DOUBLE_LIT                    -> double_lit
         | STRING_LIT                    -> string_lit
         | NAME                          -> var
         | effect
         | "(" expression ")"

    ?effect: call
           | print_call
           | NAME "++"                   -> post_inc
           | NAME "--"                   -> post_dec
           | "++" NAME                   -> pre_inc
           | "--" NAME                   -> pre_dec
    call: NAME "(" [arg_list] ")"
    arg_list: expression ("," expression)*
    print_call: "print" "(" expression ")"

    // Tokens
    IF: "if"
    ELSE: "else"
    WHILE: "while"
    FOR: "for"
    VOID: "void"
    FLOAT_LIT.3: /\d+(\.\d+)?[fF]/
    DOUBLE_LIT.2: /\d+\.\d+/
    INT_LIT.1: /\d+/
    STRING_LIT: /"[^"\n]*"/

    %import common.CNAME -> NAME
    %import common.WS
    %ignore WS

    // Comments
    LINE_COMMENT: /\/\/[^\n]*/
    %ignore LINE_COMMENT
    BLOCK_COMMENT: /\/\*[\s\S]*?\*\//
    %ignore BLOCK_COMMENT
"""


MINILANG_PARSER = Lark(
    MINILANG_GRAMMAR,
    parser='lalr',
    propagate_positions=True,
    maybe_placeholders=True,
)


class ASTTransformer(Transformer):
    """Transforms the raw parse tree into an AST."""

    def program(self, items):
        return Program(body=list(items))

    def type_name(self, items):
        return TypeSpec(str(items[0]))

    def declaration(self, items):
        type_spec = items[0]
        name = str(items[1])
        expr = items[2] if len(items) > 2 else None
        return VarDecl(type_spec=type_spec, name=name, expr=expr)

    def param_list(self, items):
        return list(items)

    def param(self, items):
        return FuncParam(items[0], str(items[1]))

    def function_decl(self, items):
        return_type = items[0]
        if isinstance(return_type, Token):
            return_type = TypeSpec.void()
        name = str(items[1])
        params: List[FuncParam] = items[2] if isinstance(items[2], list) else []
        body = items[3]
        return FuncDecl(name=name, params=params, return_type=return_type, body=body)

    def block(self, items):
        return Block(statements=list(items))

    def assignment(self, items):
        return Assign(name=str(items[0]), op=items[1], value=items[2])

    def assign_op(self, items):
        return str(items[0])

    def expr_stmt(self, items):
        return ExprStmt(items[0])

    def return_stmt(self, items):
        value = items[0] if items else None
        return ReturnStmt(value)

    def if_stmt(self, items):
        keyword, condition, then_block = items[0], items[1], items[2]
        else_block = None
        else_line = 0
        if len(items) > 3:
            else_line = items[3].line
            else_block = items[4]
            if isinstance(else_block, IfStmt):
                else_block = Block([else_block])
        return IfStmt(condition, then_block, else_block, line=keyword.line, else_line=else_line)

    def while_stmt(self, items):
        keyword, condition, body = items
        return WhileStmt(condition, body, line=keyword.line)

    def for_stmt(self, items):
        keyword, init, condition, post, body = items
        return ForStmt(init, condition, post, body, line=keyword.line)

    # Expressions
    def logical_or(self, items):
        return BinaryOp('||', items[0], items[1])

    def logical_and(self, items):
        return BinaryOp('&&', items[0], items[1])

    def logical_not(self, items):
        return UnaryOp('!', items[0])

    def lt(self, items):
        return BinaryOp('<', items[0], items[1])

    def gt(self, items):
        return BinaryOp('>', items[0], items[1])

    def le(self, items):
        return BinaryOp('<=', items[0], items[1])

    def ge(self, items):
        return BinaryOp('>=', items[0], items[1])

    def eq(self, items):
        return BinaryOp('==', items[0], items[1])

    def ne(self, items):
        return BinaryOp('!=', items[0], items[1])

    def add(self, items):
        return BinaryOp('+', items[0], items[1])

    def sub(self, items):
        return BinaryOp('-', items[0], items[1])

    def mul(self, items):
        return BinaryOp('*', items[0], items[1])

    def div(self, items):
        return BinaryOp('/', items[0], items[1])

    def mod(self, items):
        return BinaryOp('%', items[0], items[1])

    def pow(self, items):
        return BinaryOp('^', items[0], items[1])

    def neg(self, items):
        return UnaryOp('-', items[0])

    def int_lit(self, items):
        return Literal(int(items[0]), 'int')

    def float_lit(self, items):
        return Literal(float(str(items[0])[:-1]), 'float')

    def double_lit(self, items):
        return Literal(float(items[0]), 'double')

    def string_lit(self, items):
        # No escape sequences: the quotes are simply dropped.
        return Literal(str(items[0])[1:-1], 'string')

    def var(self, items):
        return Ident(str(items[0]))

    def post_inc(self, items):
        return IncDec('++', str(items[0]), prefix=False)

    def post_dec(self, items):
        return IncDec('--', str(items[0]), prefix=False)

    def pre_inc(self, items):
        return IncDec('++', str(items[0]), prefix=True)

    def pre_dec(self, items):
        return IncDec('--', str(items[0]), prefix=True)

    def call(self, items):
        args = items[1] if len(items) > 1 and items[1] is not None else []
        return Call(name=str(items[0]), args=args)

    def arg_list(self, items):
        return list(items)

    def print_call(self, items):
        return Print(items[0])


def parse_program(source: str) -> Program:
    """Parse MiniLang source code into an AST Program.

    Syntax errors are reported as `ParseError` with the offending position.
    """
    try:
        tree = MINILANG_PARSER.parse(source)
    except UnexpectedToken as e:
        raise ParseError(f"unexpected token {e.token!r}", e.line, e.column) from e
    except UnexpectedCharacters as e:
        raise ParseError(f"unexpected character {source[e.pos_in_stream]!r}", e.line, e.column) from e
    except UnexpectedInput as e:
        raise ParseError("unexpected end of input", getattr(e, 'line', 0), getattr(e, 'column', 0)) from e
    return ASTTransformer().transform(tree)
