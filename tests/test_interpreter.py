import pytest

from minilang.errors import MiniError
from minilang.interpreter import Interpreter, compile_module, parse_program, run_program
from minilang.types import type_name


def run(source):
    interp = Interpreter()
    interp.run(parse_program(source))
    return interp


def output(capsys):
    return capsys.readouterr().out.strip().split('\n')


def failure(source):
    interp = Interpreter()
    with pytest.raises(MiniError) as excinfo:
        interp.run(parse_program(source))
    assert interp.scope_depth == 0
    return excinfo.value.kind


def test_run_program_returns_interpreter(capsys):
    interp = run_program('int g = 2; void main() { print(g * 21); }')
    assert output(capsys) == ['42']
    assert interp.global_env.get('g') == 2
    assert interp.scope_depth == 0


def test_missing_main():
    assert failure('int x = 1;') == 'UndeclaredFunction'


def test_declaration_defaults(capsys):
    run('void main() { int i; float f; double d; string s; print(i); print(f); print(d); print(s); print("end"); }')
    assert output(capsys) == ['0', '0', '0', '', 'end']


def test_declaration_coerces_initializer(capsys):
    interp = run('double d = 3; int i = 2.5; float f = 1; void main() { }')
    assert type_name(interp.global_env.get('d')) == 'double'
    assert interp.global_env.get('i') == 2
    assert type_name(interp.global_env.get('f')) == 'float'


def test_string_into_int_is_type_mismatch():
    assert failure('void main() { int x = "a"; }') == 'TypeMismatch'
    assert failure('void main() { string s = 1; }') == 'TypeMismatch'


def test_duplicate_declaration():
    assert failure('void main() { int x; int x; }') == 'DuplicateDeclaration'
    assert failure('int x; void main() { int x; }') == 'DuplicateDeclaration'
    assert failure('void f(int a) { int a; } void main() { f(1); }') == 'DuplicateDeclaration'


def test_block_scope_ends_with_block():
    assert failure('void main() { if (1) { int y = 2; } print(y); }') == 'UndeclaredVariable'


def test_sibling_blocks_may_reuse_names(capsys):
    run('void main() { if (1) { int y = 1; print(y); } if (1) { int y = 2; print(y); } }')
    assert output(capsys) == ['1', '2']


def test_increment_then_decrement_restores(capsys):
    run('void main() { double v = 1.5; ++v; --v; print(v); int n = 3; n++; n--; print(n); }')
    assert output(capsys) == ['1.5', '3']


def test_increment_string_is_invalid():
    assert failure('void main() { string s = "a"; s++; }') == 'InvalidOperation'


def test_compound_assignment(capsys):
    run(
        'void main() { int x = 10; x += 2.6; print(x); x -= 1; x *= 2; x /= 4; print(x);'
        ' x %= 4; print(x); double d = 1; d /= 4; print(d); }'
    )
    assert output(capsys) == ['13', '6', '2', '0.25']


def test_compound_assignment_on_strings(capsys):
    run('void main() { string s = "ab"; s += "cd"; print(s); }')
    assert output(capsys) == ['abcd']
    assert failure('void main() { string s = "ab"; s -= "b"; }') == 'TypeMismatch'
    assert failure('void main() { string s = "ab"; s += 1; }') == 'TypeMismatch'
    assert failure('void main() { int x = 1; x += "b"; }') == 'TypeMismatch'
    assert failure('void main() { double d = 1; d %= 2; }') == 'TypeMismatch'


def test_appending_void_result_to_string_adds_nothing(capsys):
    run('void f() { } void main() { string s = "a"; s += f(); print(s); }')
    assert output(capsys) == ['a']


def test_string_expressions(capsys):
    run('void main() { print("a" + "b"); }')
    assert output(capsys) == ['ab']
    assert failure('void main() { print("a" - "b"); }') == 'InvalidOperation'
    assert failure('void main() { print(1 + "a"); }') == 'TypeMismatch'


def test_modulo(capsys):
    run('void main() { print(5 % 2); }')
    assert output(capsys) == ['1']
    assert failure('void main() { print(5.0 % 2); }') == 'TypeMismatch'


def test_for_loop_counts(capsys):
    run('void main() { for (int i = 0; i < 3; i++) { print(i); } print(i); }')
    assert output(capsys) == ['0', '1', '2', '3']


def test_for_initializer_belongs_to_enclosing_block():
    source = 'void main() { for (int i = 0; i < 3; i++) { } for (int i = 0; i < 1; i++) { } }'
    assert failure(source) == 'DuplicateDeclaration'


def test_for_without_condition_stops_on_return(capsys):
    run('int first(int n) { for (;;) { if (n % 7 == 0) { return n; } n++; } } void main() { print(first(30)); }')
    assert output(capsys) == ['35']


def test_while_with_early_return(capsys):
    interp = run(
        'int find() { int i = 0; while (1) { if (i == 4) { return i; } i += 1; } }'
        ' void main() { print(find()); }'
    )
    assert output(capsys) == ['4']
    assert interp.scope_depth == 0


def test_else_branch(capsys):
    run('void main() { if (1 > 2) { print("then"); } else { print("else"); } }')
    assert output(capsys) == ['else']


def test_logical_operators_evaluate_both_sides(capsys):
    run(
        'int seen = 0; int mark() { seen++; return 1; }'
        ' void main() { if (0 && mark()) { print("no"); } if (1 || mark()) { print("yes"); } print(seen); }'
    )
    assert output(capsys) == ['yes', '2']


def test_not_and_truthiness(capsys):
    run('void main() { if (!0) { print("a"); } if ("") { print("b"); } if (!(1 < 2)) { print("c"); } }')
    assert output(capsys) == ['a', 'b']


def test_comparison_as_value_is_invalid():
    assert failure('void main() { int x = 1 < 2; }') == 'InvalidOperation'
    assert failure('void main() { print(!1); }') == 'InvalidOperation'


def test_recursion(capsys):
    run('int fact(int n) { if (n <= 1) { return 1; } return n * fact(n - 1); } void main() { print(fact(6)); }')
    assert output(capsys) == ['720']


def test_callee_cannot_see_caller_locals():
    source = 'void g() { print(x); } void main() { int x = 1; g(); }'
    assert failure(source) == 'UndeclaredVariable'


def test_functions_share_globals(capsys):
    run('int total = 0; void add(int n) { total += n; } void main() { add(2); add(3); print(total); }')
    assert output(capsys) == ['5']


def test_arguments_are_coerced_to_parameter_types(capsys):
    run('void show(double d) { print(d / 2); } void main() { show(3); }')
    assert output(capsys) == ['1.5']
    assert failure('void f(int a) { } void main() { f("x"); }') == 'TypeMismatch'


def test_return_value_is_coerced(capsys):
    run('int half(double d) { return d / 2; } void main() { print(half(5.0)); }')
    assert output(capsys) == ['2']


def test_arity_mismatch():
    assert failure('void f(int a) { } void main() { f(); }') == 'ArityMismatch'


def test_undeclared_function():
    assert failure('void main() { nothing(); }') == 'UndeclaredFunction'


def test_missing_and_empty_return():
    assert failure('int f() { } void main() { f(); }') == 'MissingReturn'
    assert failure('int f() { return; } void main() { f(); }') == 'EmptyReturn'
    assert failure('void f() { return; } void main() { f(); }') == 'EmptyReturn'


def test_void_call_as_value():
    assert failure('void f() { } void main() { int x = f() + 1; }') == 'InvalidOperation'


def test_void_function_may_return_a_value(capsys):
    run('void f() { print("in"); return 1; print("after"); } void main() { f(); }')
    assert output(capsys) == ['in']


def test_overloads(capsys):
    run(
        'void g(int a) { print("int"); } void g(float a) { print("float"); }'
        ' void main() { g(1); g(1.5f); }'
    )
    assert output(capsys) == ['int', 'float']
    assert failure('void g(int a) { } void g(int b) { } void main() { }') == 'DuplicateDeclaration'


def test_print_yields_its_value(capsys):
    run('void main() { int x = print(7) + 1; print(x); }')
    assert output(capsys) == ['7', '8']


def test_integer_literal_out_of_range():
    assert failure('void main() { int x = 2147483648; }') == 'Overflow'


def test_division_by_zero():
    assert failure('void main() { int x = 1 / 0; }') == 'DivisionByZero'


def test_unbounded_recursion_is_stack_overflow():
    assert failure('int f(int n) { return f(n + 1); } void main() { f(0); }') == 'StackOverflow'


def test_unbounded_recursion_in_global_initializer():
    source = 'int f(int n) { return f(n + 1); } int g = f(0); void main() { }'
    assert failure(source) == 'StackOverflow'


def test_float_precision(capsys):
    run('void main() { float f = 0.1f; double d = 0.1; print(f + 0.2f); print(d * 3); print(1.0 / 3.0); print(1.0f / 3); }')
    assert output(capsys) == ['0.3', '0.3', '0.333333333333333', '0.3333333']


def test_debug_trace_written(tmp_path, capsys):
    debug_file = tmp_path / 'debug.txt'
    interp = Interpreter(debug_level=3, debug_file=str(debug_file))
    interp.run(parse_program('int f(int a) { return a + 1; } void main() { int x = f(1); if (x) { x = 3; } }'))
    trace = debug_file.read_text()
    assert 'call f(1)' in trace
    assert 'return f -> 2' in trace
    assert 'declare int x = 2' in trace
    assert 'assign x = -> 3' in trace
    assert 'push block scope' in trace
    assert interp.debug_fp is None


def test_compile_module_loads_without_running(tmp_path, capsys):
    path = tmp_path / 'lib.mini'
    path.write_text('int g = 4; void main() { print(g); }', encoding='utf-8')
    interp = compile_module(str(path))
    assert interp.global_env.get('g') == 4
    assert 'main' in interp.functions
    assert capsys.readouterr().out == ''
    interp.run_main()
    assert output(capsys) == ['4']
