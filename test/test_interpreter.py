"""
Evaluator tests for Bebop
Reduction rules, closures, currying and the text entry point
"""

import pytest
from error_handling import BebopParseError, BebopRuntimeError, ErrorKind
from interpreter import (
  create_builtin_runtime_env,
  create_interpreter,
  eval_value,
  lisp,
  run_program
)
from parsing import parse
from values import UNIT, Lambda, Num, Qexpr, Sexpr, Str, Sym


def evaluate(env, source):
  """Evaluate source text as one root S-Expression, raising on error"""
  return eval_value(parse(source), env)


def error_kind(env, source):
  with pytest.raises(BebopRuntimeError) as exc_info:
    evaluate(env, source)
  return exc_info.value.kind


class TestReduction:
  """How values and forms evaluate"""

  def test_atoms_evaluate_to_themselves(self, env):
    assert eval_value(Num(1.0), env) == Num(1.0)
    assert eval_value(Str("a"), env) == Str("a")
    assert eval_value(Qexpr((Sym("undefined"),)), env) == Qexpr((Sym("undefined"),))

  def test_symbol_lookup(self, env):
    env.insert("x", Num(3.0))
    assert eval_value(Sym("x"), env) == Num(3.0)

  def test_unbound_symbol(self, env):
    with pytest.raises(BebopRuntimeError) as exc_info:
      eval_value(Sym("nope"), env)
    assert exc_info.value.kind == ErrorKind.UNBOUND_SYMBOL
    assert exc_info.value.message == '"nope" has not been defined'

  def test_empty_form_is_unit(self, env):
    assert evaluate(env, "") == UNIT
    assert evaluate(env, "()") == UNIT

  def test_single_value_is_returned(self, env):
    assert evaluate(env, "5") == Num(5.0)
    assert evaluate(env, "(5)") == Num(5.0)
    assert evaluate(env, "[1 2]") == Qexpr((Num(1.0), Num(2.0)))

  def test_application(self, env):
    assert evaluate(env, "+ 1 2 3") == Num(6.0)
    assert evaluate(env, "(* 2 (+ 1 2))") == Num(6.0)

  def test_non_callable_operator(self, env):
    with pytest.raises(BebopRuntimeError) as exc_info:
      evaluate(env, "1 2 3")
    assert exc_info.value.kind == ErrorKind.BAD_OP
    assert exc_info.value.message == "1 is not a valid operator"

  def test_arguments_evaluate_left_to_right(self, env):
    evaluate(env, "def [log] []")
    evaluate(env, "list (def [log] (join log [1])) (def [log] (join log [2]))")
    assert env.get("log") == Qexpr((Num(1.0), Num(2.0)))

  def test_error_stops_evaluation(self, env):
    assert error_kind(env, "+ 1 (/ 1 0) (def [x] 1)") == ErrorKind.DIV_ZERO
    assert env.get("x") is None


class TestEvalAndIf:
  """The builtins that re-enter the evaluator"""

  def test_eval_quoted_code(self, env):
    assert evaluate(env, "eval [+ 1 2]") == Num(3.0)
    assert evaluate(env, "eval (list + 1 2)") == Num(3.0)

  def test_eval_non_list_evaluates_value(self, env):
    assert evaluate(env, "eval 4") == Num(4.0)

  def test_eval_arity(self, env):
    assert error_kind(env, "eval [1] [2]") == ErrorKind.INCORRECT_PARAM_COUNT

  def test_if_branches(self, env):
    assert evaluate(env, "if 1 [+ 1 1] [die \"no\"]") == Num(2.0)
    assert evaluate(env, "if (> 1 2) [die \"no\"] [concat \"else\"]") == Str("else")

  def test_if_branch_value_is_returned(self, env):
    assert evaluate(env, "if 0 [1] [2]") == Num(2.0)

  def test_if_type_errors(self, env):
    assert error_kind(env, "if [1] [1] [2]") == ErrorKind.WRONG_TYPE
    assert error_kind(env, "if 1 1 [2]") == ErrorKind.WRONG_TYPE
    assert error_kind(env, "if 1 [1]") == ErrorKind.INCORRECT_PARAM_COUNT


class TestClosures:
  """Lambda application, currying and the variadic marker"""

  def test_full_application(self, env):
    assert evaluate(env, "(\\ [x] [* x x]) 4") == Num(16.0)

  def test_partial_application_curries(self, env):
    partial = evaluate(env, "(\\ [x y] [+ x y]) 1")
    assert isinstance(partial, Lambda)
    assert partial.params == ("y",)
    assert partial.env["x"] == Num(1.0)

  def test_curried_closure_completes_later(self, env):
    evaluate(env, "def [add] (\\ [x y] [+ x y])")
    evaluate(env, "def [inc] (add 1)")
    assert evaluate(env, "inc 41") == Num(42.0)
    assert evaluate(env, "add 1 2") == Num(3.0)

  def test_partial_application_leaves_original_untouched(self, env):
    evaluate(env, "def [add] (\\ [x y] [+ x y])")
    evaluate(env, "add 100")
    assert evaluate(env, "add 1 2") == Num(3.0)

  def test_too_many_arguments(self, env):
    with pytest.raises(BebopRuntimeError) as exc_info:
      evaluate(env, "(\\ [x] [x]) 1 2")
    assert exc_info.value.kind == ErrorKind.INCORRECT_PARAM_COUNT
    assert exc_info.value.message == "Function needed 1 arg(s) but was given 2"

  def test_variadic_rest(self, env):
    assert evaluate(env, "(\\ [x : xs] [xs]) 1 2 3") == Qexpr((Num(2.0), Num(3.0)))
    assert evaluate(env, "(\\ [: all] [all]) 1 2") == Qexpr((Num(1.0), Num(2.0)))

  def test_variadic_with_exactly_one_rest_argument(self, env):
    assert evaluate(env, "(\\ [x : xs] [xs]) 1 2") == Qexpr((Num(2.0),))

  def test_variadic_waits_for_an_argument(self, env):
    assert isinstance(evaluate(env, "(\\ [x : xs] [xs]) 1"), Lambda)

  def test_malformed_variadic(self, env):
    assert error_kind(env, "(\\ [:] [1]) 1") == ErrorKind.INCORRECT_PARAM_COUNT
    assert error_kind(env, "(\\ [: a b] [a]) 1") == ErrorKind.INCORRECT_PARAM_COUNT

  def test_zero_parameter_closure_runs_when_alone(self, env):
    evaluate(env, "def [answer] (\\ [] [+ 40 2])")
    assert evaluate(env, "answer") == Num(42.0)
    assert evaluate(env, "(answer)") == Num(42.0)

  def test_lone_builtin_is_called_with_no_arguments(self, env):
    assert isinstance(evaluate(env, "rand"), Num)

  def test_closure_sees_its_captured_frame(self, env):
    evaluate(env, "def [make] (\\ [n] [\\ [x] [+ x n]])")
    evaluate(env, "def [add5] (make 5)")
    evaluate(env, "def [add7] (make 7)")
    assert evaluate(env, "add5 1") == Num(6.0)
    assert evaluate(env, "add7 1") == Num(8.0)

  def test_capture_is_a_snapshot(self, env):
    evaluate(env, "def [make] (\\ [n] [\\ [x] [+ x n]])")
    evaluate(env, "def [add5] (make 5)")
    evaluate(env, "def [n] 100")
    assert evaluate(env, "add5 1") == Num(6.0)

  def test_recursion_through_root_frame(self, env):
    evaluate(env, "def [fact] (\\ [n] [if (<= n 1) [1] [* n (fact (- n 1))]])")
    assert evaluate(env, "fact 5") == Num(120.0)

  def test_frames_are_popped_after_call(self, env):
    depth = len(env)
    evaluate(env, "(\\ [x] [x]) 1")
    assert len(env) == depth

  def test_frames_are_popped_after_error(self, env):
    depth = len(env)
    error_kind(env, "(\\ [x] [/ x 0]) 1")
    assert len(env) == depth


class TestDefinitions:
  """def is global, = is local"""

  def test_def_inside_closure_is_global(self, env):
    evaluate(env, "(\\ [] [def [g] 1])")
    assert evaluate(env, "g") == Num(1.0)

  def test_assign_inside_closure_is_local(self, env):
    assert evaluate(env, '(\\ [] [if (== (= [l] 1) "") [l] [0]])') == Num(1.0)
    assert error_kind(env, "l") == ErrorKind.UNBOUND_SYMBOL

  def test_def_result_is_empty_string(self, env):
    assert evaluate(env, "def [x] 1") == Str("")


class TestTextEntryPoint:
  """lisp() renders results and errors as text"""

  def test_results(self, env):
    assert lisp(env, "+ 1 2") == "3"
    assert lisp(env, "/ 10 4") == "2.5"
    assert lisp(env, "tail [1 2 3]") == "[2 3]"
    assert lisp(env, 'concat "a" "b"') == "ab"
    assert lisp(env, "") == "()"

  def test_closure_display(self, env):
    assert lisp(env, "\\ [x] [+ x 1]") == "(\\ [x] [+ x 1])"

  def test_runtime_error_text(self, env):
    assert lisp(env, "/ 1 0") == (
        "Error: DivZero - Cannot Divide By Zero; You cannot divide 1, or any number, by 0"
    )
    assert lisp(env, 'die "boom"') == "Error: Interrupt - User defined Error; boom"
    assert lisp(env, "head []") == (
        "Error: EmptyList - Empty List passed to function; Function head was given empty list"
    )

  def test_modulo_of_overflowed_product(self, env):
    assert lisp(env, "% (* 1e308 10) 2") == "nan"

  def test_deeply_nested_program(self, env):
    assert lisp(env, "(" * 200 + "+ 1 2" + ")" * 200) == "3"

  def test_out_of_range_literal_is_a_parse_error(self, env):
    assert lisp(env, "% 1e999 2").startswith("Error: Parsing Error")

  def test_parse_error_text(self, env):
    assert lisp(env, "(").startswith("Error: Parsing Error - Could not parse the input; ")

  def test_state_persists_between_calls(self, env):
    assert lisp(env, "def [x] 5") == ""
    assert lisp(env, "* x 2") == "10"

  def test_create_interpreter(self):
    interpreter = create_interpreter()
    interpreter("def [y] 2")
    assert interpreter("+ y 1") == "3"
    assert interpreter.env.get("y") == Num(2.0)


class TestRunProgram:
  """Whole programs evaluate one top-level form at a time"""

  def test_forms_in_order(self, env):
    results = run_program(env, "(def [x] 2)\n(* x 3)\n[x]")
    assert results == [Str(""), Num(6.0), Qexpr((Sym("x"),))]

  def test_errors_propagate(self, env):
    with pytest.raises(BebopRuntimeError):
      run_program(env, "(+ 1 2) (head [])")
    with pytest.raises(BebopParseError):
      run_program(env, "(+ 1 2")


class TestDebugTrace:
  """The debug flag prints each evaluation step"""

  def test_trace_output(self, capsys):
    env = create_builtin_runtime_env(debug=True)
    assert lisp(env, "+ 1 2") == "3"
    out = capsys.readouterr().out
    assert "Evaluating: (+ 1 2)" in out
    assert "Calling: + with 2 arg(s)" in out

  def test_quiet_by_default(self, env, capsys):
    lisp(env, "+ 1 2")
    assert capsys.readouterr().out == ""

  def test_debug_interpreter_traces(self, capsys):
    interpreter = create_interpreter(debug=True)
    assert interpreter("* 2 3") == "6"
    assert "Calling: * with 2 arg(s)" in capsys.readouterr().out
