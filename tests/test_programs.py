"""
Whole dmm programs through the full pipeline: Lexer, Parser, Interpreter.

Most tests run in strict mode, where the Worker never tires and the Shouter
writes plain text, so outputs are deterministic. The check-in tests drive an
exhausted Worker with a fake clock and scripted answers.
"""
import random
import sys
import pytest
from dmm.runtime import Interpreter, DmmError, FatigueAbort
from dmm.parser import ParseError
from dmm.worker import Worker
from dmm.types import dmm_integer, dmm_text, dmm_bool, dmm_none


# ── Helpers ──────────────────────────────────────────────────────────────────

def program(*lines: str) -> str:
    return "\n".join(["hallo", *lines, "reicht dann auch mal"])


def run(*lines: str, **kw) -> Interpreter:
    """Run the lines as a strict-mode program and return the Interpreter."""
    kw.setdefault("flags", {"strict": True})
    interp = Interpreter(**kw)
    interp.run(program(*lines))
    return interp


def var(interp: Interpreter, name: str):
    return interp.call_stack.root.get(name)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class Answers:
    """Scripted replies for the Worker's questions and frag()."""

    def __init__(self, *answers: str):
        self.answers = list(answers)
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)


def never_asked(prompt: str) -> str:
    raise AssertionError(f"nobody should ask, got {prompt!r}")


def tired_interpreter(answers: Answers, every_node: bool = False) -> Interpreter:
    """A non-strict interpreter whose Worker is already exhausted.

    With ``every_node`` the Worker stays deactivated after every reset and
    asks about every non-literal node.
    """
    clock = FakeClock()
    rng = random.Random(7)
    interp = Interpreter(rng=rng, clock=clock, read_answer=answers, sleep=lambda s: None)
    if every_node:
        interp.worker = Worker(rng=rng, clock=clock, mood_range=(0,) * 6, cooldown=(0.0, 0.0))
    else:
        interp.worker.fatigue = 10000
        interp.worker.cooldown = 0
    return interp


# ── Basics ───────────────────────────────────────────────────────────────────

class TestBasics:
    def test_minimal_program(self):
        interp = run("a = 1 + 2")
        assert var(interp, "a") == dmm_integer(3)
        assert interp.output == []

    def test_empty_program(self):
        interp = run()
        assert interp.output == []

    def test_prefixed_assignment(self):
        interp = run("setze a auf 7")
        assert var(interp, "a") == dmm_integer(7)

    def test_reassignment_changes_type(self):
        interp = run("a = 1", "a = <eins>")
        assert var(interp, "a") == dmm_text("eins")

    def test_literals(self):
        interp = run("t = :)", "f = :(", "s = <so>")
        assert var(interp, "t") == dmm_bool(True)
        assert var(interp, "f") == dmm_bool(False)
        assert var(interp, "s") == dmm_text("so")

    def test_unknown_variable(self):
        with pytest.raises(DmmError, match="Unknown variable name: b"):
            run("a = b")

    def test_syntax_error_runs_nothing(self):
        with pytest.raises(ParseError):
            run(":O__(<vorher>)", "a = = 1")


class TestArithmetic:
    def test_precedence(self):
        assert var(run("a = 2 + 3 * 4"), "a") == dmm_integer(14)

    def test_left_to_right(self):
        assert var(run("a = 10 - 4 - 3"), "a") == dmm_integer(3)

    def test_unary(self):
        assert var(run("a = -2 * 3"), "a") == dmm_integer(-6)
        assert var(run("a = - -4"), "a") == dmm_integer(4)

    def test_division_truncates(self):
        assert var(run("a = 7 / 2"), "a") == dmm_integer(3)
        assert var(run("a = -7 / 2"), "a") == dmm_integer(-3)

    def test_division_by_zero(self):
        with pytest.raises(DmmError, match="Division by zero"):
            run("a = 1 / 0")

    def test_text_is_not_a_number(self):
        with pytest.raises(DmmError, match="Not a number"):
            run("a = <x> + 1")

    def test_boolean_is_not_a_number(self):
        with pytest.raises(DmmError, match="Not a number"):
            run("a = -:)")


class TestComparisons:
    def test_equals(self):
        interp = run("a = <x> gleich <x>", "b = <x> gleich <y>")
        assert var(interp, "a") == dmm_bool(True)
        assert var(interp, "b") == dmm_bool(False)

    def test_equals_has_to_be_grouped(self):
        # 1 + (1 gleich 2): a boolean is not a number
        with pytest.raises(DmmError, match="Not a number"):
            run("a = 1 + 1 gleich 2")

    def test_grouped_equals(self):
        assert var(run("a = (1 + 1) gleich 2"), "a") == dmm_bool(True)

    def test_different_types_are_unequal(self):
        assert var(run("a = 1 gleich <1>"), "a") == dmm_bool(False)
        assert var(run("a = 1 gleich :)"), "a") == dmm_bool(False)

    def test_ordering(self):
        interp = run("a = 1 kleiner 2", "b = 1 größer 2", "c = <a> kleiner <b>")
        assert var(interp, "a") == dmm_bool(True)
        assert var(interp, "b") == dmm_bool(False)
        assert var(interp, "c") == dmm_bool(True)

    def test_ordering_across_types(self):
        with pytest.raises(DmmError, match="Cannot order"):
            run("a = 1 kleiner <2>")


# ── Control flow ─────────────────────────────────────────────────────────────

class TestControlFlow:
    def test_if_taken(self):
        interp = run("a = 1", "falls a kleiner 3 avo", "a = 10", "cado")
        assert var(interp, "a") == dmm_integer(10)

    def test_if_not_taken(self):
        interp = run("a = 5", "falls a kleiner 3 avo", "a = 10", "cado")
        assert var(interp, "a") == dmm_integer(5)

    def test_if_needs_boolean(self):
        with pytest.raises(DmmError, match="falls"):
            run("falls 1 avo", "cado")

    def test_loop_runs_zero_times(self):
        interp = run("schleif :( avo", ":O__(<nie>)", "cado")
        assert interp.output == []

    def test_loop_counts(self):
        interp = run(
            "i = 0",
            "schleif i kleiner 3 avo",
            ":O__(i)",
            "i = i + 1",
            "cado",
        )
        assert interp.output == ["0", "1", "2"]
        assert var(interp, "i") == dmm_integer(3)

    def test_loop_needs_boolean(self):
        with pytest.raises(DmmError, match="schleif"):
            run("schleif <ja> avo", "cado")


# ── Functions ────────────────────────────────────────────────────────────────

class TestFunctions:
    def test_call(self):
        interp = run(
            "funny add(a, b) avo",
            "zurück a + b",
            "cado",
            "x = add(2, 3)",
        )
        assert var(interp, "x") == dmm_integer(5)

    def test_without_return_gives_none(self):
        interp = run("funny nix() avo", "y = 1", "cado", "x = nix()")
        assert var(interp, "x") == dmm_none()

    def test_recursion(self):
        interp = run(
            "funny fak(n) avo",
            "falls n kleiner 2 avo",
            "zurück 1",
            "cado",
            "zurück n * fak(n - 1)",
            "cado",
            "x = fak(5)",
        )
        assert var(interp, "x") == dmm_integer(120)
        assert len(interp.call_stack) == 1

    def test_deep_recursion(self):
        interp = run(
            "funny down(n) avo",
            "falls n gleich 0 avo",
            "zurück 0",
            "cado",
            "zurück down(n - 1) + 1",
            "cado",
            "x = down(600)",
        )
        assert var(interp, "x") == dmm_integer(600)
        assert len(interp.call_stack) == 1

    def test_recursion_limit_restored(self):
        before = sys.getrecursionlimit()
        run("funny eins() avo", "zurück 1", "cado", "x = eins()")
        assert sys.getrecursionlimit() == before

    def test_endless_recursion_is_a_stack_overflow(self):
        interp = Interpreter(flags={"strict": True, "recursion_limit": 2000})
        with pytest.raises(DmmError, match="Stack overflow"):
            interp.run(program(
                "funny ewig(n) avo",
                "zurück ewig(n + 1)",
                "cado",
                "x = ewig(0)",
            ))
        assert len(interp.call_stack) == 1

    def test_nested_return_short_circuits(self):
        interp = run(
            "funny pick(n) avo",
            "falls n größer 10 avo",
            "zurück <gross>",
            "cado",
            ":O__(<weiter>)",
            "zurück <klein>",
            "cado",
            "a = pick(11)",
            "b = pick(1)",
        )
        assert var(interp, "a") == dmm_text("gross")
        assert var(interp, "b") == dmm_text("klein")
        assert interp.output == ["weiter"]

    def test_return_leaves_loop(self):
        interp = run(
            "funny first() avo",
            "i = 0",
            "schleif :) avo",
            "i = i + 1",
            "falls i gleich 4 avo",
            "zurück i",
            "cado",
            "cado",
            "cado",
            "x = first()",
        )
        assert var(interp, "x") == dmm_integer(4)

    def test_argument_count_mismatch(self):
        with pytest.raises(DmmError, match="Invalid argument count"):
            run("funny f(a, b) avo", "cado", "f(1, 2, 3)")

    def test_arguments_checked_before_evaluation(self):
        with pytest.raises(DmmError, match="Invalid argument count"):
            run("funny f(a) avo", "cado", "f(1 / 0, 2)")

    def test_unknown_function(self):
        with pytest.raises(DmmError, match="Unknown function name: g"):
            run("g()")

    def test_redeclaration(self):
        with pytest.raises(DmmError, match="already declared"):
            run("funny f() avo", "cado", "funny f() avo", "cado")

    def test_callee_cannot_redeclare_visible_function(self):
        with pytest.raises(DmmError, match="already declared"):
            run(
                "funny g() avo",
                "zurück 1",
                "cado",
                "funny f() avo",
                "funny g() avo",
                "zurück 2",
                "cado",
                "cado",
                "f()",
            )

    def test_inner_declarations_do_not_leak(self):
        with pytest.raises(DmmError, match="Unknown function name: inner"):
            run(
                "funny f() avo",
                "funny inner() avo",
                "zurück 1",
                "cado",
                "zurück inner()",
                "cado",
                "x = f()",
                "y = inner()",
            )

    def test_callee_does_not_see_caller_variables(self):
        with pytest.raises(DmmError, match="Unknown variable name: a"):
            run("a = 1", "funny f() avo", "zurück a", "cado", "x = f()")

    def test_arguments_use_caller_variables(self):
        interp = run("a = 4", "funny sq(n) avo", "zurück n * n", "cado", "x = sq(a)")
        assert var(interp, "x") == dmm_integer(16)

    def test_callee_assignments_stay_local(self):
        interp = run("a = 1", "funny f() avo", "a = 2", "cado", "f()")
        assert var(interp, "a") == dmm_integer(1)

    def test_stack_unwinds_on_error(self):
        interp = Interpreter(flags={"strict": True})
        with pytest.raises(DmmError):
            interp.run(program("funny f() avo", "zurück 1 / 0", "cado", "f()"))
        assert len(interp.call_stack) == 1

    def test_top_level_return(self):
        interp = run("a = 1", "zurück a + 4", "a = 99")
        assert interp.output == ["[dmm] This program threw at us a: 5"]
        assert var(interp, "a") == dmm_integer(1)


# ── Input and output ─────────────────────────────────────────────────────────

class TestInputOutput:
    def test_output_concatenates(self):
        interp = run("a = 3", ":O__(<a ist >, a, <, ok? >, :))")
        assert interp.output == ["a ist 3, ok? :)"]

    def test_output_of_none(self):
        interp = run("funny nix() avo", "cado", ":O__(nix())")
        assert interp.output == ["-"]

    def test_output_returns_none(self):
        interp = run("x = :O__(<hi>)")
        assert var(interp, "x") == dmm_none()

    def test_louder_output_form(self):
        interp = run(":O_____(<egal>)")
        assert interp.output == ["egal"]

    def test_input(self):
        answers = Answers("42")
        interp = run("x = frag(<Alter? >)", read_answer=answers)
        assert var(interp, "x") == dmm_integer(42)
        assert answers.prompts == ["Alter? "]

    def test_input_of_text(self):
        interp = run("x = frag()", read_answer=Answers("<Max>"))
        assert var(interp, "x") == dmm_text("Max")

    def test_bad_input(self):
        with pytest.raises(ParseError):
            run("x = frag()", read_answer=Answers("zweiundvierzig"))

    def test_shouting(self):
        lines = []
        interp = Interpreter(rng=random.Random(0), sleep=lambda s: None)
        interp.shouter.write = lines.append
        interp.run(program(":O____________(<laut>)"))
        assert lines == ["LAUT"]


# ── The Worker ───────────────────────────────────────────────────────────────

class TestWorker:
    def test_strict_mode_never_asks(self):
        interp = Interpreter(flags={"strict": True}, read_answer=never_asked)
        interp.worker.fatigue = 10000
        interp.worker.cooldown = 0
        interp.run(program("a = 1 + 2", "b = a * 2"))
        assert var(interp, "b") == dmm_integer(6)

    def test_strict_mode_is_deterministic(self):
        source = program(
            "i = 0",
            "schleif i kleiner 5 avo",
            ":O___(<runde >, i)",
            "i = i + 1",
            "cado",
        )
        outputs = []
        for seed in (1, 2):
            interp = Interpreter(flags={"strict": True}, rng=random.Random(seed),
                                 read_answer=never_asked)
            interp.run(source)
            outputs.append(interp.output)
        assert outputs[0] == outputs[1]

    def test_moods_are_announced(self):
        interp = Interpreter(rng=random.Random(5), read_answer=never_asked)
        interp.run(program(
            "i = 0",
            "schleif i kleiner 10 avo",
            "i = i + 1",
            "cado",
        ))
        assert "[dmm] =)" in interp.output
        assert "[dmm] =I" in interp.output
        assert "[dmm] =(" in interp.output

    def test_correct_answer_resets(self):
        answers = Answers("3")
        interp = tired_interpreter(answers)
        interp.run(program("a = 1 + 2"))
        assert var(interp, "a") == dmm_integer(3)
        assert len(answers.prompts) == 1
        assert "  node:  (1 + 2)" in interp.output
        assert "  scope: (nothing)" in interp.output
        assert interp.worker.fatigue < 20

    def test_wrong_answer_aborts(self):
        interp = tired_interpreter(Answers("4"))
        with pytest.raises(FatigueAbort) as info:
            interp.run(program("a = 1 + 2", ":O__(<danach>)"))
        assert info.value.expected == dmm_integer(3)
        assert info.value.answer == "4"
        assert not interp.call_stack.root.has("a")
        assert "danach" not in interp.output

    def test_unparsable_answer_aborts(self):
        interp = tired_interpreter(Answers("drei"))
        with pytest.raises(FatigueAbort):
            interp.run(program("a = 1 + 2"))

    def test_no_answer_aborts(self):
        interp = tired_interpreter(Answers())
        with pytest.raises(FatigueAbort):
            interp.run(program("a = 1 + 2"))

    def test_every_node_checked(self):
        answers = Answers("-", "1", "2", "2", "2", "2", "-", "-")
        interp = tired_interpreter(answers, every_node=True)
        interp.run(program(
            "funny f(n) avo",
            "zurück n + 1",
            "cado",
            "x = f(1)",
        ))
        assert var(interp, "x") == dmm_integer(2)
        assert len(answers.prompts) == 8

    def test_abort_inside_function_unwinds(self):
        interp = tired_interpreter(Answers("-", "1", "99"), every_node=True)
        with pytest.raises(FatigueAbort) as info:
            interp.run(program(
                "funny f(n) avo",
                "zurück n + 1",
                "cado",
                "x = f(1)",
            ))
        assert info.value.expected == dmm_integer(2)
        assert len(interp.call_stack) == 1

    def test_scope_shown_inside_function(self):
        interp = tired_interpreter(Answers("-", "5"), every_node=True)
        with pytest.raises(FatigueAbort):
            interp.run(program(
                "funny f(n) avo",
                "zurück n",
                "cado",
                "x = f(5)",
            ))
        assert "  scope: n = 5" in interp.output
