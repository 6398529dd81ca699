"""
Unit tests for the run path: modes, done() resolution, pass/fail screens
and cleanup.
"""

import pytest

from adventure import EXIT_FAILURE, EXIT_SUCCESS, Exercise, LifecycleState, callback_mode, sync_mode


@pytest.fixture
def register(workshop):
    """Register ``instance`` as "Hello World" plus padding exercises."""

    def register(instance, total=1):
        workshop.add_exercise("Hello World", lambda: instance)
        for i in range(2, total + 1):
            workshop.add_exercise(f"Exercise {i}", Exercise)
        return workshop.load_exercise("Hello World")

    return register


def output(workshop):
    return workshop.console.file.getvalue()


class TestSyncModes:
    def test_returned_content_is_rendered_without_scoring(self, workshop, register, recorder, verify_exercise_cls):
        exercise = register(verify_exercise_cls())

        workshop.run_exercise(exercise, "show", ["a", "b"])

        assert "Output: a b" in output(workshop)
        assert recorder.outcomes == []
        assert workshop.progress.completed == []
        assert exercise.cleanups == []

    def test_none_result_renders_nothing(self, workshop, register, recorder):
        class Quiet(Exercise):
            problem = "x"

            @sync_mode("run")
            def run(self, args, channel):
                return None

        workshop.run_exercise(register(Quiet()), "run")

        assert output(workshop) == ""
        assert recorder.outcomes == []

    def test_raising_sync_mode_cleans_up_then_reports(self, workshop, register, recorder):
        class Broken(Exercise):
            problem = "x"

            def __init__(self):
                self.cleanups = []

            @sync_mode("run")
            def run(self, args, channel):
                raise RuntimeError("exploded")

            def end(self, mode, passed, callback):
                self.cleanups.append((mode, passed))
                callback(None)

        exercise = register(Broken())
        workshop.run_exercise(exercise, "run")

        assert exercise.cleanups == [("run", True)]
        assert "exploded" in recorder.errors[0]
        assert recorder.outcomes[0].state is LifecycleState.ERRORED


class TestFailed:
    def test_verify_false_fails_without_completion(self, workshop, register, recorder, verify_exercise_cls):
        exercise = register(verify_exercise_cls(result=(None, False)), total=2)

        workshop.run_exercise(exercise, "verify")

        outcome = recorder.outcomes[0]
        assert outcome.state is LifecycleState.FAILED
        assert outcome.exit_code == EXIT_FAILURE
        assert workshop.progress.completed == []
        assert exercise.cleanups == [("verify", False)]
        assert "FAIL" in output(workshop)
        assert "Your solution to Hello World didn't pass" in output(workshop)

    def test_static_fail_override_fails_even_on_pass(self, workshop, register, recorder, verify_exercise_cls):
        instance = verify_exercise_cls(result=(None, True))
        instance.fail_text = "Not yet: this exercise is still being written."

        workshop.run_exercise(register(instance), "verify")

        assert recorder.outcomes[0].state is LifecycleState.FAILED
        assert "Not yet: this exercise is still being written." in output(workshop)
        assert workshop.progress.completed == []


class TestPassed:
    def test_pass_renders_message_solution_and_remaining(self, workshop, register, recorder, verify_exercise_cls):
        exercise = register(verify_exercise_cls(result=(None, True)), total=3)

        workshop.run_exercise(exercise, "verify")

        text = output(workshop)
        assert "# PASS" in text
        assert "Your solution to Hello World passed!" in text
        assert "official solution" in text
        assert "print('HELLO')" in text
        assert "You have 2 challenges left." in text
        assert "Type 'testshop' to show the menu." in text
        assert text.index("PASS") < text.index("print('HELLO')") < text.index("challenges left")

        assert workshop.progress.completed == ["Hello World"]
        assert recorder.outcomes[0].state is LifecycleState.PASSED
        assert recorder.outcomes[0].exit_code == EXIT_SUCCESS
        assert exercise.cleanups == [("verify", True)]

    def test_passing_again_does_not_duplicate_completion(self, workshop, register, verify_exercise_cls):
        register(verify_exercise_cls(result=(None, True)), total=2)

        for _ in range(2):
            workshop.run_exercise(workshop.load_exercise("Hello World"), "verify")

        assert workshop.progress.completed == ["Hello World"]
        assert output(workshop).count("You have 1 challenge left.") == 2

    def test_finished_message_when_nothing_remains(self, workshop, register, verify_exercise_cls):
        workshop.run_exercise(register(verify_exercise_cls(result=(None, True))), "verify")

        assert "You've finished all the challenges! Hooray!" in output(workshop)

    def test_completion_hook_replaces_finished_message(self, make_workshop, recorder, verify_exercise_cls):
        pending = []
        workshop = make_workshop(on_complete=pending.append)
        instance = verify_exercise_cls(result=(None, True))
        workshop.add_exercise("Hello World", lambda: instance)

        workshop.run_exercise(workshop.load_exercise("Hello World"), "verify")

        assert "finished all the challenges" not in output(workshop)
        assert recorder.outcomes == []
        assert instance.cleanups == []

        pending[0]()

        assert instance.cleanups == [("verify", True)]
        assert recorder.outcomes[0].state is LifecycleState.PASSED

    def test_solution_files_are_listed(self, workshop, register, verify_exercise_cls):
        class WithFiles(verify_exercise_cls):
            solution = None

            def get_solution_files(self, callback):
                callback(None, ["solution/solution.py"])

        workshop.run_exercise(register(WithFiles(result=(None, True))), "verify")

        text = output(workshop)
        assert "official solution" in text
        assert "solution/solution.py" in text

    def test_no_compare_note_without_solution_or_files(self, workshop, register, verify_exercise_cls):
        instance = verify_exercise_cls(result=(None, True))
        instance.solution = None

        workshop.run_exercise(register(instance), "verify")

        assert "official solution" not in output(workshop)

    def test_hidden_solutions(self, workshop, register, verify_exercise_cls):
        class Hidden(verify_exercise_cls):
            hide_solutions = True

            def get_solution_files(self, callback):
                raise AssertionError("solution files must not be loaded")

        workshop.run_exercise(register(Hidden(result=(None, True))), "verify")

        text = output(workshop)
        assert "print('HELLO')" not in text
        assert "official solution" not in text
        assert workshop.progress.completed == ["Hello World"]

    def test_solution_file_error_is_reported(self, workshop, register, recorder, verify_exercise_cls):
        class Unreadable(verify_exercise_cls):
            def get_solution_files(self, callback):
                callback(OSError("disk on fire"))

        exercise = register(Unreadable(result=(None, True)))
        workshop.run_exercise(exercise, "verify")

        assert recorder.errors == ["Error loading the solution files: disk on fire"]
        assert recorder.outcomes[0].state is LifecycleState.ERRORED
        assert workshop.progress.completed == []
        assert exercise.cleanups == []

    def test_bracketed_name_and_solution_on_pass_screen(self, workshop, verify_exercise_cls):
        instance = verify_exercise_cls(result=(None, True))
        instance.solution = "def parse(text) -> list[int]: ..."
        workshop.add_exercise("Lists [part one]", lambda: instance)

        workshop.run_exercise(workshop.load_exercise("Lists [part one]"), "verify")

        text = output(workshop)
        assert "Your solution to Lists [part one] passed!" in text
        assert "def parse(text) -> list[int]: ..." in text

    def test_bracketed_name_on_fail_screen(self, workshop, verify_exercise_cls):
        instance = verify_exercise_cls(result=(None, False))
        workshop.add_exercise("Lists [part one]", lambda: instance)

        workshop.run_exercise(workshop.load_exercise("Lists [part one]"), "verify")

        assert "Your solution to Lists [part one] didn't pass" in output(workshop)

    def test_custom_pass_text(self, workshop, register, verify_exercise_cls):
        instance = verify_exercise_cls(result=(None, True))
        instance.pass_text = "## Well done, {currentExercise.name}"
        instance.pass_type = "md"

        workshop.run_exercise(register(instance), "verify")

        assert "Well done, Hello World" in output(workshop)


class TestDoneResolution:
    @pytest.mark.parametrize(
        "result,state",
        [
            ((True,), LifecycleState.PASSED),
            ((False,), LifecycleState.FAILED),
            ((None,), LifecycleState.FAILED),
            ((), LifecycleState.FAILED),
            ((None, True), LifecycleState.PASSED),
            ((None, False), LifecycleState.FAILED),
        ],
    )
    def test_calling_conventions(self, workshop, register, recorder, verify_exercise_cls, result, state):
        workshop.run_exercise(register(verify_exercise_cls(result=result)), "verify")

        assert recorder.outcomes[0].state is state

    def test_error_cleans_up_before_reporting(self, workshop, register, recorder):
        class Boom(Exercise):
            problem = "x"

            def __init__(self):
                self.errors_seen_at_cleanup = None
                self.cleanups = []

            @callback_mode("verify")
            def verify(self, args, channel, done):
                done(RuntimeError("boom"))

            def end(self, mode, passed, callback):
                self.cleanups.append((mode, passed))
                self.errors_seen_at_cleanup = list(recorder.errors)
                callback(None)

        exercise = register(Boom())
        workshop.run_exercise(exercise, "verify")

        assert exercise.cleanups == [("verify", True)]
        assert exercise.errors_seen_at_cleanup == []
        assert len(recorder.errors) == 1
        assert "boom" in recorder.errors[0]
        assert '"verify"' in recorder.errors[0]
        assert recorder.outcomes[0].state is LifecycleState.ERRORED
        assert recorder.outcomes[0].exit_code == EXIT_FAILURE
        assert workshop.progress.completed == []

    def test_string_errors_count_as_errors(self, workshop, register, recorder, verify_exercise_cls):
        workshop.run_exercise(register(verify_exercise_cls(result=("compiler missing",))), "verify")

        assert "compiler missing" in recorder.errors[0]
        assert recorder.outcomes[0].state is LifecycleState.ERRORED

    def test_raising_mode_is_treated_as_error(self, workshop, register, recorder):
        class Raises(Exercise):
            problem = "x"

            @callback_mode("verify")
            def verify(self, args, channel, done):
                raise ValueError("kaboom")

        workshop.run_exercise(register(Raises()), "verify")

        assert "kaboom" in recorder.errors[0]
        assert recorder.outcomes[0].state is LifecycleState.ERRORED

    def test_second_done_call_is_ignored(self, workshop, register, recorder):
        class Chatty(Exercise):
            problem = "x"

            @callback_mode("verify")
            def verify(self, args, channel, done):
                done(None, False)
                done(None, True)

        workshop.run_exercise(register(Chatty()), "verify")

        assert len(recorder.outcomes) == 1
        assert recorder.outcomes[0].state is LifecycleState.FAILED
        assert workshop.progress.completed == []

    def test_raising_after_done_keeps_the_outcome(self, workshop, register, recorder):
        class RaisesLate(Exercise):
            problem = "x"

            @callback_mode("verify")
            def verify(self, args, channel, done):
                done(None, True)
                raise RuntimeError("temp file already gone")

        workshop.run_exercise(register(RaisesLate()), "verify")

        assert len(recorder.outcomes) == 1
        assert recorder.outcomes[0].state is LifecycleState.PASSED
        assert recorder.errors == []
        assert workshop.progress.completed == ["Hello World"]

    def test_run_mode_never_scores(self, workshop, register, recorder, verify_exercise_cls):
        exercise = register(verify_exercise_cls())

        workshop.run_exercise(exercise, "run")

        assert recorder.outcomes[0].state is LifecycleState.RUN_COMPLETE
        assert recorder.outcomes[0].exit_code == EXIT_SUCCESS
        assert exercise.cleanups == [("run", True)]
        assert workshop.progress.completed == []
        assert "PASS" not in output(workshop)

    def test_args_are_passed_through(self, workshop, register):
        seen = []

        class Echo(Exercise):
            problem = "x"

            @callback_mode("verify")
            def verify(self, args, channel, done):
                seen.append(args)
                done(None, True)

        workshop.run_exercise(register(Echo()), "verify", ["solution.py", "--fast"])

        assert seen == [["solution.py", "--fast"]]


class TestModeLookup:
    def test_missing_mode(self, workshop, register, recorder, verify_exercise_cls):
        workshop.run_exercise(register(verify_exercise_cls()), "bogus")

        assert recorder.errors == ["This exercise doesn't have a .bogus mode."]
        assert recorder.outcomes[0].state is LifecycleState.ERRORED

    def test_non_callable_mode(self, workshop, register, recorder, verify_exercise_cls):
        class Shadowed(verify_exercise_cls):
            verify = "coming soon"

        workshop.run_exercise(register(Shadowed()), "verify")

        assert recorder.errors == [
            "The .verify of this exercise is a str. It should be a function instead."
        ]

    def test_mode_set_to_none_counts_as_missing(self, workshop, register, recorder, verify_exercise_cls):
        instance = verify_exercise_cls()
        instance.verify = None

        workshop.run_exercise(register(instance), "verify")

        assert recorder.errors == ["This exercise doesn't have a .verify mode."]
        assert recorder.outcomes[0].state is LifecycleState.ERRORED

    def test_modes_are_inherited(self, verify_exercise_cls):
        class Child(verify_exercise_cls):
            @callback_mode()
            def check(self, args, channel, done):
                done(None, True)

        assert set(Child.modes()) == {"verify", "run", "show", "check"}
        assert set(verify_exercise_cls.modes()) == {"verify", "run", "show"}


class TestValidationEvents:
    def test_messages_are_printed_and_forwarded(self, workshop, register, verify_exercise_cls):
        received = []
        workshop.subscribe("pass", lambda exercise, mode, message: received.append(("pass", mode, message)))
        workshop.subscribe("fail", lambda exercise, mode, message: received.append(("fail", mode, message)))

        exercise = register(
            verify_exercise_cls(
                result=(None, False),
                messages=[("pass", "script compiles"), ("fail", "prints hello instead of HELLO")],
            )
        )
        workshop.run_exercise(exercise, "verify")

        text = output(workshop)
        assert "✓ script compiles" in text
        assert "✗ prints hello instead of HELLO" in text
        assert received == [
            ("pass", "verify", "script compiles"),
            ("fail", "verify", "prints hello instead of HELLO"),
        ]

    def test_unknown_event_is_rejected(self, workshop):
        with pytest.raises(ValueError):
            workshop.subscribe("progress", lambda *args: None)


class TestCleanup:
    def test_cleanup_error_keeps_exit_code(self, workshop, register, recorder, verify_exercise_cls):
        class Messy(verify_exercise_cls):
            def end(self, mode, passed, callback):
                callback(RuntimeError("could not remove temp dir"))

        workshop.run_exercise(register(Messy(result=(None, True))), "verify")

        assert recorder.errors == ["Could not clean up after the exercise: could not remove temp dir"]
        assert recorder.outcomes[0].state is LifecycleState.PASSED
        assert recorder.outcomes[0].exit_code == EXIT_SUCCESS

    def test_cleanup_raising_after_callback_keeps_the_outcome(self, workshop, register, recorder, verify_exercise_cls):
        class LateCleanup(verify_exercise_cls):
            def end(self, mode, passed, callback):
                callback(None)
                raise OSError("could not remove temp dir")

        workshop.run_exercise(register(LateCleanup(result=(None, False))), "verify")

        assert len(recorder.outcomes) == 1
        assert recorder.outcomes[0].state is LifecycleState.FAILED
        assert recorder.errors == []

    def test_cleanup_runs_once(self, workshop, register, recorder, verify_exercise_cls):
        class Twice(verify_exercise_cls):
            def end(self, mode, passed, callback):
                callback(None)
                callback(None)

        workshop.run_exercise(register(Twice(result=(None, False))), "verify")

        assert len(recorder.outcomes) == 1
        assert recorder.outcomes[0].exit_code == EXIT_FAILURE


class TestRunCurrent:
    def test_requires_a_current_exercise(self, workshop, recorder):
        workshop.run_current("verify")

        assert recorder.errors == ["No active exercise. Select one from the menu first."]

    def test_runs_the_current_exercise(self, workshop, register, recorder, verify_exercise_cls):
        register(verify_exercise_cls(result=(None, True)))
        workshop.progress.set_current("Hello World")

        workshop.run_current("verify")

        assert recorder.outcomes[0].state is LifecycleState.PASSED

    def test_current_exercise_no_longer_registered(self, workshop, recorder):
        workshop.progress.set_current("Gone")

        workshop.run_current("verify")

        assert recorder.errors == ['No exercise named "Gone"']
