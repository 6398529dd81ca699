"""
Workshop: the exercise lifecycle engine.

Show path:
    load -> prepare -> exercise text -> compose header/problem/footer -> render

Run path:
    load -> mode -> done(err, passed) -> Passed | Failed | Errored -> cleanup -> Outcome

Every terminal state goes through ``end()``; the resulting Outcome is
handed to ``exit_handler`` instead of exiting the process.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Any

from loguru import logger
from rich.console import Console
from rich.markup import escape

from config import Settings, get_settings

from ..i18n import Translator, build_messages, choose_language
from .content import ContentComposer, FileList, FileRef
from .errors import ConfigurationError, ConsoleErrorReporter, ErrorReporter, error_text
from .exercise import ModeKind, ValidationChannel
from .loader import ExerciseLoader
from .outcome import Outcome
from .progress import ProgressStore
from .registry import ExerciseMeta, ExerciseRegistry
from .storage import KeyValueStore

DEFAULT_PASS = (
    "\n[bold green]# {solution.pass.title}[/bold green]\n"
    "[bold]{solution.pass.message}[/bold]\n"
)
DEFAULT_FAIL = (
    "\n[bold red]# {solution.fail.title}[/bold red]\n"
    "{solution.fail.message}\n"
)

VALIDATION_EVENTS = ("pass", "fail")

_MISSING = object()


def _once(fn: Callable[..., None], label: str) -> Callable[..., None]:
    """Wrap a callback so only its first invocation has any effect."""

    def wrapper(*args, **kwargs):
        if wrapper.called:
            logger.warning(f"{label} callback invoked more than once; ignoring")
            return
        wrapper.called = True
        fn(*args, **kwargs)

    wrapper.called = False
    return wrapper


def _invoke(hook: Callable[..., None], *args, callback: Callable[..., None]) -> None:
    """Call an async-style hook; an exception it raises goes to its callback."""
    try:
        hook(*args, callback)
    except Exception as e:
        if getattr(callback, "called", False):
            # the outcome is already decided
            logger.exception("Exercise hook raised after its callback")
            return
        logger.exception("Exercise hook raised")
        callback(e)


@dataclass
class WorkshopOptions:
    """Per-application options; only ``name`` is required."""

    name: str | None = None
    title: str | None = None
    subtitle: str | None = None
    languages: list[str] = field(default_factory=list)
    default_lang: str | None = None
    app_dir: Path | str | None = None
    exercise_dir: Path | str | None = None

    # Content slot defaults shared by every exercise
    header: str | None = None
    header_type: str | None = None
    header_file: str | Path | None = None
    footer: str | None = None
    footer_type: str | None = None
    footer_file: str | Path | None = None

    translations: dict[str, dict[str, Any]] = field(default_factory=dict)
    commands: list[Any] = field(default_factory=list)
    on_complete: Callable[[Callable[[], None]], None] | None = None
    menu_factory: Any = None
    data_dir: Path | str | None = None


class Workshop:
    """
    Runs exercises for one named workshop.

    Holds the registry, the progress store and the translator, and drives
    the show and run paths for one exercise at a time.
    """

    def __init__(
        self,
        options: WorkshopOptions,
        *,
        settings: Settings | None = None,
        console: Console | None = None,
        error_reporter: ErrorReporter | None = None,
        exit_handler: Callable[[Outcome], None] | None = None,
        app_store: Any = None,
        global_store: Any = None,
    ):
        if not options.name:
            raise ConfigurationError("The workshop needs a name to store the progress.")

        self.settings = settings or get_settings()
        self.options = options
        self.name = options.name
        self._resolve_options()

        self.console = console or Console()
        self.error_reporter = error_reporter or ConsoleErrorReporter()
        self.exit_handler = exit_handler
        self.outcome: Outcome | None = None

        store_settings = self.settings
        if options.data_dir:
            store_settings = self.settings.model_copy(update={"data_dir": Path(options.data_dir)})
        self.global_store = global_store or KeyValueStore(store_settings.global_store_path())
        self.app_store = app_store or KeyValueStore(store_settings.app_store_path(self.name))

        self.registry = ExerciseRegistry()
        self.loader = ExerciseLoader(self.registry, self)
        self.progress = ProgressStore(self.app_store, lambda: len(self.registry))

        lang = choose_language(
            self.options.languages, self.options.default_lang, self.app_store, self.global_store
        )
        self.translator = self._build_translator(lang)

        self._observers: dict[str, list[Callable[..., None]]] = defaultdict(list)

        from ..menu.commands import builtin_commands

        self.commands = builtin_commands() + list(options.commands)

        if options.menu_factory is None:
            from ..menu.renderer import RichMenuRenderer

            options.menu_factory = RichMenuRenderer(self.console, self.settings.menu_width)
        self.menu_factory = options.menu_factory

    def _resolve_options(self) -> None:
        options = self.options
        if not options.languages:
            options.languages = [self.settings.default_lang]
        if not options.default_lang:
            options.default_lang = options.languages[0]
        if options.app_dir:
            app_dir = Path(options.app_dir).resolve()
            options.app_dir = app_dir.parent if app_dir.is_file() else app_dir
            options.exercise_dir = (
                options.app_dir / (options.exercise_dir or self.settings.exercise_dir_name)
            ).resolve()
        elif options.exercise_dir:
            options.exercise_dir = Path(options.exercise_dir).resolve()

    def _build_translator(self, lang: str) -> Translator:
        app_dir = Path(self.options.app_dir) if self.options.app_dir else None
        messages = build_messages(lang, self.options.translations.get(lang), app_dir)
        messages["appName"] = self.name
        if self.options.title:
            messages["title"] = self.options.title
        if self.options.subtitle:
            messages["subtitle"] = self.options.subtitle
        return Translator(messages, lang)

    # =========================================================================
    # Shortcuts
    # =========================================================================

    def t(self, key: str, subs: dict | None = None, **kwargs) -> str:
        return self.translator.t(key, subs, **kwargs)

    def tn(self, key: str, count: int) -> str:
        return self.translator.tn(key, count)

    @property
    def exercises(self) -> list[str]:
        return self.registry.list()

    # =========================================================================
    # Registration & progress
    # =========================================================================

    def add_exercise(
        self,
        name: str,
        factory: Callable[[], Any],
        dir: Path | str | None = None,
    ) -> ExerciseMeta:
        return self.registry.register(name, factory, dir)

    def add_all(self, names: Iterable[str] | None = None) -> Workshop:
        """Register exercises found in the exercise directory."""
        from .catalogue import load_catalogue

        load_catalogue(self, names=names)
        return self

    def count_remaining(self) -> int:
        return self.progress.remaining()

    def mark_completed(self, name: str) -> None:
        self.progress.mark_completed(name)

    def reset_progress(self) -> None:
        self.progress.reset()

    def select_language(self, lang: str) -> None:
        """Switch language and remember it for this and every other workshop."""
        if lang not in self.options.languages:
            raise ConfigurationError(
                f"Language {lang!r} is not one of {', '.join(self.options.languages)}"
            )
        self.app_store.save("lang", lang)
        self.global_store.save("lang", lang)
        self.translator = self._build_translator(lang)

    # =========================================================================
    # Observers
    # =========================================================================

    def subscribe(self, event: str, listener: Callable[[Any, str, str], None]) -> None:
        """Listen for validation events: ``listener(exercise, mode, message)``."""
        if event not in VALIDATION_EVENTS:
            raise ValueError(f"Unknown event {event!r}; expected one of {VALIDATION_EVENTS}")
        self._observers[event].append(listener)

    def _on_validation(self, event: str, exercise: Any, mode: str, message: str) -> None:
        if event == "pass":
            self.console.print(f"[bold green]✓[/bold green] {escape(message)}")
        else:
            self.console.print(f"[bold red]✗[/bold red] {escape(message)}")
        for listener in self._observers[event]:
            listener(exercise, mode, message)

    # =========================================================================
    # Terminal states
    # =========================================================================

    def _finish(self, outcome: Outcome) -> None:
        logger.debug(f"Outcome: {outcome.state.value} (exit {outcome.exit_code})")
        self.outcome = outcome
        if self.exit_handler is not None:
            self.exit_handler(outcome)

    def exit(self) -> None:
        """Leave without running anything."""
        self._finish(Outcome.exited())

    def _report(self, message: str, mode: str | None = None, exercise: Any = None) -> None:
        self.error_reporter(message)
        self._finish(Outcome.errored(message, mode, exercise))

    def end(
        self,
        mode: str,
        passed: bool,
        exercise: Any,
        callback: Callable[[], None] | None = None,
    ) -> None:
        """
        Run the exercise's cleanup hook, then finish.

        A cleanup error is reported but the outcome still follows ``passed``.
        With ``callback`` given, the callback replaces the pass/fail outcome.
        """
        logger.debug(f"Cleanup after {mode!r} (passed={passed})")

        def finished(err=None) -> None:
            if err:
                self.error_reporter(self.t("error.cleanup", err=error_text(err)))
            if callback is not None:
                callback()
            else:
                self._finish(Outcome.from_pass(mode, passed, exercise))

        finished = _once(finished, "cleanup")
        hook = getattr(exercise, "end", None)
        if callable(hook):
            _invoke(hook, mode, passed, callback=finished)
        else:
            finished()

    def exercise_fail(self, mode: str, exercise: Any) -> None:
        logger.debug(f"Failed: {exercise.meta.name} ({mode})")
        fail_text, fail_type = exercise.fail_text, exercise.fail_type
        if not fail_text:
            fail_text, fail_type = DEFAULT_FAIL, "markup"

        composer = ContentComposer(self._exercise_translator(exercise))
        composer.append_plus(fail_text, fail_type)
        composer.render(self.console)
        self.end(mode, False, exercise)

    def exercise_pass(self, mode: str, exercise: Any) -> None:
        logger.debug(f"Passed: {exercise.meta.name} ({mode})")

        def with_files(files: list) -> None:
            self.mark_completed(exercise.meta.name)

            pass_text, pass_type = exercise.pass_text, exercise.pass_type
            if not pass_text:
                pass_text, pass_type = DEFAULT_PASS, "markup"

            composer = ContentComposer(self._exercise_translator(exercise))
            composer.append(pass_text, pass_type)

            if not exercise.hide_solutions:
                if files or exercise.solution:
                    composer.append(self.t("solution.notes.compare"))
                composer.append(exercise.solution, exercise.solution_type)
                composer.append(FileList(list(files)))

            remaining = self.count_remaining()
            if remaining != 0:
                composer.append(
                    self.tn("progress.remaining", remaining)
                    + "\n"
                    + self.t("ui.return", appName=self.name)
                    + "\n"
                )
            elif self.options.on_complete is None:
                composer.append(self.t("progress.finished") + "\n")

            composer.render(self.console)

            complete = self.options.on_complete or (lambda next_step: next_step())
            complete(partial(self.end, mode, True, exercise))

        def on_files(err=None, files=None) -> None:
            if err:
                return self._report(
                    self.t("solution.notes.load_error", err=error_text(err)), mode, exercise
                )
            with_files(files or [])

        if exercise.hide_solutions:
            with_files([])
        else:
            _invoke(exercise.get_solution_files, callback=_once(on_files, "get_solution_files"))

    # =========================================================================
    # Run path
    # =========================================================================

    def _done_callback(self, exercise: Any, mode: str) -> Callable[..., None]:
        def done(err=_MISSING, passed=_MISSING) -> None:
            # done(True) / done(False) / done() report the result as the first argument
            if passed is _MISSING and (err is None or err is True or err is False or err is _MISSING):
                passed, err = err, None
            if err is _MISSING:
                err = None
            if passed is _MISSING:
                passed = None

            if err:
                logger.debug(f"Errored: {exercise.meta.name} ({mode}): {err!r}")
                message = self.t("error.exercise.unexpected_error", mode=mode, err=error_text(err))
                return self.end(mode, True, exercise, partial(self._report, message, mode, exercise))

            if mode == "run":
                return self.end(mode, True, exercise)

            if not passed or exercise.fail_text:
                return self.exercise_fail(mode, exercise)

            self.exercise_pass(mode, exercise)

        return _once(done, f"{mode} done")

    def run_exercise(self, exercise: Any, mode: str, args: list[str] | None = None) -> None:
        """Run ``mode`` of a loaded exercise against the user's ``args``."""
        args = list(args or [])
        logger.debug(f"Running: {exercise.meta.name} ({mode}) args={args}")

        channel = ValidationChannel(
            on_pass=partial(self._on_validation, "pass", exercise, mode),
            on_fail=partial(self._on_validation, "fail", exercise, mode),
        )

        resolved = exercise.mode(mode)
        if resolved is None or resolved[1] is None:
            return self._report(self.t("error.exercise.missing_mode", mode=mode), mode, exercise)
        spec, method = resolved
        if not callable(method):
            return self._report(
                self.t("error.exercise.wrong_mode_type", mode=mode, type=type(method).__name__),
                mode,
                exercise,
            )

        if spec.kind is ModeKind.CALLBACK:
            done = self._done_callback(exercise, mode)
            try:
                method(args, channel, done)
            except Exception as e:
                if done.called:
                    logger.exception(f"Mode {mode!r} raised after reporting its result")
                    return
                logger.exception(f"Mode {mode!r} raised")
                done(e)
            return

        try:
            result = method(args, channel)
        except Exception as e:
            logger.exception(f"Mode {mode!r} raised")
            message = self.t("error.exercise.unexpected_error", mode=mode, err=error_text(e))
            return self.end(mode, True, exercise, partial(self._report, message, mode, exercise))

        if result:
            composer = ContentComposer(self._exercise_translator(exercise))
            composer.append_plus(result)
            composer.render(self.console)

    def run_current(self, mode: str, args: list[str] | None = None) -> None:
        """Run ``mode`` on the exercise last shown."""
        name = self.progress.current
        if not name:
            return self._report(self.t("error.exercise.none_active"), mode)
        exercise = self.load_exercise(name)
        if exercise is None:
            return self._report(self.t("error.exercise.missing", name=name), mode)
        self.run_exercise(exercise, mode, args)

    # =========================================================================
    # Show path
    # =========================================================================

    def load_exercise(self, name: str) -> Any | None:
        return self.loader.load(name)

    def _exercise_translator(self, exercise: Any) -> Translator:
        meta = exercise.meta
        total = len(self.registry)
        return self.translator.extend(
            {
                "currentExercise.name": meta.name,
                "progress.count": str(meta.number),
                "progress.total": str(total),
                "progress.state_resolved": self.t(
                    "progress.state", count=meta.number, amount=total
                ),
            }
        )

    def print_exercise(self, name: str) -> None:
        """Show an exercise's instructions and make it the current one."""
        exercise = self.load_exercise(name)
        if exercise is None:
            return self._report(self.t("error.exercise.missing", name=name))

        self.progress.set_current(exercise.meta.name)
        logger.debug(f"Preparing: {exercise.meta.name}")

        def prepared(err=None) -> None:
            if err:
                return self._report(self.t("error.exercise.preparing", err=error_text(err)))
            _invoke(exercise.get_exercise_text, callback=_once(text_loaded, "get_exercise_text"))

        def text_loaded(err=None, text_type=None, text=None) -> None:
            if err:
                return self._report(self.t("error.exercise.loading", err=error_text(err)))
            self._render_exercise(name, exercise, text_type, text)

        _invoke(exercise.prepare, callback=_once(prepared, "prepare"))

    def _exercise_file(self, exercise: Any, path: str | Path | None) -> Path | None:
        """Relative content paths are relative to the exercise's directory."""
        if not path:
            return None
        path = Path(path)
        if not path.is_absolute() and exercise.meta.dir is not None:
            return exercise.meta.dir / path
        return path

    def _app_file(self, path: str | Path | None) -> Path | None:
        if not path:
            return None
        path = Path(path)
        if not path.is_absolute() and self.options.app_dir:
            return Path(self.options.app_dir) / path
        return path

    def _render_exercise(self, name: str, exercise: Any, text_type: str | None, text: str | None) -> None:
        options = self.options
        composer = ContentComposer(self._exercise_translator(exercise))

        (
            composer.append(exercise.header, exercise.header_type)
            or composer.append(FileRef(self._exercise_file(exercise, exercise.header_file)))
            or composer.append(options.header, options.header_type)
            or composer.append(FileRef(self._app_file(options.header_file)))
        )

        # Both the static problem and the generated text render when present
        found = composer.append(exercise.problem, exercise.problem_type) or composer.append(
            FileRef(self._exercise_file(exercise, exercise.problem_file))
        )
        if composer.append(text, text_type):
            found = True
        if not found:
            return self._report(self.t("error.exercise.missing_problem", name=name))

        (
            composer.append(exercise.footer, exercise.footer_type)
            or composer.append(FileRef(self._exercise_file(exercise, exercise.footer_file)))
            or composer.append(options.footer, options.footer_type)
            or composer.append(FileRef(self._app_file(options.footer_file)))
        )
        composer.render(self.console)

    # =========================================================================
    # Menu & CLI
    # =========================================================================

    def next_exercise(self) -> str | None:
        """First incomplete exercise after the current one, wrapping around."""
        names = self.exercises
        if not names:
            return None
        current = self.progress.current
        start = names.index(current) + 1 if current in names else 0
        for name in names[start:] + names[:start]:
            if not self.progress.is_completed(name):
                return name
        return None

    def print_menu(self) -> None:
        from ..menu.composer import MenuComposer

        self.menu_factory.create(MenuComposer(self).compose())

    def execute(self, args: list[str] | None = None) -> None:
        """Dispatch command-line arguments."""
        from ..cli.main import build_app

        build_app(self)(args=args, prog_name=self.name)
