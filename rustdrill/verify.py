"""Verification of exercises in order, with progress and completion prompts."""

from __future__ import annotations

import sys
from collections.abc import Iterable

from . import ui
from .exercise import CompiledExercise, CompileError, Exercise, ExerciseFailed, Mode, RunError

_BAR_WIDTH = 60
_SEPARATOR = "===================="


class VerificationFailed(Exception):
    """An exercise failed to verify; the failing exercise is attached."""

    def __init__(self, exercise: Exercise) -> None:
        super().__init__(f"verification of {exercise} failed")
        self.exercise = exercise


class _ProgressBar:
    """A textual progress bar drawn on standard error."""

    def __init__(self, position: int, total: int) -> None:
        self.position = position
        self.total = total
        self.percentage = position / total * 100.0 if total else 100.0
        self._draw()

    def advance(self) -> None:
        self.position += 1
        if self.total:
            self.percentage += 100.0 / self.total
        self._draw()

    def finish(self) -> None:
        print(file=sys.stderr)

    def _draw(self) -> None:
        if self.total <= 0 or self.position >= self.total:
            bar = "#" * _BAR_WIDTH
        else:
            filled = _BAR_WIDTH * self.position // self.total
            bar = "#" * filled + ">" + "-" * (_BAR_WIDTH - filled - 1)
        print(
            f"\rProgress: [{bar}] {self.position}/{self.total} "
            f"({self.percentage:.1f} %)",
            end="",
            file=sys.stderr,
        )


def _separator() -> str:
    return ui.bold(_SEPARATOR)


def _compile(exercise: Exercise) -> CompiledExercise:
    try:
        return exercise.compile()
    except CompileError as exc:
        ui.warn(f"Compiling of {exercise} failed! Please try again. Here's the output:")
        print(exc.output.stderr)
        raise


def _compile_only(exercise: Exercise, success_hints: bool) -> bool:
    _compile(exercise).close()
    return prompt_for_completion(exercise, None, success_hints)


def _compile_and_run_interactively(exercise: Exercise, success_hints: bool) -> bool:
    with _compile(exercise) as compiled:
        try:
            output = compiled.run()
        except RunError as exc:
            ui.warn(f"Ran {exercise} with errors")
            print(exc.output.stdout)
            print(exc.output.stderr)
            raise
        return prompt_for_completion(exercise, output.stdout, success_hints)


def _compile_and_test(
    exercise: Exercise, interactive: bool, verbose: bool, success_hints: bool
) -> bool:
    with _compile(exercise) as compiled:
        try:
            output = compiled.run()
        except RunError as exc:
            ui.warn(f"Testing of {exercise} failed! Please try again. Here's the output:")
            print(exc.output.stdout)
            raise
        if verbose:
            print(output.stdout)
        if interactive:
            return prompt_for_completion(exercise, None, success_hints)
        return True


def verify(
    exercises: Iterable[Exercise],
    progress: tuple[int, int],
    verbose: bool,
    success_hints: bool,
) -> None:
    """Check exercises in order; raise VerificationFailed at the first failure."""
    num_done, total = progress
    bar = _ProgressBar(num_done, total)
    try:
        for exercise in exercises:
            try:
                if exercise.mode in (Mode.TEST, Mode.BUILD_SCRIPT):
                    passed = _compile_and_test(exercise, True, verbose, success_hints)
                elif exercise.mode is Mode.COMPILE:
                    passed = _compile_and_run_interactively(exercise, success_hints)
                else:
                    passed = _compile_only(exercise, success_hints)
            except ExerciseFailed:
                passed = False
            if not passed:
                raise VerificationFailed(exercise)
            bar.advance()
    finally:
        bar.finish()


def test(exercise: Exercise, verbose: bool) -> None:
    """Compile and run the exercise's test harness without prompting.

    Raises CompileError or RunError when it fails.
    """
    _compile_and_test(exercise, False, verbose, False)


def prompt_for_completion(
    exercise: Exercise, prompt_output: str | None, success_hints: bool
) -> bool:
    """Return True if the exercise is done; otherwise show where to continue."""
    context = exercise.pending_context()
    if context is None:
        return True

    if exercise.mode is Mode.COMPILE:
        ui.success(f"Successfully ran {exercise}!")
    elif exercise.mode is Mode.TEST:
        ui.success(f"Successfully tested {exercise}!")
    else:
        ui.success(f"Successfully compiled {exercise}!")

    no_emoji = ui.no_emoji()
    clippy_msg = (
        "The code is compiling, and Clippy is happy!"
        if no_emoji
        else "The code is compiling, and 📎 Clippy 📎 is happy!"
    )
    success_msg = {
        Mode.COMPILE: "The code is compiling!",
        Mode.TEST: "The code is compiling, and the tests pass!",
        Mode.CLIPPY: clippy_msg,
        Mode.BUILD_SCRIPT: "Build script works!",
    }[exercise.mode]

    print()
    if no_emoji:
        print(f"~*~ {success_msg} ~*~")
    else:
        print(f"🎉 🎉  {success_msg} 🎉 🎉")
    print()

    if prompt_output is not None:
        print("Output:")
        print(_separator())
        print(prompt_output)
        print(_separator())
        print()
    if success_hints:
        print("Hints:")
        print(_separator())
        print(exercise.hint)
        print(_separator())
        print()

    print("You can keep working on this exercise,")
    print(
        "or jump into the next one by removing the "
        f"{ui.bold('`I AM NOT DONE`')} comment:"
    )
    print()
    for context_line in context:
        line = ui.bold(context_line.line) if context_line.important else context_line.line
        number = ui.blue_bold(str(context_line.number).rjust(2))
        print(f"{number} {ui.blue('|')}  {line}")

    return False