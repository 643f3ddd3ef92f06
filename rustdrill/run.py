"""Running or resetting a single exercise."""

from __future__ import annotations

import subprocess

from . import ui
from .exercise import CompileError, Exercise, Mode, RunError
from .verify import test


def run(exercise: Exercise, verbose: bool) -> None:
    """Compile and run an exercise, or run its tests.

    Raises CompileError or RunError when it fails.
    """
    if exercise.mode in (Mode.TEST, Mode.BUILD_SCRIPT):
        test(exercise, verbose)
    else:
        _compile_and_run(exercise)


def reset(exercise: Exercise) -> subprocess.Popen:
    """Stash the local changes to the exercise file with git."""
    return subprocess.Popen(["git", "stash", "--", str(exercise.path)])


def _compile_and_run(exercise: Exercise) -> None:
    try:
        compiled = exercise.compile()
    except CompileError as exc:
        ui.warn(f"Compilation of {exercise} failed!, Compiler error message:\n")
        print(exc.output.stderr)
        raise

    with compiled:
        try:
            output = compiled.run()
        except RunError as exc:
            print(exc.output.stdout)
            print(exc.output.stderr)
            ui.warn(f"Ran {exercise} with errors")
            raise

    print(output.stdout)
    ui.success(f"Successfully ran {exercise}")