"""Exercises: their description, completion state, compilation and running."""

from __future__ import annotations

import enum
import os
import re
import subprocess
import threading
import tomllib
from dataclasses import dataclass
from pathlib import Path

from . import ui

RUSTC_COLOR_ARGS = ["--color", "always"]
RUSTC_EDITION_ARGS = ["--edition", "2021"]
I_AM_DONE_REGEX = re.compile(r"^\s*///?\s*I\s+AM\s+NOT\s+DONE", re.MULTILINE)
CONTEXT = 2
CLIPPY_CARGO_TOML_PATH = "./exercises/clippy/Cargo.toml"
BUILD_SCRIPT_CARGO_TOML_PATH = "./exercises/tests/Cargo.toml"


def temp_file_path() -> str:
    """Return a temporary binary path unique to this process and thread."""
    thread_id = "".join(
        c for c in f"ThreadId({threading.get_ident()})" if c.isalnum()
    )
    return f"./temp_{os.getpid()}_{thread_id}"


def _clean() -> None:
    try:
        os.remove(temp_file_path())
    except OSError:
        pass


class Mode(enum.Enum):
    """How an exercise is checked."""

    COMPILE = "compile"
    TEST = "test"
    CLIPPY = "clippy"
    BUILD_SCRIPT = "buildscript"


@dataclass(frozen=True)
class ContextLine:
    """A source line shown around the pending marker."""

    line: str
    number: int
    important: bool


@dataclass(frozen=True)
class ExerciseOutput:
    """Captured output of a compiler or exercise run."""

    stdout: str
    stderr: str


class ExerciseFailed(Exception):
    """Compilation or execution of an exercise failed."""

    def __init__(self, output: ExerciseOutput) -> None:
        super().__init__(output.stderr or output.stdout)
        self.output = output


class CompileError(ExerciseFailed):
    """The exercise did not compile."""


class RunError(ExerciseFailed):
    """The compiled exercise exited unsuccessfully."""


def _lines(source: str) -> list[str]:
    parts = source.split("\n")
    if parts and parts[-1] == "":
        parts.pop()
    return [p[:-1] if p.endswith("\r") else p for p in parts]


def _output(result: subprocess.CompletedProcess) -> ExerciseOutput:
    return ExerciseOutput(
        stdout=(result.stdout or b"").decode("utf-8", errors="replace"),
        stderr=(result.stderr or b"").decode("utf-8", errors="replace"),
    )


def _cargo_toml(name: str) -> str:
    return (
        "[package]\n"
        f'name = "{name}"\n'
        'version = "0.0.1"\n'
        'edition = "2021"\n'
        "[[bin]]\n"
        f'name = "{name}"\n'
        f'path = "{name}.rs"'
    )


def _write_cargo_toml(path: str, name: str) -> None:
    message = (
        "Failed to write Clippy Cargo.toml file."
        if ui.no_emoji()
        else "Failed to write 📎 Clippy 📎 Cargo.toml file."
    )
    try:
        Path(path).write_text(_cargo_toml(name), encoding="utf-8")
    except OSError as exc:
        raise OSError(message) from exc


@dataclass
class Exercise:
    """An exercise as described in info.toml."""

    name: str
    path: Path
    mode: Mode
    hint: str

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self.mode = Mode(self.mode)

    def __str__(self) -> str:
        return str(self.path)

    def pending_context(self) -> list[ContextLine] | None:
        """Return the lines around the pending marker, or None when done."""
        source = self.path.read_text(encoding="utf-8")
        if not I_AM_DONE_REGEX.search(source):
            return None
        lines = _lines(source)
        matched = next(
            (i for i, line in enumerate(lines) if I_AM_DONE_REGEX.search(line)),
            None,
        )
        if matched is None:
            raise RuntimeError(f"pending marker in {self.path} spans lines")
        low = max(matched - CONTEXT, 0)
        high = matched + CONTEXT
        return [
            ContextLine(line=line, number=i + 1, important=i == matched)
            for i, line in enumerate(lines)
            if low <= i <= high
        ]

    def looks_done(self) -> bool:
        """Whether the pending marker has been removed from the source."""
        return self.pending_context() is None

    def _rustc(self, *extra: str) -> list[str]:
        return [
            "rustc",
            *extra,
            str(self.path),
            "-o",
            temp_file_path(),
            *RUSTC_COLOR_ARGS,
            *RUSTC_EDITION_ARGS,
        ]

    def compile(self) -> CompiledExercise:
        """Compile the exercise; raise CompileError on failure."""
        if self.mode is Mode.COMPILE:
            result = subprocess.run(self._rustc(), capture_output=True)
        elif self.mode is Mode.TEST:
            result = subprocess.run(self._rustc("--test"), capture_output=True)
        elif self.mode is Mode.CLIPPY:
            _write_cargo_toml(CLIPPY_CARGO_TOML_PATH, self.name)
            # Build a binary too so that clippy exercises can be run.
            subprocess.run(self._rustc(), capture_output=True)
            subprocess.run(
                ["cargo", "clean", "--manifest-path", CLIPPY_CARGO_TOML_PATH,
                 *RUSTC_COLOR_ARGS],
                capture_output=True,
            )
            result = subprocess.run(
                ["cargo", "clippy", "--manifest-path", CLIPPY_CARGO_TOML_PATH,
                 *RUSTC_COLOR_ARGS,
                 "--", "-D", "warnings", "-D", "clippy::float_cmp"],
                capture_output=True,
            )
        else:
            _write_cargo_toml(BUILD_SCRIPT_CARGO_TOML_PATH, self.name)
            result = subprocess.run(
                ["cargo", "test", "--manifest-path", BUILD_SCRIPT_CARGO_TOML_PATH],
                capture_output=True,
            )

        if result.returncode == 0:
            return CompiledExercise(self)
        _clean()
        raise CompileError(_output(result))


class CompiledExercise:
    """A successfully compiled exercise; its binary is removed on close."""

    def __init__(self, exercise: Exercise) -> None:
        self.exercise = exercise
        self._closed = False

    def run(self) -> ExerciseOutput:
        """Run the binary; raise RunError when it exits unsuccessfully."""
        mode = self.exercise.mode
        if mode is Mode.BUILD_SCRIPT:
            return ExerciseOutput(stdout="", stderr="")
        args = [temp_file_path()]
        if mode is Mode.TEST:
            args.append("--show-output")
        result = subprocess.run(args, capture_output=True)
        output = _output(result)
        if result.returncode != 0:
            raise RunError(output)
        return output

    def close(self) -> None:
        """Remove the compiled binary."""
        if not self._closed:
            self._closed = True
            _clean()

    def __enter__(self) -> CompiledExercise:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def load_exercises(path: str | os.PathLike) -> list[Exercise]:
    """Read the exercise list from an info.toml file."""
    with open(path, "rb") as fh:
        data = tomllib.load(fh)
    try:
        return [
            Exercise(
                name=entry["name"],
                path=Path(entry["path"]),
                mode=Mode(entry["mode"]),
                hint=entry["hint"],
            )
            for entry in data["exercises"]
        ]
    except KeyError as exc:
        raise ValueError(f"missing field {exc.args[0]!r} in {path}") from exc