"""Command-line entry point: parsing arguments and dispatching subcommands."""

from __future__ import annotations

import argparse
import math
import subprocess
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path

from . import ui
from .exercise import Exercise, ExerciseFailed, load_exercises
from .grading import grade_all, write_results
from .project import RustAnalyzerProject
from .run import reset, run
from .verify import VerificationFailed, verify
from .watch import WatchStatus, watch

VERSION = "5.5.1"
PROG = "rustdrill"
INFO_FILE = "info.toml"

WELCOME = """       welcome to...
  ____ _   _ ____ _____ ____  ____  ___ _     _
 |  _ \\ | | / ___|_   _|  _ \\|  _ \\|_ _| |   | |
 | |_) | | | \\___ \\ | | | | | | |_) || || |   | |
 |  _ <| |_| |___) || | | |_| |  _ < | || |___| |___
 |_| \\_\\\\___/|____/ |_| |____/|_| \\_\\___|_____|_____|"""

DEFAULT_OUT = f"""Thanks for installing {PROG}!

Is this your first time? Don't worry, these exercises are made for beginners!
Before we get started, here are a few notes about how it works:

1. You solve exercises. Each one usually has a syntax error in it that makes
   it fail compilation or testing; sometimes it is a logic error instead. Your
   job is to find it and fix it. Once the exercise compiles and passes, you can
   move on to the next one.
2. In watch mode (recommended) you start with the first exercise. Don't be
   surprised by an error message popping up straight away: that is the puzzle
   you are supposed to solve. Open the exercise file in an editor and start
   your detective work!
3. If you're stuck, type 'hint' in watch mode, or run `{PROG} hint <name>`.
4. To use rust-analyzer with the exercises, run `{PROG} lsp`.

Got all that? Great! Run `{PROG} watch` to get the first exercise.
Make sure to have your editor open!"""

FINISH_LINE = """+----------------------------------------------------+
|          You made it to the finish line!           |
+----------------------------------------------------+

We hope you enjoyed learning about the various aspects of Rust!
If you noticed any issues, please don't hesitate to report them.
You can also contribute your own exercises to help others."""


class ExerciseNotFound(LookupError):
    """No exercise matches the requested name."""


class _Parser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with exit status 1."""

    def error(self, message: str) -> None:  # type: ignore[override]
        prefix = "the following arguments are required:"
        if message.startswith(prefix):
            missing = message[len(prefix):].strip()
            message = f"Required positional arguments not provided:\n    {missing}"
        self.print_usage(sys.stderr)
        sys.stderr.write(f"{message}\n")
        raise SystemExit(1)


def _build_parser() -> _Parser:
    parser = _Parser(
        prog=PROG,
        description="A collection of small exercises to get you used to "
        "writing and reading Rust code",
    )
    parser.add_argument("--nocapture", action="store_true",
                        help="show outputs from the test exercises")
    parser.add_argument("-v", "--version", action="store_true",
                        help="show the executable version")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("verify", help="verifies all exercises according to the recommended order")

    watch_p = sub.add_parser("watch", help="reruns `verify` when files were edited")
    watch_p.add_argument("--success-hints", action="store_true",
                         help="show hints on success")

    for name, text in (
        ("run", "runs/tests a single exercise"),
        ("reset", 'resets a single exercise using "git stash -- <filename>"'),
        ("hint", "returns a hint for the given exercise"),
    ):
        p = sub.add_parser(name, help=text)
        p.add_argument("name", help="the name of the exercise")

    list_p = sub.add_parser("list", help="lists the available exercises")
    list_p.add_argument("-p", "--paths", action="store_true",
                        help="show only the paths of the exercises")
    list_p.add_argument("-n", "--names", action="store_true",
                        help="show only the names of the exercises")
    list_p.add_argument("-f", "--filter", default=None,
                        help="comma separated patterns to match exercise names")
    list_p.add_argument("-u", "--unsolved", action="store_true",
                        help="display only exercises not yet solved")
    list_p.add_argument("-s", "--solved", action="store_true",
                        help="display only exercises that have been solved")

    sub.add_parser("lsp", help="enable rust-analyzer for exercises")
    sub.add_parser("cicvverify", help="grade every exercise and record the results")
    return parser


def find_exercise(name: str, exercises: Iterable[Exercise]) -> Exercise:
    """Find an exercise by name; "next" means the first one not yet done."""
    if name == "next":
        found = next((e for e in exercises if not e.looks_done()), None)
        if found is None:
            raise ExerciseNotFound(
                "🎉 Congratulations! You have done all the exercises!\n"
                "🔚 There are no more exercises to do next!"
            )
        return found
    found = next((e for e in exercises if e.name == name), None)
    if found is None:
        raise ExerciseNotFound(f"No exercise found for '{name}'!")
    return found


def list_exercises(
    exercises: Sequence[Exercise],
    paths: bool = False,
    names: bool = False,
    pattern: str | None = None,
    unsolved: bool = False,
    solved: bool = False,
) -> list[str]:
    """Return the lines of the exercise listing, ending with a progress line."""
    lines: list[str] = []
    if not paths and not names:
        lines.append(f"{'Name':<17}\t{'Path':<46}\t{'Status':<7}")
    filters = [f for f in (pattern or "").lower().split(",") if f.strip()]
    done = 0
    for exercise in exercises:
        fname = str(exercise.path)
        matches = any(f in exercise.name or f in fname for f in filters)
        is_done = exercise.looks_done()
        if is_done:
            done += 1
        status = "Done" if is_done else "Pending"
        wanted = (
            (is_done and solved)
            or (not is_done and unsolved)
            or (not solved and not unsolved)
        )
        if wanted and (matches or pattern is None):
            if paths:
                lines.append(fname)
            elif names:
                lines.append(exercise.name)
            else:
                lines.append(f"{exercise.name:<17}\t{fname:<46}\t{status:<7}")
    total = len(exercises)
    percentage = done / total * 100.0 if total else math.nan
    shown = "NaN" if math.isnan(percentage) else f"{percentage:.1f}"
    lines.append(
        f"Progress: You completed {done} / {total} exercises ({shown} %)."
    )
    return lines


def rustc_exists() -> bool:
    """Whether `rustc --version` can be run successfully."""
    try:
        result = subprocess.run(["rustc", "--version"], stdout=subprocess.DEVNULL)
    except OSError:
        return False
    return result.returncode == 0


def _print_lines(lines: Iterable[str]) -> int:
    try:
        for line in lines:
            sys.stdout.write(f"{line}\n")
        sys.stdout.flush()
    except BrokenPipeError:
        return 0
    except OSError:
        return 1
    return 0


def _lsp() -> int:
    project = RustAnalyzerProject()
    try:
        project.get_sysroot_src()
    except OSError:
        print("Couldn't find toolchain path, do you have `rustc` installed?")
        return 1
    try:
        project.exercises_to_json()
    except OSError:
        print("Couldn't parse the exercise files")
        return 1

    if not project.crates:
        print("Failed find any exercises, make sure you're in the exercises folder")
        return 0
    try:
        project.write_to_disk()
    except OSError:
        print("Failed to write rust-project.json to disk for rust-analyzer")
        return 0
    print("Successfully generated rust-project.json")
    print("rust-analyzer will now parse exercises, restart your language server or editor")
    return 0


def _watch(exercises: list[Exercise], verbose: bool, success_hints: bool) -> int:
    try:
        status = watch(exercises, verbose, success_hints)
    except OSError as exc:
        print(f"Error: Could not watch your progress. Error message was {exc!r}.")
        print("Most likely you've run out of disk space or your 'inotify limit' has been reached.")
        return 1
    if status is WatchStatus.FINISHED:
        emoji = "★" if ui.no_emoji() else "🎉"
        print(f"{emoji} All exercises completed! {emoji}")
        print(f"\n{FINISH_LINE}\n")
    else:
        print("We hope you're enjoying learning about Rust!")
        print(
            "If you want to continue working on the exercises at a later point, "
            f"you can simply run `{PROG} watch` again"
        )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line and return the exit status."""
    args = _build_parser().parse_args(argv)

    if args.version:
        print(f"v{VERSION}")
        return 0

    if args.command is None:
        print(f"\n{WELCOME}\n")

    if not Path(INFO_FILE).exists():
        print(f"{sys.argv[0]} must be run from the exercises directory")
        print(f"Make sure {INFO_FILE} is in the current directory!")
        return 1

    if not rustc_exists():
        print("We cannot find `rustc`.")
        print("Try running `rustc --version` to diagnose your problem.")
        print("For instructions on how to install Rust, check the README.")
        return 1

    exercises = load_exercises(INFO_FILE)
    verbose = args.nocapture

    if args.command is None:
        print(f"{DEFAULT_OUT}\n")
        return 0

    if args.command == "list":
        return _print_lines(
            list_exercises(
                exercises,
                paths=args.paths,
                names=args.names,
                pattern=args.filter,
                unsolved=args.unsolved,
                solved=args.solved,
            )
        )

    if args.command in ("run", "reset", "hint"):
        try:
            exercise = find_exercise(args.name, exercises)
        except ExerciseNotFound as exc:
            print(exc)
            return 1
        if args.command == "hint":
            print(exercise.hint)
            return 0
        if args.command == "reset":
            try:
                reset(exercise).wait()
            except OSError:
                return 1
            return 0
        try:
            run(exercise, verbose)
        except ExerciseFailed:
            return 1
        return 0

    if args.command == "verify":
        try:
            verify(exercises, (0, len(exercises)), verbose, False)
        except VerificationFailed:
            return 1
        return 0

    if args.command == "cicvverify":
        check_list = grade_all(exercises, True)
        write_results(check_list)
        return 0

    if args.command == "lsp":
        return _lsp()

    return _watch(exercises, verbose, args.success_hints)


if __name__ == "__main__":
    raise SystemExit(main())