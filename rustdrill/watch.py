"""Watch mode: re-verify exercises whenever their files change."""

from __future__ import annotations

import enum
import queue
import subprocess
import sys
import threading
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import TextIO

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .exercise import Exercise
from .verify import VerificationFailed, verify

_HELP = """Commands available to you in watch mode:
  hint   - prints the current exercise's hint
  clear  - clears the screen
  quit   - quits watch mode
  !<cmd> - executes a command, like `!rustc --explain E0381`
  help   - displays this help message

Watch mode automatically re-evaluates the current exercise
when you edit a file's contents."""


class WatchStatus(enum.Enum):
    """How watch mode ended."""

    FINISHED = "finished"
    UNFINISHED = "unfinished"


class WatchShell:
    """The interactive command reader that runs alongside watch mode."""

    def __init__(self, failed_hint: str | None = None, stream: TextIO | None = None) -> None:
        self.failed_hint = failed_hint
        self.should_quit = threading.Event()
        self._stream = stream

    def handle(self, line: str) -> None:
        """Carry out one command typed by the user."""
        command = line.strip()
        if command == "hint":
            if self.failed_hint is not None:
                print(self.failed_hint)
        elif command == "clear":
            print("\x1b[2J\x1b[1;1H")
        elif command == "quit":
            self.should_quit.set()
            print("Bye!")
        elif command == "help":
            print(_HELP)
        elif command.startswith("!"):
            cmd = command[1:]
            parts = cmd.split()
            if not parts:
                print("no command provided")
                return
            try:
                subprocess.run(parts)
            except OSError as exc:
                print(f"failed to execute command `{cmd}`: {exc}")
        else:
            print(f"unknown command: {command}")

    def run(self) -> None:
        """Read and handle commands until end of input or quit."""
        stream = self._stream if self._stream is not None else sys.stdin
        while not self.should_quit.is_set():
            try:
                line = stream.readline()
            except (OSError, ValueError) as exc:
                print(f"error reading command: {exc}")
                return
            if not line:
                return
            self.handle(line)


def _ends_with(full: Path, tail: Path) -> bool:
    tail_parts = tail.parts
    if not tail_parts:
        return True
    return len(full.parts) >= len(tail_parts) and full.parts[-len(tail_parts):] == tail_parts


def pending_order(exercises: Sequence[Exercise], changed_path: str | Path) -> list[Exercise]:
    """The changed exercise first, then every other exercise not yet done."""
    changed = Path(changed_path)
    first = next((e for e in exercises if _ends_with(changed, e.path)), None)
    rest = [
        e for e in exercises
        if not _ends_with(changed, e.path) and not e.looks_done()
    ]
    return ([first] if first is not None else []) + rest


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, changes: queue.Queue) -> None:
        super().__init__()
        self._changes = changes

    def _record(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._changes.put(str(event.src_path))

    def on_created(self, event: FileSystemEvent) -> None:
        self._record(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._record(event)


def _clear_screen() -> None:
    print("\x1bc")


def _drain(first: str, changes: queue.Queue) -> list[str]:
    paths = [first]
    while True:
        try:
            paths.append(changes.get_nowait())
        except queue.Empty:
            break
    return list(dict.fromkeys(paths))


def watch(exercises: Iterable[Exercise], verbose: bool, success_hints: bool) -> WatchStatus:
    """Verify exercises, then re-verify on each change until done or quit."""
    exercises = list(exercises)
    changes: queue.Queue = queue.Queue()
    observer = Observer()
    observer.schedule(_ChangeHandler(changes), "./exercises", recursive=True)
    observer.start()
    try:
        _clear_screen()
        try:
            verify(exercises, (0, len(exercises)), verbose, success_hints)
            return WatchStatus.FINISHED
        except VerificationFailed as exc:
            shell = WatchShell(failed_hint=exc.exercise.hint)

        print(
            "Welcome to watch mode! You can type 'help' to get an overview "
            "of the commands you can use here."
        )
        threading.Thread(target=shell.run, daemon=True).start()

        while True:
            try:
                first = changes.get(timeout=1)
            except queue.Empty:
                pass
            else:
                for changed in _drain(first, changes):
                    path = Path(changed)
                    if path.suffix != ".rs" or not path.exists():
                        continue
                    filepath = path.resolve()
                    pending = pending_order(exercises, filepath)
                    num_done = sum(1 for e in exercises if e.looks_done())
                    _clear_screen()
                    try:
                        verify(pending, (num_done, len(exercises)), verbose, success_hints)
                        return WatchStatus.FINISHED
                    except VerificationFailed as exc:
                        shell.failed_hint = exc.exercise.hint
            if shell.should_quit.is_set():
                return WatchStatus.UNFINISHED
    finally:
        observer.stop()
        observer.join()