import subprocess
from pathlib import Path
from unittest import mock

import pytest

from rustdrill.exercise import CompileError, Exercise, Mode, RunError
from rustdrill.run import reset, run

PENDING = "// fake_exercise\n\n// I AM NOT DONE\n\nfn main() {\n\n}\n"
FINISHED = "fn main() {\n}\n"


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("NO_EMOJI", "1")
    monkeypatch.delenv("CLICOLOR_FORCE", raising=False)
    return tmp_path


def make(workdir: Path, name: str, source: str, mode=Mode.COMPILE) -> Exercise:
    path = workdir / f"{name}.rs"
    path.write_text(source, encoding="utf-8")
    return Exercise(name=name, path=path, mode=mode, hint="")


def fake_subprocess(compile_rc=0, run_rc=0, run_stdout=b"", compile_stderr=b""):
    calls = []

    def fake(args, **kwargs):
        calls.append(list(args))
        if args[0] in ("rustc", "cargo"):
            return subprocess.CompletedProcess(args, compile_rc, b"", compile_stderr)
        return subprocess.CompletedProcess(args, run_rc, run_stdout, b"")

    return fake, calls


def test_run_compile_success(workdir, capsys):
    exercise = make(workdir, "compSuccess", FINISHED)
    fake, calls = fake_subprocess(run_stdout=b"hello from main")
    with mock.patch("rustdrill.exercise.subprocess.run", side_effect=fake):
        run(exercise, False)
    out = capsys.readouterr().out
    assert "hello from main" in out
    assert f"Successfully ran {exercise}" in out
    assert calls[0][0] == "rustc"


def test_run_compile_failure(workdir, capsys):
    exercise = make(workdir, "compFailure", "fn main() {\n    let\n}\n")
    fake, _ = fake_subprocess(compile_rc=1, compile_stderr=b"error: expected pattern")
    with mock.patch("rustdrill.exercise.subprocess.run", side_effect=fake):
        with pytest.raises(CompileError):
            run(exercise, False)
    out = capsys.readouterr().out
    assert f"Compilation of {exercise} failed!" in out
    assert "error: expected pattern" in out


def test_run_binary_failure(workdir, capsys):
    exercise = make(workdir, "crash", FINISHED)
    fake, _ = fake_subprocess(run_rc=1, run_stdout=b"partial")
    with mock.patch("rustdrill.exercise.subprocess.run", side_effect=fake):
        with pytest.raises(RunError) as info:
            run(exercise, False)
    assert info.value.output.stdout == "partial"
    assert f"Ran {exercise} with errors" in capsys.readouterr().out


def test_run_compile_exercise_does_not_prompt(workdir, capsys):
    exercise = make(workdir, "pending_exercise", PENDING)
    fake, calls = fake_subprocess()
    with mock.patch("rustdrill.exercise.subprocess.run", side_effect=fake):
        run(exercise, False)
    assert "I AM NOT DONE" not in capsys.readouterr().out
    assert len(calls) == 2


def test_run_test_exercise_with_output(workdir, capsys):
    exercise = make(workdir, "testSuccess", FINISHED, mode=Mode.TEST)
    fake, calls = fake_subprocess(run_stdout=b"THIS TEST TOO SHALL PASS")
    with mock.patch("rustdrill.exercise.subprocess.run", side_effect=fake):
        run(exercise, True)
    assert "THIS TEST TOO SHALL PASS" in capsys.readouterr().out
    assert "--test" in calls[0]


def test_run_test_exercise_without_output(workdir, capsys):
    exercise = make(workdir, "testSuccess", FINISHED, mode=Mode.TEST)
    fake, _ = fake_subprocess(run_stdout=b"THIS TEST TOO SHALL PASS")
    with mock.patch("rustdrill.exercise.subprocess.run", side_effect=fake):
        run(exercise, False)
    assert "THIS TEST TOO SHALL PASS" not in capsys.readouterr().out


def test_run_test_not_passed(workdir):
    exercise = make(workdir, "testNotPassed", FINISHED, mode=Mode.TEST)
    fake, _ = fake_subprocess(run_rc=101)
    with mock.patch("rustdrill.exercise.subprocess.run", side_effect=fake):
        with pytest.raises(RunError):
            run(exercise, False)


def test_reset_stashes_file(workdir):
    exercise = make(workdir, "intro1", FINISHED)
    with mock.patch("rustdrill.run.subprocess.Popen") as popen:
        process = reset(exercise)
    popen.assert_called_once_with(["git", "stash", "--", str(exercise.path)])
    assert process is popen.return_value


def test_reset_reports_spawn_failure(workdir):
    exercise = make(workdir, "intro1", FINISHED)
    with mock.patch("rustdrill.run.subprocess.Popen", side_effect=FileNotFoundError("git")):
        with pytest.raises(FileNotFoundError):
            reset(exercise)