# rustdrill

rustdrill walks you through a set of small Rust exercises. Each exercise is a
`.rs` file with a mistake in it and an `// I AM NOT DONE` marker. Fix the code,
remove the marker, and rustdrill moves on to the next one.

rustdrill calls `rustc` and `cargo`, so a Rust toolchain must be on your `PATH`;
it checks `rustc --version` before doing anything else.

## What you need to bring

rustdrill does not ship any exercises. Run it from a directory that holds an
`info.toml` listing the exercises in order, each with a `name`, a `path`, a
`mode` and a `hint`:

```toml
[[exercises]]
name = "intro1"
path = "exercises/intro/intro1.rs"
mode = "compile"
hint = "Remove the I AM NOT DONE comment."
```

The modes are:

- `compile` – compiled with `rustc --edition 2021` and the binary is run;
- `test` – compiled with `rustc --test` and the test harness is run;
- `clippy` – written into `./exercises/clippy/Cargo.toml` and checked with
  `cargo clippy -- -D warnings -D clippy::float_cmp`;
- `buildscript` – written into `./exercises/tests/Cargo.toml` and checked with
  `cargo test`.

Compiled binaries are written to `./temp_<pid>_<thread>` and removed afterwards.

## Install

```
pip install rustdrill
```

## Commands

```
rustdrill                 # welcome text and first steps
rustdrill --version       # print the version
rustdrill watch           # verify, then re-verify whenever a file under ./exercises changes
rustdrill verify          # verify every exercise in order, stop at the first failure
rustdrill run NAME        # compile and run (or test) one exercise
rustdrill hint NAME       # print an exercise's hint
rustdrill reset NAME      # stash your changes to an exercise with `git stash -- <path>`
rustdrill list            # show names, paths and Done/Pending status, then progress
rustdrill lsp             # write rust-project.json for rust-analyzer
rustdrill cicvverify      # grade every exercise and write .github/result/check_result.json
```

For `run`, `hint` and `reset`, the name `next` means the first exercise that
still has its `I AM NOT DONE` marker.

`--nocapture` (given before the subcommand) shows the output of test
exercises. `watch --success-hints` prints an exercise's hint once it passes.

`list` takes `--paths`/`-p`, `--names`/`-n`, `--filter`/`-f PATTERNS`
(comma separated, matched against names and paths), `--solved`/`-s` and
`--unsolved`/`-u`.

In watch mode you can type `hint`, `clear`, `quit`, `help`, or `!<cmd>` to run
a command such as `!rustc --explain E0381`.

`lsp` takes the standard library path from `RUST_SRC_PATH`, or from
`rustc --print sysroot` when it is not set, and adds one crate for each `.rs`
file under `./exercises`.

`cicvverify` runs all exercises concurrently and writes a JSON report with the
per-exercise results and the totals `total_exercations`, `total_succeeds`,
`total_failures` and `total_time` (seconds). The directory
`.github/result/` must already exist.

The command exits with status 1 when an exercise fails, when an exercise name
is not found, when `info.toml` is missing or when `rustc` cannot be run.

## Environment

- `NO_EMOJI` – use plain-text symbols instead of emoji.
- `CLICOLOR_FORCE` (non-zero) forces colours; `CLICOLOR=0` turns them off.
  Otherwise colours are used only when standard output is a terminal.

## Using it as a library

```python
from rustdrill.exercise import load_exercises
from rustdrill.verify import verify, VerificationFailed

exercises = load_exercises("info.toml")
try:
    verify(exercises, (0, len(exercises)), verbose=False, success_hints=False)
except VerificationFailed as failed:
    print(failed.exercise.hint)
```

`Exercise.pending_context()` returns the lines around the pending marker (or
`None` once it is gone), and `Exercise.compile()` returns a
`CompiledExercise` context manager whose `run()` raises `RunError` on failure;
`compile()` itself raises `CompileError`. `rustdrill.grading.grade_all()` and
`write_results()` produce the `cicvverify` report.