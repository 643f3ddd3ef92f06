import json
import subprocess
from pathlib import Path
from unittest import mock

from rustdrill.project import Crate, RustAnalyzerProject


def test_new_project_is_empty():
    project = RustAnalyzerProject()
    assert project.to_dict() == {"sysroot_src": "", "crates": []}


def test_add_path_only_rust_files():
    project = RustAnalyzerProject()
    project.add_path("exercises/intro/intro1.rs")
    project.add_path("exercises/intro/README.md")
    project.add_path("exercises/intro")
    assert project.crates == [Crate(root_module=str(Path("exercises/intro/intro1.rs")))]
    crate = project.crates[0]
    assert crate.edition == "2021"
    assert crate.deps == []
    assert crate.cfg == ["test"]


def test_exercises_to_json_collects_recursively(tmp_path):
    root = tmp_path / "exercises"
    (root / "intro").mkdir(parents=True)
    (root / "vecs").mkdir()
    (root / "intro" / "intro1.rs").write_text("fn main() {}\n")
    (root / "vecs" / "vecs1.rs").write_text("fn main() {}\n")
    (root / "vecs" / "README.md").write_text("vecs\n")
    (root / "quiz1.rs").write_text("fn main() {}\n")

    project = RustAnalyzerProject()
    project.exercises_to_json(root)

    modules = {crate.root_module for crate in project.crates}
    assert modules == {
        str(root / "intro" / "intro1.rs"),
        str(root / "vecs" / "vecs1.rs"),
        str(root / "quiz1.rs"),
    }
    assert all(module.endswith(".rs") for module in modules)


def test_exercises_to_json_missing_root(tmp_path):
    project = RustAnalyzerProject()
    project.exercises_to_json(tmp_path / "nothing")
    assert project.crates == []


def test_sysroot_from_environment(monkeypatch):
    monkeypatch.setenv("RUST_SRC_PATH", "/opt/rust/library")
    project = RustAnalyzerProject()
    with mock.patch("rustdrill.project.subprocess.run") as run:
        result = project.get_sysroot_src()
    run.assert_not_called()
    assert result == "/opt/rust/library"
    assert project.sysroot_src == "/opt/rust/library"


def test_sysroot_from_rustc(monkeypatch, capsys):
    monkeypatch.delenv("RUST_SRC_PATH", raising=False)
    toolchain = "/opt/toolchains/stable"
    completed = subprocess.CompletedProcess(
        ["rustc"], 0, stdout=(toolchain + "\n").encode(), stderr=b""
    )
    project = RustAnalyzerProject()
    with mock.patch("rustdrill.project.subprocess.run", return_value=completed) as run:
        project.get_sysroot_src()
    assert run.call_args.args[0] == ["rustc", "--print", "sysroot"]
    sysroot = Path(project.sysroot_src)
    assert sysroot.parts[-5:] == ("lib", "rustlib", "src", "rust", "library")
    assert sysroot.parents[4] == Path(toolchain)
    assert f"Determined toolchain: {toolchain}" in capsys.readouterr().out


def test_write_to_disk_round_trip(tmp_path):
    project = RustAnalyzerProject(sysroot_src="/opt/rust/library")
    project.add_path("exercises/intro/intro1.rs")
    target = tmp_path / "rust-project.json"
    project.write_to_disk(target)

    text = target.read_text(encoding="utf-8")
    assert json.loads(text) == project.to_dict()
    assert " " not in text
    assert json.loads(text)["crates"][0]["cfg"] == ["test"]