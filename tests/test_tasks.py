import sys

import pytest

from targetflow.context import BuildContext
from targetflow.errors import CommandFailure
from targetflow.tasks.fs import (
    delete_directories,
    delete_directory,
    ensure_clean_directory,
    glob_directories,
    glob_files,
)
from targetflow.tasks.shell import run_command, sh


def _tree(root):
    for rel in ["src/App/bin/Debug", "src/App/obj", "src/Lib/bin", "tests/App.Tests/obj"]:
        (root / rel).mkdir(parents=True)
    (root / "src/App/bin/Debug/App.dll").write_text("x", encoding="utf-8")
    (root / "src/App/Program.cs").write_text("x", encoding="utf-8")


def test_ensure_clean_directory_creates_and_empties(tmp_path):
    artifacts = tmp_path / "artifacts"
    ensure_clean_directory(artifacts)
    assert artifacts.is_dir()

    (artifacts / "old.nupkg").write_text("x", encoding="utf-8")
    (artifacts / "nested").mkdir()
    ensure_clean_directory(artifacts)
    ensure_clean_directory(artifacts)
    assert list(artifacts.iterdir()) == []


def test_delete_directory_is_idempotent(tmp_path):
    target_dir = tmp_path / "packages" / "netescapades.enumgenerators"
    target_dir.mkdir(parents=True)
    (target_dir / "pkg.nupkg").write_text("x", encoding="utf-8")

    delete_directory(target_dir)
    delete_directory(target_dir)
    assert not target_dir.exists()


def test_delete_directory_refuses_files(tmp_path):
    f = tmp_path / "file.txt"
    f.write_text("x", encoding="utf-8")
    with pytest.raises(NotADirectoryError):
        delete_directory(f)


def test_glob_and_delete_build_outputs(tmp_path):
    _tree(tmp_path)
    found = glob_directories(tmp_path / "src", "**/bin", "**/obj")
    assert [p.relative_to(tmp_path).as_posix() for p in found] == ["src/App/bin", "src/App/obj", "src/Lib/bin"]

    delete_directories(found)
    delete_directories(found)
    assert glob_directories(tmp_path / "src", "**/bin", "**/obj") == []
    assert (tmp_path / "src/App/Program.cs").exists()
    assert glob_directories(tmp_path / "missing", "**/bin") == []


def test_glob_files(tmp_path):
    (tmp_path / "a.nupkg").write_text("x", encoding="utf-8")
    (tmp_path / "b.snupkg").write_text("x", encoding="utf-8")
    assert [p.name for p in glob_files(tmp_path, "*.nupkg")] == ["a.nupkg"]


def test_sh_runs_command(tmp_path):
    marker = tmp_path / "done.txt"
    action = sh(f'"{sys.executable}" -c "open(r\'{marker}\', \'w\').write(\'ok\')"')
    action(BuildContext())
    assert marker.read_text(encoding="utf-8") == "ok"


def test_sh_builds_command_from_context(tmp_path):
    action = sh(lambda ctx: f"echo {ctx['Configuration']} > out.txt", cwd=tmp_path)
    action(BuildContext({"Configuration": "Release"}))
    assert (tmp_path / "out.txt").read_text(encoding="utf-8").strip() == "Release"


def test_sh_failure_raises_command_failure():
    with pytest.raises(CommandFailure) as exc:
        sh("echo broken >&2; exit 3")(BuildContext())
    assert exc.value.exit_code == 3
    assert "broken" in exc.value.stderr
    assert "exit=3" in str(exc.value)


def test_run_command_missing_cwd(tmp_path):
    with pytest.raises(FileNotFoundError):
        run_command("echo hi", cwd=tmp_path / "nope")
