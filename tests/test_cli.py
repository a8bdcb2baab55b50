import json

import pytest
from click.testing import CliRunner

from targetflow.cli import cli, parse_params

BUILD_FILE = """\
from targetflow import target, parameter

PARAMETERS = [parameter("Token", "API key for Push")]
DEFAULT = "Test"


def _fail(ctx):
    raise RuntimeError("compile broke")


def build():
    return [
        target("Restore"),
        target("Compile", depends_on=["Restore"]),
        target("Test", depends_on=["Compile"], description="Run unit tests"),
        target("Broken", _fail),
        target("Downstream", depends_on=["Broken"]),
        target("Push", depends_on=["Test"], requires=["Token"]),
    ]
"""


@pytest.fixture
def build_file(tmp_path, monkeypatch):
    for key in ("Token", "TOKEN", "TARGETFLOW_TOKEN"):
        monkeypatch.delenv(key, raising=False)
    path = tmp_path / "targetflow_build.py"
    path.write_text(BUILD_FILE, encoding="utf-8")
    return str(path)


def _invoke(*args, env=None):
    return CliRunner().invoke(cli, list(args), env=env)


def test_run_default_goal(build_file):
    result = _invoke("run", "-f", build_file)
    assert result.exit_code == 0, result.output
    assert "1. Restore" in result.output
    assert "3. Test" in result.output
    assert "RESULT: SUCCESS" in result.output


def test_run_failure_exit_code(build_file):
    result = _invoke("run", "Downstream", "Test", "-f", build_file)
    assert result.exit_code == 1
    assert "compile broke" in result.output
    assert "Downstream: FAILED (upstream_failure)" in result.output
    assert "Test: SUCCEEDED" in result.output


def test_run_missing_requirement_is_fatal(build_file):
    result = _invoke("run", "Push", "-f", build_file)
    assert result.exit_code == 3
    assert "RUN HALTED: Push" in result.output
    assert "RESULT: FATAL" in result.output


def test_requirement_from_param_or_environment(build_file):
    assert _invoke("run", "Push", "-f", build_file, "--param", "Token=abc").exit_code == 0
    assert _invoke("run", "Push", "-f", build_file, env={"TOKEN": "abc"}).exit_code == 0


def test_unknown_goal_is_invalid_build(build_file):
    result = _invoke("run", "Deploy", "-f", build_file)
    assert result.exit_code == 4
    assert "Unknown goal: 'Deploy'" in result.output
    assert "Known targets:" in result.output
    assert "    Restore" in result.output


def test_missing_build_file(tmp_path):
    result = _invoke("run", "Test", "-f", str(tmp_path / "nope.py"))
    assert result.exit_code == 4
    assert "Failed to load build file" in result.output


def test_broken_build_file(tmp_path):
    path = tmp_path / "broken.py"
    path.write_text("raise ImportError('no dotnet sdk')\n", encoding="utf-8")
    result = _invoke("run", "Test", "-f", str(path))
    assert result.exit_code == 4


def test_no_goals_and_no_default(tmp_path):
    path = tmp_path / "nodefault.py"
    path.write_text("from targetflow import target\nTARGETS = [target('A')]\n", encoding="utf-8")
    result = _invoke("run", "-f", str(path))
    assert result.exit_code == 2
    assert "DEFAULT" in result.output


def test_bad_param_syntax(build_file):
    result = _invoke("run", "Test", "-f", build_file, "--param", "Token")
    assert result.exit_code == 2


def test_report_json(build_file, tmp_path):
    out = tmp_path / "reports" / "run.json"
    result = _invoke("run", "Downstream", "-f", build_file, "--report-json", str(out))
    assert result.exit_code == 1

    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["result"] == "failure"
    assert data["exit_code"] == 1
    assert data["plan"] == ["Broken", "Downstream"]
    by_target = {o["target"]: o for o in data["outcomes"]}
    assert by_target["Broken"]["reason"] == "action_error"
    assert by_target["Downstream"]["upstream"] == "Broken"


def test_plan_command(build_file):
    result = _invoke("plan", "Push", "Downstream", "-f", build_file)
    assert result.exit_code == 0
    lines = [line.strip() for line in result.output.splitlines() if line.strip()[:1].isdigit()]
    assert lines == ["1. Broken", "2. Downstream", "3. Restore", "4. Compile", "5. Test", "6. Push"]
    assert "RESULT" not in result.output


def test_list_command(build_file):
    result = _invoke("list", "-f", build_file)
    assert result.exit_code == 0
    assert "Test (default) -> Compile" in result.output
    assert "Run unit tests" in result.output
    assert "Token  API key for Push" in result.output


def test_parse_params():
    assert parse_params(("Configuration=Release", "Extra=a=b")) == {"Configuration": "Release", "Extra": "a=b"}
