import pytest

from targetflow.context import BuildContext, Parameter, is_missing


def test_overrides_beat_environment_and_defaults():
    ctx = BuildContext.resolve(
        [Parameter("Configuration", default="Debug")],
        overrides={"Configuration": "Release"},
        environ={"Configuration": "Staging"},
    )
    assert ctx["Configuration"] == "Release"


def test_environment_beats_default():
    params = [Parameter("Configuration", default="Debug")]
    assert BuildContext.resolve(params, environ={"Configuration": "Release"})["Configuration"] == "Release"
    assert BuildContext.resolve(params, environ={"CONFIGURATION": "Release"})["Configuration"] == "Release"
    assert BuildContext.resolve(params, environ={"TARGETFLOW_CONFIGURATION": "Release"})["Configuration"] == "Release"
    assert BuildContext.resolve(params, environ={})["Configuration"] == "Debug"


def test_unset_parameter_without_default_is_absent():
    ctx = BuildContext.resolve([Parameter("NuGetToken")], environ={})
    assert "NuGetToken" not in ctx
    assert ctx.is_missing("NuGetToken")


def test_lookup_reads_undeclared_inputs_from_environment():
    ctx = BuildContext.resolve(lookup=["NuGetToken"], environ={"NUGETTOKEN": "secret"})
    assert ctx["NuGetToken"] == "secret"


def test_undeclared_override_is_kept():
    ctx = BuildContext.resolve(overrides={"Verbosity": "minimal"}, environ={})
    assert dict(ctx) == {"Verbosity": "minimal"}


def test_context_cannot_be_mutated():
    source = {"Configuration": "Debug"}
    ctx = BuildContext(source)
    with pytest.raises(TypeError):
        ctx["Configuration"] = "Release"

    # later changes to the source mapping don't leak in
    source["Configuration"] = "Release"
    assert ctx["Configuration"] == "Debug"


def test_of_wraps_plain_mappings_once():
    ctx = BuildContext.of({"a": 1})
    assert BuildContext.of(ctx) is ctx
    assert len(BuildContext.of(None)) == 0


@pytest.mark.parametrize(
    "value, missing",
    [(None, True), ("", True), ("  ", True), ("x", False), (0, False), (False, False)],
)
def test_is_missing(value, missing):
    assert is_missing(value) is missing
