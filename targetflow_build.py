# targetflow_build.py
# Build for a .NET solution: clean, restore, compile, test, pack, push.
from __future__ import annotations

from pathlib import Path

from targetflow import (
    delete_directory,
    ensure_clean_directory,
    glob_directories,
    glob_files,
    parameter,
    sh,
    target,
    targets,
)
from targetflow.tasks.fs import delete_directories
from targetflow.tasks.shell import run_command

ROOT = Path(__file__).resolve().parent
SOURCE_DIR = ROOT / "src"
TESTS_DIR = ROOT / "tests"
ARTIFACTS_DIR = ROOT / "artifacts"

NUGET_ORG_URL = "https://api.nuget.org/v3/index.json"

PARAMETERS = [
    parameter("Configuration", "Configuration to build", default="Debug"),
    parameter("PackagesDirectory", "Local NuGet packages directory", default=str(ROOT / "packages")),
    parameter("NuGetToken", "API key used by PushToNuGet"),
    parameter("GitRef", "Ref being built, e.g. refs/tags/v1.2.0"),
]

DEFAULT = "Compile"


def _clean(ctx) -> None:
    delete_directories(glob_directories(SOURCE_DIR, "**/bin", "**/obj"))
    delete_directories(glob_directories(TESTS_DIR, "**/bin", "**/obj"))
    if ctx.get("PackagesDirectory"):
        ensure_clean_directory(ctx["PackagesDirectory"])
    ensure_clean_directory(ARTIFACTS_DIR)


def _packages_arg(ctx) -> str:
    packages = ctx.get("PackagesDirectory")
    return f" --packages \"{packages}\"" if packages else ""


def _restore(ctx) -> str:
    return "dotnet restore" + _packages_arg(ctx)


def _test_package(ctx) -> None:
    packages = ctx.get("PackagesDirectory")
    if packages:
        delete_directory(Path(packages) / "netescapades.enumgenerators")
        delete_directory(Path(packages) / "netescapades.enumgenerators.attributes")
    config = ctx["Configuration"]
    # build resolves from the same folder restore filled
    packages_prop = f" -p:RestorePackagesPath=\"{packages}\"" if packages else ""
    for project in glob_files(TESTS_DIR, "*.Nuget*IntegrationTests/*.csproj"):
        run_command(
            f"dotnet restore \"{project}\" --configfile NuGet.integration-tests.config"
            + _packages_arg(ctx),
            cwd=ROOT,
        )
        run_command(f"dotnet build \"{project}\" -c {config} --no-restore" + packages_prop, cwd=ROOT)
        run_command(f"dotnet test \"{project}\" -c {config} --no-build --no-restore", cwd=ROOT)


def _push(ctx) -> None:
    for package in glob_files(ARTIFACTS_DIR, "*.nupkg"):
        run_command(
            f"dotnet nuget push \"{package}\" --source {NUGET_ORG_URL} --skip-duplicate"
            f" --api-key \"{ctx['NuGetToken']}\"",
        )


def _is_tag(ctx) -> bool:
    return str(ctx.get("GitRef") or "").startswith("refs/tags/")


def build():
    return targets(
        target("Clean", _clean, before=["Restore"], description="Delete bin/obj, packages and artifacts"),
        target("Restore", sh(_restore)),
        target(
            "Compile",
            sh(lambda ctx: f"dotnet build -c {ctx['Configuration']} --no-restore"),
            depends_on=["Restore"],
        ),
        target(
            "Test",
            sh(lambda ctx: f"dotnet test -c {ctx['Configuration']} --no-build --no-restore"),
            depends_on=["Compile"],
        ),
        target(
            "Pack",
            sh(lambda ctx: f"dotnet pack -c {ctx['Configuration']} --no-build --no-restore -o \"{ARTIFACTS_DIR}\""),
            depends_on=["Compile"],
            after=["Test"],
            produces=[str(ARTIFACTS_DIR)],
        ),
        target("TestPackage", _test_package, depends_on=["Pack"], after=["Test"], produces=[str(ARTIFACTS_DIR)]),
        target(
            "PushToNuGet",
            _push,
            depends_on=["Pack"],
            after=["TestPackage"],
            condition=_is_tag,
            requires=["NuGetToken"],
        ),
    )
