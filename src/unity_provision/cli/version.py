"""CLI commands for Unity version resolution."""

import json
import sys
from pathlib import Path

import typer

from unity_provision.core.project import UnityProject
from unity_provision.core.version import (
    FINAL_CHANNEL,
    Architecture,
    UnityVersion,
    resolve_version,
)
from unity_provision.exceptions import ProvisionError
from unity_provision.utils.config import CATALOG_ENV_VAR, get_catalog_path
from unity_provision.utils.output import console, setup_logging

app = typer.Typer(no_args_is_help=True)

RELEASE_CHANNELS = "abcfpx"


def read_catalog(catalog: Path | None) -> list[str]:
    """Read a newline-separated release catalog.

    Args:
        catalog: Catalog file, "-" for stdin, or None to use env/config.

    Raises:
        ProvisionError: If no catalog is configured or it cannot be read.
    """
    catalog = catalog or get_catalog_path()
    if catalog is None:
        raise ProvisionError(
            f"No release catalog given. Use --catalog, set {CATALOG_ENV_VAR}, "
            "or add release_catalog to ~/.unity-provision/config.json"
        )

    if str(catalog) == "-":
        text = sys.stdin.read()
    else:
        try:
            text = catalog.read_text(encoding="utf-8")
        except OSError as e:
            raise ProvisionError(f"Cannot read release catalog {catalog}: {e}") from e

    return [line.strip() for line in text.splitlines() if line.strip()]


@app.command("resolve")
def resolve(
    request: str = typer.Argument(
        ...,
        help="Requested version (e.g., 2022.x, 6000.0, 2021.3.5f1).",
    ),
    catalog: Path | None = typer.Option(
        None,
        "--catalog",
        "-c",
        help="File listing available releases, one per line ('-' for stdin).",
    ),
    changeset: str | None = typer.Option(
        None,
        "--changeset",
        help="Changeset of the requested version.",
    ),
    arch: Architecture | None = typer.Option(
        None,
        "--arch",
        case_sensitive=False,
        help="Editor architecture (defaults to host).",
    ),
    channels: list[str] = typer.Option(
        [FINAL_CHANNEL],
        "--channel",
        help="Release channel eligible for fallback (repeatable).",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Show matching diagnostics.",
    ),
) -> None:
    """Resolve a version request to a release from the catalog."""
    console.set_json_mode(json_output)
    logger = setup_logging(verbose)

    try:
        invalid = [c for c in channels if c not in RELEASE_CHANNELS or len(c) != 1]
        if invalid:
            raise ProvisionError(f"Unknown release channel(s): {', '.join(invalid)}")

        spec = UnityVersion(request, changeset, arch)
        releases = read_catalog(catalog)
        resolved = resolve_version(spec, releases, channels=channels, logger=logger)

        if json_output:
            output = {
                "requested": spec.version,
                "version": resolved.version if resolved else None,
                "architecture": spec.architecture.value,
            }
            typer.echo(json.dumps(output, indent=2))
            if resolved is None:
                raise typer.Exit(1)
            return

        if resolved is None:
            console.print_error(f"No release matches {spec.version}")
            raise typer.Exit(1)

        console.print_success(f"{resolved.version} ({resolved.architecture.value})")

    except ProvisionError as e:
        console.print_error(str(e))
        raise typer.Exit(1) from None


@app.command("check")
def check(
    version: str = typer.Argument(..., help="Baseline version."),
    constraint: str = typer.Argument(..., help="Version to test against the baseline."),
) -> None:
    """Check that a version is caret-compatible with a baseline version."""
    try:
        baseline = UnityVersion(version)
        if not baseline.satisfies(constraint):
            console.print_error(f"{constraint} does not satisfy ^{baseline.semver}")
            raise typer.Exit(1)
        console.print_success(f"{constraint} satisfies ^{baseline.semver}")

    except ProvisionError as e:
        console.print_error(str(e))
        raise typer.Exit(1) from None


@app.command("project")
def project(
    project_path: Path = typer.Argument(
        ...,
        help="Path to the Unity project.",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON.",
    ),
) -> None:
    """Show the editor version a Unity project was saved with."""
    console.set_json_mode(json_output)

    try:
        version = UnityProject(project_path).version()

        if json_output:
            output = {"version": version.version, "changeset": version.changeset}
            typer.echo(json.dumps(output, indent=2))
            return

        console.print(str(version))

    except ProvisionError as e:
        console.print_error(str(e))
        raise typer.Exit(1) from None
