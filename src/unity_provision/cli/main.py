"""Root CLI application for unity-provision."""

import typer

from unity_provision import __version__
from unity_provision.cli import android, version

app = typer.Typer(
    name="unity-provision",
    help="Provision Unity Editor toolchains for CI builds.",
    no_args_is_help=True,
)

# Register subcommands
app.add_typer(version.app, name="version", help="Resolve and compare Unity versions")
app.add_typer(android.app, name="android", help="Provision Android build support")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"unity-provision {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    show_version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """unity-provision - Unity Editor provisioning for CI."""
    pass


if __name__ == "__main__":
    app()
