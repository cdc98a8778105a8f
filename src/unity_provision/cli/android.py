"""CLI commands for Android SDK provisioning."""

import json
from pathlib import Path

import typer

from unity_provision.core.android_sdk import AndroidSdkProvisioner
from unity_provision.exceptions import ProvisionError
from unity_provision.models.sdk import OutcomeStatus
from unity_provision.utils.config import get_android_config_dir
from unity_provision.utils.output import console, setup_logging

app = typer.Typer(no_args_is_help=True)


@app.command("ensure-sdk")
def ensure_sdk(
    editor_root: Path = typer.Argument(
        ...,
        help="Unity Editor installation root.",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
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
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Show sdkmanager output.",
    ),
) -> None:
    """Install the project's Android target SDK into the editor if missing."""
    console.set_json_mode(json_output)
    logger = setup_logging(verbose)

    try:
        provisioner = AndroidSdkProvisioner(
            editor_root,
            android_config_dir=get_android_config_dir(),
            logger=logger,
        )
        outcome = provisioner.ensure_platform_sdk(project_path)

        if json_output:
            typer.echo(json.dumps(outcome.model_dump(mode="json"), indent=2))
            return

        if outcome.status == OutcomeStatus.NOT_CONFIGURED:
            console.print_info("No Android target SDK configured")
        elif outcome.status == OutcomeStatus.ALREADY_PRESENT:
            console.print_success(f"Android SDK already installed: {outcome.path}")
        else:
            console.print_success(f"Android SDK installed: {outcome.path}")

    except ProvisionError as e:
        console.print_error(str(e))
        raise typer.Exit(1) from None
