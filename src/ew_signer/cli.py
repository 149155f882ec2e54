"""Command-line interface for EW Signer."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ew_signer.config import RunConfig, Settings
from ew_signer.core.errors import InvalidSetting, SignerError
from ew_signer.core.machine import SubmissionStateMachine
from ew_signer.core.models import SubmissionRun, SubmissionState
from ew_signer.credentials import DEFAULT_ENV_FILE, CredentialProvider, rich_prompt
from ew_signer.packaging.archive import archive_path_for, package_extension, validate_source
from ew_signer.utils.logging import configure_logging

app = typer.Typer(
    name="ew-sign",
    help="Automatically zip and sign a SketchUp extension via the Extension Warehouse web interface",
    add_completion=False,
)
console = Console()

STATE_LABELS = {
    SubmissionState.AUTHENTICATING: "🔐 Signing in",
    SubmissionState.INITIATING: "📝 Opening the submission wizard",
    SubmissionState.UPLOADING: "📤 Uploading the archive",
    SubmissionState.AWAITING_PROCESSING: "⏳ Waiting for the signature",
    SubmissionState.DOWNLOADING: "📥 Downloading the signed archive",
    SubmissionState.COMPLETE: "✅ Done",
    SubmissionState.FAILED: "❌ Failed",
}


def report_progress(run: SubmissionRun) -> None:
    console.print(STATE_LABELS.get(run.state, run.state.value))


@app.command()
def sign(
    path: Path = typer.Argument(
        ...,
        help="Folder that contains the extension loader .rb file and its support folder",
    ),
    env: bool = typer.Option(
        False, "--env", help="Read EW_USERNAME and EW_PASSWORD from ./.env", rich_help_panel="Authentication"
    ),
    env_file: Optional[Path] = typer.Option(
        None, "--env-file", help="Dotenv file with EW_USERNAME and EW_PASSWORD", rich_help_panel="Authentication"
    ),
    username: Optional[str] = typer.Option(
        None, "--username", help="Extension Warehouse username (prompted if missing)", rich_help_panel="Authentication"
    ),
    password: Optional[str] = typer.Option(
        None, "--password", help="Extension Warehouse password (prompted if missing)", rich_help_panel="Authentication"
    ),
    interactive: bool = typer.Option(
        True, "--interactive/--no-interactive", help="Prompt for missing credentials", rich_help_panel="Authentication"
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Path to download the signed extension to"),
    headless: Optional[bool] = typer.Option(
        None, "--headless/--no-headless", help="Run without showing the browser"
    ),
    timeout: Optional[int] = typer.Option(
        None, "--timeout", help="Fail a step after this many milliseconds without progress"
    ),
    processing_timeout: Optional[int] = typer.Option(
        None, "--processing-timeout", help="Milliseconds to wait for the portal to sign the archive"
    ),
    settle_delay: Optional[float] = typer.Option(
        None, "--settle-delay", help="Seconds to let the upload dialog settle before opening the file chooser"
    ),
) -> None:
    """Zip, upload, sign and download an extension."""
    settings = Settings()
    configure_logging(settings)

    try:
        run = run_signing(
            settings,
            path=path,
            env_file=env_file or (DEFAULT_ENV_FILE if env else None),
            username=username,
            password=password,
            interactive=interactive,
            output=output,
            headless=headless,
            timeout_ms=timeout,
            processing_timeout_ms=processing_timeout,
            settle_delay=settle_delay,
        )
    except SignerError as e:
        console.print(f"❌ {e}", style="red", markup=False, soft_wrap=True)
        raise typer.Exit(code=1)

    for line in run.summary():
        console.print(line, markup=False, soft_wrap=True)

    if not run.succeeded:
        raise typer.Exit(code=1)

    if not run.warnings:
        console.print(f"Downloaded to \"{run.output_path}\"", markup=False, soft_wrap=True)


def run_signing(
    settings: Settings,
    path: Path,
    env_file: Optional[Path] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    interactive: bool = True,
    output: Optional[Path] = None,
    **overrides,
) -> SubmissionRun:
    """
    Validate inputs, package the extension and run the state machine.

    Every pre-run problem is raised as a SignerError before the browser is
    launched.
    """
    source_dir = validate_source(path)

    try:
        config = RunConfig.from_settings(settings, source_dir=source_dir, output=output, **overrides)
    except ValidationError as e:
        error = e.errors()[0]
        raise InvalidSetting(".".join(str(part) for part in error["loc"]), error["msg"]) from e

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)

    provider = CredentialProvider(prompter=rich_prompt if interactive else None)
    credentials = provider.resolve(username=username, password=password, env_file=env_file)

    package = package_extension(source_dir, archive_path_for(source_dir, output))
    for warning in package.warnings:
        console.print(warning, style="yellow", markup=False, soft_wrap=True)
    if not package.ok:
        raise package.error

    machine = SubmissionStateMachine(config, observer=report_progress)
    return asyncio.run(machine.run(package.archive_path, credentials))


@app.command()
def config() -> None:
    """Show current configuration."""
    settings = Settings()

    table = Table(title="EW Signer Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Portal URL", settings.portal_url)
    table.add_row("Browser Headless", str(settings.browser_headless))
    table.add_row("Browser Slow Motion (ms)", str(settings.browser_slow_mo))
    table.add_row("Step Timeout (ms)", str(settings.timeout_ms))
    table.add_row("Processing Timeout (ms)", str(settings.processing_timeout_ms or settings.timeout_ms))
    table.add_row("Upload Settle Delay (s)", str(settings.upload_settle_delay))
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Log Level", settings.log_level)

    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    from ew_signer import __version__
    console.print(f"EW Signer v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
