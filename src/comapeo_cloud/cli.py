import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer

from . import __version__
from .cleanup import cleanup_on_signal
from .client import ComapeoClient
from .config.settings import Config, ConfigurationError
from .domain.enums import AttachmentVariant
from .domain.models import RemoteDetectionAlert
from .pipeline.attachments import download_attachment, get_output_filename, parse_attachment_url
from .pipeline.export import Exporter
from .types import ApiError, AttachmentFetchError, ComapeoError
from .utils import echo_error, echo_json, setup_logging

app = typer.Typer(help="CLI tool for interacting with Comapeo Cloud API")


@dataclass
class GlobalOptions:
    """Options given before the command name."""
    server_url: Optional[str] = None
    server_token: Optional[str] = None
    config_file: Optional[Path] = None
    env_file: Optional[Path] = None
    verbose: bool = False


def load_settings(ctx: typer.Context) -> Config:
    """Build the configuration from global options, environment and YAML."""
    options: GlobalOptions = ctx.obj or GlobalOptions()
    config = Config(
        server_url=options.server_url,
        server_token=options.server_token,
        env_file=options.env_file,
        config_file=options.config_file
    )
    logging.debug(f"Using {config!r}")
    return config


def create_client(ctx: typer.Context) -> ComapeoClient:
    return load_settings(ctx).create_client()


def handle_error(error: Exception, verbose: bool = False) -> NoReturn:
    """Report an error on stderr and exit with status 1."""
    if isinstance(error, AttachmentFetchError) and isinstance(error.cause, ApiError):
        error = error.cause

    if isinstance(error, ConfigurationError):
        typer.secho(f"Error: {error}", fg=typer.colors.RED, err=True)
    elif isinstance(error, ApiError):
        echo_error("API Error:", str(error))
    elif isinstance(error, ComapeoError):
        typer.secho(f"Error: {error}", fg=typer.colors.RED, err=True)
    else:
        echo_error("An unexpected error occurred:", str(error))

    if verbose:
        logging.exception("Full traceback")
    raise typer.Exit(1)


def _is_verbose(ctx: typer.Context) -> bool:
    return bool(ctx.obj and ctx.obj.verbose)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"comapeo-cloud version: {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    server_url: Annotated[Optional[str], typer.Option("--server-url", "-s", help="Server URL (overrides SERVER_URL env var)")] = None,
    server_token: Annotated[Optional[str], typer.Option("--server-token", "-t", help="Server bearer token (overrides SERVER_BEARER_TOKEN env var)")] = None,
    config: Annotated[Optional[Path], typer.Option("--config", "-c", help="YAML configuration file (overrides COMAPEO_CONFIG env var)")] = None,
    env_file: Annotated[Optional[Path], typer.Option("--env-file", help="Environment file to load instead of ./.env")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable detailed logging output")] = False,
    log_to_file: Annotated[bool, typer.Option("--log-to-file", help="Create timestamped log files")] = False,
    version: Annotated[bool, typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version and exit")] = False,
):
    """CLI tool for interacting with Comapeo Cloud API."""
    setup_logging(verbose, ctx.invoked_subcommand, log_to_file)
    ctx.obj = GlobalOptions(
        server_url=server_url,
        server_token=server_token,
        config_file=config,
        env_file=env_file,
        verbose=verbose
    )


@app.command("info")
def info(ctx: typer.Context):
    """Get server information."""
    try:
        with create_client(ctx) as client:
            data = client.get_info()
    except Exception as e:
        handle_error(e, _is_verbose(ctx))
    echo_json("Server information:", data)


@app.command("healthcheck")
def healthcheck(ctx: typer.Context):
    """Check the health of the server."""
    try:
        with create_client(ctx) as client:
            data = client.healthcheck()
    except Exception as e:
        handle_error(e, _is_verbose(ctx))
    echo_json("Server is healthy:", data)


@app.command("list-projects")
def list_projects(ctx: typer.Context):
    """List all projects."""
    try:
        with create_client(ctx) as client:
            data = client.list_projects()
    except Exception as e:
        handle_error(e, _is_verbose(ctx))
    echo_json("Projects:", data)


@app.command("list-observations")
def list_observations(
    ctx: typer.Context,
    project_id: Annotated[str, typer.Option("--project-id", "-p", help="Project public ID")],
):
    """List observations for a project."""
    try:
        with create_client(ctx) as client:
            data = client.list_observations_raw(project_id)
    except Exception as e:
        handle_error(e, _is_verbose(ctx))
    echo_json("Observations:", data)


@app.command("export-geojson")
def export_geojson(
    ctx: typer.Context,
    project_id: Annotated[str, typer.Option("--project-id", "-p", help="Project public ID")],
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Output file path (default: comapeo_export.zip)")] = None,
):
    """
    Export project observations as GeoJSON.

    Produces a zip archive holding comapeo_data.geojson and an images/
    folder with every attachment that downloaded successfully. Attachments
    that fail to download are logged and left out; the export still
    completes.

    Examples:
        comapeo-cloud export-geojson -p <project-id>
        comapeo-cloud export-geojson -p <project-id> -o exports/field_data.zip
    """
    try:
        config = load_settings(ctx)
        settings = config.get_export_settings()
        out_path = output or Path(settings['output'])
        scratch_dir = Path(settings['scratch_dir'])

        logging.info(f"Exporting project {project_id} to {out_path}")
        with config.create_client() as client, cleanup_on_signal(scratch_dir):
            exporter = Exporter(
                client,
                project_id,
                out_path=out_path,
                scratch_dir=scratch_dir,
                max_workers=settings['max_workers']
            )
            result = exporter.export()
    except Exception as e:
        handle_error(e, _is_verbose(ctx))

    typer.secho(f"Export completed successfully: {result.output_path}", fg=typer.colors.GREEN)


@app.command("get-attachment")
def get_attachment(
    ctx: typer.Context,
    url: Annotated[str, typer.Option("--url", "-u", help="Full attachment URL")],
    variant: Annotated[Optional[AttachmentVariant], typer.Option("--variant", help="Variant (original, preview, or thumbnail for photos; original for audio)")] = None,
    output: Annotated[Optional[str], typer.Option("--output", "-o", help="Output filename")] = None,
):
    """Get an attachment."""
    try:
        reference = parse_attachment_url(url)
        with create_client(ctx) as client:
            data = download_attachment(
                client,
                reference.project_id,
                reference.drive_id,
                reference.type,
                reference.name,
                variant
            )
        filename = get_output_filename(reference.name, reference.type, output)
        Path(filename).write_bytes(data)
    except Exception as e:
        handle_error(e, _is_verbose(ctx))

    typer.secho(f"Attachment saved as: {filename}", fg=typer.colors.GREEN)


@app.command("create-alert")
def create_alert(
    ctx: typer.Context,
    project_id: Annotated[str, typer.Option("--project-id", "-p", help="Project public ID")],
    start_date: Annotated[str, typer.Option("--start-date", help="Detection start date (ISO timestamp)")],
    end_date: Annotated[str, typer.Option("--end-date", help="Detection end date (ISO timestamp)")],
    source_id: Annotated[str, typer.Option("--source-id", help="Source ID")],
    alert_type: Annotated[str, typer.Option("--alert-type", help="Alert type")],
    lon: Annotated[float, typer.Option("--lon", help="Longitude")],
    lat: Annotated[float, typer.Option("--lat", help="Latitude")],
):
    """Create a remote detection alert."""
    alert = RemoteDetectionAlert.from_point(start_date, end_date, source_id, alert_type, lon, lat)
    try:
        with create_client(ctx) as client:
            data = client.create_alert(project_id, alert)
    except Exception as e:
        handle_error(e, _is_verbose(ctx))
    echo_json("Remote alert created successfully:", data)


@app.command("list-alerts")
def list_alerts(
    ctx: typer.Context,
    project_id: Annotated[str, typer.Option("--project-id", "-p", help="Project public ID")],
):
    """List remote detection alerts for a project."""
    try:
        with create_client(ctx) as client:
            data = client.list_alerts(project_id)
    except Exception as e:
        handle_error(e, _is_verbose(ctx))
    echo_json("Remote detection alerts:", data)


if __name__ == "__main__":
    app()
