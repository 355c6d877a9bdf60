"""Command line entry point that configures logging and serves the app."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
import uvicorn
from pydantic import ValidationError

from .settings import load_settings
from .web import create_app

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

app = typer.Typer(add_completion=False, help="Self-hosted Excalidraw sharing server")


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, force=True)


@app.command()
def serve(
    listen_addr: Optional[str] = typer.Option(None, envvar="LISTEN_ADDR", help="Address to listen on"),
    data_dir: Optional[Path] = typer.Option(None, envvar="DATA_DIR", help="Directory to store drawing JSON files"),
    api_key: Optional[str] = typer.Option(None, envvar="API_KEY", help="API key for upload/delete operations"),
    base_url: Optional[str] = typer.Option(None, envvar="BASE_URL", help="Public base URL used in share links"),
    max_upload_mb: Optional[int] = typer.Option(None, envvar="MAX_UPLOAD_MB", help="Maximum upload size in megabytes"),
    frontend_dir: Optional[Path] = typer.Option(None, envvar="FRONTEND_DIR", help="Frontend build directory"),
    config: Optional[Path] = typer.Option(None, help="Optional JSON config file"),
    log_level: str = typer.Option("INFO", envvar="LOG_LEVEL", help="Logging level"),
):
    """Run the HTTP server."""
    setup_logging(log_level)
    try:
        settings = load_settings(
            config,
            listen_addr=listen_addr,
            data_dir=data_dir,
            api_key=api_key,
            base_url=base_url,
            max_upload_mb=max_upload_mb,
            frontend_dir=frontend_dir,
        )
    except ValidationError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=2)

    logger.info(
        "Starting excalidraw-share server listen=%s data_dir=%s base_url=%s max_upload_mb=%s",
        settings.listen_addr,
        settings.data_dir,
        settings.base_url,
        settings.max_upload_mb,
    )
    application = create_app(settings)
    uvicorn.run(
        application,
        host=settings.listen_host,
        port=settings.listen_port,
        log_level=log_level.lower(),
    )


def main() -> None:
    app()
