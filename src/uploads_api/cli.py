# cli.py
import logging

import click

from uploads_api.config.settings import get_settings

logger = logging.getLogger(__name__)


@click.group()
def cli():
    """CLI commands for running and inspecting the Uploads API"""
    pass


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    click.echo("Current Configuration:")
    for key, value in settings.describe().items():
        click.echo(f"  {key}: {value}")
    backend = "cloudinary" if settings.remote_storage_configured else "local"
    click.echo(f"  Storage backend: {backend}")


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Interface to bind")
@click.option("--port", type=int, default=None, help="Port to listen on (defaults to PORT setting)")
@click.option("--reload", is_flag=True, help="Reload on code changes (development only)")
def serve(host, port, reload):
    """Run the API with uvicorn"""
    import uvicorn

    settings = get_settings()
    port = port or settings.port
    click.echo(f"Backend running on http://localhost:{port}")
    uvicorn.run(
        "uploads_api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    cli()
