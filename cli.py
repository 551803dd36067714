#!/usr/bin/env python3
"""
CLI for the Subsidy Financing Engine.

Usage:
    python cli.py financing evaluate samples/new_build.yaml
    python cli.py financing evaluate samples/new_build.yaml --json
    python cli.py financing tier 40210
    python cli.py financing classify neubau
    python cli.py serve --port 8000

Commands:
    financing   Evaluate records, list requirements, look up tiers and variants
    serve       Start the API server
    version     Display version information
"""
import click
import logging

import yaml

from subsidy_app.config import ConfigurationError, get_config
from subsidy_app.cli import register_commands

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    try:
        level = get_config().log_level
    except ConfigurationError:
        level = 'INFO'
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


@click.group()
@click.version_option(version='1.0.0')
def cli():
    """Subsidy Financing Engine CLI.

    Evaluate housing-subsidy financing plans: applicable fields,
    subsidy ceilings, reconciliation and completeness.
    """
    _configure_logging()


register_commands(cli)


@cli.command()
@click.option('--port', type=int, default=8000, help='Server port')
@click.option('--host', default='0.0.0.0', help='Server host')
@click.option('--reload', is_flag=True, help='Enable auto-reload')
def serve(port: int, host: str, reload: bool):
    """Start the API server.

    Runs the FastAPI application with uvicorn.

    Example:
        python cli.py serve --port 8000 --reload
    """
    import uvicorn

    click.echo(click.style('Subsidy Financing Engine - API Server', fg='cyan', bold=True))
    click.echo(f"Starting server at http://{host}:{port}")
    click.echo("Press CTRL+C to stop\n")

    uvicorn.run(
        "subsidy_app.main:app",
        host=host,
        port=port,
        reload=reload
    )


@cli.command()
def version():
    """Display version information."""
    click.echo(click.style('Subsidy Financing Engine', fg='cyan', bold=True))
    click.echo("Version: 1.0.0")

    try:
        config = get_config()
        click.echo(f"Configuration: {config.version} ({config.config_path})")
    except ConfigurationError as e:
        click.echo(click.style(f"Configuration: unavailable ({e})", fg='red'))

    import fastapi
    import pydantic
    click.echo("\nDependencies:")
    click.echo(f"  - FastAPI: {fastapi.__version__}")
    click.echo(f"  - Pydantic: {pydantic.VERSION}")
    click.echo(f"  - PyYAML: {yaml.__version__}")


if __name__ == '__main__':
    cli()
