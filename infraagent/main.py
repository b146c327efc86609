"""CLI entry point for infraagent."""

import sys

import click
import structlog

from infraagent import __version__
from infraagent.cli.auth import auth_group
from infraagent.cli.secrets import secrets_group
from infraagent.config.settings import InfraAgentSettings
from infraagent.exceptions import ConfigurationError
from infraagent.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)


@click.group()
@click.version_option(__version__, prog_name="infraagent")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Path to configuration file (default: ~/.infraagent/config.yaml)",
)
@click.option("--log-level", default=None, help="Logging level (overrides configuration)")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, log_level: str | None) -> None:
    """infraagent: provision developer infrastructure from the command line."""
    try:
        settings = InfraAgentSettings.load(config_path)
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    try:
        configure_logging(log_level or settings.log_level, json_logs=settings.json_logs)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    ctx.obj = {"settings": settings}
    log.debug("settings_loaded", home=str(settings.home))


cli.add_command(auth_group)
cli.add_command(secrets_group)


if __name__ == "__main__":
    cli()
