"""CLI commands for platform credentials.

This module provides the ``infraagent auth`` command group for storing,
listing, verifying and removing the API tokens infraagent uses to talk to
GitHub, Vercel, Supabase, Cloudflare and Stripe.

Tokens live in the encrypted vault at ``~/.infraagent/.secrets``. Values
are never printed.

Example:
    Store and verify credentials::

        $ infraagent auth add github
        $ infraagent auth add stripe --field secretKey --field publishableKey
        $ infraagent auth test
"""

import sys

import click
import httpx

from infraagent.config.settings import InfraAgentSettings
from infraagent.exceptions import InfraAgentError
from infraagent.secrets.health import ServiceCheck, check_services
from infraagent.secrets.validators import SecretValue
from infraagent.secrets.vault import VaultContext, VaultStore
from infraagent.services.verifiers import build_verifiers


SERVICES = {
    "github": ("GitHub", "Repository management and secrets", "https://github.com/settings/tokens/new"),
    "vercel": ("Vercel", "Deployment and hosting", "https://vercel.com/account/tokens"),
    "supabase": ("Supabase", "Database and authentication", "https://supabase.com/dashboard/account/tokens"),
    "cloudflare": ("Cloudflare", "DNS and CDN management", "https://dash.cloudflare.com/profile/api-tokens"),
    "stripe": ("Stripe", "Payment processing", "https://dashboard.stripe.com/apikeys"),
}


def fail(error: InfraAgentError) -> None:
    """Print an error (and its suggestion, if any) and exit with status 1."""
    click.echo(click.style(f"Error: {error.message}", fg="red"), err=True)
    cause = getattr(error, "cause", None)
    if cause is not None:
        click.echo(click.style(f"Cause: {cause}", fg="red"), err=True)
    suggestion = getattr(error, "suggestion", None)
    if suggestion:
        click.echo(click.style(f"Suggestion: {suggestion}", fg="yellow"), err=True)
    sys.exit(1)


def get_settings(ctx: click.Context) -> InfraAgentSettings:
    obj = ctx.obj or {}
    settings = obj.get("settings")
    if settings is None:
        settings = InfraAgentSettings.load()
    return settings


def open_store(ctx: click.Context) -> VaultStore:
    return VaultStore(VaultContext.from_settings(get_settings(ctx)))


def _print_check(result: ServiceCheck) -> None:
    if result.skipped:
        click.echo(f"  {click.style('[SKIP]', fg='yellow')} {result.service}: {result.detail}")
    elif result.ok:
        click.echo(f"  {click.style('[OK]', fg='green')} {result.service}: {result.detail}")
    else:
        click.echo(f"  {click.style('[FAIL]', fg='red')} {result.service}: {result.detail}")


@click.group(name="auth")
def auth_group():
    """Manage platform credentials.

    Examples:

        # Store a GitHub token (prompts for the value)
        infraagent auth add github

        # Store structured Stripe keys
        infraagent auth add stripe --field secretKey --field publishableKey

        # Check every stored token against its platform
        infraagent auth test
    """
    pass


@auth_group.command(name="list")
@click.pass_context
def list_credentials(ctx: click.Context):
    """List services with stored credentials."""
    try:
        record = open_store(ctx).load()
    except InfraAgentError as e:
        fail(e)
        return

    if not record:
        click.echo("No services configured yet.")
        click.echo("Run 'infraagent auth add SERVICE' to configure one.")
        return

    click.echo(click.style("Configured services:", bold=True))
    for service in sorted(record):
        name, description, _ = SERVICES.get(service, (service, "custom service", None))
        click.echo(f"  {click.style('[OK]', fg='green')} {name} - {description}")


@auth_group.command(name="add")
@click.argument("service")
@click.option(
    "--field",
    "fields",
    multiple=True,
    help="Store a structured credential; prompts for each named field",
)
@click.option("--verify/--no-verify", default=True, help="Check the token against the platform before storing")
@click.pass_context
def add_credential(ctx: click.Context, service: str, fields: tuple[str, ...], verify: bool):
    """Add or update the credential for SERVICE."""
    service = service.lower()
    display, _, token_url = SERVICES.get(service, (service, None, None))
    if token_url:
        click.echo(f"Create a token at: {token_url}")

    token: SecretValue
    if fields:
        token = {field: click.prompt(f"{display} {field}", hide_input=True) for field in fields}
    else:
        token = click.prompt(f"{display} token", hide_input=True)

    settings = get_settings(ctx)
    store = VaultStore(VaultContext.from_settings(settings))

    try:
        store.validator.validate(service, token)

        if verify:
            with httpx.Client(timeout=settings.http_timeout) as client:
                verifier = build_verifiers(client, settings.github_api_url).get(service)
                if verifier is not None:
                    account = verifier(token)
                    click.echo(click.style(f"Token validated, connected as {account}", fg="green"))

        store.set_secret(service, token)
    except InfraAgentError as e:
        fail(e)
        return

    click.echo(click.style(f"{display} credentials saved", fg="green"))


@auth_group.command(name="remove")
@click.argument("service")
@click.confirmation_option(prompt="Are you sure you want to remove this credential?")
@click.pass_context
def remove_credential(ctx: click.Context, service: str):
    """Remove the credential for SERVICE."""
    try:
        removed = open_store(ctx).remove_secret(service.lower())
    except InfraAgentError as e:
        fail(e)
        return

    if removed:
        click.echo(click.style(f"Removed {service} credentials", fg="green"))
    else:
        click.echo(click.style(f"No credentials stored for {service}", fg="yellow"))


@auth_group.command(name="test")
@click.pass_context
def test_credentials(ctx: click.Context):
    """Verify every stored credential against its platform."""
    settings = get_settings(ctx)
    try:
        record = VaultStore(VaultContext.from_settings(settings)).load()
    except InfraAgentError as e:
        fail(e)
        return

    if not record:
        click.echo("No services configured yet.")
        return

    click.echo(click.style("Testing service connections...", bold=True))
    with httpx.Client(timeout=settings.http_timeout) as client:
        results = check_services(record, build_verifiers(client, settings.github_api_url))

    for result in results:
        _print_check(result)

    failed = [r.service for r in results if not r.ok]
    if failed:
        click.echo(click.style(f"Failed: {', '.join(failed)}", fg="red"), err=True)
        sys.exit(1)
    click.echo(click.style("All configured services connected", fg="green", bold=True))
