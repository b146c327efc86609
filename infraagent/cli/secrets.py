"""CLI commands for sharing stored credentials.

Repository secrets are sealed locally with the repository's public key, so
GitHub only ever receives ciphertext. Exported .env files are owner-only.

Example:
    Copy the stored Stripe secret key into a repository secret::

        $ infraagent secrets push octo/app STRIPE_SECRET_KEY --service stripe --field secretKey

    Export stored credentials for local development::

        $ infraagent secrets env --service supabase --service stripe
"""

from pathlib import Path

import click

from infraagent.cli.auth import fail, get_settings
from infraagent.exceptions import InfraAgentError, ValidationError
from infraagent.secrets.api import credential_value
from infraagent.secrets.envfile import write_env_files
from infraagent.secrets.vault import VaultContext, VaultStore
from infraagent.services.github import GitHubSecretsClient


def _parse_repository(repository: str) -> tuple[str, str]:
    """Split ``owner/repo``.

    Raises:
        ValidationError: If the reference has no owner or repository part
    """
    owner, _, repo = repository.partition("/")
    if not owner or not repo or "/" in repo:
        raise ValidationError(f"Invalid repository {repository!r}, expected OWNER/REPO")
    return owner, repo


@click.group(name="secrets")
def secrets_group():
    """Share stored credentials with GitHub repositories and local .env files."""
    pass


@secrets_group.command(name="push")
@click.argument("repository")
@click.argument("name")
@click.option("--service", help="Take the value from this stored credential")
@click.option("--field", help="Field of a structured stored credential")
@click.option("--value", help="Secret value (prompts when neither --service nor --value is given)")
@click.pass_context
def push_secret(ctx: click.Context, repository: str, name: str, service: str | None, field: str | None, value: str | None):
    """Seal a value and store it as secret NAME in REPOSITORY (owner/repo)."""
    settings = get_settings(ctx)
    try:
        owner, repo = _parse_repository(repository)
        record = VaultStore(VaultContext.from_settings(settings)).load()

        github_token = record.get("github")
        if not isinstance(github_token, str):
            raise ValidationError(
                "No GitHub token stored",
                suggestion="Run 'infraagent auth add github' first",
            )

        if service:
            if service not in record:
                raise ValidationError(f"No credentials stored for {service}")
            try:
                value = credential_value(record[service], field)
            except KeyError as e:
                raise ValidationError(f"Stored {service} credentials need --field ({e})") from e
        elif value is None:
            value = click.prompt("Secret value", hide_input=True)

        with GitHubSecretsClient(
            github_token, base_url=settings.github_api_url, timeout=settings.http_timeout
        ) as github:
            github.put_repo_secret(owner, repo, name, value)
    except InfraAgentError as e:
        fail(e)
        return

    click.echo(click.style(f"Stored secret {name} in {owner}/{repo}", fg="green"))


@secrets_group.command(name="env")
@click.option(
    "--dir",
    "directory",
    default=".",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory to write .env and .env.local into",
)
@click.option("--service", "services", multiple=True, help="Only export this service (repeatable)")
@click.option("--force", is_flag=True, help="Overwrite existing .env files")
@click.pass_context
def export_env(ctx: click.Context, directory: Path, services: tuple[str, ...], force: bool):
    """Write stored credentials to .env and .env.local (mode 0600)."""
    settings = get_settings(ctx)
    try:
        record = VaultStore(VaultContext.from_settings(settings)).load()
        if not record:
            raise ValidationError("No credentials stored", suggestion="Run 'infraagent auth add SERVICE' first")
        written = write_env_files(directory, record, services=[s.lower() for s in services], force=force)
    except InfraAgentError as e:
        fail(e)
        return

    for path in written:
        click.echo(click.style(f"Wrote {path}", fg="green"))
