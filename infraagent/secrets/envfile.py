"""Export stored credentials as dotenv files.

Known services map to the variable names their SDKs read; structured
credentials contribute one variable per field. Files are written with
owner-only permissions and existing files are only replaced on request.
"""

import re
from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime
from pathlib import Path

import structlog

from infraagent.exceptions import SecretsError, ValidationError
from infraagent.secrets.validators import SecretValue
from infraagent.secrets.vault import atomic_write

log = structlog.get_logger(__name__)

ENV_FILENAMES = (".env", ".env.local")

# service -> [(variable, field)]; field None takes a plain token
ENV_VARIABLES: dict[str, list[tuple[str, str | None]]] = {
    "github": [("GITHUB_TOKEN", None)],
    "vercel": [("VERCEL_TOKEN", None)],
    "supabase": [
        ("SUPABASE_ACCESS_TOKEN", "accessToken"),
        ("SUPABASE_ANON_KEY", "anonKey"),
        ("SUPABASE_SERVICE_ROLE_KEY", "serviceRoleKey"),
        ("SUPABASE_DB_PASSWORD", "dbPassword"),
    ],
    "cloudflare": [("CLOUDFLARE_API_TOKEN", None)],
    "stripe": [
        ("STRIPE_PUBLISHABLE_KEY", "publishableKey"),
        ("STRIPE_SECRET_KEY", "secretKey"),
        ("STRIPE_WEBHOOK_SECRET", "webhookSecret"),
    ],
}

_NEEDS_QUOTES = re.compile(r"[\s#'\"\\$]")


def _env_name(*parts: str) -> str:
    joined = "_".join(re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", part) for part in parts)
    return re.sub(r"[^A-Za-z0-9]+", "_", joined).strip("_").upper()


def _quote(value: str) -> str:
    if "\n" in value or "\r" in value:
        raise ValidationError("Credential values exported to .env files cannot contain newlines")
    if not _NEEDS_QUOTES.search(value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def env_variables(service: str, token: SecretValue) -> list[tuple[str, str]]:
    """Variables exported for one stored credential.

    A plain token for a service that expects fields is exported under the
    service's first variable.
    """
    mapping = ENV_VARIABLES.get(service, [])

    if isinstance(token, Mapping):
        by_field = {field: name for name, field in mapping if field is not None}
        return [(by_field.get(field) or _env_name(service, field), value) for field, value in token.items()]

    if mapping:
        plain = [name for name, field in mapping if field is None]
        return [(plain[0] if plain else mapping[0][0], token)]
    return [(_env_name(service, "token"), token)]


def render_env(
    record: Mapping[str, SecretValue],
    services: Iterable[str] | None = None,
    clock: Callable[[], datetime] | None = None,
) -> str:
    """Render credentials as dotenv text, grouped by service.

    Raises:
        ValidationError: If a requested service has no stored credential
    """
    clock = clock or (lambda: datetime.now(UTC))
    selected = list(services) if services else sorted(record)

    missing = [service for service in selected if service not in record]
    if missing:
        raise ValidationError(
            f"No credentials stored for {', '.join(missing)}",
            suggestion="Run 'infraagent auth add SERVICE' first",
        )

    lines = ["# Generated by infraagent", f"# Last updated: {clock().isoformat()}", ""]
    for service in selected:
        lines.append(f"# {service}")
        lines.extend(f"{name}={_quote(value)}" for name, value in env_variables(service, record[service]))
        lines.append("")
    return "\n".join(lines)


def write_env_files(
    directory: Path,
    record: Mapping[str, SecretValue],
    services: Iterable[str] | None = None,
    force: bool = False,
    filenames: Iterable[str] = ENV_FILENAMES,
    clock: Callable[[], datetime] | None = None,
) -> list[Path]:
    """Write dotenv files into ``directory`` with mode 0600.

    Nothing is written if any target exists and ``force`` is false.

    Returns:
        Paths that were written

    Raises:
        ValidationError: If a target exists without ``force``, or a
            requested service is not stored
        SecretsError: If a file cannot be written
    """
    targets = [directory / name for name in filenames]
    if not force:
        existing = [path.name for path in targets if path.exists()]
        if existing:
            raise ValidationError(
                f"{', '.join(existing)} already exists in {directory}",
                suggestion="Use --force to overwrite",
            )

    content = render_env(record, services, clock).encode("utf-8")
    for path in targets:
        try:
            atomic_write(path, content)
        except OSError as e:
            raise SecretsError(f"Failed to write {path}", cause=e) from e
        log.info("env_file_written", path=str(path))

    return targets
