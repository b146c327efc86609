"""Remote verification of stored credentials.

Each service is checked one at a time. A failure for one service is
recorded in its result and never stops the remaining checks.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from infraagent.exceptions import InfraAgentError
from infraagent.secrets.validators import SecretValue

log = structlog.get_logger(__name__)

# Takes the stored credential, returns the account name it authenticates as
Verifier = Callable[[SecretValue], str]


@dataclass(frozen=True)
class ServiceCheck:
    """Outcome of verifying one stored credential."""

    service: str
    ok: bool
    detail: str
    checked_at: datetime
    skipped: bool = False


def check_services(
    secrets: Mapping[str, SecretValue],
    verifiers: Mapping[str, Verifier],
    clock: Callable[[], datetime] | None = None,
) -> list[ServiceCheck]:
    """Verify every stored credential against its service.

    Args:
        secrets: Stored credentials by service
        verifiers: Verification callables by service
        clock: Timestamp source (defaults to UTC now)

    Returns:
        One result per service, in ``secrets`` order
    """
    clock = clock or (lambda: datetime.now(UTC))
    results: list[ServiceCheck] = []

    for service, credential in secrets.items():
        verifier = verifiers.get(service)
        if verifier is None:
            log.info("service_check_skipped", service=service)
            results.append(ServiceCheck(service, True, "no verifier registered", clock(), skipped=True))
            continue

        try:
            account = verifier(credential)
        except InfraAgentError as e:
            log.warning("service_check_failed", service=service, error=e.message)
            results.append(ServiceCheck(service, False, str(e), clock()))
            continue
        except Exception as e:
            log.error("service_check_unexpected", service=service, error=str(e), exc_info=True)
            results.append(ServiceCheck(service, False, f"Unexpected error: {e}", clock()))
            continue

        log.info("service_check_passed", service=service)
        results.append(ServiceCheck(service, True, f"Connected as {account}", clock()))

    return results
