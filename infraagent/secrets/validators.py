"""Token shape validation.

Known services have a fixed token shape. Tokens for services without a
registered shape are accepted as long as they are non-empty.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass

from infraagent.exceptions import ValidationError

SecretValue = str | Mapping[str, str]


@dataclass(frozen=True)
class TokenFormat:
    """A token shape: compiled pattern plus a human-readable description."""

    pattern: re.Pattern[str]
    description: str

    def matches(self, token: str) -> bool:
        return self.pattern.fullmatch(token) is not None


def _fmt(pattern: str, description: str) -> TokenFormat:
    return TokenFormat(re.compile(pattern), description)


DEFAULT_TOKEN_FORMATS: dict[str, TokenFormat] = {
    "github": _fmt(r"ghp_[a-zA-Z0-9]{36}", "'ghp_' followed by 36 letters or digits"),
    "vercel": _fmt(r"[a-zA-Z0-9]{24}", "24 letters or digits"),
    "supabase": _fmt(r"[a-zA-Z0-9]{48}", "48 letters or digits"),
    "cloudflare": _fmt(r"[a-zA-Z0-9]{40}", "40 letters or digits"),
    "stripe": _fmt(
        r"(sk|pk)_(test|live)_[a-zA-Z0-9]{24}",
        "'sk_' or 'pk_', then 'test_' or 'live_', then 24 letters or digits",
    ),
}

# Shapes for fields of structured (multi-value) credentials
DEFAULT_FIELD_FORMATS: dict[tuple[str, str], TokenFormat] = {
    ("stripe", "secretKey"): _fmt(
        r"sk_(test|live)_[a-zA-Z0-9]{24}", "'sk_test_' or 'sk_live_' followed by 24 letters or digits"
    ),
    ("stripe", "publishableKey"): _fmt(
        r"pk_(test|live)_[a-zA-Z0-9]{24}", "'pk_test_' or 'pk_live_' followed by 24 letters or digits"
    ),
}


class TokenValidator:
    """Check credentials against the registered shape for their service.

    Example:
        >>> validator = TokenValidator()
        >>> validator.validate("github", "ghp_" + "a" * 36)
        >>> validator.validate("github", "ghp_short")
        Traceback (most recent call last):
        ...
        infraagent.exceptions.ValidationError: Invalid github token format ...
    """

    def __init__(
        self,
        formats: Mapping[str, TokenFormat] | None = None,
        field_formats: Mapping[tuple[str, str], TokenFormat] | None = None,
    ) -> None:
        self.formats = dict(DEFAULT_TOKEN_FORMATS if formats is None else formats)
        self.field_formats = dict(DEFAULT_FIELD_FORMATS if field_formats is None else field_formats)

    def register(self, service: str, pattern: str, description: str) -> None:
        """Register (or replace) the token shape for a service."""
        self.formats[service] = _fmt(pattern, description)

    def is_known(self, service: str) -> bool:
        return service in self.formats

    def validate(self, service: str, token: SecretValue) -> None:
        """Validate a token for ``service``.

        Args:
            service: Service identifier
            token: Token string, or a mapping of field name to value for
                services that need several values

        Raises:
            ValidationError: If the token is empty or does not match the
                registered shape
        """
        if isinstance(token, Mapping):
            self._validate_fields(service, token)
            return

        if not isinstance(token, str) or not token:
            raise ValidationError(f"Token for {service} cannot be empty")

        token_format = self.formats.get(service)
        if token_format is not None and not token_format.matches(token):
            raise ValidationError(f"Invalid {service} token format: expected {token_format.description}")

    def _validate_fields(self, service: str, token: Mapping[str, str]) -> None:
        if not token:
            raise ValidationError(f"Credentials for {service} cannot be empty")

        for field, value in token.items():
            if not isinstance(value, str) or not value:
                raise ValidationError(f"Field {field!r} of {service} credentials cannot be empty")

            field_format = self.field_formats.get((service, field))
            if field_format is not None and not field_format.matches(value):
                raise ValidationError(
                    f"Invalid {service} {field} format: expected {field_format.description}"
                )


def validate_token(service: str, token: SecretValue) -> None:
    """Validate ``token`` against the default token shapes."""
    TokenValidator().validate(service, token)
