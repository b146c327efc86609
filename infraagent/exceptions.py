"""Custom exception hierarchy for infraagent.

Exception Hierarchy:
    InfraAgentError (base)
    ├── ConfigurationError
    ├── SecretsError
    │   ├── ValidationError
    │   ├── VaultCorruptedError
    │   └── EncryptionError
    └── ExternalServiceError

Example Usage:
    >>> from infraagent.exceptions import SecretsError
    >>> try:
    ...     path.read_bytes()
    ... except OSError as e:
    ...     raise SecretsError("Failed to read vault", cause=e) from e
"""


class InfraAgentError(Exception):
    """Base exception for all infraagent errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(InfraAgentError):
    """Configuration-related errors.

    Raised when the local identity used for key derivation cannot be
    resolved, or when settings files are unreadable or invalid.

    Examples:
        - No resolvable username or hostname
        - Invalid YAML in config.yaml
        - Out-of-range KDF parameters
    """

    pass


class SecretsError(InfraAgentError):
    """Credential vault errors.

    Base class for everything the vault and sealing layer raise. Raised
    directly for file I/O failures, with the underlying exception attached.

    Attributes:
        message: Human-readable error description
        cause: Underlying exception, if any
        suggestion: Optional suggestion for resolution
    """

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        suggestion: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            cause: Underlying exception that triggered this error
            suggestion: Optional suggestion for resolution
        """
        self.cause = cause
        self.suggestion = suggestion

        full_message = message
        if cause is not None:
            full_message = f"{message}: {cause}"
        if suggestion:
            full_message = f"{full_message}\nSuggestion: {suggestion}"

        super().__init__(full_message)
        # Preserve original message (super sets self.message to full_message)
        self.message = message


class ValidationError(SecretsError):
    """Credential or plaintext is empty or does not match its expected shape."""

    pass


class VaultCorruptedError(SecretsError):
    """Neither the vault nor its backup could be authenticated.

    Terminal for the failing operation. Nothing is deleted automatically;
    the user has to remove or reset the vault by hand.
    """

    pass


class EncryptionError(SecretsError):
    """Sealing or unsealing failed (malformed key, failed authentication)."""

    pass


class ExternalServiceError(InfraAgentError):
    """External service communication errors.

    Raised when a platform API returns an error or cannot be reached.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_text: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
            response_text: Response body text (if applicable)
        """
        self.message = message
        self.status_code = status_code
        self.response_text = response_text

        full_message = message
        if status_code:
            full_message = f"{message} (HTTP {status_code})"

        super().__init__(full_message)
