"""Exception hierarchy for the ConfidentialVault API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .types import SubmissionOutcome


class VaultProtocolError(Exception):
    """Base exception for all ConfidentialVault errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(VaultProtocolError):
    """Raised when configuration or input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class EncodingError(VaultProtocolError):
    """Raised when input cannot be encoded before any network call."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class DecodeError(VaultProtocolError):
    """Raised when the chain returned bytes the codec cannot parse."""

    def __init__(
        self,
        message: str,
        function_name: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.function_name = function_name


class NetworkError(VaultProtocolError):
    """Raised when network/connection issues occur."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class TransportError(NetworkError):
    """Raised when the node is unreachable or returns a malformed RPC response."""

    pass


class RevertedCallError(VaultProtocolError):
    """Raised when the chain explicitly rejected a call or transaction."""

    def __init__(
        self,
        message: str,
        reason: str | None = None,
        function_name: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.reason = reason
        self.function_name = function_name


class SubmissionError(VaultProtocolError):
    """Raised when a write attempt ends in a non-success outcome."""

    retryable = False

    def __init__(
        self,
        message: str,
        outcome: SubmissionOutcome | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.outcome = outcome


class NonceConflictError(SubmissionError):
    """The node rejected the nonce; resubmitting derives a fresh one."""

    retryable = True


class InsufficientFundsError(SubmissionError):
    """The managed account cannot pay for gas until it is funded."""

    def __init__(
        self,
        message: str,
        balance: int | None = None,
        required: int | None = None,
        outcome: SubmissionOutcome | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, outcome, details)
        self.balance = balance
        self.required = required


class TransactionFailedError(SubmissionError):
    """The node refused the transaction for a reason outside the known patterns."""

    pass
