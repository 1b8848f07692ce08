"""ConfidentialVault API - sole-signer client for the ConfidentialVault contract.

This library submits encrypted metrics to, and reads results from, a
ConfidentialVault contract on an EVM chain, keeping nonces for the managed
account consistent under concurrent callers.
"""

from .base import VaultProtocolBase
from .confidential import ConfidentialityScheme, MockFheScheme, PassthroughScheme, get_scheme
from .evm import VaultProtocolEVM
from .evm.config import VaultClientConfig, load_config
from .exceptions import (
    DecodeError,
    EncodingError,
    InsufficientFundsError,
    NetworkError,
    NonceConflictError,
    RevertedCallError,
    SubmissionError,
    TransactionFailedError,
    TransportError,
    ValidationError,
    VaultProtocolError,
)
from .flow import ConfidentialFlow
from .types import (
    Address,
    CallResult,
    DecryptedResult,
    MetricRecord,
    OutcomeKind,
    PendingTransaction,
    SubmissionOutcome,
    Wei,
)
from .utils import bytes_to_hex, hex_to_bytes

__version__ = "0.1.0"

__all__ = [
    # Clients
    "VaultProtocolBase",
    "VaultProtocolEVM",
    "ConfidentialFlow",
    "VaultClientConfig",
    "load_config",
    # Confidentiality schemes
    "ConfidentialityScheme",
    "MockFheScheme",
    "PassthroughScheme",
    "get_scheme",
    # Types
    "OutcomeKind",
    "SubmissionOutcome",
    "PendingTransaction",
    "CallResult",
    "MetricRecord",
    "DecryptedResult",
    "Address",
    "Wei",
    # Exceptions
    "VaultProtocolError",
    "ValidationError",
    "EncodingError",
    "DecodeError",
    "NetworkError",
    "TransportError",
    "RevertedCallError",
    "SubmissionError",
    "NonceConflictError",
    "InsufficientFundsError",
    "TransactionFailedError",
    # Utility functions
    "hex_to_bytes",
    "bytes_to_hex",
]
