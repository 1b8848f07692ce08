"""ConfidentialVault EVM client package."""

from .client import VaultProtocolEVM
from .codec import CONTRACT_FUNCTIONS, FunctionSpec, decode_arguments, decode_return, encode_call
from .config import ChainContext, VaultClientConfig, load_config
from .nonce import NonceSynchronizer, next_nonce
from .reader import ChainReader
from .signer import ManagedAccount, TransactionBuilder
from .transactions import FAILURE_RULES, TransactionDispatcher, classify_failure

__all__ = [
    "VaultProtocolEVM",
    "CONTRACT_FUNCTIONS",
    "FunctionSpec",
    "encode_call",
    "decode_return",
    "decode_arguments",
    "ChainContext",
    "VaultClientConfig",
    "load_config",
    "NonceSynchronizer",
    "next_nonce",
    "ChainReader",
    "ManagedAccount",
    "TransactionBuilder",
    "FAILURE_RULES",
    "TransactionDispatcher",
    "classify_failure",
]
