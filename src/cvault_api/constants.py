"""Constants and defaults for the ConfidentialVault API."""

from enum import Enum

# Stable testnet, where the ConfidentialVault contract is deployed
DEFAULT_CHAIN_ID = 2201
DEFAULT_RPC_URL = "https://rpc.testnet.stable.xyz"

# Fixed gas settings; no estimation is performed
DEFAULT_GAS_PRICE = 4_100_000_000
DEFAULT_GAS_LIMIT = 9_000_000

DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_RECEIPT_TIMEOUT = 120.0

EMPTY_HEX = "0x"


class VaultFunction(str, Enum):
    """ConfidentialVault contract functions driven by this client."""

    SUBMIT_METRIC = "submitMetric"
    GET_MY_ENCRYPTED_RESULT = "getMyEncryptedResult"
    GET_MY_METRIC = "getMyMetric"
    POST_ENCRYPTED_RESULT = "postEncryptedResult"
