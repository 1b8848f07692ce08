"""Connection helpers for the ConfidentialVault EVM client."""

from __future__ import annotations

import logging

import requests
from web3 import HTTPProvider, Web3

from ..exceptions import NetworkError, ValidationError
from .config import VaultClientConfig
from .signer import ManagedAccount

logger = logging.getLogger(__name__)


class Web3Connections:
    """Manage the Web3 provider and the managed signer account."""

    def __init__(self, config: VaultClientConfig, session: requests.Session | None = None):
        self.config = config
        self._session = session or requests.Session()
        self._web3: Web3 | None = None
        self._account: ManagedAccount | None = None
        self._connected = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def connect(self) -> None:
        """Initialise the provider and signer, verifying the node's chain id."""

        account = ManagedAccount.from_key(self.config.private_key)
        web3 = self._build_web3()

        try:
            node_chain_id = int(web3.eth.chain_id)
        except Exception as exc:  # pragma: no cover - defensive
            raise NetworkError(
                "Failed to read chain id from RPC",
                endpoint=self.config.rpc_url,
                details={"error": str(exc)},
            ) from exc

        if node_chain_id != self.config.chain_id:
            raise ValidationError(
                "RPC chain id does not match configured chain id",
                field="chain_id",
                value=node_chain_id,
                details={"expected": self.config.chain_id},
            )

        self._account = account
        self._web3 = web3
        self._connected = True
        logger.info("Connected to RPC at %s (chainId=%d)", self.config.rpc_url, node_chain_id)
        logger.info("Target contract address = %s", self.config.contract_address)
        self._log_sender_info()

    def disconnect(self) -> None:
        self._web3 = None
        self._account = None
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected and self._web3 is not None and self._account is not None

    def ensure_connected(self) -> None:
        if not self.is_connected():
            raise NetworkError("EVM connector is not connected", endpoint=self.config.rpc_url)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def account(self) -> ManagedAccount:
        if self._account is None:
            raise NetworkError(
                "Signer account is not initialised; call connect() first",
                endpoint=self.config.rpc_url,
            )
        return self._account

    @property
    def web3(self) -> Web3:
        if self._web3 is None:
            raise NetworkError("RPC provider not connected", endpoint=self.config.rpc_url)
        return self._web3

    # ------------------------------------------------------------------
    # Internal wiring
    # ------------------------------------------------------------------
    def _build_web3(self) -> Web3:
        provider = HTTPProvider(
            self.config.rpc_url,
            request_kwargs={"timeout": self.config.request_timeout},
            session=self._session,
        )
        web3 = Web3(provider)
        if not web3.is_connected():
            raise NetworkError("Unable to connect to RPC", endpoint=self.config.rpc_url)
        return web3

    def _log_sender_info(self) -> None:
        """Best-effort startup probe; a failure here must not abort connect()."""
        address = self.account.address
        try:
            balance = self.web3.eth.get_balance(address)
        except Exception as exc:
            logger.warning(
                "Failed to query balance during startup. address=%s chainId=%d reason=%s",
                address,
                self.config.chain_id,
                exc,
            )
            return

        logger.info(
            "Sender address=%s chainId=%d balance=%d wei", address, self.config.chain_id, balance
        )
