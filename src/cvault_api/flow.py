"""End-to-end confidential metric flow on top of the vault client."""

from __future__ import annotations

import logging

from .base import VaultProtocolBase
from .confidential import ConfidentialityScheme
from .types import DecryptedResult
from .utils import bytes_to_hex, hex_to_bytes

logger = logging.getLogger(__name__)


class ConfidentialFlow:
    """Encrypt, submit, evaluate-and-post and decrypt using one scheme."""

    def __init__(self, client: VaultProtocolBase, scheme: ConfidentialityScheme) -> None:
        self._client = client
        self._scheme = scheme

    @property
    def scheme(self) -> ConfidentialityScheme:
        return self._scheme

    def encrypt(self, plain: str) -> str:
        """Plaintext to ciphertext hex, ready for :meth:`submit_encrypted_metric`."""
        return bytes_to_hex(self._scheme.encrypt(plain))

    def submit_plain(self, plain: str) -> str:
        return self._client.submit_encrypted_metric(self.encrypt(plain))

    def evaluate_and_post(self) -> str:
        """Read our stored metric, evaluate it and post the result; returns the tx hash."""
        metric = self._client.get_my_metric()
        result_cipher = self._scheme.evaluate(metric)
        logger.info(
            "Evaluated metric (%d bytes) with %s scheme", len(metric), self._scheme.name
        )
        return self._client.post_encrypted_result(result_cipher)

    def decrypt_result(self) -> DecryptedResult:
        cipher_hex = self._client.get_my_encrypted_result()
        plain = self._scheme.decrypt(hex_to_bytes(cipher_hex, field="cipher_hex"))
        return DecryptedResult(plain=plain, cipher_hex=cipher_hex)
