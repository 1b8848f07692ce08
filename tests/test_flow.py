"""Tests for the end-to-end confidential flow."""

from __future__ import annotations

import base64

from cvault_api.base import VaultProtocolBase
from cvault_api.confidential import MockFheScheme
from cvault_api.flow import ConfidentialFlow
from cvault_api.types import MetricRecord
from cvault_api.utils import bytes_to_hex, hex_to_bytes


class RecordingVault(VaultProtocolBase):
    """Vault double that keeps contract state in memory."""

    def __init__(self) -> None:
        self.metric = b""
        self.result = b""
        self.writes: list[str] = []

    def connect(self) -> None:
        pass

    def disconnect(self) -> None:
        pass

    def is_connected(self) -> bool:
        return True

    def submit_encrypted_metric(self, cipher_hex: str) -> str:
        self.metric = hex_to_bytes(cipher_hex)
        self.writes.append("submitMetric")
        return "0x01"

    def post_encrypted_result(self, result_cipher: bytes) -> str:
        self.result = result_cipher
        self.writes.append("postEncryptedResult")
        return "0x02"

    def get_my_encrypted_result(self) -> str:
        return bytes_to_hex(self.result)

    def get_my_metric(self) -> bytes:
        return self.metric

    def get_my_metric_record(self) -> MetricRecord:
        return MetricRecord(payload=self.metric, timestamp=0)


def test_encrypt_returns_hex() -> None:
    flow = ConfidentialFlow(RecordingVault(), MockFheScheme())
    assert flow.encrypt("7") == bytes_to_hex(base64.b64encode(b"[enc]7"))


def test_full_round_trip() -> None:
    vault = RecordingVault()
    flow = ConfidentialFlow(vault, MockFheScheme())

    assert flow.submit_plain("1234") == "0x01"
    assert vault.metric == base64.b64encode(b"[enc]1234")

    assert flow.evaluate_and_post() == "0x02"
    assert vault.writes == ["submitMetric", "postEncryptedResult"]

    result = flow.decrypt_result()
    assert result.plain == "4321"
    assert result.cipher_hex == bytes_to_hex(vault.result)
