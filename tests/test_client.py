"""End-to-end tests for VaultProtocolEVM against an in-memory node."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest
import requests
from eth_abi import encode as abi_encode
from web3 import Web3
from web3.exceptions import ContractLogicError

from cvault_api import VaultProtocolEVM
from cvault_api.evm.codec import encode_call
from cvault_api.evm.config import load_config
from cvault_api.evm.connections import Web3Connections
from cvault_api.exceptions import (
    EncodingError,
    InsufficientFundsError,
    NetworkError,
    NonceConflictError,
    RevertedCallError,
    TransactionFailedError,
    TransportError,
    ValidationError,
)
from cvault_api.types import MetricRecord

from .fakes import (
    CHAIN_ID,
    CONTRACT_ADDRESS,
    TEST_ADDRESS,
    TEST_PRIVATE_KEY,
    FakeEth,
    FakeRPCError,
    FakeWeb3,
)


@pytest.fixture
def node(monkeypatch: pytest.MonkeyPatch, fake_eth: FakeEth) -> FakeEth:
    monkeypatch.setattr(Web3Connections, "_build_web3", lambda self: FakeWeb3(fake_eth))
    return fake_eth


def _client(**kwargs) -> VaultProtocolEVM:
    client = VaultProtocolEVM(
        private_key=TEST_PRIVATE_KEY,
        contract_address=CONTRACT_ADDRESS.lower(),
        rpc_url="http://node.invalid",
        chain_id=CHAIN_ID,
        **kwargs,
    )
    client.connect()
    return client


class TestConnection:
    def test_connect(self, node):
        client = _client()
        assert client.is_connected()
        assert client.address == TEST_ADDRESS

    def test_from_config(self, node):
        config = load_config(
            {
                "PRIVATE_KEY": TEST_PRIVATE_KEY,
                "CONTRACT_ADDRESS": CONTRACT_ADDRESS.lower(),
                "GAS_PRICE": "1000",
                "NONCE_RETRY_ATTEMPTS": "1",
            }
        )
        node.send_errors.append(FakeRPCError("invalid nonce"))

        client = VaultProtocolEVM.from_config(config)
        client.connect()

        assert client.rpc_url == config.rpc_url
        assert client.submit_encrypted_metric("0x01").startswith("0x")
        assert len(node.pending_queries) == 2

    def test_chain_id_mismatch_refuses_to_connect(self, node):
        node.chain_id = 1
        client = VaultProtocolEVM(TEST_PRIVATE_KEY, CONTRACT_ADDRESS, chain_id=CHAIN_ID)

        with pytest.raises(ValidationError) as excinfo:
            client.connect()

        assert excinfo.value.field == "chain_id"
        assert not client.is_connected()

    def test_startup_balance_failure_is_not_fatal(self, node):
        node.balance = requests.exceptions.ConnectionError("down")
        assert _client().is_connected()

    def test_calls_require_connection(self, node):
        client = _client()
        client.disconnect()

        with pytest.raises(NetworkError):
            client.submit_encrypted_metric("0xdeadbeef")


class TestSubmitEncryptedMetric:
    def test_payload_bytes_reach_call_data(self, node):
        tx_hash = _client().submit_encrypted_metric("0xdeadbeef")

        raw = node.sent[0]
        assert encode_call("submitMetric", [b"\xde\xad\xbe\xef"]) in raw
        assert tx_hash == Web3.keccak(raw).to_0x_hex()
        assert tx_hash == tx_hash.lower()

    def test_prefix_is_optional(self, node):
        client = _client()
        client.submit_encrypted_metric("DEADBEEF")

        assert encode_call("submitMetric", [b"\xde\xad\xbe\xef"]) in node.sent[0]

    def test_bad_hex_fails_before_network(self, node):
        client = _client()

        with pytest.raises(EncodingError):
            client.submit_encrypted_metric("0xdeadbee")

        assert node.pending_queries == []
        assert node.sent == []

    def test_nonce_conflict_is_retryable(self, node):
        node.send_errors.append(FakeRPCError("tx already in mempool"))
        client = _client()

        with pytest.raises(NonceConflictError) as excinfo:
            client.submit_encrypted_metric("0x01")

        assert excinfo.value.retryable
        assert excinfo.value.details["node_message"] == "tx already in mempool"

        client.submit_encrypted_metric("0x01")
        assert len(node.pending_queries) == 2

    def test_automatic_resubmission_after_conflict(self, node):
        node.send_errors.append(FakeRPCError("invalid nonce"))
        client = _client(nonce_retry_attempts=1)

        tx_hash = client.submit_encrypted_metric("0x01")

        assert tx_hash.startswith("0x")
        assert len(node.pending_queries) == 2
        assert len(node.sent) == 1

    def test_insufficient_funds(self, node):
        node.balance = 1000
        node.send_errors.append(FakeRPCError("insufficient funds for gas * price + value"))

        with pytest.raises(InsufficientFundsError) as excinfo:
            _client().submit_encrypted_metric("0x01")

        err = excinfo.value
        assert err.balance == 1000
        assert err.required == 4_100_000_000 * 9_000_000
        assert not err.retryable
        assert "balance = 1000 wei" in err.message

    def test_other_node_error_is_verbatim(self, node):
        node.send_errors.append(FakeRPCError("exceeds block gas limit"))

        with pytest.raises(TransactionFailedError) as excinfo:
            _client().submit_encrypted_metric("0x01")

        assert "exceeds block gas limit" in str(excinfo.value)

    def test_transport_failure(self, node):
        node.send_errors.append(requests.exceptions.ReadTimeout("timed out"))

        with pytest.raises(TransportError):
            _client().submit_encrypted_metric("0x01")

    def test_concurrent_callers_get_distinct_nonces(self, node):
        node.pending_delay = 0.002
        client = _client()

        with ThreadPoolExecutor(max_workers=6) as pool:
            hashes = list(
                pool.map(lambda i: client.submit_encrypted_metric(f"0x{i:02x}"), range(12))
            )

        assert len(set(hashes)) == 12
        assert node.pending == 12
        assert node.max_in_flight == 1


class TestReceipts:
    def test_reverted_receipt(self, node):
        node.receipt = {"status": 0, "blockNumber": 9}

        with pytest.raises(RevertedCallError) as excinfo:
            _client(wait_for_receipt=True).submit_encrypted_metric("0x01")

        assert excinfo.value.function_name == "submitMetric"

    def test_successful_receipt(self, node):
        assert _client(wait_for_receipt=True).submit_encrypted_metric("0x01").startswith("0x")


class TestReads:
    def test_encrypted_result_hex(self, node):
        node.call_results.append(abi_encode(["bytes"], [b"\xab\xcd"]))
        client = _client()

        assert client.get_my_encrypted_result() == "0xabcd"
        assert node.calls[0]["from"] == TEST_ADDRESS
        assert node.calls[0]["data"] == encode_call("getMyEncryptedResult")

    def test_empty_result(self, node):
        node.call_results.append(b"")
        assert _client().get_my_encrypted_result() == "0x"

    def test_revert_surfaces_reason(self, node):
        node.call_results.append(ContractLogicError("execution reverted: no result"))

        with pytest.raises(RevertedCallError) as excinfo:
            _client().get_my_encrypted_result()

        assert excinfo.value.reason == "no result"

    def test_metric(self, node):
        node.call_results.append(abi_encode(["bytes", "uint256"], [b"cipher", 1_700_000_000]))
        node.call_results.append(abi_encode(["bytes", "uint256"], [b"cipher", 1_700_000_000]))
        client = _client()

        assert client.get_my_metric() == b"cipher"
        assert client.get_my_metric_record() == MetricRecord(b"cipher", 1_700_000_000)

    def test_reads_do_not_touch_nonce_state(self, node):
        node.call_results.append(abi_encode(["bytes"], [b""]))
        _client().get_my_encrypted_result()

        assert node.pending_queries == []


def test_post_encrypted_result_targets_own_address(node) -> None:
    _client().post_encrypted_result(b"result")

    assert encode_call("postEncryptedResult", [TEST_ADDRESS, b"result"]) in node.sent[0]


def test_post_encrypted_result_requires_bytes(node) -> None:
    with pytest.raises(EncodingError):
        _client().post_encrypted_result("0x01")  # type: ignore[arg-type]
