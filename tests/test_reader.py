from __future__ import annotations

import pytest
from web3.exceptions import ContractLogicError

from cvault_api.evm.connections import Web3Connections
from cvault_api.evm.reader import ChainReader
from cvault_api.exceptions import TransportError

from .fakes import CONTRACT_ADDRESS, TEST_ADDRESS, FakeEth


def test_call_returns_raw_bytes(connections: Web3Connections, fake_eth: FakeEth) -> None:
    fake_eth.call_results.append(b"\x00\x01")
    reader = ChainReader(connections)

    result = reader.call(CONTRACT_ADDRESS, b"\xaa\xbb\xcc\xdd", sender=TEST_ADDRESS)

    assert not result.reverted
    assert result.data == b"\x00\x01"
    assert fake_eth.calls == [
        {"to": CONTRACT_ADDRESS, "data": b"\xaa\xbb\xcc\xdd", "from": TEST_ADDRESS}
    ]


def test_call_revert_becomes_result(connections: Web3Connections, fake_eth: FakeEth) -> None:
    fake_eth.call_results.append(ContractLogicError("execution reverted: no result yet"))

    result = ChainReader(connections).call(CONTRACT_ADDRESS, b"\x00\x00\x00\x00")

    assert result.reverted
    assert result.revert_reason == "no result yet"
    assert result.data == b""


def test_call_transport_failure(connections: Web3Connections, fake_eth: FakeEth) -> None:
    fake_eth.call_results.append(ConnectionError("connection refused"))

    with pytest.raises(TransportError) as excinfo:
        ChainReader(connections).call(CONTRACT_ADDRESS, b"\x00\x00\x00\x00")

    assert "connection refused" in excinfo.value.details["error"]


def test_pending_count_uses_pending_tag(connections: Web3Connections, fake_eth: FakeEth) -> None:
    fake_eth.pending = 12

    assert ChainReader(connections).get_pending_transaction_count(TEST_ADDRESS) == 12
    assert fake_eth.pending_queries == [(TEST_ADDRESS, "pending")]


def test_balance_failure_is_transport_error(
    connections: Web3Connections, fake_eth: FakeEth
) -> None:
    fake_eth.balance = TimeoutError("read timed out")

    with pytest.raises(TransportError):
        ChainReader(connections).get_balance(TEST_ADDRESS)
