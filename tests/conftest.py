from __future__ import annotations

from types import SimpleNamespace
from typing import cast

import pytest

from cvault_api.evm.config import ChainContext
from cvault_api.evm.connections import Web3Connections
from cvault_api.evm.signer import ManagedAccount

from .fakes import CHAIN_ID, CONTRACT_ADDRESS, TEST_PRIVATE_KEY, FakeEth, FakeWeb3


@pytest.fixture
def fake_eth() -> FakeEth:
    return FakeEth()


@pytest.fixture
def account() -> ManagedAccount:
    return ManagedAccount.from_key(TEST_PRIVATE_KEY)


@pytest.fixture
def chain() -> ChainContext:
    return ChainContext(chain_id=CHAIN_ID, contract_address=CONTRACT_ADDRESS)


@pytest.fixture
def connections(fake_eth: FakeEth, account: ManagedAccount) -> Web3Connections:
    return cast(Web3Connections, SimpleNamespace(web3=FakeWeb3(fake_eth), account=account))
