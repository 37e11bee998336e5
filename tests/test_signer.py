"""Tests for the local private-key signer and the chain client cache."""

from unittest.mock import MagicMock

import pytest

from conftest import FakeChainClient
from swapengine.chains import ARBITRUM_ONE_ID, CELO_MAINNET_ID
from swapengine.swap.client import ChainClient, ChainClients, _checksum_args
from swapengine.swap.signer import LocalAccountSigner

TEST_KEY = "0x" + "11" * 32
RECIPIENT = "0x1111111111111111111111111111111111111111"


@pytest.fixture(autouse=True)
def clear_nonce_cache():
    LocalAccountSigner._nonce_cache.clear()
    yield
    LocalAccountSigner._nonce_cache.clear()


@pytest.fixture
def web3():
    mock = MagicMock()
    mock.eth.get_transaction_count.return_value = 5
    mock.eth.gas_price = 7
    mock.eth.estimate_gas.return_value = 21_000
    mock.eth.send_raw_transaction.return_value = bytes.fromhex("ab" * 32)
    return mock


class TestLocalAccountSigner:
    """Tests for LocalAccountSigner."""

    def test_address_from_key(self, web3):
        signer = LocalAccountSigner(TEST_KEY, CELO_MAINNET_ID, web3=web3)
        assert signer.address.startswith("0x")
        assert len(signer.address) == 42
        assert signer.chain_id == CELO_MAINNET_ID

    def test_from_settings_requires_key(self):
        with pytest.raises(ValueError):
            LocalAccountSigner.from_settings(CELO_MAINNET_ID)

    def test_nonce_increments_while_pending(self, web3):
        """Back-to-back sends do not reuse the pending nonce."""
        signer = LocalAccountSigner(TEST_KEY, CELO_MAINNET_ID, web3=web3)

        assert signer._get_next_nonce() == 5
        assert signer._get_next_nonce() == 6

    def test_nonce_cache_is_per_chain(self, web3):
        celo = LocalAccountSigner(TEST_KEY, CELO_MAINNET_ID, web3=web3)
        arbitrum = LocalAccountSigner(TEST_KEY, ARBITRUM_ONE_ID, web3=web3)

        assert celo._get_next_nonce() == 5
        assert arbitrum._get_next_nonce() == 5

    @pytest.mark.asyncio
    async def test_send_transaction(self, web3):
        signer = LocalAccountSigner(TEST_KEY, CELO_MAINNET_ID, web3=web3)

        tx_hash = await signer.send_transaction({"to": RECIPIENT, "data": "0x"})

        assert tx_hash == "0x" + "ab" * 32
        web3.eth.estimate_gas.assert_called_once()
        web3.eth.send_raw_transaction.assert_called_once()

    @pytest.mark.asyncio
    async def test_failed_send_resets_nonce(self, web3):
        web3.eth.send_raw_transaction.side_effect = ValueError("nonce too low")
        signer = LocalAccountSigner(TEST_KEY, CELO_MAINNET_ID, web3=web3)

        with pytest.raises(ValueError):
            await signer.send_transaction({"to": RECIPIENT, "data": "0x", "gas": 21_000})

        assert (CELO_MAINNET_ID, signer.address) not in LocalAccountSigner._nonce_cache


class TestChainClients:
    """Tests for the shared chain client cache."""

    def test_clients_are_cached(self):
        clients = ChainClients()
        first = clients.get(CELO_MAINNET_ID)

        assert isinstance(first, ChainClient)
        assert clients.get(CELO_MAINNET_ID) is first
        assert first.rpc_url == "https://forno.celo.org"

    def test_register_overrides(self):
        clients = ChainClients()
        fake = FakeChainClient(ARBITRUM_ONE_ID)
        clients.register(fake)
        assert clients.get(ARBITRUM_ONE_ID) is fake

    @pytest.mark.asyncio
    async def test_missing_receipt_is_none(self):
        from web3.exceptions import TransactionNotFound

        web3 = MagicMock()
        web3.eth.get_transaction_receipt.side_effect = TransactionNotFound("pending")
        client = ChainClient(CELO_MAINNET_ID, web3=web3)

        assert await client.get_transaction_receipt("0xabc") is None

    def test_struct_arguments_are_checksummed(self):
        lower = "0xaf88d065e77c8cc2239327c5edb3a432268e5831"
        checksummed = "0xaf88d065e77c8cC2239327C5EDb3A432268e5831"

        assert _checksum_args((lower, (lower, 500, 0))) == (checksummed, (checksummed, 500, 0))
