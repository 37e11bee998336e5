"""Tests for exchange discovery, approvals and transaction waits."""

import pytest

from conftest import PROVIDER, FakeChainClient, FakeSigner, celo_token
from swapengine.chains import CELO_MAINNET_ID, get_broker_address
from swapengine.exceptions import ApprovalFailedError, ConfirmationTimeoutError, SwapFailedError
from swapengine.swap.approval import approve, check_approval, wait_for_approval
from swapengine.swap.discovery import find_direct_exchange, find_two_hop_exchange, get_quote
from swapengine.swap.execution import execute_swap, wait_for_swap, wait_for_transaction
from swapengine.swap.models import ExchangeInfo, PendingTransaction

BROKER = get_broker_address(CELO_MAINNET_ID)


class TestExchangeDiscovery:
    """Tests for broker market discovery."""

    @pytest.mark.asyncio
    async def test_direct_exchange(self, mento_market):
        """A market listing both tokens is found."""
        exchange = await find_direct_exchange(mento_market, BROKER, celo_token("CEUR"), celo_token("CUSD"))

        assert exchange == ExchangeInfo(provider=PROVIDER, exchange_id=b"\x01" * 32)

    @pytest.mark.asyncio
    async def test_direct_exchange_address_case(self, mento_market):
        """Address comparison ignores checksum casing."""
        exchange = await find_direct_exchange(
            mento_market, BROKER, celo_token("CEUR").upper().replace("0X", "0x"), celo_token("CUSD").lower()
        )
        assert exchange is not None

    @pytest.mark.asyncio
    async def test_no_direct_exchange(self, mento_market):
        exchange = await find_direct_exchange(mento_market, BROKER, celo_token("CEUR"), celo_token("CREAL"))
        assert exchange is None

    @pytest.mark.asyncio
    async def test_first_match_wins(self, mento_market):
        """When two providers list the pair, the first enumerated is used."""
        second_provider = "0x3333333333333333333333333333333333333333"
        mento_market.on(BROKER, "getExchangeProviders", [PROVIDER, second_provider])
        mento_market.on(second_provider, "getExchanges", [
            (b"\x09" * 32, [celo_token("CUSD"), celo_token("CEUR")]),
        ])

        exchange = await find_direct_exchange(mento_market, BROKER, celo_token("CEUR"), celo_token("CUSD"))
        assert exchange.provider == PROVIDER

    @pytest.mark.asyncio
    async def test_two_hop_exchange(self, mento_market):
        route = await find_two_hop_exchange(
            mento_market, BROKER, celo_token("CEUR"), celo_token("CREAL"), celo_token("CUSD")
        )

        assert route is not None
        assert route.first.exchange_id == b"\x01" * 32
        assert route.second.exchange_id == b"\x02" * 32

    @pytest.mark.asyncio
    async def test_two_hop_missing_leg(self, mento_market):
        """Returns None rather than raising when a leg is absent."""
        route = await find_two_hop_exchange(
            mento_market, BROKER, celo_token("CEUR"), celo_token("CKES"), celo_token("CUSD")
        )
        assert route is None

    @pytest.mark.asyncio
    async def test_two_hop_never_through_endpoint(self, mento_market):
        """The hub cannot also be an endpoint."""
        route = await find_two_hop_exchange(
            mento_market, BROKER, celo_token("CUSD"), celo_token("CREAL"), celo_token("CUSD")
        )
        assert route is None
        # Discovery was not even attempted
        assert not any(fn == "getExchangeProviders" for _, fn, _ in mento_market.calls)

    @pytest.mark.asyncio
    async def test_get_quote(self, mento_market):
        exchange = ExchangeInfo(provider=PROVIDER, exchange_id=b"\x01" * 32)
        amount_out = await get_quote(
            mento_market, BROKER, exchange, celo_token("CEUR"), celo_token("CUSD"), 100
        )
        assert amount_out == 98


class TestApproval:
    """Tests for allowance checks and approvals."""

    @pytest.mark.asyncio
    async def test_check_approval(self, celo_client):
        celo_client.on(celo_token("CUSD"), "allowance", 50)

        status = await check_approval(celo_client, celo_token("CUSD"), "0xowner", BROKER, 100)

        assert not status.is_approved
        assert status.current_allowance == 50
        assert status.required_allowance == 100

    @pytest.mark.asyncio
    async def test_approve_skipped_when_sufficient(self, celo_client):
        """No transaction is sent when the allowance already covers the amount."""
        celo_client.on(celo_token("CUSD"), "allowance", 10**30)
        signer = FakeSigner({CELO_MAINNET_ID: celo_client})

        pending = await approve(celo_client, celo_token("CUSD"), BROKER, 100, signer)

        assert pending is None
        assert signer.sent == []

    @pytest.mark.asyncio
    async def test_approve_exact_amount(self, celo_client):
        celo_client.on(celo_token("CUSD"), "allowance", 0)
        signer = FakeSigner({CELO_MAINNET_ID: celo_client})

        pending = await approve(celo_client, celo_token("CUSD"), BROKER, 100, signer, gas_price=7)

        assert pending is not None
        tx = signer.sent[0]
        assert tx["to"] == celo_token("CUSD")
        assert tx["data"] == {"fn": "approve", "args": (BROKER, 100)}
        assert tx["gas"] == 300_000
        assert tx["gasPrice"] == 7

    @pytest.mark.asyncio
    async def test_wait_for_approval_revert(self, celo_client):
        celo_client.on(celo_token("CUSD"), "allowance", 0)
        signer = FakeSigner({CELO_MAINNET_ID: celo_client}, revert_on=(1,))

        pending = await approve(celo_client, celo_token("CUSD"), BROKER, 100, signer)

        with pytest.raises(ApprovalFailedError):
            await wait_for_approval(celo_client, pending)


class TestExecution:
    """Tests for swap submission and confirmation polling."""

    @pytest.mark.asyncio
    async def test_execute_swap_encodes_floor(self, celo_client):
        signer = FakeSigner({CELO_MAINNET_ID: celo_client})
        exchange = ExchangeInfo(provider=PROVIDER, exchange_id=b"\x01" * 32)

        pending = await execute_swap(
            celo_client, BROKER, exchange, celo_token("CEUR"), celo_token("CUSD"), 100, 97, signer
        )

        assert pending.tx_hash.startswith("0x")
        args = signer.sent[0]["data"]["args"]
        assert signer.sent[0]["data"]["fn"] == "swapIn"
        assert args[-2:] == (100, 97)
        assert signer.sent[0]["gas"] == 800_000

    @pytest.mark.asyncio
    async def test_wait_for_swap_confirmed(self, celo_client):
        celo_client.receipts["0xabc"] = {"status": 1, "blockNumber": 99}
        receipt = await wait_for_swap(celo_client, PendingTransaction("0xabc", CELO_MAINNET_ID), confirmations=2)
        assert receipt["status"] == 1

    @pytest.mark.asyncio
    async def test_wait_for_swap_revert(self, celo_client):
        celo_client.receipts["0xabc"] = {"status": 0, "blockNumber": 100}
        with pytest.raises(SwapFailedError) as exc_info:
            await wait_for_swap(celo_client, PendingTransaction("0xabc", CELO_MAINNET_ID))
        assert exc_info.value.tx_hash == "0xabc"

    @pytest.mark.asyncio
    async def test_wait_timeout_is_distinct_from_revert(self, celo_client):
        """A missing receipt ends in ConfirmationTimeoutError, not a revert."""
        with pytest.raises(ConfirmationTimeoutError) as exc_info:
            await wait_for_transaction(
                celo_client, PendingTransaction("0xmissing", CELO_MAINNET_ID), timeout=0, poll_interval=0
            )
        assert exc_info.value.tx_hash == "0xmissing"

    @pytest.mark.asyncio
    async def test_wait_needs_confirmations(self):
        """Polling continues until enough blocks are on top of the receipt."""
        client = FakeChainClient()
        client.receipts["0xabc"] = {"status": 1, "blockNumber": 100}
        blocks = iter([100, 100, 101])

        async def block_number():
            return next(blocks)

        client.block_number = block_number
        receipt = await wait_for_transaction(
            client, PendingTransaction("0xabc", CELO_MAINNET_ID), confirmations=2, timeout=5, poll_interval=0
        )
        assert receipt["blockNumber"] == 100
