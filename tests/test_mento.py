"""Tests for the Mento broker strategy."""

from decimal import Decimal

import pytest

from conftest import ONE, USER, FakeSigner, celo_token
from swapengine.chains import ALFAJORES_ID, ARBITRUM_ONE_ID, CELO_MAINNET_ID
from swapengine.exceptions import (
    NoRouteError,
    SwapError,
    SwapFailedError,
    UnsupportedSwapError,
    WrongNetworkError,
)
from swapengine.routing.mento import MentoBrokerStrategy
from swapengine.swap.models import SwapCallbacks, SwapParams


def make_params(from_token="CEUR", to_token="CUSD", amount="100", chain_id=CELO_MAINNET_ID, **kwargs):
    return SwapParams(
        from_token=from_token,
        to_token=to_token,
        from_chain_id=chain_id,
        to_chain_id=kwargs.pop("to_chain_id", chain_id),
        amount=amount,
        user_address=USER,
        **kwargs,
    )


@pytest.fixture
def strategy(chain_clients):
    return MentoBrokerStrategy(clients=chain_clients)


@pytest.fixture
def hub_balances(mento_market):
    """CUSD balance reads: 0 before hop 1, 98 after."""
    balances = iter([0, 98 * ONE])
    mento_market.on(celo_token("CUSD"), "balanceOf", lambda owner: next(balances))
    return mento_market


class TestSupports:
    """Tests for strategy eligibility."""

    def test_celo_same_chain(self, strategy):
        assert strategy.supports(make_params())
        assert strategy.supports(make_params(chain_id=ALFAJORES_ID))

    def test_rejects_other_chains(self, strategy):
        assert not strategy.supports(make_params("USDC", "PAXG", chain_id=ARBITRUM_ONE_ID))
        assert not strategy.supports(make_params("CUSD", "USDC", to_chain_id=ARBITRUM_ONE_ID))

    @pytest.mark.asyncio
    async def test_validate_missing_token(self, strategy):
        with pytest.raises(UnsupportedSwapError) as exc_info:
            await strategy.validate(make_params("CUSD", "USDC"))
        assert "not available on Celo Mainnet" in str(exc_info.value)


class TestEstimate:
    """Tests for quoting."""

    @pytest.mark.asyncio
    async def test_direct_estimate(self, strategy, mento_market):
        """100 CEUR quoting at 98% with 50 bps tolerance."""
        estimate = await strategy.get_estimate(make_params())

        assert estimate.expected_output == Decimal("98")
        assert estimate.minimum_output == Decimal("97.51")
        assert estimate.price_impact_percent == Decimal("0")
        assert estimate.gas_cost_currency == "CELO"
        assert estimate.gas_cost_estimate == Decimal("0.004")
        assert estimate.strategy == "MentoBroker"

    @pytest.mark.asyncio
    async def test_estimate_sends_nothing(self, strategy, mento_market):
        """Quoting only reads contract state."""
        await strategy.get_estimate(make_params())
        assert {fn for _, fn, _ in mento_market.calls} <= {
            "getExchangeProviders", "getExchanges", "getAmountOut",
        }

    @pytest.mark.asyncio
    async def test_two_hop_estimate(self, strategy, mento_market):
        """CEUR -> CUSD -> CREAL compounds both quotes."""
        estimate = await strategy.get_estimate(make_params("CEUR", "CREAL"))

        assert estimate.expected_output == Decimal("96.04")
        assert estimate.gas_cost_estimate == Decimal("0.008")

    @pytest.mark.asyncio
    async def test_no_route(self, strategy, mento_market):
        with pytest.raises(NoRouteError) as exc_info:
            await strategy.get_estimate(make_params("CEUR", "CKES"))
        assert str(exc_info.value) == "No exchange found for CEUR/CKES"


class TestExecute:
    """Tests for swap execution."""

    @pytest.mark.asyncio
    async def test_direct_swap(self, strategy, mento_market):
        signer = FakeSigner({CELO_MAINNET_ID: mento_market})

        result = await strategy.execute(make_params(), signer)

        assert result.success
        assert signer.sent_functions() == ["approve", "swapIn"]
        assert result.approval_tx_hash == f"0x{1:064x}"
        assert result.tx_hash == f"0x{2:064x}"
        assert [step.kind for step in result.steps] == ["TOKEN_ALLOWANCE", "SWAP"]
        # Legacy gas pricing on Celo
        assert all(tx["gasPrice"] == mento_market.gas_price_wei for tx in signer.sent)

    @pytest.mark.asyncio
    async def test_min_amount_passed_to_broker(self, strategy, mento_market):
        signer = FakeSigner({CELO_MAINNET_ID: mento_market})

        await strategy.execute(make_params(), signer)

        amount_in, min_out = signer.sent[1]["data"]["args"][-2:]
        assert amount_in == 100 * ONE
        assert min_out == 9751 * ONE // 100

    @pytest.mark.asyncio
    async def test_existing_allowance_skips_approval(self, strategy, mento_market):
        mento_market.on(celo_token("CEUR"), "allowance", 1000 * ONE)
        signer = FakeSigner({CELO_MAINNET_ID: mento_market})

        result = await strategy.execute(make_params(), signer)

        assert signer.sent_functions() == ["swapIn"]
        assert result.approval_tx_hash is None

    @pytest.mark.asyncio
    async def test_callbacks_fire_in_order(self, strategy, mento_market):
        events = []
        callbacks = SwapCallbacks(
            on_approval_submitted=lambda h: events.append(("approval_submitted", h)),
            on_approval_confirmed=lambda: events.append(("approval_confirmed",)),
            on_swap_submitted=lambda h: events.append(("swap_submitted", h)),
        )
        signer = FakeSigner({CELO_MAINNET_ID: mento_market})

        await strategy.execute(make_params(), signer, callbacks)

        assert [event[0] for event in events] == [
            "approval_submitted", "approval_confirmed", "swap_submitted",
        ]

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_abort(self, strategy, mento_market):
        def explode(tx_hash):
            raise RuntimeError("ui gone")

        signer = FakeSigner({CELO_MAINNET_ID: mento_market})
        result = await strategy.execute(make_params(), signer, SwapCallbacks(on_swap_submitted=explode))
        assert result.success

    @pytest.mark.asyncio
    async def test_two_hop_swap(self, strategy, hub_balances):
        """Two swaps through CUSD; hop 2 spends exactly what hop 1 delivered."""
        signer = FakeSigner({CELO_MAINNET_ID: hub_balances})

        result = await strategy.execute(make_params("CEUR", "CREAL"), signer)

        assert signer.sent_functions() == ["approve", "swapIn", "approve", "swapIn"]
        assert result.tx_hash == f"0x{4:064x}"
        assert signer.sent[2]["to"] == celo_token("CUSD")
        assert signer.sent[2]["data"]["args"][-1] == 98 * ONE
        hop2_amount_in = signer.sent[3]["data"]["args"][-2]
        assert hop2_amount_in == 98 * ONE
        assert [step.kind for step in result.steps] == [
            "TOKEN_ALLOWANCE", "SWAP", "TOKEN_ALLOWANCE", "SWAP",
        ]

    @pytest.mark.asyncio
    async def test_two_hop_callbacks(self, strategy, hub_balances):
        """The hub token approval reports like the source token approval."""
        events = []
        callbacks = SwapCallbacks(
            on_approval_submitted=lambda h: events.append(("approval_submitted", h)),
            on_approval_confirmed=lambda: events.append(("approval_confirmed",)),
            on_swap_submitted=lambda h: events.append(("swap_submitted", h)),
            on_step=lambda step: events.append(("step", step.tx_hash)),
        )
        signer = FakeSigner({CELO_MAINNET_ID: hub_balances})

        await strategy.execute(make_params("CEUR", "CREAL"), signer, callbacks)

        hashes = [f"0x{n:064x}" for n in range(1, 5)]
        assert events == [
            ("approval_submitted", hashes[0]), ("step", hashes[0]), ("approval_confirmed",),
            ("swap_submitted", hashes[1]), ("step", hashes[1]),
            ("approval_submitted", hashes[2]), ("step", hashes[2]), ("approval_confirmed",),
            ("swap_submitted", hashes[3]), ("step", hashes[3]),
        ]

    @pytest.mark.asyncio
    async def test_two_hop_partial_failure_reraises(self, strategy, hub_balances):
        """A hop 2 revert surfaces after hop 1 already confirmed."""
        signer = FakeSigner({CELO_MAINNET_ID: hub_balances}, revert_on=(4,))

        with pytest.raises(SwapFailedError):
            await strategy.execute(make_params("CEUR", "CREAL"), signer)

        assert len(signer.sent) == 4

    @pytest.mark.asyncio
    async def test_two_hop_no_hub_received(self, strategy, mento_market):
        mento_market.on(celo_token("CUSD"), "balanceOf", 5 * ONE)
        signer = FakeSigner({CELO_MAINNET_ID: mento_market})

        with pytest.raises(SwapError):
            await strategy.execute(make_params("CEUR", "CREAL"), signer)
        assert signer.sent_functions() == ["approve", "swapIn"]

    @pytest.mark.asyncio
    async def test_wrong_network(self, strategy, mento_market):
        signer = FakeSigner({ARBITRUM_ONE_ID: mento_market}, chain_id=ARBITRUM_ONE_ID)

        with pytest.raises(WrongNetworkError):
            await strategy.execute(make_params(), signer)
        assert signer.sent == []

    @pytest.mark.asyncio
    async def test_swap_revert(self, strategy, mento_market):
        signer = FakeSigner({CELO_MAINNET_ID: mento_market}, revert_on=(2,))

        with pytest.raises(SwapFailedError) as exc_info:
            await strategy.execute(make_params(), signer)
        assert exc_info.value.tx_hash == f"0x{2:064x}"
