"""Uniswap V3 strategy for same-chain swaps through a single pool.

Quotes every fee tier with the QuoterV2 contract and trades through the pool
with the best output using SwapRouter.exactInputSingle. No aggregator is
involved, so this keeps working when LI.FI is unavailable.
"""

import logging
import time
from typing import Optional

from swapengine.chains import (
    get_confirmations,
    get_network_name,
    get_token_decimals,
    get_uniswap_v3_contracts,
)
from swapengine.config import get_settings
from swapengine.exceptions import NoRouteError, UnsupportedSwapError
from swapengine.routing.base import (
    SwapStrategy,
    require_pair_addresses,
    require_signer_chain,
    resolve_slippage_bps,
)
from swapengine.swap.abis import UNISWAP_V3_QUOTER_ABI, UNISWAP_V3_ROUTER_ABI
from swapengine.swap.amounts import (
    calculate_min_amount_out,
    format_amount,
    parse_amount,
    price_impact_percent,
)
from swapengine.swap.approval import approve, wait_for_approval
from swapengine.swap.client import ChainClient, ChainClients
from swapengine.swap.execution import wait_for_swap
from swapengine.swap.models import (
    ExecutionStep,
    PendingTransaction,
    SwapCallbacks,
    SwapEstimate,
    SwapParams,
    SwapResult,
)
from swapengine.swap.signer import Signer

logger = logging.getLogger(__name__)

# Pool fee tiers in hundredths of a bip, in the order they are tried
FEE_TIERS = (3000, 10000, 500, 100)


class UniswapV3Strategy(SwapStrategy):
    """Direct single-pool swaps on chains with Uniswap V3 deployed."""

    def __init__(self, clients: Optional[ChainClients] = None):
        self.clients = clients or ChainClients()

    @property
    def name(self) -> str:
        return "UniswapV3"

    def supports(self, params: SwapParams) -> bool:
        return (
            params.from_chain_id == params.to_chain_id
            and get_uniswap_v3_contracts(params.from_chain_id) is not None
        )

    async def validate(self, params: SwapParams) -> bool:
        require_pair_addresses(params)
        if get_uniswap_v3_contracts(params.from_chain_id) is None:
            raise UnsupportedSwapError(
                f"Uniswap V3 not available on {get_network_name(params.from_chain_id)}"
            )
        return True

    async def quote(
        self,
        client: ChainClient,
        quoter: str,
        token_in: str,
        token_out: str,
        amount_in: int,
        fee: int,
    ) -> Optional[int]:
        """Output for amount_in through one pool, or None when the pool is missing."""
        try:
            result = await client.call(
                quoter,
                UNISWAP_V3_QUOTER_ABI,
                "quoteExactInputSingle",
                (token_in, token_out, amount_in, fee, 0),
            )
        except Exception as e:
            logger.debug(f"[{self.name}] No quote for fee tier {fee}: {e}")
            return None

        # QuoterV2 returns (amountOut, sqrtPriceX96After, ticksCrossed, gasEstimate)
        amount_out = int(result[0] if isinstance(result, (list, tuple)) else result)
        return amount_out if amount_out > 0 else None

    async def find_best_pool(
        self,
        client: ChainClient,
        quoter: str,
        params: SwapParams,
        token_in: str,
        token_out: str,
        amount_in: int,
    ) -> tuple[int, int]:
        """Return (fee, amount_out) of the best-quoting pool.

        Raises:
            NoRouteError: if no fee tier has a pool for the pair
        """
        best_fee = None
        best_out = 0
        for fee in FEE_TIERS:
            amount_out = await self.quote(client, quoter, token_in, token_out, amount_in, fee)
            if amount_out is not None and amount_out > best_out:
                best_fee, best_out = fee, amount_out

        if best_fee is None:
            raise NoRouteError(f"No Uniswap V3 pool found for {params.from_token}/{params.to_token}")

        logger.info(f"[{self.name}] Best pool: fee tier {best_fee}, amount_out={best_out}")
        return best_fee, best_out

    async def get_estimate(self, params: SwapParams) -> SwapEstimate:
        logger.info(f"[{self.name}] Getting estimate for {params.describe()}")
        await self.validate(params)

        client = self.clients.get(params.from_chain_id)
        _, quoter = get_uniswap_v3_contracts(params.from_chain_id)
        from_address, to_address = require_pair_addresses(params)
        from_decimals = get_token_decimals(params.from_token)
        to_decimals = get_token_decimals(params.to_token)

        amount_in = parse_amount(params.amount, from_decimals)
        fee, expected = await self.find_best_pool(
            client, quoter, params, from_address, to_address, amount_in
        )
        minimum = calculate_min_amount_out(expected, resolve_slippage_bps(params))

        # Same pool, one whole unit of the source token
        reference = await self.quote(client, quoter, from_address, to_address, 10 ** from_decimals, fee)
        expected_human = format_amount(expected, to_decimals)
        price_impact = price_impact_percent(
            expected_human, params.amount_decimal, format_amount(reference or 0, to_decimals)
        )

        gas_price = await client.gas_price()
        gas_cost = format_amount(get_settings().uniswap_gas_limit * gas_price, 18)

        return SwapEstimate(
            expected_output=expected_human,
            minimum_output=format_amount(minimum, to_decimals),
            price_impact_percent=price_impact,
            gas_cost_estimate=gas_cost,
            gas_cost_currency="ETH",
            strategy=self.name,
        )

    async def execute(
        self,
        params: SwapParams,
        signer: Signer,
        callbacks: Optional[SwapCallbacks] = None,
    ) -> SwapResult:
        logger.info(f"[{self.name}] Executing {params.describe()}")
        callbacks = callbacks or SwapCallbacks()

        await self.validate(params)
        require_signer_chain(signer, params.from_chain_id)

        settings = get_settings()
        client = self.clients.get(params.from_chain_id)
        router, quoter = get_uniswap_v3_contracts(params.from_chain_id)
        from_address, to_address = require_pair_addresses(params)
        amount_in = parse_amount(params.amount, get_token_decimals(params.from_token))
        confirmations = get_confirmations(params.from_chain_id)
        steps: list[ExecutionStep] = []

        fee, expected = await self.find_best_pool(
            client, quoter, params, from_address, to_address, amount_in
        )
        min_amount_out = calculate_min_amount_out(expected, resolve_slippage_bps(params))

        approval_tx_hash = None
        pending = await approve(client, from_address, router, amount_in, signer)
        if pending is not None:
            approval_tx_hash = pending.tx_hash
            callbacks.approval_submitted(pending.tx_hash)
            steps.append(self._step(steps, "TOKEN_ALLOWANCE", pending.tx_hash, params.from_chain_id))
            callbacks.step(steps[-1])
            await wait_for_approval(client, pending, confirmations)
            callbacks.approval_confirmed()
            logger.info(f"[{self.name}] Approval confirmed: {pending.tx_hash}")

        deadline = int(time.time()) + settings.swap_deadline_seconds
        data = client.encode_call(
            router,
            UNISWAP_V3_ROUTER_ABI,
            "exactInputSingle",
            (
                from_address,
                to_address,
                fee,
                params.user_address,
                deadline,
                amount_in,
                min_amount_out,
                0,
            ),
        )
        tx = {"to": router, "data": data, "value": 0, "gas": settings.uniswap_gas_limit}

        logger.info(
            f"[{self.name}] Submitting exactInputSingle fee={fee} amount_in={amount_in} "
            f"min_out={min_amount_out}"
        )
        tx_hash = await signer.send_transaction(tx)
        callbacks.swap_submitted(tx_hash)
        steps.append(self._step(steps, "SWAP", tx_hash, params.from_chain_id))
        callbacks.step(steps[-1])

        pending = PendingTransaction(tx_hash=tx_hash, chain_id=params.from_chain_id, description="swap")
        await wait_for_swap(client, pending, confirmations)
        logger.info(f"[{self.name}] Swap confirmed: {tx_hash}")

        return SwapResult(
            success=True,
            tx_hash=tx_hash,
            approval_tx_hash=approval_tx_hash,
            steps=steps,
            strategy=self.name,
        )

    @staticmethod
    def _step(steps: list[ExecutionStep], kind: str, tx_hash: str, chain_id: int) -> ExecutionStep:
        return ExecutionStep(index=len(steps), kind=kind, tx_hash=tx_hash, chain_id=chain_id, tool="uniswap-v3")
