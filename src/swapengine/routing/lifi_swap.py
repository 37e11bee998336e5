"""LI.FI same-chain swap strategy (aggregated DEX liquidity on Celo and Arbitrum)."""

import logging
from typing import Optional

from swapengine.chains import get_token_decimals, is_arbitrum, is_celo, is_testnet
from swapengine.exceptions import SwapError
from swapengine.routing.base import SwapStrategy, require_pair_addresses, resolve_slippage_bps
from swapengine.routing.lifi import (
    LiFiClient,
    LiFiRouteExecutor,
    estimate_from_route,
    request_routes,
    select_cheapest_route,
)
from swapengine.swap.amounts import parse_amount
from swapengine.swap.client import ChainClients
from swapengine.swap.models import SwapCallbacks, SwapEstimate, SwapParams, SwapResult
from swapengine.swap.signer import Signer

logger = logging.getLogger(__name__)


class LiFiSwapStrategy(SwapStrategy):
    """Same-chain swaps routed through the LI.FI aggregator."""

    def __init__(self, lifi: Optional[LiFiClient] = None, clients: Optional[ChainClients] = None):
        self.lifi = lifi or LiFiClient()
        self.clients = clients or ChainClients()
        self.executor = LiFiRouteExecutor(self.lifi, self.clients)

    @property
    def name(self) -> str:
        return "LiFiSwap"

    def supports(self, params: SwapParams) -> bool:
        chain_id = params.from_chain_id
        return (
            params.from_chain_id == params.to_chain_id
            and (is_celo(chain_id) or is_arbitrum(chain_id))
            and not is_testnet(chain_id)
        )

    async def validate(self, params: SwapParams) -> bool:
        require_pair_addresses(params)
        return True

    async def _cheapest_route(self, params: SwapParams):
        from_address, to_address = require_pair_addresses(params)
        amount_in = parse_amount(params.amount, get_token_decimals(params.from_token))
        routes = await request_routes(
            self.lifi, params, from_address, to_address, amount_in, resolve_slippage_bps(params)
        )
        route = select_cheapest_route(routes)
        logger.info(
            f"[{self.name}] Selected route {route.id} via {route.tools} "
            f"({len(routes)} candidates, to_amount={route.to_amount})"
        )
        return route

    async def get_estimate(self, params: SwapParams) -> SwapEstimate:
        logger.info(f"[{self.name}] Getting estimate for {params.describe()}")
        await self.validate(params)
        route = await self._cheapest_route(params)
        return estimate_from_route(
            route, get_token_decimals(params.to_token), resolve_slippage_bps(params), self.name
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
        route = await self._cheapest_route(params)
        steps = await self.executor.execute_route(route, signer, callbacks)

        swap_steps = [step for step in steps if step.kind == "SWAP"]
        if not swap_steps:
            raise SwapError("No transaction hash returned from LI.FI route")

        approvals = [step for step in steps if step.kind == "TOKEN_ALLOWANCE"]
        tx_hash = swap_steps[-1].tx_hash
        logger.info(f"[{self.name}] Swap completed: {tx_hash}")

        return SwapResult(
            success=True,
            tx_hash=tx_hash,
            approval_tx_hash=approvals[0].tx_hash if approvals else None,
            steps=steps,
            strategy=self.name,
        )
