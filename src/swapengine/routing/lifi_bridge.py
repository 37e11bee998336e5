"""LI.FI cross-chain bridge strategy.

The primary result is the source-chain transaction: destination settlement
happens asynchronously on the bridge and is only awaited when
bridge_wait_for_destination is enabled.
"""

import logging
from typing import Optional

from swapengine.chains import get_network_name, get_token_decimals, is_cross_chain, is_supported
from swapengine.config import get_settings
from swapengine.exceptions import SwapError, UnsupportedSwapError
from swapengine.routing.base import SwapStrategy, require_pair_addresses, resolve_slippage_bps
from swapengine.routing.lifi import (
    LiFiClient,
    LiFiRouteExecutor,
    estimate_from_route,
    request_routes,
    select_cheapest_route,
    wait_for_bridge_completion,
)
from swapengine.swap.amounts import parse_amount
from swapengine.swap.client import ChainClients
from swapengine.swap.models import SwapCallbacks, SwapEstimate, SwapParams, SwapResult
from swapengine.swap.signer import Signer

logger = logging.getLogger(__name__)


class LiFiBridgeStrategy(SwapStrategy):
    """Cross-chain swaps and bridges through LI.FI."""

    def __init__(self, lifi: Optional[LiFiClient] = None, clients: Optional[ChainClients] = None):
        self.lifi = lifi or LiFiClient()
        self.clients = clients or ChainClients()
        self.executor = LiFiRouteExecutor(self.lifi, self.clients)

    @property
    def name(self) -> str:
        return "LiFiBridge"

    def supports(self, params: SwapParams) -> bool:
        return is_cross_chain(params.from_chain_id, params.to_chain_id)

    async def validate(self, params: SwapParams) -> bool:
        if not is_supported(params.from_chain_id):
            raise UnsupportedSwapError(f"Source chain {params.from_chain_id} is not supported")
        if not is_supported(params.to_chain_id):
            raise UnsupportedSwapError(f"Destination chain {params.to_chain_id} is not supported")
        require_pair_addresses(params)
        return True

    async def _cheapest_route(self, params: SwapParams):
        from_address, to_address = require_pair_addresses(params)
        amount_in = parse_amount(params.amount, get_token_decimals(params.from_token))
        routes = await request_routes(
            self.lifi, params, from_address, to_address, amount_in, resolve_slippage_bps(params)
        )
        route = select_cheapest_route(routes)
        logger.info(f"[{self.name}] Selected route {route.id}: {route.tools}")
        return route

    async def get_estimate(self, params: SwapParams) -> SwapEstimate:
        logger.info(
            f"[{self.name}] Getting estimate: {params.from_token} on "
            f"{get_network_name(params.from_chain_id)} -> {params.to_token} on "
            f"{get_network_name(params.to_chain_id)}"
        )
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

        # Source-chain leg: first bridge or swap transaction on the source chain
        source_steps = [
            step for step in steps
            if step.kind in ("CROSS_CHAIN", "SWAP") and step.chain_id == params.from_chain_id
        ]
        if not source_steps:
            raise SwapError("No transaction hash returned from LI.FI route")

        bridge_steps = [step for step in source_steps if step.kind == "CROSS_CHAIN"]
        primary = bridge_steps[0] if bridge_steps else source_steps[0]

        if get_settings().bridge_wait_for_destination:
            await wait_for_bridge_completion(
                self.lifi, primary.tx_hash, params.from_chain_id, params.to_chain_id, primary.tool
            )

        approvals = [step for step in steps if step.kind == "TOKEN_ALLOWANCE"]
        logger.info(f"[{self.name}] Bridge submitted: {primary.tx_hash} ({len(steps)} transactions)")

        return SwapResult(
            success=True,
            tx_hash=primary.tx_hash,
            approval_tx_hash=approvals[0].tx_hash if approvals else None,
            steps=steps,
            strategy=self.name,
        )
