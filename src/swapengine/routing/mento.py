"""Mento broker strategy for same-chain swaps on Celo.

Execution order: approval of the source token, direct exchange discovery,
then a two-hop route through the chain's hub token (CUSD) when no direct
market exists. Every transaction is confirmed before the next is sent.

A two-hop swap is not atomic. If hop 2 fails after hop 1 confirmed, the user
keeps the hub token; this is logged and left for the caller to resolve.
"""

import logging
from typing import Optional

from swapengine.chains import (
    get_broker_address,
    get_chain,
    get_confirmations,
    get_network_name,
    get_token_decimals,
    is_celo,
)
from swapengine.config import get_settings
from swapengine.exceptions import NoRouteError, SwapError, UnsupportedSwapError
from swapengine.routing.base import (
    SwapStrategy,
    require_pair_addresses,
    require_signer_chain,
    require_token_address,
    resolve_slippage_bps,
)
from swapengine.swap.abis import ERC20_ABI
from swapengine.swap.amounts import (
    calculate_min_amount_out,
    format_amount,
    parse_amount,
    price_impact_percent,
)
from swapengine.swap.approval import approve, wait_for_approval
from swapengine.swap.client import ChainClient, ChainClients
from swapengine.swap.discovery import find_direct_exchange, find_two_hop_exchange, get_quote
from swapengine.swap.execution import execute_swap, wait_for_swap
from swapengine.swap.models import (
    ExchangeInfo,
    ExecutionStep,
    SwapCallbacks,
    SwapEstimate,
    SwapParams,
    SwapResult,
    TwoHopExchange,
)
from swapengine.swap.signer import Signer

logger = logging.getLogger(__name__)


class MentoBrokerStrategy(SwapStrategy):
    """Swaps Mento stable assets through the on-chain broker."""

    def __init__(self, clients: Optional[ChainClients] = None):
        self.clients = clients or ChainClients()

    @property
    def name(self) -> str:
        return "MentoBroker"

    def supports(self, params: SwapParams) -> bool:
        return is_celo(params.from_chain_id) and params.from_chain_id == params.to_chain_id

    async def validate(self, params: SwapParams) -> bool:
        require_pair_addresses(params)
        if get_broker_address(params.from_chain_id) is None:
            raise UnsupportedSwapError(
                f"Mento broker not available on {get_network_name(params.from_chain_id)}"
            )
        return True

    def _hub_address(self, chain_id: int) -> Optional[str]:
        chain = get_chain(chain_id)
        if chain is None or not chain.hub_token:
            return None
        return require_token_address(chain_id, chain.hub_token)

    async def _find_route(
        self,
        client: ChainClient,
        broker: str,
        params: SwapParams,
        from_address: str,
        to_address: str,
    ) -> "ExchangeInfo | TwoHopExchange":
        direct = await find_direct_exchange(client, broker, from_address, to_address)
        if direct is not None:
            return direct

        hub_address = self._hub_address(params.from_chain_id)
        two_hop = None
        if hub_address is not None:
            two_hop = await find_two_hop_exchange(
                client, broker, from_address, to_address, hub_address
            )
        if two_hop is None:
            raise NoRouteError(f"No exchange found for {params.from_token}/{params.to_token}")
        return two_hop

    async def _quote_route(
        self,
        client: ChainClient,
        broker: str,
        route: "ExchangeInfo | TwoHopExchange",
        from_address: str,
        to_address: str,
        amount_in: int,
        hub_address: Optional[str],
    ) -> int:
        if isinstance(route, ExchangeInfo):
            return await get_quote(client, broker, route, from_address, to_address, amount_in)

        hub_out = await get_quote(client, broker, route.first, from_address, hub_address, amount_in)
        return await get_quote(client, broker, route.second, hub_address, to_address, hub_out)

    async def get_estimate(self, params: SwapParams) -> SwapEstimate:
        logger.info(f"[{self.name}] Getting estimate for {params.describe()}")
        await self.validate(params)

        client = self.clients.get(params.from_chain_id)
        broker = get_broker_address(params.from_chain_id)
        from_address, to_address = require_pair_addresses(params)
        from_decimals = get_token_decimals(params.from_token)
        to_decimals = get_token_decimals(params.to_token)

        amount_in = parse_amount(params.amount, from_decimals)
        route = await self._find_route(client, broker, params, from_address, to_address)
        hub_address = None if isinstance(route, ExchangeInfo) else self._hub_address(params.from_chain_id)

        expected = await self._quote_route(
            client, broker, route, from_address, to_address, amount_in, hub_address
        )
        minimum = calculate_min_amount_out(expected, resolve_slippage_bps(params))

        # Price impact against the rate for one whole unit of the source token
        one_unit = 10 ** from_decimals
        reference = await self._quote_route(
            client, broker, route, from_address, to_address, one_unit, hub_address
        )
        expected_human = format_amount(expected, to_decimals)
        price_impact = price_impact_percent(
            expected_human, params.amount_decimal, format_amount(reference, to_decimals)
        )

        hops = 1 if isinstance(route, ExchangeInfo) else 2
        gas_price = await client.gas_price()
        gas_cost = format_amount(get_settings().swap_gas_limit * gas_price * hops, 18)

        return SwapEstimate(
            expected_output=expected_human,
            minimum_output=format_amount(minimum, to_decimals),
            price_impact_percent=price_impact,
            gas_cost_estimate=gas_cost,
            gas_cost_currency="CELO",
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

        client = self.clients.get(params.from_chain_id)
        chain = get_chain(params.from_chain_id)
        broker = get_broker_address(params.from_chain_id)
        from_address, to_address = require_pair_addresses(params)
        amount_in = parse_amount(params.amount, get_token_decimals(params.from_token))
        slippage_bps = resolve_slippage_bps(params)
        confirmations = get_confirmations(params.from_chain_id)
        gas_price = await client.gas_price() if chain.legacy_transactions else None
        steps: list[ExecutionStep] = []

        # Step 1: approval of the source token
        approval_tx_hash = None
        pending = await approve(client, from_address, broker, amount_in, signer, gas_price)
        if pending is not None:
            approval_tx_hash = pending.tx_hash
            callbacks.approval_submitted(pending.tx_hash)
            steps.append(self._step(steps, "TOKEN_ALLOWANCE", pending.tx_hash, params.from_chain_id))
            callbacks.step(steps[-1])
            await wait_for_approval(client, pending, confirmations)
            callbacks.approval_confirmed()
            logger.info(f"[{self.name}] Approval confirmed: {pending.tx_hash}")

        # Step 2: discovery
        route = await self._find_route(client, broker, params, from_address, to_address)

        # Step 3: execution
        if isinstance(route, ExchangeInfo):
            logger.info(f"[{self.name}] Direct exchange found, executing single swap")
            final_hash = await self._swap_hop(
                client, broker, route, from_address, to_address, amount_in,
                slippage_bps, signer, gas_price, confirmations, callbacks, steps,
            )
        else:
            final_hash = await self._execute_two_hop(
                client, broker, route, params, from_address, to_address, amount_in,
                slippage_bps, signer, gas_price, confirmations, callbacks, steps,
            )

        logger.info(f"[{self.name}] Swap confirmed: {final_hash}")
        return SwapResult(
            success=True,
            tx_hash=final_hash,
            approval_tx_hash=approval_tx_hash,
            steps=steps,
            strategy=self.name,
        )

    async def _swap_hop(
        self,
        client: ChainClient,
        broker: str,
        exchange: ExchangeInfo,
        token_in: str,
        token_out: str,
        amount_in: int,
        slippage_bps: int,
        signer: Signer,
        gas_price: Optional[int],
        confirmations: int,
        callbacks: SwapCallbacks,
        steps: list[ExecutionStep],
    ) -> str:
        expected = await get_quote(client, broker, exchange, token_in, token_out, amount_in)
        min_amount_out = calculate_min_amount_out(expected, slippage_bps)

        pending = await execute_swap(
            client, broker, exchange, token_in, token_out, amount_in, min_amount_out,
            signer, gas_price,
        )
        callbacks.swap_submitted(pending.tx_hash)
        steps.append(self._step(steps, "SWAP", pending.tx_hash, client.chain_id))
        callbacks.step(steps[-1])
        logger.info(f"[{self.name}] Swap submitted: {pending.tx_hash}")

        await wait_for_swap(client, pending, confirmations)
        return pending.tx_hash

    async def _execute_two_hop(
        self,
        client: ChainClient,
        broker: str,
        route: TwoHopExchange,
        params: SwapParams,
        from_address: str,
        to_address: str,
        amount_in: int,
        slippage_bps: int,
        signer: Signer,
        gas_price: Optional[int],
        confirmations: int,
        callbacks: SwapCallbacks,
        steps: list[ExecutionStep],
    ) -> str:
        hub_symbol = get_chain(params.from_chain_id).hub_token
        hub_address = self._hub_address(params.from_chain_id)
        logger.info(f"[{self.name}] No direct exchange, routing through {hub_symbol}")

        balance_before = int(await client.call(hub_address, ERC20_ABI, "balanceOf", signer.address))

        await self._swap_hop(
            client, broker, route.first, from_address, hub_address, amount_in,
            slippage_bps, signer, gas_price, confirmations, callbacks, steps,
        )

        balance_after = int(await client.call(hub_address, ERC20_ABI, "balanceOf", signer.address))
        hub_received = balance_after - balance_before
        if hub_received <= 0:
            raise SwapError(f"First hop delivered no {hub_symbol}")
        logger.info(f"[{self.name}] Hop 1 confirmed, received {hub_received} {hub_symbol}")

        try:
            pending = await approve(client, hub_address, broker, hub_received, signer, gas_price)
            if pending is not None:
                callbacks.approval_submitted(pending.tx_hash)
                steps.append(self._step(steps, "TOKEN_ALLOWANCE", pending.tx_hash, params.from_chain_id))
                callbacks.step(steps[-1])
                await wait_for_approval(client, pending, confirmations)
                callbacks.approval_confirmed()

            return await self._swap_hop(
                client, broker, route.second, hub_address, to_address, hub_received,
                slippage_bps, signer, gas_price, confirmations, callbacks, steps,
            )
        except Exception as e:
            logger.error(
                f"[{self.name}] Partial failure: hop 2 failed after hop 1 confirmed; "
                f"{signer.address} holds {hub_received} {hub_symbol}: {e}"
            )
            raise

    @staticmethod
    def _step(steps: list[ExecutionStep], kind: str, tx_hash: str, chain_id: int) -> ExecutionStep:
        return ExecutionStep(index=len(steps), kind=kind, tx_hash=tx_hash, chain_id=chain_id, tool="mento")
