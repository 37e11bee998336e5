"""LI.FI aggregator integration.

Routes are requested from the LI.FI REST API and executed step by step with
the caller's signer: allowance, populated transaction request, broadcast,
confirmation. API docs: https://docs.li.fi/li.fi-api/li.fi-api
"""

import asyncio
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import httpx

from swapengine.chains import get_confirmations, get_network_name, is_native_token
from swapengine.config import get_settings
from swapengine.exceptions import (
    AggregatorError,
    ConfirmationTimeoutError,
    NoRouteError,
    SwapFailedError,
    WrongNetworkError,
)
from swapengine.swap.amounts import bps_to_fraction, calculate_min_amount_out, format_amount
from swapengine.swap.approval import approve, wait_for_approval
from swapengine.swap.client import ChainClients
from swapengine.swap.execution import wait_for_transaction
from swapengine.swap.models import (
    ExecutionStep,
    PendingTransaction,
    SwapCallbacks,
    SwapEstimate,
    SwapParams,
)
from swapengine.swap.signer import Signer

logger = logging.getLogger(__name__)


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def _to_int(value: Any) -> int:
    """Parse LI.FI numeric fields, which arrive as decimal or hex strings."""
    if value is None or value == "":
        return 0
    if isinstance(value, int):
        return value
    text = str(value)
    return int(text, 16) if text.startswith("0x") else int(text)


@dataclass
class LiFiStep:
    """One executable step of a LI.FI route."""

    id: str
    type: str
    tool: str
    from_chain_id: int
    to_chain_id: int
    from_token_address: str
    from_amount: int
    approval_address: Optional[str]
    raw: dict = field(repr=False, default_factory=dict)

    @property
    def is_cross_chain(self) -> bool:
        return self.from_chain_id != self.to_chain_id

    @classmethod
    def from_json(cls, data: dict) -> "LiFiStep":
        action = data.get("action", {})
        estimate = data.get("estimate", {})
        return cls(
            id=data.get("id", ""),
            type=data.get("type", ""),
            tool=data.get("tool", ""),
            from_chain_id=int(action.get("fromChainId", 0)),
            to_chain_id=int(action.get("toChainId", 0)),
            from_token_address=action.get("fromToken", {}).get("address", ""),
            from_amount=_to_int(action.get("fromAmount")),
            approval_address=estimate.get("approvalAddress"),
            raw=data,
        )


@dataclass
class LiFiRoute:
    """A route returned by /advanced/routes."""

    id: str
    from_amount: int
    to_amount: int
    to_amount_min: int
    from_amount_usd: Optional[Decimal]
    to_amount_usd: Optional[Decimal]
    gas_cost_usd: Optional[Decimal]
    steps: list[LiFiStep]

    @property
    def tools(self) -> str:
        return " -> ".join(step.tool for step in self.steps)

    @property
    def net_value_usd(self) -> Optional[Decimal]:
        """USD value received after gas, when LI.FI priced both."""
        if self.to_amount_usd is None:
            return None
        return self.to_amount_usd - (self.gas_cost_usd or Decimal("0"))

    @classmethod
    def from_json(cls, data: dict) -> "LiFiRoute":
        return cls(
            id=data.get("id", ""),
            from_amount=_to_int(data.get("fromAmount")),
            to_amount=_to_int(data.get("toAmount")),
            to_amount_min=_to_int(data.get("toAmountMin")),
            from_amount_usd=_to_decimal(data.get("fromAmountUSD")),
            to_amount_usd=_to_decimal(data.get("toAmountUSD")),
            gas_cost_usd=_to_decimal(data.get("gasCostUSD")),
            steps=[LiFiStep.from_json(step) for step in data.get("steps", [])],
        )


def select_cheapest_route(routes: list[LiFiRoute]) -> LiFiRoute:
    """Pick the route with the highest USD value net of gas.

    Falls back to the highest raw output when any route lacks USD pricing.
    Ties keep LI.FI's order.
    """
    if not routes:
        raise NoRouteError("No routes found")

    if all(route.net_value_usd is not None for route in routes):
        return max(routes, key=lambda r: r.net_value_usd)
    return max(routes, key=lambda r: r.to_amount)


class LiFiClient:
    """Async client for the LI.FI REST API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        integrator: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.lifi_api_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.lifi_api_key
        self.integrator = integrator or settings.lifi_integrator
        self.timeout = timeout or settings.lifi_timeout
        self._transport = transport

    def _get_headers(self) -> dict:
        """Get API headers with authorization."""
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["x-lifi-api-key"] = self.api_key
        return headers

    async def _request(self, method: str, path: str, **kwargs) -> dict:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.request(
                method, f"{self.base_url}{path}", headers=self._get_headers(), **kwargs
            )

        if response.status_code != 200:
            logger.warning(f"LI.FI API error: {response.status_code} - {response.text}")
            message = response.text
            try:
                message = response.json().get("message", message)
            except ValueError:
                pass
            raise AggregatorError(f"LI.FI API error {response.status_code}: {message}")

        return response.json()

    async def get_routes(
        self,
        from_chain_id: int,
        from_token_address: str,
        from_amount: int,
        to_chain_id: int,
        to_token_address: str,
        from_address: str,
        slippage_bps: int,
    ) -> list[LiFiRoute]:
        """Request routes ordered CHEAPEST; raises NoRouteError when empty."""
        payload = {
            "fromChainId": from_chain_id,
            "fromTokenAddress": from_token_address,
            "fromAmount": str(from_amount),
            "toChainId": to_chain_id,
            "toTokenAddress": to_token_address,
            "fromAddress": from_address,
            "options": {
                "slippage": float(bps_to_fraction(slippage_bps)),
                "order": "CHEAPEST",
                "integrator": self.integrator,
                "allowSwitchChain": False,
            },
        }
        logger.debug(f"Requesting LI.FI routes: {payload}")
        data = await self._request("POST", "/advanced/routes", json=payload)

        routes = [LiFiRoute.from_json(route) for route in data.get("routes", [])]
        if not routes:
            raise NoRouteError(
                f"No routes found from {get_network_name(from_chain_id)} "
                f"to {get_network_name(to_chain_id)}"
            )
        return routes

    async def get_step_transaction(self, step: LiFiStep) -> dict:
        """Populate a step's transactionRequest."""
        data = await self._request("POST", "/advanced/stepTransaction", json=step.raw)
        if not data.get("transactionRequest"):
            raise AggregatorError(f"LI.FI returned no transaction for step {step.id}")
        return data

    async def get_status(
        self,
        tx_hash: str,
        from_chain_id: int,
        to_chain_id: int,
        bridge: Optional[str] = None,
    ) -> dict:
        """Cross-chain transfer status (PENDING, DONE, FAILED, ...)."""
        params = {"txHash": tx_hash, "fromChain": from_chain_id, "toChain": to_chain_id}
        if bridge:
            params["bridge"] = bridge
        return await self._request("GET", "/status", params=params)


async def request_routes(
    lifi: LiFiClient,
    params: SwapParams,
    from_address: str,
    to_address: str,
    amount_in: int,
    slippage_bps: int,
) -> list[LiFiRoute]:
    """Request routes for a swap request, quoted for its user address."""
    return await lifi.get_routes(
        from_chain_id=params.from_chain_id,
        from_token_address=from_address,
        from_amount=amount_in,
        to_chain_id=params.to_chain_id,
        to_token_address=to_address,
        from_address=params.user_address,
        slippage_bps=slippage_bps,
    )


def estimate_from_route(
    route: LiFiRoute,
    to_decimals: int,
    slippage_bps: int,
    strategy: str,
) -> SwapEstimate:
    """Build a SwapEstimate from a LI.FI route."""
    minimum = calculate_min_amount_out(route.to_amount, slippage_bps)

    price_impact = Decimal("0")
    if route.from_amount_usd and route.to_amount_usd is not None:
        loss = route.from_amount_usd - route.to_amount_usd
        price_impact = max(Decimal("0"), loss / route.from_amount_usd * 100)

    return SwapEstimate(
        expected_output=format_amount(route.to_amount, to_decimals),
        minimum_output=format_amount(minimum, to_decimals),
        price_impact_percent=price_impact,
        gas_cost_estimate=route.gas_cost_usd or Decimal("0"),
        gas_cost_currency="USD",
        strategy=strategy,
    )


class LiFiRouteExecutor:
    """Executes a LI.FI route one step at a time with the caller's signer."""

    def __init__(self, lifi: LiFiClient, clients: ChainClients):
        self.lifi = lifi
        self.clients = clients

    def _build_transaction(self, request: dict) -> dict:
        tx = {
            "to": request["to"],
            "data": request.get("data", "0x"),
            "value": _to_int(request.get("value")),
        }
        if request.get("gasLimit"):
            tx["gas"] = _to_int(request["gasLimit"])
        if request.get("gasPrice"):
            tx["gasPrice"] = _to_int(request["gasPrice"])
        return tx

    async def execute_route(
        self,
        route: LiFiRoute,
        signer: Signer,
        callbacks: SwapCallbacks,
    ) -> list[ExecutionStep]:
        """Run every step, awaiting each transaction before the next.

        Returns the dispatched transactions in order.
        """
        executed: list[ExecutionStep] = []

        for index, step in enumerate(route.steps):
            if signer.chain_id != step.from_chain_id:
                raise WrongNetworkError(
                    f"Wrong network: step {index + 1} runs on {get_network_name(step.from_chain_id)}, "
                    f"signer is on {get_network_name(signer.chain_id)}"
                )

            client = self.clients.get(step.from_chain_id)
            confirmations = get_confirmations(step.from_chain_id)

            if step.approval_address and not is_native_token(step.from_token_address):
                pending = await approve(
                    client, step.from_token_address, step.approval_address, step.from_amount, signer
                )
                if pending is not None:
                    logger.info(f"Step {index + 1}: approval submitted {pending.tx_hash}")
                    executed.append(ExecutionStep(
                        index=len(executed), kind="TOKEN_ALLOWANCE", tx_hash=pending.tx_hash,
                        chain_id=step.from_chain_id, tool=step.tool,
                    ))
                    callbacks.step(executed[-1])
                    callbacks.approval_submitted(pending.tx_hash)
                    await wait_for_approval(client, pending, confirmations)
                    callbacks.approval_confirmed()

            populated = await self.lifi.get_step_transaction(step)
            tx = self._build_transaction(populated["transactionRequest"])
            tx_hash = await signer.send_transaction(tx)

            kind = "CROSS_CHAIN" if step.is_cross_chain else "SWAP"
            logger.info(f"Step {index + 1}: {kind} submitted via {step.tool}: {tx_hash}")
            executed.append(ExecutionStep(
                index=len(executed), kind=kind, tx_hash=tx_hash,
                chain_id=step.from_chain_id, tool=step.tool,
            ))
            callbacks.step(executed[-1])
            callbacks.swap_submitted(tx_hash)

            pending = PendingTransaction(tx_hash=tx_hash, chain_id=step.from_chain_id, description=kind.lower())
            await wait_for_transaction(client, pending, confirmations, revert_error=SwapFailedError)

        return executed


async def wait_for_bridge_completion(
    lifi: LiFiClient,
    tx_hash: str,
    from_chain_id: int,
    to_chain_id: int,
    bridge: Optional[str] = None,
    timeout: Optional[float] = None,
    poll_interval: Optional[float] = None,
) -> dict:
    """Poll /status until the destination leg settles.

    Raises:
        SwapFailedError: if LI.FI reports the transfer FAILED
        ConfirmationTimeoutError: if not settled within timeout
    """
    settings = get_settings()
    timeout = settings.bridge_status_timeout if timeout is None else timeout
    poll_interval = settings.poll_interval if poll_interval is None else poll_interval

    loop = asyncio.get_running_loop()
    start_time = loop.time()

    while True:
        status = await lifi.get_status(tx_hash, from_chain_id, to_chain_id, bridge)
        state = status.get("status")
        if state == "DONE":
            logger.info(f"Bridge transfer {tx_hash} settled ({status.get('substatus', '')})")
            return status
        if state == "FAILED":
            raise SwapFailedError(f"Bridge transfer {tx_hash} failed: {status.get('substatusMessage', '')}", tx_hash)

        if loop.time() - start_time >= timeout:
            raise ConfirmationTimeoutError(
                f"Bridge transfer {tx_hash} not confirmed after {timeout}s", tx_hash
            )
        await asyncio.sleep(poll_interval)
