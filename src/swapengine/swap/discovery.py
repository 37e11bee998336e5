"""Exchange discovery against the Mento broker.

The broker lists exchange providers; each provider lists its exchanges
(exchange ID plus the asset addresses it trades). Discovery is first-match:
when several providers list the same pair, the first one enumerated wins.
"""

import logging
from typing import Optional

from swapengine.swap.abis import BROKER_ABI, EXCHANGE_PROVIDER_ABI
from swapengine.swap.client import ChainClient
from swapengine.swap.models import ExchangeInfo, TwoHopExchange

logger = logging.getLogger(__name__)


async def find_direct_exchange(
    client: ChainClient,
    registry: str,
    from_token: str,
    to_token: str,
) -> Optional[ExchangeInfo]:
    """Find the first exchange whose assets include both tokens."""
    from_lower = from_token.lower()
    to_lower = to_token.lower()

    providers = await client.call(registry, BROKER_ABI, "getExchangeProviders")

    for provider in providers:
        exchanges = await client.call(provider, EXCHANGE_PROVIDER_ABI, "getExchanges")
        for exchange_id, assets in exchanges:
            asset_set = {asset.lower() for asset in assets}
            if from_lower in asset_set and to_lower in asset_set:
                logger.debug(f"Direct exchange for {from_token}/{to_token} via provider {provider}")
                return ExchangeInfo(provider=provider, exchange_id=bytes(exchange_id))

    return None


async def find_two_hop_exchange(
    client: ChainClient,
    registry: str,
    from_token: str,
    to_token: str,
    hub_token: str,
) -> Optional[TwoHopExchange]:
    """Find from -> hub and hub -> to exchanges.

    Returns None when the hub is one of the endpoints or when either leg is
    missing.
    """
    hub_lower = hub_token.lower()
    if from_token.lower() == hub_lower or to_token.lower() == hub_lower:
        return None

    first = await find_direct_exchange(client, registry, from_token, hub_token)
    if first is None:
        return None

    second = await find_direct_exchange(client, registry, hub_token, to_token)
    if second is None:
        return None

    return TwoHopExchange(first=first, second=second)


async def get_quote(
    client: ChainClient,
    registry: str,
    exchange: ExchangeInfo,
    from_token: str,
    to_token: str,
    amount_in: int,
) -> int:
    """Quote `amount_in` base units of from_token through one exchange."""
    amount_out = await client.call(
        registry,
        BROKER_ABI,
        "getAmountOut",
        exchange.provider,
        exchange.exchange_id,
        from_token,
        to_token,
        amount_in,
    )
    return int(amount_out)
