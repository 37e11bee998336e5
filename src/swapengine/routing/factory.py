"""Factory for swap strategies and the orchestrator."""

import logging
from typing import Optional

from swapengine.routing.base import SwapStrategy
from swapengine.routing.lifi import LiFiClient
from swapengine.routing.orchestrator import SwapOrchestrator
from swapengine.routing.performance import PerformanceTracker
from swapengine.swap.client import ChainClients

logger = logging.getLogger(__name__)


def create_mento_strategy(clients: Optional[ChainClients] = None) -> SwapStrategy:
    """Create the Mento broker strategy (Celo)."""
    from swapengine.routing.mento import MentoBrokerStrategy
    return MentoBrokerStrategy(clients=clients)


def create_uniswap_v3_strategy(clients: Optional[ChainClients] = None) -> SwapStrategy:
    """Create the Uniswap V3 strategy (Arbitrum)."""
    from swapengine.routing.uniswap_v3 import UniswapV3Strategy
    return UniswapV3Strategy(clients=clients)


def create_lifi_swap_strategy(
    lifi: Optional[LiFiClient] = None,
    clients: Optional[ChainClients] = None,
) -> SwapStrategy:
    """Create the LI.FI same-chain strategy."""
    from swapengine.routing.lifi_swap import LiFiSwapStrategy
    return LiFiSwapStrategy(lifi=lifi, clients=clients)


def create_lifi_bridge_strategy(
    lifi: Optional[LiFiClient] = None,
    clients: Optional[ChainClients] = None,
) -> SwapStrategy:
    """Create the LI.FI cross-chain strategy."""
    from swapengine.routing.lifi_bridge import LiFiBridgeStrategy
    return LiFiBridgeStrategy(lifi=lifi, clients=clients)


def create_default_strategies(
    lifi: Optional[LiFiClient] = None,
    clients: Optional[ChainClients] = None,
) -> list[SwapStrategy]:
    """All strategies in registration order (the ranking tie-break order).

    The strategies share one chain-client cache and one LI.FI client.
    """
    clients = clients or ChainClients()
    lifi = lifi or LiFiClient()

    strategies = [
        create_mento_strategy(clients),
        create_uniswap_v3_strategy(clients),
        create_lifi_swap_strategy(lifi, clients),
        create_lifi_bridge_strategy(lifi, clients),
    ]
    logger.info(f"Created strategies: {', '.join(s.name for s in strategies)}")
    return strategies


def create_orchestrator(
    strategies: Optional[list[SwapStrategy]] = None,
    tracker: Optional[PerformanceTracker] = None,
) -> SwapOrchestrator:
    """Create an orchestrator, with the default strategies unless given."""
    if strategies is None:
        strategies = create_default_strategies()
    return SwapOrchestrator(strategies, tracker=tracker)
