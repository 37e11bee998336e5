"""Swap strategies and orchestration.

Strategies:
- MentoBroker: Celo same-chain swaps through the Mento broker (CUSD hub)
- UniswapV3: same-chain single-pool swaps on Uniswap V3 (Arbitrum)
- LiFiSwap: same-chain swaps aggregated by LI.FI (Celo, Arbitrum)
- LiFiBridge: cross-chain swaps and bridges through LI.FI
"""

from swapengine.routing.base import SwapStrategy
from swapengine.routing.factory import (
    create_default_strategies,
    create_lifi_bridge_strategy,
    create_lifi_swap_strategy,
    create_mento_strategy,
    create_orchestrator,
    create_uniswap_v3_strategy,
)
from swapengine.routing.lifi import LiFiClient, LiFiRoute, LiFiRouteExecutor
from swapengine.routing.lifi_bridge import LiFiBridgeStrategy
from swapengine.routing.lifi_swap import LiFiSwapStrategy
from swapengine.routing.mento import MentoBrokerStrategy
from swapengine.routing.orchestrator import SwapOrchestrator
from swapengine.routing.performance import PerformanceTracker
from swapengine.routing.uniswap_v3 import UniswapV3Strategy

__all__ = [
    # Base classes
    "SwapStrategy",
    "SwapOrchestrator",
    "PerformanceTracker",
    # Strategies
    "MentoBrokerStrategy",
    "UniswapV3Strategy",
    "LiFiSwapStrategy",
    "LiFiBridgeStrategy",
    # LI.FI
    "LiFiClient",
    "LiFiRoute",
    "LiFiRouteExecutor",
    # Factory functions
    "create_default_strategies",
    "create_mento_strategy",
    "create_uniswap_v3_strategy",
    "create_lifi_swap_strategy",
    "create_lifi_bridge_strategy",
    "create_orchestrator",
]
