"""Request and response contracts for the web layer.

All contracts are for read-only operations: estimates, validation and
strategy statistics. Nothing here signs or sends transactions.
"""

from swapengine.web.contracts.chains import ChainInfo, ChainListResponse, TokenInfo
from swapengine.web.contracts.swaps import (
    PerformanceResponse,
    StrategyListResponse,
    StrategyPerformanceInfo,
    SwapEstimateResponse,
    SwapRequest,
    SwapValidationResponse,
)

__all__ = [
    # Chain contracts
    "ChainInfo",
    "ChainListResponse",
    "TokenInfo",
    # Swap contracts
    "SwapRequest",
    "SwapEstimateResponse",
    "SwapValidationResponse",
    "StrategyListResponse",
    "StrategyPerformanceInfo",
    "PerformanceResponse",
]
