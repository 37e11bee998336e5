"""On-chain swap building blocks: discovery, approval, execution."""

from swapengine.swap.models import (
    ApprovalStatus,
    ExchangeInfo,
    ExecutionStep,
    PendingTransaction,
    StrategyPerformance,
    SwapCallbacks,
    SwapEstimate,
    SwapParams,
    SwapResult,
    TwoHopExchange,
)

__all__ = [
    "ApprovalStatus",
    "ExchangeInfo",
    "ExecutionStep",
    "PendingTransaction",
    "StrategyPerformance",
    "SwapCallbacks",
    "SwapEstimate",
    "SwapParams",
    "SwapResult",
    "TwoHopExchange",
]
