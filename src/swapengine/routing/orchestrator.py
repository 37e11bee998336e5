"""Swap orchestrator.

Ranks the strategies that support a request, executes them in order until
one succeeds, and keeps rolling success/latency statistics per strategy.
"""

import logging
import time
from typing import Optional

from swapengine.chains import get_chain_type, get_network_name, is_cross_chain, is_supported
from swapengine.config import (
    CROSS_CHAIN_BRIDGE_BONUS,
    CROSS_CHAIN_OTHER_BONUS,
    LATENCY_CEILING_SECONDS,
    LATENCY_WEIGHT,
    STRATEGY_SCORES,
    SUCCESS_RATE_WEIGHT,
    TOKEN_PREFERENCES,
    get_settings,
)
from swapengine.exceptions import (
    FATAL_ERRORS,
    SwapError,
    UnsupportedSwapError,
    classify_error,
    get_error_message,
    get_user_friendly_error,
)
from swapengine.routing.base import SwapStrategy
from swapengine.routing.performance import PerformanceTracker
from swapengine.swap.models import (
    StrategyPerformance,
    SwapCallbacks,
    SwapEstimate,
    SwapParams,
    SwapResult,
)
from swapengine.swap.signer import Signer

logger = logging.getLogger(__name__)

BRIDGE_STRATEGY_NAME = "LiFiBridge"


class SwapOrchestrator:
    """Selects and runs swap strategies with automatic fail-over."""

    def __init__(
        self,
        strategies: list[SwapStrategy],
        tracker: Optional[PerformanceTracker] = None,
        enable_performance_tracking: Optional[bool] = None,
    ):
        self.strategies = list(strategies)
        self.tracker = tracker or PerformanceTracker()
        if enable_performance_tracking is None:
            enable_performance_tracking = get_settings().enable_performance_tracking
        self.enable_performance_tracking = enable_performance_tracking

    # ======================
    # Ranking
    # ======================

    def get_strategy_score(self, strategy: SwapStrategy, params: SwapParams) -> float:
        """Score a strategy for a request; higher runs first."""
        name = strategy.name
        score = float(STRATEGY_SCORES.get(params.from_chain_id, {}).get(name, 0))

        if is_cross_chain(params.from_chain_id, params.to_chain_id):
            score += CROSS_CHAIN_BRIDGE_BONUS if name == BRIDGE_STRATEGY_NAME else CROSS_CHAIN_OTHER_BONUS

        if self.enable_performance_tracking:
            performance = self.tracker.get_or_prior(name)
            score += performance.success_rate * SUCCESS_RATE_WEIGHT
            score += max(0.0, LATENCY_CEILING_SECONDS - performance.average_time) * LATENCY_WEIGHT

        # Destination token preferences win over source token preferences
        token_prefs = TOKEN_PREFERENCES.get(params.to_token) or TOKEN_PREFERENCES.get(params.from_token)
        if token_prefs:
            score += token_prefs.get(name, 0)

        return score

    def get_ranked_strategies(self, params: SwapParams) -> list[SwapStrategy]:
        """Supporting strategies, best first (stable for equal scores)."""
        candidates = [s for s in self.strategies if s.supports(params)]
        return sorted(candidates, key=lambda s: self.get_strategy_score(s, params), reverse=True)

    def get_no_strategy_error(self, params: SwapParams) -> str:
        """Describe which chain or pair no strategy can serve."""
        if not is_supported(params.from_chain_id):
            return (
                f"Source chain {get_network_name(params.from_chain_id)} "
                f"({params.from_chain_id}) is not supported"
            )
        if not is_supported(params.to_chain_id):
            return (
                f"Destination chain {get_network_name(params.to_chain_id)} "
                f"({params.to_chain_id}) is not supported"
            )
        return (
            f"No swap strategy available for {params.from_token}/{params.to_token} "
            f"on {get_network_name(params.from_chain_id)}"
        )

    # ======================
    # Operations
    # ======================

    async def execute_swap(
        self,
        params: SwapParams,
        signer: Signer,
        callbacks: Optional[SwapCallbacks] = None,
    ) -> SwapResult:
        """Execute a swap, failing over to the next strategy on error.

        First success wins. User rejection and confirmation timeouts stop
        fail-over: another strategy's transaction must not follow one the
        user declined or one that may still be mined.
        """
        logger.info(f"Executing swap: {params.describe()}")

        ranked = self.get_ranked_strategies(params)
        if not ranked:
            error = self.get_no_strategy_error(params)
            logger.error(error)
            return SwapResult.failed(get_user_friendly_error(error), UnsupportedSwapError.code)

        last_error: Optional[SwapError] = None

        for strategy in ranked:
            logger.info(f"Trying strategy: {strategy.name}")
            start_time = time.monotonic()

            try:
                result = await strategy.execute(params, signer, callbacks)
            except Exception as e:
                self._record(strategy.name, False, time.monotonic() - start_time)
                last_error = classify_error(e)
                logger.warning(f"{strategy.name} failed ({last_error.code}): {e}")
                if isinstance(last_error, FATAL_ERRORS):
                    logger.info(f"Not failing over after {last_error.code} from {strategy.name}")
                    break
                continue

            if result.success:
                self._record(strategy.name, True, time.monotonic() - start_time)
                result.strategy = result.strategy or strategy.name
                logger.info(f"Success with {strategy.name}: {result.tx_hash}")
                return result

            self._record(strategy.name, False, time.monotonic() - start_time)
            last_error = SwapError(result.error or f"{strategy.name} failed")
            logger.warning(f"{strategy.name} returned failure: {result.error}")

        if last_error is None:
            last_error = SwapError("All swap methods are currently unavailable")

        return SwapResult.failed(get_error_message(last_error), last_error.code)

    async def get_estimate(self, params: SwapParams) -> SwapEstimate:
        """Estimate from the top-ranked strategy; its errors propagate."""
        ranked = self.get_ranked_strategies(params)
        if not ranked:
            raise UnsupportedSwapError(get_user_friendly_error(self.get_no_strategy_error(params)))
        return await ranked[0].get_estimate(params)

    async def validate_swap(self, params: SwapParams) -> bool:
        """Validate against the top-ranked strategy; its errors propagate."""
        ranked = self.get_ranked_strategies(params)
        if not ranked:
            raise UnsupportedSwapError(get_user_friendly_error(self.get_no_strategy_error(params)))
        return await ranked[0].validate(params)

    def get_supported_strategies(self) -> list[str]:
        return [s.name for s in self.strategies]

    def is_swap_supported(self, params: SwapParams) -> bool:
        return any(s.supports(params) for s in self.strategies)

    def get_swap_type(self, params: SwapParams) -> str:
        """'cross-chain' or '<family>-same-chain'."""
        if is_cross_chain(params.from_chain_id, params.to_chain_id):
            return "cross-chain"
        return f"{get_chain_type(params.from_chain_id)}-same-chain"

    def get_performance_stats(self) -> dict[str, StrategyPerformance]:
        return self.tracker.snapshot()

    def _record(self, name: str, success: bool, duration: float) -> None:
        self.tracker.update(name, success, duration)
