"""Swap service for estimates and validation.

This service asks the orchestrator for quotes but does NOT execute swaps.
Execution needs a signer, which only the caller's wallet holds.
"""

import logging
from typing import Optional

from swapengine.exceptions import InvalidSwapParamsError, classify_error, get_user_friendly_error
from swapengine.routing.orchestrator import SwapOrchestrator
from swapengine.swap.models import SwapParams
from swapengine.web.contracts.swaps import (
    PerformanceResponse,
    StrategyListResponse,
    StrategyPerformanceInfo,
    SwapEstimateResponse,
    SwapRequest,
    SwapValidationResponse,
)

logger = logging.getLogger(__name__)


class SwapService:
    """READ-ONLY service over the swap orchestrator."""

    def __init__(self, orchestrator: Optional[SwapOrchestrator] = None):
        self._orchestrator = orchestrator

    @property
    def orchestrator(self) -> SwapOrchestrator:
        """Lazily create the default orchestrator."""
        if self._orchestrator is None:
            from swapengine.routing.factory import create_orchestrator
            self._orchestrator = create_orchestrator()
        return self._orchestrator

    @staticmethod
    def _to_params(request: SwapRequest) -> SwapParams:
        return SwapParams(
            from_token=request.from_token,
            to_token=request.to_token,
            from_chain_id=request.from_chain_id,
            to_chain_id=request.to_chain_id,
            amount=str(request.amount),
            user_address=request.user_address,
            slippage_bps=request.slippage_bps,
        )

    async def get_estimate(self, request: SwapRequest) -> SwapEstimateResponse:
        """Estimate a swap with the top-ranked strategy."""
        try:
            params = self._to_params(request)
        except InvalidSwapParamsError as e:
            return SwapEstimateResponse(success=False, error=str(e))

        swap_type = self.orchestrator.get_swap_type(params)
        try:
            estimate = await self.orchestrator.get_estimate(params)
        except Exception as e:
            error = classify_error(e)
            logger.error(f"Failed to get estimate for {params.describe()}: {e}")
            return SwapEstimateResponse(
                success=False,
                swap_type=swap_type,
                error=get_user_friendly_error(str(error)),
            )

        return SwapEstimateResponse(
            success=True,
            swap_type=swap_type,
            strategy=estimate.strategy,
            expected_output=estimate.expected_output,
            minimum_output=estimate.minimum_output,
            price_impact_percent=estimate.price_impact_percent,
            gas_cost_estimate=estimate.gas_cost_estimate,
            gas_cost_currency=estimate.gas_cost_currency,
        )

    async def validate(self, request: SwapRequest) -> SwapValidationResponse:
        """Validate a swap with the top-ranked strategy."""
        try:
            params = self._to_params(request)
        except InvalidSwapParamsError as e:
            return SwapValidationResponse(valid=False, error=str(e))

        ranked = [s.name for s in self.orchestrator.get_ranked_strategies(params)]
        swap_type = self.orchestrator.get_swap_type(params)
        try:
            valid = await self.orchestrator.validate_swap(params)
        except Exception as e:
            logger.info(f"Swap validation failed for {params.describe()}: {e}")
            return SwapValidationResponse(
                valid=False,
                swap_type=swap_type,
                strategies=ranked,
                error=get_user_friendly_error(str(e)),
            )

        return SwapValidationResponse(valid=valid, swap_type=swap_type, strategies=ranked)

    def get_strategies(self) -> StrategyListResponse:
        return StrategyListResponse(strategies=self.orchestrator.get_supported_strategies())

    def get_performance(self) -> PerformanceResponse:
        # Only populated when swaps run through self.orchestrator
        stats = self.orchestrator.get_performance_stats()
        return PerformanceResponse(
            performance=[
                StrategyPerformanceInfo(
                    name=name,
                    success_rate=record.success_rate,
                    average_time=record.average_time,
                    last_updated=record.last_updated,
                )
                for name, record in stats.items()
            ]
        )
