"""Swap API endpoints."""

from fastapi import APIRouter

from swapengine.web.contracts.swaps import (
    PerformanceResponse,
    StrategyListResponse,
    SwapEstimateResponse,
    SwapRequest,
    SwapValidationResponse,
)
from swapengine.web.services.swap_service import SwapService

router = APIRouter(prefix="/swaps", tags=["swaps"])

# Service instance
_swap_service = SwapService()


@router.post("/estimate", response_model=SwapEstimateResponse)
async def estimate_swap(request: SwapRequest) -> SwapEstimateResponse:
    """Estimate a swap with the best-ranked strategy.

    This is a READ-ONLY operation - no transactions are executed.
    """
    return await _swap_service.get_estimate(request)


@router.post("/validate", response_model=SwapValidationResponse)
async def validate_swap(request: SwapRequest) -> SwapValidationResponse:
    """Check that a swap can be serviced, and by which strategies."""
    return await _swap_service.validate(request)


@router.get("/strategies", response_model=StrategyListResponse)
async def get_strategies() -> StrategyListResponse:
    return _swap_service.get_strategies()


@router.get("/performance", response_model=PerformanceResponse)
async def get_performance() -> PerformanceResponse:
    """Rolling success rate and latency per strategy.

    The API only estimates and validates; swaps are signed and executed
    in-process by callers of SwapOrchestrator.execute_swap(). This reports
    the tracker of the service's own orchestrator, so it stays empty unless
    that orchestrator is shared with code that executes swaps.
    """
    return _swap_service.get_performance()
