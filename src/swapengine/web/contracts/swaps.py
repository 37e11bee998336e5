"""Swap estimate/validation request and response contracts."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class SwapRequest(BaseModel):
    """A swap to estimate or validate."""

    from_token: str = Field(..., description="Source token symbol (e.g., CUSD)")
    to_token: str = Field(..., description="Destination token symbol")
    from_chain_id: int = Field(..., description="Source chain ID")
    to_chain_id: int = Field(..., description="Destination chain ID")
    amount: Decimal = Field(..., gt=0, description="Amount to swap in human units")
    user_address: str = Field(..., description="Address that will sign the swap")
    slippage_bps: Optional[int] = Field(
        default=None,
        ge=0,
        le=10000,
        description="Slippage tolerance in basis points (default from settings)",
    )


class SwapEstimateResponse(BaseModel):
    """Quote from the top-ranked strategy."""

    success: bool = Field(..., description="Whether an estimate was produced")
    swap_type: Optional[str] = Field(None, description="cross-chain or <family>-same-chain")
    strategy: Optional[str] = Field(None, description="Strategy that produced the estimate")
    expected_output: Optional[Decimal] = Field(None, description="Expected output amount")
    minimum_output: Optional[Decimal] = Field(None, description="Output floor after slippage")
    price_impact_percent: Optional[Decimal] = Field(None, description="Price impact in percent")
    gas_cost_estimate: Optional[Decimal] = Field(None, description="Estimated gas cost")
    gas_cost_currency: Optional[str] = Field(None, description="Currency of the gas estimate")
    error: Optional[str] = Field(None, description="User-facing error if failed")


class SwapValidationResponse(BaseModel):
    """Validation result from the top-ranked strategy."""

    valid: bool
    swap_type: Optional[str] = None
    strategies: list[str] = Field(default_factory=list, description="Ranked candidate strategies")
    error: Optional[str] = None


class StrategyPerformanceInfo(BaseModel):
    """Rolling statistics of one strategy."""

    name: str
    success_rate: float
    average_time: float
    last_updated: float


class StrategyListResponse(BaseModel):
    success: bool = True
    strategies: list[str] = Field(default_factory=list)


class PerformanceResponse(BaseModel):
    success: bool = True
    performance: list[StrategyPerformanceInfo] = Field(default_factory=list)
