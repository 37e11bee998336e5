"""Swap request, estimate and result types."""

import logging
import time
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from swapengine.exceptions import InvalidSwapParamsError

logger = logging.getLogger(__name__)


@dataclass
class SwapParams:
    """A request to swap `amount` of from_token into to_token.

    Token symbols are normalised to upper case. The amount is a decimal string
    in human units (e.g. "1.5").
    """

    from_token: str
    to_token: str
    from_chain_id: int
    to_chain_id: int
    amount: str
    user_address: str
    slippage_bps: Optional[int] = None

    def __post_init__(self):
        self.from_token = self.from_token.strip().upper()
        self.to_token = self.to_token.strip().upper()
        self.amount = str(self.amount).strip()

        try:
            value = Decimal(self.amount)
        except InvalidOperation:
            raise InvalidSwapParamsError(f"Invalid amount: {self.amount}")

        if not value.is_finite() or value <= 0:
            raise InvalidSwapParamsError(f"Amount must be greater than zero: {self.amount}")

        if self.from_chain_id == self.to_chain_id and self.from_token == self.to_token:
            raise InvalidSwapParamsError(
                f"Cannot swap {self.from_token} into itself on the same chain"
            )

        if self.slippage_bps is not None and not 0 <= self.slippage_bps <= 10_000:
            raise InvalidSwapParamsError(
                f"Slippage must be between 0 and 10000 bps, got {self.slippage_bps}"
            )

    @property
    def amount_decimal(self) -> Decimal:
        return Decimal(self.amount)

    @property
    def is_same_chain(self) -> bool:
        return self.from_chain_id == self.to_chain_id

    def describe(self) -> str:
        """Short description for logs."""
        return (
            f"{self.amount} {self.from_token} (chain {self.from_chain_id}) -> "
            f"{self.to_token} (chain {self.to_chain_id})"
        )


@dataclass
class SwapEstimate:
    """Quoted outcome of a swap. minimum_output never exceeds expected_output."""

    expected_output: Decimal
    minimum_output: Decimal
    price_impact_percent: Decimal
    gas_cost_estimate: Decimal
    gas_cost_currency: str = ""
    strategy: str = ""

    def __post_init__(self):
        if self.minimum_output > self.expected_output:
            raise ValueError(
                f"minimum_output {self.minimum_output} exceeds expected_output {self.expected_output}"
            )


@dataclass
class ExecutionStep:
    """One transaction dispatched while executing a swap."""

    index: int
    kind: str  # TOKEN_ALLOWANCE, SWAP or CROSS_CHAIN
    tx_hash: str
    chain_id: int
    tool: Optional[str] = None


@dataclass
class SwapResult:
    """Outcome of a swap execution.

    On success tx_hash is the primary transaction (the final hop, or the
    source-chain leg of a bridge). On failure only error/error_code matter.
    """

    success: bool
    tx_hash: Optional[str] = None
    approval_tx_hash: Optional[str] = None
    steps: list[ExecutionStep] = field(default_factory=list)
    error: Optional[str] = None
    error_code: Optional[str] = None
    strategy: Optional[str] = None

    @classmethod
    def failed(
        cls,
        error: str,
        error_code: Optional[str] = None,
        strategy: Optional[str] = None,
    ) -> "SwapResult":
        return cls(success=False, error=error, error_code=error_code, strategy=strategy)


@dataclass(frozen=True)
class ExchangeInfo:
    """A broker market: the exchange provider contract plus its exchange ID."""

    provider: str
    exchange_id: bytes


@dataclass(frozen=True)
class TwoHopExchange:
    """Markets for from -> hub and hub -> to."""

    first: ExchangeInfo
    second: ExchangeInfo


@dataclass
class ApprovalStatus:
    """Live allowance check result (base units)."""

    is_approved: bool
    current_allowance: int
    required_allowance: int


@dataclass
class PendingTransaction:
    """A broadcast transaction awaiting confirmation."""

    tx_hash: str
    chain_id: int
    description: str = "transaction"


@dataclass
class StrategyPerformance:
    """Rolling success rate and latency of one strategy (EMA)."""

    success_rate: float = 0.9
    average_time: float = 30.0
    last_updated: float = field(default_factory=time.time)


@dataclass
class SwapCallbacks:
    """Optional progress hooks, fired as each transaction is dispatched.

    Hooks are for reporting only; an exception raised by a hook is logged and
    does not interrupt the swap.
    """

    on_approval_submitted: Optional[Callable[[str], None]] = None
    on_approval_confirmed: Optional[Callable[[], None]] = None
    on_swap_submitted: Optional[Callable[[str], None]] = None
    on_step: Optional[Callable[[ExecutionStep], None]] = None

    def approval_submitted(self, tx_hash: str) -> None:
        self._fire("on_approval_submitted", tx_hash)

    def approval_confirmed(self) -> None:
        self._fire("on_approval_confirmed")

    def swap_submitted(self, tx_hash: str) -> None:
        self._fire("on_swap_submitted", tx_hash)

    def step(self, step: ExecutionStep) -> None:
        self._fire("on_step", step)

    def _fire(self, hook_name: str, *args) -> None:
        hook = getattr(self, hook_name)
        if hook is None:
            return
        try:
            hook(*args)
        except Exception:
            logger.exception(f"Swap callback {hook_name} raised")
