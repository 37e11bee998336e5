"""Abstract swap strategy interface.

A strategy is one mechanism for fulfilling a swap (Mento broker, Uniswap V3,
LI.FI same-chain, LI.FI bridge). Strategies raise on failure; the orchestrator
classifies the error and decides whether to fail over.
"""

from abc import ABC, abstractmethod
from typing import Optional

from swapengine.chains import get_network_name, get_token_address
from swapengine.config import get_settings
from swapengine.exceptions import UnsupportedSwapError, WrongNetworkError
from swapengine.swap.models import SwapCallbacks, SwapEstimate, SwapParams, SwapResult
from swapengine.swap.signer import Signer


class SwapStrategy(ABC):
    """Abstract base class for swap strategies."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Stable identifier, used as the performance-tracking key."""
        pass

    @abstractmethod
    def supports(self, params: SwapParams) -> bool:
        """Cheap filter: no network access."""
        pass

    @abstractmethod
    async def validate(self, params: SwapParams) -> bool:
        """Check token and contract availability.

        Raises:
            UnsupportedSwapError: describing what is missing
        """
        pass

    @abstractmethod
    async def get_estimate(self, params: SwapParams) -> SwapEstimate:
        """Quote the swap without sending anything."""
        pass

    @abstractmethod
    async def execute(
        self,
        params: SwapParams,
        signer: Signer,
        callbacks: Optional[SwapCallbacks] = None,
    ) -> SwapResult:
        """Run the swap to confirmation of its primary transaction.

        Callbacks report progress only; they never influence control flow.
        """
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


def resolve_slippage_bps(params: SwapParams) -> int:
    """Request slippage, or the configured default."""
    if params.slippage_bps is not None:
        return params.slippage_bps
    return get_settings().default_slippage_bps


def require_token_address(chain_id: int, symbol: str) -> str:
    """Look up a token address or raise UnsupportedSwapError."""
    address = get_token_address(chain_id, symbol)
    if not address:
        raise UnsupportedSwapError(f"Token {symbol} not available on {get_network_name(chain_id)}")
    return address


def require_pair_addresses(params: SwapParams) -> tuple[str, str]:
    """Resolve both endpoints of a swap, naming the pair when either is missing."""
    from_address = get_token_address(params.from_chain_id, params.from_token)
    to_address = get_token_address(params.to_chain_id, params.to_token)

    if params.is_same_chain and (not from_address or not to_address):
        raise UnsupportedSwapError(
            f"Token pair {params.from_token}/{params.to_token} not available on "
            f"{get_network_name(params.from_chain_id)}"
        )

    if not from_address:
        raise UnsupportedSwapError(
            f"Token {params.from_token} not available on {get_network_name(params.from_chain_id)}"
        )
    if not to_address:
        raise UnsupportedSwapError(
            f"Token {params.to_token} not available on {get_network_name(params.to_chain_id)}"
        )
    return from_address, to_address


def require_signer_chain(signer: Signer, chain_id: int) -> None:
    """Raise WrongNetworkError unless the signer is connected to chain_id."""
    if signer.chain_id != chain_id:
        raise WrongNetworkError(
            f"Wrong network: signer is on {get_network_name(signer.chain_id)}, "
            f"swap requires {get_network_name(chain_id)}"
        )
