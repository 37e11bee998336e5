"""Swap error taxonomy and user-facing error messages.

Strategy internals raise whatever their collaborators raise (web3, httpx,
signer errors). The orchestrator converts those into the classes below with
classify_error() and only ever shows users the output of
get_user_friendly_error().
"""

import asyncio
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class SwapError(Exception):
    """Base class for all swap errors."""

    code = "swap_error"


class InvalidSwapParamsError(SwapError, ValueError):
    """Raised when a swap request violates its own invariants."""

    code = "invalid_params"


class UnsupportedSwapError(SwapError):
    """Chain or token pair cannot be serviced."""

    code = "unsupported"


class NoRouteError(SwapError):
    """Discovery or the aggregator found no market for the pair."""

    code = "no_route"


class AggregatorError(SwapError):
    """The external route aggregator returned an error response."""

    code = "aggregator_error"


class WrongNetworkError(SwapError):
    """The signer is connected to a different chain than the swap source."""

    code = "wrong_network"


class TransactionRevertedError(SwapError):
    """An on-chain transaction was mined with a failed status."""

    code = "reverted"

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        super().__init__(message)
        self.tx_hash = tx_hash


class ApprovalFailedError(TransactionRevertedError):
    """The ERC-20 approval transaction reverted."""

    code = "approval_failed"


class SwapFailedError(TransactionRevertedError):
    """The swap transaction reverted."""


class ConfirmationTimeoutError(SwapError):
    """A submitted transaction was not confirmed within the wait bound.

    The transaction may still be mined later; callers decide whether to keep
    polling. It is never resubmitted.
    """

    code = "timeout"

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        super().__init__(message)
        self.tx_hash = tx_hash


class UserRejectedError(SwapError):
    """The signer declined to sign."""

    code = "user_rejected"


# Errors that must stop fail-over to the next strategy
FATAL_ERRORS = (UserRejectedError, ConfirmationTimeoutError, InvalidSwapParamsError)


_USER_REJECTION_MARKERS = ("user rejected", "user denied", "rejected by user", "action_rejected")
_REVERT_MARKERS = ("execution reverted", "reverted", "always failing transaction")


def classify_error(error: BaseException) -> SwapError:
    """Convert any exception raised by a strategy into the swap taxonomy."""
    if isinstance(error, SwapError):
        return error

    message = str(error) or type(error).__name__
    lowered = message.lower()

    if any(marker in lowered for marker in _USER_REJECTION_MARKERS):
        return UserRejectedError(message)

    if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
        return ConfirmationTimeoutError(message)

    if any(marker in lowered for marker in _REVERT_MARKERS):
        return TransactionRevertedError(message)

    if isinstance(error, httpx.HTTPError):
        return AggregatorError(f"{type(error).__name__}: {message}")

    if "no route" in lowered or "no exchange found" in lowered:
        return NoRouteError(message)

    return SwapError(message)


# Technical error substrings -> message shown to users (checked in order)
ERROR_MAPPINGS: dict[str, str] = {
    "Cannot read properties of undefined": "Swap service temporarily unavailable. Please try again.",
    "Insufficient liquidity": "Not enough liquidity for this amount. Try a smaller amount.",
    "Network congestion": "Network is busy. This may take longer than usual.",
    "Token not supported": "This token pair is not available on the current network.",
    "not available on": "This token pair is not available on the current network.",
    "No routes found": "No swap route available. Try a different amount or token pair.",
    "No exchange found": "No swap route available. Try a different amount or token pair.",
    "User rejected": "Transaction was cancelled.",
    "User denied": "Transaction was cancelled.",
    "Wrong network": "Please switch to the correct network in your wallet.",
    "insufficient funds": "Insufficient funds for gas fees. Please top up your wallet.",
    "nonce": "Transaction error. Please wait for pending transactions to complete.",
    "transaction underpriced": "Transaction underpriced. Please try again with a higher gas price.",
    "not confirmed after": (
        "Transaction is taking longer than expected. Check your wallet before trying again."
    ),
}

REVERT_MESSAGE = "Transaction failed due to price changes. Please try again."
GENERIC_MESSAGE = "Swap failed. Please try again or contact support."

# Error class code -> message, checked before the substring table
CODE_MESSAGES: dict[str, str] = {
    UserRejectedError.code: ERROR_MAPPINGS["User rejected"],
    ConfirmationTimeoutError.code: ERROR_MAPPINGS["not confirmed after"],
}


def get_user_friendly_error(technical_error: Optional[str]) -> str:
    """Convert a technical error string into a user-facing message.

    Unsupported-chain diagnostics ("... is not supported") pass through
    unchanged since they already name the chain or pair.
    """
    if not technical_error:
        return GENERIC_MESSAGE

    lowered = technical_error.lower()
    for technical, friendly in ERROR_MAPPINGS.items():
        if technical.lower() in lowered:
            return friendly

    if "is not supported" in lowered or lowered.startswith("no swap strategy available"):
        return technical_error

    if "revert" in lowered:
        return REVERT_MESSAGE

    return GENERIC_MESSAGE


def get_error_message(error: SwapError) -> str:
    """User-facing message for a classified error.

    The class code wins over the text, so a declined signature reads as a
    cancellation whatever wording the signer used.
    """
    message = CODE_MESSAGES.get(error.code)
    if message:
        return message
    return get_user_friendly_error(str(error))
