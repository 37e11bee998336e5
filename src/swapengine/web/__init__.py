"""Web boundary layer.

This layer exposes estimates, validation and strategy statistics. It MUST NOT
construct a signer or call SwapOrchestrator.execute_swap: execution needs the
user's signer and happens client-side.
"""

__all__ = [
    "contracts",
    "services",
    "controllers",
]
