"""Read-only services behind the web controllers."""

from swapengine.web.services.chain_service import ChainService
from swapengine.web.services.swap_service import SwapService

__all__ = ["ChainService", "SwapService"]
