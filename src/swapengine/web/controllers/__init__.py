"""HTTP controllers for web API endpoints.

SECURITY: These controllers MUST NOT sign or broadcast transactions.
"""

from swapengine.web.controllers.chains import router as chains_router
from swapengine.web.controllers.swaps import router as swaps_router

__all__ = ["chains_router", "swaps_router"]
