"""FastAPI application factory."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from swapengine.config import get_settings


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Swapengine API",
        description="Swap routing, estimation and strategy statistics",
        version="0.1.0",
        debug=settings.debug,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routes
    from swapengine.api.routes import health
    from swapengine.web.controllers import chains_router, swaps_router

    app.include_router(health.router, tags=["Health"])
    app.include_router(chains_router, prefix="/api/v1")
    app.include_router(swaps_router, prefix="/api/v1")

    return app


# Default app instance
app = create_app()
