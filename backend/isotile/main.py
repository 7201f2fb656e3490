"""
Main application module for the isohedral tiling backend.

This file sets up the FastAPI application, configures CORS so a
browser-based editor can make cross-origin requests, and exposes a
simple health check endpoint.

Routers for the tiling and design APIs are included under the `/api`
namespace.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes_designs import router as designs_router
from .api.routes_tilings import router as tilings_router
from .services.designs_store import init_db
from .services.tiling_types import NUM_TYPES


def create_app() -> FastAPI:
    """Factory to create and configure the FastAPI application.

    Returns:
        FastAPI: The configured FastAPI application instance.
    """
    app = FastAPI(title="isotile")

    # Create the SQLite schema before any requests are processed.
    @app.on_event("startup")  # type: ignore[misc]
    async def startup_event() -> None:
        init_db()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    async def health() -> dict[str, object]:
        return {"status": "ok", "tilingTypes": NUM_TYPES}

    app.include_router(tilings_router, prefix="/api", tags=["tilings"])
    app.include_router(designs_router, prefix="/api", tags=["designs"])

    return app


app = create_app()
