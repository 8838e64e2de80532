# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from beartype import beartype
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.dependencies import ServiceContainer, build_container
from .api.v1 import router as v1_router
from .core.config import Settings, get_settings
from .core.logging_utils import configure_logging, get_logger
from .schemas.common import APIInfo

logger = get_logger(__name__)


@beartype
def create_app(
    settings: Settings | None = None, container: ServiceContainer | None = None
) -> FastAPI:
    """Create and configure the FastAPI application.

    A prebuilt ``container`` replaces the default in-memory wiring (tests
    use this to inject gateways or shared stores).
    """
    settings = settings or get_settings()
    configure_logging(level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Starting autobind in %s mode", settings.api_env)
        yield
        app.state.container.close()
        logger.info("Stopped autobind")

    app = FastAPI(
        title="autobind",
        description="Personal auto quote and bind API",
        version=__version__,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
        lifespan=lifespan,
    )
    app.state.container = container or build_container(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(v1_router)

    @app.get("/")
    async def root() -> APIInfo:
        """Root endpoint returning API information."""
        return APIInfo(
            name="autobind",
            version=__version__,
            status="operational",
            environment=settings.api_env,
        )

    return app


@beartype
def main() -> None:
    """Run the API server."""
    settings = get_settings()
    uvicorn.run(
        "autobind.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_env == "development",
        log_level="info" if not settings.is_production else "error",
    )


if __name__ == "__main__":
    main()
