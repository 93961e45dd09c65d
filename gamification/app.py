"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from gamification.config import Config
from gamification.datasources import DataSource, DataSourceError, SpreadsheetDataSource
from gamification.api import router
from gamification.api.dependencies import set_config, set_datasource

logger = logging.getLogger(__name__)


def create_app(config: Config | None = None, datasource: DataSource | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application configuration. If None, loads from environment.
        datasource: Data source to serve from. If None, uses the spreadsheet API.

    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = Config.from_env()

    if datasource is None:
        datasource = SpreadsheetDataSource(
            api_url=config.sheets_api_url,
            request_timeout=config.request_timeout,
            max_retries=config.max_retries,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup/shutdown."""
        # Startup
        logger.info("Starting Classroom Gamification API")
        logger.info(f"Using spreadsheet API: {config.sheets_api_url}")

        set_config(config)
        set_datasource(datasource)

        yield

        # Shutdown
        logger.info("Shutting down...")
        await datasource.close()

    app = FastAPI(
        title="Classroom Gamification API",
        description="Points, levels, badges and leaderboards for classroom gamification",
        version="1.0.0",
        lifespan=lifespan,
    )

    @app.exception_handler(DataSourceError)
    async def datasource_error_handler(request: Request, exc: DataSourceError):
        logger.error(f"Data source error on {request.url.path}: {exc}")
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    # Include API routes
    app.include_router(router)

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app
