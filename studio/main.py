"""FastAPI application entry point.

Wires the project, editor and preview routers onto one app and owns the
project store lifecycle.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from studio import __version__
from studio.api.editor import router as editor_router
from studio.api.preview import router as preview_router
from studio.api.projects import router as projects_router
from studio.api.schemas import ErrorResponse
from studio.core.config import Settings, get_settings
from studio.core.factory import ComponentFactory
from studio.core.logging_config import setup_logging
from studio.db.session import close_db, get_session_maker, init_db
from studio.db.store import SqlProjectStore
from studio.interfaces.store import BaseProjectStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Opens the SQL project store on startup unless a store was injected.
    """
    settings: Settings = app.state.settings
    owns_store = app.state.store is None

    logger.info(f"Starting Template Studio {__version__}")

    if owns_store:
        try:
            await init_db(settings)
            app.state.store = SqlProjectStore(get_session_maker(settings))
            logger.info("SQL project store ready")
        except Exception as e:
            logger.error(f"Could not open project store at {settings.database_url}: {e}", exc_info=True)
            raise

    yield

    logger.info("Stopping Template Studio")

    if owns_store:
        try:
            await close_db()
        except Exception as e:
            logger.error(f"Error closing database: {e}", exc_info=True)


def create_app(
    settings: Settings | None = None,
    store: BaseProjectStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings. If None, loads from environment.
        store: Optional project store. If None, a SQL store is opened at startup.

    Returns:
        Configured FastAPI application instance.
    """
    try:
        settings = settings or get_settings()

        app = FastAPI(
            title="Template Studio",
            description="Form-driven editing of HTML templates with live preview",
            version=__version__,
            lifespan=lifespan,
            docs_url="/docs",
            redoc_url="/redoc",
        )

        # Routers resolve these through studio.api.deps
        app.state.settings = settings
        app.state.factory = ComponentFactory(settings)
        app.state.store = store

        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        app.include_router(projects_router)
        app.include_router(editor_router)
        app.include_router(preview_router)
        logger.info("Registered projects, editor and preview routers")

        # Health check endpoint
        @app.get("/health", tags=["health"])
        async def health_check():
            """Report liveness and whether a project store is attached."""
            return {
                "status": "healthy",
                "version": __version__,
                "store": app.state.store is not None,
            }

        # Exception handlers
        @app.exception_handler(RequestValidationError)
        async def validation_exception_handler(request, exc):
            """Handle Pydantic validation errors."""
            logger.warning(f"Validation error: {exc.errors()}")
            return JSONResponse(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                content=ErrorResponse(
                    detail="Validation error",
                    error_code="VALIDATION_ERROR",
                    extra={"errors": jsonable_errors(exc.errors())},
                ).model_dump(),
            )

        @app.exception_handler(Exception)
        async def general_exception_handler(request, exc):
            """Handle uncaught exceptions."""
            logger.error(f"Unhandled exception: {exc}", exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=ErrorResponse(
                    detail="Internal server error",
                    error_code="INTERNAL_ERROR",
                ).model_dump(),
            )

        return app

    except Exception as e:
        logger.error(f"Failed to create FastAPI app: {e}", exc_info=True)
        raise


def jsonable_errors(errors: list) -> list:
    """Drop validation error fields that aren't JSON serializable."""
    return [{k: v for k, v in error.items() if k != "ctx"} for error in errors]


def build_app() -> FastAPI:
    """Configure logging and build the app from the environment; used by uvicorn."""
    setup_logging()
    return create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "studio.main:build_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
