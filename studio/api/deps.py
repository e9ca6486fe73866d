"""FastAPI dependencies for dependency injection.

Provides reusable dependencies for routes including:
- The project store
- The component factory and preview hub
- Mapping of domain errors to HTTP errors
"""

import logging

from fastapi import Depends, HTTPException, status
from fastapi.requests import HTTPConnection

from studio.core.factory import ComponentFactory
from studio.interfaces.store import BaseProjectStore, ProjectNotFoundError, StoreError
from studio.interfaces.template import (
    AnchorNotFoundError,
    BlueprintError,
    CrossListSwapError,
    ElementNotFoundError,
    PlaceholderNotFoundError,
    TemplateParseError,
)
from studio.strategies.preview import PreviewHub

logger = logging.getLogger(__name__)


def get_factory(connection: HTTPConnection) -> ComponentFactory:
    """Dependency for the application's component factory."""
    return connection.app.state.factory


def get_store(connection: HTTPConnection) -> BaseProjectStore:
    """Dependency for the project store.

    Raises:
        HTTPException: If the store hasn't been initialized.
    """
    store = getattr(connection.app.state, "store", None)
    if store is None:
        logger.error("Project store requested before startup finished")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Project store unavailable",
        )
    return store


def get_hub(factory: ComponentFactory = Depends(get_factory)) -> PreviewHub:
    """Dependency for the process-wide preview hub."""
    return factory.get_preview_hub()


def http_error_for(error: Exception) -> HTTPException:
    """Translate a domain error into the HTTP error the API reports.

    Args:
        error: An engine, blueprint or store error.

    Returns:
        The HTTPException to raise.
    """
    match error:
        case ProjectNotFoundError() | PlaceholderNotFoundError() | ElementNotFoundError():
            code = status.HTTP_404_NOT_FOUND
        case AnchorNotFoundError() | CrossListSwapError():
            code = status.HTTP_409_CONFLICT
        case TemplateParseError() | BlueprintError():
            code = status.HTTP_422_UNPROCESSABLE_ENTITY
        case StoreError():
            code = status.HTTP_503_SERVICE_UNAVAILABLE
        case _:
            code = status.HTTP_500_INTERNAL_SERVER_ERROR

    if code >= 500:
        logger.error(f"Request failed: {error}", exc_info=error)
    else:
        logger.info(f"Request rejected ({code}): {error}")
    return HTTPException(status_code=code, detail=str(error))
