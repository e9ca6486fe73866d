"""Project API routes.

Creates, loads, saves and deletes project records. Saving pushes the new
template and state to every open preview of the project.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from studio.api.deps import get_hub, get_store, http_error_for
from studio.api.schemas import ErrorResponse, ProjectCreate, ProjectResponse, ProjectUpdate
from studio.interfaces.store import BaseProjectStore, StoreError
from studio.interfaces.template import BlueprintError
from studio.strategies.blueprint import DEFAULT_BLUEPRINT, parse_blueprint
from studio.strategies.preview import PreviewHub

logger = logging.getLogger(__name__)


router = APIRouter(
    prefix="/projects",
    tags=["projects"],
    responses={
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_project(
    payload: ProjectCreate,
    store: BaseProjectStore = Depends(get_store),
) -> ProjectResponse:
    """Create a project from a blueprint, a template or the starter page.

    Args:
        payload: Blueprint text, or a template and state.
        store: The project store.

    Returns:
        The created project record.

    Raises:
        HTTPException: 422 for an invalid blueprint, 503 if the store fails.
    """
    try:
        if payload.blueprint is not None:
            blueprint = parse_blueprint(payload.blueprint)
            html, state = blueprint.html, blueprint.state
        elif payload.html is not None:
            html, state = payload.html, payload.state
        else:
            html, state = DEFAULT_BLUEPRINT.html, dict(DEFAULT_BLUEPRINT.state)

        record = await store.create(html, state)
        logger.info(f"Created project {record.id}")
        return ProjectResponse.model_validate(record)

    except HTTPException:
        raise
    except (BlueprintError, StoreError) as e:
        raise http_error_for(e) from e
    except Exception as e:
        logger.error(f"Error creating project: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create project",
        ) from e


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    store: BaseProjectStore = Depends(get_store),
) -> ProjectResponse:
    """Load a project record."""
    try:
        return ProjectResponse.model_validate(await store.get(project_id))

    except HTTPException:
        raise
    except StoreError as e:
        raise http_error_for(e) from e
    except Exception as e:
        logger.error(f"Error loading project {project_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load project",
        ) from e


@router.put("/{project_id}", response_model=ProjectResponse)
async def save_project(
    project_id: str,
    payload: ProjectUpdate,
    store: BaseProjectStore = Depends(get_store),
    hub: PreviewHub = Depends(get_hub),
) -> ProjectResponse:
    """Save a project's template and state and refresh its previews.

    Args:
        project_id: The project to overwrite.
        payload: The new template and state.
        store: The project store.
        hub: Preview hub notified after a successful save.

    Returns:
        The saved project record.

    Raises:
        HTTPException: 404 if the project doesn't exist, 503 if the store fails.
    """
    try:
        record = await store.save(project_id, payload.html, payload.state)
        delivered = await hub.publish(project_id, record.html, record.state)
        logger.info(f"Saved project {project_id}, refreshed {delivered} previews")
        return ProjectResponse.model_validate(record)

    except HTTPException:
        raise
    except StoreError as e:
        raise http_error_for(e) from e
    except Exception as e:
        logger.error(f"Error saving project {project_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save project",
        ) from e


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: str,
    store: BaseProjectStore = Depends(get_store),
) -> None:
    """Delete a project record."""
    try:
        await store.delete(project_id)
        logger.info(f"Deleted project {project_id}")

    except HTTPException:
        raise
    except StoreError as e:
        raise http_error_for(e) from e
    except Exception as e:
        logger.error(f"Error deleting project {project_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete project",
        ) from e
