"""Editor API routes.

Stateless template transforms: each request carries the template (and
state where needed) and gets the transformed pair back. Nothing is stored.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from studio.api.deps import get_factory, http_error_for
from studio.api.schemas import (
    ArchitectPromptRequest,
    ArchitectPromptResponse,
    Blueprint,
    BlueprintRequest,
    DeleteResult,
    DuplicateResult,
    ElementStyleRequest,
    ErrorResponse,
    GroupingResult,
    KeyRequest,
    PageFontRequest,
    ReconcileResult,
    SwapRequest,
    SwapResult,
    TemplatePayload,
    TemplateResponse,
    TemplateStatePayload,
    ThemePalette,
    ThemeRequest,
    ThemeRewriteResult,
)
from studio.core.factory import ComponentFactory
from studio.interfaces.template import BlueprintError, TemplateEngineError
from studio.strategies.blueprint import build_architect_prompt, parse_blueprint

logger = logging.getLogger(__name__)


router = APIRouter(
    prefix="/editor",
    tags=["editor"],
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)


def _internal_error(action: str, e: Exception) -> HTTPException:
    logger.error(f"Error during {action}: {e}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )


# =============================================================================
# Reconciliation & Grouping
# =============================================================================


@router.post("/reconcile", response_model=ReconcileResult)
async def reconcile(
    payload: TemplateStatePayload,
    factory: ComponentFactory = Depends(get_factory),
) -> ReconcileResult:
    """Bring a state in line with the placeholders of a template."""
    try:
        keys = factory.get_scanner().find_keys(payload.html)
        return factory.get_reconciler().reconcile(keys, payload.state)
    except Exception as e:
        raise _internal_error("reconcile state", e) from e


@router.post("/groups", response_model=GroupingResult)
async def infer_groups(
    payload: TemplatePayload,
    factory: ComponentFactory = Depends(get_factory),
) -> GroupingResult:
    """Group a template's keys by repeatable element."""
    try:
        return factory.get_group_inferrer().infer(payload.html)
    except Exception as e:
        raise _internal_error("infer field groups", e) from e


# =============================================================================
# Structural Edits
# =============================================================================


@router.post("/duplicate", response_model=DuplicateResult)
async def duplicate(
    payload: KeyRequest,
    factory: ComponentFactory = Depends(get_factory),
) -> DuplicateResult:
    """Duplicate the list item holding a key.

    Raises:
        HTTPException: 404 if the key is missing, 409 if it isn't in a list.
    """
    try:
        return factory.get_mutator().duplicate(payload.html, payload.state, payload.key)
    except TemplateEngineError as e:
        raise http_error_for(e) from e
    except Exception as e:
        raise _internal_error("duplicate item", e) from e


@router.post("/delete", response_model=DeleteResult)
async def delete(
    payload: KeyRequest,
    factory: ComponentFactory = Depends(get_factory),
) -> DeleteResult:
    """Delete a field and the element holding it."""
    try:
        return factory.get_mutator().delete(payload.html, payload.state, payload.key)
    except Exception as e:
        raise _internal_error("delete field", e) from e


@router.post("/swap", response_model=SwapResult)
async def swap(
    payload: SwapRequest,
    factory: ComponentFactory = Depends(get_factory),
) -> SwapResult:
    """Exchange the list items holding two keys.

    Raises:
        HTTPException: 404 if a key is missing, 409 if the items aren't in
            the same list.
    """
    try:
        return factory.get_mutator().swap(payload.html, payload.key_a, payload.key_b)
    except TemplateEngineError as e:
        raise http_error_for(e) from e
    except Exception as e:
        raise _internal_error("reorder items", e) from e


# =============================================================================
# Theme
# =============================================================================


@router.post("/theme", response_model=ThemeRewriteResult)
async def rewrite_theme(
    payload: ThemeRequest,
    factory: ComponentFactory = Depends(get_factory),
) -> ThemeRewriteResult:
    """Replace a colour, utility class or font everywhere in a template."""
    try:
        return factory.get_theme_rewriter().rewrite(payload.html, payload.old, payload.new)
    except Exception as e:
        raise _internal_error("rewrite theme", e) from e


@router.post("/page-font", response_model=TemplateResponse)
async def set_page_font(
    payload: PageFontRequest,
    factory: ComponentFactory = Depends(get_factory),
) -> TemplateResponse:
    """Set or clear the page-wide font."""
    try:
        html = factory.get_theme_rewriter().set_page_font(payload.html, payload.font)
        return TemplateResponse(html=html)
    except Exception as e:
        raise _internal_error("set page font", e) from e


@router.post("/element-style", response_model=TemplateResponse)
async def set_element_style(
    payload: ElementStyleRequest,
    factory: ComponentFactory = Depends(get_factory),
) -> TemplateResponse:
    """Set an inline colour on the element at a preview path.

    Raises:
        HTTPException: 404 if no element exists at the path.
    """
    try:
        html = factory.get_theme_rewriter().apply_element_style(
            payload.html, payload.path, payload.prop, payload.value
        )
        return TemplateResponse(html=html)
    except TemplateEngineError as e:
        raise http_error_for(e) from e
    except Exception as e:
        raise _internal_error("update element style", e) from e


@router.post("/palette", response_model=ThemePalette)
async def detect_palette(
    payload: TemplatePayload,
    factory: ComponentFactory = Depends(get_factory),
) -> ThemePalette:
    """List the colours and fonts a template uses."""
    try:
        return factory.get_theme_rewriter().detect_palette(payload.html)
    except Exception as e:
        raise _internal_error("detect palette", e) from e


# =============================================================================
# Preview & Blueprints
# =============================================================================


@router.post("/render", response_model=TemplateResponse)
async def render(
    payload: TemplateStatePayload,
    factory: ComponentFactory = Depends(get_factory),
) -> TemplateResponse:
    """Render preview markup: paths annotated, placeholders substituted."""
    try:
        html = factory.get_preview_renderer().render(payload.html, payload.state)
        return TemplateResponse(html=html)
    except Exception as e:
        raise _internal_error("render preview", e) from e


@router.post("/blueprint", response_model=Blueprint)
async def ingest_blueprint(payload: BlueprintRequest) -> Blueprint:
    """Parse a pasted blueprint.

    Raises:
        HTTPException: 422 with the user-facing hint if it isn't valid.
    """
    try:
        return parse_blueprint(payload.text)
    except BlueprintError as e:
        raise http_error_for(e) from e
    except Exception as e:
        raise _internal_error("parse blueprint", e) from e


@router.post("/prompt", response_model=ArchitectPromptResponse)
async def architect_prompt(payload: ArchitectPromptRequest) -> ArchitectPromptResponse:
    """Build the generation prompt for an app idea."""
    return ArchitectPromptResponse(prompt=build_architect_prompt(payload.idea))
