"""API request and response schemas.

Pydantic v2 models for API serialization/deserialization.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

# Re-export engine result models used directly as response bodies
from studio.strategies.blueprint import Blueprint
from studio.strategies.template_engine.models import (
    DeleteResult,
    DuplicateResult,
    GroupingResult,
    ReconcileResult,
    SwapResult,
    ThemePalette,
    ThemeRewriteResult,
)


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str = Field(description="Error message")
    error_code: str | None = Field(default=None, description="Application-specific error code")
    extra: dict[str, Any] | None = Field(default=None, description="Additional error context")


# =============================================================================
# Project Schemas
# =============================================================================


class ProjectCreate(BaseModel):
    """Request schema for creating a project.

    A pasted blueprint wins over an explicit template; with neither, the
    default starter page is used.
    """

    blueprint: str | None = Field(default=None, description="Raw blueprint JSON, fenced or not")
    html: str | None = Field(default=None, description="Template to start from")
    state: dict[str, Any] = Field(default_factory=dict, description="Initial state for html")


class ProjectUpdate(BaseModel):
    """Request schema for saving a project."""

    html: str
    state: dict[str, Any] = Field(default_factory=dict)


class ProjectResponse(BaseModel):
    """Response schema for a project record."""

    id: str
    html: str
    state: dict[str, Any]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# =============================================================================
# Editor Schemas
# =============================================================================


class TemplatePayload(BaseModel):
    """A template on its own."""

    html: str = Field(description="The HTML template")


class TemplateStatePayload(TemplatePayload):
    """A template and its state."""

    state: dict[str, Any] = Field(default_factory=dict)


class KeyRequest(TemplateStatePayload):
    """Request naming one placeholder key."""

    key: str = Field(min_length=1, description="Placeholder key")


class SwapRequest(TemplatePayload):
    """Request to reorder the list items holding two keys."""

    key_a: str = Field(min_length=1)
    key_b: str = Field(min_length=1)


class ThemeRequest(TemplatePayload):
    """Request to replace a theme token everywhere."""

    old: str = Field(description="Font, utility class or colour currently used")
    new: str = Field(description="Replacement value")


class PageFontRequest(TemplatePayload):
    """Request to set or clear the page font."""

    font: str = Field(default="", description="Font family; empty clears it")


class ElementStyleRequest(TemplatePayload):
    """Request to set an inline colour on a preview element."""

    path: str = Field(pattern=r"^\d+(\.\d+)*$", description="Dotted preview path")
    prop: Literal["color", "bgColor", "background-color"]
    value: str = Field(min_length=1)


class BlueprintRequest(BaseModel):
    """Request to parse a pasted blueprint."""

    text: str


class ArchitectPromptRequest(BaseModel):
    """Request for a generation prompt."""

    idea: str = Field(min_length=1)


class TemplateResponse(BaseModel):
    """A rewritten or rendered template."""

    html: str


class ArchitectPromptResponse(BaseModel):
    prompt: str


__all__ = [
    "ErrorResponse",
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectResponse",
    "TemplatePayload",
    "TemplateStatePayload",
    "KeyRequest",
    "SwapRequest",
    "ThemeRequest",
    "PageFontRequest",
    "ElementStyleRequest",
    "BlueprintRequest",
    "ArchitectPromptRequest",
    "TemplateResponse",
    "ArchitectPromptResponse",
    "Blueprint",
    "ReconcileResult",
    "GroupingResult",
    "DuplicateResult",
    "DeleteResult",
    "SwapResult",
    "ThemeRewriteResult",
    "ThemePalette",
]
