"""Preview message protocol.

Messages exchanged between the editor host and the isolated rendering
context. On the wire every message is a JSON object discriminated by its
``type`` field, with camelCase field names.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from studio.interfaces.preview import InvalidMessageError


class _Message(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class IframeLoaded(_Message):
    """Sent by the rendering context once it is ready for content."""

    type: Literal["IFRAME_LOADED"] = "IFRAME_LOADED"


class UpdateHtml(_Message):
    """Sent by the host with freshly rendered markup."""

    type: Literal["UPDATE_HTML"] = "UPDATE_HTML"
    html: str


class ElementSelected(_Message):
    """Sent by the rendering context when an element is clicked."""

    type: Literal["ELEMENT_SELECTED"] = "ELEMENT_SELECTED"
    path: str
    tag_name: str
    color: str = ""
    bg_color: str = ""
    font_family: str = ""
    class_list: list[str] = Field(default_factory=list)


class SetSelectedPath(_Message):
    """Sent by the host to mark the currently selected element."""

    type: Literal["SET_SELECTED_PATH"] = "SET_SELECTED_PATH"
    path: str | None = None


PreviewMessage = Annotated[
    Union[IframeLoaded, UpdateHtml, ElementSelected, SetSelectedPath],
    Field(discriminator="type"),
]

_adapter: TypeAdapter[PreviewMessage] = TypeAdapter(PreviewMessage)


def parse_message(data: str | bytes | dict[str, Any]) -> PreviewMessage:
    """Decode a wire message.

    Args:
        data: A JSON document or an already decoded object.

    Returns:
        The typed message.

    Raises:
        InvalidMessageError: If the type is unknown or fields are invalid.
    """
    try:
        if isinstance(data, (str, bytes)):
            return _adapter.validate_json(data)
        return _adapter.validate_python(data)
    except ValidationError as e:
        raise InvalidMessageError(f"Invalid preview message: {e}") from e


def dump_message(message: PreviewMessage) -> dict[str, Any]:
    """Encode a message as a JSON-ready object with camelCase keys."""
    return message.model_dump(mode="json", by_alias=True)
