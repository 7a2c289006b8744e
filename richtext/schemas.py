"""Wire and content models shared by the bridge, the decoder and the HTTP layer."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InboundMessage(BaseModel):
    """An event emitted by the renderer.

    ``type`` is kept as a plain string so unknown kinds parse and are then
    ignored by the router instead of failing validation. ``data`` is
    untrusted and has whatever shape the renderer chose.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: str
    data: Any = None
    request_id: str | None = Field(default=None, alias="requestId")

    @field_validator("request_id", mode="before")
    @classmethod
    def coerce_numeric_id(cls, v: Any) -> Any:
        # Pages may echo the id back as a JSON number.
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class LinkDialogState(BaseModel):
    visible: bool = False
    initial_url: str = ""
    title: str = ""
    url: str = ""

    @property
    def is_new_link(self) -> bool:
        return not self.initial_url


class ImageDescriptor(BaseModel):
    """One image of an image group.

    Only ``mediaId`` is required; the other fields are set when the element
    carried the matching attribute.
    """

    mediaId: str
    url: str | None = None
    format: str | None = None
    width: int | None = None
    height: int | None = None


class TextBlock(BaseModel):
    blockType: Literal["Text"] = "Text"
    htmlContent: str


class ImageGroupBlock(BaseModel):
    blockType: Literal["image"] = "image"
    images: list[ImageDescriptor]


ContentBlock = TextBlock | ImageGroupBlock


class ContentDocument(BaseModel):
    """Exported content: the decoded blocks in document order."""

    blocks: list[ContentBlock] = []


class CommandRequest(BaseModel):
    """Incoming request body for POST /commands/{action}."""

    data: Any = None
