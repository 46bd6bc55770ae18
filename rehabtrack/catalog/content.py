"""Typed content item payloads.

Content is stored as text: plain text for ``text`` items, a JSON object for
every other type. Payloads are decoded into one model per content type at
read time so malformed stored content raises instead of producing empty
fields downstream.
"""

from enum import Enum
from typing import Annotated, Literal
from uuid import UUID

import structlog
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, ValidationError
from pydantic.alias_generators import to_camel

from rehabtrack.core.errors import DependencyFailureError


logger = structlog.get_logger(__name__)


class ContentType(str, Enum):
    """Content item type."""

    TEXT = "text"
    VIDEO = "video"
    DOCUMENT = "document"
    LINK = "link"
    ASSESSMENT = "assessment"


class _StoredPayload(BaseModel):
    """Stored JSON blobs use camelCase keys (``videoUrl``)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class TextContent(_StoredPayload):
    kind: Literal["text"] = "text"
    body: str


class VideoContent(_StoredPayload):
    kind: Literal["video"] = "video"
    video_url: HttpUrl
    description: str | None = None


class DocumentContent(_StoredPayload):
    kind: Literal["document"] = "document"
    document_url: HttpUrl
    description: str | None = None


class LinkContent(_StoredPayload):
    kind: Literal["link"] = "link"
    link_url: HttpUrl
    description: str | None = None


class AssessmentContent(_StoredPayload):
    """Placeholder item that anchors an assessment in the module sequence."""

    kind: Literal["assessment"] = "assessment"
    assessment_id: UUID | None = None
    description: str | None = None


ContentPayload = Annotated[
    TextContent | VideoContent | DocumentContent | LinkContent | AssessmentContent,
    Field(discriminator="kind"),
]

_JSON_PAYLOADS: dict[ContentType, type[_StoredPayload]] = {
    ContentType.VIDEO: VideoContent,
    ContentType.DOCUMENT: DocumentContent,
    ContentType.LINK: LinkContent,
    ContentType.ASSESSMENT: AssessmentContent,
}


class ContentDecodeError(DependencyFailureError):
    """Stored content does not match its declared type."""

    default_message = "Stored content is malformed"


def decode_content(
    content_type: str,
    raw: str | None,
    content_id: UUID | None = None,
) -> TextContent | VideoContent | DocumentContent | LinkContent | AssessmentContent:
    """Decode a stored payload for the given content type.

    Raises:
        ContentDecodeError: Unknown type or payload failing validation
    """
    try:
        ctype = ContentType(content_type)
    except ValueError as e:
        logger.error(
            "content_decode_failed",
            content_id=str(content_id) if content_id else None,
            content_type=content_type,
            error="unknown content type",
        )
        raise ContentDecodeError from e

    if ctype is ContentType.TEXT:
        return TextContent(body=raw or "")

    # Assessment anchors may carry no payload at all
    if ctype is ContentType.ASSESSMENT and not raw:
        return AssessmentContent()

    try:
        return _JSON_PAYLOADS[ctype].model_validate_json(raw or "")
    except ValidationError as e:
        logger.error(
            "content_decode_failed",
            content_id=str(content_id) if content_id else None,
            content_type=content_type,
            error_count=e.error_count(),
            errors=[err["msg"] for err in e.errors()],
        )
        raise ContentDecodeError from e
