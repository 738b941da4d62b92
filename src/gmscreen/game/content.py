"""
Media content shown to players: images and YouTube videos.

Content items are a discriminated union on ``type``; code that handles an
item should match on ImageContent / VideoContent rather than inspect the tag.
"""

import re
import uuid
from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from gmscreen.exceptions import InvalidContent

YOUTUBE_ID_PATTERN = re.compile(
    r"(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?|shorts)/|.*[?&]v=)|youtu\.be/)"
    r"([^\"&?/\s]{11})"
)

VALID_IMAGE_TYPES = frozenset(
    {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}
)


def _content_id() -> str:
    return f"content-{uuid.uuid4().hex}"


class _ContentBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_content_id, description="Unique content identifier")
    name: str = Field(..., min_length=1, description="Display name")
    url: str = Field(..., description="Image URL/data URL or video page URL")
    thumbnail: str | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ImageContent(_ContentBase):
    """An image to display (URL or data URL)."""

    type: Literal["image"] = "image"
    width: int | None = Field(default=None, ge=1)
    height: int | None = Field(default=None, ge=1)


class VideoContent(_ContentBase):
    """A YouTube video."""

    type: Literal["video"] = "video"
    video_id: str = Field(..., min_length=11, max_length=11)
    title: str
    duration: str | None = None
    autoplay: bool = False
    loop: bool = False

    @property
    def embed_url(self) -> str:
        return f"https://www.youtube.com/embed/{self.video_id}"


ContentItem = Annotated[ImageContent | VideoContent, Field(discriminator="type")]

content_adapter: TypeAdapter[ImageContent | VideoContent] = TypeAdapter(ContentItem)


def extract_youtube_id(url: str) -> str | None:
    """
    Extract the 11-character video id from a YouTube URL.

    Args:
        url: youtube.com watch/embed/v/shorts URL or youtu.be short link

    Returns:
        The video id, or None if the URL is not a recognised YouTube link

    Examples:
        >>> extract_youtube_id("https://youtu.be/dQw4w9WgXcQ")
        'dQw4w9WgXcQ'
    """
    match = YOUTUBE_ID_PATTERN.search(url)
    return match.group(1) if match else None


def youtube_thumbnail(video_id: str) -> str:
    """Get the max-resolution thumbnail URL for a YouTube video."""
    return f"https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"


def is_valid_image_type(mime_type: str) -> bool:
    """Check whether a MIME type is an accepted image format."""
    return mime_type.strip().lower() in VALID_IMAGE_TYPES


def make_image(
    name: str,
    url: str,
    tags: list[str] | None = None,
    width: int | None = None,
    height: int | None = None,
) -> ImageContent:
    """Create an image content item; the thumbnail is the image itself."""
    return ImageContent(
        name=name, url=url, thumbnail=url, tags=tags or [], width=width, height=height
    )


def make_video(
    url: str,
    title: str | None = None,
    tags: list[str] | None = None,
    autoplay: bool = False,
    loop: bool = False,
) -> VideoContent:
    """
    Create a video content item from a YouTube URL.

    Raises:
        InvalidContent: If no video id can be extracted from the URL
    """
    video_id = extract_youtube_id(url)
    if video_id is None:
        raise InvalidContent(f"Not a recognised YouTube URL: {url}")

    title = title or f"YouTube Video {video_id}"
    return VideoContent(
        name=title,
        url=url,
        thumbnail=youtube_thumbnail(video_id),
        tags=tags or [],
        video_id=video_id,
        title=title,
        autoplay=autoplay,
        loop=loop,
    )


def describe(item: ImageContent | VideoContent) -> str:
    """One-line description of a content item for listings."""
    match item:
        case ImageContent(width=int() as width, height=int() as height):
            return f"Image: {item.name} ({width}x{height})"
        case ImageContent():
            return f"Image: {item.name}"
        case VideoContent():
            return f"Video: {item.title} [{item.video_id}]"
