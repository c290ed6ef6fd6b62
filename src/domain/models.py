"""Domain models for the thread and blog feed generator."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union


class FragmentKind(str, Enum):
    """Where a piece of classifiable text came from.

    - POST: the post body
    - IMAGE: alt-text of an attached image
    - VIDEO: alt-text of an attached video
    - EXTERNAL: title or description of an external link card
    """
    POST = "post"
    IMAGE = "image"
    VIDEO = "video"
    EXTERNAL = "external"


@dataclass(frozen=True)
class TextFragment:
    """One tagged unit of text extracted from a post."""
    kind: FragmentKind
    text: str

    @classmethod
    def post(cls, text: str) -> "TextFragment":
        return cls(FragmentKind.POST, text)

    @classmethod
    def image(cls, text: str) -> "TextFragment":
        return cls(FragmentKind.IMAGE, text)

    @classmethod
    def video(cls, text: str) -> "TextFragment":
        return cls(FragmentKind.VIDEO, text)

    @classmethod
    def external(cls, text: str) -> "TextFragment":
        return cls(FragmentKind.EXTERNAL, text)


@dataclass(frozen=True)
class ImageEmbed:
    """A single image attached to a post."""
    alt_text: Optional[str] = None


@dataclass(frozen=True)
class ImagesEmbed:
    """One or more images attached to a post."""
    images: tuple[ImageEmbed, ...] = ()


@dataclass(frozen=True)
class VideoEmbed:
    """A video attached to a post."""
    alt_text: Optional[str] = None


@dataclass(frozen=True)
class ExternalEmbed:
    """An external link card (blog post, article, repository...)."""
    uri: str
    title: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class QuoteEmbed:
    """A quoted post without attached media."""
    uri: str


MediaEmbed = Union[ImagesEmbed, VideoEmbed, ExternalEmbed]


@dataclass(frozen=True)
class QuoteWithMediaEmbed:
    """A quoted post plus media attached by the quoting author."""
    uri: str
    media: MediaEmbed


Embed = Union[ImagesEmbed, VideoEmbed, ExternalEmbed, QuoteEmbed, QuoteWithMediaEmbed]


@dataclass(frozen=True)
class PostScoring:
    """Classifier verdict for an accepted post."""
    pinned: bool = False
    deleted: bool = False
    priority: int = 0


@dataclass
class Post:
    """A post retained by the feed."""
    uri: str  # at:// URI, primary key
    text: str
    timestamp: int  # Epoch seconds, drives ordering and eviction
    priority: int = 0
    pinned: bool = False
    deleted: bool = False  # Soft delete, hidden from the feed until evicted
    like_count: int = 0

    # Database fields
    indexed_at: Optional[datetime] = None


@dataclass
class FeedPage:
    """One page of the feed skeleton."""
    uris: list[str] = field(default_factory=list)
    cursor: Optional[str] = None  # None means end of feed

    def to_skeleton(self) -> dict:
        """Render as an app.bsky.feed.getFeedSkeleton response body."""
        body: dict = {"feed": [{"post": uri} for uri in self.uris]}
        if self.cursor is not None:
            body["cursor"] = self.cursor
        return body
