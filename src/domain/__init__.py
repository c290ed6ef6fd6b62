"""Domain models and enums."""
from .models import (
    Embed,
    ExternalEmbed,
    FeedPage,
    FragmentKind,
    ImageEmbed,
    ImagesEmbed,
    MediaEmbed,
    Post,
    PostScoring,
    QuoteEmbed,
    QuoteWithMediaEmbed,
    TextFragment,
    VideoEmbed,
)

__all__ = [
    "Embed",
    "ExternalEmbed",
    "FeedPage",
    "FragmentKind",
    "ImageEmbed",
    "ImagesEmbed",
    "MediaEmbed",
    "Post",
    "PostScoring",
    "QuoteEmbed",
    "QuoteWithMediaEmbed",
    "TextFragment",
    "VideoEmbed",
]
