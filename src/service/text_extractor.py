"""Extract classifiable text from a post body and its embed.

Also converts AT-protocol embed records (as they appear in a decoded
``app.bsky.feed.post`` record) into the domain embed types.
"""
from __future__ import annotations

from typing import Any, Optional

from ..domain.models import (
    Embed,
    ExternalEmbed,
    ImageEmbed,
    ImagesEmbed,
    MediaEmbed,
    QuoteEmbed,
    QuoteWithMediaEmbed,
    TextFragment,
    VideoEmbed,
)

IMAGES_TYPE = "app.bsky.embed.images"
VIDEO_TYPE = "app.bsky.embed.video"
EXTERNAL_TYPE = "app.bsky.embed.external"
RECORD_TYPE = "app.bsky.embed.record"
RECORD_WITH_MEDIA_TYPE = "app.bsky.embed.recordWithMedia"


def extract_fragments(text: str, embed: Optional[Embed] = None) -> list[TextFragment]:
    """Collect tagged text fragments in classification order.

    The body always comes first. Then, depending on the embed:
    video alt-text; link title and description as two fragments; one
    fragment per image alt-text, whether the images are attached directly
    or alongside a quoted post. Quotes contribute nothing else, and media
    other than images next to a quote is ignored. Missing or empty
    optional fields are skipped.
    """
    fragments = [TextFragment.post(text or "")]

    if isinstance(embed, VideoEmbed):
        _append(fragments, TextFragment.video, embed.alt_text)
    elif isinstance(embed, ExternalEmbed):
        _append(fragments, TextFragment.external, embed.title)
        _append(fragments, TextFragment.external, embed.description)
    elif isinstance(embed, ImagesEmbed):
        _append_images(fragments, embed)
    elif isinstance(embed, QuoteWithMediaEmbed) and isinstance(embed.media, ImagesEmbed):
        _append_images(fragments, embed.media)

    return fragments


def _append(fragments: list[TextFragment], make, value: Optional[str]) -> None:
    if value:
        fragments.append(make(value))


def _append_images(fragments: list[TextFragment], embed: ImagesEmbed) -> None:
    for image in embed.images:
        _append(fragments, TextFragment.image, image.alt_text)


def embed_from_record(data: Optional[dict[str, Any]]) -> Optional[Embed]:
    """Convert an AT-protocol embed record into a domain embed.

    Unknown or malformed embeds yield None: they simply contribute no text.
    """
    if not isinstance(data, dict):
        return None

    embed_type = data.get("$type")
    if embed_type == RECORD_TYPE:
        uri = _record_uri(data.get("record"))
        return QuoteEmbed(uri=uri) if uri else None

    if embed_type == RECORD_WITH_MEDIA_TYPE:
        record = data.get("record")
        # recordWithMedia nests the strong ref one level deeper
        if isinstance(record, dict) and "record" in record:
            record = record["record"]
        media = _media_from_record(data.get("media"))
        uri = _record_uri(record)
        if media is None:
            return QuoteEmbed(uri=uri) if uri else None
        return QuoteWithMediaEmbed(uri=uri or "", media=media)

    return _media_from_record(data)


def _media_from_record(data: Any) -> Optional[MediaEmbed]:
    if not isinstance(data, dict):
        return None

    embed_type = data.get("$type")
    if embed_type == IMAGES_TYPE:
        images = data.get("images") or []
        return ImagesEmbed(
            images=tuple(
                ImageEmbed(alt_text=image.get("alt"))
                for image in images
                if isinstance(image, dict)
            )
        )

    if embed_type == VIDEO_TYPE:
        return VideoEmbed(alt_text=data.get("alt"))

    if embed_type == EXTERNAL_TYPE:
        external = data.get("external")
        if not isinstance(external, dict):
            return None
        return ExternalEmbed(
            uri=external.get("uri", ""),
            title=external.get("title"),
            description=external.get("description"),
        )

    return None


def _record_uri(record: Any) -> Optional[str]:
    if isinstance(record, dict):
        uri = record.get("uri")
        if isinstance(uri, str) and uri:
            return uri
    return None
