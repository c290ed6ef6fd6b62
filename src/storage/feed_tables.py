"""SQLAlchemy Core table definitions for the curated feed."""

from sqlalchemy import (
    MetaData,
    Table,
    Column,
    String,
    BigInteger,
    Integer,
    Boolean,
    Text,
    DateTime,
    ForeignKey,
    PrimaryKeyConstraint,
    Index,
    false,
    func,
)

metadata = MetaData()

posts = Table(
    "posts",
    metadata,
    Column("uri", String, primary_key=True),
    Column("text", Text, nullable=False, server_default=""),
    Column("pinned", Boolean, nullable=False, server_default=false()),
    Column("deleted", Boolean, nullable=False, server_default=false()),
    Column("priority", Integer, nullable=False, server_default="0"),
    Column("like_count", Integer, nullable=False, server_default="0"),
    Column("timestamp", BigInteger, nullable=False),
    Column("indexed_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)

likes = Table(
    "likes",
    metadata,
    Column(
        "post_uri",
        String,
        ForeignKey("posts.uri", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("like_uri", String, nullable=False),
    PrimaryKeyConstraint("post_uri", "like_uri", name="pk_likes"),
)

# Feed order (newest first, uri as tie-breaker) is shared by serving and eviction.
Index("idx_posts_timestamp_uri", posts.c.timestamp.desc(), posts.c.uri.desc())
Index("idx_likes_post_uri", likes.c.post_uri)
Index("idx_likes_like_uri", likes.c.like_uri)
