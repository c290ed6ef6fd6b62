"""Route registration helpers for the feed generator Flask app."""

from .admin import register_admin_routes
from .eviction import register_eviction_routes
from .skeleton import register_skeleton_routes

__all__ = [
    "register_admin_routes",
    "register_eviction_routes",
    "register_skeleton_routes",
]
