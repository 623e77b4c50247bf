"""
Import all models here so that:
1. Alembic can auto-detect them when generating migrations
2. Relationships between models resolve correctly

Order matters: import parent tables before child tables.
"""

from ceresense.models.user import User, UserRole
from ceresense.models.blog import BlogPost, Comment
from ceresense.models.gallery import GalleryItem, GalleryCategory, GalleryStatus

__all__ = [
    "User",
    "UserRole",
    "BlogPost",
    "Comment",
    "GalleryItem",
    "GalleryCategory",
    "GalleryStatus",
]
