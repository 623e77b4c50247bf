import json
from pydantic import BaseModel, field_validator
from typing import Optional

from ceresense.models.gallery import GalleryCategory, GalleryStatus


# ─── Form field coercion ──────────────────────────────────────────────────────
def parse_tags(value) -> list[str]:
    """Accept a list, a JSON array string, or a comma-separated string."""
    if not value:
        return []
    if isinstance(value, list):
        return [str(t).strip() for t in value if str(t).strip()]
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            return [str(t).strip() for t in parsed if str(t).strip()]
        return [t.strip() for t in value.split(",") if t.strip()]
    return []


def parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in ("true", "1", "yes", "on")


# ─── Request ──────────────────────────────────────────────────────────────────
class GalleryCreateRequest(BaseModel):
    title:       str
    description: Optional[str] = None
    category:    GalleryCategory = GalleryCategory.PROJECTS
    tags:        list[str] = []
    featured:    bool = False
    date:        str
    status:      GalleryStatus = GalleryStatus.PENDING

    @field_validator("title", "date")
    @classmethod
    def check_not_empty(cls, v):
        if not v.strip(): raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, v):
        return parse_tags(v)

    @field_validator("featured", mode="before")
    @classmethod
    def coerce_featured(cls, v):
        return parse_bool(v)


class GalleryUpdateRequest(BaseModel):
    title:       Optional[str] = None
    description: Optional[str] = None
    category:    Optional[GalleryCategory] = None
    tags:        Optional[list[str]] = None
    featured:    Optional[bool] = None
    date:        Optional[str] = None
    status:      Optional[GalleryStatus] = None

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, v):
        return None if v is None else parse_tags(v)


class GalleryStatusRequest(BaseModel):
    status: GalleryStatus
