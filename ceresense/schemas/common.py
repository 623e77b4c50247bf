"""
Response envelopes shared by every router.

Single objects go out as ``{success, message, data}``; the list endpoints
(users, blog posts, gallery items) add a ``meta`` block describing the page.
"""
from math import ceil
from typing import Any

from pydantic import BaseModel


class Envelope(BaseModel):
    success: bool = True
    message: str
    data: Any = None


class PageMeta(BaseModel):
    page:       int
    limit:      int
    total:      int
    totalPages: int
    hasNext:    bool
    hasPrev:    bool

    @classmethod
    def for_page(cls, total: int, page: int, limit: int) -> "PageMeta":
        pages = ceil(total / limit) if limit else 0
        return cls(
            page=page, limit=limit, total=total, totalPages=pages,
            hasNext=page < pages, hasPrev=page > 1,
        )


class PageEnvelope(Envelope):
    data: list[dict] = []
    meta: PageMeta


def ok(message: str, data: Any = None) -> dict:
    return Envelope(message=message, data=data).model_dump()


def page_of(message: str, items: list[dict], total: int, page: int, limit: int) -> dict:
    """One page of ``items`` out of ``total`` matches."""
    return PageEnvelope(
        message=message, data=items, meta=PageMeta.for_page(total, page, limit),
    ).model_dump()
