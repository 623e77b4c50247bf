from pydantic import BaseModel, field_validator
from typing import Optional


class BlogCreateRequest(BaseModel):
    title:       str
    content:     str
    excerpt:     Optional[str] = None
    coverImage:  Optional[str] = None
    category:    str = "technology"
    tags:        list[str] = []
    readTime:    str = "5 min read"
    isPublished: bool = True

    @field_validator("title", "content")
    @classmethod
    def check_not_empty(cls, v):
        if not v.strip(): raise ValueError("Field cannot be empty")
        return v.strip()


class BlogUpdateRequest(BaseModel):
    title:       Optional[str] = None
    content:     Optional[str] = None
    excerpt:     Optional[str] = None
    coverImage:  Optional[str] = None
    category:    Optional[str] = None
    tags:        Optional[list[str]] = None
    readTime:    Optional[str] = None
    isPublished: Optional[bool] = None

    @field_validator("title", "content")
    @classmethod
    def check_not_empty(cls, v):
        if v is not None and not v.strip(): raise ValueError("Field cannot be empty")
        return v.strip() if v else v


class CommentCreateRequest(BaseModel):
    text:     str
    parentId: Optional[str] = None

    @field_validator("text")
    @classmethod
    def check_text(cls, v):
        if not v.strip(): raise ValueError("Comment cannot be empty")
        return v.strip()
