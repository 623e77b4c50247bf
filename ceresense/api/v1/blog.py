from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from ceresense.database import get_db
from ceresense.dependencies import get_current_user, get_editor_or_admin
from ceresense.schemas.blog import BlogCreateRequest, BlogUpdateRequest, CommentCreateRequest
from ceresense.schemas.common import PageEnvelope, ok, page_of
from ceresense.services.blog_service import blog_service

router = APIRouter(prefix="/blog")


# ─── Posts ────────────────────────────────────────────────────────────────────
@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a blog post (Admin, Editor)")
def create_post(
    body: BlogCreateRequest,
    db:   Session = Depends(get_db),
    current_user: dict = Depends(get_editor_or_admin),
):
    data = blog_service.create_post(db, body, current_user)
    return ok("Blog post created successfully", data)


@router.get("", summary="List blog posts (paginated)", response_model=PageEnvelope)
def list_posts(
    page:      int           = Query(1, ge=1),
    limit:     int           = Query(10, ge=1, le=100),
    category:  Optional[str] = Query(None),
    search:    Optional[str] = Query(None, description="Search in title, content and excerpt"),
    published: bool          = Query(True, description="Only published posts"),
    db:        Session       = Depends(get_db),
):
    data, total = blog_service.list_posts(db, page, limit, category, search, published)
    return page_of("Blog posts retrieved successfully", data, total, page, limit)


@router.get("/stats", summary="Blog statistics")
def get_stats(db: Session = Depends(get_db)):
    return ok("Blog statistics retrieved", blog_service.get_stats(db))


@router.get("/categories/stats", summary="Published posts per category")
def get_category_stats(db: Session = Depends(get_db)):
    return ok("Category statistics retrieved", blog_service.get_category_stats(db))


@router.get("/{post_id}", summary="Get a blog post (counts a view)")
def get_post(post_id: str, db: Session = Depends(get_db)):
    return ok("Blog post retrieved", blog_service.get_post(db, post_id))


@router.put("/{post_id}", summary="Update a blog post (author or Admin)")
def update_post(
    post_id: str,
    body:    BlogUpdateRequest,
    db:      Session = Depends(get_db),
    current_user: dict = Depends(get_editor_or_admin),
):
    data = blog_service.update_post(db, post_id, body, current_user)
    return ok("Blog post updated successfully", data)


@router.delete("/{post_id}", summary="Delete a blog post (author or Admin)")
def delete_post(
    post_id: str,
    db:      Session = Depends(get_db),
    current_user: dict = Depends(get_editor_or_admin),
):
    blog_service.delete_post(db, post_id, current_user)
    return ok("Blog post deleted successfully", None)


@router.post("/{post_id}/like", summary="Like a blog post")
def like_post(post_id: str, db: Session = Depends(get_db)):
    return ok("Blog post liked", blog_service.like_post(db, post_id))


# ─── Comments ─────────────────────────────────────────────────────────────────
@router.post("/{post_id}/comments", status_code=status.HTTP_201_CREATED,
             summary="Comment on a blog post (authenticated)")
def add_comment(
    post_id: str,
    body:    CommentCreateRequest,
    db:      Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    data = blog_service.add_comment(db, post_id, body, current_user)
    return ok("Comment added successfully", data)


@router.get("/{post_id}/comments", summary="List comments of a blog post")
def list_comments(post_id: str, db: Session = Depends(get_db)):
    data = blog_service.list_comments(db, post_id)
    return ok(f"{len(data)} comments found", data)


@router.post("/comments/{comment_id}/like", summary="Like a comment")
def like_comment(comment_id: str, db: Session = Depends(get_db)):
    return ok("Comment liked", blog_service.like_comment(db, comment_id))


@router.delete("/comments/{comment_id}", summary="Delete a comment (commenter or Admin)")
def delete_comment(
    comment_id: str,
    db:         Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    blog_service.delete_comment(db, comment_id, current_user)
    return ok("Comment deleted successfully", None)
