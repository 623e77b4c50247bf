from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ceresense.models.blog import BlogPost, Comment
from ceresense.models.user import UserRole
from ceresense.schemas.blog import BlogCreateRequest, BlogUpdateRequest, CommentCreateRequest
from ceresense.utils.exceptions import NotFoundException, ForbiddenException
from ceresense.utils.security import utcnow


def _serialize_post(p: BlogPost) -> dict:
    return {
        "id":            p.id,
        "title":         p.title,
        "content":       p.content,
        "excerpt":       p.excerpt,
        "coverImage":    p.coverImage,
        "category":      p.category,
        "tags":          p.tags or [],
        "views":         p.views,
        "likes":         p.likes,
        "commentsCount": p.commentsCount,
        "readTime":      p.readTime,
        "isPublished":   p.isPublished,
        "author": {
            "id":       p.author.id,
            "fullName": p.author.fullName,
            "email":    p.author.email,
            "role":     p.author.role.value,
        } if p.author else None,
        "publishedAt":   p.publishedAt.isoformat() if p.publishedAt else None,
        "createdAt":     p.createdAt.isoformat() if p.createdAt else None,
        "updatedAt":     p.updatedAt.isoformat() if p.updatedAt else None,
    }


def _serialize_comment(c: Comment, with_replies: bool = True) -> dict:
    data = {
        "id":        c.id,
        "text":      c.text,
        "postId":    c.postId,
        "parentId":  c.parentId,
        "likes":     c.likes,
        "user":      {"id": c.user.id, "fullName": c.user.fullName, "username": c.user.username}
                     if c.user else None,
        "createdAt": c.createdAt.isoformat() if c.createdAt else None,
    }
    if with_replies:
        data["replies"] = [_serialize_comment(r, with_replies=False) for r in c.replies]
    return data


def _can_manage(owner_id: str, actor: dict) -> bool:
    return owner_id == actor["id"] or actor["role"] == UserRole.ADMIN.value


class BlogService:

    def _get_post(self, db: Session, post_id: str) -> BlogPost:
        p = db.query(BlogPost).filter(BlogPost.id == post_id).first()
        if not p:
            raise NotFoundException("Blog post")
        return p

    # ─── List ─────────────────────────────────────────────────────────────────
    def list_posts(
        self, db: Session, page: int, limit: int,
        category: str | None, search: str | None, published: bool,
    ) -> tuple[list[dict], int]:
        q = db.query(BlogPost)

        if published:
            q = q.filter(BlogPost.isPublished == True)  # noqa: E712
        if category:
            q = q.filter(BlogPost.category == category)
        if search:
            kw = f"%{search}%"
            q = q.filter(or_(
                BlogPost.title.ilike(kw),
                BlogPost.content.ilike(kw),
                BlogPost.excerpt.ilike(kw),
            ))

        total = q.count()
        posts = q.order_by(BlogPost.publishedAt.desc()).offset((page - 1) * limit).limit(limit).all()
        return [_serialize_post(p) for p in posts], total

    # ─── Get (counts a view) ──────────────────────────────────────────────────
    def get_post(self, db: Session, post_id: str) -> dict:
        p = self._get_post(db, post_id)
        p.views += 1
        db.commit()
        db.refresh(p)
        return _serialize_post(p)

    # ─── Create ───────────────────────────────────────────────────────────────
    def create_post(self, db: Session, data: BlogCreateRequest, actor: dict) -> dict:
        p = BlogPost(
            **data.model_dump(),
            authorId=actor["id"],
            publishedAt=utcnow(),
        )
        db.add(p)
        db.commit()
        db.refresh(p)
        return _serialize_post(p)

    # ─── Update ───────────────────────────────────────────────────────────────
    def update_post(self, db: Session, post_id: str, data: BlogUpdateRequest, actor: dict) -> dict:
        p = self._get_post(db, post_id)
        if not _can_manage(p.authorId, actor):
            raise ForbiddenException("You can only edit your own posts")

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(p, field, value)
        if data.isPublished and not p.publishedAt:
            p.publishedAt = utcnow()

        db.commit()
        db.refresh(p)
        return _serialize_post(p)

    # ─── Delete ───────────────────────────────────────────────────────────────
    def delete_post(self, db: Session, post_id: str, actor: dict) -> None:
        p = self._get_post(db, post_id)
        if not _can_manage(p.authorId, actor):
            raise ForbiddenException("You can only delete your own posts")
        db.query(Comment).filter(Comment.postId == post_id).delete(synchronize_session=False)
        db.delete(p)
        db.commit()

    def like_post(self, db: Session, post_id: str) -> dict:
        p = self._get_post(db, post_id)
        p.likes += 1
        db.commit()
        db.refresh(p)
        return _serialize_post(p)

    # ─── Stats ────────────────────────────────────────────────────────────────
    def get_stats(self, db: Session) -> dict:
        total = db.query(BlogPost).count()
        published = db.query(BlogPost).filter(BlogPost.isPublished == True).count()  # noqa: E712
        total_views = db.query(func.coalesce(func.sum(BlogPost.views), 0)).scalar()
        return {
            "total":      total,
            "published":  published,
            "draft":      total - published,
            "totalViews": int(total_views or 0),
        }

    def get_category_stats(self, db: Session) -> list[dict]:
        rows = db.query(BlogPost.category, func.count(BlogPost.id))\
                 .filter(BlogPost.isPublished == True)\
                 .group_by(BlogPost.category).order_by(BlogPost.category).all()  # noqa: E712
        return [{"category": category, "count": count} for category, count in rows]

    # ─── Comments ─────────────────────────────────────────────────────────────
    def add_comment(self, db: Session, post_id: str, data: CommentCreateRequest, actor: dict) -> dict:
        p = self._get_post(db, post_id)

        parent_id = None
        if data.parentId:
            parent = db.query(Comment).filter(
                Comment.id == data.parentId, Comment.postId == post_id,
            ).first()
            if not parent:
                raise NotFoundException("Parent comment")
            # Threads are one level deep: a reply to a reply joins the top-level thread
            parent_id = parent.parentId or parent.id

        c = Comment(text=data.text, postId=p.id, userId=actor["id"], parentId=parent_id)
        db.add(c)
        p.commentsCount += 1
        db.commit()
        db.refresh(c)
        return _serialize_comment(c)

    def list_comments(self, db: Session, post_id: str) -> list[dict]:
        self._get_post(db, post_id)
        items = db.query(Comment).filter(Comment.postId == post_id, Comment.parentId.is_(None))\
                  .order_by(Comment.createdAt.desc()).all()
        return [_serialize_comment(c) for c in items]

    def like_comment(self, db: Session, comment_id: str) -> dict:
        c = db.query(Comment).filter(Comment.id == comment_id).first()
        if not c:
            raise NotFoundException("Comment")
        c.likes += 1
        db.commit()
        db.refresh(c)
        return _serialize_comment(c)

    def delete_comment(self, db: Session, comment_id: str, actor: dict) -> None:
        c = db.query(Comment).filter(Comment.id == comment_id).first()
        if not c:
            raise NotFoundException("Comment")
        if not _can_manage(c.userId, actor):
            raise ForbiddenException("You can only delete your own comments")

        removed = 1 + len(c.replies)
        post = c.post
        post.commentsCount = max(post.commentsCount - removed, 0)
        db.delete(c)  # replies go with it
        db.commit()


blog_service = BlogService()
