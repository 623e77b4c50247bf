import uuid

from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, TIMESTAMP, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ceresense.database import Base


class BlogPost(Base):
    __tablename__ = "blog_posts"

    id            = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title         = Column(String(255), nullable=False)
    content       = Column(Text, nullable=False)
    excerpt       = Column(String(500), nullable=True)
    coverImage    = Column(String(500), nullable=True)
    category      = Column(String(100), default="technology", nullable=False, index=True)
    tags          = Column(JSON, default=list, nullable=False)
    views         = Column(Integer, default=0, nullable=False)
    likes         = Column(Integer, default=0, nullable=False)
    commentsCount = Column(Integer, default=0, nullable=False)
    readTime      = Column(String(50), default="5 min read", nullable=False)
    isPublished   = Column(Boolean, default=True, nullable=False)
    authorId      = Column(String(36), ForeignKey("users.id"), nullable=False)
    publishedAt   = Column(TIMESTAMP(timezone=True), nullable=True)
    createdAt     = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt     = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                           onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    author   = relationship("User")
    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<BlogPost id={self.id} title={self.title!r} published={self.isPublished}>"


class Comment(Base):
    __tablename__ = "blog_comments"

    id        = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    text      = Column(Text, nullable=False)
    postId    = Column(String(36), ForeignKey("blog_posts.id", ondelete="CASCADE"), nullable=False, index=True)
    userId    = Column(String(36), ForeignKey("users.id"), nullable=False)
    parentId  = Column(String(36), ForeignKey("blog_comments.id", ondelete="CASCADE"), nullable=True)
    likes     = Column(Integer, default=0, nullable=False)
    createdAt = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                       onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    post    = relationship("BlogPost", back_populates="comments")
    user    = relationship("User")
    parent  = relationship("Comment", remote_side=[id], back_populates="replies")
    replies = relationship("Comment", back_populates="parent", cascade="all, delete-orphan",
                           order_by="Comment.createdAt")

    def __repr__(self):
        return f"<Comment id={self.id} postId={self.postId} parentId={self.parentId}>"
