"""initial schema: users, blog posts and comments, gallery

Revision ID: 0001_initial
Revises:
Create Date: 2024-05-01 00:00:00
"""
from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

# Enum columns store member names
user_role = sa.Enum("ADMIN", "EDITOR", "USER", name="userrole")
gallery_category = sa.Enum("LEARNING", "PROJECTS", "EVENTS", "WORKSHOPS", "GRADUATION",
                           name="gallerycategory")
gallery_status = sa.Enum("ACTIVE", "PENDING", "ARCHIVED", name="gallerystatus")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("createdAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updatedAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("fullName", sa.String(150), nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("otpCode", sa.String(10), nullable=True),
        sa.Column("otpExpires", sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            '("otpCode" IS NULL AND "otpExpires" IS NULL) OR '
            '("otpCode" IS NOT NULL AND "otpExpires" IS NOT NULL)',
            name="chk_otp_pair",
        ),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "blog_posts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("excerpt", sa.String(500), nullable=True),
        sa.Column("coverImage", sa.String(500), nullable=True),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("tags", sa.JSON, nullable=False),
        sa.Column("views", sa.Integer, nullable=False),
        sa.Column("likes", sa.Integer, nullable=False),
        sa.Column("commentsCount", sa.Integer, nullable=False),
        sa.Column("readTime", sa.String(50), nullable=False),
        sa.Column("isPublished", sa.Boolean, nullable=False),
        sa.Column("authorId", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("publishedAt", sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_blog_posts_category", "blog_posts", ["category"])

    op.create_table(
        "blog_comments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("postId", sa.String(36), sa.ForeignKey("blog_posts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("userId", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("parentId", sa.String(36), sa.ForeignKey("blog_comments.id", ondelete="CASCADE"),
                  nullable=True),
        sa.Column("likes", sa.Integer, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_blog_comments_postId", "blog_comments", ["postId"])

    op.create_table(
        "gallery",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("imageUrl", sa.String(500), nullable=False),
        sa.Column("category", gallery_category, nullable=False),
        sa.Column("tags", sa.JSON, nullable=False),
        sa.Column("featured", sa.Boolean, nullable=False),
        sa.Column("date", sa.String(50), nullable=False),
        sa.Column("views", sa.Integer, nullable=False),
        sa.Column("downloads", sa.Integer, nullable=False),
        sa.Column("status", gallery_status, nullable=False),
        sa.Column("uploadedById", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_gallery_category", "gallery", ["category"])
    op.create_index("ix_gallery_status", "gallery", ["status"])


def downgrade() -> None:
    op.drop_index("ix_gallery_status", table_name="gallery")
    op.drop_index("ix_gallery_category", table_name="gallery")
    op.drop_table("gallery")
    op.drop_index("ix_blog_comments_postId", table_name="blog_comments")
    op.drop_table("blog_comments")
    op.drop_index("ix_blog_posts_category", table_name="blog_posts")
    op.drop_table("blog_posts")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
    gallery_status.drop(op.get_bind(), checkfirst=True)
    gallery_category.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
