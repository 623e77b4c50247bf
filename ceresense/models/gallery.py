import enum
import uuid

from sqlalchemy import Column, Integer, String, Text, Boolean, Enum, ForeignKey, TIMESTAMP, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ceresense.database import Base


class GalleryCategory(str, enum.Enum):
    LEARNING   = "learning"
    PROJECTS   = "projects"
    EVENTS     = "events"
    WORKSHOPS  = "workshops"
    GRADUATION = "graduation"


class GalleryStatus(str, enum.Enum):
    ACTIVE   = "active"
    PENDING  = "pending"
    ARCHIVED = "archived"


class GalleryItem(Base):
    __tablename__ = "gallery"

    id           = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title        = Column(String(255), nullable=False)
    description  = Column(Text, nullable=True)
    imageUrl     = Column(String(500), nullable=False)
    category     = Column(Enum(GalleryCategory), default=GalleryCategory.PROJECTS, nullable=False, index=True)
    tags         = Column(JSON, default=list, nullable=False)
    featured     = Column(Boolean, default=False, nullable=False)
    date         = Column(String(50), nullable=False)       # e.g. "March 2025"
    views        = Column(Integer, default=0, nullable=False)
    downloads    = Column(Integer, default=0, nullable=False)
    status       = Column(Enum(GalleryStatus), default=GalleryStatus.PENDING, nullable=False, index=True)
    uploadedById = Column(String(36), ForeignKey("users.id"), nullable=True)
    createdAt    = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt    = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                          onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    uploaded_by = relationship("User")

    def __repr__(self):
        return f"<GalleryItem id={self.id} title={self.title!r} status={self.status}>"
