import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from ceresense.models.gallery import GalleryItem, GalleryCategory, GalleryStatus
from ceresense.schemas.gallery import GalleryCreateRequest, GalleryUpdateRequest
from ceresense.utils.exceptions import NotFoundException
from ceresense.utils.storage import FileStorage

logger = logging.getLogger(__name__)


def _serialize(g: GalleryItem) -> dict:
    return {
        "id":          g.id,
        "title":       g.title,
        "description": g.description,
        "imageUrl":    g.imageUrl,
        "category":    g.category.value,
        "tags":        g.tags or [],
        "featured":    g.featured,
        "date":        g.date,
        "views":       g.views,
        "downloads":   g.downloads,
        "status":      g.status.value,
        "uploadedBy":  {"id": g.uploaded_by.id, "fullName": g.uploaded_by.fullName}
                       if g.uploaded_by else None,
        "createdAt":   g.createdAt.isoformat() if g.createdAt else None,
        "updatedAt":   g.updatedAt.isoformat() if g.updatedAt else None,
    }


class GalleryService:

    def _get(self, db: Session, item_id: str) -> GalleryItem:
        g = db.query(GalleryItem).filter(GalleryItem.id == item_id).first()
        if not g:
            raise NotFoundException(f"Gallery item {item_id}")
        return g

    def _save(self, db: Session, g: GalleryItem) -> dict:
        db.commit()
        db.refresh(g)
        return _serialize(g)

    # ─── Create ───────────────────────────────────────────────────────────────
    def create_item(self, db: Session, data: GalleryCreateRequest, image_url: str, actor_id: str) -> dict:
        g = GalleryItem(**data.model_dump(), imageUrl=image_url, uploadedById=actor_id)
        db.add(g)
        return self._save(db, g)

    # ─── List ─────────────────────────────────────────────────────────────────
    def list_items(
        self, db: Session, page: int, limit: int,
        search: str | None, category: GalleryCategory | None, status: GalleryStatus | None,
        featured: bool | None, tags: list[str] | None,
    ) -> tuple[list[dict], int]:
        q = db.query(GalleryItem)

        if search:
            q = q.filter(GalleryItem.title.ilike(f"%{search}%"))
        if category:
            q = q.filter(GalleryItem.category == category)
        if status:
            q = q.filter(GalleryItem.status == status)
        if featured is not None:
            q = q.filter(GalleryItem.featured == featured)

        items = q.order_by(GalleryItem.createdAt.desc()).all()
        if tags:
            # JSON columns have no portable "contains"; tag filtering happens here
            wanted = set(tags)
            items = [g for g in items if wanted.intersection(g.tags or [])]

        total = len(items)
        page_items = items[(page - 1) * limit: page * limit]
        return [_serialize(g) for g in page_items], total

    def get_item(self, db: Session, item_id: str) -> dict:
        return _serialize(self._get(db, item_id))

    def list_featured(self, db: Session) -> list[dict]:
        items = db.query(GalleryItem).filter(
            GalleryItem.featured == True,  # noqa: E712
            GalleryItem.status == GalleryStatus.ACTIVE,
        ).order_by(GalleryItem.createdAt.desc()).limit(10).all()
        return [_serialize(g) for g in items]

    def list_by_category(self, db: Session, category: GalleryCategory) -> list[dict]:
        items = db.query(GalleryItem).filter(
            GalleryItem.category == category,
            GalleryItem.status == GalleryStatus.ACTIVE,
        ).order_by(GalleryItem.createdAt.desc()).all()
        return [_serialize(g) for g in items]

    # ─── Update ───────────────────────────────────────────────────────────────
    def update_item(self, db: Session, item_id: str, data: GalleryUpdateRequest) -> dict:
        g = self._get(db, item_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(g, field, value)
        return self._save(db, g)

    def update_status(self, db: Session, item_id: str, status: GalleryStatus) -> dict:
        g = self._get(db, item_id)
        g.status = status
        return self._save(db, g)

    def toggle_featured(self, db: Session, item_id: str) -> dict:
        g = self._get(db, item_id)
        g.featured = not g.featured
        return self._save(db, g)

    def increment_views(self, db: Session, item_id: str) -> dict:
        g = self._get(db, item_id)
        g.views += 1
        return self._save(db, g)

    def increment_downloads(self, db: Session, item_id: str) -> dict:
        g = self._get(db, item_id)
        g.downloads += 1
        return self._save(db, g)

    # ─── Delete ───────────────────────────────────────────────────────────────
    def delete_item(self, db: Session, item_id: str, storage: FileStorage) -> None:
        g = self._get(db, item_id)
        image_url = g.imageUrl
        db.delete(g)
        db.commit()
        if not storage.delete(image_url):
            logger.warning(f"Image for deleted gallery item {item_id} was not on disk: {image_url}")

    # ─── Stats ────────────────────────────────────────────────────────────────
    def get_stats(self, db: Session) -> dict:
        def count(*criteria) -> int:
            return db.query(GalleryItem).filter(*criteria).count()

        total_views, total_downloads = db.query(
            func.coalesce(func.sum(GalleryItem.views), 0),
            func.coalesce(func.sum(GalleryItem.downloads), 0),
        ).one()
        return {
            "total":          count(),
            "active":         count(GalleryItem.status == GalleryStatus.ACTIVE),
            "pending":        count(GalleryItem.status == GalleryStatus.PENDING),
            "featured":       count(GalleryItem.featured == True),  # noqa: E712
            "totalViews":     int(total_views or 0),
            "totalDownloads": int(total_downloads or 0),
        }

    def get_category_stats(self, db: Session) -> list[dict]:
        counts = dict(
            db.query(GalleryItem.category, func.count(GalleryItem.id))
              .group_by(GalleryItem.category).all()
        )
        return [{"category": c.value, "count": counts.get(c, 0)} for c in GalleryCategory]


gallery_service = GalleryService()
