from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.orm import Session
from typing import Optional

from ceresense.database import get_db
from ceresense.dependencies import get_admin_user, get_editor_or_admin, get_file_storage
from ceresense.models.gallery import GalleryCategory, GalleryStatus
from ceresense.schemas.common import PageEnvelope, ok, page_of
from ceresense.schemas.gallery import (
    GalleryCreateRequest, GalleryUpdateRequest, GalleryStatusRequest, parse_bool, parse_tags,
)
from ceresense.services.gallery_service import gallery_service
from ceresense.utils.exceptions import InvalidFileException, ValidationException
from ceresense.utils.storage import FileStorage

router = APIRouter(prefix="/gallery")


# ─── POST /gallery (multipart) ────────────────────────────────────────────────
@router.post("", status_code=status.HTTP_201_CREATED, summary="Upload a gallery item (Admin, Editor)")
def create_item(
    image:       Optional[UploadFile] = File(None),
    title:       str                  = Form(""),
    description: Optional[str]        = Form(None),
    category:    str                  = Form(GalleryCategory.PROJECTS.value),
    tags:        Optional[str]        = Form(None, description="JSON array or comma-separated"),
    featured:    Optional[str]        = Form(None),
    date:        str                  = Form(""),
    status_:     Optional[str]        = Form(None, alias="status"),
    db:          Session              = Depends(get_db),
    storage:     FileStorage          = Depends(get_file_storage),
    current_user: dict                = Depends(get_editor_or_admin),
):
    if image is None or not image.filename:
        raise InvalidFileException("Image file is required")

    fields = {
        "title": title, "description": description, "category": category,
        "tags": tags, "featured": parse_bool(featured), "date": date,
    }
    if status_:
        fields["status"] = status_
    try:
        data = GalleryCreateRequest(**fields)
    except ValidationError as e:
        raise ValidationException([
            {"field": ".".join(str(l) for l in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ])

    image_url = storage.save(image, "gallery")
    try:
        item = gallery_service.create_item(db, data, image_url, current_user["id"])
    except Exception:
        storage.delete(image_url)
        raise
    return ok("Gallery item created successfully", item)


# ─── Reads ────────────────────────────────────────────────────────────────────
@router.get("", summary="List gallery items (paginated)", response_model=PageEnvelope)
def list_items(
    page:     int                       = Query(1, ge=1),
    limit:    int                       = Query(10, ge=1, le=100),
    search:   Optional[str]             = Query(None, description="Search by title"),
    category: Optional[GalleryCategory] = Query(None),
    status:   Optional[GalleryStatus]   = Query(None),
    featured: Optional[bool]            = Query(None),
    tags:     Optional[str]             = Query(None, description="Comma-separated; matches any"),
    db:       Session                   = Depends(get_db),
):
    data, total = gallery_service.list_items(
        db, page, limit, search, category, status, featured, parse_tags(tags),
    )
    return page_of("Gallery items retrieved successfully", data, total, page, limit)


@router.get("/stats", summary="Gallery statistics")
def get_stats(db: Session = Depends(get_db)):
    return ok("Gallery statistics retrieved", gallery_service.get_stats(db))


@router.get("/categories/stats", summary="Items per category")
def get_category_stats(db: Session = Depends(get_db)):
    return ok("Category statistics retrieved", gallery_service.get_category_stats(db))


@router.get("/featured", summary="Featured active items")
def list_featured(db: Session = Depends(get_db)):
    data = gallery_service.list_featured(db)
    return ok(f"{len(data)} featured items found", data)


@router.get("/category/{category}", summary="Active items in a category")
def list_by_category(category: GalleryCategory, db: Session = Depends(get_db)):
    data = gallery_service.list_by_category(db, category)
    return ok(f"{len(data)} items found", data)


@router.get("/{item_id}", summary="Get a gallery item")
def get_item(item_id: str, db: Session = Depends(get_db)):
    return ok("Gallery item retrieved", gallery_service.get_item(db, item_id))


# ─── Writes ───────────────────────────────────────────────────────────────────
@router.put("/{item_id}", summary="Update a gallery item (Admin, Editor)")
def update_item(
    item_id: str,
    body:    GalleryUpdateRequest,
    db:      Session = Depends(get_db),
    _:       dict    = Depends(get_editor_or_admin),
):
    data = gallery_service.update_item(db, item_id, body)
    return ok("Gallery item updated successfully", data)


@router.delete("/{item_id}", summary="Delete a gallery item and its image (Admin)")
def delete_item(
    item_id: str,
    db:      Session     = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
    _:       dict        = Depends(get_admin_user),
):
    gallery_service.delete_item(db, item_id, storage)
    return ok("Gallery item deleted successfully", None)


@router.put("/{item_id}/views", summary="Increment view count")
def increment_views(item_id: str, db: Session = Depends(get_db)):
    return ok("View recorded", gallery_service.increment_views(db, item_id))


@router.put("/{item_id}/downloads", summary="Increment download count")
def increment_downloads(item_id: str, db: Session = Depends(get_db)):
    return ok("Download recorded", gallery_service.increment_downloads(db, item_id))


@router.put("/{item_id}/status", summary="Change item status (Admin, Editor)")
def update_status(
    item_id: str,
    body:    GalleryStatusRequest,
    db:      Session = Depends(get_db),
    _:       dict    = Depends(get_editor_or_admin),
):
    data = gallery_service.update_status(db, item_id, body.status)
    return ok("Gallery item status updated", data)


@router.put("/{item_id}/featured", summary="Toggle featured flag (Admin, Editor)")
def toggle_featured(
    item_id: str,
    db:      Session = Depends(get_db),
    _:       dict    = Depends(get_editor_or_admin),
):
    data = gallery_service.toggle_featured(db, item_id)
    return ok("Gallery item featured flag toggled", data)
