from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from ceresense.database import get_db
from ceresense.dependencies import get_current_user, get_admin_user
from ceresense.models.user import UserRole
from ceresense.schemas.common import PageEnvelope, ok, page_of
from ceresense.schemas.user import UserRoleRequest
from ceresense.services.user_service import user_service

router = APIRouter(prefix="/users")


# GET /users: Admin only
@router.get("", status_code=status.HTTP_200_OK, summary="List all users (paginated)",
            response_model=PageEnvelope)
def list_users(
    page:   int                = Query(1,    ge=1),
    limit:  int                = Query(20,   ge=1, le=100),
    search: Optional[str]      = Query(None, description="Search by full name, username, or email"),
    role:   Optional[UserRole] = Query(None),
    db:     Session            = Depends(get_db),
    _:      dict               = Depends(get_admin_user),
):
    data, total = user_service.list_users(db, page, limit, search, role)
    return page_of("Users retrieved successfully", data, total, page, limit)


# GET /users/me: Any authenticated user
@router.get("/me", status_code=status.HTTP_200_OK, summary="Get current user profile")
def get_me(current_user: dict = Depends(get_current_user)):
    return ok("Profile retrieved", current_user)


# PATCH /users/{id}/role: Admin only
@router.patch("/{user_id}/role", status_code=status.HTTP_200_OK, summary="Change a user's role")
def change_role(
    user_id: str,
    body:    UserRoleRequest,
    db:      Session = Depends(get_db),
    current_user: dict = Depends(get_admin_user),
):
    data = user_service.change_role(db, user_id, body.role, current_user["id"])
    return ok("User role updated successfully", data)
