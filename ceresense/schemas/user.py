from pydantic import BaseModel

from ceresense.models.user import User, UserRole


class UserRoleRequest(BaseModel):
    role: UserRole


def serialize_user(u: User) -> dict:
    """Public projection of a user: no password hash, no OTP state."""
    return {
        "id":        u.id,
        "fullName":  u.fullName,
        "username":  u.username,
        "email":     u.email,
        "role":      u.role.value,
        "createdAt": u.createdAt.isoformat() if u.createdAt else None,
        "updatedAt": u.updatedAt.isoformat() if u.updatedAt else None,
    }
