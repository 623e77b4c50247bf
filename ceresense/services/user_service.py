from sqlalchemy.orm import Session

from ceresense.models.user import UserRole
from ceresense.repositories.user_repository import UserRepository
from ceresense.schemas.user import serialize_user
from ceresense.utils.exceptions import NotFoundException, ForbiddenException


class UserService:

    # ─── List ─────────────────────────────────────────────────────────────────
    def list_users(
        self, db: Session, page: int, limit: int,
        search: str | None, role: UserRole | None,
    ) -> tuple[list[dict], int]:
        users, total = UserRepository(db).list_users(page, limit, search, role)
        return [serialize_user(u) for u in users], total

    # ─── Change Role ──────────────────────────────────────────────────────────
    def change_role(self, db: Session, user_id: str, role: UserRole, actor_id: str) -> dict:
        repo = UserRepository(db)
        user = repo.find_by_id(user_id)
        if not user:
            raise NotFoundException("User")
        if user.id == actor_id:
            raise ForbiddenException("You cannot change your own role")
        return serialize_user(repo.update_role(user, role))


user_service = UserService()
