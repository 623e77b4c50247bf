"""
Create the first admin account (registration only ever yields role "user").

    python -m ceresense.seed_admin --username admin --email admin@ceresense.io \
        --full-name "Site Admin" --password 'S3cure!pass'
"""
import argparse
import logging
import sys

from ceresense.database import SessionLocal, create_tables
from ceresense.models.user import UserRole
from ceresense.repositories.user_repository import UserRepository
from ceresense.schemas.auth import RegisterRequest, validate_register
from ceresense.utils.exceptions import AppException
from ceresense.utils.security import password_hasher

logger = logging.getLogger("ceresense.seed_admin")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--full-name", required=True)
    parser.add_argument("--username", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    request = RegisterRequest(
        fullName=args.full_name, username=args.username, email=args.email,
        password=args.password, confirmPassword=args.password,
    )
    violations = validate_register(request)
    if violations:
        for v in violations:
            logger.error(f"{v['field']}: {v['message']}")
        return 1

    create_tables()
    db = SessionLocal()
    try:
        repo = UserRepository(db)
        if repo.find_by_email(args.email) or repo.find_by_username(args.username):
            logger.error("A user with this email or username already exists")
            return 1
        user = repo.create(
            full_name=args.full_name,
            username=args.username,
            email=args.email,
            password_hash=password_hasher.hash(args.password),
            role=UserRole.ADMIN,
        )
    except AppException as e:
        logger.error(e.message)
        return 1
    finally:
        db.close()

    logger.info(f"Admin created: {user.username} ({user.id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
