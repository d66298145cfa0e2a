# storefront/services/user_service.py
import uuid

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel
from storefront.domain.errors import DuplicateIdentity, InvalidCredentials
from storefront.domain.schemas import RegisterIn
from storefront.repos.user_repo import UserRepo
from storefront.utils.settings import BCRYPT_ROUNDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def hash_password(password: str, salt: bytes) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("ascii"))
    except ValueError:
        # over-long password or a corrupt stored hash
        return False


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def register(self, payload: RegisterIn) -> UserModel:
        self._ensure_unique(payload.username, payload.email)

        salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
        user = UserModel(
            username=payload.username,
            email=payload.email,
            salt=salt.decode("ascii"),
            password_hash=hash_password(payload.password, salt),
        )

        try:
            created = self.repo.create_user(user)
        except IntegrityError:
            # lost a race with a concurrent registration
            self.repo.rollback()
            self._ensure_unique(payload.username, payload.email)
            raise DuplicateIdentity("A user with the given username or email is already registered")

        logger.info(f"Registered user {created.username} ({created.id})")
        return created

    def authenticate(self, username: str, password: str) -> UserModel:
        user = self.repo.get_by_username(username.strip())
        if user is None or not verify_password(password, user.password_hash):
            logger.info(f"Failed login for {username!r}")
            raise InvalidCredentials()
        return user

    def get_user(self, user_id: uuid.UUID) -> UserModel | None:
        return self.repo.get_user(user_id)

    def _ensure_unique(self, username: str, email: str) -> None:
        for existing in self.repo.find_conflicting(username, email):
            if existing.username == username:
                raise DuplicateIdentity("A user with the given username is already registered")
            raise DuplicateIdentity("A user with the given email is already registered")
