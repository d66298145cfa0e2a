import uuid

from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: uuid.UUID) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_by_username(self, username: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.username == username)
        ).scalar_one_or_none()

    def find_conflicting(self, username: str, email: str) -> list[UserModel]:
        return list(
            self.db.execute(
                select(UserModel).where(or_(UserModel.username == username, UserModel.email == email))
            ).scalars()
        )

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def rollback(self):
        self.db.rollback()
