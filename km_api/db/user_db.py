from typing import List
from sqlalchemy.exc import IntegrityError
from km_api.config.errors import AlreadyExistsError, ErrorMessages, NotFoundError, StorageError, ValidationError
from km_api.db.base_db import SqlAlchemyRepository
from km_api.db.repository import UserRepository
from km_api.models.user_model import User
from km_api.schemas.user_schema import UserEntity


class SqlUserRepository(SqlAlchemyRepository, UserRepository):

    @staticmethod
    def _to_entity(row: User) -> UserEntity:
        return UserEntity(
            id=row.id,
            name=row.name,
            email=row.email,
            password=row.hashed_password,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _get_row(self, user_id: int) -> User:
        with self._storage(f"get user by id {user_id}"):
            row = self.db.get(User, user_id)
        if row is None:
            raise NotFoundError(f"user with id {user_id} not found")
        return row

    # 자기 자신을 제외한 이메일 중복 검사
    def _email_taken_by_other(self, email: str, user_id: int) -> bool:
        with self._storage("check email uniqueness"):
            taken = (
                self.db.query(User.id)
                .filter(User.email == email, User.id != user_id)
                .first()
            )
        return taken is not None

    def get_all(self) -> List[UserEntity]:
        with self._storage("get all users"):
            rows = self.db.query(User).order_by(User.id).all()
        return [self._to_entity(r) for r in rows]

    def get_by_id(self, user_id: int) -> UserEntity:
        return self._to_entity(self._get_row(user_id))

    def get_by_email(self, email: str) -> UserEntity:
        with self._storage("get user by email"):
            row = self.db.query(User).filter(User.email == email).first()
        if row is None:
            raise NotFoundError(f"user with email {email} not found")
        return self._to_entity(row)

    def create(self, user: UserEntity) -> UserEntity:
        if not user.is_valid():
            raise ValidationError("invalid user data")
        if self.exists_by_email(user.email):
            raise AlreadyExistsError(ErrorMessages.EMAIL_ALREADY_EXISTS, user.email)

        row = User(name=user.name, email=user.email, hashed_password=user.password)
        self.db.add(row)
        try:
            self._commit("create user")
        except IntegrityError as e:
            # 사전 검사 이후 다른 요청이 같은 이메일을 먼저 저장한 경우
            if self.exists_by_email(user.email):
                raise AlreadyExistsError(ErrorMessages.EMAIL_ALREADY_EXISTS, user.email) from e
            raise StorageError(f"{ErrorMessages.DATABASE_ERROR}: failed to create user", str(e)) from e

        with self._storage("reload created user"):
            self.db.refresh(row)
        return self._to_entity(row)

    def update(self, user: UserEntity) -> UserEntity:
        row = self._get_row(user.id)

        if self._email_taken_by_other(user.email, user.id):
            raise AlreadyExistsError(ErrorMessages.EMAIL_ALREADY_EXISTS, user.email)

        row.name = user.name
        row.email = user.email
        try:
            self._commit("update user")
        except IntegrityError as e:
            raise AlreadyExistsError(ErrorMessages.EMAIL_ALREADY_EXISTS, user.email) from e

        with self._storage("reload updated user"):
            self.db.refresh(row)
        return self._to_entity(row)

    def delete(self, user_id: int) -> None:
        row = self._get_row(user_id)
        self.db.delete(row)
        try:
            self._commit(f"delete user {user_id}")
        except IntegrityError as e:
            raise StorageError(f"{ErrorMessages.DATABASE_ERROR}: failed to delete user {user_id}", str(e)) from e

    def exists(self, user_id: int) -> bool:
        with self._storage("check user existence"):
            return self.db.query(User).filter(User.id == user_id).count() > 0

    def exists_by_email(self, email: str) -> bool:
        with self._storage("check user email existence"):
            return self.db.query(User).filter(User.email == email).count() > 0

    def count(self) -> int:
        with self._storage("count users"):
            return self.db.query(User).count()

    def get_paginated(self, offset: int, limit: int) -> List[UserEntity]:
        with self._storage("get paginated users"):
            rows = (
                self.db.query(User)
                .order_by(User.created_at.desc(), User.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
        return [self._to_entity(r) for r in rows]
