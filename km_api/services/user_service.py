import logging
from typing import List, Optional, Tuple
from email_validator import EmailNotValidError, validate_email
from km_api.config.errors import (
    AlreadyExistsError,
    AppError,
    AuthenticationError,
    ErrorMessages,
    NotFoundError,
    ValidationError,
    with_context,
)
from km_api.db.repository import UserRepository
from km_api.schemas.common_schema import Pagination
from km_api.schemas.user_schema import UserEntity
from km_api.utils.pagination_util import build_pagination, get_offset
from km_api.utils.password_util import PasswordHasher, exceeds_bcrypt_limit

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def _validate_email(email: str) -> None:
    if not email:
        raise ValidationError(ErrorMessages.EMAIL_REQUIRED)
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationError(ErrorMessages.INVALID_EMAIL, str(e)) from e


class UserService:
    """
    사용자 유스케이스.

    Every user handed back to a caller has an empty ``password``; the stored
    hash never leaves this class.
    """

    def __init__(self, user_repo: UserRepository, hasher: Optional[PasswordHasher] = None):
        self.user_repo = user_repo
        self.hasher = hasher or PasswordHasher()

    # 회원가입
    def create(self, name: str, email: str, password: str) -> UserEntity:
        if not name or not name.strip():
            raise ValidationError(ErrorMessages.NAME_REQUIRED)
        _validate_email(email)
        if not password:
            raise ValidationError(ErrorMessages.PASSWORD_REQUIRED)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(ErrorMessages.PASSWORD_TOO_SHORT)
        if exceeds_bcrypt_limit(password):
            raise ValidationError(ErrorMessages.PASSWORD_TOO_LONG)

        if self.user_repo.exists_by_email(email):
            raise AlreadyExistsError(ErrorMessages.EMAIL_ALREADY_EXISTS, email)

        # 저장 직전에 한 번만 해시
        user = UserEntity(name=name.strip(), email=email, password=self.hasher.hash(password))
        try:
            created = self.user_repo.create(user)
        except AppError as e:
            raise with_context(e, "failed to create user") from e

        logger.info("user created: id=%s", created.id)
        return created.without_password()

    def get_all_users(self) -> List[UserEntity]:
        users = self.user_repo.get_all()
        return [u.without_password() for u in users]

    def get_user_by_id(self, user_id: int) -> UserEntity:
        try:
            user = self.user_repo.get_by_id(user_id)
        except AppError as e:
            raise with_context(e, f"failed to get user by id {user_id}") from e
        return user.without_password()

    def get_users_paginated(self, page: int, limit: int) -> Tuple[List[UserEntity], Pagination]:
        offset, limit = get_offset(page, limit)

        total = self.user_repo.count()
        users = self.user_repo.get_paginated(offset, limit)

        pagination = build_pagination(page, limit, total)
        return [u.without_password() for u in users], pagination

    # 회원 정보 수정
    def update_user(self, user_id: int, name: str, email: str) -> UserEntity:
        if not name or not name.strip():
            raise ValidationError(ErrorMessages.NAME_REQUIRED)
        _validate_email(email)

        try:
            existing = self.user_repo.get_by_id(user_id)
        except NotFoundError as e:
            raise with_context(e, "failed to get user for update") from e

        # 이메일이 바뀐 경우에만 중복 검사
        if existing.email != email:
            if self.user_repo.exists_by_email(email):
                raise AlreadyExistsError(ErrorMessages.EMAIL_ALREADY_EXISTS, email)

        existing.name = name.strip()
        existing.email = email
        try:
            updated = self.user_repo.update(existing)
        except AppError as e:
            raise with_context(e, "failed to update user") from e

        logger.info("user updated: id=%s", user_id)
        return updated.without_password()

    def delete_user(self, user_id: int) -> None:
        self.user_repo.delete(user_id)
        logger.info("user deleted: id=%s", user_id)

    # 로그인
    def authenticate_user(self, email: str, password: str) -> UserEntity:
        # 이메일 없음 / 비밀번호 불일치를 구분하지 않는다
        try:
            user = self.user_repo.get_by_email(email)
        except NotFoundError:
            raise AuthenticationError(ErrorMessages.INVALID_CREDENTIALS) from None

        if not self.hasher.verify(user.password, password):
            raise AuthenticationError(ErrorMessages.INVALID_CREDENTIALS)

        return user.without_password()
