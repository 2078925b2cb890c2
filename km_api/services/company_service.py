import logging
from typing import List, Optional, Tuple
from km_api.config.errors import (
    AlreadyExistsError,
    AppError,
    ErrorMessages,
    NotFoundError,
    ValidationError,
    with_context,
)
from km_api.db.repository import CompanyRepository, CompanyUserRepository
from km_api.schemas.common_schema import Pagination
from km_api.schemas.company_schema import ROLE_MEMBER, CompanyEntity, CompanyUserEntity
from km_api.utils.pagination_util import build_pagination, get_offset

logger = logging.getLogger(__name__)


def _require_id(value: int, message: str) -> None:
    if not value or value <= 0:
        raise ValidationError(message, f"id={value}")


class CompanyService:
    """회사 CRUD와 사용자-회사 소속 관계를 다루는 유스케이스."""

    def __init__(self, company_repo: CompanyRepository, company_user_repo: CompanyUserRepository):
        self.company_repo = company_repo
        self.company_user_repo = company_user_repo

    def _ensure_company_exists(self, company_id: int) -> None:
        if not self.company_repo.exists(company_id):
            raise NotFoundError(ErrorMessages.COMPANY_NOT_FOUND, f"company_id={company_id}")

    # ------------------------------------------------------------------
    # 회사 CRUD
    # ------------------------------------------------------------------
    def get_all_companies(self) -> List[CompanyEntity]:
        return self.company_repo.get_all()

    def get_company_by_id(self, company_id: int) -> CompanyEntity:
        _require_id(company_id, ErrorMessages.INVALID_COMPANY_ID)
        try:
            return self.company_repo.get_by_id(company_id)
        except AppError as e:
            raise with_context(e, f"failed to get company by id {company_id}") from e

    def create_company(
        self,
        name: str,
        email: str,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        website: Optional[str] = None,
        description: Optional[str] = None,
    ) -> CompanyEntity:
        if not name:
            raise ValidationError(ErrorMessages.NAME_REQUIRED)
        if not email:
            raise ValidationError(ErrorMessages.EMAIL_REQUIRED)

        if self.company_repo.exists_by_email(email):
            raise AlreadyExistsError(ErrorMessages.COMPANY_EMAIL_ALREADY_EXISTS, email)

        company = CompanyEntity(
            name=name,
            email=email,
            phone=phone or None,
            address=address or None,
            website=website or None,
            description=description or None,
        )
        if not company.is_valid():
            raise ValidationError(ErrorMessages.INVALID_COMPANY_DATA)

        try:
            created = self.company_repo.create(company)
        except AppError as e:
            raise with_context(e, "failed to create company") from e

        logger.info("company created: id=%s", created.id)
        return created

    def update_company(
        self,
        company_id: int,
        name: str,
        email: str,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        website: Optional[str] = None,
        description: Optional[str] = None,
    ) -> CompanyEntity:
        _require_id(company_id, ErrorMessages.INVALID_COMPANY_ID)
        if not name:
            raise ValidationError(ErrorMessages.NAME_REQUIRED)
        if not email:
            raise ValidationError(ErrorMessages.EMAIL_REQUIRED)

        try:
            existing = self.company_repo.get_by_id(company_id)
        except AppError as e:
            raise with_context(e, "failed to get company for update") from e

        if existing.email != email:
            if self.company_repo.exists_by_email(email):
                raise AlreadyExistsError(ErrorMessages.COMPANY_EMAIL_ALREADY_EXISTS, email)

        # 전체 교체: 비어 있는 선택 항목은 지워진다
        existing.name = name
        existing.email = email
        existing.phone = phone or None
        existing.address = address or None
        existing.website = website or None
        existing.description = description or None

        try:
            updated = self.company_repo.update(existing)
        except AppError as e:
            raise with_context(e, "failed to update company") from e

        logger.info("company updated: id=%s", company_id)
        return updated

    def delete_company(self, company_id: int) -> None:
        _require_id(company_id, ErrorMessages.INVALID_COMPANY_ID)
        self._ensure_company_exists(company_id)

        # 소속 관계는 저장소 레벨 CASCADE로 함께 삭제
        try:
            self.company_repo.delete(company_id)
        except AppError as e:
            raise with_context(e, "failed to delete company") from e
        logger.info("company deleted: id=%s", company_id)

    def get_companies_paginated(self, page: int, limit: int) -> Tuple[List[CompanyEntity], Pagination]:
        offset, limit = get_offset(page, limit)

        total = self.company_repo.count()
        companies = self.company_repo.get_paginated(offset, limit)

        return companies, build_pagination(page, limit, total)

    def search_companies(self, name: str) -> List[CompanyEntity]:
        if not name:
            raise ValidationError(ErrorMessages.SEARCH_NAME_REQUIRED)
        return self.company_repo.search_by_name(name)

    # ------------------------------------------------------------------
    # 소속 관계 (company_users)
    # ------------------------------------------------------------------
    def add_user_to_company(self, user_id: int, company_id: int, role: str = "") -> CompanyUserEntity:
        _require_id(user_id, ErrorMessages.INVALID_USER_ID)
        _require_id(company_id, ErrorMessages.INVALID_COMPANY_ID)
        role = (role or "").strip() or ROLE_MEMBER

        self._ensure_company_exists(company_id)

        if self.company_user_repo.exists(user_id, company_id):
            raise AlreadyExistsError(
                ErrorMessages.RELATION_ALREADY_EXISTS,
                f"user_id={user_id}, company_id={company_id}",
            )

        relation = CompanyUserEntity(user_id=user_id, company_id=company_id, role=role)
        try:
            created = self.company_user_repo.create(relation)
        except AppError as e:
            raise with_context(e, "failed to add user to company") from e

        logger.info("user %s added to company %s as %s", user_id, company_id, role)
        return created

    def update_user_role(self, user_id: int, company_id: int, role: str) -> CompanyUserEntity:
        _require_id(user_id, ErrorMessages.INVALID_USER_ID)
        _require_id(company_id, ErrorMessages.INVALID_COMPANY_ID)
        role = (role or "").strip()
        if not role:
            raise ValidationError(ErrorMessages.ROLE_REQUIRED)

        try:
            relation = self.company_user_repo.get_relation(user_id, company_id)
        except AppError as e:
            raise with_context(e, "failed to get user-company relation") from e

        relation.role = role
        try:
            updated = self.company_user_repo.update(relation)
        except AppError as e:
            raise with_context(e, "failed to update user role") from e

        logger.info("role of user %s in company %s set to %s", user_id, company_id, role)
        return updated

    def remove_user_from_company(self, user_id: int, company_id: int) -> None:
        _require_id(user_id, ErrorMessages.INVALID_USER_ID)
        _require_id(company_id, ErrorMessages.INVALID_COMPANY_ID)

        if not self.company_user_repo.exists(user_id, company_id):
            raise NotFoundError(
                ErrorMessages.RELATION_NOT_FOUND,
                f"user_id={user_id}, company_id={company_id}",
            )

        try:
            self.company_user_repo.delete(user_id, company_id)
        except AppError as e:
            raise with_context(e, "failed to remove user from company") from e
        logger.info("user %s removed from company %s", user_id, company_id)

    def get_users_by_company(self, company_id: int) -> List[CompanyUserEntity]:
        _require_id(company_id, ErrorMessages.INVALID_COMPANY_ID)
        self._ensure_company_exists(company_id)
        return self.company_user_repo.get_users_by_company_id(company_id)

    def get_companies_by_user(self, user_id: int) -> List[CompanyUserEntity]:
        _require_id(user_id, ErrorMessages.INVALID_USER_ID)
        return self.company_user_repo.get_companies_by_user_id(user_id)
