from typing import List
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from km_api.config.errors import AlreadyExistsError, ErrorMessages, NotFoundError, StorageError, ValidationError
from km_api.db.base_db import SqlAlchemyRepository, escape_like
from km_api.db.repository import CompanyRepository, CompanyUserRepository
from km_api.models.company_model import Company, CompanyUser
from km_api.schemas.company_schema import ROLE_MEMBER, CompanyEntity, CompanyUserEntity

_MUTABLE_FIELDS = ("name", "email", "phone", "address", "website", "description")


class SqlCompanyRepository(SqlAlchemyRepository, CompanyRepository):

    def _get_row(self, company_id: int) -> Company:
        with self._storage(f"get company by id {company_id}"):
            row = self.db.get(Company, company_id)
        if row is None:
            raise NotFoundError(f"company with id {company_id} not found")
        return row

    def _email_taken_by_other(self, email: str, company_id: int) -> bool:
        with self._storage("check company email uniqueness"):
            taken = (
                self.db.query(Company.id)
                .filter(Company.email == email, Company.id != company_id)
                .first()
            )
        return taken is not None

    def get_all(self) -> List[CompanyEntity]:
        with self._storage("get all companies"):
            rows = self.db.query(Company).order_by(Company.id).all()
        return [CompanyEntity.model_validate(r) for r in rows]

    def get_by_id(self, company_id: int) -> CompanyEntity:
        return CompanyEntity.model_validate(self._get_row(company_id))

    def get_by_email(self, email: str) -> CompanyEntity:
        with self._storage("get company by email"):
            row = self.db.query(Company).filter(Company.email == email).first()
        if row is None:
            raise NotFoundError(f"company with email {email} not found")
        return CompanyEntity.model_validate(row)

    def create(self, company: CompanyEntity) -> CompanyEntity:
        if not company.is_valid():
            raise ValidationError(ErrorMessages.INVALID_COMPANY_DATA)
        if self.exists_by_email(company.email):
            raise AlreadyExistsError(ErrorMessages.COMPANY_EMAIL_ALREADY_EXISTS, company.email)

        row = Company(**{field: getattr(company, field) for field in _MUTABLE_FIELDS})
        self.db.add(row)
        try:
            self._commit("create company")
        except IntegrityError as e:
            if self.exists_by_email(company.email):
                raise AlreadyExistsError(ErrorMessages.COMPANY_EMAIL_ALREADY_EXISTS, company.email) from e
            raise StorageError(f"{ErrorMessages.DATABASE_ERROR}: failed to create company", str(e)) from e

        with self._storage("reload created company"):
            self.db.refresh(row)
        return CompanyEntity.model_validate(row)

    def update(self, company: CompanyEntity) -> CompanyEntity:
        row = self._get_row(company.id)

        if self._email_taken_by_other(company.email, company.id):
            raise AlreadyExistsError(ErrorMessages.COMPANY_EMAIL_ALREADY_EXISTS, company.email)

        for field in _MUTABLE_FIELDS:
            setattr(row, field, getattr(company, field))
        try:
            self._commit("update company")
        except IntegrityError as e:
            raise AlreadyExistsError(ErrorMessages.COMPANY_EMAIL_ALREADY_EXISTS, company.email) from e

        with self._storage("reload updated company"):
            self.db.refresh(row)
        return CompanyEntity.model_validate(row)

    def delete(self, company_id: int) -> None:
        row = self._get_row(company_id)
        # company_users는 ON DELETE CASCADE로 함께 삭제
        self.db.delete(row)
        try:
            self._commit(f"delete company {company_id}")
        except IntegrityError as e:
            raise StorageError(f"{ErrorMessages.DATABASE_ERROR}: failed to delete company {company_id}", str(e)) from e

    def exists(self, company_id: int) -> bool:
        with self._storage("check company existence"):
            return self.db.query(Company).filter(Company.id == company_id).count() > 0

    def exists_by_email(self, email: str) -> bool:
        with self._storage("check company email existence"):
            return self.db.query(Company).filter(Company.email == email).count() > 0

    def count(self) -> int:
        with self._storage("count companies"):
            return self.db.query(Company).count()

    def get_paginated(self, offset: int, limit: int) -> List[CompanyEntity]:
        with self._storage("get paginated companies"):
            rows = (
                self.db.query(Company)
                .order_by(Company.created_at.desc(), Company.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
        return [CompanyEntity.model_validate(r) for r in rows]

    def search_by_name(self, name: str) -> List[CompanyEntity]:
        pattern = f"%{escape_like(name.lower())}%"
        with self._storage("search companies by name"):
            rows = (
                self.db.query(Company)
                .filter(func.lower(Company.name).like(pattern, escape="\\"))
                .order_by(Company.id)
                .all()
            )
        return [CompanyEntity.model_validate(r) for r in rows]


class SqlCompanyUserRepository(SqlAlchemyRepository, CompanyUserRepository):

    def _get_row(self, user_id: int, company_id: int) -> CompanyUser:
        with self._storage("get company-user relation"):
            row = (
                self.db.query(CompanyUser)
                .filter(CompanyUser.user_id == user_id, CompanyUser.company_id == company_id)
                .first()
            )
        if row is None:
            raise NotFoundError(
                f"relation between user {user_id} and company {company_id} not found"
            )
        return row

    def get_users_by_company_id(self, company_id: int) -> List[CompanyUserEntity]:
        with self._storage(f"get users by company id {company_id}"):
            rows = (
                self.db.query(CompanyUser)
                .filter(CompanyUser.company_id == company_id)
                .order_by(CompanyUser.id)
                .all()
            )
        return [CompanyUserEntity.model_validate(r) for r in rows]

    def get_companies_by_user_id(self, user_id: int) -> List[CompanyUserEntity]:
        with self._storage(f"get companies by user id {user_id}"):
            rows = (
                self.db.query(CompanyUser)
                .filter(CompanyUser.user_id == user_id)
                .order_by(CompanyUser.id)
                .all()
            )
        return [CompanyUserEntity.model_validate(r) for r in rows]

    def create(self, company_user: CompanyUserEntity) -> CompanyUserEntity:
        user_id, company_id = company_user.user_id, company_user.company_id
        if self.exists(user_id, company_id):
            raise AlreadyExistsError(
                ErrorMessages.RELATION_ALREADY_EXISTS,
                f"user_id={user_id}, company_id={company_id}",
            )

        row = CompanyUser(
            user_id=user_id,
            company_id=company_id,
            role=company_user.role or ROLE_MEMBER,
        )
        self.db.add(row)
        try:
            self._commit("create company-user relation")
        except IntegrityError as e:
            # unique(user_id, company_id) 위반이면 중복, 아니면 외래키 위반(사용자/회사 없음)
            if self.exists(user_id, company_id):
                raise AlreadyExistsError(
                    ErrorMessages.RELATION_ALREADY_EXISTS,
                    f"user_id={user_id}, company_id={company_id}",
                ) from e
            raise NotFoundError(f"user {user_id} or company {company_id} not found") from e

        with self._storage("reload created relation"):
            self.db.refresh(row)
        return CompanyUserEntity.model_validate(row)

    def update(self, company_user: CompanyUserEntity) -> CompanyUserEntity:
        row = self._get_row(company_user.user_id, company_user.company_id)
        row.role = company_user.role
        try:
            self._commit("update company-user relation")
        except IntegrityError as e:
            raise StorageError(f"{ErrorMessages.DATABASE_ERROR}: failed to update relation", str(e)) from e

        with self._storage("reload updated relation"):
            self.db.refresh(row)
        return CompanyUserEntity.model_validate(row)

    def delete(self, user_id: int, company_id: int) -> None:
        row = self._get_row(user_id, company_id)
        self.db.delete(row)
        try:
            self._commit("delete company-user relation")
        except IntegrityError as e:
            raise StorageError(f"{ErrorMessages.DATABASE_ERROR}: failed to delete relation", str(e)) from e

    def get_relation(self, user_id: int, company_id: int) -> CompanyUserEntity:
        return CompanyUserEntity.model_validate(self._get_row(user_id, company_id))

    def exists(self, user_id: int, company_id: int) -> bool:
        with self._storage("check relation existence"):
            count = (
                self.db.query(CompanyUser)
                .filter(CompanyUser.user_id == user_id, CompanyUser.company_id == company_id)
                .count()
            )
        return count > 0
