"""
Repository interfaces
=====================

Abstract contracts the services depend on. The SQLAlchemy implementations
live next to this module (``user_db``, ``company_db``); tests substitute
in-memory fakes.

Failure contract shared by every implementation:

- ``NotFoundError`` when the referenced row or relation does not exist
- ``AlreadyExistsError`` when a uniqueness rule would be broken, whether the
  pre-check caught it or the storage constraint did
- ``StorageError`` for anything else the storage layer raises
"""
from abc import ABC, abstractmethod
from typing import List

from km_api.schemas.company_schema import CompanyEntity, CompanyUserEntity
from km_api.schemas.user_schema import UserEntity


class UserRepository(ABC):

    @abstractmethod
    def get_all(self) -> List[UserEntity]:
        pass

    @abstractmethod
    def get_by_id(self, user_id: int) -> UserEntity:
        """
        Args:
            user_id: User identifier

        Returns:
            The stored user, including its password hash

        Raises:
            NotFoundError: If no user has this id
        """
        pass

    @abstractmethod
    def get_by_email(self, email: str) -> UserEntity:
        pass

    @abstractmethod
    def create(self, user: UserEntity) -> UserEntity:
        """
        Persist a new user. ``user.password`` must already be hashed.

        Returns:
            The stored user with its generated id and timestamps

        Raises:
            AlreadyExistsError: If the email is already registered
        """
        pass

    @abstractmethod
    def update(self, user: UserEntity) -> UserEntity:
        """
        Overwrite name and email of the user with ``user.id``.

        Raises:
            NotFoundError: If the id does not exist
            AlreadyExistsError: If another user already owns the new email
        """
        pass

    @abstractmethod
    def delete(self, user_id: int) -> None:
        pass

    @abstractmethod
    def exists(self, user_id: int) -> bool:
        pass

    @abstractmethod
    def exists_by_email(self, email: str) -> bool:
        pass

    @abstractmethod
    def count(self) -> int:
        pass

    @abstractmethod
    def get_paginated(self, offset: int, limit: int) -> List[UserEntity]:
        """Newest first (``created_at`` descending)."""
        pass


class CompanyRepository(ABC):

    @abstractmethod
    def get_all(self) -> List[CompanyEntity]:
        pass

    @abstractmethod
    def get_by_id(self, company_id: int) -> CompanyEntity:
        pass

    @abstractmethod
    def get_by_email(self, email: str) -> CompanyEntity:
        pass

    @abstractmethod
    def create(self, company: CompanyEntity) -> CompanyEntity:
        pass

    @abstractmethod
    def update(self, company: CompanyEntity) -> CompanyEntity:
        pass

    @abstractmethod
    def delete(self, company_id: int) -> None:
        """Hard delete. Memberships of the company go with it."""
        pass

    @abstractmethod
    def exists(self, company_id: int) -> bool:
        pass

    @abstractmethod
    def exists_by_email(self, email: str) -> bool:
        pass

    @abstractmethod
    def count(self) -> int:
        pass

    @abstractmethod
    def get_paginated(self, offset: int, limit: int) -> List[CompanyEntity]:
        pass

    @abstractmethod
    def search_by_name(self, name: str) -> List[CompanyEntity]:
        """Case-insensitive substring match on the company name."""
        pass


class CompanyUserRepository(ABC):

    @abstractmethod
    def get_users_by_company_id(self, company_id: int) -> List[CompanyUserEntity]:
        pass

    @abstractmethod
    def get_companies_by_user_id(self, user_id: int) -> List[CompanyUserEntity]:
        pass

    @abstractmethod
    def create(self, company_user: CompanyUserEntity) -> CompanyUserEntity:
        """
        Raises:
            AlreadyExistsError: If the (user, company) pair already has a row
        """
        pass

    @abstractmethod
    def update(self, company_user: CompanyUserEntity) -> CompanyUserEntity:
        """Only the role is written."""
        pass

    @abstractmethod
    def delete(self, user_id: int, company_id: int) -> None:
        pass

    @abstractmethod
    def get_relation(self, user_id: int, company_id: int) -> CompanyUserEntity:
        pass

    @abstractmethod
    def exists(self, user_id: int, company_id: int) -> bool:
        pass
