"""Shared fixtures: in-memory SQLite sessions and in-memory fake repositories."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from km_api.config.database import Base, create_db_engine, get_db
from km_api.config.errors import AlreadyExistsError, NotFoundError
from km_api.db.repository import CompanyRepository, CompanyUserRepository, UserRepository
from km_api.main import create_app
from km_api.models import company_model, user_model  # noqa: F401
from km_api.routers.deps import get_password_hasher
from km_api.schemas.company_schema import CompanyEntity, CompanyUserEntity
from km_api.schemas.user_schema import UserEntity
from km_api.utils.password_util import PasswordHasher

_BASE_TIME = datetime(2024, 1, 1, tzinfo=UTC)

# ---------------------------------------------------------------------------
# In-memory fakes
# ---------------------------------------------------------------------------


class FakeUserRepository(UserRepository):
    """In-memory user repository that honours the same failure contract."""

    def __init__(self):
        self._users: dict[int, UserEntity] = {}
        self._next_id = 1
        self.calls: list[str] = []

    def _stamp(self) -> datetime:
        return _BASE_TIME + timedelta(seconds=self._next_id)

    def get_all(self):
        self.calls.append("get_all")
        return [u.model_copy() for u in self._users.values()]

    def get_by_id(self, user_id):
        self.calls.append("get_by_id")
        if user_id not in self._users:
            raise NotFoundError(f"user with id {user_id} not found")
        return self._users[user_id].model_copy()

    def get_by_email(self, email):
        self.calls.append("get_by_email")
        for u in self._users.values():
            if u.email == email:
                return u.model_copy()
        raise NotFoundError(f"user with email {email} not found")

    def create(self, user):
        self.calls.append("create")
        if any(u.email == user.email for u in self._users.values()):
            raise AlreadyExistsError("user with this email already exists")
        stamp = self._stamp()
        stored = user.model_copy(update={"id": self._next_id, "created_at": stamp, "updated_at": stamp})
        self._users[stored.id] = stored
        self._next_id += 1
        return stored.model_copy()

    def update(self, user):
        self.calls.append("update")
        if user.id not in self._users:
            raise NotFoundError(f"user with id {user.id} not found")
        if any(u.email == user.email and u.id != user.id for u in self._users.values()):
            raise AlreadyExistsError("user with this email already exists")
        stored = self._users[user.id]
        stored.name = user.name
        stored.email = user.email
        return stored.model_copy()

    def delete(self, user_id):
        self.calls.append("delete")
        if user_id not in self._users:
            raise NotFoundError(f"user with id {user_id} not found")
        del self._users[user_id]

    def exists(self, user_id):
        self.calls.append("exists")
        return user_id in self._users

    def exists_by_email(self, email):
        self.calls.append("exists_by_email")
        return any(u.email == email for u in self._users.values())

    def count(self):
        self.calls.append("count")
        return len(self._users)

    def get_paginated(self, offset, limit):
        self.calls.append("get_paginated")
        ordered = sorted(self._users.values(), key=lambda u: (u.created_at, u.id), reverse=True)
        return [u.model_copy() for u in ordered[offset : offset + limit]]

    def stored(self, user_id) -> UserEntity:
        return self._users[user_id]


class FakeCompanyRepository(CompanyRepository):
    def __init__(self, memberships: "FakeCompanyUserRepository | None" = None):
        self._companies: dict[int, CompanyEntity] = {}
        self._next_id = 1
        self.memberships = memberships

    def get_all(self):
        return [c.model_copy() for c in self._companies.values()]

    def get_by_id(self, company_id):
        if company_id not in self._companies:
            raise NotFoundError(f"company with id {company_id} not found")
        return self._companies[company_id].model_copy()

    def get_by_email(self, email):
        for c in self._companies.values():
            if c.email == email:
                return c.model_copy()
        raise NotFoundError(f"company with email {email} not found")

    def create(self, company):
        if any(c.email == company.email for c in self._companies.values()):
            raise AlreadyExistsError("company with this email already exists")
        stamp = _BASE_TIME + timedelta(seconds=self._next_id)
        stored = company.model_copy(update={"id": self._next_id, "created_at": stamp, "updated_at": stamp})
        self._companies[stored.id] = stored
        self._next_id += 1
        return stored.model_copy()

    def update(self, company):
        if company.id not in self._companies:
            raise NotFoundError(f"company with id {company.id} not found")
        if any(c.email == company.email and c.id != company.id for c in self._companies.values()):
            raise AlreadyExistsError("company with this email already exists")
        self._companies[company.id] = company.model_copy()
        return company.model_copy()

    def delete(self, company_id):
        if company_id not in self._companies:
            raise NotFoundError(f"company with id {company_id} not found")
        del self._companies[company_id]
        if self.memberships is not None:
            self.memberships.drop_company(company_id)

    def exists(self, company_id):
        return company_id in self._companies

    def exists_by_email(self, email):
        return any(c.email == email for c in self._companies.values())

    def count(self):
        return len(self._companies)

    def get_paginated(self, offset, limit):
        ordered = sorted(self._companies.values(), key=lambda c: (c.created_at, c.id), reverse=True)
        return [c.model_copy() for c in ordered[offset : offset + limit]]

    def search_by_name(self, name):
        needle = name.lower()
        return [c.model_copy() for c in self._companies.values() if needle in c.name.lower()]


class FakeCompanyUserRepository(CompanyUserRepository):
    def __init__(self):
        self._relations: dict[tuple[int, int], CompanyUserEntity] = {}
        self._next_id = 1

    def get_users_by_company_id(self, company_id):
        return [r.model_copy() for (_, c), r in self._relations.items() if c == company_id]

    def get_companies_by_user_id(self, user_id):
        return [r.model_copy() for (u, _), r in self._relations.items() if u == user_id]

    def create(self, company_user):
        key = (company_user.user_id, company_user.company_id)
        if key in self._relations:
            raise AlreadyExistsError("relation already exists")
        stored = company_user.model_copy(update={"id": self._next_id})
        self._next_id += 1
        self._relations[key] = stored
        return stored.model_copy()

    def update(self, company_user):
        key = (company_user.user_id, company_user.company_id)
        if key not in self._relations:
            raise NotFoundError("relation not found")
        self._relations[key].role = company_user.role
        return self._relations[key].model_copy()

    def delete(self, user_id, company_id):
        if (user_id, company_id) not in self._relations:
            raise NotFoundError("relation not found")
        del self._relations[(user_id, company_id)]

    def get_relation(self, user_id, company_id):
        if (user_id, company_id) not in self._relations:
            raise NotFoundError("relation not found")
        return self._relations[(user_id, company_id)].model_copy()

    def exists(self, user_id, company_id):
        return (user_id, company_id) in self._relations

    def drop_company(self, company_id):
        for key in [k for k in self._relations if k[1] == company_id]:
            del self._relations[key]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def hasher():
    # 테스트 속도를 위해 최소 cost 사용
    return PasswordHasher(rounds=4)


@pytest.fixture
def user_repo():
    return FakeUserRepository()


@pytest.fixture
def company_user_repo():
    return FakeCompanyUserRepository()


@pytest.fixture
def company_repo(company_user_repo):
    return FakeCompanyRepository(memberships=company_user_repo)


@pytest.fixture
def engine():
    test_engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory, hasher):
    """TestClient wired to the in-memory SQLite database."""
    app = create_app()

    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    return TestClient(app)
