"""SQLAlchemy user repository tests on in-memory SQLite."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from km_api.config.errors import AlreadyExistsError, NotFoundError, StorageError, ValidationError
from km_api.db.user_db import SqlUserRepository
from km_api.schemas.user_schema import UserEntity
from km_api.utils.pagination_util import MAX_OFFSET


@pytest.fixture
def repo(db):
    return SqlUserRepository(db)


def _user(name="Alice", email="alice@example.com", password="$2b$04$hash"):
    return UserEntity(name=name, email=email, password=password)


def test_create_assigns_id_and_timestamps(repo):
    created = repo.create(_user())

    assert created.id is not None
    assert created.created_at is not None
    assert created.password == "$2b$04$hash"


def test_create_rejects_empty_password(repo):
    with pytest.raises(ValidationError):
        repo.create(_user(password=""))


def test_create_duplicate_email(repo):
    repo.create(_user())
    with pytest.raises(AlreadyExistsError):
        repo.create(_user(name="Other"))
    assert repo.count() == 1


def test_unique_constraint_violation_maps_to_already_exists(repo, monkeypatch):
    repo.create(_user())

    # 사전 검사를 통과한 동시 요청을 흉내낸다
    real_exists = repo.exists_by_email
    calls = []

    def racy_exists(email):
        calls.append(email)
        return False if len(calls) == 1 else real_exists(email)

    monkeypatch.setattr(repo, "exists_by_email", racy_exists)

    with pytest.raises(AlreadyExistsError):
        repo.create(_user(name="Racer"))
    assert repo.count() == 1


def test_email_match_is_case_sensitive(repo):
    repo.create(_user())
    assert not repo.exists_by_email("ALICE@example.com")
    with pytest.raises(NotFoundError):
        repo.get_by_email("ALICE@example.com")


def test_get_by_id_and_email(repo):
    created = repo.create(_user())
    assert repo.get_by_id(created.id).email == "alice@example.com"
    assert repo.get_by_email("alice@example.com").id == created.id


def test_get_missing_user_raises_not_found(repo):
    with pytest.raises(NotFoundError):
        repo.get_by_id(123)
    with pytest.raises(NotFoundError):
        repo.get_by_email("nobody@example.com")


def test_update_excludes_self_from_email_check(repo):
    created = repo.create(_user())
    created.name = "Alice Renamed"

    updated = repo.update(created)

    assert updated.name == "Alice Renamed"
    assert updated.email == "alice@example.com"


def test_update_email_collision(repo):
    repo.create(_user())
    bob = repo.create(_user(name="Bob", email="bob@example.com"))
    bob.email = "alice@example.com"

    with pytest.raises(AlreadyExistsError):
        repo.update(bob)


def test_update_missing_user(repo):
    ghost = _user()
    ghost.id = 404
    with pytest.raises(NotFoundError):
        repo.update(ghost)


def test_update_does_not_touch_password(repo):
    created = repo.create(_user())
    created.password = ""
    repo.update(created)
    assert repo.get_by_id(created.id).password == "$2b$04$hash"


def test_delete(repo):
    created = repo.create(_user())
    repo.delete(created.id)
    assert not repo.exists(created.id)
    with pytest.raises(NotFoundError):
        repo.delete(created.id)


def test_paginated_newest_first(repo):
    for i in range(5):
        repo.create(_user(name=f"User {i}", email=f"user{i}@example.com"))

    page = repo.get_paginated(0, 2)

    assert [u.email for u in page] == ["user4@example.com", "user3@example.com"]
    assert [u.email for u in repo.get_paginated(4, 2)] == ["user0@example.com"]


def test_get_all_and_count(repo):
    repo.create(_user())
    repo.create(_user(name="Bob", email="bob@example.com"))
    assert repo.count() == 2
    assert len(repo.get_all()) == 2


def test_storage_failure_is_reported_as_storage_error(repo, db, monkeypatch):
    def broken_query(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "query", broken_query)

    with pytest.raises(StorageError):
        repo.count()


def test_update_unique_constraint_violation_maps_to_already_exists(repo, monkeypatch):
    repo.create(_user())
    bob = repo.create(_user(name="Bob", email="bob@example.com"))

    # 중복 검사 직후 다른 요청이 같은 이메일을 차지한 상황
    monkeypatch.setattr(repo, "_email_taken_by_other", lambda email, user_id: False)
    bob.email = "alice@example.com"

    with pytest.raises(AlreadyExistsError):
        repo.update(bob)
    assert repo.get_by_id(bob.id).email == "bob@example.com"


def test_paginated_offset_past_int64_range_is_empty(repo):
    repo.create(_user())
    assert repo.get_paginated(MAX_OFFSET, 10) == []
