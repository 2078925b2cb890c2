from functools import lru_cache
from fastapi import Depends
from sqlalchemy.orm import Session
from km_api.config.database import get_db
from km_api.db.company_db import SqlCompanyRepository, SqlCompanyUserRepository
from km_api.db.user_db import SqlUserRepository
from km_api.services.company_service import CompanyService
from km_api.services.user_service import UserService
from km_api.utils.password_util import PasswordHasher


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


def get_user_service(
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> UserService:
    return UserService(SqlUserRepository(db), hasher)


def get_company_service(db: Session = Depends(get_db)) -> CompanyService:
    return CompanyService(SqlCompanyRepository(db), SqlCompanyUserRepository(db))
