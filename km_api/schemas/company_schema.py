from datetime import datetime
from typing import Annotated, Optional
from urllib.parse import urlparse
from pydantic import BaseModel, EmailStr, Field, StringConstraints, field_validator

ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"


class CompanyEntity(BaseModel):
    id: Optional[int] = None
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    def is_valid(self) -> bool:
        return bool(self.name and self.email)

    def display_name(self) -> str:
        return self.name or self.email

    def has_contact(self) -> bool:
        return bool(self.phone or self.email or self.address)

    def has_website(self) -> bool:
        return bool(self.website)


class CompanyUserEntity(BaseModel):
    """Membership row linking one user to one company.

    ``role`` is free-form. Only ``"admin"`` and ``"member"`` carry meaning
    (see :meth:`is_admin` / :meth:`is_member`); any other value is accepted
    and treated as an unprivileged role.
    """

    id: Optional[int] = None
    user_id: int
    company_id: int
    role: str = ROLE_MEMBER
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def is_member(self) -> bool:
        return self.role in (ROLE_MEMBER, ROLE_ADMIN)


CompanyName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]


# 회사 등록 / 수정 (수정은 전체 교체)
class CompanyCreate(BaseModel):
    name: CompanyName
    email: EmailStr
    phone: Optional[Annotated[str, StringConstraints(min_length=10, max_length=20)]] = None
    address: Optional[Annotated[str, StringConstraints(max_length=500)]] = None
    website: Optional[Annotated[str, StringConstraints(max_length=255)]] = None
    description: Optional[Annotated[str, StringConstraints(max_length=1000)]] = None

    @field_validator("website")
    @classmethod
    def validate_website(cls, v):
        if v is None or v == "":
            return None
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("website must be a valid URL")
        return v

class CompanyUpdate(CompanyCreate):
    pass

class CompanyResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# 소속 관계
class CompanyUserCreate(BaseModel):
    user_id: int = Field(..., ge=1)
    role: Optional[Annotated[str, StringConstraints(strip_whitespace=True, max_length=50)]] = None

class CompanyUserRoleUpdate(BaseModel):
    role: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]

class CompanyUserResponse(BaseModel):
    id: int
    user_id: int
    company_id: int
    role: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
