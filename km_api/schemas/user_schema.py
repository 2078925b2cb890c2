from datetime import datetime
from typing import Annotated, Optional
from pydantic import BaseModel, EmailStr, StringConstraints, field_validator
from km_api.config.errors import ErrorMessages
from km_api.utils.password_util import exceeds_bcrypt_limit


# 저장소 <-> 서비스 사이를 오가는 사용자 엔티티 (ORM 세션과 분리된 사본)
class UserEntity(BaseModel):
    id: Optional[int] = None
    name: str
    email: str
    # 저장된 bcrypt 해시. 서비스 밖으로 나갈 때는 항상 빈 문자열
    password: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def display_name(self) -> str:
        return self.name or self.email

    def is_valid(self) -> bool:
        return bool(self.name and self.email and self.password)

    def without_password(self) -> "UserEntity":
        return self.model_copy(update={"password": ""})


# 회원가입
class UserCreate(BaseModel):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=50)]
    email: EmailStr
    password: Annotated[str, StringConstraints(min_length=8)]

    # 글자 수가 아니라 UTF-8 바이트 수로 제한
    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v):
        if exceeds_bcrypt_limit(v):
            raise ValueError(ErrorMessages.PASSWORD_TOO_LONG)
        return v

# 회원 정보 수정
class UserUpdate(BaseModel):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=50)]
    email: EmailStr

class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# 로그인
class UserLogin(BaseModel):
    email: EmailStr
    password: str
