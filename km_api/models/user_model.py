from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from km_api.config.database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    # unique 인덱스가 중복 이메일의 최종 방어선 (repository의 사전 검사는 race에 취약)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    memberships = relationship(
        "CompanyUser",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

# relationship("CompanyUser") 해석을 위해 함께 로드
from km_api.models import company_model  # noqa: E402,F401
