from typing import Any, Optional
from pydantic import BaseModel


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class APIError(BaseModel):
    code: str
    message: str
    details: Optional[str] = None


# 공통 응답 형식
class APIResponse(BaseModel):
    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None
    error: Optional[APIError] = None


class PaginatedResponse(APIResponse):
    pagination: Optional[Pagination] = None
