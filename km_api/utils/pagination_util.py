import math
from typing import Tuple
from km_api.config.config import settings
from km_api.schemas.common_schema import Pagination

# 저장소가 받을 수 있는 최대 offset (signed 64-bit)
MAX_OFFSET = 2**63 - 1


def normalize_page(page: int, limit: int) -> Tuple[int, int]:
    """page는 1 이상, limit은 1~MAX_PAGE_LIMIT 범위로 보정한다."""
    if page is None or page <= 0:
        page = 1
    if limit is None or limit <= 0:
        limit = settings.DEFAULT_PAGE_LIMIT
    if limit > settings.MAX_PAGE_LIMIT:
        limit = settings.MAX_PAGE_LIMIT
    return page, limit


def get_offset(page: int, limit: int) -> Tuple[int, int]:
    """Return ``(offset, limit)`` for the requested page after normalisation.

    The offset never exceeds :data:`MAX_OFFSET`, so an oversized page reads as empty.
    """
    page, limit = normalize_page(page, limit)
    return min((page - 1) * limit, MAX_OFFSET), limit


def get_total_pages(total: int, limit: int) -> int:
    if total <= 0:
        return 0
    _, limit = normalize_page(1, limit)
    return math.ceil(total / limit)


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    page, limit = normalize_page(page, limit)
    return Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=get_total_pages(total, limit),
    )
