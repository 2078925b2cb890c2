"""Pagination normalisation tests."""

import pytest

from km_api.utils.pagination_util import (
    MAX_OFFSET,
    build_pagination,
    get_offset,
    get_total_pages,
    normalize_page,
)


@pytest.mark.parametrize(
    "page, limit, expected",
    [
        (1, 10, (1, 10)),
        (0, 10, (1, 10)),
        (-3, 10, (1, 10)),
        (2, 0, (2, 10)),
        (2, -1, (2, 10)),
        (1, 500, (1, 100)),
        (4, 100, (4, 100)),
    ],
)
def test_normalize_page(page, limit, expected):
    assert normalize_page(page, limit) == expected


def test_offset_is_page_minus_one_times_limit():
    assert get_offset(1, 10) == (0, 10)
    assert get_offset(3, 20) == (40, 20)


def test_out_of_range_input_matches_clamped_input():
    assert get_offset(0, 500) == get_offset(1, 100)
    assert build_pagination(0, 500, 250) == build_pagination(1, 100, 250)


def test_normalisation_is_idempotent():
    once = normalize_page(0, 500)
    assert normalize_page(*once) == once
    assert get_offset(7, 33) == get_offset(7, 33)


@pytest.mark.parametrize(
    "total, limit, expected",
    [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (25, 10, 3), (250, 100, 3)],
)
def test_total_pages(total, limit, expected):
    assert get_total_pages(total, limit) == expected


def test_build_pagination_reports_resolved_values():
    pagination = build_pagination(0, 0, 25)
    assert pagination.page == 1
    assert pagination.limit == 10
    assert pagination.total == 25
    assert pagination.total_pages == 3


def test_offset_is_capped_for_huge_pages():
    assert get_offset(10**18, 10) == (MAX_OFFSET, 10)
    assert get_offset(10**30, 100) == (MAX_OFFSET, 100)
    assert build_pagination(10**18, 10, 3).page == 10**18
