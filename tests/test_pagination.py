"""Tests for page math and sort resolution"""
import pytest

from errors import InvalidArgument
from pagination import DEFAULT_LIMIT, MAX_LIMIT, MAX_OFFSET, PageRequest, paginate, resolve_sort, total_pages


class TestPageRequest:
    def test_defaults(self):
        request = PageRequest.parse()
        assert (request.page, request.limit) == (1, DEFAULT_LIMIT)
        assert request.offset == 0

    def test_offset(self):
        assert PageRequest.parse("3", "12").offset == 24

    @pytest.mark.parametrize("page", [0, -1, "0", "-4"])
    def test_page_below_one_is_rejected(self, page):
        with pytest.raises(InvalidArgument):
            PageRequest.parse(page=page)

    @pytest.mark.parametrize("limit", [0, MAX_LIMIT + 1, "-5"])
    def test_limit_out_of_range_is_rejected(self, limit):
        with pytest.raises(InvalidArgument):
            PageRequest.parse(limit=limit)

    @pytest.mark.parametrize("value", ["two", "1.5", True])
    def test_non_integer_is_rejected(self, value):
        with pytest.raises(InvalidArgument):
            PageRequest.parse(page=value)

    def test_blank_uses_default(self):
        assert PageRequest.parse(page="", limit=" ") == PageRequest()

    def test_offset_past_int64_is_rejected(self):
        with pytest.raises(InvalidArgument):
            PageRequest.parse(page=str(10**18), limit="12")

    def test_largest_offset_is_accepted(self):
        request = PageRequest.parse(page=MAX_OFFSET + 1, limit=1)
        assert request.offset == MAX_OFFSET


class TestTotalPages:
    def test_partial_last_page(self):
        assert total_pages(25, 12) == 3

    def test_exact_multiple(self):
        assert total_pages(24, 12) == 2

    def test_empty_result_has_one_page(self):
        assert total_pages(0, 12) == 1


def test_paginate_shape():
    result = paginate([], 0, PageRequest())
    assert result == {
        "items": [],
        "currentPage": 1,
        "totalPages": 1,
        "totalItems": 0,
        "itemsPerPage": 12,
    }


class TestResolveSort:
    def test_default_is_name_ascending(self):
        assert resolve_sort() == [("name", 1), ("_id", 1)]

    def test_descending(self):
        assert resolve_sort("price", "desc") == [("price", -1), ("_id", -1)]

    def test_created_at_maps_to_stored_field(self):
        assert resolve_sort("createdAt")[0] == ("created_at", 1)

    def test_unknown_key_falls_back_to_name(self):
        assert resolve_sort("$where", "DESC") == [("name", -1), ("_id", -1)]

    def test_unknown_direction_is_ascending(self):
        assert resolve_sort("brand", "sideways")[0] == ("brand", 1)
