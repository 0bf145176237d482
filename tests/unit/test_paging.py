"""Unit tests for cursor pagination primitives."""

import pytest

from tenancy.core.exceptions import FieldInvalidError
from tenancy.core.paging import Direction, Page, PageParams, decode_cursor, encode_cursor


def test_cursor_round_trip_is_url_safe():
    cursor = encode_cursor("0192f0c1-7b7e-7cc2-9a53-1b2f4e8d9a10")

    assert "=" not in cursor
    assert decode_cursor(cursor) == "0192f0c1-7b7e-7cc2-9a53-1b2f4e8d9a10"


def test_malformed_cursor_rejected():
    with pytest.raises(FieldInvalidError) as exc_info:
        decode_cursor("a")

    assert exc_info.value.field == "cursor"


def test_page_params_defaults():
    params = PageParams()

    assert params.limit == 20
    assert params.direction == Direction.FORWARD
    assert params.boundary() is None


def test_page_params_boundary_decodes_cursor():
    params = PageParams(cursor=encode_cursor("row-9"), direction=Direction.BACKWARD)

    assert params.boundary() == "row-9"


def test_page_map_keeps_navigation():
    page = Page(items=[1, 2], total=5, cursor="c", prev_cursor="p", has_next=True, has_prev=True)

    mapped = page.map(str)

    assert mapped.items == ["1", "2"]
    assert (mapped.total, mapped.cursor, mapped.prev_cursor) == (5, "c", "p")
    assert mapped.has_next and mapped.has_prev
