"""Success envelope shared by every v1 endpoint.

Handlers return ``{"code": 0, "message": "ok", "data": ...}``. Paginated
listings put the page fields inside data.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from tenancy.core.paging import Page

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    code: int = 0
    message: str = "ok"
    data: T | None = None


class PageData(BaseModel, Generic[T]):
    """List payload: items plus cursor state."""

    items: list[T] = Field(default_factory=list)
    total: int = 0
    cursor: str | None = None
    has_next: bool = False
    has_prev: bool = False


def ok(data: Any = None, message: str = "ok") -> Envelope[Any]:
    return Envelope(data=data, message=message)


def paged(page: Page) -> Envelope[Any]:
    """Wrap a service page in the list envelope."""
    return Envelope(
        data=PageData(
            items=page.items,
            total=page.total,
            cursor=page.cursor,
            has_next=page.has_next,
            has_prev=page.has_prev,
        )
    )
