"""Cursor pagination primitives.

A cursor is the URL-safe base64 encoding of the boundary row id. Rows are
ordered by id, which is a time-ordered UUIDv7 string, newest first.
``forward`` walks towards older rows and ``backward`` towards newer ones.
"""

import base64
import binascii
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from tenancy.core.exceptions import FieldInvalidError

T = TypeVar("T")


class Direction(str, Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


def encode_cursor(value: str) -> str:
    return base64.urlsafe_b64encode(value.encode()).decode().rstrip("=")


def decode_cursor(cursor: str) -> str:
    """Decode a cursor produced by encode_cursor.

    Raises:
        FieldInvalidError: If the cursor is not valid base64 text
    """
    padded = cursor + "=" * (-len(cursor) % 4)
    try:
        return base64.urlsafe_b64decode(padded.encode()).decode()
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise FieldInvalidError("cursor", cursor, "malformed cursor") from exc


@dataclass
class PageParams:
    """Cursor, limit and direction of a list request."""

    cursor: str | None = None
    limit: int = 20
    direction: Direction = Direction.FORWARD

    def boundary(self) -> str | None:
        return decode_cursor(self.cursor) if self.cursor else None


@dataclass
class Page(Generic[T]):
    """One page of a cursor-paginated listing."""

    items: list[T] = field(default_factory=list)
    total: int = 0
    cursor: str | None = None
    prev_cursor: str | None = None
    has_next: bool = False
    has_prev: bool = False

    def map(self, fn) -> "Page":
        return Page(
            items=[fn(item) for item in self.items],
            total=self.total,
            cursor=self.cursor,
            prev_cursor=self.prev_cursor,
            has_next=self.has_next,
            has_prev=self.has_prev,
        )
