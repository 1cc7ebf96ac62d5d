from __future__ import annotations

from math import ceil
from typing import Generic, Optional, Sequence, TypeVar

from src.core.config import get_settings
from src.shared.base import BaseSchema
from src.shared.time import business_today


T = TypeVar("T")


class Pagination(BaseSchema):
    page: int
    page_size: int
    total_items: int
    total_pages: int


class Meta(BaseSchema):
    """Where a payload came from and which business day it describes."""

    as_of_date: str
    source: str
    time_window: str = ""
    business_timezone: str


class ResponseEnvelope(BaseSchema, Generic[T]):
    data: T
    pagination: Optional[Pagination] = None
    meta: Optional[Meta] = None


def build_meta(source: str, time_window: str = "") -> Meta:
    return Meta(
        as_of_date=business_today().isoformat(),
        source=source,
        time_window=time_window,
        business_timezone=get_settings().business_timezone,
    )


def build_pagination(page: int, page_size: int, total_items: int) -> Pagination:
    total_pages = ceil(total_items / page_size) if total_items else 0
    return Pagination(
        page=page,
        page_size=page_size,
        total_items=total_items,
        total_pages=total_pages,
    )


def paginate_list(items: Sequence[T], page: int, page_size: int) -> tuple[list[T], Pagination]:
    pagination = build_pagination(page, page_size, len(items))
    offset = (page - 1) * page_size
    return list(items[offset : offset + page_size]), pagination
