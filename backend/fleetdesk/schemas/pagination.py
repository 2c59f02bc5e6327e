"""Pagination envelope shared by list endpoints."""

import math
from typing import Generic, List, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int = Field(serialization_alias="totalPages")


class Page(BaseModel, Generic[T]):
    data: List[T]
    pagination: PaginationMeta


def build_page(items: list, *, page: int, limit: int, total: int) -> dict:
    return {
        "data": items,
        "pagination": PaginationMeta(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit) if limit else 0),
    }
