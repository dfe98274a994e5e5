"""Shared response envelopes."""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Pagination(BaseModel):
    total: int
    page: int
    pages: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "Pagination":
        return cls(total=total, page=page, pages=math.ceil(total / limit) if limit else 0)


class Page(BaseModel, Generic[T]):
    """A page of items plus pagination metadata."""

    items: list[T]
    pagination: Pagination


class MessageResponse(BaseModel):
    message: str
