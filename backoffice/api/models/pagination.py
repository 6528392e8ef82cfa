"""Generic paginated response envelope."""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    page_size: int = Field(serialization_alias="pageSize")
    total: int
    total_pages: int = Field(serialization_alias="totalPages")

    @classmethod
    def build(cls, page: int, page_size: int, total: int) -> "Pagination":
        return cls(
            page=page,
            page_size=page_size,
            total=total,
            total_pages=math.ceil(total / page_size) if page_size else 0,
        )


class PaginatedResponse(BaseModel, Generic[T]):
    """A page of items plus the position of that page."""

    data: list[T]
    pagination: Pagination
