"""
Shared schema building blocks.
"""

from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class Page(CamelModel, Generic[T]):
    """Paginated list envelope."""
    data: List[T]
    pagination: Pagination


class MessageResponse(CamelModel):
    message: str
