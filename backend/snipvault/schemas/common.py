"""Common schemas used across the application."""

from typing import Generic, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic offset-paginated response wrapper.

    Usage:
        response_model=PaginatedResponse[ActiveItem]

    Returns:
        {
            "items": [...],
            "limit": 100,
            "offset": 0
        }
    """
    items: list[T]
    limit: int
    offset: int
