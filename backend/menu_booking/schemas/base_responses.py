"""
Base response schemas for standardized API responses.

List endpoints return ``PaginatedResponse``; operations without a natural
resource body return ``SuccessResponse``.
"""

from math import ceil
from typing import Any, Dict, Generic, List, Optional, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Standard paginated response for list endpoints."""

    items: List[T] = Field(description="List of items")
    total: int = Field(description="Total number of matching items")
    page: int = Field(default=1, description="Current page number", ge=1)
    limit: int = Field(default=10, description="Items per page", ge=1, le=100)
    total_pages: int = Field(description="ceil(total / limit)")
    has_next: bool = Field(description="Whether there's a next page")
    has_prev: bool = Field(description="Whether there's a previous page")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "items": ["..."],
                "total": 25,
                "page": 1,
                "limit": 10,
                "total_pages": 3,
                "has_next": True,
                "has_prev": False,
            }
        }
    )

    @classmethod
    def build(cls, items: Sequence[T], *, total: int, page: int, limit: int) -> "PaginatedResponse[T]":
        total_pages = ceil(total / limit) if limit else 0
        return cls(
            items=list(items),
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class SuccessResponse(BaseModel):
    """Standard success response for operations."""

    success: bool = Field(default=True, description="Operation success status")
    message: str = Field(description="Human-readable success message")
    data: Optional[Dict[str, Any]] = Field(default=None, description="Optional additional data")
