"""
Shared Schema Building Blocks

The browser client speaks camelCase JSON (reviewText, isSpoiler,
averageRating...). CamelModel keeps Python attributes snake_case and
generates camelCase aliases; FastAPI serializes responses by alias and
populate_by_name lets tests and services build models with either name.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationMeta(CamelModel):
    """
    Pagination metadata returned with every list.

    Example:
        {"currentPage": 2, "totalPages": 5, "totalItems": 48,
         "hasNext": true, "hasPrev": true}
    """

    current_page: int = Field(..., ge=1, description="Current page number")
    total_pages: int = Field(..., ge=0, description="Total number of pages")
    total_items: int = Field(..., ge=0, description="Total number of items")
    has_next: bool = Field(..., description="Whether a later page exists")
    has_prev: bool = Field(..., description="Whether an earlier page exists")

    @classmethod
    def build(cls, page: int, per_page: int, total: int) -> "PaginationMeta":
        pages = (total + per_page - 1) // per_page if total > 0 else 0
        return cls(
            current_page=page,
            total_pages=pages,
            total_items=total,
            has_next=page < pages,
            has_prev=page > 1,
        )


class MessageResponse(CamelModel):
    message: str
