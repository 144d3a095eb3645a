"""
Page/size pagination for list endpoints.
"""
from typing import Generic, List, Optional, Sequence, Type, TypeVar
from pydantic import BaseModel
from fastapi import Query
from sqlalchemy.orm import Query as SQLAlchemyQuery

T = TypeVar("T")

MAX_PAGE_SIZE = 100

class PageParams:
    """
    ``?page=&size=`` query parameters, 1-indexed.
    """
    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number"),
        size: int = Query(10, ge=1, le=MAX_PAGE_SIZE, description="Items per page")
    ):
        self.page = page
        self.size = size

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size

    def page_count(self, total: int) -> int:
        # ceil without floats
        return -(-total // self.size)


class PageResponse(BaseModel, Generic[T]):
    """
    One page of results plus the numbers a client needs to walk the rest.
    """
    items: List[T]
    total: int
    page: int
    size: int
    pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def of(cls, items: Sequence, total: int, params: PageParams) -> "PageResponse":
        pages = params.page_count(total)
        return cls(
            items=list(items),
            total=total,
            page=params.page,
            size=params.size,
            pages=pages,
            has_next=params.page < pages,
            has_prev=params.page > 1,
        )


def paginate(
    query: SQLAlchemyQuery,
    page_params: PageParams,
    item_schema: Optional[Type[BaseModel]] = None
) -> PageResponse:
    """
    Fetch one page of an ordered query.

    Args:
        query: Ordered SQLAlchemy query
        page_params: Requested page
        item_schema: Pydantic model each row is converted to (rows are returned as-is if None)

    Returns:
        PageResponse for the requested page
    """
    total = query.count()
    rows = query.offset(page_params.offset).limit(page_params.size).all()
    if item_schema is not None:
        rows = [item_schema.from_orm(row) for row in rows]
    return PageResponse.of(rows, total, page_params)
