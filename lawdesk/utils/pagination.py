"""Pagination and sorting utilities for list endpoints."""

from dataclasses import dataclass
from typing import Generic, TypeVar

from fastapi import Query
from sqlalchemy import asc, desc
from sqlalchemy.orm import Query as SQLAlchemyQuery


T = TypeVar("T")

# Pagination limits
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass
class PaginationParams:
    """Pagination parameters from query string."""
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def get_pagination(
    page: int = Query(DEFAULT_PAGE, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description=f"Items per page (max {MAX_LIMIT})"),
) -> PaginationParams:
    """
    Pagination dependency.

    Usage:
        @router.get("/items")
        def list_items(pagination: PaginationParams = Depends(get_pagination)):
            ...
    """
    return PaginationParams(page=page, limit=limit)


@dataclass
class PaginatedResponse(Generic[T]):
    """Standard paginated response structure."""
    items: list[T]
    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def create(cls, items: list[T], total: int, pagination: PaginationParams) -> "PaginatedResponse[T]":
        pages = (total + pagination.limit - 1) // pagination.limit if pagination.limit > 0 else 0
        return cls(
            items=items,
            total=total,
            page=pagination.page,
            limit=pagination.limit,
            pages=pages,
        )

    def meta(self) -> dict[str, int]:
        """Pagination block for the response envelope."""
        return {
            "page": self.page,
            "pages": self.pages,
            "total": self.total,
            "limit": self.limit,
        }


def apply_sort(
    query: SQLAlchemyQuery,
    sortable_columns: dict,
    sort_by: str | None,
    sort_order: str,
    default: str,
    tiebreaker=None,
) -> SQLAlchemyQuery:
    """
    Order a query by a whitelisted column.

    Unknown ``sort_by`` values fall back to ``default``.
    """
    order_func = asc if sort_order == "asc" else desc
    column = sortable_columns.get(sort_by or default, sortable_columns[default])
    query = query.order_by(order_func(column))
    if tiebreaker is not None:
        query = query.order_by(order_func(tiebreaker))
    return query


def paginate_query(query: SQLAlchemyQuery, pagination: PaginationParams) -> tuple[list, int]:
    """
    Apply pagination to a SQLAlchemy query.

    Returns:
        (items, total_count)
    """
    total = query.order_by(None).count()
    items = query.offset(pagination.offset).limit(pagination.limit).all()
    return items, total
