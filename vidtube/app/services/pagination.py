"""
services/pagination.py: Offset pagination over a SQLAlchemy select().

The response shape is shared by every paginated endpoint:

    {
      "docs": [...],
      "total_docs": 42, "limit": 10, "page": 2, "total_pages": 5,
      "has_next_page": true, "has_prev_page": true,
      "next_page": 3, "prev_page": 1
    }

page and limit are validated by PaginationSchema before they get here.
"""

from __future__ import annotations

from typing import Any, Callable

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session


def paginate(
        stmt: Select,
        page: int,
        limit: int,
        session: Session,
        shape: Callable[[Any], dict],
) -> dict:
    """
    Runs `stmt` for one page and maps each result row through `shape`.

    The count query wraps `stmt` (minus its ORDER BY) in a subquery so joins
    and filters are counted exactly as they are listed.
    """
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = session.execute(count_stmt).scalar_one()

    rows = session.execute(
        stmt.limit(limit).offset((page - 1) * limit)
    ).all()

    total_pages = (total + limit - 1) // limit
    has_next = page < total_pages
    has_prev = page > 1

    return {
        "docs": [shape(row) for row in rows],
        "total_docs": total,
        "limit": limit,
        "page": page,
        "total_pages": total_pages,
        "has_next_page": has_next,
        "has_prev_page": has_prev,
        "next_page": page + 1 if has_next else None,
        "prev_page": page - 1 if has_prev else None,
    }
