from sqlalchemy import func
from sqlmodel import select

DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100


def paginate(
    *,
    session,
    query,
    page: int = 1,
    limit: int = DEFAULT_PAGE_LIMIT,
):
    """
    Run ``query`` for one page of an admin or catalog listing.

    ``page`` starts at 1 and ``limit`` is capped at MAX_PAGE_LIMIT so a
    service caller cannot pull a whole table in one request.
    """
    if page < 1:
        page = 1

    if limit < 1:
        limit = DEFAULT_PAGE_LIMIT
    limit = min(limit, MAX_PAGE_LIMIT)

    offset = (page - 1) * limit

    total = session.exec(
        select(func.count()).select_from(query.subquery())
    ).one()

    results = session.exec(
        query.offset(offset).limit(limit)
    ).all()

    total_pages = (total + limit - 1) // limit

    return {
        "total_items": total,
        "total_pages": total_pages,
        "current_page": page,
        "limit": limit,
        "has_next": page < total_pages,
        "has_previous": page > 1,
        "results": results,
    }
