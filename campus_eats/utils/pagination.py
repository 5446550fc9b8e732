from sqlalchemy import func
from sqlmodel import select


def paginate(
    *,
    session,
    query,
    limit: int = 25,
    offset: int = 0,
):
    if limit < 1:
        limit = 25

    if offset < 0:
        offset = 0

    total = session.exec(
        select(func.count()).select_from(query.subquery())
    ).one()

    results = session.exec(
        query.offset(offset).limit(limit)
    ).all()

    return {
        "total": total,
        "limit": limit,
        "offset": offset,
        "results": results,
    }
