"""Database utility functions"""
from typing import Any, List, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar('T')


async def count_rows(db: AsyncSession, model: Type[Any], *criteria) -> int:
    """
    Count rows of a model matching the given criteria

    Example:
        unfixed = await count_rows(db, Issue, Issue.project_id == project_id, Issue.is_fixed == False)
    """
    stmt = select(func.count()).select_from(model)
    if criteria:
        stmt = stmt.where(*criteria)
    result = await db.execute(stmt)
    return result.scalar_one() or 0


async def fetch_all(db: AsyncSession, stmt) -> List[T]:
    """Run a select and return the scalar rows as a list"""
    result = await db.execute(stmt)
    return list(result.scalars().all())


def model_to_dict(obj: Any) -> dict:
    """Column values of an ORM row, keyed by column name"""
    return {column.name: getattr(obj, column.key) for column in obj.__table__.columns}
