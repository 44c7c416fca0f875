"""
Atomic upsert for single-row tables using ON CONFLICT

The about section is a single row (id=1). Writing it with INSERT ... ON
CONFLICT DO UPDATE replaces the check-then-insert pattern, which can race
when two admin sessions save at the same time:

    existing = db.query(AboutSection).get(1)   # SELECT
    if existing: ... else: db.add(...)         # another writer may insert here

Both PostgreSQL and SQLite (used in tests) support the same ON CONFLICT
syntax, so the dialect-specific insert() is picked from the session bind.
"""

from typing import Any, Dict, Type

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from portfolio_site.shared.database import Base


def _insert_for(db: Session):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise ValueError(f"Atomic upsert is not supported on dialect '{dialect}'")


def atomic_upsert_singleton(
    db: Session,
    model: Type[Base],
    data: Dict[str, Any],
    row_id: int = 1,
    auto_update_timestamp: bool = True,
    timestamp_field: str = 'updated_at'
) -> None:
    """
    Insert or update the single row of a one-row table.

    Args:
        db: SQLAlchemy database session
        model: SQLAlchemy model class (e.g., AboutSection)
        data: Fields to set; only these columns are touched on update
        row_id: Primary key of the single row (default 1)
        auto_update_timestamp: If True, set timestamp_field to NOW() on update
        timestamp_field: Name of timestamp field to auto-update

    Example:
        atomic_upsert_singleton(db, AboutSection, {'tagline': 'Builder'})
        db.commit()

    Raises:
        ValueError: If data names a column the model doesn't have, or the
            timestamp field is missing
    """
    for key in data:
        if not hasattr(model, key):
            raise ValueError(f"Model {model.__name__} does not have field '{key}'")

    if auto_update_timestamp and not hasattr(model, timestamp_field):
        raise ValueError(f"Model {model.__name__} does not have field '{timestamp_field}'")

    insert = _insert_for(db)
    stmt = insert(model).values(id=row_id, **data)

    # excluded.<column> references the value that would have been inserted
    update_dict = {key: getattr(stmt.excluded, key) for key in data if key != 'id'}
    if auto_update_timestamp:
        update_dict[timestamp_field] = func.now()

    stmt = stmt.on_conflict_do_update(
        index_elements=['id'],
        set_=update_dict
    )

    db.execute(stmt)
