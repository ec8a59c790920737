"""
records/store.py -- SQLAlchemy Core read layer for CV records.

Uses SQLAlchemy Core (not ORM): queries return plain dicts keyed by the
external field names from records/models.CV_RECORD_FIELDS. The rename happens
in the SELECT list itself (column AS "roleTitle"), so there is no Python-side
mapper that could drift from the query.

Pattern: Repository. RecordStore is the only code that knows the cv_records
column names. The table is written by the intake process, never by this
service.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = RecordStore(engine)
    records = store.list_records()
    records = store.list_records(RecordFilters(department="SAP", search="chen"))
    record = store.get_record(42)
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, Text, func, or_, select
from sqlalchemy.engine import Engine

from core.database import checkout
from records.models import CV_RECORD_FIELDS, RecordFilters

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

cv_records = Table(
    "cv_records",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("surname", Text),
    Column("id_passport", Text),
    Column("email", Text, nullable=False),
    Column("phone", Text),
    Column("department", Text),
    Column("position", Text, nullable=False),
    Column("role_title", Text),
    Column("sap_k_level", String(10)),
    Column("experience", Integer),
    Column("experience_similar_role", Integer),
    Column("experience_itsm_tools", Integer),
    Column("qualifications", Text),
    Column("institute_name", Text),
    Column("year_completed", String(10)),
    Column("languages", Text),
    Column("work_experiences", Text),  # JSON array serialized as text
    Column("certificate_types", Text),  # JSON array serialized as text
    Column("status", String(30), nullable=False, server_default="pending"),
    Column("cv_file", Text),
    Column("submitted_at", DateTime, nullable=False, server_default=func.now()),
)

# SELECT list: every storage column labelled with its external name.
_PROJECTION = [cv_records.c[column].label(field) for field, column in CV_RECORD_FIELDS.items()]

# search is a literal substring: LIKE wildcards in it are escaped.
_LIKE_ESCAPE = "\\"


def _escape_like(term: str) -> str:
    for char in (_LIKE_ESCAPE, "%", "_"):
        term = term.replace(char, _LIKE_ESCAPE + char)
    return term


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class RecordStore:
    """Read-only repository for CV records."""

    def __init__(self, engine: Engine, create_schema: bool = True) -> None:
        self.engine = engine
        if create_schema:
            with checkout(self.engine, "Failed to prepare record store") as conn:
                cv_records.create(conn, checkfirst=True)
                conn.commit()

    def list_records(self, filters: Optional[RecordFilters] = None) -> list[dict]:
        """Return projected CV records, newest submission first.

        Ties on submitted_at are broken by id (descending) so the order is
        stable across calls.
        """
        stmt = select(*_PROJECTION)
        if filters is not None:
            for column, value in filters.exact_matches().items():
                stmt = stmt.where(cv_records.c[column] == value)
            term = filters.search_term()
            if term:
                pattern = f"%{_escape_like(term)}%"
                stmt = stmt.where(
                    or_(
                        cv_records.c.name.ilike(pattern, escape=_LIKE_ESCAPE),
                        cv_records.c.surname.ilike(pattern, escape=_LIKE_ESCAPE),
                        cv_records.c.email.ilike(pattern, escape=_LIKE_ESCAPE),
                    )
                )
        stmt = stmt.order_by(cv_records.c.submitted_at.desc(), cv_records.c.id.desc())

        with checkout(self.engine, "Failed to fetch CV records") as conn:
            rows = conn.execute(stmt).fetchall()
        return [dict(row._mapping) for row in rows]

    def get_record(self, record_id: int) -> Optional[dict]:
        """Return one projected CV record, or None if the id does not exist."""
        stmt = select(*_PROJECTION).where(cv_records.c.id == record_id)
        with checkout(self.engine, "Failed to fetch CV record") as conn:
            row = conn.execute(stmt).fetchone()
        return dict(row._mapping) if row is not None else None
