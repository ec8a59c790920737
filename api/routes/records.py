"""
api/routes/records.py -- CV record read endpoints.

Routes:
  GET /cv-records              -- all records, newest submission first
  GET /cv-records/{record_id}  -- one record

Query parameters for the list (all optional, "all" means unset):
  search      -- substring of name, surname or email (case-insensitive)
  status, department, position -- exact match

Every route requires a valid bearer token. Any authenticated user may read
every record; there is no role gate on this router.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from auth.dependencies import get_current_identity
from core.errors import NotFoundError
from records.models import RecordFilters
from records.store import RecordStore

# Router-level dependency applies to every route registered on this router,
# so individual handlers don't each need to repeat Depends(get_current_identity).
router = APIRouter(dependencies=[Depends(get_current_identity)])


@router.get("/cv-records")
def list_cv_records(
    request: Request,
    search: Optional[str] = Query(default=None, max_length=255),
    status: Optional[str] = Query(default=None, max_length=30),
    department: Optional[str] = Query(default=None, max_length=100),
    position: Optional[str] = Query(default=None, max_length=255),
) -> list[dict]:
    """Return CV records ordered by submittedAt, newest first."""
    store: RecordStore = request.app.state.record_store
    filters = RecordFilters(search=search, status=status, department=department, position=position)
    return store.list_records(filters)


@router.get("/cv-records/{record_id}")
def get_cv_record(request: Request, record_id: int) -> dict:
    """Return a single CV record by id."""
    store: RecordStore = request.app.state.record_store
    record = store.get_record(record_id)
    if record is None:
        raise NotFoundError("CV record not found")
    return record
