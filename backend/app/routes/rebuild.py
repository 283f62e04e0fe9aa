"""Rebuild routes: trigger rebuilds, read rebuild status and job history."""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from server import FoodIndexServer, RebuildStatus, UnknownLocaleError

from ..database import get_db
from ..models import RebuildJob
from ..services.index_service import get_index_server

router = APIRouter(prefix="/api", tags=["rebuild"])


class RebuildRequestOut(BaseModel):
    locale_id: str
    outcome: str


class StatusOut(BaseModel):
    locale_id: str
    version: Optional[int] = None
    state: str
    last_error: Optional[str] = None
    degraded: bool = False
    skipped_records: int = 0
    attempts: int = 0
    last_built_at: Optional[float] = None


class JobOut(BaseModel):
    id: int
    locale_id: str
    status: str
    attempt: int
    version: Optional[int] = None
    indexed_records: Optional[int] = None
    skipped_records: Optional[int] = None
    degraded: bool = False
    error: Optional[str] = None
    created_at: Optional[datetime] = None


def _status_out(status: RebuildStatus) -> StatusOut:
    return StatusOut(**{**status._asdict(), "state": status.state.value})


@router.post("/locales/{locale_id}/rebuild", response_model=RebuildRequestOut, status_code=202)
def rebuild_locale(locale_id: str, server: FoodIndexServer = Depends(get_index_server)):
    """Schedule a rebuild; repeated requests coalesce into at most one follow-up build."""
    try:
        req = server.request_rebuild(locale_id)
    except UnknownLocaleError:
        raise HTTPException(status_code=404, detail=f"Unknown locale: {locale_id}")
    return RebuildRequestOut(locale_id=req.locale_id, outcome=req.outcome)


@router.post("/rebuild", response_model=List[RebuildRequestOut], status_code=202)
def rebuild_all(server: FoodIndexServer = Depends(get_index_server)):
    return [RebuildRequestOut(locale_id=r.locale_id, outcome=r.outcome) for r in server.request_rebuild_all()]


@router.get("/locales", response_model=List[StatusOut])
def list_locales(server: FoodIndexServer = Depends(get_index_server)):
    return [_status_out(server.rebuild_status(locale_id)) for locale_id in server.locales()]


@router.get("/locales/{locale_id}/status", response_model=StatusOut)
def locale_status(locale_id: str, server: FoodIndexServer = Depends(get_index_server)):
    try:
        return _status_out(server.rebuild_status(locale_id))
    except UnknownLocaleError:
        raise HTTPException(status_code=404, detail=f"Unknown locale: {locale_id}")


@router.get("/rebuild/jobs", response_model=List[JobOut])
def rebuild_jobs(locale_id: Optional[str] = None, limit: int = 50, db: Session = Depends(get_db)):
    """Most recent rebuild job events, newest first."""
    if limit < 1 or limit > 500:
        raise HTTPException(status_code=400, detail="limit must be between 1 and 500.")
    q = db.query(RebuildJob)
    if locale_id:
        q = q.filter(RebuildJob.locale_id == locale_id)
    rows = q.order_by(RebuildJob.id.desc()).limit(limit).all()
    return [
        JobOut(
            id=r.id,
            locale_id=r.locale_id,
            status=r.status,
            attempt=r.attempt,
            version=r.version,
            indexed_records=r.indexed_records,
            skipped_records=r.skipped_records,
            degraded=bool(r.degraded),
            error=r.error,
            created_at=r.created_at,
        )
        for r in rows
    ]
