"""
Session Router — /api/sessions

Access-code sessions. The access code is the only identity in the tool:
entering a known code loads its data, entering a new one starts fresh.

Endpoints:
    POST /api/sessions                          — Find-or-create by access code
    GET  /api/sessions                          — Admin overview with counts and totals
    GET  /api/sessions/{id}                     — Session detail
    POST /api/sessions/{id}/clicks/{counter}    — Increment a usage counter
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ..database import get_db
from .. import crud
from ..schemas import SessionCreate, SessionLoadResponse, SessionListResponse, SessionResponse

router = APIRouter(prefix="/api/sessions", tags=["Sessions"])


@router.post("", response_model=SessionLoadResponse)
def open_session(data: SessionCreate, response: Response, db: Session = Depends(get_db)):
    """
    Find the session for an access code, creating it on first use.

    Returns 201 when a new session was created, 200 when an existing one
    was loaded. Repeated calls with the same code return the same id.
    """
    session, created = crud.get_or_create_session(db, data.access_code)
    response.status_code = 201 if created else 200
    return {**SessionResponse.model_validate(session).model_dump(), "created": created}


@router.get("", response_model=SessionListResponse)
def list_sessions(
    search: Optional[str] = Query(None, description="Partial match on the access code"),
    db: Session = Depends(get_db),
):
    """List all sessions with ROI-project and portfolio counts plus totals."""
    return crud.list_sessions(db, search=search)


@router.get("/{session_id}", response_model=SessionResponse)
def get_session(session_id: str, db: Session = Depends(get_db)):
    return crud.require_session(db, session_id)


@router.post("/{session_id}/clicks/{counter}", response_model=SessionResponse)
def increment_clicks(session_id: str, counter: str, db: Session = Depends(get_db)):
    """Increment "benchmark" or "suggestions" usage counters."""
    return crud.increment_click_counter(db, session_id, counter)
