"""
Strategy Portfolio Router — /api/sessions/{id}/strategy

One portfolio per session. Saving with a project list replaces the stored
projects atomically; appending is used for manual additions and accepted
AI suggestions.

Endpoints:
    GET    /api/sessions/{id}/strategy                       — Load portfolio
    PUT    /api/sessions/{id}/strategy                       — Save portfolio
    POST   /api/sessions/{id}/strategy/projects              — Append projects
    PATCH  /api/sessions/{id}/strategy/projects/{pid}        — Toggle selection
    DELETE /api/sessions/{id}/strategy/projects/{pid}        — Remove project
    GET    /api/sessions/{id}/strategy/chart                 — Matrix plot data
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from .. import crud
from ..engines.chart import chart_payload
from ..errors import NotFoundError
from ..schemas import (
    StrategyPortfolioResponse, StrategyPortfolioSave, StrategyProjectResponse,
    StrategyProjectsAdd, StrategyProjectUpdate,
)

router = APIRouter(prefix="/api/sessions/{session_id}/strategy", tags=["Strategy"])


@router.get("", response_model=StrategyPortfolioResponse)
def get_portfolio(session_id: str, db: Session = Depends(get_db)):
    """Returns 404 (NO_PORTFOLIO) when the session never saved a portfolio."""
    portfolio = crud.get_strategy_portfolio(db, session_id)
    if portfolio is None:
        raise NotFoundError("No portfolio saved for this session yet", error_code="NO_PORTFOLIO")
    return portfolio


@router.put("", response_model=StrategyPortfolioResponse)
def save_portfolio(session_id: str, data: StrategyPortfolioSave, db: Session = Depends(get_db)):
    return crud.save_strategy_portfolio(db, session_id, data)


@router.post("/projects", response_model=StrategyPortfolioResponse, status_code=201)
def add_projects(session_id: str, data: StrategyProjectsAdd, db: Session = Depends(get_db)):
    return crud.add_strategy_projects(db, session_id, data.projects)


@router.patch("/projects/{project_id}", response_model=StrategyProjectResponse)
def update_project(
    session_id: str, project_id: str, data: StrategyProjectUpdate, db: Session = Depends(get_db)
):
    return crud.update_strategy_project(db, session_id, project_id, data)


@router.delete("/projects/{project_id}")
def delete_project(session_id: str, project_id: str, db: Session = Depends(get_db)):
    crud.delete_strategy_project(db, session_id, project_id)
    return {"detail": f"Project {project_id} deleted successfully"}


@router.get("/chart")
def get_chart(session_id: str, db: Session = Depends(get_db)):
    """Plot coordinates for the impact × complexity matrix (empty axes if no projects)."""
    portfolio = crud.get_strategy_portfolio(db, session_id)
    return chart_payload(portfolio.projects if portfolio else [])
