"""
Cubo Estratégia CRUD Operations

Database access functions for all tables. These functions encapsulate
all SQLAlchemy queries and are called by API routers.

Architecture:
    - Each function takes a db: Session parameter (injected by FastAPI)
    - Functions return ORM model instances (routers convert to Pydantic)
    - Session-scoped functions resolve the session first and raise
      NoActiveSession for unknown ids, before touching any other table
    - Writes run inside _write(): commit on success, rollback + BackendError
      on any SQLAlchemy failure, so a failed request leaves no partial state

Naming convention:
    - create_xxx: INSERT new record
    - get_xxx: SELECT single record by ID
    - list_xxx: SELECT multiple records with optional filters
    - update_xxx: UPDATE existing record
    - delete_xxx: DELETE record (CASCADE handles children)
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from .engines.roi import ROIInputs, calculate_roi
from .errors import BackendError, NoActiveSession, NotFoundError, ValidationError
from .models import (
    UserSession, ROIProject, StrategySession, StrategyProject, _new_id,
)
from .schemas import (
    ROIProjectCreate, StrategyPortfolioSave, StrategyProjectCreate, StrategyProjectUpdate,
)

logger = logging.getLogger("cubo.store")

DEFAULT_PORTFOLIO_NAME = "Novo Portfólio"

CLICK_COUNTERS = {
    "benchmark": "benchmark_clicks",
    "suggestions": "project_suggestions_clicks",
}


def mask_code(code: str) -> str:
    """Access codes act as credentials; only the first characters are logged."""
    return f"{code[:2]}***" if code else ""


@contextmanager
def _write(db: Session, action: str):
    """Commit the enclosed changes as one transaction."""
    try:
        yield
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Storage failure while trying to {action}: {e}")
        raise BackendError(
            f"Could not {action}. Your data was kept; please try again.",
            context={"action": action},
        ) from e


# ---------------------------------------------------------------------------
# SESSION CRUD
# ---------------------------------------------------------------------------

def get_session(db: Session, session_id: str) -> Optional[UserSession]:
    """Get a session by ID. Returns None if not found."""
    return db.get(UserSession, session_id)


def get_session_by_code(db: Session, access_code: str) -> Optional[UserSession]:
    return db.execute(
        select(UserSession).where(UserSession.access_code == access_code)
    ).scalar_one_or_none()


def require_session(db: Session, session_id: Optional[str]) -> UserSession:
    """Resolve a session id or raise NoActiveSession."""
    session = get_session(db, session_id) if session_id else None
    if session is None:
        raise NoActiveSession(
            "No active session. Enter your access code to continue.",
            context={"session_id": session_id},
        )
    return session


def _insert_session_if_absent(db: Session, access_code: str) -> bool:
    """
    INSERT ... ON CONFLICT (access_code) DO NOTHING.
    Returns True when this call created the row.
    """
    now = datetime.utcnow()
    values = dict(
        id=_new_id(), access_code=access_code,
        benchmark_clicks=0, project_suggestions_clicks=0,
        created_at=now, updated_at=now,
    )
    dialect = db.get_bind().dialect.name

    if dialect in ("sqlite", "postgresql"):
        insert = sqlite_insert if dialect == "sqlite" else pg_insert
        stmt = insert(UserSession).values(**values).on_conflict_do_nothing(
            index_elements=["access_code"]
        )
        return db.execute(stmt).rowcount == 1

    # Other dialects: rely on the unique constraint inside a savepoint
    try:
        with db.begin_nested():
            db.add(UserSession(**values))
        return True
    except IntegrityError:
        return False


def get_or_create_session(db: Session, access_code: str) -> tuple[UserSession, bool]:
    """
    Atomic find-or-create by access code.

    Concurrent calls with the same code converge on a single row: the insert
    is conflict-tolerant and the row is always read back by code afterwards.

    Returns:
        (session, created)

    Raises:
        ValidationError: empty code
        BackendError: storage failure
    """
    code = (access_code or "").strip()
    if not code:
        raise ValidationError("Access code is required", context={"field": "access_code"})

    with _write(db, "open the session"):
        created = _insert_session_if_absent(db, code)

    session = get_session_by_code(db, code)
    if session is None:
        raise BackendError("Session could not be loaded after creation")

    logger.info(
        f"Session {'created' if created else 'loaded'} for code {mask_code(code)} "
        f"(id={session.id})"
    )
    return session, created


def increment_click_counter(db: Session, session_id: str, counter: str) -> UserSession:
    """Atomically add one to a usage counter (UPDATE ... SET c = c + 1)."""
    if counter not in CLICK_COUNTERS:
        raise ValidationError(
            f"Unknown counter: {counter}. Must be one of {list(CLICK_COUNTERS)}",
            context={"field": "counter"},
        )
    require_session(db, session_id)
    column = getattr(UserSession, CLICK_COUNTERS[counter])

    with _write(db, "update the usage counter"):
        db.execute(
            update(UserSession)
            .where(UserSession.id == session_id)
            .values({column: column + 1, UserSession.updated_at: datetime.utcnow()})
        )

    session = get_session(db, session_id)
    db.refresh(session)
    return session


def list_sessions(db: Session, search: Optional[str] = None) -> dict:
    """
    List sessions (newest first) with ROI-project and portfolio counts,
    plus totals across the listed sessions.

    Filters:
        search: case-insensitive partial match on the access code
    """
    query = select(UserSession).order_by(UserSession.created_at.desc())
    if search:
        query = query.where(UserSession.access_code.ilike(f"%{search.strip()}%"))
    sessions = db.execute(query).scalars().all()

    roi_counts = dict(
        db.execute(
            select(ROIProject.session_id, func.count(ROIProject.id))
            .group_by(ROIProject.session_id)
        ).all()
    )
    strategy_counts = dict(
        db.execute(
            select(StrategySession.session_id, func.count(StrategySession.id))
            .group_by(StrategySession.session_id)
        ).all()
    )

    rows = []
    for s in sessions:
        rows.append({
            "id": s.id,
            "access_code": s.access_code,
            "benchmark_clicks": s.benchmark_clicks or 0,
            "project_suggestions_clicks": s.project_suggestions_clicks or 0,
            "created_at": s.created_at,
            "updated_at": s.updated_at,
            "roi_projects_count": roi_counts.get(s.id, 0),
            "strategy_sessions_count": strategy_counts.get(s.id, 0),
        })

    return {
        "sessions": rows,
        "totals": {
            "total_users": len(rows),
            "total_benchmark_clicks": sum(r["benchmark_clicks"] for r in rows),
            "total_project_suggestions_clicks": sum(
                r["project_suggestions_clicks"] for r in rows
            ),
            "total_roi_projects": sum(r["roi_projects_count"] for r in rows),
            "total_strategy_sessions": sum(r["strategy_sessions_count"] for r in rows),
        },
    }


# ---------------------------------------------------------------------------
# ROI PROJECT CRUD
# ---------------------------------------------------------------------------

def create_roi_project(db: Session, session_id: str, data: ROIProjectCreate) -> ROIProject:
    """
    Compute the derived metrics and store them alongside the inputs.

    Raises:
        NoActiveSession: unknown session
        ValidationError: investment <= 0, timeframe <= 0, ...
    """
    require_session(db, session_id)
    metrics = calculate_roi(ROIInputs(
        investment_amount=data.investment_amount,
        timeframe=data.timeframe,
        expected_revenue=data.expected_revenue,
        expected_costs=data.expected_costs,
        risk_level=data.risk_level,
    ))

    project = ROIProject(
        session_id=session_id,
        project_name=data.project_name,
        project_description=data.project_description,
        investment_amount=data.investment_amount,
        timeframe=data.timeframe,
        expected_revenue=data.expected_revenue,
        expected_costs=data.expected_costs,
        estimated_roi=data.estimated_roi,
        risk_level=data.risk_level,
        calculation_model=data.calculation_model,
        **metrics.to_dict(),
    )
    with _write(db, "save the ROI project"):
        db.add(project)
    db.refresh(project)
    logger.info(f"ROI project {project.id} saved for session {session_id}")
    return project


def list_roi_projects(db: Session, session_id: str) -> list[ROIProject]:
    """List a session's ROI projects, newest first."""
    require_session(db, session_id)
    return (
        db.query(ROIProject)
        .filter(ROIProject.session_id == session_id)
        .order_by(ROIProject.created_at.desc())
        .all()
    )


def delete_roi_project(db: Session, session_id: str, project_id: str) -> bool:
    """Delete an ROI project scoped to its session. Returns True if deleted."""
    require_session(db, session_id)
    project = (
        db.query(ROIProject)
        .filter(ROIProject.id == project_id, ROIProject.session_id == session_id)
        .first()
    )
    if not project:
        return False
    with _write(db, "delete the ROI project"):
        db.delete(project)
    return True


# ---------------------------------------------------------------------------
# STRATEGY PORTFOLIO CRUD
# ---------------------------------------------------------------------------

def get_strategy_portfolio(db: Session, session_id: str) -> Optional[StrategySession]:
    """Get the session's portfolio with its projects. None if never saved."""
    require_session(db, session_id)
    return db.execute(
        select(StrategySession)
        .options(selectinload(StrategySession.projects))
        .where(StrategySession.session_id == session_id)
    ).scalar_one_or_none()


def _build_project(data: StrategyProjectCreate) -> StrategyProject:
    return StrategyProject(
        name=data.name,
        impact=data.impact,
        complexity=data.complexity,
        category=data.category,
        selected=data.selected,
        description=data.description,
        expected_return=data.expected_return,
    )


def save_strategy_portfolio(
    db: Session, session_id: str, data: StrategyPortfolioSave
) -> StrategySession:
    """
    Create or update the session's portfolio configuration.

    When data.projects is not None the stored projects are replaced by the
    given list. Config update, delete-all and insert-all commit together, so
    a failed insert can never leave the portfolio emptied.
    """
    portfolio = get_strategy_portfolio(db, session_id)

    with _write(db, "save the portfolio"):
        if portfolio is None:
            portfolio = StrategySession(session_id=session_id)
            db.add(portfolio)
        portfolio.portfolio_name = data.portfolio_name or DEFAULT_PORTFOLIO_NAME
        portfolio.context_history = data.context_history
        portfolio.context_initiatives = data.context_initiatives
        portfolio.updated_at = datetime.utcnow()

        if data.projects is not None:
            # delete-orphan cascade removes the previous children at flush
            portfolio.projects = [_build_project(p) for p in data.projects]

    db.refresh(portfolio)
    logger.info(
        f"Portfolio {portfolio.id} saved for session {session_id} "
        f"({len(portfolio.projects)} projects)"
    )
    return portfolio


def add_strategy_projects(
    db: Session, session_id: str, projects: list[StrategyProjectCreate]
) -> StrategySession:
    """Append projects, creating a default-named portfolio if none exists yet."""
    if not projects:
        raise ValidationError("Select at least one project", context={"field": "projects"})

    portfolio = get_strategy_portfolio(db, session_id)
    with _write(db, "add the projects"):
        if portfolio is None:
            portfolio = StrategySession(
                session_id=session_id, portfolio_name=DEFAULT_PORTFOLIO_NAME
            )
            db.add(portfolio)
        for p in projects:
            portfolio.projects.append(_build_project(p))

    db.refresh(portfolio)
    return portfolio


def _get_strategy_project(db: Session, session_id: str, project_id: str) -> StrategyProject:
    portfolio = get_strategy_portfolio(db, session_id)
    project = None
    if portfolio is not None:
        project = (
            db.query(StrategyProject)
            .filter(
                StrategyProject.id == project_id,
                StrategyProject.strategy_session_id == portfolio.id,
            )
            .first()
        )
    if project is None:
        raise NotFoundError(f"Project {project_id} not found", context={"project_id": project_id})
    return project


def update_strategy_project(
    db: Session, session_id: str, project_id: str, data: StrategyProjectUpdate
) -> StrategyProject:
    """Update a project. Only non-None fields are updated."""
    project = _get_strategy_project(db, session_id, project_id)
    with _write(db, "update the project"):
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(project, field, value)
        project.updated_at = datetime.utcnow()
    db.refresh(project)
    return project


def delete_strategy_project(db: Session, session_id: str, project_id: str) -> bool:
    project = _get_strategy_project(db, session_id, project_id)
    with _write(db, "remove the project"):
        db.delete(project)
    return True
