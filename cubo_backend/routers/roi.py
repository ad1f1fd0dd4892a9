"""
ROI Router — /api/roi and /api/sessions/{id}/roi-projects

The calculate endpoint is stateless and needs no session: the UI shows the
metrics as soon as the form is valid. Saving is session-scoped and stores
the metrics computed at that moment.

Endpoints:
    POST   /api/roi/calculate                              — Metric preview
    GET    /api/sessions/{id}/roi-projects                 — List saved projects
    POST   /api/sessions/{id}/roi-projects                 — Save a project
    DELETE /api/sessions/{id}/roi-projects/{project_id}    — Delete a project
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from .. import crud
from ..engines.roi import ROIInputs, RISK_FACTORS, CALCULATION_MODELS, calculate_roi
from ..errors import NotFoundError
from ..schemas import (
    ROICalculationRequest, ROIMetricsResponse, ROIProjectCreate, ROIProjectResponse,
)

router = APIRouter(tags=["ROI"])


@router.post("/api/roi/calculate", response_model=ROIMetricsResponse)
def calculate(data: ROICalculationRequest):
    """
    Compute ROI, net profit, break-even, monthly return, risk-adjusted ROI,
    NPV, approximate IRR and payback. Returns 422 for investment <= 0.
    """
    metrics = calculate_roi(ROIInputs(**data.model_dump()))
    return metrics.to_dict()


@router.get("/api/roi/options")
def calculation_options():
    """Risk factors and calculator variants the UI can offer."""
    return {"risk_factors": RISK_FACTORS, "calculation_models": CALCULATION_MODELS}


@router.get("/api/sessions/{session_id}/roi-projects", response_model=list[ROIProjectResponse])
def list_projects(session_id: str, db: Session = Depends(get_db)):
    return crud.list_roi_projects(db, session_id)


@router.post(
    "/api/sessions/{session_id}/roi-projects",
    response_model=ROIProjectResponse,
    status_code=201,
)
def create_project(session_id: str, data: ROIProjectCreate, db: Session = Depends(get_db)):
    """Save a project with its metrics computed at creation time."""
    return crud.create_roi_project(db, session_id, data)


@router.delete("/api/sessions/{session_id}/roi-projects/{project_id}")
def delete_project(session_id: str, project_id: str, db: Session = Depends(get_db)):
    deleted = crud.delete_roi_project(db, session_id, project_id)
    if not deleted:
        raise NotFoundError(f"Project {project_id} not found", context={"project_id": project_id})
    return {"detail": f"Project {project_id} deleted successfully"}
