"""
Export Router — /api/export

Printable HTML reports and an Excel download of the session's ROI projects.
Documents are generated on demand and never stored. An empty project list
is refused with 422 / EMPTY_REPORT.

Endpoints:
    GET /api/export/roi-report/{session_id}        — ROI report (text/html)
    GET /api/export/strategy-report/{session_id}   — Strategy report (text/html)
    GET /api/export/roi-excel/{session_id}         — ROI projects (.xlsx)
"""

import io
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, StreamingResponse
from sqlalchemy.orm import Session

from ..database import get_db
from .. import crud
from ..engines.report import ROI_FIELDS, render_roi_report, render_strategy_report, roi_summary
from ..errors import ValidationError

logger = logging.getLogger("cubo.export")

router = APIRouter(prefix="/api/export", tags=["Export"])


@router.get("/roi-report/{session_id}", response_class=HTMLResponse)
def roi_report(session_id: str, db: Session = Depends(get_db)):
    projects = crud.list_roi_projects(db, session_id)
    html = render_roi_report(projects)
    logger.info(f"ROI report generated for session {session_id} ({len(projects)} projects)")
    return HTMLResponse(content=html)


@router.get("/strategy-report/{session_id}", response_class=HTMLResponse)
def strategy_report(session_id: str, db: Session = Depends(get_db)):
    portfolio = crud.get_strategy_portfolio(db, session_id)
    projects = portfolio.projects if portfolio else []
    html = render_strategy_report(portfolio, projects)
    logger.info(f"Strategy report generated for session {session_id} ({len(projects)} projects)")
    return HTMLResponse(content=html)


@router.get("/roi-excel/{session_id}")
def roi_excel(session_id: str, db: Session = Depends(get_db)):
    projects = crud.list_roi_projects(db, session_id)
    if not projects:
        raise ValidationError(
            "Nothing to report: add at least one ROI project first.",
            error_code="EMPTY_REPORT",
        )

    import openpyxl
    wb = openpyxl.Workbook()

    # Projects sheet
    ws = wb.active
    ws.title = "Projects"
    ws.append(ROI_FIELDS + ["created_at"])
    for p in projects:
        ws.append([getattr(p, f) for f in ROI_FIELDS] + [p.created_at])

    # Summary sheet
    rows = [{f: getattr(p, f) for f in ROI_FIELDS} for p in projects]
    ws2 = wb.create_sheet("Summary")
    for key, value in roi_summary(rows).items():
        ws2.append([key, value])

    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)

    return StreamingResponse(
        buf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": "attachment; filename=roi_projects.xlsx"},
    )
