"""
Reports API - Stored proctoring reports

Endpoints:
- GET /api/reports - All reports, newest first
- GET /api/reports/{report_id} - One report
- POST /api/reports - Save a report
- DELETE /api/reports/{report_id} - Delete a report
- GET /api/reports/{report_id}/download - Text report as attachment
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, PlainTextResponse

from ..deps import get_report_store
from ...proctor.exceptions import ReportStorageError
from ...proctor.report import ProctoringReport, ReportPayload, render_text_report
from ...proctor.storage import ReportStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports", tags=["Reports"])


def _get_or_404(store: ReportStore, report_id: str) -> ProctoringReport:
    report = store.get(report_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


@router.get("", response_model=List[ProctoringReport])
async def list_reports(store: ReportStore = Depends(get_report_store)):
    """All reports, newest first"""
    return store.list()


@router.get("/{report_id}", response_model=ProctoringReport)
async def get_report(report_id: str, store: ReportStore = Depends(get_report_store)):
    return _get_or_404(store, report_id)


@router.post("", status_code=201)
async def create_report(payload: ReportPayload, store: ReportStore = Depends(get_report_store)):
    """
    Save a new report.

    Missing fields are filled with defaults; id and timestamp are
    assigned by the server.
    """
    try:
        report = store.create(payload)
    except ReportStorageError as e:
        logger.error(f"Error saving report: {e}")
        return JSONResponse(status_code=500, content={"success": False, "error": "Failed to save report"})

    return {"success": True, "message": "Report saved successfully", "id": report.id}


@router.delete("/{report_id}")
async def delete_report(report_id: str, store: ReportStore = Depends(get_report_store)):
    try:
        deleted = store.delete(report_id)
    except ReportStorageError as e:
        logger.error(f"Error deleting report: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete report")

    if not deleted:
        raise HTTPException(status_code=404, detail="Report not found")
    return {"success": True, "message": "Report deleted successfully"}


@router.get("/{report_id}/download", response_class=PlainTextResponse)
async def download_report(report_id: str, store: ReportStore = Depends(get_report_store)):
    """Text version of a report as a file download"""
    report = _get_or_404(store, report_id)
    filename = f"proctoring-report-{report.id}.txt"
    return PlainTextResponse(
        render_text_report(report),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
