"""
Worker endpoints - the field job queue.

A worker sees Accepted jobs (ready to start) and In Progress jobs (active),
limited to jobs that are unassigned or assigned to them.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from app.models.report import (
    ReportActionResponse,
    ReportListResponse,
    ResolveJobRequest,
    StartJobRequest,
)
from app.models.user import UserResponse, UserRole
from app.services.report_service import get_report_service
from app.utils.security import require_roles

router = APIRouter(prefix="/worker", tags=["Worker"])

require_worker = require_roles(UserRole.WORKER)


@router.get("/jobs", response_model=ReportListResponse)
async def job_queue(worker: UserResponse = Depends(require_worker)):
    """Active jobs first, then jobs ready to start, newest first within each."""
    service = get_report_service()
    jobs = service.get_worker_jobs(worker)
    return ReportListResponse(
        count=len(jobs),
        reports=[service.to_response(j, viewer=worker) for j in jobs],
    )


@router.post("/jobs/{report_id}/start", response_model=ReportActionResponse)
async def start_job(
    report_id: str,
    request: Optional[StartJobRequest] = None,
    worker: UserResponse = Depends(require_worker)
):
    """Accepted → In Progress. The job becomes owned by this worker."""
    service = get_report_service()
    expected_version = request.expected_version if request else None
    try:
        updated = service.start_job(report_id, worker=worker, expected_version=expected_version)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return ReportActionResponse(
        message="Job started",
        report=service.to_response(updated, viewer=worker),
    )


@router.post("/jobs/{report_id}/resolve", response_model=ReportActionResponse)
async def resolve_job(
    report_id: str,
    request: ResolveJobRequest,
    worker: UserResponse = Depends(require_worker)
):
    """
    In Progress → Resolved.

    Needs a final note and a proof photo URL (upload it via /uploads/images first).
    """
    service = get_report_service()
    try:
        updated = service.resolve_job(
            report_id,
            worker=worker,
            resolution_notes=request.resolution_notes,
            resolution_image_url=request.resolution_image_url,
            expected_version=request.expected_version,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return ReportActionResponse(
        message="Job marked as resolved",
        report=service.to_response(updated, viewer=worker),
    )
