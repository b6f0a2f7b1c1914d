"""
Admin endpoints - triage of incoming reports and user role management.

SCOPE OF ADMIN:
✅ List and filter all reports, see status counts
✅ Accept a Pending report with a plan (optionally assigning a worker)
✅ Reject a Pending report with a reason
✅ Change user roles

❌ NOT start or resolve jobs (worker actions)
❌ NOT edit report content
❌ NOT delete reports
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.models.report import (
    AcceptReportRequest,
    RejectReportRequest,
    ReportActionResponse,
    ReportListResponse,
    ReportResponse,
    ReportStats,
)
from app.models.user import RoleUpdateRequest, UserResponse, UserRole
from app.services.report_service import get_report_service
from app.services.user_service import get_user_service
from app.utils.security import require_roles

router = APIRouter(prefix="/admin", tags=["Admin"])

require_admin = require_roles(UserRole.ADMIN)


@router.get("/reports", response_model=ReportListResponse)
async def list_reports(
    status_filter: Optional[str] = Query(
        None, alias="status", description="Pending, Accepted, In Progress, Resolved, Rejected or All"
    ),
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Maximum number of reports"),
    admin: UserResponse = Depends(require_admin)
):
    """All reports, newest first, optionally filtered by status."""
    service = get_report_service()
    try:
        reports = service.get_all_reports(status=status_filter, limit=limit)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown status filter: {status_filter}"
        )
    return ReportListResponse(
        count=len(reports),
        reports=[service.to_response(r, viewer=admin) for r in reports],
    )


@router.get("/stats", response_model=ReportStats)
async def report_stats(admin: UserResponse = Depends(require_admin)):
    """Dashboard header counts across all reports."""
    service = get_report_service()
    return service.compute_stats(service.get_all_reports())


@router.get("/reports/{report_id}", response_model=ReportResponse)
async def get_report(report_id: str, admin: UserResponse = Depends(require_admin)):
    service = get_report_service()
    return service.to_response(service.get_report(report_id, viewer=admin), viewer=admin)


@router.post("/reports/{report_id}/accept", response_model=ReportActionResponse)
async def accept_report(
    report_id: str,
    request: AcceptReportRequest,
    admin: UserResponse = Depends(require_admin)
):
    """
    Pending → Accepted.

    plan_notes carries the instructions and expected timeline for the worker.
    Without assigned_worker_id the job is open to every worker.

    Raises:
        400: Report is not Pending, or assigned_worker_id is not a worker
        404: Report not found
        409: expected_version is stale
    """
    service = get_report_service()
    try:
        updated = service.accept_report(
            report_id,
            admin=admin,
            plan_notes=request.plan_notes,
            assigned_worker_id=request.assigned_worker_id,
            expected_version=request.expected_version,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return ReportActionResponse(
        message="Report accepted",
        report=service.to_response(updated, viewer=admin),
    )


@router.post("/reports/{report_id}/reject", response_model=ReportActionResponse)
async def reject_report(
    report_id: str,
    request: RejectReportRequest,
    admin: UserResponse = Depends(require_admin)
):
    """Pending → Rejected, with the reason shown to the citizen."""
    service = get_report_service()
    try:
        updated = service.reject_report(
            report_id,
            admin=admin,
            rejection_reason=request.rejection_reason,
            expected_version=request.expected_version,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return ReportActionResponse(
        message="Report rejected",
        report=service.to_response(updated, viewer=admin),
    )


@router.get("/users")
async def list_users(
    role: Optional[UserRole] = Query(None, description="Filter by role"),
    admin: UserResponse = Depends(require_admin)
):
    users = get_user_service().list_users(role=role)
    return {
        "success": True,
        "count": len(users),
        "users": users,
    }


@router.patch("/users/{uid}/role", response_model=UserResponse)
async def change_role(
    uid: str,
    request: RoleUpdateRequest,
    admin: UserResponse = Depends(require_admin)
):
    """Promote or demote a user. Admins cannot change their own role."""
    if uid == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Admins cannot change their own role"
        )
    return get_user_service().set_role(uid, request.role)
