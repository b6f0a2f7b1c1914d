"""
Report endpoints - citizen report submission and the citizen's own history.
"""

import logging

from fastapi import APIRouter, Depends, status

from app.models.report import ReportCreate, ReportListResponse, ReportResponse, ReportStats
from app.models.user import UserResponse, UserRole
from app.services.report_service import get_report_service
from app.utils.security import get_current_user, require_roles

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def submit_report(
    report: ReportCreate,
    user: UserResponse = Depends(require_roles(UserRole.CITIZEN))
):
    """
    Submit a new citizen report.

    The photo must already be hosted (POST /uploads/images returns its URL).
    New reports always start as Pending.
    """
    logger.info(f"📝 POST /reports - user={user.id}, category={report.category}")
    service = get_report_service()
    created = service.create_report(user, report)
    return service.to_response(created, viewer=user)


@router.get("/mine", response_model=ReportListResponse)
async def my_reports(user: UserResponse = Depends(get_current_user)):
    """Reports submitted by the signed-in user, newest first."""
    service = get_report_service()
    reports = service.get_user_reports(user.id)
    return ReportListResponse(
        count=len(reports),
        reports=[service.to_response(r, viewer=user) for r in reports],
    )


@router.get("/mine/stats", response_model=ReportStats)
async def my_report_stats(user: UserResponse = Depends(get_current_user)):
    service = get_report_service()
    return service.compute_stats(service.get_user_reports(user.id))


@router.get("/{report_id}", response_model=ReportResponse)
async def get_report(report_id: str, user: UserResponse = Depends(get_current_user)):
    """
    Report details. Citizens may only open their own reports;
    admins and workers may open any.
    """
    service = get_report_service()
    report = service.get_report(report_id, viewer=user)
    return service.to_response(report, viewer=user)
