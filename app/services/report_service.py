"""
Report service - Business logic for citizen report handling.
Handles Firestore CRUD operations for reports and drives the status workflow.

DESIGN NOTE:
- Reports are stored in the "reports" collection with camelCase fields,
  the same shape the mobile client has always written
- Every status change goes through StatusWorkflowEngine
- Every status change bumps "version"; clients pass it back as expected_version
"""

import threading
from collections import Counter
from typing import Dict, List, Optional
import logging

from app.config.firebase import get_db
from app.core.exceptions import NotFoundError, PermissionDeniedError, VersionConflictError
from app.models.report import ReportCreate, ReportResponse, ReportStats, StatusHistoryEntry
from app.models.user import UserResponse, UserRole
from app.services.geocoding import reverse_geocode_location
from app.services.map_service import invalidate_marker_cache
from app.services.status_workflow import ReportStatus, StatusWorkflowEngine
from app.services.user_service import get_user_service
from app.utils.firestore_helpers import (
    iter_documents,
    newest_first,
    parse_timestamp,
    snapshot_to_dict,
    utcnow,
    where_filter,
)

logger = logging.getLogger(__name__)

REPORTS_COLLECTION = "reports"

# Serializes read-check-write of a report's status within this process
_transition_lock = threading.Lock()

WORKER_QUEUE_STATUSES = (ReportStatus.ACCEPTED.value, ReportStatus.IN_PROGRESS.value)


class ReportService:
    """
    Service for report submission, listing and workflow transitions.
    """

    def __init__(self):
        self.db = get_db()
        self.workflow = StatusWorkflowEngine()

    def _collection(self):
        return self.db.collection(REPORTS_COLLECTION)

    # ------------------------------------------------------------------
    # Create / read
    # ------------------------------------------------------------------

    def create_report(self, user: UserResponse, report_data: ReportCreate) -> Dict:
        """
        Store a new report in Pending status.

        When the citizen did not type a location, the coordinates are reverse
        geocoded into a short address label. Geocoding failures leave the
        location empty and never block the submission.
        """
        location = (report_data.location or "").strip()
        if not location:
            location = reverse_geocode_location(report_data.latitude, report_data.longitude) or ""

        now = utcnow()
        document = {
            "userId": user.id,
            "title": report_data.title.strip(),
            "description": report_data.description.strip(),
            "category": report_data.category.strip() or "General",
            "location": location,
            "imageUrl": report_data.image_url,
            "latitude": report_data.latitude,
            "longitude": report_data.longitude,
            "status": ReportStatus.PENDING.value,
            "version": 1,
            "statusHistory": [],
            "createdAt": now,
            "updatedAt": now,
        }

        doc_ref = self._collection().document()
        doc_ref.set(document)
        invalidate_marker_cache()

        document["id"] = doc_ref.id
        logger.info(f"✅ Report created: {doc_ref.id} by {user.id} ({document['category']})")
        return document

    def _load(self, report_id: str) -> Dict:
        doc = self._collection().document(report_id).get()
        if not doc.exists:
            raise NotFoundError(f"Report {report_id} not found")
        return snapshot_to_dict(doc)

    def get_report(self, report_id: str, viewer: UserResponse) -> Dict:
        """
        Fetch one report. Citizens may only read their own reports.
        """
        report = self._load(report_id)
        if viewer.role == UserRole.CITIZEN and report.get("userId") != viewer.id:
            raise PermissionDeniedError("Citizens can only view their own reports")
        return report

    def get_user_reports(self, user_id: str) -> List[Dict]:
        """Reports submitted by one user, newest first (sorted here to avoid a composite index)."""
        query = where_filter(self._collection(), "userId", "==", user_id)
        return newest_first(iter_documents(query))

    def get_all_reports(self, status: Optional[str] = None, limit: Optional[int] = None) -> List[Dict]:
        """
        All reports newest first, optionally restricted to one status.
        "All" (any case) means no filter.

        Raises:
            ValueError: Unknown status value
        """
        query = self._collection()
        if status and status.lower() != "all":
            status = ReportStatus(status).value
            query = where_filter(query, "status", "==", status)

        reports = newest_first(iter_documents(query))
        if limit is not None:
            reports = reports[:limit]
        return reports

    def get_worker_jobs(self, worker: UserResponse) -> List[Dict]:
        """
        Jobs a worker can see: Accepted (ready to start) or In Progress,
        either unassigned or assigned to this worker. Active jobs come first.
        """
        jobs = []
        for status in WORKER_QUEUE_STATUSES:
            query = where_filter(self._collection(), "status", "==", status)
            for job in iter_documents(query):
                assigned = job.get("assignedWorkerId")
                if assigned and assigned != worker.id:
                    continue
                if status == ReportStatus.IN_PROGRESS.value and job.get("workerId") not in (None, worker.id):
                    continue
                jobs.append(job)

        jobs = newest_first(jobs)
        jobs.sort(key=lambda j: 0 if j.get("status") == ReportStatus.IN_PROGRESS.value else 1)
        return jobs

    @staticmethod
    def compute_stats(reports: List[Dict]) -> ReportStats:
        counts = Counter(r.get("status", ReportStatus.PENDING.value) for r in reports)
        return ReportStats(
            pending=counts[ReportStatus.PENDING.value],
            accepted=counts[ReportStatus.ACCEPTED.value],
            in_progress=counts[ReportStatus.IN_PROGRESS.value],
            resolved=counts[ReportStatus.RESOLVED.value],
            rejected=counts[ReportStatus.REJECTED.value],
            total=len(reports),
        )

    # ------------------------------------------------------------------
    # Workflow
    # ------------------------------------------------------------------

    def accept_report(
        self,
        report_id: str,
        admin: UserResponse,
        plan_notes: str,
        assigned_worker_id: Optional[str] = None,
        expected_version: Optional[int] = None
    ) -> Dict:
        if assigned_worker_id:
            worker = get_user_service().get_user(assigned_worker_id)
            if worker is None or worker.role != UserRole.WORKER:
                raise ValueError(f"User {assigned_worker_id} is not a worker")

        return self._transition(
            report_id,
            actor=admin,
            new_status=ReportStatus.ACCEPTED,
            fields={
                "planNotes": plan_notes,
                "assignedWorkerId": assigned_worker_id,
                "reviewedBy": admin.id,
            },
            expected_version=expected_version,
            note=plan_notes,
        )

    def reject_report(
        self,
        report_id: str,
        admin: UserResponse,
        rejection_reason: str,
        expected_version: Optional[int] = None
    ) -> Dict:
        return self._transition(
            report_id,
            actor=admin,
            new_status=ReportStatus.REJECTED,
            fields={"rejectionReason": rejection_reason, "reviewedBy": admin.id},
            expected_version=expected_version,
            note=rejection_reason,
        )

    def start_job(self, report_id: str, worker: UserResponse, expected_version: Optional[int] = None) -> Dict:
        def _check(report: Dict):
            assigned = report.get("assignedWorkerId")
            if assigned and assigned != worker.id:
                raise PermissionDeniedError(f"Report {report_id} is assigned to another worker")

        return self._transition(
            report_id,
            actor=worker,
            new_status=ReportStatus.IN_PROGRESS,
            fields={"workerId": worker.id, "startedAt": utcnow()},
            expected_version=expected_version,
            check=_check,
        )

    def resolve_job(
        self,
        report_id: str,
        worker: UserResponse,
        resolution_notes: str,
        resolution_image_url: str,
        expected_version: Optional[int] = None
    ) -> Dict:
        def _check(report: Dict):
            if report.get("workerId") != worker.id:
                raise PermissionDeniedError("Only the worker who started this job can resolve it")

        return self._transition(
            report_id,
            actor=worker,
            new_status=ReportStatus.RESOLVED,
            fields={
                "resolutionNotes": resolution_notes,
                "resolutionImageUrl": resolution_image_url,
                "resolvedAt": utcnow(),
            },
            expected_version=expected_version,
            check=_check,
            note=resolution_notes,
        )

    def _transition(
        self,
        report_id: str,
        actor: UserResponse,
        new_status: ReportStatus,
        fields: Dict,
        expected_version: Optional[int] = None,
        check=None,
        note: Optional[str] = None
    ) -> Dict:
        """
        Read, validate and write one status change.

        Raises:
            NotFoundError: Report does not exist
            VersionConflictError: expected_version is stale
            InvalidTransitionError: Workflow does not allow the move
            PermissionDeniedError: Wrong role, or a job owned by someone else
        """
        doc_ref = self._collection().document(report_id)

        with _transition_lock:
            doc = doc_ref.get()
            if not doc.exists:
                raise NotFoundError(f"Report {report_id} not found")

            current = doc.to_dict()
            current_status = current.get("status", ReportStatus.PENDING.value)
            current_version = int(current.get("version", 1))

            if expected_version is not None and expected_version != current_version:
                raise VersionConflictError(report_id, expected_version, current_version)

            transition = self.workflow.validate_and_transition(
                current_status=current_status,
                new_status=new_status.value,
                changed_by=actor.id,
                role=actor.role,
                fields=fields,
                note=note,
            )
            if check is not None:
                check(current)

            status_history = current.get("statusHistory", [])
            if not isinstance(status_history, list):
                status_history = []
            status_history.append(transition["history_entry"])

            update_data = dict(fields)
            update_data.update({
                "status": new_status.value,
                "version": current_version + 1,
                "statusHistory": status_history,
                "updatedAt": utcnow(),
            })
            doc_ref.update(update_data)

        invalidate_marker_cache()
        logger.info(
            f"✅ {actor.role.value} {actor.id} moved report {report_id}: "
            f"{current_status} → {new_status.value} (v{current_version + 1})"
        )

        updated = doc_ref.get()
        return snapshot_to_dict(updated)

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def allowed_transitions_for(self, report: Dict, viewer: UserResponse) -> List[str]:
        allowed = self.workflow.get_allowed_transitions(report.get("status", ""), viewer.role)
        if viewer.role == UserRole.WORKER:
            assigned = report.get("assignedWorkerId")
            started_by = report.get("workerId")
            if (assigned and assigned != viewer.id) or (started_by and started_by != viewer.id):
                return []
        return allowed

    def to_response(self, report: Dict, viewer: Optional[UserResponse] = None) -> ReportResponse:
        history = [
            StatusHistoryEntry(
                from_status=entry.get("from", ""),
                to_status=entry.get("to", ""),
                changed_by=entry.get("changedBy", ""),
                role=entry.get("role"),
                timestamp=parse_timestamp(entry.get("timestamp")),
                note=entry.get("note") or None,
            )
            for entry in report.get("statusHistory") or []
            if isinstance(entry, dict)
        ]
        return ReportResponse(
            id=report["id"],
            user_id=report.get("userId", ""),
            title=report.get("title", ""),
            description=report.get("description", ""),
            category=report.get("category") or "General",
            location=report.get("location") or None,
            image_url=report.get("imageUrl"),
            latitude=report.get("latitude"),
            longitude=report.get("longitude"),
            status=report.get("status", ReportStatus.PENDING.value),
            version=int(report.get("version", 1)),
            plan_notes=report.get("planNotes"),
            rejection_reason=report.get("rejectionReason"),
            assigned_worker_id=report.get("assignedWorkerId"),
            worker_id=report.get("workerId"),
            resolution_notes=report.get("resolutionNotes"),
            resolution_image_url=report.get("resolutionImageUrl"),
            status_history=history,
            allowed_transitions=self.allowed_transitions_for(report, viewer) if viewer else [],
            created_at=parse_timestamp(report.get("createdAt")),
            updated_at=parse_timestamp(report.get("updatedAt")),
        )


# Global service instance (singleton pattern)
_report_service = None


def get_report_service() -> ReportService:
    """Get or create ReportService singleton."""
    global _report_service
    if _report_service is None:
        _report_service = ReportService()
    return _report_service
