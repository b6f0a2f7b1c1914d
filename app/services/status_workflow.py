"""
Status Workflow Engine - strict, role-gated state machine for reports.

Lifecycle:
    Pending ──admin──▶ Accepted ──worker──▶ In Progress ──worker──▶ Resolved
       └────admin──▶ Rejected

DESIGN PRINCIPLES:
- No skipping states, no backward transitions, no same-status writes
- Each transition belongs to exactly one role
- Each transition names the fields it must be given
- All transitions logged in statusHistory
"""

from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple
import logging

from app.core.exceptions import InvalidTransitionError, PermissionDeniedError
from app.models.user import UserRole
from app.utils.firestore_helpers import utcnow

logger = logging.getLogger(__name__)


class ReportStatus(str, Enum):
    PENDING = "Pending"            # Submitted, awaiting triage
    ACCEPTED = "Accepted"          # Planned by an admin, ready for a worker
    IN_PROGRESS = "In Progress"    # A worker started the job
    RESOLVED = "Resolved"          # Terminal, fixed with proof
    REJECTED = "Rejected"          # Terminal, declined with a reason


class TransitionRule(NamedTuple):
    role: UserRole
    required_fields: Tuple[str, ...]
    action: str


class StatusWorkflowEngine:
    """
    Strict state machine for report status transitions.

    Rules:
    - Only the transitions in ALLOWED_TRANSITIONS exist
    - The acting role must match the rule
    - Required fields must be present and non-blank
    """

    ALLOWED_TRANSITIONS: Dict[Tuple[ReportStatus, ReportStatus], TransitionRule] = {
        (ReportStatus.PENDING, ReportStatus.ACCEPTED): TransitionRule(UserRole.ADMIN, ("planNotes",), "accept"),
        (ReportStatus.PENDING, ReportStatus.REJECTED): TransitionRule(UserRole.ADMIN, ("rejectionReason",), "reject"),
        (ReportStatus.ACCEPTED, ReportStatus.IN_PROGRESS): TransitionRule(UserRole.WORKER, (), "start"),
        (ReportStatus.IN_PROGRESS, ReportStatus.RESOLVED): TransitionRule(
            UserRole.WORKER, ("resolutionNotes", "resolutionImageUrl"), "resolve"
        ),
    }

    TERMINAL_STATUSES = (ReportStatus.RESOLVED, ReportStatus.REJECTED)

    @classmethod
    def _coerce(cls, status: str) -> Optional[ReportStatus]:
        try:
            return ReportStatus(status)
        except ValueError:
            return None

    @classmethod
    def is_valid_transition(cls, from_status: str, to_status: str) -> bool:
        from_enum = cls._coerce(from_status)
        to_enum = cls._coerce(to_status)
        if from_enum is None or to_enum is None:
            return False
        return (from_enum, to_enum) in cls.ALLOWED_TRANSITIONS

    @classmethod
    def get_rule(cls, from_status: str, to_status: str) -> Optional[TransitionRule]:
        from_enum = cls._coerce(from_status)
        to_enum = cls._coerce(to_status)
        if from_enum is None or to_enum is None:
            return None
        return cls.ALLOWED_TRANSITIONS.get((from_enum, to_enum))

    @classmethod
    def get_allowed_transitions(cls, current_status: str, role: Optional[UserRole] = None) -> List[str]:
        """
        Next statuses reachable from current_status, optionally limited to what
        the given role may perform.
        """
        current_enum = cls._coerce(current_status)
        if current_enum is None:
            return []
        return [
            to_status.value
            for (from_status, to_status), rule in cls.ALLOWED_TRANSITIONS.items()
            if from_status == current_enum and (role is None or rule.role == role)
        ]

    @classmethod
    def create_status_history_entry(
        cls,
        from_status: str,
        to_status: str,
        changed_by: str,
        role: UserRole,
        note: Optional[str] = None
    ) -> Dict:
        return {
            "from": from_status,
            "to": to_status,
            "changedBy": changed_by,
            "role": role.value,
            "timestamp": utcnow(),
            "note": note or ""
        }

    @classmethod
    def validate_and_transition(
        cls,
        current_status: str,
        new_status: str,
        changed_by: str,
        role: UserRole,
        fields: Optional[Dict] = None,
        note: Optional[str] = None
    ) -> Dict:
        """
        Validate a transition and build its history entry.

        Args:
            current_status: Status stored on the report
            new_status: Desired status
            changed_by: uid of the acting user
            role: Role of the acting user
            fields: Extra document fields written with the transition
            note: Optional free text for the history entry

        Returns:
            Dict with from/to status and the history entry

        Raises:
            InvalidTransitionError: Transition not in the table, or a required field is blank
            PermissionDeniedError: Transition belongs to another role
        """
        rule = cls.get_rule(current_status, new_status)
        if rule is None:
            allowed = cls.get_allowed_transitions(current_status)
            raise InvalidTransitionError(
                f"Invalid status transition: {current_status} → {new_status}. "
                f"Allowed transitions from {current_status}: {allowed}"
            )

        if role != rule.role:
            raise PermissionDeniedError(
                f"Only a {rule.role.value} can move a report from {current_status} to {new_status}"
            )

        fields = fields or {}
        missing = [
            name for name in rule.required_fields
            if not isinstance(fields.get(name), str) or not fields[name].strip()
        ]
        if missing:
            raise InvalidTransitionError(
                f"Moving a report to {new_status} requires: {', '.join(missing)}"
            )

        history_entry = cls.create_status_history_entry(
            from_status=current_status,
            to_status=new_status,
            changed_by=changed_by,
            role=role,
            note=note
        )

        return {
            "valid": True,
            "from_status": current_status,
            "to_status": new_status,
            "history_entry": history_entry
        }
