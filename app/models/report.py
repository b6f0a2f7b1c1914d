"""
Pydantic models for citizen reports.
These models handle validation for report submission, workflow actions and responses.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List

from app.models.base import BaseResponse
from app.services.status_workflow import ReportStatus

URL_PATTERN = r"^https?://\S+$"


class ReportCreate(BaseModel):
    """
    Model for creating a new report (incoming POST request).
    Photo and coordinates are mandatory; the photo is uploaded first via /uploads/images.
    """
    title: str = Field(..., min_length=1, max_length=120, description="Short summary of the problem")
    description: str = Field(..., min_length=1, max_length=2000, description="What the citizen observed")
    category: str = Field("General", min_length=1, max_length=60)
    location: Optional[str] = Field(None, max_length=300, description="Address text; reverse geocoded when omitted")
    image_url: str = Field(..., max_length=1000, pattern=URL_PATTERN, description="Hosted photo URL")
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Broken streetlight",
                "description": "Streetlight has been out for a week near the chapel.",
                "category": "Infrastructure",
                "location": "Rizal St, Poblacion, Marilao",
                "image_url": "https://res.cloudinary.com/demo/image/upload/v1/light.jpg",
                "latitude": 14.7566,
                "longitude": 120.9466,
            }
        }
        extra = "ignore"
        # Blank title or description fails min_length after stripping
        str_strip_whitespace = True


class StatusHistoryEntry(BaseModel):
    from_status: str
    to_status: str
    changed_by: str
    role: Optional[str] = None
    timestamp: Optional[datetime] = None
    note: Optional[str] = None


class ReportResponse(BaseModel):
    """
    Model for report responses (what API returns).
    allowed_transitions depends on who is looking at the report.
    """
    id: str = Field(..., description="Firestore document ID")
    user_id: str
    title: str
    description: str
    category: str = "General"
    location: Optional[str] = None
    image_url: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    status: str = ReportStatus.PENDING.value
    version: int = 1
    plan_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    assigned_worker_id: Optional[str] = None
    worker_id: Optional[str] = None
    resolution_notes: Optional[str] = None
    resolution_image_url: Optional[str] = None
    status_history: List[StatusHistoryEntry] = Field(default_factory=list)
    allowed_transitions: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReportStats(BaseModel):
    pending: int = 0
    accepted: int = 0
    in_progress: int = 0
    resolved: int = 0
    rejected: int = 0
    total: int = 0


class ReportListResponse(BaseModel):
    count: int
    reports: List[ReportResponse]


class ReportActionResponse(BaseResponse):
    report: ReportResponse


# Workflow action requests. expected_version is the optimistic concurrency token.

class AcceptReportRequest(BaseModel):
    plan_notes: str = Field(..., min_length=1, max_length=1000, description="Instructions and ETA for the worker")
    assigned_worker_id: Optional[str] = Field(None, description="Worker uid; unassigned jobs are open to all workers")
    expected_version: Optional[int] = Field(None, ge=1)


class RejectReportRequest(BaseModel):
    rejection_reason: str = Field(..., min_length=1, max_length=1000)
    expected_version: Optional[int] = Field(None, ge=1)


class StartJobRequest(BaseModel):
    expected_version: Optional[int] = Field(None, ge=1)


class ResolveJobRequest(BaseModel):
    resolution_notes: str = Field(..., min_length=1, max_length=1000)
    resolution_image_url: str = Field(..., max_length=1000, pattern=URL_PATTERN, description="Proof photo URL")
    expected_version: Optional[int] = Field(None, ge=1)
