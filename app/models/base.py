"""
Envelope shared by action endpoints (accept, reject, start, resolve).
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from app.utils.firestore_helpers import utcnow


class BaseResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    timestamp: datetime = Field(default_factory=utcnow)
