"""
Firestore helpers shared by the services.

NOTE: The positional ``where(field, op, value)`` form is used on purpose; it
works with both firebase_admin and the in-memory mock client. The deprecation
warning it raises on the real client does not affect functionality.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


def where_filter(query, field_path: str, op_string: str, value):
    """
    Usage:
        query = where_filter(collection, "userId", "==", uid)
        query = where_filter(query, "status", "==", "Pending")
    """
    return query.where(field_path, op_string, value)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse the timestamp shapes found in stored documents to an aware UTC datetime.

    Handles datetimes (naive ones are assumed UTC), ISO strings with or
    without ``Z`` and Firestore timestamp objects.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    if hasattr(value, "timestamp"):
        return datetime.fromtimestamp(value.timestamp(), tz=timezone.utc)
    return None


def snapshot_to_dict(doc) -> Dict[str, Any]:
    """Document snapshot -> plain dict with its id under ``id``."""
    data = doc.to_dict() or {}
    data["id"] = doc.id
    return data


def newest_first(documents):
    """Sort dicts by ``createdAt`` descending; missing timestamps sink to the end."""
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(
        documents,
        key=lambda d: parse_timestamp(d.get("createdAt")) or epoch,
        reverse=True,
    )


def iter_documents(query):
    """Stream a query as dicts, skipping snapshots without data."""
    for doc in query.stream():
        if doc.exists:
            yield snapshot_to_dict(doc)
