"""
Map service - report markers for the citizen map.

- Builds one marker per report that has coordinates
- Keeps the full marker set in a short-lived in-process cache
- Filters by bounding box and status, optionally merges markers into grid clusters

Writes to reports (create, status change) invalidate the cache.
"""

import math
import threading
import time
from typing import Any, Dict, List, Optional, Tuple
import logging

from app.config.firebase import get_db
from app.core.settings import settings
from app.utils.firestore_helpers import iter_documents

logger = logging.getLogger(__name__)

RESOLVED_STATUS = "Resolved"

_cache_lock = threading.Lock()
# generation increases on every invalidation; a rebuild that started in an
# older generation is not stored
_marker_cache: Dict[str, Any] = {"markers": None, "expires_at": 0.0, "generation": 0}


def invalidate_marker_cache() -> None:
    with _cache_lock:
        _marker_cache["markers"] = None
        _marker_cache["expires_at"] = 0.0
        _marker_cache["generation"] += 1


def pin_color_for_status(status: Optional[str]) -> str:
    return "green" if status == RESOLVED_STATUS else "red"


def _build_markers() -> List[Dict[str, Any]]:
    db = get_db()
    markers = []
    for data in iter_documents(db.collection("reports")):
        lat = data.get("latitude")
        lng = data.get("longitude")
        # Only reports that actually have coordinates go on the map
        if lat is None or lng is None:
            continue
        markers.append({
            "id": data["id"],
            "title": data.get("title", ""),
            "category": data.get("category") or "General",
            "status": data.get("status", "Pending"),
            "latitude": float(lat),
            "longitude": float(lng),
            "image_url": data.get("imageUrl"),
            "pin_color": pin_color_for_status(data.get("status")),
        })
    return markers


def get_all_markers() -> List[Dict[str, Any]]:
    """Full marker set, served from cache while fresh."""
    now = time.monotonic()
    with _cache_lock:
        cached = _marker_cache["markers"]
        if cached is not None and now < _marker_cache["expires_at"]:
            return list(cached)
        generation = _marker_cache["generation"]

    markers = _build_markers()
    with _cache_lock:
        if _marker_cache["generation"] == generation:
            _marker_cache["markers"] = markers
            _marker_cache["expires_at"] = now + settings.MAP_CACHE_TTL_SECONDS
            logger.debug(f"Marker cache rebuilt with {len(markers)} markers")
        else:
            logger.debug("Reports changed during marker rebuild; result not cached")
    return list(markers)


def validate_bounds(
    min_lat: Optional[float],
    max_lat: Optional[float],
    min_lng: Optional[float],
    max_lng: Optional[float]
) -> Optional[Tuple[float, float, float, float]]:
    """
    Returns the bounding box tuple, or None when no bounds were given.

    Raises:
        ValueError: Only some bounds given, or min greater than max.
        Boxes crossing the antimeridian are not supported.
    """
    bounds = (min_lat, max_lat, min_lng, max_lng)
    if all(b is None for b in bounds):
        return None
    if any(b is None for b in bounds):
        raise ValueError("Bounding box needs all of min_lat, max_lat, min_lng and max_lng")
    if min_lat > max_lat or min_lng > max_lng:
        raise ValueError("Bounding box minimums must not exceed maximums")
    return bounds


def get_markers(
    bounds: Optional[Tuple[float, float, float, float]] = None,
    status: Optional[str] = None
) -> List[Dict[str, Any]]:
    markers = get_all_markers()
    if status:
        markers = [m for m in markers if m["status"] == status]
    if bounds is not None:
        min_lat, max_lat, min_lng, max_lng = bounds
        markers = [
            m for m in markers
            if min_lat <= m["latitude"] <= max_lat and min_lng <= m["longitude"] <= max_lng
        ]
    return markers


def cluster_markers(markers: List[Dict[str, Any]], cell_size: float) -> List[Dict[str, Any]]:
    """
    Merge markers that fall into the same cell of a lat/lng grid.

    Each cluster sits at the centroid of its markers. A cluster is green only
    when every report in it is resolved.
    """
    if cell_size <= 0:
        raise ValueError("cell_size must be positive")

    cells: Dict[Tuple[int, int], List[Dict[str, Any]]] = {}
    for marker in markers:
        key = (math.floor(marker["latitude"] / cell_size), math.floor(marker["longitude"] / cell_size))
        cells.setdefault(key, []).append(marker)

    clusters = []
    for members in cells.values():
        count = len(members)
        clusters.append({
            "latitude": sum(m["latitude"] for m in members) / count,
            "longitude": sum(m["longitude"] for m in members) / count,
            "count": count,
            "report_ids": [m["id"] for m in members],
            "pin_color": "green" if all(m["status"] == RESOLVED_STATUS for m in members) else "red",
        })

    clusters.sort(key=lambda c: c["count"], reverse=True)
    return clusters


def get_default_region() -> Dict[str, float]:
    return {
        "latitude": settings.MAP_DEFAULT_LATITUDE,
        "longitude": settings.MAP_DEFAULT_LONGITUDE,
        "latitude_delta": settings.MAP_DEFAULT_DELTA,
        "longitude_delta": settings.MAP_DEFAULT_DELTA,
    }
