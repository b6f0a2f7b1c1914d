"""Map routes - report markers for the citizen map.

Markers come from a short-lived cache of all reports with coordinates; the
bounding box and status filters are applied per request.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from app.models.user import UserResponse
from app.services import map_service
from app.utils.security import get_current_user


class MapMarker(BaseModel):
    id: str
    title: str
    category: str
    status: str
    latitude: float
    longitude: float
    image_url: Optional[str] = None
    pin_color: str


class MarkerCluster(BaseModel):
    latitude: float
    longitude: float
    count: int
    report_ids: List[str]
    pin_color: str


class MapRegion(BaseModel):
    latitude: float
    longitude: float
    latitude_delta: float
    longitude_delta: float


router = APIRouter(prefix="/map", tags=["Map"])


def _bounds(min_lat, max_lat, min_lng, max_lng):
    try:
        return map_service.validate_bounds(min_lat, max_lat, min_lng, max_lng)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/region", response_model=MapRegion)
async def default_region():
    """Initial region for the map view."""
    return map_service.get_default_region()


@router.get("/markers", response_model=List[MapMarker])
async def markers(
    min_lat: Optional[float] = Query(None, ge=-90, le=90),
    max_lat: Optional[float] = Query(None, ge=-90, le=90),
    min_lng: Optional[float] = Query(None, ge=-180, le=180),
    max_lng: Optional[float] = Query(None, ge=-180, le=180),
    status_filter: Optional[str] = Query(None, alias="status"),
    user: UserResponse = Depends(get_current_user)
):
    """
    Markers inside the given bounding box (all four bounds, or none).
    Resolved reports get a green pin, everything else red.
    """
    bounds = _bounds(min_lat, max_lat, min_lng, max_lng)
    return map_service.get_markers(bounds=bounds, status=status_filter)


@router.get("/clusters", response_model=List[MarkerCluster])
async def clusters(
    cell_size: float = Query(0.01, gt=0, le=10, description="Grid cell size in degrees"),
    min_lat: Optional[float] = Query(None, ge=-90, le=90),
    max_lat: Optional[float] = Query(None, ge=-90, le=90),
    min_lng: Optional[float] = Query(None, ge=-180, le=180),
    max_lng: Optional[float] = Query(None, ge=-180, le=180),
    status_filter: Optional[str] = Query(None, alias="status"),
    user: UserResponse = Depends(get_current_user)
):
    """Markers merged per grid cell, for zoomed-out views."""
    bounds = _bounds(min_lat, max_lat, min_lng, max_lng)
    found = map_service.get_markers(bounds=bounds, status=status_filter)
    return map_service.cluster_markers(found, cell_size)
