"""
Upload endpoints - report photos and resolution proof photos.
"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from app.models.user import UserResponse
from app.services.media_service import upload_image
from app.utils.security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/uploads", tags=["Uploads"])


@router.post("/images", status_code=status.HTTP_201_CREATED)
async def upload_report_image(
    file: UploadFile = File(...),
    user: UserResponse = Depends(get_current_user)
):
    """
    Host an image and return its URL for use as image_url or resolution_image_url.

    Raises:
        400: Not an image, empty, or too large
        502: Image host failed
    """
    content = await file.read()
    try:
        url = upload_image(file.filename, content, file.content_type)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    logger.info(f"Image uploaded by {user.id}")
    return {"success": True, "url": url}
