"""
Media service - photo uploads to Cloudinary.

Uses unsigned uploads with an upload preset, like the mobile client did,
so no Cloudinary secret is held by the API.
"""

from typing import Optional
import logging

import requests

from app.core.exceptions import MediaUploadError
from app.core.settings import settings

logger = logging.getLogger(__name__)

UPLOAD_URL_TEMPLATE = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"


def validate_image(filename: Optional[str], content: bytes, content_type: Optional[str]) -> None:
    """
    Raises:
        ValueError: Not an image, empty, or larger than MAX_UPLOAD_BYTES
    """
    if not content_type or not content_type.startswith("image/"):
        raise ValueError(f"Only image uploads are accepted (got {content_type or 'unknown type'})")
    if not content:
        raise ValueError("Uploaded file is empty")
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise ValueError(f"Image exceeds the {settings.MAX_UPLOAD_BYTES} byte limit")


def upload_image(filename: Optional[str], content: bytes, content_type: Optional[str]) -> str:
    """
    Upload an image and return its https URL.

    Raises:
        ValueError: Invalid file (see validate_image)
        MediaUploadError: Cloudinary not configured, unreachable or rejecting the file
    """
    validate_image(filename, content, content_type)

    if not settings.CLOUDINARY_CLOUD_NAME:
        raise MediaUploadError("CLOUDINARY_CLOUD_NAME is not configured")

    url = UPLOAD_URL_TEMPLATE.format(cloud_name=settings.CLOUDINARY_CLOUD_NAME)
    try:
        resp = requests.post(
            url,
            files={"file": (filename or "upload", content, content_type)},
            data={"upload_preset": settings.CLOUDINARY_UPLOAD_PRESET},
            timeout=settings.CLOUDINARY_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        logger.error(f"Cloudinary upload failed: {e}")
        raise MediaUploadError("Image host unreachable") from e

    if resp.status_code != 200:
        try:
            detail = resp.json().get("error", {}).get("message", resp.text)
        except ValueError:
            detail = resp.text
        logger.warning(f"Cloudinary rejected upload ({resp.status_code}): {detail}")
        raise MediaUploadError(f"Image host rejected the upload: {detail}")

    secure_url = resp.json().get("secure_url")
    if not secure_url:
        raise MediaUploadError("Image host response had no secure_url")

    logger.info(f"✅ Image uploaded: {secure_url}")
    return secure_url
