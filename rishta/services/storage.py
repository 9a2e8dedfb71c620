"""
Local disk storage for registration uploads (profile photos, payment screenshots).
Files are written under the uploads directory and served by rishta.main at /uploads/...
"""
import logging
import uuid
from pathlib import Path
from typing import List, Optional

from fastapi import UploadFile

from rishta.core.config import settings
from rishta.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}

IMAGES_SUBDIR = "images"
PAYMENTS_SUBDIR = "payments"


def get_uploads_dir() -> Path:
    """Return the uploads directory, creating it if needed."""
    # Prefer settings so deployment can set a persistent volume path
    if settings.UPLOADS_DIR:
        d = Path(settings.UPLOADS_DIR)
    else:
        d = Path(__file__).resolve().parent.parent.parent / "uploads"
    d.mkdir(parents=True, exist_ok=True)
    return d


def public_url(base_url: str, subdir: str, filename: str) -> str:
    base = settings.PUBLIC_API_URL.rstrip("/") or base_url.rstrip("/")
    return f"{base}/uploads/{subdir}/{filename}"


async def read_image(file: UploadFile) -> bytes:
    """Read one upload and check its size and content type; nothing is written."""
    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise ValidationError(
            f"File '{file.filename}' exceeds maximum size of {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB"
        )

    content_type = (file.content_type or "").strip().lower()
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError("Allowed image types: jpeg, png, gif, webp")
    return content


def write_image(content: bytes, filename: Optional[str], subdir: str, base_url: str) -> str:
    """Store already-validated bytes; returns the public URL."""
    # Safe filename: keep extension, unique prefix
    ext = Path(filename or "file").suffix.lower() or ".jpg"
    safe_name = f"{uuid.uuid4().hex[:12]}{ext}"
    target_dir = get_uploads_dir() / subdir
    target_dir.mkdir(parents=True, exist_ok=True)
    target_path = target_dir / safe_name

    try:
        target_path.write_bytes(content)
    except OSError:
        logger.exception("Failed to save upload %s", target_path)
        raise

    return public_url(base_url, subdir, safe_name)


async def save_registration_assets(
    images: List[UploadFile],
    payment_screenshot: Optional[UploadFile],
    base_url: str,
) -> tuple[List[str], Optional[str]]:
    """
    Store profile photos (bounded by MAX_PROFILE_IMAGES) and the payment
    screenshot. Every file is validated before the first one is written, and
    a failed write removes whatever was already stored.
    """
    images = [f for f in images or [] if f is not None and f.filename]
    if len(images) > settings.MAX_PROFILE_IMAGES:
        raise ValidationError(f"At most {settings.MAX_PROFILE_IMAGES} images are allowed")
    if payment_screenshot is not None and not payment_screenshot.filename:
        payment_screenshot = None

    image_contents = [(f.filename, await read_image(f)) for f in images]
    screenshot_content = await read_image(payment_screenshot) if payment_screenshot is not None else None

    saved: List[str] = []
    try:
        for filename, content in image_contents:
            saved.append(write_image(content, filename, IMAGES_SUBDIR, base_url))
        screenshot_url = None
        if screenshot_content is not None:
            screenshot_url = write_image(screenshot_content, payment_screenshot.filename, PAYMENTS_SUBDIR, base_url)
    except OSError:
        delete_assets(saved)
        raise

    return saved, screenshot_url


def delete_asset(url: Optional[str]) -> None:
    """Remove a previously stored upload given its public URL; missing files are ignored."""
    if not url or "/uploads/" not in url:
        return
    relative = url.split("/uploads/", 1)[1]
    uploads_dir = get_uploads_dir().resolve()
    path = (uploads_dir / relative).resolve()
    if uploads_dir not in path.parents:
        return
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def delete_assets(urls) -> None:
    """Best-effort removal of several stored uploads, e.g. after a failed registration."""
    for url in urls:
        try:
            delete_asset(url)
        except OSError as e:
            logger.warning("Could not remove upload %s: %s", url, e)
