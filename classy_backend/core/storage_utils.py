# classy_backend/core/storage_utils.py
import uuid
from functools import lru_cache

from fastapi import HTTPException, status

from classy_backend.core.config import get_settings
from classy_backend.core.supabase_client import supabase_admin

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB per image

ALLOWED_IMAGE_CONTENT_TYPES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


def validate_image(content_type: str | None, file_bytes: bytes) -> str:
    """
    Check an uploaded image and return the file extension to store it under.

    Raises:
        HTTPException(400): unsupported or missing content type.
        HTTPException(413): file larger than MAX_IMAGE_BYTES.
    """
    if content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unsupported image type. Allowed: JPEG, PNG, WEBP.",
        )

    if len(file_bytes) > MAX_IMAGE_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Image too large (max 5MB).",
        )

    return ALLOWED_IMAGE_CONTENT_TYPES[content_type]


def generate_filename(ext: str) -> str:
    """
    Generate a random filename using UUID4.

    Args:
        ext: File extension without dot (e.g. "png", "jpg")

    Returns:
        A filename like "<uuid4>.png"
    """
    return f"{uuid.uuid4()}.{ext}"


class ImageHost:
    """
    Supabase Storage wrapper: given an image, returns its public URL.

    The Supabase client is created lazily so the API can boot without a
    service role key; only uploads need it.
    """

    def __init__(self, bucket: str):
        self.bucket = bucket

    def upload(self, folder: str, content_type: str | None, file_bytes: bytes) -> str:
        """
        Validate and upload an image under `<folder>/<uuid>.<ext>`.

        Raises:
            HTTPException(400/413): invalid image.
            Any exception raised by Supabase client if upload fails.
        """
        ext = validate_image(content_type, file_bytes)
        path = f"{folder}/{generate_filename(ext)}"

        storage = supabase_admin().storage.from_(self.bucket)
        storage.upload(path, file_bytes, {"content-type": content_type, "upsert": "true"})
        return storage.get_public_url(path)

    def delete_public_url(self, url: str) -> None:
        """
        Delete a file by its public URL.
        No-op if the URL does not belong to this bucket.
        """
        marker = f"/storage/v1/object/public/{self.bucket}/"
        idx = url.find(marker)
        if idx == -1:
            return
        supabase_admin().storage.from_(self.bucket).remove([url[idx + len(marker):]])


@lru_cache
def get_image_host() -> ImageHost:
    """FastAPI dependency returning the shared image host."""
    return ImageHost(get_settings().STORAGE_BUCKET)
