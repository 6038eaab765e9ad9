# Overview: Service-layer operations for shop photos; uploads to Cloudinary and returns the public URL.

"""
Shop Image Upload

The uploader is an external collaborator. A failed upload never aborts the
shop mutation: upload_shop_image() logs the failure and returns None, and
the shop is saved without a (new) image.

The uploader instance lives in app.extensions["image_uploader"] so tests can
swap in a fake. When no uploader is registered one is built from the
CLOUDINARY_* settings on first use.
"""

from __future__ import annotations

import io

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
from flask import current_app


class UploadError(Exception):
    """Raised when the image store rejects or cannot take an upload."""
    pass


class CloudinaryUploader:
    """Uploads through the Cloudinary SDK into one folder."""

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        *,
        folder: str = "shop-mapper",
        timeout: float = 30.0,
    ):
        self.cloud_name = cloud_name
        self.folder = folder
        self.timeout = timeout
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )

    @classmethod
    def from_config(cls, config) -> "CloudinaryUploader | None":
        cloud_name = config.get("CLOUDINARY_CLOUD_NAME")
        api_key = config.get("CLOUDINARY_API_KEY")
        api_secret = config.get("CLOUDINARY_API_SECRET")
        if not (cloud_name and api_key and api_secret):
            return None
        return cls(
            cloud_name,
            api_key,
            api_secret,
            folder=config.get("UPLOAD_FOLDER", "shop-mapper"),
            timeout=float(config.get("UPLOAD_TIMEOUT_SECONDS", 30)),
        )

    def upload(self, data: bytes, filename: str, content_type: str | None = None) -> str:
        """Upload image bytes and return the secure URL."""
        try:
            result = cloudinary.uploader.upload(
                io.BytesIO(data),
                folder=self.folder,
                resource_type="image",
                filename=filename or "upload",
                timeout=self.timeout,
            )
        except cloudinary.exceptions.Error as exc:
            raise UploadError(f"Cloudinary upload failed: {exc}") from exc

        secure_url = result.get("secure_url") if isinstance(result, dict) else None
        if not secure_url:
            raise UploadError("Cloudinary response missing secure_url")
        return secure_url


def get_uploader():
    uploader = current_app.extensions.get("image_uploader")
    if uploader is None:
        uploader = CloudinaryUploader.from_config(current_app.config)
        if uploader is not None:
            current_app.extensions["image_uploader"] = uploader
    return uploader


def upload_shop_image(file_storage) -> str | None:
    """
    Upload a submitted image file.

    Returns the public URL, or None when no file was sent or the upload
    failed (failure is logged, not raised).
    """
    if file_storage is None or not getattr(file_storage, "filename", None):
        return None

    data = file_storage.read()
    if not data:
        return None

    uploader = get_uploader()
    if uploader is None:
        current_app.logger.warning("Image upload skipped: Cloudinary is not configured")
        return None

    try:
        return uploader.upload(data, file_storage.filename, file_storage.mimetype)
    except UploadError:
        current_app.logger.exception("Cloudinary upload failed")
        return None
