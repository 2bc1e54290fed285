"""
File intake for company logos and resumes.

Uploads are validated, written to the local upload directory and, when
Cloudinary is configured, pushed to remote storage. A failed remote upload is
not an error for the caller: the local ``/uploads/<file>`` path is kept and a
telemetry event is emitted so the fallback can be monitored.
"""

import logging
import os
import random
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

import cloudinary
import cloudinary.uploader
from fastapi import Request, UploadFile

from jobportal.core.config import Settings
from jobportal.core.errors import ValidationError
from jobportal.core.telemetry import report_event

logger = logging.getLogger("jobportal.uploads")

MB = 1024 * 1024
UPLOADS_URL_PREFIX = "/uploads/"


@dataclass(frozen=True)
class UploadConstraints:
    """Per-endpoint upload rules."""

    max_bytes: int
    content_types: Optional[tuple[str, ...]]  # None accepts any type
    folder: str
    resource_type: str
    type_error: str = "File type not allowed"


# Logos accept any content type.
LOGO_UPLOAD = UploadConstraints(
    max_bytes=5 * MB,
    content_types=None,
    folder="company-logos",
    resource_type="auto",
)

# One limit for every resume path (authenticated apply, profile update,
# anonymous apply).
RESUME_UPLOAD = UploadConstraints(
    max_bytes=10 * MB,
    content_types=("application/pdf",),
    folder="user-resumes",
    resource_type="raw",
    type_error="Only PDF files allowed!",
)


@dataclass
class StoredFile:
    filename: str
    local_path: Optional[Path]
    reference: str  # remote URL or /uploads/<filename>
    remote: bool = False


class RemoteStorage(Protocol):
    def upload(self, path: Path, folder: str, resource_type: str) -> str:
        ...


class CloudinaryStorage:
    """Remote object storage through the Cloudinary SDK."""

    def __init__(self, cloud_name: str, api_key: str, api_secret: str) -> None:
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )

    def upload(self, path: Path, folder: str, resource_type: str) -> str:
        response = cloudinary.uploader.upload(
            str(path),
            folder=folder,
            resource_type=resource_type,
        )
        return response["secure_url"]


def build_remote_storage(settings: Settings) -> Optional[RemoteStorage]:
    if not settings.cloudinary_configured:
        logger.info("Cloudinary not configured - uploads stay on local disk")
        return None
    return CloudinaryStorage(
        settings.CLOUDINARY_CLOUD_NAME,
        settings.CLOUDINARY_API_KEY,
        settings.CLOUDINARY_API_SECRET,
    )


def build_filename(field: str, original_name: Optional[str]) -> str:
    """<field>-<epoch ms>-<random><ext>, e.g. resume-1718000000000-482913.pdf"""
    ext = os.path.splitext(original_name or "")[1].lower()
    unique = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"{field}-{unique}{ext}"


def public_url(reference: Optional[str], backend_url: str) -> Optional[str]:
    """Turn a stored reference into a link the browser can open."""
    if not reference:
        return None
    if reference.startswith(("http://", "https://")):
        return reference
    base = backend_url.rstrip("/")
    if reference.startswith(UPLOADS_URL_PREFIX):
        return f"{base}{reference}"
    return f"{base}{UPLOADS_URL_PREFIX}{reference}"


class FileIntake:
    """Validates and stores multipart uploads."""

    def __init__(self, upload_dir: Path, remote: Optional[RemoteStorage] = None) -> None:
        self.upload_dir = Path(upload_dir)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.remote = remote

    def validate(self, upload: UploadFile, content: bytes, constraints: UploadConstraints) -> None:
        if constraints.content_types is not None and upload.content_type not in constraints.content_types:
            raise ValidationError(constraints.type_error)

        if len(content) > constraints.max_bytes:
            raise ValidationError(
                f"File too large. Maximum size is {constraints.max_bytes // MB}MB"
            )

    async def accept(self, upload: UploadFile, constraints: UploadConstraints, field: str) -> StoredFile:
        """
        Validate and store one uploaded file.

        Raises:
            ValidationError: wrong content type or file too large; nothing is
                written in that case
        """
        content = await upload.read()
        self.validate(upload, content, constraints)

        filename = build_filename(field, upload.filename)
        local_path = self.upload_dir / filename
        local_path.write_bytes(content)
        local_reference = f"{UPLOADS_URL_PREFIX}{filename}"

        if self.remote is None:
            return StoredFile(filename=filename, local_path=local_path, reference=local_reference)

        try:
            url = self.remote.upload(local_path, constraints.folder, constraints.resource_type)
        except Exception as e:
            logger.warning("⚠️ Remote upload failed for %s, keeping local copy: %s", filename, e)
            report_event(
                "upload.remote_fallback",
                filename=filename,
                folder=constraints.folder,
                error=str(e),
            )
            return StoredFile(filename=filename, local_path=local_path, reference=local_reference)

        try:
            local_path.unlink()
        except OSError as e:
            logger.error("Error deleting temp file %s: %s", local_path, e)

        return StoredFile(filename=filename, local_path=None, reference=url, remote=True)


def get_file_intake(request: Request) -> FileIntake:
    return request.app.state.file_intake
