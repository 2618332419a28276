"""Blob storage for meeting reports and officer identity documents.

Two buckets, each addressed by object key ``<chapter_id>/<name>``.
Read access goes through time-limited signed URLs; the signature is a
JWT naming the bucket and key, verified by the file download endpoint.
"""

import logging
import os
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, Optional, Tuple
from urllib.parse import quote

from jose import JWTError, jwt
from slugify import slugify

from skportal.core.config import get_settings
from skportal.core.errors import NotFoundError, UpstreamError, ValidationError

logger = logging.getLogger(__name__)

MEETING_REPORTS_BUCKET = "meeting-reports"
ID_DOCUMENTS_BUCKET = "officer-id-documents"
BUCKETS = (MEETING_REPORTS_BUCKET, ID_DOCUMENTS_BUCKET)

# content type -> (file extension, leading magic bytes)
FILE_SIGNATURES: Dict[str, Tuple[str, bytes]] = {
    "application/pdf": ("pdf", b"%PDF"),
    "image/jpeg": ("jpg", b"\xff\xd8\xff"),
    "image/png": ("png", b"\x89PNG\r\n\x1a\n"),
}

REPORT_CONTENT_TYPES = ("application/pdf",)
ID_DOCUMENT_CONTENT_TYPES = ("image/jpeg", "image/png", "application/pdf")

_SIGNED_URL_TYPE = "file"


@dataclass
class StoredObject:
    """Reference to an object in a bucket."""

    bucket: str
    key: str
    size: int
    content_type: Optional[str] = None


def validate_upload(
    data: bytes,
    content_type: Optional[str],
    allowed_types: Tuple[str, ...],
    max_bytes: int,
) -> str:
    """
    Check an uploaded file's type and size.

    Args:
        data: File content
        content_type: Declared MIME type
        allowed_types: Accepted MIME types
        max_bytes: Maximum size in bytes

    Returns:
        File extension for the accepted type

    Raises:
        ValidationError: If the file is empty, too large or of the wrong type
    """
    if content_type not in allowed_types:
        raise ValidationError(
            f"File type {content_type or 'unknown'} is not allowed; expected one of "
            f"{', '.join(allowed_types)}",
            field="file",
        )
    if not data:
        raise ValidationError("File is empty", field="file")
    if len(data) > max_bytes:
        raise ValidationError(
            f"File is {len(data)} bytes; the maximum is {max_bytes // (1024 * 1024)}MB",
            field="file",
        )

    extension, magic = FILE_SIGNATURES[content_type]
    if not data.startswith(magic):
        raise ValidationError(
            f"File content does not match declared type {content_type}",
            field="file",
        )
    return extension


def build_object_key(chapter_id, extension: str, label: Optional[str] = None) -> str:
    """Object key under the chapter's prefix, unique per upload."""
    stamp = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"
    name = f"{stamp}-{slugify(label) or 'file'}" if label else stamp
    return f"{chapter_id}/{name}.{extension}"


def chapter_owns_key(chapter_id, key: str) -> bool:
    return key.startswith(f"{chapter_id}/")


class BlobStore(ABC):
    """Interface of the blob store collaborator."""

    @abstractmethod
    def put(self, bucket: str, key: str, data: bytes, content_type: Optional[str] = None) -> StoredObject:
        """Store an object, replacing any object with the same key."""
        pass

    @abstractmethod
    def get(self, bucket: str, key: str) -> bytes:
        """Read an object's content."""
        pass

    @abstractmethod
    def exists(self, bucket: str, key: str) -> bool:
        pass

    @abstractmethod
    def delete(self, bucket: str, key: str) -> None:
        """Delete an object; deleting a missing object is not an error."""
        pass

    @abstractmethod
    def path_for(self, bucket: str, key: str) -> Path:
        """Local path of an object, for streaming downloads."""
        pass

    def signed_url(self, bucket: str, key: str, expires_in: Optional[int] = None) -> str:
        """
        Issue a time-limited read URL for an object.

        Raises:
            NotFoundError: If the object does not exist
        """
        if not self.exists(bucket, key):
            raise NotFoundError(f"File {key} not found", bucket=bucket)

        settings = get_settings()
        seconds = expires_in or settings.signed_url_expire_seconds
        token = jwt.encode(
            {
                "bucket": bucket,
                "key": key,
                "type": _SIGNED_URL_TYPE,
                "exp": datetime.utcnow() + timedelta(seconds=seconds),
            },
            settings.secret_key,
            algorithm=settings.algorithm,
        )
        return f"/api/files/{bucket}/{quote(key)}?token={token}"


def verify_signed_token(token: str, bucket: str, key: str) -> bool:
    """Check that a signed URL token is valid, unexpired and names this object."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return False
    return (
        payload.get("type") == _SIGNED_URL_TYPE
        and payload.get("bucket") == bucket
        and payload.get("key") == key
    )


class LocalBlobStore(BlobStore):
    """Blob store backed by a local directory, one subdirectory per bucket."""

    def __init__(self, root: str):
        self.root = Path(root)

    def _object_path(self, bucket: str, key: str) -> Path:
        if bucket not in BUCKETS:
            raise NotFoundError(f"Unknown bucket: {bucket}", bucket=bucket)
        if not key or key.startswith("/") or ".." in key.split("/"):
            raise ValidationError(f"Invalid object key: {key}", field="key")
        return self.root / bucket / key

    def put(self, bucket: str, key: str, data: bytes, content_type: Optional[str] = None) -> StoredObject:
        path = self._object_path(bucket, key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_name(path.name + ".part")
            tmp_path.write_bytes(data)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Failed to store {bucket}/{key}: {e}")
            raise UpstreamError("Could not store the file", cause=e) from e

        logger.info(f"Stored {bucket}/{key} ({len(data)} bytes)")
        return StoredObject(bucket=bucket, key=key, size=len(data), content_type=content_type)

    def get(self, bucket: str, key: str) -> bytes:
        path = self._object_path(bucket, key)
        if not path.is_file():
            raise NotFoundError(f"File {key} not found", bucket=bucket)
        try:
            return path.read_bytes()
        except OSError as e:
            raise UpstreamError("Could not read the file", cause=e) from e

    def exists(self, bucket: str, key: str) -> bool:
        return self._object_path(bucket, key).is_file()

    def delete(self, bucket: str, key: str) -> None:
        path = self._object_path(bucket, key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to delete {bucket}/{key}: {e}")
            raise UpstreamError("Could not delete the file", cause=e) from e
        logger.info(f"Deleted {bucket}/{key}")

    def path_for(self, bucket: str, key: str) -> Path:
        path = self._object_path(bucket, key)
        if not path.is_file():
            raise NotFoundError(f"File {key} not found", bucket=bucket)
        return path
