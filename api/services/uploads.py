"""Conversion of multipart uploads into pipeline documents."""

from typing import Optional

from fastapi import UploadFile

from api.config.settings import settings
from pipeline.errors import WorkflowValidationError
from pipeline.models import UploadedDocument


async def read_upload(upload: Optional[UploadFile], field: str) -> Optional[UploadedDocument]:
    """Read an uploaded file, or None when the field was left empty.

    Raises:
        WorkflowValidationError: file exceeds MAX_UPLOAD_BYTES
    """
    if upload is None or not upload.filename:
        return None

    content = await upload.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(content) > settings.MAX_UPLOAD_BYTES:
        limit_mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
        raise WorkflowValidationError(f"File must be smaller than {limit_mb} MB", field=field)

    return UploadedDocument(
        filename=upload.filename,
        content=content,
        content_type=upload.content_type,
    )
