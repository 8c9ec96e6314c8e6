"""
Uploaded document handling and upload policies.

Policies are checked before any storage or AI call is made.
"""
import os
from dataclasses import dataclass
from typing import FrozenSet, Optional

from fastapi import UploadFile

from ..config import get_settings
from ..errors import ValidationFailed

PDF = "application/pdf"
DOC = "application/msword"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
JPEG = "image/jpeg"
JPG = "image/jpg"
PNG = "image/png"

_EXTENSION_TYPES = {
    ".pdf": PDF,
    ".doc": DOC,
    ".docx": DOCX,
    ".jpeg": JPEG,
    ".jpg": JPEG,
    ".png": PNG,
}

_TYPE_LABELS = {PDF: "PDF", DOC: "DOC", DOCX: "DOCX", JPEG: "JPEG", JPG: "JPG", PNG: "PNG"}


@dataclass
class UploadedDocument:
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        return os.path.splitext(self.filename)[1].lower()


@dataclass(frozen=True)
class DocumentPolicy:
    name: str
    max_size: int
    allowed_types: FrozenSet[str]


def cv_extraction_policy() -> DocumentPolicy:
    settings = get_settings()
    return DocumentPolicy(
        name="CV",
        max_size=settings.cv_max_size_mb * 1024 * 1024,
        allowed_types=frozenset({PDF, DOC, DOCX, JPEG, JPG, PNG}),
    )


def resume_upload_policy() -> DocumentPolicy:
    settings = get_settings()
    return DocumentPolicy(
        name="Resume",
        max_size=settings.resume_max_size_mb * 1024 * 1024,
        allowed_types=frozenset({PDF, DOC, DOCX}),
    )


def resolve_content_type(filename: str, declared: Optional[str]) -> str:
    """Prefer the declared MIME type, falling back to the file extension."""
    if declared and declared != "application/octet-stream":
        return declared.split(";")[0].strip().lower()
    ext = os.path.splitext(filename or "")[1].lower()
    return _EXTENSION_TYPES.get(ext, declared or "application/octet-stream")


def validate_document(document: UploadedDocument, policy: DocumentPolicy) -> None:
    """Raise ValidationFailed if the document is outside the policy."""
    if not document.content:
        raise ValidationFailed(f"{policy.name} file is empty", details={"field": "file"})

    if document.size > policy.max_size:
        limit_mb = round(policy.max_size / (1024 * 1024))
        raise ValidationFailed(
            f"{policy.name} file size must be less than {limit_mb}MB",
            details={"field": "file", "size": document.size, "max_size": policy.max_size},
        )

    if document.content_type not in policy.allowed_types:
        allowed = sorted({_TYPE_LABELS[t] for t in policy.allowed_types})
        raise ValidationFailed(
            f"Only {', '.join(allowed)} files are allowed",
            details={"field": "file", "content_type": document.content_type},
        )


async def read_upload(file: UploadFile) -> UploadedDocument:
    content = await file.read()
    filename = file.filename or "document"
    return UploadedDocument(
        filename=filename,
        content_type=resolve_content_type(filename, file.content_type),
        content=content,
    )
