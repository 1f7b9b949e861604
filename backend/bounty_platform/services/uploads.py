"""
Validation and Cloudinary upload of files attached to a submission.

Limits are read from Settings (20 MB per file, 50 MB per submission by default)
and apply to every upload path.
"""
from __future__ import annotations
import base64
import re
import time
from dataclasses import dataclass
import structlog
from starlette.datastructures import UploadFile
from bounty_platform.config import Settings
from bounty_platform.errors import PlatformError
from bounty_platform.schemas.submission import SkippedFile, UploadedAttachment
from bounty_platform.services.cloudinary import CloudinaryClient, resource_type_for

log = structlog.get_logger()

ALLOWED_MIME = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "image/jpeg",
    "image/png",
    "image/gif",
    "text/plain",
    "application/zip",
    "application/x-zip-compressed",
}

SUCCESS_MESSAGE = "Your submission has been received! We'll review it and get back to you soon."


@dataclass
class IncomingFile:
    """An uploaded part; the body is read only once the file passes validation."""
    name: str
    content_type: str
    size: int
    source: UploadFile | None = None
    data: bytes | None = None

    @classmethod
    def from_bytes(cls, name: str, content_type: str, data: bytes) -> "IncomingFile":
        return cls(name=name, content_type=content_type, size=len(data), data=data)

    async def read(self) -> bytes:
        if self.data is None:
            self.data = await self.source.read() if self.source else b""
        return self.data


def _mb(n_bytes: int) -> int:
    return n_bytes // (1024 * 1024)


def rejection_reason(f: IncomingFile, accepted_total: int, settings: Settings) -> str | None:
    """Why a file cannot be accepted given what is already accepted, or None."""
    if f.content_type not in ALLOWED_MIME:
        return f"Unsupported file type: {f.content_type or 'unknown'}"
    if f.size > settings.max_file_size_bytes:
        return f"File size exceeds the {_mb(settings.max_file_size_bytes)}MB limit"
    if accepted_total + f.size > settings.max_total_upload_bytes:
        return f"Total attachment size would exceed {_mb(settings.max_total_upload_bytes)}MB limit"
    return None


def partition_files(files: list[IncomingFile], settings: Settings) -> tuple[list[IncomingFile], list[SkippedFile]]:
    accepted: list[IncomingFile] = []
    skipped: list[SkippedFile] = []
    total = 0
    for f in files:
        reason = rejection_reason(f, total, settings)
        if reason:
            log.warning("submission.file_skipped", name=f.name, content_type=f.content_type, size=f.size, reason=reason)
            skipped.append(SkippedFile(name=f.name, reason=reason))
            continue
        total += f.size
        accepted.append(f)
    return accepted, skipped


def to_data_uri(data: bytes, mime: str) -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def safe_public_id(filename: str) -> str:
    stem = re.sub(r"\.[^/.]+$", "", filename)
    return re.sub(r"[^a-zA-Z0-9]", "_", stem) or "file"


def context_value(value: str) -> str:
    # &, = and | break Cloudinary's context string
    return re.sub(r"[&=|]", "-", value)


def profile_public_id(user_id: str, now_ms: int | None = None) -> str:
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"profile_{re.sub(r'[^a-zA-Z0-9]', '_', user_id)}_{now_ms}"


async def upload_submission_files(
    files: list[IncomingFile],
    *,
    cloudinary: CloudinaryClient,
    settings: Settings,
    bounty_id: str,
    bounty_name: str,
    full_name: str,
    university: str,
) -> tuple[list[UploadedAttachment], list[SkippedFile]]:
    """Validate, then upload sequentially. Upload failures become skips, not errors."""
    accepted, skipped = partition_files(files, settings)
    attachments: list[UploadedAttachment] = []
    for f in accepted:
        rtype = resource_type_for(f.content_type)
        try:
            result = await cloudinary.upload(
                to_data_uri(await f.read(), f.content_type),
                folder=f"bounty-submissions/{bounty_id}/{int(time.time() * 1000)}",
                public_id=safe_public_id(f.name),
                tags=["bounty-submission", bounty_id],
                context={
                    "bounty_id": bounty_id,
                    "bounty_name": context_value(bounty_name),
                    "submitter": context_value(full_name),
                    "university": context_value(university),
                },
                resource_type=rtype,
            )
        except PlatformError as e:
            log.error("submission.upload_failed", name=f.name, error=e.message)
            skipped.append(SkippedFile(name=f.name, reason=f"Upload failed: {e.message}"))
            continue
        attachments.append(UploadedAttachment(
            filename=f.name,
            url=result["secure_url"],
            public_id=str(result.get("public_id", "")),
            file_type=f.content_type,
            resource_type=rtype,
        ))
    log.info("submission.files_processed", uploaded=len(attachments), skipped=len(skipped))
    return attachments, skipped


def submission_message(uploaded: int, skipped: int, max_fields: int) -> str:
    msg = SUCCESS_MESSAGE
    if skipped:
        msg += f" Note: {skipped} file(s) were not included due to size limitations or upload issues."
    if uploaded:
        msg += f" Successfully uploaded {min(uploaded, max_fields)} file(s)."
        if uploaded > max_fields:
            msg += f" Note: Only the first {max_fields} files are stored in Airtable."
    return msg
