from __future__ import annotations
from pydantic import Field
from bounty_platform.schemas.bounty import CamelModel


class SubmissionRecord(CamelModel):
    id: str
    user_name: str = ""
    university: str = ""
    user_id: str = ""
    bounty_id: str = ""
    bounty_name: str = ""
    submission_link: str = ""
    attachments: list[str] = Field(default_factory=list)
    wallet_address: str = ""
    status: str = "Submitted"
    created_at: str


class SkippedFile(CamelModel):
    name: str
    reason: str


class UploadedAttachment(CamelModel):
    filename: str
    url: str
    public_id: str
    file_type: str
    resource_type: str


class SubmissionResult(CamelModel):
    success: bool
    message: str
    id: str | None = None
    files_processed: int = 0
    files_skipped: int = 0
    skipped_details: list[SkippedFile] = Field(default_factory=list)
    attachments: list[str] = Field(default_factory=list)


class SubmissionCheck(CamelModel):
    has_submitted: bool
    user_id: str
    bounty_id: str


class UserSubmissions(CamelModel):
    success: bool = True
    submissions: list[SubmissionRecord]
    count: int
