from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile
from bounty_platform.auth_deps import require_admin
from bounty_platform.clients import get_bounty_service, get_cloudinary
from bounty_platform.config import Settings, get_settings
from bounty_platform.errors import ConfigurationError, PlatformError, UpstreamError
from bounty_platform.schemas.submission import SubmissionCheck, SubmissionResult, UserSubmissions
from bounty_platform.services.airtable import describe_airtable_error
from bounty_platform.services.bounties import BountyService
from bounty_platform.services.cloudinary import CloudinaryClient
from bounty_platform.services.uploads import IncomingFile, submission_message, upload_submission_files
import structlog

log = structlog.get_logger()

router = APIRouter(prefix="/api/submissions", tags=["submissions"])

REQUIRED_FIELDS = ("fullName", "university", "bountyId", "bountyName", "submissionLink", "walletAddress")
DUPLICATE_MESSAGE = "You have already submitted for this bounty. Only one submission per user is allowed."


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def _part_size(upload: UploadFile) -> int:
    if upload.size is not None:
        return upload.size
    upload.file.seek(0, 2)
    size = upload.file.tell()
    upload.file.seek(0)
    return size


def _incoming_files(form) -> list[IncomingFile]:
    # Sizes come from the spooled parts; bodies stay on disk until a file is accepted
    files: list[IncomingFile] = []
    for key, value in form.multi_items():
        if not isinstance(value, UploadFile):
            continue
        if not (key.startswith("file-") or key == "files"):
            continue
        if not value.filename:
            continue
        files.append(IncomingFile(
            name=value.filename, content_type=value.content_type or "", size=_part_size(value), source=value,
        ))
    return files


def _error_message(err: PlatformError) -> str:
    if isinstance(err, UpstreamError):
        return describe_airtable_error(err)
    return f"Error: {err.message}"


@router.post("", response_model=SubmissionResult)
async def create_submission(
    request: Request,
    svc: BountyService = Depends(get_bounty_service),
    cloudinary: CloudinaryClient = Depends(get_cloudinary),
    settings: Settings = Depends(get_settings),
):
    async with request.form() as form:
        return await _submit(form, svc, cloudinary, settings)


async def _submit(form, svc: BountyService, cloudinary: CloudinaryClient, settings: Settings):
    values = {k: str(form.get(k) or "").strip() for k in REQUIRED_FIELDS}
    missing = [k for k, v in values.items() if not v]
    if missing:
        log.warning("submission.missing_fields", missing=missing)
        return _failure(400, f"Missing required fields: {', '.join(missing)}")
    user_id = str(form.get("userId") or "").strip() or None

    # Fail before anything is uploaded to Cloudinary
    try:
        svc.ensure_configured()
    except ConfigurationError as e:
        log.error("submission.misconfigured", error=e.message)
        return _failure(e.status_code, _error_message(e))

    if user_id:
        try:
            if await svc.has_user_submitted(user_id, values["bountyId"]):
                log.info("submission.duplicate", user_id=user_id, bounty_id=values["bountyId"])
                return _failure(409, DUPLICATE_MESSAGE)
        except UpstreamError as e:
            # The check is best effort; the write below reports real failures
            log.warning("submission.duplicate_check_failed", error=e.message)

    incoming = _incoming_files(form)
    attachments, skipped = [], []
    if incoming:
        attachments, skipped = await upload_submission_files(
            incoming,
            cloudinary=cloudinary,
            settings=settings,
            bounty_id=values["bountyId"],
            bounty_name=values["bountyName"],
            full_name=values["fullName"],
            university=values["university"],
        )

    urls = [a.url for a in attachments]
    try:
        record_id = await svc.create_submission(
            full_name=values["fullName"],
            university=values["university"],
            bounty_id=values["bountyId"],
            bounty_name=values["bountyName"],
            submission_link=values["submissionLink"],
            wallet_address=values["walletAddress"],
            user_id=user_id,
            attachment_urls=urls,
        )
    except PlatformError as e:
        log.error("submission.write_failed", status=e.status_code, error=type(e).__name__, message=e.message)
        return _failure(e.status_code, _error_message(e))

    return SubmissionResult(
        success=True,
        message=submission_message(len(attachments), len(skipped), settings.max_attachment_fields),
        id=record_id,
        files_processed=len(attachments),
        files_skipped=len(skipped),
        skipped_details=skipped,
        attachments=urls[: settings.max_attachment_fields],
    )


@router.get("/check", response_model=SubmissionCheck)
async def check_submission(
    user_id: str | None = Query(default=None, alias="userId"),
    bounty_id: str | None = Query(default=None, alias="bountyId"),
    svc: BountyService = Depends(get_bounty_service),
):
    if not user_id or not bounty_id:
        raise HTTPException(status_code=400, detail="Missing required parameters: userId and bountyId")
    submitted = await svc.has_user_submitted(user_id, bounty_id)
    return SubmissionCheck(has_submitted=submitted, user_id=user_id, bounty_id=bounty_id)


@router.get("/user", response_model=UserSubmissions)
async def user_submissions(
    user_id: str | None = Query(default=None, alias="userId"),
    svc: BountyService = Depends(get_bounty_service),
):
    if not user_id:
        raise HTTPException(status_code=400, detail="Missing required parameter: userId")
    subs = await svc.submissions_by_user(user_id)
    return UserSubmissions(submissions=subs, count=len(subs))


@router.get("/bounty/{bounty_id}", response_model=UserSubmissions, dependencies=[Depends(require_admin)])
async def bounty_submissions(bounty_id: str, svc: BountyService = Depends(get_bounty_service)):
    subs = await svc.submissions_for_bounty(bounty_id)
    return UserSubmissions(submissions=subs, count=len(subs))
