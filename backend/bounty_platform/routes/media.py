from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException
from bounty_platform.clients import get_cloudinary
from bounty_platform.schemas.media import (
    Base64UploadRequest,
    ProfileImageRequest,
    ProfileImageResult,
    SignatureRequest,
    SignatureResponse,
)
from bounty_platform.services.cloudinary import CloudinaryClient, upload_params
from bounty_platform.services.uploads import profile_public_id
import structlog

log = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["media"])


@router.post("/cloudinary/signature", response_model=SignatureResponse)
async def sign_upload(payload: SignatureRequest, cloudinary: CloudinaryClient = Depends(get_cloudinary)):
    """Sign client-side upload parameters; the browser posts them straight to Cloudinary."""
    params = upload_params(
        timestamp=payload.timestamp,
        folder=payload.folder,
        public_id=payload.public_id,
        tags=payload.tags,
        context=payload.context,
    )
    return SignatureResponse(signature=cloudinary.signature(params), params=params)


@router.post("/cloudinary/upload")
async def upload_base64(payload: Base64UploadRequest, cloudinary: CloudinaryClient = Depends(get_cloudinary)):
    if not payload.base64_data:
        raise HTTPException(status_code=400, detail="No file data provided")
    result = await cloudinary.upload(
        payload.base64_data,
        folder=payload.folder,
        public_id=payload.public_id,
        tags=payload.tags or None,
        context=payload.context or None,
    )
    log.info("media.uploaded", public_id=result.get("public_id"), file_name=payload.file_name)
    return {"success": True, "result": result}


@router.post("/upload-profile-image", response_model=ProfileImageResult)
async def upload_profile_image(payload: ProfileImageRequest, cloudinary: CloudinaryClient = Depends(get_cloudinary)):
    if not payload.base64_data or not payload.user_id:
        raise HTTPException(status_code=400, detail="Missing required fields")
    result = await cloudinary.upload(
        payload.base64_data,
        folder="profile-images",
        public_id=profile_public_id(payload.user_id),
        tags=["profile-image", payload.user_id],
        resource_type="image",
        overwrite=True,
    )
    return ProfileImageResult(image_url=result["secure_url"], public_id=str(result.get("public_id", "")))
