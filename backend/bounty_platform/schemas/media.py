from __future__ import annotations
from pydantic import Field
from bounty_platform.schemas.bounty import CamelModel


class SignatureRequest(CamelModel):
    timestamp: int | str
    folder: str | None = None
    public_id: str | None = None
    tags: list[str] | None = None
    context: dict[str, str] | None = None


class SignatureResponse(CamelModel):
    signature: str
    params: dict[str, str]


class Base64UploadRequest(CamelModel):
    base64_data: str | None = None
    file_name: str | None = None
    folder: str | None = None
    public_id: str | None = None
    tags: list[str] = Field(default_factory=list)
    context: dict[str, str] = Field(default_factory=dict)


class ProfileImageRequest(CamelModel):
    base64_data: str | None = None
    user_id: str | None = None


class ProfileImageResult(CamelModel):
    success: bool = True
    image_url: str
    public_id: str


class ProfileUpdateRequest(CamelModel):
    did: str = Field(min_length=1)
    metadata: dict = Field(default_factory=dict)
