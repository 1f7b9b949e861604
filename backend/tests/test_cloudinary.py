import hashlib
from urllib.parse import parse_qs
import httpx
import pytest
from bounty_platform.services.cloudinary import (
    format_context,
    mime_from_data_uri,
    resource_type_for,
    sign,
    upload_params,
)
from conftest import CLOUDINARY


def test_sign_matches_cloudinary_scheme():
    params = {"timestamp": "1700000000", "folder": "bounty-submissions/rec1", "public_id": "report"}
    expected = hashlib.sha1(
        b"folder=bounty-submissions/rec1&public_id=report&timestamp=1700000000" + b"secret456"
    ).hexdigest()
    assert sign(params, "secret456") == expected


def test_sign_ignores_empty_values():
    assert sign({"timestamp": "1", "folder": ""}, "s") == sign({"timestamp": "1"}, "s")


def test_upload_params_sorted_and_formatted():
    params = upload_params(
        timestamp=5, folder="f", tags=["a", "b"], context={"title": "x=y|z"}, overwrite=True,
    )
    assert list(params) == sorted(params)
    assert params["tags"] == "a,b"
    assert params["context"] == "title=x%3Dy%7Cz"
    assert params["overwrite"] == "true"
    assert params["timestamp"] == "5"


def test_format_context():
    assert format_context({"a": "1", "b": "two"}) == "a=1|b=two"


def test_resource_type_for():
    assert resource_type_for("image/png") == "image"
    assert resource_type_for("video/mp4") == "video"
    assert resource_type_for("application/pdf") == "raw"
    assert resource_type_for("application/zip") == "auto"
    assert resource_type_for(None) == "auto"


def test_mime_from_data_uri():
    assert mime_from_data_uri("data:image/jpeg;base64,AAAA") == "image/jpeg"
    assert mime_from_data_uri("AAAA") is None


@pytest.mark.asyncio
async def test_signature_endpoint(api):
    r = await api.post("/api/cloudinary/signature", json={"timestamp": 1700000000, "folder": "uploads", "tags": ["x"]})
    assert r.status_code == 200
    body = r.json()
    assert body["params"] == {"folder": "uploads", "tags": "x", "timestamp": "1700000000"}
    assert body["signature"] == sign(body["params"], "secret456")


@pytest.mark.asyncio
async def test_signature_endpoint_ignores_resource_type(api):
    r = await api.post("/api/cloudinary/signature", json={"timestamp": 1700000000, "resourceType": "raw"})
    assert r.status_code == 200
    assert r.json()["params"] == {"timestamp": "1700000000"}


@pytest.mark.asyncio
async def test_signature_endpoint_without_secret(api, app_settings):
    app_settings.cloudinary_api_secret = ""
    r = await api.post("/api/cloudinary/signature", json={"timestamp": 1})
    assert r.status_code == 500
    assert r.json() == {"error": "Missing Cloudinary API secret"}


@pytest.mark.asyncio
async def test_base64_upload_infers_resource_type(api, upstream):
    upstream.on("POST", CLOUDINARY, "/v1_1/demo/image/upload", {
        "secure_url": "https://res.cloudinary.com/demo/image/upload/pic.png", "public_id": "pic",
    })
    r = await api.post("/api/cloudinary/upload", json={"base64Data": "data:image/png;base64,iVBORw0KGgo=", "fileName": "pic.png"})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["result"]["public_id"] == "pic"


@pytest.mark.asyncio
async def test_base64_upload_requires_data(api):
    r = await api.post("/api/cloudinary/upload", json={"fileName": "x"})
    assert r.status_code == 400
    assert r.json() == {"error": "No file data provided"}


@pytest.mark.asyncio
async def test_upload_error_is_upstream_status(api, upstream):
    upstream.on("POST", CLOUDINARY, "/v1_1/demo/image/upload", httpx.Response(401, json={"error": {"message": "Invalid Signature"}}))
    r = await api.post("/api/cloudinary/upload", json={"base64Data": "data:image/png;base64,AAAA"})
    assert r.status_code == 401
    assert r.json()["error"] == "Cloudinary upload failed: Invalid Signature"


@pytest.mark.asyncio
async def test_profile_image_upload(api, upstream):
    captured = {}

    def upload(request):
        captured.update({k: v[0] for k, v in parse_qs(request.content.decode()).items()})
        return httpx.Response(200, json={"secure_url": "https://res.cloudinary.com/demo/p.jpg", "public_id": "profile-images/p"})

    upstream.on("POST", CLOUDINARY, "/v1_1/demo/image/upload", upload)
    r = await api.post("/api/upload-profile-image", json={"base64Data": "data:image/jpeg;base64,AAAA", "userId": "did:privy:42"})
    assert r.status_code == 200
    assert r.json() == {"success": True, "imageUrl": "https://res.cloudinary.com/demo/p.jpg", "publicId": "profile-images/p"}
    assert captured["folder"] == "profile-images"
    assert captured["public_id"].startswith("profile_did_privy_42_")
    assert captured["tags"] == "profile-image,did:privy:42"
    assert captured["overwrite"] == "true"


@pytest.mark.asyncio
async def test_profile_image_requires_user(api):
    r = await api.post("/api/upload-profile-image", json={"base64Data": "data:image/jpeg;base64,AAAA"})
    assert r.status_code == 400

