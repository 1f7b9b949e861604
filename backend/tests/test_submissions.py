import json
from urllib.parse import parse_qs
import httpx
import pytest
from starlette.datastructures import UploadFile
from bounty_platform.services.uploads import (
    IncomingFile,
    partition_files,
    safe_public_id,
    submission_message,
)
from conftest import AIRTABLE, CLOUDINARY, airtable_record, make_settings

SUBMISSIONS_PATH = "/v0/appTEST/Submissions"

FORM = {
    "fullName": "Ada Lovelace",
    "university": "University of London",
    "bountyId": "recBounty1",
    "bountyName": "Write docs | v2",
    "submissionLink": "https://example.com/work",
    "walletAddress": "0xabc",
    "userId": "did:privy:user1",
}


def small_limits():
    return make_settings(max_file_size_mb=1, max_total_upload_mb=2)


MB = 1024 * 1024


def test_partition_rejects_type_size_and_total():
    files = [
        IncomingFile.from_bytes("a.pdf", "application/pdf", b"x" * (MB - 10)),
        IncomingFile.from_bytes("b.exe", "application/x-msdownload", b"x"),
        IncomingFile.from_bytes("c.png", "image/png", b"x" * (MB + 1)),
        IncomingFile.from_bytes("d.zip", "application/zip", b"x" * (MB - 10)),
        IncomingFile.from_bytes("e.txt", "text/plain", b"x" * 100),
    ]
    accepted, skipped = partition_files(files, small_limits())
    assert [f.name for f in accepted] == ["a.pdf", "d.zip"]
    assert [(s.name, s.reason) for s in skipped] == [
        ("b.exe", "Unsupported file type: application/x-msdownload"),
        ("c.png", "File size exceeds the 1MB limit"),
        ("e.txt", "Total attachment size would exceed 2MB limit"),
    ]


def test_default_limits():
    s = make_settings()
    assert s.max_file_size_bytes == 20 * MB
    assert s.max_total_upload_bytes == 50 * MB


def test_safe_public_id():
    assert safe_public_id("My Report (final).pdf") == "My_Report__final_"
    assert safe_public_id(".pdf") == "file"


def test_submission_message_mentions_skips_and_dropped_files():
    msg = submission_message(uploaded=4, skipped=1, max_fields=3)
    assert "1 file(s) were not included" in msg
    assert "Successfully uploaded 3 file(s)." in msg
    assert "Only the first 3 files are stored in Airtable." in msg
    assert submission_message(0, 0, 3) == "Your submission has been received! We'll review it and get back to you soon."


def _no_previous_submission(upstream):
    upstream.on("GET", AIRTABLE, SUBMISSIONS_PATH, {"records": []})


def _cloudinary_ok(request):
    form = parse_qs(request.content.decode())
    public_id = form["public_id"][0]
    return httpx.Response(200, json={
        "secure_url": f"https://res.cloudinary.com/demo/{public_id}",
        "public_id": f"{form['folder'][0]}/{public_id}",
    })


@pytest.mark.asyncio
async def test_submission_with_files(api, upstream):
    _no_previous_submission(upstream)
    upstream.on("POST", CLOUDINARY, "/v1_1/demo/raw/upload", _cloudinary_ok)
    upstream.on("POST", CLOUDINARY, "/v1_1/demo/image/upload", _cloudinary_ok)
    created = {}

    def create(request):
        created.update(json.loads(request.content)["fields"])
        return httpx.Response(200, json=airtable_record("recNew", **created))

    upstream.on("POST", AIRTABLE, SUBMISSIONS_PATH, create)

    r = await api.post("/api/submissions", data=FORM, files=[
        ("file-0", ("report.pdf", b"%PDF-1.4 data", "application/pdf")),
        ("files", ("shot.png", b"\x89PNG data", "image/png")),
        ("file-1", ("virus.exe", b"MZ", "application/x-msdownload")),
    ])
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True
    assert body["id"] == "recNew"
    assert body["filesProcessed"] == 2
    assert body["filesSkipped"] == 1
    assert body["skippedDetails"] == [{"name": "virus.exe", "reason": "Unsupported file type: application/x-msdownload"}]
    assert body["attachments"] == ["https://res.cloudinary.com/demo/report", "https://res.cloudinary.com/demo/shot"]

    assert created["Full Name"] == "Ada Lovelace"
    assert created["User ID"] == "did:privy:user1"
    assert created["Attachment 1"] == "https://res.cloudinary.com/demo/report"
    assert created["Attachment 2"] == "https://res.cloudinary.com/demo/shot"
    assert "Attachment 3" not in created

    [raw_upload, _] = upstream.calls("POST", CLOUDINARY)
    form = parse_qs(raw_upload.content.decode())
    assert form["folder"][0].startswith("bounty-submissions/recBounty1/")
    assert form["tags"] == ["bounty-submission,recBounty1"]
    assert "bounty_name=Write docs - v2" in form["context"][0]
    assert form["api_key"] == ["key123"]
    assert len(form["signature"][0]) == 40
    assert form["file"][0].startswith("data:application/pdf;base64,")


@pytest.mark.asyncio
async def test_submission_drops_attachments_beyond_three(api, upstream):
    _no_previous_submission(upstream)
    upstream.on("POST", CLOUDINARY, "/v1_1/demo/raw/upload", _cloudinary_ok)
    created = {}

    def create(request):
        created.update(json.loads(request.content)["fields"])
        return httpx.Response(200, json=airtable_record("recNew"))

    upstream.on("POST", AIRTABLE, SUBMISSIONS_PATH, create)
    files = [(f"file-{i}", (f"doc{i}.pdf", b"%PDF", "application/pdf")) for i in range(4)]
    r = await api.post("/api/submissions", data=FORM, files=files)
    body = r.json()
    assert body["filesProcessed"] == 4
    assert len(body["attachments"]) == 3
    assert "Only the first 3 files are stored in Airtable." in body["message"]
    assert sorted(k for k in created if k.startswith("Attachment")) == ["Attachment 1", "Attachment 2", "Attachment 3"]


@pytest.mark.asyncio
async def test_upload_failure_is_reported_as_skip(api, upstream):
    _no_previous_submission(upstream)
    upstream.on("POST", CLOUDINARY, "/v1_1/demo/raw/upload", httpx.Response(
        400, json={"error": {"message": "Invalid file"}}
    ))
    upstream.on("POST", AIRTABLE, SUBMISSIONS_PATH, airtable_record("recNew"))
    r = await api.post("/api/submissions", data=FORM, files=[("file-0", ("bad.pdf", b"%PDF", "application/pdf"))])
    body = r.json()
    assert body["success"] is True
    assert body["filesProcessed"] == 0
    assert body["skippedDetails"][0]["name"] == "bad.pdf"
    assert "Invalid file" in body["skippedDetails"][0]["reason"]


@pytest.mark.asyncio
async def test_duplicate_submission_rejected(api, upstream):
    seen = {}

    def lookup(request):
        seen["formula"] = request.url.params["filterByFormula"]
        return httpx.Response(200, json={"records": [airtable_record("recOld", **{"User ID": "did:privy:user1"})]})

    upstream.on("GET", AIRTABLE, SUBMISSIONS_PATH, lookup)
    r = await api.post("/api/submissions", data=FORM)
    assert r.status_code == 409
    assert r.json() == {
        "success": False,
        "message": "You have already submitted for this bounty. Only one submission per user is allowed.",
    }
    assert seen["formula"] == 'AND({User ID} = "did:privy:user1", {Bounty ID} = "recBounty1")'
    assert upstream.calls("POST") == []


@pytest.mark.asyncio
async def test_missing_fields_rejected(api, upstream):
    r = await api.post("/api/submissions", data={k: v for k, v in FORM.items() if k != "walletAddress"})
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert "walletAddress" in body["message"]
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_airtable_write_error_is_explained(api, upstream):
    _no_previous_submission(upstream)
    upstream.on("POST", AIRTABLE, SUBMISSIONS_PATH, httpx.Response(422, json={"error": {
        "type": "UNKNOWN_FIELD_NAME", "message": 'Unknown field name: "Wallet Address"',
    }}))
    r = await api.post("/api/submissions", data=FORM)
    assert r.status_code == 422
    assert r.json()["message"] == (
        "Submission failed due to a configuration issue. "
        'Please contact support and mention: Unknown field "Wallet Address".'
    )


@pytest.mark.asyncio
async def test_check_submission(api, upstream):
    upstream.on("GET", AIRTABLE, SUBMISSIONS_PATH, {"records": []})
    r = await api.get("/api/submissions/check", params={"userId": "u1", "bountyId": "b1"})
    assert r.json() == {"hasSubmitted": False, "userId": "u1", "bountyId": "b1"}

    r = await api.get("/api/submissions/check", params={"userId": "u1"})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_user_submissions_newest_first(api, upstream):
    upstream.on("GET", AIRTABLE, SUBMISSIONS_PATH, {"records": [
        airtable_record("rec1", **{"Full Name": "Ada", "Created At": "2024-01-01T00:00:00Z", "Attachment 1": "https://x/1"}),
        airtable_record("rec2", **{"Full Name": "Ada", "Created At": "2024-03-01T00:00:00Z"}),
    ]})
    r = await api.get("/api/submissions/user", params={"userId": "u1"})
    body = r.json()
    assert body["count"] == 2
    assert [s["id"] for s in body["submissions"]] == ["rec2", "rec1"]
    assert body["submissions"][1]["attachments"] == ["https://x/1"]
    assert body["submissions"][0]["status"] == "Submitted"


@pytest.mark.asyncio
async def test_bounty_submissions_is_admin_only(api, app_settings, upstream):
    app_settings.admin_api_key = "k"
    upstream.on("GET", AIRTABLE, SUBMISSIONS_PATH, {"records": []})
    r = await api.get("/api/submissions/bounty/recBounty1")
    assert r.status_code == 401
    r = await api.get("/api/submissions/bounty/recBounty1", headers={"Authorization": "Bearer k"})
    assert r.status_code == 200
    assert r.json()["count"] == 0


@pytest.mark.asyncio
async def test_missing_airtable_token_fails_before_uploads(api, app_settings, upstream):
    app_settings.airtable_personal_access_token = ""
    r = await api.post("/api/submissions", data=FORM, files=[("file-0", ("report.pdf", b"%PDF", "application/pdf"))])
    assert r.status_code == 500
    assert r.json() == {
        "success": False,
        "message": "Error: AIRTABLE_PERSONAL_ACCESS_TOKEN is not defined in environment variables",
    }
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_missing_airtable_token_without_user_id(api, app_settings, upstream):
    app_settings.airtable_personal_access_token = ""
    form = {k: v for k, v in FORM.items() if k != "userId"}
    r = await api.post("/api/submissions", data=form, files=[("file-0", ("report.pdf", b"%PDF", "application/pdf"))])
    assert r.status_code == 500
    assert r.json()["success"] is False
    assert r.json()["message"].startswith("Error: AIRTABLE_PERSONAL_ACCESS_TOKEN")
    assert upstream.calls("POST", CLOUDINARY) == []


@pytest.mark.asyncio
async def test_oversized_file_is_never_read(api, app_settings, upstream, monkeypatch):
    app_settings.max_file_size_mb = 1
    _no_previous_submission(upstream)
    upstream.on("POST", CLOUDINARY, "/v1_1/demo/raw/upload", _cloudinary_ok)
    upstream.on("POST", AIRTABLE, SUBMISSIONS_PATH, airtable_record("recNew"))

    reads = []
    original_read = UploadFile.read

    async def spy_read(self, size=-1):
        data = await original_read(self, size)
        reads.append((self.filename, len(data)))
        return data

    monkeypatch.setattr(UploadFile, "read", spy_read)
    r = await api.post("/api/submissions", data=FORM, files=[
        ("file-0", ("huge.pdf", b"x" * (MB + 1), "application/pdf")),
        ("file-1", ("small.pdf", b"%PDF small", "application/pdf")),
    ])
    body = r.json()
    assert body["success"] is True
    assert body["filesProcessed"] == 1
    assert body["skippedDetails"] == [{"name": "huge.pdf", "reason": "File size exceeds the 1MB limit"}]
    assert reads == [("small.pdf", len(b"%PDF small"))]
