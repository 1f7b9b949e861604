from __future__ import annotations
from typing import Any, Literal
import httpx
import structlog
from bounty_platform.config import Settings
from bounty_platform.errors import PlatformError, UpstreamError
from bounty_platform.schemas.bounty import Bounty
from bounty_platform.schemas.submission import SubmissionRecord
from bounty_platform.services.airtable import AirtableClient, formula_string
from bounty_platform.services.mock_data import DEFAULT_CATEGORIES, MOCK_BOUNTIES
from bounty_platform.services.normalize import (
    airtable_status_label,
    record_to_bounty,
    split_categories,
    utc_now_iso,
)

log = structlog.get_logger()

DataSource = Literal["airtable", "mock"]

# Submissions table column names
F_FULL_NAME = "Full Name"
F_UNIVERSITY = "University"
F_USER_ID = "User ID"
F_BOUNTY_ID = "Bounty ID"
F_BOUNTY_NAME = "Bounty Name"
F_SUBMISSION_LINK = "Submission Link"
F_WALLET = "Wallet Address"
F_STATUS = "Status"
F_CREATED_AT = "Created At"
F_ATTACHMENTS = "Attachments"


def attachment_field(index: int) -> str:
    return f"Attachment {index + 1}"


def record_to_submission(record: dict[str, Any], max_attachment_fields: int = 3) -> SubmissionRecord:
    fields = record.get("fields") or {}
    urls: list[str] = []
    for i in range(max_attachment_fields):
        url = fields.get(attachment_field(i))
        if url:
            urls.append(str(url))
    # Native Airtable attachment cells hold objects with a url key
    for item in fields.get(F_ATTACHMENTS) or []:
        if isinstance(item, dict) and item.get("url"):
            urls.append(item["url"])
    return SubmissionRecord(
        id=str(record.get("id", "")),
        user_name=str(fields.get(F_FULL_NAME) or ""),
        university=str(fields.get(F_UNIVERSITY) or ""),
        user_id=str(fields.get(F_USER_ID) or ""),
        bounty_id=str(fields.get(F_BOUNTY_ID) or ""),
        bounty_name=str(fields.get(F_BOUNTY_NAME) or ""),
        submission_link=str(fields.get(F_SUBMISSION_LINK) or ""),
        attachments=urls,
        wallet_address=str(fields.get(F_WALLET) or ""),
        status=str(fields.get(F_STATUS) or "Submitted"),
        created_at=str(fields.get(F_CREATED_AT) or record.get("createdTime") or utc_now_iso()),
    )


class BountyService:
    """Bounty and submission reads/writes against the Airtable base."""

    def __init__(self, http: httpx.AsyncClient, settings: Settings):
        self.http = http
        self.settings = settings
        self._client: AirtableClient | None = None

    @property
    def airtable(self) -> AirtableClient:
        if self._client is None:
            self._client = AirtableClient.from_settings(self.http, self.settings)
        return self._client

    def ensure_configured(self) -> AirtableClient:
        """Raises ConfigurationError when Airtable credentials are missing."""
        return self.airtable

    @property
    def bounties_table(self) -> str:
        return self.settings.airtable_bounties_table_id

    @property
    def submissions_table(self) -> str:
        return self.settings.airtable_submissions_table_id

    def _fallback_allowed(self, err: PlatformError) -> bool:
        if not self.settings.mock_fallback_enabled:
            return False
        log.warning("bounties.mock_fallback", reason=err.message, error=type(err).__name__)
        return True

    # --- bounties ---

    async def list_bounties(self) -> tuple[list[Bounty], DataSource]:
        try:
            records = await self.airtable.list_records(
                self.bounties_table,
                view=self.settings.airtable_view or None,
                max_records=self.settings.airtable_max_records,
            )
        except PlatformError as e:
            if self._fallback_allowed(e):
                return [b.model_copy() for b in MOCK_BOUNTIES], "mock"
            raise
        log.info("bounties.fetched", count=len(records))
        return [record_to_bounty(r) for r in records], "airtable"

    async def get_bounty(self, bounty_id: str) -> tuple[Bounty | None, DataSource]:
        try:
            record = await self.airtable.get_record(self.bounties_table, bounty_id)
        except UpstreamError as e:
            if e.not_found:
                return None, "airtable"
            if self._fallback_allowed(e):
                return _mock_bounty(bounty_id), "mock"
            raise
        except PlatformError as e:
            if self._fallback_allowed(e):
                return _mock_bounty(bounty_id), "mock"
            raise
        return record_to_bounty(record), "airtable"

    async def update_status(self, bounty_id: str, status: str) -> Bounty | None:
        # Live bases store the status in the single-select column named "Select"
        try:
            record = await self.airtable.update_record(
                self.bounties_table, bounty_id, {"Select": airtable_status_label(status)}
            )
        except UpstreamError as e:
            if e.not_found:
                return None
            raise
        log.info("bounties.status_updated", bounty_id=bounty_id, status=status)
        return record_to_bounty(record)

    async def categories(self, bounties: list[Bounty] | None = None) -> list[str]:
        if bounties is None:
            bounties, _ = await self.list_bounties()
        seen = {c.lower(): c for c in DEFAULT_CATEGORIES}
        for b in bounties:
            for c in split_categories(b.category):
                seen.setdefault(c.lower(), c)
        return sorted(seen.values(), key=str.lower)

    # --- submissions ---

    async def has_user_submitted(self, user_id: str, bounty_id: str) -> bool:
        formula = f"AND({{{F_USER_ID}}} = {formula_string(user_id)}, {{{F_BOUNTY_ID}}} = {formula_string(bounty_id)})"
        records = await self.airtable.list_records(
            self.submissions_table,
            filter_by_formula=formula,
            fields=[F_USER_ID, F_BOUNTY_ID],
            max_records=1,
        )
        return len(records) > 0

    async def create_submission(
        self,
        *,
        full_name: str,
        university: str,
        bounty_id: str,
        bounty_name: str,
        submission_link: str,
        wallet_address: str,
        user_id: str | None = None,
        attachment_urls: list[str] | None = None,
    ) -> str:
        fields: dict[str, Any] = {
            F_FULL_NAME: full_name,
            F_UNIVERSITY: university,
            F_BOUNTY_ID: bounty_id,
            F_BOUNTY_NAME: bounty_name,
            F_SUBMISSION_LINK: submission_link,
            F_WALLET: wallet_address,
        }
        if user_id:
            fields[F_USER_ID] = user_id
        urls = attachment_urls or []
        limit = self.settings.max_attachment_fields
        for i, url in enumerate(urls[:limit]):
            fields[attachment_field(i)] = url
        if len(urls) > limit:
            log.warning("submission.attachments_dropped", dropped=len(urls) - limit, kept=limit)
        record = await self.airtable.create_record(self.submissions_table, fields)
        log.info("submission.created", record_id=record.get("id"), bounty_id=bounty_id, attachments=min(len(urls), limit))
        return str(record.get("id", ""))

    async def submissions_for_bounty(self, bounty_id: str) -> list[SubmissionRecord]:
        records = await self.airtable.list_records(
            self.submissions_table, filter_by_formula=f"{{{F_BOUNTY_ID}}} = {formula_string(bounty_id)}"
        )
        return [record_to_submission(r, self.settings.max_attachment_fields) for r in records]

    async def submissions_by_user(self, user_id: str) -> list[SubmissionRecord]:
        records = await self.airtable.list_records(
            self.submissions_table, filter_by_formula=f"{{{F_USER_ID}}} = {formula_string(user_id)}"
        )
        subs = [record_to_submission(r, self.settings.max_attachment_fields) for r in records]
        # Newest first; not every base has a sortable "Created At" column
        return sorted(subs, key=lambda s: s.created_at, reverse=True)


def _mock_bounty(bounty_id: str) -> Bounty | None:
    for b in MOCK_BOUNTIES:
        if b.id == bounty_id:
            return b.model_copy()
    return None
