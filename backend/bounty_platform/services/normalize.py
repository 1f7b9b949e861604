"""
Reshaping of Airtable bounty records into the API's Bounty type.

Airtable bases behind this platform were edited by hand and disagree on field
names ("Title" vs the misspelt "Tiltle", "Reward" vs "Rewards", "Status" vs
"Select") and on status labels. Everything that reconciles them lives here.
"""
from __future__ import annotations
import re
from datetime import datetime, timezone
from typing import Any, Mapping
from bounty_platform.schemas.bounty import Bounty

CANONICAL_STATUSES = ("open", "in-progress", "closed")
DEFAULT_STATUS = "open"

_STATUS_SYNONYMS: dict[str, str] = {}
for _canon, _labels in {
    "open": ("open", "new", "active", "available"),
    "in-progress": (
        "in-progress", "in progress", "inprogress", "in_progress",
        "review", "in review", "in-review", "ongoing", "started",
    ),
    "closed": (
        "closed", "completed", "complete", "done", "finished",
        "expired", "cancelled", "canceled",
    ),
}.items():
    for _label in _labels:
        _STATUS_SYNONYMS[re.sub(r"[\s_-]+", " ", _label)] = _canon

TITLE_FIELDS = ("Title", "Tiltle")
REWARD_FIELDS = ("Reward", "Rewards")
STATUS_FIELDS = ("Status", "Select")

UNTITLED = "Untitled Bounty"
DEFAULT_CATEGORY = "Other"


def normalize_status(raw: Any) -> str:
    """Map an upstream status label onto open / in-progress / closed (default open)."""
    if not isinstance(raw, str):
        return DEFAULT_STATUS
    key = re.sub(r"[\s_-]+", " ", raw.strip().lower())
    return _STATUS_SYNONYMS.get(key, DEFAULT_STATUS)


def is_canonical_status(value: str) -> bool:
    return value in CANONICAL_STATUSES


def airtable_status_label(status: str) -> str:
    # Airtable single-select options are stored capitalized: "Open", "In-progress", "Closed"
    canon = normalize_status(status)
    return canon[:1].upper() + canon[1:]


def first_field(fields: Mapping[str, Any], names: tuple[str, ...]) -> Any:
    for name in names:
        value = fields.get(name)
        if value not in (None, "", []):
            return value
    return None


def parse_reward(value: Any) -> float:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        cleaned = value.replace(",", "").replace("$", "").strip()
        try:
            return float(cleaned)
        except ValueError:
            return 0
    return 0


def join_category(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        parts = [str(v).strip() for v in value if str(v).strip()]
        return ", ".join(parts) or DEFAULT_CATEGORY
    if isinstance(value, str) and value.strip():
        return value.strip()
    return DEFAULT_CATEGORY


def split_categories(category: str | None) -> list[str]:
    if not category:
        return []
    return [c.strip() for c in str(category).split(",") if c.strip()]


def string_list(value: Any) -> list[str]:
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    return split_categories(value) if isinstance(value, str) else []


def markdown_text(value: Any) -> str:
    # Rich text arrives either as Markdown or as HTML; both are passed through for the renderer
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def record_to_bounty(record: Mapping[str, Any]) -> Bounty:
    fields = record.get("fields") or {}
    return Bounty(
        id=str(record.get("id", "")),
        title=str(first_field(fields, TITLE_FIELDS) or UNTITLED),
        description=markdown_text(fields.get("Description")),
        requirements=markdown_text(fields.get("Requirements")),
        reward=parse_reward(first_field(fields, REWARD_FIELDS)),
        deadline=str(fields.get("Deadline") or utc_now_iso()),
        category=join_category(fields.get("Category")),
        status=normalize_status(first_field(fields, STATUS_FIELDS)),
        skills=string_list(fields.get("Skills")),
        tags=string_list(fields.get("Tags")),
    )


def truncate_description(text: str, max_length: int = 150) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length].strip() + "..."


_MD_HEADING = re.compile(r"#+\s+")
_MD_MARKS = re.compile(r"\*\*|\*|~~|__|\[|\]|`")
_HTML_TAG = re.compile(r"<[^>]+>")


def extract_summary(markdown: str | None, max_length: int = 150) -> str:
    """Plain-text summary of Markdown/HTML content, truncated to max_length."""
    if not markdown:
        return ""
    text = _HTML_TAG.sub(" ", markdown)
    text = _MD_HEADING.sub("", text)
    text = _MD_MARKS.sub("", text)
    text = re.sub(r"\s+", " ", text).strip()
    return truncate_description(text, max_length)
