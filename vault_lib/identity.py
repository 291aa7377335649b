"""
Deterministic session identity: timestamp key, date line, slug, filename.

Timestamps in transcripts are ISO-8601 UTC strings. Everything a reader sees
(filenames, the Date line, year-month directories) is in the process's local
time zone, so conversion happens here and nowhere else.

The wall clock is consulted only as the last-resort filename timestamp for
sessions that carry no timestamp at all; callers inject the clock.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict

from vault_lib.content import name_text
from vault_lib.models import Message, SessionRecord, Source

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"
DATE_LINE_FORMAT = "%Y-%m-%d %H:%M:%S"
UNKNOWN_DATE = "Unknown"

FALLBACK_SLUG = "session"
SLUG_MAX_CHARS = 30
SHORT_ID_LENGTH = 8

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")
# Real newline or the literal two-character sequence
_LINE_BREAK = re.compile(r"\n|\\n")


class SessionIdentity(BaseModel):
    """Naming inputs derived from one session.

    Attributes:
        resolved_timestamp: ``YYYYMMDD-HHMMSS`` or None when no timestamp is known
        timestamp: resolved_timestamp, or the local time "now" as a fallback
        date_line: ``YYYY-MM-DD HH:MM:SS +HH:MM`` or "Unknown"
        slug: normalized first user message
        short_id: first 8 characters of the session id
    """

    model_config = ConfigDict(frozen=True)

    resolved_timestamp: str | None
    timestamp: str
    date_line: str
    slug: str
    short_id: str


def normalize_name(text: str, fallback: str = FALLBACK_SLUG) -> str:
    """Lowercase, collapse non-alphanumeric runs to '-', strip edge hyphens."""
    normalized = _NON_SLUG_CHARS.sub("-", text.lower()).strip("-")
    return normalized or fallback


def extract_session_name(messages: Sequence[Message]) -> str:
    """Slug from the first 30 characters of the first user message's first line."""
    first_user = next((m for m in messages if m.role == "user"), None)
    if first_user is None:
        return FALLBACK_SLUG

    text = name_text(first_user.content)
    first_line = _LINE_BREAK.split(text, maxsplit=1)[0]
    return normalize_name(first_line[:SLUG_MAX_CHARS])


def to_local_time(value: str | None) -> datetime | None:
    """Parse an ISO-8601 UTC timestamp and convert it to local time.

    Naive timestamps are taken as UTC. Unparseable values return None.
    """
    if not value:
        return None
    try:
        timestamp_str = value.strip()
        if timestamp_str.endswith("Z"):
            timestamp_str = timestamp_str[:-1] + "+00:00"
        dt = datetime.fromisoformat(timestamp_str)
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning(f"Failed to parse session timestamp {value!r}: {e}")
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone()


def format_timestamp_key(local_time: datetime) -> str:
    return local_time.strftime(TIMESTAMP_FORMAT)


def format_date_line(local_time: datetime | None) -> str:
    """``2025-11-03 23:30:22 +09:00``, or "Unknown"."""
    if local_time is None:
        return UNKNOWN_DATE
    offset = local_time.strftime("%z")  # e.g. "+0900"
    return f"{local_time.strftime(DATE_LINE_FORMAT)} {offset[:3]}:{offset[3:5]}"


def first_message_timestamp(messages: Sequence[Message]) -> str | None:
    """Local ``YYYYMMDD-HHMMSS`` key of messages[0], used by bulk importers."""
    if not messages:
        return None
    local_time = to_local_time(messages[0].timestamp)
    return format_timestamp_key(local_time) if local_time else None


def session_start_time(record: SessionRecord) -> datetime | None:
    if not record.messages:
        return None
    return to_local_time(record.messages[0].timestamp)


def resolve_session_timestamp(record: SessionRecord) -> str | None:
    """Precomputed key if present, else the converted first-message timestamp."""
    if record.first_message_timestamp:
        return record.first_message_timestamp
    return first_message_timestamp(record.messages)


def short_session_id(session_id: str) -> str:
    return session_id[:SHORT_ID_LENGTH]


def local_now() -> datetime:
    return datetime.now().astimezone()


def derive_identity(
    record: SessionRecord, now: Callable[[], datetime] = local_now
) -> SessionIdentity:
    resolved = resolve_session_timestamp(record)
    timestamp = resolved or format_timestamp_key(now())
    return SessionIdentity(
        resolved_timestamp=resolved,
        timestamp=timestamp,
        date_line=format_date_line(session_start_time(record)),
        slug=extract_session_name(record.messages),
        short_id=short_session_id(record.session_id),
    )


def build_filename(source: Source, identity: SessionIdentity, project_name: str) -> str:
    """Code: ``{ts}_{slug}_{shortid}.md``. Web: ``{ts}_{project}_{slug}.md``."""
    if source == "web":
        # Web sessions have no stable id worth putting in a filename
        return f"{identity.timestamp}_{project_name}_{identity.slug}.md"
    return f"{identity.timestamp}_{identity.slug}_{identity.short_id}.md"
