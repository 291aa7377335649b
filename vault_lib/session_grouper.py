"""
Group Claude Code history JSONL records into sessions.

Each line of a history file is one event:

    {"sessionId": "...", "cwd": "...", "timestamp": "...Z",
     "message": {"role": "user", "content": "..."}}

Records without sessionId, cwd or message are dropped silently; a line that
is not valid JSON fails the whole file, because a truncated or corrupted
history file should not be half-imported.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from vault_lib.errors import MissingInputError, TranscriptParseError
from vault_lib.identity import first_message_timestamp
from vault_lib.models import Message, SessionGroup, SessionRecord

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("sessionId", "cwd", "message")


def group_sessions(lines: Iterable[str], source: str = "JSONL") -> dict[str, SessionGroup]:
    """Fold JSONL lines into session groups, in first-seen session order.

    Args:
        lines: JSONL text, one record per line
        source: Name used in error messages (usually the file path)

    Raises:
        TranscriptParseError: If any line is not valid JSON
    """
    sessions: dict[str, SessionGroup] = {}
    skipped = 0

    for line_number, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue

        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise TranscriptParseError(f"Malformed record in {source}: {e.msg}", line_number) from e

        if not isinstance(data, dict) or any(data.get(key) is None for key in REQUIRED_FIELDS):
            skipped += 1
            continue

        message = data["message"]
        if not isinstance(message, dict):
            skipped += 1
            continue

        # First record for an id fixes its cwd; later ones only append
        group = sessions.setdefault(str(data["sessionId"]), SessionGroup(cwd=str(data["cwd"])))
        group.messages.append(
            Message(
                role=message.get("role"),
                content=message.get("content"),
                timestamp=data.get("timestamp"),
            )
        )

    if skipped:
        logger.debug(f"Skipped {skipped} records without sessionId/cwd/message in {source}")
    return sessions


def group_file(path: str | Path) -> dict[str, SessionGroup]:
    """Group the sessions in a JSONL file.

    Raises:
        MissingInputError: If the file does not exist or cannot be read
        TranscriptParseError: If any line is not valid UTF-8 JSON
    """
    path = Path(path)
    if not path.is_file():
        raise MissingInputError(f"JSONL file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            return group_sessions(f, source=str(path))
    except UnicodeDecodeError as e:
        raise TranscriptParseError(f"Invalid UTF-8 in {path}: {e.reason}") from e
    except OSError as e:
        raise MissingInputError(f"Cannot read JSONL file {path}: {e}") from e


def group_to_record(session_id: str, group: SessionGroup) -> SessionRecord:
    """Freeze a group into a SessionRecord with its timestamp key precomputed."""
    return SessionRecord(
        session_id=session_id,
        cwd=group.cwd,
        messages=tuple(group.messages),
        first_message_timestamp=first_message_timestamp(group.messages),
    )
