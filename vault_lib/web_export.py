"""
Adapter for the claude.ai data export (conversations.json).

The export is a JSON array of conversations:

    {"uuid": "...", "name": "...", "chat_messages": [
        {"sender": "human", "content": [{"type": "text", "text": "..."}],
         "created_at": "2025-11-03T10:00:00.000Z"}, ...]}

Each conversation maps onto a SessionRecord (sender "human" -> role "user")
so it goes through the same rendering pipeline as Claude Code sessions.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from vault_lib.errors import MissingInputError, TranscriptParseError
from vault_lib.identity import first_message_timestamp, normalize_name
from vault_lib.models import Message, SessionRecord

SENDER_ROLES = {"human": "user", "assistant": "assistant"}
UNTITLED_PROJECT = "untitled"


def load_conversations(path: str | Path) -> list[Any]:
    """Read the export file.

    Raises:
        MissingInputError: If the file does not exist or cannot be read
        TranscriptParseError: If the file is not a JSON array
    """
    path = Path(path)
    if not path.is_file():
        raise MissingInputError(f"Conversations file not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise TranscriptParseError(f"Invalid conversations JSON in {path}: {e.msg}", e.lineno) from e
    except UnicodeDecodeError as e:
        raise TranscriptParseError(f"Invalid UTF-8 in {path}: {e.reason}") from e
    except OSError as e:
        raise MissingInputError(f"Cannot read conversations file {path}: {e}") from e

    if not isinstance(data, list):
        raise TranscriptParseError(f"Expected a JSON array of conversations in {path}")
    return data


def chat_message_to_message(raw: dict[str, Any]) -> Message:
    sender = raw.get("sender") or ""
    content = raw.get("content")
    if not content:
        # Older exports only carry a flat text field
        content = raw.get("text", "")
    return Message(
        role=SENDER_ROLES.get(sender, sender),
        content=content,
        timestamp=raw.get("created_at"),
    )


def conversation_project_name(conversation: dict[str, Any]) -> str:
    """Normalized conversation title, used as the "project" of a web session."""
    return normalize_name(str(conversation.get("name") or ""), fallback=UNTITLED_PROJECT)


def conversation_to_record(conversation: dict[str, Any], source_path: str = "") -> SessionRecord | None:
    """Map one export conversation onto a SessionRecord.

    Returns:
        None for conversations without messages
    """
    chat_messages = conversation.get("chat_messages") or []
    messages = tuple(chat_message_to_message(m) for m in chat_messages if isinstance(m, dict))
    if not messages:
        return None

    return SessionRecord(
        session_id=str(conversation.get("uuid") or ""),
        cwd=source_path,
        messages=messages,
        first_message_timestamp=first_message_timestamp(messages),
    )
