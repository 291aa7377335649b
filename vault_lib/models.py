"""
Pydantic models for transcripts, hook input and archive results.

Message and SessionRecord are immutable once built. SessionGroup is the only
mutable shape: the grouper appends messages to it while reading a JSONL file.

Usage:
    record = SessionRecord.from_transcript(session_id, cwd, transcript)
    for message in record.messages:
        ...
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vault_lib.content import MessageContent, PlainText, content_to_raw, parse_content

Source: TypeAlias = Literal["code", "web"]


class Message(BaseModel):
    """One transcript message.

    Attributes:
        role: "user", "assistant", or anything else (skipped when rendering)
        content: Parsed PlainText or BlockList
        timestamp: ISO-8601 UTC string, if the source recorded one
        signature: Truthy marker for trace-only messages, never rendered
    """

    model_config = ConfigDict(frozen=True)

    role: str = ""
    content: MessageContent = Field(default_factory=PlainText)
    timestamp: str | None = None
    signature: bool = False

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("content", mode="before")
    @classmethod
    def _parse_content(cls, value: Any) -> MessageContent:
        return parse_content(value)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> str | None:
        if value is None or value == "":
            return None
        return str(value)

    @field_validator("signature", mode="before")
    @classmethod
    def _coerce_signature(cls, value: Any) -> bool:
        return bool(value)

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> Message:
        return cls(
            role=raw.get("role"),
            content=raw.get("content"),
            timestamp=raw.get("timestamp"),
            signature=raw.get("signature"),
        )

    def to_raw(self) -> dict[str, Any]:
        raw: dict[str, Any] = {
            "role": self.role,
            "content": content_to_raw(self.content),
            "timestamp": self.timestamp,
        }
        if self.signature:
            raw["signature"] = True
        return raw


class SessionGroup(BaseModel):
    """Messages collected for one session id while grouping a JSONL stream."""

    cwd: str
    messages: list[Message] = Field(default_factory=list)


class SessionRecord(BaseModel):
    """A complete session ready for rendering.

    first_message_timestamp is a precomputed ``YYYYMMDD-HHMMSS`` key injected
    by bulk importers; when present it wins over messages[0].timestamp.
    """

    model_config = ConfigDict(frozen=True)

    session_id: str
    cwd: str
    messages: tuple[Message, ...] = ()
    first_message_timestamp: str | None = None

    @classmethod
    def from_transcript(cls, session_id: str, cwd: str, transcript: dict[str, Any]) -> SessionRecord:
        """Build a record from a transcript dict (``{"messages": [...], ...}``)."""
        raw_messages = transcript.get("messages") or []
        messages = tuple(Message.from_raw(m) for m in raw_messages if isinstance(m, dict))
        return cls(
            session_id=session_id,
            cwd=cwd,
            messages=messages,
            first_message_timestamp=transcript.get("_first_message_timestamp") or None,
        )

    def to_transcript(self) -> dict[str, Any]:
        transcript: dict[str, Any] = {
            "session_id": self.session_id,
            "cwd": self.cwd,
            "messages": [m.to_raw() for m in self.messages],
        }
        if self.first_message_timestamp:
            transcript["_first_message_timestamp"] = self.first_message_timestamp
        return transcript


class RenderedTranscript(BaseModel):
    """Markdown plus its resolved location. Derived, never persisted as-is."""

    model_config = ConfigDict(frozen=True)

    markdown: str
    filename: str
    destination_dir: Path
    relative_path: str


class HookInput(BaseModel):
    """Stop-hook payload, or the equivalent line emitted by the JSONL importer."""

    model_config = ConfigDict(extra="ignore")

    session_id: str = Field(..., description="The unique session identifier.")
    cwd: str = Field(..., description="Working directory of the session.")
    transcript: dict[str, Any] | None = None
    transcript_path: str | None = None
    source: Source = "code"
    project: str | None = None
    hook_event_name: str | None = None
    permission_mode: str | None = None

    @field_validator("source", mode="before")
    @classmethod
    def _default_source(cls, value: Any) -> str:
        # Anything other than "web" is a Claude Code session
        return "web" if value == "web" else "code"


class ArchiveResult(BaseModel):
    """Outcome of one hook invocation.

    Attributes:
        success: Markdown was written to the vault
        filename: Name of the written file
        relative_path: Vault-relative path of the written file
        path: Absolute path of the written file
        message: Human-readable status or failure reason
    """

    success: bool = False
    filename: str = ""
    relative_path: str = ""
    path: str = ""
    message: str = ""
