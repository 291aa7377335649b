"""
Transcript archiver - wires normalization, identity, rendering and paths.

Two entry points with different failure policies:

- run_hook(): the interactive Stop-hook path. Never raises; every failure is
  logged and reported through an ArchiveResult so the host is never blocked.
- process_transcript(): the library path used by bulk importers. Raises
  ArchiveError on any failure so the caller can count it.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from vault_lib.config import VaultConfig
from vault_lib.errors import ArchiveError, MissingInputError, TranscriptParseError
from vault_lib.identity import build_filename, derive_identity, local_now
from vault_lib.markdown_renderer import render_session
from vault_lib.models import ArchiveResult, HookInput, RenderedTranscript, SessionRecord, Source
from vault_lib.notifier import notify
from vault_lib.session_grouper import group_file, group_to_record
from vault_lib.vault_paths import VaultPathResolver, project_name_from_cwd, safe_directory_name

logger = logging.getLogger(__name__)


def load_transcript(path: str | Path, session_id: str, cwd: str) -> SessionRecord:
    """Load the transcript file named by a hook's transcript_path.

    ``.jsonl`` files are Claude Code history: the group for session_id (or the
    first group) is used. Anything else is parsed as one JSON document with a
    ``messages`` list.

    Raises:
        MissingInputError: File missing or unreadable, or a JSONL file without sessions
        TranscriptParseError: Invalid JSON or invalid UTF-8
    """
    path = Path(path).expanduser()
    if not path.is_file():
        raise MissingInputError(f"Transcript file not found: {path}")

    if path.suffix == ".jsonl":
        groups = group_file(path)
        group = groups.get(session_id) or next(iter(groups.values()), None)
        if group is None:
            raise MissingInputError(f"No session records in transcript: {path}")
        record = group_to_record(session_id, group)
        return record.model_copy(update={"cwd": cwd})

    try:
        transcript = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise TranscriptParseError(f"Invalid transcript JSON in {path}: {e.msg}", e.lineno) from e
    except UnicodeDecodeError as e:
        raise TranscriptParseError(f"Invalid UTF-8 in transcript {path}: {e.reason}") from e
    except OSError as e:
        raise MissingInputError(f"Cannot read transcript {path}: {e}") from e
    if not isinstance(transcript, dict):
        raise TranscriptParseError(f"Transcript {path} is not a JSON object")
    return SessionRecord.from_transcript(session_id, cwd, transcript)


class TranscriptArchiver:
    """Renders sessions and saves them into the vault."""

    def __init__(self, config: VaultConfig, clock: Callable[[], datetime] = local_now):
        self.config = config
        self.paths = VaultPathResolver(config)
        self._clock = clock

    def render(self, record: SessionRecord, project_name: str, source: Source = "code") -> RenderedTranscript:
        identity = derive_identity(record, now=self._clock)
        filename = build_filename(source, identity, project_name)
        markdown = render_session(record, project_name, source, identity.date_line)

        # Web directories use the resolved timestamp only, never the clock fallback
        timestamp = identity.resolved_timestamp
        return RenderedTranscript(
            markdown=markdown,
            filename=filename,
            destination_dir=self.paths.destination_dir(project_name, source, timestamp),
            relative_path=self.paths.relative_path(project_name, source, timestamp, filename),
        )

    def archive(
        self, record: SessionRecord, project_name: str, source: Source = "code"
    ) -> tuple[RenderedTranscript, Path]:
        """Render and save; returns the rendering and the absolute path written."""
        rendered = self.render(record, project_name, source)
        saved_path = self.paths.save(rendered.destination_dir, rendered.filename, rendered.markdown)
        return rendered, saved_path

    def process_transcript(self, project_name: str, record: SessionRecord, source: Source = "code") -> str:
        """Library entry point for bulk imports.

        Returns:
            Vault-relative path, e.g. "Claude Code/project/20251103-143022_name_abc12345.md"

        Raises:
            ArchiveError: On any failure
        """
        try:
            rendered, _ = self.archive(record, project_name, source)
        except Exception as e:
            logger.exception(f"{type(e).__name__}: {e}")
            raise ArchiveError(f"Failed to process transcript: {e}") from e

        logger.info(f"Successfully imported transcript: {rendered.filename}")
        return rendered.relative_path

    def load_record(self, hook_input: HookInput) -> SessionRecord:
        # Bulk import embeds the transcript; a live hook only passes its path
        if hook_input.transcript is not None:
            return SessionRecord.from_transcript(hook_input.session_id, hook_input.cwd, hook_input.transcript)
        if hook_input.transcript_path:
            return load_transcript(hook_input.transcript_path, hook_input.session_id, hook_input.cwd)
        raise MissingInputError("Hook input has neither transcript nor transcript_path")

    def run_hook(self, raw_input: Any) -> ArchiveResult:
        """Archive the session described by one hook payload. Never raises."""
        try:
            hook_input = HookInput.model_validate(raw_input)
        except ValidationError as e:
            fields = ", ".join(".".join(map(str, err["loc"])) or "input" for err in e.errors())
            logger.warning(f"Invalid hook input ({fields}); skipping")
            return ArchiveResult(message=f"Invalid hook input: {fields}")

        try:
            record = self.load_record(hook_input)
        except MissingInputError as e:
            logger.warning(str(e))
            return ArchiveResult(message=str(e))
        except TranscriptParseError as e:
            logger.error(str(e))
            return ArchiveResult(message=str(e))

        if hook_input.project:
            project_name = safe_directory_name(hook_input.project)
        else:
            project_name = project_name_from_cwd(hook_input.cwd)
        try:
            rendered, saved_path = self.archive(record, project_name, hook_input.source)
        except Exception as e:
            logger.exception(f"{type(e).__name__}: {e}")
            return ArchiveResult(message=f"Failed to process and save transcript: {e}")

        logger.info(f"Successfully saved transcript: {rendered.filename}")
        notify(f"Claude transcript saved: {rendered.filename}", enabled=self.config.notify)
        return ArchiveResult(
            success=True,
            filename=rendered.filename,
            relative_path=rendered.relative_path,
            path=str(saved_path),
            message=f"Saved {rendered.relative_path}",
        )
