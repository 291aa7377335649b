"""Tests for the transcript archiver: hook path and bulk-import path."""

import json
from datetime import datetime, timezone

import pytest

from vault_lib.archiver import TranscriptArchiver, load_transcript
from vault_lib.errors import ArchiveError, MissingInputError, TranscriptParseError
from vault_lib.models import Message, SessionRecord

SESSION_ID = "abc12345-6789-0000-1111-222233334444"


def fixed_clock():
    return datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def archiver(vault_config):
    return TranscriptArchiver(vault_config, clock=fixed_clock)


def _transcript():
    return {
        "messages": [
            {"role": "user", "content": "Implement feature X", "timestamp": "2025-11-02T14:30:22.000Z"},
            {
                "role": "assistant",
                "content": [
                    {"type": "thinking", "thinking": "Plan it"},
                    {"type": "text", "text": "Done"},
                ],
                "timestamp": "2025-11-02T14:30:40.000Z",
            },
        ]
    }


def _hook_payload(**overrides):
    payload = {
        "session_id": SESSION_ID,
        "cwd": "/home/me/src/my-app",
        "transcript": _transcript(),
        "hook_event_name": "Stop",
    }
    payload.update(overrides)
    return payload


def test_run_hook_with_embedded_transcript(archiver, vault_config):
    result = archiver.run_hook(_hook_payload())

    assert result.success
    assert result.filename == "20251102-143022_implement-feature-x_abc12345.md"
    assert result.relative_path == f"Claude Code/my-app/{result.filename}"

    saved = vault_config.code_vault_path / "my-app" / result.filename
    markdown = saved.read_text(encoding="utf-8")
    assert markdown.startswith("# Claude Code Session\n\n**Project**: my-app\n")
    assert "**Session ID**: abc12345-6789-0000-1111-222233334444" in markdown
    assert "**Date**: 2025-11-02 14:30:22 +00:00" in markdown
    assert "### 💭 Thinking\n\nPlan it" in markdown


def test_run_hook_uses_explicit_project_name(archiver, vault_config):
    result = archiver.run_hook(_hook_payload(project="renamed"))

    assert result.relative_path.startswith("Claude Code/renamed/")


def test_run_hook_in_test_mode(vault_config):
    archiver = TranscriptArchiver(vault_config.model_copy(update={"test_mode": True}), clock=fixed_clock)

    result = archiver.run_hook(_hook_payload())

    assert result.relative_path.startswith("Claude Code/my-app [test]/")
    assert (vault_config.code_vault_path / "my-app [test]" / result.filename).is_file()


def test_run_hook_is_idempotent(archiver, vault_config, caplog):
    first = archiver.run_hook(_hook_payload())
    second = archiver.run_hook(_hook_payload())

    assert first.filename == second.filename
    assert len(list((vault_config.code_vault_path / "my-app").iterdir())) == 1
    assert "Overwriting existing file" in caplog.text


def test_run_hook_reads_json_transcript_path(archiver, tmp_path):
    transcript_file = tmp_path / "transcript.json"
    transcript_file.write_text(json.dumps(_transcript()), encoding="utf-8")

    result = archiver.run_hook(_hook_payload(transcript=None, transcript_path=str(transcript_file)))

    assert result.success
    assert result.filename.startswith("20251102-143022_implement-feature-x")


def test_run_hook_reads_jsonl_transcript_path(archiver, write_jsonl):
    path = write_jsonl(
        [
            {"sessionId": "other", "cwd": "/x", "timestamp": "2025-01-01T00:00:00Z", "message": {"role": "user", "content": "Other session"}},
            {"sessionId": SESSION_ID, "cwd": "/x", "timestamp": "2025-11-02T14:30:22Z", "message": {"role": "user", "content": "Wanted session"}},
        ]
    )

    result = archiver.run_hook(_hook_payload(transcript=None, transcript_path=str(path)))

    assert result.success
    assert result.filename == "20251102-143022_wanted-session_abc12345.md"


def test_run_hook_missing_transcript_file(archiver, tmp_path, caplog):
    result = archiver.run_hook(_hook_payload(transcript=None, transcript_path=str(tmp_path / "nope.json")))

    assert not result.success
    assert "Transcript file not found" in result.message
    assert "Transcript file not found" in caplog.text


def test_run_hook_invalid_transcript_json(archiver, tmp_path):
    transcript_file = tmp_path / "transcript.json"
    transcript_file.write_text("{broken", encoding="utf-8")

    result = archiver.run_hook(_hook_payload(transcript=None, transcript_path=str(transcript_file)))

    assert not result.success
    assert "Invalid transcript JSON" in result.message


def test_run_hook_without_any_transcript(archiver):
    result = archiver.run_hook(_hook_payload(transcript=None))

    assert not result.success
    assert "neither transcript nor transcript_path" in result.message


@pytest.mark.parametrize("missing", ["session_id", "cwd"])
def test_run_hook_missing_required_field(archiver, missing, caplog):
    payload = _hook_payload()
    del payload[missing]

    result = archiver.run_hook(payload)

    assert not result.success
    assert missing in result.message
    assert "Invalid hook input" in caplog.text


def test_run_hook_non_object_payload(archiver):
    result = archiver.run_hook(["not", "an", "object"])

    assert not result.success
    assert result.message.startswith("Invalid hook input")


def test_run_hook_write_failure_is_reported_not_raised(vault_config, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file")
    archiver = TranscriptArchiver(vault_config.model_copy(update={"code_vault_path": blocker}), clock=fixed_clock)

    result = archiver.run_hook(_hook_payload())

    assert not result.success
    assert result.message.startswith("Failed to process and save transcript")


def test_process_transcript_returns_relative_path(archiver, vault_config):
    record = SessionRecord.from_transcript(SESSION_ID, "/home/me/src/my-app", _transcript())

    relative_path = archiver.process_transcript("my-app", record)

    assert relative_path == "Claude Code/my-app/20251102-143022_implement-feature-x_abc12345.md"
    assert (vault_config.code_vault_path / "my-app" / "20251102-143022_implement-feature-x_abc12345.md").exists()


def test_process_transcript_web_uses_year_month_directory(archiver, vault_config):
    record = SessionRecord(
        session_id="11111111-2222-3333-4444-555555555555",
        cwd="/tmp/conversations.json",
        messages=(Message(role="user", content="Hello Claude Web", timestamp="2025-11-03T10:00:00Z"),),
    )

    relative_path = archiver.process_transcript("test-project", record, source="web")

    assert relative_path == "claude.ai/202511/20251103-100000_test-project_hello-claude-web.md"
    markdown = (vault_config.web_vault_path / "202511" / "20251103-100000_test-project_hello-claude-web.md").read_text(
        encoding="utf-8"
    )
    assert markdown.startswith("# Claude Web Session\n")


def test_process_transcript_without_timestamp_uses_clock(archiver):
    record = SessionRecord(session_id=SESSION_ID, cwd="/x", messages=(Message(role="user", content="hi"),))

    relative_path = archiver.process_transcript("x", record)

    assert relative_path == "Claude Code/x/20240102-030405_hi_abc12345.md"


def test_process_transcript_raises_archive_error(vault_config, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file")
    archiver = TranscriptArchiver(vault_config.model_copy(update={"code_vault_path": blocker}))
    record = SessionRecord.from_transcript(SESSION_ID, "/x", _transcript())

    with pytest.raises(ArchiveError, match="Failed to process transcript"):
        archiver.process_transcript("x", record)


def test_load_transcript_jsonl_without_sessions(write_jsonl):
    path = write_jsonl([{"type": "summary"}])

    with pytest.raises(MissingInputError):
        load_transcript(path, SESSION_ID, "/x")


def test_load_transcript_non_object_json(tmp_path):
    path = tmp_path / "t.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(TranscriptParseError):
        load_transcript(path, SESSION_ID, "/x")


def test_load_transcript_jsonl_takes_cwd_from_hook(write_jsonl):
    path = write_jsonl([{"sessionId": SESSION_ID, "cwd": "/recorded", "message": {"role": "user", "content": "x"}}])

    record = load_transcript(path, SESSION_ID, "/from-hook")

    assert record.cwd == "/from-hook"
    assert record.session_id == SESSION_ID


def test_run_hook_reports_saved_absolute_path(archiver, vault_config):
    result = archiver.run_hook(_hook_payload())

    assert result.path == str((vault_config.code_vault_path / "my-app" / result.filename).resolve())


@pytest.mark.parametrize("name", ["transcript.json", "transcript.jsonl"])
def test_run_hook_undecodable_transcript_is_reported_not_raised(archiver, tmp_path, name):
    transcript_file = tmp_path / name
    transcript_file.write_bytes(b'{"messages": "caf\xe9"}\n')

    result = archiver.run_hook(_hook_payload(transcript=None, transcript_path=str(transcript_file)))

    assert not result.success
    assert "Invalid UTF-8" in result.message


def test_run_hook_unreadable_transcript_is_missing_input(archiver, tmp_path, monkeypatch):
    transcript_file = tmp_path / "transcript.json"
    transcript_file.write_text("{}", encoding="utf-8")

    def denied(self, *args, **kwargs):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(type(transcript_file), "read_text", denied)

    result = archiver.run_hook(_hook_payload(transcript=None, transcript_path=str(transcript_file)))

    assert not result.success
    assert "Cannot read transcript" in result.message


def test_run_hook_project_with_separator_stays_in_vault(archiver, vault_config):
    result = archiver.run_hook(_hook_payload(project="../escape"))

    assert result.success
    assert result.relative_path.startswith("Claude Code/..-escape/")
    assert (vault_config.code_vault_path / "..-escape" / result.filename).is_file()


def test_run_hook_root_cwd_uses_root_project(archiver, vault_config):
    result = archiver.run_hook(_hook_payload(cwd="/"))

    assert result.success
    assert result.relative_path == f"Claude Code/root/{result.filename}"
    assert (vault_config.code_vault_path / "root" / result.filename).is_file()


@pytest.mark.parametrize("source", ["desktop", None, ""])
def test_run_hook_unknown_source_is_treated_as_code(archiver, source):
    result = archiver.run_hook(_hook_payload(source=source))

    assert result.success
    assert result.relative_path.startswith("Claude Code/my-app/")
