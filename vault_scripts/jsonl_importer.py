#!/usr/bin/env python3
"""Convert Claude Code history JSONL files into hook payloads.

Reads JSONL file paths from stdin (one per line), groups each file's records
by session and prints one hook payload per session, with the transcript
embedded and its first-message timestamp precomputed.

Usage:
    find ~/.claude/projects -name '*.jsonl' | vault-jsonl-import | vault-archive-hook --jsonl

Output:
    one JSON object per line:
    {"session_id": ..., "transcript": {...}, "cwd": ..., "permission_mode": "default",
     "hook_event_name": "Stop"}
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, TextIO

from vault_lib.archive_log import configure_logging
from vault_lib.config import VaultConfig
from vault_lib.errors import MissingInputError, TranscriptParseError
from vault_lib.session_grouper import group_file, group_to_record

logger = logging.getLogger(__name__)


def build_hook_payload(session_id: str, transcript: dict[str, Any], cwd: str) -> dict[str, Any]:
    return {
        "session_id": session_id,
        "transcript": transcript,
        "cwd": cwd,
        "permission_mode": "default",
        "hook_event_name": "Stop",
    }


def import_from_jsonl(path: Path, out: TextIO) -> int:
    """Emit payloads for every session in one file; returns the session count.

    A missing or malformed file is logged and yields no payloads.
    """
    try:
        sessions = group_file(path)
    except MissingInputError as e:
        logger.warning(str(e))
        return 0
    except TranscriptParseError as e:
        logger.error(f"Failed to import {path}: {e}")
        return 0

    for session_id, group in sessions.items():
        record = group_to_record(session_id, group)
        payload = build_hook_payload(session_id, record.to_transcript(), record.cwd)
        out.write(json.dumps(payload, ensure_ascii=False) + "\n")

    logger.info(f"Imported {len(sessions)} sessions from {path}")
    return len(sessions)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Emit hook payloads for JSONL history files read from stdin")
    parser.add_argument("--config", help="Path to a YAML config file")
    args = parser.parse_args(argv)

    config = VaultConfig.load(config_path=args.config)
    configure_logging(config)

    paths = [line.strip() for line in sys.stdin if line.strip()]
    if not paths:
        logger.info("No JSONL files to process")
        return

    for path in paths:
        import_from_jsonl(Path(path).expanduser(), sys.stdout)


if __name__ == "__main__":
    main()
