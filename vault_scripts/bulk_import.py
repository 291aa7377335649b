#!/usr/bin/env python3
"""Bulk-import Claude Code history into the vault.

Walks <projects_dir>/<project>/*.jsonl (Claude Code keeps one directory per
project under ~/.claude/projects), groups each file into sessions and
archives every session through the library entry point.

A malformed file or a failing session is reported and counted; it never
stops the rest of the import.

Usage:
    vault-code-import [--projects-dir DIR] [--limit N]

Output:
    📂 <project directory>
      ✓ 20251102-143022 abc12345 → Claude Code/<project>/<file>.md
    ✓ Code import completed: N sessions imported, M failed
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from vault_lib.archive_log import configure_logging
from vault_lib.archiver import TranscriptArchiver
from vault_lib.config import VaultConfig
from vault_lib.errors import ArchiveError, MissingInputError, TranscriptParseError
from vault_lib.identity import short_session_id
from vault_lib.session_grouper import group_file, group_to_record
from vault_lib.vault_paths import project_name_from_cwd

logger = logging.getLogger(__name__)

# Subagent sidechains live next to the main session files
AGENT_FILE_PREFIX = "agent-"


@dataclass
class ImportStats:
    files: int = 0
    imported: int = 0
    failed: int = 0
    failed_files: int = 0


def discover_jsonl_files(projects_dir: Path) -> list[Path]:
    return sorted(
        path
        for path in projects_dir.glob("*/*.jsonl")
        if not path.name.startswith(AGENT_FILE_PREFIX)
    )


def import_file(archiver: TranscriptArchiver, path: Path, stats: ImportStats) -> None:
    print(f"📂 {path.parent.name}")
    stats.files += 1

    try:
        sessions = group_file(path)
    except (MissingInputError, TranscriptParseError) as e:
        logger.error(f"Failed to import {path}: {e}")
        print(f"  ✗ {path.name}: {e}", file=sys.stderr)
        stats.failed_files += 1
        return

    for session_id, group in sessions.items():
        record = group_to_record(session_id, group)
        short_id = short_session_id(session_id)
        try:
            relative_path = archiver.process_transcript(
                project_name_from_cwd(record.cwd), record, source="code"
            )
        except ArchiveError as e:
            stats.failed += 1
            print(f"  ✗ {short_id}: {e}", file=sys.stderr)
            continue

        stats.imported += 1
        print(f"  ✓ {record.first_message_timestamp or '-'} {short_id} → {relative_path}")

    logger.info(f"Imported {len(sessions)} sessions from {path}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Import Claude Code history JSONL files into the vault")
    parser.add_argument("--config", help="Path to a YAML config file")
    parser.add_argument("--projects-dir", type=Path, help="Override CLAUDE_PROJECTS_DIR")
    parser.add_argument("--limit", type=int, default=None, help="Max number of files to import")
    args = parser.parse_args(argv)

    config = VaultConfig.load(config_path=args.config)
    configure_logging(config)

    projects_dir = (args.projects_dir or config.projects_dir).expanduser()
    if not projects_dir.is_dir():
        logger.warning(f"Projects directory not found: {projects_dir}")
        print(f"Error: projects directory not found: {projects_dir}", file=sys.stderr)
        sys.exit(1)

    files = discover_jsonl_files(projects_dir)
    if args.limit is not None:
        files = files[: args.limit]

    archiver = TranscriptArchiver(config)
    stats = ImportStats()
    for path in files:
        import_file(archiver, path, stats)

    print(f"✓ Code import completed: {stats.imported} sessions imported, {stats.failed} failed")
    if stats.failed_files:
        print(f"  {stats.failed_files} files could not be parsed")


if __name__ == "__main__":
    main()
