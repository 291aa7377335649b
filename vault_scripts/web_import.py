#!/usr/bin/env python3
"""Import a claude.ai data export (conversations.json) into the web vault.

Each conversation is saved as <web_vault>/<YYYYMM>/<timestamp>_<name>_<slug>.md.
Conversations without messages are skipped.

Usage:
    vault-web-import [--conversations PATH]

Defaults to $CONVERSATIONS_JSON, then ~/Downloads/conversations.json.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from vault_lib.archive_log import configure_logging
from vault_lib.archiver import TranscriptArchiver
from vault_lib.config import VaultConfig
from vault_lib.errors import ArchiveError, MissingInputError, TranscriptParseError
from vault_lib.web_export import conversation_project_name, conversation_to_record, load_conversations

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 10


def import_conversations(
    archiver: TranscriptArchiver, conversations: list[Any], source_path: str
) -> tuple[int, int, int]:
    """Archive every conversation.

    Returns:
        (processed, skipped, failed)
    """
    processed = skipped = failed = 0
    total = len(conversations)

    for index, conversation in enumerate(conversations, start=1):
        record = conversation_to_record(conversation, source_path) if isinstance(conversation, dict) else None
        if record is None:
            skipped += 1
            logger.info(f"Skipping empty conversation #{index}")
        else:
            try:
                relative_path = archiver.process_transcript(
                    conversation_project_name(conversation), record, source="web"
                )
            except ArchiveError as e:
                failed += 1
                print(f"  ✗ {record.session_id}: {e}", file=sys.stderr)
            else:
                processed += 1
                print(f"  ✓ {relative_path}")

        if index % PROGRESS_INTERVAL == 0:
            print(f"  ... {index}/{total} conversations")

    return processed, skipped, failed


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Import claude.ai conversations.json into the vault")
    parser.add_argument("--config", help="Path to a YAML config file")
    parser.add_argument("--conversations", type=Path, help="Override CONVERSATIONS_JSON")
    args = parser.parse_args(argv)

    config = VaultConfig.load(config_path=args.config)
    configure_logging(config)

    path = (args.conversations or config.conversations_json).expanduser()
    print(f"📁 Reading: {path}")

    try:
        conversations = load_conversations(path)
    except MissingInputError as e:
        logger.warning(str(e))
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except TranscriptParseError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    processed, skipped, failed = import_conversations(TranscriptArchiver(config), conversations, str(path))

    print(f"✓ Web import completed: {processed} conversations processed")
    if skipped or failed:
        print(f"  {skipped} skipped, {failed} failed")


if __name__ == "__main__":
    main()
