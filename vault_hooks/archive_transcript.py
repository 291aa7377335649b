#!/usr/bin/env python3
"""
Stop hook: archive the finished session into the Obsidian vault.

Reads the hook payload from stdin:

    {"session_id": "...", "cwd": "...", "transcript_path": "...",
     "source": "code", "project": "..."}

``transcript`` may be embedded instead of ``transcript_path`` (this is what
vault-jsonl-import emits). With ``--jsonl`` every non-empty stdin line is a
separate payload, so importer output can be piped straight in.

Exit codes:
    0: Always. Failures are logged, never surfaced to the host.
"""

import argparse
import json
import logging
import sys
from typing import Any, TextIO

from vault_lib.archive_log import configure_logging
from vault_lib.archiver import TranscriptArchiver
from vault_lib.config import VaultConfig

logger = logging.getLogger(__name__)


def parse_payload(raw: str) -> Any | None:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse hook input JSON: {e}")
        logger.debug(f"Input (first 200 chars): {raw[:200]!r}")
        return None


def read_payloads(stream: TextIO, jsonl: bool = False) -> list[Any]:
    """Parse stdin into hook payloads; unparseable ones are logged and dropped."""
    text = stream.read()
    chunks = [line for line in text.splitlines() if line.strip()] if jsonl else [text]

    payloads = []
    for chunk in chunks:
        payload = parse_payload(chunk)
        if payload is not None:
            payloads.append(payload)
    return payloads


def run(archiver: TranscriptArchiver, stream: TextIO, jsonl: bool = False) -> int:
    """Archive every payload on the stream; returns the number saved."""
    saved = 0
    for payload in read_payloads(stream, jsonl=jsonl):
        result = archiver.run_hook(payload)
        if result.success:
            saved += 1
    return saved


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Archive a Claude session into the Obsidian vault")
    parser.add_argument("--config", help="Path to a YAML config file")
    parser.add_argument(
        "--jsonl", action="store_true", help="Treat each stdin line as a separate hook payload"
    )
    args = parser.parse_args(argv)

    try:
        config = VaultConfig.load(config_path=args.config)
        configure_logging(config)
        run(TranscriptArchiver(config), sys.stdin, jsonl=args.jsonl)
    except Exception as e:
        logger.exception(f"Archive hook failed: {type(e).__name__}: {e}")
        print(f"ERROR: Failed to process and save transcript: {e}", file=sys.stderr)

    # Hooks must return JSON
    print(json.dumps({}))
    sys.exit(0)


if __name__ == "__main__":
    main()
