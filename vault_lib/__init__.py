"""Claude session archiving into an Obsidian vault.

Pipeline: session_grouper -> content -> identity -> markdown_renderer ->
vault_paths, wired together by archiver.TranscriptArchiver.
"""

from vault_lib.archiver import TranscriptArchiver
from vault_lib.config import VaultConfig

__all__ = ["TranscriptArchiver", "VaultConfig"]
