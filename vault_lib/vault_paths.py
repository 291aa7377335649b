"""Vault path resolution - where a rendered session lands.

Layout:
    <code_vault>/<project>[ [test]]/<timestamp>_<slug>_<shortid>.md
    <web_vault>/<YYYYMM>/<timestamp>_<project>_<slug>.md

Names are deterministic, so saving over an existing file is the normal
re-import case: it is logged as a warning, never treated as an error.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from vault_lib.config import VaultConfig
from vault_lib.errors import VaultWriteError
from vault_lib.models import Source

logger = logging.getLogger(__name__)

# First path component of vault-relative paths, per source
VAULT_SUBDIRS: dict[str, str] = {
    "code": "Claude Code",
    "web": "claude.ai",
}
TEST_MODE_SUFFIX = " [test]"
YEAR_MONTH_LENGTH = 6
ROOT_PROJECT_NAME = "root"

_PATH_SEPARATORS = re.compile(r"[/\\]+")


def safe_directory_name(name: str) -> str:
    """A single path component: separators become '-', '.'/'..'/empty become "root"."""
    cleaned = _PATH_SEPARATORS.sub("-", name).strip()
    if cleaned.strip("-") in ("", ".", ".."):
        return ROOT_PROJECT_NAME
    return cleaned


def project_name_from_cwd(cwd: str) -> str:
    """Project name is the last component of the working directory."""
    return safe_directory_name(Path(cwd).name)


class VaultPathResolver:
    """Computes and prepares destination directories inside the vaults."""

    def __init__(self, config: VaultConfig):
        self.config = config

    def vault_root(self, source: Source) -> Path:
        return self.config.web_vault_path if source == "web" else self.config.code_vault_path

    def directory_component(self, project_name: str, source: Source, timestamp: str | None) -> str:
        """``YYYYMM`` for web sessions with a known timestamp, else the project name."""
        project_name = safe_directory_name(project_name)
        if source == "web":
            if timestamp:
                # Local-time key "20251103-233022" -> "202511"
                return timestamp[:YEAR_MONTH_LENGTH]
            return project_name
        if self.config.test_mode:
            return f"{project_name}{TEST_MODE_SUFFIX}"
        return project_name

    def destination_dir(self, project_name: str, source: Source, timestamp: str | None) -> Path:
        return self.vault_root(source) / self.directory_component(project_name, source, timestamp)

    def relative_path(
        self, project_name: str, source: Source, timestamp: str | None, filename: str
    ) -> str:
        component = self.directory_component(project_name, source, timestamp)
        return "/".join([VAULT_SUBDIRS[source], component, filename])

    def ensure_directory(self, directory: Path) -> Path:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create directory {directory}: {e}")
            raise VaultWriteError(f"Cannot create vault directory {directory}: {e}") from e
        logger.info(f"Ensured directory exists: {directory}")
        return directory

    def save(self, directory: Path, filename: str, content: str) -> Path:
        """Write content to directory/filename, creating the directory if needed."""
        self.ensure_directory(directory)
        filepath = directory / filename

        if filepath.exists():
            logger.warning(f"Overwriting existing file: {filepath}")

        try:
            filepath.write_text(content, encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to save file {filepath}: {e}")
            raise VaultWriteError(f"Cannot write {filepath}: {e}") from e

        logger.info(f"Saved markdown to: {filepath}")
        return filepath.resolve()
