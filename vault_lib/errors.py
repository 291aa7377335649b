"""Exception hierarchy for the vault archiving pipeline.

Missing input and malformed input are recoverable per unit (a session, a
file, a conversation). Write failures are not: they always propagate.
"""

from __future__ import annotations


class VaultError(Exception):
    pass


class MissingInputError(VaultError):
    """A required file or hook field is absent."""


class TranscriptParseError(VaultError):
    """Structurally broken JSON at a transcript, hook or export boundary."""

    def __init__(self, message: str, line_number: int | None = None):
        if line_number is not None:
            message = f"{message} (line {line_number})"
        super().__init__(message)
        self.line_number = line_number


class VaultWriteError(VaultError):
    """Directory creation or file write in the vault failed."""


class ArchiveError(VaultError):
    """Raised by the library entry point so bulk callers can count failures."""
