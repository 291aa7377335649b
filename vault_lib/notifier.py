"""
Desktop notification after a transcript is saved.

macOS only, via the terminal-notifier binary. Non-blocking for the caller:
a missing binary is a silent no-op, and any failure is logged as a warning
without affecting the archive result.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys

logger = logging.getLogger(__name__)

NOTIFICATION_TITLE = "Claude History"
NOTIFIER_BINARY = "terminal-notifier"
NOTIFY_TIMEOUT_SECONDS = 5


def is_macos() -> bool:
    return sys.platform == "darwin"


def notify(message: str, title: str = NOTIFICATION_TITLE, enabled: bool = True) -> bool:
    """
    Show a desktop notification.

    Args:
        message: Notification body
        title: Notification title
        enabled: VaultConfig.notify; False skips without checking anything

    Returns:
        True if the notifier ran successfully
    """
    if not enabled or not is_macos():
        return False

    binary = shutil.which(NOTIFIER_BINARY)
    if binary is None:
        logger.debug(f"{NOTIFIER_BINARY} not installed, skipping notification")
        return False

    try:
        result = subprocess.run(
            [binary, "-title", title, "-message", message],
            check=False,
            capture_output=True,
            text=True,
            timeout=NOTIFY_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning(f"Notification failed: {e}")
        return False

    if result.returncode != 0:
        logger.warning(f"Notification failed (exit {result.returncode}): {result.stderr.strip()}")
        return False
    return True
