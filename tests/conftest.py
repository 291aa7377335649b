"""Shared fixtures: an isolated vault under tmp_path and a controllable local time zone."""

import json
import logging
import time
from pathlib import Path

import pytest

from vault_lib.archive_log import LOGGER_NAMES
from vault_lib.config import VaultConfig


@pytest.fixture(autouse=True)
def utc_local_time(monkeypatch):
    """Run every test with the process time zone set to UTC."""
    monkeypatch.setenv("TZ", "UTC0")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.fixture
def local_tz(monkeypatch):
    """Switch the process time zone, e.g. local_tz("JST-9") for UTC+9."""

    def _set(tz: str) -> None:
        monkeypatch.setenv("TZ", tz)
        time.tzset()

    return _set


@pytest.fixture(autouse=True)
def reset_vault_loggers():
    yield
    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()


@pytest.fixture
def vault_config(tmp_path: Path) -> VaultConfig:
    return VaultConfig(
        code_vault_path=tmp_path / "vault-code",
        web_vault_path=tmp_path / "vault-web",
        log_path=tmp_path / "test.log",
        projects_dir=tmp_path / "projects",
        conversations_json=tmp_path / "conversations.json",
        notify=False,
    )


@pytest.fixture
def write_jsonl(tmp_path: Path):
    """Write records as a JSONL file; returns its path."""

    def _write(records: list, name: str = "sessions.jsonl", directory: Path | None = None) -> Path:
        directory = directory or tmp_path
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
