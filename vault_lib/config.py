"""
Vault configuration.

Resolved once at startup and passed explicitly to every component; nothing
below the entry points reads the environment.

Sources, highest precedence first:
1. Environment variables (CLAUDE_VAULT_PATH, CLAUDE_WEB_VAULT_PATH, ...)
2. YAML file at $CLAUDE_VAULT_CONFIG (default ~/.config/claude-history-vault/config.yaml)
3. Built-in defaults (iCloud Obsidian vault, ~/.local/var/log, ~/.claude/projects)

Example config.yaml:

    code_vault_path: ~/Obsidian/Claude Code
    web_vault_path: ~/Obsidian/claude.ai
    notify: false
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

OBSIDIAN_VAULT_ROOT = "~/Library/Mobile Documents/iCloud~md~obsidian/Documents/ObsidianVault"
DEFAULT_CONFIG_PATH = "~/.config/claude-history-vault/config.yaml"

# VaultConfig field -> environment variable
ENV_VARS: dict[str, str] = {
    "code_vault_path": "CLAUDE_VAULT_PATH",
    "web_vault_path": "CLAUDE_WEB_VAULT_PATH",
    "log_path": "CLAUDE_LOG_PATH",
    "projects_dir": "CLAUDE_PROJECTS_DIR",
    "conversations_json": "CONVERSATIONS_JSON",
    "test_mode": "CLAUDE_VAULT_MODE",
    "notify": "CLAUDE_VAULT_NOTIFY",
}
CONFIG_PATH_ENV_VAR = "CLAUDE_VAULT_CONFIG"

_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _expand(path: str) -> Path:
    return Path(path).expanduser()


class VaultConfig(BaseModel):
    """Process-wide settings for the archiver and the batch importers."""

    model_config = ConfigDict(frozen=True)

    code_vault_path: Path = Field(default_factory=lambda: _expand(f"{OBSIDIAN_VAULT_ROOT}/Claude Code"))
    web_vault_path: Path = Field(default_factory=lambda: _expand(f"{OBSIDIAN_VAULT_ROOT}/claude.ai"))
    log_path: Path = Field(
        default_factory=lambda: _expand("~/.local/var/log/claude-history-to-obsidian.log")
    )
    projects_dir: Path = Field(default_factory=lambda: _expand("~/.claude/projects"))
    conversations_json: Path = Field(default_factory=lambda: _expand("~/Downloads/conversations.json"))
    test_mode: bool = Field(
        default=False, description='Appends " [test]" to code-vault project directories.'
    )
    notify: bool = Field(default=True, description="Desktop notification after a hook save.")

    @field_validator(
        "code_vault_path", "web_vault_path", "log_path", "projects_dir", "conversations_json",
        mode="before",
    )
    @classmethod
    def _expand_user(cls, value: Any) -> Any:
        if isinstance(value, (str, Path)):
            return Path(value).expanduser()
        return value

    @field_validator("test_mode", mode="before")
    @classmethod
    def _parse_test_mode(cls, value: Any) -> Any:
        # CLAUDE_VAULT_MODE=test is the documented switch
        if isinstance(value, str):
            return value.strip().lower() in {"test", "true", "1", "yes"}
        return value

    @field_validator("notify", mode="before")
    @classmethod
    def _parse_notify(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower() not in _FALSE_VALUES
        return value

    @classmethod
    def load(
        cls,
        environ: Mapping[str, str] | None = None,
        config_path: str | Path | None = None,
    ) -> VaultConfig:
        """Build the configuration from YAML overlay and environment."""
        env = os.environ if environ is None else environ
        if config_path is None:
            config_path = env.get(CONFIG_PATH_ENV_VAR) or DEFAULT_CONFIG_PATH

        values = load_yaml_config(Path(config_path).expanduser())
        for field_name, var in ENV_VARS.items():
            value = env.get(var)
            if value is not None:
                values[field_name] = value
        return cls(**values)


def load_yaml_config(path: Path) -> dict[str, Any]:
    """
    Load configuration values from a YAML file.

    Returns:
        Known config fields, or an empty dict if the file is missing or unusable.
    """
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.warning(f"Ignoring unparseable config file {path}: {e}")
        return {}
    except OSError as e:
        logger.warning(f"Cannot read config file {path}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Ignoring config file {path}: expected a mapping, got {type(data).__name__}")
        return {}

    unknown = sorted(set(data) - set(VaultConfig.model_fields))
    if unknown:
        logger.warning(f"Unknown keys in config file {path}: {', '.join(map(str, unknown))}")
    return {k: v for k, v in data.items() if k in VaultConfig.model_fields}
