"""Render a session as a canonical Markdown document.

Rendering is a pure function of its arguments: the Date line arrives already
resolved, so the same session always renders byte-identically.
"""

from __future__ import annotations

from collections.abc import Sequence

from vault_lib.content import render_content
from vault_lib.identity import UNKNOWN_DATE
from vault_lib.models import Message, SessionRecord, Source

SESSION_TITLES: dict[str, str] = {
    "code": "Claude Code Session",
    "web": "Claude Web Session",
}

ROLE_HEADERS: dict[str, str] = {
    "user": "## 👤 User",
    "assistant": "## 🤖 Claude",
}

RULE = "---"


def render_message(message: Message) -> list[str] | None:
    """Lines for one message section, or None when the message is skipped."""
    if message.signature:
        return None
    header = ROLE_HEADERS.get(message.role)
    if header is None:
        return None
    return [header, "", render_content(message.content), "", RULE, ""]


def render_markdown(
    project_name: str,
    cwd: str,
    session_id: str,
    messages: Sequence[Message],
    source: Source = "code",
    date_line: str = UNKNOWN_DATE,
) -> str:
    output = [
        f"# {SESSION_TITLES.get(source, SESSION_TITLES['code'])}",
        "",
        f"**Project**: {project_name}",
        f"**Path**: {cwd}",
        f"**Session ID**: {session_id}",
        f"**Date**: {date_line}",
        "",
        RULE,
        "",
    ]

    for message in messages:
        section = render_message(message)
        if section is not None:
            output.extend(section)

    return "\n".join(output)


def render_session(
    record: SessionRecord, project_name: str, source: Source, date_line: str
) -> str:
    return render_markdown(
        project_name=project_name,
        cwd=record.cwd,
        session_id=record.session_id,
        messages=record.messages,
        source=source,
        date_line=date_line,
    )
