"""
Content normalization for transcript messages.

A message's content arrives either as a plain string or as a list of
blocks. Blocks are structured objects tagged with a ``type`` (text,
thinking, input, signature, ...) or, in some exports, bare strings.

Raw content is parsed once into a tagged union:

    PlainText | BlockList
    BlockList.blocks: TextBlock | ThinkingBlock | InputBlock | BareText | IgnoredBlock

and every consumer (rendering, slug extraction, re-serialization) dispatches
over those classes. Unknown shapes become IgnoredBlock instead of raising.
"""

from __future__ import annotations

import json
from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict

# Exports store newlines as the two characters backslash + n
LITERAL_NEWLINE = "\\n"


class _ContentModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class TextBlock(_ContentModel):
    type: Literal["text"] = "text"
    text: str = ""


class ThinkingBlock(_ContentModel):
    type: Literal["thinking"] = "thinking"
    text: str = ""


class InputBlock(_ContentModel):
    type: Literal["input"] = "input"
    text: str = ""


class BareText(_ContentModel):
    """A plain string element inside a block list."""

    type: Literal["bare"] = "bare"
    text: str = ""


class IgnoredBlock(_ContentModel):
    """Signature blocks and any block type we do not render."""

    type: str = "unknown"


ContentBlock: TypeAlias = TextBlock | ThinkingBlock | InputBlock | BareText | IgnoredBlock


class PlainText(_ContentModel):
    kind: Literal["plain"] = "plain"
    text: str = ""


class BlockList(_ContentModel):
    kind: Literal["blocks"] = "blocks"
    blocks: tuple[ContentBlock, ...] = ()


MessageContent: TypeAlias = PlainText | BlockList

# Renderable block class -> (emoji, label)
BLOCK_HEADERS: dict[type, tuple[str, str]] = {
    TextBlock: ("💬", "Response"),
    ThinkingBlock: ("💭", "Thinking"),
    InputBlock: ("⌨️", "Input"),
}


def unescape_newlines(text: str) -> str:
    """Turn literal ``\\n`` sequences into real newlines."""
    return text.replace(LITERAL_NEWLINE, "\n")


def _coerce_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def parse_block(raw: Any) -> ContentBlock:
    """Parse one element of a content list into a ContentBlock."""
    if isinstance(raw, str):
        return BareText(text=raw)
    if not isinstance(raw, dict):
        return IgnoredBlock(type=type(raw).__name__)

    block_type = raw.get("type")
    if block_type == "text":
        return TextBlock(text=_coerce_text(raw.get("text")))
    if block_type == "thinking":
        return ThinkingBlock(text=_coerce_text(raw.get("thinking")))
    if block_type == "input":
        return InputBlock(text=_coerce_text(raw.get("text")))
    return IgnoredBlock(type=_coerce_text(block_type) or "unknown")


def parse_content(raw: Any) -> MessageContent:
    """Parse a raw ``content`` value into PlainText or BlockList.

    Already-parsed content is returned unchanged, so the function is safe to
    use as a pydantic ``before`` validator.
    """
    if isinstance(raw, (PlainText, BlockList)):
        return raw
    if raw is None:
        return PlainText()
    if isinstance(raw, str):
        return PlainText(text=raw)
    if isinstance(raw, (list, tuple)):
        return BlockList(blocks=tuple(parse_block(item) for item in raw))
    if isinstance(raw, dict):
        return PlainText(text=json.dumps(raw, ensure_ascii=False))
    return PlainText(text=str(raw))


def format_block(block: ContentBlock) -> str | None:
    """Render a single block as a labelled sub-section, or None to drop it."""
    header = BLOCK_HEADERS.get(type(block))
    if header is None:
        return None
    emoji, label = header
    return "\n".join([f"### {emoji} {label}", "", unescape_newlines(block.text), ""])


def normalize_content(content: MessageContent) -> list[str]:
    """Return the ordered renderable segments of a message's content."""
    if isinstance(content, PlainText):
        return [unescape_newlines(content.text)]

    segments = []
    for block in content.blocks:
        segment = format_block(block)
        if segment is not None:
            segments.append(segment)
    return segments


def render_content(content: MessageContent) -> str:
    return "\n".join(normalize_content(content))


def name_text(content: MessageContent) -> str:
    """Text used to name a session: plain text, or text and bare-string blocks."""
    if isinstance(content, PlainText):
        return content.text
    parts = [block.text for block in content.blocks if isinstance(block, (TextBlock, BareText))]
    return " ".join(parts)


def content_to_raw(content: MessageContent) -> str | list[Any]:
    """Serialize parsed content back into the transcript JSON shape."""
    if isinstance(content, PlainText):
        return content.text

    raw: list[Any] = []
    for block in content.blocks:
        if isinstance(block, BareText):
            raw.append(block.text)
        elif isinstance(block, ThinkingBlock):
            raw.append({"type": "thinking", "thinking": block.text})
        elif isinstance(block, (TextBlock, InputBlock)):
            raw.append({"type": block.type, "text": block.text})
        else:
            raw.append({"type": block.type})
    return raw
