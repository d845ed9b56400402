"""Rendering of Notion block trees to Markdown.

Blocks are first serialized to an HTML fragment and then handed to
``markdownify``, which takes care of lists, tables, code fences and escaping.
Media blocks are rendered as links; their files are never downloaded.
"""

from __future__ import annotations

import logging
from html import escape
from itertools import groupby
from typing import Iterable

from markdownify import markdownify as to_markdown

from notion_mirror.notion.models import Block

logger = logging.getLogger(__name__)

_LIST_TAGS = {
    "bulleted_list_item": "ul",
    "numbered_list_item": "ol",
    "to_do": "ul",
}
_HEADINGS = {"heading_1": "h1", "heading_2": "h2", "heading_3": "h3"}
_MEDIA = ("image", "file", "pdf", "video", "audio")
_LINKS = ("bookmark", "embed", "link_preview")
_CONTAINERS = ("column_list", "column", "synced_block", "template")


def _code_language(element) -> str:
    return element.get("data-language") or ""


class ContentConverter:
    """Translate Notion block trees into Markdown documents."""

    def blocks_to_markdown(self, blocks: Iterable[Block]) -> str:
        html = self.blocks_to_html(blocks)
        markdown = to_markdown(
            html,
            heading_style="ATX",
            strong_em_symbol="*",
            bullets="-",
            code_language_callback=_code_language,
        )
        markdown = markdown.strip()
        return markdown + "\n" if markdown else ""

    def blocks_to_html(self, blocks: Iterable[Block]) -> str:
        parts: list[str] = []
        for list_tag, group in groupby(blocks, key=lambda block: _LIST_TAGS.get(block.type)):
            if list_tag:
                items = "".join(self._render_list_item(block) for block in group)
                parts.append(f"<{list_tag}>{items}</{list_tag}>")
            else:
                parts.extend(self._render_block(block) for block in group)
        return "".join(parts)

    # ------------------------------------------------------------------
    # Block renderers
    # ------------------------------------------------------------------
    def _render_list_item(self, block: Block) -> str:
        text = render_rich_text(block.payload.get("rich_text", []))
        if block.type == "to_do":
            text = ("[x] " if block.payload.get("checked") else "[ ] ") + text
        return f"<li>{text}{self.blocks_to_html(block.children)}</li>"

    def _render_block(self, block: Block) -> str:
        payload = block.payload
        children = self.blocks_to_html(block.children)

        if block.type == "paragraph":
            return f"<p>{render_rich_text(payload.get('rich_text', []))}</p>{children}"
        if block.type in _HEADINGS:
            tag = _HEADINGS[block.type]
            return f"<{tag}>{render_rich_text(payload.get('rich_text', []))}</{tag}>{children}"
        if block.type == "quote":
            return f"<blockquote><p>{render_rich_text(payload.get('rich_text', []))}</p>{children}</blockquote>"
        if block.type == "callout":
            icon = (payload.get("icon") or {}).get("emoji")
            prefix = f"{escape(icon)} " if icon else ""
            text = render_rich_text(payload.get("rich_text", []))
            return f"<blockquote><p>{prefix}{text}</p>{children}</blockquote>"
        if block.type == "toggle":
            return f"<p><strong>{render_rich_text(payload.get('rich_text', []))}</strong></p>{children}"
        if block.type == "code":
            source = "".join(fragment.get("plain_text", "") for fragment in payload.get("rich_text", []))
            language = escape(payload.get("language") or "", quote=True)
            return f'<pre data-language="{language}"><code>{escape(source)}</code></pre>'
        if block.type == "equation":
            return f"<p>$${escape(payload.get('expression', ''))}$$</p>"
        if block.type == "divider":
            return "<hr/>"
        if block.type == "table":
            return self._render_table(block)
        if block.type == "child_page":
            return f"<p><strong>{escape(payload.get('title', ''))}</strong></p>"
        if block.type == "child_database":
            return f"<p><em>{escape(payload.get('title', ''))}</em></p>"
        if block.type in _MEDIA:
            return _render_media(payload)
        if block.type in _LINKS:
            url = payload.get("url", "")
            caption = render_rich_text(payload.get("caption", [])) or escape(url)
            return f'<p><a href="{escape(url, quote=True)}">{caption}</a></p>'
        if block.type in _CONTAINERS:
            return children

        logger.debug("Skipping unsupported block %s of type %s", block.id, block.type)
        return children

    def _render_table(self, block: Block) -> str:
        has_header = block.payload.get("has_column_header", False)
        rows: list[str] = []
        for index, row in enumerate(block.children):
            if row.type != "table_row":
                continue
            tag = "th" if has_header and index == 0 else "td"
            cells = "".join(
                f"<{tag}>{render_rich_text(cell)}</{tag}>" for cell in row.payload.get("cells", [])
            )
            rows.append(f"<tr>{cells}</tr>")
        return f"<table>{''.join(rows)}</table>"


def _render_media(payload: dict) -> str:
    source = payload.get(payload.get("type", "external")) or {}
    url = source.get("url", "")
    caption = render_rich_text(payload.get("caption", [])) or escape(payload.get("name") or url)
    return f'<p><a href="{escape(url, quote=True)}">{caption}</a></p>'


def render_rich_text(fragments: list[dict]) -> str:
    """Serialize Notion rich text fragments to inline HTML."""

    parts: list[str] = []
    for fragment in fragments:
        text = escape(fragment.get("plain_text", ""))
        if not text:
            continue
        annotations = fragment.get("annotations") or {}
        if annotations.get("code"):
            text = f"<code>{text}</code>"
        if annotations.get("bold"):
            text = f"<strong>{text}</strong>"
        if annotations.get("italic"):
            text = f"<em>{text}</em>"
        if annotations.get("strikethrough"):
            text = f"<del>{text}</del>"
        href = fragment.get("href")
        if href:
            text = f'<a href="{escape(href, quote=True)}">{text}</a>'
        parts.append(text)
    return "".join(parts)
