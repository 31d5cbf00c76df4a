"""
# Quizcart
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

html_text.py - Render QTI mattext/prompt HTML for form builders.

QTI bodies usually carry question and choice text as escaped HTML
(texttype="text/html"). The parser keeps it verbatim; builders call into
this module when they need Markdown (quiz text files) or plain text (titles,
ledger rows).
"""

from __future__ import annotations

import re

import html2text
from bs4 import BeautifulSoup


def configure_html2text() -> html2text.HTML2Text:
    """html2text converter with Quizcart-friendly settings."""
    h = html2text.HTML2Text()

    h.body_width = 0  # Don't wrap lines
    h.unicode_snob = True
    h.ignore_links = False
    h.ignore_images = False
    h.ignore_emphasis = False

    h.inline_links = True
    h.protect_links = True
    h.wrap_links = False
    h.mark_code = True

    h.ul_item_mark = '-'
    h.emphasis_mark = '*'
    h.strong_mark = '**'
    h.escape_snob = True

    return h


def looks_like_html(text: str) -> bool:
    return bool(re.search(r'<[a-zA-Z/][^>]*>', text))


def html_to_markdown(text: str) -> str:
    """Convert HTML to Markdown; text without markup is returned stripped."""
    if not text or not text.strip():
        return ""
    if not looks_like_html(text):
        return text.strip()

    markdown_text = configure_html2text().handle(text)

    # html2text marks code blocks as [code]...[/code]
    markdown_text = re.sub(
        r'\[code\](.*?)\[/code\]',
        lambda m: f"```\n{m.group(1).strip()}\n```",
        markdown_text,
        flags=re.DOTALL,
    )
    markdown_text = re.sub(r'\n{3,}', '\n\n', markdown_text)
    return markdown_text.strip()


def html_to_plain_text(text: str) -> str:
    """Strip markup and collapse whitespace, for one-line titles."""
    if not text:
        return ""
    if looks_like_html(text):
        text = BeautifulSoup(text, "html.parser").get_text(" ")
    return re.sub(r'\s+', ' ', text).strip()
