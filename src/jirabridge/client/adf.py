"""Atlassian Document Format (ADF) to plain text.

The conversion is lossy: only text and hard breaks survive, paragraph
boundaries become newlines and every other leaf node contributes nothing.
"""

from __future__ import annotations

from typing import Any


def _node_text(node: Any) -> str:
    if not isinstance(node, dict):
        return ""
    node_type = node.get("type")
    if node_type == "text":
        return str(node.get("text") or "")
    if node_type == "hardBreak":
        return "\n"
    children = node.get("content")
    if isinstance(children, list):
        return "".join(_node_text(child) for child in children)
    return ""


def adf_to_text(document: Any) -> str:
    """Extract the plain text of an ADF *document*.

    Plain strings (API v2 descriptions) are returned stripped; ``None`` and
    documents without content yield ``""``.
    """
    if isinstance(document, str):
        return document.strip()
    if not isinstance(document, dict):
        return ""
    blocks = document.get("content")
    if not isinstance(blocks, list):
        return ""

    parts: list[str] = []
    for block in blocks:
        text = _node_text(block)
        if isinstance(block, dict) and block.get("type") == "paragraph":
            text += "\n"
        parts.append(text)
    return "".join(parts).strip()
