"""Atlassian Document Format helpers."""

from typing import Any, Dict, List, Optional


def text_to_adf(text: str) -> Dict[str, Any]:
    """Wrap plain text in a single-paragraph ADF document."""
    return {
        "type": "doc",
        "version": 1,
        "content": [
            {
                "type": "paragraph",
                "content": [{"type": "text", "text": text}],
            }
        ],
    }


def adf_to_text(doc: Optional[Dict[str, Any]]) -> str:
    """Flatten an ADF document to plain text, one line per block."""
    if not doc:
        return ""
    if isinstance(doc, str):
        return doc

    lines: List[str] = []
    for block in doc.get("content", []):
        lines.append(_inline_text(block))
    return "\n".join(line for line in lines if line)


def _inline_text(node: Dict[str, Any]) -> str:
    if node.get("type") == "text":
        return node.get("text", "")
    if node.get("type") == "mention":
        return node.get("attrs", {}).get("text", "")
    if node.get("type") == "hardBreak":
        return "\n"
    return "".join(_inline_text(child) for child in node.get("content", []))
