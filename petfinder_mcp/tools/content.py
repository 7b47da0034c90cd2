"""Shape upstream payloads into MCP text content blocks."""

from __future__ import annotations

import json
from typing import Any, Dict


def text_block(text: str) -> Dict[str, str]:
    return {"type": "text", "text": text}


def build_tool_result(summary: str, payload: Any) -> Dict[str, Any]:
    """Return a summary line followed by the pretty-printed JSON payload."""
    return {
        "content": [
            text_block(summary),
            text_block(json.dumps(payload, indent=2, ensure_ascii=False)),
        ]
    }


def count_items(payload: Any, key: str) -> int:
    if isinstance(payload, dict):
        items = payload.get(key)
        if isinstance(items, list):
            return len(items)
    return 0
