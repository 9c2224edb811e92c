"""
utils.py

Utility functions for the Blueprint Annotator.
"""

from __future__ import annotations

import json
import re
from typing import Any


def strip_markdown_fences(s: str) -> str:
    """
    Strip markdown code fences from a string.

    Handles formats like:
    - ```json ... ```
    - ``` ... ```

    Args:
        s: The string potentially wrapped in markdown fences

    Returns:
        The string with markdown fences removed
    """
    ss = (s or "").strip()

    # Pattern matches: ```<optional language>\n<content>\n```
    pattern = r'^```(?:\w+)?\s*\n?(.*?)\n?```\s*$'
    match = re.match(pattern, ss, re.DOTALL)
    if match:
        return match.group(1).strip()

    return ss


def dump_json(data: Any, indent: int = 2) -> str:
    """Serialize *data* the way snapshots and exports are written."""
    return json.dumps(data, indent=indent, ensure_ascii=False)


def format_percent(value: float) -> str:
    """Short display form of a percent value, e.g. ``12.35%``."""
    return f"{value:.2f}".rstrip("0").rstrip(".") + "%"
