"""
engine/export.py

Delivers a collection snapshot to the user as JSON text.

Two channels: the clipboard (preferred) and a file in the export
directory. Any clipboard failure falls back to the file. Nothing here
raises to the caller; the outcome is reported in an :class:`ExportResult`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Union

from utils import dump_json

log = logging.getLogger(__name__)

SEGMENTS_FILENAME = "segments.json"
POLYLINES_FILENAME = "polylines.json"
DETAIL_POLYLINES_FILENAME = "wheel-polylines.json"


@dataclass
class ExportResult:
    ok: bool
    message: str
    channel: str = ""          # "clipboard", "file" or "" on failure
    path: Optional[Path] = None


def unique_path(directory: Path, filename: str) -> Path:
    """``directory/filename``, suffixed ``(1)``, ``(2)``... if it exists."""
    path = directory / filename
    stem, suffix = os.path.splitext(filename)
    n = 1
    while path.exists():
        path = directory / f"{stem} ({n}){suffix}"
        n += 1
    return path


def save_json_file(data: Any, directory: Union[str, Path], filename: str, indent: int = 2) -> ExportResult:
    """Write *data* as a new JSON file in *directory*."""
    directory = Path(directory)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        path = unique_path(directory, filename)
        with open(path, "w", encoding="utf-8") as f:
            f.write(dump_json(data, indent))
    except OSError as e:
        log.warning("Could not write export %s: %s", filename, e)
        return ExportResult(False, f"Could not save {filename}: {e}")
    log.info("Exported %s", path)
    return ExportResult(True, f"Saved {path.name} to {directory}", "file", path)


def export_collection(
    data: Any,
    filename: str,
    directory: Union[str, Path],
    copy_to_clipboard: Optional[Callable[[str], None]] = None,
    indent: int = 2,
) -> ExportResult:
    """Copy *data* to the clipboard, or save it as *filename* if that fails.

    Args:
        data: JSON-serializable snapshot.
        filename: File name used for the file channel.
        directory: Export directory for the file channel.
        copy_to_clipboard: Callable placing text on the clipboard; ``None``
            means no clipboard is available.
        indent: JSON indent.
    """
    text = dump_json(data, indent)
    if copy_to_clipboard is not None:
        try:
            copy_to_clipboard(text)
        except Exception as e:
            log.warning("Clipboard copy failed, falling back to file: %s", e)
        else:
            return ExportResult(True, "JSON copied to clipboard.", "clipboard")
    else:
        log.info("No clipboard available; saving %s instead", filename)
    return save_json_file(data, directory, filename, indent)
