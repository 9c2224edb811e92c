"""
engine/project.py

Project bundle: one JSON file holding every annotation collection.

Format::

    {
      "project": {"name": "...", "description": "..."},
      "segments": [...],
      "polylines": [...],
      "wheelPolylines": [...]
    }

The collection shapes are the same as the local snapshots and the
project API.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from models import Polyline, Segment, polylines_to_json, segments_to_json
from schemas import validate_polylines, validate_segments
from utils import dump_json
from engine.store import AnnotationStore, PolylineStore

log = logging.getLogger(__name__)

UNTITLED = "Untitled project"


class ProjectRejected(ValueError):
    """A project file could not be opened; nothing was applied."""


@dataclass
class ProjectInfo:
    name: str = UNTITLED
    description: str = ""


@dataclass
class ProjectBundle:
    info: ProjectInfo = field(default_factory=ProjectInfo)
    segments: List[Segment] = field(default_factory=list)
    polylines: List[Polyline] = field(default_factory=list)
    wheel_polylines: List[Polyline] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project": {"name": self.info.name, "description": self.info.description},
            "segments": segments_to_json(self.segments),
            "polylines": polylines_to_json(self.polylines),
            "wheelPolylines": polylines_to_json(self.wheel_polylines),
        }


def collect_bundle(info: ProjectInfo, store: AnnotationStore, detail_store: PolylineStore) -> ProjectBundle:
    """Snapshot the live stores into a bundle."""
    return ProjectBundle(
        info=info,
        segments=[s.copy() for s in store.segments],
        polylines=[p.copy() for p in store.polylines.polylines],
        wheel_polylines=[p.copy() for p in detail_store.polylines],
    )


def parse_bundle(raw: Any) -> ProjectBundle:
    """Validate a decoded project document.

    Every collection must validate before anything is returned.

    Raises:
        ProjectRejected: If the document or any collection is invalid.
    """
    if not isinstance(raw, dict):
        raise ProjectRejected("Project file must contain a JSON object.")

    meta = raw.get("project") or {}
    if not isinstance(meta, dict):
        raise ProjectRejected("Project header must be an object.")
    name = meta.get("name")
    description = meta.get("description")
    info = ProjectInfo(
        name=name if isinstance(name, str) and name.strip() else UNTITLED,
        description=description if isinstance(description, str) else "",
    )

    segments = validate_segments(raw.get("segments"))
    if segments is None:
        raise ProjectRejected("Project segments are missing or invalid.")
    polylines = validate_polylines(raw.get("polylines"))
    if polylines is None:
        raise ProjectRejected("Project polylines are missing or invalid.")
    wheel_polylines = validate_polylines(raw.get("wheelPolylines", []))
    if wheel_polylines is None:
        raise ProjectRejected("Project detail polylines are invalid.")

    return ProjectBundle(info, segments, polylines, wheel_polylines)


def read_project(path: Union[str, Path]) -> ProjectBundle:
    """Load and validate a project file.

    Raises:
        ProjectRejected: If the file cannot be read, parsed or validated.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as e:
        raise ProjectRejected(f"Could not read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ProjectRejected(f"{path} is not UTF-8 text: {e}") from e
    except json.JSONDecodeError as e:
        raise ProjectRejected(f"Could not parse JSON: {e}") from e
    return parse_bundle(raw)


def write_project(path: Union[str, Path], bundle: ProjectBundle, indent: int = 2) -> None:
    """Write a project file. ``OSError`` propagates to the caller."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(dump_json(bundle.to_dict(), indent))
    log.info("Saved project %r to %s", bundle.info.name, path)


def apply_bundle(bundle: ProjectBundle, store: AnnotationStore, detail_store: PolylineStore) -> None:
    """Replace every live collection with the bundle's contents."""
    store.import_segments(bundle.segments)
    store.polylines.replace_all(bundle.polylines)
    detail_store.replace_all(bundle.wheel_polylines)
    log.info(
        "Opened project %r: %d segments, %d polylines, %d detail polylines",
        bundle.info.name, len(bundle.segments), len(bundle.polylines), len(bundle.wheel_polylines),
    )
