"""
engine package

Headless interactive annotation core: coordinate mapping, zoom, drag and
polyline drawing sessions, the annotation store and its persistence.
Nothing in this package imports Qt.
"""

from engine.mapper import CoordinateMapper, RectMapper, SurfaceGeometry
from engine.zoom import ZoomController
from engine.drag import DragSession
from engine.drawing import PolylineDrawingSession
from engine.store import AnnotationStore, PolylineStore, StoreEvent
from engine.persistence import JsonFileStorage, MemoryStorage, StorageSlot
from engine.controller import AnnotationController, PolylineEditor

__all__ = [
    "CoordinateMapper",
    "RectMapper",
    "SurfaceGeometry",
    "ZoomController",
    "DragSession",
    "PolylineDrawingSession",
    "AnnotationStore",
    "PolylineStore",
    "StoreEvent",
    "JsonFileStorage",
    "MemoryStorage",
    "StorageSlot",
    "AnnotationController",
    "PolylineEditor",
]
