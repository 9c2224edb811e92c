"""
properties package

Edit-mode sidebar for segments, polylines and import/export.
"""

from properties.dock import AnnotationDock, ImportExportPanel, PolylinePanel, SegmentPanel

__all__ = ["AnnotationDock", "ImportExportPanel", "PolylinePanel", "SegmentPanel"]
