"""
detail_dialog.py

Detail view opened when a segment is activated in view mode.

Shows the segment's code, title and details above a second drawing
surface (the detail image) with its own polyline collection, its own
edit/view toggle and its own drawing session. The collection is persisted
under its own storage key and is independent of the blueprint's polylines.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from canvas.mapper import ViewMapper
from canvas.scene import BlueprintScene
from canvas.view import BlueprintView
from debug_trace import trace
from engine.controller import PolylineEditor
from engine.export import DETAIL_POLYLINES_FILENAME
from engine.store import PolylineStore
from models import Segment
from properties.dock import ExportCallback, PolylinePanel


class DetailDialog(QDialog):
    """Modal detail view for one segment.

    One instance is kept for the whole session and re-targeted with
    :meth:`show_segment`, so the drawing session and store subscriptions
    are created once.

    Args:
        polylines: The detail-view polyline store.
        export_cb: Export callback shared with the main window.
        image_path: Optional image shown on the detail surface.
        parent: Parent widget.
    """

    def __init__(self, polylines: PolylineStore, export_cb: ExportCallback,
                 image_path: str = "", parent=None):
        super().__init__(parent)
        self.setWindowTitle("Segment details")
        self.setModal(True)
        self.resize(1100, 720)

        self.polylines = polylines
        self.mapper = ViewMapper()
        self.editor = PolylineEditor(polylines, self.mapper)
        if self.polylines.active_id is None and len(self.polylines):
            self.polylines.select(self.polylines.polylines[0].id)

        self.scene = BlueprintScene(polylines, self.editor.drawing)
        self.view = BlueprintView(self.scene, self.editor)
        self.mapper.view = self.view
        if image_path:
            self.scene.set_image(image_path)

        layout = QVBoxLayout(self)

        # Header: segment text + mode toggle
        header = QHBoxLayout()
        text_col = QVBoxLayout()
        self.title_label = QLabel("")
        self.title_label.setStyleSheet("font-weight: 600; font-size: 15px;")
        self.details_label = QLabel("")
        self.details_label.setWordWrap(True)
        self.details_label.setStyleSheet("color: #94a3b8;")
        text_col.addWidget(self.title_label)
        text_col.addWidget(self.details_label)
        header.addLayout(text_col, 1)

        self.mode_label = QLabel("")
        self.edit_btn = QPushButton("Edit")
        self.edit_btn.setCheckable(True)
        header.addWidget(self.mode_label)
        header.addWidget(self.edit_btn)
        layout.addLayout(header)

        # Surface + polyline controls
        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.addWidget(self.view)
        side = QWidget()
        side_layout = QVBoxLayout(side)
        side_layout.setContentsMargins(0, 0, 0, 0)
        self.panel = PolylinePanel(self.editor, export_cb, DETAIL_POLYLINES_FILENAME)
        side_layout.addWidget(self.panel)
        self.save_btn = QPushButton("Save")
        self.save_status = QLabel("")
        side_layout.addWidget(self.save_btn)
        side_layout.addWidget(self.save_status)
        side_layout.addStretch(1)
        splitter.addWidget(side)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 1)
        layout.addWidget(splitter, 1)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Close)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

        self.edit_btn.toggled.connect(self.editor.set_edit_mode)
        self.editor.on_mode_change(self._on_mode_changed)
        self.editor.on_drawing_change(lambda _drawing: self.scene.update_preview())
        self.save_btn.clicked.connect(self._on_save)
        self._on_mode_changed(self.editor.mode)

    def set_image(self, path: str) -> bool:
        ok = self.scene.set_image(path)
        self.view.apply_scale()
        return ok

    def show_segment(self, segment: Segment):
        """Re-target the dialog at *segment* and show it."""
        heading = segment.code if not segment.title else f"{segment.code}  {segment.title}"
        self.title_label.setText(heading)
        self.details_label.setText(segment.details)
        self.details_label.setVisible(bool(segment.details))
        self.save_status.clear()
        if self.polylines.active_id is None and len(self.polylines):
            self.polylines.select(self.polylines.polylines[0].id)
        trace(f"Detail view for {segment.id}", "DETAIL")
        self.open()
        self.view.apply_scale()

    def _on_mode_changed(self, _mode: str):
        edit = self.editor.edit_mode
        self.edit_btn.blockSignals(True)
        self.edit_btn.setChecked(edit)
        self.edit_btn.blockSignals(False)
        self.mode_label.setText("Mode: editing" if edit else "Mode: viewing")
        self.scene.set_edit_mode(edit)

    def _on_save(self):
        if self.polylines.save():
            self.save_status.setText(f"Saved {len(self.polylines)} lines.")
        else:
            self.save_status.setText("Could not save lines; see log.")

    def done(self, result: int):
        # Closing always returns to view mode; drawn points stay.
        self.editor.set_edit_mode(False)
        super().done(result)

    def showEvent(self, event):
        super().showEvent(event)
        self.view.apply_scale()
