"""
properties/dock.py

Edit-mode sidebar: segment list and form, polyline controls, and the
import/export box.

Widgets never change annotation state directly; every edit is sent to the
store (or the controller), and the widgets refresh from store events.
"""

from __future__ import annotations

from typing import Callable, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QComboBox,
    QDockWidget,
    QDoubleSpinBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from models import COLORS, DASH_STYLES, Segment
from engine.controller import AnnotationController, PolylineEditor
from engine.export import POLYLINES_FILENAME, SEGMENTS_FILENAME
from engine.store import StoreEvent
from utils import format_percent

# (data, filename, to_clipboard) -> user message
ExportCallback = Callable[[object, str, bool], str]


def _set_combo(combo: QComboBox, value: str):
    combo.blockSignals(True)
    idx = combo.findText(value)
    combo.setCurrentIndex(idx if idx >= 0 else 0)
    combo.blockSignals(False)


def _percent_spin() -> QDoubleSpinBox:
    spin = QDoubleSpinBox()
    spin.setRange(0.0, 100.0)
    spin.setDecimals(2)
    spin.setSingleStep(0.1)
    spin.setSuffix(" %")
    spin.setKeyboardTracking(False)
    return spin


# =============================================================================
# Segments
# =============================================================================

class SegmentPanel(QWidget):
    """
    Segment list with add/delete and a form for the selected segment.

    Text fields apply on editingFinished; numeric fields and the colour
    apply on change.
    """

    def __init__(self, controller: AnnotationController, parent=None):
        super().__init__(parent)
        self.controller = controller
        self.store = controller.store

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.list = QListWidget()
        self.list.setMinimumHeight(120)
        layout.addWidget(self.list)

        buttons = QHBoxLayout()
        self.add_btn = QPushButton("Add segment")
        self.delete_btn = QPushButton("Delete")
        buttons.addWidget(self.add_btn)
        buttons.addWidget(self.delete_btn)
        layout.addLayout(buttons)

        form = QFormLayout()
        self.code_edit = QLineEdit()
        self.title_edit = QLineEdit()
        self.details_edit = QPlainTextEdit()
        self.details_edit.setFixedHeight(70)
        self.top_spin = _percent_spin()
        self.left_spin = _percent_spin()
        self.width_spin = _percent_spin()
        self.height_spin = _percent_spin()
        self.color_combo = QComboBox()
        self.color_combo.addItems(COLORS)
        form.addRow("Code:", self.code_edit)
        form.addRow("Title:", self.title_edit)
        form.addRow("Details:", self.details_edit)
        form.addRow("Top:", self.top_spin)
        form.addRow("Left:", self.left_spin)
        form.addRow("Width:", self.width_spin)
        form.addRow("Height:", self.height_spin)
        form.addRow("Colour:", self.color_combo)
        layout.addLayout(form)

        self._form_widgets = (
            self.code_edit, self.title_edit, self.details_edit,
            self.top_spin, self.left_spin, self.width_spin, self.height_spin,
            self.color_combo, self.delete_btn,
        )

        self._connect_signals()
        self.store.subscribe(self._on_store_event)
        self.refresh_list()
        self.refresh_form()

    def _connect_signals(self):
        self.list.currentItemChanged.connect(self._on_list_selection)
        self.add_btn.clicked.connect(self.controller.add_segment)
        self.delete_btn.clicked.connect(self._on_delete)

        self.code_edit.editingFinished.connect(lambda: self._patch(code=self.code_edit.text()))
        self.title_edit.editingFinished.connect(lambda: self._patch(title=self.title_edit.text()))
        self.details_edit.textChanged.connect(lambda: self._patch(details=self.details_edit.toPlainText()))
        self.top_spin.valueChanged.connect(lambda v: self._patch(top=v))
        self.left_spin.valueChanged.connect(lambda v: self._patch(left=v))
        self.width_spin.valueChanged.connect(lambda v: self._patch(width=v))
        self.height_spin.valueChanged.connect(lambda v: self._patch(height=v))
        self.color_combo.currentTextChanged.connect(lambda v: self._patch(color=v))

    def _patch(self, **fields):
        segment_id = self.store.selected_segment_id
        if segment_id is not None:
            self.store.update_segment(segment_id, fields)

    def _on_delete(self):
        segment_id = self.store.selected_segment_id
        if segment_id is not None:
            self.controller.delete_segment(segment_id)

    def _on_list_selection(self, current: Optional[QListWidgetItem], _previous):
        if current is not None:
            self.store.select_segment(current.data(Qt.ItemDataRole.UserRole))

    @staticmethod
    def _list_text(segment: Segment) -> str:
        title = f" {segment.title}" if segment.title else ""
        return f"{segment.code}{title}  ({format_percent(segment.left)}, {format_percent(segment.top)})"

    def refresh_list(self):
        self.list.blockSignals(True)
        self.list.clear()
        for segment in self.store.segments:
            item = QListWidgetItem(self._list_text(segment))
            item.setData(Qt.ItemDataRole.UserRole, segment.id)
            self.list.addItem(item)
            if segment.id == self.store.selected_segment_id:
                self.list.setCurrentItem(item)
        self.list.blockSignals(False)

    def refresh_form(self):
        segment = self.store.selected_segment
        for w in self._form_widgets:
            w.blockSignals(True)
        try:
            if segment is None:
                self.code_edit.clear()
                self.title_edit.clear()
                self.details_edit.clear()
                for spin in (self.top_spin, self.left_spin, self.width_spin, self.height_spin):
                    spin.setValue(0.0)
            else:
                # Leave a field alone while the user is typing in it
                if not self.code_edit.hasFocus():
                    self.code_edit.setText(segment.code)
                if not self.title_edit.hasFocus():
                    self.title_edit.setText(segment.title)
                if not self.details_edit.hasFocus():
                    self.details_edit.setPlainText(segment.details)
                self.top_spin.setValue(segment.top)
                self.left_spin.setValue(segment.left)
                self.width_spin.setValue(segment.width)
                self.height_spin.setValue(segment.height)
                _set_combo(self.color_combo, segment.color)
        finally:
            for w in self._form_widgets:
                w.blockSignals(False)
        for w in self._form_widgets:
            w.setEnabled(segment is not None)

    def _on_store_event(self, event: StoreEvent):
        if event in (StoreEvent.SEGMENTS_CHANGED, StoreEvent.SEGMENT_SELECTED):
            self.refresh_list()
            self.refresh_form()


# =============================================================================
# Polylines
# =============================================================================

class PolylinePanel(QWidget):
    """
    Drawing controls and attribute form for one polyline collection.

    Works with any PolylineEditor, so the detail view reuses it for its own
    collection.
    """

    def __init__(self, editor: PolylineEditor, export_cb: Optional[ExportCallback] = None,
                 export_filename: str = POLYLINES_FILENAME, parent=None):
        super().__init__(parent)
        self.editor = editor
        self.polylines = editor.polylines
        self.export_cb = export_cb
        self.export_filename = export_filename

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        draw_row = QHBoxLayout()
        self.start_btn = QPushButton("Start line")
        self.finish_btn = QPushButton("Finish line")
        self.clear_btn = QPushButton("Clear all")
        draw_row.addWidget(self.start_btn)
        draw_row.addWidget(self.finish_btn)
        draw_row.addWidget(self.clear_btn)
        layout.addLayout(draw_row)

        self.hint = QLabel("")
        self.hint.setWordWrap(True)
        layout.addWidget(self.hint)

        form = QFormLayout()
        self.active_combo = QComboBox()
        self.label_edit = QLineEdit()
        self.description_edit = QPlainTextEdit()
        self.description_edit.setFixedHeight(60)
        self.color_combo = QComboBox()
        self.color_combo.addItems(COLORS)
        self.width_spin = QDoubleSpinBox()
        self.width_spin.setRange(0.1, 5.0)
        self.width_spin.setDecimals(2)
        self.width_spin.setSingleStep(0.1)
        self.width_spin.setKeyboardTracking(False)
        self.dash_combo = QComboBox()
        self.dash_combo.addItems(DASH_STYLES)
        self.points_label = QLabel("0")
        form.addRow("Line:", self.active_combo)
        form.addRow("Label:", self.label_edit)
        form.addRow("Description:", self.description_edit)
        form.addRow("Colour:", self.color_combo)
        form.addRow("Width:", self.width_spin)
        form.addRow("Dash:", self.dash_combo)
        form.addRow("Points:", self.points_label)
        layout.addLayout(form)

        self.delete_btn = QPushButton("Delete line")
        layout.addWidget(self.delete_btn)

        if export_cb is not None:
            export_row = QHBoxLayout()
            self.copy_btn = QPushButton("Copy JSON")
            self.download_btn = QPushButton("Download JSON")
            export_row.addWidget(self.copy_btn)
            export_row.addWidget(self.download_btn)
            layout.addLayout(export_row)
            self.copy_btn.clicked.connect(lambda: self._export(True))
            self.download_btn.clicked.connect(lambda: self._export(False))

        self._form_widgets = (
            self.active_combo, self.label_edit, self.description_edit,
            self.color_combo, self.width_spin, self.dash_combo, self.delete_btn,
        )

        self._connect_signals()
        self.polylines.subscribe(self._on_store_event)
        editor.on_mode_change(lambda _mode: self.refresh())
        editor.on_drawing_change(lambda _drawing: self.refresh())
        self.refresh()

    def _connect_signals(self):
        self.start_btn.clicked.connect(self._on_start)
        self.finish_btn.clicked.connect(self._on_finish)
        self.clear_btn.clicked.connect(self._on_clear)
        self.delete_btn.clicked.connect(self._on_delete)
        self.active_combo.currentIndexChanged.connect(self._on_active_changed)
        self.label_edit.editingFinished.connect(lambda: self._patch(label=self.label_edit.text()))
        self.description_edit.textChanged.connect(
            lambda: self._patch(description=self.description_edit.toPlainText()))
        self.color_combo.currentTextChanged.connect(lambda v: self._patch(color=v))
        self.width_spin.valueChanged.connect(lambda v: self._patch(stroke_width=v))
        self.dash_combo.currentTextChanged.connect(lambda v: self._patch(dash_style=v))

    def _current_id(self) -> Optional[str]:
        active = self.polylines.active
        if active is not None:
            return active.id
        first = next(iter(self.polylines), None)
        return first.id if first is not None else None

    def _patch(self, **fields):
        polyline_id = self._current_id()
        if polyline_id is not None:
            self.polylines.update(polyline_id, fields)

    def _on_start(self):
        self.editor.start_drawing()

    def _on_finish(self):
        self.editor.finish_drawing()

    def _on_clear(self):
        if not len(self.polylines):
            return
        answer = QMessageBox.question(self, "Clear lines", "Remove every line?")
        if answer == QMessageBox.StandardButton.Yes:
            self.editor.clear_polylines()

    def _on_delete(self):
        polyline = self.polylines.get(self._current_id())
        if polyline is None:
            return
        answer = QMessageBox.question(self, "Delete line", f"Delete \"{polyline.label or polyline.id}\"?")
        if answer == QMessageBox.StandardButton.Yes:
            self.editor.delete_polyline(polyline.id)

    def _on_active_changed(self, index: int):
        if index >= 0:
            self.polylines.select(self.active_combo.itemData(index))

    def _export(self, to_clipboard: bool):
        message = self.export_cb(self.polylines.snapshot(), self.export_filename, to_clipboard)
        self.hint.setText(message)

    def refresh(self):
        edit = self.editor.edit_mode
        drawing = self.editor.drawing.is_drawing
        self.start_btn.setEnabled(edit and not drawing)
        self.finish_btn.setEnabled(edit and drawing)
        self.clear_btn.setEnabled(edit and len(self.polylines) > 0)
        if drawing:
            self.hint.setText("Click on the image to add points. Enter or Esc finishes the line.")
        elif not self.hint.text() or self.hint.text().startswith("Click on the image"):
            self.hint.setText("")

        current_id = self._current_id()
        self.active_combo.blockSignals(True)
        self.active_combo.clear()
        for polyline in self.polylines:
            self.active_combo.addItem(polyline.label or polyline.id, polyline.id)
            if polyline.id == current_id:
                self.active_combo.setCurrentIndex(self.active_combo.count() - 1)
        self.active_combo.blockSignals(False)

        polyline = self.polylines.get(current_id)
        for w in self._form_widgets:
            w.blockSignals(True)
        try:
            if polyline is not None:
                if not self.label_edit.hasFocus():
                    self.label_edit.setText(polyline.label)
                if not self.description_edit.hasFocus():
                    self.description_edit.setPlainText(polyline.description)
                _set_combo(self.color_combo, polyline.color)
                self.width_spin.setValue(polyline.stroke_width)
                _set_combo(self.dash_combo, polyline.dash_style)
                self.points_label.setText(str(len(polyline.points)))
            else:
                self.label_edit.clear()
                self.description_edit.clear()
                self.points_label.setText("0")
        finally:
            for w in self._form_widgets:
                w.blockSignals(False)
        for w in self._form_widgets:
            w.setEnabled(edit and polyline is not None)

    def _on_store_event(self, event: StoreEvent):
        if event in (StoreEvent.POLYLINES_CHANGED, StoreEvent.POLYLINE_SELECTED):
            self.refresh()


# =============================================================================
# Import / export
# =============================================================================

class ImportExportPanel(QWidget):
    """Paste-to-import box plus segment export and reset."""

    def __init__(self, controller: AnnotationController, export_cb: ExportCallback, parent=None):
        super().__init__(parent)
        self.controller = controller
        self.export_cb = export_cb

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.paste_edit = QPlainTextEdit()
        self.paste_edit.setPlaceholderText('[{"id": "seg-1", "code": "A1", "top": 10, "left": 10, ...}]')
        self.paste_edit.setFixedHeight(110)
        layout.addWidget(self.paste_edit)

        row = QHBoxLayout()
        self.import_btn = QPushButton("Import")
        self.copy_btn = QPushButton("Copy JSON")
        self.download_btn = QPushButton("Download JSON")
        row.addWidget(self.import_btn)
        row.addWidget(self.copy_btn)
        row.addWidget(self.download_btn)
        layout.addLayout(row)

        self.reset_btn = QPushButton("Reset to defaults")
        layout.addWidget(self.reset_btn)

        self.message = QLabel("")
        self.message.setWordWrap(True)
        layout.addWidget(self.message)

        self.import_btn.clicked.connect(self._on_import)
        self.copy_btn.clicked.connect(lambda: self._export(True))
        self.download_btn.clicked.connect(lambda: self._export(False))
        self.reset_btn.clicked.connect(self._on_reset)

    def _on_import(self):
        ok, message = self.controller.import_text(self.paste_edit.toPlainText())
        self.message.setStyleSheet("color: #6ee7b7;" if ok else "color: #fca5a5;")
        self.message.setText(message)
        if ok:
            self.paste_edit.clear()

    def _export(self, to_clipboard: bool):
        message = self.export_cb(self.controller.store.segments_snapshot(), SEGMENTS_FILENAME, to_clipboard)
        self.message.setStyleSheet("")
        self.message.setText(message)

    def _on_reset(self):
        answer = QMessageBox.question(self, "Reset", "Replace all segments with the defaults?")
        if answer == QMessageBox.StandardButton.Yes:
            self.controller.reset()
            self.message.setStyleSheet("")
            self.message.setText("Defaults restored.")


# =============================================================================
# Dock
# =============================================================================

class AnnotationDock(QDockWidget):
    """Sidebar dock shown in edit mode."""

    def __init__(self, controller: AnnotationController, export_cb: ExportCallback, parent=None):
        super().__init__("Annotations", parent)
        self.setObjectName("AnnotationDock")
        self.setAllowedAreas(Qt.DockWidgetArea.LeftDockWidgetArea | Qt.DockWidgetArea.RightDockWidgetArea)

        body = QWidget()
        layout = QVBoxLayout(body)

        seg_box = QGroupBox("Segments")
        QVBoxLayout(seg_box).addWidget(SegmentPanel(controller))
        layout.addWidget(seg_box)

        poly_box = QGroupBox("Lines")
        self.polyline_panel = PolylinePanel(controller, export_cb, POLYLINES_FILENAME)
        QVBoxLayout(poly_box).addWidget(self.polyline_panel)
        layout.addWidget(poly_box)

        io_box = QGroupBox("Import / export")
        QVBoxLayout(io_box).addWidget(ImportExportPanel(controller, export_cb))
        layout.addWidget(io_box)
        layout.addStretch(1)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(body)
        self.setWidget(scroll)
        self.setMinimumWidth(320)
