"""
main.py

Blueprint Annotator - Main Application

PyQt6 application for annotating a blueprint image with:
- Segment hotspots (drag to reposition in edit mode, click for details in view mode)
- Click-by-click polylines with a live preview point
- Wheel zoom that never touches the stored percent coordinates
- Paste import, clipboard/file export and project bundles

Usage:
    python main.py [blueprint.png]

Dependencies:
    pip install PyQt6 platformdirs tomli-w jsonschema
"""

from __future__ import annotations

import os
import sys
from typing import Optional

from PyQt6.QtCore import QEvent, Qt
from PyQt6.QtGui import QAction, QGuiApplication, QKeySequence
from PyQt6.QtWidgets import (
    QApplication,
    QFileDialog,
    QInputDialog,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QToolBar,
)

from canvas.mapper import ViewMapper
from canvas.scene import BlueprintScene
from canvas.view import BlueprintView
from debug_trace import close_log, configure, configure_logging, trace, trace_call, trace_exception
from detail_dialog import DetailDialog
from engine.controller import AnnotationController
from engine.export import (
    DETAIL_POLYLINES_FILENAME,
    POLYLINES_FILENAME,
    SEGMENTS_FILENAME,
    export_collection,
    save_json_file,
)
from engine.persistence import JsonFileStorage, StorageSlot
from engine.project import (
    ProjectInfo,
    ProjectRejected,
    apply_bundle,
    collect_bundle,
    read_project,
    write_project,
)
from engine.store import AnnotationStore, PolylineStore
from engine.zoom import ZoomController
from models import DEFAULT_DETAIL_POLYLINES, Segment
from properties.dock import AnnotationDock
from settings import SettingsManager, get_settings
from styles import DEFAULT_STYLE, STYLES, get_style


class MainWindow(QMainWindow):
    """Main application window for the Blueprint Annotator.

    Args:
        settings_manager: The SettingsManager instance for application settings.
    """

    def __init__(self, settings_manager: SettingsManager):
        super().__init__()
        self.settings_manager = settings_manager
        cfg = settings_manager.settings
        self.setWindowTitle("Blueprint Annotator")

        # Persistence + stores
        storage = JsonFileStorage(settings_manager.get_data_dir())
        indent = cfg.export.indent
        self.store = AnnotationStore(
            segments_slot=StorageSlot(storage, cfg.storage.segments_key, indent),
            polylines_slot=StorageSlot(storage, cfg.storage.polylines_key, indent),
            segment_defaults=cfg.defaults.segment,
            polyline_defaults=cfg.defaults.polyline,
        )
        self.detail_polylines = PolylineStore(
            StorageSlot(storage, cfg.storage.detail_polylines_key, indent),
            defaults=DEFAULT_DETAIL_POLYLINES,
            polyline_defaults=cfg.defaults.polyline,
            id_prefix="wheel-poly",
        )
        self.project_info = ProjectInfo()

        # Controller, scene and view
        self.mapper = ViewMapper()
        self.controller = AnnotationController(
            self.store,
            self.mapper,
            zoom=ZoomController(cfg.zoom),
            on_activate=self._open_detail,
        )
        self.scene = BlueprintScene(self.store.polylines, self.controller.drawing, self.store)
        self.view = BlueprintView(self.scene, self.controller)
        self.mapper.view = self.view
        self.setCentralWidget(self.view)

        # Sidebar (edit mode only)
        self.dock = AnnotationDock(self.controller, self.export_json, self)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, self.dock)

        self.detail: Optional[DetailDialog] = None

        self._build_menus()
        self._build_toolbar()

        self.controller.on_mode_change(self._on_mode_changed)
        self.controller.on_drawing_change(lambda _drawing: self.scene.update_preview())
        self.controller.zoom.on_change(self._on_zoom_changed)
        self._on_mode_changed(self.controller.mode)
        self._on_zoom_changed(self.controller.zoom.scale)

        if cfg.general.blueprint_image:
            self.load_blueprint(cfg.general.blueprint_image)
        else:
            self.statusBar().showMessage("Open a blueprint image from the File menu.")

    # ---- UI construction ----

    def _build_menus(self):
        """Build the application menu bar."""
        menubar = self.menuBar()

        # File menu
        file_menu = menubar.addMenu("&File")

        open_image = QAction("Open Blueprint Image...", self)
        open_image.triggered.connect(self.open_image_dialog)
        file_menu.addAction(open_image)

        open_detail_image = QAction("Open Detail Image...", self)
        open_detail_image.triggered.connect(self.open_detail_image_dialog)
        file_menu.addAction(open_detail_image)

        file_menu.addSeparator()

        save_project = QAction("Save Project...", self)
        save_project.setShortcut(QKeySequence.StandardKey.Save)
        save_project.triggered.connect(self.save_project_dialog)
        file_menu.addAction(save_project)

        open_project = QAction("Open Project...", self)
        open_project.setShortcut(QKeySequence.StandardKey.Open)
        open_project.triggered.connect(self.open_project_dialog)
        file_menu.addAction(open_project)

        file_menu.addSeparator()

        export_menu = file_menu.addMenu("Export JSON")
        for text, getter, filename in (
            ("Segments...", self.store.segments_snapshot, SEGMENTS_FILENAME),
            ("Lines...", self.store.polylines.snapshot, POLYLINES_FILENAME),
            ("Detail Lines...", self.detail_polylines.snapshot, DETAIL_POLYLINES_FILENAME),
        ):
            act = QAction(text, self)
            act.triggered.connect(lambda _checked=False, g=getter, f=filename: self._download(g(), f))
            export_menu.addAction(act)

        file_menu.addSeparator()

        exit_act = QAction("E&xit", self)
        exit_act.triggered.connect(self.close)
        file_menu.addAction(exit_act)

        # Edit menu
        edit_menu = menubar.addMenu("&Edit")

        self.edit_mode_act = QAction("Edit Mode", self)
        self.edit_mode_act.setCheckable(True)
        self.edit_mode_act.setShortcut(QKeySequence("Ctrl+E"))
        self.edit_mode_act.toggled.connect(self.controller.set_edit_mode)
        edit_menu.addAction(self.edit_mode_act)

        add_segment = QAction("Add Segment", self)
        add_segment.triggered.connect(self.controller.add_segment)
        edit_menu.addAction(add_segment)

        start_line = QAction("Start Line", self)
        start_line.setShortcut(QKeySequence("Ctrl+L"))
        start_line.triggered.connect(self.controller.start_drawing)
        edit_menu.addAction(start_line)

        edit_menu.addSeparator()

        reset = QAction("Reset Segments to Defaults", self)
        reset.triggered.connect(self._confirm_reset)
        edit_menu.addAction(reset)

        # View menu
        view_menu = menubar.addMenu("&View")

        zoom_reset = QAction("Reset Zoom", self)
        zoom_reset.setShortcut(QKeySequence("Ctrl+0"))
        zoom_reset.triggered.connect(self.controller.zoom.reset)
        view_menu.addAction(zoom_reset)

        view_menu.addAction(self.dock.toggleViewAction())

        theme_menu = view_menu.addMenu("Theme")
        for name in STYLES:
            act = QAction(name, self)
            act.triggered.connect(lambda _checked=False, n=name: self.apply_theme(n))
            theme_menu.addAction(act)

    def _build_toolbar(self):
        tb = QToolBar("Main")
        tb.setObjectName("MainToolbar")
        tb.setMovable(False)
        self.addToolBar(tb)

        self.mode_btn = QPushButton("View mode")
        self.mode_btn.setCheckable(True)
        self.mode_btn.toggled.connect(self.controller.set_edit_mode)
        tb.addWidget(self.mode_btn)

        tb.addSeparator()
        self.zoom_label = QLabel("100%")
        tb.addWidget(QLabel(" Zoom: "))
        tb.addWidget(self.zoom_label)

    # ---- mode / zoom ----

    def _on_mode_changed(self, _mode: str):
        edit = self.controller.edit_mode
        for widget in (self.mode_btn, self.edit_mode_act):
            widget.blockSignals(True)
            widget.setChecked(edit)
            widget.blockSignals(False)
        self.mode_btn.setText("Edit mode" if edit else "View mode")
        self.dock.setVisible(edit)
        self.scene.set_edit_mode(edit)
        trace(f"Mode -> {_mode}", "MAIN")

    def _on_zoom_changed(self, scale: float):
        self.zoom_label.setText(f"{round(scale * 100)}%")

    def changeEvent(self, event):
        # Window blur ends an active drag
        if event.type() == QEvent.Type.ActivationChange and not self.isActiveWindow():
            self.controller.window_deactivated()
        super().changeEvent(event)

    def apply_theme(self, name: str):
        app = QApplication.instance()
        app.setStyleSheet(get_style(name))
        self.settings_manager.settings.general.theme = name

    # ---- images ----

    def open_image_dialog(self):
        path, _ = QFileDialog.getOpenFileName(
            self, "Open Blueprint Image", "", "Images (*.png *.jpg *.jpeg *.bmp *.webp)"
        )
        if path:
            self.load_blueprint(path)

    def load_blueprint(self, path: str):
        if not self.scene.set_image(path):
            QMessageBox.warning(self, "Open failed", f"Could not load image:\n{path}")
            return
        self.settings_manager.settings.general.blueprint_image = path
        self.view.apply_scale()
        self.statusBar().showMessage(f"Blueprint: {os.path.basename(path)}")

    def open_detail_image_dialog(self):
        path, _ = QFileDialog.getOpenFileName(
            self, "Open Detail Image", "", "Images (*.png *.jpg *.jpeg *.bmp *.webp)"
        )
        if not path:
            return
        self.settings_manager.settings.general.detail_image = path
        if self.detail is not None and not self.detail.set_image(path):
            QMessageBox.warning(self, "Open failed", f"Could not load image:\n{path}")

    # ---- detail view ----

    def _ensure_detail(self) -> DetailDialog:
        if self.detail is None:
            general = self.settings_manager.settings.general
            image = general.detail_image or general.blueprint_image
            self.detail = DetailDialog(self.detail_polylines, self.export_json, image, self)
        return self.detail

    def _open_detail(self, segment: Segment):
        self._ensure_detail().show_segment(segment)

    # ---- import / export ----

    def export_json(self, data, filename: str, to_clipboard: bool) -> str:
        """Export callback shared by the sidebar panels and the detail view."""
        if not to_clipboard:
            return self._download(data, filename)
        cfg = self.settings_manager
        clipboard = QGuiApplication.clipboard()
        copy = clipboard.setText if clipboard is not None else None
        result = export_collection(
            data, filename, cfg.get_export_dir(), copy, cfg.settings.export.indent
        )
        self.statusBar().showMessage(result.message)
        return result.message

    def _download(self, data, filename: str) -> str:
        cfg = self.settings_manager
        result = save_json_file(data, cfg.get_export_dir(), filename, cfg.settings.export.indent)
        self.statusBar().showMessage(result.message)
        return result.message

    def _confirm_reset(self):
        answer = QMessageBox.question(self, "Reset", "Replace all segments with the defaults?")
        if answer == QMessageBox.StandardButton.Yes:
            self.controller.reset()
            self.statusBar().showMessage("Defaults restored.")

    # ---- projects ----

    @trace_call("PROJECT")
    def save_project_dialog(self):
        """Save all three collections to one project file."""
        name, ok = QInputDialog.getText(self, "Save Project", "Project name:", text=self.project_info.name)
        if not ok:
            return
        self.project_info.name = name.strip() or self.project_info.name
        start = str(self.settings_manager.get_export_dir() / "project.json")
        path, _ = QFileDialog.getSaveFileName(self, "Save Project", start, "JSON (*.json)")
        if not path:
            return
        bundle = collect_bundle(self.project_info, self.store, self.detail_polylines)
        try:
            write_project(path, bundle, self.settings_manager.settings.export.indent)
        except OSError as e:
            QMessageBox.critical(self, "Save failed", str(e))
            return
        self.statusBar().showMessage(f"Saved project: {path}")

    @trace_call("PROJECT")
    def open_project_dialog(self):
        """Open a project file, replacing every collection."""
        start = str(self.settings_manager.get_export_dir())
        path, _ = QFileDialog.getOpenFileName(self, "Open Project", start, "JSON (*.json)")
        if not path:
            return
        try:
            bundle = read_project(path)
        except ProjectRejected as e:
            QMessageBox.critical(self, "Open failed", str(e))
            return
        self.controller.finish_drawing()
        if self.detail is not None:
            self.detail.editor.finish_drawing()
        apply_bundle(bundle, self.store, self.detail_polylines)
        self.project_info = bundle.info
        self.setWindowTitle(f"Blueprint Annotator - {bundle.info.name}")
        self.statusBar().showMessage(f"Opened project: {path}")


def main():
    """Application entry point."""
    # Load settings (use singleton to ensure single instance)
    settings_manager = get_settings()
    debug = settings_manager.settings.debug
    configure(debug.trace, debug.log_file)
    configure_logging()

    trace("Application starting", "MAIN")
    app = QApplication(sys.argv)

    # Ensure settings file has all sections
    settings_manager.ensure_file_complete()

    # Apply saved theme (or default if not set)
    initial_style = settings_manager.settings.general.theme
    if initial_style not in STYLES:
        initial_style = DEFAULT_STYLE
        settings_manager.settings.general.theme = initial_style
    app.setStyleSheet(STYLES[initial_style])

    if len(sys.argv) > 1:
        settings_manager.settings.general.blueprint_image = sys.argv[1]

    # Save settings on application quit
    def save_on_quit():
        trace("Saving settings on quit", "MAIN")
        settings_manager.save()
        close_log()

    app.aboutToQuit.connect(save_on_quit)

    trace("Creating MainWindow", "MAIN")
    w = MainWindow(settings_manager)
    w.resize(1500, 950)
    w.show()
    trace("Entering event loop", "MAIN")
    sys.exit(app.exec())


if __name__ == "__main__":
    # Set up global exception handler to catch crashes
    def excepthook(exc_type, exc_value, exc_tb):
        import traceback
        trace("UNCAUGHT EXCEPTION:", "CRASH")
        trace("".join(traceback.format_exception(exc_type, exc_value, exc_tb)), "CRASH")
        close_log()
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = excepthook

    try:
        main()
    except Exception as e:
        trace(f"FATAL: {type(e).__name__}: {e}", "CRASH")
        trace_exception("Fatal exception")
        close_log()
        raise
