"""
styles.py

Application stylesheets and the annotation colour palette.
"""

SLATE_STYLE = """
/* === Slate (dark) === */
QMainWindow, QDialog {
    background-color: #020617;
}

QWidget {
    background-color: #0f172a;
    color: #e2e8f0;
    font-family: "Segoe UI", "SF Pro Display", sans-serif;
    font-size: 13px;
}

QMenuBar {
    background-color: #0f172a;
    border-bottom: 1px solid #1e293b;
}

QMenuBar::item:selected, QMenu::item:selected {
    background-color: #164e63;
}

QMenu {
    background-color: #0f172a;
    border: 1px solid #334155;
}

QToolBar {
    background-color: #0f172a;
    border-bottom: 1px solid #1e293b;
    spacing: 6px;
    padding: 4px;
}

QPushButton {
    background-color: #1e293b;
    color: #cffafe;
    border: 1px solid rgba(34, 211, 238, 0.4);
    border-radius: 6px;
    padding: 4px 10px;
}

QPushButton:hover {
    border-color: #22d3ee;
    background-color: #020617;
}

QPushButton:disabled {
    color: #64748b;
    border-color: #334155;
}

QPushButton:checked {
    background-color: rgba(6, 182, 212, 0.3);
    border-color: #22d3ee;
}

QLineEdit, QPlainTextEdit, QDoubleSpinBox, QComboBox {
    background-color: #020617;
    border: 1px solid #334155;
    border-radius: 4px;
    padding: 3px;
    selection-background-color: #0e7490;
}

QLineEdit:focus, QPlainTextEdit:focus, QDoubleSpinBox:focus, QComboBox:focus {
    border-color: #22d3ee;
}

QListWidget {
    background-color: #020617;
    border: 1px solid #1e293b;
}

QListWidget::item:selected {
    background-color: rgba(6, 182, 212, 0.25);
    color: #ecfeff;
}

QGroupBox {
    border: 1px solid #1e293b;
    border-radius: 6px;
    margin-top: 14px;
    padding-top: 6px;
}

QGroupBox::title {
    subcontrol-origin: margin;
    left: 8px;
    color: #94a3b8;
}

QDockWidget::title {
    background-color: #0f172a;
    padding: 6px;
}

QStatusBar {
    background-color: #020617;
    color: #94a3b8;
}

QGraphicsView {
    background-color: #020617;
    border: none;
}
"""

PAPER_STYLE = """
/* === Paper (light) === */
QMainWindow, QDialog {
    background-color: #f1f5f9;
}

QWidget {
    background-color: #ffffff;
    color: #1e293b;
    font-family: "Segoe UI", "SF Pro Display", sans-serif;
    font-size: 13px;
}

QPushButton {
    background-color: #f8fafc;
    border: 1px solid #94a3b8;
    border-radius: 6px;
    padding: 4px 10px;
}

QPushButton:hover {
    border-color: #0891b2;
}

QPushButton:disabled {
    color: #94a3b8;
    border-color: #e2e8f0;
}

QPushButton:checked {
    background-color: #cffafe;
    border-color: #0891b2;
}

QLineEdit, QPlainTextEdit, QDoubleSpinBox, QComboBox {
    border: 1px solid #cbd5e1;
    border-radius: 4px;
    padding: 3px;
}

QGraphicsView {
    background-color: #e2e8f0;
    border: none;
}
"""

STYLES = {
    "Slate": SLATE_STYLE,
    "Paper": PAPER_STYLE,
}

DEFAULT_STYLE = "Slate"


def get_style(name: str) -> str:
    """Stylesheet for a theme name; unknown names get the default theme."""
    return STYLES.get(name, STYLES[DEFAULT_STYLE])


# Stroke / border colour per annotation colour key
ANNOTATION_COLORS = {
    "cyan": "#22d3ee",
    "emerald": "#34d399",
    "amber": "#fbbf24",
}

# Segment box fill (RGBA) per colour key, used in edit mode
SEGMENT_FILLS = {
    "cyan": (6, 182, 212, 51),
    "emerald": (16, 185, 129, 51),
    "amber": (245, 158, 11, 51),
}

SELECTED_BORDER = "#f8fafc"
HOVER_FILL = (255, 255, 255, 38)
PREVIEW_POINT_COLOR = "#22d3ee"

# Dash pattern in stroke-width units; solid has none
DASH_PATTERNS = {
    "solid": None,
    "dashed": (2.0, 2.0),
    "dotted": (1.0, 1.0),
}


def annotation_color(key: str) -> str:
    return ANNOTATION_COLORS.get(key, ANNOTATION_COLORS["cyan"])
