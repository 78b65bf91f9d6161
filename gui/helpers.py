"""Shared helpers for the Rival GUI: theme colors, stylesheet and piece glyphs."""

from PySide6.QtGui import QColor

# ── Board colors (warm brown wood) ──────────────────────────
BOARD_LIGHT = QColor("#D2B48C")
BOARD_DARK = QColor("#8B6B4A")

# ── Highlight colors ────────────────────────────────────────
HL_SELECTED = QColor(246, 246, 105, 180)
HL_LAST_MOVE = QColor(246, 246, 105, 130)
HL_CHECK = QColor(255, 0, 0, 150)
HL_LEGAL_DOT = QColor(0, 0, 0, 60)

PIECE_WHITE = QColor("#ffffff")
PIECE_BLACK = QColor("#1b1a18")
PIECE_OUTLINE = QColor(0, 0, 0, 160)

MIN_BOARD_PX = 360

# Solid glyphs for both sides; color is applied when painting.
PIECE_GLYPHS = {
    "p": "♟",
    "n": "♞",
    "b": "♝",
    "r": "♜",
    "q": "♛",
    "k": "♚",
}

# ── QSS Stylesheet ──────────────────────────────────────────
QSS = """
QMainWindow { background: #262522; }
QLabel { color: #c3c1bf; }

QPushButton {
    background: qlineargradient(x1:0,y1:0,x2:0,y2:1,
        stop:0 #8ece52, stop:1 #73a83e);
    color: #ffffff; border: none;
    padding: 8px 18px; border-radius: 6px;
    font-size: 13px; font-weight: bold;
}
QPushButton:hover {
    background: qlineargradient(x1:0,y1:0,x2:0,y2:1,
        stop:0 #9ddb62, stop:1 #81b64c);
}
QPushButton:disabled { background: #48463f; color: #9b9892; }

QComboBox, QSpinBox {
    background: #3c3a36; color: #c3c1bf;
    border: 1px solid #48463f; border-radius: 4px; padding: 4px 8px;
}

QListWidget {
    background: #262522; color: #c3c1bf;
    border: 1px solid #3c3a36; border-radius: 6px;
}

QFrame#panel {
    background: #302e2b; border-radius: 10px;
    border: 1px solid #3c3a36;
}
"""
