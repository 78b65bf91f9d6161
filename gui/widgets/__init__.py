"""GUI widgets: the board view and the game panel."""

from gui.widgets.board import ChessBoardWidget
from gui.widgets.game_tab import GameTab

__all__ = [
    "ChessBoardWidget",
    "GameTab",
]
