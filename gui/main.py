"""Desktop entry point: one window, one game against the configured opponent."""

import sys

from PySide6.QtWidgets import QApplication, QMainWindow

from rival.config import CONFIG, setup_logging
from rival.game import GameLoop

from gui.helpers import QSS
from gui.widgets import GameTab

class MainWindow(QMainWindow):
    def __init__(self, game: GameLoop):
        super().__init__()
        self.game = game
        self.setWindowTitle(f"{CONFIG.ui.engine_name}: play against the computer")
        self.tab = GameTab(game)
        self.setCentralWidget(self.tab)
        self.resize(1000, 720)

    def closeEvent(self, event):
        self.tab.dispose()
        self.game.close()
        super().closeEvent(event)

def main():
    setup_logging()
    app = QApplication(sys.argv)
    app.setStyleSheet(QSS)
    game = GameLoop()
    window = MainWindow(game)
    window.show()
    game.start()
    sys.exit(app.exec())

if __name__ == "__main__":
    main()
