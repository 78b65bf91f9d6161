"""GameTab: board plus side panel, driven by a GameLoop."""

import chess
from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QComboBox,
    QFrame,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from rival.config import CONFIG
from rival.game import GameLoop, GameSnapshot
from rival.strategies import EngineConfig, StrategyKind

from gui.widgets.board import ChessBoardWidget

ENGINE_LABELS = {
    StrategyKind.SEARCH: "Minimax search",
    StrategyKind.RANDOM: "Random mover",
    StrategyKind.GREEDY: "Greedy capture",
    StrategyKind.UCI: "External UCI engine",
}


class GameTab(QWidget):
    """One game session. Snapshots from worker threads arrive via a queued signal."""

    snapshot_ready = Signal(object)

    def __init__(self, game: GameLoop, parent=None):
        super().__init__(parent)
        self.game = game
        self._build_ui()
        self.snapshot_ready.connect(self._sync)
        self._unsubscribe = game.subscribe(self.snapshot_ready.emit)
        self._sync(game.snapshot())

    # ── UI construction ─────────────────────────────────────

    def _build_ui(self):
        root = QHBoxLayout(self)
        root.setContentsMargins(6, 6, 6, 6)

        self.bw = ChessBoardWidget()
        self.bw.move_made.connect(self._human_move)
        root.addWidget(self.bw, stretch=3)

        panel = QFrame()
        panel.setObjectName("panel")
        pl = QVBoxLayout(panel)
        pl.setContentsMargins(16, 14, 16, 14)
        pl.setSpacing(8)

        title = QLabel(CONFIG.ui.engine_name)
        title.setStyleSheet("color:#ffffff;font-size:16px;font-weight:bold;")
        pl.addWidget(title)

        self.lbl_status = QLabel("White to Move")
        self.lbl_status.setStyleSheet("color:#fff;font-size:14px;font-weight:bold;")
        pl.addWidget(self.lbl_status)

        self.lbl_sides = QLabel()
        pl.addWidget(self.lbl_sides)

        self.lbl_result = QLabel("")
        self.lbl_result.setStyleSheet(
            "background:#4a6e28;color:#ffffff;font-size:15px;font-weight:bold;"
            "padding:8px;border-radius:6px;"
        )
        self.lbl_result.setAlignment(Qt.AlignCenter)
        self.lbl_result.hide()
        pl.addWidget(self.lbl_result)

        engine_row = QHBoxLayout()
        self.cmb_engine = QComboBox()
        for kind, label in ENGINE_LABELS.items():
            self.cmb_engine.addItem(label, kind)
        self.spin_depth = QSpinBox()
        self.spin_depth.setRange(1, 6)
        self.spin_depth.setPrefix("depth ")
        engine_row.addWidget(self.cmb_engine, stretch=1)
        engine_row.addWidget(self.spin_depth)
        pl.addLayout(engine_row)

        config = self.game.orchestrator.config
        self.cmb_engine.setCurrentIndex(self.cmb_engine.findData(config.kind))
        self.spin_depth.setValue(config.depth)
        self.cmb_engine.currentIndexChanged.connect(self._engine_changed)
        self.spin_depth.valueChanged.connect(self._engine_changed)

        self.hist = QListWidget()
        pl.addWidget(self.hist, stretch=1)

        row = QHBoxLayout()
        self.btn_color = QPushButton()
        self.btn_color.clicked.connect(self.game.toggle_color)
        row.addWidget(self.btn_color)
        new_game = QPushButton("New Game")
        new_game.clicked.connect(self.game.reset)
        row.addWidget(new_game)
        pl.addLayout(row)

        self.btn_retry = QPushButton("Retry engine")
        self.btn_retry.clicked.connect(self.game.retry)
        self.btn_retry.hide()
        pl.addWidget(self.btn_retry)

        panel.setMinimumWidth(260)
        panel.setMaximumWidth(400)
        root.addWidget(panel, stretch=1)

    # ── Game wiring ─────────────────────────────────────────

    def _human_move(self, mv: chess.Move):
        self.game.human_move(mv)

    def _engine_changed(self):
        current = self.game.orchestrator.config
        config = EngineConfig(
            kind=self.cmb_engine.currentData(),
            depth=self.spin_depth.value(),
            movetime_ms=current.movetime_ms,
            command=current.command,
            seed=current.seed,
        )
        if config != current:
            self.game.set_engine(config)

    def _sync(self, snap: GameSnapshot):
        """Synchronize all widgets with the latest game snapshot."""
        human = chess.WHITE if snap.human_color == "white" else chess.BLACK
        board = chess.Board(snap.fen)
        last = chess.Move.from_uci(snap.history[-1].uci) if snap.history else None
        human_turn = snap.turn == snap.human_color and not snap.is_over
        self.bw.set_position(board, last, flipped=human == chess.BLACK, interactive=human_turn)

        you = snap.human_color.capitalize()
        engine = "Black" if human == chess.WHITE else "White"
        self.lbl_sides.setText(f"You: {you} · Engine: {engine}")
        self.btn_color.setText(f"Play as {engine}")

        if snap.is_over:
            self.lbl_status.setText("Game Over")
            self.lbl_result.setText(snap.message)
            self.lbl_result.show()
        else:
            self.lbl_result.hide()
            if snap.last_error:
                self.lbl_status.setText(f"Engine problem: {snap.last_error}")
            elif human_turn:
                self.lbl_status.setText("Your Move")
            else:
                self.lbl_status.setText("Engine thinking…")
        self.btn_retry.setVisible(bool(snap.last_error))

        self.hist.clear()
        self.hist.addItems(snap.move_lines())
        self.hist.scrollToBottom()

    def dispose(self):
        """Detach from the game (called on window close)."""
        self._unsubscribe()
