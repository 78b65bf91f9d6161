"""Board view: shows a position and turns clicks or drags into candidate moves."""

from typing import List, Optional

import chess
from PySide6.QtCore import QPoint, QPointF, QRect, Qt, Signal
from PySide6.QtGui import QBrush, QColor, QFont, QMouseEvent, QPainter, QPaintEvent, QPen
from PySide6.QtWidgets import QSizePolicy, QWidget

from gui.helpers import (
    BOARD_DARK,
    BOARD_LIGHT,
    HL_CHECK,
    HL_LAST_MOVE,
    HL_LEGAL_DOT,
    HL_SELECTED,
    MIN_BOARD_PX,
    PIECE_BLACK,
    PIECE_GLYPHS,
    PIECE_OUTLINE,
    PIECE_WHITE,
)

PROMOTION_CHOICES = [chess.QUEEN, chess.ROOK, chess.BISHOP, chess.KNIGHT]
SHADE = QColor(0, 0, 0, 140)
CHOOSER_BG = QColor("#3c3a36")


class ChessBoardWidget(QWidget):
    """
    Renders whatever position it is handed and never changes it.

    Candidate moves leave through ``move_made``; the game decides whether they
    are legal. Input is ignored unless the owner marks the view interactive.
    """

    move_made = Signal(object)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setMinimumSize(MIN_BOARD_PX, MIN_BOARD_PX)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)

        self.position = chess.Board()
        self.last_move: Optional[chess.Move] = None
        self.flipped = False
        self.interactive = False

        self._picked: Optional[int] = None  # square of the piece in hand
        self._dragging = False
        self._cursor: Optional[QPoint] = None
        self._chooser: Optional[chess.Move] = None  # pending promotion, piece not chosen yet

    def set_position(self, board: chess.Board, last_move: Optional[chess.Move], flipped: bool,
                     interactive: bool):
        self.position = board
        self.last_move = last_move
        self.flipped = flipped
        self.interactive = interactive
        if not interactive:
            self._drop_piece()
            self._chooser = None
        self.update()

    # ── Coordinates ─────────────────────────────────────────

    def _cell(self) -> int:
        return min(self.width(), self.height()) // 8

    def _board_rect(self) -> QRect:
        side = self._cell() * 8
        return QRect((self.width() - side) // 2, (self.height() - side) // 2, side, side)

    def _view_coords(self, sq: int):
        """(column, row) on screen, row 0 at the top."""
        file, rank = chess.square_file(sq), chess.square_rank(sq)
        return (7 - file, rank) if self.flipped else (file, 7 - rank)

    def _square_rect(self, sq: int) -> QRect:
        col, row = self._view_coords(sq)
        cell, top_left = self._cell(), self._board_rect().topLeft()
        return QRect(top_left.x() + col * cell, top_left.y() + row * cell, cell, cell)

    def _square_at(self, pos: QPoint) -> Optional[int]:
        area = self._board_rect()
        if self._cell() == 0 or not area.contains(pos):
            return None
        col = (pos.x() - area.left()) // self._cell()
        row = (pos.y() - area.top()) // self._cell()
        if not (0 <= col < 8 and 0 <= row < 8):
            return None
        return chess.square(7 - col, row) if self.flipped else chess.square(col, 7 - row)

    # ── Painting ────────────────────────────────────────────

    def paintEvent(self, event: QPaintEvent):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        for sq in chess.SQUARES:
            light = (chess.square_file(sq) + chess.square_rank(sq)) % 2 == 1
            painter.fillRect(self._square_rect(sq), BOARD_LIGHT if light else BOARD_DARK)
        self._paint_marks(painter)
        for sq, piece in self.position.piece_map().items():
            if self._dragging and sq == self._picked:
                continue
            self._paint_piece(painter, piece, self._square_rect(sq))
        if self._dragging and self._cursor is not None:
            piece = self.position.piece_at(self._picked)
            if piece is not None:
                rect = QRect(0, 0, self._cell(), self._cell())
                rect.moveCenter(self._cursor)
                self._paint_piece(painter, piece, rect)
        self._paint_labels(painter)
        if self._chooser is not None:
            self._paint_chooser(painter)
        painter.end()

    def _paint_marks(self, painter: QPainter):
        if self.last_move is not None:
            painter.fillRect(self._square_rect(self.last_move.from_square), HL_LAST_MOVE)
            painter.fillRect(self._square_rect(self.last_move.to_square), HL_LAST_MOVE)
        if self.position.is_check():
            king = self.position.king(self.position.turn)
            if king is not None:
                painter.fillRect(self._square_rect(king), HL_CHECK)
        if self._picked is None:
            return
        painter.fillRect(self._square_rect(self._picked), HL_SELECTED)
        painter.setPen(Qt.NoPen)
        painter.setBrush(QBrush(HL_LEGAL_DOT))
        radius = self._cell() * 0.14
        targets = {m.to_square for m in self.position.legal_moves if m.from_square == self._picked}
        for sq in targets:
            painter.drawEllipse(QPointF(self._square_rect(sq).center()), radius, radius)

    def _paint_piece(self, painter: QPainter, piece: chess.Piece, rect: QRect):
        glyph = PIECE_GLYPHS[piece.symbol().lower()]
        painter.setFont(QFont("DejaVu Sans", max(1, int(rect.height() * 0.62))))
        painter.setPen(QPen(PIECE_OUTLINE))
        painter.drawText(rect.translated(1, 1), Qt.AlignCenter, glyph)
        painter.setPen(QPen(PIECE_WHITE if piece.color == chess.WHITE else PIECE_BLACK))
        painter.drawText(rect, Qt.AlignCenter, glyph)

    def _paint_labels(self, painter: QPainter):
        cell = self._cell()
        painter.setFont(QFont("Segoe UI", max(8, cell // 8), QFont.Bold))
        for sq in chess.SQUARES:
            col, row = self._view_coords(sq)
            rect = self._square_rect(sq).adjusted(3, 2, -3, -2)
            light = (chess.square_file(sq) + chess.square_rank(sq)) % 2 == 1
            painter.setPen(QPen(BOARD_DARK if light else BOARD_LIGHT))
            if col == 0:
                painter.drawText(rect, Qt.AlignLeft | Qt.AlignTop, chess.RANK_NAMES[chess.square_rank(sq)])
            if row == 7:
                painter.drawText(rect, Qt.AlignRight | Qt.AlignBottom, chess.FILE_NAMES[chess.square_file(sq)])

    def _chooser_rects(self) -> List[QRect]:
        target = self._square_rect(self._chooser.to_square)
        step = self._cell() if target.top() < self._board_rect().center().y() else -self._cell()
        return [target.translated(0, i * step) for i in range(len(PROMOTION_CHOICES))]

    def _paint_chooser(self, painter: QPainter):
        painter.fillRect(self.rect(), SHADE)
        for piece_type, rect in zip(PROMOTION_CHOICES, self._chooser_rects()):
            painter.fillRect(rect, CHOOSER_BG)
            self._paint_piece(painter, chess.Piece(piece_type, self.position.turn), rect)

    # ── Input ───────────────────────────────────────────────

    def _drop_piece(self):
        self._picked = None
        self._dragging = False
        self._cursor = None

    def _own_piece_on(self, sq: int) -> bool:
        piece = self.position.piece_at(sq)
        return piece is not None and piece.color == self.position.turn

    def mousePressEvent(self, ev: QMouseEvent):
        if ev.button() != Qt.LeftButton or not self.interactive:
            return
        pos = ev.position().toPoint()
        if self._chooser is not None:
            self._choose_promotion(pos)
            return
        sq = self._square_at(pos)
        if sq is None:
            self._drop_piece()
        elif self._own_piece_on(sq):
            self._picked = sq
            self._dragging = True
            self._cursor = None
        elif self._picked is not None:
            self._submit(self._picked, sq)
            self._drop_piece()
        self.update()

    def mouseMoveEvent(self, ev: QMouseEvent):
        if self._dragging:
            self._cursor = ev.position().toPoint()
            self.update()

    def mouseReleaseEvent(self, ev: QMouseEvent):
        if ev.button() != Qt.LeftButton or not self._dragging:
            return
        self._dragging = False
        target = self._square_at(ev.position().toPoint())
        if target is not None and target != self._picked:
            self._submit(self._picked, target)
            self._drop_piece()
        # A release on the origin square keeps the piece selected for click-to-move.
        self._cursor = None
        self.update()

    def _submit(self, from_sq: int, to_sq: int):
        if chess.Move(from_sq, to_sq, promotion=chess.QUEEN) in self.position.legal_moves:
            self._chooser = chess.Move(from_sq, to_sq)
            return
        self.move_made.emit(chess.Move(from_sq, to_sq))

    def _choose_promotion(self, pos: QPoint):
        rects = self._chooser_rects()
        move, self._chooser = self._chooser, None
        for piece_type, rect in zip(PROMOTION_CHOICES, rects):
            if rect.contains(pos):
                self.move_made.emit(chess.Move(move.from_square, move.to_square, promotion=piece_type))
                break
        self.update()
