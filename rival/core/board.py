"""Board wrapper over python-chess providing move history and game outcome."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

import chess


class Termination(str, Enum):
    NONE = "none"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"


@dataclass(frozen=True)
class Outcome:
    termination: Termination
    winner: Optional[bool] = None  # chess.WHITE / chess.BLACK, only for checkmate

    @property
    def is_over(self) -> bool:
        return self.termination is not Termination.NONE

    def message(self) -> str:
        if self.termination is Termination.CHECKMATE:
            side = "White" if self.winner == chess.WHITE else "Black"
            return f"Checkmate! {side} wins"
        if self.termination is Termination.STALEMATE:
            return "Stalemate!"
        if self.termination is Termination.DRAW:
            return "Draw!"
        return ""


@dataclass(frozen=True)
class MoveRecord:
    """One applied move with the flags the rules engine derived for it."""

    uci: str
    san: str
    by: str  # "human" or "engine"
    is_capture: bool
    is_en_passant: bool
    promotion: Optional[str] = None


def is_draw(board: chess.Board) -> bool:
    """Draws other than stalemate: dead material, fifty moves, threefold repetition."""
    return (
        board.is_insufficient_material()
        or board.halfmove_clock >= 100
        or board.is_repetition(3)
    )


def classify(board: chess.Board) -> Outcome:
    """Terminal classification of a position."""
    if board.is_checkmate():
        return Outcome(Termination.CHECKMATE, winner=not board.turn)
    if board.is_stalemate():
        return Outcome(Termination.STALEMATE)
    if is_draw(board):
        return Outcome(Termination.DRAW)
    return Outcome(Termination.NONE)


def describe_move(board: chess.Board, move: chess.Move, by: str) -> MoveRecord:
    """Build a MoveRecord for a legal move; call before pushing it."""
    return MoveRecord(
        uci=move.uci(),
        san=board.san(move),
        by=by,
        is_capture=board.is_capture(move),
        is_en_passant=board.is_en_passant(move),
        promotion=chess.piece_symbol(move.promotion) if move.promotion else None,
    )


class ChessBoard:
    def __init__(self, fen: str = None):
        """Initialize from FEN or the standard starting position."""
        self.board = chess.Board(fen) if fen else chess.Board()
        self.move_history: List[MoveRecord] = []

    @property
    def turn(self) -> bool:
        return self.board.turn

    def reset(self):
        """Reset to the initial position."""
        self.board.reset()
        self.move_history.clear()

    def set_fen(self, fen: str):
        """Set board state from a FEN string. Raises ValueError on bad input."""
        self.board.set_fen(fen)
        self.move_history.clear()

    def get_fen(self) -> str:
        """Return the current FEN."""
        return self.board.fen()

    def copy(self) -> chess.Board:
        """Private copy for strategies; history is kept for repetition checks."""
        return self.board.copy()

    def legal_moves(self, from_square: Optional[int] = None) -> List[chess.Move]:
        """Legal moves, optionally only those leaving from_square."""
        moves = list(self.board.legal_moves)
        if from_square is not None:
            moves = [m for m in moves if m.from_square == from_square]
        return moves

    def parse_move(self, move_str: str) -> Optional[chess.Move]:
        """Parse UCI text, returning None for garbage."""
        try:
            return chess.Move.from_uci(move_str)
        except (ValueError, TypeError):
            return None

    def push(self, move: chess.Move, by: str = "human") -> Optional[MoveRecord]:
        """Apply a move if it is legal from its origin square. Returns its record."""
        if move not in self.legal_moves(move.from_square):
            return None
        record = describe_move(self.board, move, by)
        self.board.push(move)
        self.move_history.append(record)
        return record

    def make_move(self, move_str: str, by: str = "human") -> bool:
        """Push a UCI move (e.g. 'e2e4'). Returns True if legal."""
        move = self.parse_move(move_str)
        if move is None:
            return False
        return self.push(move, by) is not None

    def undo_move(self):
        """Pop the last move."""
        if self.board.move_stack:
            self.board.pop()
            if self.move_history:
                self.move_history.pop()

    def outcome(self) -> Outcome:
        return classify(self.board)

    def is_game_over(self):
        """Check if the game has ended."""
        return self.outcome().is_over
