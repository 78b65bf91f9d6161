"""Material-only static evaluator."""

import chess
from rival.config import CONFIG


class Evaluator:
    def __init__(self, piece_values=None):
        values = piece_values or CONFIG.eval.piece_values
        self.values = {
            pt: values[chess.piece_name(pt).upper()] for pt in chess.PIECE_TYPES
        }

    def evaluate(self, board: chess.Board) -> int:
        """Return material balance, positive favors White regardless of side to move."""
        score = 0
        for piece in board.piece_map().values():
            if piece.color == chess.WHITE:
                score += self.values[piece.piece_type]
            else:
                score -= self.values[piece.piece_type]
        return score
