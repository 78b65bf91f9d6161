import logging
import math
import threading
import time
from typing import List, Optional, Tuple

import chess
from rival.config import CONFIG
from rival.core.board import is_draw
from rival.core.evaluator import Evaluator
from rival.core.utils import format_search_info
from rival.errors import SearchCancelled

INF = math.inf

logger = logging.getLogger(__name__)


class SearchEngine:
    """
    Depth-bounded minimax with alpha-beta pruning.

    Scores are always from White's point of view: White maximizes, Black
    minimizes. Mates score +/-inf whatever their distance and every draw
    scores 0, so the search is indifferent between a mate now and a mate
    later inside the same tree.

    Moves are tried in python-chess generation order and the first move
    reaching the best score wins, so the choice between equal moves depends
    on the rules engine and is not reproducible across implementations.
    """

    def __init__(self, evaluator: Optional[Evaluator] = None, depth: Optional[int] = None):
        self.evaluator = evaluator or Evaluator()
        self.max_depth = CONFIG.search.depth if depth is None else depth
        if self.max_depth < 1:
            raise ValueError(f"search depth must be >= 1, got {self.max_depth}")
        self.nodes = 0

    # Public API
    def search_best_move(
        self,
        board: chess.Board,
        depth: Optional[int] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Tuple[Optional[chess.Move], float]:
        """Returns (best_move, score), at the configured depth unless one is given."""
        return self.run(board, self.max_depth if depth is None else depth, cancel)

    def select(
        self,
        board: chess.Board,
        depth: Optional[int] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Optional[chess.Move]:
        """Best move for the side to move, or None when there is no legal move."""
        move, _ = self.search_best_move(board, depth, cancel)
        return move

    def run(
        self, board: chess.Board, depth: int, cancel: Optional[threading.Event] = None
    ) -> Tuple[Optional[chess.Move], float]:
        if depth < 1:
            raise ValueError(f"search depth must be >= 1, got {depth}")
        # The caller's board is never touched.
        search_board = board.copy()
        self.nodes = 0
        start_time = time.time()

        maximizing = search_board.turn == chess.WHITE
        score, move = self.search(search_board, depth, maximizing, -INF, INF, cancel, root=True)

        elapsed = time.time() - start_time
        logger.debug(format_search_info(depth, score, self.nodes, elapsed, move))
        return move, score

    # -------------------------
    # Core minimax (alpha-beta)
    # -------------------------
    def search(
        self,
        board: chess.Board,
        depth: int,
        maximizing: bool,
        alpha: float = -INF,
        beta: float = INF,
        cancel: Optional[threading.Event] = None,
        root: bool = False,
    ) -> Tuple[float, Optional[chess.Move]]:
        """
        Returns (score, principal_move) for the node. Only the root caller
        uses the move; interior callers keep the score.

        A drawn position scores 0 below the root, but the root itself is
        still searched so a playable position always yields a move.
        """
        self.nodes += 1
        if cancel is not None and cancel.is_set():
            raise SearchCancelled()

        moves: List[chess.Move] = list(board.legal_moves)
        if not moves:
            if board.is_check():
                # The side to move has been mated.
                return (-INF if maximizing else INF), None
            return 0, None
        if not root and is_draw(board):
            return 0, None
        if depth <= 0:
            return self.evaluator.evaluate(board), None

        best_score = -INF if maximizing else INF
        best_move = None

        for move in moves:
            board.push(move)
            try:
                score, _ = self.search(board, depth - 1, not maximizing, alpha, beta, cancel)
            finally:
                board.pop()

            if maximizing:
                if best_move is None or score > best_score:
                    best_score, best_move = score, move
                alpha = max(alpha, best_score)
            else:
                if best_move is None or score < best_score:
                    best_score, best_move = score, move
                beta = min(beta, best_score)

            if beta <= alpha:
                break

        return best_score, best_move
