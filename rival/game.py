"""
GameLoop: human versus the active strategy on one authoritative board.

Whose turn the engine has is never stored. It is derived every time from the
side to move, the human's color, the game outcome and the orchestrator's
thinking state.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

import chess

from rival.config import CONFIG
from rival.core.board import ChessBoard, MoveRecord
from rival.orchestrator import (
    ClearError,
    ConfigChanged,
    EngineOrchestrator,
    Invalidate,
    ProposalRejected,
    RequestMove,
)
from rival.strategies import EngineConfig, build_strategy

logger = logging.getLogger(__name__)


def color_name(color: bool) -> str:
    return "white" if color == chess.WHITE else "black"


def parse_color(value: Union[str, bool]) -> bool:
    if isinstance(value, bool):
        return value
    name = value.strip().lower()
    if name in ("w", "white"):
        return chess.WHITE
    if name in ("b", "black"):
        return chess.BLACK
    raise ValueError(f"unknown color {value!r}")


@dataclass(frozen=True)
class GameSnapshot:
    """What the presentation layer gets after every state change."""

    fen: str
    turn: str
    human_color: str
    thinking: bool
    think_token: Optional[int]
    pending: bool
    termination: str
    winner: Optional[str]
    message: str
    engine: str
    depth: int
    last_error: Optional[str]
    legal_moves: Tuple[str, ...]
    history: Tuple[MoveRecord, ...]

    @property
    def is_over(self) -> bool:
        return self.termination != "none"

    def move_lines(self) -> List[str]:
        """Numbered move list, e.g. ["1. e4 e5", "2. Nf3"], or ["7... Kf8"] from a FEN."""
        board = chess.Board(self.fen)
        ply = (board.fullmove_number - 1) * 2 + int(board.turn == chess.BLACK) - len(self.history)
        lines: List[str] = []
        for record in self.history:
            number = ply // 2 + 1
            if ply % 2 == 0:
                lines.append(f"{number}. {record.san}")
            elif not lines:
                lines.append(f"{number}... {record.san}")
            else:
                lines[-1] += f" {record.san}"
            ply += 1
        return lines


class GameLoop:
    def __init__(
        self,
        engine_config: Optional[EngineConfig] = None,
        human_color: Union[str, bool] = None,
        fen: Optional[str] = None,
        scheduler=None,
        executor=None,
        settle_delay: Optional[float] = None,
        strategy_factory=build_strategy,
    ):
        self._lock = threading.RLock()
        self._changed = threading.Condition(self._lock)
        self._listeners: List[Callable[[GameSnapshot], None]] = []
        self.board = ChessBoard(fen)
        self._start_fen = fen
        self.human_color = parse_color(
            CONFIG.game.human_color if human_color is None else human_color
        )
        self.orchestrator = EngineOrchestrator(
            engine_config or EngineConfig.from_settings(),
            snapshot=self.board.copy,
            on_proposal=self._apply_engine_move,
            on_change=self._notify,
            scheduler=scheduler,
            executor=executor,
            lock=self._lock,
            settle_delay=settle_delay,
            strategy_factory=strategy_factory,
        )

    # ── Derived state ───────────────────────────────────────

    def engine_to_move(self) -> bool:
        with self._lock:
            return (
                self.board.turn != self.human_color
                and not self.board.is_game_over()
                and not self.orchestrator.state.is_thinking
            )

    def snapshot(self) -> GameSnapshot:
        with self._lock:
            state = self.orchestrator.state
            outcome = self.board.outcome()
            legal = () if outcome.is_over else tuple(m.uci() for m in self.board.legal_moves())
            return GameSnapshot(
                fen=self.board.get_fen(),
                turn=color_name(self.board.turn),
                human_color=color_name(self.human_color),
                thinking=state.is_thinking,
                think_token=state.thinking,
                pending=state.pending is not None,
                termination=outcome.termination.value,
                winner=color_name(outcome.winner) if outcome.winner is not None else None,
                message=outcome.message(),
                engine=state.config.kind.value,
                depth=state.config.depth,
                last_error=state.error,
                legal_moves=legal,
                history=tuple(self.board.move_history),
            )

    # ── Listeners ───────────────────────────────────────────

    def subscribe(self, callback: Callable[[GameSnapshot], None]) -> Callable[[], None]:
        """Call ``callback`` with a fresh snapshot after every change."""
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def _notify(self):
        with self._lock:
            self._changed.notify_all()
            if not self._listeners:
                return
            snap = self.snapshot()
            for callback in list(self._listeners):
                try:
                    callback(snap)
                except Exception:
                    logger.exception("Game listener %r failed", callback)

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until no request is pending or thinking. Returns False on timeout."""
        with self._changed:
            return self._changed.wait_for(lambda: self.orchestrator.state.is_idle, timeout)

    # ── Turn handling ───────────────────────────────────────

    def _maybe_request(self):
        if self.engine_to_move():
            self.orchestrator.dispatch(RequestMove())

    def _after_move(self, record: MoveRecord):
        outcome = self.board.outcome()
        if outcome.is_over:
            logger.info("Game over after %s: %s", record.san, outcome.message())
        self._notify()
        self._maybe_request()

    def start(self):
        """Let the engine open the game if it has the first move."""
        with self._lock:
            self._notify()
            self._maybe_request()

    def human_move(self, move: Union[str, chess.Move]) -> bool:
        """Apply a human move if it is legal and it is the human's turn."""
        with self._lock:
            if self.board.is_game_over() or self.board.turn != self.human_color:
                return False
            if isinstance(move, str):
                move = self.board.parse_move(move)
                if move is None:
                    return False
            record = self.board.push(move, by="human")
            if record is None:
                logger.debug("Rejected illegal move %s", move.uci())
                return False
            logger.info("Human played %s", record.san)
            self._after_move(record)
            return True

    def _apply_engine_move(self, move: chess.Move):
        # Runs under the shared lock, from the orchestrator.
        if self.board.turn == self.human_color or self.board.is_game_over():
            self.orchestrator.dispatch(ProposalRejected(f"engine moved out of turn: {move.uci()}"))
            return
        record = self.board.push(move, by="engine")
        if record is None:
            self.orchestrator.dispatch(ProposalRejected(f"invalid engine move: {move.uci()}"))
            return
        logger.info("Engine played %s", record.san)
        self._after_move(record)

    # ── User actions ────────────────────────────────────────

    def reset(self):
        """Start a new game with the same colors and engine."""
        with self._lock:
            self.orchestrator.dispatch(Invalidate("reset"))
            if self._start_fen:
                self.board.set_fen(self._start_fen)
            else:
                self.board.reset()
            logger.info("New game, human plays %s", color_name(self.human_color))
            self._notify()
            self._maybe_request()

    def set_human_color(self, color: Union[str, bool]):
        """Switch sides. Like the reset button, this starts a new game."""
        with self._lock:
            self.human_color = parse_color(color)
            self.reset()

    def toggle_color(self):
        with self._lock:
            self.set_human_color(not self.human_color)

    def set_engine(self, config: EngineConfig):
        with self._lock:
            self.orchestrator.dispatch(ConfigChanged(config))
            logger.info("Engine set to %s", config)
            self._maybe_request()

    def retry(self):
        """Ask the engine again after a failure."""
        with self._lock:
            self.orchestrator.dispatch(ClearError())
            self._maybe_request()

    def close(self):
        self.orchestrator.close()
