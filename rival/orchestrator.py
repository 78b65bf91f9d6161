"""
Engine orchestration: one active strategy, at most one think in flight.

The decision logic is the pure function :func:`transition`, which maps
``(state, event)`` to ``(next_state, effects)``. Effects are plain data
(schedule a delay, start a think, kill a process ...) carried out by
:class:`EngineOrchestrator`, so the state machine can be tested without
threads, timers or child processes.

Every think request gets a fresh integer token. Only a result carrying the
current token is acted on; anything else arrived after a reset, a color
change or a strategy change and is dropped.
"""

import logging
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Tuple

import chess

from rival.config import CONFIG
from rival.errors import EngineUnavailable, InvalidEngineMove, SearchCancelled
from rival.strategies import EngineConfig, Strategy, StrategyKind, build_strategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrchestratorState:
    config: EngineConfig
    settle_delay: float = 0.3
    next_token: int = 1
    thinking: Optional[int] = None  # None is Idle, otherwise the live token
    pending: Optional[int] = None  # token of a request waiting out the delay
    error: Optional[str] = None

    @property
    def is_thinking(self) -> bool:
        return self.thinking is not None

    @property
    def is_idle(self) -> bool:
        return self.thinking is None and self.pending is None


# ── Events ──────────────────────────────────────────────────


@dataclass(frozen=True)
class RequestMove:
    pass


@dataclass(frozen=True)
class DelayElapsed:
    token: int


@dataclass(frozen=True)
class ThinkCompleted:
    token: int
    move: Optional[chess.Move]


@dataclass(frozen=True)
class ThinkFailed:
    token: int
    reason: str
    recycle: bool = False


@dataclass(frozen=True)
class ProposalRejected:
    reason: str


@dataclass(frozen=True)
class Invalidate:
    """Reset or color change: the position the engine was given is gone."""

    reason: str


@dataclass(frozen=True)
class ConfigChanged:
    config: EngineConfig


@dataclass(frozen=True)
class ClearError:
    pass


# ── Effects ─────────────────────────────────────────────────


@dataclass(frozen=True)
class ScheduleDelay:
    token: int
    seconds: float


@dataclass(frozen=True)
class CancelDelay:
    token: int


@dataclass(frozen=True)
class StartThink:
    token: int


@dataclass(frozen=True)
class CancelThink:
    token: int


@dataclass(frozen=True)
class RecycleStrategy:
    pass


@dataclass(frozen=True)
class ApplyProposal:
    token: int
    move: chess.Move


@dataclass(frozen=True)
class ReportFailure:
    reason: str


def _abandon(state: OrchestratorState) -> List[object]:
    effects: List[object] = []
    if state.pending is not None:
        effects.append(CancelDelay(state.pending))
    if state.thinking is not None:
        effects.append(CancelThink(state.thinking))
    return effects


def transition(state: OrchestratorState, event) -> Tuple[OrchestratorState, Tuple[object, ...]]:
    if isinstance(event, RequestMove):
        if not state.is_idle or state.error is not None:
            return state, ()
        token = state.next_token
        return (
            replace(state, next_token=token + 1, pending=token),
            (ScheduleDelay(token, state.settle_delay),),
        )

    if isinstance(event, DelayElapsed):
        if event.token != state.pending:
            return state, ()
        return replace(state, pending=None, thinking=event.token), (StartThink(event.token),)

    if isinstance(event, ThinkCompleted):
        if event.token != state.thinking:
            return state, ()
        if event.move is None:
            reason = "engine returned no move"
            return replace(state, thinking=None, error=reason), (ReportFailure(reason),)
        return replace(state, thinking=None), (ApplyProposal(event.token, event.move),)

    if isinstance(event, ThinkFailed):
        if event.token != state.thinking:
            return state, ()
        effects: List[object] = [RecycleStrategy()] if event.recycle else []
        effects.append(ReportFailure(event.reason))
        return replace(state, thinking=None, error=event.reason), tuple(effects)

    if isinstance(event, ProposalRejected):
        return replace(state, error=event.reason), (ReportFailure(event.reason),)

    if isinstance(event, Invalidate):
        effects = _abandon(state)
        if state.config.kind is StrategyKind.UCI:
            effects.append(RecycleStrategy())
        return replace(state, thinking=None, pending=None, error=None), tuple(effects)

    if isinstance(event, ConfigChanged):
        effects = _abandon(state) + [RecycleStrategy()]
        return (
            replace(state, config=event.config, thinking=None, pending=None, error=None),
            tuple(effects),
        )

    if isinstance(event, ClearError):
        return replace(state, error=None), ()

    raise TypeError(f"unknown event {event!r}")


# ── Runner ──────────────────────────────────────────────────


class ThreadingScheduler:
    """Runs callbacks after a delay on threading.Timer threads."""

    def schedule(self, seconds: float, callback: Callable[[], None]):
        timer = threading.Timer(seconds, callback)
        timer.daemon = True
        timer.start()
        return timer


class EngineOrchestrator:
    """
    Owns the active strategy and executes the effects :func:`transition`
    asks for. ``lock`` is shared with the game loop so that results coming
    back from worker threads are applied atomically with respect to user
    actions.
    """

    def __init__(
        self,
        config: EngineConfig,
        snapshot: Callable[[], chess.Board],
        on_proposal: Callable[[chess.Move], None],
        on_change: Optional[Callable[[], None]] = None,
        scheduler=None,
        executor: Optional[Executor] = None,
        lock=None,
        settle_delay: Optional[float] = None,
        strategy_factory: Callable[[EngineConfig], Strategy] = build_strategy,
    ):
        if settle_delay is None:
            settle_delay = CONFIG.game.settle_delay_ms / 1000.0
        self._state = OrchestratorState(config=config, settle_delay=settle_delay)
        self._snapshot = snapshot
        self._on_proposal = on_proposal
        self._on_change = on_change
        self.scheduler = scheduler or ThreadingScheduler()
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="rival-think"
        )
        self.lock = lock or threading.RLock()
        self.strategy_factory = strategy_factory
        self._strategy: Optional[Strategy] = None
        self._delays: Dict[int, object] = {}
        self._cancels: Dict[int, threading.Event] = {}

    @property
    def state(self) -> OrchestratorState:
        return self._state

    @property
    def config(self) -> EngineConfig:
        return self._state.config

    def dispatch(self, event):
        with self.lock:
            self._state, effects = transition(self._state, event)
            for effect in effects:
                self._perform(effect)
            if self._on_change is not None:
                self._on_change()

    def _active_strategy(self) -> Strategy:
        if self._strategy is None:
            self._strategy = self.strategy_factory(self._state.config)
            logger.info("Activated %s strategy", self._state.config.kind.value)
        return self._strategy

    def _perform(self, effect):
        if isinstance(effect, ScheduleDelay):
            self._delays[effect.token] = self.scheduler.schedule(
                effect.seconds, lambda token=effect.token: self.dispatch(DelayElapsed(token))
            )
        elif isinstance(effect, CancelDelay):
            handle = self._delays.pop(effect.token, None)
            if handle is not None:
                handle.cancel()
        elif isinstance(effect, StartThink):
            self._delays.pop(effect.token, None)
            cancel = threading.Event()
            self._cancels[effect.token] = cancel
            board = self._snapshot()
            strategy = self._active_strategy()
            logger.info("Think %d started (%s) on %s", effect.token, strategy.kind.value, board.fen())
            self.executor.submit(self._think, effect.token, strategy, board, cancel)
        elif isinstance(effect, CancelThink):
            cancel = self._cancels.pop(effect.token, None)
            if cancel is not None:
                cancel.set()
            logger.info("Think %d abandoned", effect.token)
        elif isinstance(effect, RecycleStrategy):
            strategy, self._strategy = self._strategy, None
            if strategy is not None:
                strategy.close()
        elif isinstance(effect, ApplyProposal):
            self._cancels.pop(effect.token, None)
            self._on_proposal(effect.move)
        elif isinstance(effect, ReportFailure):
            logger.warning("Engine request failed: %s", effect.reason)
        else:
            raise TypeError(f"unknown effect {effect!r}")

    def _think(self, token: int, strategy: Strategy, board: chess.Board, cancel: threading.Event):
        """Worker-thread body: run the strategy and report back by token."""
        try:
            move = strategy.propose(board, cancel)
        except SearchCancelled:
            event = ThinkFailed(token, "search cancelled")
        except EngineUnavailable as exc:
            event = ThinkFailed(token, f"engine unavailable: {exc}", recycle=True)
        except InvalidEngineMove as exc:
            event = ThinkFailed(token, f"invalid engine move: {exc}")
        except Exception as exc:
            logger.exception("Strategy %s crashed", strategy.kind.value)
            event = ThinkFailed(token, f"engine error: {exc}", recycle=True)
        else:
            event = ThinkCompleted(token, move)
        if token != self._state.thinking:
            logger.info("Discarding stale result of think %d", token)
        self.dispatch(event)

    def close(self):
        with self.lock:
            for handle in self._delays.values():
                handle.cancel()
            self._delays.clear()
            for cancel in self._cancels.values():
                cancel.set()
            self._cancels.clear()
            strategy, self._strategy = self._strategy, None
        if strategy is not None:
            strategy.close()
        if self._owns_executor:
            self.executor.shutdown(wait=False, cancel_futures=True)
