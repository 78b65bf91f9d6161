"""
Interchangeable move-selection strategies.

Every strategy answers the same question: given a private copy of the
position, which move would it play for the side to move? ``None`` means it
has nothing to propose (no legal moves). Strategies never see the
authoritative board; the game loop validates whatever they return.
"""

import logging
import random
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import chess

from rival.config import CONFIG, Config
from rival.core.search import SearchEngine

logger = logging.getLogger(__name__)


class StrategyKind(str, Enum):
    SEARCH = "search"
    RANDOM = "random"
    GREEDY = "greedy"
    UCI = "uci"


@dataclass(frozen=True)
class EngineConfig:
    """User-selected opponent: which strategy and its depth or time budget."""

    kind: StrategyKind = StrategyKind.SEARCH
    depth: int = 3
    movetime_ms: int = 1000
    command: Tuple[str, ...] = field(default=("stockfish",))
    seed: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "kind", StrategyKind(self.kind))
        object.__setattr__(self, "command", tuple(self.command))
        if self.depth < 1:
            raise ValueError(f"depth must be >= 1, got {self.depth}")
        if self.movetime_ms <= 0:
            raise ValueError(f"movetime_ms must be > 0, got {self.movetime_ms}")

    @classmethod
    def from_settings(cls, cfg: Config = CONFIG, **overrides) -> "EngineConfig":
        values = dict(
            kind=cfg.game.strategy,
            depth=cfg.search.depth,
            movetime_ms=cfg.bridge.movetime_ms,
            command=tuple(cfg.bridge.command),
            seed=cfg.game.seed,
        )
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class Strategy(ABC):
    """Common contract: propose a move for the side to move, or report none."""

    kind: StrategyKind

    @abstractmethod
    def propose(
        self, board: chess.Board, cancel: Optional[threading.Event] = None
    ) -> Optional[chess.Move]:
        """Return a legal move for ``board.turn`` or None if there is none."""

    def close(self):
        """Release any resources held by the strategy."""


class SearchStrategy(Strategy):
    kind = StrategyKind.SEARCH

    def __init__(self, depth: int = 3, engine: Optional[SearchEngine] = None):
        self.engine = engine or SearchEngine(depth=depth)
        self.depth = depth

    def propose(self, board, cancel=None):
        return self.engine.select(board, self.depth, cancel=cancel)


class RandomMover(Strategy):
    kind = StrategyKind.RANDOM

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random(seed)

    def propose(self, board, cancel=None):
        moves = list(board.legal_moves)
        if not moves:
            return None
        return self.rng.choice(moves)


class GreedyCapture(Strategy):
    """Takes something whenever it can, otherwise plays a random move."""

    kind = StrategyKind.GREEDY

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random(seed)

    @staticmethod
    def captures(board: chess.Board, moves: List[chess.Move]) -> List[chess.Move]:
        return [m for m in moves if board.is_capture(m) or board.is_en_passant(m)]

    def propose(self, board, cancel=None):
        moves = list(board.legal_moves)
        if not moves:
            return None
        captures = self.captures(board, moves)
        return self.rng.choice(captures or moves)


def build_strategy(config: EngineConfig) -> Strategy:
    """Instantiate the strategy an EngineConfig describes."""
    if config.kind is StrategyKind.SEARCH:
        return SearchStrategy(depth=config.depth)
    if config.kind is StrategyKind.RANDOM:
        return RandomMover(seed=config.seed)
    if config.kind is StrategyKind.GREEDY:
        return GreedyCapture(seed=config.seed)
    from rival.bridge import ExternalBridge

    return ExternalBridge(list(config.command), movetime_ms=config.movetime_ms)
