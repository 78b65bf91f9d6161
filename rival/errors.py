"""Exceptions raised by strategies, the bridge and the orchestrator."""


class RivalError(Exception):
    """Base class for all errors raised by the move-selection subsystem."""


class EngineUnavailable(RivalError):
    """The external engine could not be started or stopped responding."""


class InvalidEngineMove(RivalError):
    """A strategy proposed a move that is not legal in the current position."""

    def __init__(self, move: str, fen: str):
        super().__init__(f"{move} is not legal in {fen}")
        self.move = move
        self.fen = fen


class SearchCancelled(RivalError):
    """An in-process search was stopped before it finished."""
