"""Rival: play chess against interchangeable computer opponents."""

from rival.game import GameLoop, GameSnapshot
from rival.strategies import EngineConfig, StrategyKind

__all__ = ["GameLoop", "GameSnapshot", "EngineConfig", "StrategyKind"]
