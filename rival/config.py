# rival/config.py
import logging
import os
import shlex
import tomllib
from dataclasses import dataclass, field
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

# Material in pawns. The king value is a sentinel far above any reachable sum.
PIECE_VALUES = {
    "PAWN": 1,
    "KNIGHT": 3,
    "BISHOP": 3,
    "ROOK": 5,
    "QUEEN": 9,
    "KING": 1000,
}

@dataclass
class SearchConfig:
    depth: int = 3

@dataclass
class EvalConfig:
    piece_values: Dict[str, int] = field(default_factory=lambda: PIECE_VALUES.copy())

@dataclass
class BridgeConfig:
    command: List[str] = field(default_factory=lambda: ["stockfish"])
    movetime_ms: int = 1000

@dataclass
class GameConfig:
    settle_delay_ms: int = 300
    human_color: str = "white"
    strategy: str = "search"  # search | random | greedy | uci
    seed: Optional[int] = None

@dataclass
class UIConfig:
    engine_name: str = "Rival"
    engine_author: str = "Rival developers"
    api_port: int = 8000

@dataclass
class Config:
    search: SearchConfig = field(default_factory=SearchConfig)
    eval: EvalConfig = field(default_factory=EvalConfig)
    bridge: BridgeConfig = field(default_factory=BridgeConfig)
    game: GameConfig = field(default_factory=GameConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    log_level: str = "INFO"

    @staticmethod
    def load_from_toml(path: str = "config.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        for section in ("search", "eval", "bridge", "game", "ui"):
            if section not in raw:
                continue
            target = getattr(cfg, section)
            for k, v in raw[section].items():
                if hasattr(target, k):
                    setattr(target, k, v)
                else:
                    logger.warning("Unknown config key %s.%s in %s", section, k, path)
        if "log_level" in raw:
            cfg.log_level = str(raw["log_level"])
        if isinstance(cfg.bridge.command, str):
            cfg.bridge.command = shlex.split(cfg.bridge.command)
        return cfg

    def apply_env(self, environ=None) -> "Config":
        """Apply RIVAL_* environment overrides in place."""
        environ = os.environ if environ is None else environ
        depth = environ.get("RIVAL_SEARCH_DEPTH")
        if depth:
            try:
                self.search.depth = int(depth)
            except ValueError:
                logger.warning("Ignoring RIVAL_SEARCH_DEPTH=%r: not an integer", depth)
        command = environ.get("RIVAL_ENGINE_COMMAND")
        if command:
            self.bridge.command = shlex.split(command)
        level = environ.get("RIVAL_LOG_LEVEL")
        if level:
            self.log_level = level
        return self


def setup_logging(level: Optional[str] = None, stream=None):
    """Configure root logging for an entry point from CONFIG.log_level."""
    logging.basicConfig(
        level=(level or CONFIG.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=stream,
    )

# single globally importable config instance
CONFIG = Config.load_from_toml(os.environ.get("RIVAL_CONFIG_TOML", "config.toml")).apply_env()
