"""FastAPI REST interface to a single game against the configured opponent."""

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict

from rival.config import CONFIG, setup_logging
from rival.game import GameLoop, GameSnapshot, parse_color
from rival.strategies import EngineConfig, StrategyKind

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=CONFIG.ui.engine_name, version="1.0.0")

# Shared game; the engine answers in the background after each move.
game = GameLoop()
game.start()


class MoveRequest(BaseModel):
    move: str  # UCI format e.g. "e2e4"


class ColorRequest(BaseModel):
    color: str  # "white" or "black"


class EngineRequest(BaseModel):
    # The engine command line is server configuration, never client input.
    model_config = ConfigDict(extra="forbid")

    kind: StrategyKind
    depth: Optional[int] = None
    movetime_ms: Optional[int] = None
    seed: Optional[int] = None


def state_payload(snap: GameSnapshot) -> dict:
    data = asdict(snap)
    data["legal_moves"] = list(snap.legal_moves)
    data["history"] = [asdict(record) for record in snap.history]
    return data


@app.get("/state")
def get_state():
    return state_payload(game.snapshot())


@app.post("/move")
def make_move(req: MoveRequest):
    if not game.human_move(req.move):
        raise HTTPException(status_code=400, detail=f"Illegal move: {req.move}")
    return state_payload(game.snapshot())


@app.post("/reset")
def reset_game():
    game.reset()
    return state_payload(game.snapshot())


@app.post("/color")
def set_color(req: ColorRequest):
    try:
        color = parse_color(req.color)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    game.set_human_color(color)
    return state_payload(game.snapshot())


@app.post("/engine")
def set_engine(req: EngineRequest):
    try:
        config = EngineConfig.from_settings(
            kind=req.kind,
            depth=req.depth,
            movetime_ms=req.movetime_ms,
            seed=req.seed,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    game.set_engine(config)
    return state_payload(game.snapshot())


@app.post("/retry")
def retry():
    game.retry()
    return state_payload(game.snapshot())
