"""Play in the terminal against the configured opponent."""

import argparse
import logging
import shlex

import chess

from rival.config import CONFIG, setup_logging
from rival.game import GameLoop, GameSnapshot
from rival.strategies import EngineConfig, StrategyKind

logger = logging.getLogger(__name__)

HELP = "Commands: <uci move> (e.g. e2e4), new, swap, retry, quit"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Play chess against a computer opponent.")
    parser.add_argument("--color", choices=["white", "black"], default=CONFIG.game.human_color)
    parser.add_argument(
        "--strategy", choices=[k.value for k in StrategyKind], default=CONFIG.game.strategy
    )
    parser.add_argument("--depth", type=int, default=None, help="search depth in plies")
    parser.add_argument("--movetime", type=int, default=None, help="external engine budget in ms")
    parser.add_argument("--engine-cmd", default=None, help="command line of a UCI engine")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--fen", default=None, help="start from this position")
    return parser


def config_from_args(args) -> EngineConfig:
    return EngineConfig.from_settings(
        kind=args.strategy,
        depth=args.depth,
        movetime_ms=args.movetime,
        command=tuple(shlex.split(args.engine_cmd)) if args.engine_cmd else None,
        seed=args.seed,
    )


def render(snap: GameSnapshot) -> str:
    text = str(chess.Board(snap.fen))
    if snap.human_color == "black":
        text = "\n".join(line[::-1] for line in reversed(text.splitlines()))
    lines = [text]
    if snap.history:
        last = snap.history[-1]
        who = "You" if last.by == "human" else "Engine"
        lines.append(f"{who} played: {last.san}")
    if snap.is_over:
        lines.append(snap.message)
    elif snap.last_error:
        lines.append(f"Engine problem: {snap.last_error} (type 'retry')")
    return "\n".join(lines)


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging()
    game = GameLoop(config_from_args(args), human_color=args.color, fen=args.fen)
    print(HELP)
    game.start()
    try:
        while True:
            game.wait_until_idle()
            snap = game.snapshot()
            print(render(snap))
            print("----------------------------")
            try:
                command = input("Your move: ").strip()
            except EOFError:
                break
            if command == "quit":
                break
            elif command == "new":
                game.reset()
            elif command == "swap":
                game.toggle_color()
            elif command == "retry":
                game.retry()
            elif snap.is_over:
                print("Game over. Type 'new' to play again.")
            elif not game.human_move(command):
                print("Illegal move, try again.")
    finally:
        game.close()


if __name__ == "__main__":
    main()
