"""
Minimal UCI server around SearchEngine.

It speaks the same subset the bridge uses, so ``python -m interface.uci`` can
stand in for Stockfish as the external engine. stdout carries protocol lines
only; logging goes to stderr.
"""

import logging
import sys
import time

import chess

from rival.config import CONFIG, setup_logging
from rival.core.search import SearchEngine

logger = logging.getLogger(__name__)


class UCI:
    def __init__(self, out=None, depth=None):
        self.out = out or sys.stdout
        self.board = chess.Board()
        self.engine = SearchEngine(depth=depth or CONFIG.search.depth)

    def send(self, line: str):
        self.out.write(line + "\n")
        self.out.flush()

    def handle(self, command: str) -> bool:
        """Process one command line. Returns False when the loop should stop."""
        tokens = command.split()
        if not tokens:
            return True
        head, args = tokens[0], tokens[1:]
        if head == "uci":
            self.send(f"id name {CONFIG.ui.engine_name}")
            self.send(f"id author {CONFIG.ui.engine_author}")
            self.send("uciok")
        elif head == "isready":
            self.send("readyok")
        elif head == "ucinewgame":
            self.board = chess.Board()
        elif head == "position":
            self._parse_position(args)
        elif head == "go":
            self._parse_go(args)
        elif head == "quit":
            return False
        else:
            logger.debug("Unknown command: %s", command)
        return True

    def _parse_position(self, tokens):
        if not tokens:
            return
        if tokens[0] == "startpos":
            board = chess.Board()
            rest = tokens[1:]
        elif tokens[0] == "fen":
            fen_tokens = []
            rest = []
            for i, tok in enumerate(tokens[1:], start=1):
                if tok == "moves":
                    rest = tokens[i:]
                    break
                fen_tokens.append(tok)
            try:
                board = chess.Board(" ".join(fen_tokens))
            except ValueError:
                logger.warning("Invalid FEN: %s", " ".join(fen_tokens))
                return
        else:
            return
        if rest and rest[0] == "moves":
            for mv in rest[1:]:
                try:
                    move = chess.Move.from_uci(mv)
                except ValueError:
                    break
                if move not in board.legal_moves:
                    break
                board.push(move)
        self.board = board

    def _parse_go(self, tokens):
        depth = self.engine.max_depth
        for i, tok in enumerate(tokens[:-1]):
            if tok == "depth":
                try:
                    depth = max(1, int(tokens[i + 1]))
                except ValueError:
                    logger.warning("Ignoring bad depth %r", tokens[i + 1])
        # movetime is accepted but the search is bounded by depth only.
        start = time.time()
        move, score = self.engine.search_best_move(self.board, depth)
        elapsed_ms = int((time.time() - start) * 1000)
        if move is None:
            self.send("bestmove (none)")
            return
        if score in (float("inf"), float("-inf")):
            self.send(f"info depth {depth} time {elapsed_ms} nodes {self.engine.nodes} pv {move.uci()}")
        else:
            # UCI scores are from the side to move, in centipawns.
            cp = int(score) * 100 * (1 if self.board.turn == chess.WHITE else -1)
            self.send(
                f"info depth {depth} score cp {cp} time {elapsed_ms} "
                f"nodes {self.engine.nodes} pv {move.uci()}"
            )
        self.send(f"bestmove {move.uci()}")

    def run(self, stream=None):
        stream = stream or sys.stdin
        for line in stream:
            if not self.handle(line.strip()):
                break


def main():
    setup_logging(stream=sys.stderr)
    UCI().run()


if __name__ == "__main__":
    main()
