"""
Strategy backed by an external UCI engine process.

Only the small slice of UCI the opponent needs is spoken:

    -> uci                      <- uciok       (once per process)
    -> isready                  <- readyok
    -> position fen <fen>
    -> go movetime <ms>         <- bestmove <from><to>[promo]

Any other line the engine prints (``id``, ``info``, ``option`` ...) is noise.
There is no way to abort a running ``go``; cancellation kills the process,
and a fresh one is spawned on the next request.
"""

import logging
import re
import subprocess
import threading
from typing import Callable, List, Optional

import chess

from rival.errors import EngineUnavailable, InvalidEngineMove
from rival.strategies import Strategy, StrategyKind

logger = logging.getLogger(__name__)

BESTMOVE_RE = re.compile(r"^bestmove\s+(\S+)")
MOVE_RE = re.compile(r"^[a-h][1-8][a-h][1-8][qrbn]?$")
NULL_MOVES = ("(none)", "0000")


class ProcessTransport:
    """Line-oriented pipe to a child process."""

    def __init__(self, command: List[str]):
        self.command = command
        try:
            self.proc = subprocess.Popen(
                command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                bufsize=1,
            )
        except OSError as exc:
            raise EngineUnavailable(f"cannot start {' '.join(command)}: {exc}") from exc
        logger.info("Started engine process %s (pid %s)", command[0], self.proc.pid)

    def send(self, line: str):
        try:
            self.proc.stdin.write(line + "\n")
            self.proc.stdin.flush()
        except (OSError, ValueError) as exc:
            raise EngineUnavailable(f"engine process is gone: {exc}") from exc

    def readline(self) -> str:
        """Next line including its newline, or '' once the process has exited."""
        try:
            return self.proc.stdout.readline()
        except (OSError, ValueError):
            return ""

    def close(self):
        if self.proc.poll() is None:
            self.proc.kill()
            logger.info("Killed engine process %s (pid %s)", self.command[0], self.proc.pid)
        try:
            self.proc.wait(timeout=2)
        except subprocess.TimeoutExpired:
            logger.warning("Engine process %s did not exit after kill", self.proc.pid)
        for pipe in (self.proc.stdin, self.proc.stdout):
            try:
                pipe.close()
            except (OSError, ValueError):
                pass


class ExternalBridge(Strategy):
    kind = StrategyKind.UCI

    def __init__(
        self,
        command: List[str],
        movetime_ms: int = 1000,
        transport_factory: Callable[[List[str]], object] = ProcessTransport,
    ):
        self.command = list(command)
        self.movetime_ms = movetime_ms
        self.transport_factory = transport_factory
        # Serializes requests: never two `go` in flight on one process.
        self._request_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._transport = None
        self._closed = False

    def _ensure_started(self):
        with self._state_lock:
            if self._closed:
                raise EngineUnavailable("bridge was shut down")
            if self._transport is not None:
                return self._transport
            transport = self.transport_factory(self.command)
            self._transport = transport
        transport.send("uci")
        self._wait_for(transport, lambda line: line == "uciok")
        return transport

    def _wait_for(self, transport, accept: Callable[[str], object]):
        while True:
            raw = transport.readline()
            if not raw:
                raise EngineUnavailable("engine process exited")
            line = raw.strip()
            result = accept(line)
            if result:
                return result
            if line:
                logger.debug("Ignoring engine output: %s", line)

    @staticmethod
    def parse_bestmove(line: str) -> Optional[str]:
        """Move token from a well-formed bestmove line, else None."""
        match = BESTMOVE_RE.match(line)
        if not match:
            return None
        token = match.group(1)
        if token in NULL_MOVES or MOVE_RE.match(token):
            return token
        logger.warning("Malformed bestmove line: %s", line)
        return None

    def propose(self, board, cancel=None):
        fen = board.fen()
        with self._request_lock:
            transport = self._ensure_started()
            transport.send("isready")
            self._wait_for(transport, lambda line: line == "readyok")
            transport.send(f"position fen {fen}")
            transport.send(f"go movetime {self.movetime_ms}")
            token = self._wait_for(transport, self.parse_bestmove)

        if token in NULL_MOVES:
            return None
        move = chess.Move.from_uci(token)
        if move not in board.legal_moves:
            raise InvalidEngineMove(token, fen)
        return move

    def close(self):
        with self._state_lock:
            self._closed = True
            transport, self._transport = self._transport, None
        if transport is not None:
            transport.close()
