"""Core engine components: board wrapper, evaluator and search."""

from .board import ChessBoard, MoveRecord, Outcome, Termination, classify
from .evaluator import Evaluator
from .search import SearchEngine
