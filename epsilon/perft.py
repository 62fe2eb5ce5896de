"""Move-path enumeration for checking the move generator."""

from __future__ import annotations

import sys
import time
from typing import TextIO

from epsilon import movegen
from epsilon.board import Board


def perft(board: Board, depth: int) -> int:
    """Number of legal move sequences of length ``depth`` from the position."""
    if depth <= 0:
        return 1
    total = 0
    for move in movegen.pseudolegal_moves(board):
        board.make_move(move)
        if not board.was_illegal_move():
            total += perft(board, depth - 1)
        board.revert_state()
    return total


def divide(board: Board, depth: int, out: TextIO | None = None) -> int:
    """Like ``perft``, also writing each legal root move with its node count to ``out``."""
    out = out if out is not None else sys.stdout
    total = 0
    for move in movegen.pseudolegal_moves(board):
        board.make_move(move)
        if not board.was_illegal_move():
            nodes = perft(board, depth - 1)
            out.write(f"{move.to_uci()}: {nodes}\n")
            total += nodes
        board.revert_state()
    return total


def timed_perft(board: Board, depth: int) -> tuple[float, int]:
    """Run ``perft`` and return (elapsed seconds, node count)."""
    start = time.perf_counter()
    nodes = perft(board, depth)
    return time.perf_counter() - start, nodes