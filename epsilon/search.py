"""Move choice: random legal moves and a negamax alpha-beta search."""

from __future__ import annotations

import random

from epsilon import movegen
from epsilon.board import Board
from epsilon.transposition import TranspositionTable, TTBound
from epsilon.types import Move

SCORE_MIN = -32767
SCORE_MAX = 32767


def legal_moves(board: Board) -> list[Move]:
    """Pseudo-legal moves of the side to move that do not leave its king attacked."""
    result = []
    for move in movegen.pseudolegal_moves(board):
        board.make_move(move)
        illegal = board.was_illegal_move()
        board.revert_state()
        if not illegal:
            result.append(move)
    return result


def random_move(board: Board, rng: random.Random | None = None) -> Move:
    """A uniformly chosen legal move."""
    rng = rng if rng is not None else random.Random()
    choices = legal_moves(board)
    if not choices:
        raise ValueError("No legal moves in this position")
    return rng.choice(choices)


def _negamax(board: Board, tt: TranspositionTable, depth: int, alpha: int, beta: int) -> int:
    if depth == 0:
        return board.evaluate()

    original_alpha = alpha
    key = board.zobrist_hash()

    entry = tt.retrieve(key)
    if entry is not None and entry.depth >= depth:
        if entry.bound is TTBound.EXACT:
            return entry.score
        if entry.bound is TTBound.LOWER:
            alpha = max(alpha, entry.score)
        elif entry.score <= alpha:
            return entry.score
        if alpha >= beta:
            return entry.score

    best_score = SCORE_MIN
    for move in movegen.pseudolegal_moves(board):
        board.make_move(move)
        if board.was_illegal_move():
            board.revert_state()
            continue

        score = -_negamax(board, tt, depth - 1, -beta, -alpha)
        board.revert_state()

        if score > best_score:
            best_score = score
            alpha = max(alpha, score)
        if score >= beta:
            return best_score

    if best_score <= original_alpha:
        bound = TTBound.UPPER
    elif best_score >= beta:
        bound = TTBound.LOWER
    else:
        bound = TTBound.EXACT
    tt.store(key, depth, bound, best_score)
    return best_score


def alphabeta(board: Board, tt: TranspositionTable, depth: int) -> Move:
    """The best move found by a ``depth``-ply alpha-beta search on material."""
    if depth < 1:
        raise ValueError(f"Search depth must be at least 1, got {depth}")

    best_score = SCORE_MIN
    best_move: Move | None = None
    for move in movegen.pseudolegal_moves(board):
        board.make_move(move)
        if board.was_illegal_move():
            board.revert_state()
            continue

        score = -_negamax(board, tt, depth - 1, SCORE_MIN, SCORE_MAX)
        board.revert_state()

        if score > best_score:
            best_score = score
            best_move = move

    if best_move is None:
        raise ValueError("No legal moves in this position")
    return best_move