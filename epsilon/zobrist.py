"""Random keys for Zobrist hashing of positions."""

from __future__ import annotations

import random

from epsilon.types import PIECETYPE_COUNT, Color, PieceType, Square

PIECE_KEY_COUNT = 64 * PIECETYPE_COUNT * 2


def piece_key_index(color: Color, piece_type: PieceType, square: Square) -> int:
    """Index into ``Zobrist.pieces`` for a piece of ``color`` and ``piece_type`` on ``square``."""
    if not 0 <= square < 64:
        raise ValueError(f"Square index out of range: {square}")
    return (color.index() * PIECETYPE_COUNT + piece_type.value) * 64 + square


class Zobrist:
    """A set of 64-bit random keys for pieces, side to move, castling and en passant."""

    def __init__(self, seed: int | None = None) -> None:
        rng = random.Random(seed)
        self.pieces: list[int] = [rng.getrandbits(64) for _ in range(PIECE_KEY_COUNT)]
        # Order: white king side, white queen side, black king side, black queen side.
        self.castling_rights: list[int] = [rng.getrandbits(64) for _ in range(4)]
        self.en_passant_file: list[int] = [rng.getrandbits(64) for _ in range(8)]
        self.side_to_move: int = rng.getrandbits(64)