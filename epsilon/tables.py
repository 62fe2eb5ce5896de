"""Precomputed attack and push tables for the leaping pieces and pawns, plus slider lookups."""

from __future__ import annotations

from functools import lru_cache

from epsilon.magics import BISHOP_DIRECTIONS, ROOK_DIRECTIONS, ray_mask, sliding_attacks
from epsilon.types import BOARD_MASK, Bitboard, Color, Square

# Everything except file a / files a-b, and everything except file h / files g-h.
BIT_MASK_A: Bitboard = ~0x0101010101010101 & BOARD_MASK
BIT_MASK_A2: Bitboard = ~0x0303030303030303 & BOARD_MASK
BIT_MASK_B: Bitboard = ~0x8080808080808080 & BOARD_MASK
BIT_MASK_B2: Bitboard = ~0xC0C0C0C0C0C0C0C0 & BOARD_MASK


def _king_moves(square: Square) -> Bitboard:
    pos = 1 << square
    return (
        (pos & BIT_MASK_B) << 9
        | pos << 8
        | (pos & BIT_MASK_A) << 7
        | (pos & BIT_MASK_B) << 1
        | (pos & BIT_MASK_A) >> 1
        | (pos & BIT_MASK_B) >> 7
        | pos >> 8
        | (pos & BIT_MASK_A) >> 9
    ) & BOARD_MASK


def _knight_moves(square: Square) -> Bitboard:
    pos = 1 << square
    return (
        (pos & BIT_MASK_B) << 17
        | (pos & BIT_MASK_A) << 15
        | (pos & BIT_MASK_B2) << 10
        | (pos & BIT_MASK_A2) << 6
        | (pos & BIT_MASK_B2) >> 6
        | (pos & BIT_MASK_A2) >> 10
        | (pos & BIT_MASK_B) >> 15
        | (pos & BIT_MASK_A) >> 17
    ) & BOARD_MASK


def _pawn_attacks(square: Square, color: Color) -> Bitboard:
    rank, file = divmod(square, 8)
    result = 0
    if color is Color.WHITE and rank < 7:
        if file > 0:
            result |= 1 << (square + 7)
        if file < 7:
            result |= 1 << (square + 9)
    elif color is Color.BLACK and rank > 0:
        if file > 0:
            result |= 1 << (square - 9)
        if file < 7:
            result |= 1 << (square - 7)
    return result


def _pawn_single_push(square: Square, color: Color) -> Bitboard:
    rank = square // 8
    if color is Color.WHITE:
        return 1 << (square + 8) if rank < 7 else 0
    return 1 << (square - 8) if rank > 0 else 0


def _pawn_double_push(square: Square, color: Color) -> Bitboard:
    rank = square // 8
    if color is Color.WHITE:
        return 1 << (square + 16) if rank == 1 else 0
    return 1 << (square - 16) if rank == 6 else 0


KING_MOVES: tuple[Bitboard, ...] = tuple(_king_moves(s) for s in range(64))
KNIGHT_MOVES: tuple[Bitboard, ...] = tuple(_knight_moves(s) for s in range(64))

# Indexed by Color.index(), then by square.
PAWN_ATTACKS: tuple[tuple[Bitboard, ...], ...] = tuple(
    tuple(_pawn_attacks(s, color) for s in range(64)) for color in Color
)
PAWN_SINGLE_PUSH: tuple[tuple[Bitboard, ...], ...] = tuple(
    tuple(_pawn_single_push(s, color) for s in range(64)) for color in Color
)
PAWN_DOUBLE_PUSH: tuple[tuple[Bitboard, ...], ...] = tuple(
    tuple(_pawn_double_push(s, color) for s in range(64)) for color in Color
)

ROOK_MASKS: tuple[Bitboard, ...] = tuple(ray_mask(s, ROOK_DIRECTIONS) for s in range(64))
BISHOP_MASKS: tuple[Bitboard, ...] = tuple(ray_mask(s, BISHOP_DIRECTIONS) for s in range(64))


@lru_cache(maxsize=None)
def _rook_lookup(square: Square, blockers: Bitboard) -> Bitboard:
    return sliding_attacks(square, blockers, ROOK_DIRECTIONS)


@lru_cache(maxsize=None)
def _bishop_lookup(square: Square, blockers: Bitboard) -> Bitboard:
    return sliding_attacks(square, blockers, BISHOP_DIRECTIONS)


def rook_attacks(square: Square, occupied: Bitboard) -> Bitboard:
    """Squares a rook on ``square`` reaches given the full board occupancy."""
    return _rook_lookup(square, occupied & ROOK_MASKS[square])


def bishop_attacks(square: Square, occupied: Bitboard) -> Bitboard:
    """Squares a bishop on ``square`` reaches given the full board occupancy."""
    return _bishop_lookup(square, occupied & BISHOP_MASKS[square])