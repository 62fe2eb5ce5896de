"""Pseudo-legal move generation on top of the precomputed tables."""

from __future__ import annotations

from epsilon import tables
from epsilon.types import BOARD_MASK, Bitboard, Color, Move, MoveType, PieceType, Square, iter_bits

_PROMOTION_ORDER = (PieceType.QUEEN, PieceType.ROOK, PieceType.BISHOP, PieceType.KNIGHT)


def _en_passant_mask(board) -> Bitboard:
    square = board.en_passant_square
    return 0 if square is None else 1 << square


def _reach(piece_type: PieceType, color: Color, square: Square, all_occupied: Bitboard) -> Bitboard:
    if piece_type is PieceType.KNIGHT:
        return tables.KNIGHT_MOVES[square]
    if piece_type is PieceType.BISHOP:
        return tables.bishop_attacks(square, all_occupied)
    if piece_type is PieceType.ROOK:
        return tables.rook_attacks(square, all_occupied)
    if piece_type is PieceType.QUEEN:
        return tables.rook_attacks(square, all_occupied) | tables.bishop_attacks(square, all_occupied)
    if piece_type is PieceType.KING:
        return tables.KING_MOVES[square]
    raise ValueError(f"No sliding or leaping reach for {piece_type}")


def attacks(board, piece_type: PieceType, color: Color, square: Square) -> Bitboard:
    """Capturing targets of a ``color`` ``piece_type`` standing on ``square``."""
    occupied = board.occupied
    enemy = occupied.enemy(color)
    if piece_type is PieceType.PAWN:
        return tables.PAWN_ATTACKS[color.index()][square] & (enemy | _en_passant_mask(board))
    return _reach(piece_type, color, square, occupied.all) & enemy


def moves(board, piece_type: PieceType, color: Color, square: Square) -> Bitboard:
    """Non-capturing targets of a ``color`` ``piece_type`` standing on ``square``."""
    unoccupied = ~board.occupied.all & BOARD_MASK
    if piece_type is PieceType.PAWN:
        single = tables.PAWN_SINGLE_PUSH[color.index()][square] & unoccupied
        if not single:
            return 0
        return single | (tables.PAWN_DOUBLE_PUSH[color.index()][square] & unoccupied)
    return _reach(piece_type, color, square, board.occupied.all) & unoccupied


def _promotions(from_square: Square, to_square: Square) -> list[Move]:
    return [Move(from_square, to_square, MoveType.PROMOTION, kind) for kind in _PROMOTION_ORDER]


def pseudolegal_moves(board) -> list[Move]:
    """All moves for the side to move, ignoring whether the own king is left in check."""
    result: list[Move] = []
    ep_mask = _en_passant_mask(board)
    side = board.color_to_move

    for from_square in range(64):
        piece = board.piece_at(from_square)
        if piece is None or piece.color is not side:
            continue
        is_pawn = piece.piece_type is PieceType.PAWN

        if piece.piece_type is PieceType.KING:
            if board.can_castle_kingside():
                result.append(Move(from_square, from_square + 2, MoveType.CASTLE_KINGSIDE))
            if board.can_castle_queenside():
                result.append(Move(from_square, from_square - 2, MoveType.CASTLE_QUEENSIDE))

        for to_square in iter_bits(moves(board, piece.piece_type, piece.color, from_square)):
            if is_pawn and (to_square < 8 or to_square >= 56):
                result.extend(_promotions(from_square, to_square))
            else:
                result.append(Move(from_square, to_square, MoveType.QUIET))

        for to_square in iter_bits(attacks(board, piece.piece_type, piece.color, from_square)):
            if is_pawn:
                if to_square < 8 or to_square >= 56:
                    result.extend(_promotions(from_square, to_square))
                    continue
                # The en passant square is cleared after every move, so its owner is implied.
                if ep_mask & (1 << to_square) and abs(to_square - from_square) in (7, 9):
                    result.append(Move(from_square, to_square, MoveType.EN_PASSANT))
                    continue
            result.append(Move(from_square, to_square, MoveType.CAPTURE))

    return result