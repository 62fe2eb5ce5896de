from dataclasses import dataclass, field

from epsilon.movegen import attacks, moves, pseudolegal_moves
from epsilon.tables import rook_attacks
from epsilon.types import (
    Color,
    Mailbox,
    Move,
    MoveType,
    Occupied,
    Piece,
    PieceType,
    square_from_algebraic as sq,
)


@dataclass
class FakeBoard:
    mailbox: Mailbox
    color_to_move: Color = Color.WHITE
    en_passant_square: int | None = None
    kingside: bool = False
    queenside: bool = False
    occupied: Occupied = field(init=False)

    def __post_init__(self):
        white = black = 0
        for square, piece in enumerate(self.mailbox):
            if piece is None:
                continue
            if piece.color is Color.WHITE:
                white |= 1 << square
            else:
                black |= 1 << square
        self.occupied = Occupied(white, black, white | black)

    def piece_at(self, square):
        return self.mailbox[square]

    def can_castle_kingside(self):
        return self.kingside

    def can_castle_queenside(self):
        return self.queenside


def make_board(placement, **kwargs):
    mailbox = Mailbox.empty()
    for name, char in placement.items():
        mailbox[sq(name)] = Piece.from_char(char)
    return FakeBoard(mailbox, **kwargs)


def test_start_position_has_twenty_moves():
    board = FakeBoard(Mailbox.startpos())
    generated = pseudolegal_moves(board)
    assert len(generated) == 20
    assert all(m.move_type is MoveType.QUIET for m in generated)


def test_generated_moves_belong_to_side_to_move():
    board = FakeBoard(Mailbox.startpos(), color_to_move=Color.BLACK)
    for m in pseudolegal_moves(board):
        assert board.piece_at(m.from_square).color is Color.BLACK


def test_pawn_push_promotions_in_order():
    board = make_board({"a7": "P", "e1": "K", "e8": "k"})
    promos = [m for m in pseudolegal_moves(board) if m.from_square == sq("a7")]
    assert promos == [
        Move(sq("a7"), sq("a8"), MoveType.PROMOTION, PieceType.QUEEN),
        Move(sq("a7"), sq("a8"), MoveType.PROMOTION, PieceType.ROOK),
        Move(sq("a7"), sq("a8"), MoveType.PROMOTION, PieceType.BISHOP),
        Move(sq("a7"), sq("a8"), MoveType.PROMOTION, PieceType.KNIGHT),
    ]


def test_en_passant_capture_is_generated():
    board = make_board({"e5": "P", "d5": "p", "a1": "K", "h8": "k"}, en_passant_square=sq("d6"))
    pawn_moves = [m for m in pseudolegal_moves(board) if m.from_square == sq("e5")]
    assert Move(sq("e5"), sq("d6"), MoveType.EN_PASSANT) in pawn_moves
    assert Move(sq("e5"), sq("e6"), MoveType.QUIET) in pawn_moves


def test_castling_moves_come_first_for_king():
    board = make_board(
        {"e1": "K", "a1": "R", "h1": "R", "e8": "k"}, kingside=True, queenside=True
    )
    king_moves = [m for m in pseudolegal_moves(board) if m.from_square == sq("e1")]
    assert king_moves[0] == Move(sq("e1"), sq("g1"), MoveType.CASTLE_KINGSIDE)
    assert king_moves[1] == Move(sq("e1"), sq("c1"), MoveType.CASTLE_QUEENSIDE)


def test_pawn_push_blocked():
    blocked = make_board({"e2": "P", "e3": "n"})
    assert moves(blocked, PieceType.PAWN, Color.WHITE, sq("e2")) == 0
    half = make_board({"e2": "P", "e4": "n"})
    assert moves(half, PieceType.PAWN, Color.WHITE, sq("e2")) == 1 << sq("e3")
    free = make_board({"e2": "P"})
    assert moves(free, PieceType.PAWN, Color.WHITE, sq("e2")) == 1 << sq("e3") | 1 << sq("e4")


def test_knight_attacks_only_enemies():
    board = make_board({"a1": "N", "b3": "p", "c2": "P"})
    assert attacks(board, PieceType.KNIGHT, Color.WHITE, sq("a1")) == 1 << sq("b3")
    assert moves(board, PieceType.KNIGHT, Color.WHITE, sq("a1")) == 0


def test_rook_moves_and_attacks_partition_reach():
    board = make_board({"d4": "R", "d7": "p", "g4": "P", "d2": "b"})
    occupied = board.occupied
    quiet = moves(board, PieceType.ROOK, Color.WHITE, sq("d4"))
    captures = attacks(board, PieceType.ROOK, Color.WHITE, sq("d4"))
    reach = rook_attacks(sq("d4"), occupied.all)
    assert quiet & captures == 0
    assert (quiet | captures) == reach & ~occupied.white
    assert captures == 1 << sq("d7") | 1 << sq("d2")


def test_capture_moves_are_typed_as_captures():
    board = make_board({"d4": "Q", "d8": "r", "a1": "K", "h1": "k"})
    queen_moves = [m for m in pseudolegal_moves(board) if m.from_square == sq("d4")]
    captures = [m for m in queen_moves if m.move_type is MoveType.CAPTURE]
    assert captures == [Move(sq("d4"), sq("d8"), MoveType.CAPTURE)]