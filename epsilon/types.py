"""Core chess types: squares, colours, pieces, moves and board containers."""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass, field

Square = int
Bitboard = int

BOARD_MASK: Bitboard = (1 << 64) - 1

FILES = "abcdefgh"
RANKS = "12345678"

ALGEBRAIC_TABLE: tuple[str, ...] = tuple(
    f"{file}{rank}" for rank in RANKS for file in FILES
)


def square_from_algebraic(text: str) -> Square:
    """Convert a square name such as ``e4`` into its index (a1 = 0, h8 = 63)."""
    if len(text) != 2 or text[0] not in FILES or text[1] not in RANKS:
        raise ValueError(f"Invalid algebraic square {text}")
    return RANKS.index(text[1]) * 8 + FILES.index(text[0])


def square_to_algebraic(square: Square) -> str:
    """Convert a square index into its algebraic name."""
    if not 0 <= square < 64:
        raise ValueError(f"Square index out of range: {square}")
    return ALGEBRAIC_TABLE[square]


def iter_bits(bitboard: Bitboard) -> Iterator[Square]:
    """Yield the indices of the set bits, lowest first."""
    while bitboard:
        lowest = bitboard & -bitboard
        yield lowest.bit_length() - 1
        bitboard ^= lowest


def format_bitboard(bitboard: Bitboard) -> str:
    """Render a bitboard as an 8x8 grid, rank 8 at the top."""
    lines = ["  +-----------------+"]
    for rank in range(7, -1, -1):
        cells = "".join(
            ("X" if (bitboard >> (rank * 8 + file)) & 1 else ".") + " "
            for file in range(8)
        )
        lines.append(f"{rank + 1} | {cells}|")
    lines.append("  +-----------------+")
    lines.append("    a b c d e f g h")
    return "\n".join(lines)


class Color(enum.Enum):
    WHITE = 0
    BLACK = 1

    def inverse(self) -> Color:
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @classmethod
    def from_bool(cls, value: bool) -> Color:
        """``True`` means white, ``False`` means black."""
        return cls.WHITE if value else cls.BLACK

    def is_white(self) -> bool:
        return self is Color.WHITE

    def index(self) -> int:
        return self.value


class PieceType(enum.Enum):
    PAWN = 0
    KNIGHT = 1
    BISHOP = 2
    ROOK = 3
    QUEEN = 4
    KING = 5

    def index(self, color: Color) -> int:
        """Index of this piece type for ``color`` in a 12-entry bitboard array."""
        return self.value + PIECETYPE_COUNT * color.index()

    def material(self) -> int:
        """Material value in centipawns."""
        return _MATERIAL[self]


PIECETYPE_COUNT = len(PieceType)

_MATERIAL = {
    PieceType.PAWN: 100,
    PieceType.KNIGHT: 300,
    PieceType.BISHOP: 300,
    PieceType.ROOK: 500,
    PieceType.QUEEN: 900,
    PieceType.KING: 10000,
}

_PIECE_LETTERS = {
    PieceType.PAWN: "p",
    PieceType.KNIGHT: "n",
    PieceType.BISHOP: "b",
    PieceType.ROOK: "r",
    PieceType.QUEEN: "q",
    PieceType.KING: "k",
}
_LETTER_PIECES = {letter: kind for kind, letter in _PIECE_LETTERS.items()}


@dataclass(frozen=True)
class Piece:
    piece_type: PieceType
    color: Color

    @classmethod
    def from_char(cls, char: str) -> Piece:
        """Parse a FEN piece letter; upper case is white."""
        kind = _LETTER_PIECES.get(char.lower()) if len(char) == 1 else None
        if kind is None:
            raise ValueError(f"Invalid piece character: {char!r}")
        return cls(kind, Color.from_bool(char.isupper()))

    def to_char(self) -> str:
        letter = _PIECE_LETTERS[self.piece_type]
        return letter.upper() if self.color is Color.WHITE else letter

    def index(self) -> int:
        return self.piece_type.index(self.color)


@dataclass
class CastlingRights:
    white_queen_side: bool = True
    white_king_side: bool = True
    black_queen_side: bool = True
    black_king_side: bool = True

    @classmethod
    def full(cls) -> CastlingRights:
        return cls(True, True, True, True)

    @classmethod
    def none(cls) -> CastlingRights:
        return cls(False, False, False, False)


class MoveType(enum.Enum):
    UNKNOWN = enum.auto()
    QUIET = enum.auto()
    CAPTURE = enum.auto()
    EN_PASSANT = enum.auto()
    CASTLE_KINGSIDE = enum.auto()
    CASTLE_QUEENSIDE = enum.auto()
    PROMOTION = enum.auto()


_PROMOTION_LETTERS = {
    PieceType.KNIGHT: "n",
    PieceType.BISHOP: "b",
    PieceType.ROOK: "r",
    PieceType.QUEEN: "q",
}
_LETTER_PROMOTIONS = {letter: kind for kind, letter in _PROMOTION_LETTERS.items()}


@dataclass
class Move:
    from_square: Square
    to_square: Square
    move_type: MoveType
    promotion: PieceType | None = None

    @classmethod
    def from_uci(cls, uci: str) -> Move:
        """Parse a long-algebraic move such as ``e2e4`` or ``e7e8q``."""
        if len(uci) < 4:
            raise ValueError(f"Invalid UCI move: {uci!r}")
        from_square = square_from_algebraic(uci[0:2])
        to_square = square_from_algebraic(uci[2:4])
        if len(uci) == 4:
            return cls(from_square, to_square, MoveType.QUIET)
        promotion = _LETTER_PROMOTIONS.get(uci[4].lower())
        if promotion is None:
            raise ValueError(f"Invalid promotion in UCI move: {uci!r}")
        return cls(from_square, to_square, MoveType.PROMOTION, promotion)

    def to_uci(self) -> str:
        text = square_to_algebraic(self.from_square) + square_to_algebraic(self.to_square)
        if self.move_type is MoveType.PROMOTION:
            letter = _PROMOTION_LETTERS.get(self.promotion)
            if letter is None:
                raise ValueError(f"Invalid promotion piece: {self.promotion}")
            text += letter
        return text

    def __str__(self) -> str:
        return self.to_uci()


_BACK_RANK = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


@dataclass
class Mailbox:
    """Square-indexed array of pieces."""

    squares: list[Piece | None] = field(default_factory=lambda: [None] * 64)

    @classmethod
    def empty(cls) -> Mailbox:
        return cls()

    @classmethod
    def startpos(cls) -> Mailbox:
        white_back = [Piece(kind, Color.WHITE) for kind in _BACK_RANK]
        white_pawns = [Piece(PieceType.PAWN, Color.WHITE)] * 8
        black_pawns = [Piece(PieceType.PAWN, Color.BLACK)] * 8
        black_back = [Piece(kind, Color.BLACK) for kind in _BACK_RANK]
        return cls(white_back + white_pawns + [None] * 32 + black_pawns + black_back)

    def copy(self) -> Mailbox:
        return Mailbox(list(self.squares))

    def __getitem__(self, square: Square) -> Piece | None:
        return self.squares[square]

    def __setitem__(self, square: Square, piece: Piece | None) -> None:
        self.squares[square] = piece

    def __iter__(self) -> Iterator[Piece | None]:
        return iter(self.squares)

    def __len__(self) -> int:
        return len(self.squares)


@dataclass
class Occupied:
    white: Bitboard = 0
    black: Bitboard = 0
    all: Bitboard = 0

    def enemy(self, color: Color) -> Bitboard:
        """Occupancy of the side opposing ``color``."""
        return self.black if color is Color.WHITE else self.white


@dataclass
class HistoryState:
    """Snapshot of a board taken before a move is made."""

    bitboards: tuple[Bitboard, ...]
    mailbox: Mailbox
    occupied: Occupied
    color_to_move: Color
    en_passant_square: Square | None
    castling_rights: CastlingRights