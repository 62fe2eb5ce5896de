"""Board state: piece placement, side to move, castling, en passant and move history."""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence

from epsilon import movegen
from epsilon.types import (
    PIECETYPE_COUNT,
    Bitboard,
    CastlingRights,
    Color,
    HistoryState,
    Mailbox,
    Move,
    MoveType,
    Occupied,
    Piece,
    PieceType,
    Square,
    square_from_algebraic,
    square_to_algebraic,
)
from epsilon.zobrist import Zobrist, piece_key_index

_RED = "\x1b[38;5;9m"
_BLUE = "\x1b[38;5;12m"
_RESET = "\x1b[39m"

# Squares whose emptying or capture removes a castling right.
_CORNER_RIGHTS = {
    0: "white_queen_side",
    7: "white_king_side",
    56: "black_queen_side",
    63: "black_king_side",
}

_CASTLE_MOVES = {
    (Color.WHITE, 4, 6): MoveType.CASTLE_KINGSIDE,
    (Color.WHITE, 4, 2): MoveType.CASTLE_QUEENSIDE,
    (Color.BLACK, 60, 62): MoveType.CASTLE_KINGSIDE,
    (Color.BLACK, 60, 58): MoveType.CASTLE_QUEENSIDE,
}

# (rook from, rook to, right to clear) per castling side and colour.
_ROOK_HOPS = {
    (MoveType.CASTLE_KINGSIDE, Color.WHITE): (7, 5, "white_king_side"),
    (MoveType.CASTLE_KINGSIDE, Color.BLACK): (63, 61, "black_king_side"),
    (MoveType.CASTLE_QUEENSIDE, Color.WHITE): (0, 3, "white_queen_side"),
    (MoveType.CASTLE_QUEENSIDE, Color.BLACK): (56, 59, "black_queen_side"),
}


class Board:
    """A chess position with enough history to take moves back."""

    def __init__(
        self,
        mailbox: Mailbox | None = None,
        color_to_move: Color = Color.WHITE,
        en_passant_square: Square | None = None,
        castling_rights: CastlingRights | None = None,
        zobrist: Zobrist | None = None,
    ) -> None:
        self.mailbox = mailbox if mailbox is not None else Mailbox.empty()
        self.bitboards: list[Bitboard] = [0] * (PIECETYPE_COUNT * 2)
        for square, piece in enumerate(self.mailbox):
            if piece is not None:
                self.bitboards[piece.index()] |= 1 << square
        self.occupied = Occupied()
        self._update_occupied()
        self.color_to_move = color_to_move
        self.en_passant_square = en_passant_square
        self.castling_rights = castling_rights if castling_rights is not None else CastlingRights.full()
        self.history: list[HistoryState] = []
        self.zobrist = zobrist if zobrist is not None else Zobrist()

    @classmethod
    def startpos(cls) -> Board:
        """The standard starting position."""
        return cls(mailbox=Mailbox.startpos(), castling_rights=CastlingRights.full())

    @classmethod
    def from_fen(cls, fen: str | Sequence[str]) -> Board:
        """Build a board from a FEN string or its whitespace-separated fields.

        Only placement, side to move, castling and en passant are read.
        """
        fields = fen.split() if isinstance(fen, str) else list(fen)
        if len(fields) < 4:
            raise ValueError(f"FEN needs at least 4 fields, got {len(fields)}")

        mailbox = Mailbox.empty()
        square = 56  # a8
        for char in fields[0]:
            if char == "/":
                square -= 16
            elif char.isdigit():
                square += int(char)
            else:
                if not 0 <= square < 64:
                    raise ValueError(f"FEN placement runs off the board: {fields[0]}")
                mailbox[square] = Piece.from_char(char)
                square += 1

        rights = CastlingRights.none()
        for char in fields[2]:
            if char == "K":
                rights.white_king_side = True
            elif char == "Q":
                rights.white_queen_side = True
            elif char == "k":
                rights.black_king_side = True
            elif char == "q":
                rights.black_queen_side = True

        en_passant = None if fields[3] == "-" else square_from_algebraic(fields[3])

        return cls(
            mailbox=mailbox,
            color_to_move=Color.from_bool(fields[1] == "w"),
            en_passant_square=en_passant,
            castling_rights=rights,
        )

    def to_fen(self) -> str:
        """Placement, side to move, castling rights and en passant square as FEN fields."""
        rows = []
        for rank in range(7, -1, -1):
            row = ""
            empty = 0
            for file in range(8):
                piece = self.mailbox[rank * 8 + file]
                if piece is None:
                    empty += 1
                    continue
                if empty:
                    row += str(empty)
                row += piece.to_char()
                empty = 0
            if empty:
                row += str(empty)
            rows.append(row)

        rights = self.castling_rights
        castling = "".join(
            letter
            for letter, allowed in (
                ("K", rights.white_king_side),
                ("Q", rights.white_queen_side),
                ("k", rights.black_king_side),
                ("q", rights.black_queen_side),
            )
            if allowed
        ) or "-"
        side = "w" if self.color_to_move is Color.WHITE else "b"
        en_passant = "-" if self.en_passant_square is None else square_to_algebraic(self.en_passant_square)
        return f"{'/'.join(rows)} {side} {castling} {en_passant}"

    def render(self, color: bool = True) -> str:
        """Draw the board as text, rank 8 on top; white pieces red and black blue if ``color``."""
        lines = ["  +-----------------+"]
        for rank in range(7, -1, -1):
            cells = []
            for file in range(8):
                piece = self.mailbox[rank * 8 + file]
                if piece is None:
                    symbol = "."
                else:
                    symbol = piece.to_char()
                    if color:
                        tint = _RED if symbol.isupper() else _BLUE
                        symbol = f"{tint}{symbol}{_RESET}"
                cells.append(symbol + " ")
            lines.append(f"{rank + 1} | {''.join(cells)}|")
        lines.append("  +-----------------+")
        lines.append("    a b c d e f g h")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render(color=False)

    def piece_at(self, square: Square) -> Piece | None:
        return self.mailbox[square]

    def place_piece(self, square: Square, piece: Piece) -> None:
        self.bitboards[piece.index()] |= 1 << square
        self.mailbox[square] = piece

    def remove_piece(self, square: Square, piece: Piece) -> None:
        self.bitboards[piece.index()] &= ~(1 << square)
        self.mailbox[square] = None

    def find_move_type(self, move: Move) -> Move:
        """Return ``move`` with an ``UNKNOWN`` type resolved from the position."""
        if move.move_type is not MoveType.UNKNOWN:
            return move

        piece = self.mailbox[move.from_square]
        if piece is None:
            raise ValueError(f"No piece on {square_to_algebraic(move.from_square)}")

        if piece.piece_type is PieceType.KING:
            castle = _CASTLE_MOVES.get((piece.color, move.from_square, move.to_square))
            if castle is not None:
                return dataclasses.replace(move, move_type=castle)

        if piece.piece_type is PieceType.PAWN and move.to_square == self.en_passant_square:
            return dataclasses.replace(move, move_type=MoveType.EN_PASSANT)

        kind = MoveType.QUIET if self.mailbox[move.to_square] is None else MoveType.CAPTURE
        return dataclasses.replace(move, move_type=kind)

    def save_state(self) -> None:
        self.history.append(
            HistoryState(
                bitboards=tuple(self.bitboards),
                mailbox=self.mailbox.copy(),
                occupied=dataclasses.replace(self.occupied),
                color_to_move=self.color_to_move,
                en_passant_square=self.en_passant_square,
                castling_rights=dataclasses.replace(self.castling_rights),
            )
        )

    def revert_state(self) -> None:
        """Restore the position saved before the last move."""
        if not self.history:
            raise IndexError("No saved state to revert to")
        state = self.history.pop()
        self.bitboards = list(state.bitboards)
        self.mailbox = state.mailbox
        self.occupied = state.occupied
        self.color_to_move = state.color_to_move
        self.en_passant_square = state.en_passant_square
        self.castling_rights = state.castling_rights

    def _update_occupied(self) -> None:
        white = 0
        for board in self.bitboards[:PIECETYPE_COUNT]:
            white |= board
        black = 0
        for board in self.bitboards[PIECETYPE_COUNT:]:
            black |= board
        self.occupied.white = white
        self.occupied.black = black
        self.occupied.all = white | black

    def _take(self, square: Square) -> Piece:
        piece = self.mailbox[square]
        if piece is None:
            raise ValueError(f"Expected a piece on {square_to_algebraic(square)}")
        self.remove_piece(square, piece)
        return piece

    def make_move(self, move: Move) -> None:
        """Play ``move``, saving the current state first so it can be reverted."""
        moving = self.mailbox[move.from_square]
        if moving is None:
            raise ValueError(f"No piece on {square_to_algebraic(move.from_square)}")
        if move.move_type is MoveType.UNKNOWN:
            raise ValueError("Move type must be resolved before the move is made")

        self.save_state()
        rights = self.castling_rights

        if moving.piece_type is PieceType.KING:
            if moving.color is Color.WHITE:
                rights.white_king_side = rights.white_queen_side = False
            else:
                rights.black_king_side = rights.black_queen_side = False
        elif moving.piece_type is PieceType.ROOK and move.from_square in _CORNER_RIGHTS:
            setattr(rights, _CORNER_RIGHTS[move.from_square], False)

        if move.to_square in _CORNER_RIGHTS:
            setattr(rights, _CORNER_RIGHTS[move.to_square], False)

        kind = move.move_type
        if kind is MoveType.CAPTURE:
            self._take(move.to_square)
        elif kind in (MoveType.CASTLE_KINGSIDE, MoveType.CASTLE_QUEENSIDE):
            rook_from, rook_to, right = _ROOK_HOPS[(kind, moving.color)]
            setattr(rights, right, False)
            self.place_piece(rook_to, self._take(rook_from))
        elif kind is MoveType.EN_PASSANT:
            offset = -8 if moving.color is Color.WHITE else 8
            self._take(move.to_square + offset)
        elif kind is MoveType.PROMOTION:
            if move.promotion is None:
                raise ValueError("Promotion move without a promotion piece")
            self.remove_piece(move.from_square, moving)
            captured = self.mailbox[move.to_square]
            if captured is not None:
                self.remove_piece(move.to_square, captured)
            self.place_piece(move.to_square, Piece(move.promotion, moving.color))
            self.color_to_move = self.color_to_move.inverse()
            self.en_passant_square = None
            self._update_occupied()
            return

        self.remove_piece(move.from_square, moving)
        self.place_piece(move.to_square, moving)

        self.color_to_move = self.color_to_move.inverse()
        self.en_passant_square = None

        if moving.piece_type is PieceType.PAWN:
            if moving.color is Color.WHITE and move.to_square == move.from_square + 16:
                self.en_passant_square = move.from_square + 8
            elif moving.color is Color.BLACK and move.to_square == move.from_square - 16:
                self.en_passant_square = move.from_square - 8

        self._update_occupied()

    def is_attacked(self, square: Square) -> bool:
        """Whether the opponent of the side to move attacks ``square``."""
        enemy = self.color_to_move.inverse()
        return any(
            movegen.attacks(self, kind, self.color_to_move, square) & self.bitboards[kind.index(enemy)]
            for kind in PieceType
        )

    def can_castle_kingside(self) -> bool:
        rights = self.castling_rights
        white = self.color_to_move is Color.WHITE
        if not (rights.white_king_side if white else rights.black_king_side):
            return False
        king, f_square, g_square = (4, 5, 6) if white else (60, 61, 62)
        if self.mailbox[f_square] is not None or self.mailbox[g_square] is not None:
            return False
        return not any(self.is_attacked(s) for s in (king, f_square, g_square))

    def can_castle_queenside(self) -> bool:
        rights = self.castling_rights
        white = self.color_to_move is Color.WHITE
        if not (rights.white_queen_side if white else rights.black_queen_side):
            return False
        king, d_square, c_square, b_square = (4, 3, 2, 1) if white else (60, 59, 58, 57)
        if any(self.mailbox[s] is not None for s in (d_square, c_square, b_square)):
            return False
        return not any(self.is_attacked(s) for s in (king, d_square, c_square))

    def was_illegal_move(self) -> bool:
        """After a move: whether it left the mover's king attacked.

        When it did, the side to move stays flipped back; revert the state next.
        """
        self.color_to_move = self.color_to_move.inverse()
        kings = self.bitboards[PieceType.KING.index(self.color_to_move)]
        if not kings:
            raise ValueError(f"No {self.color_to_move.name.lower()} king on the board")
        king_square = (kings & -kings).bit_length() - 1
        if self.is_attacked(king_square):
            return True
        self.color_to_move = self.color_to_move.inverse()
        return False

    def evaluate(self) -> int:
        """Material balance in centipawns from the side to move's point of view."""
        white = black = 0
        for piece in self.mailbox:
            if piece is None:
                continue
            if piece.color is Color.WHITE:
                white += piece.piece_type.material()
            else:
                black += piece.piece_type.material()
        return white - black if self.color_to_move is Color.WHITE else black - white

    def zobrist_hash(self) -> int:
        keys = self.zobrist
        result = 0
        for square, piece in enumerate(self.mailbox):
            if piece is not None:
                result ^= keys.pieces[piece_key_index(piece.color, piece.piece_type, square)]
        if self.color_to_move is Color.WHITE:
            result ^= keys.side_to_move
        rights = self.castling_rights
        for key, allowed in zip(
            keys.castling_rights,
            (rights.white_king_side, rights.white_queen_side, rights.black_king_side, rights.black_queen_side),
        ):
            if allowed:
                result ^= key
        if self.en_passant_square is not None:
            result ^= keys.en_passant_file[self.en_passant_square % 8]
        return result