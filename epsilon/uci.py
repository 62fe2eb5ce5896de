"""UCI front end: command parsing and the engine loop that answers commands."""

from __future__ import annotations

import argparse
import dataclasses
import enum
import sys
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from itertools import islice
from typing import TextIO

from epsilon import movegen, perft, search
from epsilon.board import Board
from epsilon.transposition import TranspositionTable
from epsilon.types import CastlingRights, Move, MoveType, format_bitboard, square_from_algebraic

ENGINE_NAME = "Epsilon"
DEFAULT_SEARCH_DEPTH = 5
DEFAULT_TABLE_MB = 16

KIWIPETE_FEN = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"


class CommandKind(enum.Enum):
    UCI = enum.auto()
    IS_READY = enum.auto()
    POSITION = enum.auto()
    GO = enum.auto()
    STOP = enum.auto()
    QUIT = enum.auto()
    DEBUG = enum.auto()
    UNKNOWN = enum.auto()


class DebugKind(enum.Enum):
    MOVE = enum.auto()
    UNDO = enum.auto()
    FEN = enum.auto()
    PRINT = enum.auto()
    PRINT_OCCUPIED = enum.auto()
    PRINT_ATTACKS = enum.auto()
    PRINT_MOVES = enum.auto()
    POSITION = enum.auto()
    EN_PASSANT = enum.auto()
    CASTLING_RIGHTS = enum.auto()
    ALL_STATS = enum.auto()
    PERFT = enum.auto()
    PERFT_SINGLE_LINE = enum.auto()
    DIVIDE = enum.auto()
    UNKNOWN = enum.auto()


@dataclass
class Command:
    """A parsed input line.

    ``fen`` is None for the starting position; ``argument`` carries a debug
    command's square, move, position name or depth.
    """

    kind: CommandKind
    text: str = ""
    debug: DebugKind | None = None
    argument: str | int | None = None
    fen: list[str] | None = None
    moves: list[str] = field(default_factory=list)


_SIMPLE = {
    "uci": CommandKind.UCI,
    "isready": CommandKind.IS_READY,
    "stop": CommandKind.STOP,
    "quit": CommandKind.QUIT,
    "go": CommandKind.GO,
}

_SIMPLE_DEBUG = {
    "fen": DebugKind.FEN,
    "enpassant": DebugKind.EN_PASSANT,
    "undo": DebugKind.UNDO,
    "castling": DebugKind.CASTLING_RIGHTS,
    "allstats": DebugKind.ALL_STATS,
}

_DEBUG_WITH_TEXT = {
    "pos": DebugKind.POSITION,
    "move": DebugKind.MOVE,
}


def _trailing_moves(tokens: Iterator[str]) -> list[str]:
    return list(tokens) if next(tokens, None) == "moves" else []


def _depth(token: str) -> int:
    try:
        return int(token)
    except ValueError:
        raise ValueError(f"Invalid depth: {token!r}") from None


def _parse_position(line: str, tokens: Iterator[str]) -> Command:
    sub = next(tokens, None)
    if sub == "startpos":
        return Command(CommandKind.POSITION, line, moves=_trailing_moves(tokens))
    if sub == "fen":
        fen = list(islice(tokens, 6))
        if len(fen) < 4:
            raise ValueError(f"FEN needs at least 4 fields: {line!r}")
        return Command(CommandKind.POSITION, line, fen=fen, moves=_trailing_moves(tokens))
    return Command(CommandKind.UNKNOWN, line)


def _parse_debug(line: str, tokens: Iterator[str]) -> Command:
    def debug(kind: DebugKind, argument: str | int | None = None) -> Command:
        return Command(CommandKind.DEBUG, line, kind, argument)

    sub = next(tokens, None)
    if sub in _SIMPLE_DEBUG:
        return debug(_SIMPLE_DEBUG[sub])

    if sub == "print":
        target = next(tokens, None)
        if target == "occupied":
            return debug(DebugKind.PRINT_OCCUPIED)
        if target in ("attacks", "moves"):
            square = next(tokens, None)
            if square is None:
                return debug(DebugKind.UNKNOWN)
            kind = DebugKind.PRINT_ATTACKS if target == "attacks" else DebugKind.PRINT_MOVES
            return debug(kind, square)
        return debug(DebugKind.PRINT)

    if sub in _DEBUG_WITH_TEXT:
        argument = next(tokens, None)
        if argument is None:
            return debug(DebugKind.UNKNOWN)
        return debug(_DEBUG_WITH_TEXT[sub], argument)

    if sub == "perft":
        token = next(tokens, None)
        if token == "singleline":
            token = next(tokens, None)
            if token is None:
                return debug(DebugKind.UNKNOWN)
            return debug(DebugKind.PERFT_SINGLE_LINE, _depth(token))
        if token is None:
            return debug(DebugKind.UNKNOWN)
        return debug(DebugKind.PERFT, _depth(token))

    if sub == "divide":
        token = next(tokens, None)
        if token is None:
            return debug(DebugKind.UNKNOWN)
        return debug(DebugKind.DIVIDE, _depth(token))

    return debug(DebugKind.UNKNOWN)


def parse_command(line: str) -> Command:
    """Parse one line of engine input.

    Raises ValueError for a FEN with fewer than 4 fields or a non-numeric depth.
    """
    tokens = iter(line.split())
    head = next(tokens, None)
    if head in _SIMPLE:
        return Command(_SIMPLE[head], line)
    if head == "position":
        return _parse_position(line, tokens)
    if head == "debug":
        return _parse_debug(line, tokens)
    return Command(CommandKind.UNKNOWN, line)


def _pretty_castling(rights: CastlingRights) -> str:
    body = "".join(
        f"    {f.name}: {str(getattr(rights, f.name)).lower()},\n"
        for f in dataclasses.fields(rights)
    )
    return f"CastlingRights {{\n{body}}}"


def _pretty_optional(value: int | None) -> str:
    return "None" if value is None else f"Some(\n    {value},\n)"


class UciEngine:
    """Holds the current position and answers UCI and debug commands on ``out``."""

    def __init__(self, out: TextIO) -> None:
        self.out = out
        self.board = Board.startpos()
        self.tt = TranspositionTable(DEFAULT_TABLE_MB)
        self.search_depth = DEFAULT_SEARCH_DEPTH

    def _say(self, text: str) -> None:
        self.out.write(text + "\n")
        self.out.flush()

    def _play(self, text: str) -> None:
        move = Move.from_uci(text)
        if move.move_type is MoveType.QUIET:
            move = dataclasses.replace(move, move_type=MoveType.UNKNOWN)
        self.board.make_move(self.board.find_move_type(move))

    def handle(self, line: str) -> bool:
        """Carry out one input line; return False when the engine should stop."""
        command = parse_command(line)
        kind = command.kind

        if kind is CommandKind.UCI:
            self._say(f"id name {ENGINE_NAME}")
            self._say(f"id author the {ENGINE_NAME} developers")
            self._say("uciok")
        elif kind is CommandKind.IS_READY:
            self._say("readyok")
        elif kind is CommandKind.POSITION:
            self.board = Board.startpos() if command.fen is None else Board.from_fen(command.fen)
            for text in command.moves:
                self._play(text)
        elif kind is CommandKind.GO:
            best = search.alphabeta(self.board, self.tt, self.search_depth)
            self._say(f"bestmove {best.to_uci()}")
        elif kind in (CommandKind.STOP, CommandKind.QUIT):
            return False
        elif kind is CommandKind.DEBUG:
            self._debug(command)
        else:
            self._say(f"info string Unknown command: {command.text}")
        return True

    def _print_square_set(self, square_text: str, generator) -> None:
        square = square_from_algebraic(square_text)
        piece = self.board.piece_at(square)
        if piece is not None:
            self._say(format_bitboard(generator(self.board, piece.piece_type, piece.color, square)))

    def _debug(self, command: Command) -> None:
        kind = command.debug
        board = self.board

        if kind is DebugKind.FEN:
            self._say(board.to_fen())
        elif kind is DebugKind.PRINT:
            self._say(board.render())
        elif kind is DebugKind.PRINT_OCCUPIED:
            occupied = board.occupied
            for label, bits in (("Black", occupied.black), ("White", occupied.white), ("All", occupied.all)):
                self._say(label)
                self._say(format_bitboard(bits))
        elif kind is DebugKind.EN_PASSANT:
            square = board.en_passant_square
            self._say("None" if square is None else movegen_square_name(square))
        elif kind is DebugKind.PRINT_ATTACKS:
            self._print_square_set(command.argument, movegen.attacks)
        elif kind is DebugKind.PRINT_MOVES:
            self._print_square_set(command.argument, movegen.moves)
        elif kind is DebugKind.POSITION:
            if command.argument == "kiwipete":
                self.board = Board.from_fen(KIWIPETE_FEN)
        elif kind is DebugKind.MOVE:
            self._play(command.argument)
        elif kind is DebugKind.UNDO:
            board.revert_state()
        elif kind is DebugKind.CASTLING_RIGHTS:
            self._say(_pretty_castling(board.castling_rights))
        elif kind is DebugKind.ALL_STATS:
            self._say("------------------------------")
            self._say(_pretty_castling(board.castling_rights) + "\n")
            self._say(f"Color to move: {board.color_to_move.name.capitalize()}")
            self._say(f"En passant square: {_pretty_optional(board.en_passant_square)}")
            self._say("------------------------------")
        elif kind in (DebugKind.PERFT, DebugKind.PERFT_SINGLE_LINE):
            elapsed, nodes = perft.timed_perft(board, command.argument)
            rate = int(nodes / elapsed) if elapsed > 0 else 0
            if kind is DebugKind.PERFT:
                self._say(f"Time: {elapsed}s\nNodes: {nodes}\nNodes/s: {rate}")
            else:
                self._say(f"{nodes}; {elapsed}; {rate}")
        elif kind is DebugKind.DIVIDE:
            total = perft.divide(board, command.argument, self.out)
            self._say(f"\n{total}")
        else:
            self._say(f"info string Unknown debug command: {command.text}")

    def run(self, lines: Iterable[str]) -> None:
        """Handle lines until they run out or a stop or quit command arrives."""
        for raw in lines:
            line = raw.strip()
            if not line:
                continue
            if not self.handle(line):
                break


def movegen_square_name(square: int) -> str:
    """Algebraic name of ``square``."""
    from epsilon.types import square_to_algebraic

    return square_to_algebraic(square)


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Chess engine speaking the UCI protocol.")
    parser.add_argument("--depth", type=int, default=DEFAULT_SEARCH_DEPTH, help="search depth for go")
    args = parser.parse_args(argv)

    engine = UciEngine(sys.stdout)
    engine.search_depth = args.depth
    engine.run(sys.stdin)
    return 0


if __name__ == "__main__":
    sys.exit(main())