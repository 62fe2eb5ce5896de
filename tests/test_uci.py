import io
import sys

import pytest

from epsilon import perft, search
from epsilon.board import Board
from epsilon.types import Color, Piece, PieceType, format_bitboard, square_from_algebraic
from epsilon.uci import (
    KIWIPETE_FEN,
    Command,
    CommandKind,
    DebugKind,
    UciEngine,
    main,
    parse_command,
)


@pytest.fixture
def engine():
    return UciEngine(io.StringIO())


def output(engine):
    return engine.out.getvalue()


def test_parse_simple_commands():
    assert parse_command("uci").kind is CommandKind.UCI
    assert parse_command("isready").kind is CommandKind.IS_READY
    assert parse_command("go").kind is CommandKind.GO
    assert parse_command("stop").kind is CommandKind.STOP
    assert parse_command("quit").kind is CommandKind.QUIT


def test_parse_position_startpos_with_moves():
    command = parse_command("position startpos moves e2e4 e7e5")
    assert command.kind is CommandKind.POSITION
    assert command.fen is None
    assert command.moves == ["e2e4", "e7e5"]


def test_parse_position_fen():
    command = parse_command(f"position fen {KIWIPETE_FEN} moves e1g1")
    assert command.fen == KIWIPETE_FEN.split()
    assert command.moves == ["e1g1"]


def test_parse_position_short_fen_raises():
    with pytest.raises(ValueError):
        parse_command("position fen 8/8/8/8/8/8/8/8 w")


def test_parse_position_without_kind_is_unknown():
    command = parse_command("position nowhere")
    assert command.kind is CommandKind.UNKNOWN
    assert command.text == "position nowhere"


def test_parse_unknown_keeps_text():
    assert parse_command("hello there") == Command(CommandKind.UNKNOWN, "hello there")


@pytest.mark.parametrize(
    "line, kind, argument",
    [
        ("debug fen", DebugKind.FEN, None),
        ("debug print", DebugKind.PRINT, None),
        ("debug print something", DebugKind.PRINT, None),
        ("debug print occupied", DebugKind.PRINT_OCCUPIED, None),
        ("debug print attacks e2", DebugKind.PRINT_ATTACKS, "e2"),
        ("debug print moves g1", DebugKind.PRINT_MOVES, "g1"),
        ("debug print attacks", DebugKind.UNKNOWN, None),
        ("debug pos kiwipete", DebugKind.POSITION, "kiwipete"),
        ("debug pos", DebugKind.UNKNOWN, None),
        ("debug move e2e4", DebugKind.MOVE, "e2e4"),
        ("debug undo", DebugKind.UNDO, None),
        ("debug castling", DebugKind.CASTLING_RIGHTS, None),
        ("debug enpassant", DebugKind.EN_PASSANT, None),
        ("debug allstats", DebugKind.ALL_STATS, None),
        ("debug perft 3", DebugKind.PERFT, 3),
        ("debug perft singleline 2", DebugKind.PERFT_SINGLE_LINE, 2),
        ("debug perft", DebugKind.UNKNOWN, None),
        ("debug divide 4", DebugKind.DIVIDE, 4),
        ("debug nonsense", DebugKind.UNKNOWN, None),
    ],
)
def test_parse_debug(line, kind, argument):
    command = parse_command(line)
    assert command.kind is CommandKind.DEBUG
    assert command.debug is kind
    assert command.argument == argument


def test_parse_debug_bad_depth_raises():
    with pytest.raises(ValueError):
        parse_command("debug perft deep")


def test_uci_handshake(engine):
    assert engine.handle("uci") is True
    lines = output(engine).splitlines()
    assert lines[0] == "id name Epsilon"
    assert lines[-1] == "uciok"


def test_isready(engine):
    engine.handle("isready")
    assert output(engine) == "readyok\n"


def test_quit_and_stop_end_the_loop(engine):
    assert engine.handle("quit") is False
    assert engine.handle("stop") is False


def test_run_stops_at_quit_and_skips_blank_lines(engine):
    engine.run(["", "isready\n", "   ", "quit", "isready"])
    assert output(engine) == "readyok\n"


def test_unknown_command_message(engine):
    engine.handle("frobnicate now")
    assert output(engine) == "info string Unknown command: frobnicate now\n"


def test_unknown_debug_command_message(engine):
    engine.handle("debug frobnicate")
    assert output(engine) == "info string Unknown debug command: debug frobnicate\n"


def test_position_fen_matches_board(engine):
    engine.handle(f"position fen {KIWIPETE_FEN}")
    engine.handle("debug fen")
    assert output(engine).strip() == Board.from_fen(KIWIPETE_FEN).to_fen()


def test_position_moves_resolve_captures(engine):
    engine.handle("position startpos moves e2e4 d7d5 e4d5")
    board = engine.board
    assert board.piece_at(square_from_algebraic("d5")) == Piece(PieceType.PAWN, Color.WHITE)
    assert sum(bin(bits).count("1") for bits in board.bitboards) == 31
    assert board.color_to_move is Color.BLACK


def test_position_moves_resolve_castling(engine):
    engine.handle("position fen r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1 moves e1g1")
    board = engine.board
    assert board.piece_at(square_from_algebraic("f1")) == Piece(PieceType.ROOK, Color.WHITE)
    assert board.piece_at(square_from_algebraic("h1")) is None
    assert board.castling_rights.white_king_side is False


def test_debug_move_and_enpassant(engine):
    engine.handle("debug move e2e4")
    engine.handle("debug enpassant")
    assert output(engine) == "e3\n"


def test_debug_enpassant_none(engine):
    engine.handle("debug enpassant")
    assert output(engine) == "None\n"


def test_debug_undo_restores_position(engine):
    start = engine.board.to_fen()
    engine.handle("debug move g1f3")
    assert engine.board.to_fen() != start
    engine.handle("debug undo")
    assert engine.board.to_fen() == start


def test_debug_undo_without_history_raises(engine):
    with pytest.raises(IndexError):
        engine.handle("debug undo")


def test_debug_castling_rights(engine):
    engine.handle("debug castling")
    lines = output(engine).splitlines()
    assert lines[0] == "CastlingRights {"
    assert "    white_king_side: true," in lines
    assert lines[-1] == "}"


def test_debug_allstats_mentions_side_to_move(engine):
    engine.handle("debug allstats")
    text = output(engine)
    assert "Color to move: White" in text
    assert "En passant square: None" in text


def test_debug_print_occupied(engine):
    engine.handle("debug print occupied")
    text = output(engine)
    board = Board.startpos()
    assert format_bitboard(board.occupied.white) in text
    assert format_bitboard(board.occupied.all) in text
    assert text.index("Black") < text.index("White") < text.index("All")


def test_debug_print_attacks_and_moves(engine):
    engine.handle("debug print attacks e2")
    assert output(engine) == format_bitboard(0) + "\n"
    engine.out = io.StringIO()
    engine.handle("debug print moves e2")
    e3, e4 = square_from_algebraic("e3"), square_from_algebraic("e4")
    assert output(engine) == format_bitboard((1 << e3) | (1 << e4)) + "\n"


def test_debug_print_empty_square_prints_nothing(engine):
    engine.handle("debug print moves e4")
    assert output(engine) == ""


def test_debug_print_board(engine):
    engine.handle("debug print")
    assert output(engine) == Board.startpos().render() + "\n"


def test_debug_pos_kiwipete(engine):
    engine.handle("debug pos kiwipete")
    assert engine.board.to_fen() == Board.from_fen(KIWIPETE_FEN).to_fen()


def test_debug_perft_reports_nodes(engine):
    engine.handle("debug perft 2")
    expected = perft.perft(Board.startpos(), 2)
    assert f"Nodes: {expected}" in output(engine).splitlines()


def test_debug_perft_single_line(engine):
    engine.handle("debug perft singleline 1")
    fields = output(engine).strip().split("; ")
    assert len(fields) == 3
    assert int(fields[0]) == perft.perft(Board.startpos(), 1)


def test_debug_divide_totals(engine):
    engine.handle("debug divide 1")
    lines = output(engine).splitlines()
    total = int(lines[-1])
    move_lines = [line for line in lines if ": " in line]
    assert total == perft.perft(Board.startpos(), 1)
    assert len(move_lines) == total
    assert lines[-2] == ""


def test_go_prints_legal_best_move(engine):
    engine.search_depth = 1
    engine.handle("go")
    text = output(engine).strip()
    assert text.startswith("bestmove ")
    legal = {move.to_uci() for move in search.legal_moves(Board.startpos())}
    assert text.split()[1] in legal


def test_main_reads_stdin(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("isready\nquit\nisready\n"))
    assert main([]) == 0
    assert capsys.readouterr().out == "readyok\n"