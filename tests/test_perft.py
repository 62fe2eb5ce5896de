import io

from epsilon.board import Board
from epsilon.perft import divide, perft, timed_perft

KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"


def test_depth_zero_counts_one():
    assert perft(Board.startpos(), 0) == 1


def test_startpos_depth_one():
    assert perft(Board.startpos(), 1) == 20


def test_startpos_depth_two():
    assert perft(Board.startpos(), 2) == 400


def test_kiwipete_depth_one():
    assert perft(Board.from_fen(KIWIPETE), 1) == 48


def test_perft_restores_board():
    board = Board.from_fen(KIWIPETE)
    before = board.to_fen()
    perft(board, 2)
    assert board.to_fen() == before
    assert board.history == []


def test_divide_matches_perft():
    board = Board.startpos()
    out = io.StringIO()
    total = divide(board, 2, out)
    assert total == perft(board, 2)
    lines = out.getvalue().splitlines()
    assert len(lines) == perft(board, 1)
    assert sum(int(line.split(": ")[1]) for line in lines) == total


def test_divide_line_format():
    out = io.StringIO()
    divide(Board.startpos(), 1, out)
    lines = out.getvalue().splitlines()
    assert "e2e4: 1" in lines
    assert all(line.endswith(": 1") for line in lines)


def test_timed_perft_counts_nodes():
    board = Board.startpos()
    elapsed, nodes = timed_perft(board, 1)
    assert nodes == perft(board, 1)
    assert elapsed >= 0.0