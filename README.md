# epsilon

A small chess engine that speaks the UCI protocol. It keeps the position as
bitboards next to a square-by-square mailbox. It generates moves from
precomputed king, knight and pawn tables and from cached ray walks for
sliding pieces. It picks a move with a fixed-depth alpha-beta (negamax)
search on material, backed by a transposition table keyed by Zobrist hashes.

## Installing

```
pip install .
```

## Running the engine

```
epsilon [--depth N]
```

The engine reads commands from standard input, one per line, and writes its
replies to standard output. A GUI that supports UCI can start it directly.
`--depth` sets the number of plies `go` searches. The default is 5.

UCI commands:

- `uci`: prints `id name Epsilon`, an author line, then `uciok`
- `isready`: prints `readyok`
- `position startpos [moves ...]` and `position fen <fen> [moves ...]`
- `go`: searches and prints `bestmove <move>`
- `stop`, `quit`: leave the loop

Anything else is answered with `info string Unknown command: ...`.

Debugging commands, each starting with `debug`:

- `fen`: the current position as FEN (placement, side, castling, en passant)
- `print`: draws the board, white pieces in red and black pieces in blue
- `print occupied`: draws the occupancy of black, white and all pieces
- `print attacks <square>` and `print moves <square>`: the capture targets or quiet-move targets of the piece on that square
- `pos kiwipete`: loads the well-known perft test position
- `move <uci move>`, `undo`: play or take back a move
- `enpassant`, `castling`, `allstats`: show parts of the position state
- `perft <depth>`, `perft singleline <depth>`: count leaf nodes and time the run
- `divide <depth>`: node counts for each legal root move, then the total

Example session:

```
position startpos moves e2e4 e7e5
debug perft 3
go
quit
```

## Searching for magic numbers

```
epsilon-magics [--piece rook|bishop] [--attempts N] [--seed S] [-o FILE]
```

For every square, this searches for a magic multiplier with the smallest
attack table it can find. It writes the results as a Python module,
`magics_output.py` by default. The search runs in pure Python and can take a
long time. `--attempts` limits the number of candidates tried per table size.
The engine's move generator does not read these tables.

From Python, `epsilon.magics` provides `ray_mask`, `blocker_permutations`,
`sliding_attacks`, `find_magic` (rook rays), `generate_all_magics`,
`format_magics` and the `Magic` class with its `lookup` method.

## Using it as a library

```python
from epsilon.board import Board
from epsilon.perft import perft
from epsilon.search import alphabeta, legal_moves
from epsilon.transposition import TranspositionTable
from epsilon.types import Move

board = Board.startpos()
print(perft(board, 3))          # 8902
print(len(legal_moves(board)))  # 20

move = board.find_move_type(Move.from_uci("e2e4"))
board.make_move(move)
print(board.to_fen())
board.revert_state()

best = alphabeta(board, TranspositionTable(16), 3)
print(best.to_uci())
```

Modules:

- `epsilon.types`: squares, colours, pieces, moves, castling rights, bitboard helpers
- `epsilon.board`: `Board` with FEN input and output, make and revert, attack tests, evaluation and hashing
- `epsilon.movegen`: `attacks`, `moves` and `pseudolegal_moves`
- `epsilon.search`: `legal_moves`, `random_move` and `alphabeta`
- `epsilon.transposition`: `TranspositionTable`
- `epsilon.perft`: `perft`, `divide` and `timed_perft`
- `epsilon.uci`: `parse_command` and `UciEngine`

## What it does not do

- `go` ignores its arguments. There is no time control, no pondering and no
  `info` output during search. `stop` ends the engine rather than
  interrupting a search.
- The evaluation counts material only. Checkmate and stalemate are not
  scored. `alphabeta` raises `ValueError` when the side to move has no legal
  move.
- FEN half-move and full-move counters are neither read nor written.

## Running the tests

```
pip install .[test]
pytest
```