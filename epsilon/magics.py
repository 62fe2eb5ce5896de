"""Sliding-piece rays and a search for magic multipliers that index attack tables."""

from __future__ import annotations

import argparse
import random
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from epsilon.types import BOARD_MASK, Bitboard, Square, iter_bits

Direction = tuple[int, int]

ROOK_DIRECTIONS: tuple[Direction, ...] = ((0, 1), (0, -1), (1, 0), (-1, 0))
BISHOP_DIRECTIONS: tuple[Direction, ...] = ((1, 1), (1, -1), (-1, 1), (-1, -1))

# Marks a table slot that no blocker configuration has claimed yet.
INVALID: Bitboard = 0xDEADBEEFDEADBEEF

DEFAULT_ATTEMPTS = 10_000_000


def _ray(square: Square, direction: Direction):
    """Yield the squares from ``square`` (exclusive) to the board edge along ``direction``."""
    dx, dy = direction
    rank, file = divmod(square, 8)
    rank += dy
    file += dx
    while 0 <= rank < 8 and 0 <= file < 8:
        yield rank * 8 + file
        rank += dy
        file += dx


def ray_mask(square: Square, directions: Sequence[Direction]) -> Bitboard:
    """All squares reachable from ``square`` along ``directions`` on an empty board."""
    mask = 0
    for direction in directions:
        for target in _ray(square, direction):
            mask |= 1 << target
    return mask


def blocker_permutations(mask: Bitboard) -> list[Bitboard]:
    """Every subset of the bits of ``mask``, ordered by the binary counter that selects them."""
    bits = list(iter_bits(mask))
    return [
        sum(1 << square for j, square in enumerate(bits) if (index >> j) & 1)
        for index in range(1 << len(bits))
    ]


def sliding_attacks(square: Square, blockers: Bitboard, directions: Sequence[Direction]) -> Bitboard:
    """Attack set of a slider on ``square``; each ray stops at and includes the first blocker."""
    result = 0
    for direction in directions:
        for target in _ray(square, direction):
            bit = 1 << target
            result |= bit
            if blockers & bit:
                break
    return result


@dataclass(frozen=True)
class Magic:
    """A magic multiplier with the attack table it indexes."""

    mask: Bitboard
    magic: Bitboard
    shift: int
    attacks: tuple[Bitboard, ...]

    def lookup(self, occupied: Bitboard) -> Bitboard:
        """Attack set for the given board occupancy."""
        index = (((occupied & self.mask) * self.magic) & BOARD_MASK) >> self.shift
        return self.attacks[index]


def _search(
    blockers: Sequence[Bitboard],
    attacks: Sequence[Bitboard],
    bits: int,
    rng: random.Random,
    attempts: int,
) -> tuple[Bitboard, list[Bitboard]] | None:
    shift = 64 - bits
    size = 1 << bits
    for _ in range(attempts):
        magic = rng.getrandbits(64) & (rng.getrandbits(64) >> rng.randrange(16))
        used = [INVALID] * size
        for blocker, attack in zip(blockers, attacks):
            index = ((blocker * magic) & BOARD_MASK) >> shift
            if used[index] == INVALID:
                used[index] = attack
            elif used[index] != attack:
                break
        else:
            return magic, used
    return None


def find_magic(
    square: Square,
    bits: int,
    rng: random.Random,
    attempts: int,
) -> tuple[Bitboard, list[Bitboard]] | None:
    """Try ``attempts`` random rook candidates for a ``bits``-bit table; return (magic, table) or None."""
    blockers = blocker_permutations(ray_mask(square, ROOK_DIRECTIONS))
    attacks = [sliding_attacks(square, b, ROOK_DIRECTIONS) for b in blockers]
    return _search(blockers, attacks, bits, rng, attempts)


def generate_all_magics(
    directions: Sequence[Direction],
    attempts: int = DEFAULT_ATTEMPTS,
    rng: random.Random | None = None,
) -> list[Magic]:
    """Find, for every square, a magic with the smallest table that can be found."""
    rng = rng if rng is not None else random.Random()
    magics = []
    for square in range(64):
        mask = ray_mask(square, directions)
        blockers = blocker_permutations(mask)
        attacks = [sliding_attacks(square, b, directions) for b in blockers]
        for bits in range(1, mask.bit_count() + 1):
            found = _search(blockers, attacks, bits, rng, attempts)
            if found is not None:
                magic, table = found
                magics.append(Magic(mask, magic, 64 - bits, tuple(table)))
                break
        else:
            raise RuntimeError(f"Failed to find magic for square {square}")
    return magics


def format_magics(magics: Sequence[Magic]) -> str:
    """Render magics and their attack tables as a Python module."""
    lines = ["from epsilon.magics import Magic", ""]
    for i, magic in enumerate(magics):
        entries = ", ".join(f"0x{attack:016X}" for attack in magic.attacks)
        lines.append(f"ATTACK_TABLE_{i} = ({entries},)")
    lines.append("")
    lines.append("MAGICS = [")
    for i, magic in enumerate(magics):
        lines.append(
            f"    Magic(mask=0x{magic.mask:016X}, magic=0x{magic.magic:016X}, "
            f"shift={magic.shift}, attacks=ATTACK_TABLE_{i}),"
        )
    lines.append("]")
    return "\n".join(lines) + "\n"


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Search for magic multipliers for sliding pieces.")
    parser.add_argument("--piece", choices=("rook", "bishop"), default="rook")
    parser.add_argument("--attempts", type=int, default=DEFAULT_ATTEMPTS)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("-o", "--output", type=Path, default=Path("magics_output.py"))
    args = parser.parse_args(argv)

    directions = ROOK_DIRECTIONS if args.piece == "rook" else BISHOP_DIRECTIONS
    print("Generating magics...")
    try:
        magics = generate_all_magics(directions, args.attempts, random.Random(args.seed))
    except RuntimeError as error:
        print(error, file=sys.stderr)
        return 1
    print(f"Writing results to {args.output}")
    args.output.write_text(format_magics(magics))
    return 0


if __name__ == "__main__":
    sys.exit(main())