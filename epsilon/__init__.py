"""A bitboard chess engine with UCI support, alpha-beta search and a magic-number search tool."""

__version__ = "0.1.0"