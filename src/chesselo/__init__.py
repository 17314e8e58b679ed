# src/chesselo/__init__.py

"""chesselo: ELO ratings, rating history and move quality for chess games."""

__version__ = "0.1.0"
