# src/chesselo/services/__init__.py

"""Rating update and rating history services."""
