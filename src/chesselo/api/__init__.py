# src/chesselo/api/__init__.py

"""HTTP routers."""
