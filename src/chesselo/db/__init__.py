# src/chesselo/db/__init__.py

"""Database models, sessions and the SQL rating store."""
