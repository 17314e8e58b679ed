# src/chesselo/rating/constants.py

"""Constants for the chess ELO rating system.

K factor: the most rating points a player can gain or lose in one game.
  - New players (< 30 games) move fast so their rating converges quickly
  - Experienced players (> 100 games) move slowly
"""

# Rating assigned to a newly registered player
DEFAULT_RATING = 1200

# Ratings are always clamped into [MIN_RATING, MAX_RATING]
MIN_RATING = 100
MAX_RATING = 3000

# K factors
DEFAULT_K_FACTOR = 20
NEW_PLAYER_K_FACTOR = 40
EXPERIENCED_PLAYER_K_FACTOR = 10

# A rating based on fewer games than this is provisional
PROVISIONAL_THRESHOLD = 30

# More games than this selects the experienced K factor
EXPERIENCED_THRESHOLD = 100

# Rating difference at which the stronger side is expected to score 10:1
ELO_SCALE = 400

# Number of games replayed by default when reconstructing rating history
DEFAULT_HISTORY_LIMIT = 20
