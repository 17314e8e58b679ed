# src/chesselo/rating/categories.py

"""Human-readable skill categories for ELO ratings."""

# Upper bounds (exclusive) for each category, lowest first
RATING_CATEGORIES: list[tuple[int, str]] = [
    (1200, "Beginner"),
    (1400, "Novice"),
    (1600, "Intermediate"),
    (1800, "Advanced"),
    (2000, "Expert"),
    (2200, "Master"),
    (2400, "International Master"),
]
TOP_CATEGORY = "Grandmaster"


def rating_category(rating: int) -> str:
    """Return the skill category a rating falls into."""
    for upper_bound, name in RATING_CATEGORIES:
        if rating < upper_bound:
            return name
    return TOP_CATEGORY
