"""SM-2 spaced repetition algorithm."""

MIN_EASE_FACTOR = 1.3
DEFAULT_EASE_FACTOR = 2.5


def sm2_update(
    quality: int,
    review_count: int,
    ease_factor: float,
    interval: int,
) -> dict:
    """Calculate next review parameters using SM-2.

    Unlike textbook SM-2, a low rating does not reset the schedule: every
    grading advances the review count and the interval tier follows it.

    Args:
        quality: Rating code 0, 1, 3 or 5 (0=very hard, 5=easy)
        review_count: Number of gradings before this one
        ease_factor: Current ease factor (minimum 1.3)
        interval: Current interval in days

    Returns:
        Dict with updated interval, review_count, ease_factor.
    """
    new_count = review_count + 1

    new_ef = ease_factor + (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))
    new_ef = max(MIN_EASE_FACTOR, new_ef)

    if new_count == 1:
        new_interval = 1
    elif new_count == 2:
        new_interval = 6
    else:
        # Truncate, never round
        new_interval = int(interval * new_ef)

    return {
        "interval": new_interval,
        "review_count": new_count,
        "ease_factor": new_ef,
    }
