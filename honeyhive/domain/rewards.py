import random

# First honey of the day: a draw in [0, 1000) against cumulative bounds
FIRST_DRAW_RANGE = 1000
FIRST_OF_DAY_TIERS = [
    (600, 25),
    (800, 50),
    (900, 100),
    (950, 200),
    (995, 500),
    (1000, 1000),
]

# (today_honey upper bound exclusive, low, high); high is inclusive, so 5001..7500 can pay 2
DAILY_BANDS = [
    (501, 25, 50),
    (1001, 10, 20),
    (2001, 5, 10),
    (5001, 1, 5),
    (7501, 0, 2),
]
LAST_BAND = (0, 1)


def first_of_day_reward(draw: int) -> int:
    for bound, reward in FIRST_OF_DAY_TIERS:
        if draw < bound:
            return reward
    raise ValueError(f"draw out of range: {draw}")


def band_for(daily_before: int) -> tuple[int, int]:
    for bound, low, high in DAILY_BANDS:
        if daily_before < bound:
            return low, high
    return LAST_BAND


def compute_reward(daily_before: int, rng=random) -> int:
    """Honey for one correct answer, given what was already earned today.

    The more honey a user has collected since the last reset, the smaller the
    next reward; past 7500 it is 0 or 1. Zero is a valid reward.
    """
    if daily_before < 0:
        raise ValueError("daily honey cannot be negative")

    if daily_before == 0:
        return first_of_day_reward(rng.randrange(FIRST_DRAW_RANGE))

    low, high = band_for(daily_before)
    return rng.randint(low, high)


def max_reward(daily_before: int) -> int:
    if daily_before == 0:
        return FIRST_OF_DAY_TIERS[-1][1]
    return band_for(daily_before)[1]


def lazy_reset(state: dict, today: str) -> dict:
    if state.get("last_reset_date") == today:
        return state
    return {**state, "daily_currency": 0, "last_reset_date": today}
