from heptagrama.config import (
    WORD_POINTS, LONG_WORD_BASE, LONG_WORD_STEP, SUPERHEPTA_BONUS,
    MILESTONE_BONUSES, MILESTONE_STEP, XP_RATIO,
    XP_GAINS, COMPLETION_BONUS, SUPERHEPTA_XP,
)

def word_points(word: str, superhepta: bool = False) -> int:
    """Exotic points for one word: length tier plus the superhepta bonus."""
    length = len(word)
    if length >= 8:
        points = LONG_WORD_BASE + (length - 8) * LONG_WORD_STEP
    else:
        points = WORD_POINTS.get(length, 0)

    if superhepta:
        points += SUPERHEPTA_BONUS
    return points

def milestone_bonus(valid_count: int, streak10_count: int) -> tuple[int, int]:
    """
    Bonus for every 10th currently valid word.
    Returns (bonus, new_streak10_count). A threshold already claimed, or past
    the 10th (100 words), pays nothing.
    """
    milestone = valid_count // MILESTONE_STEP
    last = len(MILESTONE_BONUSES) - 1

    if milestone > last or milestone <= streak10_count:
        return 0, streak10_count

    return MILESTONE_BONUSES[milestone], milestone

def points_to_xp(points: int) -> int:
    return int(round(points * XP_RATIO))

def get_completion_bonus(completion_pct: int) -> int:
    for min_pct, bonus in COMPLETION_BONUS:
        if completion_pct >= min_pct:
            return bonus
    return 0

def calculate_session_xp(found_count: int, total_count: int, superhepta_count: int, mode: str) -> dict:
    """
    XP for a daily or classic session.
    Daily words are worth 4x classic words; completion and superheptas add flat bonuses.
    """
    base_xp = int(found_count * XP_GAINS[mode])

    completion_pct = (found_count * 100) // total_count if total_count else 0
    completion_bonus = get_completion_bonus(completion_pct)

    superhepta_bonus = superhepta_count * SUPERHEPTA_XP

    return {
        'base_xp': base_xp,
        'completion_bonus': completion_bonus,
        'superhepta_bonus': superhepta_bonus,
        'total': base_xp + completion_bonus + superhepta_bonus,
    }
