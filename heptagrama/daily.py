import datetime
import logging
from dataclasses import dataclass

from heptagrama import database
from heptagrama.config import get_profile
from heptagrama.game import Puzzle

logger = logging.getLogger(__name__)

EPOCH = datetime.date(1970, 1, 1)


@dataclass(frozen=True)
class DailySession:
    date_key: str
    language: str
    puzzle_id: str
    progress_id: str

    @classmethod
    def from_dict(cls, data: dict) -> "DailySession":
        return cls(
            date_key=data['dateKey'],
            language=data.get('language', ''),
            puzzle_id=data['puzzleId'],
            progress_id=data.get('progressId') or f"daily-{data['dateKey']}",
        )

    def to_dict(self) -> dict:
        return {
            'dateKey': self.date_key,
            'language': self.language,
            'puzzleId': self.puzzle_id,
            'progressId': self.progress_id,
        }


def _utc_date(date) -> datetime.date:
    """Aware datetimes are converted to UTC; naive ones are taken as UTC already."""
    if isinstance(date, datetime.datetime):
        if date.tzinfo is not None:
            date = date.astimezone(datetime.timezone.utc)
        return date.date()
    return date


def day_index(date) -> int:
    """Whole days since 1970-01-01 (UTC)."""
    return (_utc_date(date) - EPOCH).days


def date_key(date) -> str:
    return _utc_date(date).isoformat()


def last_n_days(n: int, today=None) -> list:
    """Date keys for today and the previous n-1 days, newest first."""
    today = _utc_date(today or datetime.datetime.now(datetime.timezone.utc))
    return [date_key(today - datetime.timedelta(days=i)) for i in range(n)]


def _in_range(puzzle: Puzzle, low: int, high: int) -> bool:
    return puzzle.solution_count is not None and low <= puzzle.solution_count <= high


def select_daily_puzzle(date, pool, config: dict = None) -> Puzzle:
    """
    Deterministic pick for a calendar day: the optimal solution-count range
    first, then the fallback range, then the whole pool.
    """
    if not pool:
        raise ValueError("Daily puzzle pool is empty")

    config = config or get_profile()['daily']
    day = day_index(date)

    for tier in ('optimal', 'fallback'):
        low, high = config[tier]
        filtered = [p for p in pool if _in_range(p, low, high)]
        if filtered:
            return filtered[day % len(filtered)]
        logger.warning(f"⚠️ No daily puzzles in {tier} range {low}-{high} for {date_key(date)}")

    return pool[day % len(pool)]


def find_puzzle(pool, puzzle_id: str):
    for puzzle in pool:
        if puzzle.id == puzzle_id:
            return puzzle
    return None


def get_daily_session(store, date, language: str, pool, config: dict = None) -> DailySession:
    """
    Returns the session assigned to (date, language), creating it on first use.
    Once stored, the assignment never changes, even if the pool does.
    """
    key = date_key(date)
    stored = database.load_daily_sessions(store).get(f"{key}:{language}")
    if stored:
        try:
            return DailySession.from_dict(stored)
        except (KeyError, TypeError) as e:
            logger.warning(f"⚠️ Ignoring corrupt daily session {key}:{language}: {e}")

    puzzle = select_daily_puzzle(date, pool, config)
    session = DailySession(date_key=key, language=language, puzzle_id=puzzle.id, progress_id=f"daily-{key}")
    database.save_daily_session(store, session.to_dict())
    return session
