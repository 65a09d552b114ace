import datetime

import pytest

from heptagrama.daily import (
    DailySession, date_key, day_index, find_puzzle, get_daily_session, last_n_days, select_daily_puzzle,
)
from heptagrama.database import MemoryStore, load_daily_sessions
from heptagrama.game import Puzzle

CONFIG = {"optimal": (70, 170), "fallback": (70, 200)}
OUTER = ("o", "p", "a", "t", "i", "e")


def puzzle(pid, count):
    return Puzzle(pid, pid, "r", OUTER, "daily", 3, False, count)


POOL = [puzzle("daily-001", 80), puzzle("daily-002", 120), puzzle("daily-003", 160), puzzle("daily-004", 400)]


def test_day_index_and_keys():
    assert day_index(datetime.date(1970, 1, 1)) == 0
    assert day_index(datetime.date(1970, 1, 2)) == 1
    assert date_key(datetime.date(2024, 3, 5)) == "2024-03-05"

    # 23:30 at UTC-5 is already the next day in UTC
    late = datetime.datetime(2024, 1, 1, 23, 30, tzinfo=datetime.timezone(datetime.timedelta(hours=-5)))
    assert date_key(late) == "2024-01-02"
    assert day_index(late) == day_index(datetime.date(2024, 1, 2))


def test_selection_is_stable():
    start = datetime.date(2024, 1, 1)
    for offset in range(60):
        day = start + datetime.timedelta(days=offset)
        first = select_daily_puzzle(day, POOL, CONFIG)
        assert select_daily_puzzle(day, POOL, CONFIG) == first
        assert first.id != "daily-004"


def test_selection_walks_the_filtered_pool():
    day = datetime.date(2024, 5, 17)
    optimal = POOL[:3]
    assert select_daily_puzzle(day, POOL, CONFIG) == optimal[day_index(day) % 3]


def test_fallback_tiers():
    day = datetime.date(2024, 5, 17)

    fallback_pool = [puzzle("a", 180), puzzle("b", 190), puzzle("c", 400)]
    assert select_daily_puzzle(day, fallback_pool, CONFIG).id in {"a", "b"}

    unfiltered = [puzzle("x", None), puzzle("y", 500)]
    assert select_daily_puzzle(day, unfiltered, CONFIG) == unfiltered[day_index(day) % 2]


def test_empty_pool():
    with pytest.raises(ValueError):
        select_daily_puzzle(datetime.date(2024, 1, 1), [], CONFIG)


def test_daily_session_first_assignment_wins():
    store = MemoryStore()
    day = datetime.date(2024, 3, 5)

    session = get_daily_session(store, day, "es", POOL, CONFIG)
    assert session.progress_id == "daily-2024-03-05"
    assert session.date_key == "2024-03-05"
    assert find_puzzle(POOL, session.puzzle_id) is not None
    assert load_daily_sessions(store)["2024-03-05:es"] == {
        "dateKey": "2024-03-05", "language": "es", "puzzleId": session.puzzle_id, "progressId": "daily-2024-03-05",
    }

    # A regenerated pool does not change an existing assignment
    new_pool = [puzzle("daily-100", 100), puzzle("daily-101", 110)]
    assert get_daily_session(store, day, "es", new_pool, CONFIG) == session

    other = get_daily_session(store, day, "en", new_pool, CONFIG)
    assert other.language == "en"
    assert other.puzzle_id in {"daily-100", "daily-101"}


def test_daily_session_from_legacy_dict():
    session = DailySession.from_dict({"dateKey": "2024-01-04", "puzzleId": "daily-007"})
    assert session.progress_id == "daily-2024-01-04"
    assert session.language == ""


def test_last_n_days():
    assert last_n_days(3, datetime.date(2024, 3, 1)) == ["2024-03-01", "2024-02-29", "2024-02-28"]
    assert len(last_n_days(7)) == 7


def test_find_puzzle():
    assert find_puzzle(POOL, "daily-002").solution_count == 120
    assert find_puzzle(POOL, "nope") is None
