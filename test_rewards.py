from heptagrama.mechanics.rewards import calculate_session_xp, get_completion_bonus, points_to_xp, word_points
from heptagrama.mechanics.stats import len7_plus_count, length_counts, remaining_words, start_letter_counts
from heptagrama.utils import (
    calculate_level, check_level_up, get_level_progress, get_total_xp_for_level, get_xp_for_next_level,
)


def test_word_points_table():
    assert [word_points("a" * n) for n in range(3, 8)] == [20, 25, 30, 35, 45]
    assert word_points("a" * 8) == 55
    assert word_points("a" * 10) == 65
    assert word_points("a" * 7, superhepta=True) == 105
    assert word_points("ab") == 0


def test_points_to_xp():
    assert points_to_xp(20) == 8
    assert points_to_xp(250) == 100
    assert points_to_xp(25) == 10


def test_level_math():
    assert get_xp_for_next_level(1) == 100
    assert get_xp_for_next_level(2) == 282
    assert get_total_xp_for_level(3) == 382

    assert calculate_level(-5) == 1
    assert calculate_level(0) == 1
    assert calculate_level(99) == 1
    assert calculate_level(100) == 2
    assert calculate_level(381) == 2
    assert calculate_level(382) == 3

    assert get_level_progress(150) == (2, 50, 282)
    for xp in (0, 99, 100, 1234, 50000):
        level, into, needed = get_level_progress(xp)
        assert get_total_xp_for_level(level) + into == xp
        assert 0 <= into < needed


def test_check_level_up():
    assert check_level_up(90, 400) == {'leveled_up': True, 'old_level': 1, 'new_level': 3, 'levels_gained': 2}
    assert not check_level_up(100, 120)['leveled_up']


def test_session_xp():
    assert get_completion_bonus(24) == 0
    assert get_completion_bonus(25) == 50
    assert get_completion_bonus(74) == 100
    assert get_completion_bonus(100) == 500

    classic = calculate_session_xp(40, 40, 0, "classic")
    assert classic == {'base_xp': 100, 'completion_bonus': 500, 'superhepta_bonus': 0, 'total': 600}

    daily = calculate_session_xp(30, 40, 2, "daily")
    assert daily['total'] == 300 + 200 + 50

    assert calculate_session_xp(0, 0, 0, "daily")['total'] == 0


def test_stats():
    solutions = ["rio", "ropa", "roto", "pirateo", "tira"]
    assert remaining_words(solutions, ["ropa", "nope"]) == ["rio", "roto", "pirateo", "tira"]
    assert length_counts(solutions) == {3: 1, 4: 3, 7: 1}
    assert list(length_counts(["abcd", "abc"])) == [3, 4]
    assert start_letter_counts(solutions, "ropatie") == {"r": 3, "o": 0, "p": 1, "a": 0, "t": 1, "i": 0, "e": 0}
    assert len7_plus_count(solutions) == 1
