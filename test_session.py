import asyncio
from dataclasses import replace
from unittest.mock import AsyncMock, MagicMock

import pytest

from heptagrama import database
from heptagrama.dictionary import build_index
from heptagrama.game import LetterSet, Reason
from heptagrama.mechanics.exotic_generator import GenerationResult
from heptagrama.session import RunSession, award_session_xp
from heptagrama.solver import PuzzleSolver

WORDS = ["rio", "rios", "ropa", "roto", "tiro", "mula", "cama", "lema", "luna"]
R_SET = LetterSet("r", ("o", "p", "a", "t", "i", "e"))
M_SET = LetterSet("m", ("a", "l", "u", "c", "n", "e"))


def make_session(store=None, result=None):
    generator = MagicMock()
    generator.generate = AsyncMock(return_value=result or GenerationResult(R_SET, 1, 4))
    session = RunSession(PuzzleSolver(build_index(WORDS)), store, generator=generator, language="es")
    return session, generator


def test_start_and_submit_persist():
    store = database.MemoryStore()
    session, _ = make_session(store)

    outcome = asyncio.run(session.start_run())
    assert outcome.ok
    assert session.active
    assert session.state.solutions_total == 4
    assert store.get(database.RUN_KEY)["runId"] == session.state.run_id

    assert session.submit("ropa").ok
    assert store.get(database.RUN_KEY)["scorePoints"] == 25
    assert session.submit("pato").reason == Reason.MISSING_CENTER


def test_start_run_generation_failure():
    session, _ = make_session(result=GenerationResult(None, 1000, 12))
    outcome = asyncio.run(session.start_run())
    assert outcome.reason == Reason.GENERATION_FAILED
    assert session.state is None
    assert session.submit("ropa").reason == Reason.NO_ACTIVE_RUN


def test_resume():
    store = database.MemoryStore()
    session, _ = make_session(store)
    asyncio.run(session.start_run())
    session.submit("ropa")

    resumed, _ = make_session(store)
    assert resumed.resume()
    assert resumed.state == session.state


def test_resume_legacy_snapshot():
    store = database.MemoryStore({database.RUN_KEY: {
        "runId": "exotic-1",
        "startedAt": "2024-01-01T00:00:00+00:00",
        "puzzle": {"center": "r", "outer": ["o", "p", "a", "t", "i", "e"]},
        "extraLetters": ["s"],
        "foundWords": ["rios"],
        "scorePoints": 70,
        "uiState": {"runPanelMinimized": True},
    }})
    session, _ = make_session(store)

    assert session.resume()
    assert session.state.found_words_all == ("rios",)
    assert session.state.extra_letters == ("s",)
    assert session.state.solutions_total == 5
    assert not session.state.stats_unlocked.length_hint
    assert "uiState" not in store.get(database.RUN_KEY)


def test_corrupt_snapshot_is_cleared():
    store = database.MemoryStore({database.RUN_KEY: {"runId": "", "puzzle": None}})
    session, _ = make_session(store)
    assert not session.resume()
    assert store.get(database.RUN_KEY) is None

    bad_letters = {"runId": "x", "puzzle": {"center": "r", "outer": ["o", "o"]}, "foundWordsAll": []}
    store = database.MemoryStore({database.RUN_KEY: bad_letters})
    session, _ = make_session(store)
    assert not session.resume()
    assert store.get(database.RUN_KEY) is None


def test_paid_regenerate_refunds_on_failure():
    session, generator = make_session()
    asyncio.run(session.start_run())
    session.state = replace(session.state, score_points=400)

    generator.generate.return_value = GenerationResult(None, 1000, 12)
    outcome = asyncio.run(session.regenerate())

    assert outcome.reason == Reason.GENERATION_FAILED
    assert session.state.score_points == 400
    assert session.state.letters == R_SET


def test_paid_regenerate_refunds_on_error():
    session, generator = make_session()
    asyncio.run(session.start_run())
    session.state = replace(session.state, score_points=400)

    generator.generate.side_effect = RuntimeError("boom")
    with pytest.raises(RuntimeError):
        asyncio.run(session.regenerate())
    assert session.state.score_points == 400
    assert not session.generating


def test_paid_regenerate():
    session, generator = make_session()
    asyncio.run(session.start_run())
    session.submit("ropa")
    session.state = replace(session.state, score_points=400)

    generator.generate.return_value = GenerationResult(M_SET, 3, 3)
    outcome = asyncio.run(session.regenerate())

    assert outcome.ok
    assert session.state.letters == M_SET
    assert session.state.score_points == 50
    assert session.state.found_words_all == ()
    assert session.state.solutions_total == 3

    kwargs = generator.generate.call_args.kwargs
    assert kwargs["previous"] == R_SET
    assert kwargs["exclude"] == ()


def test_free_regenerate_keeps_extras_out_of_new_board():
    session, generator = make_session()
    asyncio.run(session.start_run())
    session.state = replace(session.state, score_points=1000)
    assert session.buy_letter("s").ok
    assert session.state.solutions_total == 5

    for word in ["rio", "rios", "ropa"]:
        assert session.submit(word).ok

    generator.generate.return_value = GenerationResult(M_SET, 2, 3)
    score = session.state.score_points
    outcome = asyncio.run(session.regenerate())

    assert outcome.ok
    assert session.state.score_points == score
    assert session.state.extra_letters == ("s",)
    assert generator.generate.call_args.kwargs["exclude"] == ("s",)


def test_regenerate_rejections():
    session, _ = make_session()
    outcome = asyncio.run(session.regenerate())
    assert outcome.reason == Reason.NO_ACTIVE_RUN

    asyncio.run(session.start_run())
    outcome = asyncio.run(session.regenerate())
    assert outcome.reason == Reason.INSUFFICIENT_POINTS


def test_hints_need_unlocking():
    session, _ = make_session()
    asyncio.run(session.start_run())
    session.submit("ropa")
    assert session.length_hint() is None

    session.state = replace(session.state, score_points=500)
    assert session.unlock_length_hint().ok
    assert session.unlock_start_letter_stats().ok

    assert session.remaining() == ["rio", "roto", "tiro"]
    assert session.length_hint() == {3: 1, 4: 2}
    assert session.start_letter_stats()["r"] == 2
    assert session.start_letter_stats()["t"] == 1
    assert session.summary()["valid_found"] == 1


def test_end_run_flushes_xp():
    store = database.MemoryStore()
    session, _ = make_session(store)
    asyncio.run(session.start_run())
    session.submit("ropa")
    session.submit("rio")
    xp = session.state.xp_earned

    outcome, player = session.end_run()
    assert outcome.ok
    assert player["xpTotal"] == xp
    assert database.load_player_state(store)["xpTotal"] == xp
    assert store.get(database.RUN_KEY) is None
    assert session.state.ended
    assert session.submit("roto").reason == Reason.RUN_ENDED


def test_store_failures_do_not_break_play():
    store = MagicMock()
    store.get.side_effect = ConnectionError("offline")
    store.set.side_effect = ConnectionError("offline")
    store.delete.side_effect = ConnectionError("offline")
    session, _ = make_session(store)

    assert asyncio.run(session.start_run()).ok
    assert session.submit("ropa").ok
    assert session.state.score_points == 25
    assert not session.resume()

    outcome, player = session.end_run()
    assert outcome.ok
    assert player["xpTotal"] == 10


def test_award_session_xp():
    store = database.MemoryStore()
    result = award_session_xp(store, 10, 40, 1, "daily")

    assert result["breakdown"] == {"base_xp": 100, "completion_bonus": 50, "superhepta_bonus": 25, "total": 175}
    assert result["xpTotal"] == 175
    assert result["level_up"] == 2
