"""
Offline pool generation.

Samples random letter sets, solves each one and sorts the accepted ones into
a daily pool (solution count in the daily window and at least one superhepta)
and a classic pool (solution count in the classic window). The output is a
static JSON file read by the daily selector and the classic list.
"""
import asyncio
import json
import logging
import os
import random
from dataclasses import dataclass, field
from typing import List

from heptagrama.config import BASE_ALPHABET, ENYE, get_profile
from heptagrama.game import LetterSet, Puzzle, is_superhepta
from heptagrama.solver import PuzzleSolver

logger = logging.getLogger(__name__)

MODE_TITLES = {'daily': "Daily", 'classic': "Classic"}


@dataclass
class PoolResult:
    daily: List[Puzzle] = field(default_factory=list)
    classic: List[Puzzle] = field(default_factory=list)
    candidates: int = 0
    cancelled: bool = False

    @property
    def puzzles(self) -> List[Puzzle]:
        return self.daily + self.classic


def sample_candidate(rng: random.Random, allow_enye: bool) -> LetterSet:
    """Center from a-z only; the 6 outer letters may include 'ñ' when allowed."""
    center = rng.choice(BASE_ALPHABET)
    alphabet = BASE_ALPHABET + (ENYE if allow_enye else "")
    pool = [c for c in alphabet if c != center]
    return LetterSet(center, rng.sample(pool, 6))


def make_puzzle(mode: str, number: int, letters: LetterSet, solution_count: int,
                min_len: int, allow_enye: bool) -> Puzzle:
    puzzle_id = f"{mode}-{number:03d}"
    return Puzzle(
        id=puzzle_id,
        title=f"{MODE_TITLES[mode]} #{number:03d}: {solution_count} words",
        center=letters.center,
        outer=letters.outer,
        mode=mode,
        min_len=min_len,
        allow_diacritic_letter=allow_enye,
        solution_count=solution_count,
    )


async def generate_pools(solver: PuzzleSolver, settings: dict = None, rng: random.Random = None,
                         on_progress=None, cancel_event: asyncio.Event = None) -> PoolResult:
    """
    Runs the candidate budget and classifies every distinct letter set.
    There is no guarantee on pool sizes; callers inspect the result.
    """
    settings = {**get_profile()['pools'], **(settings or {})}
    rng = rng or random.Random()
    solver.index.require_words()

    budget = settings['candidates']
    min_len = settings['min_len']
    allow_enye = settings['allow_enye']
    if allow_enye and not solver.index.keep_enye:
        # A folded index reads 'ñ' as 'n', so it cannot be a separate letter
        logger.warning("⚠️ Dictionary folds 'ñ' into 'n'; sampling without 'ñ'.")
        allow_enye = False
    yield_every = max(1, settings['yield_every'])

    seen = set()
    daily, classic = [], []
    processed = 0
    cancelled = False

    for i in range(1, budget + 1):
        letters = sample_candidate(rng, allow_enye)
        key = (letters.center, tuple(sorted(letters.outer)))

        if key not in seen:
            seen.add(key)
            solutions = solver.solve_letters(letters, min_len)
            count = len(solutions)
            has_superhepta = any(is_superhepta(w, letters) for w in solutions)

            if settings['daily_min'] <= count <= settings['daily_max'] and has_superhepta:
                daily.append((count, letters))
            if settings['classic_min'] <= count <= settings['classic_max']:
                classic.append((count, letters))

        processed = i
        if on_progress:
            on_progress(i, budget)

        if i % yield_every == 0:
            await asyncio.sleep(0)
            if cancel_event is not None and cancel_event.is_set():
                cancelled = True
                break

    # Stable sort keeps sampling order among equal counts
    daily.sort(key=lambda c: c[0])
    classic.sort(key=lambda c: c[0])

    result = PoolResult(
        daily=[make_puzzle('daily', n, letters, count, min_len, allow_enye)
               for n, (count, letters) in enumerate(daily, start=1)],
        classic=[make_puzzle('classic', n, letters, count, min_len, allow_enye)
                 for n, (count, letters) in enumerate(classic, start=1)],
        candidates=processed,
        cancelled=cancelled,
    )
    logger.info(
        f"📊 {processed} candidates -> {len(result.daily)} daily, {len(result.classic)} classic"
        + (" (cancelled)" if cancelled else "")
    )
    return result


def add_solution_counts(puzzles, solver: PuzzleSolver) -> List[Puzzle]:
    """Recomputes solutionCount for every puzzle against the current dictionary."""
    return [
        p.with_solution_count(len(solver.solve(p.center, p.outer, p.min_len)))
        for p in puzzles
    ]


def load_pool(path: str):
    """
    Reads a pool file. Returns (puzzles, error); on failure puzzles is empty
    and error holds the exception.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        puzzles = [Puzzle.from_dict(d) for d in data]
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.error(f"❌ Could not load puzzle pool from {path}: {e}")
        return [], e
    return puzzles, None


def save_pool(path: str, puzzles):
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([p.to_dict() for p in puzzles], f, ensure_ascii=False, indent=2)
