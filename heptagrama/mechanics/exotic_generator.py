import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Optional

from heptagrama.config import BASE_ALPHABET, ENYE, get_profile
from heptagrama.game import LetterSet
from heptagrama.solver import PuzzleSolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    letters: Optional[LetterSet]
    attempts: int
    last_solution_count: int
    cancelled: bool = False

    @property
    def found(self) -> bool:
        return self.letters is not None


class ExoticGenerator:
    def __init__(self, solver: PuzzleSolver, settings: dict = None, rng: random.Random = None):
        """
        :param solver: Solver over the loaded dictionary.
        :param settings: Overrides for the language profile's 'exotic' section.
        :param rng: Random source (seed it for reproducible searches).
        """
        self.solver = solver
        self.settings = {**get_profile()['exotic'], **(settings or {})}
        self.rng = rng or random.Random()
        self.last_generated = None  # Avoids handing out the same board twice in a row

        self.low_yield = frozenset(self.settings['low_yield_letters'])
        self.letter_rules = self.settings.get('letter_rules', {})

    def is_valid_letter_set(self, center: str, outer) -> bool:
        """Structural quality rules, checked before spending a solve on the candidate."""
        if center in self.low_yield:
            return False

        letters = {center, *outer}
        if len(letters & self.low_yield) > 1:
            return False

        for trigger, (required_all, required_any) in self.letter_rules.items():
            if trigger not in letters:
                continue
            if any(r not in letters for r in required_all):
                return False
            if required_any and not any(r in letters for r in required_any):
                return False

        return True

    def random_letters(self, exclude=()) -> Optional[LetterSet]:
        """Center from the base alphabet; outer may also use 'ñ' when the dictionary keeps it."""
        exclude = set(exclude)
        centers = [c for c in BASE_ALPHABET if c not in exclude]
        outer_alphabet = BASE_ALPHABET + (ENYE if self.solver.index.keep_enye else "")
        if not centers:
            return None

        center = self.rng.choice(centers)
        pool = [c for c in outer_alphabet if c not in exclude and c != center]
        if len(pool) < 6:
            return None
        return LetterSet(center, self.rng.sample(pool, 6))

    async def generate(self, previous: LetterSet = None, exclude=(), on_progress=None,
                       cancel_event: asyncio.Event = None) -> GenerationResult:
        """
        Searches for a letter set whose solution count falls in the configured
        window. Yields to the event loop every `yield_every` attempts and stops
        early when cancel_event is set. Exhaustion is a normal result, not an error.
        """
        min_sol = self.settings['min_solutions']
        max_sol = self.settings['max_solutions']
        max_attempts = self.settings['max_attempts']
        yield_every = max(1, self.settings['yield_every'])
        min_len = self.settings['min_len']
        previous = previous or self.last_generated

        if cancel_event is not None and cancel_event.is_set():
            return GenerationResult(None, 0, 0, cancelled=True)

        last_count = 0
        for attempt in range(1, max_attempts + 1):
            letters = self.random_letters(exclude)
            if letters is None:
                logger.error(f"❌ Not enough letters left to build a board (excluded: {sorted(exclude)})")
                return GenerationResult(None, attempt - 1, last_count)

            if self.is_valid_letter_set(letters.center, letters.outer) and not letters.same_letters(previous):
                last_count = len(self.solver.solve_letters(letters, min_len))

                if min_sol <= last_count <= max_sol:
                    if on_progress:
                        on_progress(attempt, last_count)
                    logger.info(
                        f"✅ Exotic board {letters.center.upper()} + "
                        f"[{', '.join(letters.outer).upper()}] = {last_count} solutions (attempt {attempt})"
                    )
                    self.last_generated = letters
                    return GenerationResult(letters, attempt, last_count)

            if on_progress:
                on_progress(attempt, last_count)

            if attempt % yield_every == 0:
                await asyncio.sleep(0)
                if cancel_event is not None and cancel_event.is_set():
                    logger.info(f"⏹️ Exotic search cancelled after {attempt} attempts")
                    return GenerationResult(None, attempt, last_count, cancelled=True)

        logger.warning(
            f"⚠️ No exotic board in {min_sol}-{max_sol} after {max_attempts} attempts "
            f"(last had {last_count} solutions)"
        )
        return GenerationResult(None, max_attempts, last_count)


async def generate_exotic_puzzle(solver: PuzzleSolver, settings: dict = None, rng: random.Random = None,
                                 previous: LetterSet = None, exclude=(), on_progress=None,
                                 cancel_event: asyncio.Event = None) -> GenerationResult:
    """One-shot search with a throwaway generator."""
    generator = ExoticGenerator(solver, settings, rng)
    return await generator.generate(previous, exclude, on_progress, cancel_event)
