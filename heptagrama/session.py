import asyncio
import logging
import random

from heptagrama import database
from heptagrama.config import ABILITY_COSTS, get_profile
from heptagrama.game import Reason, ValidationResult
from heptagrama.mechanics import exotic_run
from heptagrama.mechanics.exotic_generator import ExoticGenerator
from heptagrama.mechanics.rewards import calculate_session_xp
from heptagrama.mechanics.stats import len7_plus_count, length_counts, remaining_words, start_letter_counts
from heptagrama.solver import PuzzleSolver

logger = logging.getLogger(__name__)


def award_session_xp(store, found_count: int, total_count: int, superhepta_count: int, mode: str) -> dict:
    """XP for a finished daily/classic session, added to the player's total."""
    rewards = calculate_session_xp(found_count, total_count, superhepta_count, mode)
    data = database.add_player_xp(store, rewards['total'])
    data['breakdown'] = rewards
    return data


class RunSession:
    """
    Owns the caller's exotic run: threads the run state through the pure
    transitions, looks up solutions for the current letters and persists a
    snapshot after every successful transition.
    """

    def __init__(self, solver: PuzzleSolver, store=None, generator: ExoticGenerator = None,
                 language: str = None, rng: random.Random = None):
        self.solver = solver
        self.store = store if store is not None else database.MemoryStore()
        self.rng = rng or random.Random()
        self.settings = get_profile(language)['exotic']
        self.generator = generator or ExoticGenerator(solver, self.settings, self.rng)
        self.state = None
        self.generating = False

    @property
    def keep_enye(self) -> bool:
        return self.solver.index.keep_enye

    @property
    def active(self) -> bool:
        return self.state is not None and not self.state.ended

    def solutions(self) -> tuple:
        if self.state is None:
            return ()
        return self.solver.solve_letters(self.state.letters, self.state.min_len)

    def _persist(self):
        if self.state is not None and not self.state.ended:
            database.save_run(self.store, self.state.to_dict())

    def _apply(self, transition, *args, **kwargs):
        new_state, outcome = transition(self.state, *args, **kwargs)
        if outcome.ok and new_state is not self.state:
            self.state = new_state
            self._persist()
        return outcome

    def _sync_total(self):
        self.state = exotic_run.set_solutions_total(self.state, len(self.solutions()))

    # --- LIFECYCLE ---

    async def start_run(self, on_progress=None, cancel_event: asyncio.Event = None):
        """Generates a fresh board and starts a new run, replacing any active one."""
        self.generating = True
        try:
            result = await self.generator.generate(on_progress=on_progress, cancel_event=cancel_event)
        finally:
            self.generating = False

        if not result.found:
            return ValidationResult.reject(
                Reason.GENERATION_FAILED,
                f"Could not generate a board in {result.attempts} attempts. Try again.",
            )

        min_len = self.settings['min_len']
        total = len(self.solver.solve_letters(result.letters, min_len))
        self.state, outcome = exotic_run.new_run(result.letters, total, min_len)
        self._persist()
        logger.info(f"✨ Run {self.state.run_id} started with {total} solutions")
        return outcome

    def resume(self) -> bool:
        """Loads the persisted run, if any. A snapshot that cannot be rebuilt is cleared."""
        data = database.load_run(self.store)
        if data is None:
            return False

        try:
            self.state = exotic_run.ExoticsRunState.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"⚠️ Could not restore run snapshot: {e}")
            database.clear_run(self.store)
            self.state = None
            return False

        self._sync_total()
        self._persist()
        return True

    def end_run(self):
        """Flushes the run's XP into the player state and clears the snapshot."""
        new_state, outcome = exotic_run.end_run(self.state)
        if not outcome:
            return outcome, None

        player = database.add_player_xp(self.store, new_state.xp_earned)
        database.clear_run(self.store)
        self.state = new_state
        logger.info(f"🏁 Run {new_state.run_id} ended: +{new_state.xp_earned} XP (total {player['xpTotal']})")
        return outcome, player

    # --- PLAY ---

    def submit(self, word: str):
        if self.state is None or self.state.ended:
            return self._apply(exotic_run.submit_word, word, ())
        return self._apply(exotic_run.submit_word, word, self.solutions(), self.keep_enye)

    def swap_letter(self, index: int, new_letter: str = None):
        outcome = self._apply(exotic_run.swap_letter, index, new_letter, self.rng)
        if outcome:
            self._sync_total()
            self._persist()
        return outcome

    def buy_letter(self, letter: str = None):
        outcome = self._apply(exotic_run.buy_extra_letter, letter, self.rng)
        if outcome:
            self._sync_total()
            self._persist()
        return outcome

    def shuffle(self):
        return self._apply(exotic_run.shuffle_letters, self.rng)

    def unlock_length_hint(self):
        return self._apply(exotic_run.unlock_length_hint)

    def unlock_start_letter_stats(self):
        return self._apply(exotic_run.unlock_start_letter_stats)

    def activate_double_points(self):
        return self._apply(exotic_run.activate_double_points)

    async def regenerate(self, on_progress=None, cancel_event: asyncio.Event = None):
        """
        Moves to a new board: free once eligible, otherwise paid up front and
        refunded if no board could be generated.
        """
        free = self.state is not None and exotic_run.can_change_puzzle_free(self.state)
        check = exotic_run.check_new_puzzle(self.state, free)
        if not check:
            return check

        cost = 0 if free else ABILITY_COSTS['new_puzzle']
        if cost:
            self.state = exotic_run.charge(self.state, cost)
            self._persist()

        self.generating = True
        try:
            result = await self.generator.generate(
                previous=self.state.letters,
                exclude=self.state.extra_letters,
                on_progress=on_progress,
                cancel_event=cancel_event,
            )
        except (Exception, asyncio.CancelledError):
            if cost:
                self.state = exotic_run.refund(self.state, cost)
                self._persist()
            raise
        finally:
            self.generating = False

        if not result.found:
            if cost:
                self.state = exotic_run.refund(self.state, cost)
                self._persist()
            refund_note = f" {cost} P refunded." if cost else ""
            return ValidationResult.reject(Reason.GENERATION_FAILED, f"Could not generate a new board.{refund_note}")

        total = len(self.solver.solve(result.letters.center, result.letters.outer,
                                      self.state.min_len, self.state.extra_letters))
        return self._apply(exotic_run.regenerate, result.letters, total)

    # --- HINTS ---

    def remaining(self) -> list:
        if self.state is None:
            return []
        return remaining_words(self.solutions(), self.state.found_words_all)

    def length_hint(self):
        """Remaining words by length, once unlocked."""
        if self.state is None or not self.state.stats_unlocked.length_hint:
            return None
        return length_counts(self.remaining())

    def start_letter_stats(self):
        """Remaining words by start letter, once unlocked."""
        if self.state is None or not self.state.stats_unlocked.by_start_letter:
            return None
        return start_letter_counts(self.remaining(), self.state.letters.all_letters)

    def summary(self) -> dict:
        if self.state is None:
            return {}
        solutions = self.solutions()
        valid = exotic_run.valid_found_words(self.state)
        return {
            'score_points': self.state.score_points,
            'xp_earned': self.state.xp_earned,
            'valid_found': len(valid),
            'history': len(self.state.found_words_all),
            'solutions_total': len(solutions),
            'progress': exotic_run.progress(self.state),
            'len7_plus': len7_plus_count(solutions),
            'extra_letters': list(self.state.extra_letters),
            'can_change_free': exotic_run.can_change_puzzle_free(self.state),
            'double_points_remaining': self.state.double_points_remaining,
        }
