"""
Exotic run state machine.

A run is an explicit, frozen ExoticsRunState value. Every transition is a pure
function taking the current state (or None when there is no run) and returning
(new_state, outcome). Rejected transitions return the state unchanged and a
failed ValidationResult with its Reason.

    NoRun (None) -> RunActive (ended=False) -> RunEnded (ended=True)

Solutions are never stored in the state; callers pass the solver output for
the current letters.
"""
import datetime
import random
import time
import uuid
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from heptagrama.config import (
    ABILITY_COSTS, BASE_ALPHABET, DOUBLE_POINTS_WORDS, FREE_CHANGE_WORDS,
    HALF_PROGRESS_BONUS, HALF_PROGRESS_RATIO, MIN_WORD_LENGTH,
)
from heptagrama.game import LetterSet, Reason, ValidationResult, is_superhepta, uses_only, validate_word
from heptagrama.mechanics.rewards import milestone_bonus, points_to_xp, word_points


@dataclass(frozen=True)
class Milestones:
    reached_50_percent: bool = False
    reached_100_found: bool = False
    claimed_50_percent_bonus: bool = False


@dataclass(frozen=True)
class StatsUnlocked:
    by_start_letter: bool = False
    length_hint: bool = False


@dataclass(frozen=True)
class ExoticsRunState:
    run_id: str
    started_at: str
    letters: LetterSet
    found_words_all: Tuple[str, ...] = ()
    solutions_total: int = 0
    score_points: int = 0
    xp_earned: int = 0
    streak10_count: int = 0
    milestones: Milestones = field(default_factory=Milestones)
    double_points_remaining: int = 0
    stats_unlocked: StatsUnlocked = field(default_factory=StatsUnlocked)
    min_len: int = MIN_WORD_LENGTH
    ended: bool = False

    @property
    def extra_letters(self) -> Tuple[str, ...]:
        return self.letters.extra

    def to_dict(self) -> dict:
        """camelCase snapshot used for persistence."""
        return {
            'runId': self.run_id,
            'startedAt': self.started_at,
            'puzzle': {'center': self.letters.center, 'outer': list(self.letters.outer)},
            'extraLetters': list(self.letters.extra),
            'solutionsTotal': self.solutions_total,
            'foundWordsAll': list(self.found_words_all),
            'scorePoints': self.score_points,
            'xpEarned': self.xp_earned,
            'streak10Count': self.streak10_count,
            'milestones': {
                'reached50Percent': self.milestones.reached_50_percent,
                'reached100Found': self.milestones.reached_100_found,
                'claimed50PercentBonus': self.milestones.claimed_50_percent_bonus,
            },
            'doublePointsRemaining': self.double_points_remaining,
            'statsUnlocked': {
                'byStartLetter': self.stats_unlocked.by_start_letter,
                'lengthHint': self.stats_unlocked.length_hint,
            },
            'minLen': self.min_len,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ExoticsRunState":
        milestones = data.get('milestones', {})
        stats = data.get('statsUnlocked', {})
        return cls(
            run_id=data['runId'],
            started_at=data.get('startedAt', ''),
            letters=LetterSet(data['puzzle']['center'], data['puzzle']['outer'], data.get('extraLetters', ())),
            found_words_all=tuple(data.get('foundWordsAll', ())),
            solutions_total=int(data.get('solutionsTotal', 0)),
            score_points=int(data.get('scorePoints', 0)),
            xp_earned=int(data.get('xpEarned', 0)),
            streak10_count=int(data.get('streak10Count', 0)),
            milestones=Milestones(
                reached_50_percent=bool(milestones.get('reached50Percent', False)),
                reached_100_found=bool(milestones.get('reached100Found', False)),
                claimed_50_percent_bonus=bool(milestones.get('claimed50PercentBonus', False)),
            ),
            double_points_remaining=int(data.get('doublePointsRemaining', 0)),
            stats_unlocked=StatsUnlocked(
                by_start_letter=bool(stats.get('byStartLetter', False)),
                length_hint=bool(stats.get('lengthHint', False)),
            ),
            min_len=int(data.get('minLen') or MIN_WORD_LENGTH),
        )


@dataclass(frozen=True)
class WordAccepted:
    """Outcome of an accepted submission: every point source of the step."""
    word: str
    word_points: int
    superhepta: bool
    doubled: bool
    milestone_bonus: int
    half_bonus: int
    xp_gained: int
    valid_count: int
    ok: bool = True
    reason: Optional[Reason] = None

    def __bool__(self): return True

    @property
    def points_gained(self) -> int:
        return self.word_points + self.milestone_bonus + self.half_bonus

    @property
    def message(self) -> str:
        if self.half_bonus:
            return f"🎯 50% complete! +{self.half_bonus} P (free change unlocked)"
        if self.milestone_bonus:
            return f"🎉 {self.valid_count} words! +{self.milestone_bonus} P"
        boost = " ⚡x2" if self.doubled else ""
        if self.superhepta:
            return f"🌟 SuperHepta! +{self.word_points} P{boost}"
        return f"Nice! +{self.word_points} P{boost}"


def _new_run_id() -> str:
    return f"exotic-{int(time.time() * 1000):x}-{uuid.uuid4().hex[:7]}"


def _guard(state: Optional[ExoticsRunState]) -> Optional[ValidationResult]:
    if state is None:
        return ValidationResult.reject(Reason.NO_ACTIVE_RUN, "No active run.")
    if state.ended:
        return ValidationResult.reject(Reason.RUN_ENDED, "This run has ended.")
    return None


def _afford(state: ExoticsRunState, cost: int) -> Optional[ValidationResult]:
    if state.score_points < cost:
        return ValidationResult.reject(
            Reason.INSUFFICIENT_POINTS, f"Needs {cost} P (you have {state.score_points} P)."
        )
    return None


# ========= READS =========

def valid_found_words(state: ExoticsRunState) -> list:
    """History words still playable with the current letters."""
    return [w for w in state.found_words_all if uses_only(w, state.letters)]


def progress(state: ExoticsRunState) -> float:
    if not state.solutions_total:
        return 0.0
    return len(valid_found_words(state)) / state.solutions_total


def can_change_puzzle_free(state: ExoticsRunState) -> bool:
    if not state.solutions_total:
        return False
    return progress(state) >= HALF_PROGRESS_RATIO or len(valid_found_words(state)) >= FREE_CHANGE_WORDS


def used_letters(state: ExoticsRunState) -> frozenset:
    return state.letters.allowed


def available_letters(state: ExoticsRunState) -> list:
    """Letters that can be swapped in or bought: a-z minus everything in use."""
    used = used_letters(state)
    return [c for c in BASE_ALPHABET if c not in used]


# ========= TRANSITIONS =========

def new_run(letters: LetterSet, solutions_total: int, min_len: int = MIN_WORD_LENGTH, now=None):
    now = now or datetime.datetime.now(datetime.timezone.utc)
    state = ExoticsRunState(
        run_id=_new_run_id(),
        started_at=now.isoformat(),
        letters=letters,
        solutions_total=solutions_total,
        min_len=min_len,
    )
    return state, ValidationResult.accept(message="✨ New exotic run started.")


def set_solutions_total(state: ExoticsRunState, solutions_total: int) -> ExoticsRunState:
    if state.solutions_total == solutions_total:
        return state
    return replace(state, solutions_total=solutions_total)


def submit_word(state, word: str, solutions, keep_enye: bool = False):
    """
    Validates `word` against the current letters and their solver output,
    then scores it. `solutions` must be the solutions of state.letters.
    """
    rejected = _guard(state)
    if rejected is not None:
        return state, rejected

    result = validate_word(word, state.letters, frozenset(solutions), frozenset(state.found_words_all),
                           state.min_len, keep_enye)
    if not result:
        return state, result

    normalized = result.word
    found_all = tuple(sorted(state.found_words_all + (normalized,)))
    valid_count = sum(1 for w in found_all if uses_only(w, state.letters))
    total = len(solutions)

    superhepta = is_superhepta(normalized, state.letters)
    points = word_points(normalized, superhepta)
    doubled = state.double_points_remaining > 0
    if doubled:
        points *= 2

    # Milestones are not doubled
    bonus, streak10 = milestone_bonus(valid_count, state.streak10_count)
    xp = points_to_xp(points + bonus)

    milestones = state.milestones
    half_bonus = 0
    reached_half = total > 0 and valid_count / total >= HALF_PROGRESS_RATIO
    if reached_half and not milestones.reached_50_percent and not milestones.claimed_50_percent_bonus:
        half_bonus = HALF_PROGRESS_BONUS
        xp += points_to_xp(half_bonus)
        milestones = replace(milestones, reached_50_percent=True, claimed_50_percent_bonus=True)

    if valid_count >= FREE_CHANGE_WORDS and not milestones.reached_100_found:
        milestones = replace(milestones, reached_100_found=True)

    new_state = replace(
        state,
        found_words_all=found_all,
        solutions_total=total,
        score_points=state.score_points + points + bonus + half_bonus,
        xp_earned=state.xp_earned + xp,
        streak10_count=streak10,
        milestones=milestones,
        double_points_remaining=max(0, state.double_points_remaining - 1),
    )
    return new_state, WordAccepted(
        word=normalized,
        word_points=points,
        superhepta=superhepta,
        doubled=doubled,
        milestone_bonus=bonus,
        half_bonus=half_bonus,
        xp_gained=xp,
        valid_count=valid_count,
    )


def swap_letter(state, index: int, new_letter: str = None, rng: random.Random = None):
    """
    Replaces outer[index]. A chosen letter costs more than a random one.
    History is kept; words that no longer fit simply stop counting.
    """
    rejected = _guard(state)
    if rejected is not None:
        return state, rejected

    cost = ABILITY_COSTS['swap_chosen' if new_letter else 'swap_random']
    rejected = _afford(state, cost)
    if rejected is not None:
        return state, rejected

    if not isinstance(index, int) or not 0 <= index < len(state.letters.outer):
        return state, ValidationResult.reject(Reason.BAD_INDEX, f"No outer letter at position {index}.")

    available = available_letters(state)
    if new_letter:
        new_letter = new_letter.lower()
        if new_letter not in available:
            return state, ValidationResult.reject(
                Reason.LETTER_UNAVAILABLE, f"\"{new_letter.upper()}\" is already in use or not allowed."
            )
    else:
        if not available:
            return state, ValidationResult.reject(Reason.LETTER_UNAVAILABLE, "No letters left to swap in.")
        new_letter = (rng or random).choice(available)

    old_letter = state.letters.outer[index]
    new_state = replace(
        state,
        letters=state.letters.swap_outer(index, new_letter),
        score_points=state.score_points - cost,
    )
    return new_state, ValidationResult.accept(
        new_letter, f"🔄 Letter changed: {old_letter.upper()} → {new_letter.upper()}"
    )


def buy_extra_letter(state, letter: str = None, rng: random.Random = None):
    rejected = _guard(state)
    if rejected is not None:
        return state, rejected

    cost = ABILITY_COSTS['buy_chosen' if letter else 'buy_random']
    rejected = _afford(state, cost)
    if rejected is not None:
        return state, rejected

    available = available_letters(state)
    if letter:
        letter = letter.lower()
        if letter not in available:
            return state, ValidationResult.reject(
                Reason.LETTER_UNAVAILABLE, f"\"{letter.upper()}\" is already in use or not allowed."
            )
    else:
        if not available:
            return state, ValidationResult.reject(Reason.LETTER_UNAVAILABLE, "No letters left to buy.")
        letter = (rng or random).choice(available)

    new_state = replace(
        state,
        letters=state.letters.add_extra(letter),
        score_points=state.score_points - cost,
    )
    return new_state, ValidationResult.accept(letter, f"✨ Extra letter added: {letter.upper()}")


def check_new_puzzle(state, free: bool) -> ValidationResult:
    """Whether the run may move to a new board, for free or by paying."""
    rejected = _guard(state)
    if rejected is not None:
        return rejected

    if free:
        if not can_change_puzzle_free(state):
            return ValidationResult.reject(
                Reason.NOT_ELIGIBLE,
                f"Free change needs 50% progress or {FREE_CHANGE_WORDS} valid words.",
            )
        return ValidationResult.accept()

    if progress(state) >= HALF_PROGRESS_RATIO:
        return ValidationResult.reject(
            Reason.PROGRESS_TOO_HIGH, "A new board can only be bought before reaching 50%."
        )
    rejected = _afford(state, ABILITY_COSTS['new_puzzle'])
    if rejected is not None:
        return rejected
    return ValidationResult.accept()


def charge(state: ExoticsRunState, cost: int) -> ExoticsRunState:
    return replace(state, score_points=state.score_points - cost)


def refund(state: ExoticsRunState, amount: int) -> ExoticsRunState:
    return replace(state, score_points=state.score_points + amount)


def regenerate(state, letters: LetterSet, solutions_total: int, cost: int = 0):
    """
    Moves the run to a fresh board. History, milestones and the streak counter
    reset; score, XP and extra letters carry over. `letters` must not collide
    with the run's extra letters. Eligibility is checked with check_new_puzzle;
    pass cost=0 when the change was free or already paid for.
    """
    rejected = _guard(state)
    if rejected is not None:
        return state, rejected

    if cost:
        rejected = _afford(state, cost)
        if rejected is not None:
            return state, rejected

    new_state = replace(
        state,
        letters=LetterSet(letters.center, letters.outer, state.letters.extra),
        found_words_all=(),
        solutions_total=solutions_total,
        score_points=state.score_points - cost,
        streak10_count=0,
        milestones=Milestones(),
    )
    return new_state, ValidationResult.accept(message="✨ New board loaded! Your P and XP carry over.")


def unlock_length_hint(state):
    rejected = _guard(state)
    if rejected is not None:
        return state, rejected
    if state.stats_unlocked.length_hint:
        return state, ValidationResult.reject(Reason.ALREADY_UNLOCKED, "Length hint already unlocked.")

    cost = ABILITY_COSTS['length_hint']
    rejected = _afford(state, cost)
    if rejected is not None:
        return state, rejected

    return replace(
        state,
        score_points=state.score_points - cost,
        stats_unlocked=replace(state.stats_unlocked, length_hint=True),
    ), ValidationResult.accept(message="💡 Length hint unlocked!")


def unlock_start_letter_stats(state):
    rejected = _guard(state)
    if rejected is not None:
        return state, rejected
    if state.stats_unlocked.by_start_letter:
        return state, ValidationResult.reject(Reason.ALREADY_UNLOCKED, "Start-letter stats already unlocked.")

    cost = ABILITY_COSTS['start_letter_stats']
    rejected = _afford(state, cost)
    if rejected is not None:
        return state, rejected

    return replace(
        state,
        score_points=state.score_points - cost,
        stats_unlocked=replace(state.stats_unlocked, by_start_letter=True),
    ), ValidationResult.accept(message="🔓 Start-letter stats unlocked!")


def activate_double_points(state):
    rejected = _guard(state)
    if rejected is not None:
        return state, rejected
    if state.double_points_remaining > 0:
        return state, ValidationResult.reject(
            Reason.ALREADY_UNLOCKED, f"Double points already active ({state.double_points_remaining} left)."
        )

    cost = ABILITY_COSTS['double_points']
    rejected = _afford(state, cost)
    if rejected is not None:
        return state, rejected

    return replace(
        state,
        score_points=state.score_points - cost,
        double_points_remaining=DOUBLE_POINTS_WORDS,
    ), ValidationResult.accept(message=f"⚡ Next {DOUBLE_POINTS_WORDS} words score DOUBLE!")


def shuffle_letters(state, rng: random.Random = None):
    """Reorders the outer letters. The letter set itself does not change."""
    rejected = _guard(state)
    if rejected is not None:
        return state, rejected

    cost = ABILITY_COSTS['shuffle']
    rejected = _afford(state, cost)
    if rejected is not None:
        return state, rejected

    outer = list(state.letters.outer)
    (rng or random).shuffle(outer)
    return replace(
        state,
        letters=state.letters.reorder_outer(outer),
        score_points=state.score_points - cost,
    ), ValidationResult.accept(message="🔄 Letters shuffled!")


def end_run(state):
    rejected = _guard(state)
    if rejected is not None:
        return state, rejected
    return replace(state, ended=True), ValidationResult.accept(
        message=f"🏁 Run over: {state.score_points} P, {state.xp_earned} XP."
    )
