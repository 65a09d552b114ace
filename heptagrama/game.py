from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from heptagrama.config import ENYE, MIN_WORD_LENGTH
from heptagrama.utils import normalize_word

# ========= LETTER SETS =========
@dataclass(frozen=True)
class LetterSet:
    """
    One center letter, six outer letters and (exotic mode only) extra letters.
    Every mutation returns a new LetterSet.
    """
    center: str
    outer: Tuple[str, ...]
    extra: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'outer', tuple(self.outer))
        object.__setattr__(self, 'extra', tuple(self.extra))

        if len(self.center) != 1 or self.center == ENYE:
            raise ValueError(f"Invalid center letter: {self.center!r}")
        if len(self.outer) != 6:
            raise ValueError(f"Expected 6 outer letters, got {len(self.outer)}")
        letters = self.all_letters
        if len(set(letters)) != len(letters):
            raise ValueError(f"Letters must be unique: {''.join(letters)}")

    @property
    def base_letters(self) -> Tuple[str, ...]:
        return (self.center,) + self.outer

    @property
    def all_letters(self) -> Tuple[str, ...]:
        return (self.center,) + self.outer + self.extra

    @property
    def allowed(self) -> frozenset:
        return frozenset(self.all_letters)

    def same_letters(self, other: Optional["LetterSet"]) -> bool:
        """True when both sets have the same center and the same outer letters in any order."""
        if other is None:
            return False
        return self.center == other.center and sorted(self.outer) == sorted(other.outer)

    def swap_outer(self, index: int, letter: str) -> "LetterSet":
        outer = list(self.outer)
        outer[index] = letter
        return replace(self, outer=tuple(outer))

    def add_extra(self, letter: str) -> "LetterSet":
        return replace(self, extra=self.extra + (letter,))

    def reorder_outer(self, outer) -> "LetterSet":
        if sorted(outer) != sorted(self.outer):
            raise ValueError("Reordering must keep the same outer letters")
        return replace(self, outer=tuple(outer))


# ========= STATIC PUZZLES =========
@dataclass(frozen=True)
class Puzzle:
    id: str
    title: str
    center: str
    outer: Tuple[str, ...]
    mode: str = "classic"
    min_len: int = MIN_WORD_LENGTH
    allow_diacritic_letter: bool = False
    solution_count: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, 'outer', tuple(self.outer))

    @property
    def letters(self) -> LetterSet:
        return LetterSet(self.center, self.outer)

    def with_solution_count(self, count: int) -> "Puzzle":
        return replace(self, solution_count=count)

    @classmethod
    def from_dict(cls, data: dict) -> "Puzzle":
        # 'allowEnye' is the key used by older pool files
        allow = data.get('allowDiacriticLetter', data.get('allowEnye', False))
        return cls(
            id=str(data['id']),
            title=data.get('title', str(data['id'])),
            center=data['center'],
            outer=tuple(data['outer']),
            mode=data.get('mode', 'classic'),
            min_len=int(data.get('minLen') or MIN_WORD_LENGTH),
            allow_diacritic_letter=bool(allow),
            solution_count=data.get('solutionCount'),
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'title': self.title,
            'center': self.center,
            'outer': list(self.outer),
            'mode': self.mode,
            'minLen': self.min_len,
            'allowDiacriticLetter': self.allow_diacritic_letter,
            'solutionCount': self.solution_count,
        }


# ========= VALIDATION =========
class Reason(str, Enum):
    TOO_SHORT = "too_short"
    MISSING_CENTER = "missing_center"
    INVALID_LETTER = "invalid_letter"
    NOT_IN_SOLUTIONS = "not_in_solutions"
    ALREADY_FOUND = "already_found"
    NO_ACTIVE_RUN = "no_active_run"
    RUN_ENDED = "run_ended"
    INSUFFICIENT_POINTS = "insufficient_points"
    ALREADY_UNLOCKED = "already_unlocked"
    LETTER_UNAVAILABLE = "letter_unavailable"
    BAD_INDEX = "bad_index"
    PROGRESS_TOO_HIGH = "progress_too_high"
    NOT_ELIGIBLE = "not_eligible"
    GENERATION_FAILED = "generation_failed"


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    reason: Optional[Reason] = None
    message: str = ""
    word: str = ""

    def __bool__(self): return self.ok

    @classmethod
    def accept(cls, word: str = "", message: str = "") -> "ValidationResult":
        return cls(True, None, message, word)

    @classmethod
    def reject(cls, reason: Reason, message: str, word: str = "") -> "ValidationResult":
        return cls(False, reason, message, word)


def validate_word(word: str, letters: LetterSet, solutions, found_words=(),
                  min_len: int = MIN_WORD_LENGTH, keep_enye: bool = False) -> ValidationResult:
    """
    Checks a submission against a letter set, in order: length, center,
    allowed letters, solver output, duplicates. Never raises.
    """
    normalized = normalize_word(word, keep_enye)

    if len(normalized) < min_len:
        return ValidationResult.reject(Reason.TOO_SHORT, f"Minimum {min_len} letters.", normalized)

    if letters.center not in normalized:
        return ValidationResult.reject(
            Reason.MISSING_CENTER,
            f"Must contain the center letter: \"{letters.center.upper()}\".",
            normalized,
        )

    allowed = letters.allowed
    for ch in normalized:
        if ch not in allowed:
            return ValidationResult.reject(Reason.INVALID_LETTER, f"\"{ch.upper()}\" is not one of the letters.", normalized)

    if normalized not in solutions:
        return ValidationResult.reject(Reason.NOT_IN_SOLUTIONS, "Not in this puzzle's dictionary.", normalized)

    if normalized in found_words:
        return ValidationResult.reject(Reason.ALREADY_FOUND, "Already found.", normalized)

    return ValidationResult.accept(normalized)


def is_superhepta(word: str, letters: LetterSet) -> bool:
    """A word that uses every one of the 7 base letters at least once."""
    return all(letter in word for letter in letters.base_letters)


def uses_only(word: str, letters: LetterSet) -> bool:
    """Contains the center and nothing outside the current letters."""
    return letters.center in word and set(word) <= letters.allowed
