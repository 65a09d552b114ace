import logging
from typing import NamedTuple, Tuple

from heptagrama.config import MIN_WORD_LENGTH
from heptagrama.dictionary import DictionaryIndex, letter_mask
from heptagrama.game import LetterSet, is_superhepta
from heptagrama.utils import normalize_char, normalize_letters

logger = logging.getLogger(__name__)


class SolveKey(NamedTuple):
    """Cache key built from letter-set content, so any mutation is a cache miss."""
    center: str
    outer: Tuple[str, ...]
    min_len: int
    extra: Tuple[str, ...]


class PuzzleSolver:
    """
    Finds every dictionary word that contains the center letter and only uses
    the allowed letters. Results are memoized per SolveKey.
    """

    def __init__(self, index: DictionaryIndex):
        self.index = index
        self._cache = {}

    @property
    def cache_size(self) -> int: return len(self._cache)

    def clear_cache(self):
        self._cache.clear()

    def make_key(self, center: str, outer, min_len: int = MIN_WORD_LENGTH, extra=()) -> SolveKey:
        keep = self.index.keep_enye
        norm_center = normalize_char(center, keep)
        if not norm_center:
            raise ValueError(f"Invalid center letter: {center!r}")
        return SolveKey(
            norm_center,
            tuple(sorted(set(normalize_letters(outer, keep)))),
            int(min_len),
            tuple(sorted(set(normalize_letters(extra or (), keep)))),
        )

    def solve(self, center: str, outer, min_len: int = MIN_WORD_LENGTH, extra=()) -> Tuple[str, ...]:
        """Returns the solutions in dictionary (lexicographic) order."""
        self.index.require_words()
        key = self.make_key(center, outer, min_len, extra)

        cached = self._cache.get(key)
        if cached is not None:
            return cached

        # OR is idempotent, so repeated letters in the input are harmless
        allowed = letter_mask((key.center,) + key.outer + key.extra)
        blocked = ~allowed

        words = self.index.words
        masks = self.index.masks
        lengths = self.index.lengths

        solutions = tuple(
            words[idx]
            for idx in self.index.indices_with(key.center)
            if lengths[idx] >= key.min_len and not (masks[idx] & blocked)
        )

        self._cache[key] = solutions
        logger.debug(f"solve {key}: {len(solutions)} solutions")
        return solutions

    def solve_letters(self, letters: LetterSet, min_len: int = MIN_WORD_LENGTH) -> Tuple[str, ...]:
        return self.solve(letters.center, letters.outer, min_len, letters.extra)

    def superheptas(self, solutions, letters: LetterSet) -> list:
        return [w for w in solutions if is_superhepta(w, letters)]
