import logging
from bisect import bisect_left
from types import MappingProxyType

from heptagrama.config import MIN_WORD_LENGTH, ENYE, ENYE_BIT
from heptagrama.utils import normalize_word

logger = logging.getLogger(__name__)


class EmptyDictionaryError(RuntimeError):
    """Raised when a feature is asked to work on a dictionary with no words."""


def letter_mask(letters) -> int:
    """
    27-bit occurrence mask.
    Bits 0-25: a-z
    Bit 26: ñ
    Anything else is ignored.
    """
    mask = 0
    for char in letters:
        if "a" <= char <= "z":
            mask |= 1 << (ord(char) - 97)
        elif char == ENYE:
            mask |= 1 << ENYE_BIT
    return mask


class DictionaryIndex:
    """
    Preprocessed word list: sorted unique words with parallel letter masks and
    lengths, plus an inverted index letter -> word indices. Read-only.
    """
    __slots__ = ('_words', '_masks', '_lengths', '_by_letter', '_keep_enye')

    def __init__(self, words, keep_enye: bool = False):
        words = tuple(sorted(set(words)))
        by_letter = {}
        for idx, word in enumerate(words):
            for char in set(word):
                by_letter.setdefault(char, []).append(idx)

        self._words = words
        self._masks = tuple(letter_mask(w) for w in words)
        self._lengths = tuple(len(w) for w in words)
        self._by_letter = MappingProxyType({k: tuple(v) for k, v in by_letter.items()})
        self._keep_enye = keep_enye

    @property
    def words(self): return self._words

    @property
    def masks(self): return self._masks

    @property
    def lengths(self): return self._lengths

    @property
    def by_letter(self): return self._by_letter

    @property
    def keep_enye(self): return self._keep_enye

    @property
    def is_empty(self) -> bool: return not self._words

    def __len__(self): return len(self._words)

    def __contains__(self, word):
        # words are sorted, so a binary search is enough
        i = bisect_left(self._words, word)
        return i < len(self._words) and self._words[i] == word

    def indices_with(self, letter: str) -> tuple:
        """Indices of every word containing `letter`, in lexicographic order."""
        return self._by_letter.get(letter, ())

    def require_words(self):
        if self.is_empty:
            raise EmptyDictionaryError("Dictionary index is empty; load a word list first.")


def build_index(lines, keep_enye: bool = False) -> DictionaryIndex:
    """
    Normalizes every line, drops results shorter than 3 letters, removes
    duplicates and sorts for deterministic iteration order.
    """
    unique = set()
    for line in lines:
        normalized = normalize_word(line, keep_enye)
        if len(normalized) >= MIN_WORD_LENGTH:
            unique.add(normalized)
    return DictionaryIndex(sorted(unique), keep_enye=keep_enye)


def load_dictionary(path: str, keep_enye: bool = False):
    """
    Loads a UTF-8, line-delimited word list.
    Returns (index, error). On failure the index is empty and error holds the
    exception; this never raises.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            index = build_index(f, keep_enye=keep_enye)
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"❌ Could not load dictionary from {path}: {e}")
        return DictionaryIndex((), keep_enye=keep_enye), e

    logger.info(f"✅ Dictionary: {len(index)} unique words from {path}")
    return index, None
