"""
Word list tooling.

The Spanish source list has one entry per line: `masculine[,feminine-suffix]`,
e.g. `abad,desa` -> abad, abadesa. The English list comes from the NLTK
words corpus.
"""
import logging

from heptagrama.config import MIN_WORD_LENGTH
from heptagrama.utils import normalize_word

logger = logging.getLogger(__name__)


def parse_wordlist_line(line: str):
    """Returns (masc, suffix or None); None for blank lines and # comments."""
    trimmed = line.strip()
    if not trimmed or trimmed.startswith('#'):
        return None
    masc, _, suffix = trimmed.partition(',')
    masc = masc.strip()
    if not masc:
        return None
    return masc, suffix.strip() or None


def _overlaps(base: str, suffix: str) -> bool:
    """True when some tail of base equals the same-length head of suffix."""
    base, suffix = base.lower(), suffix.lower()
    for n in range(1, min(len(base), len(suffix)) + 1):
        if base[-n:] == suffix[:n]:
            return True
    return False


def build_feminine(masc: str, suffix: str):
    """
    Drops the fewest trailing letters from `masc` so that no tail of what is
    left repeats the start of `suffix`, then appends the suffix.
        abacalero + ra -> abacalera, abad + desa -> abadesa
    """
    if not suffix:
        return None
    for k in range(1, len(masc) + 1):
        base = masc[:-k]
        if not _overlaps(base, suffix):
            return base + suffix
    return masc + suffix


def build_wordlist(lines, keep_enye: bool = True) -> list:
    """Expands and normalizes a raw list. Returns sorted unique words."""
    words = set()
    for line in lines:
        parsed = parse_wordlist_line(line)
        if parsed is None:
            continue
        masc, suffix = parsed
        for form in (masc, build_feminine(masc, suffix)):
            if not form:
                continue
            normalized = normalize_word(form, keep_enye)
            if normalized:
                words.add(normalized)
    return sorted(words)


def nltk_wordlist(min_len: int = MIN_WORD_LENGTH, corpus=None) -> list:
    """
    Lowercase alphabetic words from the NLTK words corpus, downloading it on
    first use. `corpus` is anything with a `words()` method and defaults to
    `nltk.corpus.words`.
    """
    import nltk

    # Lazy load NLTK data
    try:
        nltk.data.find('corpora/words')
    except LookupError:
        logger.info("📥 Downloading NLTK words corpus...")
        nltk.download('words', quiet=True)

    if corpus is None:
        from nltk.corpus import words as corpus
    return sorted({
        w.lower() for w in corpus.words()
        if len(w) >= min_len and w.isascii() and w.isalpha()
    })


def write_wordlist(path: str, words):
    with open(path, 'w', encoding='utf-8') as f:
        for word in words:
            f.write(f"{word}\n")
