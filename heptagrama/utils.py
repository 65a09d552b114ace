from heptagrama.config import BASE_ALPHABET, ENYE, BASE_XP_PER_LEVEL, LEVEL_EXPONENT

_DIACRITICS = str.maketrans(
    "áàäâãéèëêíìïîóòöôõúùüû",
    "aaaaaeeeeiiiiooooouuuu",
)
_VALID = frozenset(BASE_ALPHABET)

def normalize_char(char: str, keep_enye: bool = True) -> str:
    """
    Normalizes one character: lowercase, accents stripped to the base vowel,
    'ñ' kept or folded to 'n'. Returns '' for anything outside a-z/ñ.
    """
    if not char:
        return ""
    c = char.lower().translate(_DIACRITICS)
    if c == ENYE:
        return ENYE if keep_enye else "n"
    return c if c in _VALID else ""

def normalize_word(word: str, keep_enye: bool = True) -> str:
    """Applies normalize_char to every character, dropping the invalid ones."""
    if not word:
        return ""
    return "".join(normalize_char(c, keep_enye) for c in word.strip())

def normalize_letters(letters, keep_enye: bool = True) -> list:
    out = []
    for letter in letters:
        n = normalize_char(letter, keep_enye)
        if n:
            out.append(n)
    return out

def get_xp_for_next_level(level: int) -> int:
    return int(BASE_XP_PER_LEVEL * level ** LEVEL_EXPONENT)

def get_total_xp_for_level(level: int) -> int:
    """Total XP needed to reach `level` from zero."""
    return sum(get_xp_for_next_level(i) for i in range(1, level))

def calculate_level(xp: int) -> int:
    """Calculates level from total XP."""
    if xp < 0:
        return 1
    level = 1
    needed = get_xp_for_next_level(1)
    while needed <= xp:
        level += 1
        needed += get_xp_for_next_level(level)
    return level

def get_level_progress(total_xp: int):
    """Returns (level, xp_in_level, xp_needed_for_next)."""
    lvl = calculate_level(total_xp)
    curr = max(0, total_xp) - get_total_xp_for_level(lvl)
    return lvl, curr, get_xp_for_next_level(lvl)

def check_level_up(old_xp: int, new_xp: int) -> dict:
    old_lvl = calculate_level(old_xp)
    new_lvl = calculate_level(new_xp)
    return {
        'leveled_up': new_lvl > old_lvl,
        'old_level': old_lvl,
        'new_level': new_lvl,
        'levels_gained': new_lvl - old_lvl,
    }
