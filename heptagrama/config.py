import os
from dotenv import load_dotenv

load_dotenv()

# --- SUPABASE CONFIG ---
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")
SUPABASE_TABLE = os.getenv("SUPABASE_TABLE", "kv_store")

# --- FILE PATHS ---
LANGUAGE = os.getenv("HEPTAGRAMA_LANGUAGE", "es")
WORDLIST_FILE = os.getenv("WORDLIST_FILE", "wordlist.txt")  # Normalized, one word per line
PUZZLES_FILE = os.getenv("PUZZLES_FILE", "puzzles.json")  # Offline pool output
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# --- GAME CONSTANTS ---
MIN_WORD_LENGTH = 3
BASE_ALPHABET = "abcdefghijklmnopqrstuvwxyz"
ENYE = "ñ"
ENYE_BIT = 26

# --- LANGUAGE PROFILES ---
# Solution-count windows and letter rules are tuned to each word list's
# letter distribution. Anything language specific lives here.
LANGUAGE_PROFILES = {
    "es": {
        "keep_enye": True,
        "pools": {
            "daily_min": 70,
            "daily_max": 140,
            "classic_min": 140,
            "classic_max": 300,
            "candidates": 5000,
            "min_len": MIN_WORD_LENGTH,
            "allow_enye": True,
            "yield_every": 100,
        },
        "daily": {
            "optimal": (70, 170),
            "fallback": (70, 200),
        },
        "exotic": {
            "min_solutions": 50,
            "max_solutions": 500,
            "max_attempts": 1000,
            "yield_every": 100,
            "min_len": MIN_WORD_LENGTH,
            "low_yield_letters": frozenset("kwxy"),
            # letter -> (all of these required, at least one of these required)
            "letter_rules": {"q": ("u", "ei")},
        },
    },
    "en": {
        "keep_enye": False,
        "pools": {
            "daily_min": 70,
            "daily_max": 140,
            "classic_min": 140,
            "classic_max": 300,
            "candidates": 5000,
            "min_len": 4,
            "allow_enye": False,
            "yield_every": 100,
        },
        "daily": {
            "optimal": (70, 170),
            "fallback": (70, 200),
        },
        "exotic": {
            "min_solutions": 50,
            "max_solutions": 500,
            "max_attempts": 1000,
            "yield_every": 100,
            "min_len": 4,
            "low_yield_letters": frozenset("jqxz"),
            "letter_rules": {"q": ("u", "")},
        },
    },
}

def get_profile(language: str = None) -> dict:
    """Returns the tuning profile for a language. Unknown languages raise KeyError."""
    return LANGUAGE_PROFILES[language or LANGUAGE]

# --- EXOTIC SCORING ---
WORD_POINTS = {3: 20, 4: 25, 5: 30, 6: 35, 7: 45}
LONG_WORD_BASE = 55  # 8 letters
LONG_WORD_STEP = 5   # per letter beyond 8
SUPERHEPTA_BONUS = 60

# Index = milestone number (10 words each). Nothing past the 10th.
MILESTONE_BONUSES = [0, 150, 225, 340, 510, 765, 1147, 1720, 2580, 3870, 5805]
MILESTONE_STEP = 10

HALF_PROGRESS_BONUS = 250
HALF_PROGRESS_RATIO = 0.5
FREE_CHANGE_WORDS = 100
XP_RATIO = 0.4
DOUBLE_POINTS_WORDS = 10

ABILITY_COSTS = {
    "shuffle": 10,
    "length_hint": 40,
    "start_letter_stats": 120,
    "swap_random": 160,
    "double_points": 240,
    "swap_chosen": 320,
    "new_puzzle": 350,
    "buy_random": 450,
    "buy_chosen": 900,
}

# --- XP & LEVELS ---
XP_GAINS = {
    "daily": 10,
    "classic": 2.5,
}
COMPLETION_BONUS = [  # (min completion %, bonus) from highest
    (100, 500),
    (75, 200),
    (50, 100),
    (25, 50),
]
SUPERHEPTA_XP = 25
BASE_XP_PER_LEVEL = 100
LEVEL_EXPONENT = 1.5
