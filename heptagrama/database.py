import copy
import logging

from supabase import create_client

from heptagrama.config import SUPABASE_URL, SUPABASE_KEY, SUPABASE_TABLE
from heptagrama.utils import calculate_level, check_level_up

logger = logging.getLogger(__name__)

RUN_KEY = 'exotics_run'
PLAYER_KEY = 'player_state'
DAILY_SESSIONS_KEY = 'daily_sessions'


# --- BACKENDS ---
# Both expose get/set/delete over JSON-compatible values and raise on failure.
# The helpers below catch and log, so callers never see storage errors.

class MemoryStore:
    """Process-local store. Values are deep-copied in and out like a real jsonb column."""

    def __init__(self, data: dict = None):
        self._data = copy.deepcopy(data) if data else {}

    def get(self, key: str):
        return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value):
        self._data[key] = copy.deepcopy(value)

    def delete(self, key: str):
        self._data.pop(key, None)


class SupabaseStore:
    """
    Key-value rows in a Supabase table:
        create table kv_store (key text primary key, value jsonb);
    """

    def __init__(self, client, table: str = SUPABASE_TABLE):
        self.client = client
        self.table = table

    def get(self, key: str):
        response = self.client.table(self.table).select('value').eq('key', key).execute()
        if response.data:
            return response.data[0]['value']
        return None

    def set(self, key: str, value):
        self.client.table(self.table).upsert({'key': key, 'value': value}).execute()

    def delete(self, key: str):
        self.client.table(self.table).delete().eq('key', key).execute()


def create_store(url: str = SUPABASE_URL, key: str = SUPABASE_KEY):
    """Supabase when credentials are configured, otherwise an in-memory store."""
    if not (url and key):
        logger.info("📝 No Supabase credentials, using in-memory store.")
        return MemoryStore()

    try:
        client = create_client(url, key)
    except Exception as e:
        logger.error(f"❌ DB ERROR during Supabase setup: {e}. Falling back to in-memory store.")
        return MemoryStore()

    logger.info("✅ Supabase client ready.")
    return SupabaseStore(client)


# --- EXOTIC RUN ---

def save_run(store, snapshot: dict) -> bool:
    try:
        store.set(RUN_KEY, snapshot)
        return True
    except Exception as e:
        logger.error(f"DB ERROR in save_run: {e}")
        return False


def clear_run(store) -> bool:
    try:
        store.delete(RUN_KEY)
        return True
    except Exception as e:
        logger.error(f"DB ERROR in clear_run: {e}")
        return False


def _migrate_run(data: dict) -> dict:
    """Fills in fields added after the first snapshot format."""
    stats = data.get('statsUnlocked')
    if not isinstance(stats, dict):
        stats = {}
    data['statsUnlocked'] = {
        'byStartLetter': bool(stats.get('byStartLetter', False)),
        'lengthHint': bool(stats.get('lengthHint', False)),
    }

    # foundWords -> foundWordsAll
    if not isinstance(data.get('foundWordsAll'), list):
        data['foundWordsAll'] = list(data.get('foundWords') or [])
    data.pop('foundWords', None)

    milestones = data.get('milestones') or {}
    data['milestones'] = {
        'reached50Percent': bool(milestones.get('reached50Percent', False)),
        'reached100Found': bool(milestones.get('reached100Found', False)),
        'claimed50PercentBonus': bool(milestones.get('claimed50PercentBonus', False)),
    }

    data.setdefault('extraLetters', [])
    data.setdefault('scorePoints', 0)
    data.setdefault('xpEarned', 0)
    data.setdefault('streak10Count', 0)
    data.setdefault('doublePointsRemaining', 0)
    data.setdefault('solutionsTotal', 0)
    data.pop('uiState', None)
    return data


def load_run(store):
    """
    Returns the persisted run snapshot (migrated to the current format), or
    None when there is none. A corrupt snapshot is deleted.
    """
    try:
        data = store.get(RUN_KEY)
    except Exception as e:
        logger.error(f"DB ERROR in load_run: {e}")
        return None

    if not data:
        return None

    puzzle = data.get('puzzle') if isinstance(data, dict) else None
    if (not isinstance(data, dict) or not data.get('runId') or not isinstance(puzzle, dict)
            or not puzzle.get('center') or not isinstance(puzzle.get('outer'), list)
            or not isinstance(data.get('foundWordsAll', data.get('foundWords')), list)):
        logger.warning("⚠️ Corrupt exotic run snapshot, clearing it.")
        clear_run(store)
        return None

    return _migrate_run(data)


# --- PLAYER STATE ---

def load_player_state(store) -> dict:
    try:
        data = store.get(PLAYER_KEY) or {}
    except Exception as e:
        logger.error(f"DB ERROR in load_player_state: {e}")
        data = {}

    xp = max(0, int(data.get('xpTotal', 0) or 0))
    return {'xpTotal': xp, 'level': calculate_level(xp)}


def save_player_state(store, state: dict) -> bool:
    try:
        store.set(PLAYER_KEY, {'xpTotal': state['xpTotal'], 'level': calculate_level(state['xpTotal'])})
        return True
    except Exception as e:
        logger.error(f"DB ERROR in save_player_state: {e}")
        return False


def add_player_xp(store, xp_gain: int) -> dict:
    """
    Adds XP to the persistent player state.
    Returns {xpTotal, level, xp_gain, level_up?}.
    """
    state = load_player_state(store)
    old_xp = state['xpTotal']
    new_xp = old_xp + max(0, int(xp_gain))

    data = {'xpTotal': new_xp, 'level': calculate_level(new_xp)}
    save_player_state(store, data)

    data['xp_gain'] = new_xp - old_xp
    level_info = check_level_up(old_xp, new_xp)
    if level_info['leveled_up']:
        data['level_up'] = level_info['new_level']
    return data


# --- DAILY SESSIONS ---
# Stored as one mapping "YYYY-MM-DD:language" -> session dict.

def load_daily_sessions(store) -> dict:
    try:
        data = store.get(DAILY_SESSIONS_KEY)
    except Exception as e:
        logger.error(f"DB ERROR in load_daily_sessions: {e}")
        return {}
    return data if isinstance(data, dict) else {}


def save_daily_session(store, session: dict) -> bool:
    sessions = load_daily_sessions(store)
    sessions[f"{session['dateKey']}:{session['language']}"] = session
    try:
        store.set(DAILY_SESSIONS_KEY, sessions)
        return True
    except Exception as e:
        logger.error(f"DB ERROR in save_daily_session: {e}")
        return False
