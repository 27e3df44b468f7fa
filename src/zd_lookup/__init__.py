"""
Local bilingual dictionary lookup with two-phase longest-match search.
"""

from .engine import MatchEngine
from .loader import DictionaryLoadError
from .models import Entry
from .preferences import PreferenceStore, Preferences, PreferencesError
from .router import RequestRouter
from .store import EntryStore, StoreError, StoreReadError, StoreWriteError

try:
    from importlib.metadata import version as _get_version
    __version__ = _get_version("zd-lookup")
except Exception:
    __version__ = "0.1.0"  # Fallback if metadata unavailable
__all__ = [
    "Entry",
    "EntryStore",
    "MatchEngine",
    "RequestRouter",
    "PreferenceStore",
    "Preferences",
    "StoreError",
    "StoreReadError",
    "StoreWriteError",
    "DictionaryLoadError",
    "PreferencesError",
]
