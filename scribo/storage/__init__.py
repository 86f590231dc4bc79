"""Persistence for rules, the draft and analysis results."""

from .cache import CACHE_PREFIXES, AnalysisCache, cache_key, content_hash
from .state import CONTENT_KEY, RESULT_KEYS, RULES_KEYS, ReviewStateStore
from .store import JsonFileStore, KeyValueStore, MemoryStore, ValidatedStore

__all__ = [
    'AnalysisCache',
    'CACHE_PREFIXES',
    'cache_key',
    'content_hash',
    'ReviewStateStore',
    'RULES_KEYS',
    'RESULT_KEYS',
    'CONTENT_KEY',
    'KeyValueStore',
    'MemoryStore',
    'JsonFileStore',
    'ValidatedStore',
]
