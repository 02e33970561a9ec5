"""
Analysis result cache.

Keeps recent AnalysisResults keyed by (document id, job description) so a
repeated request does not cost another LLM call. Entries expire after a TTL
and the least recently used entry is evicted once the cache is full.
"""

import copy
import hashlib
import json
import threading
import time
from collections import OrderedDict
from typing import Callable, Optional, Tuple

from redraft.contexts.analysis.logger import _log_debug
from redraft.contexts.analysis.result_data_structure import AnalysisResult

DEFAULT_TTL_SECONDS = 600.0
DEFAULT_MAX_ENTRIES = 128


def cache_key(document_id: str, job_description: str) -> str:
    """SHA-256 hex digest of the JSON array [document_id, job_description]."""
    payload = json.dumps([document_id, job_description], ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class AnalysisCache:
    """
    Thread-safe TTL + LRU cache of AnalysisResults.

    put() is put-if-absent: when two identical requests race, the first
    stored result wins and both callers get a copy of it back. Callers
    always receive deep copies, so editing a returned result never changes
    the stored entry.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        if max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")

        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, AnalysisResult]]" = OrderedDict()
        self._lock = threading.Lock()

    def _get_live(self, key: str, now: float) -> Optional[AnalysisResult]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, result = entry
        if now - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return result

    def get(self, key: str) -> Optional[AnalysisResult]:
        """Return a copy of the cached result, or None if absent or expired."""
        with self._lock:
            result = self._get_live(key, self._clock())
            return copy.deepcopy(result) if result is not None else None

    def put(self, key: str, result: AnalysisResult) -> AnalysisResult:
        """
        Store a copy of result unless a live entry already exists.

        Returns:
            A copy of the stored result (the existing one if there was a live entry)
        """
        with self._lock:
            now = self._clock()
            existing = self._get_live(key, now)
            if existing is not None:
                return copy.deepcopy(existing)

            stored = copy.deepcopy(result)
            self._entries[key] = (now, stored)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                _log_debug(f"Evicted cache entry {evicted[:12]}")
            return copy.deepcopy(stored)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def analyze_with_cache(
    analyzer,  # ResumeAnalyzer
    cache: AnalysisCache,
    document_id: str,
    resume_text: str,
    job_description: str,
    cancel_event: Optional[threading.Event] = None,
) -> AnalysisResult:
    """
    Analyze with a cache lookup before and a store after.

    Args:
        analyzer: ResumeAnalyzer instance
        cache: AnalysisCache instance
        document_id: Stable identifier of the resume document
        resume_text: Extracted resume text
        job_description: Job description text
        cancel_event: Passed through to the analyzer

    Returns:
        Cached or freshly computed AnalysisResult
    """
    key = cache_key(document_id, job_description)
    cached = cache.get(key)
    if cached is not None:
        _log_debug(f"Cache hit for {key[:12]}")
        return cached

    _log_debug(f"Cache miss for {key[:12]}")
    result = analyzer.analyze(resume_text, job_description, cancel_event=cancel_event)
    return cache.put(key, result)
