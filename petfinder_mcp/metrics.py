"""Minimal in-process metrics recorder (not suitable for multi-process aggregation)."""

from __future__ import annotations

from collections import Counter
from threading import Lock
from typing import Dict


class MetricsRecorder:
    def __init__(self) -> None:
        self._lock = Lock()
        self._requests = 0
        self._request_duration_ms_total = 0.0
        self._tool_success: Counter[str] = Counter()
        self._tool_error: Counter[str] = Counter()
        self._token_cache_hits = 0
        self._token_cache_misses = 0
        self._token_evictions = 0

    def incr_request(self) -> None:
        with self._lock:
            self._requests += 1

    def record_duration(self, duration_ms: float) -> None:
        with self._lock:
            self._request_duration_ms_total += duration_ms

    def record_tool(self, tool: str, *, success: bool) -> None:
        with self._lock:
            if success:
                self._tool_success[tool] += 1
            else:
                self._tool_error[tool] += 1

    def record_token_lookup(self, *, hit: bool) -> None:
        with self._lock:
            if hit:
                self._token_cache_hits += 1
            else:
                self._token_cache_misses += 1

    def record_token_evictions(self, count: int) -> None:
        with self._lock:
            self._token_evictions += count

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            return {
                "requests": self._requests,
                "request_duration_ms_total": round(self._request_duration_ms_total, 3),
                "tool_success": dict(self._tool_success),
                "tool_error": dict(self._tool_error),
                "token_cache": {
                    "hits": self._token_cache_hits,
                    "misses": self._token_cache_misses,
                    "evictions": self._token_evictions,
                },
            }

    def reset(self) -> None:
        with self._lock:
            self._requests = 0
            self._request_duration_ms_total = 0.0
            self._tool_success.clear()
            self._tool_error.clear()
            self._token_cache_hits = 0
            self._token_cache_misses = 0
            self._token_evictions = 0


default_metrics = MetricsRecorder()
