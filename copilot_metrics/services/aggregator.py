from __future__ import annotations

import logging
from threading import Lock
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..schemas.api import LoadStatus
from ..schemas.metrics import (
    DailyMetrics,
    FeatureMetrics,
    GlobalStats,
    IdeMetrics,
    LanguageMetrics,
    UsageRecord,
    UserSummary,
)
from .cache import CACHE_KEY, SessionStore, read_cached_records, write_cached_records
from .fetcher import fetch_text
from .parser import IngestionError, parse_records
from .views import (
    build_daily_metrics,
    build_feature_metrics,
    build_global_stats,
    build_ide_metrics,
    build_language_metrics,
    build_users_summary,
    filter_user_records,
)


LOGGER = logging.getLogger(__name__)

UNKNOWN_ERROR = "Unknown error while loading metrics."


class MetricsAggregator:
    """Owns the loaded usage records and the aggregate views derived from them.

    Records are replaced wholesale by a successful load and dropped by
    ``clear``. Views are built on first access and memoized until the record
    collection changes. A failed load stores a message in ``error`` and keeps
    the previous records.
    """

    def __init__(
        self,
        store: Optional[SessionStore] = None,
        cache_key: str = CACHE_KEY,
        fetcher: Callable[[str], str] = fetch_text,
    ) -> None:
        self._store = store
        self._cache_key = cache_key
        self._fetcher = fetcher
        self._lock = Lock()
        self._records: Tuple[UsageRecord, ...] = tuple(read_cached_records(store, cache_key))
        self._views: Dict[str, object] = {}
        self.loading = False
        self.error: Optional[str] = None
        self.is_data_loaded = bool(self._records)

    @property
    def records(self) -> Tuple[UsageRecord, ...]:
        return self._records

    def status(self) -> LoadStatus:
        return LoadStatus(
            loading=self.loading,
            error=self.error,
            is_data_loaded=self.is_data_loaded,
            record_count=len(self._records),
        )

    def load(self, path: str) -> bool:
        """Fetch an NDJSON export from ``path`` and replace the records with it."""
        return self._run_load(source=path, read=lambda: self._fetcher(path))

    def load_from_text(self, text: str) -> bool:
        return self._run_load(source="<text>", read=lambda: text)

    def clear(self) -> None:
        with self._lock:
            self._records = ()
            self._views.clear()
            self.is_data_loaded = False
            self.error = None
        LOGGER.info("metrics_cleared")

    def _run_load(self, source: str, read: Callable[[], str]) -> bool:
        self.loading = True
        self.error = None
        try:
            records = parse_records(read())
        except IngestionError as exc:
            self.error = str(exc)
            LOGGER.error("metrics_load_failed source=%s error=%s", source, exc)
            return False
        except Exception as exc:
            self.error = UNKNOWN_ERROR
            LOGGER.exception("metrics_load_failed source=%s error=%s", source, exc)
            return False
        finally:
            self.loading = False

        self._replace(records)
        LOGGER.info("metrics_loaded source=%s records=%s", source, len(records))
        return True

    def _replace(self, records: Sequence[UsageRecord]) -> None:
        with self._lock:
            self._records = tuple(records)
            self._views.clear()
            self.is_data_loaded = True
        write_cached_records(self._store, records, self._cache_key)

    def _view(self, name: str, builder: Callable[[Sequence[UsageRecord]], object]) -> object:
        with self._lock:
            if name not in self._views:
                self._views[name] = builder(self._records)
            return self._views[name]

    def users_summary(self) -> List[UserSummary]:
        return list(self._view("users", build_users_summary))

    def daily_metrics(self) -> List[DailyMetrics]:
        return list(self._view("daily", build_daily_metrics))

    def feature_metrics(self) -> List[FeatureMetrics]:
        return list(self._view("features", build_feature_metrics))

    def ide_metrics(self) -> List[IdeMetrics]:
        return list(self._view("ides", build_ide_metrics))

    def language_metrics(self) -> List[LanguageMetrics]:
        return list(self._view("languages", build_language_metrics))

    def global_stats(self) -> GlobalStats:
        return self._view("global", build_global_stats)

    def user_summary(self, user_login: str) -> Optional[UserSummary]:
        for summary in self.users_summary():
            if summary.user_login == user_login:
                return summary
        return None

    def records_for_user(self, user_login: str) -> List[UsageRecord]:
        return filter_user_records(self._records, user_login)

    get_user_metrics = records_for_user
