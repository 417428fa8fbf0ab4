"""Per-user application counters, kept in memory for the process lifetime."""
from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from typing import Iterable

from autoapply.models import ApplicationResult, ApplicationStatus, UserStats


class StatsStore:
    def __init__(self) -> None:
        self._stats: dict[str, UserStats] = {}

    def get(self, user_id: str) -> UserStats:
        return self._stats.setdefault(user_id, UserStats())

    def record(
        self,
        user_id: str,
        results: Iterable[ApplicationResult],
        now: datetime | None = None,
    ) -> UserStats:
        """Count successful results only; failures and skips leave counters untouched."""
        stats = self.get(user_id)
        now = now or datetime.now(timezone.utc)
        for r in results:
            if r.status is not ApplicationStatus.SUCCESS:
                continue
            stats.total_applications += 1
            stats.successful_applications += 1
            stats.applications_this_week += 1
            stats.applications_this_month += 1
            stats.last_application_date = now
        return stats

    def breakdown(self, user_id: str, history: Iterable[dict[str, str]]) -> UserStats:
        """Fill platform/company/result breakdowns from the user's history rows."""
        stats = self.get(user_id)
        rows = [r for r in history if r.get("user_id") == user_id]
        stats.platform_breakdown = dict(Counter(r.get("platform", "") for r in rows))
        stats.company_breakdown = dict(Counter(r.get("company", "") for r in rows))
        stats.status_breakdown = dict(Counter(r.get("result", "") for r in rows))
        return stats

    def clear(self) -> None:
        self._stats.clear()
