"""Application history in a CSV table with file locking."""
from __future__ import annotations

import csv
import fcntl
from pathlib import Path
from typing import Iterable

from autoapply.log import get_logger
from autoapply.models import ApplicationResult, ApplicationStatus

log = get_logger(__name__)

HEADERS: list[str] = [
    "user_id", "job_id", "title", "company", "platform", "url",
    "status", "result", "method", "reason", "applied_at",
]

_STATUS_LABEL = {
    ApplicationStatus.SUCCESS: "submitted",
    ApplicationStatus.FAILED: "failed",
    ApplicationStatus.SKIPPED: "skipped",
}


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        op = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(f.fileno(), op)
    except (OSError, AttributeError):
        pass


def _unlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        pass


class ApplicationHistory:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def ensure(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            with open(self.path, "w", newline="", encoding="utf-8") as f:
                _lock(f)
                csv.writer(f).writerow(HEADERS)
                _unlock(f)
            log.info("Created application history → %s", self.path.name)

    def record(self, user_id: str, results: Iterable[ApplicationResult]) -> int:
        self.ensure()
        rows = [
            {
                "user_id": user_id,
                "job_id": r.job_id,
                "title": r.job_title,
                "company": r.company,
                "platform": r.platform,
                "url": r.job_url,
                "status": _STATUS_LABEL[r.status],
                "result": r.status.value,
                "method": r.method.value,
                "reason": r.reason,
                "applied_at": r.applied_at.strftime("%Y-%m-%d %H:%M:%S"),
            }
            for r in results
        ]
        if not rows:
            return 0
        with open(self.path, "a", newline="", encoding="utf-8") as f:
            _lock(f)
            csv.DictWriter(f, fieldnames=HEADERS).writerows(rows)
            _unlock(f)
        log.debug("Tracked %d result(s) for %s", len(rows), user_id)
        return len(rows)

    def all(self) -> list[dict[str, str]]:
        self.ensure()
        with open(self.path, "r", encoding="utf-8") as f:
            _lock(f, exclusive=False)
            rows = list(csv.DictReader(f))
            _unlock(f)
        return rows

    def query(
        self,
        user_id: str,
        *,
        result: str | None = None,
        platform: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[dict[str, str]], int]:
        """Filtered page of a user's history plus the unpaginated total."""
        rows = [r for r in self.all() if r.get("user_id") == user_id]
        if result:
            rows = [r for r in rows if r.get("result") == result]
        if platform:
            rows = [r for r in rows if r.get("platform") == platform]
        return rows[offset:offset + limit], len(rows)

    def applied_keys(self, user_id: str) -> set[str]:
        """Urls and ids of listings this user already went through (ledger seed)."""
        keys: set[str] = set()
        for r in self.all():
            if r.get("user_id") != user_id or r.get("result") == ApplicationStatus.SKIPPED.value:
                continue
            keys.update(k for k in (r.get("url"), r.get("job_id")) if k)
        return keys

    def remove(self, user_id: str, job_id: str) -> bool:
        rows = self.all()
        for i, r in enumerate(rows):
            if r.get("user_id") == user_id and r.get("job_id") == job_id:
                del rows[i]
                break
        else:
            return False
        with open(self.path, "w", newline="", encoding="utf-8") as f:
            _lock(f)
            w = csv.DictWriter(f, fieldnames=HEADERS)
            w.writeheader()
            w.writerows(rows)
            _unlock(f)
        log.debug("Removed %s from %s's history", job_id, user_id)
        return True
