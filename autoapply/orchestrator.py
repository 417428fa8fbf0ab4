"""
Apply loop: turn an ordered list of listings into an ordered list of outcomes.

Processing is strictly sequential. For each job, in input order:

1. quota reached or run cancelled -> stop; remaining jobs get no result at all
2. same listing already attempted in this run -> skipped
3. already in the applied ledger (skip_applied_jobs) -> skipped
4. not easy-apply (only_easy_apply) -> skipped
5. platform needs a login and the session gate refuses -> skipped
6. attempt through the platform's strategy (external-site strategy when the
   platform has none) -> one result, one unit of quota, then a randomized
   pacing delay. A strategy that reports ``skipped`` (external flow) gets its
   quota slot back, no ledger entry and no delay.

Skips cost neither quota nor delay. An exception raised by a strategy becomes
a ``failed`` result, still spends its quota slot and never ends the run.
"""
from __future__ import annotations

import random
import threading
import time
from typing import Callable, Iterable, Mapping, Sequence

from autoapply.log import get_logger
from autoapply.models import (
    ApplicationMethod,
    ApplicationResult,
    ApplicationStatus,
    ApplySettings,
    JobListing,
    Platform,
    UserProfile,
)
from autoapply.page_utils import short_error
from autoapply.strategies import ApplyStrategy, ExternalSiteStrategy

log = get_logger(__name__)

MAX_JITTER_SECONDS = 5.0

REASON_ALREADY_APPLIED = "already applied"
REASON_NOT_EASY_APPLY = "not easy-apply"
REASON_DUPLICATE = "duplicate listing"
REASON_NO_SESSION = "no authenticated session"


def default_jitter() -> float:
    return random.uniform(0, MAX_JITTER_SECONDS)


class AppliedLedger:
    """Listings already submitted, keyed by url (dedup key) and by id. Only ever grows."""

    def __init__(self, keys: Iterable[str] = ()) -> None:
        self._keys: set[str] = set()
        self._ids: set[str] = set()
        self.seed(keys)

    def seed(self, keys: Iterable[str]) -> None:
        self._keys.update(k for k in keys if k)

    def add(self, job: JobListing) -> None:
        self._keys.add(job.dedup_key)
        self._ids.add(job.id)

    def contains(self, job: JobListing) -> bool:
        return job.dedup_key in self._keys or job.id in self._ids or job.id in self._keys

    def __len__(self) -> int:
        return len(self._keys)


class ApplicationOrchestrator:
    def __init__(
        self,
        strategies: Mapping[Platform, ApplyStrategy],
        *,
        ledger: AppliedLedger | None = None,
        session_gate: Callable[[Platform], bool] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        jitter: Callable[[], float] = default_jitter,
        cancel: threading.Event | None = None,
    ) -> None:
        self.strategies = dict(strategies)
        self.ledger = ledger if ledger is not None else AppliedLedger()
        self._session_gate = session_gate
        self._sleep = sleep
        self._jitter = jitter
        self._cancel = cancel
        self.attempts_this_run = 0

    def strategy_for(self, platform: Platform) -> ApplyStrategy:
        """Registered strategy, or the external-site one for an unmapped platform."""
        strategy = self.strategies.get(platform)
        if strategy is None:
            log.warning("No apply strategy for %s, treating it as an external site", platform.value)
            strategy = self.strategies[platform] = ExternalSiteStrategy(None, platform)
        return strategy

    def run(
        self,
        jobs: Sequence[JobListing],
        profile: UserProfile,
        settings: ApplySettings,
    ) -> list[ApplicationResult]:
        log.info("Starting apply run over %d job(s), quota %d", len(jobs), settings.max_applications_per_run)
        results: list[ApplicationResult] = []
        attempted_keys: set[str] = set()
        session_ok: dict[Platform, bool] = {}
        self.attempts_this_run = 0

        for job in jobs:
            if self.attempts_this_run >= settings.max_applications_per_run:
                log.info("Quota of %d reached — deferring remaining jobs", settings.max_applications_per_run)
                break
            if self._cancel is not None and self._cancel.is_set():
                log.warning("Run cancelled — stopping before %s", job.id)
                break

            if job.dedup_key in attempted_keys or job.id in attempted_keys:
                results.append(ApplicationResult.for_job(job, ApplicationStatus.SKIPPED, REASON_DUPLICATE))
                continue

            if settings.skip_applied_jobs and self.ledger.contains(job):
                log.info("Skipping %s @ %s: already applied", job.title, job.company)
                results.append(ApplicationResult.for_job(job, ApplicationStatus.SKIPPED, REASON_ALREADY_APPLIED))
                continue

            if settings.only_easy_apply and not job.is_easy_apply:
                results.append(
                    ApplicationResult.for_job(
                        job, ApplicationStatus.SKIPPED, REASON_NOT_EASY_APPLY, ApplicationMethod.EXTERNAL
                    )
                )
                continue

            strategy = self.strategy_for(job.platform)
            if strategy.requires_auth and not self._session_ready(job.platform, session_ok):
                results.append(ApplicationResult.for_job(job, ApplicationStatus.SKIPPED, REASON_NO_SESSION))
                continue

            results.append(self._attempt(strategy, job, profile, settings))
            attempted_keys.update((job.id, job.dedup_key))

        counts = {s: sum(1 for r in results if r.status is s) for s in ApplicationStatus}
        log.info(
            "Run complete — %d result(s): success=%d, failed=%d, skipped=%d",
            len(results),
            counts[ApplicationStatus.SUCCESS],
            counts[ApplicationStatus.FAILED],
            counts[ApplicationStatus.SKIPPED],
        )
        return results

    def _session_ready(self, platform: Platform, cache: dict[Platform, bool]) -> bool:
        if self._session_gate is None:
            return True
        if platform not in cache:
            cache[platform] = bool(self._session_gate(platform))
            if not cache[platform]:
                log.error("No %s session — skipping that platform's jobs for this run", platform.value)
        return cache[platform]

    def _attempt(
        self,
        strategy: ApplyStrategy,
        job: JobListing,
        profile: UserProfile,
        settings: ApplySettings,
    ) -> ApplicationResult:
        log.info("Applying: %s @ %s (%s)", job.title, job.company, job.platform.value)
        # Spent even when the attempt raises
        self.attempts_this_run += 1
        try:
            result = strategy.apply(job, profile, settings)
        except Exception as exc:
            err = short_error(exc)
            log.error("  ✗ %s: %s", job.id, err)
            return ApplicationResult.for_job(
                job, ApplicationStatus.FAILED, f"error: {err}", strategy.method
            )

        if result.status is ApplicationStatus.SKIPPED:
            # Nothing was submitted: refund the slot, no ledger entry, no pause
            self.attempts_this_run -= 1
            log.info("  skipped: %s", result.reason)
            return result

        self.ledger.add(job)
        if result.status is ApplicationStatus.SUCCESS:
            log.info("  ✓ %s", result.reason)
        else:
            log.warning("  ✗ %s", result.reason)
        self._pace(settings)
        return result

    def _pace(self, settings: ApplySettings) -> None:
        delay = settings.delay_between_apps + self._jitter()
        log.info("Pausing %.0fs before the next application", delay)
        self._sleep(delay)

    def stats(self) -> dict[str, int]:
        return {"total": len(self.ledger), "attempted_this_run": self.attempts_this_run}
