"""
Per-platform apply strategies.

A strategy performs the browser interaction for one job and returns exactly
one ApplicationResult. It never touches the applied ledger, the quota or user
stats; that bookkeeping belongs to the orchestrator.
"""
from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any, Callable

from autoapply.cover_letter import generate_cover_letter
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
from autoapply.page_utils import fill_first_visible, short_error, visible

log = get_logger(__name__)

MAX_FORM_STEPS = 10
COVER_LETTER_LIMIT = 3000


class ApplyStrategy(ABC):
    platform: Platform
    method: ApplicationMethod = ApplicationMethod.EASY_APPLY
    requires_auth: bool = False

    phone_selectors: list[str] = []
    cover_letter_selectors: list[str] = []

    def __init__(
        self,
        browser: Any,
        *,
        sleep: Callable[[float], None] = time.sleep,
        settle_seconds: float = 2.0,
    ) -> None:
        self.browser = browser
        self._sleep = sleep
        self.settle_seconds = settle_seconds

    def apply(self, job: JobListing, profile: UserProfile, settings: ApplySettings) -> ApplicationResult:
        """Open one page for the job, run the platform flow, always close the page.

        Navigation and automation errors come back as a ``failed`` result.
        """
        with self.browser.page() as page:
            try:
                page.goto(job.url, wait_until="networkidle")
                return self._apply_on_page(page, job, profile, settings)
            except Exception as exc:
                err = short_error(exc)
                log.warning("  %s: %s", job.id, err)
                return self._result(job, ApplicationStatus.FAILED, f"error: {err}")

    @abstractmethod
    def _apply_on_page(
        self, page: Any, job: JobListing, profile: UserProfile, settings: ApplySettings
    ) -> ApplicationResult:
        ...

    # -- helpers -----------------------------------------------------------

    def _result(
        self,
        job: JobListing,
        status: ApplicationStatus,
        reason: str,
        method: ApplicationMethod | None = None,
    ) -> ApplicationResult:
        return ApplicationResult.for_job(job, status, reason, method or self.method)

    def _settle(self, factor: float = 1.0) -> None:
        if self.settle_seconds:
            self._sleep(self.settle_seconds * factor)

    def _fill_form(
        self, page: Any, job: JobListing, profile: UserProfile, settings: ApplySettings
    ) -> int:
        """Fill whatever known fields the current form step shows; returns count filled."""
        filled = 0
        if fill_first_visible(page, self.phone_selectors, profile.phone):
            filled += 1

        if self.cover_letter_selectors:
            letter = generate_cover_letter(profile, job.title, job.company)
            if fill_first_visible(page, self.cover_letter_selectors, letter[:COVER_LETTER_LIMIT]):
                filled += 1

        resume_file = profile.resume.resume_file
        if resume_file:
            fi = page.locator('input[type="file"]')
            if visible(fi):
                fi.first.set_input_files(resume_file)
                filled += 1

        for question, answer in settings.custom_answers.items():
            field = page.get_by_label(question)
            if visible(field):
                field.first.fill(answer)
                filled += 1

        log.debug("Filled %d field(s) for %s", filled, job.id)
        return filled
