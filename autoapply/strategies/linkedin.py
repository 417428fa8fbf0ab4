"""LinkedIn Easy Apply: in-page multi-step form."""
from __future__ import annotations

from typing import Any

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
from autoapply.page_utils import first_visible
from autoapply.strategies.base import MAX_FORM_STEPS, ApplyStrategy

log = get_logger(__name__)


class EasyApplyStrategy(ApplyStrategy):
    platform = Platform.LINKEDIN
    method = ApplicationMethod.EASY_APPLY
    requires_auth = True

    apply_selectors = [
        ".jobs-apply-button--top-card",
        "button.jobs-apply-button",
    ]
    submit_selectors = ['button[aria-label="Submit application"]']
    next_selectors = [
        'button[aria-label="Continue to next step"]',
        'button[aria-label="Review your application"]',
    ]
    phone_selectors = ['input[name="phoneNumber"]', 'input[id*="phoneNumber"]']
    cover_letter_selectors = ['textarea[name="coverLetter"]']

    def _apply_on_page(
        self, page: Any, job: JobListing, profile: UserProfile, settings: ApplySettings
    ) -> ApplicationResult:
        button = first_visible(page, self.apply_selectors)
        if button is None:
            return self._result(job, ApplicationStatus.FAILED, "apply control not found")

        button.click()
        self._settle()

        for step in range(1, MAX_FORM_STEPS + 1):
            self._fill_form(page, job, profile, settings)
            submit = first_visible(page, self.submit_selectors)
            if submit is not None:
                submit.click()
                self._settle(1.5)
                log.info("  submitted %s after %d step(s)", job.id, step)
                return self._result(job, ApplicationStatus.SUCCESS, "submitted via easy apply")
            nxt = first_visible(page, self.next_selectors)
            if nxt is None:
                break
            nxt.click()
            self._settle()

        return self._result(job, ApplicationStatus.FAILED, "submit control not found")
