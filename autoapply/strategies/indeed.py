"""Indeed apply flow; redirects to a company site are left alone."""
from __future__ import annotations

from typing import Any

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


class IndeedStrategy(ApplyStrategy):
    platform = Platform.INDEED
    method = ApplicationMethod.FORM_FILL

    apply_selectors = [
        "#indeedApplyButton",
        'button[id*="apply"]',
        'button:has-text("Apply now")',
        'a:has-text("Apply now")',
    ]
    submit_selectors = ['button:has-text("Submit your application")', 'button:has-text("Submit")']
    continue_selectors = ['button:has-text("Continue")', 'button[id*="continue"]']
    phone_selectors = ['input[name="phoneNumber"]', 'input[type="tel"]']
    cover_letter_selectors = ['textarea[name*="cover" i]', "textarea"]

    def _apply_on_page(
        self, page: Any, job: JobListing, profile: UserProfile, settings: ApplySettings
    ) -> ApplicationResult:
        button = first_visible(page, self.apply_selectors)
        if button is None:
            return self._result(job, ApplicationStatus.FAILED, "apply control not found")

        button.click()
        self._settle(1.5)
        if "indeed.com" not in (page.url or "").lower():
            return self._result(
                job, ApplicationStatus.SKIPPED, "external application", ApplicationMethod.EXTERNAL
            )

        for _ in range(MAX_FORM_STEPS):
            self._fill_form(page, job, profile, settings)
            submit = first_visible(page, self.submit_selectors)
            if submit is not None:
                submit.click()
                self._settle()
                return self._result(job, ApplicationStatus.SUCCESS, "submitted on indeed")
            nxt = first_visible(page, self.continue_selectors)
            if nxt is None:
                break
            nxt.click()
            self._settle()

        return self._result(job, ApplicationStatus.FAILED, "submit control not found")
