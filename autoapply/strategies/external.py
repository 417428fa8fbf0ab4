"""Platforms without an automated apply flow: recorded as skipped, never opened."""
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
from autoapply.strategies.base import ApplyStrategy

log = get_logger(__name__)


class ExternalSiteStrategy(ApplyStrategy):
    """Any platform without an automated flow: recorded as skipped, never attempted."""

    method = ApplicationMethod.EXTERNAL

    def __init__(self, browser: Any, platform: Platform, **kwargs: Any) -> None:
        super().__init__(browser, **kwargs)
        self.platform = platform

    def apply(self, job: JobListing, profile: UserProfile, settings: ApplySettings) -> ApplicationResult:
        log.info("  %s applications are not automated", self.platform.value)
        return self._result(job, ApplicationStatus.SKIPPED, "unsupported platform")

    def _apply_on_page(self, page, job, profile, settings) -> ApplicationResult:
        return self.apply(job, profile, settings)
