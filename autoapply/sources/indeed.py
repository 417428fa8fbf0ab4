"""Indeed stand-in: fixed sample postings until a real scraper lands."""
from __future__ import annotations

from datetime import datetime, timezone

from autoapply.log import get_logger
from autoapply.models import JobListing, Platform, SearchCriteria
from autoapply.sources.base import JobSearchBase

log = get_logger(__name__)


class IndeedSource(JobSearchBase):
    platform = Platform.INDEED

    def __init__(self, browser=None) -> None:
        self.browser = browser

    def search(self, criteria: SearchCriteria) -> list[JobListing]:
        log.info("IndeedSource returning sample postings for %r", criteria.keywords)
        posted = datetime.now(timezone.utc).isoformat()
        return [
            JobListing(
                id="indeed_test_1",
                title="Frontend Developer - React",
                company="Test Tech Company",
                location="New York, NY",
                description="React, JavaScript, TypeScript developer needed",
                url="https://indeed.com/viewjob?jk=test123",
                platform=Platform.INDEED,
                is_easy_apply=True,
                date_posted=posted,
            ),
            JobListing(
                id="indeed_test_2",
                title="Senior Frontend Engineer",
                company="Startup Inc",
                location="New York, NY",
                description="Vue.js and React experience required",
                url="https://indeed.com/viewjob?jk=test456",
                platform=Platform.INDEED,
                is_easy_apply=True,
                date_posted=posted,
            ),
        ]
