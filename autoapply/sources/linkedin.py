"""LinkedIn public job search scraped from the results page."""
from __future__ import annotations

import hashlib
import re
from datetime import datetime, timezone
from urllib.parse import urlencode

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from autoapply.log import get_logger
from autoapply.models import JobListing, Platform, SearchCriteria
from autoapply.retry import retry
from autoapply.sources.base import JobSearchBase, ScrapeError

log = get_logger(__name__)

SEARCH_URL = "https://www.linkedin.com/jobs/search/"

DATE_RANGE_PARAM: dict[str, str] = {
    "day": "r86400",
    "week": "r604800",
    "month": "r2592000",
}
EXPERIENCE_PARAM: dict[str, str] = {
    "entry": "1",
    "mid": "2",
    "senior": "3",
}
JOB_TYPE_PARAM: dict[str, str] = {
    "fulltime": "F",
    "parttime": "P",
    "contract": "C",
}

_CARD = ".job-search-card"
_TITLE = ".base-search-card__title"
_COMPANY = ".base-search-card__subtitle"
_LOCATION = ".job-search-card__location"
_JOB_ID_RE = re.compile(r"(\d{6,})/?$")


def build_search_url(criteria: SearchCriteria) -> str:
    params = {
        "keywords": criteria.keywords,
        "location": criteria.location,
        "f_TPR": DATE_RANGE_PARAM.get(criteria.date_range or "", ""),
        "f_E": EXPERIENCE_PARAM.get(criteria.experience_level or "", ""),
        "f_JT": JOB_TYPE_PARAM.get(criteria.job_type or "", ""),
    }
    return f"{SEARCH_URL}?{urlencode({k: v for k, v in params.items() if v})}"


def job_id_from_url(url: str) -> str:
    m = _JOB_ID_RE.search(url)
    if m:
        return f"linkedin_{m.group(1)}"
    return "linkedin_" + hashlib.sha256(url.encode()).hexdigest()[:12]


def _text(card, selector: str) -> str:
    loc = card.locator(selector)
    if not loc.count():
        return ""
    return (loc.first.inner_text() or "").strip()


class LinkedInSource(JobSearchBase):
    platform = Platform.LINKEDIN

    def __init__(self, browser, *, max_results: int = 25) -> None:
        self.browser = browser
        self.max_results = max_results

    @retry(max_attempts=2, base_delay=2.0, retryable=(PlaywrightError,))
    def _open(self, page, url: str) -> None:
        page.goto(url, wait_until="networkidle")

    def search(self, criteria: SearchCriteria) -> list[JobListing]:
        url = build_search_url(criteria)
        log.info("LinkedIn search: %s", url)

        with self.browser.page() as page:
            try:
                self._open(page, url)
            except PlaywrightError as exc:
                raise ScrapeError(self.platform, f"search page failed to load: {exc}") from exc

            try:
                page.wait_for_selector(_CARD, timeout=10_000)
            except PlaywrightTimeoutError:
                log.info("LinkedIn search returned no job cards")
                return []
            except PlaywrightError as exc:
                raise ScrapeError(self.platform, f"results page failed: {exc}") from exc

            try:
                jobs = self._parse_cards(page)
            except PlaywrightError as exc:
                raise ScrapeError(self.platform, f"reading job cards failed: {exc}") from exc

        log.info("Found %d LinkedIn jobs", len(jobs))
        return jobs

    def _parse_cards(self, page) -> list[JobListing]:
        cards = page.locator(_CARD)
        scraped_at = datetime.now(timezone.utc).isoformat()
        jobs: list[JobListing] = []
        seen: set[str] = set()

        for i in range(cards.count()):
            if len(jobs) >= self.max_results:
                break
            card = cards.nth(i)
            title = _text(card, _TITLE)
            company = _text(card, _COMPANY)
            location = _text(card, _LOCATION)
            link = card.locator("a")
            href = link.first.get_attribute("href") if link.count() else None
            if not (title and company and location and href):
                continue

            url = href.split("?")[0]
            if url in seen:
                continue
            seen.add(url)
            jobs.append(
                JobListing(
                    id=job_id_from_url(url),
                    title=title,
                    company=company,
                    location=location,
                    description="",
                    url=url,
                    platform=Platform.LINKEDIN,
                    # Search cards don't show the apply type; the strategy checks the page
                    is_easy_apply=True,
                    date_posted=scraped_at,
                )
            )
        return jobs
