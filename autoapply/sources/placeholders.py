"""Platforms without a scraper yet: they report no results."""
from __future__ import annotations

from autoapply.log import get_logger
from autoapply.models import JobListing, Platform, SearchCriteria
from autoapply.sources.base import JobSearchBase

log = get_logger(__name__)


class _NotImplementedSource(JobSearchBase):
    def __init__(self, browser=None) -> None:
        self.browser = browser

    def search(self, criteria: SearchCriteria) -> list[JobListing]:
        log.info("%s scraping is not implemented yet — no results", self.platform.value)
        return []


class GlassdoorSource(_NotImplementedSource):
    platform = Platform.GLASSDOOR


class DiceSource(_NotImplementedSource):
    platform = Platform.DICE


class MonsterSource(_NotImplementedSource):
    platform = Platform.MONSTER
