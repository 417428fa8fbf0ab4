from __future__ import annotations

from typing import Iterable

from autoapply.log import get_logger
from autoapply.models import JobListing, Platform, SearchCriteria

from .base import JobSearchBase, ScrapeError
from .indeed import IndeedSource
from .linkedin import LinkedInSource
from .placeholders import DiceSource, GlassdoorSource, MonsterSource

log = get_logger(__name__)

__all__ = [
    "JobSearchBase", "ScrapeError", "LinkedInSource", "IndeedSource",
    "GlassdoorSource", "DiceSource", "MonsterSource",
    "SOURCE_REGISTRY", "get_sources", "search_all",
]

SOURCE_REGISTRY: dict[Platform, type[JobSearchBase]] = {
    Platform.LINKEDIN: LinkedInSource,
    Platform.INDEED: IndeedSource,
    Platform.GLASSDOOR: GlassdoorSource,
    Platform.DICE: DiceSource,
    Platform.MONSTER: MonsterSource,
}


def get_sources(platforms: Iterable[Platform | str], browser) -> list[JobSearchBase]:
    sources: list[JobSearchBase] = []
    for p in platforms:
        platform = Platform.parse(p)
        sources.append(SOURCE_REGISTRY[platform](browser))
        log.info("Registered source: %s", platform.value)
    return sources


def search_all(criteria: SearchCriteria, sources: Iterable[JobSearchBase]) -> list[JobListing]:
    """Query sources in order; a source that raises is logged and skipped."""
    jobs: list[JobListing] = []
    seen: set[str] = set()
    for source in sources:
        name = source.__class__.__name__
        try:
            results = source.search(criteria)
        except Exception as exc:
            log.error("[%s] FAILED: %s", name, exc)
            continue
        log.info("[%s] returned %d jobs", name, len(results))
        for job in results:
            if job.dedup_key not in seen:
                seen.add(job.dedup_key)
                jobs.append(job)
    log.info("Total unique jobs: %d", len(jobs))
    return jobs
