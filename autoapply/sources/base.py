from __future__ import annotations

from abc import ABC, abstractmethod

from autoapply.models import JobListing, Platform, SearchCriteria


class ScrapeError(RuntimeError):
    """A source could not produce results (distinct from "no results")."""

    def __init__(self, platform: Platform, message: str) -> None:
        super().__init__(f"{platform.value}: {message}")
        self.platform = platform


class JobSearchBase(ABC):
    platform: Platform

    @abstractmethod
    def search(self, criteria: SearchCriteria) -> list[JobListing]:
        """Ordered, platform-tagged, URL-unique listings; [] means no results."""
