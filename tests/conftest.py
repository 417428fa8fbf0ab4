from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from typing import Callable

import pytest

os.environ.setdefault("AUTOAPPLY_LOG_DIR", tempfile.mkdtemp(prefix="autoapply-logs-"))

from autoapply.models import (  # noqa: E402
    ApplySettings,
    JobListing,
    Platform,
    Resume,
    UserProfile,
    WorkExperience,
)


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str) -> None:
        self.page = page
        self.selector = selector

    @property
    def first(self) -> "FakeLocator":
        return self

    def count(self) -> int:
        self.page._check_error()
        return 1 if self.selector in self.page.present else 0

    def is_visible(self, timeout=None) -> bool:
        return self.selector in self.page.present

    def click(self) -> None:
        self.page.click(self.selector)

    def fill(self, value: str) -> None:
        self.page.fill(self.selector, value)

    def input_value(self) -> str:
        return self.page.filled.get(self.selector, "")

    def set_input_files(self, path: str) -> None:
        self.page.uploads.append(path)


class FakePage:
    """Just enough of a Playwright page: selectors are either present or not."""

    def __init__(
        self,
        present=(),
        *,
        url: str = "about:blank",
        redirect: Callable[[str], str] | None = None,
        on_click: dict[str, Callable[["FakePage"], None]] | None = None,
        goto_error: Exception | None = None,
        locator_error: Exception | None = None,
    ) -> None:
        self.present = set(present)
        self.url = url
        self.redirect = redirect
        self.on_click = on_click or {}
        self.goto_error = goto_error
        self.locator_error = locator_error
        self.gotos: list[str] = []
        self.clicks: list[str] = []
        self.filled: dict[str, str] = {}
        self.uploads: list[str] = []
        self.closed = 0

    def _check_error(self) -> None:
        if self.locator_error is not None:
            raise self.locator_error

    def goto(self, url: str, **kwargs) -> None:
        self.gotos.append(url)
        if self.goto_error is not None:
            raise self.goto_error
        self.url = self.redirect(url) if self.redirect else url

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    def get_by_label(self, text: str) -> FakeLocator:
        return FakeLocator(self, f"label={text}")

    def fill(self, selector: str, value: str) -> None:
        self.filled[selector] = value

    def click(self, selector: str) -> None:
        self.clicks.append(selector)
        if selector in self.on_click:
            self.on_click[selector](self)

    def wait_for_selector(self, selector: str, timeout=None) -> None:
        if selector not in self.present:
            raise TimeoutError(f"waiting for {selector}")

    def wait_for_load_state(self, state=None, timeout=None) -> None:
        pass

    def set_default_timeout(self, ms: int) -> None:
        pass

    def close(self) -> None:
        self.closed += 1


class FakeBrowser:
    """Hands out pages from a factory and counts acquire/release."""

    def __init__(self, page_factory: Callable[[], FakePage] | None = None, cookies=None) -> None:
        self.page_factory = page_factory or FakePage
        self.pages: list[FakePage] = []
        self.acquired = 0
        self.released = 0
        self._cookies = list(cookies or [])
        self.added_cookies: list[dict] = []

    @contextmanager
    def page(self):
        page = self.page_factory()
        self.pages.append(page)
        self.acquired += 1
        try:
            yield page
        finally:
            page.close()
            self.released += 1

    def cookies(self) -> list[dict]:
        return list(self._cookies)

    def add_cookies(self, cookies: list[dict]) -> None:
        self.added_cookies.extend(cookies)


def make_job(
    job_id: str,
    *,
    platform: Platform = Platform.LINKEDIN,
    easy: bool = True,
    url: str | None = None,
    title: str = "Backend Engineer",
    company: str = "Acme",
) -> JobListing:
    return JobListing(
        id=job_id,
        title=title,
        company=company,
        location="Remote",
        description="Python services",
        url=url if url is not None else f"https://{platform.value}.com/jobs/{job_id}",
        platform=platform,
        is_easy_apply=easy,
        date_posted="2024-05-01T00:00:00+00:00",
    )


@pytest.fixture
def profile() -> UserProfile:
    return UserProfile(
        id="user-1",
        email="jane.doe@example.com",
        first_name="Jane",
        last_name="Doe",
        phone="+15550100",
        resume=Resume(
            skills=["Python", "SQL"],
            experience=[WorkExperience(company="Initech", position="Engineer")],
        ),
    )


@pytest.fixture
def settings() -> ApplySettings:
    return ApplySettings(
        max_applications_per_run=5,
        only_easy_apply=False,
        skip_applied_jobs=True,
        custom_answers={},
        delay_between_apps=10,
    )
