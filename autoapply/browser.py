"""
Shared Playwright browser for one run.

One Chromium context lives for the whole run (persistent per identity so a
login survives restarts); every job gets its own page, opened and closed
around the attempt.
"""
from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from autoapply.log import get_logger
from autoapply.session_store import sanitize_identity

log = get_logger(__name__)

VIEWPORT = {"width": 1280, "height": 720}
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)
PAGE_TIMEOUT_MS = 20_000


class BrowserSession:
    def __init__(
        self,
        identity: str | None = None,
        *,
        headless: bool = False,
        sessions_dir: Path | None = None,
    ) -> None:
        self.identity = identity
        self.headless = headless
        self.sessions_dir = Path(sessions_dir) if sessions_dir else None
        self._playwright = None
        self._browser = None
        self.context = None

    # -- lifecycle ---------------------------------------------------------

    def start(self) -> "BrowserSession":
        from playwright.sync_api import sync_playwright

        self._playwright = sync_playwright().start()
        chromium = self._playwright.chromium
        args = ["--no-sandbox", "--disable-setuid-sandbox"]

        if self.identity and self.sessions_dir:
            user_data_dir = self.sessions_dir / sanitize_identity(self.identity)
            user_data_dir.mkdir(parents=True, exist_ok=True)
            log.info("Launching browser with persistent profile for %s", self.identity)
            self.context = chromium.launch_persistent_context(
                str(user_data_dir),
                headless=self.headless,
                viewport=VIEWPORT,
                user_agent=USER_AGENT,
                args=args,
            )
        else:
            log.info("Launching browser with a fresh context")
            self._browser = chromium.launch(headless=self.headless, args=args)
            self.context = self._browser.new_context(viewport=VIEWPORT, user_agent=USER_AGENT)
        return self

    def close(self) -> None:
        try:
            if self.context is not None:
                self.context.close()
            if self._browser is not None:
                self._browser.close()
        finally:
            self.context = None
            self._browser = None
            if self._playwright is not None:
                self._playwright.stop()
                self._playwright = None
            log.info("Browser closed")

    def __enter__(self) -> "BrowserSession":
        return self.start()

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -- pages and cookies -------------------------------------------------

    @contextmanager
    def page(self) -> Iterator[Any]:
        """Yield a new page; it is closed exactly once whatever happens inside."""
        if self.context is None:
            raise RuntimeError("Browser not started")
        page = self.context.new_page()
        page.set_default_timeout(PAGE_TIMEOUT_MS)
        try:
            yield page
        finally:
            try:
                page.close()
            except Exception as exc:
                log.debug("Page close failed: %s", exc)

    def cookies(self) -> list[dict[str, Any]]:
        if self.context is None:
            return []
        return list(self.context.cookies())

    def add_cookies(self, cookies: list[dict[str, Any]]) -> None:
        if self.context is None:
            raise RuntimeError("Browser not started")
        if cookies:
            self.context.add_cookies(cookies)
