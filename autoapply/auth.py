"""
Login state machine for job platforms.

    UNAUTHENTICATED -> CHECKING_AUTH -> AUTHENTICATED
                                     -> NEEDS_LOGIN -> AUTO_LOGIN_ATTEMPT -> AUTHENTICATED
                                                                          -> AUTO_LOGIN_ERROR -> NEEDS_MANUAL_LOGIN
                                                                          -> NEEDS_MANUAL_LOGIN
                    NEEDS_MANUAL_LOGIN -> MANUAL_LOGIN_WAIT -> AUTHENTICATED | TIMED_OUT

Probe and navigation errors never leave the engine: they move the machine to
the next state. Only the final outcome is reported, as a bool.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

from autoapply.log import get_logger
from autoapply.models import AuthSession, Platform
from autoapply.page_utils import present, short_error
from autoapply.session_store import SessionStore

log = get_logger(__name__)

POLL_INTERVAL_SECONDS = 5.0
MAX_POLL_ATTEMPTS = 60  # 5 minutes at one probe every 5 seconds
PROBE_SETTLE_SECONDS = 3.0


class AuthState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    CHECKING_AUTH = "checking_auth"
    AUTHENTICATED = "authenticated"
    NEEDS_LOGIN = "needs_login"
    AUTO_LOGIN_ATTEMPT = "auto_login_attempt"
    AUTO_LOGIN_ERROR = "auto_login_error"
    NEEDS_MANUAL_LOGIN = "needs_manual_login"
    MANUAL_LOGIN_WAIT = "manual_login_wait"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


@dataclass(frozen=True)
class PlatformAuth:
    """Where to log in and how to recognise a signed-in page."""

    landing_url: str
    login_url: str
    identity_selector: str
    password_selector: str
    submit_selector: str
    account_selectors: tuple[str, ...]
    signed_in_url_parts: tuple[str, ...]


PLATFORM_AUTH: dict[Platform, PlatformAuth] = {
    Platform.LINKEDIN: PlatformAuth(
        landing_url="https://www.linkedin.com/feed/",
        login_url="https://www.linkedin.com/login",
        identity_selector="#username",
        password_selector="#password",
        submit_selector='button[type="submit"]',
        account_selectors=(
            ".global-nav__me",
            "[data-test-global-nav-me]",
            ".nav-item__profile-member-photo",
            ".global-nav__primary-item--profile",
        ),
        signed_in_url_parts=("/feed/", "/in/"),
    ),
}


class AuthEngine:
    def __init__(
        self,
        browser: Any,
        store: SessionStore,
        *,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        max_poll_attempts: int = MAX_POLL_ATTEMPTS,
        settle_seconds: float = PROBE_SETTLE_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        cancel: threading.Event | None = None,
        platforms: dict[Platform, PlatformAuth] | None = None,
    ) -> None:
        self.browser = browser
        self.store = store
        self.poll_interval = poll_interval
        self.max_poll_attempts = max_poll_attempts
        self.settle_seconds = settle_seconds
        self._sleep = sleep
        self._cancel = cancel
        self._platforms = platforms if platforms is not None else PLATFORM_AUTH
        self.state = AuthState.UNAUTHENTICATED
        self.transitions: list[AuthState] = [self.state]

    def _enter(self, state: AuthState) -> None:
        log.debug("Auth state: %s -> %s", self.state.value, state.value)
        self.state = state
        self.transitions.append(state)

    def _cancelled(self) -> bool:
        return self._cancel is not None and self._cancel.is_set()

    # -- public API --------------------------------------------------------

    def restore_session(self, identity: str, platform: Platform | str) -> bool:
        """Inject a fresh stored session's cookies into the shared context."""
        platform = Platform.parse(platform)
        session = self.store.load(identity, platform.value)
        if session is None:
            return False
        try:
            self.browser.add_cookies(session.cookies)
        except Exception as exc:
            log.warning("Could not restore %s cookies for %s: %s", platform.value, identity, exc)
            return False
        log.info("Restored %s session for %s", platform.value, identity)
        return True

    def ensure_session(
        self,
        identity: str,
        platform: Platform | str,
        password: str | None = None,
    ) -> bool:
        """Run the login machine; True once the browser is signed in."""
        platform = Platform.parse(platform)
        self.transitions = [AuthState.UNAUTHENTICATED]
        self.state = AuthState.UNAUTHENTICATED

        spec = self._platforms.get(platform)
        if spec is None:
            log.warning("%s login is not supported yet", platform.value)
            self._enter(AuthState.FAILED)
            return False

        self.restore_session(identity, platform)

        try:
            with self.browser.page() as page:
                return self._run_machine(page, spec, identity, platform, password)
        except Exception as exc:
            log.error("Could not open a browser page for %s login: %s", platform.value, short_error(exc))
            self._enter(AuthState.FAILED)
            return False

    def check_auth(self, page: Any, spec: PlatformAuth) -> bool:
        """Probe for signed-in markers; any error counts as signed out."""
        try:
            if self.settle_seconds:
                self._sleep(self.settle_seconds)
            for selector in spec.account_selectors:
                if present(page, selector):
                    log.debug("Signed-in marker found: %s", selector)
                    return True
            url = page.url or ""
            return any(part in url for part in spec.signed_in_url_parts)
        except Exception as exc:
            log.debug("Auth probe failed: %s", exc)
            return False

    # -- machine steps -----------------------------------------------------

    def _run_machine(
        self,
        page: Any,
        spec: PlatformAuth,
        identity: str,
        platform: Platform,
        password: str | None,
    ) -> bool:
        self._enter(AuthState.CHECKING_AUTH)
        try:
            page.goto(spec.landing_url, wait_until="domcontentloaded", timeout=60_000)
        except Exception as exc:
            log.warning("Could not open %s landing page: %s", platform.value, short_error(exc))
        if self.check_auth(page, spec):
            log.info("Already signed in to %s", platform.value)
            self._enter(AuthState.AUTHENTICATED)
            return True

        self._enter(AuthState.NEEDS_LOGIN)
        if password:
            self._enter(AuthState.AUTO_LOGIN_ATTEMPT)
            try:
                if self._auto_login(page, spec, identity, password):
                    log.info("Automatic %s login succeeded", platform.value)
                    self._persist(identity, platform)
                    self._enter(AuthState.AUTHENTICATED)
                    return True
                log.warning("Automatic %s login not confirmed (captcha or 2FA?)", platform.value)
            except Exception as exc:
                log.warning("Automatic %s login error: %s", platform.value, short_error(exc))
                self._enter(AuthState.AUTO_LOGIN_ERROR)
        self._enter(AuthState.NEEDS_MANUAL_LOGIN)
        return self._manual_login(page, spec, identity, platform)

    def _auto_login(self, page: Any, spec: PlatformAuth, identity: str, password: str) -> bool:
        page.goto(spec.login_url, wait_until="networkidle")
        page.wait_for_selector(spec.identity_selector, timeout=10_000)
        page.fill(spec.identity_selector, identity)
        page.wait_for_selector(spec.password_selector, timeout=5_000)
        page.fill(spec.password_selector, password)
        page.click(spec.submit_selector)
        page.wait_for_load_state("networkidle", timeout=30_000)
        return self.check_auth(page, spec)

    def _prefill_identity(self, page: Any, spec: PlatformAuth, identity: str) -> None:
        try:
            if "login" not in (page.url or ""):
                page.goto(spec.login_url, wait_until="networkidle")
            field = page.locator(spec.identity_selector).first
            if field.count() and not field.input_value():
                field.fill(identity)
        except Exception as exc:
            log.debug("Could not pre-fill login form: %s", exc)

    def _manual_login(self, page: Any, spec: PlatformAuth, identity: str, platform: Platform) -> bool:
        self._enter(AuthState.MANUAL_LOGIN_WAIT)
        self._prefill_identity(page, spec, identity)
        log.info(
            "Waiting for manual %s login in the browser window (up to %ds): "
            "sign in, solve any captcha or 2FA, then wait for the home page",
            platform.value, int(self.poll_interval * self.max_poll_attempts),
        )

        for attempt in range(1, self.max_poll_attempts + 1):
            if self._cancelled():
                log.warning("Manual %s login cancelled", platform.value)
                self._enter(AuthState.FAILED)
                return False
            if self.check_auth(page, spec):
                log.info("Manual %s login completed", platform.value)
                self._persist(identity, platform)
                self._enter(AuthState.AUTHENTICATED)
                return True
            log.debug("Login poll %d/%d: not signed in yet", attempt, self.max_poll_attempts)
            self._sleep(self.poll_interval)

        log.error("Timed out waiting for %s login", platform.value)
        self._enter(AuthState.TIMED_OUT)
        return False

    def _persist(self, identity: str, platform: Platform) -> None:
        try:
            cookies = self.browser.cookies()
        except Exception as exc:
            log.error("Could not read %s cookies, session not saved: %s", platform.value, exc)
            return
        session = AuthSession(
            platform=platform.value,
            identity=identity,
            cookies=cookies,
            last_login=datetime.now(timezone.utc),
            is_valid=True,
        )
        self.store.save(identity, platform.value, session)
