"""Small locator helpers that never throw, shared by auth, sources and strategies."""
from __future__ import annotations

from typing import Any

from autoapply.log import get_logger

log = get_logger(__name__)


def visible(locator: Any) -> bool:
    """Safe visibility check that never throws."""
    try:
        return locator.count() > 0 and locator.first.is_visible(timeout=2000)
    except Exception:
        return False


def present(page: Any, selector: str) -> bool:
    try:
        return page.locator(selector).count() > 0
    except Exception:
        return False


def first_visible(page: Any, selectors: list[str]) -> Any | None:
    """Return the first visible locator among ``selectors``, or None."""
    for sel in selectors:
        loc = page.locator(sel)
        if visible(loc):
            return loc.first
    return None


def fill_first_visible(page: Any, selectors: list[str], value: str) -> bool:
    if not value:
        return False
    loc = first_visible(page, selectors)
    if loc is None:
        return False
    loc.fill(value)
    return True


def short_error(exc: BaseException, limit: int = 150) -> str:
    """First line of an exception message, truncated for result reasons."""
    text = str(exc).split("\n")[0][:limit]
    return text or exc.__class__.__name__
