"""Apply strategies keyed by platform."""
from __future__ import annotations

from typing import Any

from autoapply.models import Platform

from .base import ApplyStrategy
from .external import ExternalSiteStrategy
from .indeed import IndeedStrategy
from .linkedin import EasyApplyStrategy

__all__ = [
    "ApplyStrategy", "EasyApplyStrategy", "IndeedStrategy",
    "ExternalSiteStrategy", "STRATEGY_REGISTRY", "build_strategies",
]

STRATEGY_REGISTRY: dict[Platform, type[ApplyStrategy]] = {
    Platform.LINKEDIN: EasyApplyStrategy,
    Platform.INDEED: IndeedStrategy,
}


def build_strategies(browser: Any, **kwargs: Any) -> dict[Platform, ApplyStrategy]:
    """One strategy per platform; platforms without a flow get the external one."""
    strategies: dict[Platform, ApplyStrategy] = {}
    for platform in Platform:
        cls = STRATEGY_REGISTRY.get(platform)
        if cls is None:
            strategies[platform] = ExternalSiteStrategy(browser, platform, **kwargs)
        else:
            strategies[platform] = cls(browser, **kwargs)
    return strategies
