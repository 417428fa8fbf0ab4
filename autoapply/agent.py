"""
Auto-apply agent.

Runs: load config → open browser → search → (login on demand) → apply loop →
record history and stats → run report.
"""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any

from autoapply.auth import AuthEngine
from autoapply.browser import BrowserSession
from autoapply.config import (
    DATA_DIR,
    SESSIONS_DIR,
    ensure_dirs,
    env_flag,
    get_env,
    load_apply_settings,
    load_platforms,
    load_profile,
    load_search_criteria,
    load_settings,
)
from autoapply.log import configure, get_logger
from autoapply.models import ApplicationResult, ApplicationStatus, Platform
from autoapply.orchestrator import AppliedLedger, ApplicationOrchestrator
from autoapply.report import build_run_report, write_run_report
from autoapply.session_store import SessionStore
from autoapply.sources import get_sources, search_all
from autoapply.stats import StatsStore
from autoapply.strategies import build_strategies
from autoapply.tracker import ApplicationHistory

log = get_logger(__name__)

HISTORY_PATH: Path = DATA_DIR / "applications.csv"


def _summary(jobs_found: int, results: list[ApplicationResult], report_path: Path | None) -> dict[str, Any]:
    return {
        "jobs_found": jobs_found,
        "submitted": sum(1 for r in results if r.status is ApplicationStatus.SUCCESS),
        "failed": sum(1 for r in results if r.status is ApplicationStatus.FAILED),
        "skipped": sum(1 for r in results if r.status is ApplicationStatus.SKIPPED),
        "results": results,
        "report_path": str(report_path) if report_path else None,
    }


def run(
    *,
    settings_path: Path | None = None,
    profile_path: Path | None = None,
    identity: str | None = None,
    password: str | None = None,
    headless: bool | None = None,
    history: ApplicationHistory | None = None,
    stats: StatsStore | None = None,
    write_report: bool = True,
) -> dict[str, Any]:
    ensure_dirs()
    data = load_settings(settings_path)
    settings = load_apply_settings(data)
    criteria = load_search_criteria(data)
    platforms = load_platforms(data)
    profile = load_profile(profile_path)

    identity = identity or get_env("LINKEDIN_EMAIL") or profile.email
    password = password or get_env("LINKEDIN_PASSWORD") or None
    if headless is None:
        headless = env_flag("RUN_HEADLESS", False)
    history = history or ApplicationHistory(HISTORY_PATH)
    stats = stats or StatsStore()
    store = SessionStore(SESSIONS_DIR)

    with BrowserSession(identity or None, headless=headless, sessions_dir=SESSIONS_DIR) as browser:
        auth = AuthEngine(browser, store)

        def session_gate(platform: Platform) -> bool:
            if not identity:
                log.error("No login identity configured — set LINKEDIN_EMAIL in .env")
                return False
            return auth.ensure_session(identity, platform, password)

        jobs = search_all(criteria, get_sources(platforms, browser))
        if not jobs:
            log.warning("No jobs found for %r", criteria.keywords)
            return _summary(0, [], None)

        ledger = AppliedLedger(history.applied_keys(profile.id))
        orchestrator = ApplicationOrchestrator(
            build_strategies(browser),
            ledger=ledger,
            session_gate=session_gate,
        )
        results = orchestrator.run(jobs, profile, settings)

    history.record(profile.id, results)
    user_stats = stats.record(profile.id, results)
    stats.breakdown(profile.id, history.all())

    report_path = None
    if write_report:
        report_path = write_run_report(build_run_report(results, user_stats))

    summary = _summary(len(jobs), results, report_path)
    log.info(
        "Run complete — found=%d, submitted=%d, failed=%d, skipped=%d",
        summary["jobs_found"], summary["submitted"], summary["failed"], summary["skipped"],
    )
    return summary


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="autoapply", description="Apply to matching job postings.")
    parser.add_argument("--settings", type=Path, help="settings.yaml (default: config/settings.yaml)")
    parser.add_argument("--profile", type=Path, help="profile.yaml (default: config/profile.yaml)")
    parser.add_argument("--headless", action="store_true", default=None, help="run the browser headless")
    parser.add_argument("--no-report", action="store_true", help="skip writing the markdown report")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)

    if args.verbose:
        configure("DEBUG")

    result = run(
        settings_path=args.settings,
        profile_path=args.profile,
        headless=args.headless,
        write_report=not args.no_report,
    )
    if result["report_path"]:
        log.info("Report: %s", result["report_path"])
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
