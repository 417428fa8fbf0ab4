from __future__ import annotations

import functools

from autoapply import agent
from autoapply.models import ApplicationStatus, Platform
from autoapply.orchestrator import ApplicationOrchestrator
from autoapply.sources import JobSearchBase
from autoapply.stats import StatsStore
from autoapply.strategies import build_strategies
from autoapply.tracker import ApplicationHistory

from conftest import FakeBrowser, FakePage, make_job

SUBMIT_READY = {"#indeedApplyButton", 'button:has-text("Submit")'}


class _Browser(FakeBrowser):
    def __init__(self, identity=None, *, headless=False, sessions_dir=None):
        super().__init__(lambda: FakePage(SUBMIT_READY))
        self.identity = identity

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return None


class _Source(JobSearchBase):
    platform = Platform.INDEED

    def __init__(self, jobs):
        self.jobs = jobs

    def search(self, criteria):
        return list(self.jobs)


def _patch(monkeypatch, jobs):
    monkeypatch.setattr(agent, "ensure_dirs", lambda: None)
    monkeypatch.setattr(agent, "BrowserSession", _Browser)
    monkeypatch.setattr(agent, "get_sources", lambda platforms, browser: [_Source(jobs)])
    monkeypatch.setattr(
        agent, "build_strategies", lambda browser: build_strategies(browser, sleep=lambda s: None)
    )
    monkeypatch.setattr(
        agent,
        "ApplicationOrchestrator",
        functools.partial(ApplicationOrchestrator, sleep=lambda s: None, jitter=lambda: 0.0),
    )


def _write_config(tmp_path, quota=2):
    settings = tmp_path / "settings.yaml"
    settings.write_text(
        f"apply:\n  max_applications_per_run: {quota}\n  delay_between_apps: 0\n"
        "search:\n  keywords: python\n  platforms: [indeed]\n",
        encoding="utf-8",
    )
    profile = tmp_path / "profile.yaml"
    profile.write_text(
        "id: u1\nemail: ann@example.com\nfirst_name: Ann\nlast_name: Lee\nphone: '555'\n",
        encoding="utf-8",
    )
    return settings, profile


def test_run_applies_records_history_and_skips_next_time(tmp_path, monkeypatch):
    jobs = [
        make_job("a", platform=Platform.INDEED),
        make_job("b", platform=Platform.INDEED),
        make_job("c", platform=Platform.INDEED),
    ]
    _patch(monkeypatch, jobs)
    settings, profile = _write_config(tmp_path)
    history = ApplicationHistory(tmp_path / "applications.csv")
    stats = StatsStore()

    first = agent.run(
        settings_path=settings, profile_path=profile, history=history, stats=stats, write_report=False
    )

    assert first["jobs_found"] == 3
    assert first["submitted"] == 2
    assert [r.job_id for r in first["results"]] == ["a", "b"]
    assert first["report_path"] is None
    assert stats.get("u1").successful_applications == 2
    assert stats.get("u1").platform_breakdown == {"indeed": 2}

    second = agent.run(
        settings_path=settings, profile_path=profile, history=history, stats=stats, write_report=False
    )

    assert [r.status for r in second["results"]] == [
        ApplicationStatus.SKIPPED, ApplicationStatus.SKIPPED, ApplicationStatus.SUCCESS,
    ]
    assert second["results"][2].job_id == "c"
    assert len(history.all()) == 5


def test_run_without_jobs_returns_empty_summary(tmp_path, monkeypatch):
    _patch(monkeypatch, [])
    settings, profile = _write_config(tmp_path)

    summary = agent.run(
        settings_path=settings,
        profile_path=profile,
        history=ApplicationHistory(tmp_path / "h.csv"),
        write_report=False,
    )

    assert summary["jobs_found"] == 0
    assert summary["results"] == []


def test_run_writes_report(tmp_path, monkeypatch):
    _patch(monkeypatch, [make_job("a", platform=Platform.INDEED)])
    monkeypatch.setattr(agent, "write_run_report", lambda content: tmp_path / "run.md")
    settings, profile = _write_config(tmp_path)

    summary = agent.run(
        settings_path=settings,
        profile_path=profile,
        history=ApplicationHistory(tmp_path / "h.csv"),
    )

    assert summary["report_path"] == str(tmp_path / "run.md")
