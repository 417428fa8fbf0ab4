from __future__ import annotations

from datetime import datetime, timezone

from autoapply.models import ApplicationMethod, ApplicationResult, ApplicationStatus, Platform
from autoapply.stats import StatsStore
from autoapply.tracker import HEADERS, ApplicationHistory

from conftest import make_job


def result(job_id, status=ApplicationStatus.SUCCESS, *, platform=Platform.LINKEDIN, company="Acme"):
    job = make_job(job_id, platform=platform, company=company)
    method = ApplicationMethod.EXTERNAL if status is ApplicationStatus.SKIPPED else ApplicationMethod.EASY_APPLY
    return ApplicationResult.for_job(job, status, status.value, method)


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

def test_history_file_created_with_header(tmp_path):
    history = ApplicationHistory(tmp_path / "data" / "applications.csv")

    assert history.all() == []
    assert history.path.read_text(encoding="utf-8").splitlines()[0] == ",".join(HEADERS)


def test_record_writes_one_row_per_result(tmp_path):
    history = ApplicationHistory(tmp_path / "applications.csv")

    n = history.record("u1", [result("a"), result("b", ApplicationStatus.FAILED)])
    rows = history.all()

    assert n == 2
    assert [r["job_id"] for r in rows] == ["a", "b"]
    assert [r["status"] for r in rows] == ["submitted", "failed"]
    assert [r["result"] for r in rows] == ["success", "failed"]
    assert rows[0]["url"] == "https://linkedin.com/jobs/a"
    assert rows[0]["method"] == "easy_apply"


def test_skipped_result_is_labelled_skipped(tmp_path):
    history = ApplicationHistory(tmp_path / "applications.csv")

    history.record("u1", [result("g1", ApplicationStatus.SKIPPED)])
    row = history.all()[0]

    assert row["status"] == "skipped"
    assert row["result"] == "skipped"
    assert row["method"] == "external"


def test_record_nothing_returns_zero(tmp_path):
    assert ApplicationHistory(tmp_path / "h.csv").record("u1", []) == 0


def test_applied_keys_ignore_skipped_and_other_users(tmp_path):
    history = ApplicationHistory(tmp_path / "h.csv")
    history.record("u1", [result("a"), result("b", ApplicationStatus.FAILED), result("c", ApplicationStatus.SKIPPED)])
    history.record("u2", [result("d")])

    keys = history.applied_keys("u1")

    assert keys == {
        "a", "https://linkedin.com/jobs/a",
        "b", "https://linkedin.com/jobs/b",
    }


def test_query_filters_and_paginates(tmp_path):
    history = ApplicationHistory(tmp_path / "h.csv")
    history.record("u1", [
        result("a"),
        result("b", platform=Platform.INDEED),
        result("c", ApplicationStatus.FAILED),
        result("d"),
    ])

    page, total = history.query("u1", result="success", limit=1, offset=1)
    assert total == 3
    assert [r["job_id"] for r in page] == ["b"]

    page, total = history.query("u1", platform="indeed")
    assert total == 1
    assert page[0]["job_id"] == "b"

    assert history.query("nobody") == ([], 0)


def test_remove_drops_matching_row(tmp_path):
    history = ApplicationHistory(tmp_path / "h.csv")
    history.record("u1", [result("a"), result("b")])

    assert history.remove("u1", "a") is True
    assert history.remove("u1", "a") is False
    assert [r["job_id"] for r in history.all()] == ["b"]


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------

def test_stats_count_successes_only():
    stats = StatsStore()
    now = datetime(2024, 6, 1, tzinfo=timezone.utc)

    s = stats.record(
        "u1",
        [result("a"), result("b", ApplicationStatus.FAILED), result("c", ApplicationStatus.SKIPPED)],
        now=now,
    )

    assert s.total_applications == 1
    assert s.successful_applications == 1
    assert s.applications_this_week == 1
    assert s.applications_this_month == 1
    assert s.last_application_date == now
    assert s.success_rate == 100.0


def test_stats_untouched_by_failures():
    stats = StatsStore()

    s = stats.record("u1", [result("a", ApplicationStatus.FAILED)])

    assert s.total_applications == 0
    assert s.last_application_date is None
    assert s.success_rate == 0.0


def test_stats_are_per_user():
    stats = StatsStore()
    stats.record("u1", [result("a"), result("b")])

    assert stats.get("u2").total_applications == 0
    assert stats.get("u1").total_applications == 2

    stats.clear()
    assert stats.get("u1").total_applications == 0


def test_breakdown_from_history(tmp_path):
    history = ApplicationHistory(tmp_path / "h.csv")
    history.record("u1", [
        result("a", company="Acme"),
        result("b", ApplicationStatus.FAILED, platform=Platform.INDEED, company="Acme"),
        result("c", company="Globex"),
    ])
    history.record("u2", [result("d", company="Initech")])
    stats = StatsStore()

    s = stats.breakdown("u1", history.all())

    assert s.platform_breakdown == {"linkedin": 2, "indeed": 1}
    assert s.company_breakdown == {"Acme": 2, "Globex": 1}
    assert s.status_breakdown == {"success": 2, "failed": 1}
