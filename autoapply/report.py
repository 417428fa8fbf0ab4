"""Markdown summary of one apply run."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import urlparse

from autoapply.config import REPORTS_DIR
from autoapply.log import get_logger
from autoapply.models import ApplicationResult, ApplicationStatus, UserStats

log = get_logger(__name__)

_BADGE: dict[ApplicationStatus, str] = {
    ApplicationStatus.SUCCESS: "✅",
    ApplicationStatus.FAILED: "❌",
    ApplicationStatus.SKIPPED: "⏭️",
}

_REASON_HINTS: dict[str, str] = {
    "executable doesn't exist": "Browser not installed — run `playwright install chromium`",
    "timeout": "Page timed out",
    "apply control not found": "No apply button on the page",
    "submit control not found": "Form needs answers the agent doesn't have — finish it manually",
    "no authenticated session": "Login did not complete — rerun and sign in within 5 minutes",
    "unsupported platform": "Platform not automated — apply via the link",
}


def _short_reason(reason: str) -> str:
    low = reason.lower()
    for key, msg in _REASON_HINTS.items():
        if key in low:
            return msg
    return reason[:80] + ("…" if len(reason) > 80 else "")


def _short_url_label(url: str) -> str:
    host = (urlparse(url).hostname or "").replace("www.", "")
    parts = host.split(".")
    return parts[0].capitalize() if parts and parts[0] else "Link"


def _clip(text: str, n: int) -> str:
    return text[:n] + ("…" if len(text) > n else "")


def build_run_report(results: list[ApplicationResult], stats: UserStats | None = None) -> str:
    date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    counts = {s: sum(1 for r in results if r.status is s) for s in ApplicationStatus}
    lines: list[str] = [f"# Apply Run — {date}", ""]
    lines.append(
        f"**{counts[ApplicationStatus.SUCCESS]}** submitted | "
        f"**{counts[ApplicationStatus.FAILED]}** failed | "
        f"**{counts[ApplicationStatus.SKIPPED]}** skipped"
    )
    lines.append("")

    if results:
        lines.append("| # | Role | Company | Result | Note | Link |")
        lines.append("|--:|------|---------|--------|------|------|")
        for i, r in enumerate(results, 1):
            link = f"[{_short_url_label(r.job_url)}]({r.job_url})" if r.job_url else "—"
            note = _short_reason(r.reason) if r.status is not ApplicationStatus.SUCCESS else r.reason
            lines.append(
                f"| {i} | {_clip(r.job_title, 40)} | {_clip(r.company, 22)} | "
                f"{_BADGE[r.status]} {r.status.value} | {note} | {link} |"
            )
        lines.append("")
    else:
        lines.append("_No jobs were processed in this run._")
        lines.append("")

    if stats is not None:
        lines.append("## Totals")
        lines.append("")
        lines.append(f"- Applications submitted: {stats.successful_applications}")
        lines.append(f"- This week: {stats.applications_this_week} | This month: {stats.applications_this_month}")
        if stats.last_application_date:
            lines.append(f"- Last application: {stats.last_application_date:%Y-%m-%d %H:%M} UTC")
        lines.append("")

    log.info("Built run report: %d result(s)", len(results))
    return "\n".join(lines)


def write_run_report(content: str, directory: Path | None = None) -> Path:
    directory = directory or REPORTS_DIR
    directory.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H%M%S")
    path = directory / f"run_{stamp}.md"
    path.write_text(content, encoding="utf-8")
    log.info("Report written → %s", path)
    return path
