"""Load run settings, search criteria, profile and env configuration."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from autoapply.cover_letter import DEFAULT_TEMPLATE
from autoapply.log import get_logger
from autoapply.models import (
    ApplicationData,
    ApplySettings,
    Education,
    JobPreferences,
    Platform,
    Resume,
    SearchCriteria,
    UserProfile,
    WorkExperience,
)

log = get_logger(__name__)

load_dotenv()

PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = PROJECT_ROOT / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.yaml"
PROFILE_PATH: Path = CONFIG_DIR / "profile.yaml"
REPORTS_DIR: Path = PROJECT_ROOT / "reports"
DATA_DIR: Path = PROJECT_ROOT / "data"
SESSIONS_DIR: Path = PROJECT_ROOT / "browser-sessions"

_DEFAULT_PLATFORMS = ["indeed"]


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def env_flag(key: str, default: bool = False) -> bool:
    raw = get_env(key)
    if not raw:
        return default
    return raw.lower() in ("1", "true", "yes", "on")


def ensure_dirs() -> None:
    for d in (REPORTS_DIR, DATA_DIR, SESSIONS_DIR):
        d.mkdir(parents=True, exist_ok=True)


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        log.debug("No config file at %s — using defaults", path)
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path.name} must contain a mapping at the top level")
    return data


def load_settings(path: Path | None = None) -> dict[str, Any]:
    return _read_yaml(path or SETTINGS_PATH)


def load_apply_settings(data: dict[str, Any] | None = None) -> ApplySettings:
    """Build the run policy; missing keys fall back to the service defaults."""
    section = (data if data is not None else load_settings()).get("apply", {}) or {}
    answers = section.get("custom_answers") or {}
    return ApplySettings(
        max_applications_per_run=int(section.get("max_applications_per_run", 2)),
        only_easy_apply=bool(section.get("only_easy_apply", True)),
        skip_applied_jobs=bool(section.get("skip_applied_jobs", True)),
        custom_answers={str(k): str(v) for k, v in answers.items()},
        delay_between_apps=float(section.get("delay_between_apps", 30)),
    )


def load_search_criteria(data: dict[str, Any] | None = None) -> SearchCriteria:
    section = (data if data is not None else load_settings()).get("search", {}) or {}
    return SearchCriteria(
        keywords=str(section.get("keywords", "Software Engineer")),
        location=str(section.get("location", "")),
        date_range=section.get("date_range"),
        experience_level=section.get("experience_level"),
        job_type=section.get("job_type"),
    )


def load_platforms(data: dict[str, Any] | None = None) -> list[Platform]:
    section = (data if data is not None else load_settings()).get("search", {}) or {}
    return [Platform.parse(p) for p in section.get("platforms") or _DEFAULT_PLATFORMS]


def load_profile(path: Path | None = None) -> UserProfile:
    data = _read_yaml(path or PROFILE_PATH)
    return profile_from_dict(data)


def profile_from_dict(data: dict[str, Any]) -> UserProfile:
    resume = data.get("resume", {}) or {}
    prefs = data.get("job_preferences", {}) or {}
    app = data.get("application_data", {}) or {}
    salary = prefs.get("salary_range", {}) or {}

    return UserProfile(
        id=str(data.get("id") or data.get("email") or "local"),
        email=str(data.get("email", "")),
        first_name=str(data.get("first_name", "")),
        last_name=str(data.get("last_name", "")),
        phone=str(data.get("phone", "")),
        location=str(data.get("location", "")),
        resume=Resume(
            summary=resume.get("summary", ""),
            skills=list(resume.get("skills") or []),
            experience=[WorkExperience(**e) for e in resume.get("experience") or []],
            education=[Education(**e) for e in resume.get("education") or []],
            resume_file=resume.get("resume_file"),
        ),
        preferences=JobPreferences(
            desired_roles=list(prefs.get("desired_roles") or ["Software Engineer"]),
            preferred_locations=list(prefs.get("preferred_locations") or ["Remote"]),
            salary_min=int(salary.get("min", 80000)),
            salary_max=int(salary.get("max", 150000)),
            work_type=prefs.get("work_type", "any"),
            experience_level=prefs.get("experience_level", "mid"),
        ),
        application=ApplicationData(
            cover_letter_template=app.get("cover_letter_template") or DEFAULT_TEMPLATE,
            portfolio_url=app.get("portfolio_url", ""),
            github_url=app.get("github_url", ""),
            linkedin_url=app.get("linkedin_url", ""),
            available_start_date=app.get("available_start_date", "2 weeks"),
            sponsorship_required=bool(app.get("sponsorship_required", False)),
        ),
    )
