"""Data models for listings, run policy, outcomes, sessions and profiles."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Platform(str, Enum):
    LINKEDIN = "linkedin"
    INDEED = "indeed"
    GLASSDOOR = "glassdoor"
    DICE = "dice"
    MONSTER = "monster"

    @classmethod
    def parse(cls, value: "str | Platform") -> "Platform":
        if isinstance(value, Platform):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown platform: {value!r}. Available: {[p.value for p in cls]}"
            ) from None


class ApplicationStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class ApplicationMethod(str, Enum):
    EASY_APPLY = "easy_apply"
    EXTERNAL = "external"
    FORM_FILL = "form_fill"


# ---------------------------------------------------------------------------
# Search input and listings
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class JobListing:
    id: str
    title: str
    company: str
    location: str
    description: str
    url: str
    platform: Platform
    is_easy_apply: bool = False
    date_posted: str = ""
    salary: str | None = None

    @property
    def dedup_key(self) -> str:
        """Listing URLs are unique per platform; fall back to the id."""
        return self.url or self.id


@dataclass(frozen=True)
class SearchCriteria:
    keywords: str
    location: str = ""
    date_range: str | None = None        # day | week | month
    experience_level: str | None = None  # entry | mid | senior
    job_type: str | None = None          # fulltime | parttime | contract


@dataclass(frozen=True)
class ApplySettings:
    max_applications_per_run: int = 2
    only_easy_apply: bool = True
    skip_applied_jobs: bool = True
    custom_answers: Mapping[str, str] = field(default_factory=dict)
    delay_between_apps: float = 30.0

    def __post_init__(self) -> None:
        if self.max_applications_per_run < 0:
            raise ValueError("max_applications_per_run must be >= 0")
        if self.delay_between_apps < 0:
            raise ValueError("delay_between_apps must be >= 0")
        # Read-only view so the run policy cannot drift mid-run
        object.__setattr__(self, "custom_answers", MappingProxyType(dict(self.custom_answers)))


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ApplicationResult:
    job_id: str
    job_title: str
    company: str
    status: ApplicationStatus
    reason: str
    method: ApplicationMethod
    applied_at: datetime = field(default_factory=utcnow)
    platform: str = ""
    job_url: str = ""

    @classmethod
    def for_job(
        cls,
        job: JobListing,
        status: ApplicationStatus,
        reason: str,
        method: ApplicationMethod = ApplicationMethod.EASY_APPLY,
    ) -> "ApplicationResult":
        return cls(
            job_id=job.id,
            job_title=job.title,
            company=job.company,
            status=status,
            reason=reason,
            method=method,
            platform=job.platform.value,
            job_url=job.url,
        )


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

@dataclass
class AuthSession:
    platform: str
    identity: str
    cookies: list[dict[str, Any]]
    last_login: datetime
    is_valid: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "platform": self.platform,
            "email": self.identity,
            "cookies": self.cookies,
            "lastLogin": self.last_login.isoformat(),
            "isValid": self.is_valid,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AuthSession":
        last_login = datetime.fromisoformat(str(data["lastLogin"]).replace("Z", "+00:00"))
        if last_login.tzinfo is None:
            last_login = last_login.replace(tzinfo=timezone.utc)
        cookies = data.get("cookies") or []
        if not isinstance(cookies, list):
            raise ValueError("cookies must be a list")
        return cls(
            platform=str(data["platform"]),
            identity=str(data["email"]),
            cookies=list(cookies),
            last_login=last_login,
            is_valid=bool(data.get("isValid", True)),
        )


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

@dataclass
class WorkExperience:
    company: str
    position: str
    start_date: str = ""
    end_date: str = ""
    description: str = ""
    location: str = ""


@dataclass
class Education:
    institution: str
    degree: str
    field_of_study: str = ""
    graduation_year: str = ""
    gpa: str | None = None


@dataclass
class Resume:
    summary: str = ""
    skills: list[str] = field(default_factory=list)
    experience: list[WorkExperience] = field(default_factory=list)
    education: list[Education] = field(default_factory=list)
    resume_file: str | None = None


@dataclass
class JobPreferences:
    desired_roles: list[str] = field(default_factory=lambda: ["Software Engineer"])
    preferred_locations: list[str] = field(default_factory=lambda: ["Remote"])
    salary_min: int = 80000
    salary_max: int = 150000
    work_type: str = "any"
    experience_level: str = "mid"


@dataclass
class ApplicationData:
    cover_letter_template: str = ""
    portfolio_url: str = ""
    github_url: str = ""
    linkedin_url: str = ""
    available_start_date: str = "2 weeks"
    sponsorship_required: bool = False


@dataclass
class UserProfile:
    id: str
    email: str
    first_name: str
    last_name: str
    phone: str = ""
    location: str = ""
    resume: Resume = field(default_factory=Resume)
    preferences: JobPreferences = field(default_factory=JobPreferences)
    application: ApplicationData = field(default_factory=ApplicationData)


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------

@dataclass
class UserStats:
    total_applications: int = 0
    successful_applications: int = 0
    applications_this_week: int = 0
    applications_this_month: int = 0
    last_application_date: datetime | None = None
    platform_breakdown: dict[str, int] = field(default_factory=dict)
    company_breakdown: dict[str, int] = field(default_factory=dict)
    status_breakdown: dict[str, int] = field(default_factory=dict)

    @property
    def success_rate(self) -> float:
        if not self.total_applications:
            return 0.0
        return round(self.successful_applications / self.total_applications * 100, 1)
