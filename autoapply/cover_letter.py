"""Cover letters rendered from the profile's placeholder template."""
from __future__ import annotations

from typing import Iterable

from autoapply.models import UserProfile

DEFAULT_TEMPLATE = """Dear Hiring Manager,

I am writing to express my interest in the {jobTitle} position at {companyName}. With my background in {skills} and {experience} years of experience, I am confident I would be a valuable addition to your team.

In my previous roles, I have successfully delivered high-quality software solutions and collaborated effectively with cross-functional teams. I am particularly drawn to {companyName} because of your innovative approach and commitment to excellence.

I am excited about the opportunity to contribute to your team and would welcome the chance to discuss how my skills and experience align with your needs.

Best regards,
{firstName} {lastName}"""

PLACEHOLDERS: tuple[str, ...] = (
    "{firstName}", "{lastName}", "{jobTitle}",
    "{companyName}", "{skills}", "{experience}",
)


def render_cover_letter(
    template: str,
    first_name: str,
    last_name: str,
    job_title: str,
    company_name: str,
    skills: Iterable[str],
    experience_count: int,
) -> str:
    """Substitute every placeholder verbatim (no escaping, no formatting)."""
    values = {
        "{firstName}": first_name,
        "{lastName}": last_name,
        "{jobTitle}": job_title,
        "{companyName}": company_name,
        "{skills}": ", ".join(skills),
        "{experience}": str(experience_count),
    }
    out = template
    for token, value in values.items():
        out = out.replace(token, value)
    return out


def generate_cover_letter(profile: UserProfile, job_title: str, company_name: str) -> str:
    template = profile.application.cover_letter_template or DEFAULT_TEMPLATE
    return render_cover_letter(
        template,
        profile.first_name,
        profile.last_name,
        job_title,
        company_name,
        profile.resume.skills,
        len(profile.resume.experience),
    )
