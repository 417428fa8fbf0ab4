from __future__ import annotations

from autoapply.models import ApplicationMethod, ApplicationStatus, ApplySettings, Platform
from autoapply.strategies import (
    EasyApplyStrategy,
    ExternalSiteStrategy,
    IndeedStrategy,
    build_strategies,
)

from conftest import FakeBrowser, FakePage, make_job

APPLY = ".jobs-apply-button--top-card"
SUBMIT = 'button[aria-label="Submit application"]'
NEXT = 'button[aria-label="Continue to next step"]'
PHONE = 'input[name="phoneNumber"]'
COVER = 'textarea[name="coverLetter"]'


def easy_apply(page: FakePage):
    browser = FakeBrowser(lambda: page)
    return EasyApplyStrategy(browser, sleep=lambda s: None), browser


def test_easy_apply_submits_single_step_form(profile, settings):
    page = FakePage({APPLY, SUBMIT, PHONE})
    strategy, browser = easy_apply(page)
    job = make_job("li-1")

    result = strategy.apply(job, profile, settings)

    assert result.status is ApplicationStatus.SUCCESS
    assert result.method is ApplicationMethod.EASY_APPLY
    assert result.job_id == "li-1"
    assert page.gotos == [job.url]
    assert page.clicks == [APPLY, SUBMIT]
    assert page.filled[PHONE] == "+15550100"
    assert browser.acquired == browser.released == 1
    assert page.closed == 1


def test_easy_apply_walks_through_steps(profile, settings):
    page = FakePage(
        {APPLY, NEXT},
        on_click={NEXT: lambda p: p.present.add(SUBMIT)},
    )
    strategy, _ = easy_apply(page)

    result = strategy.apply(make_job("li-2"), profile, settings)

    assert result.status is ApplicationStatus.SUCCESS
    assert page.clicks == [APPLY, NEXT, SUBMIT]


def test_missing_apply_button_fails(profile, settings):
    page = FakePage()
    strategy, browser = easy_apply(page)

    result = strategy.apply(make_job("li-3"), profile, settings)

    assert result.status is ApplicationStatus.FAILED
    assert result.reason == "apply control not found"
    assert browser.released == 1


def test_missing_submit_control_fails(profile, settings):
    page = FakePage({APPLY})
    strategy, browser = easy_apply(page)

    result = strategy.apply(make_job("li-4"), profile, settings)

    assert result.status is ApplicationStatus.FAILED
    assert result.reason == "submit control not found"
    assert browser.released == 1


def test_cover_letter_mentions_the_real_job(profile, settings):
    page = FakePage({APPLY, SUBMIT, COVER})
    strategy, _ = easy_apply(page)

    strategy.apply(make_job("li-5", title="Data Engineer", company="Globex"), profile, settings)

    letter = page.filled[COVER]
    assert "Data Engineer" in letter
    assert "Globex" in letter
    assert "Jane Doe" in letter
    assert "{" not in letter


def test_custom_answers_fill_labelled_fields(profile):
    settings = ApplySettings(custom_answers={"Years of Python experience": "6"})
    page = FakePage({APPLY, SUBMIT, "label=Years of Python experience"})
    strategy, _ = easy_apply(page)

    strategy.apply(make_job("li-6"), profile, settings)

    assert page.filled["label=Years of Python experience"] == "6"


def test_resume_file_is_uploaded_when_input_shown(profile, settings):
    profile.resume.resume_file = "/tmp/resume.pdf"
    page = FakePage({APPLY, SUBMIT, 'input[type="file"]'})
    strategy, _ = easy_apply(page)

    strategy.apply(make_job("li-7"), profile, settings)

    assert page.uploads == ["/tmp/resume.pdf"]


def test_navigation_error_becomes_failed_result_and_page_is_released(profile, settings):
    page = FakePage(goto_error=RuntimeError("net::ERR_CONNECTION_RESET\n  at goto"))
    strategy, browser = easy_apply(page)

    result = strategy.apply(make_job("li-8"), profile, settings)

    assert result.status is ApplicationStatus.FAILED
    assert result.reason == "error: net::ERR_CONNECTION_RESET"
    assert browser.acquired == browser.released == 1
    assert page.closed == 1


def _target_closed(page):
    raise RuntimeError("Target closed")


def test_error_after_form_opened_still_releases_page(profile, settings):
    page = FakePage(
        {APPLY, NEXT},
        on_click={NEXT: _target_closed},
    )
    strategy, browser = easy_apply(page)

    result = strategy.apply(make_job("li-9"), profile, settings)

    assert result.status is ApplicationStatus.FAILED
    assert result.reason == "error: Target closed"
    assert browser.acquired == browser.released == 1


def test_indeed_submits_on_platform(profile, settings):
    page = FakePage(
        {"#indeedApplyButton", 'button:has-text("Continue")'},
        on_click={'button:has-text("Continue")': lambda p: p.present.add('button:has-text("Submit")')},
    )
    strategy = IndeedStrategy(FakeBrowser(lambda: page), sleep=lambda s: None)

    result = strategy.apply(make_job("in-1", platform=Platform.INDEED), profile, settings)

    assert result.status is ApplicationStatus.SUCCESS
    assert result.method is ApplicationMethod.FORM_FILL
    assert result.platform == "indeed"


def test_indeed_redirect_to_company_site_is_skipped(profile, settings):
    page = FakePage(
        {"#indeedApplyButton"},
        on_click={"#indeedApplyButton": lambda p: setattr(p, "url", "https://careers.acme.com/apply")},
    )
    browser = FakeBrowser(lambda: page)
    strategy = IndeedStrategy(browser, sleep=lambda s: None)

    result = strategy.apply(make_job("in-2", platform=Platform.INDEED), profile, settings)

    assert result.status is ApplicationStatus.SKIPPED
    assert result.reason == "external application"
    assert result.method is ApplicationMethod.EXTERNAL
    assert browser.released == 1


def test_external_strategy_skips_without_opening_page(profile, settings):
    browser = FakeBrowser()
    strategy = ExternalSiteStrategy(browser, Platform.DICE)

    result = strategy.apply(make_job("d-1", platform=Platform.DICE), profile, settings)

    assert result.status is ApplicationStatus.SKIPPED
    assert result.reason == "unsupported platform"
    assert result.method is ApplicationMethod.EXTERNAL
    assert browser.acquired == 0


def test_build_strategies_covers_every_platform():
    strategies = build_strategies(FakeBrowser())

    assert set(strategies) == set(Platform)
    assert isinstance(strategies[Platform.LINKEDIN], EasyApplyStrategy)
    assert strategies[Platform.LINKEDIN].requires_auth is True
    assert isinstance(strategies[Platform.INDEED], IndeedStrategy)
    assert strategies[Platform.GLASSDOOR].platform is Platform.GLASSDOOR
    assert isinstance(strategies[Platform.MONSTER], ExternalSiteStrategy)
