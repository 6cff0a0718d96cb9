from __future__ import annotations

from fastapi import Response

from session_persistence.infrastructure.http.cookie_session_driver import (
    CookieSessionDriver,
    PersistenceCookieSettings,
)

SETTINGS = PersistenceCookieSettings(name="remember_token", max_age_seconds=3600, secure=True)


def _set_cookie_headers(response: Response) -> list[str]:
    return [
        value.decode("latin-1")
        for key, value in response.raw_headers
        if key.decode("latin-1").lower() == "set-cookie"
    ]


def test_get_reads_code_from_request_cookie() -> None:
    driver = CookieSessionDriver(
        request_cookies={"remember_token": "abc123"},
        cookie_settings=SETTINGS,
    )

    assert driver.get() == "abc123"


def test_get_treats_missing_or_blank_cookie_as_absent() -> None:
    missing = CookieSessionDriver(request_cookies={}, cookie_settings=SETTINGS)
    blank = CookieSessionDriver(
        request_cookies={"remember_token": "  "},
        cookie_settings=SETTINGS,
    )

    assert missing.get() is None
    assert blank.get() is None


def test_apply_without_changes_leaves_response_untouched() -> None:
    driver = CookieSessionDriver(
        request_cookies={"remember_token": "abc123"},
        cookie_settings=SETTINGS,
    )
    response = Response()

    driver.apply(response)

    assert _set_cookie_headers(response) == []


def test_set_writes_hardened_cookie_on_apply() -> None:
    driver = CookieSessionDriver(request_cookies={}, cookie_settings=SETTINGS)
    response = Response()

    driver.set("new-code")
    driver.apply(response)

    assert driver.get() == "new-code"
    [header] = _set_cookie_headers(response)
    assert header.startswith("remember_token=new-code;")
    assert "Max-Age=3600" in header
    assert "HttpOnly" in header
    assert "Secure" in header
    assert "SameSite=lax" in header
    assert "Path=/" in header


def test_forget_expires_cookie_on_apply() -> None:
    driver = CookieSessionDriver(
        request_cookies={"remember_token": "abc123"},
        cookie_settings=SETTINGS,
    )
    response = Response()

    driver.forget()
    driver.forget()
    driver.apply(response)

    assert driver.get() is None
    [header] = _set_cookie_headers(response)
    assert header.startswith('remember_token="";')
    assert "Max-Age=0" in header


def test_forget_after_set_wins() -> None:
    driver = CookieSessionDriver(request_cookies={}, cookie_settings=SETTINGS)
    response = Response()

    driver.set("short-lived")
    driver.forget()
    driver.apply(response)

    [header] = _set_cookie_headers(response)
    assert "short-lived" not in header
    assert "Max-Age=0" in header
