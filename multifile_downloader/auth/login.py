"""
Forum-style session login.

State machine::

    UNAUTHENTICATED → FETCHING_LOGIN_PAGE → SUBMITTING_CREDENTIALS
                    → AUTHENTICATED | AUTHENTICATION_UNCONFIRMED

A missing success marker is *not* a failure: server wording varies, so the
caller still fetches the page with whatever cookies were collected and the
page's own content check decides whether the login worked.
"""

import enum
from dataclasses import dataclass, field
from typing import Callable

from requests.cookies import RequestsCookieJar

from multifile_downloader.config import (
    LOGIN_EXTRA_FIELDS,
    LOGIN_PASSWORD_FIELD,
    LOGIN_SUCCESS_MARKER,
    LOGIN_URL_TEMPLATE,
    LOGIN_USERNAME_FIELD,
)
from multifile_downloader.errors import FetchError
from multifile_downloader.session import HttpClient
from multifile_downloader.utils.log import log

# login response body -> logged in?
LoginPredicate = Callable[[str], bool]


class AuthState(enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    FETCHING_LOGIN_PAGE = "fetching-login-page"
    SUBMITTING_CREDENTIALS = "submitting-credentials"
    AUTHENTICATED = "authenticated"
    AUTHENTICATION_UNCONFIRMED = "authentication-unconfirmed"


@dataclass
class SessionAuthState:
    """Cookie state for one domain, scoped to a single run."""

    domain: str
    cookies: RequestsCookieJar = field(default_factory=RequestsCookieJar)
    logged_in: bool = False
    state: AuthState = AuthState.UNAUTHENTICATED

    def clear(self) -> None:
        self.cookies.clear()
        self.logged_in = False
        self.state = AuthState.UNAUTHENTICATED


def marker_predicate(marker: str = LOGIN_SUCCESS_MARKER) -> LoginPredicate:
    """Predicate that looks for *marker* in the login response body."""
    def _has_marker(body: str) -> bool:
        return marker in body
    return _has_marker


class AuthSession:
    """Log in to a domain and hand back the resulting cookie state."""

    def __init__(
        self,
        client: HttpClient,
        success_predicate: LoginPredicate | None = None,
        login_url_template: str = LOGIN_URL_TEMPLATE,
    ) -> None:
        self.client = client
        self.success_predicate = success_predicate or marker_predicate()
        self.login_url_template = login_url_template

    def login_url(self, domain: str) -> str:
        return self.login_url_template.format(domain=domain)

    def authenticate(self, domain: str, username: str, password: str) -> SessionAuthState:
        state = SessionAuthState(domain=domain)
        login_url = self.login_url(domain)

        # Step 1 – load the login page for any pre-login session cookie.
        # Some sites only issue the cookie after the POST, so a failure
        # here is logged and ignored.
        state.state = AuthState.FETCHING_LOGIN_PAGE
        log.info("[AUTH] Getting login page: %s", login_url)
        try:
            resp = self.client.fetch(login_url, cookies=state.cookies)
            state.cookies.update(resp.cookies)
            log.debug("[AUTH] Cookies after login page: %s", list(state.cookies.keys()))
        except FetchError as exc:
            log.warning("[AUTH] Could not load login page %s – %s", login_url, exc.reason)

        # Step 2 – submit the credentials
        state.state = AuthState.SUBMITTING_CREDENTIALS
        payload = {
            LOGIN_USERNAME_FIELD: username,
            LOGIN_PASSWORD_FIELD: password,
            **LOGIN_EXTRA_FIELDS,
        }
        log.debug("[AUTH] POST %s  %s", login_url,
                  {**payload, LOGIN_PASSWORD_FIELD: "***"})
        try:
            resp = self.client.post(
                login_url,
                data=payload,
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Referer": login_url,
                },
                cookies=state.cookies,
            )
        except FetchError as exc:
            state.state = AuthState.AUTHENTICATION_UNCONFIRMED
            log.warning("[AUTH] Login POST failed for %s – %s", domain, exc.reason)
            return state

        state.cookies.update(resp.cookies)
        if self.success_predicate(resp.text):
            state.state = AuthState.AUTHENTICATED
            state.logged_in = True
            log.info("[AUTH] Login successful for %s as %s (cookies: %s)",
                     domain, username, list(state.cookies.keys()))
        else:
            state.state = AuthState.AUTHENTICATION_UNCONFIRMED
            log.warning(
                "[AUTH] Login response for %s (HTTP %s) lacks the success "
                "marker – continuing with the collected cookies",
                domain, resp.status_code,
            )
        return state
