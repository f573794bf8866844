"""
Tests for the forum login flow – state machine, cookies, success predicate.
"""

import unittest
from unittest.mock import MagicMock

from requests.cookies import RequestsCookieJar

from multifile_downloader.auth.login import (
    AuthSession,
    AuthState,
    SessionAuthState,
    marker_predicate,
)
from multifile_downloader.config import LOGIN_SUCCESS_MARKER
from multifile_downloader.errors import FetchError
from multifile_downloader.session import HttpResponse


def _response(body=b"", status_code=200, cookies=None, url="https://example.com/login.php"):
    jar = RequestsCookieJar()
    for name, value in (cookies or {}).items():
        jar.set(name, value)
    return HttpResponse(url=url, status_code=status_code, body=body, cookies=jar)


class TestMarkerPredicate(unittest.TestCase):
    def test_default_marker(self):
        check = marker_predicate()
        self.assertTrue(check(f"<p>{LOGIN_SUCCESS_MARKER}, alice</p>"))
        self.assertFalse(check("<p>Invalid password</p>"))

    def test_custom_marker(self):
        check = marker_predicate("Welcome back")
        self.assertTrue(check("Welcome back, alice"))


class TestAuthenticate(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock()
        self.client.fetch.return_value = _response(b"<form>", cookies={"bbsessionhash": "pre"})
        self.client.post.return_value = _response(
            f"{LOGIN_SUCCESS_MARKER}, alice".encode(), cookies={"bbuserid": "42"}
        )
        self.auth = AuthSession(self.client)

    def test_login_url(self):
        self.assertEqual(self.auth.login_url("forum.example.com"),
                         "https://forum.example.com/login.php")

    def test_success(self):
        state = self.auth.authenticate("example.com", "alice", "pw")
        self.assertIs(state.state, AuthState.AUTHENTICATED)
        self.assertTrue(state.logged_in)
        self.assertEqual(state.cookies.get("bbsessionhash"), "pre")
        self.assertEqual(state.cookies.get("bbuserid"), "42")

    def test_form_payload(self):
        self.auth.authenticate("example.com", "alice", "pw")
        args, kwargs = self.client.post.call_args
        self.assertEqual(args[0], "https://example.com/login.php")
        self.assertEqual(kwargs["data"], {
            "vb_login_username": "alice",
            "vb_login_password": "pw",
            "do": "login",
            "cookieuser": "1",
        })
        self.assertEqual(kwargs["headers"]["Referer"], "https://example.com/login.php")

    def test_login_page_cookie_sent_with_post(self):
        self.auth.authenticate("example.com", "alice", "pw")
        sent = self.client.post.call_args.kwargs["cookies"]
        self.assertEqual(sent.get("bbsessionhash"), "pre")

    def test_missing_marker_is_unconfirmed(self):
        self.client.post.return_value = _response(b"<p>Redirecting...</p>")
        state = self.auth.authenticate("example.com", "alice", "pw")
        self.assertIs(state.state, AuthState.AUTHENTICATION_UNCONFIRMED)
        self.assertFalse(state.logged_in)
        self.assertEqual(state.cookies.get("bbsessionhash"), "pre")

    def test_login_page_failure_is_not_fatal(self):
        self.client.fetch.side_effect = FetchError("https://example.com/login.php", "timeout")
        state = self.auth.authenticate("example.com", "alice", "pw")
        self.client.post.assert_called_once()
        self.assertIs(state.state, AuthState.AUTHENTICATED)

    def test_post_failure_is_unconfirmed(self):
        self.client.post.side_effect = FetchError("https://example.com/login.php", "reset")
        state = self.auth.authenticate("example.com", "alice", "pw")
        self.assertIs(state.state, AuthState.AUTHENTICATION_UNCONFIRMED)

    def test_pluggable_predicate(self):
        auth = AuthSession(self.client, success_predicate=lambda body: "alice" in body)
        self.client.post.return_value = _response(b"Hello alice")
        self.assertTrue(auth.authenticate("example.com", "alice", "pw").logged_in)

    def test_password_not_logged(self):
        with self.assertLogs("multifile-downloader", level="DEBUG") as cm:
            self.auth.authenticate("example.com", "alice", "hunter2")
        self.assertFalse(any("hunter2" in line for line in cm.output))


class TestSessionAuthState(unittest.TestCase):
    def test_clear(self):
        state = SessionAuthState("example.com", logged_in=True, state=AuthState.AUTHENTICATED)
        state.cookies.set("sid", "x")
        state.clear()
        self.assertEqual(len(state.cookies), 0)
        self.assertFalse(state.logged_in)
        self.assertIs(state.state, AuthState.UNAUTHENTICATED)


if __name__ == "__main__":
    unittest.main()
