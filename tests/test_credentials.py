"""
Tests for the credentials file and the per-run credential resolver.
"""

import os
import stat
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock

from multifile_downloader.auth.credentials import (
    AuthMode,
    CredentialRecord,
    CredentialResolver,
    CredentialStore,
    validate_credentials,
)
from multifile_downloader.errors import ValidationError


class TestCredentialRecord(unittest.TestCase):
    def test_round_trip_line(self):
        rec = CredentialRecord("example.com", "user", "pw", "My account")
        self.assertEqual(rec.to_line(), "example.com|user|pw|My account")
        self.assertEqual(CredentialRecord.from_line(rec.to_line()), rec)

    def test_comment_and_blank_lines(self):
        self.assertIsNone(CredentialRecord.from_line("# comment"))
        self.assertIsNone(CredentialRecord.from_line("   "))

    def test_missing_description(self):
        rec = CredentialRecord.from_line("example.com|user|pw")
        self.assertEqual(rec.description, "")

    def test_description_may_contain_separator(self):
        rec = CredentialRecord.from_line("example.com|user|pw|a|b")
        self.assertEqual(rec.description, "a|b")


class TestValidateCredentials(unittest.TestCase):
    def test_empty_rejected(self):
        with self.assertRaises(ValidationError):
            validate_credentials("", "pw")
        with self.assertRaises(ValidationError):
            validate_credentials("user", "")

    def test_non_empty_accepted(self):
        validate_credentials("user", "pw")


class TestCredentialStore(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "creds.txt"
        self.store = CredentialStore(self.path)

    def tearDown(self):
        self._tmp.cleanup()

    def test_missing_file_means_no_records(self):
        self.assertEqual(self.store.records(), [])
        self.assertIsNone(self.store.lookup("example.com"))

    def test_save_then_lookup(self):
        self.store.save("example.com", "alice", "s3cret")
        self.assertEqual(self.store.lookup("example.com"), ("alice", "s3cret"))

    def test_save_twice_keeps_one_record(self):
        self.store.save("example.com", "alice", "old", "first")
        self.store.save("example.com", "bob", "new", "second")
        records = [r for r in self.store.records() if r.domain == "example.com"]
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].username, "bob")
        self.assertEqual(records[0].password, "new")
        self.assertEqual(records[0].description, "second")

    def test_save_keeps_other_domains(self):
        self.store.save("a.com", "ua", "pa")
        self.store.save("b.com", "ub", "pb")
        self.store.save("a.com", "ua2", "pa2")
        self.assertEqual(self.store.lookup("b.com"), ("ub", "pb"))
        self.assertEqual(self.store.lookup("a.com"), ("ua2", "pa2"))

    def test_new_file_has_header(self):
        self.store.save("example.com", "alice", "pw")
        text = self.path.read_text(encoding="utf-8")
        self.assertTrue(text.startswith("#"))
        self.assertIn("domain|username|password|description", text)
        self.assertIn("example.com|alice|pw|Account for example.com", text)

    def test_file_permissions(self):
        self.store.save("example.com", "alice", "pw")
        mode = stat.S_IMODE(os.stat(self.path).st_mode)
        self.assertEqual(mode, 0o600)

    def test_lookup_is_exact(self):
        self.store.save("example.com", "alice", "pw")
        self.assertIsNone(self.store.lookup("www.example.com"))
        self.assertIsNone(self.store.lookup("EXAMPLE.COM"))

    def test_incomplete_record_ignored(self):
        self.path.write_text("# header\nexample.com|alice||desc\n", encoding="utf-8")
        self.assertIsNone(self.store.lookup("example.com"))

    def test_separator_in_field_rejected(self):
        with self.assertRaises(ValidationError):
            self.store.save("example.com", "al|ice", "pw")

    def test_empty_fields_rejected(self):
        with self.assertRaises(ValidationError):
            self.store.save("example.com", "", "pw")
        with self.assertRaises(ValidationError):
            self.store.save("", "alice", "pw")
        self.assertFalse(self.path.exists())

    def test_ensure_exists(self):
        self.store.ensure_exists()
        self.assertTrue(self.path.exists())
        self.assertEqual(self.store.records(), [])


class TestCredentialResolver(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.store = CredentialStore(Path(self._tmp.name) / "creds.txt")

    def tearDown(self):
        self._tmp.cleanup()

    def test_saved_mode_uses_store(self):
        self.store.save("example.com", "alice", "pw")
        prompt = MagicMock()
        resolver = CredentialResolver(self.store, AuthMode.SAVED, prompt=prompt)
        self.assertEqual(resolver.resolve("example.com"), ("alice", "pw"))
        prompt.assert_not_called()

    def test_saved_mode_falls_back_to_prompt_without_persisting(self):
        prompt = MagicMock(return_value=("bob", "pw2"))
        resolver = CredentialResolver(self.store, AuthMode.SAVED, prompt=prompt)
        self.assertEqual(resolver.resolve("other.com"), ("bob", "pw2"))
        prompt.assert_called_once_with("other.com")
        self.assertIsNone(self.store.lookup("other.com"))

    def test_result_cached_for_run(self):
        prompt = MagicMock(return_value=("bob", "pw2"))
        cache = {}
        resolver = CredentialResolver(self.store, AuthMode.MANUAL, prompt=prompt, cache=cache)
        resolver.resolve("example.com")
        resolver.resolve("example.com")
        prompt.assert_called_once()
        self.assertEqual(cache, {"example.com": ("bob", "pw2")})

    def test_manual_mode_ignores_store(self):
        self.store.save("example.com", "alice", "pw")
        prompt = MagicMock(return_value=("typed", "typedpw"))
        resolver = CredentialResolver(self.store, AuthMode.MANUAL, prompt=prompt)
        self.assertEqual(resolver.resolve("example.com"), ("typed", "typedpw"))

    def test_manual_mode_persists_on_confirmation(self):
        prompt = MagicMock(return_value=("bob", "pw2"))
        confirm = MagicMock(return_value=True)
        resolver = CredentialResolver(self.store, AuthMode.MANUAL, prompt=prompt,
                                      confirm_save=confirm)
        resolver.resolve("example.com")
        confirm.assert_called_once()
        self.assertEqual(self.store.lookup("example.com"), ("bob", "pw2"))

    def test_manual_mode_declined_save(self):
        prompt = MagicMock(return_value=("bob", "pw2"))
        resolver = CredentialResolver(self.store, AuthMode.MANUAL, prompt=prompt,
                                      confirm_save=MagicMock(return_value=False))
        resolver.resolve("example.com")
        self.assertIsNone(self.store.lookup("example.com"))

    def test_empty_input_reprompted(self):
        prompt = MagicMock(side_effect=[("", ""), ("bob", ""), ("bob", "pw")])
        resolver = CredentialResolver(self.store, AuthMode.MANUAL, prompt=prompt)
        self.assertEqual(resolver.resolve("example.com"), ("bob", "pw"))
        self.assertEqual(prompt.call_count, 3)

    def test_gives_up_after_max_attempts(self):
        prompt = MagicMock(return_value=("", ""))
        resolver = CredentialResolver(self.store, AuthMode.MANUAL, prompt=prompt,
                                      max_attempts=2)
        with self.assertRaises(ValidationError):
            resolver.resolve("example.com")
        self.assertEqual(prompt.call_count, 2)

    def test_non_interactive_raises(self):
        resolver = CredentialResolver(self.store, AuthMode.SAVED, prompt=None)
        with self.assertRaises(ValidationError):
            resolver.resolve("missing.com")


if __name__ == "__main__":
    unittest.main()
