import os
import unittest
from unittest import mock

from stridelite.infrastructure._config import (
    OOMPolicy,
    Settings,
    get_settings,
    load_settings,
    override_settings,
    reset_settings,
)


class TestLoadSettings(unittest.TestCase):
    def test_defaults(self):
        s = load_settings({})
        self.assertEqual(s, Settings())
        self.assertIs(s.oom_policy, OOMPolicy.ABORT)
        self.assertFalse(s.debug)

    def test_policy_is_case_insensitive(self):
        s = load_settings({"STRIDELITE_OOM_POLICY": " Raise "})
        self.assertIs(s.oom_policy, OOMPolicy.RAISE)

    def test_invalid_policy(self):
        with self.assertRaises(ValueError) as cm:
            load_settings({"STRIDELITE_OOM_POLICY": "retry"})
        self.assertIn("retry", str(cm.exception))

    def test_debug_flag(self):
        for raw, expected in (("1", True), ("yes", True), ("0", False), ("", False), ("false", False)):
            with self.subTest(raw=raw):
                self.assertIs(load_settings({"STRIDELITE_DEBUG": raw}).debug, expected)

    def test_settings_are_frozen(self):
        with self.assertRaises(Exception):
            Settings().debug = True


class TestCachedSettings(unittest.TestCase):
    def tearDown(self):
        reset_settings()

    def test_reset_rereads_environment(self):
        with mock.patch.dict(os.environ, {"STRIDELITE_OOM_POLICY": "raise"}):
            reset_settings()
            self.assertIs(get_settings().oom_policy, OOMPolicy.RAISE)
        with mock.patch.dict(os.environ, {"STRIDELITE_OOM_POLICY": "abort"}):
            self.assertIs(get_settings().oom_policy, OOMPolicy.RAISE)
            reset_settings()
            self.assertIs(get_settings().oom_policy, OOMPolicy.ABORT)

    def test_override_restores_previous(self):
        before = get_settings()
        with override_settings(debug=True) as s:
            self.assertTrue(s.debug)
            self.assertIs(get_settings(), s)
            self.assertEqual(s.oom_policy, before.oom_policy)
        self.assertIs(get_settings(), before)

    def test_override_restores_on_error(self):
        before = get_settings()
        with self.assertRaises(KeyError):
            with override_settings(oom_policy=OOMPolicy.RAISE):
                raise KeyError("boom")
        self.assertIs(get_settings(), before)


if __name__ == "__main__":
    unittest.main()
