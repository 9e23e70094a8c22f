"""Tests for the structured JSON log formatter."""

import json
import logging
import sys
import unittest

from utils.logging import JSONFormatter, setup_structured_logging


def _record(msg="User logged in", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="services.auth_service", level=level, pathname=__file__, lineno=1,
        msg=msg, args=(), exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter(unittest.TestCase):

    def setUp(self):
        self.formatter = JSONFormatter()

    def test_core_fields(self):
        data = json.loads(self.formatter.format(_record()))

        self.assertEqual(data["level"], "INFO")
        self.assertEqual(data["logger"], "services.auth_service")
        self.assertEqual(data["message"], "User logged in")
        self.assertTrue(data["timestamp"].endswith("Z"))

    def test_extra_fields_are_merged(self):
        data = json.loads(self.formatter.format(_record(userId="user-1", loginCount=3)))

        self.assertEqual(data["userId"], "user-1")
        self.assertEqual(data["loginCount"], 3)
        self.assertNotIn("pathname", data)

    def test_sensitive_extras_are_redacted(self):
        data = json.loads(self.formatter.format(
            _record(password="Password1", password_hash="$2b$12$abc", session_id="sid"),
        ))

        self.assertEqual(data["password"], "[REDACTED]")
        self.assertEqual(data["password_hash"], "[REDACTED]")
        self.assertEqual(data["session_id"], "[REDACTED]")
        self.assertNotIn("Password1", json.dumps(data))

    def test_non_serializable_values_fall_back_to_str(self):
        data = json.loads(self.formatter.format(_record(fields={"bio"})))

        self.assertEqual(data["fields"], "{'bio'}")

    def test_exception_is_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record(level=logging.ERROR)
            record.exc_info = sys.exc_info()

        data = json.loads(self.formatter.format(record))

        self.assertIn("RuntimeError: boom", data["exception"])


class TestSetupStructuredLogging(unittest.TestCase):

    def setUp(self):
        root = logging.getLogger()
        self.addCleanup(setattr, root, "handlers", list(root.handlers))
        self.addCleanup(root.setLevel, root.level)

    def test_installs_json_handler(self):
        setup_structured_logging("debug")

        root = logging.getLogger()
        self.assertEqual(root.level, logging.DEBUG)
        self.assertEqual(len(root.handlers), 1)
        self.assertIsInstance(root.handlers[0].formatter, JSONFormatter)
        self.assertFalse(logging.getLogger("uvicorn").propagate)
        self.assertEqual(logging.getLogger("uvicorn.access").level, logging.WARNING)


if __name__ == '__main__':
    unittest.main()
