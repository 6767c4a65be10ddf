"""Tests for the session port handoff and the error types."""

import unittest

from patience.protocol import (
    ConfigurationError,
    InvalidNotification,
    NotificationTimeout,
    PatienceError,
    parse_port,
    port_from_env,
)


class PortFromEnvTest(unittest.TestCase):
    def test_valid_port(self):
        self.assertEqual(port_from_env("PORT", {"PORT": "4242"}), 4242)

    def test_missing_variable(self):
        with self.assertRaisesRegex(ConfigurationError, "PORT is not set"):
            port_from_env("PORT", {})

    def test_not_a_number(self):
        with self.assertRaises(ConfigurationError):
            port_from_env("PORT", {"PORT": "http"})

    def test_out_of_range(self):
        for value in ("0", "-1", "65536"):
            with self.subTest(value=value):
                with self.assertRaises(ConfigurationError):
                    parse_port(value)

    def test_configuration_error_is_value_error(self):
        with self.assertRaises(ValueError):
            parse_port("")


class ErrorTaxonomyTest(unittest.TestCase):
    def test_timeout_is_distinguishable(self):
        error = NotificationTimeout("did not receive startup notification")
        self.assertIsInstance(error, PatienceError)
        self.assertIsInstance(error, TimeoutError)
        self.assertNotIsInstance(error, InvalidNotification)

    def test_invalid_notification_keeps_payload(self):
        error = InvalidNotification(b"oops")
        self.assertIsInstance(error, OSError)
        self.assertNotIsInstance(error, TimeoutError)
        self.assertEqual(error.payload, b"oops")
        self.assertIn("oops", str(error))


if __name__ == "__main__":
    unittest.main()
