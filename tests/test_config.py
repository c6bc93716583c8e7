"""Tests for settings and the connection running flag."""

import os
from unittest import TestCase
from unittest.mock import patch

from pydantic import ValidationError

from sqs_bus.config import Settings
from sqs_bus.connection import ConnectionState


class TestSettings(TestCase):
    def test_reads_environment(self):
        env = {
            "AWS_ACCESS_KEY_ID": "AKIA",
            "AWS_SECRET_ACCESS_KEY": "shh",
            "AWS_REGION": "eu-west-1",
            "RECEIVE_CHECK_INTERVAL_MS": "500",
        }
        with patch.dict(os.environ, env, clear=False):
            settings = Settings(_env_file=None)
        self.assertEqual(settings.aws_access_key_id, "AKIA")
        self.assertNotIn("shh", repr(settings))
        kwargs = settings.connector_kwargs()
        self.assertEqual(kwargs["aws_secret_access_key"], "shh")
        self.assertEqual(kwargs["region_name"], "eu-west-1")
        self.assertEqual(kwargs["receive_check_interval_ms"], 500)

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)
        self.assertEqual(settings.app_name, "SQS Message Bus")
        self.assertIsNone(settings.connector_kwargs()["aws_secret_access_key"])
        self.assertIsNone(settings.receive_check_interval_ms)

    def test_rejects_long_wait(self):
        with patch.dict(os.environ, {"RECEIVE_WAIT_SECONDS": "60"}, clear=True):
            with self.assertRaises(ValidationError):
                Settings(_env_file=None)


class TestConnectionState(TestCase):
    def test_starts_stopped(self):
        self.assertFalse(ConnectionState().is_running())
        self.assertTrue(ConnectionState(running=True).is_running())

    def test_start_stop(self):
        state = ConnectionState()
        state.start()
        self.assertTrue(state.is_running())
        state.stop()
        self.assertFalse(state.is_running())
