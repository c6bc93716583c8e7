"""Tests for the message envelope codec."""

import json
import math
from unittest import TestCase

from pydantic import ValidationError

from sqs_bus.codec import deserialize_message, serialize_message
from sqs_bus.errors import SerializationError
from sqs_bus.message_model_dto import BusProperty, MessageDTO, QueueDestination, TopicDestination


class TestSerializeDeserialize(TestCase):
    """Round trips through the codec."""

    def test_round_trip_keeps_body_and_properties(self):
        message = MessageDTO(
            body={"order": 17, "items": ["a", "b"], "total": 12.5},
            properties={"tenant": "acme", "priority": 4},
            correlation_id="corr-1",
            message_type="order.created",
        )
        message.set_property(BusProperty.DISABLE_MESSAGE_ID, True)

        decoded = deserialize_message(serialize_message(message))

        self.assertEqual(decoded.body, message.body)
        self.assertEqual(decoded.properties, message.properties)
        self.assertEqual(decoded, message)
        self.assertTrue(decoded.is_message_id_disabled)

    def test_round_trip_keeps_destination_variant(self):
        queue_message = MessageDTO(body="x", destination=QueueDestination(name="orders"))
        topic_message = MessageDTO(body="y", destination=TopicDestination(name="events", arn="arn:aws:sns:1:events"))

        self.assertIsInstance(deserialize_message(serialize_message(queue_message)).destination, QueueDestination)
        decoded_topic = deserialize_message(serialize_message(topic_message))
        self.assertIsInstance(decoded_topic.destination, TopicDestination)
        self.assertEqual(decoded_topic.destination.arn, "arn:aws:sns:1:events")

    def test_serialized_form_is_tagged_json(self):
        payload = json.loads(serialize_message(MessageDTO(body=[1, 2, 3])))
        self.assertEqual(payload["kind"], "message")
        self.assertEqual(payload["body"], [1, 2, 3])

    def test_serialize_unencodable_body_names_type(self):
        message = MessageDTO(body="ok")
        message.body = object()
        with self.assertLogs("sqs_bus.codec", level="ERROR"):
            with self.assertRaises(SerializationError) as ctx:
                serialize_message(message)
        self.assertIn("MessageDTO", str(ctx.exception))


class TestJsonOnlyMessages(TestCase):
    """Values JSON cannot carry are refused rather than silently changed."""

    def test_non_json_body_rejected_on_construction(self):
        for body in (b"hi", (1, 2), {1, 2}):
            with self.subTest(body=body):
                with self.assertRaises(ValidationError):
                    MessageDTO(body=body)

    def test_non_finite_property_rejected_on_construction(self):
        for value in (math.inf, -math.inf, math.nan):
            with self.subTest(value=value):
                with self.assertRaises((ValidationError, SerializationError)):
                    serialize_message(MessageDTO(properties={"x": value}))

    def test_values_assigned_after_construction_fail_serialize(self):
        for body in (b"hi", (1, 2)):
            with self.subTest(body=body):
                message = MessageDTO()
                message.body = body
                with self.assertLogs("sqs_bus.codec", level="ERROR"):
                    with self.assertRaises(SerializationError):
                        serialize_message(message)

    def test_non_finite_property_set_later_fails_serialize(self):
        for value in (math.inf, math.nan):
            with self.subTest(value=value):
                message = MessageDTO(body="x")
                message.set_property("x", value)
                with self.assertLogs("sqs_bus.codec", level="ERROR"):
                    with self.assertRaises(SerializationError):
                        serialize_message(message)

    def test_nested_json_values_round_trip_exactly(self):
        message = MessageDTO(
            body={"a": [1, 2.5, None, True, {"b": "c"}], "n": -3},
            properties={"list": [1, "two"], "flag": False, "ratio": 0.25},
        )
        decoded = deserialize_message(serialize_message(message))
        self.assertEqual(decoded.model_dump(), message.model_dump())


class TestDeserializeFailures(TestCase):
    """Each distinct decode failure surfaces as a SerializationError."""

    def test_not_json(self):
        with self.assertLogs("sqs_bus.codec", level="ERROR"):
            with self.assertRaises(SerializationError) as ctx:
                deserialize_message("definitely not json")
        self.assertIn("Unable to deserialize", ctx.exception.context)

    def test_null(self):
        with self.assertRaises(SerializationError) as ctx:
            deserialize_message("null")
        self.assertIn("null", str(ctx.exception))

    def test_not_a_message_object(self):
        with self.assertRaises(SerializationError) as ctx:
            deserialize_message("[1, 2]")
        self.assertIn("list", str(ctx.exception))

    def test_wrong_kind(self):
        with self.assertRaises(SerializationError):
            deserialize_message(json.dumps({"kind": "invalid", "error": "boom"}))

    def test_invalid_fields(self):
        with self.assertRaises(SerializationError):
            deserialize_message(json.dumps({"kind": "message", "timestamp": "yesterday"}))
