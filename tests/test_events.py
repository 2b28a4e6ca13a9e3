"""Tests for the notification channels."""

from __future__ import annotations

import pytest

from mediahub.config import EventChannel


class TestEventChannel:
    """Synchronous, ordered delivery without isolation."""

    def test_delivers_in_subscription_order(self):
        channel = EventChannel("test")
        seen = []
        channel.subscribe(lambda e: seen.append(("first", e)))
        channel.subscribe(lambda e: seen.append(("second", e)))

        channel.publish("evt")

        assert seen == [("first", "evt"), ("second", "evt")]

    def test_failing_subscriber_propagates_and_stops_delivery(self):
        channel = EventChannel("test")
        seen = []

        def boom(event):
            raise RuntimeError("subscriber failed")

        channel.subscribe(boom)
        channel.subscribe(seen.append)

        with pytest.raises(RuntimeError, match="subscriber failed"):
            channel.publish("evt")
        assert seen == []

    def test_non_callable_rejected(self):
        with pytest.raises(TypeError):
            EventChannel("test").subscribe("not callable")

    def test_unsubscribe(self):
        channel = EventChannel("test")
        seen = []
        channel.subscribe(seen.append)

        assert channel.unsubscribe(seen.append) is True
        assert channel.unsubscribe(seen.append) is False
        channel.publish("evt")
        assert seen == []
        assert len(channel) == 0

    def test_duplicate_subscription_delivers_twice(self):
        channel = EventChannel("test")
        seen = []
        channel.subscribe(seen.append)
        channel.subscribe(seen.append)

        channel.publish("evt")

        assert seen == ["evt", "evt"]

    def test_subscribing_during_delivery_affects_next_publish_only(self):
        channel = EventChannel("test")
        late = []

        def add_late(event):
            channel.subscribe(late.append)

        channel.subscribe(add_late)
        channel.publish("one")
        assert late == []

        channel.publish("two")
        assert late == ["two"]
