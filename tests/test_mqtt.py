import dataclasses
import threading

import pytest

from wirelessbridge.events import EventHolderListener
from wirelessbridge.mqtt import (
    MQTT_CONN,
    MqttConnectionInterface,
    MqttOnlineEvent,
    MqttTopicUpdateEvent,
)


class RecordingConnection(MqttConnectionInterface):
    def __init__(self):
        super().__init__()
        self.subscribed = []
        self.published = []

    def subscribe_topic(self, topic):
        self.subscribed.append(topic)

    def set_topic(self, topic, msg):
        self.published.append((topic, msg))


def test_events_hold_their_data():
    update = MqttTopicUpdateEvent("home/door", "open")
    assert update.topic == "home/door"
    assert update.message == "open"
    assert MqttOnlineEvent(True).comm_status is True


def test_events_compare_by_value_and_are_frozen():
    assert MqttTopicUpdateEvent("a", "b") == MqttTopicUpdateEvent("a", "b")
    with pytest.raises(dataclasses.FrozenInstanceError):
        MqttOnlineEvent(False).comm_status = True


def test_interface_type_name():
    assert MqttConnectionInterface.interface_type_info().type_name == "Mqtt::IMqttConnection"
    assert MQTT_CONN.name == "MqttConn"


def test_interface_is_abstract():
    with pytest.raises(TypeError):
        MqttConnectionInterface()


def test_publish_event_round_trip_in_order():
    conn = RecordingConnection()
    first = MqttOnlineEvent(True)
    second = MqttTopicUpdateEvent("t", "m")
    conn.publish_event(first)
    conn.publish_event(second)
    consumer = conn.event_consumer()
    assert consumer.consume_event() == first
    assert consumer.consume_event() == second


def test_consume_on_empty_returns_none():
    conn = RecordingConnection()
    conn.publish_event(MqttOnlineEvent(False))
    consumer = conn.event_consumer()
    assert consumer.consume_event() == MqttOnlineEvent(False)
    assert consumer.consume_event() is None


def test_set_topic_does_not_feed_event_queue():
    conn = RecordingConnection()
    conn.subscribe_topic("x")
    conn.set_topic("y", "z")
    conn.publish_event(MqttTopicUpdateEvent("y", "z"))
    assert conn.subscribed == ["x"]
    assert conn.published == [("y", "z")]
    consumer = conn.event_consumer()
    assert consumer.consume_event() == MqttTopicUpdateEvent("y", "z")
    assert consumer.consume_event() is None


def test_listener_receives_published_events():
    conn = RecordingConnection()
    received = []
    done = threading.Event()

    def handler(event):
        received.append(event)
        done.set()

    event = MqttTopicUpdateEvent("home/lamp", "on")
    with EventHolderListener(conn, handler):
        conn.publish_event(event)
        assert done.wait(5)
    assert received == [event]