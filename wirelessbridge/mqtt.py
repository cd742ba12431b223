"""MQTT events and the interface of an MQTT connection."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Union

from .events import EventLoopHolder
from .interfaces import Interface, InterfaceSpec


@dataclass(frozen=True)
class MqttOnlineEvent:
    """The connection to the broker went online (True) or offline (False)."""

    comm_status: bool


@dataclass(frozen=True)
class MqttTopicUpdateEvent:
    """A message arrived on a subscribed topic."""

    topic: str
    message: str


MqttEvent = Union[MqttOnlineEvent, MqttTopicUpdateEvent]


class MqttConnectionInterface(
    Interface, EventLoopHolder, ABC, interface_name="Mqtt::IMqttConnection"
):
    """An MQTT connection that publishes, subscribes and emits events."""

    def __init__(self) -> None:
        EventLoopHolder.__init__(self)

    @abstractmethod
    def subscribe_topic(self, topic: str) -> None:
        """Subscribe to a topic."""

    @abstractmethod
    def set_topic(self, topic: str, msg: str) -> None:
        """Publish a message on a topic."""

    def publish_event(self, event: MqttEvent) -> None:
        """Hand an event to whoever consumes this connection's events."""
        self.event_sender().send_event(event)


MQTT_CONN = InterfaceSpec("MqttConn", MqttConnectionInterface)