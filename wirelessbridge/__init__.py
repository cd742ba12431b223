"""Component framework, queues, events and device table for an MQTT bridge of wireless nodes."""

__version__ = "1.0.0"