"""The table of wireless devices the bridge serves."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from . import slog

DEVICE_LIST_KEY = "wireless_list"
DEV_NAME_KEY = "dev_name"
INPUT_TOPIC_KEY = "input_mqtt_topic"
OUTPUT_TOPIC_KEY = "output_mqtt_topic"
STATUS_TOPIC_KEY = "status_mqtt_topic"
NODE_TIMEOUT_KEY = "node_timeout_in_sec"
NODE_ATTEMPT_KEY = "node_connection_attempt"
INPUT_MAPPING_KEY = "input_mapping"
OUTPUT_MAPPING_KEY = "output_mapping"

CHANNEL_NUMBER_KEY = "number"
CHANNEL_NAME_KEY = "name"
CHANNEL_TOPIC_KEY = "mqtt_topic"
CHANNEL_SUBSCRIBE_KEY = "mqtt_subscribe"
VALUE_MAPPING_KEY = "value_mapping"
MAPPING_VALUE_KEY = "value"
MAPPING_TEXT_KEY = "mapp_to"


class DeviceConfigError(RuntimeError):
    """The device table is missing or cannot be parsed."""


@dataclass
class RouterDeviceChannel:
    """One input or output channel of a device."""

    number: int
    name: str
    mqtt_topic: str
    mqtt_subscribe: bool
    value_mapping: list[tuple[int, str]] = field(default_factory=list)


@dataclass
class RouterDeviceItem:
    """One wireless device with its topics, timing and channels."""

    dev_name: str
    input_mqtt_topic: str
    output_mqtt_topic: str
    status_mqtt_topic: str
    node_timeout_in_sec: int
    node_connection_attempt: int
    input_mapping: list[RouterDeviceChannel] = field(default_factory=list)
    output_mapping: list[RouterDeviceChannel] = field(default_factory=list)


def _node(entry: Any, key: str) -> Any:
    if not isinstance(entry, dict) or key not in entry:
        raise KeyError(f"No such node ({key})")
    return entry[key]


def _children(entry: Any, key: str) -> Iterable[Any]:
    node = _node(entry, key)
    if isinstance(node, list):
        return node
    if isinstance(node, dict):
        return node.values()
    return ()


def _text(entry: Any, key: str) -> str:
    value = _node(entry, key)
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ValueError(f'conversion of data to type "string" failed ({key})')


def _unsigned(entry: Any, key: str, bits: int) -> int:
    value = _node(entry, key)
    number: int | None = None
    if isinstance(value, int) and not isinstance(value, bool):
        number = value
    elif isinstance(value, str) and value.strip().isdigit():
        number = int(value.strip())
    if number is None or not 0 <= number < 2**bits:
        raise ValueError(f"conversion of data to unsigned {bits}-bit integer failed ({key})")
    return number


def _flag(entry: Any, key: str) -> bool:
    value = _node(entry, key)
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip()
        if text in ("true", "1"):
            return True
        if text in ("false", "0"):
            return False
    raise ValueError(f'conversion of data to type "bool" failed ({key})')


def _channels(entry: Any, key: str) -> list[RouterDeviceChannel]:
    channels = []
    for item in _children(entry, key):
        channel = RouterDeviceChannel(
            number=_unsigned(item, CHANNEL_NUMBER_KEY, 32),
            name=_text(item, CHANNEL_NAME_KEY),
            mqtt_topic=_text(item, CHANNEL_TOPIC_KEY),
            mqtt_subscribe=_flag(item, CHANNEL_SUBSCRIBE_KEY),
        )
        slog.print_debug("DeviceConfig/%s: channel number = %i", "__init__", channel.number)
        for mapping in _children(item, VALUE_MAPPING_KEY):
            value = _unsigned(mapping, MAPPING_VALUE_KEY, 16)
            text = _text(mapping, MAPPING_TEXT_KEY)
            channel.value_mapping.append((value, text))
            slog.print_debug(
                "DeviceConfig/%s: int = %i <-> str = %s", "__init__", value, text
            )
        channels.append(channel)
    return channels


class DeviceConfig:
    """Device table read from a JSON file, in file order."""

    def __init__(self, cfg_path: str | Path) -> None:
        path = Path(cfg_path)
        if not path.exists():
            raise DeviceConfigError(
                f"device configuration unavailable: file is not exist: {cfg_path}"
            )

        self._devices: list[RouterDeviceItem] = []
        try:
            with path.open(encoding="utf-8") as stream:
                document = json.load(stream)
            slog.print_debug("DeviceConfig/%s: device cfg path = %s", "__init__", str(cfg_path))

            for entry in _children(document, DEVICE_LIST_KEY):
                device = RouterDeviceItem(
                    dev_name=_text(entry, DEV_NAME_KEY),
                    input_mqtt_topic=_text(entry, INPUT_TOPIC_KEY),
                    output_mqtt_topic=_text(entry, OUTPUT_TOPIC_KEY),
                    status_mqtt_topic=_text(entry, STATUS_TOPIC_KEY),
                    node_timeout_in_sec=_unsigned(entry, NODE_TIMEOUT_KEY, 32),
                    node_connection_attempt=_unsigned(entry, NODE_ATTEMPT_KEY, 32),
                )
                slog.print_debug(
                    "DeviceConfig/%s: found device d_name = %s", "__init__", device.dev_name
                )
                device.input_mapping = _channels(entry, INPUT_MAPPING_KEY)
                device.output_mapping = _channels(entry, OUTPUT_MAPPING_KEY)
                self._devices.append(device)
        except Exception as exc:
            slog.print_error(
                "DeviceConfig/%s: Error during parsing config: %s", "__init__", str(cfg_path)
            )
            slog.print_error("DeviceConfig/%s: Error description: %s", "__init__", str(exc))
            raise DeviceConfigError("configuration error: config parsing error") from exc

    @property
    def devices(self) -> tuple[RouterDeviceItem, ...]:
        """All devices in file order."""
        return tuple(self._devices)

    def find_device(self, name: str) -> RouterDeviceItem | None:
        """Return the first device with the given name, or None."""
        return next((device for device in self._devices if device.dev_name == name), None)