# wirelessbridge

`wirelessbridge` is a small component framework, plus the parts an MQTT bridge
for wireless sensor and actuator nodes is built from. Components declare the
interfaces they provide and the ones they depend on. A component manager
loads them from a JSON table, wires their dependencies, and then initialises
and starts them.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## What is in the package

| Module | Contents |
| --- | --- |
| `wirelessbridge.slog` | `print_error`, `print_warning`, `print_info`, `print_debug` (printf-style formatting), filtered by `set_debug_level`; `set_debug_sink` / `get_debug_sink` choose between `Sink.CONSOLE` (stdout) and `Sink.DLT` (a `logging` logger registered by `init_dlt`, dropped by `deinit_dlt`) |
| `wirelessbridge.systime` | `system_time_usec()` and `system_time_msec()`, which read the monotonic clock |
| `wirelessbridge.queues` | `BlockingQueue` (pop waits up to a timeout and returns `None`), `ThreadQueue` (non-blocking, with `copy()`), `UniQueue` (pop returns a `Future`) |
| `wirelessbridge.events` | `EventLoop`, `EventLoopHolder`, and the listener threads `EventListener` and `EventHolderListener`, which feed events to a handler and can be used as context managers |
| `wirelessbridge.interfaces` | `Interface`, `InterfaceTypeInfo`, `InterfaceSpec`, `ProvidedInterfaces` |
| `wirelessbridge.component` | `Component`, `ComponentFactory`, `ComponentConfig`, `Depends` |
| `wirelessbridge.config_parser` | `ComponentConfigParser`, `ConfigurationError` |
| `wirelessbridge.manager` | `ComponentManager`, `ComponentLoader`, `ComponentRegisterError`, `create_manager(registry)`, `create_configuration(cfg_path)` |
| `wirelessbridge.finalhaven` | `FinalHaven`, the error collector component; `ErrorLevel` |
| `wirelessbridge.executor` | `Executor`, a worker-thread component for one-off and periodic tasks |
| `wirelessbridge.connman` | `ConnMan`, a reconnection manager; `Connectable`, `ConnectionInfo`, `ConnectionStatus` |
| `wirelessbridge.mqtt` | `MqttConnectionInterface`, with the events `MqttOnlineEvent` and `MqttTopicUpdateEvent` |
| `wirelessbridge.device_config` | `DeviceConfig`, the device table reader; `RouterDeviceItem`, `RouterDeviceChannel`, `DeviceConfigError` |

## Component configuration

`ComponentConfigParser` (or `create_configuration`) reads a file such as this:

```json
{
  "components": [
    {"name": "final_haven", "lib_path": "haven", "config": {}},
    {"name": "executor",    "lib_path": "executor", "config": {}}
  ]
}
```

Its methods are:

- `component_list()` returns the names in file order.
- `component_lib(name)` returns the `lib_path` of a component.
- `component_config(name)` returns a copy of its `config` object.

A missing file, a malformed file or an unknown name raises
`ConfigurationError`.

`lib_path` is a key into the registry given to `create_manager`. A registry
value may be any of these:

- a `ComponentFactory`;
- a `Component` subclass;
- a callable that returns a `ComponentFactory`.

Each path can be loaded only once.

## Wiring components

```python
from wirelessbridge.component import ComponentConfig
from wirelessbridge.executor import Executor
from wirelessbridge.finalhaven import ErrorLevel, FinalHaven
from wirelessbridge.manager import create_manager

manager = create_manager({"haven": FinalHaven, "executor": Executor})
manager.register_component(ComponentConfig("final_haven", "haven", {}))
manager.register_component(ComponentConfig("executor", "executor", {}))
manager.init_and_start_components()

haven = manager.get_component("final_haven")
haven.report(ErrorLevel.COMPONENT, "something went wrong")
level, description = haven.wait_action().result()

manager.get_component("executor").stop()
```

Registration order matters. A component's dependencies are looked up among
the components that are already registered, and a missing dependency raises
`ComponentRegisterError`. `init_and_start_components()` first initialises
every component and then starts every component, in both passes in order of
component name.

When `FinalHaven` is created in the main thread, it installs handlers for
`SIGINT` and `SIGTERM`. These signals then arrive as `ErrorLevel.USER`
reports.

## Device table

`DeviceConfig(path)` reads the table of wireless nodes:

```json
{
  "wireless_list": [
    {
      "dev_name": "garden_node",
      "input_mqtt_topic": "garden/in",
      "output_mqtt_topic": "garden/out",
      "status_mqtt_topic": "garden/status",
      "node_timeout_in_sec": 30,
      "node_connection_attempt": 3,
      "input_mapping": [
        {"number": 0, "name": "door", "mqtt_topic": "garden/door",
         "mqtt_subscribe": false,
         "value_mapping": [{"value": 0, "mapp_to": "closed"},
                           {"value": 1, "mapp_to": "open"}]}
      ],
      "output_mapping": [
        {"number": 1, "name": "lamp", "mqtt_topic": "garden/lamp",
         "mqtt_subscribe": true, "value_mapping": []}
      ]
    }
  ]
}
```

`devices` holds the entries in file order. `find_device(name)` returns the
first entry with that name, or `None`. A missing field, a negative or
out-of-range number, or a malformed file raises `DeviceConfigError`.

## What this package does not do

- It has no command-line program and no launcher. Assembling and running an
  application is left to the calling code, as in the example above.
- It contains no bridge component. Nothing here splits node messages, maps
  values to strings, republishes channels or sets status topics.
  `DeviceConfig` only reads the table such a component would use.
- It contains no MQTT client. `MqttConnectionInterface` defines what a
  connection must offer (`subscribe_topic`, `set_topic`, and events through
  `publish_event`), but no implementation talks to a broker.