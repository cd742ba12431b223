"""Reading the list of components, their libraries and configurations."""

from __future__ import annotations

import copy
import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from . import slog

COMPONENTS_KEY = "components"
NAME_KEY = "name"
LIB_PATH_KEY = "lib_path"
CONFIG_KEY = "config"


class ConfigurationError(RuntimeError):
    """The component configuration is missing, malformed or incomplete."""


def _scalar_text(entry: dict, key: str) -> str:
    if key not in entry:
        raise KeyError(f"No such node ({key})")
    value = entry[key]
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ValueError(f"conversion of data to type \"string\" failed ({key})")


def _children(node: Any) -> Iterable[Any]:
    if isinstance(node, list):
        return node
    if isinstance(node, dict):
        return node.values()
    raise ValueError(f"No such node ({COMPONENTS_KEY})")


class ComponentConfigParser:
    """Parsed component table: names in file order, each with a library and a config."""

    def __init__(self, cfg_path: str | Path) -> None:
        path = Path(cfg_path)
        if not path.exists():
            raise ConfigurationError(
                f"configuration unavailable: file is not exist: {cfg_path}"
            )

        self._names: list[str] = []
        self._components: dict[str, tuple[str, dict[str, Any]]] = {}

        try:
            with path.open(encoding="utf-8") as stream:
                document = json.load(stream)
            if not isinstance(document, dict) or COMPONENTS_KEY not in document:
                raise KeyError(f"No such node ({COMPONENTS_KEY})")

            for entry in _children(document[COMPONENTS_KEY]):
                if not isinstance(entry, dict):
                    raise ValueError("component entry is not an object")
                name = _scalar_text(entry, NAME_KEY)
                lib_path = _scalar_text(entry, LIB_PATH_KEY)
                if CONFIG_KEY not in entry:
                    raise KeyError(f"No such node ({CONFIG_KEY})")
                config = entry[CONFIG_KEY]
                if not isinstance(config, dict):
                    raise ValueError(f"node ({CONFIG_KEY}) is not an object")

                self._names.append(name)
                self._components.setdefault(name, (lib_path, config))

                slog.print_debug(
                    "ComponentConfigParser/%s: found component = %s(%s)",
                    "__init__", name, lib_path,
                )
        except Exception as exc:
            slog.print_error(
                "ComponentConfigParser/%s: Error during parsing config: %s",
                "__init__", str(cfg_path),
            )
            slog.print_error(
                "ComponentConfigParser/%s: Error description: %s", "__init__", str(exc)
            )
            raise ConfigurationError("configuration error: config parsing error") from exc

    def component_list(self) -> list[str]:
        """Return component names in the order they appear in the file."""
        return list(self._names)

    def _entry(self, name: str) -> tuple[str, dict[str, Any]]:
        try:
            return self._components[name]
        except KeyError:
            raise ConfigurationError(
                "configuration error: unknown component name"
            ) from None

    def component_lib(self, name: str) -> str:
        """Return the library path of a component."""
        return self._entry(name)[0]

    def component_config(self, name: str) -> dict[str, Any]:
        """Return a copy of a component's configuration."""
        return copy.deepcopy(self._entry(name)[1])