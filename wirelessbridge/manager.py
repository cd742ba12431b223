"""Loading, wiring, initialising and starting components."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Union

from . import slog
from .component import (
    Component,
    ComponentConfig,
    ComponentFactory,
    DependenciesInfo,
    ResolvedDependencies,
)
from .config_parser import ComponentConfigParser
from .interfaces import Interface

RegistryEntry = Union[ComponentFactory, type, Callable[[], ComponentFactory]]


class ComponentRegisterError(RuntimeError):
    """A component could not be loaded, registered, found, initialised or started."""


def _as_factory(entry: RegistryEntry) -> ComponentFactory:
    if isinstance(entry, ComponentFactory):
        return entry
    if isinstance(entry, type) and issubclass(entry, Component):
        return ComponentFactory(entry)
    if callable(entry):
        factory = entry()
        if isinstance(factory, ComponentFactory):
            return factory
    raise ComponentRegisterError("library does not provide a component factory")


class ComponentLoader:
    """Resolves library paths to component factories, each path at most once."""

    def __init__(self, registry: Mapping[str, RegistryEntry] | None = None) -> None:
        self._registry: dict[str, RegistryEntry] = dict(registry or {})
        self._loaded: dict[str, ComponentFactory] = {}

    def load_component(self, path: str) -> ComponentFactory:
        """Return the factory behind a library path; loading a path twice fails."""
        slog.print_debug("ComponentLoader/%s: load component = %s", "load_component", path)

        if path in self._loaded:
            slog.print_error(
                "ComponentManager/%s:  component reload = %s", "load_component", path
            )
            raise ComponentRegisterError("component reload")

        try:
            entry = self._registry[path]
        except KeyError:
            raise ComponentRegisterError(
                f"cannot load component library '{path}'"
            ) from None

        factory = _as_factory(entry)
        self._loaded[path] = factory
        return factory


class ComponentManager:
    """Registry of live components, kept in name order."""

    def __init__(self, loader: ComponentLoader) -> None:
        self._loader = loader
        self._components: dict[str, Component] = {}
        slog.print_debug("ComponentManager/%s: created...", "__init__")

    def _sorted_components(self) -> list[tuple[str, Component]]:
        return sorted(self._components.items())

    def register_component(self, config: ComponentConfig) -> None:
        """Load, wire and create a component, then register it by name."""
        try:
            slog.print_debug("ComponentManager/%s: '%s'", "register_component", config.name)

            factory = self._loader.load_component(config.lib_path)
            resolved = self._resolve_dependencies(factory.dependencies())
            component = factory.create_instance(config.config, resolved)
            component.register_interfaces()

            for iface_name, instance in component.provided_interfaces().items():
                type_name = (
                    instance.interface_type_info().type_name if instance is not None else "?"
                )
                slog.print_debug(
                    "ComponentManager/%s: %s",
                    "register_component",
                    f"Component '{config.name}' implements interface '{iface_name}' "
                    f"of type {type_name}",
                )
                self._components.setdefault(config.name, component)
        except Exception as exc:
            slog.print_error(
                "ComponentManager/%s: error during load component = %s",
                "register_component", config.name,
            )
            raise ComponentRegisterError(str(exc)) from exc

    def get_component(self, name: str) -> Component:
        """Return a registered component by name."""
        if not self._components:
            message = "Component map is empty"
            slog.print_warning("ComponentManager/%s: %s", "get_component", message)
            raise ComponentRegisterError(message)
        try:
            return self._components[name]
        except KeyError:
            message = f"Component '{name}' is absent in registry"
            slog.print_warning("ComponentManager/%s: %s", "get_component", message)
            raise ComponentRegisterError(message) from None

    def init_and_start_components(self) -> None:
        """Initialise every component, then start every component, in name order."""
        for name, component in self._sorted_components():
            try:
                component.init_component()
            except Exception as exc:
                slog.print_error(
                    "ComponentManager/%s: error during init component = %s",
                    "init_and_start_components", name,
                )
                raise ComponentRegisterError(str(exc)) from exc

        for name, component in self._sorted_components():
            try:
                component.start_component()
            except Exception as exc:
                slog.print_error(
                    "ComponentManager/%s: error during start component = %s",
                    "init_and_start_components", name,
                )
                raise ComponentRegisterError(str(exc)) from exc

    def _resolve_dependencies(self, dependencies: DependenciesInfo) -> ResolvedDependencies:
        resolved: dict[str, Interface] = {}
        for dep_name, info in dependencies.items():
            slog.print_debug(
                "ComponentManager/%s: %s",
                "resolve_dependencies",
                f"process dependency :  '{dep_name} - {info.type_name}' ",
            )
            satisfied = False
            for _, component in self._sorted_components():
                instance = component.provided_interfaces().get(dep_name)
                if instance is None:
                    continue
                if instance.interface_type_info().type_name == info.type_name:
                    slog.print_debug(
                        "ComponentManager/%s: dependency satisfied", "resolve_dependencies"
                    )
                    resolved[dep_name] = instance
                    satisfied = True
            if not satisfied:
                message = f"dependency :  '{dep_name} - {info.type_name}' NOT satisfied !!!"
                slog.print_warning("ComponentManager/%s: %s", "resolve_dependencies", message)
                raise ComponentRegisterError(message)
        return resolved


def create_manager(registry: Mapping[str, RegistryEntry] | None = None) -> ComponentManager:
    """Create a component manager loading libraries from a registry."""
    return ComponentManager(ComponentLoader(registry))


def create_configuration(cfg_path: str | Path) -> ComponentConfigParser:
    """Parse a component configuration file."""
    return ComponentConfigParser(cfg_path)