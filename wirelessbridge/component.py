"""Components, their dependencies and the factories that create them."""

from __future__ import annotations

import weakref
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

from .interfaces import Interface, InterfaceSpec, InterfaceTypeInfo, ProvidedInterfaces

DependenciesInfo = dict[str, InterfaceTypeInfo]
ResolvedDependencies = Mapping[str, Interface]


@dataclass
class ComponentConfig:
    """Everything needed to register one component."""

    name: str
    lib_path: str
    config: dict[str, Any] = field(default_factory=dict)


class Depends:
    """Checked, weakly held dependencies of a component."""

    def __init__(self, specs: Iterable[InterfaceSpec], resolved: ResolvedDependencies) -> None:
        self._instances: dict[str, weakref.ref] = {}
        for spec in specs:
            instance = resolved.get(spec.name)
            if instance is None:
                raise RuntimeError(f"Cannot find instance for dependency {spec.name}")
            actual = instance.interface_type_info()
            requested = spec.interface.interface_type_info()
            if actual.type_name != requested.type_name:
                raise RuntimeError(
                    f"Type mismatch in dependency {spec.name}. "
                    f"Requested: {requested.type_name}, Actual: {actual.type_name}"
                )
            self._instances[spec.name] = weakref.ref(instance)

    def get_interface(self, name: str) -> Interface | None:
        """Return the dependency under a name, or None if it is gone."""
        try:
            ref = self._instances[name]
        except KeyError:
            raise KeyError(f"no dependency named {name!r}") from None
        return ref()


class Component:
    """Base of all components.

    Subclasses list the interfaces they provide in ``interfaces`` and the
    ones they need in ``depends``.
    """

    interfaces: ClassVar[tuple[InterfaceSpec, ...]] = ()
    depends: ClassVar[tuple[InterfaceSpec, ...]] = ()

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        dependencies: ResolvedDependencies | None = None,
    ) -> None:
        self.config: Mapping[str, Any] = config if config is not None else {}
        self.dependencies = Depends(type(self).depends, dependencies or {})
        self._provided = ProvidedInterfaces()

    def register_interfaces(self) -> None:
        """Provide this component under every interface it declares."""
        for spec in type(self).interfaces:
            self.provide_interface(spec)

    def init_component(self) -> None:
        """Prepare the component; nothing by default."""

    def start_component(self) -> None:
        """Start the component's work; nothing by default."""

    def provide_interface(self, spec: InterfaceSpec) -> None:
        """Register this component as the provider of one interface."""
        self._provided.provide(spec, self)

    def provided_interfaces(self) -> ProvidedInterfaces:
        """Return the interfaces registered so far."""
        return self._provided


def _info(specs: Iterable[InterfaceSpec]) -> DependenciesInfo:
    info: DependenciesInfo = {}
    for spec in specs:
        info.setdefault(spec.name, spec.interface.interface_type_info())
    return dict(sorted(info.items()))


class ComponentFactory:
    """Describes and creates instances of one component class."""

    def __init__(self, component_cls: type[Component]) -> None:
        self.component_cls = component_cls

    def provided_interfaces(self) -> DependenciesInfo:
        """Return name to type information of the provided interfaces."""
        return _info(self.component_cls.interfaces)

    def dependencies(self) -> DependenciesInfo:
        """Return name to type information of the required interfaces."""
        return _info(self.component_cls.depends)

    def create_instance(
        self, config: Mapping[str, Any], dependencies: ResolvedDependencies
    ) -> Component:
        """Create a component from its configuration and dependencies."""
        return self.component_cls(config, dependencies)