"""Named, typed interfaces that components provide to one another."""

from __future__ import annotations

import weakref
from collections.abc import Iterator
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class InterfaceTypeInfo:
    """Identity of an interface type, compared by name."""

    type_name: str


class Interface:
    """Base of every interface.

    A direct subclass declares an interface; its type name is the
    ``interface_name`` class keyword, or else the class's qualified name.
    Implementations inherit the declared name.
    """

    _interface_name: ClassVar[str | None] = None

    def __init_subclass__(cls, *, interface_name: str | None = None, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        if interface_name is not None:
            cls._interface_name = interface_name
        elif Interface in cls.__bases__:
            cls._interface_name = cls.__qualname__

    @classmethod
    def interface_type_info(cls) -> InterfaceTypeInfo:
        """Return the type information of the declared interface."""
        if cls._interface_name is None:
            raise TypeError(f"{cls.__qualname__} declares no interface")
        return InterfaceTypeInfo(cls._interface_name)


@dataclass(frozen=True)
class InterfaceSpec:
    """A name bound to an interface type, used to provide or depend on it."""

    name: str
    interface: type[Interface]


class ProvidedInterfaces:
    """Registry of interfaces a component provides, holding instances weakly."""

    def __init__(self) -> None:
        self._entries: dict[str, weakref.ref] = {}

    def provide(self, spec: InterfaceSpec, instance: Interface) -> None:
        """Register an instance under the spec's name; the first one wins."""
        if not isinstance(instance, spec.interface):
            raise TypeError(
                f"{type(instance).__qualname__} does not implement "
                f"{spec.interface.__qualname__}"
            )
        self._entries.setdefault(spec.name, weakref.ref(instance))

    def get(self, name: str) -> Interface | None:
        """Return the live instance under a name, or None."""
        ref = self._entries.get(name)
        return None if ref is None else ref()

    def items(self) -> list[tuple[str, Interface | None]]:
        """Return (name, instance) pairs in registration order."""
        return [(name, ref()) for name, ref in self._entries.items()]

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))