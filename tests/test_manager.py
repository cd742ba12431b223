import json

import pytest

from wirelessbridge.component import Component, ComponentConfig, ComponentFactory
from wirelessbridge.config_parser import ComponentConfigParser
from wirelessbridge.interfaces import Interface, InterfaceSpec
from wirelessbridge.manager import (
    ComponentLoader,
    ComponentManager,
    ComponentRegisterError,
    create_configuration,
    create_manager,
)

CALLS = []


class IGreeter(Interface):
    def greet(self):
        raise NotImplementedError


class IOther(Interface):
    pass


GREETER = InterfaceSpec("Greeter", IGreeter)
FAKE_GREETER = InterfaceSpec("Greeter", IOther)
USER = InterfaceSpec("User", IOther)


class Greeter(Component, IGreeter):
    interfaces = (GREETER,)

    def greet(self):
        return f"hello {self.config.get('who', 'world')}"

    def init_component(self):
        CALLS.append(("init", "greeter"))

    def start_component(self):
        CALLS.append(("start", "greeter"))


class User(Component, IOther):
    interfaces = (USER,)
    depends = (GREETER,)

    def init_component(self):
        CALLS.append(("init", "user"))

    def start_component(self):
        CALLS.append(("start", "user"))

    def message(self):
        return self.dependencies.get_interface("Greeter").greet()


class Impostor(Component, IOther):
    interfaces = (FAKE_GREETER,)


class Silent(Component):
    pass


class Broken(Component, IOther):
    interfaces = (InterfaceSpec("Broken", IOther),)

    def init_component(self):
        raise ValueError("init went wrong")


REGISTRY = {
    "libgreeter": Greeter,
    "libuser": ComponentFactory(User),
    "libimpostor": lambda: ComponentFactory(Impostor),
    "libsilent": Silent,
    "libbroken": Broken,
}


@pytest.fixture(autouse=True)
def clear_calls():
    CALLS.clear()


def test_register_and_get_component():
    manager = create_manager(REGISTRY)
    manager.register_component(ComponentConfig("z_greeter", "libgreeter", {"who": "bridge"}))
    component = manager.get_component("z_greeter")
    assert component.greet() == "hello bridge"


def test_dependency_is_resolved():
    manager = create_manager(REGISTRY)
    manager.register_component(ComponentConfig("z_greeter", "libgreeter", {}))
    manager.register_component(ComponentConfig("a_user", "libuser", {}))
    assert manager.get_component("a_user").message() == "hello world"


def test_init_all_then_start_all_in_name_order():
    manager = create_manager(REGISTRY)
    manager.register_component(ComponentConfig("z_greeter", "libgreeter", {}))
    manager.register_component(ComponentConfig("a_user", "libuser", {}))
    manager.init_and_start_components()
    assert CALLS == [
        ("init", "user"),
        ("init", "greeter"),
        ("start", "user"),
        ("start", "greeter"),
    ]
    assert manager.get_component("a_user").message() == "hello world"


def test_unsatisfied_dependency():
    manager = create_manager(REGISTRY)
    with pytest.raises(ComponentRegisterError, match="'Greeter - IGreeter' NOT satisfied"):
        manager.register_component(ComponentConfig("a_user", "libuser", {}))


def test_dependency_type_mismatch_is_not_satisfied():
    manager = create_manager(REGISTRY)
    manager.register_component(ComponentConfig("impostor", "libimpostor", {}))
    with pytest.raises(ComponentRegisterError, match="NOT satisfied"):
        manager.register_component(ComponentConfig("a_user", "libuser", {}))


def test_reloading_a_library_fails():
    manager = create_manager(REGISTRY)
    manager.register_component(ComponentConfig("one", "libgreeter", {}))
    with pytest.raises(ComponentRegisterError, match="component reload"):
        manager.register_component(ComponentConfig("two", "libgreeter", {}))


def test_unknown_library_fails():
    manager = create_manager(REGISTRY)
    with pytest.raises(ComponentRegisterError, match="libmissing"):
        manager.register_component(ComponentConfig("x", "libmissing", {}))


def test_empty_registry_message():
    manager = create_manager(REGISTRY)
    with pytest.raises(ComponentRegisterError, match="^Component map is empty$"):
        manager.get_component("anything")


def test_component_without_interfaces_is_not_registered():
    manager = create_manager(REGISTRY)
    manager.register_component(ComponentConfig("silent", "libsilent", {}))
    with pytest.raises(ComponentRegisterError, match="Component map is empty"):
        manager.get_component("silent")


def test_absent_component_message():
    manager = create_manager(REGISTRY)
    manager.register_component(ComponentConfig("z_greeter", "libgreeter", {}))
    with pytest.raises(ComponentRegisterError) as info:
        manager.get_component("final_haven")
    assert str(info.value) == "Component 'final_haven' is absent in registry"


def test_init_failure_is_wrapped():
    manager = create_manager(REGISTRY)
    manager.register_component(ComponentConfig("broken", "libbroken", {}))
    with pytest.raises(ComponentRegisterError, match="init went wrong"):
        manager.init_and_start_components()


def test_loader_returns_factory_for_class_entry():
    loader = ComponentLoader({"libgreeter": Greeter})
    factory = loader.load_component("libgreeter")
    assert factory.component_cls is Greeter


def test_manager_with_explicit_loader():
    manager = ComponentManager(ComponentLoader({"libgreeter": Greeter}))
    manager.register_component(ComponentConfig("g", "libgreeter", {"who": "loader"}))
    assert manager.get_component("g").greet() == "hello loader"


def test_create_configuration(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(
        json.dumps({"components": [{"name": "g", "lib_path": "libgreeter", "config": {}}]})
    )
    parser = create_configuration(path)
    assert isinstance(parser, ComponentConfigParser)
    assert parser.component_list() == ["g"]
    assert parser.component_lib("g") == "libgreeter"