import pytest

from wirelessbridge.component import Component, ComponentConfig, ComponentFactory, Depends
from wirelessbridge.interfaces import Interface, InterfaceSpec, InterfaceTypeInfo


class Greeter(Interface, interface_name="Test::IGreeter"):
    pass


class Other(Interface, interface_name="Test::IOther"):
    pass


GREETER = InterfaceSpec("Greeter", Greeter)


class GreeterImpl(Greeter, Component):
    interfaces = (GREETER,)


class OtherImpl(Other, Component):
    interfaces = (InterfaceSpec("Other", Other),)


class UsesGreeter(Component):
    depends = (GREETER,)

    def __init__(self, config=None, dependencies=None):
        super().__init__(config, dependencies)
        self.started = False

    def start_component(self):
        self.started = True


def test_component_config_fields():
    cfg = ComponentConfig("final_haven", "libfinalhaven.so", {"a": 1})
    assert (cfg.name, cfg.lib_path, cfg.config) == ("final_haven", "libfinalhaven.so", {"a": 1})
    assert ComponentConfig("n", "p").config == {}


def test_depends_resolves_instance():
    greeter = GreeterImpl()
    deps = Depends([GREETER], {"Greeter": greeter})
    assert deps.get_interface("Greeter") is greeter


def test_depends_missing_dependency():
    with pytest.raises(RuntimeError, match="Cannot find instance for dependency Greeter"):
        Depends([GREETER], {})


def test_depends_type_mismatch():
    with pytest.raises(RuntimeError, match="Type mismatch in dependency Greeter"):
        Depends([GREETER], {"Greeter": OtherImpl()})


def test_depends_unknown_name():
    deps = Depends([], {})
    with pytest.raises(KeyError):
        deps.get_interface("Greeter")


def test_register_interfaces_provides_self():
    greeter = ComponentFactory(GreeterImpl).create_instance({}, {})
    assert len(greeter.provided_interfaces()) == 0
    greeter.register_interfaces()
    assert greeter.provided_interfaces().get("Greeter") is greeter


def test_factory_describes_component():
    factory = ComponentFactory(UsesGreeter)
    assert factory.provided_interfaces() == {}
    assert factory.dependencies() == {"Greeter": InterfaceTypeInfo("Test::IGreeter")}
    assert ComponentFactory(GreeterImpl).provided_interfaces() == {
        "Greeter": InterfaceTypeInfo("Test::IGreeter")
    }


def test_factory_creates_instance_with_config_and_dependencies():
    greeter = GreeterImpl()
    factory = ComponentFactory(UsesGreeter)
    user = factory.create_instance({"key": "value"}, {"Greeter": greeter})
    assert isinstance(user, UsesGreeter)
    assert user.config == {"key": "value"}
    assert user.dependencies.get_interface("Greeter") is greeter
    user.init_component()
    user.start_component()
    assert user.started is True


def test_factory_create_fails_without_dependency():
    with pytest.raises(RuntimeError):
        ComponentFactory(UsesGreeter).create_instance({}, {})