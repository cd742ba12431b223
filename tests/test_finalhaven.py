import signal
import threading
import time

import pytest

from wirelessbridge.finalhaven import (
    FATAL_SIGNAL_MESSAGE,
    TERMINATION_MESSAGE,
    ErrorLevel,
    FinalHaven,
)


@pytest.fixture(autouse=True)
def restore_signals():
    saved = {sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGTERM)}
    yield
    for sig, handler in saved.items():
        signal.signal(sig, handler)


@pytest.fixture
def haven():
    return FinalHaven({}, {})


def test_error_level_values_fixed_by_source():
    assert [ErrorLevel(value) for value in range(4)] == [
        ErrorLevel.USER,
        ErrorLevel.CRITICAL,
        ErrorLevel.SYSTEM,
        ErrorLevel.COMPONENT,
    ]


def test_report_then_wait_returns_report(haven):
    haven.report(ErrorLevel.COMPONENT, "disk")
    assert haven.wait_action().result(timeout=5) == (ErrorLevel.COMPONENT, "disk")


def test_reports_come_back_in_order(haven):
    haven.report(ErrorLevel.SYSTEM, "first")
    haven.report(ErrorLevel.CRITICAL, "second")
    assert haven.wait_action().result(timeout=5) == (ErrorLevel.SYSTEM, "first")
    assert haven.wait_action().result(timeout=5) == (ErrorLevel.CRITICAL, "second")


def test_wait_action_waits_past_queue_timeout(haven):
    future = haven.wait_action()

    def late_report():
        time.sleep(0.7)
        haven.report(ErrorLevel.SYSTEM, "late")

    threading.Thread(target=late_report).start()
    assert future.result(timeout=5) == (ErrorLevel.SYSTEM, "late")


def test_report_prints_description(haven, capsys):
    haven.report(ErrorLevel.SYSTEM, "disk")
    assert "report: error = disk" in capsys.readouterr().out


@pytest.mark.parametrize("sig", [signal.SIGTERM, signal.SIGINT])
def test_termination_signals_request_exit(haven, sig):
    haven.handle_signal(sig)
    assert haven.wait_action().result(timeout=5) == (ErrorLevel.USER, TERMINATION_MESSAGE)


def test_other_signal_is_fatal(haven):
    haven.handle_signal(signal.SIGABRT)
    assert haven.wait_action().result(timeout=5) == (ErrorLevel.USER, FATAL_SIGNAL_MESSAGE)


def test_installed_handler_reports(haven):
    handler = signal.getsignal(signal.SIGINT)
    handler(signal.SIGINT, None)
    level, description = haven.wait_action().result(timeout=5)
    assert level is ErrorLevel.USER
    assert description == TERMINATION_MESSAGE


def test_register_interfaces_provides_final_haven(haven):
    haven.register_interfaces()
    provided = haven.provided_interfaces()
    assert provided.get("FinalHaven") is haven
    assert haven.interface_type_info().type_name == "System::IFinalHaven"