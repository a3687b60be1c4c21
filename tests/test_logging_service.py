import logging

import pytest

from onboarding.services.event_bus import EventBus, TourEvent
from onboarding.services.logging_service import LoggingService, configure_logging


@pytest.fixture()
def setup_logging():
    bus = EventBus()
    svc = LoggingService(capacity=5, bus=bus)
    svc.attach()
    yield svc, bus
    svc.mute_all(False)
    svc.detach()


def test_logging_capture_and_retrieve(setup_logging):
    svc, _ = setup_logging
    logging.getLogger("onboarding.tour.player").info("Hello World")
    assert any(e.message == "Hello World" for e in svc.recent())


def test_unrelated_loggers_not_captured(setup_logging):
    svc, _ = setup_logging
    logging.getLogger("elsewhere").warning("noise")
    assert not svc.recent()


def test_logging_capacity_eviction(setup_logging):
    svc, _ = setup_logging
    for i in range(10):
        logging.getLogger("onboarding.cap").info("M%d", i)
    recents = svc.recent()
    assert len(recents) == 5
    assert recents[0].message.endswith("5")
    assert [e.message for e in svc.recent(2)] == ["M8", "M9"]


def test_logging_filtering(setup_logging):
    svc, _ = setup_logging
    logging.getLogger("onboarding.platform.selectors").debug("fallback")
    logging.getLogger("onboarding.tour.seen_store").warning("storage down")
    warnings = svc.filter(level="WARNING")
    assert [e.message for e in warnings] == ["storage down"]
    platform = svc.filter(name_contains="platform")
    assert platform and all("platform" in e.name for e in platform)


def test_logging_event_emission(setup_logging):
    _, bus = setup_logging
    payloads = []
    bus.subscribe(TourEvent.LOG_RECORD_ADDED, lambda evt: payloads.append(evt.payload))
    logging.getLogger("onboarding.evt").warning("Something happened")
    assert payloads and payloads[-1]["level"] == "WARNING"


def test_mute_all_silences_capture(setup_logging):
    svc, _ = setup_logging
    svc.mute_all(True)
    logging.getLogger("onboarding.quiet").error("hidden")
    assert svc.muted
    assert not svc.recent()
    svc.mute_all(False)
    logging.getLogger("onboarding.quiet").error("visible")
    assert [e.message for e in svc.recent()] == ["visible"]


def test_configure_logging_is_idempotent():
    logger = configure_logging("DEBUG")
    configure_logging("INFO", mute=True)
    consoles = [h for h in logger.handlers if getattr(h, "_onboard_console", False)]
    assert len(consoles) == 1
    assert consoles[0].level > logging.CRITICAL
    assert consoles[0].formatter._fmt.startswith("Onboard QS [")
    configure_logging("INFO")
    assert consoles[0].level == logging.NOTSET


def test_recent_zero_limit_is_empty(setup_logging):
    svc, _ = setup_logging
    logging.getLogger("onboarding.cap").info("one")
    assert svc.recent(0) == []
    assert len(svc.recent()) == 1
