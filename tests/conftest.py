# Shared fixtures: a small host document, sample tour definitions and a
# headless driver factory that remembers every driver it created.

import pytest

from onboarding.platform.dom import HostDocument
from onboarding.services.storage import MemoryStore
from onboarding.tour.driver import HeadlessDriver
from onboarding.tour.seen_store import SeenStateStore

HOST_HTML = """
<html><head></head><body>
  <div class="qv-panel-sheet" data-id="sheet-abc-123">
    <div class="qv-object qv-object-obj1"><span>KPI</span></div>
    <div class="qv-object qv-object-obj2"><span>Bar chart</span></div>
    <div id="custom-box" class="box">Custom</div>
  </div>
</body></html>
"""


@pytest.fixture
def host_document():
    return HostDocument(HOST_HTML)


@pytest.fixture
def tour_dict():
    return {
        "tourId": "t-1",
        "tourName": "Welcome",
        "tourVersion": 1,
        "autoStart": True,
        "showOnce": True,
        "steps": [
            {"targetObjectId": "obj1", "popoverTitle": "KPI", "popoverDescription": "**Sales** total"},
            {"selectorType": "css", "customCssSelector": "#custom-box", "popoverTitle": "Box"},
            {"selectorType": "none", "popoverTitle": "Done", "dialogSize": "large"},
        ],
    }


@pytest.fixture
def seen_store():
    return SeenStateStore(MemoryStore())


class DriverRecorder:
    def __init__(self):
        self.drivers = []

    def __call__(self, config):
        driver = HeadlessDriver(config)
        self.drivers.append(driver)
        return driver

    @property
    def last(self):
        return self.drivers[-1]


@pytest.fixture
def driver_factory():
    return DriverRecorder()


class ManualScheduler:
    """Collects delayed callbacks; tests fire them explicitly."""

    class Handle:
        def __init__(self, delay, callback):
            self.delay = delay
            self.callback = callback
            self.cancelled = False

        def cancel(self):
            self.cancelled = True

    def __init__(self):
        self.handles = []

    def __call__(self, delay, callback):
        handle = self.Handle(delay, callback)
        self.handles.append(handle)
        return handle

    def fire_all(self):
        for h in list(self.handles):
            if not h.cancelled:
                h.callback()


@pytest.fixture
def scheduler():
    return ManualScheduler()
