import asyncio

from onboarding.platform.adapters import (
    ClientManagedAdapter,
    CloudAdapter,
    HostContext,
    adapter_for,
)
from onboarding.platform.dom import HostDocument


class FakeHandle:
    def __init__(self, layout):
        self._layout = layout

    async def get_layout(self):
        return self._layout


class FakeApp:
    def __init__(self, infos, layouts, fail=False):
        self.infos = infos
        self.layouts = layouts
        self.fail = fail

    async def get_all_infos(self):
        if self.fail:
            raise RuntimeError("engine offline")
        return self.infos

    async def get_object(self, object_id):
        if object_id not in self.layouts:
            raise KeyError(object_id)
        return FakeHandle(self.layouts[object_id])


class FakeNav:
    def __init__(self, value):
        self.value = value

    def get_current_sheet_id(self):
        return self.value


def test_sheet_id_from_url():
    adapter = CloudAdapter(HostContext(location="https://t.qlikcloud.com/sense/app/a/sheet/Ab-12/state/edit"))
    assert adapter.current_location_id() == "Ab-12"
    assert adapter.is_edit_mode() is True
    assert adapter.is_edit_mode({"readOnly": True}) is False


def test_client_managed_falls_back_to_navigation_then_dom(host_document):
    nav_adapter = ClientManagedAdapter(
        HostContext(location="http://h/sense/app/a", navigation=FakeNav({"id": "nav-sheet-9"}))
    )
    assert nav_adapter.current_location_id() == "nav-sheet-9"

    dom_adapter = ClientManagedAdapter(HostContext(location="http://h/sense/app/a", document=host_document))
    assert dom_adapter.current_location_id() == "sheet-abc-123"


def test_dom_fallback_ignores_short_generic_ids():
    doc = HostDocument('<div class="qv-sheet" id="qv-sheet-main"></div>')
    adapter = ClientManagedAdapter(HostContext(location="http://h/", document=doc))
    assert adapter.current_location_id() is None


def test_cloud_does_not_use_dom(host_document):
    adapter = CloudAdapter(HostContext(location="https://t.qlikcloud.com/sense/app/a", document=host_document))
    assert adapter.current_location_id() is None


def test_inject_stylesheet_once(host_document):
    adapter = adapter_for("cloud", HostContext(location="x", document=host_document))
    assert adapter.inject_stylesheet(".a{}", "oqs-css") is True
    assert adapter.inject_stylesheet(".b{}", "oqs-css") is False
    assert host_document.get_element_by_id("oqs-css").string == ".a{}"


def test_adapter_for_unknown_type_is_client_managed():
    adapter = adapter_for("other", HostContext(location="x"), version="14.1", code_path="legacy")
    assert isinstance(adapter, ClientManagedAdapter)
    assert adapter.selectors.code_path == "legacy"


def test_list_objects_filters_restricts_and_sorts():
    infos = [
        {"qId": "k1", "qType": "kpi"},
        {"qId": "b1", "qType": "barchart", "qTitle": "Revenue"},
        {"qId": "s1", "qType": "sheet"},
        {"qId": "sys", "qType": "qix-system-something"},
        {"qId": "other", "qType": "table", "qTitle": "Elsewhere"},
    ]
    layouts = {
        "sheet-1": {"cells": [{"name": "k1"}], "qChildList": {"qItems": [{"qInfo": {"qId": "b1"}}]}},
        "k1": {"qMeta": {"title": "Active users"}, "qInfo": {"qType": "kpi"}},
    }
    adapter = CloudAdapter(HostContext(location="https://t.qlikcloud.com/sense/app/a/sheet/sheet-1"))
    objects = asyncio.run(adapter.list_objects(FakeApp(infos, layouts)))
    assert [(o.id, o.title) for o in objects] == [("k1", "Active users"), ("b1", "Revenue")]


def test_list_objects_failure_returns_empty():
    adapter = CloudAdapter(HostContext(location="x"))
    assert asyncio.run(adapter.list_objects(FakeApp([], {}, fail=True))) == []
