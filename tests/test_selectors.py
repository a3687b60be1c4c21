import logging

from onboarding.platform.selectors import available_platforms, get_selectors


def test_client_managed_object_selector_uses_class():
    sel = get_selectors("client-managed")
    assert sel.object_by_id("abc") == ".qv-object-abc"
    assert sel.code_path == "default"


def test_cloud_object_selector_prefers_testid_with_class_fallback():
    sel = get_selectors("cloud")
    assert sel.object_by_id("xyz") == '[data-testid="object-xyz"], .qv-object-xyz'


def test_code_path_overrides_merge_over_default():
    legacy = get_selectors("client-managed", "legacy")
    assert legacy.code_path == "legacy"
    assert legacy["sheetContainer"] == "#grid, .qv-sheet"
    # keys without an override come from default
    assert legacy.object_by_id("a") == ".qv-object-a"


def test_unknown_code_path_falls_back_to_default():
    sel = get_selectors("cloud", "does-not-exist")
    assert sel.code_path == "default"
    assert sel.get("toolbar") == '[data-testid="toolbar"]'


def test_unknown_platform_uses_baseline_and_warns(caplog):
    with caplog.at_level(logging.WARNING):
        sel = get_selectors("mainframe")
    assert sel.platform == "client-managed"
    assert sel.object_by_id("q") == ".qv-object-q"
    assert any("Unknown platform" in r.message for r in caplog.records)


def test_lookup_is_pure():
    assert get_selectors("cloud", "default") == get_selectors("cloud", "default")
    assert set(available_platforms()) == {"client-managed", "cloud"}
