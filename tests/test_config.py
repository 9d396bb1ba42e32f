"""Tests for the settings store, the category registry, and key formatting."""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from quotacap.config.keys import cap_description, cap_key, enabled_description, enabled_key
from quotacap.config.registry import CategoryConfigRegistry
from quotacap.config.store import ConfigStore, ConfigStoreError, coerce_value


# --- Key formatting ---

class TestKeys:
    def test_cap_and_enabled_keys(self):
        assert cap_key("Alpha") == "Alpha_Cap"
        assert enabled_key("Alpha") == "Alpha_Enabled"

    def test_keys_keep_spaces(self):
        assert cap_key("Alpha Centauri") == "Alpha Centauri_Cap"

    def test_descriptions_lowercase_word(self):
        assert cap_description("Alpha", "Sector") == "Quota cap for Alpha sector"
        assert enabled_description("Alpha", "Sector") == "Enable quota cap for Alpha sector"

    def test_descriptions_default_word(self):
        assert cap_description("Alpha") == "Quota cap for Alpha constellation"


# --- Value coercion ---

class TestCoerceValue:
    @pytest.mark.parametrize("raw, expected", [
        (True, True), (False, False), ("true", True), ("No", False), (1, True), (0, False),
    ])
    def test_bool(self, raw, expected):
        assert coerce_value(raw, bool) is expected

    @pytest.mark.parametrize("raw, expected", [(4000, 4000), ("-1", -1), (2500.0, 2500)])
    def test_int(self, raw, expected):
        assert coerce_value(raw, int) == expected

    @pytest.mark.parametrize("raw, kind", [
        ("maybe", bool), (2, bool), (True, int), ("abc", int), (None, int),
    ])
    def test_rejects(self, raw, kind):
        with pytest.raises((TypeError, ValueError)):
            coerce_value(raw, kind)


# --- Store ---

class TestConfigStore:
    def test_missing_file_is_empty(self, store_path):
        store = ConfigStore(store_path)
        assert len(store) == 0
        assert store.to_dict() == {}
        assert not store_path.exists()

    def test_bind_uses_default(self, store):
        entry = store.bind("Quota Caps", "Alpha_Cap", 4000, "Quota cap for Alpha")
        assert entry.value == 4000
        assert entry.description == "Quota cap for Alpha"
        assert ("Quota Caps", "Alpha_Cap") in store

    def test_bind_returns_existing_entry(self, store):
        first = store.bind("Quota Caps", "Alpha_Cap", 4000)
        second = store.bind("Quota Caps", "Alpha_Cap", 9999)
        assert first is second
        assert second.value == 4000

    def test_save_and_read_back(self, store, store_path):
        store.bind("General", "EnableDebug", True)
        store.bind("Quota Caps", "Alpha_Cap", 4000)
        store.save()

        data = yaml.safe_load(store_path.read_text(encoding="utf-8"))
        assert data == {"General": {"EnableDebug": True}, "Quota Caps": {"Alpha_Cap": 4000}}

        reopened = ConfigStore(store_path)
        assert reopened.bind("Quota Caps", "Alpha_Cap", 1).value == 4000

    def test_persisted_value_wins_over_default(self, store_path):
        store_path.write_text("Quota Caps:\n  Alpha_Cap: 2500\n", encoding="utf-8")
        store = ConfigStore(store_path)
        assert store.bind("Quota Caps", "Alpha_Cap", 4000).value == 2500

    def test_invalid_persisted_value_uses_default(self, store_path, caplog):
        store_path.write_text("Quota Caps:\n  Alpha_Cap: lots\n", encoding="utf-8")
        store = ConfigStore(store_path)
        with caplog.at_level(logging.WARNING):
            entry = store.bind("Quota Caps", "Alpha_Cap", 4000)
        assert entry.value == 4000
        assert "Ignoring invalid value" in caplog.text

    def test_setting_value_saves(self, store, store_path):
        entry = store.bind("Quota Caps", "Alpha_Cap", 4000)
        entry.value = 1500
        assert yaml.safe_load(store_path.read_text())["Quota Caps"]["Alpha_Cap"] == 1500

    def test_setting_value_without_autosave(self, store, store_path):
        store.save_on_config_set = False
        entry = store.bind("Quota Caps", "Alpha_Cap", 4000)
        entry.value = "1500"
        assert entry.value == 1500
        assert not store_path.exists()

    def test_setting_wrong_type_raises(self, store):
        entry = store.bind("Quota Cap Toggles", "Alpha_Enabled", True)
        with pytest.raises(ValueError):
            entry.value = "sometimes"
        assert entry.value is True

    def test_reset_restores_default(self, store):
        store.save_on_config_set = False
        entry = store.bind("Quota Caps", "Alpha_Cap", 4000)
        entry.value = 10
        entry.reset()
        assert entry.value == 4000

    def test_orphaned_values_survive_save(self, store_path):
        store_path.write_text(
            "Quota Caps:\n  Retired_Cap: 123\n  Alpha_Cap: 4000\n", encoding="utf-8"
        )
        store = ConfigStore(store_path)
        store.bind("Quota Caps", "Alpha_Cap", 4000)
        assert store.orphaned_keys() == [("Quota Caps", "Retired_Cap")]

        store.save()
        data = yaml.safe_load(store_path.read_text())
        assert data["Quota Caps"]["Retired_Cap"] == 123

    def test_reload_refreshes_entries(self, store, store_path):
        entry = store.bind("Quota Caps", "Alpha_Cap", 4000)
        store.save()

        store_path.write_text("Quota Caps:\n  Alpha_Cap: 777\n", encoding="utf-8")
        store.reload()
        assert entry.value == 777

        store_path.write_text("General: {}\n", encoding="utf-8")
        store.reload()
        assert entry.value == 4000

    def test_corrupt_file_raises(self, store_path):
        store_path.write_text("Quota Caps: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigStoreError):
            ConfigStore(store_path)

    def test_section_must_be_mapping(self, store_path):
        store_path.write_text("Quota Caps: 12\n", encoding="utf-8")
        with pytest.raises(ConfigStoreError):
            ConfigStore(store_path)

    def test_undecodable_file_raises(self, store_path):
        store_path.write_bytes(b"General:\n  EnableDebug: \xff\n")
        with pytest.raises(ConfigStoreError):
            ConfigStore(store_path)

    def test_open_or_recover_sets_corrupt_file_aside(self, store_path, caplog):
        store_path.write_text("Quota Caps: [unclosed\n", encoding="utf-8")
        backup = store_path.with_name(store_path.name + ".corrupt")
        backup.write_text("older\n", encoding="utf-8")

        with caplog.at_level(logging.ERROR):
            store = ConfigStore.open_or_recover(store_path)
        assert len(store) == 0
        assert store.bind("Quota Caps", "Alpha_Cap", 4000).value == 4000
        assert not store_path.exists()
        assert backup.read_text(encoding="utf-8") == "Quota Caps: [unclosed\n"
        assert "starting from defaults" in caplog.text

        store.save()
        assert yaml.safe_load(store_path.read_text())["Quota Caps"]["Alpha_Cap"] == 4000

    def test_open_or_recover_keeps_valid_file(self, store_path):
        store_path.write_text("Quota Caps:\n  Alpha_Cap: 2500\n", encoding="utf-8")
        store = ConfigStore.open_or_recover(store_path)
        assert store.bind("Quota Caps", "Alpha_Cap", 4000).value == 2500
        assert not store_path.with_name(store_path.name + ".corrupt").exists()

    def test_save_retries_transient_errors(self, store, store_path):
        store.bind("Quota Caps", "Alpha_Cap", 4000)
        real_write = Path.write_text
        calls = {"n": 0}

        def flaky_write(self, *args, **kwargs):
            calls["n"] += 1
            if calls["n"] == 1:
                raise OSError("disk busy")
            return real_write(self, *args, **kwargs)

        with patch.object(Path, "write_text", flaky_write):
            store.save()

        assert calls["n"] == 2
        assert store_path.exists()

    def test_save_gives_up_after_three_attempts(self, store):
        store.bind("Quota Caps", "Alpha_Cap", 4000)
        calls = {"n": 0}

        def failing_write(self, *args, **kwargs):
            calls["n"] += 1
            raise OSError("read-only file system")

        with patch.object(Path, "write_text", failing_write):
            with pytest.raises(OSError):
                store.save()
        assert calls["n"] == 3


# --- Registry ---

class TestCategoryConfigRegistry:
    def test_load_configuration_binds_debug(self, store):
        registry = CategoryConfigRegistry(store)
        assert registry.enable_debug is None
        registry.load_configuration()
        assert registry.enable_debug is not None
        assert registry.debug_enabled is True

    def test_debug_setting_from_file(self, store_path):
        store_path.write_text("General:\n  EnableDebug: false\n", encoding="utf-8")
        registry = CategoryConfigRegistry(ConfigStore(store_path))
        registry.load_configuration()
        assert registry.debug_enabled is False

    def test_create_category_entries_defaults(self, registry, store):
        assert registry.create_category_entries("Alpha", "Sector")

        assert "Alpha" in registry
        assert len(registry) == 1
        assert registry.caps["Alpha"].value == 4000
        assert registry.enabled["Alpha"].value is True
        assert registry.caps["Alpha"].description == "Quota cap for Alpha sector"
        assert store.get_entry("Quota Caps", "Alpha_Cap") is registry.caps["Alpha"]
        assert store.get_entry("Quota Cap Toggles", "Alpha_Enabled") is registry.enabled["Alpha"]

    def test_recreate_keeps_user_values(self, registry):
        registry.save_on_config_set = False
        registry.create_category_entries("Alpha", "Sector")
        registry.caps["Alpha"].value = 2500
        registry.enabled["Alpha"].value = False

        assert registry.create_category_entries("Alpha", "Sector")
        assert registry.caps["Alpha"].value == 2500
        assert registry.enabled["Alpha"].value is False

    def test_empty_name_rejected(self, registry, caplog):
        with caplog.at_level(logging.ERROR):
            assert registry.create_category_entries("", "Sector") is False
        assert len(registry) == 0
        assert "cannot be empty" in caplog.text

    def test_store_failure_leaves_no_partial_entry(self, registry, store):
        real_bind = store.bind

        def bind(section, key, default_value, description=""):
            if key.endswith("_Enabled"):
                raise RuntimeError("store unavailable")
            return real_bind(section, key, default_value, description)

        with patch.object(store, "bind", side_effect=bind):
            assert registry.create_category_entries("Alpha", "Sector") is False
        assert "Alpha" not in registry.caps
        assert "Alpha" not in registry.enabled

    def test_category_names_in_creation_order(self, registry):
        for name in ("Gamma", "Alpha", "Beta"):
            registry.create_category_entries(name)
        assert registry.category_names() == ["Gamma", "Alpha", "Beta"]

    def test_save_on_config_set_forwards_to_store(self, registry, store):
        registry.save_on_config_set = False
        assert store.save_on_config_set is False

    def test_validate_requires_loaded_settings(self, store):
        registry = CategoryConfigRegistry(store)
        assert registry.validate_config() is False

    def test_validate_warns_on_invalid_cap(self, registry, caplog):
        registry.save_on_config_set = False
        registry.create_category_entries("Alpha")
        registry.caps["Alpha"].value = -5
        with caplog.at_level(logging.WARNING):
            assert registry.validate_config() is True
        assert "Cap value for 'Alpha' is invalid: -5" in caplog.text

    def test_save_error_is_reraised(self, registry, caplog):
        with patch.object(registry.store, "save", side_effect=OSError("disk full")):
            with caplog.at_level(logging.ERROR):
                with pytest.raises(OSError):
                    registry.save_configuration()
        assert "Error saving configuration" in caplog.text

    def test_reload_configuration(self, registry, store_path):
        registry.create_category_entries("Alpha")
        registry.save_configuration()
        store_path.write_text("Quota Caps:\n  Alpha_Cap: 100\n", encoding="utf-8")

        registry.reload_configuration()
        assert registry.caps["Alpha"].value == 100
        assert registry.enabled["Alpha"].value is True
