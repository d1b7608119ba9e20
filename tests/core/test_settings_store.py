import json
from unittest.mock import patch

import pytest

from facetrack_toolkit.core.exceptions import SettingsStoreError
from facetrack_toolkit.core.settings_store import LocalSettingsStore, MemorySettingsStore


class TestLocalSettingsStore:

    def test_missing_file_reads_default(self, temp_dir):
        store = LocalSettingsStore(temp_dir / "LocalSettings.json")
        assert store.read_setting("anything") is None
        assert store.read_setting("anything", []) == []

    def test_values_survive_a_new_instance(self, temp_dir):
        path = temp_dir / "nested" / "LocalSettings.json"
        LocalSettingsStore(path).save_setting("CustomConfigurations", [{"Name": "A"}])
        LocalSettingsStore(path).save_setting("ActiveConfigurationId", None)

        reloaded = LocalSettingsStore(path)
        assert reloaded.read_setting("CustomConfigurations") == [{"Name": "A"}]
        assert reloaded.read_setting("ActiveConfigurationId", "sentinel") is None
        assert json.loads(path.read_text(encoding="utf-8")) == {
            "CustomConfigurations": [{"Name": "A"}],
            "ActiveConfigurationId": None,
        }

    def test_returned_values_are_copies(self, temp_dir):
        store = LocalSettingsStore(temp_dir / "s.json")
        store.save_setting("list", [1, 2])
        store.read_setting("list").append(3)
        assert store.read_setting("list") == [1, 2]

    def test_corrupt_file_raises(self, temp_dir):
        path = temp_dir / "s.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SettingsStoreError):
            LocalSettingsStore(path).read_setting("key")

    def test_non_object_file_raises(self, temp_dir):
        path = temp_dir / "s.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(SettingsStoreError):
            LocalSettingsStore(path).read_setting("key")

    def test_failed_write_keeps_previous_file(self, temp_dir):
        path = temp_dir / "s.json"
        store = LocalSettingsStore(path)
        store.save_setting("key", "old")

        with patch("facetrack_toolkit.core.settings_store.os.replace", side_effect=OSError("locked")):
            with pytest.raises(SettingsStoreError) as exc_info:
                store.save_setting("key", "new")

        assert exc_info.value.key == "key"
        assert store.read_setting("key") == "old"
        assert json.loads(path.read_text(encoding="utf-8")) == {"key": "old"}
        assert [p.name for p in temp_dir.iterdir()] == ["s.json"]

    def test_unserializable_value_raises(self, temp_dir):
        store = LocalSettingsStore(temp_dir / "s.json")
        with pytest.raises(SettingsStoreError):
            store.save_setting("key", object())


class TestMemorySettingsStore:

    def test_round_trip_and_isolation(self):
        initial = {"key": [1]}
        store = MemorySettingsStore(initial)
        initial["key"].append(2)

        assert store.read_setting("key") == [1]
        store.save_setting("other", {"a": 1})
        assert store.read_setting("other") == {"a": 1}
        assert store.read_setting("missing", "default") == "default"
