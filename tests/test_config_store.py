import pytest

from xettacast.config_store import ConfigError, ConfigItem, ConfigStore

DEFAULT = "monitor: primary\ntrigger: cmd+alt+space\n"


class _Named(ConfigItem):
    def __init__(self, value):
        self.value = value

    def save(self):
        return ("name", self.value)


def _load_named(key, value):
    if not isinstance(value, str):
        raise ConfigError("bad")
    return _Named(value)


def test_missing_file_is_created_from_default(tmp_path):
    path = tmp_path / "nested" / "dir" / "app_config.yml"
    store = ConfigStore(path, DEFAULT)
    assert path.exists()
    assert store.get_raw("monitor") == "primary"
    assert store.get_raw("trigger") == "cmd+alt+space"
    assert store.changed is False


def test_missing_file_without_default_raises(tmp_path):
    with pytest.raises(ConfigError):
        ConfigStore(tmp_path / "none.yml", None)


def test_invalid_default_raises(tmp_path):
    with pytest.raises(ConfigError):
        ConfigStore(tmp_path / "c.yml", "key: [unclosed")


def test_invalid_file_raises(tmp_path):
    path = tmp_path / "c.yml"
    path.write_text("a: {b", encoding="utf-8")
    with pytest.raises(ConfigError):
        ConfigStore(path, DEFAULT)


def test_existing_file_wins_over_default(tmp_path):
    path = tmp_path / "c.yml"
    path.write_text("monitor: left\n", encoding="utf-8")
    store = ConfigStore(path, DEFAULT)
    assert store.get_raw("monitor") == "left"
    with pytest.raises(ConfigError):
        store.get_raw("trigger")


def test_set_raw_marks_changed_and_save_persists(tmp_path):
    path = tmp_path / "c.yml"
    store = ConfigStore(path, DEFAULT)
    store.set_raw("monitor", "DISPLAY-2")
    assert store.changed is True
    store.save()
    assert store.changed is False
    again = ConfigStore(path, DEFAULT)
    assert again.get_raw("monitor") == "DISPLAY-2"
    assert again.get_raw("trigger") == "cmd+alt+space"


def test_reload_discards_unsaved_changes(tmp_path):
    store = ConfigStore(tmp_path / "c.yml", DEFAULT)
    store.set_raw("monitor", "other")
    store.reload()
    assert store.get_raw("monitor") == "primary"
    assert store.changed is False


def test_reset_restores_default(tmp_path):
    path = tmp_path / "c.yml"
    path.write_text("monitor: left\n", encoding="utf-8")
    store = ConfigStore(path, DEFAULT)
    store.reset()
    assert store.get_raw("monitor") == "primary"
    assert ConfigStore(path).get_raw("monitor") == "primary"


def test_set_and_get_typed_item(tmp_path):
    path = tmp_path / "c.yml"
    store = ConfigStore(path, DEFAULT)
    store.set(_Named("alpha"))
    assert store.changed is True
    item = store.get("name", _load_named)
    assert item.value == "alpha"
    store.save()
    assert ConfigStore(path).get("name", _load_named).value == "alpha"


def test_get_passes_none_for_missing_key(tmp_path):
    store = ConfigStore(tmp_path / "c.yml", DEFAULT)
    seen = []
    result = store.get("absent", lambda key, value: seen.append((key, value)) or 7)
    assert result == 7
    assert seen == [("absent", None)]


def test_get_raw_rejects_non_string(tmp_path):
    path = tmp_path / "c.yml"
    path.write_text("count: 3\n", encoding="utf-8")
    store = ConfigStore(path)
    with pytest.raises(ConfigError):
        store.get_raw("count")


def test_empty_file_accepts_new_keys(tmp_path):
    path = tmp_path / "c.yml"
    path.write_text("", encoding="utf-8")
    store = ConfigStore(path)
    store.set_raw("monitor", "primary")
    assert store.get_raw("monitor") == "primary"


def test_set_on_non_mapping_raises(tmp_path):
    path = tmp_path / "c.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    store = ConfigStore(path)
    with pytest.raises(ConfigError):
        store.set_raw("monitor", "x")