from capture_renamer.settings import SettingsStore


def test_remembers_last_path(tmp_path):
    store = SettingsStore(tmp_path / "settings.json")
    assert store.last_path() is None

    store.remember_path(tmp_path / "card")

    assert SettingsStore(tmp_path / "settings.json").last_path() == tmp_path / "card"


def test_corrupt_settings_are_ignored(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    store = SettingsStore(path)

    assert store.last_path() is None
    store.remember_path(tmp_path)
    assert store.last_path() == tmp_path
