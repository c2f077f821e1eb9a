from dicelog.config import Settings


def test_defaults():
    s = Settings(_env_file=None)
    assert s.max_dice == 100
    assert s.max_sides == 1000
    assert s.default_export_format == "json"


def test_environment_override(monkeypatch):
    monkeypatch.setenv("MAX_DICE", "5")
    monkeypatch.setenv("DEFAULT_EXPORT_FORMAT", "base_64")
    s = Settings(_env_file=None)
    assert s.max_dice == 5
    assert s.default_export_format == "base_64"
