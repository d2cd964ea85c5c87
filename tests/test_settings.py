"""
Tests for YAML settings loading and validation
"""
import yaml

from questlog.constants import DEFAULT_SETTINGS
from questlog.settings import load_settings, reload_conf, verify_settings


class TestLoadSettings:

    def test_missing_file_is_created_with_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("TWITCH_CLIENT_ID", raising=False)
        monkeypatch.delenv("TWITCH_CLIENT_SECRET", raising=False)
        path = tmp_path / "conf" / "settings.yaml"

        settings = load_settings(str(path), force=True)
        assert settings == DEFAULT_SETTINGS
        assert path.exists()
        assert yaml.safe_load(path.read_text())["catalog"]["cache_ttl"] == 300

    def test_file_values_merge_with_defaults(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.dump({"catalog": {"min_votes": 500}}))

        settings = load_settings(str(path), force=True)
        assert settings["catalog"]["min_votes"] == 500
        assert settings["catalog"]["cache_ttl"] == 300
        assert settings["server"]["port"] == DEFAULT_SETTINGS["server"]["port"]

    def test_environment_overrides_credentials(self, tmp_path, monkeypatch):
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.dump({"igdb": {"client_id": "from-file", "client_secret": "file-secret"}}))
        monkeypatch.setenv("TWITCH_CLIENT_ID", "from-env")
        monkeypatch.delenv("TWITCH_CLIENT_SECRET", raising=False)

        settings = load_settings(str(path), force=True)
        assert settings["igdb"]["client_id"] == "from-env"
        assert settings["igdb"]["client_secret"] == "file-secret"

    def test_cached_until_reloaded(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.dump({"catalog": {"page_size": 10}}))
        assert load_settings(str(path), force=True)["catalog"]["page_size"] == 10

        path.write_text(yaml.dump({"catalog": {"page_size": 15}}))
        assert load_settings(str(path))["catalog"]["page_size"] == 10
        assert reload_conf(str(path))["catalog"]["page_size"] == 15


class TestVerifySettings:

    def test_valid_catalog(self):
        assert verify_settings("catalog", DEFAULT_SETTINGS["catalog"]) == (True, [])

    def test_negative_catalog_value(self):
        ok, errors = verify_settings("catalog", {"cache_ttl": -1})
        assert ok is False
        assert errors[0]["path"] == "catalog/cache_ttl"

    def test_igdb_credentials_required(self):
        ok, errors = verify_settings("igdb", {"client_id": "abc"})
        assert ok is False
        assert errors[0]["path"] == "igdb/client_id"
