# Tests for config.py
# Created: 2026-10-19

from playdeck.auth.credentials import FileCredentialStore
from playdeck.config import Settings, get_config_dir, get_oauth_dir
from playdeck.server import build_services


class TestConfigDirs:
    def test_config_dir_is_created(self, tmp_path):
        home = tmp_path / "home"
        settings = Settings(_env_file=None, config_dir=home)

        assert get_config_dir(settings) == home
        assert home.is_dir()

    def test_oauth_dir_defaults_under_home(self, tmp_path):
        settings = Settings(_env_file=None, config_dir=tmp_path / "home")
        assert get_oauth_dir(settings) == tmp_path / "home" / "oauth"

    def test_tokens_path_overrides(self, tmp_path):
        settings = Settings(
            _env_file=None, config_dir=tmp_path / "home", tokens_path=tmp_path / "tokens"
        )
        assert get_oauth_dir(settings) == tmp_path / "tokens"

    def test_file_store_lives_in_oauth_dir(self, settings, tmp_path):
        services = build_services(settings)
        assert isinstance(services.store, FileCredentialStore)
        assert services.store.directory == tmp_path / "oauth"


class TestSettings:
    def test_missing_required(self):
        settings = Settings(
            _env_file=None, spotify_client_id="id", spotify_client_secret="", session_secret=""
        )
        assert settings.missing_required() == ["SPOTIFY_CLIENT_SECRET", "SESSION_SECRET"]

    def test_trailing_slash_stripped(self):
        settings = Settings(_env_file=None, frontend_origin="https://frontend.example/")
        assert settings.frontend_origin == "https://frontend.example"
