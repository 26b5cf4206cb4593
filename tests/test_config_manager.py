"""
Unit tests for albumlist/config_manager.py

Tests configuration loading, validation, and environment variable handling.
"""

import pytest

from albumlist.config_manager import Config, DEFAULT_DESCRIPTION, DEFAULT_SCOPES
from albumlist.exceptions import ConfigurationError

ENV_VARS = [
    'SPOTIFY_CLIENT_ID', 'SPOTIFY_REDIRECT_URI', 'SPOTIFY_SCOPES', 'AUTH_TIMEOUT',
    'SEARCH_LIMIT', 'REQUEST_TIMEOUT', 'MAX_RETRIES', 'RETRY_DELAY',
    'PLAYLIST_DESCRIPTION', 'LOG_LEVEL', 'LOG_FORMAT',
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfigLoadFromModule:
    """Tests for loading configuration from config.py module."""

    @pytest.mark.unit
    def test_load_all_settings(self):
        class FullConfig:
            SPOTIFY_CLIENT_ID = "client-123"
            SPOTIFY_REDIRECT_URI = "http://127.0.0.1:8888/callback"
            SPOTIFY_SCOPES = "playlist-modify-private"
            AUTH_TIMEOUT = 120
            SEARCH_LIMIT = 20
            REQUEST_TIMEOUT = 10
            MAX_RETRIES = 5
            RETRY_DELAY = 0.5
            PLAYLIST_DESCRIPTION = "From my list"
            LOG_LEVEL = "DEBUG"

        config = Config()
        config._load_from_module(FullConfig())

        assert config.spotify_client_id == "client-123"
        assert config.spotify_redirect_uri == "http://127.0.0.1:8888/callback"
        assert config.scope_list == ["playlist-modify-private"]
        assert config.auth_timeout == 120.0
        assert config.search_limit == 20
        assert config.request_timeout == 10.0
        assert config.max_retries == 5
        assert config.retry_delay == 0.5
        assert config.playlist_description == "From my list"
        assert config.log_level == "DEBUG"

    @pytest.mark.unit
    def test_defaults_when_settings_missing(self):
        class SimpleConfig:
            SPOTIFY_CLIENT_ID = "client-123"

        config = Config()
        config._load_from_module(SimpleConfig())

        assert config.spotify_redirect_uri is None
        assert config.scope_list == DEFAULT_SCOPES.split()
        assert config.auth_timeout is None
        assert config.search_limit == 10
        assert config.max_retries == 3
        assert config.retry_delay == 2.0
        assert config.playlist_description == DEFAULT_DESCRIPTION

    @pytest.mark.unit
    def test_scopes_accept_a_list(self):
        class ListScopes:
            SPOTIFY_SCOPES = ["a", "b"]

        config = Config()
        config._load_from_module(ListScopes())
        assert config.scope_list == ["a", "b"]


class TestConfigLoadFromEnv:
    """Tests for loading configuration from environment variables."""

    @pytest.mark.unit
    def test_load_from_env_basic(self, clean_env):
        clean_env.setenv('SPOTIFY_CLIENT_ID', 'env-client')
        clean_env.setenv('SPOTIFY_REDIRECT_URI', 'http://127.0.0.1:5173/callback')

        config = Config()
        config._load_from_env()

        assert config.spotify_client_id == 'env-client'
        assert config.spotify_redirect_uri == 'http://127.0.0.1:5173/callback'
        assert config.auth_timeout is None

    @pytest.mark.unit
    def test_load_from_env_numeric(self, clean_env):
        clean_env.setenv('AUTH_TIMEOUT', '30')
        clean_env.setenv('SEARCH_LIMIT', '5')
        clean_env.setenv('MAX_RETRIES', '1')
        clean_env.setenv('RETRY_DELAY', '0')

        config = Config()
        config._load_from_env()

        assert config.auth_timeout == 30.0
        assert config.search_limit == 5
        assert config.max_retries == 1
        assert config.retry_delay == 0.0

    @pytest.mark.unit
    def test_invalid_number_raises_configuration_error(self, clean_env):
        clean_env.setenv('SEARCH_LIMIT', 'ten')
        with pytest.raises(ConfigurationError):
            Config()


class TestConfigValidation:
    """Tests for configuration validation."""

    def _config(self, **values):
        config = Config()
        for key, value in values.items():
            setattr(config, key, value)
        return config

    @pytest.mark.unit
    def test_valid_config_passes(self):
        config = self._config(
            spotify_client_id="abc", spotify_redirect_uri="http://127.0.0.1:5173/callback", search_limit=10
        )
        config._validate()

    @pytest.mark.unit
    def test_missing_client_id(self):
        config = self._config(spotify_client_id=None, spotify_redirect_uri="http://127.0.0.1:5173/callback")
        with pytest.raises(ConfigurationError, match="SPOTIFY_CLIENT_ID"):
            config._validate()

    @pytest.mark.unit
    def test_placeholder_client_id(self):
        config = self._config(
            spotify_client_id="YOUR_CLIENT_ID_HERE", spotify_redirect_uri="http://127.0.0.1:5173/callback"
        )
        with pytest.raises(ConfigurationError, match="update SPOTIFY_CLIENT_ID"):
            config._validate()

    @pytest.mark.unit
    def test_missing_redirect_uri(self):
        config = self._config(spotify_client_id="abc", spotify_redirect_uri="")
        with pytest.raises(ConfigurationError, match="SPOTIFY_REDIRECT_URI"):
            config._validate()

    @pytest.mark.unit
    @pytest.mark.parametrize("uri", [
        "http://127.0.0.1/callback",
        "https://127.0.0.1:5173/callback",
        "127.0.0.1:5173",
        "http://127.0.0.1:notaport/callback",
    ])
    def test_redirect_uri_needs_http_host_and_port(self, uri):
        config = self._config(spotify_client_id="abc", spotify_redirect_uri=uri)
        with pytest.raises(ConfigurationError):
            config._validate()

    @pytest.mark.unit
    def test_search_limit_bounds(self):
        config = self._config(
            spotify_client_id="abc", spotify_redirect_uri="http://127.0.0.1:5173/callback", search_limit=0
        )
        with pytest.raises(ConfigurationError, match="SEARCH_LIMIT"):
            config._validate()

    @pytest.mark.unit
    @pytest.mark.parametrize("level", ["VERBOSE", "", "info2"])
    def test_invalid_log_level(self, level):
        config = self._config(
            spotify_client_id="abc", spotify_redirect_uri="http://127.0.0.1:5173/callback",
            search_limit=10, log_level=level
        )
        with pytest.raises(ConfigurationError, match="LOG_LEVEL"):
            config._validate()

    @pytest.mark.unit
    def test_log_level_is_case_insensitive(self):
        config = self._config(
            spotify_client_id="abc", spotify_redirect_uri="http://127.0.0.1:5173/callback",
            search_limit=10, log_level="debug"
        )
        config._validate()


class TestConfigOutput:
    """Tests for configuration export."""

    @pytest.mark.unit
    def test_repr_hides_client_id(self):
        config = Config()
        config.spotify_client_id = "super-secret-client"
        config.spotify_redirect_uri = "http://127.0.0.1:5173/callback"
        assert "super-secret-client" not in repr(config)
        assert "127.0.0.1:5173" in repr(config)

    @pytest.mark.unit
    def test_to_dict(self):
        config = Config()
        config.spotify_client_id = "abc"
        d = config.to_dict()
        assert d['spotify_client_id'] == "abc"
        assert isinstance(d['scopes'], list)
        assert 'search_limit' in d
