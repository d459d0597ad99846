"""Test settings and client-credentials authentication"""

import aiohttp
import pytest
import yaml

from fakes import FakeResponse, FakeSession
from spotify_trends.config.auth import CredentialBroker, get_broker, reset_broker
from spotify_trends.config.settings import (
    DEFAULT_ROSTER,
    SearchConfig,
    Settings,
    SpotifyConfig,
    TrendingConfig,
)
from spotify_trends.exceptions import AuthError


ENV_VARS = [
    'SPOTIFY_CLIENT_ID',
    'SPOTIFY_CLIENT_SECRET',
    'SPOTIFY_TRENDS_LANGUAGE',
    'SPOTIFY_TRENDS_INTERVAL',
    'SPOTIFY_TRENDS_LOG_LEVEL',
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def config_file(temp_dir):
    path = temp_dir / "config.yaml"
    path.write_text(yaml.safe_dump({
        'spotify': {'client_id': 'file-id', 'client_secret': 'file-secret'},
        'trending': {'language': 'tamil', 'refresh_interval': 120, 'unknown_key': 1},
        'search': {'debounce_ms': 350},
        'bogus_section': {'x': 1},
    }), encoding='utf-8')
    return path


class TestSettings:
    """Test configuration loading"""

    def test_defaults(self):
        trending = TrendingConfig()
        assert trending.language == "english"
        assert trending.refresh_interval == 300
        assert trending.language_debounce_ms == 300
        assert trending.strict_language is False
        assert trending.roster == DEFAULT_ROSTER
        assert trending.roster is not DEFAULT_ROSTER
        assert SearchConfig().debounce_ms == 400
        assert SpotifyConfig().token_url == "https://accounts.spotify.com/api/token"
        assert len(DEFAULT_ROSTER) == 8

    def test_yaml_file_applied(self, clean_env, config_file):
        """Test YAML values override defaults and unknown keys are ignored"""
        settings = Settings(str(config_file))

        assert settings.spotify.client_id == 'file-id'
        assert settings.trending.language == 'tamil'
        assert settings.trending.refresh_interval == 120
        assert settings.search.debounce_ms == 350
        assert not hasattr(settings.trending, 'unknown_key')

    def test_environment_overrides_file(self, clean_env, config_file):
        clean_env.setenv('SPOTIFY_CLIENT_ID', 'env-id')
        clean_env.setenv('SPOTIFY_TRENDS_LANGUAGE', 'korean')
        clean_env.setenv('SPOTIFY_TRENDS_INTERVAL', '45')

        settings = Settings(str(config_file))
        assert settings.spotify.client_id == 'env-id'
        assert settings.trending.language == 'korean'
        assert settings.trending.refresh_interval == 45

    def test_invalid_interval_env_ignored(self, clean_env, config_file):
        clean_env.setenv('SPOTIFY_TRENDS_INTERVAL', 'soon')
        settings = Settings(str(config_file))
        assert settings.trending.refresh_interval == 120

    def test_validate(self, clean_env, config_file):
        """Test validation reports each problem"""
        settings = Settings(str(config_file))
        assert settings.validate() == []
        assert settings.is_valid()

        settings.spotify.client_secret = ""
        settings.trending.language = "klingon"
        settings.trending.refresh_interval = 0
        settings.search.debounce_ms = 900

        problems = settings.validate()
        assert len(problems) == 4
        assert not settings.is_valid()

    def test_save_config_strips_secrets(self, clean_env, config_file, temp_dir):
        settings = Settings(str(config_file))
        target = settings.save_config(str(temp_dir / "saved" / "config.yaml"))

        saved = yaml.safe_load(target.read_text(encoding='utf-8'))
        assert saved['spotify']['client_id'] == ""
        assert saved['spotify']['client_secret'] == ""
        assert saved['trending']['language'] == 'tamil'
        assert saved['trending']['roster'] == list(DEFAULT_ROSTER)


def make_broker(session, client_id="id", client_secret="secret"):
    return CredentialBroker(
        client_id=client_id,
        client_secret=client_secret,
        token_url="https://accounts.example/api/token",
        session=session,
    )


class TestCredentialBroker:
    """Test the client-credentials exchange"""

    @pytest.mark.asyncio
    async def test_acquire_success(self):
        session = FakeSession([FakeResponse(200, {'access_token': 'abc', 'token_type': 'Bearer'})])
        broker = make_broker(session)

        credential = await broker.acquire()

        assert credential.token == 'abc'
        assert broker.token == 'abc'
        assert broker.has_credential
        request = session.requests[0]
        assert request['method'] == 'POST'
        assert request['data'] == {'grant_type': 'client_credentials'}
        assert request['auth'] == aiohttp.BasicAuth('id', 'secret')

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_token(self):
        """Test a failed exchange leaves the stored credential usable"""
        session = FakeSession([
            FakeResponse(200, {'access_token': 'first'}),
            FakeResponse(400, {'error': 'invalid_client'}),
        ])
        broker = make_broker(session)
        await broker.acquire()

        with pytest.raises(AuthError) as exc_info:
            await broker.acquire()

        assert broker.token == 'first'
        assert exc_info.value.message.startswith("Failed to get access token:")
        assert broker.acquisitions == 2

    @pytest.mark.asyncio
    async def test_missing_access_token(self):
        broker = make_broker(FakeSession([FakeResponse(200, {'token_type': 'Bearer'})]))
        with pytest.raises(AuthError):
            await broker.acquire()
        assert not broker.has_credential

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        broker = make_broker(FakeSession([FakeResponse(200, invalid_json=True)]))
        with pytest.raises(AuthError):
            await broker.acquire()

    @pytest.mark.asyncio
    async def test_network_error(self):
        broker = make_broker(FakeSession([aiohttp.ClientConnectionError("refused")]))
        with pytest.raises(AuthError) as exc_info:
            await broker.acquire()
        assert "network error" in exc_info.value.reason

    @pytest.mark.asyncio
    async def test_missing_credentials_skip_network(self):
        """Test no request is made without a client id and secret"""
        session = FakeSession([])
        broker = make_broker(session, client_id="", client_secret="")

        with pytest.raises(AuthError):
            await broker.acquire()
        assert session.requests == []

    @pytest.mark.asyncio
    async def test_last_success_wins(self):
        session = FakeSession([
            FakeResponse(200, {'access_token': 'one'}),
            FakeResponse(200, {'access_token': 'two'}),
        ])
        broker = make_broker(session)
        await broker.acquire()
        await broker.acquire()
        assert broker.token == 'two'

    @pytest.mark.asyncio
    async def test_injected_session_not_closed(self):
        session = FakeSession([])
        broker = make_broker(session)
        await broker.close()
        assert not session.closed

    def test_singleton(self):
        reset_broker()
        try:
            assert get_broker() is get_broker()
        finally:
            reset_broker()
