"""
Unit tests for backend/main.py
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from unittest.mock import patch

from application.use_cases import RelayBroadcaster
from backend.main import _configure_cors, _init_sentry, create_app
from backend.settings import Settings
from infrastructure import InMemorySessionRegistry, WebSocketChannelHub


@pytest.mark.unit
class TestCreateApp:
    """Test the create_app() factory function."""

    def test_create_app_returns_fastapi_instance(self):
        settings = Settings(environment="test", _env_file=None)
        app = create_app(settings=settings)
        assert isinstance(app, FastAPI)

    def test_create_app_uses_default_settings_when_none_provided(self):
        with patch("backend.main.get_settings") as mock_get_settings:
            mock_get_settings.return_value = Settings(environment="test", _env_file=None)

            app = create_app(settings=None)

            mock_get_settings.assert_called_once()
            assert isinstance(app, FastAPI)

    def test_create_app_configures_app_metadata(self):
        app = create_app(settings=Settings(environment="test", _env_file=None))

        assert app.title == "Live Session Relay"
        assert app.version == "1.0.0"

    def test_relay_components_on_state(self):
        settings = Settings(
            environment="test",
            max_events_per_session=10,
            notify_session_end=True,
            _env_file=None,
        )
        app = create_app(settings=settings)

        assert app.state.settings is settings
        assert isinstance(app.state.session_registry, InMemorySessionRegistry)
        assert app.state.session_registry.policy.max_events_per_session == 10
        assert isinstance(app.state.channel_hub, WebSocketChannelHub)
        assert isinstance(app.state.broadcaster, RelayBroadcaster)
        assert app.state.broadcaster.notify_session_end is True

    def test_routes_registered(self):
        app = create_app(settings=Settings(environment="test", _env_file=None))
        paths = {route.path for route in app.routes}

        assert "/health" in paths
        assert "/ws" in paths


@pytest.mark.unit
class TestInitSentry:
    """Test Sentry initialization."""

    def test_init_sentry_skipped_when_no_dsn(self):
        settings = Settings(sentry_dsn=None, _env_file=None)

        with patch("backend.main.sentry_sdk.init") as mock_init:
            _init_sentry(settings)
            mock_init.assert_not_called()

    def test_init_sentry_called_when_dsn_provided(self):
        settings = Settings(
            sentry_dsn="https://test@sentry.io/123",
            environment="test",
            _env_file=None,
        )

        with patch("backend.main.sentry_sdk.init") as mock_init:
            _init_sentry(settings)
            mock_init.assert_called_once_with(
                dsn="https://test@sentry.io/123",
                environment="test",
                traces_sample_rate=0.1,
            )


@pytest.mark.unit
class TestConfigureCors:
    """Test CORS configuration."""

    def test_configure_cors_adds_middleware(self):
        app = FastAPI()
        initial_middleware_count = len(app.user_middleware)

        _configure_cors(app, Settings(_env_file=None))

        assert len(app.user_middleware) == initial_middleware_count + 1


@pytest.mark.unit
class TestStaticMounts:
    def test_missing_directories_skipped(self, tmp_path):
        settings = Settings(
            environment="test",
            dashboard_static_dir=str(tmp_path / "missing"),
            agent_static_dir=None,
            _env_file=None,
        )
        app = create_app(settings=settings)

        assert {route.path for route in app.routes} >= {"/health", "/ws"}
        assert not any(getattr(route, "name", None) == "dashboard" for route in app.routes)

    def test_dashboard_and_agent_served(self, tmp_path):
        public = tmp_path / "public"
        public.mkdir()
        (public / "index.html").write_text("<h1>dashboard</h1>")
        src = tmp_path / "src"
        src.mkdir()
        (src / "tracker.js").write_text("// agent")
        settings = Settings(
            environment="test",
            dashboard_static_dir=str(public),
            agent_static_dir=str(src),
            _env_file=None,
        )
        client = TestClient(create_app(settings=settings))

        assert "dashboard" in client.get("/").text
        assert client.get("/src/tracker.js").text == "// agent"
        assert client.get("/health").json()["status"] == "ok"


@pytest.mark.integration
class TestAppIntegration:
    """Integration tests for the created app."""

    def test_cors_allows_requests(self):
        app = create_app(settings=Settings(environment="test", _env_file=None))
        client = TestClient(app)

        response = client.get("/health", headers={"Origin": "http://localhost:3000"})

        assert response.status_code == 200
        assert "access-control-allow-origin" in response.headers


@pytest.mark.unit
class TestMultipleAppInstances:
    """Test that multiple app instances can be created."""

    def test_apps_do_not_share_relay_state(self):
        app1 = create_app(settings=Settings(environment="test", _env_file=None))
        app2 = create_app(settings=Settings(environment="test", _env_file=None))

        assert app1 is not app2
        assert app1.state.session_registry is not app2.state.session_registry
        assert app1.state.broadcaster is not app2.state.broadcaster
