"""Verify all modules can be imported without errors."""
import pytest

# All tests in this module are pure import checks - mark as unit tests
pytestmark = pytest.mark.unit


def test_core_module_imports():
    """Import layered modules to catch bad import paths."""
    import api.deps
    import api.routers.health
    import api.routers.relay
    import application.ports
    import application.use_cases.relay_broadcaster
    import domain.models
    import infrastructure.channel.websocket_hub
    import infrastructure.registry.in_memory
    import shared.schemas.channel


def test_backend_imports():
    """Import backend modules."""
    import backend.capture.agent
    import backend.capture.session
    import backend.channel.client
    import backend.channel.reconnect
    import backend.cli
    import backend.dashboard.client
    import backend.dashboard.liveness
    import backend.dashboard.manager
    import backend.dashboard.renderers
    import backend.settings


def test_app_starts():
    """Verify FastAPI app can be instantiated."""
    from backend.main import app
    assert app is not None
    assert hasattr(app, 'routes')
