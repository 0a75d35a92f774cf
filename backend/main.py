"""
Application factory for FastAPI.

This module provides a factory function for creating relay application
instances. Each app owns its own session registry, channel hub and
broadcaster (kept on ``app.state``), so tests can build isolated apps.

Usage:
    from backend.main import create_app
    from backend.settings import Settings

    # Default app (uses get_settings())
    app = create_app()

    # Test app with custom settings
    test_settings = Settings(environment="test", _env_file=None)
    test_app = create_app(settings=test_settings)
"""

import logging
from pathlib import Path
from typing import Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from application.use_cases import RelayBroadcaster
from backend.settings import Settings, get_settings
from infrastructure import InMemorySessionRegistry, RetentionPolicy, WebSocketChannelHub

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure a FastAPI application instance.

    Args:
        settings: Optional Settings instance. If not provided, uses get_settings()
                  which loads from environment variables.

    Returns:
        Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    _init_sentry(settings)

    app = FastAPI(
        title="Live Session Relay",
        description="Relays recorded browser sessions to live dashboards",
        version="1.0.0",
    )
    app.state.settings = settings

    _configure_cors(app, settings)
    _init_relay(app, settings)
    _include_routers(app)
    # Static mounts last so they never shadow /health or /ws.
    _mount_static(app, settings)

    return app


def _init_sentry(settings: Settings) -> None:
    """Initialize Sentry SDK if DSN is configured."""
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,
        )
        logger.info("Sentry initialized for session relay")


def _configure_cors(app: FastAPI, settings: Settings) -> None:
    """Configure CORS middleware; tracked pages live on arbitrary origins."""
    origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Credentials cannot be combined with a wildcard origin.
        allow_credentials="*" not in origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )


def _init_relay(app: FastAPI, settings: Settings) -> None:
    """Build the registry, hub and broadcaster this app instance owns."""
    registry = InMemorySessionRegistry(
        RetentionPolicy(
            max_events_per_session=settings.max_events_per_session,
            inactive_ttl_seconds=settings.inactive_session_ttl_seconds,
        )
    )
    hub = WebSocketChannelHub(queue_size=settings.outbound_queue_size)
    app.state.session_registry = registry
    app.state.channel_hub = hub
    app.state.broadcaster = RelayBroadcaster(
        registry=registry,
        hub=hub,
        enforce_session_ownership=settings.enforce_session_ownership,
        notify_session_end=settings.notify_session_end,
    )
    logger.info(
        "Relay ready (ownership=%s, session-end notices=%s)",
        settings.enforce_session_ownership,
        settings.notify_session_end,
    )


def _include_routers(app: FastAPI) -> None:
    """Include all API routers in the application."""
    from api.routers import health_router, relay_router

    # Health router (no prefix - /health at root)
    app.include_router(health_router)
    # WebSocket channel endpoint
    app.include_router(relay_router)


def _mount_static(app: FastAPI, settings: Settings) -> None:
    """Serve the capture script and dashboard page when their directories exist."""
    if settings.agent_static_dir and Path(settings.agent_static_dir).is_dir():
        app.mount("/src", StaticFiles(directory=settings.agent_static_dir), name="agent")
        logger.info("Serving capture agent assets from %s", settings.agent_static_dir)
    if settings.dashboard_static_dir and Path(settings.dashboard_static_dir).is_dir():
        app.mount(
            "/",
            StaticFiles(directory=settings.dashboard_static_dir, html=True),
            name="dashboard",
        )
        logger.info("Serving dashboard assets from %s", settings.dashboard_static_dir)


# Default app instance for uvicorn
# This allows: uvicorn backend.main:app --reload
app = create_app()
