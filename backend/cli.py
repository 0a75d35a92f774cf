import argparse
import asyncio
import logging
import sys
from pathlib import Path

import uvicorn

from backend.capture import CaptureAgent, SessionIdStore, read_event_file
from backend.dashboard import (
    DashboardClient,
    HeadlessMountProvider,
    HeadlessRendererFactory,
    LivenessTicker,
    ReconstructionManager,
)
from backend.settings import get_settings

logger = logging.getLogger("backend.cli")


def _default_url(settings) -> str:
    host = "localhost" if settings.host in ("0.0.0.0", "::") else settings.host
    return f"ws://{host}:{settings.port}/ws"


def _print_labels(manager: ReconstructionManager):
    def on_tick(labels, count_label):
        cards = "  ".join(
            f"{manager.sessions[sid].short_id}:{label}({len(manager.sessions[sid].events)})"
            for sid, label in labels.items()
        )
        print(f"{count_label}  {cards}".rstrip(), flush=True)

    return on_tick


def serve(args) -> int:
    settings = get_settings()
    uvicorn.run(
        "backend.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


async def _watch(args) -> None:
    manager = ReconstructionManager(
        renderer=HeadlessRendererFactory(),
        mounts=HeadlessMountProvider(),
    )
    client = DashboardClient(args.url, manager, backfill_history=args.backfill)
    ticker = LivenessTicker(manager, on_tick=_print_labels(manager), interval_seconds=args.interval)
    ticker.start()
    try:
        await client.run()
    finally:
        await ticker.stop()
        await client.stop()


def watch(args) -> int:
    asyncio.run(_watch(args))
    return 0


async def _agent(args) -> None:
    store = SessionIdStore(Path(args.session_file) if args.session_file else None)
    agent = CaptureAgent(
        args.url,
        read_event_file(args.events),
        session_id=args.session_id,
        store=store,
    )
    print(agent.session_id, flush=True)
    await agent.run()


def agent(args) -> int:
    if not Path(args.events).is_file():
        print(f"Error: File not found: {args.events}", file=sys.stderr)
        return 1
    asyncio.run(_agent(args))
    return 0


def main(argv=None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Live session relay")
    parser.add_argument("--log-level", default=settings.log_level, help="Root log level")
    sub = parser.add_subparsers(dest="command", required=True)

    serve_parser = sub.add_parser("serve", help="Run the relay server")
    serve_parser.add_argument("--host", help=f"Listen address (default: {settings.host})")
    serve_parser.add_argument("--port", type=int, help=f"Listen port (default: {settings.port})")
    serve_parser.set_defaults(func=serve)

    watch_parser = sub.add_parser("watch", help="Follow live sessions from a terminal")
    watch_parser.add_argument("--url", default=_default_url(settings), help="Relay channel URL")
    watch_parser.add_argument(
        "--backfill", action="store_true", help="Request history of sessions already running"
    )
    watch_parser.add_argument("--interval", type=float, default=1.0, help="Liveness refresh seconds")
    watch_parser.set_defaults(func=watch)

    agent_parser = sub.add_parser("agent", help="Stream recorded events from a JSON-lines file")
    agent_parser.add_argument("events", help="JSON-lines file, one recorded event per line")
    agent_parser.add_argument("--url", default=_default_url(settings), help="Relay channel URL")
    agent_parser.add_argument("--session-id", help="Use this session id instead of generating one")
    agent_parser.add_argument("--session-file", help="Persist the generated session id here")
    agent_parser.set_defaults(func=agent)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except KeyboardInterrupt:
        return 130
    except Exception as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
