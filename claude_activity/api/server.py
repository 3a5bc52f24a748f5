"""
Claude Activity - FastAPI Server

Serves today's activity, the week view, and day summaries to a dashboard
or menu-bar front end.
"""

import argparse
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..core.filters import DEFAULT_FILTERS
from ..core.loader import SessionLoader
from ..core.monitor import ActivityMonitor
from ..core.runtime import claude_projects_dir, settings_path, summaries_dir
from ..core.settings import SettingsStore
from ..core.summary_service import SummaryService
from ..core.summary_store import SummaryStore
from ..utils.file_watcher import DirectoryWatcher
from .routes import activity, settings, summary

logger = logging.getLogger(__name__)


def build_monitor() -> ActivityMonitor:
    """Wire a monitor against the real Claude and runtime directories."""
    service = SummaryService(
        store=SummaryStore(summaries_dir()),
        settings_store=SettingsStore(settings_path()),
    )
    loader = SessionLoader(claude_projects_dir())
    return ActivityMonitor(loader, summary_service=service)


def create_app(monitor: ActivityMonitor | None = None, start_background: bool = True) -> FastAPI:
    """Build the app.

    With ``start_background`` the lifespan starts the directory watcher and
    the monitor's change and rescan loops, then runs a first refresh.
    """
    monitor = monitor or build_monitor()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        watcher = None
        if start_background:
            monitor.start()
            watcher = DirectoryWatcher(
                monitor.loader.projects_dir,
                on_change=monitor.notify_change,
                excluded=DEFAULT_FILTERS.excluded_path_fragments,
            )
            if not watcher.start():
                logger.info("Falling back to periodic rescans only")
            await monitor.refresh()
        yield
        if watcher is not None:
            watcher.stop()
        await monitor.stop()

    app = FastAPI(
        title="Claude Activity",
        description="Daily Claude Code activity and summaries",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.monitor = monitor
    app.state.summary_service = monitor.summary_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost",
            "http://127.0.0.1",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(activity.router, prefix="/api/activity", tags=["activity"])
    app.include_router(summary.router, prefix="/api/summary", tags=["summary"])
    app.include_router(settings.router, prefix="/api/settings", tags=["settings"])

    @app.get("/health")
    def health():
        """Health check endpoint"""
        return {"status": "ok"}

    @app.get("/")
    def root():
        """Root endpoint with API info"""
        return {
            "name": "Claude Activity",
            "version": __version__,
            "docs": "/docs",
        }

    return app


def main():
    """Main entry point for the server"""
    parser = argparse.ArgumentParser(description="Claude Activity Server")
    parser.add_argument(
        "--port",
        type=int,
        default=9877,
        help="Port to run the server on (default: 9877)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    args = parser.parse_args()

    print(f"Starting Claude Activity on {args.host}:{args.port}")

    log_config = uvicorn.config.LOGGING_CONFIG
    log_config["formatters"]["access"]["fmt"] = "%(asctime)s %(levelprefix)s %(client_addr)s - \"%(request_line)s\" %(status_code)s"
    log_config["formatters"]["default"]["fmt"] = "%(asctime)s %(levelprefix)s %(message)s"
    log_config["formatters"]["access"]["datefmt"] = "%H:%M:%S"
    log_config["formatters"]["default"]["datefmt"] = "%H:%M:%S"
    log_config["loggers"]["claude_activity"] = {"handlers": ["default"], "level": "INFO", "propagate": False}

    # One worker: the monitor holds the session cache in memory
    uvicorn.run(create_app(), host=args.host, port=args.port, log_level="info", log_config=log_config)


if __name__ == "__main__":
    main()
