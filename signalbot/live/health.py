# -*- coding: utf-8 -*-
"""
Liveness endpoint for the signal monitor.

Serves GET /health from a uvicorn server running on a daemon thread. The
endpoint only reads the monitor's heartbeat snapshot.
"""

import logging
import threading
from typing import Any, Dict

import uvicorn
from fastapi import FastAPI

from signalbot import __version__


logger = logging.getLogger(__name__)


def create_health_app(monitor) -> FastAPI:
    """Build the FastAPI app exposing monitor.heartbeat()."""
    app = FastAPI(title="Signal Monitor", version=__version__)

    @app.get("/health")
    def get_health() -> Dict[str, Any]:
        return {"status": "ok", **monitor.heartbeat()}

    return app


def start_health_server(monitor, port: int, host: str = "0.0.0.0") -> threading.Thread:
    """
    Run the liveness app in a background thread.

    Parameters
    ----------
    monitor : SignalMonitor
        Monitor whose heartbeat is reported
    port : int
        TCP port to listen on
    host : str, default "0.0.0.0"
        Interface to bind

    Returns
    -------
    threading.Thread
        The daemon thread running uvicorn
    """
    server = uvicorn.Server(uvicorn.Config(
        create_health_app(monitor),
        host=host,
        port=port,
        log_level="warning"
    ))
    thread = threading.Thread(target=server.run, name="health-server", daemon=True)
    thread.start()
    logger.info(f"Health endpoint listening on http://{host}:{port}/health")
    return thread
