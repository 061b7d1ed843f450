"""Health endpoint

``/health`` and ``/healthz`` report whether the polling loops started;
``/`` answers with a plain banner.
"""

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse, PlainTextResponse

logger = logging.getLogger(__name__)


class HealthState:
    """Liveness flag shared by the service and the endpoint"""

    def __init__(self):
        self.healthy = True
        self.last_error: Optional[str] = None
        self._started = time.monotonic()

    @property
    def uptime(self) -> float:
        return time.monotonic() - self._started

    def mark_failed(self, error: str) -> None:
        self.healthy = False
        self.last_error = error

    def mark_healthy(self) -> None:
        self.healthy = True
        self.last_error = None


def create_app(state: HealthState) -> FastAPI:
    app = FastAPI(title="Relay Engine", docs_url=None, redoc_url=None, openapi_url=None)

    @app.get("/health")
    @app.get("/healthz")
    def health():
        timestamp = datetime.now(timezone.utc).isoformat()
        if state.healthy:
            return {"status": "ok", "uptime": state.uptime, "timestamp": timestamp}
        return JSONResponse(
            status_code=503,
            content={"status": "error", "error": state.last_error, "timestamp": timestamp},
        )

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return "Relay Engine is running\n"

    return app


class _ThreadedServer(uvicorn.Server):
    # Signals belong to the main thread
    def install_signal_handlers(self):
        pass


class HealthServer:
    """Serves the health app on a background thread"""

    def __init__(self, state: HealthState, host: str = "0.0.0.0", port: int = 8080):
        config = uvicorn.Config(create_app(state), host=host, port=port, log_level="warning")
        self._server = _ThreadedServer(config)
        self._thread: Optional[threading.Thread] = None
        self.host = host
        self.port = port

    def start(self) -> None:
        self._thread = threading.Thread(target=self._server.run, name="health-server", daemon=True)
        self._thread.start()
        logger.info(f"Health check available at http://{self.host}:{self.port}/health")

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._server.should_exit = True
        if self._thread is not None:
            self._thread.join(timeout)
