"""Network monitor UI and HTTP ingestion server"""

import asyncio
import contextlib
import os
import socket
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from ..exceptions import BindError
from ..hub import get_active_hub, ingest
from ..protocol.events import loads
from ..utils import get_logger

TEMPLATES_DIR = os.path.join(os.path.dirname(__file__), "templates")
templates = Jinja2Templates(directory=TEMPLATES_DIR)

logger = get_logger("inspector_relay.ui.server")


class IngestResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None


def create_app(ui_path: str = "/ui", ws_port: int = 8080) -> FastAPI:
    """Build the UI application

    Args:
        ui_path: Path serving the monitor page
        ws_port: Relay port the page connects to

    Returns:
        FastAPI application
    """
    app = FastAPI(title="HTTP Inspector", docs_url=None, redoc_url=None, openapi_url=None)

    # sits inside CORSMiddleware: real preflights never reach it
    @app.middleware("http")
    async def answer_options(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200)
        return await call_next(request)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.get(ui_path, response_class=HTMLResponse)
    async def get_monitor(request: Request):
        return templates.TemplateResponse(request, "monitor.html", {"ws_port": ws_port})

    @app.post("/api/logs", response_model=IngestResponse, response_model_exclude_none=True)
    async def post_log(request: Request):
        body = await request.body()
        try:
            event = loads(body.decode("utf-8"))
        except (ValueError, RecursionError) as e:
            logger.warning(f"Rejected log with invalid JSON: {e}")
            return JSONResponse(
                status_code=400,
                content=IngestResponse(success=False, error="Invalid JSON").model_dump(
                    exclude_none=True
                ),
            )

        event_type = event.get("type") if isinstance(event, dict) else None
        logger.debug(f"Received log via HTTP: {event_type}")
        ingest(event)
        return IngestResponse(success=True, message="Log received and forwarded")

    @app.get("/api/status")
    async def get_status():
        hub = get_active_hub()
        if hub is None:
            return {"running": False}
        return {"running": True, **hub.get_stats()}

    return app


class _EmbeddedServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the supervisor"""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self):
        yield


class UIServer:
    """Serves the UI application inside the running event loop"""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 3001,
        ui_path: str = "/ui",
        ws_port: int = 8080,
    ):
        self.host = host
        self.port = port
        self.ui_path = ui_path
        self.ws_port = ws_port
        self.app = create_app(ui_path, ws_port)

        self._server: Optional[_EmbeddedServer] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _bind(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.host, self.port))
        except OSError as e:
            sock.close()
            raise BindError(self.host, self.port, e) from e
        sock.setblocking(False)
        return sock

    async def start(self) -> None:
        """Bind and start serving

        Raises:
            BindError: if the port cannot be bound
        """
        if self.running:
            logger.warning("UI server is already running")
            return

        sock = self._bind()
        self.port = sock.getsockname()[1]

        config = uvicorn.Config(
            self.app,
            log_level="warning",
            lifespan="off",
            access_log=False,
        )
        self._server = _EmbeddedServer(config)
        self._task = asyncio.create_task(self._server.serve(sockets=[sock]))

        while not self._server.started:
            if self._task.done():
                # surfaces the startup failure
                await self._task
                raise RuntimeError("UI server stopped during startup")
            await asyncio.sleep(0.05)

        logger.info(f"UI available at http://{self.host}:{self.port}{self.ui_path}")
        logger.info(f"HTTP log endpoint at http://{self.host}:{self.port}/api/logs")

    async def close(self) -> None:
        if self._server is None or self._task is None:
            return
        self._server.should_exit = True
        try:
            await self._task
        finally:
            self._server = None
            self._task = None
        logger.info("UI server closed")
