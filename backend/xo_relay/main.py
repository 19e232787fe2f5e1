"""
xo-relay: HTTP и WebSocket.
"""
import logging

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from .config import get_config
from .ws_handlers import Relay

config = get_config()

logging.basicConfig(
    level=logging.DEBUG if config.debug else config.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def create_app(relay: Relay | None = None) -> FastAPI:
    app = FastAPI(title="xo-relay")
    app.state.relay = relay if relay is not None else Relay()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return "xo-relay is running"

    @app.get("/health")
    def health():
        r: Relay = app.state.relay
        return {"status": "ok", **r.rooms.snapshot(), "connections": len(r.manager)}

    @app.websocket("/ws")
    async def websocket_endpoint(ws: WebSocket):
        logger.info("WS: connection attempt from %s", ws.client)
        await app.state.relay.ws_loop(ws)

    return app


app = create_app()


def run() -> None:
    import uvicorn

    logger.info("Starting xo-relay on %s:%s", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port)
