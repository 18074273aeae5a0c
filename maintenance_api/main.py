"""
FastAPI application entry point.

create_app() wires the per-process collaborators (flight store, prompt
templates, audit logs, AI clients) onto app.state once; routes read them from
there. Lifespan only prepares the log directory and announces the service.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from maintenance_api.agent import ChatContext, ChatOrchestrator, GreetingOrchestrator
from maintenance_api.agent.llm import get_azure_client, get_neuro_client
from maintenance_api.config import Settings, settings as default_settings
from maintenance_api.errors import MaintenanceAPIError
from maintenance_api.middleware import RequestLoggingMiddleware
from maintenance_api.routers import chat, flights, tuner
from maintenance_api.storage import FlightStore

logging.basicConfig(
    level=getattr(logging, default_settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

logger = logging.getLogger("maintenance-api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    cfg: Settings = app.state.settings
    try:
        cfg.log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning("Cannot create log directory %s: %s", cfg.log_dir, e)
    if not cfg.azure_configured:
        logger.warning("Azure OpenAI not configured; /api/ai-chat answers local summaries only")
    logger.info("A400 maintenance API ready on port %s (env=%s)", cfg.port, cfg.environment)
    yield


def create_app(settings: Settings | None = None) -> FastAPI:
    cfg = settings or default_settings

    app = FastAPI(
        title="A400 Maintenance API",
        description="Flight maintenance data and squadron assistant for the A400 web app",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = cfg
    app.state.store = FlightStore(cfg)
    app.state.chat = ChatOrchestrator(ChatContext.from_settings(cfg, "ai.log"), get_azure_client(cfg))
    app.state.neuro_chat = GreetingOrchestrator(
        ChatContext.from_settings(cfg, "ai_chat.log"), get_neuro_client(cfg)
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    # Routers
    app.include_router(flights.router, prefix="/api", tags=["Flights"])
    app.include_router(tuner.router, prefix="/api", tags=["UI"])
    app.include_router(chat.router, prefix="/api/ai-chat", tags=["Chat"])

    # Global error handlers
    @app.exception_handler(MaintenanceAPIError)
    async def api_error_handler(request: Request, exc: MaintenanceAPIError):
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_body()))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "bad-request", "detail": jsonable_encoder(exc.errors())},
        )

    @app.get("/health")
    def health():
        return {"status": "ok", "environment": cfg.environment}

    static_dir = Path(cfg.static_dir).resolve()

    # Single-page app: real files are served as-is, every other GET gets the shell
    @app.get("/{full_path:path}", include_in_schema=False)
    def spa(full_path: str):
        if full_path == "api" or full_path.startswith("api/"):
            return JSONResponse(status_code=404, content={"error": "not found"})
        candidate = (static_dir / full_path).resolve()
        if full_path and candidate.is_file() and candidate.is_relative_to(static_dir):
            return FileResponse(candidate)
        index = static_dir / "index.html"
        if index.is_file():
            return FileResponse(index)
        return JSONResponse(status_code=404, content={"error": "not found"})

    return app


app = create_app()
