"""
Chat routers: the endpoints the browser assistant panel talks to.

The orchestrators are built once in main.create_app() and stored on
app.state; the routes only validate, delegate and wrap the reply. Known
failures (missing config, provider errors) propagate as MaintenanceAPIError
and are rendered by the handlers in main.py. Anything else is logged with its
traceback and reported as a clean 500.
"""
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from maintenance_api.agent import ChatOrchestrator
from maintenance_api.errors import MaintenanceAPIError
from maintenance_api.models.chat import ChatRequest, ChatResponse

logger = logging.getLogger("maintenance-api.chat")

router = APIRouter()


async def _run(orchestrator: ChatOrchestrator, body: ChatRequest):
    try:
        reply = await orchestrator.handle(body)
    except MaintenanceAPIError:
        raise
    except Exception as e:
        logger.exception("Chat error: %s", e)
        return JSONResponse(status_code=500, content={"error": "ai-chat-failed", "detail": str(e)})
    return ChatResponse(reply=reply)


@router.post("", response_model=ChatResponse)
async def ai_chat(body: ChatRequest, request: Request):
    """Squadron assistant: answer locally when confident, otherwise Azure OpenAI."""
    return await _run(request.app.state.chat, body)


@router.post("/neuro", response_model=ChatResponse)
async def ai_chat_neuro(body: ChatRequest, request: Request):
    """Alternate assistant backed by Neuro-SAN."""
    return await _run(request.app.state.neuro_chat, body)
