"""
Completion clients: the only code that talks to an external AI provider.

Both providers speak an OpenAI-style `choices[0].message.content` envelope.
Each call is a single time-bounded POST: no retries, no streaming. Failures
are mapped onto the error taxonomy so the router can pick a status code:

    provider answered >= 400     -> UpstreamError (provider message kept)
    no answer (network/timeout)  -> UpstreamUnavailable
    answer we can't read         -> UpstreamMalformed
"""
import logging
from typing import Any, Protocol, Sequence

import httpx
from langchain_core.messages import BaseMessage, convert_to_openai_messages

from maintenance_api.config import Settings
from maintenance_api.errors import (
    ConfigurationError,
    UpstreamError,
    UpstreamMalformed,
    UpstreamUnavailable,
)

logger = logging.getLogger("maintenance-api.llm")

MAX_TOKENS = 512
TEMPERATURE = 0.2


class CompletionClient(Protocol):
    async def complete(self, messages: Sequence[BaseMessage]) -> str: ...


def _error_detail(response: httpx.Response) -> Any:
    """Provider error message: error.message, else message, else the raw body."""
    try:
        parsed = response.json()
    except ValueError:
        return response.text
    if isinstance(parsed, dict):
        error = parsed.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if parsed.get("message"):
            return parsed["message"]
    return parsed


def _reply_text(response: httpx.Response) -> str:
    try:
        parsed = response.json()
        reply = parsed["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise UpstreamMalformed(detail=response.text[:2000]) from e
    if not isinstance(reply, str) or not reply:
        raise UpstreamMalformed(detail=response.text[:2000])
    return reply


class _HTTPCompletionClient:
    provider = "ai"

    def __init__(self, timeout: float = 30.0, transport: httpx.AsyncBaseTransport | None = None):
        self.timeout = timeout
        self.transport = transport

    def _request(self) -> tuple[str, dict, dict]:
        raise NotImplementedError

    def _payload(self, messages: Sequence[BaseMessage]) -> dict:
        raise NotImplementedError

    async def complete(self, messages: Sequence[BaseMessage]) -> str:
        url, headers, params = self._request()
        payload = self._payload(messages)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, json=payload, headers=headers, params=params)
        except httpx.HTTPError as e:
            logger.warning("[%s] request failed: %s", self.provider, e)
            raise UpstreamUnavailable(detail=str(e) or type(e).__name__) from e

        if response.status_code >= 400:
            detail = _error_detail(response)
            logger.warning("[%s] error status=%s detail=%.180s", self.provider, response.status_code, detail)
            raise UpstreamError(response.status_code, detail)

        reply = _reply_text(response)
        logger.info("[%s] reply len=%d status=%s", self.provider, len(reply), response.status_code)
        return reply


class AzureChatClient(_HTTPCompletionClient):
    """Azure OpenAI chat completions for one deployment."""

    provider = "azure"

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        deployment: str,
        api_version: str = "2023-05-15",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(timeout, transport)
        self.endpoint = endpoint
        self.api_key = api_key
        self.deployment = deployment
        self.api_version = api_version

    def _request(self) -> tuple[str, dict, dict]:
        if not (self.endpoint and self.api_key and self.deployment):
            raise ConfigurationError("azure openai not configured")
        url = f"{self.endpoint.rstrip('/')}/openai/deployments/{self.deployment}/chat/completions"
        return url, {"api-key": self.api_key}, {"api-version": self.api_version}

    def _payload(self, messages: Sequence[BaseMessage]) -> dict:
        return {
            "messages": convert_to_openai_messages(list(messages)),
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
        }


class NeuroSanClient(_HTTPCompletionClient):
    """Neuro-SAN project endpoint; conversation only, no system prompt."""

    provider = "neuro-san"

    def __init__(
        self,
        api_url: str,
        project_name: str,
        session_id: str = "default-session-id",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(timeout, transport)
        self.api_url = api_url
        self.project_name = project_name
        self.session_id = session_id

    def _request(self) -> tuple[str, dict, dict]:
        if not (self.api_url and self.project_name):
            raise ConfigurationError("neuro-san not configured")
        return self.api_url, {}, {}

    def _payload(self, messages: Sequence[BaseMessage]) -> dict:
        return {
            "project": self.project_name,
            "session": self.session_id,
            "messages": convert_to_openai_messages(list(messages)),
        }


def get_azure_client(settings: Settings) -> AzureChatClient:
    """Build the Azure client from project settings. Missing keys only fail on use."""
    return AzureChatClient(
        endpoint=settings.azure_openai_endpoint,
        api_key=settings.azure_openai_key,
        deployment=settings.azure_openai_deployment,
        api_version=settings.azure_openai_api_version,
        timeout=settings.upstream_timeout_seconds,
    )


def get_neuro_client(settings: Settings) -> NeuroSanClient:
    return NeuroSanClient(
        api_url=settings.neuro_api_url,
        project_name=settings.neuro_project_name,
        session_id=settings.neuro_session_id,
        timeout=settings.upstream_timeout_seconds,
    )
