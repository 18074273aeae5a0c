"""
Tests for the provider clients. They verify the request they send and how each
kind of provider failure is reported.

httpx.MockTransport stands in for the network, so nothing leaves the process.
"""
import asyncio
import json

import httpx
import pytest
from langchain_core.messages import HumanMessage, SystemMessage

from maintenance_api.agent.llm import AzureChatClient, NeuroSanClient
from maintenance_api.errors import (
    ConfigurationError,
    UpstreamError,
    UpstreamMalformed,
    UpstreamUnavailable,
)

MESSAGES = [SystemMessage(content="be brief"), HumanMessage(content="status of A400-02?")]


def _azure(handler, **overrides):
    kwargs = dict(
        endpoint="https://example.openai.azure.com/",
        api_key="secret",
        deployment="gpt-test",
        transport=httpx.MockTransport(handler),
    )
    kwargs.update(overrides)
    return AzureChatClient(**kwargs)


def _ok(content):
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


def test_azure_request_shape():
    seen = {}

    def handler(request):
        seen["request"] = request
        return _ok("All good.")

    reply = asyncio.run(_azure(handler).complete(MESSAGES))
    assert reply == "All good."

    request = seen["request"]
    assert request.url.path == "/openai/deployments/gpt-test/chat/completions"
    assert request.url.params["api-version"] == "2023-05-15"
    assert request.headers["api-key"] == "secret"
    body = json.loads(request.content)
    assert body["max_tokens"] == 512
    assert body["temperature"] == 0.2
    assert body["messages"] == [
        {"role": "system", "content": "be brief"},
        {"role": "user", "content": "status of A400-02?"},
    ]


def test_rate_limit_is_upstream_error_without_retry():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(429, json={"error": {"message": "rate limited"}})

    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(_azure(handler).complete(MESSAGES))
    assert exc_info.value.upstream_status == 429
    assert exc_info.value.detail == "rate limited"
    assert len(calls) == 1


def test_error_status_with_plain_message():
    handler = lambda request: httpx.Response(500, json={"message": "boom"})
    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(_azure(handler).complete(MESSAGES))
    assert exc_info.value.detail == "boom"


def test_error_status_with_text_body():
    handler = lambda request: httpx.Response(502, text="bad gateway")
    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(_azure(handler).complete(MESSAGES))
    assert exc_info.value.detail == "bad gateway"


def test_transport_failure_is_unavailable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamUnavailable):
        asyncio.run(_azure(handler).complete(MESSAGES))


def test_timeout_is_unavailable():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(UpstreamUnavailable):
        asyncio.run(_azure(handler).complete(MESSAGES))


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json={"id": "x"}),
    ],
)
def test_unreadable_success_is_malformed(response):
    with pytest.raises(UpstreamMalformed):
        asyncio.run(_azure(lambda request: response).complete(MESSAGES))


def test_missing_credentials_fail_before_network():
    calls = []

    def handler(request):
        calls.append(request)
        return _ok("unreachable")

    with pytest.raises(ConfigurationError):
        asyncio.run(_azure(handler, api_key="").complete(MESSAGES))
    assert calls == []


def test_neuro_san_payload():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return _ok("Hi from Neuro-SAN")

    client = NeuroSanClient(
        api_url="https://neuro.example.com/chat",
        project_name="a400",
        transport=httpx.MockTransport(handler),
    )
    reply = asyncio.run(client.complete([HumanMessage(content="details on left wing status")]))
    assert reply == "Hi from Neuro-SAN"
    assert seen["body"]["project"] == "a400"
    assert seen["body"]["session"] == "default-session-id"
    assert seen["body"]["messages"] == [{"role": "user", "content": "details on left wing status"}]


def test_neuro_san_requires_configuration():
    client = NeuroSanClient(api_url="", project_name="a400")
    with pytest.raises(ConfigurationError):
        asyncio.run(client.complete([HumanMessage(content="hello")]))
