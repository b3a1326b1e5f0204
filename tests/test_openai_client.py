import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from doormate.config import Settings
from doormate.llm.openai_client import OpenAIChatClient
from doormate.models.chat import ContextMessage, Role


def chunk(content):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])


class FakeStream:
    def __init__(self, chunks):
        self._chunks = list(chunks)
        self.closed = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for item in self._chunks:
            yield item

    async def close(self):
        self.closed = True


def connection_error():
    return openai.APIConnectionError(request=httpx.Request("POST", "https://api.test/v1/chat"))


def rate_limit_error(retry_after=None):
    headers = {"retry-after": retry_after} if retry_after is not None else {}
    request = httpx.Request("POST", "https://api.test/v1/chat")
    response = httpx.Response(429, headers=headers, request=request)
    return openai.RateLimitError("Rate limit reached", response=response, body=None)


def make_client(side_effect, max_retries=1, retry_backoff=0.0, max_backoff=10.0):
    sdk = MagicMock()
    sdk.chat.completions.create = AsyncMock(side_effect=side_effect)
    client = OpenAIChatClient(
        api_key=None,
        model="gpt-test",
        client=sdk,
        max_retries=max_retries,
        retry_backoff=retry_backoff,
        max_backoff=max_backoff,
    )
    return client, sdk.chat.completions.create


MESSAGES = [
    ContextMessage(role=Role.SYSTEM, content="sys"),
    ContextMessage(role=Role.USER, content="hi"),
]


async def drain(client):
    return [fragment async for fragment in client.stream(MESSAGES)]


@pytest.mark.asyncio
async def test_stream_yields_delta_content_and_closes():
    stream = FakeStream([chunk(None), chunk("Hel"), SimpleNamespace(choices=[]), chunk("lo")])
    client, create = make_client([stream])

    assert await drain(client) == ["Hel", "lo"]
    assert stream.closed
    kwargs = create.await_args.kwargs
    assert kwargs["stream"] is True
    assert kwargs["model"] == "gpt-test"
    assert kwargs["messages"] == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "hi"},
    ]


@pytest.mark.asyncio
async def test_transient_failure_is_retried_once():
    client, create = make_client([connection_error(), FakeStream([chunk("ok")])])
    assert await drain(client) == ["ok"]
    assert create.await_count == 2


@pytest.mark.asyncio
async def test_second_transient_failure_surfaces():
    client, create = make_client([connection_error(), connection_error()])
    with pytest.raises(openai.APIConnectionError):
        await drain(client)
    assert create.await_count == 2


@pytest.mark.asyncio
async def test_non_transient_failure_is_not_retried():
    client, create = make_client([ValueError("bad request")])
    with pytest.raises(ValueError):
        await drain(client)
    assert create.await_count == 1


@pytest.mark.asyncio
async def test_retries_can_be_disabled():
    client, create = make_client([connection_error()], max_retries=0)
    with pytest.raises(openai.APIConnectionError):
        await drain(client)
    assert create.await_count == 1


def test_missing_api_key_is_rejected():
    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        OpenAIChatClient.from_settings(Settings(_env_file=None, openai_api_key=None))


@pytest.mark.asyncio
async def test_rate_limited_retry_waits_for_retry_after():
    client, create = make_client([rate_limit_error("0.3"), FakeStream([chunk("ok")])])
    loop = asyncio.get_running_loop()

    started = loop.time()
    assert await drain(client) == ["ok"]
    assert loop.time() - started >= 0.25
    assert create.await_count == 2


@pytest.mark.asyncio
async def test_retry_without_header_uses_exponential_backoff():
    client, create = make_client([connection_error(), FakeStream([chunk("ok")])], retry_backoff=0.2)
    loop = asyncio.get_running_loop()

    started = loop.time()
    assert await drain(client) == ["ok"]
    assert loop.time() - started >= 0.15


def test_retry_delay_is_bounded():
    client, _ = make_client([], retry_backoff=1.0, max_backoff=5.0)
    assert client._retry_delay(rate_limit_error("2"), attempt=1) == 2.0
    assert client._retry_delay(rate_limit_error("120"), attempt=1) == 5.0
    assert client._retry_delay(rate_limit_error("Wed, 21 Oct 2026 07:28:00 GMT"), attempt=1) == 1.0
    assert client._retry_delay(rate_limit_error(), attempt=2) == 2.0
    assert client._retry_delay(connection_error(), attempt=4) == 5.0
